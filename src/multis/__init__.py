"""Narrowness-Ranked Multiple Dispatch

 Routines with several candidates ("multis") are resolved by ranking every
 candidate whose signature accepts a call, and running the narrowest.

 Ranking works in two phases.  The nominal phase compares argument types
 with each parameter's declared type in a type lattice, producing a vector
 of inheritance distances (left to right, smaller is narrower).  Only the
 survivors run their refinement predicates ('where' clauses), which break
 ties between otherwise equally narrow candidates.  Nominal orderings depend
 only on types, so they are cached per routine and argument-type tuple;
 predicates run on every call, once per candidate.

 A candidate body whose first parameter is 'next_method' may delegate to the
 next candidate in rank order, with the same or new arguments.

 Subs are looked up through nested lexical scopes ('Registry', 'multi');
 methods through the invocant's class hierarchy ('multimethod').  Both share
 the same ranking core ('Dispatcher').
"""

from multis.interfaces import *
from multis.lattice import Type, TypeLattice, standard_lattice, INFINITY
from multis.predicates import Where, smartmatch, defined, undefined
from multis.signature import *
from multis.cache import DispatchCache
from multis.dispatcher import *
from multis.functions import Scope, Registry, MultiFunction, multi, registry
from multis.methods import ClassHierarchy, multimethod, methods
