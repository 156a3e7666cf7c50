"""Nominal type lattice

    Type -- a named node with an ordered tuple of parent types

    TypeLattice -- registry of types answering conformance and distance
        queries, and mapping Python values to types

    standard_lattice -- a lattice with a small numeric/string/container
        hierarchy bound to the Python builtins

    INFINITY -- the distance between types that don't conform
"""

import logging, threading
from collections import deque
from fractions import Fraction
from types import FunctionType, BuiltinFunctionType, MethodType

from multis.interfaces import ITypeLattice, ConfigurationError

__all__ = [
    'Type', 'TypeLattice', 'standard_lattice', 'default', 'INFINITY',
]

log = logging.getLogger(__name__)

INFINITY = float('inf')


class Type(object):

    """A nominal type: a name plus its direct parents

    Types compare by identity; two lattices may each have their own 'Int'.
    """

    __slots__ = 'name','parents','__weakref__'

    def __init__(self,name,parents=()):
        self.name = name
        self.parents = tuple(parents)

    def __repr__(self):
        return self.name


class TypeLattice(ITypeLattice):

    """Registry of nominal types rooted at a single universal type"""

    def __init__(self,root='Any'):
        self.__lock = threading.RLock()
        self.types = {}
        self.classes = {}
        self.version = 0
        self._distances = {}
        self.root = Type(root)
        self.types[root] = self.root
        self.classes[object] = self.root


    def declare(self,name,*parents):
        """Add a type called 'name' with 'parents' (default: the root)"""
        with self.__lock:
            if name in self.types:
                raise ConfigurationError("Type %r is already declared" % name)
            parents = self._unique(map(self.lookup,parents)) or (self.root,)
            t = self.types[name] = Type(name,parents)
            self._changed()
        log.debug("declared type %s%r", name, parents)
        return t


    def add_parent(self,child,parent):
        """Make 'child' a direct subtype of 'parent' as well"""
        with self.__lock:
            child, parent = self.lookup(child), self.lookup(parent)
            if self.conforms(parent,child):
                raise ConfigurationError(
                    "Making %r a parent of %r would create a cycle"
                    % (parent,child)
                )
            if parent not in child.parents:
                child.parents = child.parents + (parent,)
                self._changed()


    def bind(self,pyclass,type):
        """Use 'type' as the lattice type of instances of 'pyclass'"""
        with self.__lock:
            self.classes[pyclass] = self.lookup(type)
            self._changed()


    def validate(self):
        """Raise 'ConfigurationError' if the graph is not a rooted DAG"""
        known = set(self.types.values()) | set(self.classes.values())
        done = set()
        for start in known:
            if start in done:
                continue
            path, onpath = [(start,iter(start.parents))], {start}
            while path:
                node, parents = path[-1]
                for p in parents:
                    if p not in known:
                        raise ConfigurationError(
                            "%r has unregistered parent %r" % (node,p)
                        )
                    if p in onpath:
                        raise ConfigurationError(
                            "Type graph has a cycle through %r" % (p,)
                        )
                    if p not in done:
                        path.append((p,iter(p.parents))); onpath.add(p)
                        break
                else:
                    path.pop(); onpath.discard(node); done.add(node)
                    if node is not self.root and not node.parents:
                        raise ConfigurationError(
                            "%r is not connected to the root" % (node,)
                        )


    def lookup(self,spec):
        if isinstance(spec,Type):
            if self.types.get(spec.name) is spec or spec in self.classes.values():
                return spec
            raise ConfigurationError("%r belongs to another lattice" % (spec,))
        if isinstance(spec,str):
            try:
                return self.types[spec]
            except KeyError:
                raise ConfigurationError("Unknown type %r" % spec) from None
        if isinstance(spec,type):
            return self.for_class(spec)
        raise ConfigurationError("%r is not a type" % (spec,))


    def type_of(self,value):
        if value is None:
            return self.root    # the undefined value
        return self.for_class(value.__class__)


    def for_class(self,cls):
        """Return the type for 'cls', declaring it from its bases if needed"""
        try:
            return self.classes[cls]
        except KeyError:
            pass
        with self.__lock:
            if cls in self.classes:
                return self.classes[cls]
            parents = self._unique(map(self.for_class,cls.__bases__))
            name = cls.__name__
            if name in self.types:
                name = '%s.%s' % (cls.__module__, cls.__qualname__)
            t = Type(name, parents or (self.root,))
            if name not in self.types:
                self.types[name] = t
            self.classes[cls] = t
            self._changed()
        log.debug("declared type %s%r for %r", t.name, t.parents, cls)
        return t


    def conforms(self,a,b):
        return self.distance(a,b) != INFINITY


    def distance(self,a,b):
        memo = self._distances
        try:
            return memo[a,b]
        except KeyError:
            pass

        result = INFINITY
        seen = {a}; queue = deque([(a,0)])
        while queue:
            t, d = queue.popleft()
            if t is b:
                result = d
                break
            for p in t.parents:
                if p not in seen:
                    seen.add(p); queue.append((p,d+1))

        memo[a,b] = result
        return result


    def _changed(self):
        self.version += 1
        self._distances = {}

    def _unique(self,types):
        out = []
        for t in types:
            if t not in out:
                out.append(t)
        return tuple(out)


def standard_lattice():
    """Return a new lattice with the builtin hierarchy declared and bound"""

    lattice = TypeLattice('Any')
    d = lattice.declare

    d('Cool'); d('Numeric'); d('Stringy'); d('Positional')
    d('Associative'); d('Callable')

    d('Real', 'Numeric')
    d('Int', 'Cool', 'Real')
    d('Bool', 'Int')
    d('Num', 'Cool', 'Real')
    d('Rat', 'Cool', 'Real')
    d('Complex', 'Cool', 'Numeric')
    d('Str', 'Cool', 'Stringy')
    d('Blob', 'Stringy')
    d('List', 'Cool', 'Positional')
    d('Array', 'List')
    d('Hash', 'Cool', 'Associative')
    d('Code', 'Callable')

    for pyclass, name in [
        (bool,'Bool'), (int,'Int'), (float,'Num'), (Fraction,'Rat'),
        (complex,'Complex'), (str,'Str'), (bytes,'Blob'), (tuple,'List'),
        (list,'Array'), (dict,'Hash'), (FunctionType,'Code'),
        (BuiltinFunctionType,'Code'), (MethodType,'Code'),
    ]:
        lattice.bind(pyclass,name)

    return lattice


default = standard_lattice()
