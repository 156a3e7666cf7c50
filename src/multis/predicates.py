"""Refinement predicates ('where' clauses)"""

import re

from multis.lattice import Type

__all__ = ['smartmatch', 'Where', 'defined', 'undefined']


def smartmatch(value,matcher,lattice=None):
    """Return true if 'value' matches 'matcher'

    Callables are called with the value; compiled regular expressions
    search string values; ranges and sets test membership; lattice types
    test conformance (a 'lattice' must be supplied).  Anything else must
    compare equal, which gives literal parameters such as 'fact(0)'.
    """
    if isinstance(matcher,Type):
        if lattice is None:
            raise TypeError("Matching against %r needs a lattice" % matcher)
        return lattice.conforms(lattice.type_of(value),matcher)

    if isinstance(matcher,re.Pattern):
        return isinstance(value,str) and matcher.search(value) is not None

    if isinstance(matcher,(range,set,frozenset)):
        try:
            return value in matcher
        except TypeError:   # unhashable value vs. a set
            return False

    if callable(matcher):
        return bool(matcher(value))

    return value == matcher


class Where(object):

    """A refinement predicate built from any 'smartmatch()' matcher"""

    __slots__ = 'matcher','lattice'

    def __init__(self,matcher,lattice=None):
        self.matcher = matcher
        self.lattice = lattice

    def __call__(self,value):
        return smartmatch(value,self.matcher,self.lattice)

    def __eq__(self,other):
        return type(self) is type(other) and self.matcher == other.matcher

    def __hash__(self):
        try:
            return hash(self.matcher)
        except TypeError:
            return 0

    def __repr__(self):
        m = self.matcher
        return 'where %s' % (getattr(m,'__name__',None) or repr(m),)


def defined(value):
    return value is not None

def undefined(value):
    return value is None
