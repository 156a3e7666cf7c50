"""Errors and interfaces for the dispatch framework"""

from abc import ABC, abstractmethod

__all__ = [
    'DispatchError', 'ConfigurationError', 'NoApplicableCandidates',
    'AmbiguousDispatch', 'RedispatchExhausted',
    'ITypeLattice', 'ICandidateSource', 'IDispatcher',
]


class DispatchError(Exception):
    """Base class for all dispatch failures"""


class ConfigurationError(DispatchError):
    """The type graph or a routine's candidates are declared inconsistently"""


class NoApplicableCandidates(DispatchError):
    """No candidate has been defined that accepts the given arguments"""

    def __init__(self,routine,call,lattice=None):
        self.routine = routine
        self.call = call
        if lattice is not None:
            described = call.describe(lattice)
        else:
            described = repr(call)
        DispatchError.__init__(self,
            "Cannot resolve caller %s%s; none of these signatures match"
            % (routine, described)
        )


class AmbiguousDispatch(DispatchError):
    """More than one equally narrow candidate accepts the arguments"""

    def __init__(self,routine,call,candidates):
        self.routine = routine
        self.call = call
        self.candidates = list(candidates)
        DispatchError.__init__(self,
            "Ambiguous call to %s%r; these signatures all match: %s"
            % (routine, call, ', '.join(map(repr,self.candidates)))
        )


class RedispatchExhausted(DispatchError):
    """'next_method' was used, but no further candidate remains"""


class ITypeLattice(ABC):

    """A single-rooted graph of nominal types

    Every type conforms to itself and to each of its (direct or indirect)
    parents.  The root conforms to nothing but itself.
    """

    @abstractmethod
    def conforms(self,a,b):
        """Return true if 'b' is 'a' or an ancestor of 'a'"""

    @abstractmethod
    def distance(self,a,b):
        """Minimum number of parent edges from 'a' to 'b'

        Returns 'INFINITY' if 'a' does not conform to 'b'."""

    @abstractmethod
    def type_of(self,value):
        """Return the lattice type of 'value'"""

    @abstractmethod
    def lookup(self,spec):
        """Return the type named by 'spec' (a type, name, or Python class)"""


class ICandidateSource(ABC):

    """Strategy for finding the candidates of a routine by name

    Subs and methods differ only in where their candidates are found
    (lexical scopes vs. a class hierarchy); ranking is shared.
    """

    @abstractmethod
    def candidates(self,name,call):
        """Return a sequence of candidates visible for 'name' and 'call'"""

    @abstractmethod
    def version(self,name,call):
        """Return a hashable tag that changes when 'candidates()' would"""


class IDispatcher(ABC):

    """Narrowness-ranking dispatcher for one routine name"""

    @abstractmethod
    def resolve(self,call):
        """Return a 'Chain' for 'call', or raise a 'DispatchError'"""

    @abstractmethod
    def invoke(self,call):
        """Resolve 'call' and return the chosen candidate's result"""

    @abstractmethod
    def cando(self,call):
        """List candidates that accept 'call', narrowest first"""
