"""Multi subs: lexically scoped routines and their decorators

    Scope -- candidate lookup through nested lexical scopes

    Registry -- register candidates by routine name and invoke routines

    MultiFunction -- a callable routine whose candidates are added with
        decorators

    multi -- decorator adding a candidate to a routine of the default
        registry
"""

import logging

from multis.interfaces import ICandidateSource, ConfigurationError
from multis.dispatcher import Candidate, DispatchSet, Dispatcher
from multis.signature import Signature, Call
from multis import lattice as _lattice

__all__ = ['Scope', 'Registry', 'MultiFunction', 'multi', 'registry']

log = logging.getLogger(__name__)


class Scope(ICandidateSource):

    """Sub lookup: the candidates of a name, from the innermost scope out

    Candidates declared in outer scopes are visible to inner ones, unless an
    inner scope declares a 'proto' (or an 'only') for the name, which hides
    everything further out.
    """

    def __init__(self,parent=None,lattice=None,strict=False):
        if lattice is None:
            lattice = parent.lattice if parent is not None else _lattice.default
        self.parent = parent
        self.lattice = lattice
        self.strict = strict
        self.sets = {}

    def dispatch_set(self,name):
        try:
            return self.sets[name]
        except KeyError:
            return self.sets.setdefault(name,DispatchSet(name,self.strict))

    def declare(self,name,candidate,only=False):
        return self.dispatch_set(name).add(candidate.resolve(self.lattice),only)

    def child(self):
        return Scope(self,self.lattice,self.strict)

    def _visible(self,name):
        scope = self
        while scope is not None:
            ds = scope.sets.get(name)
            if ds is not None:
                yield ds
                if ds.has_proto or ds.only:
                    break
            scope = scope.parent

    def candidates(self,name,call):
        found = []
        for ds in self._visible(name):
            found.extend(ds.candidates)
        return found

    def version(self,name,call):
        return tuple([(id(ds),ds.version) for ds in self._visible(name)])

    def proto(self,name,call):
        for ds in self._visible(name):
            if ds.has_proto:
                return ds.proto


class Registry(object):

    """Registration and invocation of routines by name

    'lattice' defaults to the module-level standard lattice.  'cache' turns
    the per-routine ordering memo on or off, and 'strict' rejects candidates
    whose signature duplicates an existing one at registration time.
    """

    def __init__(self,lattice=None,cache=True,strict=False,scope=None):
        if scope is None:
            scope = Scope(lattice=lattice,strict=strict)
        self.scope = scope
        self.lattice = scope.lattice
        self.cache = cache
        self.dispatchers = {}

    def child(self):
        """Registry for a nested scope that sees this one's candidates"""
        return Registry(cache=self.cache,scope=self.scope.child())

    def register(self,name,candidate,only=False):
        if not isinstance(candidate,Candidate):
            candidate = Candidate(None,candidate,name)
        return self.scope.declare(name,candidate,only)

    def only(self,name,body,signature=None):
        """Declare 'body' as the single, non-multi routine 'name'"""
        ds = self.scope.dispatch_set(name)
        if len(ds) or ds.has_proto:
            raise ConfigurationError(
                "%s already has candidates; it cannot be 'only'" % name
            )
        return self.register(name,Candidate(signature,body,name),only=True)

    def proto(self,name,body=None):
        """Declare a proto for 'name', hiding outer candidates

        If 'body' is given it wraps every call: it receives a 'dispatch'
        callable, followed by the call's arguments.  Calling 'dispatch()'
        with no arguments dispatches the original call.
        """
        self.scope.dispatch_set(name).set_proto(body)
        log.debug("declared proto %s (%r)", name, body)
        return body

    def dispatcher(self,name):
        try:
            return self.dispatchers[name]
        except KeyError:
            d = Dispatcher(name,self.scope,self.cache)
            return self.dispatchers.setdefault(name,d)

    def invoke(self,name,call):
        return self.dispatcher(name).invoke(call)

    def multi(self,func=None,name=None):
        """Decorator: add 'func' as a candidate of a routine

        The routine is named after the function unless 'name' is given.
        Returns the routine's 'MultiFunction'.
        """
        def decorate(func):
            routine = MultiFunction(self,name or func.__name__,func.__doc__)
            routine.add(None,func)
            return routine
        if func is None:
            return decorate
        return decorate(func)


class MultiFunction(object):

    """A routine whose candidates live in a 'Registry'"""

    def __init__(self,registry,name,doc=None):
        self.registry = registry
        self.__name__ = self.name = name
        self.__doc__ = doc

    dispatcher = property(lambda self: self.registry.dispatcher(self.name))

    def __call__(self,*args,**kw):
        return self.registry.invoke(self.name,Call(*args,**kw))

    def add(self,signature,body):
        """Call 'body' when a call matches 'signature' (or 'body''s own)"""
        return self.registry.register(self.name,Candidate(signature,body))

    def candidate(self,*params):
        """Decorator adding the following function as a candidate

        With no arguments the signature is read from the function; otherwise
        the arguments are the signature's 'Param's (or a 'Signature')::

            @to_json.candidate
            def to_json(d: dict): ...

            @fact.candidate(Param('Int',where=0))
            def fact(n): return 1
        """
        if len(params)==1 and callable(params[0]) \
                and not isinstance(params[0],(type,Signature)):
            return self._added(None,params[0])

        if len(params)==1 and isinstance(params[0],Signature):
            signature = params[0]
        else:
            signature = Signature(*params)
        return lambda func: self._added(signature,func)

    when = candidate

    def _added(self,signature,func):
        self.add(signature,func)
        if func.__name__==self.__name__:
            return self
        return func

    def candidates(self):
        return self.dispatcher.candidates()

    def cando(self,*args,**kw):
        return self.dispatcher.cando(Call(*args,**kw))

    def __repr__(self):
        return '<multi %s>' % self.name


registry = Registry()

def multi(func):
    """Add 'func' to the routine of the same qualified name

    Every use of '@multi' on functions with the same module and qualified
    name adds another candidate to the same routine, in the module-level
    default registry.
    """
    name = '%s.%s' % (func.__module__,func.__qualname__)
    routine = MultiFunction(registry,name,func.__doc__)
    routine.__name__ = func.__name__
    routine.add(None,func)
    return routine
