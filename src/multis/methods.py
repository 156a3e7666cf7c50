"""Multi methods: candidates found through the invocant's class hierarchy"""

import threading
from functools import partial
from weakref import WeakKeyDictionary

from multis.interfaces import ICandidateSource
from multis.dispatcher import Candidate, DispatchSet, Dispatcher
from multis.signature import Signature
from multis import lattice as _lattice

__all__ = ['ClassHierarchy', 'multimethod', 'methods']


class ClassHierarchy(ICandidateSource):

    """Method lookup: candidates declared on the invocant's class or bases

    The invocant is the first positional argument.  Candidates from every
    class in its MRO are ranked together; the invocant parameter of each
    is normally its declaring class, so overrides rank first.
    """

    def __init__(self,lattice=None):
        self.lattice = lattice or _lattice.default
        self.tables = WeakKeyDictionary()
        self.__lock = threading.Lock()

    def dispatch_set(self,cls,name):
        with self.__lock:
            table = self.tables.setdefault(cls,{})
            if name not in table:
                table[name] = DispatchSet('%s.%s' % (cls.__name__,name))
            return table[name]

    def declare(self,cls,name,candidate):
        return self.dispatch_set(cls,name).add(candidate.resolve(self.lattice))

    def _visible(self,name,call):
        if not call.args:
            return
        for cls in call.args[0].__class__.__mro__:
            table = self.tables.get(cls)
            if table and name in table:
                yield table[name]

    def candidates(self,name,call):
        found = []
        for ds in self._visible(name,call):
            found.extend(ds.candidates)
        return found

    def version(self,name,call):
        return tuple([(id(ds),ds.version) for ds in self._visible(name,call)])

    def proto(self,name,call):
        return None


methods = ClassHierarchy()


class multimethod(object):

    """Descriptor for a method with multiple candidates

    Use it as a decorator in a class body, and add further candidates with
    '@name.candidate'.  An unannotated first parameter is constrained to the
    class the candidate is declared in, and the class's own name may be used
    as a string annotation::

        class Task:
            @multimethod
            def add(self, other: 'Task'): ...

            @add.candidate
            def add(self, other: int): ...
    """

    def __init__(self,func=None,hierarchy=None):
        self.hierarchy = hierarchy or methods
        self.pending = []
        self.owner = self.name = self.dispatcher = None
        if func is not None:
            self.pending.append((None,func))
            self.name = func.__name__
            self.__doc__ = func.__doc__

    def candidate(self,*params):
        """Decorator adding a candidate; arguments as 'MultiFunction.candidate'"""
        if len(params)==1 and callable(params[0]) \
                and not isinstance(params[0],(type,Signature)):
            return self._added(None,params[0])

        if len(params)==1 and isinstance(params[0],Signature):
            signature = params[0]
        else:
            signature = Signature(*params)
        return lambda func: self._added(signature,func)

    def _added(self,signature,func):
        if self.owner is None:
            self.pending.append((signature,func))
            if self.name is None:
                self.name = func.__name__
        else:
            self._register(signature,func)
        if func.__name__==self.name:
            return self
        return func

    def __set_name__(self,owner,name):
        self.owner, self.name = owner, name
        self.dispatcher = Dispatcher(name,self.hierarchy)
        self.hierarchy.lattice.for_class(owner)
        pending, self.pending = self.pending, []
        for signature,func in pending:
            self._register(signature,func)

    def _register(self,signature,func):
        owner = self.owner
        c = Candidate(signature,func,'%s.%s' % (owner.__name__,self.name))

        params = []
        invocant = True
        for p in c.signature.params:
            if p.constraint==owner.__name__:
                p = p.replace(constraint=owner)
            if invocant and not p.named:
                invocant = False
                if p.constraint is None:
                    p = p.replace(constraint=owner)
            params.append(p)

        c.signature = Signature(*params)
        self.hierarchy.declare(owner,self.name,c)

    def __get__(self,ob,typ=None):
        if ob is None:
            return self
        return partial(self.dispatcher,ob)

    def __repr__(self):
        return '<multimethod %s>' % self.name
