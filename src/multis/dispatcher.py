"""Candidate ranking and re-dispatch

    Candidate -- a signature plus a body

    DispatchSet -- the append-only, versioned candidates of one routine name
        in one place (scope or class)

    Dispatcher -- ranks the candidates an 'ICandidateSource' finds for a
        routine, and runs the narrowest one that accepts a call

    NextMethod -- passed to candidate bodies whose first parameter is called
        'next_method', to delegate to the next candidate in rank order
"""

import inspect, logging, threading
from itertools import groupby
from operator import itemgetter

from multis.interfaces import *
from multis.signature import Signature, Call, nominal_match, predicate_match
from multis.cache import DispatchCache

__all__ = [
    'Candidate', 'DispatchSet', 'Dispatcher', 'Chain', 'NextMethod',
]

log = logging.getLogger(__name__)


def wants_next(func):
    """Does 'func' take a 'next_method' as its first parameter?"""
    try:
        params = list(inspect.signature(func).parameters)
    except (TypeError,ValueError):
        return False    # not introspectable, therefore not chainable
    return bool(params) and params[0]=='next_method'


class Candidate(object):

    """One signature and body registered under a routine name"""

    def __init__(self,signature,body,name=None):
        if signature is None:
            signature = Signature.from_function(body)
        elif not isinstance(signature,Signature):
            signature = Signature(*signature)
        self.signature = signature
        self.body = body
        self.name = name or getattr(body,'__name__','<candidate>')
        self.wants_next = wants_next(body)

    def resolve(self,lattice):
        """Return a copy with the signature bound to 'lattice'"""
        c = Candidate(self.signature.resolve(lattice),self.body,self.name)
        c.wants_next = self.wants_next
        return c

    def __repr__(self):
        return '%s%r' % (self.name,self.signature)


class DispatchSet(object):

    """The candidates declared for one name in one place

    Candidates are only ever appended; each addition bumps 'version', and
    the 'candidates' tuple is replaced rather than mutated, so readers never
    need the lock.
    """

    def __init__(self,name,strict=False):
        self.name = name
        self.strict = strict
        self.candidates = ()
        self.version = 0
        self.only = False
        self.proto = None
        self.has_proto = False
        self.__lock = threading.Lock()

    def add(self,candidate,only=False):
        with self.__lock:
            if self.only or (only and self.candidates):
                raise ConfigurationError(
                    "%s is declared 'only' and cannot have other candidates"
                    % self.name
                )
            if self.strict:
                for c in self.candidates:
                    if c.signature==candidate.signature:
                        raise ConfigurationError(
                            "%r duplicates the signature of %r"
                            % (candidate,c)
                        )
            self.only = only
            self.candidates = self.candidates + (candidate,)
            self.version += 1
        log.debug("registered %r (%s version %d)",
            candidate, self.name, self.version
        )
        return candidate

    def set_proto(self,body=None):
        with self.__lock:
            if self.only:
                raise ConfigurationError(
                    "%s is declared 'only' and cannot have a proto" % self.name
                )
            self.proto = body
            self.has_proto = True
            self.version += 1

    def __iter__(self):
        return iter(self.candidates)

    def __len__(self):
        return len(self.candidates)


class _Deferral(BaseException):
    """Raised by 'NextMethod.defer()' to hand off to the next candidate"""

    def __init__(self,next_method,chain):
        BaseException.__init__(self)
        self.next_method = next_method
        self.chain = chain


class Chain(object):

    """The ranked walk of one dispatch attempt

    'groups' is the dispatcher's ordering: tuples of equally narrow
    '(candidate,bindings)' pairs that passed the nominal phase.  Entries are
    resolved lazily; each candidate's predicates run at most once.  A chain
    made with 'rematch' re-checks types as well, for delegation with new
    arguments.
    """

    def __init__(self,dispatcher,call,groups,rematch=False):
        self.dispatcher = dispatcher
        self.call = call
        self.groups = groups
        self.entries = []
        self.failure = None
        self.walker = self._walk(rematch)

    def _walk(self,rematch):
        call, lattice = self.call, self.dispatcher.lattice
        if rematch:
            types = call.types(lattice)

        for index,group in enumerate(self.groups):
            passing = []
            for candidate,bindings in group:
                if rematch:
                    nm = nominal_match(candidate.signature,types,lattice)
                    if nm is None:
                        continue
                    bindings = nm.bindings
                if predicate_match(candidate.signature,call):
                    passing.append((index,candidate,bindings))
            if len(passing)>1:
                self.failure = AmbiguousDispatch(
                    self.dispatcher.name, call, [p[1] for p in passing]
                )
                raise self.failure
            if passing:
                yield passing[0]

    def entry(self,pos):
        """Return the '(group,candidate,bindings)' at rank 'pos'

        Raises 'IndexError' when there are fewer accepting candidates."""
        entries = self.entries
        while len(entries)<=pos:
            try:
                entries.append(next(self.walker))
            except StopIteration:
                if self.failure is not None:
                    raise self.failure from None
                raise IndexError(pos) from None
        return entries[pos]

    def has(self,pos):
        try:
            self.entry(pos)
        except IndexError:
            return False
        return True

    def candidates(self):
        """All accepting candidates, in rank order"""
        while self.has(len(self.entries)):
            pass
        return [e[1] for e in self.entries]

    def after(self,pos,call):
        """A chain over the groups below 'pos''s, re-matched for 'call'"""
        index = self.entry(pos)[0]
        return Chain(self.dispatcher,call,self.groups[index+1:],rematch=True)

    def run(self,pos=0):
        """Invoke the candidate at rank 'pos', following any hand-offs"""
        chain = self
        while True:
            index, candidate, bindings = chain.entry(pos)
            call = chain.call
            try:
                if candidate.wants_next:
                    return candidate.body(
                        NextMethod(chain,pos,bindings),
                        *call.args, **call.kwargs
                    )
                return candidate.body(*call.args,**call.kwargs)
            except _Deferral as d:
                nm = d.next_method
                if nm.chain is not chain or nm.pos!=pos:
                    raise
                if d.chain is None:
                    pos += 1
                else:
                    chain, pos = d.chain, 0
                log.debug("%s handed off to rank %d", candidate, pos)


class NextMethod(object):

    """Delegate to the next candidate for the same call

    Calling it with no arguments runs the next candidate with the original
    arguments and returns its result; calling it with arguments uses those
    instead.  'defer()' and 'defer_with()' do the same, but hand off
    completely: the delegating body does not resume, and the next
    candidate's result goes straight to the original caller.  'call_with()'
    always uses its arguments, even when there are none.
    """

    __slots__ = 'chain','pos','captures'

    def __init__(self,chain,pos,captures):
        self.chain = chain
        self.pos = pos
        self.captures = dict(captures)

    def __call__(self,*args,**kw):
        if args or kw:
            return self.call_with(*args,**kw)
        self._check()
        log.debug("%s re-dispatching to rank %d",
            self.chain.dispatcher.name, self.pos+1
        )
        return self.chain.run(self.pos+1)

    def call_with(self,*args,**kw):
        """Run the next candidate accepting exactly these arguments"""
        return self._next_chain(Call(*args,**kw)).run(0)

    def defer(self):
        self._check()
        raise _Deferral(self,None)

    def defer_with(self,*args,**kw):
        raise _Deferral(self,self._next_chain(Call(*args,**kw)))

    has_next = property(lambda self: self.chain.has(self.pos+1))

    def _check(self):
        if not self.has_next:
            raise RedispatchExhausted(
                "No candidate of %s follows %r"
                % (self.chain.dispatcher.name, self.chain.entry(self.pos)[1])
            )

    def _next_chain(self,call):
        chain = self.chain.after(self.pos,call)
        if not chain.has(0):
            raise RedispatchExhausted(
                "No further candidate of %s accepts %r"
                % (self.chain.dispatcher.name, call)
            )
        return chain


class Dispatcher(IDispatcher):

    """Rank and invoke the candidates of routine 'name'

    'source' is an 'ICandidateSource' (e.g. a lexical scope or a class
    hierarchy) and supplies the lattice.  'cache' may be a 'DispatchCache'
    to share, 'None' for a private one, or 'False' to rank every call.
    """

    def __init__(self,name,source,cache=None):
        self.name = name
        self.source = source
        self.lattice = source.lattice
        if cache is None or cache is True:
            cache = DispatchCache()
        self.cache = cache

    def ordered(self,call,types=None):
        """Nominally applicable candidates of 'call', grouped by narrowness"""
        lattice = self.lattice
        if types is None:
            types = call.types(lattice)

        def build():
            found = []
            for candidate in self.source.candidates(self.name,call):
                nm = nominal_match(candidate.signature,types,lattice)
                if nm is not None:
                    found.append((nm.narrowness,candidate,nm.bindings))
            found.sort(key=itemgetter(0))
            return [
                tuple([item[1:] for item in group])
                    for key,group in groupby(found,itemgetter(0))
            ]

        if self.cache is False:
            return tuple(build())

        return self.cache.get_or_build(
            (self.name,)+types,
            (self.source.version(self.name,call), lattice.version),
            build
        )

    def resolve(self,call):
        """Return a 'Chain' whose first entry is the chosen candidate"""
        chain = Chain(self,call,self.ordered(call))
        if not chain.has(0):
            raise NoApplicableCandidates(self.name,call,self.lattice)
        return chain

    def invoke(self,call):
        proto = self.source.proto(self.name,call)
        if proto is None:
            return self.resolve(call).run()

        def dispatch(*args,**kw):
            if args or kw:
                return self.resolve(Call(*args,**kw)).run()
            return self.resolve(call).run()

        return proto(dispatch,*call.args,**call.kwargs)

    def __call__(self,*args,**kw):
        return self.invoke(Call(*args,**kw))

    def cando(self,call):
        found = []
        for group in self.ordered(call):
            for candidate,bindings in group:
                if predicate_match(candidate.signature,call):
                    found.append(candidate)
        return found

    def candidates(self,call=None):
        return list(self.source.candidates(self.name,call or Call()))

    def __repr__(self):
        return 'Dispatcher(%r)' % (self.name,)
