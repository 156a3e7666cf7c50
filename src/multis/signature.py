"""Parameters, signatures, and two-phase signature matching

    Nominal, CaptureIntroduce, CaptureUse -- the kinds of type constraint a
        parameter may carry ('Capture' and 'Use' are short aliases)

    Param, Signature -- call-site independent descriptions of a candidate's
        parameters

    Call -- the positional and named arguments of one call

    arity_ok, nominal_match, predicate_match, match -- the matcher.  The
        nominal phase looks only at argument types and can be cached; the
        predicate phase looks at values and never is.
"""

import inspect
from collections import namedtuple

from multis.interfaces import ConfigurationError
from multis.lattice import Type, INFINITY
from multis.predicates import Where

__all__ = [
    'Nominal', 'CaptureIntroduce', 'CaptureUse', 'Capture', 'Use',
    'Param', 'Signature', 'Call', 'Narrowness', 'NominalMatch',
    'MatchResult', 'arity_ok', 'nominal_match', 'predicate_match', 'match',
]


class Nominal(object):
    """Argument's type must conform to 'type'"""

    __slots__ = 'type',

    def __init__(self,type):
        self.type = type

    def __eq__(self,other):
        return type(self) is type(other) and self.type is other.type

    def __hash__(self):
        return hash((Nominal,id(self.type)))

    def __repr__(self):
        return repr(self.type)


class CaptureIntroduce(object):
    """Bind 'symbol' to the argument's runtime type (accepts anything)"""

    __slots__ = 'symbol',

    def __init__(self,symbol):
        self.symbol = symbol

    def __eq__(self,other):
        return type(self) is type(other) and self.symbol==other.symbol

    def __hash__(self):
        return hash((CaptureIntroduce,self.symbol))

    def __repr__(self):
        return '::'+self.symbol


class CaptureUse(CaptureIntroduce):
    """Argument's type must conform to the type bound to 'symbol'"""

    __slots__ = ()

    def __hash__(self):
        return hash((CaptureUse,self.symbol))

    def __repr__(self):
        return self.symbol

Capture = CaptureIntroduce
Use = CaptureUse


class Param(object):

    """One declared parameter

    'constraint' may be a lattice 'Type', a type name, a Python class, one
    of the constraint objects above, or 'None' for the lattice root.
    'where' is a refinement predicate: a callable, or any 'smartmatch()'
    matcher such as a literal value, range or compiled regex.
    """

    __slots__ = 'constraint','where','name','named','optional','slurpy'

    def __init__(self, constraint=None, where=None, name=None, named=False,
        optional=False, slurpy=False
    ):
        self.constraint = constraint
        self.where = where
        self.name = name
        self.named = named
        self.optional = optional
        self.slurpy = slurpy
        if named and not name:
            raise ConfigurationError("Named parameters need a name")

    def replace(self,**kw):
        d = dict([(k,getattr(self,k)) for k in self.__slots__])
        d.update(kw)
        return Param(**d)

    def resolve(self,lattice):
        """Return a copy whose constraint and predicate are lattice-bound"""
        c = self.constraint
        if c is None:
            c = Nominal(lattice.root)
        elif isinstance(c,Nominal):
            c = Nominal(lattice.lookup(c.type))
        elif not isinstance(c,CaptureIntroduce):
            c = Nominal(lattice.lookup(c))

        where = self.where
        if isinstance(where,(type,Type)):
            where = Where(lattice.lookup(where),lattice)
        elif where is not None and not callable(where):
            where = Where(where,lattice)
        return self.replace(constraint=c,where=where)

    def _key(self):
        return (self.constraint, self.where, self.named and self.name,
            self.named, self.optional, self.slurpy)

    def __eq__(self,other):
        return isinstance(other,Param) and self._key()==other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        if self.named:
            text = ':%s' % self.name
        elif self.slurpy:
            text = '*'
        else:
            text = ''
        c = self.constraint
        if isinstance(c,str):
            text = '%s %s' % (c, text)
        elif c is not None:
            text = '%s %s' % (getattr(c,'__name__',None) or repr(c), text)
        if self.optional:
            text += '?'
        if self.where is not None:
            text += ' where %s' % getattr(self.where,'__name__',self.where)
        return text.strip() or 'Any'


class Signature(object):

    """An ordered collection of parameters"""

    __slots__ = 'params','positional','slurpy','named','slurpy_named'

    def __init__(self,*params):
        self.params = params
        self.positional = []
        self.slurpy = self.slurpy_named = None
        self.named = {}
        bound = set()

        for p in params:
            c = p.constraint
            if isinstance(c,CaptureUse):
                if c.symbol not in bound:
                    raise ConfigurationError(
                        "Type capture %s used before it is introduced" % c
                    )
            elif isinstance(c,CaptureIntroduce):
                if c.symbol in bound or p.named:
                    raise ConfigurationError(
                        "Type capture %r cannot be introduced here" % c
                    )
                bound.add(c.symbol)

            if p.named:
                if p.slurpy:
                    self.slurpy_named = p
                elif p.name in self.named:
                    raise ConfigurationError("Duplicate named parameter %r" % p)
                else:
                    self.named[p.name] = p
            elif self.slurpy is not None:
                raise ConfigurationError(
                    "No positional parameter may follow %r" % self.slurpy
                )
            elif p.slurpy:
                self.slurpy = p
            elif self.positional and self.positional[-1].optional \
                    and not p.optional:
                raise ConfigurationError(
                    "Required parameter %r follows an optional one" % p
                )
            else:
                self.positional.append(p)

        self.positional = tuple(self.positional)


    min_arity = property(
        lambda self: len([p for p in self.positional if not p.optional])
    )

    max_arity = property(
        lambda self: None if self.slurpy else len(self.positional)
    )

    def param_for(self,pos):
        """Return the parameter that binds positional argument 'pos'"""
        if pos < len(self.positional):
            return self.positional[pos]
        return self.slurpy

    def resolve(self,lattice):
        return Signature(*[p.resolve(lattice) for p in self.params])

    def presence(self,count):
        """Predicate-presence pattern for 'count' positional arguments"""
        return tuple([
            self.param_for(i).where is None and 1 or 0 for i in range(count)
        ])


    def from_function(cls,func):
        """Build a signature from 'func''s parameters and annotations

        A leading 'next_method' parameter is skipped.  Annotations may be
        anything 'Param' accepts as a constraint, or a 'Param', whose kind
        and optionality are then taken from the Python parameter.
        """
        params = list(inspect.signature(func).parameters.values())
        if params and params[0].name=='next_method':
            del params[0]

        out = []
        for p in params:
            ann = p.annotation
            if ann is inspect.Parameter.empty:
                ann = Param()
            elif not isinstance(ann,Param):
                ann = Param(ann)

            kind = p.kind
            has_default = p.default is not inspect.Parameter.empty
            if kind is p.VAR_POSITIONAL:
                ann = ann.replace(name=p.name,slurpy=True)
            elif kind is p.VAR_KEYWORD:
                ann = ann.replace(name=p.name,named=True,slurpy=True)
            elif kind is p.KEYWORD_ONLY:
                ann = ann.replace(name=p.name,named=True,optional=has_default)
            else:
                ann = ann.replace(name=p.name,optional=has_default)
            out.append(ann)

        return cls(*out)

    from_function = classmethod(from_function)

    def __eq__(self,other):
        return isinstance(other,Signature) and (
            self.positional, self.slurpy, self.named, self.slurpy_named
        ) == (other.positional, other.slurpy, other.named, other.slurpy_named)

    def __hash__(self):
        return hash((self.positional,self.slurpy))

    def __repr__(self):
        return '(%s)' % ', '.join(map(repr,self.params))


class Call(object):

    """Positional and named arguments of one call"""

    __slots__ = 'args','kwargs'

    def __init__(self,*args,**kwargs):
        self.args = args
        self.kwargs = kwargs

    def types(self,lattice):
        """Return the '(positional,named)' type key of this call"""
        type_of = lattice.type_of
        return (
            tuple(map(type_of,self.args)),
            tuple(sorted([(k,type_of(v)) for k,v in self.kwargs.items()]))
        )

    def describe(self,lattice):
        pos, named = self.types(lattice)
        items = list(map(repr,pos)) + ['%s => %r' % item for item in named]
        return '(%s)' % ', '.join(items)

    def __repr__(self):
        items = list(map(repr,self.args))
        items += ['%s=%r' % item for item in self.kwargs.items()]
        return '(%s)' % ', '.join(items)


Narrowness = namedtuple('Narrowness', 'distances presence')
Narrowness.__doc__ = """Sort key for applicable candidates (smaller is narrower)

Distances are compared first, left to right; the predicate-presence
pattern (0 for a predicate, 1 for none) only breaks complete ties."""

NominalMatch = namedtuple('NominalMatch', 'narrowness bindings')

MatchResult = namedtuple('MatchResult', 'applicable narrowness bindings')


def arity_ok(signature,count):
    """Can 'signature' accept 'count' positional arguments?"""
    if count < signature.min_arity:
        return False
    return signature.max_arity is None or count <= signature.max_arity


def _distance(lattice,constraint,argtype,bindings):
    if isinstance(constraint,CaptureUse):
        if constraint.symbol not in bindings:   # introducer got no argument
            return INFINITY
        return lattice.distance(argtype,bindings[constraint.symbol])
    if isinstance(constraint,CaptureIntroduce):
        symbol = constraint.symbol
        if symbol in bindings:  # further members of a slurpy
            return lattice.distance(argtype,bindings[symbol])
        bindings[symbol] = argtype
        return lattice.distance(argtype,lattice.root)
    return lattice.distance(argtype,constraint.type)


def nominal_match(signature,types,lattice):
    """Check argument types against a resolved 'signature'

    'types' is a 'Call.types()' key.  Returns a 'NominalMatch', or 'None'
    if the candidate is inapplicable.  Only types are consulted, so the
    result may be cached per type key.
    """
    positional, named = types
    if not arity_ok(signature,len(positional)):
        return None

    bindings = {}
    distances = []
    for pos,argtype in enumerate(positional):
        d = _distance(
            lattice, signature.param_for(pos).constraint, argtype, bindings
        )
        if d == INFINITY:
            return None
        distances.append(d)

    seen = 0
    for name,argtype in named:
        p = signature.named.get(name)
        if p is None:
            p = signature.slurpy_named
            if p is None:
                return None
        else:
            seen += 1
        if _distance(lattice,p.constraint,argtype,bindings) == INFINITY:
            return None

    if seen < len(signature.named):
        given = dict(named)
        for name,p in signature.named.items():
            if name not in given and not p.optional:
                return None

    return NominalMatch(
        Narrowness(tuple(distances),signature.presence(len(positional))),
        bindings
    )


def predicate_match(signature,call):
    """Run the refinement predicates, left to right, stopping on failure"""
    args = call.args
    for p,arg in zip(signature.positional,args):
        if p.where is not None and not p.where(arg):
            return False

    p = signature.slurpy
    extras = args[len(signature.positional):]
    if p is not None and p.where is not None and extras:
        if not p.where(extras):
            return False

    for name,value in call.kwargs.items():
        p = signature.named.get(name) or signature.slurpy_named
        if p.where is not None and not p.where(value):
            return False

    return True


def match(signature,call,lattice):
    """Run both phases for 'call'; 'signature' must be resolved"""
    nm = nominal_match(signature,call.types(lattice),lattice)
    if nm is None:
        return MatchResult(False,None,{})
    return MatchResult(predicate_match(signature,call),*nm)
