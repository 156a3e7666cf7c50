"""Test the public error types"""

from unittest import TestCase

from multis import *

class APITests(TestCase):

    def testErrorsAreDispatchErrors(self):
        for exc in (ConfigurationError, NoApplicableCandidates,
            AmbiguousDispatch, RedispatchExhausted
        ):
            self.assertTrue(issubclass(exc,DispatchError))

    def testNoApplicableNamesRoutineAndTypes(self):
        lattice = standard_lattice()
        err = NoApplicableCandidates('frob', Call(1,'x',k=[]), lattice)
        self.assertEqual(err.routine, 'frob')
        self.assertEqual(
            str(err),
            "Cannot resolve caller frob(Int, Str, k => Array); "
            "none of these signatures match"
        )

    def testAmbiguousListsCandidates(self):
        c1 = Candidate([Param('Int')], lambda x: 1, 'f')
        c2 = Candidate([Param('Int')], lambda x: 2, 'f')
        err = AmbiguousDispatch('f', Call(1), [c1,c2])
        self.assertEqual(err.candidates, [c1,c2])
        self.assertTrue(str(err).startswith("Ambiguous call to f(1)"))



    def testResolveReturnsAChain(self):
        reg = Registry(standard_lattice())
        reg.register('f', Candidate([Param('Int')], lambda x: x))
        chain = reg.dispatcher('f').resolve(Call(1))
        self.assertIsInstance(chain, Chain)
        self.assertIsInstance(reg.dispatcher('f'), IDispatcher)
        self.assertEqual(chain.candidates()[0].name, '<lambda>')
