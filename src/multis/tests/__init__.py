from unittest import TestSuite, defaultTestLoader


def test_suite():

    from multis.tests import test_api, test_lattice, test_signature
    from multis.tests import test_dispatch, test_functions, test_methods

    return TestSuite([
        defaultTestLoader.loadTestsFromModule(module)
            for module in (test_api, test_lattice, test_signature,
                test_dispatch, test_functions, test_methods)
    ])
