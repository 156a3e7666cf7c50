"""Test the nominal type lattice"""

from unittest import TestCase
from itertools import product

from multis import *


class Vehicle(object):  pass
class LandVehicle(Vehicle): pass
class WaterVehicle(Vehicle): pass

class GasPowered:
    pass

class HumanPowered:
    pass

class Bicycle(HumanPowered,LandVehicle): pass
class Hummer(GasPowered,LandVehicle): pass
class Speedboat(GasPowered,WaterVehicle): pass
class PaddleBoat(HumanPowered,WaterVehicle): pass

ALL_VEHICLES = (
    Vehicle, LandVehicle, WaterVehicle, GasPowered, HumanPowered,
    Bicycle, Hummer, Speedboat, PaddleBoat,
)


class DeclarationTests(TestCase):

    def setUp(self):
        self.lattice = TypeLattice()

    def testRootIsUniversal(self):
        lat = self.lattice
        a = lat.declare('A'); b = lat.declare('B','A')
        for t in (a,b,lat.root):
            self.assertTrue(lat.conforms(t,lat.root))
        self.assertFalse(lat.conforms(lat.root,a))
        self.assertEqual(lat.distance(lat.root,lat.root), 0)

    def testDeclareByNameOrType(self):
        lat = self.lattice
        a = lat.declare('A')
        b = lat.declare('B',a)
        c = lat.declare('C','B')
        self.assertEqual(c.parents, (b,))
        self.assertEqual(a.parents, (lat.root,))
        self.assertIs(lat.lookup('C'), c)
        self.assertEqual(repr(c), 'C')

    def testDuplicateAndUnknownNames(self):
        lat = self.lattice
        lat.declare('A')
        self.assertRaises(ConfigurationError, lat.declare, 'A')
        self.assertRaises(ConfigurationError, lat.declare, 'B', 'Nope')
        self.assertRaises(ConfigurationError, lat.lookup, 'Nope')
        self.assertRaises(ConfigurationError, lat.lookup, 42)
        self.assertRaises(
            ConfigurationError, lat.lookup, standard_lattice().lookup('Int')
        )

    def testCycleIsRejected(self):
        lat = self.lattice
        a = lat.declare('A'); b = lat.declare('B','A'); c = lat.declare('C','B')
        version = lat.version
        self.assertRaises(ConfigurationError, lat.add_parent, a, c)
        self.assertRaises(ConfigurationError, lat.add_parent, a, a)
        self.assertRaises(ConfigurationError, lat.add_parent, lat.root, a)
        self.assertEqual(a.parents, (lat.root,))
        self.assertEqual(lat.version, version)
        lat.validate()

    def testValidateFindsCycles(self):
        lat = self.lattice
        a = lat.declare('A'); b = lat.declare('B','A')
        a.parents = (b,)
        self.assertRaises(ConfigurationError, lat.validate)

    def testAddParentChangesDistances(self):
        lat = self.lattice
        a = lat.declare('A'); b = lat.declare('B','A'); c = lat.declare('C','B')
        d = lat.declare('D')
        self.assertEqual(lat.distance(c,a), 2)
        self.assertEqual(lat.distance(c,d), INFINITY)
        version = lat.version
        lat.add_parent('C','D')
        lat.add_parent('C','D')     # no-op the second time
        self.assertEqual(lat.version, version+1)
        self.assertEqual(lat.distance(c,d), 1)
        self.assertEqual(c.parents, (b,d))


class ClassTypeTests(TestCase):

    def setUp(self):
        self.lattice = TypeLattice()

    def testClassesAreDeclaredFromTheirBases(self):
        lat = self.lattice
        bike = lat.type_of(Bicycle())
        self.assertEqual(bike.name, 'Bicycle')
        self.assertEqual(
            bike.parents, (lat.for_class(HumanPowered),lat.for_class(LandVehicle))
        )
        self.assertIs(lat.for_class(object), lat.root)
        self.assertIs(lat.lookup(Bicycle), bike)

    def testDistancesFollowShortestPath(self):
        lat = self.lattice
        t = lat.for_class
        self.assertEqual(lat.distance(t(Bicycle),t(LandVehicle)), 1)
        self.assertEqual(lat.distance(t(Bicycle),t(Vehicle)), 2)
        self.assertEqual(lat.distance(t(Bicycle),t(HumanPowered)), 1)
        self.assertEqual(lat.distance(t(Bicycle),lat.root), 2)
        self.assertEqual(lat.distance(t(Bicycle),t(WaterVehicle)), INFINITY)
        self.assertFalse(lat.conforms(t(Vehicle),t(Bicycle)))

    def testNameClashesAreQualified(self):
        lat = self.lattice
        first = lat.for_class(Vehicle)
        Vehicle2 = type('Vehicle',(object,),{})
        second = lat.for_class(Vehicle2)
        self.assertIsNot(first, second)
        self.assertIs(lat.lookup('Vehicle'), first)
        self.assertNotEqual(second.name, 'Vehicle')

    def testBinding(self):
        lat = self.lattice
        wheeled = lat.declare('Wheeled')
        lat.bind(Hummer,wheeled)
        self.assertIs(lat.type_of(Hummer()), wheeled)
        self.assertIs(lat.type_of(None), lat.root)

    def testTransitivityAndTriangleInequality(self):
        lat = self.lattice
        types = [lat.for_class(k) for k in ALL_VEHICLES] + [lat.root]
        for a,b,c in product(types,types,types):
            if lat.conforms(a,b) and lat.conforms(b,c):
                self.assertTrue(lat.conforms(a,c))
                self.assertTrue(
                    lat.distance(a,c) <= lat.distance(a,b)+lat.distance(b,c)
                )


class StandardLatticeTests(TestCase):

    def setUp(self):
        self.lattice = standard_lattice()

    def testBuiltinsAreBound(self):
        type_of = self.lattice.type_of
        for value,name in [
            (1,'Int'), (True,'Bool'), (1.5,'Num'), ('s','Str'), (b'b','Blob'),
            ([],'Array'), ((),'List'), ({},'Hash'), (len,'Code'),
            (lambda: None,'Code'),
        ]:
            self.assertEqual(type_of(value).name, name)

    def testMultipleInheritance(self):
        lat = self.lattice
        d = lambda a,b: lat.distance(lat.lookup(a),lat.lookup(b))
        self.assertEqual(d('Int','Cool'), 1)
        self.assertEqual(d('Int','Real'), 1)
        self.assertEqual(d('Int','Any'), 2)
        self.assertEqual(d('Bool','Numeric'), 3)
        self.assertEqual(d('Array','Positional'), 2)
        self.assertEqual(d('Str','Int'), INFINITY)

    def testTransitivityAndTriangleInequality(self):
        lat = self.lattice
        lat.validate()
        types = list(lat.types.values())
        for a,b,c in product(types,types,types):
            if lat.conforms(a,b) and lat.conforms(b,c):
                self.assertTrue(lat.conforms(a,c))
                self.assertTrue(
                    lat.distance(a,c) <= lat.distance(a,b)+lat.distance(b,c)
                )
