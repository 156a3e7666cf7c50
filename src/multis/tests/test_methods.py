"""Test multi methods and class-hierarchy lookup"""

from unittest import TestCase

from multis import *


class Resource(object):

    def __init__(self):
        self.log = []

    @multimethod
    def cleanup(self):
        self.log.append('resource')
        return 'done'


class Connection(Resource):

    @multimethod
    def cleanup(next_method,self):
        self.log.append('connection')
        return next_method()


class PooledConnection(Connection):
    pass


class Shape(object):

    @multimethod
    def collide(self, other: 'Shape'):
        return 'shape/shape'

    @collide.candidate
    def collide(self, other: int):
        return 'shape/int'


class Circle(Shape):

    @multimethod
    def collide(self, other: 'Circle'):
        return 'circle/circle'


class Task(object):

    """A task with dependencies, each of which must run first"""

    def __init__(self,name,*dependencies):
        self.name = name
        self.dependencies = list(dependencies)
        self.done = False

    @multimethod
    def add(self, other: 'Task'):
        self.dependencies.append(other)
        return self

    @add.candidate
    def add(self, name: str, *dependencies: 'Task'):
        return self.add(Task(name,*dependencies))

    def perform(self,out):
        if not self.done:
            for dep in self.dependencies:
                dep.perform(out)
            out.append(self.name)
            self.done = True
        return out


class MultiMethodTests(TestCase):

    def testSubclassDelegatesToSuperclass(self):
        c = Connection()
        self.assertEqual(c.cleanup(), 'done')
        self.assertEqual(c.log, ['connection','resource'])

        r = Resource()
        r.cleanup()
        self.assertEqual(r.log, ['resource'])

    def testInheritedDescriptorSeesWholeMRO(self):
        p = PooledConnection()
        p.cleanup()
        self.assertEqual(p.log, ['connection','resource'])

    def testOverrideRanksByArgumentTypes(self):
        self.assertEqual(Circle().collide(Circle()), 'circle/circle')
        self.assertEqual(Circle().collide(Shape()), 'shape/shape')
        self.assertEqual(Shape().collide(Circle()), 'shape/shape')
        self.assertEqual(Circle().collide(3), 'shape/int')
        self.assertRaises(NoApplicableCandidates, Shape().collide, 'x')

    def testDescriptorOnClass(self):
        self.assertIsInstance(Shape.collide, multimethod)
        self.assertEqual(Shape.collide.name, 'collide')
        self.assertIs(Shape.collide.owner, Shape)
        self.assertEqual(
            len(methods.candidates('collide', Call(Circle()))), 3
        )

    def testTaskDependencies(self):
        eat = Task('eat')
        eat.add('cook', Task('buy'), Task('wash'))
        eat.add(Task('set table'))
        self.assertEqual(eat.perform([]),
            ['buy','wash','cook','set table','eat'])

    def testSeparateHierarchy(self):
        hierarchy = ClassHierarchy(standard_lattice())

        class Dog(object):
            speak = multimethod(lambda self: 'woof', hierarchy)

        self.assertEqual(Dog().speak(), 'woof')
        self.assertEqual(len(methods.candidates('speak', Call(Dog()))), 0)
        self.assertEqual(len(hierarchy.candidates('speak', Call(Dog()))), 1)
        self.assertEqual(hierarchy.candidates('speak', Call()), [])
