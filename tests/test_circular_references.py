"""
Circular Reference Tests

Tests for resolving (and refusing) circular references:
- Singleton cycles through properties via early references
- Cycles disabled through ContainerConfig
- Constructor cycles and prototype self cycles
- Wrapped beans that were injected in their raw version
- Circular depends-on declarations
"""

import os
import sys
import unittest

# Add tests directory to path for local imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from beanfactory import (
    SCOPE_PROTOTYPE,
    AutowireMode,
    BeanContainer,
    BeanCreationError,
    BeanCurrentlyInCreationError,
    BeanPostProcessor,
    ContainerConfig,
    RuntimeBeanReference,
    SmartInstantiationAwareBeanPostProcessor,
    UnsatisfiedDependencyError,
)

from conftest import BeanContainerTestCase, define
from fixtures import ConstructorCycleA, ConstructorCycleB, SelfReferencing, ServiceA, ServiceB, Wrapper


class ServiceAWrapper(ServiceA, Wrapper):
    """Wrapper that still passes as a ServiceA"""


class WrapAfterInitialization(BeanPostProcessor):
    """Replaces one bean with a Wrapper after initialization"""

    def __init__(self, bean_name):
        self.bean_name = bean_name

    def post_process_after_initialization(self, bean, bean_name):
        if bean_name == self.bean_name:
            return ServiceAWrapper(bean)
        return bean


class EarlyWrapping(SmartInstantiationAwareBeanPostProcessor):
    """Wraps beans consistently, including early references"""

    def __init__(self, bean_name):
        self.bean_name = bean_name
        self.early_wrapped = {}

    def get_early_bean_reference(self, bean, bean_name):
        if bean_name != self.bean_name:
            return bean
        wrapper = ServiceAWrapper(bean)
        self.early_wrapped[bean_name] = wrapper
        return wrapper

    def post_process_after_initialization(self, bean, bean_name):
        if bean_name != self.bean_name or bean_name in self.early_wrapped:
            return bean
        return ServiceAWrapper(bean)


def register_property_cycle(container: BeanContainer, autowire: bool = False) -> None:
    if autowire:
        container.register_definition("a", define(ServiceA, autowire_mode=AutowireMode.BY_TYPE))
        container.register_definition("b", define(ServiceB, autowire_mode=AutowireMode.BY_TYPE))
        return
    a = define(ServiceA)
    a.property_values.add("service_b", RuntimeBeanReference("b"))
    b = define(ServiceB)
    b.property_values.add("service_a", RuntimeBeanReference("a"))
    container.register_definition("a", a)
    container.register_definition("b", b)


class TestSingletonPropertyCycle(BeanContainerTestCase):
    """Cycles through properties are resolved with early references"""

    def test_reference_cycle_resolved(self):
        register_property_cycle(self.container)

        a = self.container.get("a")

        self.assertIsInstance(a.service_b, ServiceB)
        self.assertIs(a.service_b.service_a, a)
        self.assertIs(self.container.get("b"), a.service_b)

    def test_autowired_cycle_resolved(self):
        register_property_cycle(self.container, autowire=True)

        b = self.container.get("b")

        self.assertIs(b.service_a.service_b, b)

    def test_cycle_records_both_edges(self):
        register_property_cycle(self.container)

        self.container.get("a")

        self.assertEqual(self.container.get_dependent_beans("a"), ["b"])
        self.assertEqual(self.container.get_dependent_beans("b"), ["a"])

    def test_nothing_left_in_creation(self):
        register_property_cycle(self.container)

        self.container.get("a")

        self.assertFalse(self.container.is_currently_in_creation("a"))
        self.assertFalse(self.container.is_currently_in_creation("b"))

    def test_destroy_all_after_cycle(self):
        register_property_cycle(self.container)
        self.container.get("a")

        self.container.destroy_all()

        self.assertEqual(self.container.get_singleton_count(), 0)


class TestCircularReferencesDisabled(BeanContainerTestCase):
    """With allow_circular_references=False a cycle is an error"""

    def setUp(self):
        self.container = BeanContainer(config=ContainerConfig(allow_circular_references=False))

    def test_cycle_raises(self):
        register_property_cycle(self.container)

        with self.assertRaises(BeanCreationError) as ctx:
            self.container.get("a")

        self.assertTrue(ctx.exception.contains(BeanCurrentlyInCreationError))

    def test_no_partial_singletons_remain(self):
        register_property_cycle(self.container)

        with self.assertRaises(BeanCreationError):
            self.container.get("a")

        self.assertFalse(self.container.contains_singleton("a"))
        self.assertFalse(self.container.contains_singleton("b"))

    def test_setter_can_reenable(self):
        self.container.set_allow_circular_references(True)
        register_property_cycle(self.container)

        a = self.container.get("a")

        self.assertIs(a.service_b.service_a, a)


class TestUnresolvableCycles(BeanContainerTestCase):
    """Cycles that no early reference can break"""

    def test_constructor_cycle(self):
        self.register("a", ConstructorCycleA)
        self.register("b", ConstructorCycleB)

        with self.assertRaises(BeanCreationError) as ctx:
            self.container.get("a")

        self.assertTrue(ctx.exception.contains(BeanCurrentlyInCreationError))

    def test_prototype_self_cycle(self):
        self.register("self", SelfReferencing, scope=SCOPE_PROTOTYPE)

        with self.assertRaises(BeanCreationError) as ctx:
            self.container.get("self")

        self.assertIsInstance(ctx.exception, UnsatisfiedDependencyError)
        self.assertTrue(ctx.exception.contains(BeanCurrentlyInCreationError))
        self.assertIsInstance(ctx.exception.get_most_specific_cause(), BeanCurrentlyInCreationError)

    def test_prototype_property_cycle(self):
        a = define(ServiceA, scope=SCOPE_PROTOTYPE)
        a.property_values.add("service_b", RuntimeBeanReference("b"))
        b = define(ServiceB, scope=SCOPE_PROTOTYPE)
        b.property_values.add("service_a", RuntimeBeanReference("a"))
        self.container.register_definition("a", a)
        self.container.register_definition("b", b)

        with self.assertRaises(BeanCreationError) as ctx:
            self.container.get("a")

        self.assertTrue(ctx.exception.contains(BeanCurrentlyInCreationError))

    def test_prototype_can_be_created_again_after_failure(self):
        self.register("self", SelfReferencing, scope=SCOPE_PROTOTYPE)
        with self.assertRaises(BeanCreationError):
            self.container.get("self")

        with self.assertRaises(BeanCreationError) as ctx:
            self.container.get("self")

        self.assertIn("currently in creation", str(ctx.exception.get_most_specific_cause()))

    def test_circular_depends_on(self):
        self.register("a", ServiceA, depends_on=["b"])
        self.register("b", ServiceB, depends_on=["a"])

        with self.assertRaises(BeanCreationError) as ctx:
            self.container.get("a")

        self.assertIn("Circular depends-on", str(ctx.exception.get_most_specific_cause()))


class TestWrappedEarlyReferences(BeanContainerTestCase):
    """A bean wrapped after being injected raw is detected"""

    def test_raw_injection_detected(self):
        self.container.add_post_processor(WrapAfterInitialization("a"))
        register_property_cycle(self.container)

        with self.assertRaises(BeanCurrentlyInCreationError) as ctx:
            self.container.get("a")

        self.assertEqual(ctx.exception.bean_name, "a")
        self.assertIn("[b]", str(ctx.exception))

    def test_raw_injection_tolerated_when_allowed(self):
        self.container.set_allow_raw_injection_despite_wrapping(True)
        self.container.add_post_processor(WrapAfterInitialization("a"))
        register_property_cycle(self.container)

        a = self.container.get("a")

        self.assertIsInstance(a, Wrapper)
        self.assertIs(a.target.service_b.service_a, a.target)

    def test_early_reference_wrapping_is_consistent(self):
        """The early reference becomes the final bean"""
        processor = EarlyWrapping("a")
        self.container.add_post_processor(processor)
        register_property_cycle(self.container)

        a = self.container.get("a")

        self.assertIsInstance(a, Wrapper)
        self.assertIs(a, processor.early_wrapped["a"])
        self.assertIs(self.container.get("b").service_a, a)

    def test_early_reference_created_once(self):
        calls = []

        class Counting(SmartInstantiationAwareBeanPostProcessor):
            def get_early_bean_reference(self, bean, bean_name):
                calls.append(bean_name)
                return bean

        self.container.add_post_processor(Counting())
        register_property_cycle(self.container)

        self.container.get("a")

        self.assertEqual(calls, ["a"])


if __name__ == '__main__':
    unittest.main()
