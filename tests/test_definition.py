"""
Bean Definition Tests

Tests for definitions and their parent chains:
- BeanDefinitionBuilder
- Inheriting settings, properties and arguments from a parent definition
- Abstract template definitions
- Cyclic and unresolvable parent chains
- Parents defined in a parent container
- Caching of merged definitions
"""

import os
import sys
import unittest

# Add tests directory to path for local imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from beanfactory import (
    SCOPE_PROTOTYPE,
    SCOPE_SINGLETON,
    AutowireMode,
    BeanContainer,
    BeanDefinition,
    BeanDefinitionBuilder,
    BeanDefinitionStoreError,
    BeanIsAbstractError,
    ConstructorArgumentValues,
    DependencyCheck,
    PropertyValues,
    RootBeanDefinition,
    RuntimeBeanReference,
)

from conftest import BeanContainerTestCase, define
from fixtures import CacheService, Connection, Database, EventLog, Recorder, ReportService


class TestBeanDefinitionBuilder(unittest.TestCase):
    """Tests for the fluent builder"""

    def test_builder_sets_fields(self):
        definition = (
            BeanDefinitionBuilder.generic(ReportService)
            .prototype()
            .set_lazy_init()
            .set_primary()
            .add_depends_on("db")
            .add_property_value("title", "Monthly")
            .add_property_reference("database", "db")
            .set_init_method_name("setup", enforce=False)
            .set_resource_description("reports.yaml")
            .get_bean_definition()
        )

        self.assertIs(definition.bean_class, ReportService)
        self.assertEqual(definition.scope, SCOPE_PROTOTYPE)
        self.assertTrue(definition.lazy_init)
        self.assertTrue(definition.primary)
        self.assertEqual(definition.depends_on, ["db"])
        self.assertEqual(definition.property_values.get("title").value, "Monthly")
        self.assertEqual(definition.property_values.get("database").value, RuntimeBeanReference("db"))
        self.assertFalse(definition.enforce_init_method)
        self.assertEqual(definition.resource_description, "reports.yaml")

    def test_constructor_args_are_indexed_in_order(self):
        definition = (
            BeanDefinitionBuilder.generic(Connection)
            .add_constructor_arg_value("a")
            .add_constructor_arg_reference("b")
            .get_bean_definition()
        )

        self.assertEqual(definition.constructor_arguments.get_indexed(0).value, "a")
        self.assertEqual(definition.constructor_arguments.get_indexed(1).value, RuntimeBeanReference("b"))

    def test_child_builder(self):
        definition = BeanDefinitionBuilder.child("base").get_bean_definition()

        self.assertEqual(definition.parent_name, "base")
        self.assertIsNone(definition.bean_class)

    def test_builder_sets_wiring_fields(self):
        definition = (
            BeanDefinitionBuilder.generic(EventLog)
            .set_parent_name("base")
            .set_abstract()
            .set_autowire_candidate(False)
            .set_autowire_mode(AutowireMode.BY_NAME)
            .set_dependency_check(DependencyCheck.OBJECTS)
            .set_destroy_method_name("close", enforce=False)
            .set_synthetic()
            .set_attribute("owner", "billing")
            .get_bean_definition()
        )

        self.assertEqual(definition.parent_name, "base")
        self.assertTrue(definition.abstract)
        self.assertFalse(definition.autowire_candidate)
        self.assertEqual(definition.autowire_mode, AutowireMode.BY_NAME)
        self.assertEqual(definition.dependency_check, DependencyCheck.OBJECTS)
        self.assertEqual(definition.destroy_method_name, "close")
        self.assertFalse(definition.enforce_destroy_method)
        self.assertTrue(definition.synthetic)
        self.assertEqual(definition.attributes, {"owner": "billing"})


class TestValueContainers(unittest.TestCase):
    """Tests for PropertyValues and ConstructorArgumentValues"""

    def test_property_values_replace_in_place(self):
        pvs = PropertyValues({"a": 1, "b": 2})
        pvs.add("a", 3)

        self.assertEqual(pvs.names(), ["a", "b"])
        self.assertEqual(pvs.get("a").value, 3)
        self.assertIn("b", pvs)
        self.assertEqual(len(pvs), 2)

    def test_generic_argument_replaced_by_name(self):
        args = ConstructorArgumentValues()
        args.add_generic("x", name="url")
        args.add_generic("y", name="url")

        self.assertEqual(len(args.generic), 1)
        self.assertEqual(args.generic[0].value, "y")

    def test_negative_index_rejected(self):
        with self.assertRaises(ValueError):
            ConstructorArgumentValues().add_indexed(-1, "x")

    def test_clone_does_not_share_values(self):
        definition = define(ReportService)
        definition.property_values.add("title", "a")

        copy = definition.clone()
        copy.property_values.add("title", "b")

        self.assertEqual(definition.property_values.get("title").value, "a")

    def test_root_definition_defaults(self):
        merged = RootBeanDefinition(BeanDefinition(bean_class=Database))

        self.assertEqual(merged.scope, SCOPE_SINGLETON)
        self.assertFalse(merged.lazy_init)
        self.assertFalse(merged.primary)
        self.assertTrue(merged.autowire_candidate)
        self.assertEqual(merged.autowire_mode, AutowireMode.NO)
        self.assertEqual(merged.dependency_check, DependencyCheck.NONE)


class TestParentDefinitions(BeanContainerTestCase):
    """Tests for merging child definitions over their parents"""

    def test_child_inherits_class_and_properties(self):
        parent = self.register("base", ReportService)
        parent.property_values.add("title", "Base")
        parent.property_values.add("page_size", 20)
        self.container.register_definition(
            "child", BeanDefinitionBuilder.child("base").add_property_value("title", "Child").get_bean_definition())

        child = self.container.get("child")

        self.assertIsInstance(child, ReportService)
        self.assertEqual(child.title, "Child")
        self.assertEqual(child.page_size, 20)
        self.assertEqual(self.container.get("base").title, "Base")

    def test_merged_property_order_follows_parent(self):
        parent = self.register("base", ReportService)
        parent.property_values.add("title", "Base")
        parent.property_values.add("page_size", 20)
        self.container.register_definition(
            "child", BeanDefinitionBuilder.child("base").add_property_value("title", "Child").get_bean_definition())

        merged = self.container.get_merged_bean_definition("child")

        self.assertEqual(merged.property_values.names(), ["title", "page_size"])
        self.assertIsNone(merged.parent_name)

    def test_abstract_template_without_class(self):
        template = BeanDefinition(abstract=True)
        template.property_values.add("page_size", 99)
        self.container.register_definition("template", template)
        self.container.register_definition(
            "report", BeanDefinitionBuilder.child("template").set_bean_class(ReportService).get_bean_definition())

        self.assertEqual(self.container.get("report").page_size, 99)
        with self.assertRaises(BeanIsAbstractError):
            self.container.get("template")

    def test_abstract_parent_is_not_a_type_candidate(self):
        self.register("base", ReportService, abstract=True)
        self.container.register_definition("child", BeanDefinitionBuilder.child("base").get_bean_definition())

        self.assertEqual(self.container.get_bean_names_for_type(ReportService), ["child"])

    def test_child_inherits_scope_unless_set(self):
        self.register("base", Database, scope=SCOPE_PROTOTYPE)
        self.container.register_definition("inherits", BeanDefinitionBuilder.child("base").get_bean_definition())
        self.container.register_definition(
            "overrides", BeanDefinitionBuilder.child("base").singleton().get_bean_definition())

        self.assertTrue(self.container.is_prototype("inherits"))
        self.assertTrue(self.container.is_singleton("overrides"))

    def test_child_overrides_constructor_argument(self):
        self.register("base", Connection, abstract=True).constructor_arguments.add_indexed(0, "parent://")
        child = BeanDefinitionBuilder.child("base").get_bean_definition()
        child.constructor_arguments.add_indexed(0, "child://")
        self.container.register_definition("conn", child)

        self.assertEqual(self.container.get("conn").url, "child://")

    def test_child_inherits_lifecycle_settings(self):
        log = EventLog()
        self.container.register_singleton("log", log)
        self.register("base", Recorder, abstract=True, depends_on=["db"])
        self.register("db", Database)
        self.container.register_definition("recorder", BeanDefinitionBuilder.child("base").get_bean_definition())

        self.container.get("recorder")

        self.assertTrue(self.container.contains_singleton("db"))
        self.assertEqual(log.events, ["init:recorder"])

    def test_child_can_use_alias_of_parent(self):
        self.register("base", Database)
        self.container.register_alias("base", "template")
        self.container.register_definition("child", BeanDefinitionBuilder.child("template").get_bean_definition())

        self.assertIsInstance(self.container.get("child"), Database)


class TestInvalidParentChains(BeanContainerTestCase):
    """Tests for parent chains that cannot be merged"""

    def test_cyclic_parent_chain(self):
        self.container.register_definition("a", BeanDefinitionBuilder.child("b").get_bean_definition())
        self.container.register_definition("b", BeanDefinitionBuilder.child("a").get_bean_definition())

        with self.assertRaises(BeanDefinitionStoreError) as ctx:
            self.container.get("a")

        self.assertIn("Cyclic parent chain", str(ctx.exception))

    def test_missing_parent(self):
        self.container.register_definition("child", BeanDefinitionBuilder.child("missing").get_bean_definition())

        with self.assertRaises(BeanDefinitionStoreError) as ctx:
            self.container.get("child")

        self.assertEqual(ctx.exception.bean_name, "child")
        self.assertIn("missing", str(ctx.exception))

    def test_parent_named_like_child_without_parent_container(self):
        self.container.register_definition("db", BeanDefinitionBuilder.child("db").get_bean_definition())

        with self.assertRaises(BeanDefinitionStoreError) as ctx:
            self.container.get("db")

        self.assertIn("is equal to bean name", str(ctx.exception))

    def test_resource_description_in_message(self):
        definition = BeanDefinitionBuilder.child("missing").set_resource_description("beans.yaml").get_bean_definition()
        self.container.register_definition("child", definition)

        with self.assertRaises(BeanDefinitionStoreError) as ctx:
            self.container.get("child")

        self.assertIn("defined in beans.yaml", str(ctx.exception))


class TestParentInParentContainer(unittest.TestCase):
    """Parents may live in the parent container"""

    def setUp(self):
        self.parent = BeanContainer()
        self.child = BeanContainer(parent=self.parent)

    def tearDown(self):
        self.child.destroy_all()
        self.parent.destroy_all()

    def test_parent_definition_from_parent_container(self):
        base = define(ReportService, abstract=True)
        base.property_values.add("title", "From parent")
        self.parent.register_definition("base", base)
        self.child.register_definition("report", BeanDefinitionBuilder.child("base").get_bean_definition())

        self.assertEqual(self.child.get("report").title, "From parent")

    def test_same_name_refers_to_parent_container(self):
        """A child definition may extend the parent container's definition of the same name"""
        base = define(ReportService)
        base.property_values.add("title", "Parent")
        self.parent.register_definition("report", base)
        self.child.register_definition(
            "report", BeanDefinitionBuilder.child("report").add_property_value("page_size", 5).get_bean_definition())

        report = self.child.get("report")

        self.assertEqual(report.title, "Parent")
        self.assertEqual(report.page_size, 5)
        self.assertIsNot(report, self.parent.get("report"))


class TestMergedDefinitionCache(BeanContainerTestCase):
    """Merged definitions are cached once a bean has been created"""

    def test_raw_changes_visible_before_creation(self):
        definition = self.register("db", Database)
        before = self.container.get_merged_bean_definition("db")

        definition.lazy_init = True
        after = self.container.get_merged_bean_definition("db")

        self.assertFalse(before.lazy_init)
        self.assertTrue(after.lazy_init)

    def test_cached_after_creation(self):
        self.register("db", Database)
        self.container.get("db")

        self.assertIs(self.container.get_merged_bean_definition("db"),
                      self.container.get_merged_bean_definition("db"))

    def test_not_cached_when_disabled(self):
        self.container.set_cache_bean_metadata(False)
        self.register("db", Database)
        self.container.get("db")

        self.assertIsNot(self.container.get_merged_bean_definition("db"),
                         self.container.get_merged_bean_definition("db"))

    def test_replacing_parent_resets_children(self):
        base = self.register("base", ReportService)
        base.property_values.add("title", "Old")
        self.container.register_definition("child", BeanDefinitionBuilder.child("base").get_bean_definition())
        old_child = self.container.get("child")

        replacement = define(ReportService)
        replacement.property_values.add("title", "New")
        self.container.register_definition("base", replacement)

        new_child = self.container.get("child")
        self.assertEqual(old_child.title, "Old")
        self.assertEqual(new_child.title, "New")

    def test_merged_definition_is_independent_copy(self):
        definition = self.register("cache", CacheService)
        merged = self.container.get_merged_bean_definition("cache")

        merged.property_values.add("cache", {})

        self.assertTrue(definition.property_values.is_empty())


if __name__ == '__main__':
    unittest.main()
