"""
Definition Value Tests

Tests for the values a definition supplies explicitly:
- References to other beans, and inner beans
- Collections of references
- Conversion of configured strings to the declared type
- Embedded value resolvers and the expression resolver
- Indexed and named constructor arguments
- Lookup method injection and instance suppliers
"""

import enum
import os
import sys
import unittest
from typing import Dict, List

# Add tests directory to path for local imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from beanfactory import (
    SCOPE_PROTOTYPE,
    BeanCreationError,
    BeanDefinition,
    BeanDefinitionBuilder,
    BeanDefinitionStoreError,
    BeanExpressionResolver,
    NoSuchBeanDefinitionError,
    RuntimeBeanReference,
    SimpleInstantiationStrategy,
    TypeMismatchError,
)

from conftest import BeanContainerTestCase, define
from fixtures import (
    CacheService,
    Command,
    CommandManager,
    Connection,
    Database,
    EmailSender,
    EventLog,
    MessageSender,
    Recorder,
    ReportService,
    ServiceWithDefaults,
    SmsSender,
    UserRepository,
)


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"


class Settings:
    enabled: bool = False
    retries: int = 0
    color: Color = None


class SenderRegistry:
    senders: List[MessageSender] = None
    by_channel: Dict[str, MessageSender] = None


class RecorderHolder:
    recorder: Recorder = None


class ReadOnly:
    @property
    def name(self) -> str:
        return "fixed"


class BeanReferenceExpressions(BeanExpressionResolver):
    """Evaluates '#{name}' to the bean called name"""

    def evaluate(self, value, bean_factory):
        if value.startswith("#{") and value.endswith("}"):
            return bean_factory.get(value[2:-1])
        return value


class TestBeanReferences(BeanContainerTestCase):
    """Tests for RuntimeBeanReference and inner bean values"""

    def test_reference_is_resolved_and_recorded(self):
        self.register("db", Database)
        report = self.register("report", ReportService)
        report.property_values.add("database", RuntimeBeanReference("db"))

        bean = self.container.get("report")

        self.assertIs(bean.database, self.container.get("db"))
        self.assertEqual(self.container.get_dependent_beans("db"), ["report"])

    def test_missing_reference(self):
        report = self.register("report", ReportService)
        report.property_values.add("database", RuntimeBeanReference("missing"))

        with self.assertRaises(BeanCreationError) as ctx:
            self.container.get("report")

        self.assertEqual(ctx.exception.bean_name, "report")
        self.assertIn("Cannot resolve reference to bean 'missing'", str(ctx.exception))
        self.assertIn("bean property 'database'", str(ctx.exception))
        self.assertTrue(ctx.exception.contains(NoSuchBeanDefinitionError))

    def test_inner_bean_is_not_a_named_bean(self):
        report = self.register("report", ReportService)
        report.property_values.add("database", BeanDefinition(bean_class=Database))

        bean = self.container.get("report")

        self.assertIsInstance(bean.database, Database)
        self.assertEqual(self.container.get_bean_names_for_type(Database), [])
        self.assertEqual(self.container.get_definition_names(), ["report"])

    def test_inner_bean_destroyed_with_owner(self):
        log = EventLog()
        self.container.register_singleton("log", log)
        holder = self.register("holder", RecorderHolder)
        holder.property_values.add("recorder", define(Recorder))
        self.container.get("holder")

        self.container.destroy("holder")

        self.assertEqual(len(log.events), 2)
        self.assertTrue(log.events[0].startswith("init:(inner bean)#"))
        self.assertTrue(log.events[1].startswith("destroy:(inner bean)#"))

    def test_list_and_dict_of_references(self):
        self.register("email", EmailSender)
        self.register("sms", SmsSender)
        registry = self.register("registry", SenderRegistry)
        registry.property_values.add("senders", [RuntimeBeanReference("sms"), RuntimeBeanReference("email")])
        registry.property_values.add("by_channel", {"mail": RuntimeBeanReference("email")})

        bean = self.container.get("registry")

        self.assertEqual([type(s) for s in bean.senders], [SmsSender, EmailSender])
        self.assertIs(bean.by_channel["mail"], self.container.get("email"))


class TestConversion(BeanContainerTestCase):
    """Configured values are converted to the declared property type"""

    def test_string_to_scalars(self):
        settings = self.register("settings", Settings)
        settings.property_values.add("enabled", "yes")
        settings.property_values.add("retries", "25")

        bean = self.container.get("settings")

        self.assertIs(bean.enabled, True)
        self.assertEqual(bean.retries, 25)

    def test_string_to_enum_by_name_or_value(self):
        by_name = self.register("by_name", Settings)
        by_name.property_values.add("color", "RED")
        by_value = self.register("by_value", Settings)
        by_value.property_values.add("color", "green")

        self.assertIs(self.container.get("by_name").color, Color.RED)
        self.assertIs(self.container.get("by_value").color, Color.GREEN)

    def test_unconvertible_value(self):
        report = self.register("report", ReportService)
        report.property_values.add("page_size", "abc")

        with self.assertRaises(BeanCreationError) as ctx:
            self.container.get("report")

        self.assertTrue(ctx.exception.contains(TypeMismatchError))
        self.assertFalse(self.container.contains_singleton("report"))

    def test_read_only_property(self):
        self.register("bean", ReadOnly).property_values.add("name", "changed")

        with self.assertRaises(BeanCreationError) as ctx:
            self.container.get("bean")

        self.assertIn("not writable", str(ctx.exception))


class TestStringResolution(BeanContainerTestCase):
    """Tests for embedded value resolvers and the expression resolver"""

    def test_embedded_value_resolver(self):
        self.container.add_embedded_value_resolver(lambda value: value.replace("${title}", "Quarterly"))
        self.register("report", ReportService).property_values.add("title", "${title} report")

        self.assertEqual(self.container.get("report").title, "Quarterly report")

    def test_resolvers_run_in_order(self):
        self.container.add_embedded_value_resolver(lambda value: value + "-a")
        self.container.add_embedded_value_resolver(lambda value: value + "-b")

        self.assertEqual(self.container.resolve_embedded_value("x"), "x-a-b")

    def test_expression_resolver(self):
        self.container.set_bean_expression_resolver(BeanReferenceExpressions())
        self.register("db", Database)
        self.register("report", ReportService).property_values.add("database", "#{db}")

        self.assertIs(self.container.get("report").database, self.container.get("db"))

    def test_expression_sees_resolved_placeholders(self):
        self.container.add_embedded_value_resolver(lambda value: value.replace("${target}", "db"))
        self.container.set_bean_expression_resolver(BeanReferenceExpressions())
        self.register("db", Database)
        self.register("report", ReportService).property_values.add("database", "#{${target}}")

        self.assertIs(self.container.get("report").database, self.container.get("db"))


class TestConstructorArguments(BeanContainerTestCase):
    """Tests for explicit constructor arguments"""

    def test_named_argument_replaces_default(self):
        self.register("db", Database)
        self.container.register_definition(
            "service",
            BeanDefinitionBuilder.generic(ServiceWithDefaults)
            .add_named_constructor_arg("timeout", "45")
            .get_bean_definition(),
        )

        service = self.container.get("service")

        self.assertEqual(service.timeout, 45)
        self.assertEqual(service.name, "default")

    def test_indexed_reference_picks_candidate(self):
        self.register("primary_db", Database)
        self.register("audit_db", Database)
        self.register("cache", CacheService)
        self.container.register_definition(
            "repo",
            BeanDefinitionBuilder.generic(UserRepository).add_constructor_arg_reference("audit_db").get_bean_definition(),
        )

        repo = self.container.get("repo")

        self.assertIs(repo.db, self.container.get("audit_db"))
        self.assertIs(repo.cache, self.container.get("cache"))

    def test_instance_supplier(self):
        self.container.register_definition(
            "conn",
            BeanDefinitionBuilder.generic(Connection)
            .set_instance_supplier(lambda: Connection("supplied://"))
            .get_bean_definition(),
        )

        self.assertEqual(self.container.get("conn").url, "supplied://")


class TestLookupMethodInjection(BeanContainerTestCase):
    """A singleton can hand out fresh prototypes through a lookup method"""

    def register_manager(self):
        self.register("command", Command, scope=SCOPE_PROTOTYPE)
        self.container.register_definition(
            "manager",
            BeanDefinitionBuilder.generic(CommandManager)
            .add_lookup_override("create_command", "command")
            .get_bean_definition(),
        )

    def test_lookup_returns_fresh_prototypes(self):
        self.register_manager()
        manager = self.container.get("manager")

        first = manager.process("a")
        second = manager.process("b")

        self.assertIsInstance(manager, CommandManager)
        self.assertIsInstance(first, Command)
        self.assertIsNot(first, second)
        self.assertEqual((first.state, second.state), ("a", "b"))

    def test_override_of_missing_method(self):
        self.container.register_definition(
            "manager",
            BeanDefinitionBuilder.generic(CommandManager)
            .add_lookup_override("build_command", "command")
            .get_bean_definition(),
        )

        with self.assertRaises(BeanDefinitionStoreError) as ctx:
            self.container.get("manager")

        self.assertIn("method overrides", str(ctx.exception))

    def test_override_with_factory_method_rejected(self):
        definition = (BeanDefinitionBuilder.generic(CommandManager)
                      .set_factory_method("create")
                      .add_lookup_override("create_command", "command")
                      .get_bean_definition())

        with self.assertRaises(BeanDefinitionStoreError):
            self.container.register_definition("manager", definition)

    def test_simple_strategy_cannot_inject_methods(self):
        self.container.set_instantiation_strategy(SimpleInstantiationStrategy())
        self.register_manager()

        with self.assertRaises(BeanCreationError) as ctx:
            self.container.get("manager")

        self.assertIn("Method injection is not supported", str(ctx.exception))


if __name__ == '__main__':
    unittest.main()
