"""
Post-Processor Tests

Tests for the hooks the container runs around bean creation:
- Before/after initialization, including replacing the bean
- Instantiation-aware hooks (short-circuit, skipping population, editing values)
- Merged definition hooks
- Destruction-aware hooks
- Errors raised by hooks
"""

import os
import sys
import unittest

# Add tests directory to path for local imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from beanfactory import (
    SCOPE_PROTOTYPE,
    BeanCreationError,
    BeanPostProcessor,
    DestructionAwareBeanPostProcessor,
    InstantiationAwareBeanPostProcessor,
    MergedBeanDefinitionPostProcessor,
    SmartInstantiationAwareBeanPostProcessor,
)

from conftest import BeanContainerTestCase
from fixtures import Database, EmailSender, EventLog, FailingService, Recorder, ReportService, SmsSender


class RecordingProcessor(BeanPostProcessor):
    """Records both initialization stages in an EventLog"""

    def __init__(self, log: EventLog, tag: str = ""):
        self.log = log
        self.tag = tag

    def post_process_before_initialization(self, bean, bean_name):
        self.log.record(f"before{self.tag}:{bean_name}")
        return bean

    def post_process_after_initialization(self, bean, bean_name):
        self.log.record(f"after{self.tag}:{bean_name}")
        return bean


class Marked:
    def __init__(self, target):
        self.target = target


class MarkingProcessor(BeanPostProcessor):
    def post_process_after_initialization(self, bean, bean_name):
        return Marked(bean) if isinstance(bean, Database) else bean


class NoneReturningProcessor(BeanPostProcessor):
    def post_process_after_initialization(self, bean, bean_name):
        return None


class Exploding(BeanPostProcessor):
    def post_process_before_initialization(self, bean, bean_name):
        raise ValueError("nope")


class Rejecting(BeanPostProcessor):
    def post_process_before_initialization(self, bean, bean_name):
        try:
            raise ValueError("missing license key")
        except ValueError as ex:
            raise BeanCreationError(bean_name, "rejected by license check") from ex


class TestInitializationHooks(BeanContainerTestCase):
    """Tests for post_process_before/after_initialization"""

    def setUp(self):
        super().setUp()
        self.log = EventLog()
        self.container.register_singleton("log", self.log)

    def test_hooks_surround_init_callback(self):
        self.container.add_post_processor(RecordingProcessor(self.log))
        self.register("recorder", Recorder)

        self.container.get("recorder")

        self.assertEqual(self.log.events, ["before:recorder", "init:recorder", "after:recorder"])

    def test_processors_run_in_registration_order(self):
        self.container.add_post_processor(RecordingProcessor(self.log, "1"))
        self.container.add_post_processor(RecordingProcessor(self.log, "2"))
        self.register("db", Database)

        self.container.get("db")

        self.assertEqual(self.log.events, ["before1:db", "before2:db", "after1:db", "after2:db"])

    def test_re_adding_moves_processor_to_end(self):
        first = RecordingProcessor(self.log, "1")
        second = RecordingProcessor(self.log, "2")
        self.container.add_post_processor(first)
        self.container.add_post_processor(second)
        self.container.add_post_processor(first)

        self.assertEqual(self.container.get_post_processors(), [second, first])
        self.assertEqual(self.container.get_post_processor_count(), 2)

    def test_replacing_the_bean(self):
        self.container.add_post_processor(MarkingProcessor())
        self.register("db", Database)

        bean = self.container.get("db")

        self.assertIsInstance(bean, Marked)
        self.assertIsInstance(bean.target, Database)
        self.assertIs(self.container.get("db"), bean)

    def test_returning_none_keeps_current_bean(self):
        self.container.add_post_processor(NoneReturningProcessor())
        self.register("db", Database)

        self.assertIsInstance(self.container.get("db"), Database)

    def test_processor_only_sees_later_beans(self):
        self.register("db", Database)
        self.container.get("db")

        self.container.add_post_processor(RecordingProcessor(self.log))
        self.container.get("db")

        self.assertEqual(self.log.events, [])

    def test_failing_processor_aborts_creation(self):
        self.container.add_post_processor(Exploding())
        self.register("db", Database)

        with self.assertRaises(BeanCreationError) as ctx:
            self.container.get("db")

        self.assertEqual(ctx.exception.bean_name, "db")
        self.assertIn("Exploding", str(ctx.exception))
        self.assertTrue(ctx.exception.contains(ValueError))
        self.assertFalse(self.container.contains_singleton("db"))

    def test_creation_error_for_same_bean_is_not_rewrapped(self):
        self.container.add_post_processor(Rejecting())
        self.register("db", Database)

        with self.assertRaises(BeanCreationError) as ctx:
            self.container.get("db")

        self.assertIn("rejected by license check", str(ctx.exception))
        self.assertNotIn("Rejecting", str(ctx.exception))
        self.assertIsNot(ctx.exception.__cause__, ctx.exception)
        self.assertIsInstance(ctx.exception.get_root_cause(), ValueError)

    def test_facade_applies_hooks_to_existing_objects(self):
        self.container.add_post_processor(MarkingProcessor())
        db = Database()

        self.assertIs(self.container.apply_before_initialization(db, "db"), db)
        self.assertIsInstance(self.container.apply_after_initialization(db, "db"), Marked)


class Substituting(InstantiationAwareBeanPostProcessor):
    """Returns a ready-made object instead of letting the container create one"""

    def __init__(self, bean_name, substitute):
        self.bean_name = bean_name
        self.substitute = substitute
        self.seen_classes = []

    def post_process_before_instantiation(self, bean_class, bean_name):
        if bean_name == self.bean_name:
            self.seen_classes.append(bean_class)
            return self.substitute
        return None


class SkippingPopulation(InstantiationAwareBeanPostProcessor):
    def post_process_after_instantiation(self, bean, bean_name):
        return False


class EditingProperties(InstantiationAwareBeanPostProcessor):
    def post_process_properties(self, pvs, bean, bean_name):
        if isinstance(bean, ReportService):
            pvs.add("title", "Edited")
        return pvs


class DroppingProperties(InstantiationAwareBeanPostProcessor):
    def post_process_properties(self, pvs, bean, bean_name):
        return None


class PredictingSms(SmartInstantiationAwareBeanPostProcessor):
    def predict_bean_type(self, bean_class, bean_name):
        return SmsSender if bean_name == "sender" else None


class TestInstantiationHooks(BeanContainerTestCase):
    """Tests for InstantiationAwareBeanPostProcessor"""

    def test_before_instantiation_short_circuits(self):
        substitute = Database()
        processor = Substituting("service", substitute)
        self.container.add_post_processor(processor)
        self.register("service", FailingService)

        self.assertIs(self.container.get("service"), substitute)
        self.assertEqual(processor.seen_classes, [FailingService])

    def test_short_circuited_bean_still_gets_after_initialization(self):
        self.container.add_post_processor(Substituting("service", Database()))
        self.container.add_post_processor(MarkingProcessor())
        self.register("service", FailingService)

        self.assertIsInstance(self.container.get("service"), Marked)

    def test_after_instantiation_can_skip_population(self):
        self.container.add_post_processor(SkippingPopulation())
        definition = self.register("report", ReportService)
        definition.property_values.add("title", "Monthly")

        self.assertIsNone(self.container.get("report").title)

    def test_post_process_properties_can_add_values(self):
        self.container.add_post_processor(EditingProperties())
        definition = self.register("report", ReportService)
        definition.property_values.add("page_size", 50)

        report = self.container.get("report")

        self.assertEqual(report.title, "Edited")
        self.assertEqual(report.page_size, 50)

    def test_post_process_properties_can_drop_all_values(self):
        self.container.add_post_processor(DroppingProperties())
        definition = self.register("report", ReportService)
        definition.property_values.add("title", "Monthly")

        self.assertIsNone(self.container.get("report").title)

    def test_predicted_type_is_used_for_type_lookups(self):
        self.container.add_post_processor(PredictingSms())
        self.register("sender", EmailSender)

        self.assertIs(self.container.get_type("sender"), SmsSender)
        self.assertEqual(self.container.get_bean_names_for_type(SmsSender), ["sender"])


class CountingMergedDefinitions(MergedBeanDefinitionPostProcessor):
    def __init__(self):
        self.processed = []
        self.reset = []

    def post_process_merged_bean_definition(self, definition, bean_type, bean_name):
        self.processed.append((bean_name, bean_type))

    def reset_bean_definition(self, bean_name):
        self.reset.append(bean_name)


class TestMergedDefinitionHooks(BeanContainerTestCase):
    """Tests for MergedBeanDefinitionPostProcessor"""

    def test_runs_once_per_definition(self):
        processor = CountingMergedDefinitions()
        self.container.add_post_processor(processor)
        self.register("db", Database, scope=SCOPE_PROTOTYPE)

        self.container.get("db")
        self.container.get("db")

        self.assertEqual(processor.processed, [("db", Database)])

    def test_notified_when_definition_is_replaced(self):
        processor = CountingMergedDefinitions()
        self.container.add_post_processor(processor)
        self.register("db", Database)
        self.container.get("db")

        self.register("db", Database)

        self.assertEqual(processor.reset, ["db"])


class RecordingDestruction(DestructionAwareBeanPostProcessor):
    def __init__(self, log: EventLog, only=None):
        self.log = log
        self.only = only

    def post_process_before_destruction(self, bean, bean_name):
        self.log.record(f"before-destroy:{bean_name}")

    def requires_destruction(self, bean):
        return self.only is None or isinstance(bean, self.only)


class TestDestructionHooks(BeanContainerTestCase):
    """Tests for DestructionAwareBeanPostProcessor"""

    def setUp(self):
        super().setUp()
        self.log = EventLog()
        self.container.register_singleton("log", self.log)

    def test_runs_before_destroy_callback(self):
        self.container.add_post_processor(RecordingDestruction(self.log))
        self.register("recorder", Recorder)
        self.container.get("recorder")

        self.container.destroy_all()

        self.assertEqual(self.log.events, ["init:recorder", "before-destroy:recorder", "destroy:recorder"])

    def test_makes_plain_beans_disposable(self):
        self.container.add_post_processor(RecordingDestruction(self.log))
        self.register("db", Database)
        self.container.get("db")

        self.container.destroy_all()

        self.assertEqual(self.log.events, ["before-destroy:db"])

    def test_requires_destruction_filters_beans(self):
        self.container.add_post_processor(RecordingDestruction(self.log, only=Recorder))
        self.register("db", Database)
        self.container.get("db")

        self.container.destroy_all()

        self.assertEqual(self.log.events, [])


if __name__ == '__main__':
    unittest.main()
