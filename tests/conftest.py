"""
Test Configuration and Utilities

Common base classes and helper functions for beanfactory tests
"""

import unittest
from typing import Optional, Type

from beanfactory import BeanContainer, BeanDefinition, BeanDefinitionBuilder, ContainerConfig


class BeanContainerTestCase(unittest.TestCase):
    """
    Base test case class for beanfactory tests.

    Builds a fresh container before each test and destroys its
    singletons after each test.
    """

    config: Optional[ContainerConfig] = None

    def setUp(self):
        """Create a fresh container before each test"""
        self.container = BeanContainer(config=self.config)

    def tearDown(self):
        """Destroy all singletons after each test"""
        self.container.destroy_all()

    def register(self, name: str, bean_class: Type, **settings) -> BeanDefinition:
        """Register a generic definition for ``bean_class`` and return it."""
        definition = define(bean_class, **settings)
        self.container.register_definition(name, definition)
        return definition


def define(bean_class: Type, **settings) -> BeanDefinition:
    """
    Create a bean definition for ``bean_class`` with the given field values.

    Args:
        bean_class: Class to instantiate
        **settings: BeanDefinition fields, e.g. scope="prototype"

    Returns:
        A BeanDefinition

    Example:
        >>> container.register_definition("db", define(Database, lazy_init=True))
    """
    definition = BeanDefinitionBuilder.generic(bean_class).get_bean_definition()
    for name, value in settings.items():
        setattr(definition, name, value)
    return definition


def create_simple_container(*service_classes: Type) -> BeanContainer:
    """
    Create a container with one singleton definition per class.

    Each class is registered under its name with a lowercase first letter.

    Example:
        >>> container = create_simple_container(Database, CacheService)
        >>> container.get("database")
    """
    container = BeanContainer()
    for cls in service_classes:
        container.register_definition(bean_name_for(cls), define(cls))
    return container


def bean_name_for(cls: Type) -> str:
    return cls.__name__[0].lower() + cls.__name__[1:]
