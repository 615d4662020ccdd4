"""
BeanDefinitionBuilder

This module provides a fluent builder for BeanDefinition objects.

The builder is the programmatic way to describe beans: configuration
loaders and tests create definitions with it and register them on a
BeanContainer. Every setter returns the builder so calls can be chained.

Example::

    definition = (
        BeanDefinitionBuilder.generic(UserRepository)
        .add_property_reference("db", "database")
        .set_init_method_name("connect")
        .get_bean_definition()
    )
    container.register_definition("userRepository", definition)
"""

from typing import Any, Optional, Type, Union

from .definition import BeanDefinition, RuntimeBeanReference
from .lifecycle import SCOPE_PROTOTYPE, SCOPE_SINGLETON, AutowireMode, DependencyCheck


class BeanDefinitionBuilder:
    """Fluent builder for BeanDefinition.

    Attributes:
        _definition: The definition under construction

    Note:
        ``get_bean_definition()`` returns the definition itself, not a copy;
        create a new builder for each definition.
    """

    def __init__(self, definition: Optional[BeanDefinition] = None):
        """Initialize the builder.

        Args:
            definition: Existing definition to keep configuring (optional)
        """
        self._definition = definition if definition is not None else BeanDefinition()
        self._constructor_arg_index = 0

    @classmethod
    def generic(cls, bean_class: Optional[Union[Type, str]] = None) -> 'BeanDefinitionBuilder':
        """Start a definition for ``bean_class``.

        Args:
            bean_class: Class or dotted class path (optional for abstract parents)

        Returns:
            A new builder
        """
        return cls(BeanDefinition(bean_class=bean_class))

    @classmethod
    def child(cls, parent_name: str) -> 'BeanDefinitionBuilder':
        """Start a definition that inherits from ``parent_name``.

        Args:
            parent_name: Name of the parent definition

        Returns:
            A new builder
        """
        return cls(BeanDefinition(parent_name=parent_name))

    def set_bean_class(self, bean_class: Union[Type, str]) -> 'BeanDefinitionBuilder':
        self._definition.bean_class = bean_class
        return self

    def set_parent_name(self, parent_name: str) -> 'BeanDefinitionBuilder':
        self._definition.parent_name = parent_name
        return self

    def set_scope(self, scope: str) -> 'BeanDefinitionBuilder':
        self._definition.scope = scope
        return self

    def singleton(self) -> 'BeanDefinitionBuilder':
        return self.set_scope(SCOPE_SINGLETON)

    def prototype(self) -> 'BeanDefinitionBuilder':
        return self.set_scope(SCOPE_PROTOTYPE)

    def set_abstract(self, abstract: bool = True) -> 'BeanDefinitionBuilder':
        self._definition.abstract = abstract
        return self

    def set_lazy_init(self, lazy_init: bool = True) -> 'BeanDefinitionBuilder':
        self._definition.lazy_init = lazy_init
        return self

    def set_primary(self, primary: bool = True) -> 'BeanDefinitionBuilder':
        self._definition.primary = primary
        return self

    def set_autowire_candidate(self, candidate: bool) -> 'BeanDefinitionBuilder':
        self._definition.autowire_candidate = candidate
        return self

    def set_autowire_mode(self, mode: AutowireMode) -> 'BeanDefinitionBuilder':
        self._definition.autowire_mode = mode
        return self

    def set_dependency_check(self, check: DependencyCheck) -> 'BeanDefinitionBuilder':
        self._definition.dependency_check = check
        return self

    def add_depends_on(self, bean_name: str) -> 'BeanDefinitionBuilder':
        if self._definition.depends_on is None:
            self._definition.depends_on = []
        self._definition.depends_on.append(bean_name)
        return self

    def set_factory_method(
        self,
        factory_method_name: str,
        factory_bean_name: Optional[str] = None
    ) -> 'BeanDefinitionBuilder':
        """Create the bean by calling a factory method.

        Args:
            factory_method_name: Static/class method on the bean class, or an
                instance method on ``factory_bean_name``
            factory_bean_name: Bean whose method produces this bean (optional)
        """
        self._definition.factory_method_name = factory_method_name
        self._definition.factory_bean_name = factory_bean_name
        return self

    def set_instance_supplier(self, supplier) -> 'BeanDefinitionBuilder':
        self._definition.instance_supplier = supplier
        return self

    def set_init_method_name(self, name: str, enforce: bool = True) -> 'BeanDefinitionBuilder':
        self._definition.init_method_name = name
        self._definition.enforce_init_method = enforce
        return self

    def set_destroy_method_name(self, name: str, enforce: bool = True) -> 'BeanDefinitionBuilder':
        self._definition.destroy_method_name = name
        self._definition.enforce_destroy_method = enforce
        return self

    def add_property_value(self, name: str, value: Any) -> 'BeanDefinitionBuilder':
        self._definition.property_values.add(name, value)
        return self

    def add_property_reference(self, name: str, bean_name: str) -> 'BeanDefinitionBuilder':
        self._definition.property_values.add(name, RuntimeBeanReference(bean_name))
        return self

    def add_constructor_arg_value(self, value: Any, type: Optional[Type] = None) -> 'BeanDefinitionBuilder':
        """Add the next positional constructor argument."""
        self._definition.constructor_arguments.add_indexed(self._constructor_arg_index, value, type)
        self._constructor_arg_index += 1
        return self

    def add_constructor_arg_reference(self, bean_name: str) -> 'BeanDefinitionBuilder':
        """Add the next positional constructor argument as a bean reference."""
        return self.add_constructor_arg_value(RuntimeBeanReference(bean_name))

    def add_named_constructor_arg(self, name: str, value: Any) -> 'BeanDefinitionBuilder':
        self._definition.constructor_arguments.add_generic(value, name=name)
        return self

    def add_lookup_override(self, method_name: str, bean_name: str) -> 'BeanDefinitionBuilder':
        self._definition.add_lookup_override(method_name, bean_name)
        return self

    def set_synthetic(self, synthetic: bool = True) -> 'BeanDefinitionBuilder':
        self._definition.synthetic = synthetic
        return self

    def set_resource_description(self, description: str) -> 'BeanDefinitionBuilder':
        self._definition.resource_description = description
        return self

    def set_attribute(self, key: str, value: Any) -> 'BeanDefinitionBuilder':
        self._definition.attributes[key] = value
        return self

    def get_bean_definition(self) -> BeanDefinition:
        """Return the configured definition.

        Returns:
            The BeanDefinition built so far
        """
        return self._definition
