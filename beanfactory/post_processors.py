"""
Post-processor contracts

Extension hooks the container calls around the creation of every bean.
Each contract provides no-op defaults, so an implementation only
overrides the stages it cares about.

Hook order for one bean:

1. InstantiationAwareBeanPostProcessor.post_process_before_instantiation
2. SmartInstantiationAwareBeanPostProcessor.determine_candidate_constructors
3. MergedBeanDefinitionPostProcessor.post_process_merged_bean_definition
   (once per definition)
4. InstantiationAwareBeanPostProcessor.post_process_after_instantiation
5. InstantiationAwareBeanPostProcessor.post_process_properties
6. BeanPostProcessor.post_process_before_initialization
7. init callbacks
8. BeanPostProcessor.post_process_after_initialization

DestructionAwareBeanPostProcessor.post_process_before_destruction runs
when the bean is destroyed.
"""

import sys
from typing import Any, List, Optional, Type, TYPE_CHECKING

if TYPE_CHECKING:
    from .definition import PropertyValues, RootBeanDefinition
    from .type_descriptor import ExecutableInfo


class Ordered:
    """Mixin for hooks that care about their position among their peers.

    Lower values run first. Hooks registered as beans are sorted by
    this order when a BeanContainerContext refreshes.
    """
    HIGHEST_PRECEDENCE = -sys.maxsize - 1
    LOWEST_PRECEDENCE = sys.maxsize

    def get_order(self) -> int:
        return Ordered.LOWEST_PRECEDENCE


class PriorityOrdered(Ordered):
    """Ordered hook that is registered before all plain Ordered ones."""
    pass


class BeanPostProcessor:
    """Hook around initialization of every bean.

    Returning None from either method keeps the current bean and skips
    the remaining post-processors of that stage.

    Example::

        class TimingPostProcessor(BeanPostProcessor):
            def post_process_after_initialization(self, bean, bean_name):
                return TimingProxy(bean) if bean_name.endswith("Service") else bean
    """

    def post_process_before_initialization(self, bean: Any, bean_name: str) -> Any:
        return bean

    def post_process_after_initialization(self, bean: Any, bean_name: str) -> Any:
        return bean


class InstantiationAwareBeanPostProcessor(BeanPostProcessor):
    """Hook around instantiation and property population."""

    def post_process_before_instantiation(self, bean_class: Type, bean_name: str) -> Any:
        """Return an object to use instead of creating the bean; None to continue."""
        return None

    def post_process_after_instantiation(self, bean: Any, bean_name: str) -> bool:
        """Return False to skip property population for this bean."""
        return True

    def post_process_properties(self, pvs: 'PropertyValues', bean: Any, bean_name: str) -> Optional['PropertyValues']:
        """Return the property values to apply; None skips property application."""
        return pvs


class SmartInstantiationAwareBeanPostProcessor(InstantiationAwareBeanPostProcessor):
    """Instantiation-aware hook that also takes part in type prediction,
    constructor selection and early reference exposure."""

    def predict_bean_type(self, bean_class: Type, bean_name: str) -> Optional[Type]:
        return None

    def determine_candidate_constructors(self, bean_class: Type, bean_name: str) -> Optional[List['ExecutableInfo']]:
        return None

    def get_early_bean_reference(self, bean: Any, bean_name: str) -> Any:
        """Return the reference handed to beans that need ``bean`` before it is initialized.

        Implementations that wrap beans in post_process_after_initialization
        should wrap here too, so circular partners receive the wrapper.
        """
        return bean


class MergedBeanDefinitionPostProcessor(BeanPostProcessor):
    """Hook that inspects a merged definition once, before its first instantiation."""

    def post_process_merged_bean_definition(self, definition: 'RootBeanDefinition',
                                            bean_type: Type, bean_name: str) -> None:
        pass

    def reset_bean_definition(self, bean_name: str) -> None:
        """Drop metadata kept for ``bean_name``; its definition was replaced or removed."""
        pass


class DestructionAwareBeanPostProcessor(BeanPostProcessor):
    """Hook called before a bean is destroyed."""

    def post_process_before_destruction(self, bean: Any, bean_name: str) -> None:
        pass

    def requires_destruction(self, bean: Any) -> bool:
        return True
