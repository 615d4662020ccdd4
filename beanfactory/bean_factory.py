"""
BeanFactory interfaces

Read-side contracts of a container. A BeanContainer implements all of
them; any object implementing BeanFactory can act as the parent of a
BeanContainer.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

T = TypeVar('T')


class BeanFactory(ABC):
    """Root interface for looking beans up by name."""

    @abstractmethod
    def get(self, name: str, required_type: Optional[Type[T]] = None,
            args: Optional[Sequence[Any]] = None) -> Any:
        """Return the bean registered under ``name``.

        Args:
            name: Bean name or alias; prefix with ``&`` to get a FactoryBean itself
            required_type: Type the bean must match (converted if possible)
            args: Explicit creation arguments (prototypes only)

        Raises:
            NoSuchBeanDefinitionError: When there is no bean with that name
            BeanNotOfRequiredTypeError: When the bean does not match ``required_type``
            BeansError: When the bean could not be created
        """

    @abstractmethod
    def contains_bean(self, name: str) -> bool:
        pass

    @abstractmethod
    def is_singleton(self, name: str) -> bool:
        pass

    @abstractmethod
    def is_prototype(self, name: str) -> bool:
        pass

    @abstractmethod
    def is_type_match(self, name: str, type_to_match: Type) -> bool:
        pass

    @abstractmethod
    def get_type(self, name: str, allow_factory_bean_init: bool = True) -> Optional[Type]:
        pass

    @abstractmethod
    def get_aliases(self, name: str) -> List[str]:
        pass


class HierarchicalBeanFactory(BeanFactory):
    """BeanFactory that can be part of a hierarchy."""

    @abstractmethod
    def get_parent_bean_factory(self) -> Optional[BeanFactory]:
        pass

    @abstractmethod
    def contains_local_bean(self, name: str) -> bool:
        """Whether this container, ignoring ancestors, holds a bean named ``name``."""


class ListableBeanFactory(BeanFactory):
    """BeanFactory that can enumerate its beans instead of only looking them up."""

    @abstractmethod
    def contains_definition(self, name: str) -> bool:
        pass

    @abstractmethod
    def get_definition_count(self) -> int:
        pass

    @abstractmethod
    def get_definition_names(self) -> List[str]:
        pass

    @abstractmethod
    def get_bean_names_for_type(self, bean_type: Optional[Type],
                                include_non_singletons: bool = True,
                                allow_eager_init: bool = True) -> List[str]:
        pass

    @abstractmethod
    def get_beans_of_type(self, bean_type: Optional[Type],
                          include_non_singletons: bool = True,
                          allow_eager_init: bool = True) -> Dict[str, Any]:
        pass


def bean_names_for_type_including_ancestors(
    factory: BeanFactory,
    bean_type: Optional[Type],
    include_non_singletons: bool = True,
    allow_eager_init: bool = True,
) -> List[str]:
    """Collect bean names for ``bean_type`` from ``factory`` and its ancestors.

    Names defined locally hide beans of the same name in a parent.
    """
    result: List[str] = []
    if isinstance(factory, ListableBeanFactory):
        result = list(factory.get_bean_names_for_type(bean_type, include_non_singletons, allow_eager_init))
    if isinstance(factory, HierarchicalBeanFactory):
        parent = factory.get_parent_bean_factory()
        if parent is not None:
            for name in bean_names_for_type_including_ancestors(
                    parent, bean_type, include_non_singletons, allow_eager_init):
                if name not in result and not factory.contains_local_bean(name):
                    result.append(name)
    return result
