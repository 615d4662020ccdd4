"""
InstantiationStrategy

Raw object construction once the container has chosen the constructor or
factory method and resolved its arguments. Two variants exist:

- SimpleInstantiationStrategy calls the executable directly
- SubclassingInstantiationStrategy first derives a subclass of the bean
  class whose lookup methods return beans from the container
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, FrozenSet, Sequence, Tuple, Type, TYPE_CHECKING

from .definition import RootBeanDefinition
from .exceptions import BeanCreationError
from .type_descriptor import ExecutableInfo

if TYPE_CHECKING:
    from .bean_factory import BeanFactory


class InstantiationStrategy(ABC):
    """Creates raw bean instances for the container."""

    @abstractmethod
    def instantiate(self, definition: RootBeanDefinition, bean_name: str, owner: 'BeanFactory',
                    constructor: ExecutableInfo, args: Sequence[Any], kwargs: Dict[str, Any]) -> Any:
        """Call ``constructor`` with the resolved arguments."""

    @abstractmethod
    def instantiate_with_factory_method(self, definition: RootBeanDefinition, bean_name: str,
                                        owner: 'BeanFactory', factory_bean: Any,
                                        factory_method: ExecutableInfo,
                                        args: Sequence[Any], kwargs: Dict[str, Any]) -> Any:
        """Call ``factory_method``, bound to ``factory_bean`` unless it is static."""


class SimpleInstantiationStrategy(InstantiationStrategy):
    """Calls constructors and factory methods as they are.

    Definitions with lookup overrides need SubclassingInstantiationStrategy.
    """

    def instantiate(self, definition, bean_name, owner, constructor, args, kwargs):
        if definition.lookup_overrides and constructor.target is definition.bean_class:
            return self.instantiate_with_method_injection(
                definition, bean_name, owner, constructor, args, kwargs)
        return constructor.target(*args, **kwargs)

    def instantiate_with_factory_method(self, definition, bean_name, owner, factory_bean,
                                        factory_method, args, kwargs):
        if factory_method.is_static:
            return factory_method.target(*args, **kwargs)
        return factory_method.target(factory_bean, *args, **kwargs)

    def instantiate_with_method_injection(self, definition: RootBeanDefinition, bean_name: str,
                                          owner: 'BeanFactory', constructor: ExecutableInfo,
                                          args: Sequence[Any], kwargs: Dict[str, Any]) -> Any:
        raise BeanCreationError(
            bean_name,
            "Method injection is not supported by SimpleInstantiationStrategy; "
            "use SubclassingInstantiationStrategy",
            definition.resource_description,
        )


class SubclassingInstantiationStrategy(SimpleInstantiationStrategy):
    """Supports lookup method injection by generating subclasses.

    For a definition with lookup overrides, a subclass of the bean class is
    created once per (class, overrides) pair. Each overridden method
    returns ``owner.get(bean_name)`` on every call, so a singleton can hand
    out fresh prototypes.

    Example::

        class CommandManager:
            def create_command(self) -> Command:
                raise NotImplementedError

        definition.add_lookup_override("create_command", "command")
    """

    def __init__(self):
        self._subclasses: Dict[Tuple[Type, FrozenSet[Tuple[str, str]], int], Type] = {}
        self._lock = threading.Lock()

    def instantiate_with_method_injection(self, definition, bean_name, owner, constructor, args, kwargs):
        subclass = self.enhanced_subclass(definition.bean_class, definition, owner)
        return subclass(*args, **kwargs)

    def enhanced_subclass(self, bean_class: Type, definition: RootBeanDefinition,
                          owner: 'BeanFactory') -> Type:
        """Return the generated subclass of ``bean_class`` for ``definition``'s overrides."""
        overrides = frozenset((o.method_name, o.bean_name) for o in definition.lookup_overrides.values())
        key = (bean_class, overrides, id(owner))
        with self._lock:
            subclass = self._subclasses.get(key)
            if subclass is None:
                namespace: Dict[str, Any] = {'__module__': bean_class.__module__}
                for method_name, target_bean in overrides:
                    namespace[method_name] = _lookup_method(owner, method_name, target_bean)
                subclass = type(bean_class.__name__, (bean_class,), namespace)
                subclass.__qualname__ = f"{bean_class.__qualname__}$$Lookup"
                self._subclasses[key] = subclass
            return subclass


def _lookup_method(owner: 'BeanFactory', method_name: str, bean_name: str) -> Callable[..., Any]:
    def lookup(self, *args):
        if args:
            return owner.get(bean_name, args=args)
        return owner.get(bean_name)

    lookup.__name__ = method_name
    return lookup
