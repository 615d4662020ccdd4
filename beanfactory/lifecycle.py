"""
Lifecycle

Scope names, autowire and dependency-check modes, and the callback
contracts a bean may implement to take part in its own lifecycle
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .bean_factory import BeanFactory


SCOPE_SINGLETON = "singleton"
SCOPE_PROTOTYPE = "prototype"

# Prefix that dereferences a FactoryBean: "&name" returns the factory itself
FACTORY_BEAN_PREFIX = "&"

# destroy_method_name value that asks the container to look for close()/shutdown()
INFER_METHOD = "(inferred)"


class AutowireMode(Enum):
    """How a definition's unset dependencies are filled in"""
    NO = "no"
    BY_NAME = "byName"
    BY_TYPE = "byType"
    CONSTRUCTOR = "constructor"


class DependencyCheck(Enum):
    """Which unset properties count as an error after autowiring"""
    NONE = "none"
    OBJECTS = "objects"
    SIMPLE = "simple"
    ALL = "all"


class InitializingBean(ABC):
    """Bean that wants a callback once all its properties are set."""

    @abstractmethod
    def after_properties_set(self) -> None:
        pass


class DisposableBean(ABC):
    """Bean that releases resources when the container destroys it."""

    @abstractmethod
    def destroy(self) -> None:
        pass


class BeanNameAware(ABC):
    """Bean that wants to know the name it is registered under."""

    @abstractmethod
    def set_bean_name(self, name: str) -> None:
        pass


class BeanFactoryAware(ABC):
    """Bean that wants a reference to the container that owns it."""

    @abstractmethod
    def set_bean_factory(self, bean_factory: 'BeanFactory') -> None:
        pass


class Lifecycle(ABC):
    """Bean with an explicit start/stop phase, driven by BeanContainerContext.

    Example::

        class Poller(Lifecycle):
            def start(self): self._running = True
            def stop(self): self._running = False
            def is_running(self): return self._running
    """

    @abstractmethod
    def start(self) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass

    @abstractmethod
    def is_running(self) -> bool:
        pass
