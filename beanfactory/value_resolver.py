"""
Value resolution

Turns the raw values stored in a definition (property values and
constructor arguments) into the objects that get injected:

- RuntimeBeanReference: the referenced bean, recording the dependency
- BeanDefinition: an inner bean, created for and contained by its owner
- list, tuple, set, dict: resolved element by element
- str: passed through the embedded value resolvers and the expression resolver
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, TYPE_CHECKING

from .definition import BeanDefinition, RootBeanDefinition, RuntimeBeanReference
from .exceptions import BeanCreationError, BeansError
from .lifecycle import SCOPE_PROTOTYPE
from .resolution_context import ResolutionContext

if TYPE_CHECKING:
    from .bean_factory import BeanFactory
    from .container import BeanContainer

logger = logging.getLogger(__name__)

INNER_BEAN_PREFIX = "(inner bean)#"


class BeanExpressionResolver(ABC):
    """Evaluates expressions embedded in definition string values.

    Example::

        class EnvResolver(BeanExpressionResolver):
            def evaluate(self, value, bean_factory):
                if value.startswith("env:"):
                    return os.environ[value[4:]]
                return value
    """

    @abstractmethod
    def evaluate(self, value: str, bean_factory: 'BeanFactory') -> Any:
        """Return the evaluated value, or ``value`` itself when it is not an expression."""


class BeanDefinitionValueResolver:
    """Resolves the values of one bean's definition during its creation.

    Attributes:
        bean_name: Bean whose values are being resolved
        definition: Its merged definition
        ctx: Resolution context of the current call chain
    """

    def __init__(self, container: 'BeanContainer', bean_name: str,
                 definition: RootBeanDefinition, ctx: ResolutionContext):
        self._container = container
        self.bean_name = bean_name
        self.definition = definition
        self.ctx = ctx

    def resolve_value_if_necessary(self, arg_name: str, value: Any) -> Any:
        """Resolve ``value`` for the property or argument ``arg_name``.

        Raises:
            BeanCreationError: When a referenced or inner bean cannot be created
        """
        if isinstance(value, RuntimeBeanReference):
            return self._resolve_reference(arg_name, value)
        if isinstance(value, BeanDefinition):
            inner_bean_name = f"{INNER_BEAN_PREFIX}{id(value):x}"
            return self._resolve_inner_bean(arg_name, inner_bean_name, value)
        if isinstance(value, str):
            return self._container.evaluate_bean_definition_string(value, self.definition)
        if isinstance(value, list):
            return [self.resolve_value_if_necessary(f"{arg_name}[{i}]", item) for i, item in enumerate(value)]
        if isinstance(value, tuple):
            return tuple(self.resolve_value_if_necessary(f"{arg_name}[{i}]", item) for i, item in enumerate(value))
        if isinstance(value, (set, frozenset)):
            return type(value)(self.resolve_value_if_necessary(f"{arg_name}[]", item) for item in value)
        if isinstance(value, dict):
            return {
                self.resolve_value_if_necessary(f"{arg_name} key", k):
                    self.resolve_value_if_necessary(f"{arg_name}[{k!r}]", v)
                for k, v in value.items()
            }
        return value

    def _resolve_reference(self, arg_name: str, ref: RuntimeBeanReference) -> Any:
        container = self._container
        try:
            if ref.to_parent:
                parent = container.get_parent_bean_factory()
                if parent is None:
                    raise BeanCreationError(
                        self.bean_name,
                        f"Cannot resolve reference to bean '{ref.bean_name}' in parent factory: "
                        f"no parent factory available",
                        self.definition.resource_description,
                    )
                return parent.get(ref.bean_name)
            bean = container.get(ref.bean_name)
            container.register_dependent_bean(ref.bean_name, self.bean_name)
            return bean
        except BeanCreationError as ex:
            if ex.bean_name == self.bean_name:
                raise
            raise BeanCreationError(
                self.bean_name,
                f"Cannot resolve reference to bean '{ref.bean_name}' while setting {arg_name}",
                self.definition.resource_description,
            ) from ex
        except BeansError as ex:
            raise BeanCreationError(
                self.bean_name,
                f"Cannot resolve reference to bean '{ref.bean_name}' while setting {arg_name}",
                self.definition.resource_description,
            ) from ex

    def _resolve_inner_bean(self, arg_name: str, inner_bean_name: str, inner: BeanDefinition) -> Any:
        container = self._container
        try:
            mbd = container.get_merged_inner_definition(inner_bean_name, inner)
            if not self.definition.is_singleton() and mbd.is_singleton():
                mbd = mbd.clone()
                mbd.scope = self.definition.scope if self.definition.scope else SCOPE_PROTOTYPE
            if self.definition.is_singleton():
                container.register_contained_bean(inner_bean_name, self.bean_name)
            for depends_on in mbd.depends_on or []:
                container.register_dependent_bean(depends_on, inner_bean_name)
                container.get(depends_on)
            inner_bean = container.create_inner_bean(inner_bean_name, mbd, self.ctx)
            return container.get_object_for_bean_instance(inner_bean, inner_bean_name, inner_bean_name, mbd)
        except BeansError as ex:
            raise BeanCreationError(
                self.bean_name,
                f"Cannot create inner bean '{inner_bean_name}' while setting {arg_name}",
                self.definition.resource_description,
            ) from ex
