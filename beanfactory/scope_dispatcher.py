"""
ScopeDispatcher

Routes a creation request to the handling of the definition's scope:

- singleton: through the SingletonRegistry (shared, cycle-aware)
- prototype: created every time; tracked as in creation for the calling
  resolution chain only
- any other name: through the registered custom Scope, with the same
  per-chain in-creation tracking as prototypes
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from .definition import RootBeanDefinition
from .exceptions import BeanDefinitionValidationError, NoSuchScopeError
from .lifecycle import SCOPE_PROTOTYPE, SCOPE_SINGLETON
from .resolution_context import ResolutionContext
from .scope import Scope
from .singleton_registry import SingletonRegistry

logger = logging.getLogger(__name__)


class ScopeDispatcher:
    """Registered custom scopes plus the scope routing of creation requests.

    Example::

        dispatcher = ScopeDispatcher(registry)
        dispatcher.register_scope("request", MapScope("req-1"))
        bean = dispatcher.create("ctx", merged, lambda: build(), resolution_context)
    """

    def __init__(self, registry: SingletonRegistry):
        self._registry = registry
        self._scopes: Dict[str, Scope] = {}
        self._lock = threading.Lock()

    def register_scope(self, scope_name: str, scope: Scope) -> None:
        """Register ``scope`` under ``scope_name``, replacing any previous one.

        Raises:
            BeanDefinitionValidationError: For the built-in "singleton" and "prototype" names
        """
        if not scope_name:
            raise ValueError("Scope name must not be empty")
        if scope_name in (SCOPE_SINGLETON, SCOPE_PROTOTYPE):
            raise BeanDefinitionValidationError(
                f"Cannot replace existing scopes 'singleton' and 'prototype' (got '{scope_name}')"
            )
        with self._lock:
            previous = self._scopes.get(scope_name)
            self._scopes[scope_name] = scope
        if previous is not None and previous is not scope:
            logger.debug("Replacing scope '%s' from [%r] to [%r]", scope_name, previous, scope)
        else:
            logger.debug("Registering scope '%s' with implementation [%r]", scope_name, scope)

    def get_registered_scope_names(self) -> List[str]:
        with self._lock:
            return list(self._scopes)

    def get_registered_scope(self, scope_name: str) -> Optional[Scope]:
        return self._scopes.get(scope_name)

    def get_scope(self, scope_name: str) -> Scope:
        """Return the registered scope.

        Raises:
            NoSuchScopeError: When nothing is registered under ``scope_name``
        """
        scope = self._scopes.get(scope_name)
        if scope is None:
            raise NoSuchScopeError(f"No Scope registered for scope name '{scope_name}'")
        return scope

    def create(
        self,
        bean_name: str,
        definition: RootBeanDefinition,
        create_bean: Callable[[], Any],
        ctx: ResolutionContext,
    ) -> Any:
        """Return the raw bean instance for ``definition``, creating it as its scope dictates.

        Args:
            bean_name: Canonical bean name
            definition: Merged definition of the bean
            create_bean: Runs the full creation pipeline and returns the bean
            ctx: Resolution context of the calling chain
        """
        if definition.is_singleton():
            return self._registry.get_or_create_singleton(bean_name, create_bean)

        if definition.is_prototype():
            return self._create_tracked(bean_name, create_bean, ctx)

        scope = self.get_scope(definition.scope)
        return scope.get(bean_name, lambda: self._create_tracked(bean_name, create_bean, ctx))

    @staticmethod
    def _create_tracked(bean_name: str, create_bean: Callable[[], Any], ctx: ResolutionContext) -> Any:
        ctx.before_prototype_creation(bean_name)
        try:
            return create_bean()
        finally:
            ctx.after_prototype_creation(bean_name)

    def remove_scoped_bean(self, bean_name: str, definition: RootBeanDefinition) -> Any:
        """Remove ``bean_name`` from its custom scope and return the instance, or None."""
        if definition.is_singleton() or definition.is_prototype():
            raise ValueError(f"Bean name '{bean_name}' does not correspond to an object in a mutable scope")
        scope = self.get_scope(definition.scope)
        return scope.remove(bean_name)
