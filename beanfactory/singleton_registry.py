"""
SingletonRegistry

This module provides the shared-instance registry of the container. It is
the part that makes circular singleton references possible and that keeps
singleton creation for one name from ever being observed half-done.

A bean name is in exactly one of three tiers at a time:

- absent
- early reference (a single-shot provider, or the object it produced)
- fully created

Promotion only moves forward: provider -> early reference -> fully
created. A failed creation evicts the name back to absent.

All cache mutation and the whole per-name creation sequence run under one
registry-wide reentrant lock. This serializes singleton construction
globally so no two threads can see different partial states of a bean.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Set

from .dependency_graph import DependencyGraph
from .early_reference import EarlyReferenceProvider
from .exceptions import (
    BeanCreationError,
    BeanCreationNotAllowedError,
    BeanCurrentlyInCreationError,
    BeanDefinitionStoreError,
)
from .lifecycle import DisposableBean

logger = logging.getLogger(__name__)

# Stored in place of None so a None-producing factory still counts as created
NULL_OBJECT = object()


class SingletonRegistry:
    """Three-tier singleton cache with a creation guard and ordered teardown.

    Attributes:
        graph: Dependency graph shared with the owning container
        _singleton_objects: Fully created singletons
        _early_singleton_objects: Early references already handed out
        _singleton_factories: Pending single-shot early-reference providers
        _registered_singletons: Names in registration order
        _disposable_beans: Teardown callbacks in registration order

    Example::

        registry = SingletonRegistry(DependencyGraph())
        service = registry.get_or_create_singleton("service", lambda: Service())
        registry.destroy_singletons()
    """

    def __init__(self, graph: Optional[DependencyGraph] = None):
        self.graph = graph if graph is not None else DependencyGraph()
        self._lock = threading.RLock()
        self._singleton_objects: Dict[str, Any] = {}
        self._early_singleton_objects: Dict[str, Any] = {}
        self._singleton_factories: Dict[str, EarlyReferenceProvider] = {}
        self._registered_singletons: Dict[str, None] = {}
        self._singletons_currently_in_creation: Set[str] = set()
        self._suppressed_exceptions: Optional[List[Exception]] = None
        self._singletons_currently_in_destruction = False
        self._disposable_beans: Dict[str, DisposableBean] = {}
        self._disposable_lock = threading.Lock()

    @property
    def lock(self) -> threading.RLock:
        """The registry-wide creation lock."""
        return self._lock

    def register_singleton(self, bean_name: str, singleton: Any) -> None:
        """Register an already created object under ``bean_name``.

        Raises:
            BeanDefinitionStoreError: When an object is already bound to the name
        """
        with self._lock:
            existing = self._singleton_objects.get(bean_name)
            if existing is not None:
                raise BeanDefinitionStoreError(
                    f"Could not register object [{singleton!r}]: "
                    f"there is already object [{existing!r}] bound",
                    bean_name=bean_name,
                )
            self.add_singleton(bean_name, singleton)

    def add_singleton(self, bean_name: str, singleton: Any) -> None:
        with self._lock:
            self._singleton_objects[bean_name] = NULL_OBJECT if singleton is None else singleton
            self._singleton_factories.pop(bean_name, None)
            self._early_singleton_objects.pop(bean_name, None)
            self._registered_singletons[bean_name] = None

    def add_singleton_factory(self, bean_name: str, provider: EarlyReferenceProvider) -> None:
        """Register the early-reference provider for a bean in creation."""
        with self._lock:
            if bean_name not in self._singleton_objects:
                self._singleton_factories[bean_name] = provider
                self._early_singleton_objects.pop(bean_name, None)
                self._registered_singletons[bean_name] = None

    def get_singleton(self, bean_name: str, allow_early_reference: bool = True) -> Any:
        """Return the fully created or early instance for ``bean_name``, or None.

        With ``allow_early_reference`` a pending provider fires once, its
        result is cached as the early reference and the provider is dropped.
        """
        singleton = self._singleton_objects.get(bean_name)
        if singleton is None and bean_name in self._singletons_currently_in_creation:
            with self._lock:
                # Creation may have completed in another thread while waiting
                singleton = self._singleton_objects.get(bean_name)
                if singleton is None:
                    singleton = self._early_singleton_objects.get(bean_name)
                if singleton is None and allow_early_reference:
                    provider = self._singleton_factories.get(bean_name)
                    if provider is not None:
                        singleton = provider.get()
                        self._early_singleton_objects[bean_name] = singleton
                        del self._singleton_factories[bean_name]
        return None if singleton is NULL_OBJECT else singleton

    def get_or_create_singleton(self, bean_name: str, factory: Callable[[], Any]) -> Any:
        """Return the singleton for ``bean_name``, creating it if needed.

        On failure any partial registration is evicted, the in-creation
        mark is cleared and errors suppressed during the attempt are
        attached to the raised BeanCreationError.

        Args:
            bean_name: Canonical bean name
            factory: Callable that runs the full creation pipeline

        Raises:
            BeanCreationNotAllowedError: While the registry is being destroyed
            BeanCurrentlyInCreationError: When the name is already in creation
        """
        with self._lock:
            singleton = self._singleton_objects.get(bean_name)
            if singleton is None:
                if self._singletons_currently_in_destruction:
                    raise BeanCreationNotAllowedError(
                        bean_name,
                        "Singleton bean creation not allowed while the singletons of this "
                        "factory are in destruction (Do not request a bean from a "
                        "BeanFactory in a destroy method implementation!)",
                    )
                logger.debug("Creating shared instance of singleton bean '%s'", bean_name)
                self.before_singleton_creation(bean_name)
                record_suppressed = self._suppressed_exceptions is None
                if record_suppressed:
                    self._suppressed_exceptions = []
                try:
                    singleton = factory()
                except Exception as ex:
                    self.destroy_singleton(bean_name)
                    if record_suppressed and isinstance(ex, BeanCreationError):
                        for suppressed in self._suppressed_exceptions:
                            if suppressed is not ex:
                                ex.add_related_cause(suppressed)
                    raise
                finally:
                    if record_suppressed:
                        self._suppressed_exceptions = None
                    self.after_singleton_creation(bean_name)
                self.add_singleton(bean_name, singleton)
                return singleton
            return None if singleton is NULL_OBJECT else singleton

    def on_suppressed_exception(self, ex: Exception) -> None:
        """Keep an error raised by a reentrant attempt during the current creation."""
        with self._lock:
            if self._suppressed_exceptions is not None:
                self._suppressed_exceptions.append(ex)

    def remove_singleton(self, bean_name: str) -> None:
        with self._lock:
            self._singleton_objects.pop(bean_name, None)
            self._singleton_factories.pop(bean_name, None)
            self._early_singleton_objects.pop(bean_name, None)
            self._registered_singletons.pop(bean_name, None)

    def contains_singleton(self, bean_name: str) -> bool:
        return bean_name in self._singleton_objects

    def get_singleton_names(self) -> List[str]:
        with self._lock:
            return list(self._registered_singletons)

    def get_singleton_count(self) -> int:
        with self._lock:
            return len(self._registered_singletons)

    def before_singleton_creation(self, bean_name: str) -> None:
        if bean_name in self._singletons_currently_in_creation:
            raise BeanCurrentlyInCreationError(bean_name)
        self._singletons_currently_in_creation.add(bean_name)

    def after_singleton_creation(self, bean_name: str) -> None:
        if bean_name not in self._singletons_currently_in_creation:
            raise RuntimeError(f"Singleton '{bean_name}' isn't currently in creation")
        self._singletons_currently_in_creation.discard(bean_name)

    def is_singleton_currently_in_creation(self, bean_name: str) -> bool:
        return bean_name in self._singletons_currently_in_creation

    def register_disposable_bean(self, bean_name: str, bean: DisposableBean) -> None:
        """Record the teardown callback for a bean that needs destruction."""
        with self._disposable_lock:
            self._disposable_beans[bean_name] = bean

    def get_disposable_bean_names(self) -> List[str]:
        with self._disposable_lock:
            return list(self._disposable_beans)

    def destroy_singletons(self) -> None:
        """Destroy all singletons in reverse registration order and clear every cache.

        New singleton creation is refused while this runs.
        """
        logger.info("Destroying singletons in %r", self)
        with self._lock:
            self._singletons_currently_in_destruction = True

        try:
            disposable_bean_names = self.get_disposable_bean_names()
            for bean_name in reversed(disposable_bean_names):
                self.destroy_singleton(bean_name)

            self.graph.clear()
        finally:
            with self._lock:
                self._singleton_objects.clear()
                self._singleton_factories.clear()
                self._early_singleton_objects.clear()
                self._registered_singletons.clear()
                self._singletons_currently_in_destruction = False

    def destroy_singleton(self, bean_name: str) -> None:
        """Remove ``bean_name`` from all caches and tear it down after its dependents."""
        self.remove_singleton(bean_name)
        with self._disposable_lock:
            disposable = self._disposable_beans.pop(bean_name, None)
        self._destroy_bean(bean_name, disposable)

    def _destroy_bean(self, bean_name: str, bean: Optional[DisposableBean]) -> None:
        dependents = self.graph.pop_dependents(bean_name)
        if dependents:
            logger.debug("Retrieved dependent beans for bean '%s': %s", bean_name, dependents)
            for dependent_bean_name in dependents:
                self.destroy_singleton(dependent_bean_name)

        if bean is not None:
            try:
                bean.destroy()
            except Exception:
                logger.warning("Destroy method on bean with name '%s' threw an exception",
                               bean_name, exc_info=True)

        for contained_bean_name in self.graph.pop_contained(bean_name):
            self.destroy_singleton(contained_bean_name)

        self.graph.purge(bean_name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(singletons={list(self._registered_singletons)})"
