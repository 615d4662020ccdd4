"""
BeanContainerContext

This module wraps a BeanContainer with an application lifecycle:

- refresh(): registers the post-processors defined as beans, creates every
  non-lazy singleton and marks the context active
- start() / stop(): propagated to the beans implementing Lifecycle
- close(): stops the context and destroys every singleton

Example::

    container = BeanContainer()
    container.register_definition("server", BeanDefinitionBuilder.generic(HttpServer).get_bean_definition())

    with BeanContainerContext(container) as context:
        context.start()
        server = context.get("server")
    # close() is called automatically
"""

import logging
import threading
from typing import Any, List, Optional, Sequence, Type, TypeVar

from .container import BeanContainer
from .exceptions import BeansError, ContextNotActiveError
from .lifecycle import Lifecycle
from .post_processors import BeanPostProcessor, Ordered, PriorityOrdered

logger = logging.getLogger(__name__)

T = TypeVar('T')


def _order_of(processor: Any) -> int:
    if isinstance(processor, Ordered):
        return processor.get_order()
    return Ordered.LOWEST_PRECEDENCE


class BeanContainerContext:
    """Lifecycle wrapper around a BeanContainer.

    Attributes:
        container: The wrapped container
        _active: Whether refresh() completed and close() was not called yet
        _closed: Flag indicating if the context has been closed
        _started: Lifecycle beans started by start(), in start order

    Example::

        context = BeanContainerContext(container)
        context.refresh()
        try:
            service = context.get("service")
        finally:
            context.close()
    """

    def __init__(self, container: Optional[BeanContainer] = None):
        """Initialize a context around ``container``.

        Args:
            container: Container to manage; a fresh BeanContainer when omitted
        """
        self.container: BeanContainer = container if container is not None else BeanContainer()
        self._active = False
        self._closed = False
        self._started: List[Lifecycle] = []
        self._lock = threading.RLock()

    def refresh(self) -> None:
        """Register post-processor beans, create eager singletons and activate the context.

        Post-processors defined as beans are created first and registered
        in order: PriorityOrdered, then Ordered, then the rest. If anything
        fails, the singletons created so far are destroyed and the error is
        re-raised.

        Raises:
            ContextNotActiveError: When the context has already been closed
            BeansError: When a bean cannot be created
        """
        with self._lock:
            if self._closed:
                raise ContextNotActiveError("Cannot refresh a closed context")
            logger.debug("Refreshing %r", self)
            try:
                self._register_post_processors()
                self.container.pre_instantiate_singletons()
            except BeansError:
                logger.warning("Exception encountered during context refresh - destroying created singletons")
                self.container.destroy_all()
                raise
            self._active = True

    def _register_post_processors(self) -> None:
        names = self.container.get_bean_names_for_type(BeanPostProcessor, True, False)
        priority_ordered: List[BeanPostProcessor] = []
        ordered_names: List[str] = []
        plain_names: List[str] = []
        for name in names:
            if self.container.is_type_match(name, PriorityOrdered):
                priority_ordered.append(self.container.get(name, BeanPostProcessor))
            elif self.container.is_type_match(name, Ordered):
                ordered_names.append(name)
            else:
                plain_names.append(name)

        self._register_sorted(priority_ordered)
        self._register_sorted([self.container.get(name, BeanPostProcessor) for name in ordered_names])
        for name in plain_names:
            self.container.add_post_processor(self.container.get(name, BeanPostProcessor))

    def _register_sorted(self, processors: List[BeanPostProcessor]) -> None:
        for processor in sorted(processors, key=_order_of):
            self.container.add_post_processor(processor)

    def _ensure_active(self) -> None:
        if self._closed:
            raise ContextNotActiveError("This context has already been closed")
        if not self._active:
            raise ContextNotActiveError("This context has not been refreshed yet - call refresh() first")

    def get(self, name: str, required_type: Optional[Type[T]] = None,
            args: Optional[Sequence[Any]] = None) -> Any:
        """Return the bean named ``name`` from the container.

        Raises:
            ContextNotActiveError: When the context is not active
        """
        self._ensure_active()
        return self.container.get(name, required_type, args)

    def get_bean_by_type(self, required_type: Type[T]) -> T:
        self._ensure_active()
        return self.container.get_bean_by_type(required_type)

    def start(self) -> None:
        """Start every Lifecycle singleton that is not running yet, in registration order."""
        with self._lock:
            self._ensure_active()
            for bean in self.container.get_beans_of_type(Lifecycle, include_non_singletons=False).values():
                if not bean.is_running():
                    logger.debug("Starting bean %r", bean)
                    bean.start()
                if bean not in self._started:
                    self._started.append(bean)

    def stop(self) -> None:
        """Stop the running Lifecycle beans in reverse start order."""
        with self._lock:
            for bean in reversed(self._started):
                if bean.is_running():
                    logger.debug("Stopping bean %r", bean)
                    try:
                        bean.stop()
                    except Exception:
                        logger.warning("Failed to stop bean %r", bean, exc_info=True)
            self._started.clear()

    def is_running(self) -> bool:
        return any(bean.is_running() for bean in self._started)

    def close(self) -> None:
        """Stop the context and destroy every singleton.

        This method is idempotent - calling it multiple times has no effect.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            logger.info("Closing %r", self)
            self.stop()
            self.container.destroy_all()
            self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __enter__(self) -> 'BeanContainerContext':
        """Refresh the context unless it is active already.

        Returns:
            The BeanContainerContext instance itself
        """
        if not self._active:
            self.refresh()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(active={self._active}, container={self.container!r})"
