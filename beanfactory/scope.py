"""
Scope

Contract for custom scopes, and two implementations:

- MapScope: one instance per bean name until the scope is closed
  (e.g. one HTTP request or one unit of work)
- ThreadScope: one instance per bean name per thread
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

from .exceptions import ScopeNotActiveError

logger = logging.getLogger(__name__)


class Scope(ABC):
    """Strategy that decides when a scoped bean is created and reused.

    The container calls ``get`` with an object factory that runs the
    full creation pipeline; the scope decides whether to call it.
    """

    @abstractmethod
    def get(self, name: str, object_factory: Callable[[], Any]) -> Any:
        """Return the scoped object for ``name``, creating it with ``object_factory`` if needed."""

    @abstractmethod
    def remove(self, name: str) -> Optional[Any]:
        """Remove and return the scoped object for ``name``, or None."""

    @abstractmethod
    def register_destruction_callback(self, name: str, callback: Callable[[], None]) -> None:
        """Run ``callback`` when the scoped object for ``name`` is destroyed."""

    def get_conversation_id(self) -> Optional[str]:
        return None


class MapScope(Scope):
    """Scope backed by a dict, alive until ``close()``.

    Closing runs the registered destruction callbacks in reverse
    creation order and releases every cached instance. A closed scope
    refuses to create beans.

    Attributes:
        scope_id: Identifier for this scope instance
        _instances: Cached scoped instances by bean name
        _destruction_callbacks: Teardown callbacks by bean name
        _closed: Whether this scope has been closed

    Example::

        request_scope = MapScope("req-123")
        container.register_scope("request", request_scope)
        with request_scope:
            ctx = container.get("requestContext")
        # request_scope closed, destroy callbacks ran
    """

    def __init__(self, scope_id: Optional[str] = None):
        """Initialize a new, open scope instance.

        Args:
            scope_id: Identifier for this scope instance (optional)
        """
        self.scope_id = scope_id
        self._instances: Dict[str, Any] = {}
        self._destruction_callbacks: Dict[str, Callable[[], None]] = {}
        self._lock = threading.RLock()
        self._local = threading.local()
        self._closed = False

    def _ensure_not_closed(self, name: str) -> None:
        """Ensure the scope is not closed.

        Raises:
            ScopeNotActiveError: When the scope has been closed
        """
        if self._closed:
            raise ScopeNotActiveError(
                name,
                f"Scope '{self.scope_id}' has been closed. "
                "Cannot create beans in a closed scope."
            )

    def get(self, name: str, object_factory: Callable[[], Any]) -> Any:
        """Return the instance for ``name``, building it with ``object_factory`` if needed.

        The factory runs without the scope lock held. When two threads build
        the same name at once, the first one stored wins; the other instance
        is destroyed through the callback it registered and never handed out.
        """
        with self._lock:
            self._ensure_not_closed(name)
            if name in self._instances:
                return self._instances[name]

        building = self._building()
        building[name] = None
        try:
            instance = object_factory()
        finally:
            callback = building.pop(name, None)

        stored = False
        current = None
        with self._lock:
            if not self._closed:
                stored = name not in self._instances
                current = self._instances.setdefault(name, instance)
                if stored and callback is not None:
                    self._destruction_callbacks[name] = callback
        if not stored:
            self._discard(name, callback)
            self._ensure_not_closed(name)
        return current

    def _building(self) -> Dict[str, Optional[Callable[[], None]]]:
        building = getattr(self._local, 'building', None)
        if building is None:
            building = {}
            self._local.building = building
        return building

    @staticmethod
    def _discard(name: str, callback: Optional[Callable[[], None]]) -> None:
        logger.debug("Discarding unstored instance of scoped bean '%s'", name)
        if callback is None:
            return
        try:
            callback()
        except Exception:
            logger.warning("Destruction callback for scoped bean '%s' failed", name, exc_info=True)

    def remove(self, name: str) -> Optional[Any]:
        with self._lock:
            self._destruction_callbacks.pop(name, None)
            return self._instances.pop(name, None)

    def register_destruction_callback(self, name: str, callback: Callable[[], None]) -> None:
        building = self._building()
        if name in building:
            building[name] = callback
            return
        with self._lock:
            self._destruction_callbacks[name] = callback

    def get_conversation_id(self) -> Optional[str]:
        return self.scope_id

    def close(self) -> None:
        """Close this scope, run destruction callbacks and release all cached instances.

        This method is idempotent.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            callbacks: List[Tuple[str, Callable[[], None]]] = list(self._destruction_callbacks.items())
            self._destruction_callbacks.clear()
            self._instances.clear()
        for name, callback in reversed(callbacks):
            try:
                callback()
            except Exception:
                logger.warning("Destruction callback for scoped bean '%s' failed", name, exc_info=True)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __enter__(self) -> 'MapScope':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False


class ThreadScope(Scope):
    """Scope with one instance per bean name per thread.

    Destruction callbacks are not supported: threads end without
    notice. Register such beans with an explicit destroy path instead.
    """

    def __init__(self):
        self._local = threading.local()

    def _instances(self) -> Dict[str, Any]:
        instances = getattr(self._local, 'instances', None)
        if instances is None:
            instances = {}
            self._local.instances = instances
        return instances

    def get(self, name: str, object_factory: Callable[[], Any]) -> Any:
        instances = self._instances()
        if name not in instances:
            instances[name] = object_factory()
        return instances[name]

    def remove(self, name: str) -> Optional[Any]:
        return self._instances().pop(name, None)

    def register_destruction_callback(self, name: str, callback: Callable[[], None]) -> None:
        logger.warning("ThreadScope does not support destruction callbacks. "
                       "Consider using a MapScope for bean '%s'.", name)

    def get_conversation_id(self) -> Optional[str]:
        return threading.current_thread().name
