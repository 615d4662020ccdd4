"""
EarlyReferenceProvider

Compute-once cell used to expose a singleton before it is fully
initialized, so circular references between singletons can be resolved.
"""

import threading
from typing import Any, Callable


class EarlyReferenceProvider:
    """Memoized, single-shot provider of an early bean reference.

    The supplier runs at most once; later calls return the same object.
    ``consumed`` tells the registry whether any other bean has already
    been handed the early reference.

    Example::

        provider = EarlyReferenceProvider(lambda: hooks.early_reference(raw, "a"))
        ref = provider.get()
        provider.get() is ref  # True
    """

    def __init__(self, supplier: Callable[[], Any]):
        self._supplier = supplier
        self._lock = threading.Lock()
        self._consumed = False
        self._value: Any = None

    def get(self) -> Any:
        with self._lock:
            if not self._consumed:
                self._value = self._supplier()
                self._consumed = True
                self._supplier = None
            return self._value

    @property
    def consumed(self) -> bool:
        return self._consumed
