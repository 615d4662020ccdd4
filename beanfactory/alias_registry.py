"""
AliasRegistry

Alternative names for beans. Every lookup, dependency edge and cache key
in the container uses the canonical name this registry resolves to.
"""

import logging
import threading
from typing import Dict, List

from .exceptions import BeanDefinitionStoreError

logger = logging.getLogger(__name__)


class AliasRegistry:
    """Thread-safe alias -> name map with cycle detection.

    Example::

        registry = AliasRegistry()
        registry.register_alias("dataSource", "db")
        registry.canonical_name("db")  # "dataSource"
    """

    def __init__(self):
        self._alias_map: Dict[str, str] = {}
        self._lock = threading.Lock()

    def register_alias(self, name: str, alias: str) -> None:
        """Register ``alias`` for ``name``.

        Args:
            name: The canonical (or another alias) name
            alias: The alias to add

        Raises:
            BeanDefinitionStoreError: When the alias would create a cycle
        """
        if not name or not alias:
            raise ValueError("'name' and 'alias' must not be empty")
        with self._lock:
            if alias == name:
                self._alias_map.pop(alias, None)
                return
            if self._has_alias(alias, name):
                raise BeanDefinitionStoreError(
                    f"Cannot register alias '{alias}' for name '{name}': "
                    f"circular reference - '{name}' is a direct or indirect alias for '{alias}' already"
                )
            registered = self._alias_map.get(alias)
            if registered is not None and registered != name:
                logger.info("Overriding alias '%s' definition for registered name '%s' with new target name '%s'",
                            alias, registered, name)
            self._alias_map[alias] = name

    def _has_alias(self, name: str, alias: str) -> bool:
        for registered_alias, registered_name in self._alias_map.items():
            if registered_name == name:
                if registered_alias == alias or self._has_alias(registered_alias, alias):
                    return True
        return False

    def remove_alias(self, alias: str) -> None:
        with self._lock:
            if self._alias_map.pop(alias, None) is None:
                raise KeyError(f"No alias '{alias}' registered")

    def is_alias(self, name: str) -> bool:
        return name in self._alias_map

    def get_aliases(self, name: str) -> List[str]:
        """Return every alias that resolves, directly or transitively, to ``name``."""
        with self._lock:
            result: List[str] = []
            self._collect_aliases(name, result)
            return result

    def _collect_aliases(self, name: str, result: List[str]) -> None:
        for alias, registered_name in self._alias_map.items():
            if registered_name == name:
                result.append(alias)
                self._collect_aliases(alias, result)

    def canonical_name(self, name: str) -> str:
        canonical = name
        while True:
            resolved = self._alias_map.get(canonical)
            if resolved is None:
                return canonical
            canonical = resolved
