"""
DefinitionMerger

Resolves a bean's parent chain into one merged RootBeanDefinition.

Merged definitions are cached per name, but only once the bean has had a
real creation attempt (it is "eligible"). Until then raw definitions may
still be mutated by callers and every lookup merges afresh.
"""

import logging
import threading
from typing import Callable, Dict, Optional, Set

from .definition import BeanDefinition, RootBeanDefinition
from .exceptions import BeanDefinitionStoreError, NoSuchBeanDefinitionError

logger = logging.getLogger(__name__)


class DefinitionMerger:
    """Builds and caches merged definitions for one container.

    Attributes:
        _merged: Cached merged definitions (eligible beans only)
        _already_created: Names that had at least one creation attempt

    Note:
        This class is used internally by BeanContainer. The two callables
        decouple it from the registry: ``local_lookup`` returns the raw
        local definition (or raises NoSuchBeanDefinitionError) and
        ``parent_lookup`` returns the merged definition from the parent
        container, or None when there is no parent.
    """

    def __init__(
        self,
        local_lookup: Callable[[str], BeanDefinition],
        contains_local: Callable[[str], bool],
        parent_lookup: Callable[[str], Optional[RootBeanDefinition]],
        canonical_name: Callable[[str], str],
    ):
        self._local_lookup = local_lookup
        self._contains_local = contains_local
        self._parent_lookup = parent_lookup
        self._canonical_name = canonical_name
        self._merged: Dict[str, RootBeanDefinition] = {}
        self._already_created: Set[str] = set()
        self._lock = threading.Lock()
        self.cache_bean_metadata = True

    def get_merged_definition(self, bean_name: str) -> RootBeanDefinition:
        """Return the merged definition for a locally defined bean.

        Raises:
            NoSuchBeanDefinitionError: When ``bean_name`` has no local definition
            BeanDefinitionStoreError: For a cyclic or unresolvable parent chain
        """
        merged = self._merged.get(bean_name)
        if merged is not None:
            return merged
        return self.merge(bean_name, self._local_lookup(bean_name))

    def merge(self, bean_name: str, definition: BeanDefinition,
              visiting: Optional[Set[str]] = None) -> RootBeanDefinition:
        """Merge ``definition`` with its parents, caching the result if eligible."""
        with self._lock:
            merged = self._merged.get(bean_name)
            if merged is not None:
                return merged
            return self._merge_unlocked(bean_name, definition, visiting if visiting is not None else set())

    def _merged_parent(self, bean_name: str, definition: BeanDefinition,
                       visiting: Set[str]) -> RootBeanDefinition:
        parent_name = self._canonical_name(definition.parent_name)
        if parent_name != bean_name and self._contains_local(parent_name):
            cached = self._merged.get(parent_name)
            if cached is not None:
                return cached
            try:
                raw_parent = self._local_lookup(parent_name)
            except NoSuchBeanDefinitionError as ex:
                raise BeanDefinitionStoreError(
                    f"Could not resolve parent bean definition '{definition.parent_name}'",
                    bean_name=bean_name,
                    resource_description=definition.resource_description,
                ) from ex
            return self._merge_unlocked(parent_name, raw_parent, visiting)

        if parent_name == bean_name and parent_name in visiting and len(visiting) > 1:
            raise BeanDefinitionStoreError(
                "Cyclic parent chain detected through a parent container",
                bean_name=bean_name,
                resource_description=definition.resource_description,
            )
        parent = self._parent_lookup(parent_name)
        if parent is None:
            if parent_name == bean_name:
                message = (f"Parent name '{parent_name}' is equal to bean name '{bean_name}': "
                           f"cannot be resolved without a parent container")
            else:
                message = f"Could not resolve parent bean definition '{definition.parent_name}'"
            raise BeanDefinitionStoreError(
                message,
                bean_name=bean_name,
                resource_description=definition.resource_description,
            )
        return parent

    def _merge_unlocked(self, bean_name: str, definition: BeanDefinition,
                        visiting: Set[str]) -> RootBeanDefinition:
        if bean_name in visiting:
            raise BeanDefinitionStoreError(
                f"Cyclic parent chain detected: {' -> '.join(sorted(visiting))} -> {bean_name}",
                bean_name=bean_name,
                resource_description=definition.resource_description,
            )
        visiting.add(bean_name)
        if definition.parent_name is None:
            merged = RootBeanDefinition(definition)
        else:
            parent = self._merged_parent(bean_name, definition, visiting)
            combined = BeanDefinition.clone(parent)
            combined.override_from(definition)
            merged = RootBeanDefinition(combined)
        if self.cache_bean_metadata and bean_name in self._already_created:
            self._merged[bean_name] = merged
        return merged

    def mark_bean_as_created(self, bean_name: str) -> None:
        """Make ``bean_name`` eligible for metadata caching.

        The merged definition is re-merged once, so any mutation of the raw
        definition made before the first creation attempt is picked up.
        """
        if bean_name not in self._already_created:
            with self._lock:
                if bean_name not in self._already_created:
                    self._merged.pop(bean_name, None)
                    self._already_created.add(bean_name)

    def clean_after_creation_failure(self, bean_name: str) -> None:
        with self._lock:
            self._already_created.discard(bean_name)

    def is_already_created(self, bean_name: str) -> bool:
        return bean_name in self._already_created

    def cached(self, bean_name: str) -> Optional[RootBeanDefinition]:
        return self._merged.get(bean_name)

    def reset(self, bean_name: str) -> None:
        """Drop the cached merged definition for ``bean_name``."""
        with self._lock:
            self._merged.pop(bean_name, None)

    def clear(self) -> None:
        """Drop every cached merged definition of a bean not yet created."""
        with self._lock:
            for name in list(self._merged):
                if name not in self._already_created:
                    del self._merged[name]
