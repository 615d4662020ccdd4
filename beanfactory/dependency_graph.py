"""
DependencyGraph

Records which bean depends on which, as real injections happen. The
destruction order of the container is derived from these edges.
"""

import threading
from typing import Dict, List, Set


class DependencyGraph:
    """Two adjacency maps plus the contained-bean map.

    - dependents-of(X): beans that were given X
    - dependencies-of(Y): beans that Y was given
    - contained-in(Z): inner beans that only exist as part of Z

    Edges are only recorded for injections that actually happened.
    All maps are guarded by a single lock that is never held while
    calling back into the container.
    """

    def __init__(self):
        self._dependent_beans: Dict[str, Dict[str, None]] = {}
        self._dependencies_for_bean: Dict[str, Dict[str, None]] = {}
        self._contained_beans: Dict[str, Dict[str, None]] = {}
        self._lock = threading.Lock()

    def register_dependent(self, bean_name: str, dependent_bean_name: str) -> None:
        """Record that ``dependent_bean_name`` depends on ``bean_name``.

        Args:
            bean_name: The bean that was injected / required
            dependent_bean_name: The bean that received it
        """
        with self._lock:
            self._dependent_beans.setdefault(bean_name, {})[dependent_bean_name] = None
            self._dependencies_for_bean.setdefault(dependent_bean_name, {})[bean_name] = None

    def remove_dependent(self, bean_name: str, dependent_bean_name: str) -> None:
        """Drop a single edge recorded by register_dependent()."""
        with self._lock:
            for source, target, key in ((self._dependent_beans, bean_name, dependent_bean_name),
                                        (self._dependencies_for_bean, dependent_bean_name, bean_name)):
                entries = source.get(target)
                if entries is not None:
                    entries.pop(key, None)
                    if not entries:
                        del source[target]

    def register_contained(self, contained_bean_name: str, containing_bean_name: str) -> None:
        """Record an inner bean; the container also depends on it."""
        with self._lock:
            self._contained_beans.setdefault(containing_bean_name, {})[contained_bean_name] = None
        self.register_dependent(contained_bean_name, containing_bean_name)

    def is_dependent(self, bean_name: str, dependent_bean_name: str) -> bool:
        """Whether ``dependent_bean_name`` depends on ``bean_name``, directly or transitively."""
        with self._lock:
            return self._is_dependent(bean_name, dependent_bean_name, set())

    def _is_dependent(self, bean_name: str, dependent_bean_name: str, seen: Set[str]) -> bool:
        if bean_name in seen:
            return False
        seen.add(bean_name)
        dependents = self._dependent_beans.get(bean_name)
        if not dependents:
            return False
        if dependent_bean_name in dependents:
            return True
        return any(self._is_dependent(d, dependent_bean_name, seen) for d in dependents)

    def has_dependents(self, bean_name: str) -> bool:
        with self._lock:
            return bool(self._dependent_beans.get(bean_name))

    def get_dependents(self, bean_name: str) -> List[str]:
        with self._lock:
            return list(self._dependent_beans.get(bean_name, ()))

    def get_dependencies(self, bean_name: str) -> List[str]:
        with self._lock:
            return list(self._dependencies_for_bean.get(bean_name, ()))

    def pop_dependents(self, bean_name: str) -> List[str]:
        with self._lock:
            return list(self._dependent_beans.pop(bean_name, ()))

    def pop_contained(self, bean_name: str) -> List[str]:
        with self._lock:
            return list(self._contained_beans.pop(bean_name, ()))

    def purge(self, bean_name: str) -> None:
        """Remove ``bean_name`` from every other bean's dependent set."""
        with self._lock:
            for name in list(self._dependent_beans):
                dependents = self._dependent_beans[name]
                dependents.pop(bean_name, None)
                if not dependents:
                    del self._dependent_beans[name]
            self._dependencies_for_bean.pop(bean_name, None)
            for name in list(self._dependencies_for_bean):
                dependencies = self._dependencies_for_bean[name]
                dependencies.pop(bean_name, None)
                if not dependencies:
                    del self._dependencies_for_bean[name]

    def clear(self) -> None:
        with self._lock:
            self._dependent_beans.clear()
            self._dependencies_for_bean.clear()
            self._contained_beans.clear()
