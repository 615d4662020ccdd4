"""
ResolutionContext

This module provides the context carried through one dependency
resolution call chain. The ResolutionContext tracks:

- Prototype and custom-scope beans currently being created
- The chain of bean names being resolved (for error messages)
- The container that started the resolution

The container passes the context explicitly from ``get()`` down through
creation, autowiring and value resolution. It is also published in a
ContextVar so that a nested ``container.get()`` made by user code (an
init method, a factory method, a post-processor) joins the same chain
instead of starting a fresh one. ContextVar values are per thread, so the
prototype in-creation state is never shared between threads.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, List, Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from .container import BeanContainer


class ResolutionContext:
    """Context for one resolution call chain.

    Attributes:
        prototypes_in_creation: Names of non-singleton beans being created
            by this call chain
        resolving: Bean names in the order they were entered
        container: The container performing the resolution

    Note:
        This class is used internally by BeanContainer.
        Users should not need to interact with it directly.

    Example (internal usage)::

        ctx = ResolutionContext(container)
        ctx.before_prototype_creation("command")
        ctx.is_prototype_currently_in_creation("command")  # True
        ctx.after_prototype_creation("command")
    """

    def __init__(self, container: Optional['BeanContainer'] = None):
        """Initialize an empty resolution context.

        Args:
            container: The container starting the resolution (optional)
        """
        self.prototypes_in_creation: Set[str] = set()
        self.resolving: List[str] = []
        self.container = container

    def before_prototype_creation(self, bean_name: str) -> None:
        self.prototypes_in_creation.add(bean_name)

    def after_prototype_creation(self, bean_name: str) -> None:
        self.prototypes_in_creation.discard(bean_name)

    def is_prototype_currently_in_creation(self, bean_name: str) -> bool:
        return bean_name in self.prototypes_in_creation

    @contextmanager
    def entering(self, bean_name: str) -> Iterator[None]:
        """Push ``bean_name`` onto the resolution chain for the duration of the block."""
        self.resolving.append(bean_name)
        try:
            yield
        finally:
            self.resolving.pop()

    def describe_chain(self, bean_name: Optional[str] = None) -> str:
        """Render the current chain as ``a -> b -> c``."""
        names = list(self.resolving)
        if bean_name is not None:
            names.append(bean_name)
        return " -> ".join(names)


# Resolution context for the call chain running in the current thread
_resolution_context: ContextVar[Optional[ResolutionContext]] = ContextVar(
    '_BEANFACTORY_RESOLUTION_CONTEXT',
    default=None
)


@contextmanager
def active_context(ctx: ResolutionContext) -> Iterator[ResolutionContext]:
    """Publish ``ctx`` for nested lookups made while the block runs."""
    token = _resolution_context.set(ctx)
    try:
        yield ctx
    finally:
        _resolution_context.reset(token)


def current_context(container: 'BeanContainer') -> Optional[ResolutionContext]:
    """Return the context of the call chain in progress for ``container``, if any."""
    ctx = _resolution_context.get()
    if ctx is not None and ctx.container is container:
        return ctx
    return None
