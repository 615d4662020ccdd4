"""
DisposableBeanAdapter

The teardown callback the container registers for a bean. It combines,
in this order:

1. DestructionAwareBeanPostProcessor.post_process_before_destruction
2. DisposableBean.destroy()
3. The destroy method named by the definition; ``"(inferred)"`` picks
   ``close()`` or else ``shutdown()``
"""

import logging
from typing import Any, List, Optional

from .definition import RootBeanDefinition
from .exceptions import BeanDefinitionValidationError
from .lifecycle import INFER_METHOD, DisposableBean
from .post_processors import DestructionAwareBeanPostProcessor

logger = logging.getLogger(__name__)

_INFERRED_METHOD_NAMES = ("close", "shutdown")


class DisposableBeanAdapter(DisposableBean):
    """Teardown callback for one bean instance.

    Attributes:
        bean: The instance to destroy
        bean_name: Its name, for hooks and log messages
        destroy_method_name: Resolved name of the custom destroy method, if any
        processors: Destruction-aware post-processors that watch this bean
    """

    def __init__(
        self,
        bean: Any,
        bean_name: str,
        definition: Optional[RootBeanDefinition],
        processors: Optional[List[DestructionAwareBeanPostProcessor]] = None,
    ):
        self.bean = bean
        self.bean_name = bean_name
        self.invoke_disposable_bean = isinstance(bean, DisposableBean)
        self.destroy_method_name = self.infer_destroy_method(bean, definition)
        if (self.destroy_method_name is not None and self.invoke_disposable_bean
                and self.destroy_method_name == "destroy"):
            self.destroy_method_name = None
        if (self.destroy_method_name is not None and definition is not None
                and definition.enforce_destroy_method
                and not callable(getattr(bean, self.destroy_method_name, None))):
            raise BeanDefinitionValidationError(
                f"Could not find a destroy method named '{self.destroy_method_name}' "
                f"on bean with name '{bean_name}'"
            )
        self.processors = list(processors or [])

    @staticmethod
    def infer_destroy_method(bean: Any, definition: Optional[RootBeanDefinition]) -> Optional[str]:
        """Resolve the destroy method name configured on ``definition`` for ``bean``."""
        if definition is None:
            return None
        name = definition.destroy_method_name
        if name == INFER_METHOD:
            if isinstance(bean, DisposableBean):
                return None
            for candidate in _INFERRED_METHOD_NAMES:
                if callable(getattr(bean, candidate, None)):
                    return candidate
            return None
        return name or None

    @classmethod
    def has_destroy_method(cls, bean: Any, definition: Optional[RootBeanDefinition]) -> bool:
        return isinstance(bean, DisposableBean) or cls.infer_destroy_method(bean, definition) is not None

    def destroy(self) -> None:
        for processor in self.processors:
            processor.post_process_before_destruction(self.bean, self.bean_name)

        if self.invoke_disposable_bean:
            logger.debug("Invoking destroy() on bean with name '%s'", self.bean_name)
            self.bean.destroy()

        if self.destroy_method_name is not None:
            method = getattr(self.bean, self.destroy_method_name, None)
            if not callable(method):
                logger.debug("Could not find a destroy method named '%s' on bean with name '%s'",
                             self.destroy_method_name, self.bean_name)
                return
            logger.debug("Invoking custom destroy method '%s' on bean with name '%s'",
                         self.destroy_method_name, self.bean_name)
            method()

    def __repr__(self) -> str:
        return f"DisposableBeanAdapter({self.bean_name!r})"
