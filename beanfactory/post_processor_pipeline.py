"""
PostProcessorPipeline

Runs the registered post-processors, in registration order, at each
stage of bean creation. A hook that raises aborts the creation of the
bean; the error is wrapped in a BeanCreationError that keeps the
original as its cause.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Type

from .definition import PropertyValues, RootBeanDefinition
from .exceptions import BeanCreationError
from .post_processors import (
    BeanPostProcessor,
    DestructionAwareBeanPostProcessor,
    InstantiationAwareBeanPostProcessor,
    MergedBeanDefinitionPostProcessor,
    SmartInstantiationAwareBeanPostProcessor,
)
from .type_descriptor import ExecutableInfo

logger = logging.getLogger(__name__)


class PostProcessorPipeline:
    """Ordered list of post-processors with per-kind views.

    Attributes:
        _processors: All post-processors in registration order
        _cache: Per-kind filtered views, rebuilt after each change

    Example::

        pipeline = PostProcessorPipeline()
        pipeline.add(AuditPostProcessor())
        bean = pipeline.apply_after_initialization(bean, "service")
    """

    def __init__(self):
        self._processors: List[BeanPostProcessor] = []
        self._lock = threading.Lock()
        self._cache: Optional[dict] = None

    def add(self, processor: BeanPostProcessor) -> None:
        """Register ``processor``; re-adding moves it to the end."""
        if not isinstance(processor, BeanPostProcessor):
            raise TypeError(f"{processor!r} is not a BeanPostProcessor")
        with self._lock:
            self._processors = [p for p in self._processors if p is not processor]
            self._processors.append(processor)
            self._cache = None

    def add_all(self, processors: List[BeanPostProcessor]) -> None:
        for processor in processors:
            self.add(processor)

    def remove(self, processor: BeanPostProcessor) -> None:
        with self._lock:
            self._processors = [p for p in self._processors if p is not processor]
            self._cache = None

    def count(self) -> int:
        return len(self._processors)

    def get_processors(self) -> List[BeanPostProcessor]:
        return list(self._processors)

    def _views(self) -> dict:
        cache = self._cache
        if cache is None:
            with self._lock:
                processors = list(self._processors)
                cache = {
                    'instantiation_aware': [p for p in processors
                                            if isinstance(p, InstantiationAwareBeanPostProcessor)],
                    'smart': [p for p in processors
                              if isinstance(p, SmartInstantiationAwareBeanPostProcessor)],
                    'destruction_aware': [p for p in processors
                                          if isinstance(p, DestructionAwareBeanPostProcessor)],
                    'merged_definition': [p for p in processors
                                          if isinstance(p, MergedBeanDefinitionPostProcessor)],
                    'all': processors,
                }
                self._cache = cache
        return cache

    @property
    def has_instantiation_aware(self) -> bool:
        return bool(self._views()['instantiation_aware'])

    def apply_before_instantiation(self, bean_class: Type, bean_name: str) -> Any:
        """First non-None substitute object, or None."""
        for processor in self._views()['instantiation_aware']:
            with self._wrapping_errors(bean_name, "before-instantiation", processor):
                result = processor.post_process_before_instantiation(bean_class, bean_name)
            if result is not None:
                return result
        return None

    def apply_after_instantiation(self, bean: Any, bean_name: str) -> bool:
        """False as soon as one processor vetoes property population."""
        for processor in self._views()['instantiation_aware']:
            with self._wrapping_errors(bean_name, "after-instantiation", processor):
                proceed = processor.post_process_after_instantiation(bean, bean_name)
            if not proceed:
                logger.debug("Property population of bean '%s' skipped by %s",
                             bean_name, type(processor).__name__)
                return False
        return True

    def apply_property_values(self, pvs: PropertyValues, bean: Any, bean_name: str) -> Optional[PropertyValues]:
        """Pass ``pvs`` through every processor; None means "do not apply any"."""
        for processor in self._views()['instantiation_aware']:
            with self._wrapping_errors(bean_name, "property values processing", processor):
                pvs = processor.post_process_properties(pvs, bean, bean_name)
            if pvs is None:
                return None
        return pvs

    def apply_before_initialization(self, bean: Any, bean_name: str) -> Any:
        result = bean
        for processor in self._views()['all']:
            with self._wrapping_errors(bean_name, "before-initialization", processor):
                current = processor.post_process_before_initialization(result, bean_name)
            if current is None:
                return result
            result = current
        return result

    def apply_after_initialization(self, bean: Any, bean_name: str) -> Any:
        result = bean
        for processor in self._views()['all']:
            with self._wrapping_errors(bean_name, "after-initialization", processor):
                current = processor.post_process_after_initialization(result, bean_name)
            if current is None:
                return result
            result = current
        return result

    def apply_merged_definition(self, definition: RootBeanDefinition, bean_type: Type, bean_name: str) -> None:
        """Run merged-definition post-processing once per definition."""
        with definition.post_processing_lock:
            if definition.post_processed:
                return
            for processor in self._views()['merged_definition']:
                with self._wrapping_errors(bean_name, "merged bean definition processing", processor):
                    processor.post_process_merged_bean_definition(definition, bean_type, bean_name)
            definition.post_processed = True

    def early_bean_reference(self, bean: Any, bean_name: str) -> Any:
        exposed = bean
        for processor in self._views()['smart']:
            with self._wrapping_errors(bean_name, "early reference", processor):
                exposed = processor.get_early_bean_reference(exposed, bean_name)
        return exposed

    def predict_bean_type(self, bean_class: Type, bean_name: str) -> Optional[Type]:
        for processor in self._views()['smart']:
            predicted = processor.predict_bean_type(bean_class, bean_name)
            if predicted is not None:
                return predicted
        return None

    def determine_candidate_constructors(self, bean_class: Type, bean_name: str) -> Optional[List[ExecutableInfo]]:
        for processor in self._views()['smart']:
            with self._wrapping_errors(bean_name, "constructor determination", processor):
                constructors = processor.determine_candidate_constructors(bean_class, bean_name)
            if constructors:
                return list(constructors)
        return None

    def destruction_aware_for(self, bean: Any) -> List[DestructionAwareBeanPostProcessor]:
        """Destruction-aware processors that want to see ``bean`` destroyed."""
        return [p for p in self._views()['destruction_aware'] if p.requires_destruction(bean)]

    def reset_bean_definition(self, bean_name: str) -> None:
        for processor in self._views()['merged_definition']:
            processor.reset_bean_definition(bean_name)

    @staticmethod
    @contextmanager
    def _wrapping_errors(bean_name: str, stage: str, processor: BeanPostProcessor) -> Iterator[None]:
        try:
            yield
        except Exception as ex:
            if isinstance(ex, BeanCreationError) and ex.bean_name == bean_name:
                raise
            raise BeanCreationError(
                bean_name, f"{stage} post-processing by {type(processor).__name__} failed: {ex}") from ex
