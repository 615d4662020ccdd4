"""
FactoryBean

A FactoryBean is a bean whose product, not the factory itself, is what
``container.get(name)`` returns and what gets injected. ``&name`` returns
the factory.

FactoryBeanRegistry extends the singleton registry with the cache of
products of singleton FactoryBeans.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Type

from .exceptions import BeanCreationError, BeanCurrentlyInCreationError
from .singleton_registry import NULL_OBJECT, SingletonRegistry

logger = logging.getLogger(__name__)


class FactoryBean(ABC):
    """Bean that produces the object exposed under its name.

    Example::

        class ConnectionFactoryBean(FactoryBean):
            url: str

            def get_object(self):
                return connect(self.url)

            def get_object_type(self):
                return Connection
    """

    @abstractmethod
    def get_object(self) -> Any:
        pass

    @abstractmethod
    def get_object_type(self) -> Optional[Type]:
        """Type of the product, or None if not known before creation."""

    def is_singleton(self) -> bool:
        """Whether the product is shared; a shared product is cached by the container."""
        return True


class SmartFactoryBean(FactoryBean):
    """FactoryBean that can ask for its product to be created eagerly."""

    def is_prototype(self) -> bool:
        return False

    def is_eager_init(self) -> bool:
        return False


class FactoryBeanRegistry(SingletonRegistry):
    """Singleton registry that also caches singleton FactoryBean products.

    A product is cached only while its factory is a registered singleton,
    and it is dropped together with the factory.
    """

    def __init__(self, graph=None):
        super().__init__(graph)
        self._factory_bean_object_cache: Dict[str, Any] = {}

    def get_type_for_factory_bean(self, factory: FactoryBean) -> Optional[Type]:
        try:
            return factory.get_object_type()
        except Exception:
            logger.info("FactoryBean threw exception from get_object_type", exc_info=True)
            return None

    def get_cached_object_for_factory_bean(self, bean_name: str) -> Any:
        obj = self._factory_bean_object_cache.get(bean_name)
        return None if obj is NULL_OBJECT else obj

    def get_object_from_factory_bean(
        self,
        factory: FactoryBean,
        bean_name: str,
        should_post_process: bool,
        post_process: Callable[[Any, str], Any],
    ) -> Any:
        """Return the product of ``factory``, caching it for singleton factories.

        Args:
            factory: The FactoryBean instance
            bean_name: Canonical bean name of the factory
            should_post_process: Whether the product gets after-initialization hooks
            post_process: Callable applying after-initialization hooks
        """
        if factory.is_singleton() and self.contains_singleton(bean_name):
            with self.lock:
                obj = self._factory_bean_object_cache.get(bean_name)
                if obj is None:
                    obj = self._do_get_object(factory, bean_name)
                    # get_object() may already have stored a product through a reentrant call
                    already_there = self._factory_bean_object_cache.get(bean_name)
                    if already_there is not None:
                        obj = already_there
                    else:
                        if should_post_process and obj is not NULL_OBJECT:
                            if self.is_singleton_currently_in_creation(bean_name):
                                # Temporarily return the raw product, not storing it yet
                                return obj
                            self.before_singleton_creation(bean_name)
                            try:
                                obj = post_process(obj, bean_name)
                            except Exception as ex:
                                raise BeanCreationError(
                                    bean_name, "Post-processing of FactoryBean's singleton object failed"
                                ) from ex
                            finally:
                                self.after_singleton_creation(bean_name)
                        if self.contains_singleton(bean_name):
                            self._factory_bean_object_cache[bean_name] = obj
                return None if obj is NULL_OBJECT else obj

        obj = self._do_get_object(factory, bean_name)
        if obj is NULL_OBJECT:
            return None
        if should_post_process:
            try:
                obj = post_process(obj, bean_name)
            except Exception as ex:
                raise BeanCreationError(bean_name, "Post-processing of FactoryBean's object failed") from ex
        return obj

    def _do_get_object(self, factory: FactoryBean, bean_name: str) -> Any:
        try:
            obj = factory.get_object()
        except BeanCurrentlyInCreationError:
            raise
        except Exception as ex:
            raise BeanCreationError(bean_name, "FactoryBean threw exception on object creation") from ex
        if obj is None:
            if self.is_singleton_currently_in_creation(bean_name):
                raise BeanCurrentlyInCreationError(
                    bean_name, "FactoryBean which is currently in creation returned None from get_object")
            return NULL_OBJECT
        return obj

    def remove_singleton(self, bean_name: str) -> None:
        with self.lock:
            super().remove_singleton(bean_name)
            self._factory_bean_object_cache.pop(bean_name, None)

    def destroy_singletons(self) -> None:
        super().destroy_singletons()
        with self.lock:
            self._factory_bean_object_cache.clear()
