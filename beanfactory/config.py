"""
ContainerConfig

Settings that change how a BeanContainer creates and caches beans.
"""

from dataclasses import dataclass


@dataclass
class ContainerConfig:
    """Behaviour flags for a BeanContainer.

    Attributes:
        allow_circular_references: Expose early references of singletons in
            creation so that circular references between singletons resolve
        allow_raw_injection_despite_wrapping: Accept that a bean injected
            early into a circular partner was wrapped afterwards, leaving the
            partner with the raw (unwrapped) instance
        allow_bean_definition_overriding: Allow registering a definition
            under a name that is already defined
        cache_bean_metadata: Cache merged definitions once a bean has been
            created at least once
        allow_eager_class_loading: Allow type lookups to instantiate
            FactoryBeans of lazy definitions to learn their product type

    Example::

        container = BeanContainer(config=ContainerConfig(allow_circular_references=False))
    """
    allow_circular_references: bool = True
    allow_raw_injection_despite_wrapping: bool = False
    allow_bean_definition_overriding: bool = True
    cache_bean_metadata: bool = True
    allow_eager_class_loading: bool = True
