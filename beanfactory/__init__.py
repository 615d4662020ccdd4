# Public API
from .bean_factory import BeanFactory, HierarchicalBeanFactory, ListableBeanFactory
from .config import ContainerConfig
from .container import BeanContainer
from .context import BeanContainerContext
from .definition import (
    BeanDefinition,
    ConstructorArgumentValues,
    LookupOverride,
    PropertyValues,
    RootBeanDefinition,
    RuntimeBeanReference,
)
from .definition_builder import BeanDefinitionBuilder
from .dependency_descriptor import DependencyDescriptor
from .exceptions import (
    BeanCreationError,
    BeanCreationNotAllowedError,
    BeanCurrentlyInCreationError,
    BeanDefinitionStoreError,
    BeanDefinitionValidationError,
    BeanIsAbstractError,
    BeanIsNotAFactoryError,
    BeanNotOfRequiredTypeError,
    BeansError,
    CannotLoadBeanClassError,
    ContextNotActiveError,
    NoSuchBeanDefinitionError,
    NoSuchScopeError,
    NoUniqueBeanDefinitionError,
    ScopeNotActiveError,
    TypeInferenceError,
    TypeMismatchError,
    UnsatisfiedDependencyError,
)
from .factory_bean import FactoryBean, SmartFactoryBean
from .instantiation_strategy import (
    InstantiationStrategy,
    SimpleInstantiationStrategy,
    SubclassingInstantiationStrategy,
)
from .lifecycle import (
    FACTORY_BEAN_PREFIX,
    INFER_METHOD,
    SCOPE_PROTOTYPE,
    SCOPE_SINGLETON,
    AutowireMode,
    BeanFactoryAware,
    BeanNameAware,
    DependencyCheck,
    DisposableBean,
    InitializingBean,
    Lifecycle,
)
from .post_processors import (
    BeanPostProcessor,
    DestructionAwareBeanPostProcessor,
    InstantiationAwareBeanPostProcessor,
    MergedBeanDefinitionPostProcessor,
    Ordered,
    PriorityOrdered,
    SmartInstantiationAwareBeanPostProcessor,
)
from .scope import MapScope, Scope, ThreadScope
from .type_converter import SimpleTypeConverter, TypeConverter
from .type_descriptor import TypeDescriptor
from .value_resolver import BeanExpressionResolver

__all__ = [
    "BeanContainer",
    "BeanContainerContext",
    "ContainerConfig",
    "BeanFactory",
    "HierarchicalBeanFactory",
    "ListableBeanFactory",
    # Definitions
    "BeanDefinition",
    "BeanDefinitionBuilder",
    "RootBeanDefinition",
    "PropertyValues",
    "ConstructorArgumentValues",
    "RuntimeBeanReference",
    "LookupOverride",
    "DependencyDescriptor",
    # Lifecycle
    "SCOPE_SINGLETON",
    "SCOPE_PROTOTYPE",
    "FACTORY_BEAN_PREFIX",
    "INFER_METHOD",
    "AutowireMode",
    "DependencyCheck",
    "InitializingBean",
    "DisposableBean",
    "BeanNameAware",
    "BeanFactoryAware",
    "Lifecycle",
    "FactoryBean",
    "SmartFactoryBean",
    # Hooks
    "Ordered",
    "PriorityOrdered",
    "BeanPostProcessor",
    "InstantiationAwareBeanPostProcessor",
    "SmartInstantiationAwareBeanPostProcessor",
    "MergedBeanDefinitionPostProcessor",
    "DestructionAwareBeanPostProcessor",
    # Scopes
    "Scope",
    "MapScope",
    "ThreadScope",
    # Capabilities
    "TypeDescriptor",
    "TypeConverter",
    "SimpleTypeConverter",
    "InstantiationStrategy",
    "SimpleInstantiationStrategy",
    "SubclassingInstantiationStrategy",
    "BeanExpressionResolver",
    # Exceptions
    "BeansError",
    "NoSuchBeanDefinitionError",
    "NoUniqueBeanDefinitionError",
    "BeanDefinitionStoreError",
    "CannotLoadBeanClassError",
    "BeanCreationError",
    "BeanIsAbstractError",
    "BeanCurrentlyInCreationError",
    "BeanCreationNotAllowedError",
    "UnsatisfiedDependencyError",
    "ScopeNotActiveError",
    "BeanNotOfRequiredTypeError",
    "BeanIsNotAFactoryError",
    "TypeMismatchError",
    "NoSuchScopeError",
    "BeanDefinitionValidationError",
    "TypeInferenceError",
    "ContextNotActiveError",
]

# Version will be dynamically set by poetry-dynamic-versioning
try:
    from ._version import __version__
except ImportError:
    # Fallback for development
    __version__ = '0.0.0'
