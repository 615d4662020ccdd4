"""
BeanContainer

This module provides the container itself: the single object that owns
every registry and cache and implements the full bean lifecycle. It is
responsible for:

- Storing bean definitions and aliases, and merging parent chains
- Creating beans: instantiation, property population, autowiring and
  initialization, with post-processor hooks at every stage
- Sharing singletons, including early references for circular references
- Creating prototypes and custom-scoped beans
- Recording which bean depends on which and destroying them in order
- Delegating unknown names to a parent container

Example::

    container = BeanContainer()
    container.register_definition(
        "database", BeanDefinitionBuilder.generic(Database).get_bean_definition())
    container.register_definition(
        "repository", BeanDefinitionBuilder.generic(UserRepository).get_bean_definition())
    repository = container.get("repository")  # Database injected by type
    container.destroy_all()
"""

import functools
import importlib
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Type, TypeVar

from .alias_registry import AliasRegistry
from .bean_factory import BeanFactory, HierarchicalBeanFactory, ListableBeanFactory
from .config import ContainerConfig
from .constructor_resolver import ConstructorResolver
from .definition import BeanDefinition, PropertyValues, RootBeanDefinition
from .definition_merger import DefinitionMerger
from .dependency_descriptor import DependencyDescriptor
from .dependency_graph import DependencyGraph
from .dependency_resolver import DependencyResolver
from .disposable_adapter import DisposableBeanAdapter
from .early_reference import EarlyReferenceProvider
from .exceptions import (
    BeanCreationError,
    BeanCurrentlyInCreationError,
    BeanDefinitionStoreError,
    BeanDefinitionValidationError,
    BeanIsAbstractError,
    BeanIsNotAFactoryError,
    BeanNotOfRequiredTypeError,
    BeansError,
    CannotLoadBeanClassError,
    NoSuchBeanDefinitionError,
    NoUniqueBeanDefinitionError,
    TypeMismatchError,
)
from .factory_bean import FactoryBean, FactoryBeanRegistry, SmartFactoryBean
from .instantiation_strategy import InstantiationStrategy, SubclassingInstantiationStrategy
from .lifecycle import (
    FACTORY_BEAN_PREFIX,
    SCOPE_PROTOTYPE,
    AutowireMode,
    BeanFactoryAware,
    BeanNameAware,
    DependencyCheck,
    InitializingBean,
)
from .post_processor_pipeline import PostProcessorPipeline
from .post_processors import BeanPostProcessor
from .resolution_context import ResolutionContext, active_context, current_context
from .scope import Scope
from .scope_dispatcher import ScopeDispatcher
from .type_converter import SimpleTypeConverter, TypeConverter
from .type_descriptor import TypeDescriptor, is_assignable, is_instance
from .value_resolver import BeanDefinitionValueResolver, BeanExpressionResolver

logger = logging.getLogger(__name__)

T = TypeVar('T')


def is_factory_dereference(name: str) -> bool:
    """Whether ``name`` asks for a FactoryBean itself rather than its product."""
    return name is not None and name.startswith(FACTORY_BEAN_PREFIX)


def _is_factory_bean_class(cls: Any) -> bool:
    return isinstance(cls, type) and issubclass(cls, FactoryBean)


class BeanContainer(ListableBeanFactory, HierarchicalBeanFactory):
    """Bean container with definition registry, autowiring and ordered destruction.

    Attributes:
        config: Behaviour flags (circular references, overriding, caching)
        _definitions: Raw definitions by name
        _definition_names: Definition names in registration order
        _manual_singleton_names: Singletons registered without a definition
        _registry: Singleton cache, FactoryBean products and disposable beans
        _graph: Dependency edges between beans
        _merger: Merged definition cache
        _pipeline: Registered post-processors

    Example::

        parent = BeanContainer()
        child = BeanContainer(parent=parent, config=ContainerConfig(allow_circular_references=False))
    """

    def __init__(self, parent: Optional[BeanFactory] = None, config: Optional[ContainerConfig] = None):
        """Initialize an empty container.

        Args:
            parent: Container asked for names not defined here (optional)
            config: Behaviour flags; defaults to ContainerConfig()
        """
        self._parent = parent
        self.config = config if config is not None else ContainerConfig()

        self._definitions: Dict[str, BeanDefinition] = {}
        self._definition_names: List[str] = []
        self._manual_singleton_names: List[str] = []
        self._definitions_lock = threading.RLock()

        self._aliases = AliasRegistry()
        self._graph = DependencyGraph()
        self._registry = FactoryBeanRegistry(self._graph)
        self._merger = DefinitionMerger(
            self._local_definition,
            self.contains_definition,
            self._parent_merged_definition,
            self.canonical_name,
        )
        self._merger.cache_bean_metadata = self.config.cache_bean_metadata
        self._pipeline = PostProcessorPipeline()
        self._scopes = ScopeDispatcher(self._registry)

        self._type_descriptor = TypeDescriptor()
        self._type_converter: TypeConverter = SimpleTypeConverter()
        self._instantiation_strategy: InstantiationStrategy = SubclassingInstantiationStrategy()
        self._dependency_resolver = DependencyResolver(self)
        self._constructor_resolver = ConstructorResolver(self)
        self._expression_resolver: Optional[BeanExpressionResolver] = None
        self._embedded_value_resolvers: List[Callable[[str], Optional[str]]] = []

        self._ignored_dependency_types: Set[Type] = set()
        self._ignored_dependency_interfaces: Set[Type] = {BeanNameAware, BeanFactoryAware}
        self._resolvable_dependencies: Dict[Type, Any] = {}
        self.register_resolvable_dependency(BeanFactory, self)

    # ------------------------------------------------------------------
    # Capabilities and configuration
    # ------------------------------------------------------------------

    @property
    def type_descriptor(self) -> TypeDescriptor:
        return self._type_descriptor

    def set_type_descriptor(self, type_descriptor: TypeDescriptor) -> None:
        self._type_descriptor = type_descriptor

    @property
    def type_converter(self) -> TypeConverter:
        return self._type_converter

    def set_type_converter(self, type_converter: TypeConverter) -> None:
        self._type_converter = type_converter

    @property
    def instantiation_strategy(self) -> InstantiationStrategy:
        return self._instantiation_strategy

    def set_instantiation_strategy(self, strategy: InstantiationStrategy) -> None:
        self._instantiation_strategy = strategy

    @property
    def dependency_resolver(self) -> DependencyResolver:
        return self._dependency_resolver

    def set_bean_expression_resolver(self, resolver: Optional[BeanExpressionResolver]) -> None:
        self._expression_resolver = resolver

    def get_bean_expression_resolver(self) -> Optional[BeanExpressionResolver]:
        return self._expression_resolver

    def add_embedded_value_resolver(self, resolver: Callable[[str], Optional[str]]) -> None:
        """Add a resolver applied to every string value of a definition, e.g. for placeholders."""
        self._embedded_value_resolvers.append(resolver)

    def has_embedded_value_resolver(self) -> bool:
        return bool(self._embedded_value_resolvers)

    def resolve_embedded_value(self, value: Optional[str]) -> Optional[str]:
        result = value
        for resolver in self._embedded_value_resolvers:
            if result is None:
                return None
            result = resolver(result)
        return result

    def evaluate_bean_definition_string(self, value: str, definition: Optional[RootBeanDefinition] = None) -> Any:
        resolved = self.resolve_embedded_value(value)
        if self._expression_resolver is None or not isinstance(resolved, str):
            return resolved
        return self._expression_resolver.evaluate(resolved, self)

    def set_allow_circular_references(self, allow: bool) -> None:
        self.config.allow_circular_references = allow

    def set_allow_raw_injection_despite_wrapping(self, allow: bool) -> None:
        self.config.allow_raw_injection_despite_wrapping = allow

    def set_allow_bean_definition_overriding(self, allow: bool) -> None:
        self.config.allow_bean_definition_overriding = allow

    def set_allow_eager_class_loading(self, allow: bool) -> None:
        self.config.allow_eager_class_loading = allow

    def set_cache_bean_metadata(self, cache: bool) -> None:
        self.config.cache_bean_metadata = cache
        self._merger.cache_bean_metadata = cache

    def ignore_dependency_type(self, dependency_type: Type) -> None:
        """Never autowire properties of ``dependency_type`` (or a subtype)."""
        self._ignored_dependency_types.add(dependency_type)

    def ignore_dependency_interface(self, interface: Type) -> None:
        """Never autowire properties declared by ``interface`` on beans implementing it."""
        self._ignored_dependency_interfaces.add(interface)

    def get_ignored_dependency_types(self) -> Set[Type]:
        return set(self._ignored_dependency_types)

    def get_ignored_dependency_interfaces(self) -> Set[Type]:
        return set(self._ignored_dependency_interfaces)

    def register_resolvable_dependency(self, dependency_type: Type, autowired_value: Any) -> None:
        """Inject ``autowired_value`` wherever ``dependency_type`` is autowired, without it being a bean."""
        if autowired_value is None:
            return
        if not is_instance(autowired_value, dependency_type):
            raise ValueError(
                f"Value [{autowired_value!r}] does not implement specified dependency type "
                f"[{getattr(dependency_type, '__name__', dependency_type)}]")
        self._resolvable_dependencies[dependency_type] = autowired_value

    def get_resolvable_dependencies(self) -> Dict[Type, Any]:
        return dict(self._resolvable_dependencies)

    def add_post_processor(self, processor: BeanPostProcessor) -> None:
        """Register a post-processor; it only sees beans created afterwards."""
        self._pipeline.add(processor)

    def get_post_processors(self) -> List[BeanPostProcessor]:
        return self._pipeline.get_processors()

    def get_post_processor_count(self) -> int:
        return self._pipeline.count()

    def register_scope(self, scope_name: str, scope: Scope) -> None:
        self._scopes.register_scope(scope_name, scope)

    def get_registered_scope_names(self) -> List[str]:
        return self._scopes.get_registered_scope_names()

    def get_registered_scope(self, scope_name: str) -> Optional[Scope]:
        return self._scopes.get_registered_scope(scope_name)

    def get_parent_bean_factory(self) -> Optional[BeanFactory]:
        return self._parent

    def set_parent_bean_factory(self, parent: Optional[BeanFactory]) -> None:
        if self._parent is not None and self._parent is not parent:
            raise ValueError(f"Already associated with parent BeanFactory: {self._parent!r}")
        if parent is self:
            raise ValueError("Cannot set parent bean factory to self")
        self._parent = parent

    # ------------------------------------------------------------------
    # Names and aliases
    # ------------------------------------------------------------------

    def canonical_name(self, name: str) -> str:
        return self._aliases.canonical_name(name)

    def transformed_bean_name(self, name: str) -> str:
        """Strip FactoryBean dereference prefixes and resolve aliases."""
        bean_name = name
        while bean_name.startswith(FACTORY_BEAN_PREFIX):
            bean_name = bean_name[len(FACTORY_BEAN_PREFIX):]
        return self.canonical_name(bean_name)

    def _original_bean_name(self, name: str) -> str:
        bean_name = self.transformed_bean_name(name)
        if is_factory_dereference(name):
            return FACTORY_BEAN_PREFIX + bean_name
        return bean_name

    def register_alias(self, name: str, alias: str) -> None:
        """Register ``alias`` for bean ``name``.

        Raises:
            BeanDefinitionStoreError: When the alias would be circular, or it
                names a definition while definition overriding is disabled
        """
        if (alias in self._definitions and alias != name
                and not self.config.allow_bean_definition_overriding):
            raise BeanDefinitionStoreError(
                f"Cannot register alias '{alias}' for name '{name}': "
                f"there is already a bean definition named '{alias}'",
                bean_name=alias,
            )
        self._aliases.register_alias(name, alias)

    def remove_alias(self, alias: str) -> None:
        self._aliases.remove_alias(alias)

    def is_alias(self, name: str) -> bool:
        return self._aliases.is_alias(name)

    def get_aliases(self, name: str) -> List[str]:
        bean_name = self.transformed_bean_name(name)
        prefix = FACTORY_BEAN_PREFIX if is_factory_dereference(name) else ""
        aliases: List[str] = []
        full_name = prefix + bean_name
        if full_name != name:
            aliases.append(full_name)
        for alias in self._aliases.get_aliases(bean_name):
            if prefix + alias != name:
                aliases.append(prefix + alias)
        if (not self._registry.contains_singleton(bean_name) and not self.contains_definition(bean_name)
                and self._parent is not None):
            aliases.extend(self._parent.get_aliases(full_name))
        return aliases

    def is_bean_name_in_use(self, name: str) -> bool:
        return self.is_alias(name) or self.contains_local_bean(name) or self._graph.has_dependents(name)

    # ------------------------------------------------------------------
    # Definition registry
    # ------------------------------------------------------------------

    def register_definition(self, bean_name: str, definition: BeanDefinition) -> None:
        """Register ``definition`` under ``bean_name``.

        Re-registering a name replaces the definition, drops its merged
        form and destroys the singleton created from the old one.

        Raises:
            BeanDefinitionStoreError: When overriding is disabled and the name is taken,
                or the definition combines a factory method with lookup overrides
        """
        if not bean_name:
            raise ValueError("Bean name must not be empty")
        if not isinstance(definition, BeanDefinition):
            raise TypeError(f"Expected a BeanDefinition, got {type(definition).__name__}")
        if definition.lookup_overrides and definition.factory_method_name:
            raise BeanDefinitionStoreError(
                "Cannot combine factory method with container-generated method overrides: "
                "the factory method must create the concrete bean instance.",
                bean_name=bean_name,
                resource_description=definition.resource_description,
            )

        with self._definitions_lock:
            existing = self._definitions.get(bean_name)
            if existing is not None:
                if not self.config.allow_bean_definition_overriding:
                    raise BeanDefinitionStoreError(
                        f"Cannot register bean definition [{definition}] for bean '{bean_name}' "
                        f"since there is already [{existing}] bound.",
                        bean_name=bean_name,
                        resource_description=definition.resource_description,
                    )
                if existing is not definition:
                    logger.info("Overriding bean definition for bean '%s' with a different definition",
                                bean_name)
                self._definitions[bean_name] = definition
            else:
                if self._aliases.is_alias(bean_name):
                    if not self.config.allow_bean_definition_overriding:
                        raise BeanDefinitionStoreError(
                            f"Cannot register bean definition for bean '{bean_name}' since "
                            f"there is already an alias '{bean_name}' bound to "
                            f"'{self.canonical_name(bean_name)}'",
                            bean_name=bean_name,
                            resource_description=definition.resource_description,
                        )
                    self._aliases.remove_alias(bean_name)
                self._definitions[bean_name] = definition
                self._definition_names.append(bean_name)
                if bean_name in self._manual_singleton_names:
                    self._manual_singleton_names.remove(bean_name)

        if existing is not None or self._registry.contains_singleton(bean_name):
            self.reset_bean_definition(bean_name)

    def remove_definition(self, bean_name: str) -> None:
        """Remove the definition and destroy the bean created from it.

        Raises:
            NoSuchBeanDefinitionError: When no such definition exists
        """
        with self._definitions_lock:
            if bean_name not in self._definitions:
                raise self._no_such_bean(bean_name)
            del self._definitions[bean_name]
            self._definition_names.remove(bean_name)
        self.reset_bean_definition(bean_name)

    def reset_bean_definition(self, bean_name: str) -> None:
        """Drop cached state derived from ``bean_name``'s definition, including child definitions."""
        self._merger.reset(bean_name)
        self.destroy(bean_name)
        self._pipeline.reset_bean_definition(bean_name)
        for other_name in self.get_definition_names():
            if other_name == bean_name:
                continue
            other = self._definitions.get(other_name)
            if other is not None and other.parent_name == bean_name:
                self.reset_bean_definition(other_name)

    def get_definition(self, bean_name: str) -> BeanDefinition:
        """Return the raw definition registered under ``bean_name``.

        Raises:
            NoSuchBeanDefinitionError: When no such definition exists
        """
        return self._local_definition(bean_name)

    def _local_definition(self, bean_name: str) -> BeanDefinition:
        definition = self._definitions.get(bean_name)
        if definition is None:
            logger.debug("No bean named '%s' found in %r", bean_name, self)
            raise self._no_such_bean(bean_name)
        return definition

    def _no_such_bean(self, bean_name: str) -> NoSuchBeanDefinitionError:
        available = ", ".join(self.get_definition_names()) or "(none)"
        return NoSuchBeanDefinitionError(
            f"No bean named '{bean_name}' available. Registered bean definitions: {available}",
            bean_name=bean_name,
        )

    def contains_definition(self, bean_name: str) -> bool:
        return bean_name in self._definitions

    def get_definition_count(self) -> int:
        return len(self._definitions)

    def get_definition_names(self) -> List[str]:
        with self._definitions_lock:
            return list(self._definition_names)

    def get_merged_bean_definition(self, name: str) -> RootBeanDefinition:
        """Return the merged definition for ``name``, asking the parent for names not defined here.

        Raises:
            NoSuchBeanDefinitionError: When neither this container nor its ancestors define it
        """
        bean_name = self.transformed_bean_name(name)
        if not self.contains_definition(bean_name) and isinstance(self._parent, BeanContainer):
            return self._parent.get_merged_bean_definition(bean_name)
        return self._merger.get_merged_definition(bean_name)

    def _parent_merged_definition(self, parent_name: str) -> Optional[RootBeanDefinition]:
        if not isinstance(self._parent, BeanContainer):
            return None
        try:
            return self._parent.get_merged_bean_definition(parent_name)
        except NoSuchBeanDefinitionError:
            return None

    def get_merged_inner_definition(self, inner_bean_name: str, definition: BeanDefinition) -> RootBeanDefinition:
        return self._merger.merge(inner_bean_name, definition)

    def clear_metadata_cache(self) -> None:
        """Drop merged definitions of beans that have not been created yet."""
        self._merger.clear()

    # ------------------------------------------------------------------
    # Singletons and dependency graph
    # ------------------------------------------------------------------

    def register_singleton(self, bean_name: str, singleton: Any) -> None:
        """Register an existing object as a fully initialized singleton.

        No hooks or lifecycle callbacks run for it.

        Raises:
            BeanDefinitionStoreError: When an object is already bound to the name
        """
        self._registry.register_singleton(bean_name, singleton)
        with self._definitions_lock:
            if bean_name not in self._definitions and bean_name not in self._manual_singleton_names:
                self._manual_singleton_names.append(bean_name)

    def contains_singleton(self, bean_name: str) -> bool:
        return self._registry.contains_singleton(bean_name)

    def get_singleton_names(self) -> List[str]:
        return self._registry.get_singleton_names()

    def get_singleton_count(self) -> int:
        return self._registry.get_singleton_count()

    def register_dependent_bean(self, bean_name: str, dependent_bean_name: str) -> None:
        """Record that ``dependent_bean_name`` depends on ``bean_name`` and must be destroyed first."""
        self._graph.register_dependent(self.canonical_name(bean_name), dependent_bean_name)

    def register_contained_bean(self, contained_bean_name: str, containing_bean_name: str) -> None:
        self._graph.register_contained(contained_bean_name, containing_bean_name)

    def get_dependent_beans(self, bean_name: str) -> List[str]:
        return self._graph.get_dependents(self.canonical_name(bean_name))

    def get_dependencies_for_bean(self, bean_name: str) -> List[str]:
        return self._graph.get_dependencies(self.canonical_name(bean_name))

    def is_currently_in_creation(self, bean_name: str) -> bool:
        bean_name = self.transformed_bean_name(bean_name)
        if self._registry.is_singleton_currently_in_creation(bean_name):
            return True
        ctx = current_context(self)
        return ctx is not None and ctx.is_prototype_currently_in_creation(bean_name)

    # ------------------------------------------------------------------
    # Bean lookup
    # ------------------------------------------------------------------

    def get(self, name: str, required_type: Optional[Type[T]] = None,
            args: Optional[Sequence[Any]] = None) -> Any:
        """Return the bean registered under ``name``, creating it as its scope dictates.

        A circular reference is reported wrapped in the error of the bean
        that could not be wired, usually an UnsatisfiedDependencyError for a
        constructor cycle or a prototype that needs itself. Check
        ``ex.contains(BeanCurrentlyInCreationError)`` to detect the cycle.

        Raises:
            NoSuchBeanDefinitionError: When there is no bean with that name
            BeanNotOfRequiredTypeError: When the bean does not match ``required_type``
            BeanCreationError: When the bean could not be created
        """
        return self._do_get_bean(name, required_type, args, type_check_only=False)

    def get_bean_by_type(self, required_type: Type[T], args: Optional[Sequence[Any]] = None) -> T:
        """Return the unique bean of ``required_type``; a primary bean wins over the others.

        Raises:
            NoSuchBeanDefinitionError: When no bean matches
            NoUniqueBeanDefinitionError: When several match and none is primary
        """
        candidate_names = self.get_bean_names_for_type(required_type)
        if len(candidate_names) > 1:
            autowire_candidates = [name for name in candidate_names
                                   if not self.contains_definition(name)
                                   or self._merger.get_merged_definition(name).autowire_candidate]
            if autowire_candidates:
                candidate_names = autowire_candidates

        if len(candidate_names) == 1:
            return self.get(candidate_names[0], required_type, args)
        if len(candidate_names) > 1:
            candidates = {name: None for name in candidate_names}
            primary = self._dependency_resolver.determine_primary_candidate(candidates, required_type)
            if primary is not None:
                return self.get(primary, required_type, args)
            raise NoUniqueBeanDefinitionError(required_type, candidate_names)

        parent = self._parent
        if isinstance(parent, BeanContainer):
            return parent.get_bean_by_type(required_type, args)
        raise NoSuchBeanDefinitionError(
            f"No qualifying bean of type '{getattr(required_type, '__name__', required_type)}' available",
            bean_type=required_type,
        )

    def _do_get_bean(self, name: str, required_type: Optional[Type], args: Optional[Sequence[Any]],
                     type_check_only: bool) -> Any:
        ctx = current_context(self)
        if ctx is not None:
            return self._resolve_bean(name, required_type, args, type_check_only, ctx)
        ctx = ResolutionContext(self)
        with active_context(ctx):
            return self._resolve_bean(name, required_type, args, type_check_only, ctx)

    def _resolve_bean(self, name: str, required_type: Optional[Type], args: Optional[Sequence[Any]],
                      type_check_only: bool, ctx: ResolutionContext) -> Any:
        bean_name = self.transformed_bean_name(name)

        shared = self._registry.get_singleton(bean_name)
        if args is None and (shared is not None or self._registry.contains_singleton(bean_name)):
            if logger.isEnabledFor(logging.DEBUG):
                if self._registry.is_singleton_currently_in_creation(bean_name):
                    logger.debug("Returning eagerly cached instance of singleton bean '%s' that is not "
                                 "fully initialized yet - a consequence of a circular reference", bean_name)
                else:
                    logger.debug("Returning cached instance of singleton bean '%s'", bean_name)
            bean = self.get_object_for_bean_instance(shared, name, bean_name, None)
            return self._adapt_bean_instance(name, bean, required_type)

        if ctx.is_prototype_currently_in_creation(bean_name):
            raise BeanCurrentlyInCreationError(
                bean_name,
                f"Requested bean is currently in creation: Is there an unresolvable circular "
                f"reference? ({ctx.describe_chain(bean_name)})",
            )

        parent = self._parent
        if parent is not None and not self.contains_definition(bean_name):
            original_name = self._original_bean_name(name)
            return parent.get(original_name, required_type, args)

        if not type_check_only:
            self._merger.mark_bean_as_created(bean_name)
        try:
            with ctx.entering(bean_name):
                mbd = self._merger.get_merged_definition(bean_name)
                self._check_merged_definition(mbd, bean_name, args)
                self._initialize_depends_on(bean_name, mbd)
                instance = self._scopes.create(
                    bean_name, mbd, lambda: self._create_bean(bean_name, mbd, args, ctx), ctx)
                bean = self.get_object_for_bean_instance(instance, name, bean_name, mbd)
        except BeansError:
            self._merger.clean_after_creation_failure(bean_name)
            raise
        return self._adapt_bean_instance(name, bean, required_type)

    def _check_merged_definition(self, mbd: RootBeanDefinition, bean_name: str,
                                 args: Optional[Sequence[Any]]) -> None:
        if mbd.abstract:
            raise BeanIsAbstractError(bean_name)
        if args is not None and not mbd.is_prototype():
            raise BeanDefinitionStoreError(
                "Can only specify arguments for the get() method when referring to a prototype bean definition",
                bean_name=bean_name,
                resource_description=mbd.resource_description,
            )

    def _initialize_depends_on(self, bean_name: str, mbd: RootBeanDefinition) -> None:
        for dependency in mbd.depends_on or []:
            dependency = self.canonical_name(dependency)
            if self._graph.is_dependent(bean_name, dependency):
                raise BeanCreationError(
                    bean_name,
                    f"Circular depends-on relationship between '{bean_name}' and '{dependency}'",
                    mbd.resource_description,
                )
            edge_is_new = dependency not in self._graph.get_dependencies(bean_name)
            self.register_dependent_bean(dependency, bean_name)
            try:
                self.get(dependency)
            except NoSuchBeanDefinitionError as ex:
                if edge_is_new:
                    self._graph.remove_dependent(dependency, bean_name)
                raise BeanCreationError(
                    bean_name, f"'{bean_name}' depends on missing bean '{dependency}'",
                    mbd.resource_description,
                ) from ex
            except BeanCreationError as ex:
                if edge_is_new:
                    self._graph.remove_dependent(dependency, bean_name)
                raise BeanCreationError(
                    bean_name, f"Failed to initialize dependency '{dependency}' of bean '{bean_name}'",
                    mbd.resource_description,
                ) from ex
            except Exception:
                if edge_is_new:
                    self._graph.remove_dependent(dependency, bean_name)
                raise

    def _adapt_bean_instance(self, name: str, bean: Any, required_type: Optional[Type]) -> Any:
        if required_type is None or bean is None or is_instance(bean, required_type):
            return bean
        try:
            converted = self._type_converter.convert_if_necessary(bean, required_type)
        except TypeMismatchError as ex:
            logger.debug("Failed to convert bean '%s' to required type '%s'", name, required_type, exc_info=True)
            raise BeanNotOfRequiredTypeError(name, required_type, type(bean)) from ex
        if converted is None:
            raise BeanNotOfRequiredTypeError(name, required_type, type(bean))
        return converted

    def get_object_for_bean_instance(self, instance: Any, name: str, bean_name: str,
                                     mbd: Optional[RootBeanDefinition]) -> Any:
        """Return ``instance`` itself, or its product when it is a FactoryBean and ``name`` is not ``&``-prefixed.

        Raises:
            BeanIsNotAFactoryError: For ``&name`` on a bean that is not a FactoryBean
        """
        if is_factory_dereference(name):
            if instance is None:
                return None
            if not isinstance(instance, FactoryBean):
                raise BeanIsNotAFactoryError(bean_name, type(instance))
            if mbd is not None:
                mbd.is_factory_bean = True
            return instance

        if not isinstance(instance, FactoryBean):
            return instance

        product = None
        if mbd is not None:
            mbd.is_factory_bean = True
        else:
            product = self._registry.get_cached_object_for_factory_bean(bean_name)
        if product is None:
            if mbd is None and self.contains_definition(bean_name):
                mbd = self._merger.get_merged_definition(bean_name)
            synthetic = mbd is not None and mbd.synthetic
            product = self._registry.get_object_from_factory_bean(
                instance, bean_name, not synthetic, self._pipeline.apply_after_initialization)
        return product

    def contains_bean(self, name: str) -> bool:
        bean_name = self.transformed_bean_name(name)
        if self._registry.contains_singleton(bean_name) or self.contains_definition(bean_name):
            return not is_factory_dereference(name) or self.is_factory_bean(name)
        parent = self._parent
        return parent is not None and parent.contains_bean(self._original_bean_name(name))

    def contains_local_bean(self, name: str) -> bool:
        bean_name = self.transformed_bean_name(name)
        return ((self._registry.contains_singleton(bean_name) or self.contains_definition(bean_name))
                and (not is_factory_dereference(name) or self.is_factory_bean(bean_name)))

    def is_singleton(self, name: str) -> bool:
        bean_name = self.transformed_bean_name(name)
        instance = self._registry.get_singleton(bean_name, allow_early_reference=False)
        if instance is not None:
            if isinstance(instance, FactoryBean):
                return is_factory_dereference(name) or instance.is_singleton()
            return not is_factory_dereference(name)

        parent = self._parent
        if parent is not None and not self.contains_definition(bean_name):
            return parent.is_singleton(self._original_bean_name(name))

        mbd = self._merger.get_merged_definition(bean_name)
        if mbd.is_singleton():
            if self._is_factory_bean_definition(bean_name, mbd):
                if is_factory_dereference(name):
                    return True
                factory = self._do_get_bean(FACTORY_BEAN_PREFIX + bean_name, None, None, True)
                return factory.is_singleton()
            return not is_factory_dereference(name)
        return False

    def is_prototype(self, name: str) -> bool:
        bean_name = self.transformed_bean_name(name)
        parent = self._parent
        if parent is not None and not self.contains_definition(bean_name):
            return parent.is_prototype(self._original_bean_name(name))

        mbd = self._merger.get_merged_definition(bean_name)
        if mbd.is_prototype():
            return not is_factory_dereference(name) or self._is_factory_bean_definition(bean_name, mbd)
        if is_factory_dereference(name):
            return False
        if self._is_factory_bean_definition(bean_name, mbd):
            factory = self._do_get_bean(FACTORY_BEAN_PREFIX + bean_name, None, None, True)
            return ((isinstance(factory, SmartFactoryBean) and factory.is_prototype())
                    or not factory.is_singleton())
        return False

    def is_factory_bean(self, name: str) -> bool:
        bean_name = self.transformed_bean_name(name)
        instance = self._registry.get_singleton(bean_name, allow_early_reference=False)
        if instance is not None:
            return isinstance(instance, FactoryBean)
        if not self.contains_definition(bean_name) and isinstance(self._parent, BeanContainer):
            return self._parent.is_factory_bean(name)
        if not self.contains_definition(bean_name):
            return False
        return self._is_factory_bean_definition(bean_name, self._merger.get_merged_definition(bean_name))

    def _is_factory_bean_definition(self, bean_name: str, mbd: RootBeanDefinition) -> bool:
        if mbd.is_factory_bean is None:
            predicted = self._predict_bean_type(bean_name, mbd)
            mbd.is_factory_bean = _is_factory_bean_class(predicted)
        return mbd.is_factory_bean

    def is_autowire_candidate(self, name: str) -> bool:
        bean_name = self.transformed_bean_name(name)
        if self.contains_definition(bean_name):
            return self._merger.get_merged_definition(bean_name).autowire_candidate
        if self._registry.contains_singleton(bean_name):
            return True
        if isinstance(self._parent, BeanContainer):
            return self._parent.is_autowire_candidate(name)
        return True

    def is_primary(self, name: str) -> bool:
        bean_name = self.transformed_bean_name(name)
        if self.contains_definition(bean_name):
            return bool(self._merger.get_merged_definition(bean_name).primary)
        if isinstance(self._parent, BeanContainer):
            return self._parent.is_primary(name)
        return False

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def get_type(self, name: str, allow_factory_bean_init: bool = True) -> Optional[Type]:
        bean_name = self.transformed_bean_name(name)
        instance = self._registry.get_singleton(bean_name, allow_early_reference=False)
        if instance is not None:
            if isinstance(instance, FactoryBean) and not is_factory_dereference(name):
                return self._registry.get_type_for_factory_bean(instance)
            return type(instance)

        parent = self._parent
        if parent is not None and not self.contains_definition(bean_name):
            return parent.get_type(self._original_bean_name(name), allow_factory_bean_init)

        mbd = self._merger.get_merged_definition(bean_name)
        bean_class = self._predict_bean_type(bean_name, mbd)
        if _is_factory_bean_class(bean_class):
            if not is_factory_dereference(name):
                return self._get_type_for_factory_bean(bean_name, mbd, allow_factory_bean_init)
            return bean_class
        return None if is_factory_dereference(name) else bean_class

    def is_type_match(self, name: str, type_to_match: Optional[Type],
                      allow_factory_bean_init: bool = True) -> bool:
        bean_name = self.transformed_bean_name(name)
        is_deref = is_factory_dereference(name)

        instance = self._registry.get_singleton(bean_name, allow_early_reference=False)
        if instance is not None:
            if isinstance(instance, FactoryBean):
                if not is_deref:
                    product_type = self._registry.get_type_for_factory_bean(instance)
                    return product_type is not None and is_assignable(type_to_match, product_type)
                return is_instance(instance, type_to_match)
            return not is_deref and is_instance(instance, type_to_match)
        if self._registry.contains_singleton(bean_name) and not self.contains_definition(bean_name):
            # registered None
            return False

        parent = self._parent
        if parent is not None and not self.contains_definition(bean_name):
            return parent.is_type_match(self._original_bean_name(name), type_to_match)

        mbd = self._merger.get_merged_definition(bean_name)
        predicted = self._predict_bean_type(bean_name, mbd)
        if predicted is None:
            return False
        if _is_factory_bean_class(predicted):
            if not is_deref:
                product_type = self._get_type_for_factory_bean(bean_name, mbd, allow_factory_bean_init)
                return product_type is not None and is_assignable(type_to_match, product_type)
        elif is_deref:
            return False
        return is_assignable(type_to_match, predicted)

    def _predict_bean_type(self, bean_name: str, mbd: RootBeanDefinition) -> Optional[Type]:
        if mbd.factory_method_name:
            return self._factory_method_return_type(bean_name, mbd)
        bean_class = self.resolve_bean_class(mbd, bean_name)
        if bean_class is not None and not mbd.synthetic and self._pipeline.has_instantiation_aware:
            predicted = self._pipeline.predict_bean_type(bean_class, bean_name)
            if predicted is not None:
                return predicted
        return bean_class

    def _factory_method_return_type(self, bean_name: str, mbd: RootBeanDefinition) -> Optional[Type]:
        if mbd.factory_method_return_type is not None:
            return mbd.factory_method_return_type
        if mbd.factory_bean_name is not None:
            if mbd.factory_bean_name == bean_name:
                return None
            factory_class = self.get_type(mbd.factory_bean_name)
            is_static = False
        else:
            factory_class = self.resolve_bean_class(mbd, bean_name)
            is_static = True
        if factory_class is None:
            return None
        for method in self._type_descriptor.get_factory_methods(factory_class, mbd.factory_method_name, is_static):
            if isinstance(method.return_type, type):
                mbd.factory_method_return_type = method.return_type
                return method.return_type
        return None

    def _get_type_for_factory_bean(self, bean_name: str, mbd: RootBeanDefinition,
                                   allow_init: bool) -> Optional[Type]:
        declared = mbd.attributes.get("factory_bean_object_type")
        if declared is not None:
            return declared
        if not allow_init or not mbd.is_singleton():
            return None
        if mbd.lazy_init and not self.config.allow_eager_class_loading:
            return None
        try:
            factory = self._do_get_bean(FACTORY_BEAN_PREFIX + bean_name, None, None, True)
        except BeanCreationError as ex:
            if ex.contains(BeanCurrentlyInCreationError):
                logger.debug("FactoryBean type check: bean '%s' is currently in creation", bean_name)
            else:
                logger.debug("Bean creation failure while checking the type of FactoryBean '%s'",
                             bean_name, exc_info=True)
            self._registry.on_suppressed_exception(ex)
            return None
        return self._registry.get_type_for_factory_bean(factory)

    def resolve_bean_class(self, mbd: RootBeanDefinition, bean_name: str) -> Optional[Type]:
        """Return the bean class, importing it first when it is given as a dotted path.

        Raises:
            CannotLoadBeanClassError: When the path cannot be imported
        """
        bean_class = mbd.bean_class
        if bean_class is None or isinstance(bean_class, type):
            return bean_class
        if not isinstance(bean_class, str):
            raise CannotLoadBeanClassError(
                f"Bean class must be a class or a dotted path, got {bean_class!r}",
                bean_name=bean_name, resource_description=mbd.resource_description)
        module_name, _, class_name = bean_class.rpartition('.')
        if not module_name:
            raise CannotLoadBeanClassError(
                f"Cannot load bean class '{bean_class}': expected 'package.module.ClassName'",
                bean_name=bean_name, resource_description=mbd.resource_description)
        try:
            module = importlib.import_module(module_name)
            resolved = getattr(module, class_name)
        except (ImportError, AttributeError) as ex:
            raise CannotLoadBeanClassError(
                f"Cannot find class [{bean_class}]: {ex}",
                bean_name=bean_name, resource_description=mbd.resource_description) from ex
        if not isinstance(resolved, type):
            raise CannotLoadBeanClassError(
                f"'{bean_class}' is not a class", bean_name=bean_name,
                resource_description=mbd.resource_description)
        mbd.bean_class = resolved
        return resolved

    def get_bean_names_for_type(self, bean_type: Optional[Type],
                                include_non_singletons: bool = True,
                                allow_eager_init: bool = True) -> List[str]:
        result: List[str] = []
        for bean_name in self.get_definition_names():
            try:
                mbd = self._merger.get_merged_definition(bean_name)
                if mbd.abstract:
                    continue
                if not allow_eager_init and not mbd.has_bean_class() and mbd.lazy_init \
                        and not self.config.allow_eager_class_loading:
                    continue
                is_factory = self._is_factory_bean_definition(bean_name, mbd)
                allow_factory_bean_init = allow_eager_init or self._registry.contains_singleton(bean_name)
                match = False
                if not is_factory:
                    if include_non_singletons or mbd.is_singleton():
                        match = self.is_type_match(bean_name, bean_type, allow_factory_bean_init)
                else:
                    if include_non_singletons or not mbd.lazy_init or (
                            allow_factory_bean_init and self.is_singleton(bean_name)):
                        match = self.is_type_match(bean_name, bean_type, allow_factory_bean_init)
                    if not match:
                        bean_name = FACTORY_BEAN_PREFIX + bean_name
                        if include_non_singletons or mbd.is_singleton():
                            match = self.is_type_match(bean_name, bean_type, allow_factory_bean_init)
                if match:
                    result.append(bean_name)
            except (CannotLoadBeanClassError, BeanDefinitionStoreError):
                if allow_eager_init:
                    raise
                logger.debug("Ignoring bean definition '%s' while matching type", bean_name, exc_info=True)

        for bean_name in list(self._manual_singleton_names):
            try:
                if self.is_factory_bean(bean_name):
                    if (include_non_singletons or self.is_singleton(bean_name)) \
                            and self.is_type_match(bean_name, bean_type):
                        result.append(bean_name)
                        continue
                    bean_name = FACTORY_BEAN_PREFIX + bean_name
                if self.is_type_match(bean_name, bean_type):
                    result.append(bean_name)
            except NoSuchBeanDefinitionError:
                logger.debug("Failed to check manually registered singleton with name '%s'", bean_name)
        return result

    def get_beans_of_type(self, bean_type: Optional[Type],
                          include_non_singletons: bool = True,
                          allow_eager_init: bool = True) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for bean_name in self.get_bean_names_for_type(bean_type, include_non_singletons, allow_eager_init):
            try:
                bean = self.get(bean_name)
            except BeanCreationError as ex:
                root = ex.get_most_specific_cause()
                if (isinstance(root, BeanCurrentlyInCreationError) and root.bean_name is not None
                        and self.is_currently_in_creation(root.bean_name)):
                    logger.debug("Ignoring match to currently created bean '%s': %s", bean_name, ex)
                    self._registry.on_suppressed_exception(ex)
                    continue
                raise
            if bean is not None:
                result[bean_name] = bean
        return result

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _create_bean(self, bean_name: str, mbd: RootBeanDefinition, args: Optional[Sequence[Any]],
                     ctx: ResolutionContext) -> Any:
        logger.debug("Creating instance of bean '%s'", bean_name)
        self.resolve_bean_class(mbd, bean_name)
        self._prepare_method_overrides(bean_name, mbd)

        bean = self._resolve_before_instantiation(bean_name, mbd)
        if bean is not None:
            return bean

        bean = self._do_create_bean(bean_name, mbd, args, ctx)
        logger.debug("Finished creating instance of bean '%s'", bean_name)
        return bean

    def create_inner_bean(self, inner_bean_name: str, mbd: RootBeanDefinition, ctx: ResolutionContext) -> Any:
        return self._create_bean(inner_bean_name, mbd, None, ctx)

    def _prepare_method_overrides(self, bean_name: str, mbd: RootBeanDefinition) -> None:
        if not mbd.lookup_overrides or not isinstance(mbd.bean_class, type):
            return
        for override in mbd.lookup_overrides.values():
            if not callable(getattr(mbd.bean_class, override.method_name, None)):
                raise BeanDefinitionStoreError(
                    "Validation of method overrides failed",
                    bean_name=bean_name,
                    resource_description=mbd.resource_description,
                ) from BeanDefinitionValidationError(
                    f"Invalid method override: no method with name '{override.method_name}' "
                    f"on class [{mbd.bean_class.__name__}]")

    def _resolve_before_instantiation(self, bean_name: str, mbd: RootBeanDefinition) -> Any:
        bean = None
        if mbd.before_instantiation_resolved is not False:
            if not mbd.synthetic and self._pipeline.has_instantiation_aware:
                target_type = self._predict_bean_type(bean_name, mbd)
                if target_type is not None:
                    bean = self._pipeline.apply_before_instantiation(target_type, bean_name)
                    if bean is not None:
                        bean = self._pipeline.apply_after_initialization(bean, bean_name)
            mbd.before_instantiation_resolved = bean is not None
        return bean

    def _do_create_bean(self, bean_name: str, mbd: RootBeanDefinition, args: Optional[Sequence[Any]],
                        ctx: ResolutionContext) -> Any:
        bean = self._create_bean_instance(bean_name, mbd, args, ctx)
        if bean is None:
            return None
        self._pipeline.apply_merged_definition(mbd, type(bean), bean_name)

        early_singleton_exposure = (mbd.is_singleton() and self.config.allow_circular_references
                                    and self._registry.is_singleton_currently_in_creation(bean_name))
        if early_singleton_exposure:
            logger.debug("Eagerly caching bean '%s' to allow for resolving potential circular references",
                         bean_name)
            self._registry.add_singleton_factory(bean_name, EarlyReferenceProvider(
                functools.partial(self._get_early_bean_reference, bean_name, mbd, bean)))

        try:
            self._populate_bean(bean_name, mbd, bean, ctx)
            exposed = self._initialize_bean(bean_name, bean, mbd)
        except BeanCreationError as ex:
            if ex.bean_name == bean_name:
                raise
            raise BeanCreationError(bean_name, "Initialization of bean failed", mbd.resource_description) from ex
        except BeansError as ex:
            raise BeanCreationError(bean_name, f"Initialization of bean failed: {ex}",
                                    mbd.resource_description) from ex

        if early_singleton_exposure:
            early_reference = self._registry.get_singleton(bean_name, allow_early_reference=False)
            if early_reference is not None:
                if exposed is bean:
                    exposed = early_reference
                elif (not self.config.allow_raw_injection_despite_wrapping
                      and self._graph.has_dependents(bean_name)):
                    actual_dependents = [
                        dependent for dependent in self._graph.get_dependents(bean_name)
                        if not self._remove_singleton_if_created_for_type_check_only(dependent)
                    ]
                    if actual_dependents:
                        raise BeanCurrentlyInCreationError(
                            bean_name,
                            f"Bean with name '{bean_name}' has been injected into other beans "
                            f"[{', '.join(actual_dependents)}] in its raw version as part of a circular "
                            f"reference, but has eventually been wrapped. This means that said other "
                            f"beans do not use the final version of the bean.",
                        )

        try:
            self._register_disposable_bean_if_necessary(bean_name, bean, mbd)
        except BeanDefinitionValidationError as ex:
            raise BeanCreationError(bean_name, f"Invalid destruction signature: {ex}",
                                    mbd.resource_description) from ex
        return exposed

    def _get_early_bean_reference(self, bean_name: str, mbd: RootBeanDefinition, bean: Any) -> Any:
        if not mbd.synthetic and self._pipeline.has_instantiation_aware:
            return self._pipeline.early_bean_reference(bean, bean_name)
        return bean

    def _remove_singleton_if_created_for_type_check_only(self, bean_name: str) -> bool:
        if not self._merger.is_already_created(bean_name):
            self._registry.remove_singleton(bean_name)
            return True
        return False

    def _create_bean_instance(self, bean_name: str, mbd: RootBeanDefinition, args: Optional[Sequence[Any]],
                              ctx: ResolutionContext) -> Any:
        if mbd.instance_supplier is not None and args is None:
            return self._obtain_from_supplier(bean_name, mbd)
        if mbd.factory_method_name:
            return self._constructor_resolver.instantiate_using_factory_method(bean_name, mbd, args, ctx)

        bean_class = mbd.bean_class
        if bean_class is None:
            raise BeanCreationError(
                bean_name, "Bean definition has neither a bean class nor a factory method",
                mbd.resource_description)

        constructors = None
        if args is not None or not mbd.constructor_arguments_resolved:
            constructors = self._pipeline.determine_candidate_constructors(bean_class, bean_name)
        return self._constructor_resolver.autowire_constructor(bean_name, mbd, constructors, args, ctx)

    @staticmethod
    def _obtain_from_supplier(bean_name: str, mbd: RootBeanDefinition) -> Any:
        try:
            return mbd.instance_supplier()
        except BeansError:
            raise
        except Exception as ex:
            raise BeanCreationError(bean_name, f"Instance supplier threw exception: {ex}",
                                    mbd.resource_description) from ex

    def _populate_bean(self, bean_name: str, mbd: RootBeanDefinition, bean: Any, ctx: ResolutionContext) -> None:
        if not mbd.synthetic and self._pipeline.has_instantiation_aware:
            if not self._pipeline.apply_after_instantiation(bean, bean_name):
                return

        pvs: Optional[PropertyValues] = PropertyValues(mbd.property_values)
        if mbd.autowire_mode == AutowireMode.BY_NAME:
            self._dependency_resolver.autowire_by_name(bean_name, mbd, bean, pvs)
        elif mbd.autowire_mode == AutowireMode.BY_TYPE:
            self._dependency_resolver.autowire_by_type(bean_name, mbd, bean, pvs)

        if self._pipeline.has_instantiation_aware:
            pvs = self._pipeline.apply_property_values(pvs, bean, bean_name)
            if pvs is None:
                return

        if mbd.dependency_check != DependencyCheck.NONE:
            self._dependency_resolver.check_dependencies(bean_name, mbd, bean, pvs)

        self._apply_property_values(bean_name, mbd, bean, pvs, ctx)

    def _apply_property_values(self, bean_name: str, mbd: RootBeanDefinition, bean: Any,
                               pvs: PropertyValues, ctx: ResolutionContext) -> None:
        if pvs.is_empty():
            return
        value_resolver = self.new_value_resolver(bean_name, mbd, ctx)
        for pv in pvs:
            prop = self._type_descriptor.get_property(type(bean), pv.name)
            if prop is not None and not prop.writable:
                raise BeanCreationError(
                    bean_name, f"Bean property '{pv.name}' is not writable or has an invalid setter method",
                    mbd.resource_description)
            resolved = value_resolver.resolve_value_if_necessary(f"bean property '{pv.name}'", pv.value)
            try:
                converted = self._type_converter.convert_if_necessary(
                    resolved, prop.type if prop is not None else None, pv.name)
                self._type_descriptor.set_property_value(bean, pv.name, converted)
            except BeansError as ex:
                raise BeanCreationError(bean_name, f"Error setting property values: {ex}",
                                        mbd.resource_description) from ex
            except (AttributeError, TypeError, ValueError) as ex:
                raise BeanCreationError(bean_name, f"Error setting property '{pv.name}': {ex}",
                                        mbd.resource_description) from ex

    def new_value_resolver(self, bean_name: str, mbd: RootBeanDefinition,
                           ctx: ResolutionContext) -> BeanDefinitionValueResolver:
        return BeanDefinitionValueResolver(self, bean_name, mbd, ctx)

    def _initialize_bean(self, bean_name: str, bean: Any, mbd: Optional[RootBeanDefinition]) -> Any:
        self._invoke_aware_methods(bean_name, bean)

        wrapped = bean
        if mbd is None or not mbd.synthetic:
            wrapped = self._pipeline.apply_before_initialization(wrapped, bean_name)

        try:
            self._invoke_init_methods(bean_name, wrapped, mbd)
        except BeanCreationError as ex:
            if ex.bean_name == bean_name:
                raise
            raise BeanCreationError(
                bean_name, "Invocation of init method failed",
                mbd.resource_description if mbd is not None else None) from ex
        except Exception as ex:
            raise BeanCreationError(
                bean_name, f"Invocation of init method failed: {ex}",
                mbd.resource_description if mbd is not None else None) from ex

        if mbd is None or not mbd.synthetic:
            wrapped = self._pipeline.apply_after_initialization(wrapped, bean_name)
        return wrapped

    def _invoke_aware_methods(self, bean_name: str, bean: Any) -> None:
        if isinstance(bean, BeanNameAware):
            bean.set_bean_name(bean_name)
        if isinstance(bean, BeanFactoryAware):
            bean.set_bean_factory(self)

    def _invoke_init_methods(self, bean_name: str, bean: Any, mbd: Optional[RootBeanDefinition]) -> None:
        is_initializing_bean = isinstance(bean, InitializingBean)
        if is_initializing_bean:
            logger.debug("Invoking after_properties_set() on bean with name '%s'", bean_name)
            bean.after_properties_set()

        if mbd is None or bean is None:
            return
        init_method_name = mbd.init_method_name
        if not init_method_name or (is_initializing_bean and init_method_name == "after_properties_set"):
            return
        method = getattr(bean, init_method_name, None)
        if not callable(method):
            if mbd.enforce_init_method:
                raise BeanDefinitionValidationError(
                    f"Could not find an init method named '{init_method_name}' on bean with name '{bean_name}'")
            logger.debug("No default init method named '%s' found on bean with name '%s'",
                         init_method_name, bean_name)
            return
        logger.debug("Invoking init method '%s' on bean with name '%s'", init_method_name, bean_name)
        method()

    def _requires_destruction(self, bean: Any, mbd: RootBeanDefinition) -> bool:
        return bean is not None and (DisposableBeanAdapter.has_destroy_method(bean, mbd)
                                     or bool(self._pipeline.destruction_aware_for(bean)))

    def _register_disposable_bean_if_necessary(self, bean_name: str, bean: Any, mbd: RootBeanDefinition) -> None:
        if mbd.is_prototype() or not self._requires_destruction(bean, mbd):
            return
        adapter = DisposableBeanAdapter(bean, bean_name, mbd, self._pipeline.destruction_aware_for(bean))
        if mbd.is_singleton():
            self._registry.register_disposable_bean(bean_name, adapter)
        else:
            self._scopes.get_scope(mbd.scope).register_destruction_callback(bean_name, adapter.destroy)

    def pre_instantiate_singletons(self) -> None:
        """Create every non-abstract, non-lazy singleton, in registration order.

        FactoryBeans are created through ``&name``; their product only when
        the factory is a SmartFactoryBean asking for eager initialization.
        """
        logger.debug("Pre-instantiating singletons in %r", self)
        for bean_name in self.get_definition_names():
            mbd = self._merger.get_merged_definition(bean_name)
            if mbd.abstract or not mbd.is_singleton() or mbd.lazy_init:
                continue
            if self.is_factory_bean(bean_name):
                factory = self.get(FACTORY_BEAN_PREFIX + bean_name)
                if isinstance(factory, SmartFactoryBean) and factory.is_eager_init():
                    self.get(bean_name)
            else:
                self.get(bean_name)

    # ------------------------------------------------------------------
    # Autowire-capable facade for objects the container does not manage
    # ------------------------------------------------------------------

    def _run_in_context(self, func: Callable[[ResolutionContext], Any]) -> Any:
        ctx = current_context(self)
        if ctx is not None:
            return func(ctx)
        ctx = ResolutionContext(self)
        with active_context(ctx):
            return func(ctx)

    def create_bean(self, bean_class: Type[T], autowire_mode: AutowireMode = AutowireMode.CONSTRUCTOR,
                    dependency_check: bool = False) -> T:
        """Fully create an unmanaged instance of ``bean_class``, with all hooks and callbacks.

        Example::

            handler = container.create_bean(RequestHandler)
        """
        definition = BeanDefinition(bean_class=bean_class, scope=SCOPE_PROTOTYPE, autowire_mode=autowire_mode,
                                    dependency_check=DependencyCheck.OBJECTS if dependency_check else None)
        mbd = RootBeanDefinition(definition)
        bean_name = f"{bean_class.__module__}.{bean_class.__qualname__}"
        return self._run_in_context(lambda ctx: self._create_bean(bean_name, mbd, None, ctx))

    def autowire_bean_properties(self, existing_bean: Any, autowire_mode: AutowireMode = AutowireMode.BY_TYPE,
                                 dependency_check: bool = False) -> None:
        """Autowire the unset properties of ``existing_bean`` by name or by type."""
        if autowire_mode == AutowireMode.CONSTRUCTOR:
            raise ValueError("AutowireMode.CONSTRUCTOR not applicable to an existing bean instance")
        bean_class = type(existing_bean)
        definition = BeanDefinition(bean_class=bean_class, scope=SCOPE_PROTOTYPE, autowire_mode=autowire_mode,
                                    dependency_check=DependencyCheck.OBJECTS if dependency_check else None)
        mbd = RootBeanDefinition(definition)
        bean_name = f"{bean_class.__module__}.{bean_class.__qualname__}"
        self._run_in_context(lambda ctx: self._populate_bean(bean_name, mbd, existing_bean, ctx))

    def autowire_bean(self, existing_bean: Any) -> None:
        self.autowire_bean_properties(existing_bean, AutowireMode.BY_TYPE)

    def initialize_bean(self, existing_bean: Any, bean_name: str) -> Any:
        """Run aware callbacks, initialization hooks and init callbacks on ``existing_bean``."""
        return self._initialize_bean(bean_name, existing_bean, None)

    def apply_before_initialization(self, existing_bean: Any, bean_name: str) -> Any:
        return self._pipeline.apply_before_initialization(existing_bean, bean_name)

    def apply_after_initialization(self, existing_bean: Any, bean_name: str) -> Any:
        return self._pipeline.apply_after_initialization(existing_bean, bean_name)

    def resolve_dependency(self, descriptor: DependencyDescriptor, requesting_bean_name: Optional[str] = None,
                           autowired_bean_names: Optional[Set[str]] = None) -> Any:
        """Resolve an injection point against the beans of this container (and its ancestors)."""
        return self._run_in_context(lambda ctx: self._dependency_resolver.resolve_dependency(
            descriptor, requesting_bean_name, autowired_bean_names))

    # ------------------------------------------------------------------
    # Destruction
    # ------------------------------------------------------------------

    def destroy(self, bean_name: str) -> None:
        """Destroy the singleton ``bean_name`` after every bean that depends on it."""
        bean_name = self.canonical_name(bean_name)
        self._registry.destroy_singleton(bean_name)
        with self._definitions_lock:
            if bean_name in self._manual_singleton_names:
                self._manual_singleton_names.remove(bean_name)

    def destroy_all(self) -> None:
        """Destroy every singleton, dependents first, and clear the singleton caches."""
        self._registry.destroy_singletons()
        with self._definitions_lock:
            self._manual_singleton_names.clear()

    def destroy_bean(self, bean_name: str, bean: Any) -> None:
        """Run the teardown of ``bean_name``'s definition on ``bean`` (e.g. a prototype instance)."""
        mbd = self.get_merged_bean_definition(bean_name)
        self._destroy_bean_instance(bean_name, bean, mbd)

    def _destroy_bean_instance(self, bean_name: str, bean: Any, mbd: Optional[RootBeanDefinition]) -> None:
        adapter = DisposableBeanAdapter(bean, bean_name, mbd, self._pipeline.destruction_aware_for(bean))
        try:
            adapter.destroy()
        except Exception:
            logger.warning("Destruction of bean with name '%s' threw an exception", bean_name, exc_info=True)

    def destroy_scoped_bean(self, bean_name: str) -> None:
        """Remove ``bean_name`` from its custom scope and destroy the removed instance."""
        bean_name = self.transformed_bean_name(bean_name)
        mbd = self.get_merged_bean_definition(bean_name)
        instance = self._scopes.remove_scoped_bean(bean_name, mbd)
        if instance is not None:
            self._destroy_bean_instance(bean_name, instance, mbd)

    def __repr__(self) -> str:
        parent = f"; parent: {type(self._parent).__name__}" if self._parent is not None else ""
        return f"{type(self).__name__}(defining beans [{', '.join(self._definition_names)}]{parent})"
