"""
DependencyResolver

This module provides autowiring for the container:

- Resolving a single injection point by type, with primary / name
  disambiguation and a self-reference fallback
- Injecting every candidate into list, set, tuple and dict injection points
- Filling unset bean properties by name or by type
- Checking that required properties were satisfied (dependency check)

Every bean injected through autowiring is recorded in the dependency graph
so it outlives the bean it was injected into.
"""

import inspect
import logging
from typing import Any, Dict, List, Optional, Set, TYPE_CHECKING

from .bean_factory import bean_names_for_type_including_ancestors
from .definition import PropertyValues, RootBeanDefinition
from .dependency_descriptor import DependencyDescriptor
from .exceptions import (
    BeanNotOfRequiredTypeError,
    BeansError,
    NoSuchBeanDefinitionError,
    NoUniqueBeanDefinitionError,
    UnsatisfiedDependencyError,
)
from .lifecycle import FACTORY_BEAN_PREFIX, DependencyCheck
from .post_processors import PriorityOrdered
from .type_converter import TypeConverter
from .type_descriptor import PropertyInfo, is_assignable, is_instance

if TYPE_CHECKING:
    from .container import BeanContainer

logger = logging.getLogger(__name__)

# Stands for a single-dependency candidate that has not been fetched yet
_NOT_FETCHED = object()


def _type_name(tp: Any) -> str:
    return getattr(tp, '__name__', str(tp))


class DependencyResolver:
    """Autowiring engine of one container.

    Note:
        This class is used internally by BeanContainer. It reads the
        container's definitions, resolvable dependencies and ignored
        types, and fetches candidates through ``container.get``.

    Example (internal usage)::

        resolver = DependencyResolver(container)
        descriptor = DependencyDescriptor(Database, "db")
        db = resolver.resolve_dependency(descriptor, "userRepository")
    """

    def __init__(self, container: 'BeanContainer'):
        self._container = container

    def resolve_dependency(
        self,
        descriptor: DependencyDescriptor,
        requesting_bean_name: Optional[str],
        autowired_bean_names: Optional[Set[str]] = None,
        type_converter: Optional[TypeConverter] = None,
    ) -> Any:
        """Resolve the injection point described by ``descriptor``.

        Args:
            descriptor: The injection point
            requesting_bean_name: Bean the dependency is injected into, if any
            autowired_bean_names: Receives the names of every bean injected
            type_converter: Converter for the final value (the container's by default)

        Returns:
            The bean (or collection of beans) to inject, or None for an
            optional dependency without candidates

        Raises:
            NoSuchBeanDefinitionError: For a required dependency without candidates
            NoUniqueBeanDefinitionError: When several candidates remain after
                primary and name matching
        """
        converter = type_converter or self._container.type_converter
        kind, element_type = descriptor.collection_kind()
        if kind is not None:
            result = self._resolve_multiple_beans(descriptor, requesting_bean_name, autowired_bean_names,
                                                  kind, element_type)
            if result is None:
                return None
            return converter.convert_if_necessary(result, descriptor.dependency_type, descriptor.name)

        dependency_type = descriptor.dependency_type
        if dependency_type is None:
            if descriptor.required:
                raise NoSuchBeanDefinitionError(
                    f"Cannot autowire {descriptor.describe()}: it has no type annotation",
                )
            return None

        matching = self.find_autowire_candidates(requesting_bean_name, dependency_type, descriptor)
        if not matching:
            if descriptor.required:
                raise self._no_such_bean(dependency_type, descriptor)
            return None

        if len(matching) > 1:
            autowired_name = self.determine_autowire_candidate(matching, descriptor)
            if autowired_name is None:
                return descriptor.resolve_not_unique(dependency_type, list(matching))
            candidate = matching[autowired_name]
        else:
            autowired_name, candidate = next(iter(matching.items()))

        if autowired_bean_names is not None:
            autowired_bean_names.add(autowired_name)
        if candidate is _NOT_FETCHED:
            candidate = descriptor.resolve_candidate(autowired_name, dependency_type, self._container)
        if candidate is None:
            if descriptor.required:
                raise self._no_such_bean(dependency_type, descriptor)
            return None
        if not is_instance(candidate, dependency_type):
            raise BeanNotOfRequiredTypeError(autowired_name, dependency_type, type(candidate))
        return converter.convert_if_necessary(candidate, descriptor.declared_type, descriptor.name)

    def _resolve_multiple_beans(
        self,
        descriptor: DependencyDescriptor,
        bean_name: Optional[str],
        autowired_bean_names: Optional[Set[str]],
        kind: str,
        element_type: Any,
    ) -> Any:
        matching = self.find_autowire_candidates(bean_name, element_type, descriptor, multiple=True)
        if not matching:
            if descriptor.required:
                raise self._no_such_bean(element_type, descriptor)
            return None
        if autowired_bean_names is not None:
            autowired_bean_names.update(matching)
        if kind == "dict":
            return dict(matching)
        values = list(matching.values())
        if kind == "set":
            return set(values)
        if kind == "tuple":
            return tuple(values)
        return values

    @staticmethod
    def _no_such_bean(required_type: Any, descriptor: DependencyDescriptor) -> NoSuchBeanDefinitionError:
        return NoSuchBeanDefinitionError(
            f"No qualifying bean of type '{_type_name(required_type)}' available: expected at "
            f"least 1 bean which qualifies as autowire candidate. Dependency: {descriptor.describe()}",
            bean_type=required_type,
        )

    def find_autowire_candidates(
        self,
        bean_name: Optional[str],
        required_type: Any,
        descriptor: DependencyDescriptor,
        multiple: bool = False,
    ) -> Dict[str, Any]:
        """Find the beans that qualify for ``required_type``.

        The requesting bean itself, or a bean produced by one of its
        factory methods, is only considered when nothing else qualifies.

        Returns:
            Candidate name -> instance for multi-bean injection points,
            otherwise name -> a marker for "not fetched yet"
        """
        container = self._container
        candidate_names = bean_names_for_type_including_ancestors(
            container, required_type, True, descriptor.eager)
        result: Dict[str, Any] = {}

        for autowiring_type, autowiring_value in container.get_resolvable_dependencies().items():
            if is_assignable(required_type, autowiring_type):
                key = f"{type(autowiring_value).__name__}@{id(autowiring_value):x}"
                result[key] = autowiring_value

        for candidate in candidate_names:
            if not self._is_self_reference(bean_name, candidate) and container.is_autowire_candidate(candidate):
                self._add_candidate_entry(result, candidate, descriptor, required_type, multiple)

        if not result and not multiple:
            for candidate in candidate_names:
                if self._is_self_reference(bean_name, candidate) and container.is_autowire_candidate(candidate):
                    self._add_candidate_entry(result, candidate, descriptor, required_type, multiple)
        return result

    def _add_candidate_entry(self, candidates: Dict[str, Any], candidate_name: str,
                             descriptor: DependencyDescriptor, required_type: Any, multiple: bool) -> None:
        if multiple:
            instance = descriptor.resolve_candidate(candidate_name, required_type, self._container)
            if instance is not None:
                candidates[candidate_name] = instance
        else:
            candidates[candidate_name] = _NOT_FETCHED

    def _is_self_reference(self, bean_name: Optional[str], candidate_name: str) -> bool:
        if bean_name is None:
            return False
        container = self._container
        if candidate_name.startswith(FACTORY_BEAN_PREFIX):
            candidate_name = candidate_name[len(FACTORY_BEAN_PREFIX):]
        if candidate_name == bean_name:
            return True
        if container.contains_definition(candidate_name):
            mbd = container.get_merged_bean_definition(candidate_name)
            return mbd.factory_bean_name == bean_name
        return False

    def determine_autowire_candidate(self, candidates: Dict[str, Any],
                                     descriptor: DependencyDescriptor) -> Optional[str]:
        """Pick one of several candidates: the primary one, else the one named like the injection point."""
        primary = self.determine_primary_candidate(candidates, descriptor.dependency_type)
        if primary is not None:
            return primary
        resolvable = list(self._container.get_resolvable_dependencies().values())
        for candidate_name, instance in candidates.items():
            if instance is not _NOT_FETCHED and any(instance is value for value in resolvable):
                return candidate_name
            if self._matches_bean_name(candidate_name, descriptor.dependency_name):
                return candidate_name
        return None

    def determine_primary_candidate(self, candidates: Dict[str, Any], required_type: Any) -> Optional[str]:
        """Return the single primary candidate, or None.

        Raises:
            NoUniqueBeanDefinitionError: When more than one local candidate is primary
        """
        container = self._container
        primary_name = None
        for candidate_name in candidates:
            if not container.is_primary(candidate_name):
                continue
            if primary_name is None:
                primary_name = candidate_name
                continue
            candidate_local = container.contains_definition(candidate_name)
            primary_local = container.contains_definition(primary_name)
            if candidate_local and primary_local:
                raise NoUniqueBeanDefinitionError(required_type, list(candidates))
            if candidate_local:
                primary_name = candidate_name
        return primary_name

    def _matches_bean_name(self, bean_name: str, candidate_name: Optional[str]) -> bool:
        return candidate_name is not None and (
            candidate_name == bean_name or candidate_name in self._container.get_aliases(bean_name))

    def unsatisfied_non_simple_properties(self, definition: RootBeanDefinition, bean: Any) -> List[PropertyInfo]:
        """Writable collaborator properties that have no explicit value and are still unset."""
        descriptor = self._container.type_descriptor
        pvs = definition.property_values
        result = []
        for prop in descriptor.get_properties(type(bean)).values():
            if (prop.writable and not self._is_excluded_from_dependency_check(prop, type(bean))
                    and prop.name not in pvs and not descriptor.is_simple_property(prop.type)
                    and not self._has_value(bean, prop)):
                result.append(prop)
        return result

    def _is_excluded_from_dependency_check(self, prop: PropertyInfo, bean_class: type) -> bool:
        container = self._container
        prop_type = prop.type
        for ignored in container.get_ignored_dependency_types():
            if is_assignable(ignored, prop_type):
                return True
        for interface in container.get_ignored_dependency_interfaces():
            if issubclass(bean_class, interface) and hasattr(interface, prop.name):
                return True
        return False

    @staticmethod
    def _has_value(bean: Any, prop: PropertyInfo) -> bool:
        # property getters are not called; a computed property counts as unset
        if isinstance(inspect.getattr_static(type(bean), prop.name, None), property):
            return False
        return getattr(bean, prop.name, None) is not None

    def autowire_by_name(self, bean_name: str, definition: RootBeanDefinition, bean: Any,
                         pvs: PropertyValues) -> None:
        """Add a value for each unset collaborator property that has a bean of the same name."""
        container = self._container
        for prop in self.unsatisfied_non_simple_properties(definition, bean):
            if container.contains_bean(prop.name):
                value = container.get(prop.name)
                pvs.add(prop.name, value)
                container.register_dependent_bean(prop.name, bean_name)
                logger.debug("Added autowiring by name from bean name '%s' via property '%s' to bean named '%s'",
                             bean_name, prop.name, prop.name)
            else:
                logger.debug("Not autowiring property '%s' of bean '%s' by name: no matching bean found",
                             prop.name, bean_name)

    def autowire_by_type(self, bean_name: str, definition: RootBeanDefinition, bean: Any,
                         pvs: PropertyValues) -> None:
        """Add a value for each unset collaborator property that has exactly one matching bean.

        Raises:
            UnsatisfiedDependencyError: When a property cannot be resolved
        """
        container = self._container
        for prop in self.unsatisfied_non_simple_properties(definition, bean):
            descriptor = DependencyDescriptor.for_property(prop, eager=not isinstance(bean, PriorityOrdered))
            autowired_bean_names: Set[str] = set()
            try:
                value = self.resolve_dependency(descriptor, bean_name, autowired_bean_names)
            except BeansError as ex:
                raise UnsatisfiedDependencyError(
                    bean_name, prop.name, str(ex), definition.resource_description) from ex
            if value is not None:
                pvs.add(prop.name, value)
            for autowired_bean_name in sorted(autowired_bean_names):
                if not container.contains_bean(autowired_bean_name):
                    continue
                container.register_dependent_bean(autowired_bean_name, bean_name)
                logger.debug("Autowiring by type from bean name '%s' via property '%s' to bean named '%s'",
                             bean_name, prop.name, autowired_bean_name)

    def check_dependencies(self, bean_name: str, definition: RootBeanDefinition, bean: Any,
                           pvs: Optional[PropertyValues]) -> None:
        """Verify that properties covered by the definition's dependency check have values.

        Raises:
            UnsatisfiedDependencyError: For the first unsatisfied property
        """
        check = definition.dependency_check
        if check == DependencyCheck.NONE:
            return
        descriptor = self._container.type_descriptor
        for prop in descriptor.get_properties(type(bean)).values():
            if not prop.writable or self._is_excluded_from_dependency_check(prop, type(bean)):
                continue
            if (pvs is not None and prop.name in pvs) or self._has_value(bean, prop):
                continue
            simple = descriptor.is_simple_property(prop.type)
            unsatisfied = (check == DependencyCheck.ALL
                           or (simple and check == DependencyCheck.SIMPLE)
                           or (not simple and check == DependencyCheck.OBJECTS))
            if unsatisfied:
                raise UnsatisfiedDependencyError(
                    bean_name, prop.name,
                    "Set this property value or disable dependency checking for this bean.",
                    definition.resource_description,
                )
