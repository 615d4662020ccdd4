"""
Definition

Data classes describing beans declaratively, and the merged (root)
definition the container builds from them
"""

import copy
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Type, Union

from .lifecycle import SCOPE_PROTOTYPE, SCOPE_SINGLETON, AutowireMode, DependencyCheck


@dataclass(frozen=True)
class RuntimeBeanReference:
    """Placeholder for another bean, resolved when the value is applied"""
    bean_name: str
    to_parent: bool = False


@dataclass
class PropertyValue:
    """A single named property value"""
    name: str
    value: Any


class PropertyValues:
    """Ordered collection of property values keyed by property name.

    Adding a value for an existing name replaces it in place, so merging
    a child over a parent keeps the parent's ordering.

    Example::

        pvs = PropertyValues({"url": "sqlite://", "pool": RuntimeBeanReference("pool")})
        pvs.add("timeout", 30)
        "url" in pvs  # True
    """

    def __init__(self, values: Optional[Union[Dict[str, Any], 'PropertyValues']] = None):
        self._values: Dict[str, PropertyValue] = {}
        if isinstance(values, PropertyValues):
            for pv in values:
                self.add(pv.name, pv.value)
        elif values:
            for name, value in values.items():
                self.add(name, value)

    def add(self, name: str, value: Any) -> 'PropertyValues':
        self._values[name] = PropertyValue(name, value)
        return self

    def add_all(self, other: 'PropertyValues') -> 'PropertyValues':
        for pv in other:
            self.add(pv.name, pv.value)
        return self

    def get(self, name: str) -> Optional[PropertyValue]:
        return self._values.get(name)

    def remove(self, name: str) -> None:
        self._values.pop(name, None)

    def names(self) -> List[str]:
        return list(self._values)

    def is_empty(self) -> bool:
        return not self._values

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[PropertyValue]:
        return iter(list(self._values.values()))

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"PropertyValues({[pv.name for pv in self]})"


@dataclass
class ValueHolder:
    """Constructor argument value, optionally typed and/or named"""
    value: Any
    type: Optional[Type] = None
    name: Optional[str] = None


class ConstructorArgumentValues:
    """Constructor arguments, either by position or generic.

    Generic arguments are matched to a parameter by name first, then by
    type. Merging keeps the same keys: indexed values by index, generic
    values by name when they have one.
    """

    def __init__(self):
        self.indexed: Dict[int, ValueHolder] = {}
        self.generic: List[ValueHolder] = []

    def add_indexed(self, index: int, value: Any, type: Optional[Type] = None) -> 'ConstructorArgumentValues':
        if index < 0:
            raise ValueError("Constructor argument index must not be negative")
        self.indexed[index] = ValueHolder(value, type)
        return self

    def add_generic(self, value: Any, type: Optional[Type] = None,
                    name: Optional[str] = None) -> 'ConstructorArgumentValues':
        holder = ValueHolder(value, type, name)
        if name is not None:
            for i, existing in enumerate(self.generic):
                if existing.name == name:
                    self.generic[i] = holder
                    return self
        self.generic.append(holder)
        return self

    def add_all(self, other: 'ConstructorArgumentValues') -> 'ConstructorArgumentValues':
        for index, holder in other.indexed.items():
            self.indexed[index] = copy.copy(holder)
        for holder in other.generic:
            self.add_generic(holder.value, holder.type, holder.name)
        return self

    def get_indexed(self, index: int) -> Optional[ValueHolder]:
        return self.indexed.get(index)

    def get_generic(self, name: Optional[str], param_type: Optional[Type],
                    used: List[ValueHolder]) -> Optional[ValueHolder]:
        """Find a generic value for a parameter that has not been used yet."""
        for holder in self.generic:
            if any(holder is u for u in used):
                continue
            if holder.name is not None and holder.name != name:
                continue
            if (holder.type is not None and isinstance(holder.type, type)
                    and isinstance(param_type, type) and not issubclass(holder.type, param_type)):
                continue
            return holder
        return None

    def count(self) -> int:
        return len(self.indexed) + len(self.generic)

    def is_empty(self) -> bool:
        return not self.indexed and not self.generic


@dataclass(frozen=True)
class LookupOverride:
    """Replace method ``method_name`` with a lookup of bean ``bean_name``"""
    method_name: str
    bean_name: str


@dataclass
class BeanDefinition:
    """Declarative description of a bean.

    ``bean_class`` may be a class or a dotted import path. Fields left at
    ``None`` are inherited from the parent definition when ``parent_name``
    is set; the container fills in defaults when merging.

    Attributes:
        bean_class: Class (or ``"pkg.module.Class"``) to instantiate
        parent_name: Name of a definition to inherit settings from
        scope: Scope name; empty means "singleton" once merged
        factory_method_name: Static method on ``bean_class`` or method on
            ``factory_bean_name`` that produces the bean
        init_method_name / destroy_method_name: Lifecycle callbacks by name
        depends_on: Beans that must be created (and destroyed) around this one
        resource_description: Where the definition came from, for errors
    """
    bean_class: Optional[Union[Type, str]] = None
    parent_name: Optional[str] = None
    scope: Optional[str] = None
    abstract: bool = False
    lazy_init: Optional[bool] = None
    primary: Optional[bool] = None
    autowire_candidate: Optional[bool] = None
    autowire_mode: Optional[AutowireMode] = None
    dependency_check: Optional[DependencyCheck] = None
    depends_on: Optional[List[str]] = None
    factory_bean_name: Optional[str] = None
    factory_method_name: Optional[str] = None
    init_method_name: Optional[str] = None
    destroy_method_name: Optional[str] = None
    enforce_init_method: bool = True
    enforce_destroy_method: bool = True
    synthetic: bool = False
    property_values: PropertyValues = field(default_factory=PropertyValues)
    constructor_arguments: ConstructorArgumentValues = field(default_factory=ConstructorArgumentValues)
    lookup_overrides: Dict[str, LookupOverride] = field(default_factory=dict)
    instance_supplier: Optional[Callable[[], Any]] = None
    resource_description: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    def has_bean_class(self) -> bool:
        return isinstance(self.bean_class, type)

    def is_singleton(self) -> bool:
        return self.scope in (None, "", SCOPE_SINGLETON)

    def is_prototype(self) -> bool:
        return self.scope == SCOPE_PROTOTYPE

    def add_lookup_override(self, method_name: str, bean_name: str) -> None:
        self.lookup_overrides[method_name] = LookupOverride(method_name, bean_name)

    def clone(self) -> 'BeanDefinition':
        """Structural copy; property and argument containers are not shared."""
        other = copy.copy(self)
        other.property_values = PropertyValues(self.property_values)
        other.constructor_arguments = ConstructorArgumentValues().add_all(self.constructor_arguments)
        other.lookup_overrides = dict(self.lookup_overrides)
        other.depends_on = list(self.depends_on) if self.depends_on is not None else None
        other.attributes = dict(self.attributes)
        return other

    def override_from(self, other: 'BeanDefinition') -> None:
        """Apply a child's explicit settings on top of this (parent) copy."""
        if other.bean_class is not None:
            self.bean_class = other.bean_class
        if other.scope:
            self.scope = other.scope
        self.abstract = other.abstract
        for name in ("lazy_init", "primary", "autowire_candidate", "autowire_mode",
                     "dependency_check", "factory_bean_name", "factory_method_name",
                     "init_method_name", "destroy_method_name", "instance_supplier",
                     "resource_description"):
            value = getattr(other, name)
            if value is not None:
                setattr(self, name, value)
        if other.init_method_name is not None:
            self.enforce_init_method = other.enforce_init_method
        if other.destroy_method_name is not None:
            self.enforce_destroy_method = other.enforce_destroy_method
        if other.depends_on is not None:
            self.depends_on = list(other.depends_on)
        self.synthetic = self.synthetic or other.synthetic
        self.property_values.add_all(other.property_values)
        self.constructor_arguments.add_all(other.constructor_arguments)
        self.lookup_overrides.update(other.lookup_overrides)
        self.attributes.update(other.attributes)


class RootBeanDefinition(BeanDefinition):
    """Fully merged definition with no unresolved parent link.

    Besides the merged settings it caches what the container learns on
    first creation: the resolved class, the chosen constructor or factory
    method, and whether merged-definition post-processing already ran.
    """

    def __init__(self, source: BeanDefinition):
        merged = BeanDefinition.clone(source)
        super().__init__(**{f: getattr(merged, f) for f in BeanDefinition.__dataclass_fields__})
        self.parent_name = None
        if not self.scope:
            self.scope = SCOPE_SINGLETON
        if self.lazy_init is None:
            self.lazy_init = False
        if self.primary is None:
            self.primary = False
        if self.autowire_candidate is None:
            self.autowire_candidate = True
        if self.autowire_mode is None:
            self.autowire_mode = AutowireMode.NO
        if self.dependency_check is None:
            self.dependency_check = DependencyCheck.NONE

        self.post_processing_lock = threading.Lock()
        self.post_processed = False
        self.constructor_argument_lock = threading.Lock()
        self.resolved_constructor_or_factory_method: Optional[Callable] = None
        self.constructor_arguments_resolved = False
        self.factory_method_return_type: Optional[Type] = None
        self.before_instantiation_resolved: Optional[bool] = None
        self.is_factory_bean: Optional[bool] = None

    def clone(self) -> 'RootBeanDefinition':
        return RootBeanDefinition(self)

    def __repr__(self) -> str:
        cls = self.bean_class.__name__ if isinstance(self.bean_class, type) else self.bean_class
        return (f"RootBeanDefinition(class={cls}, scope={self.scope}, "
                f"abstract={self.abstract}, lazy_init={self.lazy_init})")
