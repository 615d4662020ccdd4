"""
DependencyDescriptor

Describes one injection point: a property or a constructor / factory
method parameter about to be autowired.
"""

import collections.abc
import typing
from typing import Any, Optional, Tuple, Type, TYPE_CHECKING

from .exceptions import NoUniqueBeanDefinitionError
from .type_descriptor import ParameterInfo, PropertyInfo, is_union, strip_annotated

if TYPE_CHECKING:
    from .bean_factory import BeanFactory

_LIST_ORIGINS = (list, collections.abc.Sequence, collections.abc.Iterable, collections.abc.Collection)
_SET_ORIGINS = (set, frozenset, collections.abc.Set)
_DICT_ORIGINS = (dict, collections.abc.Mapping)


class DependencyDescriptor:
    """An injection point about to be resolved.

    Attributes:
        declared_type: Type as annotated, including Optional[] / List[] wrappers
        name: Property or parameter name (used for by-name fallback matching)
        required: Whether an unresolvable dependency is an error
        eager: Whether candidate lookup may initialize FactoryBeans eagerly
        nesting_level: 1 for the declared type itself; each level unwraps one
            generic container (Optional[X], List[X], ...)
        declaring_class: Class that declares the injection point
        parameter_index: Index for constructor / factory method parameters

    Example::

        descriptor = DependencyDescriptor(Optional[Database], "db")
        descriptor.required  # False
        descriptor.dependency_type  # Database
    """

    def __init__(
        self,
        declared_type: Any,
        name: Optional[str] = None,
        required: bool = True,
        eager: bool = True,
        declaring_class: Optional[Type] = None,
        parameter_index: Optional[int] = None,
    ):
        self.declared_type = strip_annotated(declared_type)
        self.name = name
        self.eager = eager
        self.declaring_class = declaring_class
        self.parameter_index = parameter_index
        self.nesting_level = 1
        self._optional = self._is_optional(self.declared_type)
        self.required = required and not self._optional

    @classmethod
    def for_parameter(cls, parameter: ParameterInfo, declaring_class: Optional[Type] = None,
                      required: Optional[bool] = None) -> 'DependencyDescriptor':
        if required is None:
            required = not parameter.has_default
        return cls(parameter.type, parameter.name, required=required,
                   declaring_class=declaring_class, parameter_index=parameter.index)

    @classmethod
    def for_property(cls, prop: PropertyInfo, eager: bool = True) -> 'DependencyDescriptor':
        return cls(prop.type, prop.name, required=not prop.has_default, eager=eager,
                   declaring_class=prop.declaring_class)

    @staticmethod
    def _is_optional(tp: Any) -> bool:
        return is_union(typing.get_origin(tp)) and type(None) in typing.get_args(tp)

    def increase_nesting_level(self) -> None:
        self.nesting_level += 1

    @property
    def dependency_type(self) -> Any:
        """The type to look candidates up by, after unwrapping ``Optional`` and
        ``nesting_level - 1`` generic containers."""
        tp = self._unwrap_optional(self.declared_type)
        for _ in range(self.nesting_level - 1):
            args = typing.get_args(tp)
            if not args:
                return None
            tp = self._unwrap_optional(strip_annotated(args[-1]))
        return tp

    @staticmethod
    def _unwrap_optional(tp: Any) -> Any:
        if is_union(typing.get_origin(tp)):
            members = [arg for arg in typing.get_args(tp) if arg is not type(None)]
            if len(members) == 1:
                return strip_annotated(members[0])
        return tp

    def collection_kind(self) -> Tuple[Optional[str], Any]:
        """Classify a multi-bean injection point.

        Returns:
            ``("list" | "set" | "tuple" | "dict", element_type)`` or
            ``(None, None)`` for a single-bean dependency
        """
        tp = self.dependency_type
        origin = typing.get_origin(tp)
        args = typing.get_args(tp)
        if origin is None or not args:
            return None, None
        if origin in _LIST_ORIGINS:
            return "list", strip_annotated(args[0])
        if origin in _SET_ORIGINS:
            return "set", strip_annotated(args[0])
        if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
            return "tuple", strip_annotated(args[0])
        if origin in _DICT_ORIGINS and len(args) == 2 and args[0] is str:
            return "dict", strip_annotated(args[1])
        return None, None

    @property
    def dependency_name(self) -> Optional[str]:
        return self.name

    def resolve_candidate(self, bean_name: str, required_type: Any, bean_factory: 'BeanFactory') -> Any:
        """Fetch the chosen candidate bean."""
        return bean_factory.get(bean_name)

    def resolve_not_unique(self, required_type: Any, candidate_names) -> Any:
        """Called when several candidates remain; raises by default."""
        raise NoUniqueBeanDefinitionError(required_type, candidate_names)

    def describe(self) -> str:
        owner = getattr(self.declaring_class, '__name__', None)
        if self.parameter_index is not None:
            where = f"parameter {self.parameter_index} ('{self.name}')"
        else:
            where = f"property '{self.name}'"
        return f"{where} of {owner}" if owner else where

    def __repr__(self) -> str:
        type_name = getattr(self.declared_type, '__name__', str(self.declared_type))
        return f"DependencyDescriptor({type_name}, name={self.name!r}, required={self.required})"
