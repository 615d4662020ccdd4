"""
TypeConverter

Conversion of configured and resolved values to the declared type of the
property or parameter that receives them.
"""

import enum
import threading
import typing
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple, Type

from .exceptions import TypeMismatchError
from .type_descriptor import is_instance, is_union, strip_annotated

_TRUE_VALUES = {"true", "on", "yes", "1"}
_FALSE_VALUES = {"false", "off", "no", "0"}


class TypeConverter(ABC):
    """Converts a value to a required type, or raises TypeMismatchError."""

    @abstractmethod
    def convert_if_necessary(self, value: Any, required_type: Any, context: Optional[str] = None) -> Any:
        """Return ``value`` converted to ``required_type``.

        Args:
            value: The value to convert
            required_type: Target type; None or Any means "as is"
            context: What is being converted, for error messages

        Raises:
            TypeMismatchError: When no conversion applies
        """


class SimpleTypeConverter(TypeConverter):
    """Default converter.

    Handles strings to numbers, booleans and enums, numbers to numbers,
    sequences to the declared collection type (converting elements when
    the collection is parameterized) and custom registered converters.

    Example::

        converter = SimpleTypeConverter()
        converter.convert_if_necessary("42", int)  # 42
        converter.register_converter(str, Path, Path)
    """

    def __init__(self):
        self._converters: Dict[Tuple[Type, Type], Callable[[Any], Any]] = {}
        self._lock = threading.Lock()

    def register_converter(self, source_type: Type, target_type: Type, func: Callable[[Any], Any]) -> None:
        """Register a converter used when a ``source_type`` value must become ``target_type``."""
        with self._lock:
            self._converters[(source_type, target_type)] = func

    def convert_if_necessary(self, value: Any, required_type: Any, context: Optional[str] = None) -> Any:
        required_type = strip_annotated(required_type)
        if required_type is None or required_type is Any or value is None:
            return value

        origin = typing.get_origin(required_type)
        if is_union(origin):
            members = [arg for arg in typing.get_args(required_type) if arg is not type(None)]
            if any(is_instance(value, member) for member in members):
                return value
            for member in members:
                try:
                    return self.convert_if_necessary(value, member, context)
                except TypeMismatchError:
                    continue
            raise self._mismatch(value, required_type, context)

        if origin is not None:
            return self._convert_collection(value, required_type, origin, context)

        if not isinstance(required_type, type):
            return value
        if isinstance(value, required_type) and not (required_type is int and isinstance(value, bool)):
            return value

        custom = self._find_converter(type(value), required_type)
        if custom is not None:
            try:
                return custom(value)
            except Exception as ex:
                raise self._mismatch(value, required_type, context) from ex

        try:
            return self._convert_default(value, required_type)
        except (TypeError, ValueError, KeyError) as ex:
            raise self._mismatch(value, required_type, context) from ex

    def _find_converter(self, source_type: Type, target_type: Type) -> Optional[Callable[[Any], Any]]:
        for klass in source_type.__mro__:
            func = self._converters.get((klass, target_type))
            if func is not None:
                return func
        return None

    def _convert_default(self, value: Any, required_type: Type) -> Any:
        if issubclass(required_type, enum.Enum):
            if isinstance(value, str):
                try:
                    return required_type[value.strip()]
                except KeyError:
                    return required_type(value)
            return required_type(value)
        if required_type is bool:
            if isinstance(value, str):
                text = value.strip().lower()
                if text in _TRUE_VALUES:
                    return True
                if text in _FALSE_VALUES:
                    return False
                raise ValueError(f"Invalid boolean value [{value}]")
            if isinstance(value, (int, float)):
                return bool(value)
            raise TypeError(type(value).__name__)
        if required_type in (int, float, complex):
            if isinstance(value, str):
                return required_type(value.strip())
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                if required_type is int and isinstance(value, float) and not value.is_integer():
                    raise ValueError(f"Cannot convert {value} to int without losing precision")
                return required_type(value)
            raise TypeError(type(value).__name__)
        if required_type is str:
            if isinstance(value, (int, float, bool, enum.Enum)):
                return value.name if isinstance(value, enum.Enum) else str(value)
            raise TypeError(type(value).__name__)
        if required_type in (list, tuple, set, frozenset) and isinstance(value, (list, tuple, set, frozenset)):
            return required_type(value)
        raise TypeError(type(value).__name__)

    def _convert_collection(self, value: Any, required_type: Any, origin: Type, context: Optional[str]) -> Any:
        args = typing.get_args(required_type)
        if origin in (list, set, frozenset) or (origin is tuple and len(args) == 2 and args[1] is Ellipsis):
            if not isinstance(value, (list, tuple, set, frozenset)):
                raise self._mismatch(value, required_type, context)
            element_type = args[0] if args else None
            items = [self.convert_if_necessary(item, element_type, context) for item in value]
            return origin(items)
        if origin is tuple:
            if not isinstance(value, (list, tuple)) or len(value) != len(args):
                raise self._mismatch(value, required_type, context)
            return tuple(self.convert_if_necessary(item, arg, context) for item, arg in zip(value, args))
        if origin is dict:
            if not isinstance(value, dict):
                raise self._mismatch(value, required_type, context)
            key_type, value_type = args if len(args) == 2 else (None, None)
            return {
                self.convert_if_necessary(k, key_type, context): self.convert_if_necessary(v, value_type, context)
                for k, v in value.items()
            }
        if isinstance(origin, type) and not isinstance(value, origin):
            raise self._mismatch(value, required_type, context)
        return value

    @staticmethod
    def _mismatch(value: Any, required_type: Any, context: Optional[str]) -> TypeMismatchError:
        error = TypeMismatchError(value, required_type)
        if context:
            error = TypeMismatchError(value, required_type, f"{error} for {context}")
        return error
