"""
TypeDescriptor

This module provides the type introspection capability of the container.
The TypeDescriptor enumerates, for a bean class:

- Its constructor candidates and their parameters
- Factory methods by name (static/class methods, or instance methods of
  a factory bean)
- Its writable properties: public annotated attributes and ``property``
  objects with a setter

Annotations are resolved with typing.get_type_hints(), with a fallback
that evaluates string annotations in the module namespace of the class
so forward references and PEP 563 postponed annotations work.

The container only talks to this class through its public methods, so a
subclass can replace introspection with hand-written tables.
"""

import ast
import datetime
import decimal
import enum
import inspect
import pathlib
import threading
import types
import typing
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type, Union

from .exceptions import TypeInferenceError

_SIMPLE_TYPES = (
    int, float, complex, str, bytes, bool, type(None),
    decimal.Decimal, datetime.date, datetime.datetime, datetime.time, datetime.timedelta,
    pathlib.PurePath, uuid.UUID, type,
)


@dataclass
class ParameterInfo:
    """One parameter of a constructor or factory method"""
    name: str
    type: Any
    index: int
    kind: Any
    has_default: bool = False
    default: Any = None

    @property
    def is_positional_only(self) -> bool:
        return self.kind == inspect.Parameter.POSITIONAL_ONLY

    @property
    def is_keyword_only(self) -> bool:
        return self.kind == inspect.Parameter.KEYWORD_ONLY


@dataclass
class ExecutableInfo:
    """A constructor or factory method the container may call.

    Attributes:
        target: What gets called; a class, a function or a static/class method
        name: ``__init__`` for constructors, otherwise the method name
        parameters: Parameters to supply, ``self``/``cls``/varargs excluded
        declaring_class: Class the executable was found on
        is_static: False for instance methods of a factory bean
        return_type: Annotated return type of a factory method, if any
    """
    target: Callable
    name: str
    parameters: List[ParameterInfo]
    declaring_class: Optional[Type] = None
    is_static: bool = True
    return_type: Optional[Any] = None

    @property
    def parameter_count(self) -> int:
        return len(self.parameters)

    def describe(self) -> str:
        owner = getattr(self.declaring_class, '__name__', '?')
        params = ", ".join(p.name for p in self.parameters)
        return f"{owner}.{self.name}({params})"


@dataclass
class PropertyInfo:
    """A bean property the container can set"""
    name: str
    type: Any
    writable: bool = True
    declaring_class: Optional[Type] = None
    has_default: bool = False


class TypeDescriptor:
    """Default, reflection based implementation of type introspection.

    Results for properties are cached per class.

    Example::

        descriptor = TypeDescriptor()
        [ctor] = descriptor.get_constructors(UserRepository)
        [p.name for p in ctor.parameters]  # ['db', 'cache']
    """

    def __init__(self):
        self._property_cache: Dict[Type, Dict[str, PropertyInfo]] = {}
        self._lock = threading.Lock()

    def get_constructors(self, cls: Type) -> List[ExecutableInfo]:
        """Return the constructor candidates of ``cls``.

        A Python class has a single ``__init__``; it is the only candidate.

        Raises:
            TypeInferenceError: When the constructor cannot be inspected
        """
        init = cls.__init__
        if init is object.__init__:
            return [ExecutableInfo(cls, "__init__", [], declaring_class=cls)]
        parameters = self.get_parameters(init, owner=cls, skip_first=True)
        return [ExecutableInfo(cls, "__init__", parameters, declaring_class=cls)]

    def get_factory_methods(self, cls: Type, method_name: str, is_static: bool) -> List[ExecutableInfo]:
        """Return the factory methods named ``method_name`` on ``cls``.

        Args:
            cls: Class to search (the bean class, or the factory bean's class)
            method_name: Method name to look for
            is_static: Whether a static/class method is required (no factory bean)
        """
        try:
            raw = inspect.getattr_static(cls, method_name)
        except AttributeError:
            return []

        if isinstance(raw, (staticmethod, classmethod)):
            target = getattr(cls, method_name)
            skip_first = False
        elif is_static:
            return []
        elif callable(raw):
            target = raw
            skip_first = True
        else:
            return []

        declaring = next((k for k in cls.__mro__ if method_name in vars(k)), cls)
        parameters = self.get_parameters(target, owner=declaring, skip_first=skip_first)
        hints = self._resolve_type_hints(target)
        return_type = hints.get('return')
        if isinstance(return_type, str):
            return_type = self._resolve_string_annotation(declaring, 'return', return_type)
        return [ExecutableInfo(target, method_name, parameters, declaring_class=declaring,
                               is_static=isinstance(raw, (staticmethod, classmethod)),
                               return_type=return_type)]

    def get_parameters(self, func: Callable, owner: Optional[Type] = None,
                       skip_first: bool = False) -> List[ParameterInfo]:
        """Describe the parameters of ``func``.

        ``*args`` and ``**kwargs`` are excluded, as is the first parameter
        when ``skip_first`` is set (``self`` of an unbound method).
        Parameters without an annotation get type None.

        Raises:
            TypeInferenceError: When ``func`` cannot be inspected
        """
        name = getattr(func, '__qualname__', repr(func))
        try:
            sig = inspect.signature(func)
        except ValueError as e:
            raise TypeInferenceError(
                f"Cannot inspect {name}: {e}. "
                f"This may occur with built-in types or C extension classes."
            ) from e
        except TypeError as e:
            raise TypeInferenceError(f"Cannot get signature for {name}: {e}.") from e

        resolved_hints = self._resolve_type_hints(func)
        context = owner if owner is not None else func

        parameters: List[ParameterInfo] = []
        params = list(sig.parameters.values())
        if skip_first and params:
            params = params[1:]
        for param in params:
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            param_type = None
            if param.annotation is not inspect.Parameter.empty:
                param_type = resolved_hints.get(param.name, param.annotation)
                if isinstance(param_type, str):
                    param_type = self._resolve_string_annotation(context, param.name, param_type)
            has_default = param.default is not inspect.Parameter.empty
            parameters.append(ParameterInfo(
                name=param.name,
                type=param_type,
                index=len(parameters),
                kind=param.kind,
                has_default=has_default,
                default=param.default if has_default else None,
            ))
        return parameters

    def get_properties(self, cls: Type) -> Dict[str, PropertyInfo]:
        """Return the writable and read-only properties of ``cls`` by name."""
        cached = self._property_cache.get(cls)
        if cached is not None:
            return cached

        properties: Dict[str, PropertyInfo] = {}
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            hints = self._class_hints(klass)
            for name, hint in hints.items():
                if name.startswith('_') or typing.get_origin(hint) is typing.ClassVar or hint is typing.ClassVar:
                    continue
                attr = vars(klass).get(name)
                if callable(attr) and not isinstance(attr, type):
                    continue
                properties[name] = PropertyInfo(
                    name, hint, writable=True, declaring_class=klass,
                    has_default=name in vars(klass),
                )
            for name, attr in vars(klass).items():
                if name.startswith('_') or not isinstance(attr, property):
                    continue
                properties[name] = PropertyInfo(
                    name, self._property_type(klass, attr),
                    writable=attr.fset is not None, declaring_class=klass,
                )

        with self._lock:
            self._property_cache[cls] = properties
        return properties

    def get_property(self, cls: Type, name: str) -> Optional[PropertyInfo]:
        return self.get_properties(cls).get(name)

    def get_property_value(self, bean: Any, name: str) -> Any:
        return getattr(bean, name)

    def set_property_value(self, bean: Any, name: str, value: Any) -> None:
        setattr(bean, name, value)

    def is_simple_property(self, property_type: Any) -> bool:
        """Whether a property of this type is a plain value rather than a collaborator.

        Scalars, enums, strings, dates, paths and collections of those count
        as simple. Missing annotations count as simple, since nothing can be
        autowired into them.
        """
        if property_type is None or property_type is Any:
            return True
        origin = typing.get_origin(property_type)
        if is_union(origin):
            return all(self.is_simple_property(arg) for arg in typing.get_args(property_type))
        if origin is not None:
            if origin in (list, set, frozenset, tuple, dict):
                return all(self.is_simple_property(arg) for arg in typing.get_args(property_type)
                           if arg is not Ellipsis)
            return False
        if not isinstance(property_type, type):
            return False
        return issubclass(property_type, _SIMPLE_TYPES) or issubclass(property_type, enum.Enum)

    def _property_type(self, klass: Type, prop: property) -> Any:
        if prop.fset is not None:
            hints = self._resolve_type_hints(prop.fset)
            params = [p for p in inspect.signature(prop.fset).parameters][1:]
            if params and params[0] in hints:
                return hints[params[0]]
        if prop.fget is not None:
            return self._resolve_type_hints(prop.fget).get('return')
        return None

    def _class_hints(self, klass: Type) -> Dict[str, Any]:
        try:
            own = inspect.get_annotations(klass)
        except Exception:
            own = {}
        if not own:
            return {}
        try:
            resolved = typing.get_type_hints(klass, include_extras=True)
        except Exception:
            resolved = {}
        hints: Dict[str, Any] = {}
        for name, annotation in own.items():
            hint = resolved.get(name, annotation)
            if isinstance(hint, str):
                try:
                    hint = self._resolve_string_annotation(klass, name, hint)
                except TypeInferenceError:
                    hint = None
            hints[name] = hint
        return hints

    @staticmethod
    def _resolve_type_hints(func: Callable) -> Dict[str, Any]:
        """Resolve type hints for a callable using typing.get_type_hints().

        Returns an empty dict when resolution fails, leaving the raw
        annotations for the string fallback.
        """
        try:
            # include_extras=True preserves Annotated[] metadata
            return typing.get_type_hints(func, include_extras=True)
        except NameError:
            # Type not found in scope - common with local classes
            return {}
        except RecursionError:
            return {}
        except TypeError:
            # PEP 604 | operator used with a type that doesn't support it
            return {}
        except Exception:
            return {}

    @staticmethod
    def _resolve_string_annotation(context: Any, param_name: str, annotation: str) -> Any:
        """Evaluate a string annotation in the namespace of ``context``.

        Raises:
            TypeInferenceError: When the annotation cannot be resolved
        """
        owner_name = getattr(context, '__qualname__', repr(context))
        module = inspect.getmodule(context)
        if module is None:
            raise TypeInferenceError(
                f"Cannot resolve forward reference '{annotation}' for parameter "
                f"'{param_name}' in {owner_name}. "
                f"The module could not be determined. "
                f"Hint: Define the referenced type at module level."
            )

        namespace: Dict[str, Any] = {}
        namespace.update(vars(module))
        if isinstance(context, type):
            namespace.update(vars(context))
        namespace.setdefault('Union', Union)
        namespace.setdefault('Optional', Optional)

        converted = TypeDescriptor._convert_union_syntax(annotation)
        try:
            return eval(converted, namespace)
        except NameError:
            raise TypeInferenceError(
                f"Cannot resolve forward reference '{annotation}' for parameter "
                f"'{param_name}' in {owner_name}. "
                f"The type '{annotation}' was not found in the module's namespace."
            )
        except SyntaxError as e:
            raise TypeInferenceError(
                f"Invalid forward reference '{annotation}' for parameter "
                f"'{param_name}' in {owner_name}: {e}."
            ) from e
        except Exception as e:
            raise TypeInferenceError(
                f"Failed to resolve forward reference '{annotation}' for parameter "
                f"'{param_name}' in {owner_name}: {e}."
            ) from e

    @staticmethod
    def _convert_union_syntax(annotation: str) -> str:
        """Convert PEP 604 union syntax (X | Y) to Union[X, Y].

        Some runtime objects used in annotations do not support ``|``.

        Example::

            >>> TypeDescriptor._convert_union_syntax('int | str')
            'Union[int, str]'
        """
        if '|' not in annotation:
            return annotation

        try:
            tree = ast.parse(annotation, mode='eval')
        except SyntaxError:
            return annotation

        class UnionTransformer(ast.NodeTransformer):
            def visit_BinOp(self, node: ast.BinOp) -> ast.AST:
                if isinstance(node.op, ast.BitOr):
                    # X | Y | Z becomes Union[X, Y, Z], not Union[Union[X, Y], Z]
                    types = TypeDescriptor._collect_union_types(node)
                    return ast.Subscript(
                        value=ast.Name(id='Union', ctx=ast.Load()),
                        slice=ast.Tuple(elts=[self.visit(t) for t in types], ctx=ast.Load()),
                        ctx=ast.Load()
                    )
                self.generic_visit(node)
                return node

        new_tree = UnionTransformer().visit(tree)
        ast.fix_missing_locations(new_tree)
        return ast.unparse(new_tree.body)

    @staticmethod
    def _collect_union_types(node: ast.BinOp) -> List[ast.AST]:
        types: List[ast.AST] = []

        def collect(n: ast.AST) -> None:
            if isinstance(n, ast.BinOp) and isinstance(n.op, ast.BitOr):
                collect(n.left)
                collect(n.right)
            else:
                types.append(n)

        collect(node)
        return types


def strip_annotated(tp: Any) -> Any:
    """``Annotated[X, ...]`` -> ``X``; anything else unchanged."""
    if typing.get_origin(tp) is typing.Annotated:
        return typing.get_args(tp)[0]
    return tp


def is_assignable(target_type: Any, value_type: Any) -> bool:
    """Whether values of ``value_type`` can be used where ``target_type`` is declared.

    Generic aliases are compared by their origin class; a Union target
    accepts any of its members.
    """
    target_type = strip_annotated(target_type)
    if target_type is None or target_type is Any or target_type is object:
        return True
    if value_type is None:
        return False
    origin = typing.get_origin(target_type)
    if is_union(origin):
        return any(is_assignable(arg, value_type) for arg in typing.get_args(target_type))
    if origin is not None:
        target_type = origin
    value_origin = typing.get_origin(value_type)
    if value_origin is not None:
        value_type = value_origin
    if not isinstance(target_type, type) or not isinstance(value_type, type):
        return False
    try:
        return issubclass(value_type, target_type)
    except TypeError:
        return False


def is_instance(value: Any, target_type: Any) -> bool:
    """isinstance() that accepts typing constructs (generics, Union, Any)."""
    target_type = strip_annotated(target_type)
    if target_type is None or target_type is Any:
        return True
    origin = typing.get_origin(target_type)
    if is_union(origin):
        return any(is_instance(value, arg) for arg in typing.get_args(target_type))
    if origin is not None:
        target_type = origin
    if not isinstance(target_type, type):
        return False
    try:
        return isinstance(value, target_type)
    except TypeError:
        return False


def is_union(origin: Any) -> bool:
    """Whether ``origin`` (from typing.get_origin) denotes ``Union``/``X | Y``."""
    return origin is Union or origin is types.UnionType
