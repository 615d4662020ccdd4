"""
ConstructorResolver

Chooses the constructor or factory method for a bean and resolves its
arguments. Candidates are tried from the most parameters to the fewest
(declaration order breaks ties); the first one whose parameters can all
be satisfied is used and cached on the merged definition.

Each parameter is satisfied, in order of preference, by:

1. An explicit argument passed to ``get(name, args=...)``
2. An indexed, then a generic constructor argument of the definition
3. Autowiring by type (parameters with a default keep it when nothing matches)
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, TYPE_CHECKING

from .definition import RootBeanDefinition, ValueHolder
from .dependency_descriptor import DependencyDescriptor
from .exceptions import (
    BeanCreationError,
    BeanDefinitionStoreError,
    BeansError,
    UnsatisfiedDependencyError,
)
from .resolution_context import ResolutionContext
from .type_descriptor import ExecutableInfo, ParameterInfo

if TYPE_CHECKING:
    from .container import BeanContainer

logger = logging.getLogger(__name__)


class ArgumentsHolder:
    """Resolved arguments for one constructor or factory method call."""

    def __init__(self):
        self.args: List[Any] = []
        self.kwargs: Dict[str, Any] = {}
        self.autowired_bean_names: Set[str] = set()

    def add(self, param: ParameterInfo, value: Any) -> None:
        if param.is_positional_only:
            self.args.append(value)
        else:
            self.kwargs[param.name] = value

    def skip(self, param: ParameterInfo) -> None:
        # A later positional-only argument cannot be passed past a gap
        if param.is_positional_only:
            self.args.append(param.default)


class ConstructorResolver:
    """Constructor and factory method resolution for one container.

    Note:
        This class is used internally by BeanContainer.
    """

    def __init__(self, container: 'BeanContainer'):
        self._container = container

    def autowire_constructor(
        self,
        bean_name: str,
        mbd: RootBeanDefinition,
        explicit_constructors: Optional[List[ExecutableInfo]],
        explicit_args: Optional[Sequence[Any]],
        ctx: ResolutionContext,
    ) -> Any:
        """Create the bean through the best satisfiable constructor.

        Args:
            bean_name: Name of the bean
            mbd: Its merged definition
            explicit_constructors: Candidates chosen by a post-processor, or None
            explicit_args: Arguments passed to ``get()``, or None
            ctx: Resolution context of the current call chain

        Raises:
            UnsatisfiedDependencyError: When no candidate can be satisfied
        """
        cached = self._cached_executable(mbd, explicit_args)
        if cached is not None:
            holder = self._create_argument_array(bean_name, mbd, cached, ctx)
            return self._instantiate(bean_name, mbd, cached, holder)

        candidates = explicit_constructors
        if not candidates:
            candidates = self._container.type_descriptor.get_constructors(mbd.bean_class)

        chosen, holder = self._select(bean_name, mbd, candidates, explicit_args, ctx, "constructor")
        if explicit_args is None:
            self._cache(mbd, chosen)
        return self._instantiate(bean_name, mbd, chosen, holder)

    def instantiate_using_factory_method(
        self,
        bean_name: str,
        mbd: RootBeanDefinition,
        explicit_args: Optional[Sequence[Any]],
        ctx: ResolutionContext,
    ) -> Any:
        """Create the bean by calling its factory method.

        The method is looked up on the factory bean's class when
        ``factory_bean_name`` is set, otherwise as a static or class method
        of the bean class.

        Raises:
            BeanDefinitionStoreError: When the factory bean reference points
                back to the bean itself, or neither a class nor a factory bean is set
            BeanCreationError: When no matching factory method exists
        """
        container = self._container
        factory_bean_name = mbd.factory_bean_name
        if factory_bean_name is not None:
            if factory_bean_name == bean_name:
                raise BeanDefinitionStoreError(
                    "factory-bean reference points back to the same bean definition",
                    bean_name=bean_name,
                    resource_description=mbd.resource_description,
                )
            factory_bean = container.get(factory_bean_name)
            container.register_dependent_bean(factory_bean_name, bean_name)
            factory_class = type(factory_bean)
            is_static = False
        else:
            if mbd.bean_class is None:
                raise BeanDefinitionStoreError(
                    "bean definition declares neither a bean class nor a factory-bean reference",
                    bean_name=bean_name,
                    resource_description=mbd.resource_description,
                )
            factory_bean = None
            factory_class = container.resolve_bean_class(mbd, bean_name)
            is_static = True

        def instantiate(method: ExecutableInfo, holder: ArgumentsHolder) -> Any:
            return self._instantiate_with_factory_method(bean_name, mbd, factory_bean, method, holder)

        cached = self._cached_executable(mbd, explicit_args)
        if cached is not None:
            holder = self._create_argument_array(bean_name, mbd, cached, ctx)
            return instantiate(cached, holder)

        candidates = container.type_descriptor.get_factory_methods(
            factory_class, mbd.factory_method_name, is_static)
        if not candidates:
            kind = "static" if is_static else "non-static"
            raise BeanCreationError(
                bean_name,
                f"No matching factory method found on class [{factory_class.__name__}]: "
                f"factory method '{mbd.factory_method_name}()'. Check that a method with the "
                f"specified name exists and that it is {kind}.",
                mbd.resource_description,
            )

        chosen, holder = self._select(bean_name, mbd, candidates, explicit_args, ctx, "factory method")
        if chosen.return_type is not None:
            mbd.factory_method_return_type = chosen.return_type
        if explicit_args is None:
            self._cache(mbd, chosen)
        return instantiate(chosen, holder)

    @staticmethod
    def _cached_executable(mbd: RootBeanDefinition, explicit_args: Optional[Sequence[Any]]) -> Optional[ExecutableInfo]:
        if explicit_args is not None:
            return None
        with mbd.constructor_argument_lock:
            if mbd.constructor_arguments_resolved:
                return mbd.resolved_constructor_or_factory_method
        return None

    @staticmethod
    def _cache(mbd: RootBeanDefinition, executable: ExecutableInfo) -> None:
        with mbd.constructor_argument_lock:
            mbd.resolved_constructor_or_factory_method = executable
            mbd.constructor_arguments_resolved = True

    def _select(self, bean_name: str, mbd: RootBeanDefinition, candidates: List[ExecutableInfo],
                explicit_args: Optional[Sequence[Any]], ctx: ResolutionContext, kind: str):
        # sorted() is stable: equal parameter counts keep declaration order
        ordered = sorted(candidates, key=lambda c: -c.parameter_count)
        min_args = len(explicit_args) if explicit_args is not None else mbd.constructor_arguments.count()
        causes: List[BeansError] = []

        for candidate in ordered:
            if candidate.parameter_count < min_args:
                continue
            try:
                if explicit_args is not None:
                    holder = self._explicit_argument_array(bean_name, candidate, explicit_args)
                else:
                    holder = self._create_argument_array(bean_name, mbd, candidate, ctx)
            except UnsatisfiedDependencyError as ex:
                logger.debug("Ignoring %s [%s] of bean '%s': %s", kind, candidate.describe(), bean_name, ex)
                causes.append(ex)
                continue
            return candidate, holder

        if causes:
            error = causes[-1]
            for cause in causes[:-1]:
                error.add_related_cause(cause)
            raise error
        bean_class = getattr(mbd.bean_class, '__name__', mbd.bean_class)
        raise BeanCreationError(
            bean_name,
            f"Could not resolve matching {kind} on bean class [{bean_class}] "
            f"(hint: specify index/type/name arguments for simple parameters to avoid type ambiguities)",
            mbd.resource_description,
        )

    def _explicit_argument_array(self, bean_name: str, executable: ExecutableInfo,
                                 explicit_args: Sequence[Any]) -> ArgumentsHolder:
        converter = self._container.type_converter
        params = executable.parameters
        required = sum(1 for p in params if not p.has_default)
        if len(explicit_args) < required:
            raise UnsatisfiedDependencyError(
                bean_name, None,
                f"{executable.describe()} needs at least {required} arguments, got {len(explicit_args)}",
            )
        holder = ArgumentsHolder()
        for param, value in zip(params, explicit_args):
            holder.add(param, self._convert(bean_name, param, value, converter))
        return holder

    def _create_argument_array(self, bean_name: str, mbd: RootBeanDefinition,
                               executable: ExecutableInfo, ctx: ResolutionContext) -> ArgumentsHolder:
        container = self._container
        converter = container.type_converter
        value_resolver = container.new_value_resolver(bean_name, mbd, ctx)
        cargs = mbd.constructor_arguments
        used: List[ValueHolder] = []
        holder = ArgumentsHolder()

        for param in executable.parameters:
            value_holder = cargs.get_indexed(param.index)
            if value_holder is None:
                value_holder = cargs.get_generic(param.name, param.type, used)
            if value_holder is not None:
                used.append(value_holder)
                try:
                    resolved = value_resolver.resolve_value_if_necessary(
                        f"constructor argument '{param.name}'", value_holder.value)
                except BeansError as ex:
                    raise UnsatisfiedDependencyError(
                        bean_name, param.name, str(ex), mbd.resource_description) from ex
                holder.add(param, self._convert(bean_name, param, resolved, converter, mbd))
                continue

            if param.has_default and container.type_descriptor.is_simple_property(param.type):
                holder.skip(param)
                continue

            value = self._resolve_autowired_argument(bean_name, mbd, executable, param, holder)
            if value is None and param.has_default:
                holder.skip(param)
            else:
                holder.add(param, value)

        for autowired_bean_name in sorted(holder.autowired_bean_names):
            if not container.contains_bean(autowired_bean_name):
                continue
            container.register_dependent_bean(autowired_bean_name, bean_name)
            logger.debug("Autowiring by type from bean name '%s' via %s to bean named '%s'",
                         bean_name, executable.describe(), autowired_bean_name)
        return holder

    def _resolve_autowired_argument(self, bean_name: str, mbd: RootBeanDefinition,
                                    executable: ExecutableInfo, param: ParameterInfo,
                                    holder: ArgumentsHolder) -> Any:
        descriptor = DependencyDescriptor.for_parameter(param, executable.declaring_class)
        if param.type is None:
            raise UnsatisfiedDependencyError(
                bean_name, param.name,
                f"{descriptor.describe()} has neither a type annotation nor an explicit argument value",
                mbd.resource_description,
            )
        try:
            return self._container.dependency_resolver.resolve_dependency(
                descriptor, bean_name, holder.autowired_bean_names)
        except BeansError as ex:
            raise UnsatisfiedDependencyError(
                bean_name, param.name, str(ex), mbd.resource_description) from ex

    @staticmethod
    def _convert(bean_name: str, param: ParameterInfo, value: Any, converter,
                 mbd: Optional[RootBeanDefinition] = None) -> Any:
        try:
            return converter.convert_if_necessary(value, param.type, param.name)
        except BeansError as ex:
            raise UnsatisfiedDependencyError(
                bean_name, param.name,
                f"Could not convert argument value of type [{type(value).__name__}] "
                f"to required type: {ex}",
                mbd.resource_description if mbd is not None else None,
            ) from ex

    def _instantiate(self, bean_name: str, mbd: RootBeanDefinition,
                     constructor: ExecutableInfo, holder: ArgumentsHolder) -> Any:
        strategy = self._container.instantiation_strategy
        return self._invoke(
            bean_name, mbd, constructor,
            lambda: strategy.instantiate(mbd, bean_name, self._container, constructor,
                                         holder.args, holder.kwargs),
        )

    def _instantiate_with_factory_method(self, bean_name: str, mbd: RootBeanDefinition, factory_bean: Any,
                                         method: ExecutableInfo, holder: ArgumentsHolder) -> Any:
        strategy = self._container.instantiation_strategy
        return self._invoke(
            bean_name, mbd, method,
            lambda: strategy.instantiate_with_factory_method(mbd, bean_name, self._container, factory_bean,
                                                             method, holder.args, holder.kwargs),
        )

    @staticmethod
    def _invoke(bean_name: str, mbd: RootBeanDefinition, executable: ExecutableInfo,
                call: Callable[[], Any]) -> Any:
        try:
            return call()
        except BeansError:
            raise
        except Exception as ex:
            raise BeanCreationError(
                bean_name,
                f"Instantiation of bean failed; {executable.describe()} threw exception: {ex}",
                mbd.resource_description,
            ) from ex
