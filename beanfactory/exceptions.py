"""
beanfactory Exceptions

Custom exception hierarchy for the beanfactory container
"""

from typing import Iterable, List, Optional, Type


class BeansError(Exception):
    """
    Base exception for all beanfactory errors.

    All beanfactory-specific exceptions inherit from this class.
    You can catch this to handle any container error generically.

    Example:
        >>> try:
        ...     service = container.get("userService")
        ... except BeansError as e:
        ...     print(f"Container error: {e}")
    """

    def get_root_cause(self) -> Optional[BaseException]:
        """Return the innermost ``__cause__`` of this error, or None."""
        root = None
        cause = self.__cause__
        while cause is not None and cause is not root:
            root = cause
            cause = cause.__cause__
        return root

    def get_most_specific_cause(self) -> BaseException:
        """Return the root cause, or this error itself when there is none."""
        root = self.get_root_cause()
        return root if root is not None else self

    def contains(self, exc_type: Type[BaseException]) -> bool:
        """Whether this error or anything in its cause chain is an ``exc_type``.

        Example::

            try:
                container.get("a")
            except BeanCreationError as e:
                if e.contains(BeanCurrentlyInCreationError):
                    ...
        """
        seen = set()
        current: Optional[BaseException] = self
        while current is not None and id(current) not in seen:
            if isinstance(current, exc_type):
                return True
            seen.add(id(current))
            current = current.__cause__
        return False


class NoSuchBeanDefinitionError(BeansError):
    """
    Raised when a requested bean name or type is not known to the container.

    Common causes:
        - Forgetting to register a definition for the name
        - Typo in the bean name or alias
        - The definition lives in a container that is not a parent of this one
        - Autowiring by type for a type that no definition produces

    Solution:
        Register a definition before looking it up::

            container.register_definition(
                "userService",
                BeanDefinitionBuilder.generic(UserService).get_bean_definition(),
            )
            service = container.get("userService")

    Note:
        The error message includes the registered bean names
        to help identify available beans.
    """

    def __init__(
        self,
        message: str,
        bean_name: Optional[str] = None,
        bean_type: Optional[Type] = None,
    ):
        super().__init__(message)
        self.bean_name = bean_name
        self.bean_type = bean_type


class NoUniqueBeanDefinitionError(NoSuchBeanDefinitionError):
    """
    Raised when autowiring by type finds more than one candidate.

    Common causes:
        - Two implementations of the same interface are registered
        - None of the candidates, or more than one, is marked primary

    Solution:
        Mark exactly one candidate as primary::

            container.register_definition(
                "postgres",
                BeanDefinitionBuilder.generic(PostgresDatabase)
                .set_primary(True)
                .get_bean_definition(),
            )

        Or wire the dependency explicitly with a ``RuntimeBeanReference``.
    """

    def __init__(self, bean_type: Type, candidate_names: Iterable[str]):
        self.candidate_names: List[str] = list(candidate_names)
        type_name = getattr(bean_type, "__name__", str(bean_type))
        super().__init__(
            f"No qualifying bean of type '{type_name}' is defined: expected single "
            f"matching bean but found {len(self.candidate_names)}: "
            f"{', '.join(self.candidate_names)}",
            bean_type=bean_type,
        )


class BeanDefinitionStoreError(BeansError):
    """
    Raised when a bean definition is invalid.

    Common causes:
        - A parent chain that leads back to the bean itself
        - A parent name that is neither local nor known to a parent container
        - Registering a name twice while definition overriding is disabled
        - Passing creation arguments for a non-prototype bean
    """

    def __init__(
        self,
        message: str,
        bean_name: Optional[str] = None,
        resource_description: Optional[str] = None,
    ):
        prefix = ""
        if bean_name is not None:
            prefix = f"Invalid bean definition with name '{bean_name}'"
            if resource_description:
                prefix += f" defined in {resource_description}"
            prefix += ": "
        super().__init__(prefix + message)
        self.bean_name = bean_name
        self.resource_description = resource_description


class CannotLoadBeanClassError(BeanDefinitionStoreError):
    """
    Raised when a dotted class path in a definition cannot be imported.

    Solution:
        Check the module path and class name, e.g.
        ``"myapp.services.UserService"``, and make sure the module is
        importable from the running interpreter.
    """

    pass


class BeanCreationError(BeansError):
    """
    Raised when the container fails to create a bean.

    The error carries the bean name, the origin of its definition and the
    full cause chain (``__cause__``). Errors collected while resolving
    sibling candidates during the same creation are attached as
    ``related_causes``.

    Example::

        try:
            container.get("reportService")
        except BeanCreationError as e:
            print(e.bean_name)
            for cause in e.related_causes:
                print("  related:", cause)
    """

    def __init__(
        self,
        bean_name: Optional[str],
        message: str,
        resource_description: Optional[str] = None,
    ):
        text = message
        if bean_name is not None:
            text = f"Error creating bean with name '{bean_name}'"
            if resource_description:
                text += f" defined in {resource_description}"
            text += f": {message}"
        super().__init__(text)
        self.bean_name = bean_name
        self.resource_description = resource_description
        self.related_causes: List[Exception] = []

    def add_related_cause(self, cause: Exception) -> None:
        """Attach an error that was suppressed while creating this bean.

        Args:
            cause: The suppressed exception
        """
        self.related_causes.append(cause)

    def __str__(self) -> str:
        text = super().__str__()
        if self.related_causes:
            related = "\n".join(f"- {cause}" for cause in self.related_causes)
            text += f"\nRelated causes:\n{related}"
        return text


class BeanIsAbstractError(BeanCreationError):
    """
    Raised when an abstract definition is requested directly.

    Abstract definitions only serve as parents for child definitions.
    """

    def __init__(self, bean_name: str):
        super().__init__(
            bean_name,
            "Bean definition is abstract; it can only be used as a parent definition",
        )


class BeanCurrentlyInCreationError(BeanCreationError):
    """
    Raised when circular dependency is detected during creation.

    This error occurs when bean A depends on bean B, and bean B
    (directly or indirectly) depends on bean A, and the cycle cannot be
    broken with an early reference.

    Common causes:
        - Constructor injection in both directions
        - Prototype beans in any cycle, including a self-cycle
        - Circular references disabled on the container

    Solution:
        1. Switch one side of the cycle to property injection
        2. Keep both beans singletons and leave circular references enabled
        3. Extract the shared functionality into a third bean
    """

    def __init__(self, bean_name: str, message: Optional[str] = None):
        super().__init__(
            bean_name,
            message
            or "Requested bean is currently in creation: Is there an unresolvable circular reference?",
        )


class BeanCreationNotAllowedError(BeanCreationError):
    """
    Raised when a singleton is requested while the container is being destroyed.

    Solution:
        Do not look up beans from a destroy method implementation.
    """

    pass


class UnsatisfiedDependencyError(BeanCreationError):
    """
    Raised when a property or constructor parameter cannot be satisfied.

    Common causes:
        - No bean of the required type is registered
        - Several beans match and none is primary
        - Dependency check is enabled and a property was never set
    """

    def __init__(
        self,
        bean_name: str,
        property_name: Optional[str],
        message: str,
        resource_description: Optional[str] = None,
    ):
        detail = message
        if property_name is not None:
            detail = f"Unsatisfied dependency expressed through '{property_name}': {message}"
        super().__init__(bean_name, detail, resource_description)
        self.property_name = property_name


class ScopeNotActiveError(BeanCreationError):
    """
    Raised when a custom scope refuses to create a bean.

    This typically means the scope instance has been closed, or the
    scope is not active for the current thread.
    """

    pass


class BeanNotOfRequiredTypeError(BeansError):
    """
    Raised when a bean does not match the required type and cannot be converted.
    """

    def __init__(self, bean_name: str, required_type: Type, actual_type: Type):
        super().__init__(
            f"Bean named '{bean_name}' is expected to be of type "
            f"'{getattr(required_type, '__name__', required_type)}' but was actually of type "
            f"'{getattr(actual_type, '__name__', actual_type)}'"
        )
        self.bean_name = bean_name
        self.required_type = required_type
        self.actual_type = actual_type


class BeanIsNotAFactoryError(BeanNotOfRequiredTypeError):
    """
    Raised when ``&name`` is requested for a bean that is not a FactoryBean.
    """

    def __init__(self, bean_name: str, actual_type: Type):
        from .factory_bean import FactoryBean

        super().__init__(bean_name, FactoryBean, actual_type)


class TypeMismatchError(BeansError):
    """
    Raised by a type converter when a value cannot be converted.
    """

    def __init__(self, value, required_type: Type, message: Optional[str] = None):
        super().__init__(
            message
            or f"Failed to convert value of type '{type(value).__name__}' to required type "
            f"'{getattr(required_type, '__name__', required_type)}'"
        )
        self.value = value
        self.required_type = required_type


class NoSuchScopeError(BeansError):
    """
    Raised when a definition names a scope that was never registered.

    Solution:
        Register the scope before requesting beans that use it::

            container.register_scope("request", MapScope("request"))
    """

    pass


class BeanDefinitionValidationError(BeansError):
    """
    Raised when a definition or registration fails validation.

    Common causes:
        - An enforced init or destroy method does not exist on the bean
        - Re-registering the built-in "singleton" or "prototype" scopes
    """

    pass


class TypeInferenceError(BeansError):
    """
    Raised when a type annotation needed for autowiring cannot be resolved.

    Common causes:
        - A forward reference (string annotation) naming a type that is not
          defined in the class's module
        - A class defined inside a function whose annotations refer to
          other local classes
        - Built-in or C extension classes without an inspectable signature

    Solution:
        Define referenced types at module level, or register the
        dependency explicitly with a ``RuntimeBeanReference``.
    """

    pass


class ContextNotActiveError(BeansError):
    """
    Raised when a BeanContainerContext is used before refresh() or after close().

    Common causes:
        - Calling ``context.get()`` before ``context.refresh()``
        - Using a context after exiting its ``with`` block

    Solution:
        Refresh the context first, or create a new one instead of reusing
        a closed one::

            with BeanContainerContext(container) as context:
                service = context.get("service")  # OK
            # Context is now closed
    """

    pass
