# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Symgraph Error Hierarchy

Provides the error types raised while building and executing symbolic
graphs with:
- Clear error categorization
- Helpful error messages with suggestions
- Context information for debugging

Error Categories:
- SymgraphError: Base class for all symgraph errors
- ArityError: Wrong number of inputs passed to an operator
- ShapeError: Incompatible shapes (AxisOutOfRangeError, ShapeMismatchError)
- DTypeError: Unsupported or mismatched element types
- EmptyInputError: Zero-size or missing tensor where data is required
- UnsupportedOperationError: Operation (e.g. a gradient) not available
- InvalidArgumentError: Operator parameter out of range
- DomainError: Input outside a kernel's mathematical domain
- ExecutionError: Failure while running a node on the tape machine
- ConfigurationError: Invalid engine configuration
"""

from typing import Optional, Sequence


class SymgraphError(Exception):
    """
    Base class for all symgraph errors.

    Provides consistent error formatting and context tracking.

    Attributes:
        message: Human-readable error message
        suggestions: List of suggestions to fix the error
        context: Optional context dictionary for debugging
    """

    def __init__(
        self,
        message: str,
        suggestions: Optional[list[str]] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.suggestions = suggestions or []
        self.context = context or {}

        full_message = self._format_message()
        super().__init__(full_message)

    def _format_message(self) -> str:
        """Format the error message with suggestions."""
        lines = [self.message]

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"  {i}. {suggestion}")

        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        return "\n".join(lines)


def _prefixed(operation: Optional[str], message: str) -> str:
    if operation:
        return f"{operation}: {message}"
    return message


class ArityError(SymgraphError):
    """Raised when an operator receives the wrong number of inputs."""

    def __init__(self, operation: str, expected: int, received: int):
        self.operation = operation
        self.expected = expected
        self.received = received

        super().__init__(
            message=(
                f"{operation} has an arity of {expected}, "
                f"got {received} inputs instead"
            ),
            suggestions=[f"Pass exactly {expected} input(s) to {operation}"],
            context={"operation": operation},
        )


class ShapeError(SymgraphError):
    """
    Shape related error.

    Raised when:
    - An axis is out of range for a tensor
    - Operator inputs have incompatible shapes
    - A query shape does not fit a distribution's declared shape
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        shapes: Optional[Sequence] = None,
        suggestions: Optional[list[str]] = None,
    ):
        self.operation = operation
        context = {}
        if operation:
            context["operation"] = operation
        if shapes:
            context["shapes"] = ", ".join(str(tuple(s)) for s in shapes)

        super().__init__(
            message=_prefixed(operation, message),
            suggestions=suggestions
            or ["Check the input shapes and axis arguments"],
            context=context,
        )


class AxisOutOfRangeError(ShapeError):
    """Raised when an axis index does not exist for a tensor's rank."""

    def __init__(self, axis: int, rank: int, operation: Optional[str] = None):
        self.axis = axis
        self.rank = rank

        super().__init__(
            message=f"axis {axis} out of range for tensor with {rank} dims",
            operation=operation,
            suggestions=[
                f"Use an axis in [{-rank}, {rank - 1}]"
                if rank
                else "Scalars have no axes",
            ],
        )


class ShapeMismatchError(ShapeError):
    """Raised when a shape differs from the shape it must match."""

    def __init__(
        self,
        expected: Sequence[int],
        received: Sequence[int],
        operation: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.expected = tuple(expected)
        self.received = tuple(received)

        super().__init__(
            message=message
            or f"expected shape {self.expected} but got {self.received}",
            operation=operation,
            shapes=[self.expected, self.received],
        )


class DTypeError(SymgraphError):
    """Raised for unsupported or mismatched element types."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
    ):
        self.operation = operation
        context = {}
        if operation:
            context["operation"] = operation
        if expected:
            context["expected"] = expected
        if received:
            context["received"] = received

        super().__init__(
            message=_prefixed(operation, message),
            suggestions=["Cast the input to a supported dtype"],
            context=context,
        )


class EmptyInputError(SymgraphError):
    """Raised when an operator needs a non-empty tensor."""

    def __init__(self, operation: str, shape: Optional[Sequence[int]] = None):
        self.operation = operation
        context = {"operation": operation}
        if shape is not None:
            context["shape"] = str(tuple(shape))

        super().__init__(
            message=f"{operation}: expected a non-empty tensor",
            context=context,
        )


class UnsupportedOperationError(SymgraphError):
    """
    Operation not supported.

    Raised when a gradient is requested from a non-differentiable
    operator or an operator is used in a way it does not implement.
    """

    def __init__(self, op_type: str, reason: Optional[str] = None):
        self.op_type = op_type
        self.reason = reason

        message = f"Operation '{op_type}' is not supported"
        if reason:
            message = f"{message}: {reason}"

        super().__init__(
            message=message,
            suggestions=[
                f"Remove '{op_type}' from the differentiated path",
                "Compute the value outside the gradient graph",
            ],
            context={"operation": op_type},
        )


class InvalidArgumentError(SymgraphError):
    """Raised when an operator parameter is out of its valid range."""

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
    ):
        context = {}
        if parameter:
            context["parameter"] = parameter
        if expected:
            context["expected"] = expected
        if received:
            context["received"] = received

        super().__init__(
            message=message,
            suggestions=["Check the parameter value and type"],
            context=context,
        )


class DomainError(SymgraphError):
    """Raised when inputs fall outside a kernel's domain in strict mode."""

    def __init__(self, operation: str, domain: str, count: int):
        self.operation = operation
        super().__init__(
            message=f"{operation}: {count} input value(s) outside {domain}",
            suggestions=[
                "Clamp the input before applying the operation",
                "Disable strict domain checking to propagate inf/nan",
            ],
            context={"operation": operation, "domain": domain},
        )


class ExecutionError(SymgraphError):
    """
    Error while executing a graph node.

    Raised when an operator's forward kernel fails or returns a value
    whose shape disagrees with the shape inferred at build time.
    """

    def __init__(
        self,
        message: str,
        node_name: Optional[str] = None,
        op_type: Optional[str] = None,
        input_shapes: Optional[list] = None,
    ):
        context = {}
        if node_name:
            context["node"] = node_name
        if op_type:
            context["operation"] = op_type
        if input_shapes:
            context["input_shapes"] = str(input_shapes)

        super().__init__(
            message=f"Execution failed: {message}",
            suggestions=[
                "Check that every variable has a bound value",
                "Verify the bound values match the declared shapes",
            ],
            context=context,
        )


class ConfigurationError(SymgraphError):
    """Raised for invalid engine configuration values."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
    ):
        context = {}
        if config_key:
            context["config_key"] = config_key
        if config_value:
            context["config_value"] = str(config_value)

        super().__init__(
            message=f"Configuration error: {message}",
            suggestions=[
                "Check configuration parameters",
                "Review the SYMGRAPH_* environment variables",
            ],
            context=context,
        )
