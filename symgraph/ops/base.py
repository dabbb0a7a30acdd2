# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Operator contract.

Every operator applied to graph nodes subclasses ``Op``. The graph calls
``check_arity``, ``infer_shape`` and ``infer_dtype`` when a node is
built; the tape machine calls ``do`` with the input values; the gradient
pass calls ``diff_wrt`` and ``build_gradient``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional, Sequence

import numpy as np

from ..core.shape import normalize_axis
from ..core.types import DataType, Shape
from ..errors import (
    ArityError,
    DTypeError,
    EmptyInputError,
    InvalidArgumentError,
    UnsupportedOperationError,
)

if TYPE_CHECKING:
    from ..core.node import Node


_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193


def simple_hash(text: str) -> int:
    """32-bit FNV-1a hash of ``text``, stable across processes."""
    h = _FNV_OFFSET
    for byte in text.encode("utf-8"):
        h ^= byte
        h = (h * _FNV_PRIME) & 0xFFFFFFFF
    return h


class Op(ABC):
    """
    Base class for graph operators.

    Operators are immutable descriptors: all parameters are fixed at
    construction and ``str(op)`` encodes the kind together with every
    parameter, which makes it the identity used for hashing.

    Class attributes:
        op_type: Kind tag, also the base name for output nodes
        differentiable: Whether ``build_gradient`` is implemented
        stops_gradient: For non-differentiable ops, treat the output as a
            constant during differentiation instead of raising
        memoizable: Whether the graph may reuse an identical node
    """

    op_type: str = "Op"
    differentiable: bool = False
    stops_gradient: bool = False
    memoizable: bool = True

    @abstractmethod
    def arity(self) -> int:
        """Number of input tensors."""

    def check_arity(self, n: int) -> None:
        if n != self.arity():
            raise ArityError(str(self), self.arity(), n)

    @abstractmethod
    def infer_shape(self, *shapes: Shape) -> Shape:
        """Output shape from input shapes."""

    def infer_dtype(self, *dtypes: DataType) -> DataType:
        return dtypes[0]

    def check_inputs(self, *values) -> None:
        """Validate input values before ``do`` computes anything."""
        self.check_arity(len(values))
        for value in values:
            require_array(self, value)

    @abstractmethod
    def do(self, *values: np.ndarray) -> np.ndarray:
        """Compute the output value."""

    def overwrites_input(self) -> int:
        """Index of the input whose buffer ``do`` reuses, or -1."""
        return -1

    def hashcode(self) -> int:
        return simple_hash(str(self))

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        """Which inputs a gradient can be built for."""
        return [False] * n_inputs

    def build_gradient(
        self, inputs: Sequence["Node"], output: "Node", grad: "Node"
    ) -> List[Optional["Node"]]:
        """
        Build the gradient nodes of the output w.r.t. each input.

        Returns one entry per input, None where no gradient exists.
        """
        raise UnsupportedOperationError(
            self.op_type, reason="operation is not differentiable"
        )

    def __str__(self) -> str:
        return f"{self.op_type}()"

    def __repr__(self) -> str:
        return str(self)


def require_array(op: Op, value) -> np.ndarray:
    if value is None:
        raise EmptyInputError(str(op))
    if not isinstance(value, np.ndarray):
        raise DTypeError(
            f"expected a tensor value, got {type(value).__name__}",
            operation=str(op),
        )
    return value


def require_nonempty(op: Op, value: np.ndarray) -> None:
    """Reject scalars and zero-size tensors."""
    if value.ndim == 0 or value.size == 0:
        raise EmptyInputError(str(op), shape=value.shape)


def require_float(op: Op, dtype: DataType) -> None:
    if not dtype.is_float():
        raise DTypeError(
            "expected a floating point tensor",
            operation=str(op),
            expected="Float32 or Float64",
            received=dtype.name,
        )


def require_same_dtype(op: Op, *dtypes: DataType) -> DataType:
    first = dtypes[0]
    for other in dtypes[1:]:
        if other != first:
            raise DTypeError(
                "inputs must share one dtype",
                operation=str(op),
                expected=first.name,
                received=other.name,
            )
    return first


def check_axis(op: Op, axis: int, rank: int) -> int:
    return normalize_axis(axis, rank, operation=str(op))


def check_positive(name: str, value: int, operation: str) -> None:
    if value < 1:
        raise InvalidArgumentError(
            f"{operation}: expected {name} to be > 0, got {value}",
            parameter=name,
            expected="> 0",
            received=str(value),
        )


def value_dtype(op: Op, value: np.ndarray) -> DataType:
    try:
        return DataType.from_numpy(value.dtype)
    except ValueError as e:
        raise DTypeError(str(e), operation=str(op)) from e
