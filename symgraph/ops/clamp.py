# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Clamp operators.

Clamp supports floating point and integer tensors; integer outputs are
always ``DataType.Int``. Integer clamps round the bounds inward
(``ceil(lo)``, ``floor(hi)``) so every output stays inside ``[lo, hi]``. Only floating point clamps are differentiable.
Two gradient policies exist:

- hard (default): 1 where ``lo <= x <= hi``, 0 elsewhere
- straight-through (``pass_gradient=True``): 1 everywhere
"""

from __future__ import annotations

from typing import List, Tuple, Union
import math

import numpy as np

from ..core.node import Node
from ..core.types import DataType, Shape
from ..errors import (
    DTypeError,
    EmptyInputError,
    InvalidArgumentError,
    ShapeMismatchError,
)
from .base import Op, require_float, value_dtype

Number = Union[int, float]


class ClampOp(Op):
    """Elementwise ``min(max(x, lo), hi)``."""

    op_type = "Clamp"
    differentiable = True

    def __init__(self, lo: Number, hi: Number, pass_gradient: bool = False):
        if lo > hi:
            raise InvalidArgumentError(
                f"clamp: lower bound {lo} exceeds upper bound {hi}",
                parameter="lo",
                expected=f"<= {hi}",
                received=str(lo),
            )
        self.lo = lo
        self.hi = hi
        self.pass_gradient = pass_gradient

    def integer_bounds(self) -> Tuple[int, int]:
        """Bounds applied to integer inputs: the integers inside ``[lo, hi]``."""
        lo, hi = math.ceil(self.lo), math.floor(self.hi)
        if lo > hi:
            raise InvalidArgumentError(
                f"{self}: no integer lies in [{self.lo}, {self.hi}]",
                parameter="lo",
                expected=f"an integer in [{self.lo}, {self.hi}]",
                received=str(self.lo),
            )
        return lo, hi

    def arity(self) -> int:
        return 1

    def infer_shape(self, *shapes: Shape) -> Shape:
        return shapes[0]

    def infer_dtype(self, *dtypes: DataType) -> DataType:
        return dtypes[0]

    def check_inputs(self, *values) -> None:
        super().check_inputs(*values)
        if values[0].size == 0:
            raise EmptyInputError(str(self), shape=values[0].shape)

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        (x,) = values
        dtype = value_dtype(self, x)
        if dtype.is_float():
            lo, hi = self.lo, self.hi
        else:
            lo, hi = self.integer_bounds()
        out = np.clip(x, lo, hi)
        return np.asarray(out, dtype=dtype.to_numpy())

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True]

    def build_gradient(self, inputs, output, grad):
        x = inputs[0]
        if not x.dtype.is_float():
            raise DTypeError(
                "integer clamps are not differentiable",
                operation=str(self),
                expected="Float32 or Float64",
                received=x.dtype.name,
            )
        return [x.graph.apply_op(ClampDiffOp(self), x, grad)]

    def __str__(self) -> str:
        return (
            f"Clamp{{min={self.lo}, max={self.hi}, "
            f"pass_gradient={self.pass_gradient}}}()"
        )


class ClampDiffOp(Op):
    """Applies a clamp's gradient policy to the upstream gradient."""

    op_type = "ClampDiff"
    differentiable = True

    def __init__(self, clamp: ClampOp):
        self.clamp = clamp

    def arity(self) -> int:
        return 2

    def infer_shape(self, *shapes: Shape) -> Shape:
        x, grad = shapes
        if x != grad:
            raise ShapeMismatchError(x.dims, grad.dims, operation=str(self))
        return x

    def infer_dtype(self, *dtypes: DataType) -> DataType:
        require_float(self, dtypes[1])
        return dtypes[1]

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        x, grad = values
        self.infer_shape(Shape(x.shape), Shape(grad.shape))
        if self.clamp.pass_gradient:
            return np.array(grad)
        inside = (x >= self.clamp.lo) & (x <= self.clamp.hi)
        return np.where(inside, grad, np.zeros_like(grad))

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [False, True]

    def build_gradient(self, inputs, output, grad):
        x, _ = inputs
        return [None, x.graph.apply_op(ClampDiffOp(self.clamp), x, grad)]

    def __str__(self) -> str:
        c = self.clamp
        return (
            f"ClampDiff{{min={c.lo}, max={c.hi}, "
            f"pass_gradient={c.pass_gradient}}}()"
        )


def clamp(x: Node, lo: Number, hi: Number, pass_gradient: bool = False) -> Node:
    """
    Clamp every element of ``x`` to ``[lo, hi]``.

    Args:
        x: Float or integer node.
        lo: Lower bound.
        hi: Upper bound.
        pass_gradient: Use the straight-through gradient (1 everywhere)
            instead of the hard clamp gradient.

    Raises:
        InvalidArgumentError: If ``lo > hi``, or ``x`` is an integer node
            and no integer lies in ``[lo, hi]``.
    """
    op = ClampOp(lo, hi, pass_gradient)
    if not x.dtype.is_float():
        op.integer_bounds()
    return x.graph.apply_op(op, x)
