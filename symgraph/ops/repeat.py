# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Repeat operators.

``repeat(x, axis, r)`` duplicates every slice along ``axis`` ``r`` times
in place (``[a, b] -> [a, a, b, b]``), not whole-array tiling. Its
gradient sums each block of ``r`` consecutive upstream slices.
"""

from __future__ import annotations

from typing import List

import numpy as np

from ..core.node import Node
from ..core.types import Shape
from ..errors import ShapeError, ShapeMismatchError
from .base import Op, check_axis, check_positive, require_nonempty
from .reduce import fold_along


class RepeatOp(Op):
    """Duplicate each slice along ``axis`` ``repeats`` times."""

    op_type = "Repeat"
    differentiable = True

    def __init__(self, axis: int, repeats: int):
        check_positive("repeats", repeats, "repeat")
        self.axis = axis
        self.repeats = repeats

    def arity(self) -> int:
        return 1

    def infer_shape(self, *shapes: Shape) -> Shape:
        (in_shape,) = shapes
        if in_shape.is_scalar():
            raise ShapeError("cannot repeat a scalar", operation=str(self))
        axis = check_axis(self, self.axis, in_shape.rank())
        dims = list(in_shape.dims)
        dims[axis] *= self.repeats
        return Shape(tuple(dims))

    def check_inputs(self, *values) -> None:
        super().check_inputs(*values)
        require_nonempty(self, values[0])
        check_axis(self, self.axis, values[0].ndim)

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        (x,) = values
        return np.repeat(x, self.repeats, axis=self.axis)

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True]

    def build_gradient(self, inputs, output, grad):
        x = inputs[0]
        return [x.graph.apply_op(RepeatDiffOp(self.axis, self.repeats), x, grad)]

    def __str__(self) -> str:
        return f"Repeat{{axis={self.axis}, repeats={self.repeats}}}()"


class RepeatDiffOp(Op):
    """Block-sum a repeated gradient back to the repeated input's shape."""

    op_type = "RepeatDiff"
    differentiable = True

    def __init__(self, axis: int, repeats: int):
        self.axis = axis
        self.repeats = repeats

    def arity(self) -> int:
        return 2

    def infer_shape(self, *shapes: Shape) -> Shape:
        x, grad = shapes
        expected = RepeatOp(self.axis, self.repeats).infer_shape(x)
        if grad != expected:
            raise ShapeMismatchError(expected.dims, grad.dims, operation=str(self))
        return x

    def check_inputs(self, *values) -> None:
        super().check_inputs(*values)
        x, grad = values
        require_nonempty(self, grad)
        self.infer_shape(Shape(x.shape), Shape(grad.shape))

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        x, grad = values
        if self.repeats == 1:
            return np.array(grad)

        axis = self.axis % grad.ndim
        rows = []
        for i in range(x.shape[axis]):
            start = i * self.repeats
            block = np.take(grad, range(start, start + self.repeats), axis=axis)
            rows.append(fold_along(block, axis, np.add))

        if len(rows) == 1:
            return np.expand_dims(rows[0], axis)
        return np.stack(rows, axis=axis)

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [False, True]

    def build_gradient(self, inputs, output, grad):
        return [None, repeat(grad, self.axis, self.repeats)]

    def __str__(self) -> str:
        return f"RepeatDiff{{axis={self.axis}, repeats={self.repeats}}}()"


def repeat(x: Node, axis: int, repeats: int) -> Node:
    """Repeat every slice of ``x`` along ``axis`` ``repeats`` times."""
    return x.graph.apply_op(RepeatOp(axis, repeats), x)
