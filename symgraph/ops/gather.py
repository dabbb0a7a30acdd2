# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Gather operators.

``gather(x, axis, indices)`` picks, at every position of ``indices``,
the element of ``x`` whose coordinate along ``axis`` is the index stored
there. ``x`` and ``indices`` have the same rank and agree on every axis
but ``axis``; the output is shaped like ``indices``. The gradient flows
to ``x`` only, as a scatter-add into zeros.
"""

from __future__ import annotations

from typing import List

import numpy as np

from ..core.node import Node
from ..core.types import DataType, Shape
from ..errors import DTypeError, InvalidArgumentError, ShapeError, ShapeMismatchError
from .base import Op, check_axis, require_nonempty, value_dtype


def _check_gather_shapes(op: Op, axis: int, data: Shape, indices: Shape) -> None:
    if data.rank() != indices.rank():
        raise ShapeError(
            f"data has {data.rank()} dims but indices have {indices.rank()}",
            operation=str(op),
            shapes=[data, indices],
        )
    if data.is_scalar():
        raise ShapeError("cannot gather from a scalar", operation=str(op))
    axis = check_axis(op, axis, data.rank())
    for d, (a, b) in enumerate(zip(data.dims, indices.dims)):
        if d != axis and a != b:
            raise ShapeMismatchError(
                data.dims,
                indices.dims,
                operation=str(op),
                message=f"data and indices differ on axis {d} ({a} != {b})",
            )


def _check_indices(op: Op, axis: int, data: np.ndarray, indices: np.ndarray) -> None:
    if value_dtype(op, indices) != DataType.Int:
        raise DTypeError("indices must be integers", operation=str(op))
    extent = data.shape[axis]
    if indices.size and (indices.min() < 0 or indices.max() >= extent):
        raise InvalidArgumentError(
            f"{op}: indices must lie in [0, {extent})",
            parameter="indices",
            expected=f"[0, {extent})",
            received=f"[{indices.min()}, {indices.max()}]",
        )


class GatherOp(Op):
    """Select elements of the data tensor along one axis."""

    op_type = "Gather"
    differentiable = True

    def __init__(self, axis: int):
        self.axis = axis

    def arity(self) -> int:
        return 2

    def infer_shape(self, *shapes: Shape) -> Shape:
        data, indices = shapes
        _check_gather_shapes(self, self.axis, data, indices)
        return indices

    def infer_dtype(self, *dtypes: DataType) -> DataType:
        data, indices = dtypes
        if indices != DataType.Int:
            raise DTypeError(
                "indices must be integers",
                operation=str(self),
                expected="Int",
                received=indices.name,
            )
        return data

    def check_inputs(self, *values) -> None:
        super().check_inputs(*values)
        data, indices = values
        require_nonempty(self, data)
        require_nonempty(self, indices)
        _check_gather_shapes(self, self.axis, Shape(data.shape), Shape(indices.shape))
        _check_indices(self, self.axis % data.ndim, data, indices)

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        data, indices = values
        return np.take_along_axis(data, indices, axis=self.axis)

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True, False]

    def build_gradient(self, inputs, output, grad):
        data, indices = inputs
        return [data.graph.apply_op(GatherDiffOp(self.axis), data, indices, grad), None]

    def __str__(self) -> str:
        return f"Gather{{axis={self.axis}}}()"


class GatherDiffOp(Op):
    """Scatter-add the upstream gradient into zeros shaped like the data."""

    op_type = "GatherDiff"
    differentiable = True

    def __init__(self, axis: int):
        self.axis = axis

    def arity(self) -> int:
        return 3

    def infer_shape(self, *shapes: Shape) -> Shape:
        data, indices, grad = shapes
        _check_gather_shapes(self, self.axis, data, indices)
        if grad != indices:
            raise ShapeMismatchError(indices.dims, grad.dims, operation=str(self))
        return data

    def infer_dtype(self, *dtypes: DataType) -> DataType:
        return dtypes[0]

    def check_inputs(self, *values) -> None:
        super().check_inputs(*values)
        data, indices, grad = values
        self.infer_shape(Shape(data.shape), Shape(indices.shape), Shape(grad.shape))
        _check_indices(self, self.axis % data.ndim, data, indices)

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        data, indices, grad = values
        axis = self.axis % data.ndim
        out = np.zeros_like(data)
        position = list(np.indices(indices.shape, sparse=True))
        position[axis] = indices
        np.add.at(out, tuple(position), grad)
        return out

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [False, False, True]

    def build_gradient(self, inputs, output, grad):
        _, indices, _ = inputs
        return [None, None, gather(grad, self.axis, indices)]

    def __str__(self) -> str:
        return f"GatherDiff{{axis={self.axis}}}()"


def gather(x: Node, axis: int, indices: Node) -> Node:
    """Gather elements of ``x`` along ``axis`` at ``indices``."""
    return x.graph.apply_op(GatherOp(axis), x, indices)
