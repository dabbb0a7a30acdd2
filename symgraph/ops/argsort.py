# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""Argsort operator (stable, non-differentiable)."""

from __future__ import annotations

import numpy as np

from ..core.node import Node
from ..core.types import DataType, Shape
from ..errors import AxisOutOfRangeError
from .base import Op, check_axis, require_nonempty


class ArgsortOp(Op):
    """
    Indices that sort a tensor along one axis in ascending order.

    Ties keep their original order. Requesting a gradient raises
    UnsupportedOperationError.
    """

    op_type = "Argsort"

    def __init__(self, axis: int):
        self.axis = axis

    def arity(self) -> int:
        return 1

    def infer_shape(self, *shapes: Shape) -> Shape:
        (in_shape,) = shapes
        if in_shape.is_scalar():
            raise AxisOutOfRangeError(self.axis, 0, operation=str(self))
        check_axis(self, self.axis, in_shape.rank())
        return in_shape

    def infer_dtype(self, *dtypes: DataType) -> DataType:
        return DataType.Int

    def check_inputs(self, *values) -> None:
        super().check_inputs(*values)
        require_nonempty(self, values[0])
        check_axis(self, self.axis, values[0].ndim)

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        (x,) = values
        return np.argsort(x, axis=self.axis, kind="stable").astype(np.int64)

    def __str__(self) -> str:
        return f"Argsort{{axis={self.axis}}}()"


def argsort(x: Node, axis: int = -1) -> Node:
    """Stable argsort of ``x`` along ``axis``."""
    return x.graph.apply_op(ArgsortOp(axis), x)
