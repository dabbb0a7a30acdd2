# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Error function operators.

``ErfOp`` computes erf in place: it owns its input buffer
(``overwrites_input() == 0``) and the tape machine hands it a private
copy whenever that buffer is visible to anything else.
"""

from __future__ import annotations

from typing import List
import math

import numpy as np
from scipy import special

from ..core.node import Node
from ..core.types import DataType, Shape
from ..errors import ShapeMismatchError
from .arithmetic import mul, sub
from .base import Op, require_float, value_dtype

TWO_OVER_SQRT_PI = 2.0 / math.sqrt(math.pi)


class ErfOp(Op):
    """Elementwise error function."""

    op_type = "Erf"
    differentiable = True

    def arity(self) -> int:
        return 1

    def infer_shape(self, *shapes: Shape) -> Shape:
        return shapes[0]

    def infer_dtype(self, *dtypes: DataType) -> DataType:
        require_float(self, dtypes[0])
        return dtypes[0]

    def overwrites_input(self) -> int:
        return 0

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        (x,) = values
        self.infer_dtype(value_dtype(self, x))
        if not x.flags.writeable:
            x = x.copy()
        special.erf(x, out=x)
        return x

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True]

    def build_gradient(self, inputs, output, grad):
        x = inputs[0]
        return [x.graph.apply_op(ErfDiffOp(), x, grad)]


class ErfDiffOp(Op):
    """Gradient of erf: ``grad * 2/sqrt(pi) * exp(-x**2)``."""

    op_type = "ErfDiff"
    differentiable = True

    def arity(self) -> int:
        return 2

    def infer_shape(self, *shapes: Shape) -> Shape:
        x, grad = shapes
        if x != grad:
            raise ShapeMismatchError(x.dims, grad.dims, operation=str(self))
        return x

    def infer_dtype(self, *dtypes: DataType) -> DataType:
        require_float(self, dtypes[0])
        return dtypes[0]

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        x, grad = values
        self.infer_dtype(value_dtype(self, x))
        self.infer_shape(Shape(x.shape), Shape(grad.shape))
        out = grad * TWO_OVER_SQRT_PI * np.exp(-np.square(x))
        return np.asarray(out, dtype=x.dtype)

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True, True]

    def build_gradient(self, inputs, output, grad):
        x, _ = inputs
        # d/dx of grad * c * exp(-x^2) is output * -2x
        gx = mul(grad, mul(output, mul(x, -2.0)))
        return [gx, x.graph.apply_op(ErfDiffOp(), x, grad)]


def erf(x: Node) -> Node:
    """Elementwise erf(x)."""
    return x.graph.apply_op(ErfOp(), x)


def erfc(x: Node) -> Node:
    """Elementwise complementary error function, ``1 - erf(x)``."""
    return sub(1.0, erf(x))
