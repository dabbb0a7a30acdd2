# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Inverse error function operators.

erfinv is defined on (-1, 1). At +-1 it returns +-inf and outside
[-1, 1] it returns NaN, matching scipy. With ``strict`` set (see
``EngineConfig.strict_erfinv_domain``) inputs outside [-1, 1] raise
DomainError instead.
"""

from __future__ import annotations

from typing import List
import logging
import math

import numpy as np
from scipy import special

from ..core.node import Node
from ..core.types import DataType, Shape
from ..errors import DomainError, ShapeMismatchError
from .arithmetic import exp, mul, square
from .base import Op, require_float, value_dtype

logger = logging.getLogger("symgraph.ops.erfinv")

SQRT_PI_OVER_TWO = math.sqrt(math.pi) / 2.0


class ErfinvOp(Op):
    """Elementwise inverse error function."""

    op_type = "Erfinv"
    differentiable = True

    def __init__(self, strict: bool = False):
        self.strict = strict

    def arity(self) -> int:
        return 1

    def infer_shape(self, *shapes: Shape) -> Shape:
        return shapes[0]

    def infer_dtype(self, *dtypes: DataType) -> DataType:
        require_float(self, dtypes[0])
        return dtypes[0]

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        (x,) = values
        self.infer_dtype(value_dtype(self, x))

        outside = np.count_nonzero(np.abs(x) > 1)
        if outside:
            if self.strict:
                raise DomainError(str(self), "[-1, 1]", int(outside))
            logger.warning("erfinv: %d value(s) outside [-1, 1] map to NaN", outside)

        return np.asarray(special.erfinv(x), dtype=x.dtype)

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True]

    def build_gradient(self, inputs, output, grad):
        x = inputs[0]
        return [x.graph.apply_op(ErfinvDiffOp(), x, grad)]

    def __str__(self) -> str:
        if self.strict:
            return "Erfinv{strict=True}()"
        return "Erfinv()"


class ErfinvDiffOp(Op):
    """Gradient of erfinv: ``grad * sqrt(pi)/2 * exp(erfinv(x)**2)``."""

    op_type = "ErfinvDiff"
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
        with np.errstate(over="ignore", invalid="ignore"):
            out = grad * SQRT_PI_OVER_TWO * np.exp(np.square(special.erfinv(x)))
        return np.asarray(out, dtype=x.dtype)

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True, True]

    def build_gradient(self, inputs, output, grad):
        x, _ = inputs
        # output * 2y * dy/dx with y = erfinv(x)
        y = erfinv(x)
        dy = mul(exp(square(y)), SQRT_PI_OVER_TWO)
        gx = mul(grad, mul(output, mul(mul(y, 2.0), dy)))
        return [gx, x.graph.apply_op(ErfinvDiffOp(), x, grad)]


def erfinv(x: Node) -> Node:
    """Elementwise inverse error function."""
    strict = x.graph.config.strict_erfinv_domain
    return x.graph.apply_op(ErfinvOp(strict=strict), x)
