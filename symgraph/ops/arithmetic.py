# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Elementwise arithmetic operators.

Binary operators broadcast numpy style. Each side may also name
``broadcast_left`` / ``broadcast_right`` axes: size-1 axes inserted into
that operand before broadcasting, so a tensor shaped like one batch row
can be combined with a whole batch (e.g. ``broadcast_right=(0,)``).
"""

from __future__ import annotations

from typing import Iterable, List, Union

import numpy as np

from ..core import shape as shape_algebra
from ..core.node import Node
from ..core.types import DataType, Shape
from ..errors import DTypeError, InvalidArgumentError
from .base import Op, require_float, require_same_dtype, value_dtype
from .shape_ops import reshape, sum_to_shape

Operand = Union[Node, float, int]


def _lift(x: Operand, like: Node) -> Node:
    if isinstance(x, Node):
        return x
    if not like.dtype.is_float() and not float(x).is_integer():
        raise DTypeError(
            f"cannot combine {x!r} with an integer tensor without truncating it",
            operation=like.name,
            expected="an integral scalar",
            received=repr(x),
        )
    return like.graph.scalar(x, dtype=like.dtype)


def _pair(a: Operand, b: Operand) -> tuple:
    if isinstance(a, Node):
        return a, _lift(b, a)
    if isinstance(b, Node):
        return _lift(a, b), b
    raise InvalidArgumentError(
        "at least one operand must be a graph node",
        parameter="a",
        expected="Node",
        received=type(a).__name__,
    )


def _unbroadcast(grad: Node, shape: Shape, axes: tuple) -> Node:
    expanded = shape_algebra.expand_axes(shape, axes)
    return reshape(sum_to_shape(grad, expanded), shape)


class BinaryOp(Op):
    """Add, Sub, Mul or Div with optional explicit broadcast axes."""

    differentiable = True

    _kernels = {
        "Add": np.add,
        "Sub": np.subtract,
        "Mul": np.multiply,
        "Div": np.divide,
    }

    def __init__(self, kind: str, left_axes: Iterable[int] = (), right_axes: Iterable[int] = ()):
        if kind not in self._kernels:
            raise ValueError(f"Unknown binary op: {kind}")
        self.op_type = kind
        self.left_axes = tuple(sorted(left_axes))
        self.right_axes = tuple(sorted(right_axes))

    def arity(self) -> int:
        return 2

    def infer_shape(self, *shapes: Shape) -> Shape:
        a, b = shapes
        return shape_algebra.broadcast_shapes(
            shape_algebra.expand_axes(a, self.left_axes),
            shape_algebra.expand_axes(b, self.right_axes),
            operation=str(self),
        )

    def infer_dtype(self, *dtypes: DataType) -> DataType:
        return require_same_dtype(self, *dtypes)

    def check_inputs(self, *values) -> None:
        super().check_inputs(*values)
        self.infer_dtype(*[value_dtype(self, v) for v in values])

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        a, b = values
        a = a.reshape(shape_algebra.expand_axes(Shape(a.shape), self.left_axes).dims)
        b = b.reshape(shape_algebra.expand_axes(Shape(b.shape), self.right_axes).dims)
        if self.op_type == "Div" and np.issubdtype(a.dtype, np.integer):
            return np.floor_divide(a, b)
        with np.errstate(divide="ignore", invalid="ignore"):
            out = self._kernels[self.op_type](a, b)
        return np.asarray(out, dtype=a.dtype)

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True, True]

    def build_gradient(self, inputs, output, grad):
        a, b = inputs
        kind = self.op_type
        if kind == "Add":
            ga, gb = grad, grad
        elif kind == "Sub":
            ga, gb = grad, neg(grad)
        elif kind == "Mul":
            ga = mul(grad, b, broadcast_right=self.right_axes)
            gb = mul(grad, a, broadcast_right=self.left_axes)
        else:
            # d(a/b)/db = -(a/b)/b
            ga = div(grad, b, broadcast_right=self.right_axes)
            gb = neg(div(mul(grad, output), b, broadcast_right=self.right_axes))
        return [
            _unbroadcast(ga, a.shape, self.left_axes),
            _unbroadcast(gb, b.shape, self.right_axes),
        ]

    def __str__(self) -> str:
        if self.left_axes or self.right_axes:
            return (
                f"{self.op_type}{{left={list(self.left_axes)}, "
                f"right={list(self.right_axes)}}}()"
            )
        return f"{self.op_type}()"


class UnaryOp(Op):
    """Neg, Exp or Log."""

    differentiable = True

    _kernels = {"Neg": np.negative, "Exp": np.exp, "Log": np.log}

    def __init__(self, kind: str):
        if kind not in self._kernels:
            raise ValueError(f"Unknown unary op: {kind}")
        self.op_type = kind

    def arity(self) -> int:
        return 1

    def infer_shape(self, *shapes: Shape) -> Shape:
        return shapes[0]

    def infer_dtype(self, *dtypes: DataType) -> DataType:
        if self.op_type != "Neg":
            require_float(self, dtypes[0])
        return dtypes[0]

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        (x,) = values
        self.infer_dtype(value_dtype(self, x))
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            return np.asarray(self._kernels[self.op_type](x), dtype=x.dtype)

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True]

    def build_gradient(self, inputs, output, grad):
        (x,) = inputs
        if self.op_type == "Neg":
            return [neg(grad)]
        if self.op_type == "Exp":
            return [mul(grad, output)]
        return [div(grad, x)]


class PowScalarOp(Op):
    """Raise every element to a fixed scalar power."""

    op_type = "Pow"
    differentiable = True

    def __init__(self, exponent: float):
        self.exponent = float(exponent)

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
        with np.errstate(divide="ignore", invalid="ignore"):
            return np.asarray(np.power(x, self.exponent), dtype=x.dtype)

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True]

    def build_gradient(self, inputs, output, grad):
        (x,) = inputs
        p = self.exponent
        if p == 1.0:
            return [grad]
        if p == 2.0:
            return [mul(grad, mul(x, 2.0))]
        return [mul(grad, mul(pow_scalar(x, p - 1.0), p))]

    def __str__(self) -> str:
        return f"Pow{{exponent={self.exponent}}}()"


class CompareOp(Op):
    """
    Elementwise comparison returning a 0/1 mask in the inputs' dtype.

    Masks carry no gradient; differentiation treats them as constants.
    """

    stops_gradient = True

    _kernels = {
        "Lt": np.less,
        "Gt": np.greater,
        "Lte": np.less_equal,
        "Gte": np.greater_equal,
    }

    def __init__(self, kind: str):
        if kind not in self._kernels:
            raise ValueError(f"Unknown comparison: {kind}")
        self.op_type = kind

    def arity(self) -> int:
        return 2

    def infer_shape(self, *shapes: Shape) -> Shape:
        return shape_algebra.broadcast_shapes(*shapes, operation=str(self))

    def infer_dtype(self, *dtypes: DataType) -> DataType:
        return require_same_dtype(self, *dtypes)

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        a, b = values
        self.infer_dtype(value_dtype(self, a), value_dtype(self, b))
        return self._kernels[self.op_type](a, b).astype(a.dtype)


def add(a: Operand, b: Operand, broadcast_left=(), broadcast_right=()) -> Node:
    a, b = _pair(a, b)
    return a.graph.apply_op(BinaryOp("Add", broadcast_left, broadcast_right), a, b)


def sub(a: Operand, b: Operand, broadcast_left=(), broadcast_right=()) -> Node:
    a, b = _pair(a, b)
    return a.graph.apply_op(BinaryOp("Sub", broadcast_left, broadcast_right), a, b)


def mul(a: Operand, b: Operand, broadcast_left=(), broadcast_right=()) -> Node:
    a, b = _pair(a, b)
    return a.graph.apply_op(BinaryOp("Mul", broadcast_left, broadcast_right), a, b)


def div(a: Operand, b: Operand, broadcast_left=(), broadcast_right=()) -> Node:
    a, b = _pair(a, b)
    return a.graph.apply_op(BinaryOp("Div", broadcast_left, broadcast_right), a, b)


def neg(x: Node) -> Node:
    return x.graph.apply_op(UnaryOp("Neg"), x)


def exp(x: Node) -> Node:
    return x.graph.apply_op(UnaryOp("Exp"), x)


def log(x: Node) -> Node:
    return x.graph.apply_op(UnaryOp("Log"), x)


def pow_scalar(x: Node, exponent: float) -> Node:
    return x.graph.apply_op(PowScalarOp(exponent), x)


def square(x: Node) -> Node:
    return pow_scalar(x, 2.0)


def sqrt(x: Node) -> Node:
    return pow_scalar(x, 0.5)


def lt(a: Operand, b: Operand) -> Node:
    a, b = _pair(a, b)
    return a.graph.apply_op(CompareOp("Lt"), a, b)


def gt(a: Operand, b: Operand) -> Node:
    a, b = _pair(a, b)
    return a.graph.apply_op(CompareOp("Gt"), a, b)


def lte(a: Operand, b: Operand) -> Node:
    a, b = _pair(a, b)
    return a.graph.apply_op(CompareOp("Lte"), a, b)


def gte(a: Operand, b: Operand) -> Node:
    a, b = _pair(a, b)
    return a.graph.apply_op(CompareOp("Gte"), a, b)
