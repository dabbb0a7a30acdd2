# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Shape operators: reshape, slicing along one axis, stacking, and the
sum/broadcast pair used to undo implicit broadcasting in gradients.

Also provides the squeeze/unsqueeze node builders.
"""

from __future__ import annotations

from typing import List, Optional, Sequence
import logging

import numpy as np

from ..core import shape as shape_algebra
from ..core.node import Node
from ..core.types import Shape, ShapeLike, as_shape
from ..errors import ShapeError, ShapeMismatchError
from .base import Op, check_axis, require_same_dtype

logger = logging.getLogger("symgraph.ops.shape")


class ReshapeOp(Op):
    """Reinterpret a tensor with a new shape of the same size."""

    op_type = "Reshape"
    differentiable = True

    def __init__(self, shape: ShapeLike):
        self.shape = as_shape(shape)

    def arity(self) -> int:
        return 1

    def infer_shape(self, *shapes: Shape) -> Shape:
        (in_shape,) = shapes
        if in_shape.numel() != self.shape.numel():
            raise ShapeError(
                f"cannot reshape {in_shape.dims} into {self.shape.dims}",
                operation=str(self),
                shapes=[in_shape, self.shape],
            )
        return self.shape

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        (x,) = values
        if x.size != self.shape.numel():
            raise ShapeMismatchError(self.shape.dims, x.shape, operation=str(self))
        return np.array(x.reshape(self.shape.dims))

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True]

    def build_gradient(self, inputs, output, grad):
        return [reshape(grad, inputs[0].shape)]

    def __str__(self) -> str:
        return f"Reshape{{shape={list(self.shape.dims)}}}()"


class SliceOp(Op):
    """
    Select along one axis.

    With ``stop`` None a single index is taken and the axis is dropped;
    otherwise the half-open range ``[start, stop)`` is kept.
    """

    op_type = "Slice"
    differentiable = True

    def __init__(self, axis: int, start: int, stop: Optional[int] = None):
        self.axis = axis
        self.start = start
        self.stop = stop

    def arity(self) -> int:
        return 1

    def infer_shape(self, *shapes: Shape) -> Shape:
        (in_shape,) = shapes
        axis = check_axis(self, self.axis, in_shape.rank())
        extent = in_shape[axis]
        dims = list(in_shape.dims)
        if self.stop is None:
            if not 0 <= self.start < extent:
                raise ShapeError(
                    f"index {self.start} out of range for extent {extent}",
                    operation=str(self),
                    shapes=[in_shape],
                )
            del dims[axis]
        else:
            if not 0 <= self.start < self.stop <= extent:
                raise ShapeError(
                    f"range [{self.start}, {self.stop}) invalid for extent {extent}",
                    operation=str(self),
                    shapes=[in_shape],
                )
            dims[axis] = self.stop - self.start
        return Shape(tuple(dims))

    def _index(self, rank: int) -> tuple:
        axis = self.axis % rank
        picked = self.start if self.stop is None else slice(self.start, self.stop)
        return (slice(None),) * axis + (picked,)

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        (x,) = values
        self.infer_shape(Shape(x.shape))
        return np.array(x[self._index(x.ndim)])

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True]

    def build_gradient(self, inputs, output, grad):
        op = SliceGradOp(self.axis, self.start, self.stop, inputs[0].shape)
        return [grad.graph.apply_op(op, grad)]

    def __str__(self) -> str:
        return f"Slice{{axis={self.axis}, start={self.start}, stop={self.stop}}}()"


class SliceGradOp(Op):
    """Scatter a slice's gradient into zeros shaped like the sliced input."""

    op_type = "SliceGrad"
    differentiable = True

    def __init__(self, axis: int, start: int, stop: Optional[int], input_shape: ShapeLike):
        self.slice = SliceOp(axis, start, stop)
        self.input_shape = as_shape(input_shape)

    def arity(self) -> int:
        return 1

    def infer_shape(self, *shapes: Shape) -> Shape:
        expected = self.slice.infer_shape(self.input_shape)
        if shapes[0] != expected:
            raise ShapeMismatchError(expected.dims, shapes[0].dims, operation=str(self))
        return self.input_shape

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        (grad,) = values
        out = np.zeros(self.input_shape.dims, dtype=grad.dtype)
        out[self.slice._index(self.input_shape.rank())] = grad
        return out

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True]

    def build_gradient(self, inputs, output, grad):
        s = self.slice
        return [slice_along(grad, s.axis, s.start, s.stop)]

    def __str__(self) -> str:
        s = self.slice
        return (
            f"SliceGrad{{axis={s.axis}, start={s.start}, stop={s.stop}, "
            f"shape={list(self.input_shape.dims)}}}()"
        )


class StackOp(Op):
    """Join equally shaped tensors along a new axis."""

    op_type = "Stack"
    differentiable = True

    def __init__(self, axis: int, n: int):
        self.axis = axis
        self.n = n

    def arity(self) -> int:
        return self.n

    def infer_shape(self, *shapes: Shape) -> Shape:
        first = shapes[0]
        for other in shapes[1:]:
            if other != first:
                raise ShapeMismatchError(first.dims, other.dims, operation=str(self))
        return _stacked_shape(first, self.axis, self.n)

    def infer_dtype(self, *dtypes):
        return require_same_dtype(self, *dtypes)

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        return np.stack(values, axis=self.axis)

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True] * n_inputs

    def build_gradient(self, inputs, output, grad):
        return [slice_along(grad, self.axis, i) for i in range(self.n)]

    def __str__(self) -> str:
        return f"Stack{{axis={self.axis}, n={self.n}}}()"


def _stacked_shape(shape: Shape, axis: int, n: int) -> Shape:
    dims = list(shape_algebra.unsqueeze(shape, axis).dims)
    dims[axis if axis >= 0 else axis + shape.rank() + 1] = n
    return Shape(tuple(dims))


def _reduce_to(value: np.ndarray, target: Shape) -> np.ndarray:
    lead = value.ndim - target.rank()
    if lead > 0:
        value = value.sum(axis=tuple(range(lead)))
    axes = tuple(
        i for i, d in enumerate(target.dims) if d == 1 and value.shape[i] != 1
    )
    if axes:
        value = value.sum(axis=axes, keepdims=True)
    return value


class SumToShapeOp(Op):
    """Sum a broadcast result back down to ``target``."""

    op_type = "SumToShape"
    differentiable = True

    def __init__(self, target: ShapeLike):
        self.target = as_shape(target)

    def arity(self) -> int:
        return 1

    def infer_shape(self, *shapes: Shape) -> Shape:
        (in_shape,) = shapes
        if shape_algebra.broadcast_shapes(self.target, in_shape, str(self)) != in_shape:
            raise ShapeError(
                f"{in_shape.dims} is not a broadcast of {self.target.dims}",
                operation=str(self),
                shapes=[in_shape, self.target],
            )
        return self.target

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        (x,) = values
        out = _reduce_to(x, self.target)
        return np.array(out, dtype=x.dtype).reshape(self.target.dims)

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True]

    def build_gradient(self, inputs, output, grad):
        return [broadcast_to(grad, inputs[0].shape)]

    def __str__(self) -> str:
        return f"SumToShape{{shape={list(self.target.dims)}}}()"


class BroadcastToOp(Op):
    """Materialize a numpy-style broadcast of the input to ``target``."""

    op_type = "BroadcastTo"
    differentiable = True

    def __init__(self, target: ShapeLike):
        self.target = as_shape(target)

    def arity(self) -> int:
        return 1

    def infer_shape(self, *shapes: Shape) -> Shape:
        (in_shape,) = shapes
        if shape_algebra.broadcast_shapes(in_shape, self.target, str(self)) != self.target:
            raise ShapeError(
                f"cannot broadcast {in_shape.dims} to {self.target.dims}",
                operation=str(self),
                shapes=[in_shape, self.target],
            )
        return self.target

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        (x,) = values
        return np.array(np.broadcast_to(x, self.target.dims))

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True]

    def build_gradient(self, inputs, output, grad):
        return [sum_to_shape(grad, inputs[0].shape)]

    def __str__(self) -> str:
        return f"BroadcastTo{{shape={list(self.target.dims)}}}()"


class SumAllOp(Op):
    """Sum every element into a scalar."""

    op_type = "SumAll"
    differentiable = True

    def arity(self) -> int:
        return 1

    def infer_shape(self, *shapes: Shape) -> Shape:
        return Shape(())

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        (x,) = values
        return np.asarray(x.sum(), dtype=x.dtype)

    def diff_wrt(self, n_inputs: int) -> List[bool]:
        return [True]

    def build_gradient(self, inputs, output, grad):
        return [broadcast_to(grad, inputs[0].shape)]


def reshape(x: Node, shape: ShapeLike) -> Node:
    """Reshape ``x``; returns ``x`` itself when the shape already matches."""
    shape = as_shape(shape)
    if x.shape == shape:
        return x
    return x.graph.apply_op(ReshapeOp(shape), x)


def slice_along(x: Node, axis: int, start: int, stop: Optional[int] = None) -> Node:
    return x.graph.apply_op(SliceOp(axis, start, stop), x)


def stack(axis: int, nodes: Sequence[Node]) -> Node:
    nodes = list(nodes)
    if not nodes:
        raise ShapeError("nothing to stack", operation="stack")
    return nodes[0].graph.apply_op(StackOp(axis, len(nodes)), *nodes)


def sum_to_shape(x: Node, shape: ShapeLike) -> Node:
    shape = as_shape(shape)
    if x.shape == shape:
        return x
    return x.graph.apply_op(SumToShapeOp(shape), x)


def broadcast_to(x: Node, shape: ShapeLike) -> Node:
    shape = as_shape(shape)
    if x.shape == shape:
        return x
    return x.graph.apply_op(BroadcastToOp(shape), x)


def sum_all(x: Node) -> Node:
    return x.graph.apply_op(SumAllOp(), x)


def squeeze(x: Node, axis: int) -> Node:
    """Remove ``axis`` from ``x`` if its extent is 1, else return ``x``."""
    return reshape(x, shape_algebra.squeeze(x.shape, axis))


def unsqueeze(x: Node, axis: int) -> Node:
    """Insert a size-1 axis at ``axis``."""
    return reshape(x, shape_algebra.unsqueeze(x.shape, axis))


def squeeze_all_but(x: Node, axis: Optional[int]) -> tuple:
    """
    Squeeze every size-1 axis of ``x`` but ``axis`` (negative values count
    from the end; None squeezes everything).

    Returns:
        Tuple of (squeezed node, renumbered axis).
    """
    shape, new_axis = shape_algebra.squeeze_all_but(x.shape, axis)
    if new_axis != axis:
        logger.debug("squeeze_all_but: axis %s renumbered to %s", axis, new_axis)
    return reshape(x, shape), new_axis


def squeeze_all(x: Node) -> Node:
    return reshape(x, shape_algebra.squeeze_all(x.shape))
