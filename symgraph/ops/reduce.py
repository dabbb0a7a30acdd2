# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Axis-fold reduction.

``reduce_along`` reduces a node along one axis by left-folding its
slices with a binary builder (add, sub, mul, div):

    acc = x[0]; acc = combine(acc, x[1]); acc = combine(acc, x[2]); ...

Size-1 axes other than the reduced one are squeezed away before slicing,
so the slices line up regardless of incidental singleton axes. With
``keepdims`` the result is reshaped to the input shape minus ``axis``,
which restores any singleton axes squeezed on the way. The fold is
built from differentiable primitives, so it needs no gradient of its own.
"""

from __future__ import annotations

from typing import Callable
import logging

import numpy as np

from ..core.node import Node
from ..core.shape import normalize_axis, remove_axis
from ..errors import DTypeError
from .arithmetic import add, div, mul, sub
from .shape_ops import reshape, slice_along, squeeze, squeeze_all_but

logger = logging.getLogger("symgraph.ops.reduce")

Combine = Callable[[Node, Node], Node]


def reduce_along(
    x: Node,
    axis: int,
    combine: Combine,
    keepdims: bool = False,
    operation: str = "reduce_along",
) -> Node:
    """
    Left-fold the slices of ``x`` along ``axis`` with ``combine``.

    Args:
        x: Node to reduce. Scalars are returned unchanged.
        axis: Axis to fold (negative values count from the end).
        combine: Binary node builder applied as ``combine(acc, next)``.
        keepdims: Reshape the result to ``x``'s shape without ``axis``.
            Otherwise the result keeps no size-1 axes.
        operation: Name used in error messages.

    Raises:
        AxisOutOfRangeError: If ``axis`` does not exist for ``x``.
    """
    if x.is_scalar():
        return x

    axis = normalize_axis(axis, x.dims(), operation=operation)
    target = remove_axis(x.shape, axis)

    if keepdims and x.shape[axis] == 1:
        return squeeze(x, axis)

    x, axis = squeeze_all_but(x, axis)
    length = x.shape[axis]

    if length == 1:
        out = squeeze(x, axis)
    else:
        out = slice_along(x, axis, 0)
        for i in range(1, length):
            out = combine(out, slice_along(x, axis, i))

    if keepdims:
        out = reshape(out, target)
    logger.debug("%s: folded %d slices into %s", operation, length, out.shape)
    return out


def reduce_add(x: Node, axis: int, keepdims: bool = False) -> Node:
    """Sum along ``axis``."""
    return reduce_along(x, axis, add, keepdims, operation="reduce_add")


def reduce_sub(x: Node, axis: int, keepdims: bool = False) -> Node:
    """Left-to-right difference along ``axis``: ``x[0] - x[1] - ...``."""
    return reduce_along(x, axis, sub, keepdims, operation="reduce_sub")


def reduce_prod(x: Node, axis: int, keepdims: bool = False) -> Node:
    """Product along ``axis``."""
    return reduce_along(x, axis, mul, keepdims, operation="reduce_prod")


def reduce_div(x: Node, axis: int, keepdims: bool = False) -> Node:
    """Left-to-right quotient along ``axis``: ``x[0] / x[1] / ...``."""
    return reduce_along(x, axis, div, keepdims, operation="reduce_div")


def reduce_mean(x: Node, axis: int, keepdims: bool = False) -> Node:
    """
    Mean along ``axis``.

    Divides the sum by the extent of the original axis. A scalar sum is
    divided as a 1-element vector and reshaped back.
    """
    if not x.dtype.is_float():
        raise DTypeError(
            "cannot compute the mean of a non floating point tensor",
            operation="reduce_mean",
            expected="Float32 or Float64",
            received=x.dtype.name,
        )
    if x.is_scalar():
        return x

    axis = normalize_axis(axis, x.dims(), operation="reduce_mean")
    length = float(x.shape[axis])
    total = reduce_add(x, axis, keepdims)

    if total.is_scalar():
        out = div(reshape(total, (1,)), length)
        return reshape(out, ())
    return div(total, length)


def fold_along(value: np.ndarray, axis: int, combine: Callable) -> np.ndarray:
    """
    Left-fold the slices of an array along ``axis`` (axis removed).

    Value-level counterpart of ``reduce_along``, used by kernels that
    reduce blocks inside a single operator.
    """
    acc = np.take(value, 0, axis=axis)
    for i in range(1, value.shape[axis]):
        acc = combine(acc, np.take(value, i, axis=axis))
    return np.asarray(acc, dtype=value.dtype)
