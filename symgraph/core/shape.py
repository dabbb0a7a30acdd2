# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Shape Algebra

Pure functions over shapes: squeeze, unsqueeze, axis renumbering after
bulk squeezes and broadcast compatibility. Nothing here touches tensor
data.
"""

from typing import Iterable, Optional

from ..errors import AxisOutOfRangeError, ShapeError
from .types import Shape, ShapeLike, as_shape


def normalize_axis(axis: int, rank: int, operation: Optional[str] = None) -> int:
    """
    Map a possibly negative axis onto ``[0, rank)``.

    Raises:
        AxisOutOfRangeError: If the axis does not exist.
    """
    if not -rank <= axis < rank:
        raise AxisOutOfRangeError(axis, rank, operation=operation)
    return axis + rank if axis < 0 else axis


def squeeze(shape: ShapeLike, axis: int) -> Shape:
    """
    Remove ``axis`` if its extent is 1.

    Squeezing an axis whose extent is not 1 returns the shape unchanged.
    """
    shape = as_shape(shape)
    axis = normalize_axis(axis, shape.rank(), "squeeze")
    if shape[axis] != 1:
        return shape
    return Shape(shape.dims[:axis] + shape.dims[axis + 1 :])


def unsqueeze(shape: ShapeLike, axis: int) -> Shape:
    """Insert a size-1 axis so that it ends up at position ``axis``."""
    shape = as_shape(shape)
    rank = shape.rank()
    if axis < 0:
        axis += rank + 1
    if not 0 <= axis <= rank:
        raise AxisOutOfRangeError(axis, rank + 1, operation="unsqueeze")
    return Shape(shape.dims[:axis] + (1,) + shape.dims[axis:])


def count_ones_before(shape: ShapeLike, axis: int) -> int:
    """Number of size-1 axes strictly before ``axis``."""
    shape = as_shape(shape)
    return sum(1 for d in shape.dims[:axis] if d == 1)


def squeeze_all_but(shape: ShapeLike, keep_axis: Optional[int]) -> tuple[Shape, Optional[int]]:
    """
    Squeeze every size-1 axis except ``keep_axis``.

    Args:
        shape: Input shape.
        keep_axis: Axis to keep (negative values count from the end), or
            None to squeeze everything.

    Returns:
        Tuple of (squeezed shape, renumbered keep_axis). The renumbered
        axis is None when nothing was kept.
    """
    shape = as_shape(shape)
    if keep_axis is not None:
        keep_axis = normalize_axis(keep_axis, shape.rank(), "squeeze_all_but")

    dims = list(shape.dims)
    axis = keep_axis
    i = 0
    while i < len(dims):
        if dims[i] == 1 and i != axis:
            del dims[i]
            if axis is not None and i < axis:
                axis -= 1
        else:
            i += 1

    return Shape(tuple(dims)), axis


def squeeze_all(shape: ShapeLike) -> Shape:
    """Squeeze every size-1 axis."""
    return squeeze_all_but(shape, None)[0]


def remove_axis(shape: ShapeLike, axis: int) -> Shape:
    """Drop ``axis`` regardless of its extent."""
    shape = as_shape(shape)
    axis = normalize_axis(axis, shape.rank())
    return Shape(shape.dims[:axis] + shape.dims[axis + 1 :])


def expand_axes(shape: ShapeLike, axes: Iterable[int]) -> Shape:
    """
    Insert size-1 axes so that each of ``axes`` is a size-1 axis of the
    result. Axes refer to positions in the output shape.
    """
    shape = as_shape(shape)
    axes = sorted(axes)
    out_rank = shape.rank() + len(axes)
    dims = list(shape.dims)
    for axis in axes:
        axis = normalize_axis(axis, out_rank, "broadcast")
        dims.insert(axis, 1)
    return Shape(tuple(dims))


def broadcast_shapes(a: ShapeLike, b: ShapeLike, operation: Optional[str] = None) -> Shape:
    """
    Broadcast two shapes following numpy's trailing-axis rules.

    Raises:
        ShapeError: If the shapes are not broadcast compatible.
    """
    a, b = as_shape(a), as_shape(b)
    rank = max(a.rank(), b.rank())
    left = (1,) * (rank - a.rank()) + a.dims
    right = (1,) * (rank - b.rank()) + b.dims

    dims = []
    for da, db in zip(left, right):
        if da == db or db == 1:
            dims.append(da)
        elif da == 1:
            dims.append(db)
        else:
            raise ShapeError(
                f"shapes {a.dims} and {b.dims} are not broadcast compatible",
                operation=operation,
                shapes=[a, b],
            )
    return Shape(tuple(dims))
