# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Normal sampling operator.

``NormalSampleOp`` draws a fresh batch every time its node is executed.
It owns a seeded ``numpy.random.Generator``, so two runs of the same
graph produce different draws while a rebuilt graph with the same seed
reproduces them. The op is not safe for concurrent use.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..core.node import Node
from ..core.types import DataType, Shape, ShapeLike, as_shape
from ..errors import (
    DTypeError,
    EmptyInputError,
    InvalidArgumentError,
    ShapeMismatchError,
)
from ..ops.base import (
    Op,
    check_positive,
    require_float,
    require_same_dtype,
    value_dtype,
)


class NormalSampleOp(Op):
    """
    Sample ``n`` draws from ``N(mean, stddev)`` for every element.

    Inputs are the mean and stddev tensors (same shape and dtype); the
    output has shape ``(n, *shape)``. Sampling carries no gradient.
    """

    op_type = "NormalSample"
    stops_gradient = True
    memoizable = False

    def __init__(self, dtype: DataType, seed: int, n: int, shape: ShapeLike):
        check_positive("n", n, "normal_sample")
        self.dtype = dtype
        self.seed = seed
        self.n = n
        self.shape = as_shape(shape)
        require_float(self, dtype)
        self._rng = np.random.default_rng(seed)

    def arity(self) -> int:
        return 2

    def infer_shape(self, *shapes: Shape) -> Shape:
        for s in shapes:
            if s != self.shape:
                raise ShapeMismatchError(self.shape.dims, s.dims, operation=str(self))
        return Shape((self.n,) + self.shape.dims)

    def infer_dtype(self, *dtypes: DataType) -> DataType:
        dtype = require_same_dtype(self, *dtypes)
        if dtype != self.dtype:
            raise DTypeError(
                "inputs do not match the sampler's dtype",
                operation=str(self),
                expected=self.dtype.name,
                received=dtype.name,
            )
        return dtype

    def check_inputs(self, *values) -> None:
        super().check_inputs(*values)
        mean, stddev = values
        if mean.size == 0:
            raise EmptyInputError(str(self), shape=mean.shape)
        self.infer_shape(Shape(mean.shape), Shape(stddev.shape))
        self.infer_dtype(value_dtype(self, mean), value_dtype(self, stddev))
        if np.any(stddev < 0):
            raise InvalidArgumentError(
                f"{self}: stddev must be non-negative",
                parameter="stddev",
                expected=">= 0",
            )

    def do(self, *values: np.ndarray) -> np.ndarray:
        self.check_inputs(*values)
        mean, stddev = values
        draws = self._rng.normal(
            loc=mean, scale=stddev, size=(self.n,) + self.shape.dims
        )
        return draws.astype(self.dtype.to_numpy())

    def __str__(self) -> str:
        return (
            f"NormalSample{{shape={[self.n, *self.shape.dims]}, "
            f"seed={self.seed}}}()"
        )


def normal_sample(
    mean: Node,
    stddev: Node,
    seed: Optional[int] = None,
    n: int = 1,
) -> Node:
    """
    Sample ``n`` draws from ``N(mean, stddev)``; not differentiable.

    The batch axis of the result is always axis 0. For a differentiable
    sample use ``Normal.rsample``.
    """
    if mean.dtype != stddev.dtype:
        raise DTypeError(
            "mean and stddev must share one dtype",
            operation="normal_sample",
            expected=mean.dtype.name,
            received=stddev.dtype.name,
        )
    if mean.shape != stddev.shape:
        raise ShapeMismatchError(
            mean.shape.dims, stddev.shape.dims, operation="normal_sample"
        )
    if seed is None:
        seed = mean.graph.config.default_seed
    op = NormalSampleOp(mean.dtype, seed, n, mean.shape)
    return mean.graph.apply_op(op, mean, stddev)
