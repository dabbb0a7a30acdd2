# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Independent, identically distributed event axes.

``IID`` wraps a distribution and treats the last ``dims`` axes of every
query as one joint event: densities are multiplied (log densities and
entropies summed) over those axes.
"""

from __future__ import annotations

from typing import Callable

from ..core.node import Node
from ..core.types import DataType, Shape
from ..errors import InvalidArgumentError, ShapeError
from ..ops.reduce import reduce_add, reduce_prod
from .base import Distribution


class IID(Distribution):
    """Combine the trailing ``dims`` axes of a distribution into one event."""

    def __init__(self, dist: Distribution, dims: int):
        self.dist = dist
        self.set_dims(dims)

    def set_dims(self, dims: int) -> None:
        if dims < 0:
            raise InvalidArgumentError(
                f"IID: expected dims >= 0, got {dims}",
                parameter="dims",
                expected=">= 0",
                received=str(dims),
            )
        self.dims = dims

    def _combine(self, x: Node, reduce: Callable[..., Node]) -> Node:
        for _ in range(self.dims):
            x = reduce(x, x.dims() - 1, keepdims=True)
        return x

    def _check_rank(self, x: Node, operation: str) -> None:
        if x.dims() < self.dims:
            raise ShapeError(
                f"expected at least {self.dims} axes, got {x.dims()}",
                operation=operation,
                shapes=[x.shape],
            )

    def prob(self, x: Node) -> Node:
        self._check_rank(x, "IID.prob")
        return self._combine(self.dist.prob(x), reduce_prod)

    def log_prob(self, x: Node) -> Node:
        self._check_rank(x, "IID.log_prob")
        return self._combine(self.dist.log_prob(x), reduce_add)

    def cdf(self, x: Node) -> Node:
        self._check_rank(x, "IID.cdf")
        return self._combine(self.dist.cdf(x), reduce_prod)

    def entropy(self) -> Node:
        return self._combine(self.dist.entropy(), reduce_add)

    def cdfinv(self, p: Node) -> Node:
        return self.dist.cdfinv(p)

    def sample(self, n: int = 1) -> Node:
        return self.dist.sample(n)

    def rsample(self, n: int = 1) -> Node:
        return self.dist.rsample(n)

    def mean(self) -> Node:
        return self.dist.mean()

    def stddev(self) -> Node:
        return self.dist.stddev()

    def variance(self) -> Node:
        return self.dist.variance()

    @property
    def shape(self) -> Shape:
        return self.dist.shape

    @property
    def dtype(self) -> DataType:
        return self.dist.dtype

    @property
    def has_rsample(self) -> bool:
        return self.dist.has_rsample

    def __repr__(self) -> str:
        return f"IID({self.dist!r}, dims={self.dims})"
