# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Batched univariate Normal distribution.

A Normal built from mean and stddev tensors of shape ``(n_1, ..., n_M)``
holds one independent normal per element. Queries accept either that
exact shape or a batch of observations ``(a, n_1, ..., n_M)`` whose
axis 0 is the batch axis. A distribution of a single element (scalar or
1-element parameters) additionally reads a vector query as a batch of
scalars.

Example:
    g = Graph()
    mu = g.constant(np.array([0.0, 1.0, 2.0]), name="mu")
    sigma = g.constant(np.array([1.0, 0.5, 2.0]), name="sigma")
    dist = Normal(mu, sigma, seed=7)

    x = g.variable((5, 3), name="x")
    lp = dist.log_prob(x)           # shape (5, 3)
    z = dist.rsample(4)             # shape (4, 3), differentiable
"""

from __future__ import annotations

from typing import Optional, Tuple
import logging
import math

import numpy as np

from ..core.node import Node
from ..core.types import DataType, Shape
from ..errors import DTypeError, ShapeMismatchError
from ..ops.arithmetic import add, div, exp, log, mul, square, sub
from ..ops.erf import erf
from ..ops.erfinv import erfinv
from ..ops.shape_ops import reshape
from .base import Distribution
from .sample import normal_sample

logger = logging.getLogger("symgraph.distributions.normal")

_SQRT2 = math.sqrt(2.0)
_SQRT_2PI = math.sqrt(2.0 * math.pi)
_LOG_SQRT_2PI = 0.5 * math.log(2.0 * math.pi)


class Normal(Distribution):
    """
    Elementwise independent normal distributions ``N(mean, stddev)``.

    Attributes:
        seed: Seed shared by the sampling operators this distribution
            creates.
    """

    def __init__(self, mean: Node, stddev: Node, seed: Optional[int] = None):
        """
        Create a Normal from existing mean and stddev nodes.

        Args:
            mean: Mean node.
            stddev: Standard deviation node, same shape and dtype as mean.
            seed: Sampling seed (defaults to the graph config's seed).

        Raises:
            ShapeMismatchError: If the shapes differ.
            DTypeError: If the dtypes differ or are not floating point.
        """
        if mean.shape != stddev.shape:
            raise ShapeMismatchError(
                mean.shape.dims,
                stddev.shape.dims,
                operation="Normal",
                message="mean and stddev must have the same shape",
            )
        if mean.dtype != stddev.dtype:
            raise DTypeError(
                "mean and stddev must have the same dtype",
                operation="Normal",
                expected=mean.dtype.name,
                received=stddev.dtype.name,
            )
        if not mean.dtype.is_float():
            raise DTypeError(
                "unsupported dtype",
                operation="Normal",
                expected="Float32 or Float64",
                received=mean.dtype.name,
            )

        if mean.is_scalar():
            mean = reshape(mean, (1,))
            stddev = reshape(stddev, (1,))

        self._mean = mean
        self._stddev = stddev
        self.graph = mean.graph
        self.seed = self.graph.config.default_seed if seed is None else seed
        self._zero_mean: Optional[Node] = None
        self._unit_stddev: Optional[Node] = None

    # ------------------------------------------------------------------
    # Shape resolution
    # ------------------------------------------------------------------

    def fix_shape(self, x: Node) -> Tuple[Node, bool]:
        """
        Resolve how a query node lines up with the declared shape.

        Returns:
            ``(node, batched)``: the (possibly reshaped) query and whether
            its axis 0 is a batch axis.

        Raises:
            ShapeMismatchError: If ``x`` matches neither the declared
                shape nor a batch of it.
            DTypeError: If ``x`` has a different dtype.
        """
        if x.dtype != self.dtype:
            raise DTypeError(
                "query dtype does not match the distribution",
                operation="Normal",
                expected=self.dtype.name,
                received=x.dtype.name,
            )

        declared = self.shape
        if declared.numel() == 1:
            if x.is_scalar():
                return reshape(x, declared), False
            if x.is_vector():
                logger.debug("reading vector %s as a batch of scalars", x.name)
                return reshape(x, (x.shape[0],) + declared.dims), True

        if x.shape == declared:
            return x, False
        if x.dims() == declared.rank() + 1 and x.shape[1:] == declared:
            return x, True

        raise ShapeMismatchError(
            declared.dims,
            x.shape.dims,
            operation="Normal",
            message=(
                f"expected shape {list(declared.dims)} or a batch "
                f"{['a'] + list(declared.dims)}, got {list(x.shape.dims)}"
            ),
        )

    def _standardize(self, x: Node, axes: tuple) -> Node:
        centered = sub(x, self._mean, broadcast_right=axes)
        return div(centered, self._stddev, broadcast_right=axes)

    # ------------------------------------------------------------------
    # Densities
    # ------------------------------------------------------------------

    def prob(self, x: Node) -> Node:
        """``exp(-z**2 / 2) / (stddev * sqrt(2 pi))`` with ``z`` standardized."""
        x, batched = self.fix_shape(x)
        axes = (0,) if batched else ()
        z = self._standardize(x, axes)
        numerator = exp(mul(square(z), -0.5))
        return div(numerator, mul(self._stddev, _SQRT_2PI), broadcast_right=axes)

    def log_prob(self, x: Node) -> Node:
        """Log density, computed in log space."""
        x, batched = self.fix_shape(x)
        axes = (0,) if batched else ()
        z = self._standardize(x, axes)
        out = sub(mul(square(z), -0.5), log(self._stddev), broadcast_right=axes)
        return sub(out, _LOG_SQRT_2PI)

    def cdf(self, x: Node) -> Node:
        x, batched = self.fix_shape(x)
        axes = (0,) if batched else ()
        z = self._standardize(x, axes)
        return mul(add(erf(div(z, _SQRT2)), 1.0), 0.5)

    def cdfinv(self, p: Node) -> Node:
        """Quantile function ``mean + stddev * sqrt(2) * erfinv(2p - 1)``."""
        p, batched = self.fix_shape(p)
        axes = (0,) if batched else ()
        t = mul(erfinv(sub(mul(p, 2.0), 1.0)), _SQRT2)
        return add(mul(t, self._stddev, broadcast_right=axes), self._mean, broadcast_right=axes)

    def entropy(self) -> Node:
        """``0.5 * log(2 pi stddev**2) + 0.5`` for every element."""
        spread = mul(square(self._stddev), 2.0 * math.pi)
        return add(mul(log(spread), 0.5), 0.5)

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def sample(self, n: int = 1) -> Node:
        return normal_sample(self._mean, self._stddev, seed=self.seed, n=n)

    def _standard_params(self) -> Tuple[Node, Node]:
        if self._zero_mean is None:
            np_dtype = self.dtype.to_numpy()
            self._zero_mean = self.graph.constant(
                np.zeros(self.shape.dims, dtype=np_dtype),
                dtype=self.dtype,
                name="zero_mean",
            )
            self._unit_stddev = self.graph.constant(
                np.ones(self.shape.dims, dtype=np_dtype),
                dtype=self.dtype,
                name="unit_stddev",
            )
        return self._zero_mean, self._unit_stddev

    def rsample(self, n: int = 1) -> Node:
        """
        Reparameterized samples ``mean + stddev * z`` with ``z ~ N(0, 1)``.

        Gradients flow to mean and stddev; the draw itself is a constant.
        """
        zero, unit = self._standard_params()
        z = normal_sample(zero, unit, seed=self.seed, n=n)
        scaled = mul(z, self._stddev, broadcast_right=(0,))
        return add(scaled, self._mean, broadcast_right=(0,))

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def mean(self) -> Node:
        return self._mean

    def stddev(self) -> Node:
        return self._stddev

    def variance(self) -> Node:
        return square(self._stddev)

    @property
    def shape(self) -> Shape:
        return self._mean.shape

    @property
    def dtype(self) -> DataType:
        return self._mean.dtype

    @property
    def has_rsample(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Normal(shape={self.shape}, dtype={self.dtype.name}, seed={self.seed})"
