# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Distribution interface.

Every query takes and returns graph nodes. If a query node has one more
leading axis than the distribution's shape, that axis is the batch axis.
"""

from abc import ABC, abstractmethod

from ..core.node import Node
from ..core.types import DataType, Shape


class Distribution(ABC):
    """Abstract base class for probability distributions."""

    @abstractmethod
    def prob(self, x: Node) -> Node:
        """Probability density of ``x``."""

    @abstractmethod
    def log_prob(self, x: Node) -> Node:
        """Log probability density of ``x``."""

    @abstractmethod
    def cdf(self, x: Node) -> Node:
        """Cumulative distribution function at ``x``."""

    @abstractmethod
    def cdfinv(self, p: Node) -> Node:
        """Inverse CDF (quantile function) at ``p``."""

    @abstractmethod
    def entropy(self) -> Node:
        """Entropy of every independent component."""

    @abstractmethod
    def sample(self, n: int = 1) -> Node:
        """Draw ``n`` samples, shape ``(n, *shape)``. Not differentiable."""

    @abstractmethod
    def rsample(self, n: int = 1) -> Node:
        """Draw ``n`` reparameterized samples, shape ``(n, *shape)``."""

    @abstractmethod
    def mean(self) -> Node:
        """Mean node."""

    @abstractmethod
    def stddev(self) -> Node:
        """Standard deviation node."""

    @abstractmethod
    def variance(self) -> Node:
        """Variance node."""

    @property
    @abstractmethod
    def shape(self) -> Shape:
        """Declared shape, excluding any batch axis."""

    @property
    @abstractmethod
    def dtype(self) -> DataType:
        """Element type."""

    @property
    def has_rsample(self) -> bool:
        return False
