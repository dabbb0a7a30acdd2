# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Composite operations built from masks and the arithmetic primitives.
"""

from __future__ import annotations

from ..core.node import Node
from ..core.shape import normalize_axis
from .arithmetic import add, exp, gt, gte, log, lt, lte, mul, sub
from .reduce import reduce_add, reduce_along


def clip(x: Node, lo: float, hi: float) -> Node:
    """
    Clip ``x`` to ``[lo, hi]`` with comparison masks.

    Unlike ``clamp`` this is a composition, so its gradient is the
    masks' gradient: 1 inside ``[lo, hi]`` and 0 outside.
    """
    g = x.graph
    lo_node = g.scalar(lo, dtype=x.dtype, name="clip_min")
    hi_node = g.scalar(hi, dtype=x.dtype, name="clip_max")

    below = mul(lo_node, lt(x, lo_node))
    inside = mul(x, mul(gte(x, lo_node), lte(x, hi_node)))
    above = mul(hi_node, gt(x, hi_node))
    return add(add(below, inside), above)


def minimum(a: Node, b: Node) -> Node:
    """Elementwise minimum; ``a`` wins ties."""
    return add(mul(a, lte(a, b)), mul(b, lt(b, a)))


def maximum(a: Node, b: Node) -> Node:
    """Elementwise maximum; ``a`` wins ties."""
    return add(mul(a, gte(a, b)), mul(b, gt(b, a)))


def log_sum_exp(x: Node, axis: int) -> Node:
    """
    ``log(sum(exp(x), axis))`` computed around the maximum along ``axis``.

    The result has ``x``'s shape without ``axis``.
    """
    if x.is_scalar():
        return x
    axis = normalize_axis(axis, x.dims(), operation="log_sum_exp")
    peak = reduce_along(x, axis, maximum, keepdims=True, operation="log_sum_exp")
    shifted = sub(x, peak, broadcast_right=(axis,))
    total = reduce_add(exp(shifted), axis, keepdims=True)
    return add(peak, log(total))
