# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for repeat and its block-sum gradient.
"""

import numpy as np
import pytest

from symgraph import Graph, TapeMachine, grad, mul, repeat, sum_all
from symgraph.errors import (
    AxisOutOfRangeError,
    InvalidArgumentError,
    ShapeError,
    ShapeMismatchError,
)
from symgraph.ops import RepeatDiffOp


def run(graph, *nodes):
    vm = TapeMachine(graph)
    vm.run_all()
    return [vm.read(n) for n in nodes]


class TestRepeat:
    """Forward behaviour of repeat."""

    @pytest.mark.parametrize("axis", [0, 1, -1])
    @pytest.mark.parametrize("repeats", [1, 2, 3])
    def test_matches_numpy(self, axis, repeats):
        g = Graph()
        values = np.arange(6.0).reshape(2, 3)
        x = g.variable((2, 3), name="x", value=values)
        y = repeat(x, axis, repeats)
        expected = np.repeat(values, repeats, axis=axis)
        assert y.shape == expected.shape
        (out,) = run(g, y)
        np.testing.assert_array_equal(out, expected)

    def test_duplicates_slices_not_tiles(self):
        g = Graph()
        x = g.constant(np.array([1.0, 2.0]))
        (out,) = run(g, repeat(x, 0, 2))
        np.testing.assert_array_equal(out, [1.0, 1.0, 2.0, 2.0])

    def test_repeats_must_be_positive(self):
        g = Graph()
        x = g.variable((2,))
        with pytest.raises(InvalidArgumentError):
            repeat(x, 0, 0)

    def test_scalar_rejected(self):
        g = Graph()
        with pytest.raises(ShapeError):
            repeat(g.scalar(1.0), 0, 2)

    def test_axis_out_of_range(self):
        g = Graph()
        with pytest.raises(AxisOutOfRangeError):
            repeat(g.variable((2, 2)), 2, 2)


class TestRepeatGradient:
    """Block sums of the upstream gradient."""

    def test_uniform_upstream(self):
        """A gradient of ones sums to ``repeats`` at every position."""
        g = Graph()
        x = g.variable((3, 2), name="x", value=np.ones((3, 2)))
        (dx,) = grad(sum_all(repeat(x, 0, 4)), x)
        (out,) = run(g, dx)
        np.testing.assert_array_equal(out, np.full((3, 2), 4.0))

    def test_weighted_upstream(self):
        g = Graph()
        weights = np.arange(12.0).reshape(2, 6)
        x = g.variable((2, 2), name="x", value=np.ones((2, 2)))
        cost = sum_all(mul(repeat(x, 1, 3), g.constant(weights)))
        (dx,) = grad(cost, x)
        (out,) = run(g, dx)
        expected = weights.reshape(2, 2, 3).sum(axis=2)
        np.testing.assert_array_equal(out, expected)

    def test_single_block(self):
        """One input row yields one summed row, without stacking."""
        op = RepeatDiffOp(0, 3)
        x = np.zeros((1, 2))
        upstream = np.arange(6.0).reshape(3, 2)
        out = op.do(x, upstream)
        assert out.shape == (1, 2)
        np.testing.assert_array_equal(out, [[6.0, 9.0]])

    def test_repeats_of_one_pass_through(self):
        op = RepeatDiffOp(1, 1)
        upstream = np.arange(4.0).reshape(2, 2)
        np.testing.assert_array_equal(op.do(np.zeros((2, 2)), upstream), upstream)

    def test_gradient_shape_checked(self):
        op = RepeatDiffOp(0, 2)
        with pytest.raises(ShapeMismatchError):
            op.do(np.zeros((2, 2)), np.zeros((3, 2)))

    def test_second_order(self):
        """The gradient of the block sum is a repeat again."""
        g = Graph()
        x = g.variable((2,), name="x", value=np.array([1.0, -2.0]))
        (dx,) = grad(sum_all(mul(repeat(x, 0, 2), repeat(x, 0, 2))), x)
        (d2x,) = grad(sum_all(dx), x)
        dx_val, d2x_val = run(g, dx, d2x)
        np.testing.assert_allclose(dx_val, [4.0, -8.0])
        np.testing.assert_allclose(d2x_val, [4.0, 4.0])
