# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for the composite operations: clip, minimum, maximum and
log_sum_exp.
"""

import numpy as np
import pytest
from scipy import special

from symgraph import Graph, TapeMachine, grad, sum_all
from symgraph.errors import AxisOutOfRangeError
from symgraph.ops import clip, log_sum_exp, maximum, minimum


def run(graph, *nodes):
    vm = TapeMachine(graph)
    vm.run_all()
    return [vm.read(n) for n in nodes]


class TestClip:
    def test_forward(self):
        g = Graph()
        values = np.array([-3.0, -1.0, 0.0, 0.5, 1.0, 4.0])
        x = g.variable((6,), name="x", value=values)
        (out,) = run(g, clip(x, -1.0, 1.0))
        np.testing.assert_array_equal(out, np.clip(values, -1.0, 1.0))

    def test_gradient_is_mask(self):
        """Gradient is 1 inside the closed interval and 0 outside."""
        g = Graph()
        x = g.variable((5,), name="x", value=np.array([-2.0, -1.0, 0.3, 1.0, 2.0]))
        (dx,) = grad(sum_all(clip(x, -1.0, 1.0)), x)
        (out,) = run(g, dx)
        np.testing.assert_array_equal(out, [0.0, 1.0, 1.0, 1.0, 0.0])


class TestMinMax:
    """Tests for minimum and maximum."""

    def test_forward(self):
        g = Graph()
        a_val = np.array([1.0, 5.0, -2.0, 3.0])
        b_val = np.array([2.0, 4.0, -2.0, 0.0])
        a = g.variable((4,), name="a", value=a_val)
        b = g.variable((4,), name="b", value=b_val)
        lo, hi = run(g, minimum(a, b), maximum(a, b))
        np.testing.assert_array_equal(lo, np.minimum(a_val, b_val))
        np.testing.assert_array_equal(hi, np.maximum(a_val, b_val))

    def test_ties_go_to_left(self):
        """On equal values the whole gradient flows to the left operand."""
        g = Graph()
        a = g.variable((2,), name="a", value=np.array([1.0, 2.0]))
        b = g.variable((2,), name="b", value=np.array([1.0, 2.0]))
        da_max, db_max = grad(sum_all(maximum(a, b)), a, b)
        da_min, db_min = grad(sum_all(minimum(a, b)), a, b)
        outs = run(g, da_max, db_max, da_min, db_min)
        np.testing.assert_array_equal(outs[0], [1.0, 1.0])
        np.testing.assert_array_equal(outs[1], [0.0, 0.0])
        np.testing.assert_array_equal(outs[2], [1.0, 1.0])
        np.testing.assert_array_equal(outs[3], [0.0, 0.0])

    def test_gradient_routes_to_winner(self):
        g = Graph()
        a = g.variable((3,), name="a", value=np.array([3.0, 0.0, 1.0]))
        b = g.variable((3,), name="b", value=np.array([1.0, 2.0, 5.0]))
        da, db = grad(sum_all(maximum(a, b)), a, b)
        da_val, db_val = run(g, da, db)
        np.testing.assert_array_equal(da_val, [1.0, 0.0, 0.0])
        np.testing.assert_array_equal(db_val, [0.0, 1.0, 1.0])


class TestLogSumExp:
    """Tests for log_sum_exp."""

    @pytest.mark.parametrize("axis", [0, 1, -1])
    def test_matches_scipy(self, axis):
        g = Graph()
        values = np.array([[1.0, 2.0, 3.0], [-4.0, 0.5, 10.0]])
        x = g.variable((2, 3), name="x", value=values)
        y = log_sum_exp(x, axis)
        expected = special.logsumexp(values, axis=axis)
        assert y.shape == expected.shape
        (out,) = run(g, y)
        np.testing.assert_allclose(out, expected, rtol=1e-12)

    def test_large_values_stay_finite(self):
        g = Graph()
        values = np.array([1000.0, 1001.0, 999.0])
        x = g.variable((3,), name="x", value=values)
        (out,) = run(g, log_sum_exp(x, 0))
        assert np.isfinite(out)
        np.testing.assert_allclose(out, special.logsumexp(values))

    def test_gradient_is_softmax(self):
        g = Graph()
        values = np.array([0.0, 1.0, 2.0])
        x = g.variable((3,), name="x", value=values)
        (dx,) = grad(log_sum_exp(x, 0), x)
        (out,) = run(g, dx)
        np.testing.assert_allclose(out, special.softmax(values), rtol=1e-10)

    def test_scalar_unchanged(self):
        g = Graph()
        s = g.scalar(2.0)
        assert log_sum_exp(s, 0) is s

    def test_bad_axis(self):
        g = Graph()
        with pytest.raises(AxisOutOfRangeError):
            log_sum_exp(g.variable((2, 2)), 3)
