# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for Graph, Node and NameAllocator.
"""

import numpy as np
import pytest

from symgraph import (
    DataType,
    EngineConfig,
    Graph,
    NameAllocator,
    Shape,
    add,
    erf,
    exp,
    let,
    mul,
    normal_sample,
)
from symgraph.errors import (
    DTypeError,
    InvalidArgumentError,
    ShapeError,
    ShapeMismatchError,
    UnsupportedOperationError,
)
from symgraph.ops import simple_hash


class TestNameAllocator:
    """Tests for caller-owned name allocation."""

    def test_sequence(self):
        names = NameAllocator()
        assert names.unique("x") == "x"
        assert names.unique("x") == "x_1"
        assert names.unique("x") == "x_2"
        assert names.unique("y") == "y"

    def test_skips_explicit_variants(self):
        names = NameAllocator()
        names.unique("x")
        assert names.unique("x_1") == "x_1"
        assert names.unique("x") == "x_2"

    def test_reserve(self):
        names = NameAllocator()
        names.reserve("mean")
        assert "mean" in names
        assert names.unique("mean") == "mean_1"

    def test_reset(self):
        names = NameAllocator()
        names.unique("x")
        names.reset()
        assert "x" not in names
        assert names.unique("x") == "x"

    def test_graphs_do_not_share_names(self):
        g1, g2 = Graph(), Graph()
        assert g1.variable((2,), name="x").name == "x"
        assert g2.variable((2,), name="x").name == "x"
        assert g1.variable((2,), name="x").name == "x_1"


class TestLeaves:
    """Tests for variables, constants and let()."""

    def test_variable(self, graph):
        x = graph.variable((2, 3), DataType.Float32, name="x")
        assert x.shape == Shape((2, 3))
        assert x.dtype == DataType.Float32
        assert x.is_leaf and x.is_variable
        assert x.value is None
        assert x.op_type == "Variable"

    def test_constant_infers_dtype(self, graph):
        c = graph.constant(np.arange(3))
        assert c.dtype == DataType.Int
        assert c.is_constant
        assert c.op_type == "Constant"

    def test_constant_copies(self, graph):
        source = np.ones(3)
        c = graph.constant(source)
        source[0] = 7.0
        assert c.value[0] == 1.0

    def test_scalar(self, graph):
        s = graph.scalar(2.5)
        assert s.is_scalar()
        assert s.dtype == DataType.Float64

    def test_let(self, graph):
        x = graph.variable((2,), name="x")
        let(x, [1.0, 2.0])
        np.testing.assert_array_equal(x.value, [1.0, 2.0])

    def test_let_wrong_shape(self, graph):
        x = graph.variable((2,), name="x")
        with pytest.raises(ShapeMismatchError):
            let(x, np.zeros(3))

    def test_let_wrong_dtype(self, graph):
        x = graph.variable((2,), DataType.Float32, name="x")
        with pytest.raises(DTypeError):
            let(x, np.zeros(2, dtype=np.float64))

    def test_let_op_node(self, graph):
        x = graph.variable((2,), name="x")
        y = exp(x)
        with pytest.raises(UnsupportedOperationError):
            let(y, np.zeros(2))


class TestApplyOp:
    """Tests for node construction through apply_op."""

    def test_infers_shape_and_dtype(self, graph):
        a = graph.variable((5, 3), name="a")
        b = graph.variable((3,), name="b")
        c = add(a, b)
        assert c.shape == Shape((5, 3))
        assert c.dtype == DataType.Float64
        assert c.inputs == (a, b)

    def test_node_names_follow_op(self, graph):
        x = graph.variable((2,), name="x")
        assert exp(x).name == "exp"
        assert exp(exp(x)).name == "exp_1"
        assert graph.get_node("exp_1").inputs[0].name == "exp"
        assert graph.get_node("missing") is None

    def test_shape_error_at_build(self, graph):
        a = graph.variable((5, 3))
        b = graph.variable((4,))
        with pytest.raises(ShapeError):
            add(a, b)

    def test_dtype_mismatch_at_build(self, graph):
        a = graph.variable((2,), DataType.Float32)
        b = graph.variable((2,), DataType.Float64)
        with pytest.raises(DTypeError):
            mul(a, b)

    def test_inputs_from_other_graph(self, graph):
        other = Graph("other")
        a = graph.variable((2,))
        b = other.variable((2,))
        with pytest.raises(InvalidArgumentError):
            add(a, b)

    def test_python_scalars_are_lifted(self, graph):
        x = graph.variable((3,), DataType.Float32)
        y = mul(x, 2.0)
        assert y.dtype == DataType.Float32
        assert y.inputs[1].is_constant

    def test_integral_scalars_lifted_onto_int(self, graph):
        x = graph.variable((2,), DataType.Int, name="x", value=np.array([3, 4]))
        y = mul(x, 2.0)
        assert y.dtype == DataType.Int
        assert mul(2, x).dtype == DataType.Int

    @pytest.mark.parametrize("scalar", [0.5, -1.25, float("nan"), float("inf")])
    def test_fractional_scalar_onto_int_rejected(self, graph, scalar):
        """A scalar that would be truncated to fit an Int node is an error."""
        x = graph.variable((2,), DataType.Int, name="x")
        with pytest.raises(DTypeError):
            mul(x, scalar)
        with pytest.raises(DTypeError):
            add(scalar, x)

    def test_both_python_scalars_rejected(self):
        with pytest.raises(InvalidArgumentError):
            add(1.0, 2.0)


class TestMemoization:
    """Identical operators on identical inputs reuse one node."""

    def test_same_node_returned(self, graph):
        x = graph.variable((3,), name="x")
        assert erf(x) is erf(x)
        assert graph.num_nodes() == 2

    def test_parameters_distinguish_ops(self, graph):
        a = graph.variable((3,))
        b = graph.variable((3,))
        assert add(a, b) is not add(b, a)

    def test_disabled_by_config(self):
        g = Graph(config=EngineConfig(memoize_ops=False))
        x = g.variable((3,))
        assert erf(x) is not erf(x)

    def test_sampling_never_memoized(self, graph):
        mu = graph.constant(np.zeros(2))
        sigma = graph.constant(np.ones(2))
        assert normal_sample(mu, sigma, seed=1) is not normal_sample(mu, sigma, seed=1)

    def test_hashcode_is_stable(self):
        assert simple_hash("Erf()") == simple_hash("Erf()")
        assert simple_hash("Erf()") != simple_hash("Erfinv()")
        assert 0 <= simple_hash("Clamp{min=0, max=1, pass_gradient=False}()") < 2**32


class TestTraversal:
    """Tests for consumers, ancestors and topological order."""

    def test_consumers(self, graph):
        x = graph.variable((2,), name="x")
        a = exp(x)
        b = erf(x)
        assert graph.consumers(x) == [a, b]
        assert graph.consumers(a) == []

    def test_topological_order(self, graph):
        x = graph.variable((2,), name="x")
        y = graph.variable((2,), name="y")
        s = add(exp(x), y)
        order = graph.topological_order()
        position = {n.id: i for i, n in enumerate(order)}
        for node in graph.nodes:
            for inp in node.inputs:
                assert position[inp.id] < position[node.id]
        assert order[-1] is s

    def test_order_of_targets_only(self, graph):
        x = graph.variable((2,), name="x")
        a = exp(x)
        erf(x)
        assert graph.topological_order([a]) == [x, a]

    def test_summary(self, graph):
        x = graph.variable((2,), name="x")
        exp(x)
        text = graph.summary()
        assert "Exp: 1" in text
        assert "Variable: 1" in text
        assert len(graph) == 2
