# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for Shape, DataType and the shape algebra helpers.
"""

import numpy as np
import pytest

from symgraph.core import DataType, Shape, as_shape, dtype_to_string
from symgraph.core import shape as sa
from symgraph.errors import AxisOutOfRangeError, ShapeError


class TestShape:
    """Tests for the Shape value type."""

    def test_scalar(self):
        s = Shape()
        assert s.is_scalar()
        assert s.rank() == 0
        assert s.numel() == 1

    def test_basic(self):
        s = Shape((2, 3, 4))
        assert s.rank() == 3
        assert s.numel() == 24
        assert s[1] == 3
        assert list(s) == [2, 3, 4]
        assert len(s) == 3

    def test_slice_returns_shape(self):
        s = Shape((5, 3))
        assert isinstance(s[1:], Shape)
        assert s[1:] == Shape((3,))

    def test_equality_with_tuples(self):
        assert Shape((2, 3)) == (2, 3)
        assert Shape((2, 3)) == [2, 3]
        assert Shape((2, 3)) != Shape((3, 2))
        assert hash(Shape((2, 3))) == hash(Shape((2, 3)))

    def test_negative_dim_rejected(self):
        with pytest.raises(ValueError):
            Shape((2, -1))

    def test_repr(self):
        assert repr(Shape((2, 3))) == "Shape([2, 3])"
        assert str(Shape((2, 3))) == "(2, 3)"

    def test_as_shape(self):
        s = Shape((1,))
        assert as_shape(s) is s
        assert as_shape([4, 1]) == Shape((4, 1))


class TestDataType:
    """Tests for DataType mapping."""

    @pytest.mark.parametrize(
        "np_dtype,expected",
        [
            (np.float32, DataType.Float32),
            (np.float64, DataType.Float64),
            (np.int8, DataType.Int),
            (np.int32, DataType.Int),
            (np.uint16, DataType.Int),
            (np.bool_, DataType.Int),
        ],
    )
    def test_from_numpy(self, np_dtype, expected):
        assert DataType.from_numpy(np_dtype) == expected

    def test_unsupported(self):
        with pytest.raises(ValueError):
            DataType.from_numpy(np.complex128)

    def test_to_numpy(self):
        assert DataType.Int.to_numpy() == np.int64
        assert DataType.Float32.to_numpy() == np.float32

    def test_is_float(self):
        assert DataType.Float64.is_float()
        assert not DataType.Int.is_float()

    def test_dtype_to_string(self):
        assert dtype_to_string(DataType.Float32) == "float32"


class TestSqueeze:
    """Tests for squeeze / unsqueeze."""

    def test_squeeze_unit_axis(self):
        assert sa.squeeze((2, 1, 3), 1) == Shape((2, 3))

    def test_squeeze_is_permissive(self):
        """Squeezing an axis that is not size 1 is a no-op."""
        assert sa.squeeze((2, 3), 0) == Shape((2, 3))

    def test_squeeze_negative_axis(self):
        assert sa.squeeze((2, 1), -1) == Shape((2,))

    def test_squeeze_out_of_range(self):
        with pytest.raises(AxisOutOfRangeError):
            sa.squeeze((2, 3), 2)

    @pytest.mark.parametrize(
        "axis,expected",
        [(0, (1, 2, 3)), (1, (2, 1, 3)), (2, (2, 3, 1)), (-1, (2, 3, 1))],
    )
    def test_unsqueeze(self, axis, expected):
        assert sa.unsqueeze((2, 3), axis) == Shape(expected)

    def test_unsqueeze_out_of_range(self):
        with pytest.raises(AxisOutOfRangeError):
            sa.unsqueeze((2, 3), 3)

    def test_count_ones_before(self):
        assert sa.count_ones_before((1, 4, 1, 1, 5), 3) == 2
        assert sa.count_ones_before((1, 4, 1, 1, 5), 0) == 0


class TestSqueezeAllBut:
    """Tests for squeeze_all_but axis renumbering."""

    @pytest.mark.parametrize(
        "shape,keep,expected_shape,expected_axis",
        [
            ((1, 4, 1, 5), 1, (4, 5), 0),
            ((1, 4, 1, 5), 2, (4, 1, 5), 1),
            ((1, 1, 1), 1, (1,), 0),
            ((3, 1, 2, 1), 3, (3, 2, 1), 2),
            ((3, 1, 2), -1, (3, 2), 1),
            ((3, 1, 1), -1, (3, 1), 1),
            ((1, 4, 1), -3, (1, 4), 0),
            ((3, 1, 2), None, (3, 2), None),
        ],
    )
    def test_renumbering(self, shape, keep, expected_shape, expected_axis):
        out, axis = sa.squeeze_all_but(shape, keep)
        assert out == Shape(expected_shape)
        assert axis == expected_axis

    def test_squeeze_all(self):
        assert sa.squeeze_all((1, 2, 1, 3, 1)) == Shape((2, 3))
        assert sa.squeeze_all((1, 1)) == Shape()

    def test_negative_keep_axis_out_of_range(self):
        with pytest.raises(AxisOutOfRangeError):
            sa.squeeze_all_but((2, 1), -3)


class TestBroadcast:
    """Tests for remove_axis, expand_axes and broadcast_shapes."""

    def test_remove_axis(self):
        assert sa.remove_axis((2, 1, 3), 2) == Shape((2, 1))
        assert sa.remove_axis((4,), 0) == Shape()

    def test_expand_axes(self):
        assert sa.expand_axes((3,), (0,)) == Shape((1, 3))
        assert sa.expand_axes((3, 4), (0, 2)) == Shape((1, 3, 1, 4))

    def test_broadcast_shapes(self):
        assert sa.broadcast_shapes((5, 3), (3,)) == Shape((5, 3))
        assert sa.broadcast_shapes((), (2, 2)) == Shape((2, 2))
        assert sa.broadcast_shapes((4, 1), (1, 6)) == Shape((4, 6))

    def test_broadcast_incompatible(self):
        with pytest.raises(ShapeError):
            sa.broadcast_shapes((5, 3), (4,))
