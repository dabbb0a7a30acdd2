# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Symgraph Core Types

Element types and shapes shared by graph nodes and tensor values.
Tensor values themselves are plain numpy arrays.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Iterator, Sequence, Union

import numpy as np


class DataType(Enum):
    """Supported element types for tensors."""

    Float32 = auto()
    Float64 = auto()
    Int = auto()

    def is_float(self) -> bool:
        return self in (DataType.Float32, DataType.Float64)

    def to_numpy(self) -> np.dtype:
        """Get the numpy dtype backing this element type."""
        return np.dtype(_TO_NUMPY[self])

    @classmethod
    def from_numpy(cls, dtype) -> "DataType":
        """
        Map a numpy dtype onto a DataType.

        Every integer width collapses onto ``DataType.Int``.
        """
        dtype = np.dtype(dtype)
        if dtype == np.float32:
            return cls.Float32
        if dtype == np.float64:
            return cls.Float64
        if np.issubdtype(dtype, np.integer) or dtype == np.bool_:
            return cls.Int
        raise ValueError(f"Unsupported numpy dtype: {dtype}")


_TO_NUMPY = {
    DataType.Float32: np.float32,
    DataType.Float64: np.float64,
    DataType.Int: np.int64,
}


def dtype_to_string(dtype: DataType) -> str:
    """Get string representation of data type."""
    return dtype.name.lower()


@dataclass(frozen=True, eq=False)
class Shape:
    """
    Immutable tensor dimensions.

    A shape with no dims denotes a scalar. Every transformation returns
    a new Shape.
    """

    dims: tuple[int, ...] = ()

    def __post_init__(self):
        dims = tuple(int(d) for d in self.dims)
        if any(d < 0 for d in dims):
            raise ValueError(f"Shape dims must be non-negative, got {dims}")
        object.__setattr__(self, "dims", dims)

    def rank(self) -> int:
        """Get number of dimensions."""
        return len(self.dims)

    def numel(self) -> int:
        """Get total number of elements (1 for scalars)."""
        result = 1
        for d in self.dims:
            result *= d
        return result

    def is_scalar(self) -> bool:
        return not self.dims

    def is_vector(self) -> bool:
        return len(self.dims) == 1

    def as_tuple(self) -> tuple[int, ...]:
        return self.dims

    def __getitem__(self, idx):
        if isinstance(idx, slice):
            return Shape(self.dims[idx])
        return self.dims[idx]

    def __iter__(self) -> Iterator[int]:
        return iter(self.dims)

    def __len__(self) -> int:
        return len(self.dims)

    def __eq__(self, other) -> bool:
        if isinstance(other, Shape):
            return self.dims == other.dims
        if isinstance(other, (tuple, list)):
            return self.dims == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.dims)

    def __repr__(self) -> str:
        return f"Shape({list(self.dims)})"

    def __str__(self) -> str:
        return str(self.dims)


ShapeLike = Union[Shape, Sequence[int]]


def as_shape(shape: ShapeLike) -> Shape:
    """Coerce a tuple or list of ints into a Shape."""
    if isinstance(shape, Shape):
        return shape
    return Shape(tuple(shape))
