# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Node

A single value in the computation graph: either a leaf (variable or
constant) or the output of an operator applied to other nodes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional
import itertools

import numpy as np

from ..errors import DTypeError, ShapeMismatchError, UnsupportedOperationError
from .types import DataType, Shape

if TYPE_CHECKING:
    from .graph_ir import Graph
    from ..ops.base import Op


# Node ID counter
_node_id_counter = itertools.count()


@dataclass(eq=False)
class Node:
    """
    Represents a single node in the computation graph.

    Leaves have no operator. Variables receive their value through
    ``let`` before execution; constants carry it from construction.
    After a TapeMachine run, ``value`` holds the node's computed value.
    """

    op: Optional["Op"]
    inputs: tuple["Node", ...]
    shape: Shape
    dtype: DataType
    name: str = ""
    graph: Optional["Graph"] = field(default=None, repr=False)
    is_constant: bool = False
    value: Optional[np.ndarray] = field(default=None, repr=False)

    # Auto-generated ID
    id: int = field(default_factory=lambda: next(_node_id_counter), init=False)

    @property
    def is_leaf(self) -> bool:
        return self.op is None

    @property
    def is_variable(self) -> bool:
        return self.op is None and not self.is_constant

    def is_scalar(self) -> bool:
        return self.shape.is_scalar()

    def is_vector(self) -> bool:
        return self.shape.is_vector()

    def dims(self) -> int:
        """Get number of dimensions."""
        return self.shape.rank()

    def size(self) -> int:
        return self.shape.numel()

    @property
    def op_type(self) -> str:
        if self.op is None:
            return "Constant" if self.is_constant else "Variable"
        return self.op.op_type

    def bind(self, value: Any) -> None:
        """
        Bind a value to this leaf, checking it against the declared
        shape and dtype.
        """
        if not self.is_leaf:
            raise UnsupportedOperationError(
                "let", reason=f"cannot bind a value to op node '{self.name}'"
            )
        array = np.asarray(value)
        if array.shape != self.shape.dims:
            raise ShapeMismatchError(
                self.shape.dims, array.shape, operation=f"let {self.name}"
            )
        try:
            dtype = DataType.from_numpy(array.dtype)
        except ValueError as e:
            raise DTypeError(str(e), operation=f"let {self.name}") from e
        if dtype != self.dtype:
            raise DTypeError(
                "bound value has the wrong dtype",
                operation=f"let {self.name}",
                expected=self.dtype.name,
                received=dtype.name,
            )
        self.value = np.array(array, dtype=self.dtype.to_numpy())

    def __repr__(self) -> str:
        return (
            f"Node(op='{self.op_type}', name='{self.name}', "
            f"shape={self.shape.dims}, dtype={self.dtype.name})"
        )
