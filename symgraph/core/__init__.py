# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Symgraph Core - graph data structures and shape algebra.
"""

from .types import DataType, Shape, as_shape, dtype_to_string
from .node import Node
from .graph_ir import Graph
from .naming import NameAllocator
from . import shape

__all__ = [
    "DataType",
    "Shape",
    "as_shape",
    "dtype_to_string",
    "Node",
    "Graph",
    "NameAllocator",
    "shape",
]
