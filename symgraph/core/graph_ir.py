# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Graph

Owns the nodes of one computation, their names and the memo table used
to reuse nodes when the same operator is applied to the same inputs.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional
import logging

import numpy as np

from ..config import EngineConfig, get_config
from ..errors import InvalidArgumentError
from .naming import NameAllocator
from .node import Node
from .types import DataType, ShapeLike, as_shape

if TYPE_CHECKING:
    from ..ops.base import Op

logger = logging.getLogger("symgraph.graph")


class Graph:
    """
    A symbolic computation graph.

    Example:
        g = Graph("demo")
        x = g.variable((3,), DataType.Float64, name="x")
        y = erf(x)
    """

    def __init__(self, name: str = "", config: Optional[EngineConfig] = None):
        self.name = name
        self.config = config or get_config()
        self.names = NameAllocator()
        self._nodes: List[Node] = []
        self._name_to_node: Dict[str, Node] = {}
        self._consumers: Dict[int, List[Node]] = defaultdict(list)
        self._memo: Dict[tuple, Node] = {}

    def _add(self, node: Node) -> Node:
        self._nodes.append(node)
        self._name_to_node[node.name] = node
        for inp in node.inputs:
            self._consumers[inp.id].append(node)
        return node

    def variable(
        self,
        shape: ShapeLike,
        dtype: DataType = DataType.Float64,
        name: Optional[str] = None,
        value: Any = None,
    ) -> Node:
        """
        Create a variable leaf.

        Args:
            shape: Declared shape (empty for a scalar).
            dtype: Element type.
            name: Base name, made unique within the graph.
            value: Optional initial value (same as calling ``let``).
        """
        node = Node(
            op=None,
            inputs=(),
            shape=as_shape(shape),
            dtype=dtype,
            name=self.names.unique(name or "var"),
            graph=self,
        )
        if value is not None:
            node.bind(value)
        return self._add(node)

    def constant(
        self,
        value: Any,
        dtype: Optional[DataType] = None,
        name: Optional[str] = None,
    ) -> Node:
        """Create a constant leaf holding a copy of ``value``."""
        array = np.asarray(value)
        if dtype is None:
            dtype = DataType.from_numpy(array.dtype)
        array = np.array(array, dtype=dtype.to_numpy())
        node = Node(
            op=None,
            inputs=(),
            shape=as_shape(array.shape),
            dtype=dtype,
            name=self.names.unique(name or "const"),
            graph=self,
            is_constant=True,
            value=array,
        )
        return self._add(node)

    def scalar(
        self,
        value: float,
        dtype: DataType = DataType.Float64,
        name: Optional[str] = None,
    ) -> Node:
        """Create a scalar constant."""
        return self.constant(np.asarray(value), dtype=dtype, name=name)

    def apply_op(self, op: "Op", *inputs: Node) -> Node:
        """
        Apply an operator to input nodes and return the output node.

        The output shape and dtype are inferred immediately, so shape
        errors surface at build time. When memoization is enabled, an
        identical operator applied to the same inputs returns the node
        built the first time.
        """
        for inp in inputs:
            if not isinstance(inp, Node):
                raise InvalidArgumentError(
                    f"{op}: inputs must be graph nodes, got {type(inp).__name__}",
                    parameter="inputs",
                )
            if inp.graph is not self:
                raise InvalidArgumentError(
                    f"{op}: input '{inp.name}' belongs to a different graph",
                    parameter="inputs",
                )

        op.check_arity(len(inputs))
        shape = op.infer_shape(*[inp.shape for inp in inputs])
        dtype = op.infer_dtype(*[inp.dtype for inp in inputs])

        key = None
        if self.config.memoize_ops and op.memoizable:
            key = (op.hashcode(), str(op), tuple(inp.id for inp in inputs))
            cached = self._memo.get(key)
            if cached is not None:
                logger.debug("reusing node %s for %s", cached.name, op)
                return cached

        node = Node(
            op=op,
            inputs=tuple(inputs),
            shape=as_shape(shape),
            dtype=dtype,
            name=self.names.unique(op.op_type.lower()),
            graph=self,
        )
        if key is not None:
            self._memo[key] = node
        return self._add(node)

    def get_node(self, name: str) -> Optional[Node]:
        """Get node by name."""
        return self._name_to_node.get(name)

    @property
    def nodes(self) -> List[Node]:
        """Get all nodes."""
        return self._nodes

    def num_nodes(self) -> int:
        """Get number of nodes."""
        return len(self._nodes)

    def consumers(self, node: Node) -> List[Node]:
        """Nodes that take ``node`` as an input."""
        return list(self._consumers.get(node.id, ()))

    def ancestors(self, targets: Iterable[Node]) -> List[Node]:
        """All nodes that ``targets`` depend on, including the targets."""
        seen: Dict[int, Node] = {}
        stack = list(targets)
        while stack:
            node = stack.pop()
            if node.id in seen:
                continue
            seen[node.id] = node
            stack.extend(node.inputs)
        return list(seen.values())

    def topological_order(self, targets: Optional[Iterable[Node]] = None) -> List[Node]:
        """
        Get nodes in topological order (for execution).

        Uses Kahn's algorithm over the whole graph, or over the
        ancestors of ``targets`` when given.
        """
        nodes = self._nodes if targets is None else self.ancestors(targets)
        if not nodes:
            return []

        order_of = {n.id: i for i, n in enumerate(self._nodes)}
        members = {n.id for n in nodes}
        in_degree: Dict[int, int] = {n.id: 0 for n in nodes}
        adjacency: Dict[int, List[Node]] = defaultdict(list)

        for node in nodes:
            for inp in node.inputs:
                if inp.id in members:
                    adjacency[inp.id].append(node)
                    in_degree[node.id] += 1

        queue = sorted(
            (n for n in nodes if in_degree[n.id] == 0),
            key=lambda n: order_of[n.id],
        )
        sorted_nodes = []
        while queue:
            node = queue.pop(0)
            sorted_nodes.append(node)
            for dependent in adjacency[node.id]:
                in_degree[dependent.id] -= 1
                if in_degree[dependent.id] == 0:
                    queue.append(dependent)

        return sorted_nodes

    def count_ops(self) -> Dict[str, int]:
        """Count nodes by operation type."""
        counts: Dict[str, int] = {}
        for node in self._nodes:
            counts[node.op_type] = counts.get(node.op_type, 0) + 1
        return counts

    def summary(self) -> str:
        """Get a printable graph summary."""
        lines = [
            f"Graph: {self.name}",
            f"  Nodes: {len(self._nodes)}",
            "  Operations:",
        ]
        for op, count in self.count_ops().items():
            lines.append(f"    {op}: {count}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"Graph(name='{self.name}', nodes={len(self._nodes)})"
