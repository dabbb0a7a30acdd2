# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Execution Context

Value arena for one tape machine: maps nodes to the arrays computed for
them during a run.
"""

from __future__ import annotations

from typing import Dict, Optional

import numpy as np

from ..core.node import Node


class ExecutionContext:
    """
    Stores node values during graph execution.

    Values are keyed by node id. A value whose buffer was handed to an
    in-place operator is recorded as consumed, together with the node
    that took it.
    """

    def __init__(self):
        self._values: Dict[int, np.ndarray] = {}
        self._consumed_by: Dict[int, str] = {}

    def set_value(self, node: Node, value: np.ndarray) -> None:
        self._values[node.id] = value
        self._consumed_by.pop(node.id, None)

    def get_value(self, node: Node) -> np.ndarray:
        """
        Retrieve a node's value.

        Raises:
            KeyError: If the node has no value in this context.
        """
        if node.id in self._values:
            return self._values[node.id]
        raise KeyError(f"Node '{node.name}' has no value in execution context")

    def has_value(self, node: Node) -> bool:
        return node.id in self._values

    def mark_consumed(self, node: Node, consumer: Node) -> None:
        """Drop a value whose buffer now belongs to ``consumer``."""
        self._values.pop(node.id, None)
        self._consumed_by[node.id] = consumer.name

    def consumed_by(self, node: Node) -> Optional[str]:
        return self._consumed_by.get(node.id)

    def clear(self) -> None:
        self._values.clear()
        self._consumed_by.clear()

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ExecutionContext(values={len(self._values)})"
