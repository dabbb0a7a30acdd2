# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tape Machine

Executes a Graph by walking its nodes in topological order and calling
each operator's ``do`` on the values of its inputs.

Example:
    g = Graph()
    x = g.variable((3,), name="x")
    y = erf(x)

    let(x, np.array([0.0, 0.5, 1.0]))
    vm = TapeMachine(g)
    vm.run_all()
    print(vm.read(y))
"""

from __future__ import annotations

from typing import Any, Dict, Optional
import logging
import time

import numpy as np

from ..config import EngineConfig
from ..core.graph_ir import Graph
from ..core.node import Node
from ..core.types import DataType
from ..errors import ExecutionError, SymgraphError
from ..observability import get_logger
from .context import ExecutionContext

logger = logging.getLogger("symgraph.execution")


def let(node: Node, value: Any) -> None:
    """Bind a value to a variable node."""
    node.bind(value)


class TapeMachine:
    """
    Runs every node of a graph once per ``run_all``.

    Operators that overwrite an input (see ``Op.overwrites_input``) are
    given ownership of that buffer only when nothing else can observe
    it: the input is an op node with a single consumer. Otherwise they
    receive a private copy. An input whose buffer was taken can no
    longer be read.
    """

    def __init__(
        self,
        graph: Graph,
        config: Optional[EngineConfig] = None,
        allow_inplace: bool = True,
    ):
        """
        Initialize the machine.

        Args:
            graph: Graph to execute.
            config: Engine config (defaults to the graph's).
            allow_inplace: If False, in-place operators always receive
                copies, so every intermediate value stays readable.
        """
        self.graph = graph
        self.config = config or graph.config
        self.allow_inplace = allow_inplace
        self.context = ExecutionContext()
        self.timings: Dict[str, float] = {}
        self._log = get_logger()

    def _can_donate(self, node: Node) -> bool:
        return (
            self.allow_inplace
            and not node.is_leaf
            and len(self.graph.consumers(node)) == 1
        )

    def _execute_node(self, node: Node) -> np.ndarray:
        values = [self.context.get_value(inp) for inp in node.inputs]

        donated = None
        idx = node.op.overwrites_input()
        if idx >= 0:
            src = node.inputs[idx]
            if self._can_donate(src):
                donated = src
            else:
                values[idx] = values[idx].copy()
                logger.debug("%s: copying input %s before in-place op", node.name, src.name)

        try:
            out = node.op.do(*values)
        except SymgraphError:
            raise
        except (ValueError, TypeError, IndexError, FloatingPointError) as e:
            raise ExecutionError(
                str(e),
                node_name=node.name,
                op_type=str(node.op),
                input_shapes=[v.shape for v in values],
            ) from e

        out = np.asarray(out)
        if out.shape != node.shape.dims:
            raise ExecutionError(
                f"produced shape {out.shape}, expected {node.shape.dims}",
                node_name=node.name,
                op_type=str(node.op),
                input_shapes=[v.shape for v in values],
            )
        if DataType.from_numpy(out.dtype) != node.dtype:
            raise ExecutionError(
                f"produced dtype {out.dtype}, expected {node.dtype.name}",
                node_name=node.name,
                op_type=str(node.op),
            )

        if donated is not None:
            self.context.mark_consumed(donated, node)
            donated.value = None
        return out

    def run_all(self) -> None:
        """
        Execute the whole graph.

        Raises:
            ExecutionError: If a variable is unbound or a kernel fails.
            SymgraphError: Validation errors raised by operators.
        """
        self.reset()
        order = self.graph.topological_order()
        total_start = time.perf_counter()
        ops_run = 0

        for node in order:
            if node.is_leaf:
                if node.value is None:
                    raise ExecutionError(
                        "variable has no value, bind one with let()",
                        node_name=node.name,
                    )
                self.context.set_value(node, node.value)
                continue

            start = time.perf_counter()
            out = self._execute_node(node)
            elapsed = (time.perf_counter() - start) * 1000
            self.context.set_value(node, out)
            node.value = out
            self.timings[node.name] = elapsed
            ops_run += 1
            self._log.debug(
                f"executed {node.name}",
                component="machine",
                graph=self.graph.name,
                operation=str(node.op),
                duration_ms=elapsed,
            )

        total_ms = (time.perf_counter() - total_start) * 1000
        slowest = max(self.timings, key=self.timings.get) if self.timings else None
        self._log.run_summary(
            {
                "graph": self.graph.name,
                "nodes": len(order),
                "ops": ops_run,
                "total_ms": total_ms,
                "slowest": slowest,
            }
        )

    def read(self, node: Node) -> np.ndarray:
        """
        Read the value computed for ``node`` in the last run.

        Raises:
            ExecutionError: If the node was not computed or its buffer
                was consumed by an in-place operator.
        """
        if self.context.has_value(node):
            return self.context.get_value(node)
        consumer = self.context.consumed_by(node)
        if consumer is not None:
            raise ExecutionError(
                f"value was consumed in place by '{consumer}'; "
                "run with allow_inplace=False to keep it",
                node_name=node.name,
            )
        raise ExecutionError("node has not been computed, call run_all()", node_name=node.name)

    def reset(self) -> None:
        """Forget all computed values (bound variables are kept)."""
        self.context.clear()
        self.timings = {}
        for node in self.graph.nodes:
            if not node.is_leaf:
                node.value = None

    def summary(self) -> str:
        """Get a summary of the last run."""
        lines = [
            "TapeMachine Summary",
            f"  Graph: {self.graph.name}",
            f"  Nodes: {self.graph.num_nodes()}",
            f"  Values: {len(self.context)}",
        ]
        for name, ms in sorted(self.timings.items(), key=lambda kv: -kv[1])[:5]:
            lines.append(f"    {name}: {ms:.3f}ms")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"TapeMachine(graph='{self.graph.name}', nodes={self.graph.num_nodes()})"
