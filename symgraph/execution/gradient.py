# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Symbolic differentiation.

``grad(cost, *wrt)`` walks the graph backwards from a scalar cost and
asks each operator on the way to build the nodes of its gradient
(``Op.build_gradient``). Contributions reaching the same node are summed
with ``add``. Nothing is computed here; the returned gradient nodes are
evaluated by a TapeMachine like any other node.
"""

from __future__ import annotations

from typing import Dict, List, Set
import logging

import numpy as np

from ..core.node import Node
from ..errors import InvalidArgumentError, ShapeError
from ..observability import get_logger
from ..ops.arithmetic import add

logger = logging.getLogger("symgraph.gradient")


def _descendants(graph, sources: List[Node]) -> Set[int]:
    seen: Set[int] = set()
    stack = list(sources)
    while stack:
        node = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        stack.extend(graph.consumers(node))
    return seen


def _accumulate(parts: List[Node]) -> Node:
    total = parts[0]
    for part in parts[1:]:
        total = add(total, part)
    return total


def grad(cost: Node, *wrt: Node) -> List[Node]:
    """
    Build gradient nodes of a scalar ``cost`` w.r.t. each of ``wrt``.

    Operators whose output stops gradients (comparison masks, sampling)
    are treated as constants. Reaching a non-differentiable operator
    such as argsort raises UnsupportedOperationError.

    Returns:
        One gradient node per ``wrt`` node, shaped like it.

    Raises:
        ShapeError: If ``cost`` is not a scalar.
        InvalidArgumentError: If ``cost`` does not depend on a ``wrt`` node.
        UnsupportedOperationError: If the path crosses a
            non-differentiable operator.
    """
    if not cost.is_scalar():
        raise ShapeError(
            f"cost must be a scalar, got shape {cost.shape.dims}",
            operation="grad",
        )
    if not wrt:
        return []

    graph = cost.graph
    ancestors = {n.id for n in graph.ancestors([cost])}
    for node in wrt:
        if node.graph is not graph or node.id not in ancestors:
            raise InvalidArgumentError(
                f"grad: cost does not depend on '{node.name}'",
                parameter="wrt",
            )
    active = ancestors & _descendants(graph, list(wrt))

    order = [n for n in graph.topological_order([cost]) if n.id in active]
    pending: Dict[int, List[Node]] = {
        cost.id: [graph.constant(np.ones((), dtype=cost.dtype.to_numpy()), name="grad_seed")]
    }
    built = 0

    for node in reversed(order):
        parts = pending.get(node.id)
        if not parts or node.is_leaf:
            continue
        upstream = _accumulate(parts)
        pending[node.id] = [upstream]

        active_inputs = [i for i, inp in enumerate(node.inputs) if inp.id in active]
        if not active_inputs:
            continue

        op = node.op
        if not op.differentiable and op.stops_gradient:
            logger.debug("gradient stops at %s", node.name)
            continue

        mask = op.diff_wrt(len(node.inputs))
        input_grads = op.build_gradient(node.inputs, node, upstream)
        built += 1
        for i in active_inputs:
            if mask[i] and input_grads[i] is not None:
                pending.setdefault(node.inputs[i].id, []).append(input_grads[i])

    results = []
    for node in wrt:
        parts = pending.get(node.id)
        if parts:
            results.append(_accumulate(parts))
        else:
            results.append(
                graph.constant(
                    np.zeros(node.shape.dims, dtype=node.dtype.to_numpy()),
                    name=f"zero_grad_{node.name}",
                )
            )

    get_logger().debug(
        f"built gradients for {len(wrt)} node(s)",
        component="gradient",
        graph=graph.name,
        ops_visited=built,
    )
    return results
