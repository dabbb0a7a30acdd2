# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Symgraph: symbolic tensor operators with graph-time gradients

Differentiable and non-differentiable tensor operators (erf, erfinv,
clamp, argsort, gather, repeat), an axis-fold reduction engine and a
batched Normal distribution, on top of a small symbolic graph host.

Example:
    import numpy as np
    import symgraph as sg

    g = sg.Graph("demo")
    x = g.variable((3,), name="x")
    cost = sg.sum_all(sg.erf(x))
    (dx,) = sg.grad(cost, x)

    sg.let(x, np.array([0.0, 0.5, 1.0]))
    vm = sg.TapeMachine(g)
    vm.run_all()
    print(vm.read(dx))
"""

__version__ = "0.1.0"
__author__ = "Wahyu Ardiansyah"

from .core import DataType, Shape, Node, Graph, NameAllocator
from .execution import ExecutionContext, TapeMachine, let, grad
from .config import EngineConfig, get_config, set_config

from .ops import (
    Op,
    add,
    sub,
    mul,
    div,
    neg,
    exp,
    log,
    pow_scalar,
    square,
    sqrt,
    lt,
    gt,
    lte,
    gte,
    reshape,
    slice_along,
    stack,
    sum_to_shape,
    broadcast_to,
    sum_all,
    squeeze,
    unsqueeze,
    squeeze_all,
    squeeze_all_but,
    erf,
    erfc,
    erfinv,
    clamp,
    argsort,
    gather,
    repeat,
    reduce_add,
    reduce_sub,
    reduce_prod,
    reduce_div,
    reduce_mean,
    clip,
    minimum,
    maximum,
    log_sum_exp,
)

from .distributions import Distribution, Normal, IID, normal_sample

# Observability
from .observability import set_verbosity, Verbosity

# Errors
from .errors import (
    SymgraphError,
    ArityError,
    ShapeError,
    AxisOutOfRangeError,
    ShapeMismatchError,
    DTypeError,
    EmptyInputError,
    UnsupportedOperationError,
    InvalidArgumentError,
    DomainError,
    ExecutionError,
    ConfigurationError,
)

__all__ = [
    # Version
    "__version__",
    # Graph host
    "DataType",
    "Shape",
    "Node",
    "Graph",
    "NameAllocator",
    "ExecutionContext",
    "TapeMachine",
    "let",
    "grad",
    # Config
    "EngineConfig",
    "get_config",
    "set_config",
    # Operators
    "Op",
    "add",
    "sub",
    "mul",
    "div",
    "neg",
    "exp",
    "log",
    "pow_scalar",
    "square",
    "sqrt",
    "lt",
    "gt",
    "lte",
    "gte",
    "reshape",
    "slice_along",
    "stack",
    "sum_to_shape",
    "broadcast_to",
    "sum_all",
    "squeeze",
    "unsqueeze",
    "squeeze_all",
    "squeeze_all_but",
    "erf",
    "erfc",
    "erfinv",
    "clamp",
    "argsort",
    "gather",
    "repeat",
    "reduce_add",
    "reduce_sub",
    "reduce_prod",
    "reduce_div",
    "reduce_mean",
    "clip",
    "minimum",
    "maximum",
    "log_sum_exp",
    # Distributions
    "Distribution",
    "Normal",
    "IID",
    "normal_sample",
    # Observability
    "set_verbosity",
    "Verbosity",
    # Errors
    "SymgraphError",
    "ArityError",
    "ShapeError",
    "AxisOutOfRangeError",
    "ShapeMismatchError",
    "DTypeError",
    "EmptyInputError",
    "UnsupportedOperationError",
    "InvalidArgumentError",
    "DomainError",
    "ExecutionError",
    "ConfigurationError",
]
