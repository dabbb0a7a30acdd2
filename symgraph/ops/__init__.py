# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Symgraph Operators

Operator classes implementing the ``Op`` contract and the builder
functions that apply them to graph nodes.
"""

from .base import Op, simple_hash
from .arithmetic import (
    BinaryOp,
    UnaryOp,
    PowScalarOp,
    CompareOp,
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
)
from .shape_ops import (
    ReshapeOp,
    SliceOp,
    SliceGradOp,
    StackOp,
    SumToShapeOp,
    BroadcastToOp,
    SumAllOp,
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
)
from .erf import ErfOp, ErfDiffOp, erf, erfc
from .erfinv import ErfinvOp, ErfinvDiffOp, erfinv
from .clamp import ClampOp, ClampDiffOp, clamp
from .argsort import ArgsortOp, argsort
from .gather import GatherOp, GatherDiffOp, gather
from .reduce import (
    reduce_along,
    reduce_add,
    reduce_sub,
    reduce_prod,
    reduce_div,
    reduce_mean,
    fold_along,
)
from .repeat import RepeatOp, RepeatDiffOp, repeat
from .misc import clip, minimum, maximum, log_sum_exp

__all__ = [
    "Op",
    "simple_hash",
    # Arithmetic
    "BinaryOp",
    "UnaryOp",
    "PowScalarOp",
    "CompareOp",
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
    # Shape
    "ReshapeOp",
    "SliceOp",
    "SliceGradOp",
    "StackOp",
    "SumToShapeOp",
    "BroadcastToOp",
    "SumAllOp",
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
    # Pointwise kernels
    "ErfOp",
    "ErfDiffOp",
    "erf",
    "erfc",
    "ErfinvOp",
    "ErfinvDiffOp",
    "erfinv",
    "ClampOp",
    "ClampDiffOp",
    "clamp",
    "ArgsortOp",
    "argsort",
    "GatherOp",
    "GatherDiffOp",
    "gather",
    # Reductions
    "reduce_along",
    "reduce_add",
    "reduce_sub",
    "reduce_prod",
    "reduce_div",
    "reduce_mean",
    "fold_along",
    "RepeatOp",
    "RepeatDiffOp",
    "repeat",
    # Composites
    "clip",
    "minimum",
    "maximum",
    "log_sum_exp",
]
