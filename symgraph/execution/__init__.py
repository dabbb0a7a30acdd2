# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Symgraph Execution Module

Components:
- ExecutionContext: value arena for one run
- TapeMachine: executes a graph in topological order
- grad: symbolic differentiation pass
"""

from .context import ExecutionContext
from .machine import TapeMachine, let
from .gradient import grad

__all__ = [
    "ExecutionContext",
    "TapeMachine",
    "let",
    "grad",
]
