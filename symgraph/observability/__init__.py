# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Symgraph Observability Module

Provides structured logging for graph construction and execution.

Components:
- SymgraphLogger: Structured logging with text or JSON output
"""

from .logger import (
    Verbosity,
    LogEntry,
    SymgraphLogger,
    get_logger,
    set_verbosity,
)

__all__ = [
    "Verbosity",
    "LogEntry",
    "SymgraphLogger",
    "get_logger",
    "set_verbosity",
]
