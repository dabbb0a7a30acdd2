# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Symgraph Distributions

Probability distributions whose queries build graph nodes.
"""

from .base import Distribution
from .normal import Normal
from .iid import IID
from .sample import NormalSampleOp, normal_sample

__all__ = [
    "Distribution",
    "Normal",
    "IID",
    "NormalSampleOp",
    "normal_sample",
]
