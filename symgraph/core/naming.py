# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Name allocation for graph nodes.
"""

from collections import defaultdict
from typing import Set


class NameAllocator:
    """
    Hands out unique names.

    The first request for a base name returns it unchanged, later
    requests append ``_1``, ``_2`` and so on::

        names = NameAllocator()
        names.unique("zero_mean")  # "zero_mean"
        names.unique("zero_mean")  # "zero_mean_1"

    Each Graph owns one allocator, so names are unique per graph and no
    state is shared between graphs.
    """

    def __init__(self):
        self._counts: dict[str, int] = defaultdict(int)
        self._taken: Set[str] = set()

    def unique(self, name: str) -> str:
        count = self._counts[name]
        candidate = name if count == 0 else f"{name}_{count}"
        # an explicit "x_1" may already hold the next variant of "x"
        while candidate in self._taken:
            count += 1
            candidate = f"{name}_{count}"
        self._counts[name] = count + 1
        self._taken.add(candidate)
        return candidate

    def reserve(self, name: str) -> None:
        """Mark a name as taken without returning a variant of it."""
        self._taken.add(name)

    def __contains__(self, name: str) -> bool:
        return name in self._taken

    def reset(self) -> None:
        self._counts.clear()
        self._taken.clear()

    def __repr__(self) -> str:
        return f"NameAllocator(names={len(self._taken)})"
