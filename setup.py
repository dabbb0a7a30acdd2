# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

import os
import re

from setuptools import find_packages, setup


def read_version():
    init = os.path.join(os.path.dirname(os.path.abspath(__file__)), "symgraph", "__init__.py")
    with open(init, encoding="utf-8") as f:
        match = re.search(r'^__version__ = "([^"]+)"', f.read(), re.MULTILINE)
    if match is None:
        raise RuntimeError("Unable to find __version__ in symgraph/__init__.py")
    return match.group(1)


setup(
    name="symgraph",
    version=read_version(),
    description="Symbolic tensor graphs with reverse-mode gradients and Normal distributions",
    author="Wahyu Ardiansyah",
    license="Apache-2.0",
    packages=find_packages(include=["symgraph", "symgraph.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.22",
        "scipy>=1.8",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "hypothesis>=6.0",
        ],
    },
)
