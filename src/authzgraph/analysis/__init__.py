"""Structural analysis of relation graphs.

Python 3.13+.
"""

from .cycles import Cycle, CycleReport, classify, simple_cycles, strongly_connected_components

__all__ = [
    "Cycle",
    "CycleReport",
    "classify",
    "simple_cycles",
    "strongly_connected_components",
]
