"""Core utilities shared by the model parser and the graph builder.

Python 3.13+.
"""

from .depth_guard import DepthGuard, depth_clamp

__all__ = ["DepthGuard", "depth_clamp"]
