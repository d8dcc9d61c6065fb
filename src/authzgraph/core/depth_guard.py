"""Depth limiting for recursion protection.

Provides reusable depth tracking to prevent stack overflow from:
- Deeply parenthesized rewrites in DSL sources
- Programmatically constructed rewrite trees walked by the graph builder

Thread-safe: uses explicit state, no thread-local storage.
Python 3.13+.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field

from authzgraph.constants import MAX_DEPTH
from authzgraph.diagnostics import ErrorTemplate, RewriteDepthExceededError

__all__ = ["DepthGuard", "depth_clamp"]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DepthGuard:
    """Context manager for tracking and limiting recursion depth.

    Usage:
        guard = DepthGuard()
        with guard:
            self._walk(child)

    Each build or parse owns its own DepthGuard instance, so nested
    walks of independent models never share a counter.

    Attributes:
        max_depth: Maximum allowed depth (default: MAX_DEPTH)
        current_depth: Current recursion depth
    """

    max_depth: int = MAX_DEPTH
    current_depth: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        """Clamp max_depth against Python recursion limit."""
        self.max_depth = depth_clamp(self.max_depth)

    def __enter__(self) -> DepthGuard:
        """Enter guarded section, increment depth.

        Checks the limit BEFORE incrementing: __exit__ is not called when
        __enter__ raises, so incrementing first would leave the counter
        permanently elevated.
        """
        if self.current_depth >= self.max_depth:
            raise RewriteDepthExceededError(
                ErrorTemplate.rewrite_depth_exceeded(self.max_depth)
            )
        self.current_depth += 1
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit guarded section, decrement depth."""
        self.current_depth -= 1

    @property
    def depth(self) -> int:
        """Current depth (alias for current_depth)."""
        return self.current_depth


def depth_clamp(requested_depth: int, reserve_frames: int = 50) -> int:
    """Clamp requested depth against Python recursion limit.

    Each guarded level costs a handful of interpreter frames, so the
    limit is divided accordingly.

    Args:
        requested_depth: Desired maximum depth
        reserve_frames: Stack frames to reserve for call overhead (default: 50)

    Returns:
        Safe depth value, clamped if necessary
    """
    max_safe_depth = (sys.getrecursionlimit() - reserve_frames) // 4
    if requested_depth > max_safe_depth:
        logger.warning(
            "Requested depth %d exceeds Python recursion limit (%d). "
            "Clamping to %d to prevent RecursionError.",
            requested_depth,
            sys.getrecursionlimit(),
            max_safe_depth,
        )
        return max_safe_depth
    return requested_depth
