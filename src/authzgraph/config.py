"""Pipeline configuration for the model writer.

Provides a single frozen dataclass that holds every tunable of the
parse → build → prune → render → analyze pipeline.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass

from authzgraph.constants import DEFAULT_RANKDIR, MAX_DEPTH, MAX_SOURCE_SIZE, VALID_RANKDIRS

__all__ = ["WriterConfig"]


@dataclass(frozen=True, slots=True)
class WriterConfig:
    """Immutable configuration for write() and the CLI.

    All fields have sensible defaults; ``WriterConfig()`` reproduces the
    classic output (bottom-to-top layout, isolated nodes removed).

    Attributes:
        rankdir: Graphviz layout direction: BT, TB, LR or RL (default: BT).
        prune: Drop nodes without edges before rendering (default: True).
            Cycle analysis is unaffected either way.
        max_depth: Maximum rewrite nesting for parser and builder
            (default: 100). Clamped to the interpreter recursion limit.
        max_source_size: Maximum model source length in characters
            (default: 10 MiB).

    Example:
        >>> config = WriterConfig(rankdir="LR", prune=False)
        >>> config.rankdir
        'LR'
    """

    rankdir: str = DEFAULT_RANKDIR
    prune: bool = True
    max_depth: int = MAX_DEPTH
    max_source_size: int = MAX_SOURCE_SIZE

    def __post_init__(self) -> None:
        """Validate configuration values at construction time.

        Raises:
            ValueError: If rankdir is unknown, or if max_depth or
                max_source_size is not positive.
        """
        if self.rankdir not in VALID_RANKDIRS:
            msg = f"rankdir must be one of {', '.join(sorted(VALID_RANKDIRS))}"
            raise ValueError(msg)
        if self.max_depth <= 0:
            msg = "max_depth must be positive"
            raise ValueError(msg)
        if self.max_source_size <= 0:
            msg = "max_source_size must be positive"
            raise ValueError(msg)
