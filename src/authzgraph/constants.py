"""Shared constants for authzgraph.

Centralized configuration constants used across the model, graph and
analysis packages. Placing constants here avoids circular imports and
provides a single source of truth.

Constants are grouped by domain:
- Depth limits: Recursion protection for parsing and rewrite walking
- Input limits: Size constraints for model sources
- Node labels: Label shapes emitted by the graph builder
- Rendering: DOT graph attributes

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Depth limits
    "MAX_DEPTH",
    # Input limits
    "MAX_SOURCE_SIZE",
    # Node labels
    "WILDCARD_SUFFIX",
    "RELATION_SEPARATOR",
    "CONDITION_LABEL_FORMAT",
    "TUPLESET_CONTEXT_FORMAT",
    # Rendering
    "DEFAULT_RANKDIR",
    "VALID_RANKDIRS",
    "SUPPORTED_SCHEMA_VERSIONS",
]

# ============================================================================
# DEPTH LIMITS
# ============================================================================

# Unified maximum depth for recursion protection.
# Used by: DSL parser (parenthesized rewrites) and graph builder (rewrite walk).
# Real models nest two or three levels; 100 is malformed or generated input.
MAX_DEPTH: int = 100

# ============================================================================
# INPUT LIMITS
# ============================================================================

# Default maximum model source size in characters (10 MB).
MAX_SOURCE_SIZE: int = 10 * 1024 * 1024

# Schema versions accepted by the parser and loader.
SUPPORTED_SCHEMA_VERSIONS: frozenset[str] = frozenset({"1.1", "1.2"})

# ============================================================================
# NODE LABELS
# ============================================================================

# "user" -> "user:*"
WILDCARD_SUFFIX: str = ":*"

# "document" + "viewer" -> "document#viewer"
RELATION_SEPARATOR: str = "#"

# Conditioned assignment sources never merge with the plain type node.
# The leading space is part of the label.
CONDITION_LABEL_FORMAT: str = " {type}[with {condition}]"

# Head label of tupleset edges: "(document#parent)"
TUPLESET_CONTEXT_FORMAT: str = "({type}#{relation})"

# ============================================================================
# RENDERING
# ============================================================================

# Bottom-to-top: users at the bottom, derived relations above them.
DEFAULT_RANKDIR: str = "BT"

VALID_RANKDIRS: frozenset[str] = frozenset({"BT", "TB", "LR", "RL"})
