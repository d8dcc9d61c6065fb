"""Enumerations for authzgraph type-safe constants.

Uses StrEnum (Python 3.11+) for automatic string conversion.
StrEnum members are strings themselves, eliminating boilerplate __str__ methods.

Python 3.13+.
"""

from enum import StrEnum


class CycleKind(StrEnum):
    """Classification of a structural cycle in the relation graph.

    StrEnum provides automatic string conversion: str(CycleKind.DEFINITIVE) == "definitive"
    """

    DEFINITIVE = "definitive"
    """Every hop is a computed edge: the relation can never resolve."""

    POSSIBLE = "possible"
    """At least one direct or tupleset hop: loops only if tuple data loops."""


class ModelFormat(StrEnum):
    """Source format of an authorization model file.

    StrEnum provides automatic string conversion: str(ModelFormat.DSL) == "dsl"
    """

    AUTO = "auto"
    """Pick by file extension (.json -> JSON, anything else -> DSL)."""

    DSL = "dsl"
    """Textual modeling language: type document / relations / define ..."""

    JSON = "json"
    """JSON authorization model with type_definitions and metadata."""


__all__ = [
    "CycleKind",
    "ModelFormat",
]
