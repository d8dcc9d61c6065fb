"""Authorization model node definitions.

An AuthorizationModel is an ordered collection of TypeDefinitions. Each
type maps relation names to a RewriteExpression, a closed sum type over
six variants:

    Direct               [user, group#member]    (assignable users)
    ComputedReference    editor                  (another relation, same object)
    TuplesetReference    viewer from parent      (relation on a related object)
    Union                a or b
    Intersection         a and b
    Difference           a but not b

All nodes are frozen, so a model snapshot can be shared freely.
Includes type guards as static methods (eliminates circular imports).

Python 3.13+. Zero external dependencies.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TypeAlias, TypeGuard

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Model structure
    "AuthorizationModel",
    "TypeDefinition",
    "RelatedTypeRef",
    "Condition",
    # Rewrite variants
    "Direct",
    "ComputedReference",
    "TuplesetReference",
    "Union",
    "Intersection",
    "Difference",
    # Type aliases
    "RewriteExpression",
]


def _freeze(mapping: Mapping[str, object]) -> MappingProxyType[str, object]:
    return MappingProxyType(dict(mapping))


# ============================================================================
# REWRITE VARIANTS
# ============================================================================


@dataclass(frozen=True, slots=True)
class Direct:
    """Direct assignment (`this`).

    Which user types may be assigned is stored on the TypeDefinition,
    not on the node itself.

    Example:
        define viewer: [user, user:*, group#member]
    """

    @staticmethod
    def guard(node: object) -> TypeGuard["Direct"]:
        """Type guard for Direct."""
        return isinstance(node, Direct)


@dataclass(frozen=True, slots=True)
class ComputedReference:
    """Relation defined as another relation on the same object.

    Example:
        define viewer: editor
    """

    relation: str

    @staticmethod
    def guard(node: object) -> TypeGuard["ComputedReference"]:
        """Type guard for ComputedReference (used by intersection/difference)."""
        return isinstance(node, ComputedReference)


@dataclass(frozen=True, slots=True)
class TuplesetReference:
    """Relation on the object reachable through a tupleset relation.

    Example:
        define viewer: viewer from parent
        → TuplesetReference(tupleset="parent", relation="viewer")
    """

    tupleset: str
    relation: str


@dataclass(frozen=True, slots=True)
class Union:
    """Grant if any child grants."""

    children: tuple["RewriteExpression", ...]


@dataclass(frozen=True, slots=True)
class Intersection:
    """Grant if every child grants."""

    children: tuple["RewriteExpression", ...]


@dataclass(frozen=True, slots=True)
class Difference:
    """Grant if base grants and subtract does not.

    Example:
        define viewer: reader but not blocked
    """

    base: "RewriteExpression"
    subtract: "RewriteExpression"

    @property
    def children(self) -> tuple["RewriteExpression", "RewriteExpression"]:
        """Base and subtract, in that order."""
        return (self.base, self.subtract)


# ============================================================================
# MODEL STRUCTURE
# ============================================================================


@dataclass(frozen=True, slots=True)
class RelatedTypeRef:
    """One entry of a relation's directly assignable user types.

    Attributes:
        type: Object type of the assignable user ("user", "group")
        relation: Sub-relation for usersets ("member" in group#member)
        wildcard: True for public access (user:*)
        condition: Condition name guarding the assignment (user with cond)

    Examples:
        [user]                  → RelatedTypeRef("user")
        [user:*]                → RelatedTypeRef("user", wildcard=True)
        [group#member]          → RelatedTypeRef("group", relation="member")
        [user with non_expired] → RelatedTypeRef("user", condition="non_expired")
    """

    type: str
    relation: str | None = None
    wildcard: bool = False
    condition: str | None = None

    def __post_init__(self) -> None:
        """Validate that a reference is never both a userset and a wildcard."""
        if self.wildcard and self.relation is not None:
            msg = f"RelatedTypeRef '{self.type}' cannot be both wildcard and userset"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Condition:
    """Named condition declared in the model.

    Carried through for completeness. Condition expressions are not
    evaluated.

    Example:
        condition non_expired(current_time: timestamp, expires: timestamp) {
          current_time < expires
        }
    """

    name: str
    expression: str = ""
    parameters: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", _freeze(self.parameters))

    def __hash__(self) -> int:
        return hash((self.name, self.expression, tuple(self.parameters.items())))


@dataclass(frozen=True, slots=True)
class TypeDefinition:
    """Object type with its relations.

    Attributes:
        type: Type name
        relations: Relation name → rewrite expression (insertion ordered)
        directly_related_user_types: Relation name → assignable user types.
            Relations without direct assignment may be absent.
    """

    type: str
    relations: Mapping[str, "RewriteExpression"] = field(default_factory=dict)
    directly_related_user_types: Mapping[str, tuple[RelatedTypeRef, ...]] = field(
        default_factory=dict
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "relations", _freeze(self.relations))
        object.__setattr__(
            self,
            "directly_related_user_types",
            _freeze(
                {
                    name: tuple(refs)
                    for name, refs in self.directly_related_user_types.items()
                }
            ),
        )

    def __hash__(self) -> int:
        return hash(
            (
                self.type,
                tuple(self.relations.items()),
                tuple(self.directly_related_user_types.items()),
            )
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeDefinition):
            return NotImplemented
        return (
            self.type == other.type
            and dict(self.relations) == dict(other.relations)
            and dict(self.directly_related_user_types)
            == dict(other.directly_related_user_types)
        )


@dataclass(frozen=True, slots=True)
class AuthorizationModel:
    """Root node: ordered type definitions plus declared conditions."""

    type_definitions: tuple[TypeDefinition, ...]
    schema_version: str = "1.1"
    conditions: tuple[Condition, ...] = ()

    def type_names(self) -> tuple[str, ...]:
        """Type names in declaration order."""
        return tuple(typedef.type for typedef in self.type_definitions)


# ============================================================================
# TYPE ALIASES
# ============================================================================

RewriteExpression: TypeAlias = (
    Direct | ComputedReference | TuplesetReference | Union | Intersection | Difference
)
