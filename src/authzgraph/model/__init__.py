"""Authorization model: AST, DSL parser, JSON loader and type-system lookups.

Python 3.13+.
"""

from .ast import (
    AuthorizationModel,
    ComputedReference,
    Condition,
    Difference,
    Direct,
    Intersection,
    RelatedTypeRef,
    RewriteExpression,
    TuplesetReference,
    TypeDefinition,
    Union,
)
from .loader import load_model, model_from_dict
from .parser import ModelParser, parse_model
from .typesystem import TypeSystem

__all__ = [
    "AuthorizationModel",
    "ComputedReference",
    "Condition",
    "Difference",
    "Direct",
    "Intersection",
    "ModelParser",
    "RelatedTypeRef",
    "RewriteExpression",
    "TuplesetReference",
    "TypeDefinition",
    "TypeSystem",
    "Union",
    "load_model",
    "model_from_dict",
    "parse_model",
]
