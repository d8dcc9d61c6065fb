"""JSON authorization model loader.

Reads the JSON form of an authorization model (as returned by the
authorization-model API and produced by `model transform` tooling):

    {
      "schema_version": "1.1",
      "type_definitions": [
        {
          "type": "document",
          "relations": {
            "viewer": {"union": {"child": [
              {"this": {}},
              {"computedUserset": {"relation": "editor"}},
              {"tupleToUserset": {"tupleset": {"relation": "parent"},
                                  "computedUserset": {"relation": "viewer"}}}
            ]}}
          },
          "metadata": {"relations": {"viewer": {
            "directly_related_user_types": [{"type": "user"}, {"type": "user", "wildcard": {}}]
          }}}
        }
      ],
      "conditions": {"non_expired": {"name": "non_expired", "expression": "...", ...}}
    }

Both camelCase and snake_case rewrite keys are accepted.

Python 3.13+.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from authzgraph.constants import MAX_DEPTH, MAX_SOURCE_SIZE, SUPPORTED_SCHEMA_VERSIONS
from authzgraph.core.depth_guard import DepthGuard
from authzgraph.diagnostics import (
    ErrorTemplate,
    ModelSyntaxError,
    UnsupportedRewriteVariantError,
)

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

__all__ = ["load_model", "model_from_dict"]

logger = logging.getLogger(__name__)

_COMPUTED_KEYS = ("computedUserset", "computed_userset")
_TUPLESET_KEYS = ("tupleToUserset", "tuple_to_userset")


def _invalid(detail: str) -> ModelSyntaxError:
    return ModelSyntaxError(ErrorTemplate.invalid_json_model(detail))


def _require_mapping(value: object, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        msg = f"{where} must be an object"
        raise _invalid(msg)
    return value


def _relation_name(value: object, where: str) -> str:
    node = _require_mapping(value, where)
    relation = node.get("relation")
    if not isinstance(relation, str) or not relation:
        msg = f"{where} is missing 'relation'"
        raise _invalid(msg)
    return relation


def _first_key(node: Mapping[str, Any], keys: tuple[str, ...]) -> object | None:
    for key in keys:
        if key in node:
            return node[key]
    return None


def _children(node: object, where: str) -> list[object]:
    container = _require_mapping(node, where)
    children = container.get("child", container.get("children"))
    if not isinstance(children, list) or not children:
        msg = f"{where} needs a non-empty 'child' list"
        raise _invalid(msg)
    return children


def _rewrite_from_dict(
    node: object, type_name: str, relation: str, guard: DepthGuard
) -> RewriteExpression:
    """Convert one JSON userset node into a RewriteExpression."""
    with guard:
        return _userset_from_dict(node, type_name, relation, guard)


def _userset_from_dict(
    node: object, type_name: str, relation: str, guard: DepthGuard
) -> RewriteExpression:
    where = f"rewrite of '{type_name}#{relation}'"
    userset = _require_mapping(node, where)

    if "this" in userset:
        return Direct()
    if (computed := _first_key(userset, _COMPUTED_KEYS)) is not None:
        return ComputedReference(_relation_name(computed, where))
    if (ttu := _first_key(userset, _TUPLESET_KEYS)) is not None:
        ttu_node = _require_mapping(ttu, where)
        tupleset = _relation_name(ttu_node.get("tupleset"), f"tupleset in {where}")
        target = _relation_name(
            _first_key(ttu_node, _COMPUTED_KEYS), f"computed userset in {where}"
        )
        return TuplesetReference(tupleset=tupleset, relation=target)
    if "union" in userset:
        return Union(
            tuple(
                _rewrite_from_dict(child, type_name, relation, guard)
                for child in _children(userset["union"], where)
            )
        )
    if "intersection" in userset:
        return Intersection(
            tuple(
                _rewrite_from_dict(child, type_name, relation, guard)
                for child in _children(userset["intersection"], where)
            )
        )
    if "difference" in userset:
        difference = _require_mapping(userset["difference"], where)
        if "base" not in difference or "subtract" not in difference:
            msg = f"difference in {where} needs 'base' and 'subtract'"
            raise _invalid(msg)
        return Difference(
            base=_rewrite_from_dict(difference["base"], type_name, relation, guard),
            subtract=_rewrite_from_dict(difference["subtract"], type_name, relation, guard),
        )

    variant = next(iter(userset), "<empty>")
    raise UnsupportedRewriteVariantError(
        ErrorTemplate.unsupported_rewrite(type_name, relation, variant)
    )


def _related_type_from_dict(node: object, where: str) -> RelatedTypeRef:
    ref = _require_mapping(node, where)
    type_name = ref.get("type")
    if not isinstance(type_name, str) or not type_name:
        msg = f"{where} is missing 'type'"
        raise _invalid(msg)
    relation = ref.get("relation") or None
    condition = ref.get("condition") or None
    wildcard = "wildcard" in ref and ref["wildcard"] is not None
    if wildcard and relation is not None:
        msg = f"{where} cannot set both 'relation' and 'wildcard'"
        raise _invalid(msg)
    return RelatedTypeRef(type_name, relation=relation, wildcard=wildcard, condition=condition)


def _type_definition_from_dict(node: object, guard: DepthGuard) -> TypeDefinition:
    typedef = _require_mapping(node, "type definition")
    type_name = typedef.get("type")
    if not isinstance(type_name, str) or not type_name:
        msg = "type definition is missing 'type'"
        raise _invalid(msg)

    relations = {
        name: _rewrite_from_dict(rewrite, type_name, name, guard)
        for name, rewrite in _require_mapping(
            typedef.get("relations") or {}, f"relations of '{type_name}'"
        ).items()
    }

    metadata = _require_mapping(typedef.get("metadata") or {}, f"metadata of '{type_name}'")
    related_types: dict[str, tuple[RelatedTypeRef, ...]] = {}
    for name, relation_metadata in _require_mapping(
        metadata.get("relations") or {}, f"metadata relations of '{type_name}'"
    ).items():
        where = f"metadata of '{type_name}#{name}'"
        entries = _require_mapping(relation_metadata, where).get(
            "directly_related_user_types"
        ) or []
        if not isinstance(entries, list):
            msg = f"{where}: 'directly_related_user_types' must be a list"
            raise _invalid(msg)
        refs = tuple(_related_type_from_dict(entry, where) for entry in entries)
        if refs:
            related_types[name] = refs

    return TypeDefinition(
        type=type_name, relations=relations, directly_related_user_types=related_types
    )


def _condition_from_dict(name: str, node: object) -> Condition:
    condition = _require_mapping(node, f"condition '{name}'")
    parameters: dict[str, str] = {}
    for param, declared in _require_mapping(
        condition.get("parameters") or {}, f"parameters of condition '{name}'"
    ).items():
        if isinstance(declared, Mapping):
            parameters[param] = str(declared.get("type_name", ""))
        else:
            parameters[param] = str(declared)
    return Condition(
        name=str(condition.get("name", name)),
        expression=str(condition.get("expression", "")),
        parameters=parameters,
    )


def model_from_dict(
    data: Mapping[str, Any], *, max_depth: int = MAX_DEPTH
) -> AuthorizationModel:
    """Build an AuthorizationModel from decoded JSON.

    Raises:
        ModelSyntaxError: If required keys are missing or malformed
        UnsupportedRewriteVariantError: If a rewrite uses an unknown key
        RewriteDepthExceededError: If a rewrite nests deeper than max_depth
    """
    data = _require_mapping(data, "authorization model")
    schema_version = str(data.get("schema_version", "1.1"))
    if schema_version not in SUPPORTED_SCHEMA_VERSIONS:
        raise ModelSyntaxError(ErrorTemplate.unsupported_schema(schema_version))

    raw_types = data.get("type_definitions")
    if not isinstance(raw_types, list):
        msg = "'type_definitions' must be a list"
        raise _invalid(msg)

    type_definitions: list[TypeDefinition] = []
    seen: set[str] = set()
    for raw in raw_types:
        typedef = _type_definition_from_dict(raw, DepthGuard(max_depth=max_depth))
        if typedef.type in seen:
            raise ModelSyntaxError(ErrorTemplate.duplicate_definition("type", typedef.type))
        seen.add(typedef.type)
        type_definitions.append(typedef)

    conditions = tuple(
        _condition_from_dict(name, node)
        for name, node in _require_mapping(data.get("conditions") or {}, "conditions").items()
    )

    logger.debug(
        "Loaded JSON model (schema %s): %d types, %d conditions",
        schema_version,
        len(type_definitions),
        len(conditions),
    )
    return AuthorizationModel(
        type_definitions=tuple(type_definitions),
        schema_version=schema_version,
        conditions=conditions,
    )


def load_model(
    source: str,
    *,
    max_source_size: int = MAX_SOURCE_SIZE,
    max_depth: int = MAX_DEPTH,
) -> AuthorizationModel:
    """Parse JSON model source.

    Raises:
        ModelSyntaxError: If the source is not valid JSON or not a model
        RewriteDepthExceededError: If a rewrite nests deeper than max_depth
    """
    if len(source) > max_source_size:
        raise ModelSyntaxError(ErrorTemplate.source_too_large(len(source), max_source_size))
    try:
        data = json.loads(source)
    except json.JSONDecodeError as e:
        msg = f"{e.msg} at line {e.lineno}, column {e.colno}"
        raise _invalid(msg) from e
    except RecursionError as e:
        msg = "JSON nesting exceeds the interpreter recursion limit"
        raise _invalid(msg) from e
    return model_from_dict(data, max_depth=max_depth)
