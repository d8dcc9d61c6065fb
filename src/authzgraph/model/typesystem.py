"""Read-only lookups over an authorization model.

The graph builder never touches TypeDefinitions directly; it asks the
type system two questions:

    get_directly_related_user_types(type, relation)
        Which users may be assigned to relation R on type T?
    get_relation(type, relation)
        What is the rewrite of relation R on type T?

Both raise ModelLookupError when the type or relation does not exist.
The model is trusted to be valid otherwise; nothing is re-validated.

Python 3.13+.
"""

from collections.abc import Iterator
from types import MappingProxyType

from authzgraph.diagnostics import ErrorTemplate, ModelLookupError

from .ast import AuthorizationModel, RelatedTypeRef, RewriteExpression, TypeDefinition

__all__ = ["TypeSystem"]


class TypeSystem:
    """Indexed, read-only view of an AuthorizationModel.

    Example:
        >>> typesys = TypeSystem(model)
        >>> typesys.get_relation("document", "viewer")
        Union(children=(Direct(), ComputedReference(relation='editor')))
        >>> typesys.get_directly_related_user_types("document", "viewer")
        (RelatedTypeRef(type='user', relation=None, wildcard=False, condition=None),)
    """

    __slots__ = ("_model", "_types")

    def __init__(self, model: AuthorizationModel) -> None:
        self._model = model
        self._types = MappingProxyType(
            {typedef.type: typedef for typedef in model.type_definitions}
        )

    @property
    def model(self) -> AuthorizationModel:
        """The underlying model snapshot."""
        return self._model

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._types

    def __iter__(self) -> Iterator[TypeDefinition]:
        return iter(self._model.type_definitions)

    def get_type_definition(
        self, type_name: str, relation: str | None = None
    ) -> TypeDefinition:
        """Return the definition of a type.

        Args:
            type_name: Type to look up
            relation: Relation being resolved, named in the error if any

        Raises:
            ModelLookupError: If the type is not declared
        """
        typedef = self._types.get(type_name)
        if typedef is None:
            raise ModelLookupError(
                ErrorTemplate.type_not_found(type_name, relation),
                type_name=type_name,
                relation=relation,
            )
        return typedef

    def get_relation(self, type_name: str, relation: str) -> RewriteExpression:
        """Return the rewrite of a relation.

        Raises:
            ModelLookupError: If the type or the relation is not declared
        """
        rewrite = self.get_type_definition(type_name, relation).relations.get(relation)
        if rewrite is None:
            raise ModelLookupError(
                ErrorTemplate.relation_not_found(type_name, relation),
                type_name=type_name,
                relation=relation,
            )
        return rewrite

    def get_directly_related_user_types(
        self, type_name: str, relation: str
    ) -> tuple[RelatedTypeRef, ...]:
        """Return the user types assignable to a relation.

        Relations that allow no direct assignment return an empty tuple.

        Raises:
            ModelLookupError: If the type or the relation is not declared
        """
        self.get_relation(type_name, relation)
        return self._types[type_name].directly_related_user_types.get(relation, ())
