"""Tests for TypeSystem lookups."""

import pytest

from authzgraph.diagnostics import DiagnosticCode, ModelError, ModelLookupError
from authzgraph.model import ComputedReference, RelatedTypeRef, TypeSystem, parse_model

MODEL = parse_model(
    """
type user
type document
  relations
    define editor: [user, user:*]
    define viewer: editor
"""
)


class TestTypeSystemLookups:
    """Tests for successful lookups."""

    def test_get_relation(self) -> None:
        typesys = TypeSystem(MODEL)
        assert typesys.get_relation("document", "viewer") == ComputedReference("editor")

    def test_get_directly_related_user_types(self) -> None:
        typesys = TypeSystem(MODEL)
        assert typesys.get_directly_related_user_types("document", "editor") == (
            RelatedTypeRef("user"),
            RelatedTypeRef("user", wildcard=True),
        )

    def test_relation_without_direct_assignment(self) -> None:
        """A relation with no `[...]` has no assignable types."""
        typesys = TypeSystem(MODEL)
        assert typesys.get_directly_related_user_types("document", "viewer") == ()

    def test_membership_and_iteration(self) -> None:
        typesys = TypeSystem(MODEL)
        assert "document" in typesys
        assert "folder" not in typesys
        assert [t.type for t in typesys] == ["user", "document"]
        assert typesys.model is MODEL


class TestTypeSystemErrors:
    """Tests for failed lookups."""

    def test_unknown_type(self) -> None:
        typesys = TypeSystem(MODEL)
        with pytest.raises(ModelLookupError) as exc_info:
            typesys.get_relation("folder", "viewer")
        assert exc_info.value.type_name == "folder"
        assert exc_info.value.relation == "viewer"
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code == DiagnosticCode.TYPE_NOT_FOUND

    def test_unknown_relation_names_both(self) -> None:
        """The message names the type and the relation."""
        typesys = TypeSystem(MODEL)
        with pytest.raises(ModelLookupError, match="'owner' not found on type 'document'"):
            typesys.get_directly_related_user_types("document", "owner")

    def test_unknown_type_definition(self) -> None:
        typesys = TypeSystem(MODEL)
        with pytest.raises(ModelLookupError, match="Type 'team' not found"):
            typesys.get_type_definition("team")

    def test_lookup_error_is_model_error(self) -> None:
        assert issubclass(ModelLookupError, ModelError)
