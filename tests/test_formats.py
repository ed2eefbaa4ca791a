"""
Tests for formats and the format registry.
"""

import pytest
from unittest.mock import MagicMock

from boocat.core.catalog import build_registry
from boocat.core.errors import FormatDefinitionError
from boocat.core.formats import FormatRegistry
from boocat.core.validators import ACCEPT_ANYTHING, ReferenceValidator, RegexValidator, YearValidator


@pytest.fixture
def author_format():
    registry = FormatRegistry()
    return registry.register(
        "author",
        {"name": RegexValidator("^[A-Z]"), "birthdate": YearValidator(), "biography": None},
        searchable={"name", "biography"},
    )


def test_none_validator_becomes_no_op(author_format):
    assert author_format.fields["biography"] is ACCEPT_ANYTHING


def test_validate_valid_record(author_format):
    record = {"id": "whatever", "name": "George Orwell", "birthdate": "1903", "biography": "English"}
    assert author_format.validate(record) == {}


def test_validate_reports_every_failed_field(author_format):
    failed = author_format.validate({"name": "george", "birthdate": "MCMIII", "biography": "x"})
    assert failed == {
        "name": "doesn't match regular expression",
        "birthdate": "not a valid year number",
    }


def test_validate_unknown_field(author_format):
    failed = author_format.validate({"name": "George", "nationality": "English"})
    assert failed == {"nationality": "not a field of format 'author'"}


def test_validate_ignores_id(author_format):
    assert author_format.validate({"id": "not validated"}) == {}


def test_searchable_are(author_format):
    assert author_format.searchable_are({"biography", "name"})
    assert not author_format.searchable_are({"name"})
    assert not author_format.searchable_are({"name", "biography", "birthdate"})


def test_incomplete_record(author_format):
    assert author_format.incomplete_record({"id": "a", "name": "George"})
    assert not author_format.incomplete_record({"name": "A", "birthdate": "1", "biography": "B"})


def test_merge_prefers_primary(author_format):
    primary = {"id": "a1", "name": "New Name"}
    secondary = {"id": "a1", "name": "Old Name", "birthdate": "1903", "biography": "English"}

    merged = author_format.merge(primary, secondary)

    assert merged == {"id": "a1", "name": "New Name", "birthdate": "1903", "biography": "English"}


def test_merge_takes_id_from_secondary_when_missing(author_format):
    merged = author_format.merge({"name": "X"}, {"id": "a2", "birthdate": "1"})
    assert merged == {"id": "a2", "name": "X", "birthdate": "1"}


def test_merge_drops_fields_outside_the_format(author_format):
    merged = author_format.merge({"name": "X"}, {"name": "Y", "legacy": "z"})
    assert merged == {"name": "X"}


def test_registry_get_and_names():
    registry = FormatRegistry()
    registry.register("author", {"name": None})
    registry.register("book", {"name": None})

    assert registry.get("author").name == "author"
    assert registry.get("editor") is None
    assert registry.names() == ["author", "book"]
    assert "book" in registry
    assert len(registry) == 2
    assert [fmt.name for fmt in registry] == ["author", "book"]


def test_registry_formats_is_read_only():
    registry = FormatRegistry()
    registry.register("author", {"name": None})

    with pytest.raises(TypeError):
        registry.formats()["book"] = None


@pytest.mark.parametrize("name", ["", "1author", "au thor", "_author", "author;drop"])
def test_registry_rejects_invalid_format_names(name):
    with pytest.raises(FormatDefinitionError):
        FormatRegistry().register(name, {"name": None})


@pytest.mark.parametrize("field_name", ["id", "_fail", "two words", ""])
def test_registry_rejects_invalid_field_names(field_name):
    with pytest.raises(FormatDefinitionError):
        FormatRegistry().register("author", {field_name: None})


def test_registry_rejects_unknown_searchable_field():
    with pytest.raises(FormatDefinitionError):
        FormatRegistry().register("author", {"name": None}, searchable={"name", "biography"})


def test_registry_rejects_duplicate_format():
    registry = FormatRegistry()
    registry.register("author", {"name": None})
    with pytest.raises(FormatDefinitionError):
        registry.register("author", {"name": None})


def test_frozen_registry_rejects_registration():
    registry = FormatRegistry().freeze()
    assert registry.frozen
    with pytest.raises(FormatDefinitionError):
        registry.register("author", {"name": None})


def test_build_registry_formats():
    """author and book formats with their validators and searchable fields."""
    store = MagicMock()
    store.reference_validator.side_effect = lambda name: ReferenceValidator(store, name)

    registry = build_registry(store)

    author = registry.get("author")
    book = registry.get("book")
    assert registry.frozen
    assert set(author.fields) == {"name", "birthdate", "biography"}
    assert author.searchable == {"name", "biography"}
    assert set(book.fields) == {"name", "year", "author", "synopsis"}
    assert book.searchable == {"name", "synopsis"}
    assert isinstance(book.fields["author"], ReferenceValidator)
    assert book.fields["author"].format_name == "author"
    assert isinstance(book.fields["year"], YearValidator)
    assert book.fields["synopsis"] is ACCEPT_ANYTHING


def test_build_registry_names_must_match_whole_value():
    """A trailing newline is not part of a valid name."""
    registry = build_registry(MagicMock())

    failed = registry.get("author").validate({"name": "George Orwell\n", "birthdate": "1903\n"})

    assert failed == {
        "name": "doesn't match regular expression",
        "birthdate": "not a valid year number",
    }
