"""
Tests for the field validators.
"""

import pytest
from unittest.mock import MagicMock

from boocat.core.catalog import NAME_PATTERN
from boocat.core.errors import FormatDefinitionError, FormatNotFoundError, RecordNotFoundError
from boocat.core.validators import (
    ACCEPT_ANYTHING,
    NoOpValidator,
    ReferenceValidator,
    RegexValidator,
    YearValidator,
)


@pytest.mark.parametrize("value", ["George Orwell", "Haruki Murakami", "Nineteen Eighty-Four", "Orwell"])
def test_name_regex_accepts_capitalised_words(value):
    assert RegexValidator(NAME_PATTERN, full_match=True).validate(value) is None


@pytest.mark.parametrize("value", ["george orwell", "George  Orwell", "", "1984", "George Orwell\n"])
def test_name_regex_rejects(value):
    assert RegexValidator(NAME_PATTERN, full_match=True).validate(value) == "doesn't match regular expression"


def test_regex_partial_and_full_match():
    """Unanchored patterns match anywhere unless full_match is set."""
    assert RegexValidator("[0-9]+").validate("year 1903") is None
    assert RegexValidator("[0-9]+", full_match=True).validate("year 1903") == "doesn't match regular expression"
    assert RegexValidator("[0-9]+", full_match=True).validate("1903") is None


def test_regex_uses_string_form_of_value():
    assert RegexValidator("^[0-9]{4}$").validate(1903) is None


def test_invalid_regex_fails_at_construction():
    with pytest.raises(FormatDefinitionError):
        RegexValidator("([A-Z]")


@pytest.mark.parametrize("value", ["1903", "0", "-0", "95", "+1547", 2002])
def test_year_accepts(value):
    assert YearValidator().validate(value) is None


@pytest.mark.parametrize("value", ["-5", "MCMIII", "19 03", "", "1903.0", "1_903", "1903\n", "1" * 5000, "9" * 20])
def test_year_rejects(value):
    assert YearValidator().validate(value) == "not a valid year number"


def test_no_op_validator_accepts_anything():
    assert isinstance(ACCEPT_ANYTHING, NoOpValidator)
    assert ACCEPT_ANYTHING.validate("") is None
    assert ACCEPT_ANYTHING.validate(None) is None


def test_validators_are_callable():
    assert YearValidator()("1903") is None
    assert YearValidator()("year") == "not a valid year number"


def test_reference_validator_found():
    store = MagicMock()
    store.read_one.return_value = {"id": "abc", "name": "George Orwell"}

    validator = ReferenceValidator(store, "author")

    assert validator.validate("abc") is None
    store.read_one.assert_called_once_with("author", "abc")


def test_reference_validator_not_found():
    store = MagicMock()
    store.read_one.side_effect = RecordNotFoundError()

    validator = ReferenceValidator(store, "author")

    assert validator.validate("nope") == "record of format 'author' and ID 'nope' not found"


def test_reference_validator_unknown_format():
    store = MagicMock()
    store.read_one.side_effect = FormatNotFoundError()

    assert ReferenceValidator(store, "editor").validate("x") == "record of format 'editor' and ID 'x' not found"


def test_reference_validator_reads_store_every_time():
    """No caching: a record removed from the store stops validating."""
    store = MagicMock()
    store.read_one.side_effect = [{"id": "abc"}, RecordNotFoundError()]
    validator = ReferenceValidator(store, "author")

    assert validator.validate("abc") is None
    assert validator.validate("abc") is not None
    assert store.read_one.call_count == 2


def test_reference_validator_propagates_other_errors():
    store = MagicMock()
    store.read_one.side_effect = RuntimeError("disk on fire")

    with pytest.raises(RuntimeError):
        ReferenceValidator(store, "author").validate("abc")
