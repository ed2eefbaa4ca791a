"""
The formats served by boocat: authors and the books they wrote.
"""

from .formats import FormatRegistry
from .validators import RegexValidator, YearValidator

# Capitalised words separated by a space or a hyphen
NAME_PATTERN = "^([A-Z][a-z]*)([ |-][A-Z][a-z]*)*$"


def build_registry(store) -> FormatRegistry:
    """Build and freeze the registry of the author and book formats.

    The book's author field references author records in the store.
    """
    name_validator = RegexValidator(NAME_PATTERN, full_match=True)
    year_validator = YearValidator()

    registry = FormatRegistry()
    registry.register(
        "author",
        {
            "name": name_validator,
            "birthdate": year_validator,
            "biography": None,
        },
        searchable={"name", "biography"},
    )
    registry.register(
        "book",
        {
            "name": name_validator,
            "year": year_validator,
            "author": store.reference_validator("author"),
            "synopsis": None,
        },
        searchable={"name", "synopsis"},
    )
    return registry.freeze()
