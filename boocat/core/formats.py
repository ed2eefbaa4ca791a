"""
Record formats and the registry that holds them.

A format is a named set of fields, each bound to a validator, plus the subset
of fields that are full-text searchable. Format names double as store
collection names and as the file stem that binds a web template to a format.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional

from .errors import FormatDefinitionError
from .validators import ACCEPT_ANYTHING, Validator

# Format and field names end up as SQLite identifiers
NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")

ID_FIELD = "id"


@dataclass(frozen=True)
class Format:
    name: str
    fields: Mapping[str, Validator]
    searchable: FrozenSet[str] = field(default_factory=frozenset)

    def validate(self, record: Mapping[str, str]) -> Dict[str, str]:
        """Validate every field of the record except id.

        Returns a map of failed field names to reasons; empty means valid.
        """
        failed = {}
        for name, value in record.items():
            if name == ID_FIELD:
                continue
            validator = self.fields.get(name)
            if validator is None:
                failed[name] = f"not a field of format '{self.name}'"
                continue
            reason = validator.validate(value)
            if reason is not None:
                failed[name] = reason
        return failed

    def searchable_are(self, fields: Iterable[str]) -> bool:
        """Tell if the searchable fields are exactly the passed ones."""
        return self.searchable == frozenset(fields)

    def incomplete_record(self, record: Mapping[str, str]) -> bool:
        """Tell if the record lacks any field of the format."""
        return any(name not in record for name in self.fields)

    def merge(self, primary: Mapping[str, str], secondary: Mapping[str, str]) -> Dict[str, str]:
        """Merge two records of this format.

        Fields of the format are taken from primary when present, otherwise
        from secondary. id is kept from primary, otherwise from secondary.
        """
        merged = {}
        for name in self.fields:
            if name in primary:
                merged[name] = primary[name]
            elif name in secondary:
                merged[name] = secondary[name]
        if ID_FIELD in primary:
            merged[ID_FIELD] = primary[ID_FIELD]
        elif ID_FIELD in secondary:
            merged[ID_FIELD] = secondary[ID_FIELD]
        return merged


class FormatRegistry:
    """Formats by name. Populated once at startup, then frozen."""

    def __init__(self):
        self._formats: Dict[str, Format] = {}
        self._frozen = False

    def register(self, name: str, fields: Mapping[str, Optional[Validator]],
                 searchable: Iterable[str] = ()) -> Format:
        if self._frozen:
            raise FormatDefinitionError(f"Cannot register format '{name}': registry is frozen")
        if not NAME_RE.match(name):
            raise FormatDefinitionError(f"Invalid format name: {name}")
        if name in self._formats:
            raise FormatDefinitionError(f"Format '{name}' is already registered")

        validators = {}
        for field_name, validator in fields.items():
            if not NAME_RE.match(field_name) or field_name == ID_FIELD:
                raise FormatDefinitionError(f"Invalid field name '{field_name}' in format '{name}'")
            validators[field_name] = validator if validator is not None else ACCEPT_ANYTHING

        searchable = frozenset(searchable)
        unknown = searchable - set(validators)
        if unknown:
            raise FormatDefinitionError(
                f"Searchable fields {sorted(unknown)} are not fields of format '{name}'")

        fmt = Format(name=name, fields=MappingProxyType(validators), searchable=searchable)
        self._formats[name] = fmt
        return fmt

    def freeze(self) -> "FormatRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> Optional[Format]:
        return self._formats.get(name)

    def names(self) -> List[str]:
        return list(self._formats)

    def formats(self) -> Mapping[str, Format]:
        return MappingProxyType(self._formats)

    def __contains__(self, name: object) -> bool:
        return name in self._formats

    def __iter__(self) -> Iterator[Format]:
        return iter(list(self._formats.values()))

    def __len__(self) -> int:
        return len(self._formats)
