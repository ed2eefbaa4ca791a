"""
Record service: validates submitted records against their format and carries
out the record operations on the store.

Store errors of the taxonomy are re-raised as they are; anything else is
logged and surfaced as InternalError.
"""

from typing import Dict, List, Mapping

from util.logging import logger

from .errors import (
    BoocatError,
    FormatNotFoundError,
    InternalError,
    RecordDoesntHaveIDError,
    ValidationFailedError,
)
from .formats import ID_FIELD, Format, FormatRegistry


class RecordService:
    """Record operations over a format registry and a record store."""

    def __init__(self, registry: FormatRegistry, store):
        self.registry = registry
        self.store = store

    def _format(self, format_name: str) -> Format:
        fmt = self.registry.get(format_name)
        if fmt is None:
            raise FormatNotFoundError()
        return fmt

    def _validate(self, operation: str, fmt: Format, record: Mapping[str, str]) -> None:
        failed = fmt.validate(record)
        if failed:
            logger.log_validation_failure(operation, fmt.name, failed)
            raise ValidationFailedError(failed)

    def get_record(self, format_name: str, record_id: str) -> Dict[str, str]:
        """Return a record of a format by id."""
        fmt = self._format(format_name)
        try:
            return self.store.read_one(fmt.name, record_id)
        except BoocatError:
            raise
        except Exception as e:
            logger.error(f"getting record from database: {e}")
            raise InternalError(str(e)) from e

    def list_records(self, format_name: str) -> List[Dict[str, str]]:
        """Return all records of a format."""
        fmt = self._format(format_name)
        try:
            return self.store.read_all(fmt.name)
        except BoocatError:
            raise
        except Exception as e:
            logger.error(f"getting records from database: {e}")
            raise InternalError(str(e)) from e

    def search_records(self, format_name: str, query: str) -> List[Dict[str, str]]:
        """Return the records of a format whose searchable fields match the query."""
        fmt = self._format(format_name)
        try:
            return self.store.search(fmt.name, query)
        except BoocatError:
            raise
        except Exception as e:
            logger.error(f"searching records in database: {e}")
            raise InternalError(str(e)) from e

    def add_record(self, format_name: str, record: Mapping[str, str]) -> str:
        """Validate and add a record. Returns the new record's id."""
        fmt = self._format(format_name)
        self._validate("add", fmt, record)
        try:
            record_id = self.store.create(fmt.name, record)
        except BoocatError:
            raise
        except Exception as e:
            logger.error(f"adding record to database: {e}")
            raise InternalError(str(e)) from e
        logger.log_record_operation("add", fmt.name, record_id, record)
        return record_id

    def update_record(self, format_name: str, record: Mapping[str, str]) -> Dict[str, str]:
        """Validate and update a record.

        A record that lacks fields of the format is completed with the values
        currently stored. Returns the record as stored.
        """
        fmt = self._format(format_name)
        self._validate("update", fmt, record)
        if not record.get(ID_FIELD):
            raise RecordDoesntHaveIDError()
        try:
            merged = dict(record)
            if fmt.incomplete_record(record):
                stored = self.store.read_one(fmt.name, record[ID_FIELD])
                merged = fmt.merge(record, stored)
            self.store.replace(fmt.name, merged)
        except BoocatError:
            raise
        except Exception as e:
            logger.error(f"updating record in database: {e}")
            raise InternalError(str(e)) from e
        logger.log_record_operation("update", fmt.name, merged[ID_FIELD], merged)
        return merged
