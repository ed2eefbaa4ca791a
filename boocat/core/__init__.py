"""
Record formats, validators, the record store and the record service.
"""

# Package initialization for core module
from .errors import (
    BoocatError,
    FormatDefinitionError,
    FormatNotFoundError,
    InternalError,
    RecordDoesntHaveIDError,
    RecordHasIDError,
    RecordNotFoundError,
    ValidationFailedError,
)
from .formats import Format, FormatRegistry
from .validators import ACCEPT_ANYTHING, NoOpValidator, ReferenceValidator, RegexValidator, Validator, YearValidator
from .store import SQLiteRecordStore
from .service import RecordService

__all__ = [
    'BoocatError',
    'FormatDefinitionError',
    'FormatNotFoundError',
    'InternalError',
    'RecordDoesntHaveIDError',
    'RecordHasIDError',
    'RecordNotFoundError',
    'ValidationFailedError',
    'Format',
    'FormatRegistry',
    'ACCEPT_ANYTHING',
    'NoOpValidator',
    'ReferenceValidator',
    'RegexValidator',
    'Validator',
    'YearValidator',
    'SQLiteRecordStore',
    'RecordService'
]
