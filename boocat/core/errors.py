"""
Error taxonomy shared by the record store, the record service and the web layer.

Every member carries the HTTP status code the web layer answers with, so the
mapping lives in one place.
"""

from typing import Dict, Optional


class BoocatError(Exception):
    """Base class for the record errors."""
    status_code: int = 500
    message: str = "internal error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class FormatNotFoundError(BoocatError):
    status_code = 404
    message = "format not found"


class RecordNotFoundError(BoocatError):
    status_code = 404
    message = "record not found"


class RecordHasIDError(BoocatError):
    status_code = 400
    message = "record has ID"


class RecordDoesntHaveIDError(BoocatError):
    status_code = 400
    message = "record doesn't have ID"


class ValidationFailedError(BoocatError):
    """Raised when one or more submitted fields fail their validators.

    `failed` maps field name to the human readable reason.
    """
    status_code = 200
    message = "validation failed"

    def __init__(self, failed: Dict[str, str]):
        super().__init__()
        self.failed = dict(failed)


class InternalError(BoocatError):
    """Wraps any store or driver failure that is not part of the taxonomy."""
    status_code = 500

    def __init__(self, message: str = "internal error"):
        super().__init__(f"internal error: {message}")


class FormatDefinitionError(Exception):
    """Invalid format or validator configuration, detected at startup."""
    pass
