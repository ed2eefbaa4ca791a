"""
Maps submitted request values to record operations.

GET with an id gets one record, GET with _search searches, any other GET
lists. POST with an id updates, POST without one adds. Parameters starting
with an underscore control the dispatch and are never stored as fields.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ..core.errors import BoocatError, ValidationFailedError
from ..core.formats import ID_FIELD
from ..core.service import RecordService

SEARCH_PARAM = "_search"
SUCCESS_KEY = "_success"


@dataclass
class DispatchResult:
    status: int
    data: Any = None
    failed: Dict[str, str] = field(default_factory=dict)
    success: bool = False
    error: Optional[str] = None


def submitted_values(query: Mapping[str, str], form: Optional[Mapping[str, Any]] = None) -> Dict[str, str]:
    """Values of the query parameters and the posted form; the form wins conflicts."""
    values = {key: str(value) for key, value in query.items()}
    if form:
        for key, value in form.items():
            # File uploads are not record fields
            if isinstance(value, str):
                values[key] = value
    return values


def record_fields(params: Mapping[str, str]) -> Dict[str, str]:
    """The submitted values that are record fields."""
    return {key: value for key, value in params.items() if not key.startswith("_")}


def fail_key(field_name: str) -> str:
    return f"_{field_name}_fail"


def with_failures(params: Mapping[str, str], failed: Mapping[str, str]) -> Dict[str, str]:
    """The submitted values plus one _<field>_fail entry per failed field."""
    data = dict(params)
    for name, reason in failed.items():
        data[fail_key(name)] = reason
    return data


def handle_get(service: RecordService, format_name: str, params: Mapping[str, str]) -> DispatchResult:
    try:
        if ID_FIELD in params:
            return DispatchResult(200, service.get_record(format_name, params[ID_FIELD]))
        if SEARCH_PARAM in params:
            return DispatchResult(200, service.search_records(format_name, params[SEARCH_PARAM]))
        return DispatchResult(200, service.list_records(format_name))
    except BoocatError as e:
        return DispatchResult(e.status_code, error=str(e))


def handle_post(service: RecordService, format_name: str, params: Mapping[str, str]) -> DispatchResult:
    fields = record_fields(params)
    try:
        if ID_FIELD in fields:
            stored = service.update_record(format_name, fields)
            data = dict(stored)
        else:
            record_id = service.add_record(format_name, fields)
            data = dict(fields)
            data[ID_FIELD] = record_id
    except ValidationFailedError as e:
        # The form is shown again with the submitted values and the reasons
        return DispatchResult(200, with_failures(fields, e.failed), failed=e.failed)
    except BoocatError as e:
        return DispatchResult(e.status_code, error=str(e))
    data[SUCCESS_KEY] = "_"
    return DispatchResult(200, data, success=True)


def dispatch(service: RecordService, method: str, format_name: str, params: Mapping[str, str]) -> DispatchResult:
    if method == "GET":
        return handle_get(service, format_name, params)
    if method == "POST":
        return handle_post(service, format_name, params)
    return DispatchResult(400, error=f"method {method} not allowed")
