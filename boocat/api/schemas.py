"""
Response models of the JSON endpoints.

Records themselves travel as plain field maps, since their fields depend on
the format.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ..core.formats import Format


class HealthResponse(BaseModel):
    status: str
    version: str
    db_health: bool
    formats: List[str]


class FormatResponse(BaseModel):
    name: str
    fields: List[str]
    searchable: List[str]

    @classmethod
    def from_format(cls, fmt: Format) -> "FormatResponse":
        return cls(name=fmt.name, fields=list(fmt.fields), searchable=sorted(fmt.searchable))


class ErrorResponse(BaseModel):
    error_type: str
    message: str
    timestamp: Optional[datetime] = None
    details: Optional[Dict[str, Any]] = None

    def __init__(self, **data):
        super().__init__(timestamp=datetime.now(), **data)
