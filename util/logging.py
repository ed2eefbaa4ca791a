"""
Structured logging for record, validation and index operations.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional


class StructuredLogger:
    """Structured logger for store, service and web operations."""

    def __init__(self, name: str = "boocat"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def configure_level(self, level: str) -> None:
        """Set the level by name (DEBUG, INFO...)."""
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status in ("failed", "error"):
            self.logger.error(message)
        else:
            self.logger.info(message)

    def log_record_operation(self, operation: str, format_name: str, record_id: Optional[str] = None,
                             fields: Mapping[str, str] = None, status: str = "success"):
        """Log a record operation. Field values are truncated."""
        details = {"format": format_name}
        if record_id is not None:
            details["id"] = record_id
        if fields:
            details["fields"] = sanitize_payload(dict(fields))

        self.log_operation(f"record.{operation}", status, details)

    def log_validation_failure(self, operation: str, format_name: str, failed: Mapping[str, str]):
        """Log the fields that failed validation and why."""
        details = {
            "format": format_name,
            "failed": dict(failed),
            "failed_count": len(failed)
        }
        self.log_operation(f"validation.{operation}", "rejected", details)

    def log_index_reconciliation(self, format_name: str, outcome: str, fields: List[str]):
        """Log the outcome of reconciling a format's text index."""
        details = {"format": format_name, "fields": fields}
        self.log_operation("index.reconcile", outcome, details)

    def log_request(self, method: str, path: str, status_code: int):
        """Log an HTTP request served by the web layer."""
        details = {"method": method, "path": path, "status_code": status_code}
        if status_code >= 500:
            self.log_operation("http.request", "error", details)
        else:
            self.logger.debug(f"Operation: http.request, Status: {status_code}, Details: {details}")

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()


def sanitize_payload(payload: Any, max_length: int = 100) -> Any:
    """Truncate long strings in payloads before they are logged."""
    if isinstance(payload, dict):
        return {k: sanitize_payload(v, max_length) for k, v in payload.items()}
    elif isinstance(payload, str):
        return payload[:max_length] + "..." if len(payload) > max_length else payload
    elif isinstance(payload, list):
        return [sanitize_payload(item, max_length) for item in payload]
    else:
        return payload
