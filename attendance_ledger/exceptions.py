"""
Custom exceptions for caller-side failures (bad configuration, unreadable input files).

Parsing and classification never raise on data; these cover the cases where the
caller asked for something that can't be done. Each carries a structured
message, context, and recommendation for the CLI and API to surface.
"""

from typing import Any, Dict, Optional


class AttendanceLedgerException(Exception):
    """Base exception for attendance ledger operations."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        recommendation: Optional[str] = None,
        http_status: int = 400
    ):
        self.message = message
        self.context = context or {}
        self.recommendation = recommendation
        self.http_status = http_status
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to structured error response."""
        error_dict = {
            "success": False,
            "error": self.message
        }
        if self.context:
            error_dict["context"] = self.context
        if self.recommendation:
            error_dict["recommendation"] = self.recommendation
        return error_dict


class ConfigValidationException(AttendanceLedgerException):
    """Raised when a policy setting is outside its allowed range."""

    def __init__(self, field: str, value: Any, allowed: str):
        super().__init__(
            message=f"Invalid value for {field}: {value!r}",
            context={"field": field, "value": value, "allowed": allowed},
            recommendation=f"Use a value in the allowed range ({allowed}).",
            http_status=422
        )


class InputFileException(AttendanceLedgerException):
    """Raised when an input file is missing or has an unsupported format."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Cannot read input file {path}: {reason}",
            context={"path": path, "reason": reason},
            recommendation="Provide a tab-delimited text, CSV, or .xlsx export.",
            http_status=400
        )
