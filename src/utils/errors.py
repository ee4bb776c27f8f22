"""
Custom Exceptions
Error hierarchy for the inpatient claim exporter.
"""

from typing import Optional


class ExportError(Exception):
    """Base class for export failures."""


class RecordWriteError(ExportError):
    """
    Raised when the record sink fails to append a row.

    Aborts the export of the current patient. Rows already written for
    earlier claims stay in the sink; the failing claim may be incomplete.
    """

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        claim_id: Optional[str] = None,
    ):
        self.message = message
        self.record_type = record_type
        self.claim_id = claim_id
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.record_type:
            parts.append(f"Record type: {self.record_type}")
        if self.claim_id:
            parts.append(f"Claim: {self.claim_id}")
        return " | ".join(parts)


class MissingRequiredFieldError(ExportError):
    """Raised when a computed row lacks fields the layout requires."""

    def __init__(self, missing: list[str], claim_id: Optional[str] = None):
        self.missing = missing
        self.claim_id = claim_id
        detail = ", ".join(missing)
        prefix = f"Claim {claim_id}: " if claim_id else ""
        super().__init__(f"{prefix}missing required fields: {detail}")


class UnknownFieldError(ExportError, KeyError):
    """Raised when a field name is not part of the record layout."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown field: {name}")

    def __str__(self) -> str:
        return self.args[0]


class CodeMappingError(ExportError):
    """Raised for malformed mapping tables or unmappable lookups."""


class StaticFieldConfigError(ExportError):
    """Raised when the static field defaults file cannot be parsed."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)
