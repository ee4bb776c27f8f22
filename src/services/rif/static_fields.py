"""
Static Field Defaults.

Loads externally configured default values for RIF fields. The file is
tab-separated: a ``Field`` column followed by one column per record type.

    Field               inpatient   outpatient
    NCH_CLM_TYPE_CD     60          40
    CLM_FAC_TYPE_CD     1           # Hospital
    FINAL_ACTION        (F,F,F,V)

A cell holds either a literal value or a parenthesised, comma-separated
list of choices drawn with the patient's generator. Text after ``#`` is a
comment; blank cells mean "no default".
"""

import csv
import io
from pathlib import Path
from typing import Optional, Union

from src.core.enums import RecordType
from src.services.rif.health_record import Patient
from src.services.rif.structure import InpatientField, InpatientRecord
from src.utils.errors import StaticFieldConfigError
from src.utils.logging import get_logger

logger = get_logger(__name__)

FIELD_COLUMN = "Field"

# Field names accepted per record type column; other columns are not checked
LAYOUT_FIELDS: dict[str, frozenset[str]] = {
    RecordType.INPATIENT.value: frozenset(InpatientField.__members__),
}


class StaticFieldConfig:
    """Per record type default values, applied before computed fields."""

    def __init__(self, defaults: Optional[dict[str, list[tuple[str, str]]]] = None):
        self._defaults = defaults or {}

    @classmethod
    def empty(cls) -> "StaticFieldConfig":
        return cls()

    @classmethod
    def from_text(cls, text: str) -> "StaticFieldConfig":
        reader = csv.reader(io.StringIO(text), delimiter="\t")
        try:
            header = next(reader)
        except StopIteration:
            return cls()
        header = [h.strip() for h in header]
        if not header or header[0] != FIELD_COLUMN:
            raise StaticFieldConfigError(f"First column must be '{FIELD_COLUMN}'", line_number=1)

        record_types = header[1:]
        defaults: dict[str, list[tuple[str, str]]] = {rt.lower(): [] for rt in record_types}
        for line_number, row in enumerate(reader, start=2):
            if not row or not row[0].strip():
                continue
            if len(row) > len(header):
                raise StaticFieldConfigError("Row has more cells than the header", line_number)
            field_name = row[0].strip()
            for record_type, cell in zip(record_types, row[1:]):
                value = _strip_comment(cell)
                if value:
                    _validate_field(field_name, record_type.lower(), line_number)
                    _validate_value(value, line_number)
                    defaults[record_type.lower()].append((field_name, value))
        return cls(defaults)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "StaticFieldConfig":
        path = Path(path)
        config = cls.from_text(path.read_text(encoding="utf-8"))
        logger.info(f"Loaded static field defaults from {path}")
        return config

    def defaults_for(self, record_type: RecordType) -> list[tuple[str, str]]:
        return list(self._defaults.get(record_type.value, []))

    def set_values(self, record: InpatientRecord, record_type: RecordType, patient: Patient) -> None:
        """Apply the defaults of ``record_type`` to ``record``."""
        for field_name, cell in self._defaults.get(record_type.value, []):
            record.set_by_name(field_name, resolve_value(cell, patient))


def _strip_comment(cell: str) -> str:
    return cell.split("#", 1)[0].strip()


def _validate_field(field_name: str, record_type: str, line_number: int) -> None:
    layout = LAYOUT_FIELDS.get(record_type)
    if layout is not None and field_name not in layout:
        raise StaticFieldConfigError(f"Unknown {record_type} field: {field_name}", line_number)


def _validate_value(value: str, line_number: int) -> None:
    if value.startswith("(") != value.endswith(")"):
        raise StaticFieldConfigError(f"Unbalanced choice list: {value}", line_number)
    if value.startswith("(") and not _choices(value):
        raise StaticFieldConfigError(f"Empty choice list: {value}", line_number)


def _choices(value: str) -> list[str]:
    return [c.strip() for c in value[1:-1].split(",") if c.strip()]


def resolve_value(cell: str, patient: Patient) -> str:
    """Resolve a literal or choice-list cell to a concrete value."""
    if cell.startswith("(") and cell.endswith(")"):
        return patient.rng.choice(_choices(cell))
    return cell
