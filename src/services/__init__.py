"""
Services Layer for Claim Export.

Exports the RIF inpatient claim export services.
"""

from src.services.rif import (
    BatchExporter,
    ExportSummary,
    InpatientExporter,
    create_batch_exporter,
)

__all__ = [
    "BatchExporter",
    "ExportSummary",
    "InpatientExporter",
    "create_batch_exporter",
]
