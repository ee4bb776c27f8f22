"""
RIF Claim Export Services.

Converts simulated patient health records into CMS RIF inpatient claim
records:
- Encounter eligibility filtering
- Claim header, diagnosis and procedure coding
- Revenue center line fan-out
- Concurrent export with shared identifier counters
"""

from src.services.rif.batch_exporter import (
    BatchConfig,
    BatchExporter,
    ExportSummary,
    PatientExportResult,
    PatientExportStatus,
    create_batch_exporter,
)
from src.services.rif.claim_builder import ClaimHeader, ClaimRecordBuilder
from src.services.rif.code_mapper import CodeMapper, CodeMappers, CodeTarget
from src.services.rif.coverage import CoverageChecker, PartABCoverageChecker
from src.services.rif.diagnosis_mapper import CodingResult, DiagnosisProcedureMapper
from src.services.rif.encounter_filter import AdmissionHistory, EncounterFilter, claim_types_for
from src.services.rif.health_record import (
    Claim,
    ClaimEntry,
    Clinician,
    Code,
    Condition,
    CoveragePeriod,
    Encounter,
    Medication,
    Patient,
    Plan,
    Procedure,
    Provider,
)
from src.services.rif.identifiers import (
    ClaimIdentifiers,
    IdentifierIssuer,
    create_identifier_issuer,
    get_identifier_issuer,
)
from src.services.rif.inpatient_exporter import InpatientExporter, PatientClaimStats
from src.services.rif.line_items import LineItemEmitter
from src.services.rif.static_fields import StaticFieldConfig
from src.services.rif.structure import InpatientField, InpatientRecord
from src.services.rif.writers import (
    DelimitedFileSink,
    InMemoryRecordSink,
    RecordSink,
    RecordWriters,
)

__all__ = [
    # Batch export
    "BatchConfig",
    "BatchExporter",
    "ExportSummary",
    "PatientExportResult",
    "PatientExportStatus",
    "create_batch_exporter",
    # Claim export
    "InpatientExporter",
    "PatientClaimStats",
    "ClaimHeader",
    "ClaimRecordBuilder",
    "CodingResult",
    "DiagnosisProcedureMapper",
    "LineItemEmitter",
    "AdmissionHistory",
    "EncounterFilter",
    "claim_types_for",
    # Collaborators
    "CodeMapper",
    "CodeMappers",
    "CodeTarget",
    "CoverageChecker",
    "PartABCoverageChecker",
    "StaticFieldConfig",
    "ClaimIdentifiers",
    "IdentifierIssuer",
    "create_identifier_issuer",
    "get_identifier_issuer",
    # Records and sinks
    "InpatientField",
    "InpatientRecord",
    "DelimitedFileSink",
    "InMemoryRecordSink",
    "RecordSink",
    "RecordWriters",
    # Health record
    "Claim",
    "ClaimEntry",
    "Clinician",
    "Code",
    "Condition",
    "CoveragePeriod",
    "Encounter",
    "Medication",
    "Patient",
    "Plan",
    "Procedure",
    "Provider",
]
