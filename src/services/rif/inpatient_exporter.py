"""
RIF Inpatient Claim Exporter.

Exports the inpatient claims of one patient:

1. filter the timeline down to eligible encounters
2. build the claim header and code its diagnoses and procedures
3. drop encounters with nothing to report
4. compute the line rows, then write them under the claim section
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from src.core.config import ExportSettings, get_export_settings
from src.core.enums import RecordType
from src.services.rif.claim_builder import ClaimRecordBuilder
from src.services.rif.code_mapper import CodeMappers
from src.services.rif.coverage import CoverageChecker
from src.services.rif.diagnosis_mapper import DiagnosisProcedureMapper
from src.services.rif.encounter_filter import AdmissionHistory, EncounterFilter
from src.services.rif.health_record import Patient
from src.services.rif.identifiers import IdentifierIssuer, get_identifier_issuer
from src.services.rif.line_items import LineItemEmitter
from src.services.rif.static_fields import StaticFieldConfig
from src.services.rif.writers import RecordWriters
from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PatientClaimStats:
    """Counts gathered while exporting one patient."""

    claims_exported: int = 0
    encounters_dropped: int = 0
    rows_written: int = 0


class InpatientExporter:
    """Writes the RIF inpatient records of a patient to the record sink."""

    record_type = RecordType.INPATIENT

    def __init__(
        self,
        writers: RecordWriters,
        mappers: CodeMappers,
        issuer: Optional[IdentifierIssuer] = None,
        coverage_checker: Optional[CoverageChecker] = None,
        static_fields: Optional[StaticFieldConfig] = None,
        settings: Optional[ExportSettings] = None,
    ):
        self.settings = settings or get_export_settings()
        self.writers = writers
        self.issuer = issuer or get_identifier_issuer()
        self.encounter_filter = EncounterFilter(coverage_checker, settings=self.settings)
        self.header_builder = ClaimRecordBuilder(self.issuer, static_fields, self.settings)
        self.coder = DiagnosisProcedureMapper(mappers)
        self.line_emitter = LineItemEmitter(mappers.hcpcs)

    async def export(self, patient: Patient, start_time: datetime) -> int:
        """
        Export a patient's inpatient claims.

        Args:
            patient: Patient to export
            start_time: Earliest encounter stop time to export

        Returns:
            Number of claims exported

        Raises:
            RecordWriteError: if the sink rejects a row
            MissingRequiredFieldError: if a computed row is incomplete
        """
        stats = await self.export_with_stats(patient, start_time)
        return stats.claims_exported

    async def export_with_stats(
        self,
        patient: Patient,
        start_time: datetime,
    ) -> PatientClaimStats:
        stats = PatientClaimStats()
        history = AdmissionHistory()

        for encounter in self.encounter_filter.eligible_encounters(patient, start_time, history):
            header = self.header_builder.build_header(patient, encounter, history)
            coding = self.coder.apply(patient, encounter, header.record)
            if coding.is_empty:
                logger.debug(
                    f"Patient {patient.id}: encounter {encounter.id} has no reportable codes, "
                    f"claim {header.claim_id} dropped"
                )
                stats.encounters_dropped += 1
                continue
            history.record_admission(header.is_emergency)

            rows = self.line_emitter.build_lines(patient, header)
            written = await self.line_emitter.emit(self.writers, rows, self.record_type)
            logger.debug(
                f"Patient {patient.id}: claim {header.claim_id} written, "
                f"principal diagnosis {coding.principal_diagnosis}, {written} rows"
            )
            stats.rows_written += written
            stats.claims_exported += 1

        logger.info(
            f"Patient {patient.id}: {stats.claims_exported} inpatient claims, "
            f"{stats.rows_written} rows, {stats.encounters_dropped} dropped"
        )
        return stats
