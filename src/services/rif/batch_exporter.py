"""
Concurrent Inpatient Export.

Exports many patients as asyncio tasks sharing one identifier issuer and
one set of record writers. Concurrency is bounded by a semaphore and
patients are scheduled in batches. A failing patient is recorded and the
remaining patients continue; failures are never retried because a claim
cannot be resumed part way through.
"""

import asyncio
import time
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from pydantic import BaseModel

from src.core.config import ExportSettings, get_export_settings
from src.services.rif.code_mapper import CodeMappers
from src.services.rif.coverage import CoverageChecker
from src.services.rif.health_record import Patient
from src.services.rif.identifiers import IdentifierIssuer
from src.services.rif.inpatient_exporter import InpatientExporter
from src.services.rif.static_fields import StaticFieldConfig
from src.services.rif.writers import DelimitedFileSink, RecordSink, RecordWriters
from src.utils.logging import get_logger

logger = get_logger(__name__)


class PatientExportStatus(str, Enum):
    """Outcome of exporting one patient."""

    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class BatchConfig(BaseModel):
    """Batch export configuration."""

    batch_size: int = 100
    max_concurrent: int = 10
    fail_fast: bool = False  # Stop scheduling batches after a failed patient

    @classmethod
    def from_settings(cls, settings: ExportSettings) -> "BatchConfig":
        return cls(
            batch_size=settings.BATCH_SIZE,
            max_concurrent=settings.MAX_CONCURRENT_PATIENTS,
        )


class PatientExportResult(BaseModel):
    """Result of exporting one patient."""

    patient_id: str
    status: PatientExportStatus
    claims_exported: int = 0
    encounters_dropped: int = 0
    rows_written: int = 0
    error: Optional[str] = None
    processing_time_ms: float = 0.0


class ExportSummary(BaseModel):
    """Totals over one batch export run."""

    total_patients: int = 0
    completed_patients: int = 0
    failed_patients: int = 0
    skipped_patients: int = 0
    total_claims: int = 0
    total_rows: int = 0
    dropped_encounters: int = 0
    total_processing_time_ms: float = 0.0
    results: list[PatientExportResult] = []

    @property
    def failures(self) -> list[PatientExportResult]:
        return [r for r in self.results if r.status == PatientExportStatus.FAILED]


class BatchExporter:
    """Runs the inpatient exporter over many patients concurrently."""

    def __init__(self, exporter: InpatientExporter, config: BatchConfig | None = None):
        self.exporter = exporter
        self._config = config or BatchConfig()

    @property
    def config(self) -> BatchConfig:
        return self._config

    async def __aenter__(self) -> "BatchExporter":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Flush and close the record sink."""
        self.exporter.writers.close()

    async def export_one(self, patient: Patient, start_time: datetime) -> PatientExportResult:
        """Export one patient, capturing a failure as a FAILED result."""
        started = time.perf_counter()
        try:
            stats = await self.exporter.export_with_stats(patient, start_time)
        except Exception as e:
            elapsed = (time.perf_counter() - started) * 1000
            logger.error(f"Export failed for patient {patient.id}: {e}")
            return PatientExportResult(
                patient_id=patient.id,
                status=PatientExportStatus.FAILED,
                error=str(e),
                processing_time_ms=elapsed,
            )

        return PatientExportResult(
            patient_id=patient.id,
            status=PatientExportStatus.COMPLETED,
            claims_exported=stats.claims_exported,
            encounters_dropped=stats.encounters_dropped,
            rows_written=stats.rows_written,
            processing_time_ms=(time.perf_counter() - started) * 1000,
        )

    async def export_patients(
        self,
        patients: Sequence[Patient],
        start_time: datetime,
    ) -> ExportSummary:
        """Export every patient and summarize the run."""
        started = time.perf_counter()
        results: list[PatientExportResult] = []
        semaphore = asyncio.Semaphore(self._config.max_concurrent)

        async def export_with_semaphore(patient: Patient) -> PatientExportResult:
            async with semaphore:
                return await self.export_one(patient, start_time)

        stop_scheduling = False
        try:
            for i in range(0, len(patients), self._config.batch_size):
                batch = patients[i : i + self._config.batch_size]
                if stop_scheduling:
                    results.extend(
                        PatientExportResult(patient_id=p.id, status=PatientExportStatus.SKIPPED)
                        for p in batch
                    )
                    continue

                batch_results = await asyncio.gather(*[export_with_semaphore(p) for p in batch])
                results.extend(batch_results)

                if self._config.fail_fast and any(r.status == PatientExportStatus.FAILED for r in batch_results):
                    logger.warning("Stopping export after failed patient (fail_fast)")
                    stop_scheduling = True
        finally:
            self.exporter.writers.flush()

        summary = self._summarize(results, (time.perf_counter() - started) * 1000)
        logger.info(
            f"Inpatient export complete: patients={summary.total_patients}, "
            f"claims={summary.total_claims}, rows={summary.total_rows}, "
            f"failed={summary.failed_patients}"
        )
        return summary

    @staticmethod
    def _summarize(results: list[PatientExportResult], elapsed_ms: float) -> ExportSummary:
        return ExportSummary(
            total_patients=len(results),
            completed_patients=sum(1 for r in results if r.status == PatientExportStatus.COMPLETED),
            failed_patients=sum(1 for r in results if r.status == PatientExportStatus.FAILED),
            skipped_patients=sum(1 for r in results if r.status == PatientExportStatus.SKIPPED),
            total_claims=sum(r.claims_exported for r in results),
            total_rows=sum(r.rows_written for r in results),
            dropped_encounters=sum(r.encounters_dropped for r in results),
            total_processing_time_ms=elapsed_ms,
            results=results,
        )


# =============================================================================
# Factory Functions
# =============================================================================


def create_batch_exporter(
    settings: ExportSettings | None = None,
    sink: RecordSink | None = None,
    mappers: CodeMappers | None = None,
    coverage_checker: CoverageChecker | None = None,
) -> BatchExporter:
    """
    Wire a BatchExporter from settings.

    Code mappings and static defaults are loaded from the configured
    paths; the sink defaults to delimited files under OUTPUT_DIR. Every
    claim is flushed as it is written; close the exporter, or use it as
    an async context manager, to release the output files.
    """
    settings = settings or get_export_settings()
    if mappers is None:
        mappers = CodeMappers.from_directory(settings.CODE_MAP_DIR) if settings.CODE_MAP_DIR else CodeMappers()
    static_fields = (
        StaticFieldConfig.from_file(settings.STATIC_FIELD_CONFIG)
        if settings.STATIC_FIELD_CONFIG
        else StaticFieldConfig.empty()
    )
    sink = sink or DelimitedFileSink(settings.OUTPUT_DIR, delimiter=settings.FIELD_DELIMITER)
    exporter = InpatientExporter(
        writers=RecordWriters(sink),
        mappers=mappers,
        issuer=IdentifierIssuer.from_settings(settings),
        coverage_checker=coverage_checker,
        static_fields=static_fields,
        settings=settings,
    )
    return BatchExporter(exporter, BatchConfig.from_settings(settings))
