"""
Encounter Eligibility Filter.

Selects the encounters of a patient timeline that produce inpatient
claims and maintains the rolling "previous encounter was an emergency"
state consumed by the admission type rule.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, Optional

from src.core.config import ExportSettings, get_export_settings
from src.core.enums import ClaimType, EncounterType
from src.services.rif.coverage import CoverageChecker, PartABCoverageChecker
from src.services.rif.formatting import as_utc
from src.services.rif.health_record import Encounter, Medication, Patient
from src.utils.logging import get_logger

logger = get_logger(__name__)

_CLAIM_TYPES_BY_ENCOUNTER: dict[EncounterType, frozenset[ClaimType]] = {
    EncounterType.INPATIENT: frozenset({ClaimType.INPATIENT}),
    EncounterType.EMERGENCY: frozenset({ClaimType.INPATIENT}),
    EncounterType.AMBULATORY: frozenset({ClaimType.OUTPATIENT, ClaimType.CARRIER}),
    EncounterType.OUTPATIENT: frozenset({ClaimType.OUTPATIENT, ClaimType.CARRIER}),
    EncounterType.URGENTCARE: frozenset({ClaimType.OUTPATIENT, ClaimType.CARRIER}),
    EncounterType.WELLNESS: frozenset({ClaimType.OUTPATIENT, ClaimType.CARRIER}),
    EncounterType.VIRTUAL: frozenset({ClaimType.OUTPATIENT, ClaimType.CARRIER}),
    EncounterType.HOME: frozenset({ClaimType.HHA}),
    EncounterType.HOSPICE: frozenset({ClaimType.HOSPICE}),
    EncounterType.SNF: frozenset({ClaimType.SNF}),
}


def claim_types_for(encounter: Encounter) -> set[ClaimType]:
    """RIF claim files that an encounter contributes to."""
    claim_types = set(_CLAIM_TYPES_BY_ENCOUNTER.get(encounter.type, frozenset()))
    for item in encounter.claim.items:
        if isinstance(item.entry, Medication) and not item.entry.administration:
            claim_types.add(ClaimType.PDE)
            break
    return claim_types


@dataclass
class AdmissionHistory:
    """Admission state carried from one encounter of a patient to the next."""

    previous_emergency: bool = False

    def record_admission(self, was_emergency: bool) -> None:
        self.previous_emergency = was_emergency

    def reset(self) -> None:
        self.previous_emergency = False


class EncounterFilter:
    """Yields the encounters of a patient that qualify for an inpatient claim."""

    def __init__(
        self,
        coverage_checker: Optional[CoverageChecker] = None,
        claim_cutoff: Optional[datetime] = None,
        settings: Optional[ExportSettings] = None,
    ):
        settings = settings or get_export_settings()
        self.coverage_checker = coverage_checker or PartABCoverageChecker.from_settings(settings)
        if claim_cutoff is None:
            cutoff = settings.CLAIM_CUTOFF_DATE
            claim_cutoff = datetime(cutoff.year, cutoff.month, cutoff.day, tzinfo=timezone.utc)
        self.claim_cutoff = as_utc(claim_cutoff)

    def eligible_encounters(
        self,
        patient: Patient,
        start_time: datetime,
        history: AdmissionHistory,
    ) -> Iterator[Encounter]:
        """
        Iterate the patient's eligible encounters in timeline order.

        Encounters without an inpatient claim reset ``history``; encounters
        skipped for dates or coverage leave it untouched.
        """
        start_time = as_utc(start_time)
        for encounter in patient.encounters:
            stop = as_utc(encounter.stop)
            if stop < start_time or stop < self.claim_cutoff:
                continue
            if not self.coverage_checker.has_eligible_coverage(patient, encounter.stop):
                logger.debug(f"Encounter {encounter.id}: no Part A/B coverage, skipped")
                continue
            if ClaimType.INPATIENT not in claim_types_for(encounter):
                history.reset()
                continue
            yield encounter
