"""
Coverage Eligibility Check.

Decides whether a patient holds billable Part A/B coverage at a point in
time. Only encounters that end inside such coverage produce claims.
"""

from datetime import datetime
from typing import Iterable, Optional, Protocol

from src.core.config import ExportSettings, get_export_settings
from src.services.rif.health_record import Patient, Plan


class CoverageChecker(Protocol):
    """Coverage lookup used by the encounter filter."""

    def has_eligible_coverage(self, patient: Patient, when: datetime) -> bool: ...


class PartABCoverageChecker:
    """Accepts coverage periods whose payer provides Part A/B benefits."""

    def __init__(self, payers: Iterable[str]):
        self.payers = frozenset(p.lower() for p in payers)

    @classmethod
    def from_settings(cls, settings: Optional[ExportSettings] = None) -> "PartABCoverageChecker":
        settings = settings or get_export_settings()
        return cls(settings.part_ab_payers_list)

    def has_eligible_coverage(self, patient: Patient, when: datetime) -> bool:
        return any(plan.payer_name.lower() in self.payers for plan in patient.plans_at(when))


def is_primary_government_plan(plan: Plan, primary_payer: str) -> bool:
    """True when ``plan`` is the government plan of the primary payer."""
    return plan.is_government and plan.payer_name.lower() == primary_payer.lower()
