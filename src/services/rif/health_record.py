"""
Simulated Health Record Models.

Input side of the exporter: a patient timeline of encounters, each with
its clinical content and one cost-shared claim. Naive timestamps are
read as UTC when a record is built.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Union

from src.core.enums import EncounterType, EntryKind
from src.services.rif.formatting import as_utc

ZERO = Decimal("0.00")


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    return None if value is None else as_utc(value)


# =============================================================================
# Clinical Content
# =============================================================================


@dataclass(frozen=True)
class Code:
    """A coded concept from a clinical terminology."""

    system: str
    code: str
    display: str = ""


@dataclass
class Condition:
    """A diagnosis active over a period of time."""

    code: Code
    start: datetime
    stop: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.start = as_utc(self.start)
        self.stop = _utc(self.stop)

    def active_at(self, when: datetime) -> bool:
        when = as_utc(when)
        return self.start <= when and (self.stop is None or when < self.stop)


@dataclass
class Procedure:
    """A performed procedure."""

    codes: List[Code]
    start: datetime
    stop: Optional[datetime] = None

    kind = EntryKind.PROCEDURE

    def __post_init__(self) -> None:
        self.start = as_utc(self.start)
        self.stop = _utc(self.stop)


@dataclass
class Medication:
    """A medication order or in-facility administration."""

    codes: List[Code]
    start: datetime
    administration: bool = False

    kind = EntryKind.MEDICATION

    def __post_init__(self) -> None:
        self.start = as_utc(self.start)


ClinicalEntry = Union[Procedure, Medication]


# =============================================================================
# Participants and Coverage
# =============================================================================


@dataclass(frozen=True)
class Provider:
    """Facility where an encounter takes place."""

    id: str
    name: str
    cms_provider_num: str
    npi: str
    state: str = ""


@dataclass(frozen=True)
class Clinician:
    """Attending clinician."""

    id: str
    name: str
    npi: str


@dataclass(frozen=True)
class Plan:
    """Insurance plan paying a claim."""

    payer_name: str
    plan_name: str = ""
    is_government: bool = False


@dataclass
class CoveragePeriod:
    """A span of time during which the patient held a plan."""

    plan: Plan
    start: datetime
    stop: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.start = as_utc(self.start)
        self.stop = _utc(self.stop)

    def covers(self, when: datetime) -> bool:
        when = as_utc(when)
        return self.start <= when and (self.stop is None or when < self.stop)


# =============================================================================
# Claims
# =============================================================================


@dataclass
class ClaimEntry:
    """
    One billable item of a claim and its three-way patient cost split.

    ``entry`` is either a Procedure or a Medication; ``entry.kind`` tags
    which one.
    """

    entry: ClinicalEntry
    cost: Decimal
    copay_paid_by_patient: Decimal = ZERO
    deductible_paid_by_patient: Decimal = ZERO
    patient_out_of_pocket: Decimal = ZERO
    coinsurance_paid_by_patient: Decimal = ZERO

    @property
    def patient_cost(self) -> Decimal:
        return self.copay_paid_by_patient + self.deductible_paid_by_patient + self.patient_out_of_pocket

    @property
    def covered_cost(self) -> Decimal:
        return self.cost - self.patient_cost


@dataclass
class Claim:
    """
    The cost-shared claim of one encounter.

    Totals are summed from the items unless supplied explicitly.
    """

    plan: Plan
    items: List[ClaimEntry] = field(default_factory=list)
    total_claim_cost: Optional[Decimal] = None
    total_covered_cost: Optional[Decimal] = None
    total_patient_cost: Optional[Decimal] = None
    total_deductible_paid: Optional[Decimal] = None
    total_coinsurance_paid: Optional[Decimal] = None

    def __post_init__(self) -> None:
        if self.total_claim_cost is None:
            self.total_claim_cost = _sum(i.cost for i in self.items)
        if self.total_patient_cost is None:
            self.total_patient_cost = _sum(i.patient_cost for i in self.items)
        if self.total_covered_cost is None:
            self.total_covered_cost = self.total_claim_cost - self.total_patient_cost
        if self.total_deductible_paid is None:
            self.total_deductible_paid = _sum(i.deductible_paid_by_patient for i in self.items)
        if self.total_coinsurance_paid is None:
            self.total_coinsurance_paid = _sum(i.coinsurance_paid_by_patient for i in self.items)


def _sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


# =============================================================================
# Timeline
# =============================================================================


@dataclass
class Encounter:
    """One clinical visit with its content and claim."""

    id: str
    start: datetime
    stop: datetime
    type: EncounterType
    provider: Provider
    clinician: Clinician
    claim: Claim
    ended: bool = True
    reason: Optional[Code] = None
    procedures: List[Procedure] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.start = as_utc(self.start)
        self.stop = as_utc(self.stop)

    @property
    def is_emergency(self) -> bool:
        return self.type == EncounterType.EMERGENCY


@dataclass
class Patient:
    """
    A simulated person and their health record.

    ``seed`` fixes the private random generator used whenever an export
    step has to choose between equally valid codes.
    """

    id: str
    beneficiary_id: str
    encounters: List[Encounter] = field(default_factory=list)
    conditions: List[Condition] = field(default_factory=list)
    coverage: List[CoveragePeriod] = field(default_factory=list)
    death_time: Optional[datetime] = None
    seed: int = 0
    rng: random.Random = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.rng = random.Random(self.seed)
        self.death_time = _utc(self.death_time)
        self.encounters.sort(key=lambda e: e.start)

    def alive(self, when: datetime) -> bool:
        return self.death_time is None or as_utc(when) < self.death_time

    def active_conditions(self, when: datetime) -> list[Code]:
        """Codes of conditions active at ``when``, in onset order."""
        return [c.code for c in self.conditions if c.active_at(when)]

    def plans_at(self, when: datetime) -> list[Plan]:
        return [p.plan for p in self.coverage if p.covers(when)]
