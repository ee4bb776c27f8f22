"""
Test data builders for health records and mapping tables.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from src.core.enums import EncounterType
from src.services.rif.code_mapper import CodeMapper, CodeMappers
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

SNOMED = "http://snomed.info/sct"
RXNORM = "http://www.nlm.nih.gov/research/umls/rxnorm"

# Monday
T0 = datetime(2020, 1, 6, 8, 0, tzinfo=timezone.utc)

PNEUMONIA = Code(SNOMED, "233604007", "Pneumonia")
DIABETES = Code(SNOMED, "44054006", "Diabetes mellitus type 2")
HYPERTENSION = Code(SNOMED, "59621000", "Essential hypertension")
HIP_FRACTURE = Code(SNOMED, "359817006", "Closed fracture of hip")
APPENDECTOMY = Code(SNOMED, "80146002", "Appendectomy")
UNMAPPED = Code(SNOMED, "000000000", "Unmapped finding")
INSULIN = Code(RXNORM, "311041", "Insulin")

MEDICARE = Plan(payer_name="Medicare", plan_name="Medicare Part A/B", is_government=True)
PRIVATE = Plan(payer_name="Aetna", plan_name="Aetna PPO")

PROVIDER = Provider(
    id="prov-1",
    name="General Hospital",
    cms_provider_num="2200011234",
    npi="1234567893",
    state="Massachusetts",
)
CLINICIAN = Clinician(id="clin-1", name="Dr. Jane Smith", npi="9876543210")


def build_mappers() -> CodeMappers:
    """Small mapping tables covering the test vocabulary."""
    return CodeMappers(
        condition=CodeMapper.from_dict(
            "condition",
            {
                PNEUMONIA.code: [{"code": "J18.9"}],
                DIABETES.code: [{"code": "E11.9"}],
                HYPERTENSION.code: [{"code": "I10"}],
                HIP_FRACTURE.code: [{"code": "S72.001A"}],
            },
        ),
        procedure=CodeMapper.from_dict("procedure", {APPENDECTOMY.code: [{"code": "0DTJ4ZZ"}]}),
        hcpcs=CodeMapper.from_dict("hcpcs", {APPENDECTOMY.code: [{"code": "44970"}]}),
        drg=CodeMapper.from_dict("drg", {"J18.9": [{"code": "193"}]}),
        external_cause=CodeMapper.from_dict("external_cause", {"S72.001A": [{"code": "W19.XXXA"}]}),
    )


def procedure_item(
    cost: str = "1000.00",
    out_of_pocket: str = "0.00",
    deductible: str = "0.00",
    copay: str = "0.00",
    codes: list[Code] | None = None,
    start: datetime = T0,
) -> ClaimEntry:
    return ClaimEntry(
        entry=Procedure(codes=codes if codes is not None else [APPENDECTOMY], start=start),
        cost=Decimal(cost),
        copay_paid_by_patient=Decimal(copay),
        deductible_paid_by_patient=Decimal(deductible),
        patient_out_of_pocket=Decimal(out_of_pocket),
    )


def medication_item(cost: str = "50.00", administration: bool = True) -> ClaimEntry:
    return ClaimEntry(
        entry=Medication(codes=[INSULIN], start=T0, administration=administration),
        cost=Decimal(cost),
    )


def build_encounter(
    id: str = "enc-1",
    start: datetime = T0,
    days: int = 3,
    type: EncounterType = EncounterType.INPATIENT,
    items: list[ClaimEntry] | None = None,
    reason: Code | None = PNEUMONIA,
    procedures: list[Procedure] | None = None,
    ended: bool = True,
    plan: Plan = MEDICARE,
    total_claim_cost: str | None = None,
) -> Encounter:
    claim = Claim(
        plan=plan,
        items=items if items is not None else [procedure_item()],
        total_claim_cost=Decimal(total_claim_cost) if total_claim_cost is not None else None,
    )
    return Encounter(
        id=id,
        start=start,
        stop=start + timedelta(days=days),
        type=type,
        provider=PROVIDER,
        clinician=CLINICIAN,
        claim=claim,
        ended=ended,
        reason=reason,
        procedures=procedures if procedures is not None else [],
    )


def build_patient(
    encounters: list[Encounter] | None = None,
    conditions: list[Condition] | None = None,
    plans: list[Plan] | None = None,
    death_time: datetime | None = None,
    id: str = "patient-1",
    seed: int = 42,
) -> Patient:
    coverage_start = datetime(2010, 1, 1, tzinfo=timezone.utc)
    return Patient(
        id=id,
        beneficiary_id=f"-{id}",
        encounters=encounters or [],
        conditions=conditions or [],
        coverage=[CoveragePeriod(plan=p, start=coverage_start) for p in (plans or [MEDICARE])],
        death_time=death_time,
        seed=seed,
    )
