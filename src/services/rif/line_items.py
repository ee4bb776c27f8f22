"""
Inpatient Claim Line Emitter.

Fans a claim's entries out into revenue center line rows. Every row is
computed before the claim section is entered; the section only covers the
writes, so a claim is never left half computed inside it.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional

from src.core.enums import (
    NDC_UNIT_QUALIFIER,
    NDC_UNIT_QUANTITY,
    DeductibleCoinsuranceCode,
    EntryKind,
    HcpcsCode,
    RecordType,
    RevenueCenter,
)
from src.services.rif.claim_builder import ClaimHeader
from src.services.rif.code_mapper import CodeMapper
from src.services.rif.formatting import apportion_daily_rate, format_rif_amount
from src.services.rif.health_record import ClaimEntry, Medication, Patient, Procedure
from src.services.rif.structure import InpatientField as F
from src.services.rif.structure import InpatientRecord
from src.services.rif.writers import RecordWriters

ZERO = Decimal("0")


@dataclass(frozen=True)
class LineBilling:
    """Billing code and revenue center values contributed by one entry."""

    hcpcs_code: str
    revenue_center: Optional[str]
    ndc_quantity: Optional[str] = None
    ndc_qualifier: Optional[str] = None


def deductible_coinsurance_code(out_of_pocket: Decimal, deductible: Decimal) -> DeductibleCoinsuranceCode:
    """Classify a line's liability from its out-of-pocket and deductible amounts."""
    if out_of_pocket == ZERO and deductible == ZERO:
        return DeductibleCoinsuranceCode.NOT_SUBJECT_TO_EITHER
    if out_of_pocket > ZERO and deductible > ZERO:
        return DeductibleCoinsuranceCode.SUBJECT_TO_BOTH
    if out_of_pocket == ZERO:
        return DeductibleCoinsuranceCode.NOT_SUBJECT_TO_DEDUCTIBLE
    return DeductibleCoinsuranceCode.NOT_SUBJECT_TO_COINSURANCE


class LineItemEmitter:
    """Builds and writes the line rows of inpatient claims."""

    def __init__(self, hcpcs_mapper: CodeMapper):
        self.hcpcs = hcpcs_mapper
        self._billers: dict[EntryKind, Callable[[Patient, ClaimEntry, ClaimHeader], Optional[LineBilling]]] = {
            EntryKind.PROCEDURE: self._bill_procedure,
            EntryKind.MEDICATION: self._bill_medication,
        }

    def _bill_procedure(self, patient: Patient, item: ClaimEntry, header: ClaimHeader) -> Optional[LineBilling]:
        procedure: Procedure = item.entry  # type: ignore[assignment]
        for code in procedure.codes:
            if self.hcpcs.can_map(code):
                return LineBilling(
                    hcpcs_code=self.hcpcs.map(code, patient, allow_fallback=True),
                    revenue_center=header.revenue_center,
                )
        return None

    def _bill_medication(self, patient: Patient, item: ClaimEntry, header: ClaimHeader) -> Optional[LineBilling]:
        medication: Medication = item.entry  # type: ignore[assignment]
        if not medication.administration:
            return None
        return LineBilling(
            hcpcs_code=HcpcsCode.MEDICATION_ADMINISTRATION.value,
            revenue_center=RevenueCenter.PHARMACY.value,
            ndc_quantity=NDC_UNIT_QUANTITY,
            ndc_qualifier=NDC_UNIT_QUALIFIER,
        )

    def billing_for(self, patient: Patient, item: ClaimEntry, header: ClaimHeader) -> Optional[LineBilling]:
        biller = self._billers.get(item.entry.kind)
        return biller(patient, item, header) if biller else None

    def build_lines(self, patient: Patient, header: ClaimHeader) -> list[InpatientRecord]:
        """
        Compute every row of the claim.

        Returns one row per entry with a billing code, or a single fallback
        row when no entry can be billed. Raises MissingRequiredFieldError
        if a row is incomplete.
        """
        days = header.utilization_days
        unit_count = str(max(1, days))
        rows: list[InpatientRecord] = []

        for item in header.encounter.claim.items:
            billing = self.billing_for(patient, item, header)
            if billing is None:
                continue

            row = header.record.copy()
            row.set(F.CLM_LINE_NUM, str(len(rows) + 1))
            row.set(F.HCPCS_CD, billing.hcpcs_code)
            row.set(F.REV_CNTR, billing.revenue_center)
            row.set(F.REV_CNTR_NDC_QTY, billing.ndc_quantity)
            row.set(F.REV_CNTR_NDC_QTY_QLFR_CD, billing.ndc_qualifier)
            row.set(F.REV_CNTR_UNIT_CNT, unit_count)
            row.set(F.REV_CNTR_RATE_AMT, format_rif_amount(apportion_daily_rate(item.cost, days)))
            row.set(F.REV_CNTR_TOT_CHRG_AMT, format_rif_amount(item.cost))
            row.set(F.REV_CNTR_NCVRD_CHRG_AMT, format_rif_amount(item.patient_cost))
            row.set(
                F.REV_CNTR_DDCTBL_COINSRNC_CD,
                deductible_coinsurance_code(item.patient_out_of_pocket, item.deductible_paid_by_patient).value,
            )
            rows.append(row)

        if not rows:
            row = header.record.copy()
            row.set(F.CLM_LINE_NUM, "1")
            row.set(F.HCPCS_CD, HcpcsCode.INPATIENT_VISIT.value)
            rows.append(row)

        for row in rows:
            row.require_complete()
        return rows

    async def emit(
        self,
        writers: RecordWriters,
        rows: list[InpatientRecord],
        record_type: RecordType = RecordType.INPATIENT,
    ) -> int:
        """Write a claim's rows as one uninterrupted group."""
        async with writers.claim_section(record_type) as writer:
            for row in rows:
                writer.write(row)
            return writer.rows_written
