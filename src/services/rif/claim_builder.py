"""
Inpatient Claim Header Builder.

Computes the header fields shared by every row of one inpatient claim:
identifiers, dates, payment totals, discharge status, admission type,
utilization days and outlier classification.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from src.core.config import ExportSettings, get_export_settings
from src.core.enums import (
    AdmissionType,
    DischargeStatus,
    OutlierCode,
    PatientStatusIndicator,
    RecordType,
    RevenueCenter,
)
from src.services.rif.coverage import is_primary_government_plan
from src.services.rif.encounter_filter import AdmissionHistory
from src.services.rif.formatting import (
    format_rif_amount,
    format_rif_date,
    next_weekday,
    truncate,
    whole_days,
)
from src.services.rif.health_record import Encounter, Patient
from src.services.rif.identifiers import ClaimIdentifiers, IdentifierIssuer
from src.services.rif.state_codes import get_state_code
from src.services.rif.static_fields import StaticFieldConfig
from src.services.rif.structure import InpatientField as F
from src.services.rif.structure import InpatientRecord


@dataclass
class ClaimHeader:
    """Header record of one claim plus the values its line rows depend on."""

    record: InpatientRecord
    encounter: Encounter
    identifiers: ClaimIdentifiers
    utilization_days: int
    is_emergency: bool

    @property
    def revenue_center(self) -> Optional[str]:
        """Header revenue center before any line override."""
        return self.record.get(F.REV_CNTR)

    @property
    def claim_id(self) -> str:
        return str(self.identifiers.claim_id)


def discharge_status(patient: Patient, encounter: Encounter) -> tuple[DischargeStatus, PatientStatusIndicator]:
    """
    Discharge status and patient status indicator of an encounter.

    Death takes priority over an open encounter. TRANSFER is never
    assigned.
    """
    if not patient.alive(encounter.stop):
        return DischargeStatus.DIED, PatientStatusIndicator.DIED
    if not encounter.ended:
        return DischargeStatus.STILL_PATIENT, PatientStatusIndicator.STILL_PATIENT
    return DischargeStatus.HOME, PatientStatusIndicator.DISCHARGED


def admission_type(is_emergency: bool, history: AdmissionHistory) -> AdmissionType:
    """Emergency now, urgent right after an emergency, elective otherwise."""
    if is_emergency:
        return AdmissionType.EMERGENCY
    if history.previous_emergency:
        return AdmissionType.URGENT
    return AdmissionType.ELECTIVE


def coinsurance_days(days: int, threshold: int = 60) -> int:
    return max(0, days - threshold)


def outlier_code(
    days: int,
    total_cost: Decimal,
    day_threshold: int = 60,
    cost_threshold: Decimal = Decimal("100000.00"),
) -> OutlierCode:
    """Length of stay outliers win over cost outliers."""
    if days > day_threshold:
        return OutlierCode.LENGTH_OF_STAY
    if total_cost > cost_threshold:
        return OutlierCode.COST
    return OutlierCode.NONE


class ClaimRecordBuilder:
    """Builds the header of an inpatient claim for an eligible encounter."""

    def __init__(
        self,
        issuer: IdentifierIssuer,
        static_fields: Optional[StaticFieldConfig] = None,
        settings: Optional[ExportSettings] = None,
    ):
        self.issuer = issuer
        self.static_fields = static_fields or StaticFieldConfig.empty()
        self.settings = settings or get_export_settings()

    def build_header(
        self,
        patient: Patient,
        encounter: Encounter,
        history: AdmissionHistory,
    ) -> ClaimHeader:
        settings = self.settings
        claim = encounter.claim
        ids = self.issuer.allocate()

        record = InpatientRecord()
        self.static_fields.set_values(record, RecordType.INPATIENT, patient)

        record.set(F.BENE_ID, patient.beneficiary_id)
        record.set(F.CLM_ID, str(ids.claim_id))
        record.set(F.CLM_GRP_ID, str(ids.claim_group_id))
        record.set(F.FI_DOC_CLM_CNTL_NUM, str(ids.fi_doc_cntl_num))

        # Dates
        record.set(F.CLM_FROM_DT, format_rif_date(encounter.start))
        record.set(F.CLM_ADMSN_DT, format_rif_date(encounter.start))
        record.set(F.CLM_THRU_DT, format_rif_date(encounter.stop))
        record.set(F.NCH_BENE_DSCHRG_DT, format_rif_date(encounter.stop))
        record.set(F.NCH_WKLY_PROC_DT, format_rif_date(next_weekday(encounter.stop)))

        # Provider and clinician
        record.set(F.PRVDR_NUM, truncate(encounter.provider.cms_provider_num, settings.PROVIDER_NUM_WIDTH))
        record.set(F.ORG_NPI_NUM, encounter.provider.npi)
        record.set(F.AT_PHYSN_NPI, encounter.clinician.npi)
        record.set(F.OP_PHYSN_NPI, encounter.clinician.npi)
        record.set(F.RNDRNG_PHYSN_NPI, encounter.clinician.npi)
        record.set(F.PRVDR_STATE_CD, get_state_code(encounter.provider.state))

        # Payments
        record.set(F.CLM_PMT_AMT, format_rif_amount(claim.total_claim_cost))
        record.set(F.CLM_TOT_CHRG_AMT, format_rif_amount(claim.total_claim_cost))
        if is_primary_government_plan(claim.plan, settings.PRIMARY_GOVERNMENT_PAYER):
            record.set(F.NCH_PRMRY_PYR_CLM_PD_AMT, format_rif_amount(0))
        else:
            record.set(F.NCH_PRMRY_PYR_CLM_PD_AMT, format_rif_amount(claim.total_covered_cost))

        status, indicator = discharge_status(patient, encounter)
        record.set(F.PTNT_DSCHRG_STUS_CD, status.value)
        record.set(F.NCH_PTNT_STATUS_IND_CD, indicator.value)

        is_emergency = encounter.is_emergency
        if is_emergency:
            record.set(F.REV_CNTR, RevenueCenter.EMERGENCY_ROOM.value)
        record.set(F.CLM_IP_ADMSN_TYPE_CD, admission_type(is_emergency, history).value)

        # Patient cost sharing
        record.set(F.NCH_BENE_IP_DDCTBL_AMT, format_rif_amount(claim.total_deductible_paid))
        record.set(F.NCH_BENE_PTA_COINSRNC_LBLTY_AM, format_rif_amount(claim.total_coinsurance_paid))
        record.set(F.NCH_IP_NCVRD_CHRG_AMT, format_rif_amount(claim.total_patient_cost))
        record.set(F.NCH_IP_TOT_DDCTN_AMT, format_rif_amount(claim.total_patient_cost))

        # Utilization
        days = whole_days(encounter.start, encounter.stop)
        threshold = settings.COINSURANCE_DAY_THRESHOLD
        record.set(F.CLM_UTLZTN_DAY_CNT, str(days))
        record.set(F.BENE_TOT_COINSRNC_DAYS_CNT, str(coinsurance_days(days, threshold)))
        record.set(
            F.CLM_DRG_OUTLIER_STAY_CD,
            outlier_code(days, claim.total_claim_cost, threshold, settings.COST_OUTLIER_THRESHOLD).value,
        )

        # Claim level revenue center totals, replaced per line
        record.set(F.REV_CNTR_TOT_CHRG_AMT, format_rif_amount(claim.total_covered_cost))
        record.set(F.REV_CNTR_NCVRD_CHRG_AMT, format_rif_amount(claim.total_patient_cost))

        return ClaimHeader(
            record=record,
            encounter=encounter,
            identifiers=ids,
            utilization_days=days,
            is_emergency=is_emergency,
        )
