"""
Core Enumerations for Inpatient Claim Export.
Source: CMS RIF inpatient claim layout (Blue Button synthetic data)
Verified: 2026-10-18
"""

from enum import Enum


# =============================================================================
# Clinical Enums
# =============================================================================


class EncounterType(str, Enum):
    """Setting of a clinical encounter."""

    EMERGENCY = "emergency"
    INPATIENT = "inpatient"
    AMBULATORY = "ambulatory"
    OUTPATIENT = "outpatient"
    URGENTCARE = "urgentcare"
    WELLNESS = "wellness"
    VIRTUAL = "virtual"
    HOME = "home"
    HOSPICE = "hospice"
    SNF = "snf"


class EntryKind(str, Enum):
    """Kind of clinical item backing a claim line."""

    PROCEDURE = "procedure"
    MEDICATION = "medication"


class ClaimType(str, Enum):
    """RIF claim file a given encounter contributes to."""

    INPATIENT = "inpatient"
    OUTPATIENT = "outpatient"
    CARRIER = "carrier"
    HHA = "hha"
    HOSPICE = "hospice"
    SNF = "snf"
    PDE = "pde"
    DME = "dme"


class RecordType(str, Enum):
    """Output tables written through the record sink."""

    INPATIENT = "inpatient"


# =============================================================================
# Claim Header Codes
# =============================================================================


class DischargeStatus(str, Enum):
    """Patient discharge status code (PTNT_DSCHRG_STUS_CD)."""

    HOME = "1"  # Discharged to home/self care
    TRANSFER = "2"  # Transfer to short term hospital (not assigned)
    DIED = "20"  # Expired
    STILL_PATIENT = "30"  # Still a patient


class PatientStatusIndicator(str, Enum):
    """NCH patient status indicator (NCH_PTNT_STATUS_IND_CD)."""

    DISCHARGED = "A"
    DIED = "B"
    STILL_PATIENT = "C"


class AdmissionType(str, Enum):
    """Inpatient admission type (CLM_IP_ADMSN_TYPE_CD)."""

    EMERGENCY = "1"
    URGENT = "2"
    ELECTIVE = "3"


class OutlierCode(str, Enum):
    """DRG outlier stay code (CLM_DRG_OUTLIER_STAY_CD)."""

    NONE = "0"
    LENGTH_OF_STAY = "1"  # Day outlier
    COST = "2"  # Cost outlier


class DeductibleCoinsuranceCode(str, Enum):
    """Revenue center deductible/coinsurance code (REV_CNTR_DDCTBL_COINSRNC_CD)."""

    SUBJECT_TO_BOTH = "0"
    NOT_SUBJECT_TO_DEDUCTIBLE = "1"
    NOT_SUBJECT_TO_COINSURANCE = "2"
    NOT_SUBJECT_TO_EITHER = "3"


class PresentOnAdmission(str, Enum):
    """Present-on-admission indicator."""

    YES = "Y"
    NO = "N"


# =============================================================================
# Line Item Codes
# =============================================================================


class RevenueCenter(str, Enum):
    """Revenue center codes assigned by the exporter."""

    PHARMACY = "0250"  # Pharmacy - general classification
    EMERGENCY_ROOM = "0450"  # Emergency room


class HcpcsCode(str, Enum):
    """Fixed HCPCS codes assigned by the exporter."""

    MEDICATION_ADMINISTRATION = "T1502"
    INPATIENT_VISIT = "99221"  # Initial/subsequent inpatient hospital care


ICD10_VERSION_CODE = "0"
NDC_UNIT_QUANTITY = "1"
NDC_UNIT_QUALIFIER = "UN"
