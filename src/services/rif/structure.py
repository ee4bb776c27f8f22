"""
RIF Inpatient Record Layout.

Source: CMS RIF inpatient claims layout (Blue Button synthetic data)

Defines the ordered field enumeration of the inpatient record, the
diagnosis/procedure slot groups, the required field set and
``InpatientRecord``, a record restricted to the layout's fields.
"""

from enum import Enum
from typing import Iterator, Optional

from src.utils.errors import MissingRequiredFieldError, UnknownFieldError

DIAGNOSIS_SLOTS = 25
EXTERNAL_CAUSE_SLOTS = 12
PROCEDURE_SLOTS = 25


def _numbered(prefix: str, count: int) -> list[str]:
    return [f"{prefix}{i}" for i in range(1, count + 1)]


def _field_names() -> list[str]:
    names = [
        "DML_IND",
        "BENE_ID",
        "CLM_ID",
        "CLM_GRP_ID",
        "FINAL_ACTION",
        "NCH_NEAR_LINE_REC_IDENT_CD",
        "NCH_CLM_TYPE_CD",
        "CLM_FROM_DT",
        "CLM_THRU_DT",
        "NCH_WKLY_PROC_DT",
        "FI_CLM_PROC_DT",
        "CLAIM_QUERY_CODE",
        "PRVDR_NUM",
        "CLM_FAC_TYPE_CD",
        "CLM_SRVC_CLSFCTN_TYPE_CD",
        "CLM_FREQ_CD",
        "FI_NUM",
        "CLM_MDCR_NON_PMT_RSN_CD",
        "CLM_PMT_AMT",
        "NCH_PRMRY_PYR_CLM_PD_AMT",
        "NCH_PRMRY_PYR_CD",
        "FI_CLM_ACTN_CD",
        "PRVDR_STATE_CD",
        "ORG_NPI_NUM",
        "AT_PHYSN_UPIN",
        "AT_PHYSN_NPI",
        "OP_PHYSN_UPIN",
        "OP_PHYSN_NPI",
        "OT_PHYSN_UPIN",
        "OT_PHYSN_NPI",
        "CLM_MCO_PD_SW",
        "PTNT_DSCHRG_STUS_CD",
        "CLM_PPS_IND_CD",
        "CLM_TOT_CHRG_AMT",
        "CLM_ADMSN_DT",
        "CLM_IP_ADMSN_TYPE_CD",
        "CLM_SRC_IP_ADMSN_CD",
        "NCH_PTNT_STATUS_IND_CD",
        "CLM_PASS_THRU_PER_DIEM_AMT",
        "NCH_BENE_IP_DDCTBL_AMT",
        "NCH_BENE_PTA_COINSRNC_LBLTY_AM",
        "NCH_BENE_BLOOD_DDCTBL_LBLTY_AM",
        "NCH_PROFNL_CMPNT_CHRG_AMT",
        "NCH_IP_NCVRD_CHRG_AMT",
        "NCH_IP_TOT_DDCTN_AMT",
        "CLM_TOT_PPS_CPTL_AMT",
        "CLM_PPS_CPTL_FSP_AMT",
        "CLM_PPS_CPTL_OUTLIER_AMT",
        "CLM_PPS_CPTL_DSPRPRTNT_SHR_AMT",
        "CLM_PPS_CPTL_IME_AMT",
        "CLM_PPS_CPTL_EXCPTN_AMT",
        "CLM_PPS_OLD_CPTL_HLD_HRMLS_AMT",
        "CLM_PPS_CPTL_DRG_WT_NUM",
        "CLM_UTLZTN_DAY_CNT",
        "BENE_TOT_COINSRNC_DAYS_CNT",
        "BENE_LRD_USED_CNT",
        "CLM_NON_UTLZTN_DAYS_CNT",
        "NCH_BLOOD_PNTS_FRNSHD_QTY",
        "NCH_VRFD_NCVRD_STAY_FROM_DT",
        "NCH_VRFD_NCVRD_STAY_THRU_DT",
        "NCH_ACTV_OR_CVRD_LVL_CARE_THRU",
        "NCH_BENE_MDCR_BNFTS_EXHTD_DT_I",
        "NCH_BENE_DSCHRG_DT",
        "CLM_DRG_CD",
        "CLM_DRG_OUTLIER_STAY_CD",
        "NCH_DRG_OUTLIER_APRVD_PMT_AMT",
        "ADMTG_DGNS_CD",
        "PRNCPAL_DGNS_CD",
    ]
    for i in range(1, DIAGNOSIS_SLOTS + 1):
        names += [f"ICD_DGNS_CD{i}", f"ICD_DGNS_VRSN_CD{i}", f"CLM_POA_IND_SW{i}"]
    names += ["FST_DGNS_E_CD", "FST_DGNS_E_VRSN_CD"]
    for i in range(1, EXTERNAL_CAUSE_SLOTS + 1):
        names += [f"ICD_DGNS_E_CD{i}", f"ICD_DGNS_E_VRSN_CD{i}", f"CLM_E_POA_IND_SW{i}"]
    for i in range(1, PROCEDURE_SLOTS + 1):
        names += [f"ICD_PRCDR_CD{i}", f"ICD_PRCDR_VRSN_CD{i}", f"PRCDR_DT{i}"]
    names += [
        "IME_OP_CLM_VAL_AMT",
        "DSH_OP_CLM_VAL_AMT",
        "CLM_UNCOMPD_CARE_PMT_AMT",
        "FI_DOC_CLM_CNTL_NUM",
        "FI_ORIG_CLM_CNTL_NUM",
        "CLM_LINE_NUM",
        "REV_CNTR",
        "HCPCS_CD",
        "HCPCS_1ST_MDFR_CD",
        "HCPCS_2ND_MDFR_CD",
        "REV_CNTR_UNIT_CNT",
        "REV_CNTR_RATE_AMT",
        "REV_CNTR_TOT_CHRG_AMT",
        "REV_CNTR_NCVRD_CHRG_AMT",
        "REV_CNTR_DDCTBL_COINSRNC_CD",
        "REV_CNTR_NDC_QTY",
        "REV_CNTR_NDC_QTY_QLFR_CD",
        "RNDRNG_PHYSN_UPIN",
        "RNDRNG_PHYSN_NPI",
    ]
    return names


InpatientField = Enum(  # type: ignore[misc]
    "InpatientField",
    [(name, name) for name in _field_names()],
    type=str,
    module=__name__,
)
InpatientField.__doc__ = "Fields of the RIF inpatient record, in layout order."


# (code, version code, present-on-admission) per diagnosis slot
DIAGNOSIS_FIELDS: tuple[tuple[InpatientField, InpatientField, InpatientField], ...] = tuple(
    (
        InpatientField[f"ICD_DGNS_CD{i}"],
        InpatientField[f"ICD_DGNS_VRSN_CD{i}"],
        InpatientField[f"CLM_POA_IND_SW{i}"],
    )
    for i in range(1, DIAGNOSIS_SLOTS + 1)
)

# (code, version code, present-on-admission) per external cause slot
EXTERNAL_CAUSE_FIELDS: tuple[tuple[InpatientField, InpatientField, InpatientField], ...] = tuple(
    (
        InpatientField[f"ICD_DGNS_E_CD{i}"],
        InpatientField[f"ICD_DGNS_E_VRSN_CD{i}"],
        InpatientField[f"CLM_E_POA_IND_SW{i}"],
    )
    for i in range(1, EXTERNAL_CAUSE_SLOTS + 1)
)

# (code, version code, procedure date) per procedure slot
PROCEDURE_FIELDS: tuple[tuple[InpatientField, InpatientField, InpatientField], ...] = tuple(
    (
        InpatientField[f"ICD_PRCDR_CD{i}"],
        InpatientField[f"ICD_PRCDR_VRSN_CD{i}"],
        InpatientField[f"PRCDR_DT{i}"],
    )
    for i in range(1, PROCEDURE_SLOTS + 1)
)

# Fields that differ between the rows of one claim
LINE_FIELDS: frozenset[InpatientField] = frozenset(
    InpatientField[name]
    for name in (
        "CLM_LINE_NUM",
        "REV_CNTR",
        "HCPCS_CD",
        "REV_CNTR_UNIT_CNT",
        "REV_CNTR_RATE_AMT",
        "REV_CNTR_TOT_CHRG_AMT",
        "REV_CNTR_NCVRD_CHRG_AMT",
        "REV_CNTR_DDCTBL_COINSRNC_CD",
        "REV_CNTR_NDC_QTY",
        "REV_CNTR_NDC_QTY_QLFR_CD",
    )
)

REQUIRED_FIELDS: frozenset[InpatientField] = frozenset(
    InpatientField[name]
    for name in (
        "BENE_ID",
        "CLM_ID",
        "CLM_GRP_ID",
        "FI_DOC_CLM_CNTL_NUM",
        "CLM_FROM_DT",
        "CLM_THRU_DT",
        "CLM_ADMSN_DT",
        "NCH_BENE_DSCHRG_DT",
        "NCH_WKLY_PROC_DT",
        "PRVDR_NUM",
        "ORG_NPI_NUM",
        "AT_PHYSN_NPI",
        "OP_PHYSN_NPI",
        "CLM_PMT_AMT",
        "NCH_PRMRY_PYR_CLM_PD_AMT",
        "PTNT_DSCHRG_STUS_CD",
        "NCH_PTNT_STATUS_IND_CD",
        "CLM_TOT_CHRG_AMT",
        "CLM_IP_ADMSN_TYPE_CD",
        "NCH_BENE_IP_DDCTBL_AMT",
        "NCH_BENE_PTA_COINSRNC_LBLTY_AM",
        "NCH_IP_NCVRD_CHRG_AMT",
        "NCH_IP_TOT_DDCTN_AMT",
        "CLM_UTLZTN_DAY_CNT",
        "BENE_TOT_COINSRNC_DAYS_CNT",
        "CLM_DRG_OUTLIER_STAY_CD",
        "CLM_LINE_NUM",
        "HCPCS_CD",
        "REV_CNTR_TOT_CHRG_AMT",
        "REV_CNTR_NCVRD_CHRG_AMT",
    )
)


class InpatientRecord:
    """
    Field values of one inpatient row, keyed by ``InpatientField``.

    Only layout fields can be stored. ``set_by_name`` is the one entry
    point that accepts plain strings and exists for static defaults
    loaded from configuration files.
    """

    def __init__(self, values: Optional[dict[InpatientField, str]] = None):
        self._values: dict[InpatientField, str] = {}
        for field, value in (values or {}).items():
            self.set(field, value)

    def set(self, field: InpatientField, value: Optional[str]) -> None:
        """Set a field; ``None`` removes it."""
        if not isinstance(field, InpatientField):
            raise UnknownFieldError(str(field))
        if value is None:
            self._values.pop(field, None)
        else:
            self._values[field] = str(value)

    def set_by_name(self, name: str, value: str) -> None:
        """Set a field from its layout name."""
        try:
            field = InpatientField[name.strip()]
        except KeyError:
            raise UnknownFieldError(name) from None
        self.set(field, value)

    def get(self, field: InpatientField, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(field, default)

    def remove(self, field: InpatientField) -> None:
        self._values.pop(field, None)

    def copy(self) -> "InpatientRecord":
        clone = InpatientRecord()
        clone._values = dict(self._values)
        return clone

    def __contains__(self, field: object) -> bool:
        return field in self._values

    def __getitem__(self, field: InpatientField) -> str:
        return self._values[field]

    def __iter__(self) -> Iterator[InpatientField]:
        return (f for f in InpatientField if f in self._values)

    def __len__(self) -> int:
        return len(self._values)

    def missing_required(self) -> list[str]:
        """Names of required fields that have no value, in layout order."""
        return [f.value for f in InpatientField if f in REQUIRED_FIELDS and not self._values.get(f)]

    def require_complete(self) -> None:
        """Raise if any required field is missing."""
        missing = self.missing_required()
        if missing:
            raise MissingRequiredFieldError(missing, claim_id=self._values.get(InpatientField.CLM_ID))

    def to_row(self) -> dict[str, str]:
        """Render the record as an ordered ``{field name: value}`` row."""
        return {f.value: self._values.get(f, "") for f in InpatientField}

    def __repr__(self) -> str:
        return f"InpatientRecord({len(self._values)} fields)"
