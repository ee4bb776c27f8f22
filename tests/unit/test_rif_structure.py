"""
Unit Tests for the RIF Inpatient Record Layout
"""

import pytest

from src.services.rif.structure import (
    DIAGNOSIS_FIELDS,
    EXTERNAL_CAUSE_FIELDS,
    LINE_FIELDS,
    PROCEDURE_FIELDS,
    REQUIRED_FIELDS,
    InpatientField,
    InpatientRecord,
)
from src.utils.errors import MissingRequiredFieldError, UnknownFieldError

F = InpatientField


@pytest.mark.unit
class TestLayout:
    """Test the field enumeration"""

    def test_slot_groups(self):
        assert len(DIAGNOSIS_FIELDS) == 25
        assert len(EXTERNAL_CAUSE_FIELDS) == 12
        assert len(PROCEDURE_FIELDS) == 25
        assert DIAGNOSIS_FIELDS[0] == (F.ICD_DGNS_CD1, F.ICD_DGNS_VRSN_CD1, F.CLM_POA_IND_SW1)
        assert PROCEDURE_FIELDS[-1] == (F.ICD_PRCDR_CD25, F.ICD_PRCDR_VRSN_CD25, F.PRCDR_DT25)

    def test_field_values_are_names(self):
        assert all(f.value == f.name for f in InpatientField)
        assert F.BENE_ID == "BENE_ID"

    def test_line_fields_follow_claim_fields(self):
        names = [f.name for f in InpatientField]
        assert names.index("CLM_LINE_NUM") > names.index("FI_DOC_CLM_CNTL_NUM")
        assert F.HCPCS_CD in LINE_FIELDS
        assert F.CLM_ID not in LINE_FIELDS

    def test_required_fields(self):
        assert F.CLM_ID in REQUIRED_FIELDS
        assert F.REV_CNTR not in REQUIRED_FIELDS


@pytest.mark.unit
class TestInpatientRecord:
    """Test record access"""

    def test_set_and_get(self):
        record = InpatientRecord()
        record.set(F.CLM_ID, "-1")

        assert record[F.CLM_ID] == "-1"
        assert record.get(F.CLM_GRP_ID) is None
        assert F.CLM_ID in record
        assert len(record) == 1

    def test_set_none_removes(self):
        record = InpatientRecord({F.REV_CNTR: "0450"})
        record.set(F.REV_CNTR, None)
        assert F.REV_CNTR not in record

    def test_set_by_name(self):
        record = InpatientRecord()
        record.set_by_name(" NCH_CLM_TYPE_CD ", "60")
        assert record[F.NCH_CLM_TYPE_CD] == "60"

    def test_unknown_field_name(self):
        with pytest.raises(UnknownFieldError) as exc_info:
            InpatientRecord().set_by_name("NOT_A_FIELD", "x")
        assert str(exc_info.value) == "Unknown field: NOT_A_FIELD"
        assert isinstance(exc_info.value, KeyError)

    def test_plain_strings_rejected_by_set(self):
        with pytest.raises(UnknownFieldError):
            InpatientRecord().set("CLM_ID", "-1")

    def test_copy_is_independent(self):
        record = InpatientRecord({F.CLM_ID: "-1"})
        clone = record.copy()
        clone.set(F.CLM_LINE_NUM, "1")

        assert F.CLM_LINE_NUM not in record
        assert clone[F.CLM_ID] == "-1"

    def test_iteration_in_layout_order(self):
        record = InpatientRecord({F.HCPCS_CD: "99221", F.BENE_ID: "-1", F.CLM_ID: "-2"})
        assert list(record) == [F.BENE_ID, F.CLM_ID, F.HCPCS_CD]

    def test_to_row(self):
        row = InpatientRecord({F.CLM_ID: "-1"}).to_row()

        assert list(row) == [f.value for f in InpatientField]
        assert row["CLM_ID"] == "-1"
        assert row["BENE_ID"] == ""

    def test_missing_required(self):
        record = InpatientRecord({f: "x" for f in REQUIRED_FIELDS})
        assert record.missing_required() == []
        record.remove(F.HCPCS_CD)
        record.set(F.CLM_ID, "")

        assert record.missing_required() == ["CLM_ID", "HCPCS_CD"]
        with pytest.raises(MissingRequiredFieldError, match="missing required fields: CLM_ID, HCPCS_CD"):
            record.require_complete()
