"""
Unit Tests for Claim Line Rows
Tests revenue center line fan-out, amounts and claim section writes
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from factories import UNMAPPED, medication_item, procedure_item
from src.core.enums import DeductibleCoinsuranceCode, EncounterType, RecordType
from src.services.rif.claim_builder import ClaimRecordBuilder
from src.services.rif.encounter_filter import AdmissionHistory
from src.services.rif.line_items import LineItemEmitter, deductible_coinsurance_code
from src.services.rif.structure import InpatientField as F
from src.services.rif.writers import RecordWriters
from src.utils.errors import MissingRequiredFieldError, RecordWriteError


def failing_sink():
    """Sink whose appends always fail."""
    sink = MagicMock()
    sink.write_row.side_effect = OSError("disk full")
    return sink


@pytest.fixture
def emitter(mappers):
    return LineItemEmitter(mappers.hcpcs)


@pytest.fixture
def build_header(issuer, settings):
    builder = ClaimRecordBuilder(issuer, settings=settings)

    def _build(patient, encounter, history=None):
        return builder.build_header(patient, encounter, history or AdmissionHistory())

    return _build


@pytest.mark.unit
class TestDeductibleCoinsuranceCode:
    """Test line liability classification"""

    @pytest.mark.parametrize(
        "out_of_pocket,deductible,expected",
        [
            ("0", "0", DeductibleCoinsuranceCode.NOT_SUBJECT_TO_EITHER),
            ("10", "5", DeductibleCoinsuranceCode.SUBJECT_TO_BOTH),
            ("0", "5", DeductibleCoinsuranceCode.NOT_SUBJECT_TO_DEDUCTIBLE),
            ("10", "0", DeductibleCoinsuranceCode.NOT_SUBJECT_TO_COINSURANCE),
        ],
    )
    def test_code_grid(self, out_of_pocket, deductible, expected):
        assert deductible_coinsurance_code(Decimal(out_of_pocket), Decimal(deductible)) == expected


@pytest.mark.unit
class TestBuildLines:
    """Test line row computation"""

    def test_procedure_line_amounts(self, emitter, build_header, make_patient, make_encounter):
        encounter = make_encounter(days=70, items=[procedure_item(cost="7000.00", out_of_pocket="50.00")])
        patient = make_patient()

        rows = emitter.build_lines(patient, build_header(patient, encounter))

        assert len(rows) == 1
        row = rows[0]
        assert row[F.CLM_LINE_NUM] == "1"
        assert row[F.HCPCS_CD] == "44970"
        assert row[F.REV_CNTR_UNIT_CNT] == "70"
        assert row[F.REV_CNTR_RATE_AMT] == "100.00"
        assert row[F.REV_CNTR_TOT_CHRG_AMT] == "7000.00"
        assert row[F.REV_CNTR_NCVRD_CHRG_AMT] == "50.00"
        assert row[F.REV_CNTR_DDCTBL_COINSRNC_CD] == "2"

    def test_same_day_stay_bills_one_unit(self, emitter, build_header, make_patient, make_encounter):
        encounter = make_encounter(days=0, items=[procedure_item(cost="1234.56")])
        patient = make_patient()

        row = emitter.build_lines(patient, build_header(patient, encounter))[0]

        assert row[F.REV_CNTR_UNIT_CNT] == "1"
        assert row[F.REV_CNTR_RATE_AMT] == "1234.56"

    def test_non_covered_amount_sums_patient_costs(self, emitter, build_header, make_patient, make_encounter):
        item = procedure_item(cost="500.00", copay="10.00", deductible="20.00", out_of_pocket="30.00")
        patient = make_patient()

        row = emitter.build_lines(patient, build_header(patient, make_encounter(items=[item])))[0]

        assert row[F.REV_CNTR_NCVRD_CHRG_AMT] == "60.00"
        assert row[F.REV_CNTR_DDCTBL_COINSRNC_CD] == "0"

    def test_rows_share_header_fields(self, emitter, build_header, make_patient, make_encounter):
        patient = make_patient()
        header = build_header(patient, make_encounter(items=[procedure_item(), procedure_item()]))

        rows = emitter.build_lines(patient, header)

        assert [r[F.CLM_LINE_NUM] for r in rows] == ["1", "2"]
        assert {r[F.CLM_ID] for r in rows} == {header.claim_id}
        assert {r[F.CLM_THRU_DT] for r in rows} == {"20200109"}

    def test_medication_administration_line(self, emitter, build_header, make_patient, make_encounter):
        """Pharmacy values apply to the medication row only"""
        encounter = make_encounter(
            type=EncounterType.EMERGENCY,
            items=[procedure_item(), medication_item(cost="50.00"), procedure_item()],
        )
        patient = make_patient()

        rows = emitter.build_lines(patient, build_header(patient, encounter))

        assert [r[F.HCPCS_CD] for r in rows] == ["44970", "T1502", "44970"]
        assert [r[F.REV_CNTR] for r in rows] == ["0450", "0250", "0450"]
        assert rows[1][F.REV_CNTR_NDC_QTY] == "1"
        assert rows[1][F.REV_CNTR_NDC_QTY_QLFR_CD] == "UN"
        assert F.REV_CNTR_NDC_QTY not in rows[0]
        assert F.REV_CNTR_NDC_QTY not in rows[2]

    def test_prescriptions_are_not_lines(self, emitter, build_header, make_patient, make_encounter):
        encounter = make_encounter(items=[medication_item(administration=False), procedure_item()])
        patient = make_patient()

        rows = emitter.build_lines(patient, build_header(patient, encounter))

        assert [r[F.HCPCS_CD] for r in rows] == ["44970"]
        assert rows[0][F.CLM_LINE_NUM] == "1"

    def test_fallback_line_when_nothing_billable(self, emitter, build_header, make_patient, make_encounter):
        encounter = make_encounter(items=[procedure_item(codes=[UNMAPPED]), medication_item(administration=False)])
        patient = make_patient()
        header = build_header(patient, encounter)

        rows = emitter.build_lines(patient, header)

        assert len(rows) == 1
        assert rows[0][F.CLM_LINE_NUM] == "1"
        assert rows[0][F.HCPCS_CD] == "99221"
        assert rows[0][F.REV_CNTR_TOT_CHRG_AMT] == header.record[F.REV_CNTR_TOT_CHRG_AMT]
        assert rows[0].to_row()["REV_CNTR"] == ""

    def test_header_is_not_modified(self, emitter, build_header, make_patient, make_encounter):
        patient = make_patient()
        header = build_header(patient, make_encounter())

        emitter.build_lines(patient, header)

        assert F.CLM_LINE_NUM not in header.record
        assert F.HCPCS_CD not in header.record

    def test_incomplete_row_raises(self, emitter, build_header, make_patient, make_encounter):
        patient = make_patient()
        header = build_header(patient, make_encounter())
        header.record.remove(F.BENE_ID)

        with pytest.raises(MissingRequiredFieldError) as exc_info:
            emitter.build_lines(patient, header)

        assert exc_info.value.missing == ["BENE_ID"]
        assert exc_info.value.claim_id == "-1"


@pytest.mark.unit
class TestEmit:
    """Test writing a claim's rows"""

    @pytest.mark.asyncio
    async def test_emit_writes_all_rows(self, emitter, build_header, writers, sink, make_patient, make_encounter):
        patient = make_patient()
        rows = emitter.build_lines(patient, build_header(patient, make_encounter(items=[procedure_item()] * 3)))

        written = await emitter.emit(writers, rows)

        assert written == 3
        stored = sink.rows[RecordType.INPATIENT]
        assert [r["CLM_LINE_NUM"] for r in stored] == ["1", "2", "3"]

    @pytest.mark.asyncio
    async def test_sink_failure_raises_record_write_error(self, emitter, build_header, make_patient, make_encounter):
        patient = make_patient()
        rows = emitter.build_lines(patient, build_header(patient, make_encounter()))

        with pytest.raises(RecordWriteError) as exc_info:
            await emitter.emit(RecordWriters(failing_sink()), rows)

        assert exc_info.value.claim_id == "-1"
        assert exc_info.value.record_type == "inpatient"
        assert "disk full" in str(exc_info.value)
