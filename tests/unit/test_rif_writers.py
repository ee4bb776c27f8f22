"""
Unit Tests for RIF Record Writers
Tests sinks and claim-scoped write sections
"""

import asyncio
import csv
from unittest.mock import MagicMock

import pytest

from src.core.enums import RecordType
from src.services.rif.structure import InpatientField as F
from src.services.rif.structure import InpatientRecord
from src.services.rif.writers import DelimitedFileSink, InMemoryRecordSink, RecordWriters
from src.utils.errors import RecordWriteError


def claim_rows(claim_id, count):
    return [InpatientRecord({F.CLM_ID: claim_id, F.CLM_LINE_NUM: str(i)}) for i in range(1, count + 1)]


@pytest.mark.unit
class TestSinks:
    """Test record sinks"""

    def test_in_memory_sink(self):
        sink = InMemoryRecordSink()
        sink.write_row(RecordType.INPATIENT, {"CLM_ID": "-1"})
        assert sink.rows[RecordType.INPATIENT] == [{"CLM_ID": "-1"}]

    def test_delimited_file_sink(self, tmp_path):
        sink = DelimitedFileSink(tmp_path / "bfd", delimiter="\t")
        sink.write_row(RecordType.INPATIENT, InpatientRecord({F.CLM_ID: "-1"}).to_row())
        sink.flush()
        sink.close()

        with (tmp_path / "bfd" / "inpatient.csv").open(newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f, delimiter="\t"))

        assert len(rows) == 1
        assert rows[0]["CLM_ID"] == "-1"
        assert rows[0]["BENE_ID"] == ""

    def test_header_written_once(self, tmp_path):
        sink = DelimitedFileSink(tmp_path)
        for _ in range(3):
            sink.write_row(RecordType.INPATIENT, InpatientRecord().to_row())
        sink.close()

        lines = (tmp_path / "inpatient.csv").read_text(encoding="utf-8").splitlines()
        assert len(lines) == 4
        assert lines[0].startswith("DML_IND|BENE_ID|CLM_ID|")

    def test_unknown_column_rejected(self, tmp_path):
        sink = DelimitedFileSink(tmp_path)
        with pytest.raises(ValueError):
            sink.write_row(RecordType.INPATIENT, {"NOT_A_FIELD": "x"})
        sink.close()


@pytest.mark.unit
class TestClaimSections:
    """Test claim-scoped writes"""

    @pytest.mark.asyncio
    async def test_rows_written_counter(self, writers, sink):
        async with writers.claim_section(RecordType.INPATIENT) as writer:
            for row in claim_rows("-1", 3):
                writer.write(row)

        assert writer.rows_written == 3
        assert len(sink.rows[RecordType.INPATIENT]) == 3

    @pytest.mark.asyncio
    async def test_sections_do_not_interleave(self):
        """Tasks that yield mid-claim still keep their rows together"""
        sink = InMemoryRecordSink()
        writers = RecordWriters(sink)

        async def write_claim(claim_id):
            async with writers.claim_section(RecordType.INPATIENT) as writer:
                for row in claim_rows(claim_id, 4):
                    writer.write(row)
                    await asyncio.sleep(0)

        await asyncio.gather(*[write_claim(str(-i)) for i in range(1, 11)])

        rows = sink.rows[RecordType.INPATIENT]
        assert len(rows) == 40
        for start in range(0, 40, 4):
            group = rows[start : start + 4]
            assert len({r["CLM_ID"] for r in group}) == 1
            assert [r["CLM_LINE_NUM"] for r in group] == ["1", "2", "3", "4"]


@pytest.mark.unit
class TestDurability:
    """Test flushing and closing of file output"""

    @pytest.mark.asyncio
    async def test_claim_on_disk_after_section(self, tmp_path):
        sink = DelimitedFileSink(tmp_path)
        writers = RecordWriters(sink)

        async with writers.claim_section(RecordType.INPATIENT) as writer:
            for row in claim_rows("-1", 2):
                writer.write(row)

        lines = (tmp_path / "inpatient.csv").read_text(encoding="utf-8").splitlines()
        assert len(lines) == 3
        writers.close()

    def test_closed_sink_rejects_writes(self, tmp_path):
        with DelimitedFileSink(tmp_path) as sink:
            sink.write_row(RecordType.INPATIENT, InpatientRecord().to_row())

        assert len((tmp_path / "inpatient.csv").read_text(encoding="utf-8").splitlines()) == 2
        with pytest.raises(ValueError, match="closed"):
            sink.write_row(RecordType.INPATIENT, InpatientRecord().to_row())

    @pytest.mark.asyncio
    async def test_flush_failure_raises_record_write_error(self):
        sink = MagicMock()
        sink.flush.side_effect = OSError("disk full")
        writers = RecordWriters(sink)

        with pytest.raises(RecordWriteError, match="disk full"):
            async with writers.claim_section(RecordType.INPATIENT) as writer:
                writer.write(InpatientRecord({F.CLM_ID: "-1"}))

    def test_close_flushes_then_closes(self):
        sink = MagicMock()
        RecordWriters(sink).close()

        assert [c[0] for c in sink.method_calls] == ["flush", "close"]
