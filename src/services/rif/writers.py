"""
RIF Record Writers.

The record sink is an append-only, named-table writer. ``RecordWriters``
wraps a sink with one lock per record type so that all rows of a claim are
written without rows of another claim in between.
"""

import asyncio
import csv
import threading
from collections import defaultdict
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Optional, Protocol, Union

from src.core.enums import RecordType
from src.services.rif.structure import InpatientField, InpatientRecord
from src.utils.errors import RecordWriteError
from src.utils.logging import get_logger

logger = get_logger(__name__)

RECORD_FIELDS: dict[RecordType, list[str]] = {
    RecordType.INPATIENT: [f.value for f in InpatientField],
}


class RecordSink(Protocol):
    """Durable storage for exported rows."""

    def get_writer(self, record_type: RecordType) -> Any: ...

    def write_row(self, record_type: RecordType, row: dict[str, str]) -> None: ...

    def flush(self) -> None: ...

    def close(self) -> None: ...


class InMemoryRecordSink:
    """Keeps rows in memory, grouped by record type."""

    def __init__(self) -> None:
        self.rows: dict[RecordType, list[dict[str, str]]] = defaultdict(list)

    def get_writer(self, record_type: RecordType) -> list[dict[str, str]]:
        return self.rows[record_type]

    def write_row(self, record_type: RecordType, row: dict[str, str]) -> None:
        self.get_writer(record_type).append(dict(row))

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


class DelimitedFileSink:
    """
    Writes one delimited text file per record type.

    Each file starts with a header line of field names in layout order.
    """

    def __init__(self, output_dir: Union[str, Path], delimiter: str = "|"):
        self.output_dir = Path(output_dir)
        self.delimiter = delimiter
        self._writers: dict[RecordType, tuple[Any, csv.DictWriter]] = {}
        self._open_lock = threading.Lock()
        self._closed = False

    def get_writer(self, record_type: RecordType) -> csv.DictWriter:
        with self._open_lock:
            if self._closed:
                raise ValueError(f"Output sink {self.output_dir} is closed")
            if record_type not in self._writers:
                self.output_dir.mkdir(parents=True, exist_ok=True)
                path = self.output_dir / f"{record_type.value}.csv"
                handle = path.open("w", encoding="utf-8", newline="")
                writer = csv.DictWriter(
                    handle,
                    fieldnames=RECORD_FIELDS[record_type],
                    delimiter=self.delimiter,
                    extrasaction="raise",
                )
                writer.writeheader()
                self._writers[record_type] = (handle, writer)
                logger.info(f"Opened {record_type.value} output: {path}")
            return self._writers[record_type][1]

    def write_row(self, record_type: RecordType, row: dict[str, str]) -> None:
        self.get_writer(record_type).writerow(row)

    def flush(self) -> None:
        with self._open_lock:
            for handle, _ in self._writers.values():
                handle.flush()

    def close(self) -> None:
        with self._open_lock:
            for handle, _ in self._writers.values():
                handle.close()
            self._writers.clear()
            self._closed = True

    def __enter__(self) -> "DelimitedFileSink":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class RecordWriters:
    """Record sink access with claim-scoped critical sections."""

    def __init__(self, sink: RecordSink):
        self.sink = sink
        self._locks: dict[RecordType, asyncio.Lock] = {}

    def _lock_for(self, record_type: RecordType) -> asyncio.Lock:
        lock = self._locks.get(record_type)
        if lock is None:
            lock = self._locks.setdefault(record_type, asyncio.Lock())
        return lock

    @asynccontextmanager
    async def claim_section(self, record_type: RecordType) -> AsyncIterator["ClaimWriter"]:
        """
        Hold the record type's lock while one claim's rows are written.

        The sink is flushed before the lock is released, so a claim counted
        as written is on durable storage.
        """
        self.sink.get_writer(record_type)
        async with self._lock_for(record_type):
            yield ClaimWriter(self.sink, record_type)
            self._flush(record_type)

    def _flush(self, record_type: Optional[RecordType] = None) -> None:
        try:
            self.sink.flush()
        except Exception as e:
            raise RecordWriteError(
                f"Failed to flush rows: {e}",
                record_type=record_type.value if record_type else None,
            ) from e

    def flush(self) -> None:
        self._flush()

    def close(self) -> None:
        """Flush and release the sink."""
        self._flush()
        self.sink.close()


class ClaimWriter:
    """Writes rows for one claim inside a claim section."""

    def __init__(self, sink: RecordSink, record_type: RecordType):
        self._sink = sink
        self._record_type = record_type
        self.rows_written = 0

    def write(self, record: InpatientRecord) -> None:
        try:
            self._sink.write_row(self._record_type, record.to_row())
        except Exception as e:
            claim_id: Optional[str] = record.get(InpatientField.CLM_ID)
            raise RecordWriteError(
                f"Failed to write row: {e}",
                record_type=self._record_type.value,
                claim_id=claim_id,
            ) from e
        self.rows_written += 1
