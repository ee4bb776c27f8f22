"""
Claim Identifier Issuer.

Process-wide decreasing counters for claim ids, claim group ids and FI
document control numbers. One issuer is shared by every concurrent export
task; values are never reused, and a dropped claim simply leaves a gap.
"""

import threading
from dataclasses import dataclass
from typing import Optional

from src.core.config import ExportSettings, get_export_settings


class AtomicCounter:
    """Integer counter with atomic decrement-and-return."""

    def __init__(self, start: int):
        self._next = start
        self._lock = threading.Lock()

    def get_and_decrement(self) -> int:
        with self._lock:
            value = self._next
            self._next -= 1
            return value

    def peek(self) -> int:
        with self._lock:
            return self._next


@dataclass(frozen=True)
class ClaimIdentifiers:
    """Identifiers allocated for one claim."""

    claim_id: int
    claim_group_id: int
    fi_doc_cntl_num: int


class IdentifierIssuer:
    """Issues identifier triples for exported claims."""

    def __init__(
        self,
        claim_id_start: int = -1,
        claim_group_id_start: int = -1,
        fi_doc_cntl_num_start: int = -1,
    ):
        self._claim_ids = AtomicCounter(claim_id_start)
        self._claim_group_ids = AtomicCounter(claim_group_id_start)
        self._fi_doc_cntl_nums = AtomicCounter(fi_doc_cntl_num_start)

    @classmethod
    def from_settings(cls, settings: Optional[ExportSettings] = None) -> "IdentifierIssuer":
        settings = settings or get_export_settings()
        return cls(
            claim_id_start=settings.CLAIM_ID_START,
            claim_group_id_start=settings.CLAIM_GROUP_ID_START,
            fi_doc_cntl_num_start=settings.FI_DOC_CNTL_NUM_START,
        )

    def next_claim_id(self) -> int:
        return self._claim_ids.get_and_decrement()

    def next_claim_group_id(self) -> int:
        return self._claim_group_ids.get_and_decrement()

    def next_fi_doc_cntl_num(self) -> int:
        return self._fi_doc_cntl_nums.get_and_decrement()

    def allocate(self) -> ClaimIdentifiers:
        """Allocate one value from each counter."""
        return ClaimIdentifiers(
            claim_id=self.next_claim_id(),
            claim_group_id=self.next_claim_group_id(),
            fi_doc_cntl_num=self.next_fi_doc_cntl_num(),
        )


# =============================================================================
# Factory Functions
# =============================================================================


_identifier_issuer: Optional[IdentifierIssuer] = None


def get_identifier_issuer() -> IdentifierIssuer:
    """Get the run-wide IdentifierIssuer instance."""
    global _identifier_issuer
    if _identifier_issuer is None:
        _identifier_issuer = IdentifierIssuer.from_settings()
    return _identifier_issuer


def create_identifier_issuer(settings: Optional[ExportSettings] = None) -> IdentifierIssuer:
    """Create an isolated IdentifierIssuer instance."""
    return IdentifierIssuer.from_settings(settings)
