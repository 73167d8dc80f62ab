"""
Audit logger - append-only, in-process ledger of gated tool calls.

Entries are frozen on log and never removed. flush() hands the buffered
entries to a durable-storage collaborator and moves them to a retained
set that still answers queries.

The ledger keeps private copies: every entry handed out (by log, flush or
get_entries) is a fresh deep copy, so changing a nested payload on a
returned entry never reaches the stored record.
"""

import logging
import threading
from dataclasses import dataclass

from ..models import AuditEntry, AuditStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditFilter:
    """
    Query filter for audit entries. All set fields are ANDed.

    Attributes:
        agent_id: Only entries from this agent.
        tenant_id: Only entries for this tenant.
        workflow_id: Only entries correlated with this workflow.
        status: Only entries with this status.
    """

    agent_id: str | None = None
    tenant_id: str | None = None
    workflow_id: str | None = None
    status: AuditStatus | None = None

    def matches(self, entry: AuditEntry) -> bool:
        """
        Check whether an entry passes every set filter.

        Args:
            entry: Audit entry to test.

        Returns:
            True if the entry matches.
        """
        if self.agent_id is not None and entry.agent_id != self.agent_id:
            return False
        if self.tenant_id is not None and entry.tenant_id != self.tenant_id:
            return False
        if self.workflow_id is not None and entry.workflow_id != self.workflow_id:
            return False
        if self.status is not None and entry.status != self.status:
            return False
        return True


class AuditLogger:
    """
    Thread-safe append-only audit ledger.

    Usage:
        audit = AuditLogger(buffer_limit=500)
        audit.log(entry)
        if audit.should_flush():
            export(audit.flush())
    """

    def __init__(self, buffer_limit: int = 1000) -> None:
        """
        Initialize audit logger.

        Args:
            buffer_limit: Buffer size at which should_flush() turns true.
        """
        self._buffer: list[AuditEntry] = []
        self._retained: list[AuditEntry] = []
        self._buffer_limit = buffer_limit
        self._lock = threading.Lock()

    @property
    def buffer_limit(self) -> int:
        """Get the buffer size that triggers should_flush()."""
        return self._buffer_limit

    def log(self, entry: AuditEntry) -> AuditEntry:
        """
        Freeze and append an entry.

        The stored entry is a deep copy, so later changes made through the
        caller's reference (including to nested payloads) never reach the
        ledger.

        Args:
            entry: Entry to append.

        Returns:
            A copy of the stored entry.
        """
        frozen = entry.model_copy(deep=True)
        with self._lock:
            self._buffer.append(frozen)
        logger.debug(
            f"📝 Audit {frozen.status.value}: agent={frozen.agent_id} "
            f"tool={frozen.tool} tenant={frozen.tenant_id}"
        )
        return frozen.model_copy(deep=True)

    def flush(self) -> list[AuditEntry]:
        """
        Move buffered entries to the retained set.

        Returns:
            Entries that were buffered, in log order.
        """
        with self._lock:
            flushed = self._buffer
            self._buffer = []
            self._retained.extend(flushed)
        if flushed:
            logger.info(f"📝 Flushed {len(flushed)} audit entries")
        return [e.model_copy(deep=True) for e in flushed]

    def get_entries(self, filter: AuditFilter | None = None) -> list[AuditEntry]:
        """
        Get retained and buffered entries, oldest first.

        Args:
            filter: Optional filter; all set fields must match.

        Returns:
            Matching entries.
        """
        with self._lock:
            entries = self._retained + self._buffer
        return [
            e.model_copy(deep=True)
            for e in entries
            if filter is None or filter.matches(e)
        ]

    def get_buffer_size(self) -> int:
        """Get the number of entries not yet flushed."""
        with self._lock:
            return len(self._buffer)

    def get_total_entries(self) -> int:
        """Get the number of entries logged since construction."""
        with self._lock:
            return len(self._retained) + len(self._buffer)

    def should_flush(self) -> bool:
        """Check whether the buffer has reached its limit."""
        return self.get_buffer_size() >= self._buffer_limit
