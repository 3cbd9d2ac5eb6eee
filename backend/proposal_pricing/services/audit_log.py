"""
Calculation audit log.

Bounded, in-memory record of pricing calculations. Oldest entries are
evicted once ``settings.audit_log_max_entries`` is reached. Entries are
kept in completion order; queries return them newest first.

Example:
    from proposal_pricing.services.audit_log import get_audit_log

    log = get_audit_log()
    recent = log.get_entries(AuditLogFilter(limit=10, include_errors=False))
"""

import threading
from collections import deque
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from proposal_pricing.core.config import settings
from proposal_pricing.core.logging import get_logger
from proposal_pricing.schemas.audit import AuditLogFilter, CalculationAuditLogEntry, CalculationStatistics

logger = get_logger(__name__)


class CalculationAuditLog:
    """
    Size-bounded append-only log of calculation entries.

    The deque bound handles eviction; the lock guards snapshots and
    clearing so readers never iterate a deque that is being mutated.
    """

    def __init__(self, max_entries: Optional[int] = None) -> None:
        self.max_entries = max_entries or settings.audit_log_max_entries
        self._entries: deque[CalculationAuditLogEntry] = deque(maxlen=self.max_entries)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: CalculationAuditLogEntry) -> None:
        with self._lock:
            self._entries.append(entry)
        logger.debug(
            f"Audit entry {entry.calculation_id} ({entry.calculation_method}, "
            f"{entry.execution_time:.2f} ms, errors={entry.error_occurred})"
        )

    def _snapshot(self) -> list[CalculationAuditLogEntry]:
        with self._lock:
            return list(self._entries)

    def get_entries(self, filter: Optional[AuditLogFilter] = None) -> list[CalculationAuditLogEntry]:
        """
        Return entries newest first.

        Args:
            filter: include_errors / since / calculation_id narrow the
                selection; limit caps it (settings default when unset).
        """
        criteria = filter or AuditLogFilter()
        limit = criteria.limit or settings.audit_log_default_limit

        selected: list[CalculationAuditLogEntry] = []
        for entry in reversed(self._snapshot()):
            if not criteria.include_errors and entry.error_occurred:
                continue
            if criteria.since is not None and entry.timestamp < criteria.since:
                continue
            if criteria.calculation_id is not None and entry.calculation_id != criteria.calculation_id:
                continue
            selected.append(entry)
            if len(selected) >= limit:
                break
        return selected

    def statistics(self) -> CalculationStatistics:
        entries = self._snapshot()
        total = len(entries)
        if total == 0:
            return CalculationStatistics()

        return CalculationStatistics(
            total_calculations=total,
            average_execution_time=sum(e.execution_time for e in entries) / total,
            risk_assessment_usage_rate=sum(1 for e in entries if e.risk_assessment_used) / total,
            fallback_usage_rate=sum(1 for e in entries if e.fallback_used) / total,
            error_rate=sum(1 for e in entries if e.error_occurred) / total,
        )

    def clear_all(self) -> int:
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        logger.info(f"Cleared {removed} audit log entries")
        return removed

    def clear_older_than(self, days: Optional[int] = None) -> int:
        """Drop entries older than ``days`` (settings retention by default)."""
        retention = settings.audit_log_retention_days if days is None else days
        cutoff = datetime.now(timezone.utc) - timedelta(days=retention)
        with self._lock:
            kept = [e for e in self._entries if e.timestamp >= cutoff]
            removed = len(self._entries) - len(kept)
            self._entries.clear()
            self._entries.extend(kept)
        if removed:
            logger.info(f"Removed {removed} audit log entries older than {retention} days")
        return removed


@lru_cache(maxsize=1)
def get_audit_log() -> CalculationAuditLog:
    """Default shared audit log for convenience call sites."""
    return CalculationAuditLog()
