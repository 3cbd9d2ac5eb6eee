"""
Market Analysis - Historical Data Source

Boundary protocol for the historical market data collaborator and an
append-only in-memory implementation.

Author: Pricing Engine Team
"""

from datetime import date
from typing import Iterable, List, Optional, Protocol, Tuple, runtime_checkable

from .definition import MarketDataRecord


@runtime_checkable
class HistoricalMarketDataSource(Protocol):
    """Returns immutable snapshots of market records."""

    async def fetch_records(
        self,
        region: Optional[str] = None,
        project_type: Optional[str] = None,
        since: Optional[date] = None,
    ) -> Tuple[MarketDataRecord, ...]:
        ...


class InMemoryMarketDataSource:
    """
    Append-only record store.

    Usage:
        source = InMemoryMarketDataSource()
        source.add(MarketDataRecord(region="West", value=62.0, effective_date=date.today()))
        records = await source.fetch_records(region="west")
    """

    def __init__(self, records: Optional[Iterable[MarketDataRecord]] = None):
        self._records: List[MarketDataRecord] = list(records or [])

    def add(self, record: MarketDataRecord) -> None:
        self._records.append(record)

    def extend(self, records: Iterable[MarketDataRecord]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:
        return len(self._records)

    async def fetch_records(
        self,
        region: Optional[str] = None,
        project_type: Optional[str] = None,
        since: Optional[date] = None,
    ) -> Tuple[MarketDataRecord, ...]:
        """Filter case-insensitively by region and project type, and by date."""
        wanted_region = region.strip().lower() if region else None
        wanted_type = project_type.strip().lower() if project_type else None
        return tuple(
            r
            for r in self._records
            if (wanted_region is None or r.region.lower() == wanted_region)
            and (wanted_type is None or (r.project_type or "").lower() == wanted_type)
            and (since is None or r.effective_date >= since)
        )
