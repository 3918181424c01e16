"""
APR data types

Event history records and the breakdown produced from them. Fee and cost
basis figures are integers in quote smallest units; APRs and day counts
are floats.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple, Union

TimestampLike = Union[datetime, int, float, str]


class EventType(str, Enum):
    """Position ledger event types"""
    INCREASE = "INCREASE"
    DECREASE = "DECREASE"
    COLLECT = "COLLECT"


def parse_timestamp(value: TimestampLike) -> datetime:
    """Timestamp -> timezone-aware UTC datetime

    Accepts datetimes (naive ones are taken as UTC), unix seconds, and
    ISO 8601 strings.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, bool):
        raise ValueError(f"invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return datetime.fromtimestamp(int(text), tz=timezone.utc)
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise ValueError(f"invalid timestamp: {value!r}")


def _get(data: dict, *keys, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class PositionEvent:
    """Ledger event of a position

    - cost_basis_after: position cost basis once this event is applied
    - fee_value_in_quote: collected fees valued in quote (COLLECT only)
    """
    event_id: str
    event_type: EventType
    timestamp: datetime
    cost_basis_after: int
    amount0: int = 0
    amount1: int = 0
    fee_value_in_quote: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "PositionEvent":
        """Parse an event; big integers may be decimal strings

        Raises:
            ValueError: unknown event type or malformed number / timestamp
        """
        return cls(
            event_id=str(_get(data, "event_id", "eventId", "id")),
            event_type=EventType(str(_get(data, "event_type", "eventType")).upper()),
            timestamp=parse_timestamp(_get(data, "timestamp", "blockTimestamp")),
            cost_basis_after=int(_get(data, "cost_basis_after", "costBasisAfter", default=0)),
            amount0=int(_get(data, "amount0", default=0)),
            amount1=int(_get(data, "amount1", default=0)),
            fee_value_in_quote=int(_get(data, "fee_value_in_quote", "feeValueInQuote", default=0)),
        )


@dataclass(frozen=True)
class CapitalPeriod:
    """Span between an event and the next one, at a constant cost basis

    end and duration_days are None for the open period of the latest event.
    """
    event_id: str
    start: datetime
    end: Optional[datetime]
    duration_days: Optional[float]
    cost_basis: int
    allocated_fees: int = 0
    period_apr: float = 0.0

    @property
    def is_closed(self) -> bool:
        return self.end is not None

    @property
    def weight(self) -> float:
        """cost basis * days, the fee distribution weight"""
        if self.duration_days is None:
            return 0.0
        return self.cost_basis * self.duration_days

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "start": self.start.isoformat(),
            "end": self.end.isoformat() if self.end else None,
            "duration_days": self.duration_days,
            "cost_basis": str(self.cost_basis),
            "allocated_fees": str(self.allocated_fees),
            "period_apr": self.period_apr,
        }


@dataclass(frozen=True)
class PnlBreakdown:
    """Realized / unrealized / total APR of a position

    unrealized_apr and unrealized_fees_unclaimed are None when the unclaimed
    fees are unknown.
    """
    realized_apr: float
    realized_fees_collected: int
    realized_tw_cost_basis: int
    realized_active_days: float

    unrealized_apr: Optional[float]
    unrealized_fees_unclaimed: Optional[int]
    unrealized_cost_basis: int
    unrealized_active_days: float

    total_apr: float
    total_active_days: float
    total_tw_cost_basis: int

    periods: Tuple[CapitalPeriod, ...] = ()
    calculated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "realized_apr": self.realized_apr,
            "realized_fees_collected": str(self.realized_fees_collected),
            "realized_tw_cost_basis": str(self.realized_tw_cost_basis),
            "realized_active_days": self.realized_active_days,
            "unrealized_apr": self.unrealized_apr,
            "unrealized_fees_unclaimed": (
                None if self.unrealized_fees_unclaimed is None else str(self.unrealized_fees_unclaimed)
            ),
            "unrealized_cost_basis": str(self.unrealized_cost_basis),
            "unrealized_active_days": self.unrealized_active_days,
            "total_apr": self.total_apr,
            "total_active_days": self.total_active_days,
            "total_tw_cost_basis": str(self.total_tw_cost_basis),
            "periods": [period.to_dict() for period in self.periods],
            "calculated_at": self.calculated_at.isoformat(),
        }


@dataclass(frozen=True)
class PositionPnl:
    """PnL of a position split into its sources (quote smallest units)"""
    current_value: int
    cost_basis: int
    collected_fees: int
    unclaimed_fees: int
    realized_pnl: int
    unrealized_pnl: int
    total_pnl: int
    total_pnl_percent: float
