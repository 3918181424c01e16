"""
APR Breakdown - realized / unrealized / total APR from event history

    APR = fees / cost_basis * 365 / days * 100

Capital periods:
    Every event opens a period at its cost_basis_after that lasts until the
    next event; the latest event's period stays open. Fees of a COLLECT are
    spread over the closed periods since the previous COLLECT, weighted by
    cost_basis * days.

Realized:   COLLECT fees over the periods that ended by the last COLLECT.
Unrealized: unclaimed fees over the current cost basis, from the last
            COLLECT (or the first event) until now.
Total:      cost-basis-days weighted average of the two, which equals
            annualizing all fees over the combined time-weighted cost basis
            and active days.

Missing history never raises out of calculate_apr_breakdown: the affected
figures degrade to 0 (or None for unknown unclaimed fees).
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from fractions import Fraction
from typing import Iterable, List, Optional, Sequence, Tuple

from ..constants import DAYS_PER_YEAR, SECONDS_PER_DAY
from ..errors import MissingHistoryDataError
from ..math.position_value import percent_of
from .types import CapitalPeriod, EventType, PnlBreakdown, PositionEvent, PositionPnl

logger = logging.getLogger(__name__)


def annualize(fees: float, cost_basis: float, days: float) -> float:
    """fees / cost_basis * 365 / days * 100; 0.0 for a zero/negative denominator"""
    if cost_basis <= 0 or days <= 0:
        return 0.0
    return fees / cost_basis * DAYS_PER_YEAR / days * 100


def days_between(start: datetime, end: datetime) -> float:
    """Exact (fractional) days from start to end, never negative"""
    return max(0.0, (end - start).total_seconds() / SECONDS_PER_DAY)


def _require_events(events: Optional[Iterable[PositionEvent]]) -> List[PositionEvent]:
    if events is None:
        raise MissingHistoryDataError("no event history")
    ordered = sorted(events, key=lambda e: e.timestamp)
    if not ordered:
        raise MissingHistoryDataError("event history is empty")
    return ordered


def _require_unclaimed(unclaimed_fees: Optional[int]) -> int:
    if unclaimed_fees is None:
        raise MissingHistoryDataError("unclaimed fees unknown")
    return int(unclaimed_fees)


def build_capital_periods(events: Sequence[PositionEvent]) -> List[CapitalPeriod]:
    """One period per event, closed by the following event"""
    ordered = sorted(events, key=lambda e: e.timestamp)
    periods = []
    for i, event in enumerate(ordered):
        end = ordered[i + 1].timestamp if i + 1 < len(ordered) else None
        periods.append(CapitalPeriod(
            event_id=event.event_id,
            start=event.timestamp,
            end=end,
            duration_days=days_between(event.timestamp, end) if end else None,
            cost_basis=event.cost_basis_after,
        ))
    return periods


def _is_active(period: CapitalPeriod) -> bool:
    return period.is_closed and period.cost_basis > 0 and period.duration_days > 0


def distribute_collect_fees(
    periods: Sequence[CapitalPeriod],
    events: Sequence[PositionEvent]
) -> List[CapitalPeriod]:
    """Allocate each COLLECT's fees to the periods it was earned in

    Eligible periods are the active (closed, funded, non-empty) periods
    between the previous COLLECT and this one. Shares are floored in
    proportion to cost_basis * days; the rounding remainder goes to the
    last eligible period so the allocation sums to the collected fees.

    Returns:
        new periods with allocated_fees and period_apr filled in
    """
    allocated = [0] * len(periods)
    previous_collect = None

    for event in sorted(events, key=lambda e: e.timestamp):
        if event.event_type is not EventType.COLLECT:
            continue

        eligible = [
            i for i, period in enumerate(periods)
            if _is_active(period)
            and period.end <= event.timestamp
            and (previous_collect is None or period.start >= previous_collect)
        ]
        previous_collect = event.timestamp

        if event.fee_value_in_quote <= 0:
            continue
        if not eligible:
            logger.debug(f"No eligible periods for fees of collect {event.event_id}")
            continue

        weights = [Fraction(periods[i].weight) for i in eligible]
        total_weight = sum(weights)
        remaining = event.fee_value_in_quote
        for i, weight in zip(eligible[:-1], weights[:-1]):
            share = event.fee_value_in_quote * weight // total_weight
            allocated[i] += int(share)
            remaining -= int(share)
        allocated[eligible[-1]] += remaining

    return [
        replace(
            period,
            allocated_fees=fees,
            period_apr=annualize(fees, period.cost_basis, period.duration_days or 0),
        )
        for period, fees in zip(periods, allocated)
    ]


def _realized_metrics(events: List[PositionEvent], periods: List[CapitalPeriod]) -> Tuple[int, float, float]:
    """(collected fees, cost-basis-days, active days) up to the last COLLECT"""
    collects = [e for e in events if e.event_type is EventType.COLLECT]
    if not collects:
        return 0, 0.0, 0.0

    last_collect = collects[-1].timestamp
    realized = [p for p in periods if _is_active(p) and p.end <= last_collect]

    fees = sum(e.fee_value_in_quote for e in collects)
    weight = sum(p.weight for p in realized)
    days = sum(p.duration_days for p in realized)
    return fees, weight, days


def calculate_apr_breakdown(
    events: Optional[Iterable[PositionEvent]],
    unclaimed_fees: Optional[int] = None,
    now: Optional[datetime] = None
) -> PnlBreakdown:
    """Realized, unrealized and total APR of a position

    Args:
        events: ledger events (any order)
        unclaimed_fees: current unclaimed fees in quote units, None if unknown
        now: evaluation time (default: current UTC time)

    Returns:
        PnlBreakdown
    """
    now = now or datetime.now(timezone.utc)

    try:
        ordered = _require_events(events)
    except MissingHistoryDataError as e:
        logger.warning(f"APR breakdown degraded: {e}")
        known_unclaimed = None if unclaimed_fees is None else int(unclaimed_fees)
        return PnlBreakdown(
            realized_apr=0.0,
            realized_fees_collected=0,
            realized_tw_cost_basis=0,
            realized_active_days=0.0,
            unrealized_apr=None if known_unclaimed is None else 0.0,
            unrealized_fees_unclaimed=known_unclaimed,
            unrealized_cost_basis=0,
            unrealized_active_days=0.0,
            total_apr=0.0,
            total_active_days=0.0,
            total_tw_cost_basis=0,
            periods=(),
            calculated_at=now,
        )

    periods = distribute_collect_fees(build_capital_periods(ordered), ordered)

    realized_fees, realized_weight, realized_days = _realized_metrics(ordered, periods)
    realized_cost_basis = realized_weight / realized_days if realized_days > 0 else 0.0
    realized_apr = annualize(realized_fees, realized_cost_basis, realized_days)
    realized_tw_cost_basis = int(realized_cost_basis)

    collects = [e for e in ordered if e.event_type is EventType.COLLECT]
    unrealized_start = collects[-1].timestamp if collects else ordered[0].timestamp
    unrealized_cost_basis = ordered[-1].cost_basis_after
    unrealized_days = days_between(unrealized_start, now) if unrealized_cost_basis > 0 else 0.0

    try:
        unclaimed = _require_unclaimed(unclaimed_fees)
    except MissingHistoryDataError as e:
        logger.debug(f"Unrealized APR unavailable: {e}")
        unclaimed = None

    if unclaimed is None:
        unrealized_apr = None
        # unknown window is left out of the total
        total_fees = realized_fees
        total_weight = realized_weight
        total_days = realized_days
    else:
        unrealized_apr = annualize(unclaimed, unrealized_cost_basis, unrealized_days)
        total_fees = realized_fees + unclaimed
        total_weight = realized_weight + unrealized_cost_basis * unrealized_days
        total_days = realized_days + unrealized_days

    total_tw_cost_basis = total_weight / total_days if total_days > 0 else 0
    total_apr = annualize(total_fees, total_tw_cost_basis, total_days)

    logger.debug(
        f"APR breakdown: realized={realized_apr:.4f}% unrealized={unrealized_apr} "
        f"total={total_apr:.4f}% over {total_days:.2f} days"
    )

    return PnlBreakdown(
        realized_apr=realized_apr,
        realized_fees_collected=realized_fees,
        realized_tw_cost_basis=realized_tw_cost_basis,
        realized_active_days=realized_days,
        unrealized_apr=unrealized_apr,
        unrealized_fees_unclaimed=unclaimed,
        unrealized_cost_basis=unrealized_cost_basis,
        unrealized_active_days=unrealized_days,
        total_apr=total_apr,
        total_active_days=total_days,
        total_tw_cost_basis=int(total_tw_cost_basis),
        periods=tuple(periods),
        calculated_at=now,
    )


def calculate_position_pnl(
    current_value: int,
    cost_basis: int,
    collected_fees: int,
    unclaimed_fees: int = 0,
    realized_pnl: int = 0
) -> PositionPnl:
    """Total PnL of a position

    unrealized_pnl = current_value - cost_basis
    total_pnl = unrealized_pnl + realized_pnl + collected_fees + unclaimed_fees
    """
    unrealized_pnl = current_value - cost_basis
    total_pnl = unrealized_pnl + realized_pnl + collected_fees + unclaimed_fees
    return PositionPnl(
        current_value=current_value,
        cost_basis=cost_basis,
        collected_fees=collected_fees,
        unclaimed_fees=unclaimed_fees,
        realized_pnl=realized_pnl,
        unrealized_pnl=unrealized_pnl,
        total_pnl=total_pnl,
        total_pnl_percent=percent_of(total_pnl, cost_basis),
    )
