"""
APR layer

- types: ledger events, capital periods, breakdown records
- breakdown: realized / unrealized / total APR aggregation
"""

from .types import EventType, PositionEvent, CapitalPeriod, PnlBreakdown, PositionPnl
from .breakdown import (
    annualize,
    build_capital_periods,
    distribute_collect_fees,
    calculate_apr_breakdown,
    calculate_position_pnl,
)
