"""
Uniswap V3 Position Math Engine

Price / tick / token-amount conversions, position value and PnL curves,
and APR breakdowns for concentrated liquidity positions, computed with
on-chain integer precision.
"""

__version__ = "0.1.0"

from .constants import Q96, Q128, Q192, FEE_TIERS, TICK_SPACINGS, MIN_TICK, MAX_TICK
from .errors import (
    PositionMathError,
    TickOutOfRangeError,
    InvalidPriceError,
    InvalidRangeError,
    DecimalsMismatchError,
    MissingHistoryDataError,
)
