"""
PnL Curve - position value and PnL across a price range

Samples are evenly spaced in price space. Both ends of the range are
sampled exactly:

    price_i = min + (max - min) * i // (n - 1),  i = 0 .. n-1
"""

from dataclasses import dataclass
from typing import List, NamedTuple

from ..constants import DEFAULT_PNL_CURVE_SAMPLES
from ..errors import InvalidRangeError
from ..math.price_math import normalize_price, price_to_tick
from ..math.tick_math import validate_position_range
from ..math.position_value import (
    PositionPhase,
    calculate_pnl,
    calculate_position_value_at_price,
    determine_phase,
)


class PriceRange(NamedTuple):
    """Price bounds (quote units per whole base token)"""
    min: int
    max: int


@dataclass(frozen=True)
class CurvePoint:
    """One sample of a PnL curve"""
    price: int
    position_value: int
    pnl: int
    pnl_percent: float
    phase: PositionPhase


def generate_pnl_curve(
    liquidity: int,
    tick_lower: int,
    tick_upper: int,
    initial_value: int,
    base_token_address: str,
    quote_token_address: str,
    base_token_decimals: int,
    tick_spacing: int,
    price_range: PriceRange,
    sample_count: int = DEFAULT_PNL_CURVE_SAMPLES
) -> List[CurvePoint]:
    """Sample position value and PnL over a price range

    Args:
        liquidity: position liquidity
        tick_lower: lower tick of the position
        tick_upper: upper tick of the position
        initial_value: cost basis in quote smallest units
        base_token_address: base token address
        quote_token_address: quote token address
        base_token_decimals: base token decimals
        tick_spacing: pool tick spacing
        price_range: (min, max) prices to sample
        sample_count: number of points, at least 2

    Returns:
        sample_count CurvePoints in ascending price order

    Raises:
        ValueError: sample_count < 2
        InvalidPriceError: non-positive price bound
        InvalidRangeError: min > max, or tick_lower >= tick_upper
    """
    if sample_count < 2:
        raise ValueError(f"sample_count must be at least 2, got {sample_count}")

    low, high = price_range
    min_price = normalize_price(low)
    max_price = normalize_price(high)
    if min_price > max_price:
        raise InvalidRangeError(f"price range min above max: {min_price} > {max_price}")
    validate_position_range(tick_lower, tick_upper)

    span = max_price - min_price
    last = sample_count - 1

    points = []
    for i in range(sample_count):
        price = min_price + span * i // last
        tick = price_to_tick(
            price, tick_spacing, base_token_address, quote_token_address, base_token_decimals
        )
        value = calculate_position_value_at_price(
            liquidity,
            tick_lower,
            tick_upper,
            price,
            base_token_address,
            quote_token_address,
            base_token_decimals,
            tick_spacing,
        )
        pnl, pnl_percent = calculate_pnl(value, initial_value)

        points.append(CurvePoint(
            price=price,
            position_value=value,
            pnl=pnl,
            pnl_percent=pnl_percent,
            phase=determine_phase(tick, tick_lower, tick_upper),
        ))

    return points
