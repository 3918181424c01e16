"""
Position Value - value, PnL and hold comparison in quote token units

Values are integers in quote smallest units. The base token side of a
position is converted with the quote-per-base price:

    base = token0:  value = amount0 * price / 10^base_decimals + amount1
    base = token1:  value = amount0 + amount1 * price / 10^base_decimals
"""

from enum import Enum
from typing import NamedTuple, Optional, Tuple

from .liquidity_math import TokenAmounts, get_token_amounts_from_liquidity
from .price_math import (
    PriceLike,
    base_is_token0 as _base_is_token0,
    normalize_price,
    price_to_sqrt_price_x96,
    price_to_tick,
    validate_decimals,
)
from .tick_math import validate_position_range


class PositionPhase(str, Enum):
    """Where a price sits relative to a position range"""
    BELOW = "below"
    IN_RANGE = "in-range"
    ABOVE = "above"


class RangeStatus(str, Enum):
    IN_RANGE = "in-range"
    OUT_OF_RANGE_BELOW = "out-of-range-below"
    OUT_OF_RANGE_ABOVE = "out-of-range-above"


class HoldComparison(NamedTuple):
    """Position value against simply holding the deposited tokens"""
    position_value: int
    hold_value: int
    advantage: int
    advantage_percent: float


def determine_phase(current_tick: int, tick_lower: int, tick_upper: int) -> PositionPhase:
    """Phase of a tick: below if < tick_lower, above if >= tick_upper"""
    if current_tick < tick_lower:
        return PositionPhase.BELOW
    if current_tick >= tick_upper:
        return PositionPhase.ABOVE
    return PositionPhase.IN_RANGE


def determine_range_status(current_tick: int, tick_lower: int, tick_upper: int) -> RangeStatus:
    """Range status of a position at the pool tick"""
    phase = determine_phase(current_tick, tick_lower, tick_upper)
    if phase is PositionPhase.BELOW:
        return RangeStatus.OUT_OF_RANGE_BELOW
    if phase is PositionPhase.ABOVE:
        return RangeStatus.OUT_OF_RANGE_ABOVE
    return RangeStatus.IN_RANGE


def amounts_to_quote_value(
    amounts: TokenAmounts,
    price: int,
    base_is_token0: bool,
    base_token_decimals: int
) -> int:
    """Value of (token0, token1) amounts in quote smallest units"""
    one_base = 10 ** validate_decimals(base_token_decimals)
    if base_is_token0:
        return amounts.token0_amount * price // one_base + amounts.token1_amount
    return amounts.token0_amount + amounts.token1_amount * price // one_base


def calculate_position_value(
    liquidity: int,
    current_tick: int,
    tick_lower: int,
    tick_upper: int,
    current_price: PriceLike,
    base_is_token0: bool,
    base_token_decimals: int,
    sqrt_price_x96: Optional[int] = None
) -> int:
    """Current value of a position in quote units

    Args:
        liquidity: position liquidity
        current_tick: pool tick
        tick_lower: lower tick of the position
        tick_upper: upper tick of the position
        current_price: quote units per whole base token
        base_is_token0: True when the base token is token0
        base_token_decimals: base token decimals
        sqrt_price_x96: exact pool sqrt price for the in-range split (optional)

    Returns:
        value in quote smallest units
    """
    price = normalize_price(current_price)
    amounts = get_token_amounts_from_liquidity(
        liquidity, current_tick, tick_lower, tick_upper, sqrt_price_x96=sqrt_price_x96
    )
    return amounts_to_quote_value(amounts, price, base_is_token0, base_token_decimals)


def calculate_position_value_at_price(
    liquidity: int,
    tick_lower: int,
    tick_upper: int,
    hypothetical_price: PriceLike,
    base_token_address: str,
    quote_token_address: str,
    base_token_decimals: int,
    tick_spacing: int
) -> int:
    """Value of a position if the pool traded at hypothetical_price

    The range case comes from the usable tick of the price; the in-range
    token split uses the exact sqrt price encoded from the same price, so
    the value moves continuously as the price crosses a range bound.

    Raises:
        InvalidPriceError: non-positive / non-finite price
        InvalidRangeError: tick_lower >= tick_upper
        TickOutOfRangeError: price outside the tick bounds
    """
    validate_position_range(tick_lower, tick_upper)
    price = normalize_price(hypothetical_price)

    tick = price_to_tick(price, tick_spacing, base_token_address, quote_token_address, base_token_decimals)
    sqrt_price_x96 = price_to_sqrt_price_x96(
        price, base_token_address, quote_token_address, base_token_decimals
    )

    amounts = get_token_amounts_from_liquidity(
        liquidity, tick, tick_lower, tick_upper, sqrt_price_x96=sqrt_price_x96
    )
    return amounts_to_quote_value(
        amounts,
        price,
        _base_is_token0(base_token_address, quote_token_address),
        base_token_decimals,
    )


def percent_of(numerator: int, denominator: int) -> float:
    """numerator / denominator in percent, truncated to two decimals"""
    if denominator <= 0:
        return 0.0
    basis_points = abs(numerator) * 10000 // denominator
    if numerator < 0:
        basis_points = -basis_points
    return basis_points / 100


def calculate_pnl(current_value: int, initial_value: int) -> Tuple[int, float]:
    """PnL of a position against its initial value

    Returns:
        (pnl, pnl_percent); pnl_percent is 0.0 when initial_value <= 0
    """
    pnl = current_value - initial_value
    return pnl, percent_of(pnl, initial_value)


def compare_to_hold_strategy(
    position_value: int,
    initial_token0_amount: int,
    initial_token1_amount: int,
    current_price: PriceLike,
    base_is_token0: bool,
    base_token_decimals: int
) -> HoldComparison:
    """Compare a position with holding its initial deposit at the current price

    Returns:
        HoldComparison; advantage is negative when holding would have been
        worth more (impermanent loss exceeds earned value)
    """
    price = normalize_price(current_price)
    hold_value = amounts_to_quote_value(
        TokenAmounts(initial_token0_amount, initial_token1_amount),
        price,
        base_is_token0,
        base_token_decimals,
    )
    advantage = position_value - hold_value
    return HoldComparison(
        position_value=position_value,
        hold_value=hold_value,
        advantage=advantage,
        advantage_percent=percent_of(advantage, hold_value),
    )
