"""
Liquidity Math - liquidity <-> token amounts

Concentrated liquidity amounts for a price range, with the same integer
rounding as the periphery contracts.

References:
- Uniswap V3 Periphery: contracts/libraries/LiquidityAmounts.sol
- Uniswap V3 Core: contracts/libraries/SqrtPriceMath.sol
- Whitepaper Section 6.2.1: Concentrated Liquidity

Formulas:
    L = Δy / (√P_upper - √P_lower)          # token1 side
    L = Δx / (1/√P_lower - 1/√P_upper)      # token0 side
"""

from typing import NamedTuple, Optional, Tuple

from ..constants import Q96, Q192
from ..errors import InvalidRangeError
from .tick_math import tick_to_sqrt_price_x96


class TokenAmounts(NamedTuple):
    """Token amounts held by a position, in smallest units"""
    token0_amount: int
    token1_amount: int


def get_amount0_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = True
) -> int:
    """token0 amount for liquidity between two sqrt prices

    Formula: Δx = L * (√P_b - √P_a) / (√P_a * √P_b)

    The liquidity is shifted by 96 bits before any division so that no
    precision is lost in the intermediate quotient.

    Args:
        sqrt_ratio_a_x96: lower sqrtPriceX96
        sqrt_ratio_b_x96: upper sqrtPriceX96
        liquidity: liquidity
        round_up: round up when True, down otherwise

    Returns:
        amount0 (smallest units)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    numerator1 = liquidity << 96
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        return _div_rounding_up(
            _mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96),
            sqrt_ratio_a_x96
        )
    return (numerator1 * numerator2 // sqrt_ratio_b_x96) // sqrt_ratio_a_x96


def get_amount1_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = True
) -> int:
    """token1 amount for liquidity between two sqrt prices

    Formula: Δy = L * (√P_b - √P_a)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if round_up:
        return _div_rounding_up(liquidity * (sqrt_ratio_b_x96 - sqrt_ratio_a_x96), Q96)
    return liquidity * (sqrt_ratio_b_x96 - sqrt_ratio_a_x96) // Q96


def get_liquidity_for_amount0(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int
) -> int:
    """Maximum liquidity that amount0 of token0 can provide

    Formula: L = Δx * √P_a * √P_b / (√P_b - √P_a)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_b_x96 == sqrt_ratio_a_x96 or amount0 <= 0:
        return 0

    intermediate = sqrt_ratio_a_x96 * sqrt_ratio_b_x96 // Q96
    return amount0 * intermediate // (sqrt_ratio_b_x96 - sqrt_ratio_a_x96)


def get_liquidity_for_amount1(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount1: int
) -> int:
    """Maximum liquidity that amount1 of token1 can provide

    Formula: L = Δy / (√P_b - √P_a)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_b_x96 == sqrt_ratio_a_x96 or amount1 <= 0:
        return 0

    return amount1 * Q96 // (sqrt_ratio_b_x96 - sqrt_ratio_a_x96)


def get_liquidity_for_amounts(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int,
    amount1: int
) -> int:
    """Maximum liquidity mintable from both token amounts at the current price

    Args:
        sqrt_ratio_x96: current sqrtPriceX96
        sqrt_ratio_a_x96: lower sqrtPriceX96
        sqrt_ratio_b_x96: upper sqrtPriceX96
        amount0: token0 amount
        amount1: token1 amount

    Returns:
        liquidity (the smaller of the two constraints when in range)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_x96 <= sqrt_ratio_a_x96:
        return get_liquidity_for_amount0(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount0)

    if sqrt_ratio_x96 < sqrt_ratio_b_x96:
        liquidity0 = get_liquidity_for_amount0(sqrt_ratio_x96, sqrt_ratio_b_x96, amount0)
        liquidity1 = get_liquidity_for_amount1(sqrt_ratio_a_x96, sqrt_ratio_x96, amount1)
        return min(liquidity0, liquidity1)

    return get_liquidity_for_amount1(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount1)


def get_liquidity_from_token_amounts(
    current_tick: int,
    tick_lower: int,
    tick_upper: int,
    amount0: int,
    amount1: int
) -> int:
    """Tick-based variant of get_liquidity_for_amounts

    Uses the sqrt price of current_tick, which is slightly less accurate
    than the pool's exact slot0 sqrt price.
    """
    if tick_lower >= tick_upper:
        raise InvalidRangeError(f"tick_lower must be below tick_upper: {tick_lower} >= {tick_upper}")

    return get_liquidity_for_amounts(
        tick_to_sqrt_price_x96(current_tick),
        tick_to_sqrt_price_x96(tick_lower),
        tick_to_sqrt_price_x96(tick_upper),
        amount0,
        amount1,
    )


def get_amounts_for_liquidity(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = False
) -> Tuple[int, int]:
    """Token amounts held by liquidity at a sqrt price

    Args:
        sqrt_ratio_x96: current sqrtPriceX96
        sqrt_ratio_a_x96: lower sqrtPriceX96
        sqrt_ratio_b_x96: upper sqrtPriceX96
        liquidity: liquidity
        round_up: round amounts up (minting) instead of down (withdrawing)

    Returns:
        (amount0, amount1)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_x96 <= sqrt_ratio_a_x96:
        # below range: token0 only
        amount0 = get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, round_up)
        amount1 = 0

    elif sqrt_ratio_x96 < sqrt_ratio_b_x96:
        amount0 = get_amount0_delta(sqrt_ratio_x96, sqrt_ratio_b_x96, liquidity, round_up)
        amount1 = get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_x96, liquidity, round_up)

    else:
        # above range: token1 only
        amount0 = 0
        amount1 = get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, round_up)

    return amount0, amount1


def get_token_amounts_from_liquidity(
    liquidity: int,
    current_tick: int,
    tick_lower: int,
    tick_upper: int,
    round_up: bool = False,
    sqrt_price_x96: Optional[int] = None
) -> TokenAmounts:
    """Token amounts of a position at the current tick

    The range case is decided by ticks:
        current_tick < tick_lower   -> token0 only
        current_tick >= tick_upper  -> token1 only
        otherwise                   -> split at the current sqrt price

    For the in-range split the sqrt price of current_tick is used unless
    the exact pool sqrt price is given; an exact value is clamped into the
    range so the split never leaves [sqrtA, sqrtB].

    Args:
        liquidity: position liquidity
        current_tick: pool tick
        tick_lower: lower tick of the position
        tick_upper: upper tick of the position
        round_up: round amounts up instead of down
        sqrt_price_x96: exact current sqrtPriceX96 (optional)

    Returns:
        TokenAmounts(token0_amount, token1_amount)

    Raises:
        InvalidRangeError: tick_lower >= tick_upper
        TickOutOfRangeError: a tick outside the protocol bounds
    """
    if tick_lower >= tick_upper:
        raise InvalidRangeError(f"tick_lower must be below tick_upper: {tick_lower} >= {tick_upper}")

    sqrt_a = tick_to_sqrt_price_x96(tick_lower)
    sqrt_b = tick_to_sqrt_price_x96(tick_upper)

    if liquidity <= 0:
        return TokenAmounts(0, 0)

    if current_tick < tick_lower:
        return TokenAmounts(get_amount0_delta(sqrt_a, sqrt_b, liquidity, round_up), 0)

    if current_tick >= tick_upper:
        return TokenAmounts(0, get_amount1_delta(sqrt_a, sqrt_b, liquidity, round_up))

    if sqrt_price_x96 is None:
        sqrt_current = tick_to_sqrt_price_x96(current_tick)
    else:
        sqrt_current = min(max(sqrt_price_x96, sqrt_a), sqrt_b)

    return TokenAmounts(
        get_amount0_delta(sqrt_current, sqrt_b, liquidity, round_up),
        get_amount1_delta(sqrt_a, sqrt_current, liquidity, round_up),
    )


def get_liquidity_for_quote_budget(
    base_amount: int,
    quote_amount: int,
    base_is_token0: bool,
    sqrt_price_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int
) -> int:
    """Maximum liquidity for a combined base + quote budget

    Both amounts are valued in the quote token at the current sqrt price,
    as if the budget could be swapped into the ratio the range requires.
    The liquidity then follows from the quote value of a reference
    liquidity of 2^128.

    Args:
        base_amount: base token budget (smallest units)
        quote_amount: quote token budget (smallest units)
        base_is_token0: True when the base token is token0
        sqrt_price_x96: current sqrtPriceX96 (slot0)
        sqrt_ratio_a_x96: lower sqrtPriceX96 of the range
        sqrt_ratio_b_x96: upper sqrtPriceX96 of the range

    Returns:
        liquidity, 0 for an empty budget or a degenerate range
    """
    if base_amount <= 0 and quote_amount <= 0:
        return 0
    if sqrt_ratio_a_x96 == sqrt_ratio_b_x96:
        return 0

    budget = _value_in_quote(
        base_amount if base_is_token0 else quote_amount,
        quote_amount if base_is_token0 else base_amount,
        base_is_token0,
        sqrt_price_x96,
    )

    reference_liquidity = 1 << 128
    amount0, amount1 = get_amounts_for_liquidity(
        sqrt_price_x96, sqrt_ratio_a_x96, sqrt_ratio_b_x96, reference_liquidity, round_up=True
    )
    reference_value = _value_in_quote(amount0, amount1, base_is_token0, sqrt_price_x96)
    if reference_value <= 0:
        return 0

    return budget * reference_liquidity // reference_value


def _value_in_quote(amount0: int, amount1: int, base_is_token0: bool, sqrt_price_x96: int) -> int:
    """Value of (amount0, amount1) in the quote token at a sqrt price"""
    if base_is_token0:
        # quote is token1
        return amount1 + amount0 * sqrt_price_x96 * sqrt_price_x96 // Q192
    return amount0 + amount1 * Q192 // (sqrt_price_x96 * sqrt_price_x96)


def _mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """(a * b) / denominator, rounded up"""
    result = (a * b) // denominator
    if (a * b) % denominator > 0:
        result += 1
    return result


def _div_rounding_up(numerator: int, denominator: int) -> int:
    """numerator / denominator, rounded up"""
    result = numerator // denominator
    if numerator % denominator > 0:
        result += 1
    return result
