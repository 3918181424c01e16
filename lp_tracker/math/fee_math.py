"""
Fee Math - unclaimed position fees

Fee growth bookkeeping from whitepaper Sections 6.3 and 6.4, with the same
uint256 wrap-around as the core contracts.

References:
- Whitepaper Section 6.3: Tick-Indexed State (feeGrowthOutside)
- Whitepaper Section 6.4.1: Position-Indexed State (uncollected fees)
- Uniswap V3 Core: contracts/libraries/Tick.sol (getFeeGrowthInside)

Formulas:
    f_a(i) = f_g - f_o(i)  if i_c >= i else f_o(i)      # growth above tick i
    f_b(i) = f_o(i)        if i_c >= i else f_g - f_o(i) # growth below tick i
    f_r = f_g - f_b(i_l) - f_a(i_u)                      # growth inside range
    f_u = l * (f_r(t_1) - f_r(t_0)) / 2^128              # uncollected fees
"""

from typing import NamedTuple

from .liquidity_math import TokenAmounts
from .position_value import amounts_to_quote_value

UINT256_MODULUS = 2 ** 256


class FeeCalculationResult(NamedTuple):
    """Unclaimed fees and the fee growth inside they were computed from"""
    uncollected_fees_0: int   # token0, smallest units
    uncollected_fees_1: int   # token1, smallest units
    fee_growth_inside_0: int  # Q128
    fee_growth_inside_1: int  # Q128

    @property
    def amounts(self) -> TokenAmounts:
        return TokenAmounts(self.uncollected_fees_0, self.uncollected_fees_1)


def fee_growth_above(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """Fee growth above tick i (f_a)"""
    if current_tick >= tick_idx:
        return (fee_growth_global - fee_growth_outside) % UINT256_MODULUS
    return fee_growth_outside


def fee_growth_below(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """Fee growth below tick i (f_b)"""
    if current_tick >= tick_idx:
        return fee_growth_outside
    return (fee_growth_global - fee_growth_outside) % UINT256_MODULUS


def fee_growth_inside(
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside_lower: int,
    fee_growth_outside_upper: int
) -> int:
    """Fee growth inside a range (f_r)

    Args:
        tick_lower: lower tick (i_l)
        tick_upper: upper tick (i_u)
        current_tick: pool tick (i_c)
        fee_growth_global: global fee growth (f_g), Q128
        fee_growth_outside_lower: feeGrowthOutside of the lower tick
        fee_growth_outside_upper: feeGrowthOutside of the upper tick

    Returns:
        fee growth inside (Q128), wrapped to uint256
    """
    f_b = fee_growth_below(tick_lower, current_tick, fee_growth_global, fee_growth_outside_lower)
    f_a = fee_growth_above(tick_upper, current_tick, fee_growth_global, fee_growth_outside_upper)

    # unchecked subtraction in Solidity
    return (fee_growth_global - f_b - f_a) % UINT256_MODULUS


def calculate_fee_growth_delta(fee_growth_current: int, fee_growth_previous: int) -> int:
    """Fee growth change between two snapshots (uint256 wrap-around)"""
    return (fee_growth_current - fee_growth_previous) % UINT256_MODULUS


def calculate_uncollected_fees(
    liquidity: int,
    fee_growth_inside_current: int,
    fee_growth_inside_last: int
) -> int:
    """Uncollected fees for one token (f_u), in smallest units

    Args:
        liquidity: position liquidity (l)
        fee_growth_inside_current: f_r(t_1), Q128
        fee_growth_inside_last: f_r(t_0) stored on the position, Q128

    Returns:
        fees in token smallest units (Q128 decoded, rounded down)
    """
    delta = calculate_fee_growth_delta(fee_growth_inside_current, fee_growth_inside_last)
    return (liquidity * delta) >> 128


def calculate_unclaimed_fees(
    liquidity: int,
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global_0: int,
    fee_growth_global_1: int,
    fee_growth_outside_lower_0: int,
    fee_growth_outside_lower_1: int,
    fee_growth_outside_upper_0: int,
    fee_growth_outside_upper_1: int,
    fee_growth_inside_last_0: int,
    fee_growth_inside_last_1: int,
    tokens_owed_0: int = 0,
    tokens_owed_1: int = 0
) -> FeeCalculationResult:
    """Unclaimed fees of a position for both tokens

    Fees already credited to the position (tokensOwed, e.g. after a partial
    decrease) are added to the fees accrued since the last checkpoint.

    Returns:
        FeeCalculationResult
    """
    inside_0 = fee_growth_inside(
        tick_lower, tick_upper, current_tick,
        fee_growth_global_0, fee_growth_outside_lower_0, fee_growth_outside_upper_0
    )
    inside_1 = fee_growth_inside(
        tick_lower, tick_upper, current_tick,
        fee_growth_global_1, fee_growth_outside_lower_1, fee_growth_outside_upper_1
    )

    return FeeCalculationResult(
        uncollected_fees_0=tokens_owed_0 + calculate_uncollected_fees(liquidity, inside_0, fee_growth_inside_last_0),
        uncollected_fees_1=tokens_owed_1 + calculate_uncollected_fees(liquidity, inside_1, fee_growth_inside_last_1),
        fee_growth_inside_0=inside_0,
        fee_growth_inside_1=inside_1,
    )


def unclaimed_fees_in_quote(
    fees: TokenAmounts,
    price: int,
    base_is_token0: bool,
    base_token_decimals: int
) -> int:
    """Value unclaimed fees in quote token units

    Args:
        fees: (token0, token1) fee amounts
        price: quote units per whole base token
        base_is_token0: True when the base token is token0
        base_token_decimals: base token decimals

    Returns:
        fee value in quote smallest units
    """
    return amounts_to_quote_value(fees, price, base_is_token0, base_token_decimals)
