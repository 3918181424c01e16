"""
Math layer for the position engine

Integer-precision functions:
- tick_math: tick <-> sqrtPriceX96
- price_math: price <-> tick / sqrtPriceX96
- liquidity_math: liquidity <-> token amounts
- fee_math: unclaimed fees from fee growth
- position_value: position value, PnL, hold comparison
"""

from .tick_math import (
    tick_to_sqrt_price_x96,
    sqrt_price_x96_to_tick,
    round_tick_down,
    nearest_usable_tick,
    get_tick_spacing_for_fee,
    validate_position_range,
)
from .price_math import (
    base_is_token0,
    price_to_sqrt_price_x96,
    price_to_tick,
    price_to_closest_usable_tick,
    tick_to_price,
    sqrt_ratio_x96_to_token1_per_token0,
    sqrt_ratio_x96_to_token0_per_token1,
    sqrt_price_x96_to_price,
    to_display_amount,
)
from .liquidity_math import (
    TokenAmounts,
    get_amount0_delta,
    get_amount1_delta,
    get_liquidity_for_amounts,
    get_amounts_for_liquidity,
    get_token_amounts_from_liquidity,
    get_liquidity_for_quote_budget,
)
from .fee_math import (
    fee_growth_inside,
    calculate_uncollected_fees,
    calculate_unclaimed_fees,
    unclaimed_fees_in_quote,
)
from .position_value import (
    PositionPhase,
    calculate_position_value,
    calculate_position_value_at_price,
    calculate_pnl,
    compare_to_hold_strategy,
    determine_range_status,
)
