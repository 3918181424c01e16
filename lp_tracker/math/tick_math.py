"""
Tick Math - tick <-> sqrtPriceX96

Uniswap V3 tick math with the same integer precision as the core contracts.

References:
- Uniswap V3 Core: contracts/libraries/TickMath.sol
- Whitepaper Section 6.1: Ticks and Tick Spacing

Formulas:
    price = 1.0001^tick
    sqrtPriceX96 = sqrt(price) * 2^96
"""

from typing import Optional

from ..constants import (
    MIN_TICK,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MAX_SQRT_RATIO,
    TICK_SPACINGS,
    UINT256_MAX,
)
from ..errors import TickOutOfRangeError, InvalidRangeError


def tick_to_sqrt_price_x96(tick: int) -> int:
    """Compute sqrtPriceX96 for a tick

    Same algorithm as TickMath.getSqrtRatioAtTick(): the ratio is built from
    a table of precomputed Q128 factors, one per set bit of |tick|. Integer
    arithmetic only, so results agree bit for bit with the chain.

    Args:
        tick: tick index (-887272 ~ 887272)

    Returns:
        sqrtPriceX96 (Q64.96)

    Raises:
        TickOutOfRangeError: tick outside the valid range
    """
    if isinstance(tick, bool) or not isinstance(tick, int):
        raise TickOutOfRangeError(f"tick must be an integer, got {tick!r}")
    if tick < MIN_TICK or tick > MAX_TICK:
        raise TickOutOfRangeError(f"tick out of range: {tick} (valid: {MIN_TICK} ~ {MAX_TICK})")

    abs_tick = abs(tick)

    ratio = 0x100000000000000000000000000000000 if abs_tick & 0x1 == 0 \
        else 0xfffcb933bd6fad37aa2d162d1a594001

    if abs_tick & 0x2:
        ratio = (ratio * 0xfff97272373d413259a46990580e213a) >> 128
    if abs_tick & 0x4:
        ratio = (ratio * 0xfff2e50f5f656932ef12357cf3c7fdcc) >> 128
    if abs_tick & 0x8:
        ratio = (ratio * 0xffe5caca7e10e4e61c3624eaa0941cd0) >> 128
    if abs_tick & 0x10:
        ratio = (ratio * 0xffcb9843d60f6159c9db58835c926644) >> 128
    if abs_tick & 0x20:
        ratio = (ratio * 0xff973b41fa98c081472e6896dfb254c0) >> 128
    if abs_tick & 0x40:
        ratio = (ratio * 0xff2ea16466c96a3843ec78b326b52861) >> 128
    if abs_tick & 0x80:
        ratio = (ratio * 0xfe5dee046a99a2a811c461f1969c3053) >> 128
    if abs_tick & 0x100:
        ratio = (ratio * 0xfcbe86c7900a88aedcffc83b479aa3a4) >> 128
    if abs_tick & 0x200:
        ratio = (ratio * 0xf987a7253ac413176f2b074cf7815e54) >> 128
    if abs_tick & 0x400:
        ratio = (ratio * 0xf3392b0822b70005940c7a398e4b70f3) >> 128
    if abs_tick & 0x800:
        ratio = (ratio * 0xe7159475a2c29b7443b29c7fa6e889d9) >> 128
    if abs_tick & 0x1000:
        ratio = (ratio * 0xd097f3bdfd2022b8845ad8f792aa5825) >> 128
    if abs_tick & 0x2000:
        ratio = (ratio * 0xa9f746462d870fdf8a65dc1f90e061e5) >> 128
    if abs_tick & 0x4000:
        ratio = (ratio * 0x70d869a156d2a1b890bb3df62baf32f7) >> 128
    if abs_tick & 0x8000:
        ratio = (ratio * 0x31be135f97d08fd981231505542fcfa6) >> 128
    if abs_tick & 0x10000:
        ratio = (ratio * 0x9aa508b5b7a84e1c677de54f3e99bc9) >> 128
    if abs_tick & 0x20000:
        ratio = (ratio * 0x5d6af8dedb81196699c329225ee604) >> 128
    if abs_tick & 0x40000:
        ratio = (ratio * 0x2216e584f5fa1ea926041bedfe98) >> 128
    if abs_tick & 0x80000:
        ratio = (ratio * 0x48a170391f7dc42444e8fa2) >> 128

    if tick > 0:
        ratio = UINT256_MAX // ratio

    # Q128.128 -> Q64.96, rounding up
    return (ratio >> 32) + (1 if ratio % (1 << 32) != 0 else 0)


def sqrt_price_x96_to_tick(sqrt_price_x96: int) -> int:
    """Compute the greatest tick whose sqrt price is <= sqrt_price_x96

    Same algorithm as TickMath.getTickAtSqrtRatio(): most significant bit,
    14 rounds of log2 refinement, then a check of the two candidate ticks.

    MAX_SQRT_RATIO itself maps to MAX_TICK so that every valid tick
    round-trips through tick_to_sqrt_price_x96.

    Args:
        sqrt_price_x96: sqrtPriceX96 (Q64.96)

    Returns:
        tick index

    Raises:
        TickOutOfRangeError: sqrt price outside [MIN_SQRT_RATIO, MAX_SQRT_RATIO]
    """
    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 > MAX_SQRT_RATIO:
        raise TickOutOfRangeError(f"sqrtPriceX96 out of range: {sqrt_price_x96}")
    if sqrt_price_x96 == MAX_SQRT_RATIO:
        return MAX_TICK

    ratio = sqrt_price_x96 << 32

    r = ratio
    msb = 0

    # most significant bit
    f = (1 if r > 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF else 0) << 7
    msb |= f
    r >>= f

    f = (1 if r > 0xFFFFFFFFFFFFFFFF else 0) << 6
    msb |= f
    r >>= f

    f = (1 if r > 0xFFFFFFFF else 0) << 5
    msb |= f
    r >>= f

    f = (1 if r > 0xFFFF else 0) << 4
    msb |= f
    r >>= f

    f = (1 if r > 0xFF else 0) << 3
    msb |= f
    r >>= f

    f = (1 if r > 0xF else 0) << 2
    msb |= f
    r >>= f

    f = (1 if r > 0x3 else 0) << 1
    msb |= f
    r >>= f

    f = 1 if r > 0x1 else 0
    msb |= f

    if msb >= 128:
        r = ratio >> (msb - 127)
    else:
        r = ratio << (127 - msb)

    log_2 = (msb - 128) << 64

    for i in range(14):
        r = (r * r) >> 127
        f = r >> 128
        log_2 |= f << (63 - i)
        r >>= f

    log_sqrt10001 = log_2 * 255738958999603826347141

    tick_low = (log_sqrt10001 - 3402992956809132418596140100660247210) >> 128
    tick_high = (log_sqrt10001 + 291339464771989622907027621153398088495) >> 128

    if tick_low == tick_high:
        return tick_low

    if tick_to_sqrt_price_x96(tick_high) <= sqrt_price_x96:
        return tick_high
    return tick_low


def round_tick_down(tick: int, tick_spacing: int) -> int:
    """Round a tick toward negative infinity onto the spacing grid

    Python floor division already rounds toward negative infinity, so
    -1 with spacing 60 becomes -60, not 0.
    """
    if tick_spacing <= 0:
        raise InvalidRangeError(f"tick spacing must be positive: {tick_spacing}")
    return (tick // tick_spacing) * tick_spacing


def nearest_usable_tick(tick: int, tick_spacing: int) -> int:
    """Round a tick to the nearest multiple of tick_spacing inside the tick bounds

    Ties round up, like the v3-sdk's nearestUsableTick.

    Args:
        tick: tick to round
        tick_spacing: spacing of the pool (e.g. 60 for the 0.3% tier)

    Returns:
        usable tick (multiple of tick_spacing within [MIN_TICK, MAX_TICK])
    """
    if tick_spacing <= 0:
        raise InvalidRangeError(f"tick spacing must be positive: {tick_spacing}")
    if tick < MIN_TICK or tick > MAX_TICK:
        raise TickOutOfRangeError(f"tick out of range: {tick}")

    lower = round_tick_down(tick, tick_spacing)
    upper = lower + tick_spacing
    rounded = upper if tick - lower >= upper - tick else lower

    if rounded < MIN_TICK:
        return rounded + tick_spacing
    if rounded > MAX_TICK:
        return rounded - tick_spacing
    return rounded


def get_tick_spacing_for_fee(fee_tier: int) -> int:
    """Tick spacing for a fee tier

    Args:
        fee_tier: fee tier (100, 500, 3000, 10000)

    Returns:
        tick spacing
    """
    if fee_tier not in TICK_SPACINGS:
        raise ValueError(f"unsupported fee tier: {fee_tier}")
    return TICK_SPACINGS[fee_tier]


def validate_position_range(
    tick_lower: int,
    tick_upper: int,
    tick_spacing: Optional[int] = None
) -> None:
    """Check a position range

    Raises:
        InvalidRangeError: tick_lower >= tick_upper, or a bound is not a
            multiple of tick_spacing
        TickOutOfRangeError: a bound is outside [MIN_TICK, MAX_TICK]
    """
    if tick_lower >= tick_upper:
        raise InvalidRangeError(f"tick_lower must be below tick_upper: {tick_lower} >= {tick_upper}")
    if tick_lower < MIN_TICK or tick_upper > MAX_TICK:
        raise TickOutOfRangeError(f"range out of bounds: [{tick_lower}, {tick_upper}]")
    if tick_spacing is not None:
        if tick_spacing <= 0:
            raise InvalidRangeError(f"tick spacing must be positive: {tick_spacing}")
        if tick_lower % tick_spacing or tick_upper % tick_spacing:
            raise InvalidRangeError(
                f"range [{tick_lower}, {tick_upper}] not aligned to tick spacing {tick_spacing}"
            )
