"""
Price Math - price <-> tick <-> sqrtPriceX96

Prices here are integers: the amount of quote token, in quote smallest
units, paid for one whole base token (10^base_decimals base units).
Which of the two tokens is token0 is decided by address ordering: the
numerically lower address is token0.

    base = token0:  price = sqrtPriceX96^2 * 10^base_decimals / 2^192
    base = token1:  price = 2^192 * 10^base_decimals / sqrtPriceX96^2

References:
- Uniswap V3 SDK: encodeSqrtRatioX96, nearestUsableTick
- Whitepaper Section 6.1
"""

import math
from decimal import Decimal
from typing import Union

from ..constants import Q192, MIN_DECIMALS, MAX_DECIMALS, MIN_TICK, MAX_TICK
from ..errors import InvalidPriceError, DecimalsMismatchError
from .tick_math import (
    tick_to_sqrt_price_x96,
    sqrt_price_x96_to_tick,
    round_tick_down,
    nearest_usable_tick,
)

PriceLike = Union[int, float, Decimal, str]


def base_is_token0(base_token_address: str, quote_token_address: str) -> bool:
    """True when the base token sorts first (lower address) and is token0"""
    return int(base_token_address, 16) < int(quote_token_address, 16)


def validate_decimals(decimals: int) -> int:
    """Check ERC-20 decimals

    Raises:
        DecimalsMismatchError: not an integer, or outside 0..36
    """
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise DecimalsMismatchError(f"decimals must be an integer, got {decimals!r}")
    if decimals < MIN_DECIMALS or decimals > MAX_DECIMALS:
        raise DecimalsMismatchError(
            f"decimals out of range: {decimals} (valid: {MIN_DECIMALS} ~ {MAX_DECIMALS})"
        )
    return decimals


def normalize_price(price: PriceLike) -> int:
    """Coerce a price to a positive integer

    Floats and Decimals must be finite and are truncated; strings must hold
    a base-10 integer.

    Raises:
        InvalidPriceError: non-positive, non-finite or unparseable price
    """
    if isinstance(price, bool):
        raise InvalidPriceError(f"price must be a number, got {price!r}")

    if isinstance(price, int):
        value = price
    elif isinstance(price, (float, Decimal)):
        if not math.isfinite(price):
            raise InvalidPriceError(f"price must be finite, got {price!r}")
        value = int(price)
    elif isinstance(price, str):
        try:
            value = int(price)
        except ValueError as e:
            raise InvalidPriceError(f"price is not an integer string: {price!r}") from e
    else:
        raise InvalidPriceError(f"unsupported price type: {type(price).__name__}")

    if value <= 0:
        raise InvalidPriceError(f"price must be positive, got {price!r}")
    return value


def price_to_sqrt_price_x96(
    price: PriceLike,
    base_token_address: str,
    quote_token_address: str,
    base_token_decimals: int
) -> int:
    """Encode a price as sqrtPriceX96

    sqrtPriceX96 = sqrt(amount1 * 2^192 / amount0), where (amount0, amount1)
    is (one base token, price) or (price, one base token) depending on which
    side is token0.

    Args:
        price: quote units per whole base token
        base_token_address: base token address
        quote_token_address: quote token address
        base_token_decimals: base token decimals

    Returns:
        sqrtPriceX96 (floor of the exact square root)
    """
    value = normalize_price(price)
    one_base = 10 ** validate_decimals(base_token_decimals)

    if base_is_token0(base_token_address, quote_token_address):
        amount0, amount1 = one_base, value
    else:
        amount0, amount1 = value, one_base

    return math.isqrt((amount1 << 192) // amount0)


def price_to_tick(
    price: PriceLike,
    tick_spacing: int,
    base_token_address: str,
    quote_token_address: str,
    base_token_decimals: int
) -> int:
    """Convert a price to a usable tick

    Takes the floor tick of the encoded price and rounds it down (toward
    negative infinity) to a multiple of tick_spacing. For a base token that
    is token1 the ratio is inverted first, so a higher price maps to a
    lower tick.

    Args:
        price: quote units per whole base token
        tick_spacing: pool tick spacing
        base_token_address: base token address
        quote_token_address: quote token address
        base_token_decimals: base token decimals

    Returns:
        tick, a multiple of tick_spacing

    Raises:
        InvalidPriceError: non-positive / non-finite price
        TickOutOfRangeError: price outside the representable tick range
    """
    sqrt_price_x96 = price_to_sqrt_price_x96(
        price, base_token_address, quote_token_address, base_token_decimals
    )
    return round_tick_down(sqrt_price_x96_to_tick(sqrt_price_x96), tick_spacing)


def price_to_closest_usable_tick(
    price: PriceLike,
    tick_spacing: int,
    base_token_address: str,
    quote_token_address: str,
    base_token_decimals: int
) -> int:
    """Convert a price to the usable tick closest to it

    Unlike price_to_tick this picks whichever of the two neighbouring ticks
    has the closer sqrt price before snapping to the spacing grid. Prices
    beyond the tick bounds are clamped to the outermost usable tick.
    """
    sqrt_price_x96 = price_to_sqrt_price_x96(
        price, base_token_address, quote_token_address, base_token_decimals
    )
    tick = sqrt_price_x96_to_tick(sqrt_price_x96)

    if tick >= MAX_TICK:
        return nearest_usable_tick(MAX_TICK, tick_spacing)
    if tick <= MIN_TICK:
        return nearest_usable_tick(MIN_TICK, tick_spacing)

    below = sqrt_price_x96 - tick_to_sqrt_price_x96(tick)
    above = tick_to_sqrt_price_x96(tick + 1) - sqrt_price_x96
    closest = tick if below < above else tick + 1
    return nearest_usable_tick(closest, tick_spacing)


def sqrt_ratio_x96_to_token1_per_token0(sqrt_price_x96: int, token0_decimals: int) -> int:
    """Price of one whole token0, in token1 smallest units

    sqrtPriceX96^2 / 2^192 is the raw token1/token0 ratio; scaling by
    10^token0_decimals before dividing keeps the full integer precision.
    """
    scale0 = 10 ** validate_decimals(token0_decimals)
    return (sqrt_price_x96 * sqrt_price_x96 * scale0) // Q192


def sqrt_ratio_x96_to_token0_per_token1(sqrt_price_x96: int, token1_decimals: int) -> int:
    """Price of one whole token1, in token0 smallest units"""
    scale1 = 10 ** validate_decimals(token1_decimals)
    return (Q192 * scale1) // (sqrt_price_x96 * sqrt_price_x96)


def sqrt_price_x96_to_price(
    sqrt_price_x96: int,
    base_token_address: str,
    quote_token_address: str,
    base_token_decimals: int
) -> int:
    """Quote-per-base price for a pool sqrt price (e.g. slot0.sqrtPriceX96)"""
    if base_is_token0(base_token_address, quote_token_address):
        return sqrt_ratio_x96_to_token1_per_token0(sqrt_price_x96, base_token_decimals)
    return sqrt_ratio_x96_to_token0_per_token1(sqrt_price_x96, base_token_decimals)


def tick_to_price(
    tick: int,
    base_token_address: str,
    quote_token_address: str,
    base_token_decimals: int
) -> int:
    """Quote-per-base price at a tick

    Example:
        >>> tick_to_price(0, "0x01", "0x02", 18)  # equal raw amounts
        1000000000000000000
    """
    return sqrt_price_x96_to_price(
        tick_to_sqrt_price_x96(tick),
        base_token_address,
        quote_token_address,
        base_token_decimals,
    )


def to_display_amount(amount: int, decimals: int) -> float:
    """Integer token amount -> human-readable float (display only)"""
    return amount / (10 ** validate_decimals(decimals))
