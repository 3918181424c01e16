"""
Price Math tests

Prices are quote smallest units per whole base token.
"""

import math
from decimal import Decimal

import pytest

from ..math.price_math import (
    base_is_token0,
    validate_decimals,
    normalize_price,
    price_to_sqrt_price_x96,
    price_to_tick,
    price_to_closest_usable_tick,
    tick_to_price,
    sqrt_ratio_x96_to_token1_per_token0,
    sqrt_ratio_x96_to_token0_per_token1,
    sqrt_price_x96_to_price,
    to_display_amount,
)
from ..math.tick_math import tick_to_sqrt_price_x96
from ..constants import Q96
from ..errors import InvalidPriceError, DecimalsMismatchError, TickOutOfRangeError
from .fixtures import TOKEN_A, TOKEN_B

ONE = 10 ** 18


class TestOrientation:
    """base_is_token0 tests"""

    def test_lower_address_is_token0(self):
        assert base_is_token0(TOKEN_A, TOKEN_B) is True
        assert base_is_token0(TOKEN_B, TOKEN_A) is False

    def test_case_insensitive(self):
        upper = "0x" + "AB" * 20
        lower = "0x" + "cd" * 20
        assert base_is_token0(upper, lower) is True


class TestValidation:
    """decimals / price validation"""

    def test_decimals_bounds(self):
        assert validate_decimals(0) == 0
        assert validate_decimals(36) == 36
        with pytest.raises(DecimalsMismatchError):
            validate_decimals(37)
        with pytest.raises(DecimalsMismatchError):
            validate_decimals(-1)
        with pytest.raises(DecimalsMismatchError):
            validate_decimals(1.5)

    @pytest.mark.parametrize("price", [0, -5, float("nan"), float("inf"), True, "abc", None])
    def test_invalid_prices(self, price):
        with pytest.raises(InvalidPriceError):
            normalize_price(price)

    def test_accepted_price_forms(self):
        assert normalize_price(ONE) == ONE
        assert normalize_price(1e18) == ONE
        assert normalize_price(Decimal("1000.9")) == 1000
        assert normalize_price(str(ONE)) == ONE


class TestPriceToSqrtPrice:
    """price_to_sqrt_price_x96 tests"""

    def test_unit_price_base_token0(self):
        """one base token for one quote unit per base unit -> 2^96"""
        assert price_to_sqrt_price_x96(ONE, TOKEN_A, TOKEN_B, 18) == Q96

    def test_unit_price_base_token1(self):
        assert price_to_sqrt_price_x96(ONE, TOKEN_B, TOKEN_A, 18) == Q96

    def test_orientation_inverts_ratio(self):
        """Doubling the price raises sqrt price for base token0, lowers it for base token1"""
        assert price_to_sqrt_price_x96(2 * ONE, TOKEN_A, TOKEN_B, 18) > Q96
        assert price_to_sqrt_price_x96(2 * ONE, TOKEN_B, TOKEN_A, 18) < Q96


class TestPriceToTick:
    """price_to_tick tests"""

    def test_unit_price(self):
        assert price_to_tick(ONE, 60, TOKEN_A, TOKEN_B, 18) == 0

    def test_rounds_down_to_spacing(self):
        """Just below tick 0 the floor tick is -1, which rounds down to -60"""
        assert price_to_tick(ONE - 1, 1, TOKEN_A, TOKEN_B, 18) == -1
        assert price_to_tick(ONE - 1, 60, TOKEN_A, TOKEN_B, 18) == -60

    def test_double_price(self):
        """log_1.0001(2) = 6931.8"""
        assert price_to_tick(2 * ONE, 1, TOKEN_A, TOKEN_B, 18) == 6931
        assert price_to_tick(2 * ONE, 1, TOKEN_B, TOKEN_A, 18) == -6932

    def test_weth_usdc_price_brackets(self):
        """tick_to_price(t) <= price <= tick_to_price(t + 1) for base token0"""
        price = 2000 * 10 ** 6
        tick = price_to_tick(price, 1, TOKEN_A, TOKEN_B, 18)
        assert tick_to_price(tick, TOKEN_A, TOKEN_B, 18) <= price
        assert price <= tick_to_price(tick + 1, TOKEN_A, TOKEN_B, 18)
        assert -201000 < tick < -199000

    def test_higher_price_lower_tick_for_base_token1(self):
        low = price_to_tick(1000 * 10 ** 6, 1, TOKEN_B, TOKEN_A, 18)
        high = price_to_tick(3000 * 10 ** 6, 1, TOKEN_B, TOKEN_A, 18)
        assert high < low

    def test_invalid_price(self):
        with pytest.raises(InvalidPriceError):
            price_to_tick(0, 60, TOKEN_A, TOKEN_B, 18)
        with pytest.raises(InvalidPriceError):
            price_to_tick(-ONE, 60, TOKEN_A, TOKEN_B, 18)

    def test_price_beyond_tick_bounds(self):
        with pytest.raises(TickOutOfRangeError):
            price_to_tick(10 ** 80, 60, TOKEN_A, TOKEN_B, 18)

    def test_closest_usable_tick(self):
        """The closest tick of a price just below tick 0 is 0, not -1"""
        assert price_to_closest_usable_tick(ONE - 1, 1, TOKEN_A, TOKEN_B, 18) == 0
        assert price_to_closest_usable_tick(ONE - 1, 60, TOKEN_A, TOKEN_B, 18) == 0


class TestTickToPrice:
    """tick_to_price / sqrt ratio conversions"""

    def test_tick_0(self):
        assert tick_to_price(0, TOKEN_A, TOKEN_B, 18) == ONE
        assert tick_to_price(0, TOKEN_B, TOKEN_A, 18) == ONE

    def test_sqrt_ratio_conversions(self):
        assert sqrt_ratio_x96_to_token1_per_token0(Q96, 18) == ONE
        assert sqrt_ratio_x96_to_token0_per_token1(Q96, 6) == 10 ** 6

    def test_token1_per_token0_formula(self):
        sqrt_price = tick_to_sqrt_price_x96(-200311)
        expected = sqrt_price * sqrt_price * 10 ** 18 // 2 ** 192
        assert sqrt_ratio_x96_to_token1_per_token0(sqrt_price, 18) == expected

    def test_weth_usdc_tick(self):
        """tick -200311 is about 2000 USDC per WETH"""
        price = tick_to_price(-200311, TOKEN_A, TOKEN_B, 18)
        assert math.isclose(price / 10 ** 6, 2000, rel_tol=1e-3)

    def test_orientations_are_reciprocal(self):
        """Price of token1 in token0 is the inverse of token0 in token1"""
        sqrt_price = tick_to_sqrt_price_x96(6931)
        base0 = sqrt_price_x96_to_price(sqrt_price, TOKEN_A, TOKEN_B, 18)
        base1 = sqrt_price_x96_to_price(sqrt_price, TOKEN_B, TOKEN_A, 18)
        assert math.isclose(base0 / ONE, ONE / base1, rel_tol=1e-12)

    def test_display_amount(self):
        assert to_display_amount(1_500_000, 6) == 1.5
        assert to_display_amount(0, 18) == 0.0
