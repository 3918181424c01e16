"""
Fee Math tests

Fee growth bookkeeping (whitepaper Sections 6.3, 6.4) and unclaimed fees.
"""

from ..math.fee_math import (
    UINT256_MODULUS,
    FeeCalculationResult,
    fee_growth_above,
    fee_growth_below,
    fee_growth_inside,
    calculate_fee_growth_delta,
    calculate_uncollected_fees,
    calculate_unclaimed_fees,
    unclaimed_fees_in_quote,
)
from ..math.liquidity_math import TokenAmounts
from ..constants import Q128


class TestFeeGrowthAbove:
    """fee_growth_above tests (f_a)"""

    def test_current_tick_above_target(self):
        """i_c >= i: f_a = f_g - f_o"""
        assert fee_growth_above(tick_idx=100, current_tick=150, fee_growth_global=1000, fee_growth_outside=300) == 700

    def test_current_tick_at_target(self):
        assert fee_growth_above(tick_idx=100, current_tick=100, fee_growth_global=1000, fee_growth_outside=300) == 700

    def test_current_tick_below_target(self):
        """i_c < i: f_a = f_o"""
        assert fee_growth_above(tick_idx=100, current_tick=50, fee_growth_global=1000, fee_growth_outside=300) == 300


class TestFeeGrowthBelow:
    """fee_growth_below tests (f_b)"""

    def test_current_tick_above_target(self):
        assert fee_growth_below(tick_idx=100, current_tick=150, fee_growth_global=1000, fee_growth_outside=300) == 300

    def test_current_tick_at_target(self):
        assert fee_growth_below(tick_idx=100, current_tick=100, fee_growth_global=1000, fee_growth_outside=300) == 300

    def test_current_tick_below_target(self):
        assert fee_growth_below(tick_idx=100, current_tick=50, fee_growth_global=1000, fee_growth_outside=300) == 700


class TestFeeGrowthInside:
    """fee_growth_inside tests

    f_r = f_g - f_b(i_l) - f_a(i_u)
    """

    def test_current_tick_in_range(self):
        result = fee_growth_inside(
            tick_lower=100, tick_upper=200, current_tick=150,
            fee_growth_global=1000,
            fee_growth_outside_lower=100,
            fee_growth_outside_upper=200
        )
        # 1000 - 100 - 200
        assert result == 700

    def test_current_tick_below_range(self):
        """Wraps like unchecked uint256 subtraction"""
        result = fee_growth_inside(
            tick_lower=100, tick_upper=200, current_tick=50,
            fee_growth_global=1000,
            fee_growth_outside_lower=100,
            fee_growth_outside_upper=200
        )
        # f_b = 900, f_a = 200 -> -100
        assert result == UINT256_MODULUS - 100

    def test_current_tick_above_range(self):
        result = fee_growth_inside(
            tick_lower=100, tick_upper=200, current_tick=250,
            fee_growth_global=1000,
            fee_growth_outside_lower=100,
            fee_growth_outside_upper=200
        )
        # f_b = 100, f_a = 800
        assert result == 100


class TestUncollectedFees:
    """calculate_uncollected_fees tests

    f_u = l * (f_r(t_1) - f_r(t_0)) / 2^128
    """

    def test_basic_calculation(self):
        """One unit of growth per liquidity for liquidity 1000"""
        assert calculate_uncollected_fees(1000, 5 * Q128, 4 * Q128) == 1000

    def test_no_growth(self):
        assert calculate_uncollected_fees(10 ** 18, 7 * Q128, 7 * Q128) == 0

    def test_rounds_down(self):
        assert calculate_uncollected_fees(3, Q128 // 2, 0) == 1

    def test_delta_wraps_around(self):
        """A current value past the uint256 overflow still gives a positive delta"""
        last = UINT256_MODULUS - Q128
        current = Q128
        assert calculate_fee_growth_delta(current, last) == 2 * Q128
        assert calculate_uncollected_fees(10, current, last) == 20


class TestUnclaimedFees:
    """calculate_unclaimed_fees tests"""

    def test_both_tokens(self):
        result = calculate_unclaimed_fees(
            liquidity=1000,
            tick_lower=100,
            tick_upper=200,
            current_tick=150,
            fee_growth_global_0=10 * Q128,
            fee_growth_global_1=20 * Q128,
            fee_growth_outside_lower_0=Q128,
            fee_growth_outside_lower_1=2 * Q128,
            fee_growth_outside_upper_0=Q128,
            fee_growth_outside_upper_1=2 * Q128,
            fee_growth_inside_last_0=5 * Q128,
            fee_growth_inside_last_1=10 * Q128,
        )
        assert isinstance(result, FeeCalculationResult)
        # inside_0 = 10 - 1 - 1 = 8, inside_1 = 20 - 2 - 2 = 16
        assert result.fee_growth_inside_0 == 8 * Q128
        assert result.fee_growth_inside_1 == 16 * Q128
        assert result.uncollected_fees_0 == 3000
        assert result.uncollected_fees_1 == 6000
        assert result.amounts == TokenAmounts(3000, 6000)

    def test_tokens_owed_are_added(self):
        result = calculate_unclaimed_fees(
            liquidity=1000,
            tick_lower=100,
            tick_upper=200,
            current_tick=150,
            fee_growth_global_0=2 * Q128,
            fee_growth_global_1=2 * Q128,
            fee_growth_outside_lower_0=0,
            fee_growth_outside_lower_1=0,
            fee_growth_outside_upper_0=0,
            fee_growth_outside_upper_1=0,
            fee_growth_inside_last_0=Q128,
            fee_growth_inside_last_1=2 * Q128,
            tokens_owed_0=7,
            tokens_owed_1=11,
        )
        assert result.uncollected_fees_0 == 1007
        assert result.uncollected_fees_1 == 11

    def test_out_of_range_position_stops_earning(self):
        """Below the range the inside growth equals the stored checkpoint"""
        result = calculate_unclaimed_fees(
            liquidity=10 ** 18,
            tick_lower=100,
            tick_upper=200,
            current_tick=50,
            fee_growth_global_0=1000,
            fee_growth_global_1=1000,
            fee_growth_outside_lower_0=100,
            fee_growth_outside_lower_1=100,
            fee_growth_outside_upper_0=200,
            fee_growth_outside_upper_1=200,
            fee_growth_inside_last_0=UINT256_MODULUS - 100,
            fee_growth_inside_last_1=UINT256_MODULUS - 100,
        )
        assert result.amounts == TokenAmounts(0, 0)


class TestUnclaimedFeesInQuote:
    """unclaimed_fees_in_quote tests"""

    def test_base_token0(self):
        """0.0025 WETH at 2000 USDC plus 0 USDC"""
        fees = TokenAmounts(25 * 10 ** 14, 0)
        assert unclaimed_fees_in_quote(fees, 2000 * 10 ** 6, True, 18) == 5 * 10 ** 6

    def test_both_sides(self):
        """1 WETH + 5 USDC at 2000 USDC/WETH"""
        fees = TokenAmounts(10 ** 18, 5 * 10 ** 6)
        assert unclaimed_fees_in_quote(fees, 2000 * 10 ** 6, True, 18) == 2005 * 10 ** 6

    def test_base_token1(self):
        """USDC as token0 is already quote"""
        fees = TokenAmounts(5 * 10 ** 6, 10 ** 18)
        assert unclaimed_fees_in_quote(fees, 2000 * 10 ** 6, False, 18) == 2005 * 10 ** 6
