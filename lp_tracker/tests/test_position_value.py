"""
Position Value tests

Value in quote units, PnL, range status and hold comparison.
"""

import math

import pytest

from ..math.position_value import (
    PositionPhase,
    RangeStatus,
    amounts_to_quote_value,
    calculate_pnl,
    calculate_position_value,
    calculate_position_value_at_price,
    compare_to_hold_strategy,
    determine_phase,
    determine_range_status,
    percent_of,
)
from ..math.liquidity_math import TokenAmounts, get_token_amounts_from_liquidity
from ..math.price_math import tick_to_price
from ..errors import InvalidPriceError, InvalidRangeError
from .fixtures import TOKEN_A, TOKEN_B, FULL_RANGE_LOWER, FULL_RANGE_UPPER

ONE = 10 ** 18
USDC = 10 ** 6


class TestPhase:
    """determine_phase / determine_range_status"""

    def test_phase_boundaries(self):
        """tick_lower is in range, tick_upper is above"""
        assert determine_phase(-601, -600, 600) is PositionPhase.BELOW
        assert determine_phase(-600, -600, 600) is PositionPhase.IN_RANGE
        assert determine_phase(599, -600, 600) is PositionPhase.IN_RANGE
        assert determine_phase(600, -600, 600) is PositionPhase.ABOVE

    def test_phase_values(self):
        assert PositionPhase.BELOW.value == "below"
        assert PositionPhase.IN_RANGE.value == "in-range"
        assert PositionPhase.ABOVE.value == "above"

    def test_range_status(self):
        assert determine_range_status(0, -600, 600) is RangeStatus.IN_RANGE
        assert determine_range_status(-700, -600, 600) is RangeStatus.OUT_OF_RANGE_BELOW
        assert determine_range_status(600, -600, 600) is RangeStatus.OUT_OF_RANGE_ABOVE


class TestAmountsToQuoteValue:
    """amounts_to_quote_value tests"""

    def test_base_token0(self):
        """2 WETH at 2000 USDC + 100 USDC"""
        amounts = TokenAmounts(2 * ONE, 100 * USDC)
        assert amounts_to_quote_value(amounts, 2000 * USDC, True, 18) == 4100 * USDC

    def test_base_token1(self):
        """100 USDC as token0 + 2 WETH as token1"""
        amounts = TokenAmounts(100 * USDC, 2 * ONE)
        assert amounts_to_quote_value(amounts, 2000 * USDC, False, 18) == 4100 * USDC

    def test_floors_base_conversion(self):
        amounts = TokenAmounts(1, 0)
        assert amounts_to_quote_value(amounts, 2000 * USDC, True, 18) == 0


class TestPositionValue:
    """calculate_position_value / calculate_position_value_at_price"""

    def test_full_range_value_matches_amounts(self):
        """Full range at tick 0: value equals the independently valued amounts"""
        liquidity = ONE
        amounts = get_token_amounts_from_liquidity(liquidity, 0, FULL_RANGE_LOWER, FULL_RANGE_UPPER)
        assert amounts.token0_amount > 0
        assert amounts.token1_amount > 0

        price = tick_to_price(0, TOKEN_A, TOKEN_B, 18)
        assert price == ONE
        expected = amounts.token0_amount * price // ONE + amounts.token1_amount

        value = calculate_position_value_at_price(
            liquidity, FULL_RANGE_LOWER, FULL_RANGE_UPPER, price, TOKEN_A, TOKEN_B, 18, 60
        )
        assert value == expected
        assert calculate_position_value(
            liquidity, 0, FULL_RANGE_LOWER, FULL_RANGE_UPPER, price, True, 18
        ) == expected

    def test_above_range_holds_only_quote(self):
        """Narrow range 200000-201000 above range: value is the token1 amount"""
        liquidity = ONE
        amounts = get_token_amounts_from_liquidity(liquidity, 202500, 200000, 201000)
        price = tick_to_price(202500, TOKEN_A, TOKEN_B, 18)

        value = calculate_position_value(liquidity, 202500, 200000, 201000, price, True, 18)
        assert amounts.token0_amount == 0
        assert value == amounts.token1_amount

        at_price = calculate_position_value_at_price(
            liquidity, 200000, 201000, price, TOKEN_A, TOKEN_B, 18, 10
        )
        assert at_price == value

    def test_below_range_base_token1(self):
        """Quote as token0: below the range the position is all quote"""
        liquidity = ONE
        amounts = get_token_amounts_from_liquidity(liquidity, -1200, -600, 600)
        value = calculate_position_value(liquidity, -1200, -600, 600, 2000 * USDC, False, 18)
        assert value == amounts.token0_amount

    def test_continuous_at_upper_bound(self):
        """Crossing tick_upper in price does not jump the value"""
        liquidity = ONE
        bound_price = tick_to_price(600, TOKEN_A, TOKEN_B, 18)
        inside = calculate_position_value_at_price(
            liquidity, -600, 600, bound_price - 10 ** 6, TOKEN_A, TOKEN_B, 18, 60
        )
        outside = calculate_position_value_at_price(
            liquidity, -600, 600, bound_price + 10 ** 6, TOKEN_A, TOKEN_B, 18, 60
        )
        assert math.isclose(inside, outside, rel_tol=1e-9)

    def test_continuous_at_lower_bound(self):
        liquidity = ONE
        bound_price = tick_to_price(-600, TOKEN_A, TOKEN_B, 18)
        below = calculate_position_value_at_price(
            liquidity, -600, 600, bound_price - 10 ** 6, TOKEN_A, TOKEN_B, 18, 60
        )
        inside = calculate_position_value_at_price(
            liquidity, -600, 600, bound_price + 10 ** 6, TOKEN_A, TOKEN_B, 18, 60
        )
        assert math.isclose(below, inside, rel_tol=1e-9)

    def test_value_grows_with_price_base_token0(self):
        liquidity = ONE
        values = [
            calculate_position_value_at_price(
                liquidity, -600, 600, price, TOKEN_A, TOKEN_B, 18, 60
            )
            for price in (ONE // 2, ONE, 2 * ONE)
        ]
        assert values[0] < values[1] < values[2]

    def test_invalid_inputs(self):
        with pytest.raises(InvalidPriceError):
            calculate_position_value(ONE, 0, -600, 600, 0, True, 18)
        with pytest.raises(InvalidPriceError):
            calculate_position_value_at_price(ONE, -600, 600, -1, TOKEN_A, TOKEN_B, 18, 60)
        with pytest.raises(InvalidRangeError):
            calculate_position_value_at_price(ONE, 600, -600, ONE, TOKEN_A, TOKEN_B, 18, 60)


class TestPnl:
    """calculate_pnl / percent_of"""

    def test_profit(self):
        assert calculate_pnl(150, 100) == (50, 50.0)

    def test_loss_truncates_toward_zero(self):
        """-2/3 = -66.666..% truncates to -66.66"""
        pnl, pct = calculate_pnl(1, 3)
        assert pnl == -2
        assert pct == -66.66

    def test_zero_initial_value(self):
        assert calculate_pnl(500, 0) == (500, 0.0)

    def test_percent_of(self):
        assert percent_of(1, 3) == 33.33
        assert percent_of(5, -10) == 0.0


class TestHoldComparison:
    """compare_to_hold_strategy tests"""

    def test_position_beats_hold(self):
        """2100 USDC position vs 1 WETH held at 2000 USDC"""
        result = compare_to_hold_strategy(2100 * USDC, ONE, 0, 2000 * USDC, True, 18)
        assert result.hold_value == 2000 * USDC
        assert result.advantage == 100 * USDC
        assert result.advantage_percent == 5.0

    def test_impermanent_loss(self):
        result = compare_to_hold_strategy(1900 * USDC, 0, 2000 * USDC, 2000 * USDC, True, 18)
        assert result.advantage == -100 * USDC
        assert result.advantage_percent == -5.0
