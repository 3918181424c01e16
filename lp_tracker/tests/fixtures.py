"""Shared test data"""

from ..data.types import PoolSnapshot, PositionRecord, TokenInfo

# token0 sorts below token1
TOKEN_A = "0x" + "11" * 20
TOKEN_B = "0x" + "22" * 20

FULL_RANGE_LOWER = -887220
FULL_RANGE_UPPER = 887220

# WETH (18) / USDC (6) style pool around 2000 USDC per WETH
WETH = TokenInfo(address=TOKEN_A, decimals=18, symbol="WETH")
USDC = TokenInfo(address=TOKEN_B, decimals=6, symbol="USDC")
RANGE_LOWER = -202200
RANGE_UPPER = -198000


def make_position(
    position_id="1",
    liquidity=10 ** 15,
    tick_lower=RANGE_LOWER,
    tick_upper=RANGE_UPPER,
    token0_is_quote=False,
    initial_value=10_000 * 10 ** 6,
    current_price=2000 * 10 ** 6,
    fee=3000,
    token0=WETH,
    token1=USDC,
):
    return PositionRecord(
        id=position_id,
        liquidity=liquidity,
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        token0_is_quote=token0_is_quote,
        initial_value=initial_value,
        pool=PoolSnapshot(token0=token0, token1=token1, fee=fee, current_price=current_price),
    )


class FakeClock:
    """Manually advanced time source"""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds
