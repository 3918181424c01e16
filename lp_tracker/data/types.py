"""
Position snapshot records

Positions and pools arrive as JSON with big integers encoded as decimal
strings. All numeric fields are parsed to int to keep on-chain precision.
"""

from dataclasses import dataclass
from typing import Optional

from ..constants import DEFAULT_TICK_SPACING, TICK_SPACINGS


def _optional_int(value) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


@dataclass(frozen=True)
class TokenInfo:
    """ERC20 token"""
    address: str  # contract address
    decimals: int
    symbol: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "TokenInfo":
        return cls(
            address=data.get("address") or data["id"],
            decimals=int(data["decimals"]),
            symbol=data.get("symbol", ""),
        )


@dataclass(frozen=True)
class PoolSnapshot:
    """Pool state a curve is drawn against

    current_price is quote units per whole base token of the position that
    owns this snapshot; None when the price is unknown.
    """
    token0: TokenInfo
    token1: TokenInfo
    fee: int  # fee tier (100, 500, 3000, 10000)
    current_price: Optional[int] = None
    current_tick: Optional[int] = None
    sqrt_price_x96: Optional[int] = None

    @property
    def tick_spacing(self) -> int:
        # unknown tiers fall back to the 0.3% spacing
        return TICK_SPACINGS.get(self.fee, DEFAULT_TICK_SPACING)

    @classmethod
    def from_dict(cls, data: dict) -> "PoolSnapshot":
        return cls(
            token0=TokenInfo.from_dict(data["token0"]),
            token1=TokenInfo.from_dict(data["token1"]),
            fee=int(data.get("fee", data.get("feeTier", 3000))),
            current_price=_optional_int(data.get("currentPrice")),
            current_tick=_optional_int(data.get("currentTick", data.get("tick"))),
            sqrt_price_x96=_optional_int(data.get("sqrtPriceX96", data.get("sqrtPrice"))),
        )


@dataclass(frozen=True)
class PositionRecord:
    """Liquidity position with the data needed for value and curve math

    - liquidity: position liquidity (l)
    - tick_lower / tick_upper: range bounds (i_l, i_u)
    - token0_is_quote: which side is the accounting currency
    - initial_value: cost basis in quote smallest units
    """
    id: str
    liquidity: int
    tick_lower: int
    tick_upper: int
    token0_is_quote: bool
    initial_value: int
    pool: PoolSnapshot

    @property
    def base_is_token0(self) -> bool:
        return not self.token0_is_quote

    @property
    def base_token(self) -> TokenInfo:
        return self.pool.token1 if self.token0_is_quote else self.pool.token0

    @property
    def quote_token(self) -> TokenInfo:
        return self.pool.token0 if self.token0_is_quote else self.pool.token1

    @classmethod
    def from_dict(cls, data: dict) -> "PositionRecord":
        return cls(
            id=str(data["id"]),
            liquidity=int(data["liquidity"]),
            tick_lower=int(data["tickLower"]),
            tick_upper=int(data["tickUpper"]),
            token0_is_quote=bool(data["token0IsQuote"]),
            initial_value=int(data.get("initialValue", 0)),
            pool=PoolSnapshot.from_dict(data["pool"]),
        )
