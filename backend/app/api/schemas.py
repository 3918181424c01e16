"""
API Request/Response Schemas using Pydantic

Defines data models for the position math API endpoints. On-chain integers
(liquidity, amounts, prices in quote smallest units) travel as decimal
strings and are parsed to int on the way in.
"""
from pydantic import BaseModel, BeforeValidator, Field, field_validator
from typing import Annotated, List, Optional, Union
from datetime import datetime, timezone

from lp_tracker.apr.types import EventType


def _parse_big_int(value):
    if isinstance(value, bool):
        raise ValueError("expected an integer, got a boolean")
    if isinstance(value, str):
        return int(value.strip())
    return value


BigInt = Annotated[int, BeforeValidator(_parse_big_int)]


class TokenSchema(BaseModel):
    """ERC20 token"""
    address: str = Field(..., description="Token contract address")
    decimals: int = Field(..., description="Token decimals", ge=0, le=36)
    symbol: str = Field(default="", description="Token symbol")

    class Config:
        json_schema_extra = {
            "example": {
                "address": "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
                "decimals": 18,
                "symbol": "WETH"
            }
        }


class PoolSchema(BaseModel):
    """Pool snapshot a position is evaluated against"""
    token0: TokenSchema = Field(..., description="Pool token0 (lower address)")
    token1: TokenSchema = Field(..., description="Pool token1 (higher address)")
    fee: int = Field(default=3000, description="Fee tier in hundredths of a bip (100, 500, 3000, 10000)")
    current_price: Optional[BigInt] = Field(None, description="Quote smallest units per whole base token")
    current_tick: Optional[int] = Field(None, description="Current pool tick")
    sqrt_price_x96: Optional[BigInt] = Field(None, description="Current pool sqrtPriceX96")


class AmountsRequest(BaseModel):
    """Request payload for POST /api/v1/positions/amounts"""
    liquidity: BigInt = Field(..., description="Position liquidity", ge=0)
    current_tick: int = Field(..., description="Current pool tick")
    tick_lower: int = Field(..., description="Lower tick of the position")
    tick_upper: int = Field(..., description="Upper tick of the position")
    sqrt_price_x96: Optional[BigInt] = Field(None, description="Exact pool sqrtPriceX96 for the in-range split", gt=0)

    class Config:
        json_schema_extra = {
            "example": {
                "liquidity": "1000000000000000000",
                "current_tick": 0,
                "tick_lower": -887220,
                "tick_upper": 887220
            }
        }


class AmountsResponse(BaseModel):
    """Response payload for POST /api/v1/positions/amounts"""
    token0_amount: str = Field(..., description="token0 amount (smallest units)")
    token1_amount: str = Field(..., description="token1 amount (smallest units)")


class ValueRequest(BaseModel):
    """Request payload for POST /api/v1/positions/value"""
    liquidity: BigInt = Field(..., description="Position liquidity", ge=0)
    tick_lower: int = Field(..., description="Lower tick of the position")
    tick_upper: int = Field(..., description="Upper tick of the position")
    price: BigInt = Field(..., description="Quote smallest units per whole base token", gt=0)
    base_token: TokenSchema = Field(..., description="Token the price is quoted for")
    quote_token: TokenSchema = Field(..., description="Accounting token")
    tick_spacing: int = Field(default=60, description="Pool tick spacing", ge=1)
    initial_value: Optional[BigInt] = Field(None, description="Cost basis in quote smallest units")

    class Config:
        json_schema_extra = {
            "example": {
                "liquidity": "1000000000000000",
                "tick_lower": -202200,
                "tick_upper": -198000,
                "price": "2000000000",
                "base_token": {"address": "0x1111111111111111111111111111111111111111", "decimals": 18},
                "quote_token": {"address": "0x2222222222222222222222222222222222222222", "decimals": 6},
                "tick_spacing": 60,
                "initial_value": "10000000000"
            }
        }


class ValueResponse(BaseModel):
    """Response payload for POST /api/v1/positions/value"""
    value: str = Field(..., description="Position value (quote smallest units)")
    tick: int = Field(..., description="Usable tick of the price")
    phase: str = Field(..., description="below, in-range or above")
    pnl: Optional[str] = Field(None, description="value - initial_value (quote smallest units)")
    pnl_percent: Optional[float] = Field(None, description="PnL in percent of initial_value")


class CurveRequest(BaseModel):
    """Request payload for POST /api/v1/positions/curve"""
    id: str = Field(..., description="Position id")
    liquidity: BigInt = Field(..., description="Position liquidity", ge=0)
    tick_lower: int = Field(..., description="Lower tick of the position")
    tick_upper: int = Field(..., description="Upper tick of the position")
    token0_is_quote: bool = Field(..., description="True when token0 is the accounting token")
    initial_value: BigInt = Field(..., description="Cost basis in quote smallest units")
    pool: PoolSchema = Field(..., description="Pool snapshot")

    class Config:
        json_schema_extra = {
            "example": {
                "id": "12345",
                "liquidity": "1000000000000000",
                "tick_lower": -202200,
                "tick_upper": -198000,
                "token0_is_quote": False,
                "initial_value": "10000000000",
                "pool": {
                    "token0": {"address": "0x1111111111111111111111111111111111111111", "decimals": 18, "symbol": "WETH"},
                    "token1": {"address": "0x2222222222222222222222222222222222222222", "decimals": 6, "symbol": "USDC"},
                    "fee": 3000,
                    "current_price": "2000000000"
                }
            }
        }


class ChartPointSchema(BaseModel):
    price: float
    pnl: float
    phase: str


class ValueRangeSchema(BaseModel):
    min: float
    max: float


class RangeIndicesSchema(BaseModel):
    lower: int
    upper: int


class CurveDataResponse(BaseModel):
    """Response payload for POST /api/v1/positions/curve (display units)"""
    points: List[ChartPointSchema] = Field(..., description="Curve samples in ascending price order")
    price_range: ValueRangeSchema = Field(..., description="Price axis bounds")
    pnl_range: ValueRangeSchema = Field(..., description="PnL axis bounds")
    current_price_index: int = Field(..., description="Index of the sample closest to the current price")
    range_indices: RangeIndicesSchema = Field(..., description="Samples closest to the range bounds")
    lower_price: float = Field(..., description="Price at the lower range bound")
    upper_price: float = Field(..., description="Price at the upper range bound")
    current_price: float = Field(..., description="Current price")


class PositionEventSchema(BaseModel):
    """Position ledger event"""
    event_id: str = Field(..., description="Event id")
    event_type: EventType = Field(..., description="INCREASE, DECREASE or COLLECT")
    timestamp: Union[datetime, int] = Field(..., description="ISO 8601 time or unix seconds")
    cost_basis_after: BigInt = Field(..., description="Cost basis after the event (quote smallest units)")
    amount0: BigInt = Field(default=0, description="token0 amount of the event")
    amount1: BigInt = Field(default=0, description="token1 amount of the event")
    fee_value_in_quote: BigInt = Field(default=0, description="Collected fee value (COLLECT only)")

    @field_validator("event_type", mode="before")
    @classmethod
    def _upper_event_type(cls, value):
        return value.upper() if isinstance(value, str) else value


class AprRequest(BaseModel):
    """Request payload for POST /api/v1/positions/apr"""
    events: List[PositionEventSchema] = Field(default_factory=list, description="Ledger events in any order")
    unclaimed_fees: Optional[BigInt] = Field(None, description="Unclaimed fees in quote smallest units")
    now: Optional[datetime] = Field(None, description="Evaluation time (default: now)")

    class Config:
        json_schema_extra = {
            "example": {
                "events": [
                    {"event_id": "1", "event_type": "INCREASE", "timestamp": "2024-01-01T00:00:00Z",
                     "cost_basis_after": "1000000000"},
                    {"event_id": "2", "event_type": "COLLECT", "timestamp": "2024-01-11T00:00:00Z",
                     "cost_basis_after": "1000000000", "fee_value_in_quote": "10000000"}
                ],
                "unclaimed_fees": "5000000",
                "now": "2024-01-21T00:00:00Z"
            }
        }


class CapitalPeriodSchema(BaseModel):
    event_id: str
    start: datetime
    end: Optional[datetime]
    duration_days: Optional[float]
    cost_basis: str
    allocated_fees: str
    period_apr: float


class PnlBreakdownResponse(BaseModel):
    """Response payload for POST /api/v1/positions/apr"""
    realized_apr: float = Field(..., description="APR of collected fees")
    realized_fees_collected: str = Field(..., description="Collected fees (quote smallest units)")
    realized_tw_cost_basis: str = Field(..., description="Time-weighted cost basis of realized periods")
    realized_active_days: float = Field(..., description="Active days up to the last collect")
    unrealized_apr: Optional[float] = Field(None, description="APR of unclaimed fees, null when unknown")
    unrealized_fees_unclaimed: Optional[str] = Field(None, description="Unclaimed fees, null when unknown")
    unrealized_cost_basis: str = Field(..., description="Current cost basis")
    unrealized_active_days: float = Field(..., description="Days since the last collect")
    total_apr: float = Field(..., description="Cost-basis-days weighted APR")
    total_active_days: float = Field(..., description="Realized plus unrealized days")
    total_tw_cost_basis: str = Field(..., description="Time-weighted cost basis over all active days")
    periods: List[CapitalPeriodSchema] = Field(default_factory=list, description="Capital periods")
    calculated_at: datetime = Field(..., description="Evaluation time")


class HealthCheckResponse(BaseModel):
    """Response payload for GET /api/v1/health endpoint"""
    status: str = Field(..., description="Health status (healthy or unhealthy)")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Health check timestamp")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "version": "0.1.0",
                "timestamp": "2024-01-15T10:30:00Z"
            }
        }


class ErrorResponse(BaseModel):
    """Error payload for calculation failures"""
    error: str = Field(..., description="Error type")
    detail: str = Field(..., description="Error message")

    class Config:
        json_schema_extra = {
            "example": {
                "error": "InvalidRangeError",
                "detail": "tick_lower must be below tick_upper: 600 >= -600"
            }
        }
