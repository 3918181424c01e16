"""
Position Endpoints

Token amounts, value, PnL curve and APR breakdown of a liquidity position.
Library errors (PositionMathError) are turned into 422 responses by the
application exception handler.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.schemas import (
    AmountsRequest,
    AmountsResponse,
    AprRequest,
    CurveDataResponse,
    CurveRequest,
    PnlBreakdownResponse,
    ValueRequest,
    ValueResponse,
)
from app.config import settings
from lp_tracker.apr.breakdown import calculate_apr_breakdown
from lp_tracker.apr.types import PositionEvent, parse_timestamp
from lp_tracker.curve.cache import InMemoryCurveCache
from lp_tracker.curve.curve_data import CurveDataService
from lp_tracker.data.types import PoolSnapshot, PositionRecord, TokenInfo
from lp_tracker.errors import PositionMathError
from lp_tracker.math.liquidity_math import get_token_amounts_from_liquidity
from lp_tracker.math.position_value import (
    calculate_pnl,
    calculate_position_value_at_price,
    determine_phase,
)
from lp_tracker.math.price_math import price_to_tick

logger = logging.getLogger(__name__)

router = APIRouter()

_curve_service = CurveDataService(
    cache=InMemoryCurveCache(
        ttl_seconds=settings.CURVE_CACHE_TTL_SECONDS,
        max_entries=settings.CURVE_CACHE_MAX_ENTRIES,
    ),
    sample_count=settings.CURVE_SAMPLE_COUNT,
    buffer_percent=settings.CURVE_BUFFER_PERCENT,
)


def get_curve_service() -> CurveDataService:
    """Curve service shared by the curve endpoint"""
    return _curve_service


def _to_position_record(request: CurveRequest) -> PositionRecord:
    pool = request.pool
    return PositionRecord(
        id=request.id,
        liquidity=request.liquidity,
        tick_lower=request.tick_lower,
        tick_upper=request.tick_upper,
        token0_is_quote=request.token0_is_quote,
        initial_value=request.initial_value,
        pool=PoolSnapshot(
            token0=TokenInfo(**pool.token0.model_dump()),
            token1=TokenInfo(**pool.token1.model_dump()),
            fee=pool.fee,
            current_price=pool.current_price,
            current_tick=pool.current_tick,
            sqrt_price_x96=pool.sqrt_price_x96,
        ),
    )


@router.post("/positions/amounts", response_model=AmountsResponse)
async def position_amounts(request: AmountsRequest):
    """
    Token amounts held by liquidity at the current tick

    Returns:
        AmountsResponse with both amounts as decimal strings
    """
    amounts = get_token_amounts_from_liquidity(
        request.liquidity,
        request.current_tick,
        request.tick_lower,
        request.tick_upper,
        sqrt_price_x96=request.sqrt_price_x96,
    )
    return AmountsResponse(
        token0_amount=str(amounts.token0_amount),
        token1_amount=str(amounts.token1_amount),
    )


@router.post("/positions/value", response_model=ValueResponse)
async def position_value(request: ValueRequest):
    """
    Value of a position at a price

    Flow:
    1. Map the price to its usable tick
    2. Value the position's token amounts in the quote token
    3. Compare with initial_value when given

    Returns:
        ValueResponse with value (and PnL) in quote smallest units
    """
    base = request.base_token
    quote = request.quote_token

    tick = price_to_tick(request.price, request.tick_spacing, base.address, quote.address, base.decimals)
    value = calculate_position_value_at_price(
        request.liquidity,
        request.tick_lower,
        request.tick_upper,
        request.price,
        base.address,
        quote.address,
        base.decimals,
        request.tick_spacing,
    )

    pnl = pnl_percent = None
    if request.initial_value is not None:
        pnl, pnl_percent = calculate_pnl(value, request.initial_value)

    return ValueResponse(
        value=str(value),
        tick=tick,
        phase=determine_phase(tick, request.tick_lower, request.tick_upper).value,
        pnl=None if pnl is None else str(pnl),
        pnl_percent=pnl_percent,
    )


@router.post("/positions/curve", response_model=CurveDataResponse)
async def position_curve(
    request: CurveRequest,
    service: CurveDataService = Depends(get_curve_service)
):
    """
    Chart-ready PnL curve of a position

    Curves are cached per position id and current price.

    Returns:
        CurveDataResponse in display units of the quote token
    """
    position = _to_position_record(request)
    if not service.validate_position(position):
        raise HTTPException(
            status_code=400,
            detail=f"Position {request.id} cannot be charted: needs liquidity, a valid range and an initial value"
        )

    try:
        data = service.get_curve_data(position)
    except PositionMathError:
        raise
    except Exception as e:
        logger.exception(f"Curve generation failed for position {request.id}")
        raise HTTPException(
            status_code=500,
            detail=f"Curve generation failed: {str(e)}"
        )

    return data.to_dict()


@router.post("/positions/apr", response_model=PnlBreakdownResponse)
async def position_apr(request: AprRequest):
    """
    Realized, unrealized and total APR from a position's event history

    Missing history degrades to zero (or null) figures instead of failing.
    """
    try:
        events = [
            PositionEvent(
                event_id=event.event_id,
                event_type=event.event_type,
                timestamp=parse_timestamp(event.timestamp),
                cost_basis_after=event.cost_basis_after,
                amount0=event.amount0,
                amount1=event.amount1,
                fee_value_in_quote=event.fee_value_in_quote,
            )
            for event in request.events
        ]
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid event: {str(e)}")

    now = parse_timestamp(request.now) if request.now is not None else None
    breakdown = calculate_apr_breakdown(events, unclaimed_fees=request.unclaimed_fees, now=now)

    logger.info(
        f"APR breakdown for {len(events)} events: total={breakdown.total_apr:.2f}%"
    )
    return breakdown.to_dict()
