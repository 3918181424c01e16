"""Chart-ready PnL curve data for positions."""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Optional

from ..constants import (
    DEFAULT_CURVE_BUFFER_PERCENT,
    DEFAULT_CURVE_DATA_SAMPLES,
    MAX_TICK,
    MIN_TICK,
)
from ..data.types import PositionRecord
from ..errors import PositionMathError
from ..math.position_value import PositionPhase
from ..math.price_math import price_to_tick, tick_to_price, to_display_amount
from ..math.tick_math import nearest_usable_tick
from .cache import CurveCache, NullCurveCache
from .pnl_curve import PriceRange, generate_pnl_curve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartPoint:
    """Curve sample in display units (quote token, float)"""
    price: float
    pnl: float
    phase: PositionPhase


@dataclass(frozen=True)
class ValueRange:
    min: float
    max: float


@dataclass(frozen=True)
class RangeIndices:
    lower: int
    upper: int


@dataclass(frozen=True)
class CurveData:
    """Everything a chart needs to draw a position's PnL curve"""
    points: List[ChartPoint]
    price_range: ValueRange
    pnl_range: ValueRange
    current_price_index: int
    range_indices: RangeIndices
    lower_price: float
    upper_price: float
    current_price: float

    def to_dict(self) -> dict:
        data = asdict(self)
        for point in data["points"]:
            point["phase"] = point["phase"].value
        return data


@dataclass(frozen=True)
class PositionParams:
    """Position fields resolved for curve math"""
    liquidity: int
    tick_lower: int
    tick_upper: int
    current_tick: int
    base_token_address: str
    quote_token_address: str
    base_decimals: int
    quote_decimals: int
    base_is_token0: bool
    initial_value: int
    current_price: int
    tick_spacing: int


def _nearest_index(values: List[float], target: float) -> int:
    """Index of the value closest to target (first one on ties)"""
    return min(range(len(values)), key=lambda i: abs(values[i] - target))


class CurveDataService:
    """Builds CurveData for positions.

    The price axis spans the position range plus a buffer of
    buffer_percent of the range width on each side. A cache, when given,
    is consulted by get_curve_data only.
    """

    def __init__(
        self,
        cache: Optional[CurveCache] = None,
        sample_count: int = DEFAULT_CURVE_DATA_SAMPLES,
        buffer_percent: int = DEFAULT_CURVE_BUFFER_PERCENT
    ):
        if sample_count < 2:
            raise ValueError(f"sample_count must be at least 2, got {sample_count}")
        if buffer_percent < 0:
            raise ValueError(f"buffer_percent must not be negative, got {buffer_percent}")

        self.cache = cache if cache is not None else NullCurveCache()
        self.sample_count = sample_count
        self.buffer_percent = buffer_percent

    def extract_position_params(self, position: PositionRecord) -> PositionParams:
        """Resolve base/quote orientation, current price and current tick.

        Without a current price in the pool snapshot the midpoint of the
        range prices is used instead.
        """
        base = position.base_token
        quote = position.quote_token
        tick_spacing = position.pool.tick_spacing

        current_price = position.pool.current_price
        if not current_price:
            lower_price = tick_to_price(position.tick_lower, base.address, quote.address, base.decimals)
            upper_price = tick_to_price(position.tick_upper, base.address, quote.address, base.decimals)
            current_price = (lower_price + upper_price) // 2
            logger.debug(f"Position {position.id}: no current price, using range midpoint {current_price}")

        try:
            current_tick = price_to_tick(
                current_price, tick_spacing, base.address, quote.address, base.decimals
            )
        except PositionMathError as e:
            current_tick = (position.tick_lower + position.tick_upper) // 2
            logger.debug(f"Position {position.id}: current tick unavailable ({e}), using range midpoint")

        return PositionParams(
            liquidity=position.liquidity,
            tick_lower=position.tick_lower,
            tick_upper=position.tick_upper,
            current_tick=current_tick,
            base_token_address=base.address,
            quote_token_address=quote.address,
            base_decimals=base.decimals,
            quote_decimals=quote.decimals,
            base_is_token0=position.base_is_token0,
            initial_value=position.initial_value,
            current_price=current_price,
            tick_spacing=tick_spacing,
        )

    def _price_domain(self, params: PositionParams) -> PriceRange:
        """Prices that map back onto usable ticks"""
        edge_prices = [
            tick_to_price(
                nearest_usable_tick(tick, params.tick_spacing),
                params.base_token_address,
                params.quote_token_address,
                params.base_decimals,
            )
            for tick in (MIN_TICK, MAX_TICK)
        ]
        return PriceRange(max(1, min(edge_prices)), max(1, max(edge_prices)))

    def generate_curve_data(self, position: PositionRecord) -> CurveData:
        """Generate CurveData for a position (no caching)."""
        params = self.extract_position_params(position)

        range_prices = [
            tick_to_price(tick, params.base_token_address, params.quote_token_address, params.base_decimals)
            for tick in (params.tick_lower, params.tick_upper)
        ]
        # a token1 base inverts the tick order
        lower_price, upper_price = min(range_prices), max(range_prices)

        buffer = (upper_price - lower_price) * self.buffer_percent // 100
        min_price = lower_price - buffer if lower_price > buffer else lower_price // 2
        max_price = upper_price + buffer

        domain = self._price_domain(params)
        min_price = min(max(min_price, domain.min), domain.max)
        max_price = max(min(max_price, domain.max), min_price)

        curve = generate_pnl_curve(
            params.liquidity,
            params.tick_lower,
            params.tick_upper,
            params.initial_value,
            params.base_token_address,
            params.quote_token_address,
            params.base_decimals,
            params.tick_spacing,
            PriceRange(min_price, max_price),
            self.sample_count,
        )

        decimals = params.quote_decimals
        points = [
            ChartPoint(
                price=to_display_amount(point.price, decimals),
                pnl=to_display_amount(point.pnl, decimals),
                phase=point.phase,
            )
            for point in curve
        ]
        prices = [point.price for point in points]
        pnls = [point.pnl for point in points]

        lower_display = to_display_amount(lower_price, decimals)
        upper_display = to_display_amount(upper_price, decimals)
        current_display = to_display_amount(params.current_price, decimals)

        return CurveData(
            points=points,
            price_range=ValueRange(min=min(prices), max=max(prices)),
            pnl_range=ValueRange(min=min(pnls), max=max(pnls)),
            current_price_index=_nearest_index(prices, current_display),
            range_indices=RangeIndices(
                lower=_nearest_index(prices, lower_display),
                upper=_nearest_index(prices, upper_display),
            ),
            lower_price=lower_display,
            upper_price=upper_display,
            current_price=current_display,
        )

    def get_curve_data(self, position: PositionRecord) -> CurveData:
        """Cached variant of generate_curve_data.

        Entries are keyed by position id and the resolved current price, so
        a price move produces a fresh curve.
        """
        if not self.cache.is_available():
            return self.generate_curve_data(position)

        current_price = self.extract_position_params(position).current_price
        cached = self.cache.get(position.id, current_price)
        if cached is not None:
            logger.debug(f"Curve cache hit for position {position.id}")
            return cached

        data = self.generate_curve_data(position)
        self.cache.set(position.id, current_price, data)
        return data

    def generate_batch_curve_data(
        self,
        positions: Iterable[PositionRecord]
    ) -> Dict[str, Optional[CurveData]]:
        """Curve data per position id; None for invalid or failing positions."""
        results: Dict[str, Optional[CurveData]] = {}

        for position in positions:
            if not self.validate_position(position):
                logger.info(f"Skipping curve for invalid position {position.id}")
                results[position.id] = None
                continue
            try:
                results[position.id] = self.get_curve_data(position)
            except ValueError as e:
                logger.warning(f"Batch curve generation failed for position {position.id}: {e}")
                results[position.id] = None

        return results

    def validate_position(self, position: PositionRecord) -> bool:
        """Check that a position has what curve generation needs."""
        if position.liquidity <= 0:
            return False
        if position.tick_lower >= position.tick_upper:
            return False
        if position.initial_value <= 0:
            return False
        if position.pool is None or position.pool.token0 is None or position.pool.token1 is None:
            return False
        return True
