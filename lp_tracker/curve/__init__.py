"""
Curve layer

- pnl_curve: value / PnL samples over a price range
- curve_data: chart-ready CurveData for positions
- cache: injectable curve caches
"""

from .pnl_curve import CurvePoint, PriceRange, generate_pnl_curve
from .cache import CurveCache, InMemoryCurveCache, NullCurveCache, CacheStats
from .curve_data import CurveData, CurveDataService, PositionParams
