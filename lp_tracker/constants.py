"""
Uniswap V3 constants

Constants used across the position math engine:
- Q96: sqrt price encoding (2^96)
- Q128: fee growth encoding (2^128)
- Q192: squared sqrt price scale (2^192)
- TICK_SPACINGS: tick spacing per fee tier
"""

from typing import Dict

# Fixed-point encoding
Q96: int = 2 ** 96
Q128: int = 2 ** 128
Q192: int = 2 ** 192

# Fee tiers in hundredths of a bip
# 500 = 0.05%, 3000 = 0.30%, 10000 = 1.00%
FEE_TIERS: Dict[int, str] = {
    100: "0.01%",
    500: "0.05%",
    3000: "0.30%",
    10000: "1.00%",
}

TICK_SPACINGS: Dict[int, int] = {
    100: 1,
    500: 10,
    3000: 60,
    10000: 200,
}

DEFAULT_TICK_SPACING: int = 60

# Tick bounds (TickMath.sol)
MIN_TICK: int = -887272
MAX_TICK: int = 887272

MIN_SQRT_RATIO: int = 4295128739
MAX_SQRT_RATIO: int = 1461446703485210103287273052203988822378723970342

UINT256_MAX: int = 2 ** 256 - 1
UINT128_MAX: int = 2 ** 128 - 1

# ERC-20 decimals accepted by conversions
MIN_DECIMALS: int = 0
MAX_DECIMALS: int = 36

# Curve / APR defaults
DEFAULT_PNL_CURVE_SAMPLES: int = 150
DEFAULT_CURVE_DATA_SAMPLES: int = 26
DEFAULT_CURVE_BUFFER_PERCENT: int = 20

DAYS_PER_YEAR: int = 365
SECONDS_PER_DAY: int = 60 * 60 * 24
