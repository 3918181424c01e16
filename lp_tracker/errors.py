"""
Position math errors

Every error here is a caller or data error, never a transient failure, so
nothing in the engine retries. All classes derive from ValueError.
"""


class PositionMathError(ValueError):
    """Base class for position math errors"""
    pass


class TickOutOfRangeError(PositionMathError):
    """Tick (or sqrt price) outside the protocol bounds"""
    pass


class InvalidPriceError(PositionMathError):
    """Non-positive or non-finite price"""
    pass


class InvalidRangeError(PositionMathError):
    """tick_lower >= tick_upper, or a bound not aligned to the tick spacing"""
    pass


class DecimalsMismatchError(PositionMathError):
    """Token decimals outside 0..36"""
    pass


class MissingHistoryDataError(PositionMathError):
    """Event history needed for an APR sub-metric is absent

    Only the APR aggregator catches this; it degrades the affected metric
    instead of failing the whole breakdown.
    """
    pass
