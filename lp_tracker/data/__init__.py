"""
Data layer

Token, pool and position records parsed from string-encoded JSON.
"""

from .types import TokenInfo, PoolSnapshot, PositionRecord
