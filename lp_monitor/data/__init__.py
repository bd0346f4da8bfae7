"""
Data layer for lp_monitor

스냅샷/결정 데이터 타입 및 가격 제공자
"""

from .types import (
    Token,
    Band,
    TickFeeGrowth,
    PoolState,
    Position,
    RebalanceReason,
    Urgency,
    DecisionMetrics,
    RebalanceDecision,
)
from .price_source import PriceSource, StaticPriceSource, CachedPriceSource, create_stablecoin_price_source
