"""
Uniswap V3 LP Position Monitor

단일 집중화된 유동성 포지션을 모니터링하고 리밸런싱 여부를 결정하는 라이브러리.
틱/유동성 계산은 온체인 수준 정밀도(정수 Q96/Q128)로 수행합니다.
"""

__version__ = "0.1.0"
__author__ = "Zekiya"

from .constants import Q96, Q128, FEE_TIERS, TICK_SPACINGS
from .config import AdvisorConfig
from .exceptions import (
    LPMonitorError,
    OutOfBoundsError,
    InvalidArgumentError,
    UnknownValueError,
    PriceUnavailableError,
    ConfigurationError,
)
from .data.types import Band, PoolState, Position, RebalanceDecision, RebalanceReason, Token, Urgency
from .strategy.rebalance_advisor import RebalanceAdvisor
