"""
Uniswap V3 상수 정의

포지션 모니터링에 필요한 상수들:
- Q96: sqrt price 인코딩에 사용 (2^96)
- Q128: fee growth 인코딩 및 TickMath 중간값에 사용 (2^128)
- FEE_TIERS: 지원되는 수수료 티어
- TICK_SPACINGS: 각 수수료 티어별 틱 간격
"""

from typing import Dict, FrozenSet

# Fixed-point 인코딩 상수
Q96: int = 2 ** 96
Q128: int = 2 ** 128

# 수수료 티어 (백만분율, 100 = 0.01%)
FEE_TIERS: Dict[int, str] = {
    100: "0.01%",
    500: "0.05%",
    3000: "0.30%",
    10000: "1.00%",
}

# 수수료 티어 -> 틱 간격
TICK_SPACINGS: Dict[int, int] = {
    100: 1,
    500: 10,
    3000: 60,
    10000: 200,
}

# 틱 간격 -> 수수료 티어
FEE_TIERS_BY_SPACING: Dict[int, int] = {
    spacing: fee for fee, spacing in TICK_SPACINGS.items()
}

VALID_TICK_SPACINGS: FrozenSet[int] = frozenset(TICK_SPACINGS.values())

# 틱 범위 상수
MIN_TICK: int = -887272
MAX_TICK: int = 887272

# price = 1.0001^tick
TICK_BASE: float = 1.0001

# 토큰 소수점 자릿수 허용 범위
MIN_DECIMALS: int = 0
MAX_DECIMALS: int = 18

# uint256 최대값
UINT256_MAX: int = 2 ** 256 - 1
