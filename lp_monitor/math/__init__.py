"""
Math layer for lp_monitor

정수 경로와 float 경로를 분리한 수학 함수들:
- fixed_point: Q96/Q128 정수 연산
- tick_math: Tick ↔ sqrtPriceX96 (정수), Tick ↔ Price (float)
- liquidity_math: 유동성 ↔ 토큰 수량
- sqrt_price_math: sqrtPriceX96 표시용 변환
- fee_growth: 백서 기반 fee growth 수수료 계산
"""

from .tick_math import (
    SqrtPriceX96,
    TickConverter,
    get_sqrt_ratio_at_tick,
    MIN_SQRT_RATIO,
    MAX_SQRT_RATIO,
)
from .liquidity_math import (
    amount0_for_liquidity,
    amount1_for_liquidity,
    amounts_for_liquidity,
    amounts_for_sqrt_range,
    liquidity_for_amounts,
)
from .sqrt_price_math import (
    sqrt_price_x96_to_price,
)
from .fee_growth import (
    AccruedFees,
    accrued_fees_from_growth,
    fee_growth_inside,
)
