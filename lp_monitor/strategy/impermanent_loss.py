"""
Impermanent Loss Model - 집중화된 유동성 IL

유동성 L을 고정한 채 "가격 A에서 민트하고 리밸런싱하지 않았다면"을 모델링합니다.

    IL = (V_LP / V_HODL - 1) × 100

    - V_HODL: 초기 가격에서의 토큰 수량을 현재 가격으로 평가한 가치
    - V_LP: 현재 가격에서 포지션이 실제로 보유한 토큰 수량의 가치

가치는 token1 단위 (value = amount0 × price + amount1) 로 계산합니다.
손실은 음수로 표시합니다.

V2(전 구간) IL 공식과 달리, 가격이 범위를 벗어나면 포지션은 한쪽 토큰 100%가 되고
같은 가격 변화에서도 범위가 좁을수록 IL이 커집니다. V2 공식으로 근사하지 마세요.
"""

import math
from dataclasses import dataclass
from typing import Optional

from ..data.types import Position
from ..math.liquidity_math import amounts_for_sqrt_range
from ..math.sqrt_price_math import sqrt_price_x96_to_price
from ..math.tick_math import TickConverter


@dataclass(frozen=True)
class ImpermanentLoss:
    """IL 계산 결과

    token0_amount / token1_amount 는 현재 가격에서 포지션이 보유한 수량 (최소 단위).
    가치 필드는 token1 최소 단위 기준입니다.
    """
    il_percent: float
    token0_amount: int
    token1_amount: int
    initial_value: float
    current_value: float
    hold_value: float


def concentrated_impermanent_loss(
    position: Position,
    initial_sqrt_price_x96: int,
    current_sqrt_price_x96: int,
    converter: Optional[TickConverter] = None
) -> ImpermanentLoss:
    """집중화된 유동성 포지션의 IL

    Args:
        position: 포지션 (tick 범위와 liquidity만 사용)
        initial_sqrt_price_x96: 기준(민트) 시점 sqrtPriceX96
        current_sqrt_price_x96: 현재 sqrtPriceX96
        converter: 캐시를 공유할 TickConverter

    Returns:
        ImpermanentLoss

    Raises:
        OutOfBoundsError: 포지션 틱이 범위를 벗어난 경우
    """
    converter = converter or TickConverter()
    sqrt_lower = converter.sqrt_price_x96_from_tick(position.tick_lower)
    sqrt_upper = converter.sqrt_price_x96_from_tick(position.tick_upper)

    initial0, initial1 = amounts_for_sqrt_range(
        position.liquidity, initial_sqrt_price_x96, sqrt_lower, sqrt_upper
    )
    current0, current1 = amounts_for_sqrt_range(
        position.liquidity, current_sqrt_price_x96, sqrt_lower, sqrt_upper
    )

    # 최소 단위끼리의 원시 가격 (소수점 보정 불필요)
    initial_price = sqrt_price_x96_to_price(initial_sqrt_price_x96, 0, 0)
    current_price = sqrt_price_x96_to_price(current_sqrt_price_x96, 0, 0)

    initial_value = initial0 * initial_price + initial1
    hold_value = initial0 * current_price + initial1
    current_value = current0 * current_price + current1

    if initial_sqrt_price_x96 == current_sqrt_price_x96 or hold_value <= 0:
        il_percent = 0.0
    else:
        il_percent = (current_value / hold_value - 1) * 100

    return ImpermanentLoss(
        il_percent=il_percent,
        token0_amount=current0,
        token1_amount=current1,
        initial_value=initial_value,
        current_value=current_value,
        hold_value=hold_value,
    )


def full_range_impermanent_loss(price_ratio: float) -> float:
    """V2 스타일 전 구간 IL (%) - 비교용

    IL = 2 × sqrt(r) / (1 + r) - 1

    Args:
        price_ratio: 현재가격 / 초기가격

    Returns:
        IL (%, 음수 = 손실)
    """
    if price_ratio <= 0:
        return 0.0
    return (2 * math.sqrt(price_ratio) / (1 + price_ratio) - 1) * 100
