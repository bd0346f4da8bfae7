"""
Liquidity Math - 유동성 ↔ 토큰 수량

집중화된 유동성(Concentrated Liquidity)의 가격 범위별 토큰 수량 계산.
모든 계산은 정수(최소 단위)로 수행하며 결과는 내림합니다.

References:
- Uniswap V3 Periphery: contracts/libraries/LiquidityAmounts.sol
- 백서 Section 6.2.1: Concentrated Liquidity

핵심 공식:
    Δx = L × 2^96 × (√P_b - √P_a) / (√P_b × √P_a)
    Δy = L × (√P_b - √P_a) / 2^96
"""

from typing import Optional, Tuple

from ..constants import Q96
from .fixed_point import mul_div
from .tick_math import TickConverter


def _sorted(sqrt_a: int, sqrt_b: int) -> Tuple[int, int]:
    if sqrt_a > sqrt_b:
        return sqrt_b, sqrt_a
    return sqrt_a, sqrt_b


def amount0_for_liquidity(sqrt_price_a_x96: int, sqrt_price_b_x96: int, liquidity: int) -> int:
    """범위 [a, b]에서 유동성 L이 보유하는 token0 양

    인자 순서와 무관 (내부에서 정렬).
    """
    lower, upper = _sorted(sqrt_price_a_x96, sqrt_price_b_x96)
    if lower == upper:
        return 0
    return mul_div(liquidity * Q96, upper - lower, upper * lower)


def amount1_for_liquidity(sqrt_price_a_x96: int, sqrt_price_b_x96: int, liquidity: int) -> int:
    """범위 [a, b]에서 유동성 L이 보유하는 token1 양

    인자 순서와 무관 (내부에서 정렬).
    """
    lower, upper = _sorted(sqrt_price_a_x96, sqrt_price_b_x96)
    return mul_div(liquidity, upper - lower, Q96)


def amounts_for_sqrt_range(
    liquidity: int,
    sqrt_price_x96: int,
    sqrt_price_lower_x96: int,
    sqrt_price_upper_x96: int
) -> Tuple[int, int]:
    """sqrt 가격 경계로 포지션 토큰 수량 계산

    - 현재가 <= 하한: 전부 token0
    - 현재가 >= 상한: 전부 token1
    - 범위 내: 현재가를 기준으로 분할

    Returns:
        (amount0, amount1) 튜플
    """
    lower, upper = _sorted(sqrt_price_lower_x96, sqrt_price_upper_x96)

    if sqrt_price_x96 <= lower:
        return amount0_for_liquidity(lower, upper, liquidity), 0

    if sqrt_price_x96 >= upper:
        return 0, amount1_for_liquidity(lower, upper, liquidity)

    amount0 = amount0_for_liquidity(sqrt_price_x96, upper, liquidity)
    amount1 = amount1_for_liquidity(lower, sqrt_price_x96, liquidity)
    return amount0, amount1


def amounts_for_liquidity(
    liquidity: int,
    sqrt_price_current_x96: int,
    tick_lower: int,
    tick_upper: int,
    converter: Optional[TickConverter] = None
) -> Tuple[int, int]:
    """틱 범위와 현재 sqrt 가격으로 포지션 토큰 수량 계산

    Args:
        liquidity: 포지션 유동성
        sqrt_price_current_x96: 현재 sqrtPriceX96
        tick_lower: 하한 틱
        tick_upper: 상한 틱
        converter: 캐시를 공유할 TickConverter (없으면 새로 생성)

    Returns:
        (amount0, amount1) 튜플 (최소 단위)
    """
    converter = converter or TickConverter()
    sqrt_lower = converter.sqrt_price_x96_from_tick(tick_lower)
    sqrt_upper = converter.sqrt_price_x96_from_tick(tick_upper)
    return amounts_for_sqrt_range(liquidity, sqrt_price_current_x96, sqrt_lower, sqrt_upper)


def liquidity_for_amount0(sqrt_price_a_x96: int, sqrt_price_b_x96: int, amount0: int) -> int:
    """amount0로 민트 가능한 유동성

    공식: L = Δx × √P_a × √P_b / (2^96 × (√P_b - √P_a))
    """
    lower, upper = _sorted(sqrt_price_a_x96, sqrt_price_b_x96)
    if lower == upper:
        return 0
    intermediate = mul_div(lower, upper, Q96)
    return mul_div(amount0, intermediate, upper - lower)


def liquidity_for_amount1(sqrt_price_a_x96: int, sqrt_price_b_x96: int, amount1: int) -> int:
    """amount1로 민트 가능한 유동성

    공식: L = Δy × 2^96 / (√P_b - √P_a)
    """
    lower, upper = _sorted(sqrt_price_a_x96, sqrt_price_b_x96)
    if lower == upper:
        return 0
    return mul_div(amount1, Q96, upper - lower)


def liquidity_for_amounts(
    sqrt_price_x96: int,
    sqrt_price_a_x96: int,
    sqrt_price_b_x96: int,
    amount0: int,
    amount1: int
) -> int:
    """두 토큰 수량으로 민트 가능한 최대 유동성

    범위 내에서는 두 제약 조건 중 작은 값을 반환합니다.
    """
    lower, upper = _sorted(sqrt_price_a_x96, sqrt_price_b_x96)

    if sqrt_price_x96 <= lower:
        return liquidity_for_amount0(lower, upper, amount0)

    if sqrt_price_x96 < upper:
        liquidity0 = liquidity_for_amount0(sqrt_price_x96, upper, amount0)
        liquidity1 = liquidity_for_amount1(lower, sqrt_price_x96, amount1)
        return min(liquidity0, liquidity1)

    return liquidity_for_amount1(lower, upper, amount1)
