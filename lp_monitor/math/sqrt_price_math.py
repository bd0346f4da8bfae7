"""
Sqrt Price Math - sqrtPriceX96 표시용 변환

sqrtPriceX96 = sqrt(price) * 2^96

이 모듈의 float 결과는 표시와 가치 평가(추정)에만 사용합니다.
범위 판정이나 수량 계산은 tick_math / liquidity_math의 정수 경로를 사용하세요.
"""

from ..constants import Q96


def sqrt_price_x96_to_price(
    sqrt_price_x96: int,
    decimals0: int = 18,
    decimals1: int = 18
) -> float:
    """sqrtPriceX96을 human-readable 가격으로 변환

    가격 = (sqrtPriceX96 / 2^96)^2 × 10^(decimals0 - decimals1)

    Returns:
        가격 (token1/token0)
    """
    sqrt_price = sqrt_price_x96 / Q96
    return sqrt_price ** 2 * (10 ** (decimals0 - decimals1))

