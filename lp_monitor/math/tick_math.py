"""
Tick Math - Tick ↔ Price 변환

Uniswap V3 틱 수학. 두 가지 표현을 엄격히 분리합니다:

- 정수 경로: tick ↔ sqrtPriceX96 (온체인 비교, 범위/수수료 계산용)
- float 경로: tick ↔ price (사람이 읽는 표시, 대략적 추정 전용)

범위 판정 등 정확성이 필요한 곳에서는 항상 정수 틱을 비교해야 하며
float 가격을 비교하면 안 됩니다.

References:
- Uniswap V3 Core: contracts/libraries/TickMath.sol
- 백서 Section 6.1: Ticks and Tick Spacing

핵심 공식:
    price = 1.0001^tick
    tick = floor(log₁.₀₀₀₁(price))
    sqrtPriceX96 = sqrt(1.0001^tick) * 2^96
"""

import math
from typing import Dict, NewType, Tuple

from ..constants import Q96, MIN_TICK, MAX_TICK, TICK_BASE, UINT256_MAX
from ..exceptions import InvalidArgumentError, OutOfBoundsError
from .fixed_point import mul_shift


SqrtPriceX96 = NewType("SqrtPriceX96", int)

# 비트 0 (|tick| & 0x1) 의 초기 ratio 값
_RATIO_ONE: int = 0x100000000000000000000000000000000
_RATIO_BIT0: int = 0xfffcb933bd6fad37aa2d162d1a594001

# (비트 마스크, Q128 상수) - 상수 = 2^128 / sqrt(1.0001)^mask
_RATIO_FACTORS: Tuple[Tuple[int, int], ...] = (
    (0x2, 0xfff97272373d413259a46990580e213a),
    (0x4, 0xfff2e50f5f656932ef12357cf3c7fdcc),
    (0x8, 0xffe5caca7e10e4e61c3624eaa0941cd0),
    (0x10, 0xffcb9843d60f6159c9db58835c926644),
    (0x20, 0xff973b41fa98c081472e6896dfb254c0),
    (0x40, 0xff2ea16466c96a3843ec78b326b52861),
    (0x80, 0xfe5dee046a99a2a811c461f1969c3053),
    (0x100, 0xfcbe86c7900a88aedcffc83b479aa3a4),
    (0x200, 0xf987a7253ac413176f2b074cf7815e54),
    (0x400, 0xf3392b0822b70005940c7a398e4b70f3),
    (0x800, 0xe7159475a2c29b7443b29c7fa6e889d9),
    (0x1000, 0xd097f3bdfd2022b8845ad8f792aa5825),
    (0x2000, 0xa9f746462d870fdf8a65dc1f90e061e5),
    (0x4000, 0x70d869a156d2a1b890bb3df62baf32f7),
    (0x8000, 0x31be135f97d08fd981231505542fcfa6),
    (0x10000, 0x9aa508b5b7a84e1c677de54f3e99bc9),
    (0x20000, 0x5d6af8dedb81196699c329225ee604),
    (0x40000, 0x2216e584f5fa1ea926041bedfe98),
    (0x80000, 0x48a170391f7dc42444e8fa2),
)

MIN_SQRT_RATIO: int = 4295128739
MAX_SQRT_RATIO: int = 1461446703485210103287273052203988822378723970342


def _check_tick(tick: int) -> None:
    if tick < MIN_TICK or tick > MAX_TICK:
        raise OutOfBoundsError(
            f"틱이 유효 범위를 벗어났습니다: {tick} (범위: {MIN_TICK} ~ {MAX_TICK})"
        )


def get_sqrt_ratio_at_tick(tick: int) -> SqrtPriceX96:
    """틱에서 sqrtPriceX96 계산 (캐시 없음)

    Solidity TickMath.getSqrtRatioAtTick()과 동일한 비트 분해 알고리즘.
    |tick|의 각 비트에 해당하는 Q128 상수를 곱해 sqrt(1.0001^-|tick|)을
    구한 뒤, 양수 틱이면 역수를 취하고 32비트 시프트로 Q96으로 변환합니다.

    Args:
        tick: 틱 인덱스 (-887272 ~ 887272)

    Returns:
        sqrtPriceX96 (Q64.96 형식)

    Raises:
        OutOfBoundsError: 틱이 유효 범위를 벗어난 경우
    """
    _check_tick(tick)

    abs_tick = abs(tick)
    ratio = _RATIO_BIT0 if abs_tick & 0x1 else _RATIO_ONE

    for mask, factor in _RATIO_FACTORS:
        if abs_tick & mask:
            ratio = mul_shift(ratio, factor, 128)

    if tick > 0:
        ratio = UINT256_MAX // ratio

    # Q128.128 -> Q64.96 (온체인과 동일하게 올림)
    return SqrtPriceX96((ratio >> 32) + (1 if ratio % (1 << 32) else 0))


class TickConverter:
    """메모이제이션 캐시를 가진 틱 변환기

    캐시는 인스턴스가 소유하며 프로세스 전역 상태가 아닙니다.
    하나의 모니터링 실행(평가) 동안에만 유지하고, 동시에 여러 평가를
    실행한다면 평가마다 별도 인스턴스를 사용해야 합니다 (스레드 안전하지 않음).

    사용법:
        converter = TickConverter()
        sqrt_price = converter.sqrt_price_x96_from_tick(-200)
        tick = converter.tick_from_sqrt_price_x96(sqrt_price)
    """

    def __init__(self) -> None:
        self._cache: Dict[int, SqrtPriceX96] = {}

    @property
    def cache_size(self) -> int:
        """캐시된 틱 개수"""
        return len(self._cache)

    def clear_cache(self) -> None:
        self._cache.clear()

    def sqrt_price_x96_from_tick(self, tick: int) -> SqrtPriceX96:
        """틱 -> sqrtPriceX96 (캐시 사용)

        Raises:
            OutOfBoundsError: 틱이 유효 범위를 벗어난 경우
        """
        cached = self._cache.get(tick)
        if cached is not None:
            return cached

        sqrt_price_x96 = get_sqrt_ratio_at_tick(tick)
        self._cache[tick] = sqrt_price_x96
        return sqrt_price_x96

    def tick_from_sqrt_price_x96(self, sqrt_price_x96: int) -> int:
        """sqrtPriceX96 -> 틱

        sqrt_price_x96_from_tick을 비교 기준으로 하는 이진 탐색.
        sqrtPrice(tick) <= sqrt_price_x96 를 만족하는 가장 큰 틱을 반환합니다.
        이 구현이 만든 값에 대해서는 정확하며, 외부 값은 1틱 이내로 일치합니다.

        Args:
            sqrt_price_x96: sqrtPriceX96 (Q64.96 형식)

        Returns:
            틱 인덱스

        Raises:
            OutOfBoundsError: sqrtPriceX96이 최소/최대 범위를 벗어난 경우
        """
        min_sqrt = self.sqrt_price_x96_from_tick(MIN_TICK)
        max_sqrt = self.sqrt_price_x96_from_tick(MAX_TICK)
        if sqrt_price_x96 < min_sqrt or sqrt_price_x96 > max_sqrt:
            raise OutOfBoundsError(
                f"sqrtPriceX96이 유효 범위를 벗어났습니다: {sqrt_price_x96}"
            )

        if sqrt_price_x96 == Q96:
            return 0

        low, high = MIN_TICK, MAX_TICK
        while low < high:
            mid = (low + high + 1) // 2
            if self.sqrt_price_x96_from_tick(mid) <= sqrt_price_x96:
                low = mid
            else:
                high = mid - 1

        return low

    @staticmethod
    def tick_to_price(tick: int, decimals0: int = 18, decimals1: int = 18) -> float:
        """틱을 human-readable 가격으로 변환

        price = 1.0001^tick × 10^(decimals0 - decimals1)

        Args:
            tick: 틱 인덱스
            decimals0: token0 소수점 자릿수
            decimals1: token1 소수점 자릿수

        Returns:
            가격 (token1/token0)

        Raises:
            OutOfBoundsError: 틱이 유효 범위를 벗어난 경우

        Example:
            >>> TickConverter.tick_to_price(6932)
            2.0000...
        """
        _check_tick(tick)
        return TICK_BASE ** tick * (10 ** (decimals0 - decimals1))

    @staticmethod
    def price_to_tick(price: float, decimals0: int = 18, decimals1: int = 18) -> int:
        """Human-readable 가격을 틱으로 변환

        tick = floor(log₁.₀₀₀₁(price × 10^(decimals1 - decimals0)))

        float 반올림 때문에 실제 경계와 ±1틱 차이가 날 수 있습니다.

        Raises:
            InvalidArgumentError: 가격이 0 이하인 경우
            OutOfBoundsError: 결과 틱이 유효 범위를 벗어난 경우
        """
        if not math.isfinite(price) or price <= 0:
            raise InvalidArgumentError(f"가격은 양수여야 합니다: {price}")

        ratio = price * (10 ** (decimals1 - decimals0))
        tick = math.floor(math.log(ratio) / math.log(TICK_BASE))
        if tick < MIN_TICK or tick > MAX_TICK:
            raise OutOfBoundsError(f"계산된 틱이 유효 범위를 벗어났습니다: {tick}")
        return tick
