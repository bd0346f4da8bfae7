"""
Fixed Point Math - Q96/Q128 정수 연산

온체인 FullMath/UnsafeMath와 동일한 결과를 내는 정수 연산.
Python int는 임의 정밀도이므로 256비트 중간값 오버플로우는 발생하지 않습니다.

규칙:
- 모든 연산은 정확한 정수 연산 (부동소수점 반올림 없음)
- 나눗셈은 0 방향 절사 (음이 아닌 피연산자에서는 floor)
- float 변환은 *_float / to_float 계열 함수에서만 수행 (표시용)
"""

from ..constants import Q96, Q128, UINT256_MAX
from ..exceptions import InvalidArgumentError


def _require_non_negative(*values: int) -> None:
    for value in values:
        if value < 0:
            raise InvalidArgumentError(f"음수 피연산자는 허용되지 않습니다: {value}")


def mul_div(a: int, b: int, denominator: int) -> int:
    """(a * b) / denominator 내림"""
    _require_non_negative(a, b)
    if denominator <= 0:
        raise InvalidArgumentError(f"분모는 양수여야 합니다: {denominator}")
    return (a * b) // denominator


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """(a * b) / denominator 올림"""
    result = mul_div(a, b, denominator)
    if (a * b) % denominator > 0:
        result += 1
    return result


def div_rounding_up(numerator: int, denominator: int) -> int:
    """numerator / denominator 올림"""
    _require_non_negative(numerator)
    if denominator <= 0:
        raise InvalidArgumentError(f"분모는 양수여야 합니다: {denominator}")
    result = numerator // denominator
    if numerator % denominator > 0:
        result += 1
    return result


def mul_shift(a: int, b: int, shift: int) -> int:
    """(a * b) >> shift

    TickMath 비트 분해에서 Q128 상수 곱셈에 사용.
    """
    _require_non_negative(a, b)
    return (a * b) >> shift


def wrapping_sub_256(a: int, b: int) -> int:
    """uint256 랩어라운드 뺄셈

    Solidity unchecked 블록의 a - b와 동일. fee growth 차이 계산에 사용.
    """
    return (a - b) & UINT256_MAX


def to_q96(value: int) -> int:
    """정수를 Q96 고정소수점으로 인코딩"""
    return value << 96


def q96_to_float(value_x96: int) -> float:
    """Q96 값을 float로 변환 (표시용)"""
    return value_x96 / Q96


def q128_to_float(value_x128: int) -> float:
    """Q128 값을 float로 변환 (표시용)"""
    return value_x128 / Q128


def from_q96_float(value: float) -> int:
    """float를 Q96 고정소수점으로 근사 인코딩 (추정용)"""
    if value < 0:
        raise InvalidArgumentError(f"음수 값은 인코딩할 수 없습니다: {value}")
    return int(value * Q96)
