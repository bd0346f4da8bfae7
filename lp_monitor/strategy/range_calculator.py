"""
Range Calculator - 포지션 범위(band) 계산

basis points 폭과 틱 간격으로 정렬된 범위를 계산하고,
현재 틱의 범위 포함 여부/위치를 판정합니다.

범위 규칙 (AMM 틱 버킷 규약과 동일):
    tick_lower <= tick < tick_upper   (하한 포함, 상한 미포함)

범위 판정은 항상 정수 틱으로 수행하며 float 가격을 비교하지 않습니다.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import numpy as np

from ..constants import FEE_TIERS_BY_SPACING, MAX_TICK, MIN_TICK, TICK_SPACINGS, VALID_TICK_SPACINGS
from ..data.types import Band
from ..exceptions import InvalidArgumentError, OutOfBoundsError, UnknownValueError


@dataclass(frozen=True)
class BandWidthCoefficients:
    """calculate_optimal_band_width 휴리스틱 계수"""
    base_width: float = 200.0          # 기준 폭 (ticks)
    volatility_scale: float = 10.0     # 변동성 1.0당 폭 증가 배수
    reference_fee_tier: int = 3000     # 기준 수수료 티어 (0.3%)


# 위험 성향별 폭 배수 (낮을수록 좁은 범위 = 수수료↑, IL↑)
RISK_MULTIPLIERS: Dict[str, float] = {
    "low": 1.5,
    "medium": 1.0,
    "high": 0.7,
}


@dataclass(frozen=True)
class WidthRecommendation:
    """recommend_position_width 결과"""
    recommended_basis_points: int
    expected_daily_return: float   # %
    max_expected_il: float         # %


def _check_tick_spacing(tick_spacing: int) -> None:
    if tick_spacing not in VALID_TICK_SPACINGS:
        raise InvalidArgumentError(
            f"유효하지 않은 틱 간격: {tick_spacing} "
            f"(허용: {', '.join(str(s) for s in sorted(VALID_TICK_SPACINGS))})"
        )


def align_to_spacing(tick: int, tick_spacing: int, round_up: bool = False) -> int:
    """틱을 틱 간격의 배수로 정렬

    Args:
        tick: 정렬할 틱
        tick_spacing: 틱 간격
        round_up: True면 올림, False면 내림

    Returns:
        정렬된 틱
    """
    if tick_spacing <= 0:
        raise InvalidArgumentError(f"틱 간격은 양수여야 합니다: {tick_spacing}")
    if round_up:
        return -((-tick) // tick_spacing) * tick_spacing
    return (tick // tick_spacing) * tick_spacing


def is_aligned_to_spacing(tick: int, tick_spacing: int) -> bool:
    return tick % tick_spacing == 0


def calculate_band(current_tick: int, basis_points: int, tick_spacing: int = 1) -> Band:
    """현재 틱을 중심으로 한 범위 계산

    half = floor(basis_points / 2)
    하한 = (current_tick - half) 를 간격 배수로 내림
    상한 = (current_tick + half) 를 간격 배수로 올림

    Args:
        current_tick: 현재 풀 틱
        basis_points: 전체 범위 폭 (1 bp = 1 tick)
        tick_spacing: 풀 틱 간격 (1, 10, 60, 200)

    Returns:
        Band

    Raises:
        InvalidArgumentError: basis_points <= 0, 허용되지 않는 틱 간격,
            또는 결과 범위가 비어있는 경우
        OutOfBoundsError: 정렬된 범위가 MIN_TICK / MAX_TICK을 벗어나는 경우

    Example:
        >>> calculate_band(5, 100, 10)
        Band(tick_lower=-50, tick_upper=60)
    """
    if basis_points <= 0:
        raise InvalidArgumentError(f"basis points는 양수여야 합니다: {basis_points}")
    _check_tick_spacing(tick_spacing)

    half_band = basis_points // 2
    tick_lower = align_to_spacing(current_tick - half_band, tick_spacing)
    tick_upper = align_to_spacing(current_tick + half_band, tick_spacing, round_up=True)

    if tick_lower >= tick_upper:
        raise InvalidArgumentError(
            f"유효하지 않은 범위: tick_lower({tick_lower}) >= tick_upper({tick_upper})"
        )
    if tick_lower < MIN_TICK or tick_upper > MAX_TICK:
        raise OutOfBoundsError(
            f"정렬된 범위가 틱 한계를 벗어났습니다: [{tick_lower}, {tick_upper}) "
            f"(범위: {MIN_TICK} ~ {MAX_TICK})"
        )

    return Band(tick_lower=tick_lower, tick_upper=tick_upper)


def is_in_range(tick: int, tick_lower: int, tick_upper: int) -> bool:
    """tick_lower <= tick < tick_upper"""
    return tick_lower <= tick < tick_upper


def out_of_range_distance(tick: int, tick_lower: int, tick_upper: int) -> int:
    """범위 밖으로 벗어난 틱 수 (범위 내면 0)"""
    if tick < tick_lower:
        return tick_lower - tick
    if tick >= tick_upper:
        return tick - tick_upper + 1
    return 0


def range_position(tick: int, tick_lower: int, tick_upper: int) -> Optional[float]:
    """범위 내 상대 위치 (%)

    0% = tick_lower, 100%에 가까울수록 tick_upper. 범위 밖이면 None.
    """
    if not is_in_range(tick, tick_lower, tick_upper):
        return None
    return (tick - tick_lower) / (tick_upper - tick_lower) * 100


def tick_spacing_to_fee_tier(tick_spacing: int) -> int:
    """틱 간격 -> 수수료 티어 (1 -> 100, 10 -> 500, 60 -> 3000, 200 -> 10000)"""
    fee_tier = FEE_TIERS_BY_SPACING.get(tick_spacing)
    if fee_tier is None:
        raise UnknownValueError(f"알 수 없는 틱 간격: {tick_spacing}")
    return fee_tier


def fee_tier_to_tick_spacing(fee_tier: int) -> int:
    """수수료 티어 -> 틱 간격"""
    tick_spacing = TICK_SPACINGS.get(fee_tier)
    if tick_spacing is None:
        raise UnknownValueError(f"알 수 없는 수수료 티어: {fee_tier}")
    return tick_spacing


def calculate_optimal_band_width(
    volatility: float,
    fee_tier: int,
    target_apr: float = 0.20,
    coefficients: BandWidthCoefficients = BandWidthCoefficients()
) -> int:
    """변동성과 수수료 티어 기반 범위 폭 휴리스틱 (ticks)

    width = base × (1 + volatility × scale) × sqrt(reference_fee / fee_tier)

    변동성이 클수록 넓게, 수수료 티어가 높을수록 좁게 잡습니다.
    닫힌 형태의 최적해가 아닌 조정 가능한 휴리스틱입니다.
    target_apr은 현재 공식에 반영되지 않습니다.

    Args:
        volatility: 일간 변동성 (예: 0.02 = 2%)
        fee_tier: 수수료 티어 (100, 500, 3000, 10000)
        target_apr: 목표 연수익률 (예: 0.20)
        coefficients: 휴리스틱 계수

    Returns:
        범위 폭 (basis points / ticks)
    """
    if volatility < 0:
        raise InvalidArgumentError(f"변동성은 음수일 수 없습니다: {volatility}")
    if fee_tier <= 0:
        raise InvalidArgumentError(f"수수료 티어는 양수여야 합니다: {fee_tier}")

    volatility_multiplier = 1 + volatility * coefficients.volatility_scale
    fee_adjustment = math.sqrt(coefficients.reference_fee_tier / fee_tier)
    return round(coefficients.base_width * volatility_multiplier * fee_adjustment)


def recommend_position_width(
    volatility: float,
    fee_rate: float,
    liquidity_depth: float,
    risk_tolerance: str = "medium"
) -> WidthRecommendation:
    """변동성/수수료율/유동성 경쟁을 반영한 범위 폭 추천

    Args:
        volatility: 일간 변동성 (소수)
        fee_rate: 풀 수수료율 (소수, 예: 0.003)
        liquidity_depth: 같은 범위에 있는 유동성 비율 (0-1]
        risk_tolerance: "low" | "medium" | "high"

    Returns:
        WidthRecommendation
    """
    if risk_tolerance not in RISK_MULTIPLIERS:
        raise UnknownValueError(f"알 수 없는 위험 성향: {risk_tolerance}")
    if volatility <= 0 or fee_rate <= 0 or liquidity_depth <= 0:
        raise InvalidArgumentError("volatility, fee_rate, liquidity_depth는 양수여야 합니다")

    volatility_multiplier = math.sqrt(volatility * 365)
    fee_multiplier = math.sqrt(0.003 / fee_rate)
    competition_multiplier = 1 / math.sqrt(liquidity_depth)

    recommended = max(1, round(
        100 * volatility_multiplier * fee_multiplier
        * competition_multiplier * RISK_MULTIPLIERS[risk_tolerance]
    ))

    concentration_bonus = 100 / recommended
    expected_daily_return = fee_rate * concentration_bonus * liquidity_depth
    max_expected_il = (recommended / 10000) * volatility * math.sqrt(365)

    return WidthRecommendation(
        recommended_basis_points=recommended,
        expected_daily_return=expected_daily_return * 100,
        max_expected_il=max_expected_il * 100,
    )


def estimate_volatility(prices: Sequence[float]) -> float:
    """가격 시계열의 로그 수익률 표준편차

    시계열 간격(예: 일봉)의 변동성을 반환합니다. 두 개 미만이면 0.
    """
    values = np.asarray(prices, dtype=float)
    if values.size < 2:
        return 0.0
    if np.any(values <= 0):
        raise InvalidArgumentError("가격은 양수여야 합니다")

    log_returns = np.diff(np.log(values))
    return float(np.std(log_returns))
