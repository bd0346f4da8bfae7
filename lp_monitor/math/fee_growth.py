"""
Fee Growth - 백서 기반 미수령 수수료 정밀 계산

포지션의 tokensOwed는 마지막 온체인 업데이트(mint/burn/collect) 이후 쌓인
수수료를 포함하지 않습니다. 틱별 feeGrowthOutside 체크포인트를 구할 수 있으면
이 모듈로 누락분까지 정확히 계산할 수 있습니다.

References:
- 백서 Section 6.3: Tick-Indexed State (feeGrowthOutside)
- 백서 Section 6.4.1: Position-Indexed State (uncollected fees)

핵심 공식:
    f_b(i) = f_o(i)        if i_c >= i else f_g - f_o(i)
    f_a(i) = f_g - f_o(i)  if i_c >= i else f_o(i)
    f_r = f_g - f_b(i_l) - f_a(i_u)
    f_u = l × (f_r(t_1) - f_r(t_0)) / 2^128
"""

from typing import NamedTuple

from ..constants import Q128
from .fixed_point import wrapping_sub_256


class AccruedFees(NamedTuple):
    """fee growth로 계산한 수수료 (최소 단위)"""
    amount0: int
    amount1: int
    fee_growth_inside_0_x128: int
    fee_growth_inside_1_x128: int


def fee_growth_below(tick: int, current_tick: int, fee_growth_global: int, fee_growth_outside: int) -> int:
    """틱 아래에서 발생한 fee growth (f_b)"""
    if current_tick >= tick:
        return fee_growth_outside
    return wrapping_sub_256(fee_growth_global, fee_growth_outside)


def fee_growth_above(tick: int, current_tick: int, fee_growth_global: int, fee_growth_outside: int) -> int:
    """틱 위에서 발생한 fee growth (f_a)"""
    if current_tick >= tick:
        return wrapping_sub_256(fee_growth_global, fee_growth_outside)
    return fee_growth_outside


def fee_growth_inside(
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside_lower: int,
    fee_growth_outside_upper: int
) -> int:
    """범위 내 fee growth (f_r), uint256 랩어라운드 적용"""
    below = fee_growth_below(tick_lower, current_tick, fee_growth_global, fee_growth_outside_lower)
    above = fee_growth_above(tick_upper, current_tick, fee_growth_global, fee_growth_outside_upper)
    return wrapping_sub_256(wrapping_sub_256(fee_growth_global, below), above)


def fees_for_growth_delta(liquidity: int, fee_growth_inside_now: int, fee_growth_inside_last: int) -> int:
    """f_u = l × Δf_r / 2^128 (최소 단위, 내림)"""
    delta = wrapping_sub_256(fee_growth_inside_now, fee_growth_inside_last)
    return liquidity * delta // Q128


def accrued_fees_from_growth(
    liquidity: int,
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global_0_x128: int,
    fee_growth_global_1_x128: int,
    fee_growth_outside_lower_0_x128: int,
    fee_growth_outside_lower_1_x128: int,
    fee_growth_outside_upper_0_x128: int,
    fee_growth_outside_upper_1_x128: int,
    fee_growth_inside_0_last_x128: int,
    fee_growth_inside_1_last_x128: int
) -> AccruedFees:
    """마지막 체크포인트 이후 두 토큰의 누적 수수료

    tokensOwed에 더하면 온체인 collect() 결과와 같은 값이 됩니다.
    """
    inside_0 = fee_growth_inside(
        tick_lower, tick_upper, current_tick,
        fee_growth_global_0_x128,
        fee_growth_outside_lower_0_x128,
        fee_growth_outside_upper_0_x128
    )
    inside_1 = fee_growth_inside(
        tick_lower, tick_upper, current_tick,
        fee_growth_global_1_x128,
        fee_growth_outside_lower_1_x128,
        fee_growth_outside_upper_1_x128
    )

    return AccruedFees(
        amount0=fees_for_growth_delta(liquidity, inside_0, fee_growth_inside_0_last_x128),
        amount1=fees_for_growth_delta(liquidity, inside_1, fee_growth_inside_1_last_x128),
        fee_growth_inside_0_x128=inside_0,
        fee_growth_inside_1_x128=inside_1,
    )
