"""
Fee Accountant - 미수령 수수료 및 수수료 수익성 지표

포지션의 tokensOwed(마지막 온체인 업데이트까지 누적된 수수료)를
토큰 단위와 USD로 환산하고, 일간 수수료/APR/가스 손익분기를 계산합니다.

tokensOwed는 마지막 업데이트 이후의 수수료를 포함하지 않으므로 실제보다
적게 집계될 수 있습니다. 정확한 값이 필요하면 feeGrowthOutside 체크포인트와
함께 accrued_fees_from_growth를 사용하세요.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional

from ..constants import MIN_DECIMALS, MAX_DECIMALS
from ..data.price_source import PriceSource, fetch_price
from ..data.types import PoolState, Position, TickFeeGrowth
from ..exceptions import InvalidArgumentError
from ..math.fee_growth import accrued_fees_from_growth
from ..math.liquidity_math import amounts_for_liquidity
from ..math.tick_math import TickConverter


@dataclass(frozen=True)
class UncollectedFees:
    """미수령 수수료 (human-readable 단위 및 USD)"""
    token0: float
    token1: float
    usd_token0: float
    usd_token1: float
    total_usd: float


@dataclass(frozen=True)
class RebalanceThreshold:
    should_rebalance: bool
    days_to_breakeven: float


def _check_decimals(decimals: int) -> None:
    if decimals < MIN_DECIMALS or decimals > MAX_DECIMALS:
        raise InvalidArgumentError(
            f"유효하지 않은 토큰 소수점 자릿수: {decimals} (범위: {MIN_DECIMALS} ~ {MAX_DECIMALS})"
        )


def to_decimal_amount(raw_amount: int, decimals: int) -> float:
    """최소 단위 정수를 토큰 단위로 변환"""
    _check_decimals(decimals)
    return raw_amount / (10 ** decimals)


class FeeAccountant:
    """PriceSource를 사용하는 수수료 계산기

    사용법:
        accountant = FeeAccountant(create_stablecoin_price_source())
        fees = accountant.uncollected_fees(position)
    """

    def __init__(self, price_source: PriceSource):
        self.price_source = price_source

    def uncollected_fees(self, position: Position) -> UncollectedFees:
        """미수령 수수료의 토큰 수량과 USD 가치

        Raises:
            InvalidArgumentError: 토큰 소수점 자릿수가 [0, 18] 밖인 경우
            PriceUnavailableError: 가격 조회 실패
        """
        fees0 = to_decimal_amount(position.tokens_owed_0, position.token0.decimals)
        fees1 = to_decimal_amount(position.tokens_owed_1, position.token1.decimals)

        price0 = fetch_price(self.price_source, position.token0.address)
        price1 = fetch_price(self.price_source, position.token1.address)

        usd0 = fees0 * price0
        usd1 = fees1 * price1

        return UncollectedFees(
            token0=fees0,
            token1=fees1,
            usd_token0=usd0,
            usd_token1=usd1,
            total_usd=usd0 + usd1,
        )

    def position_value_usd(
        self,
        position: Position,
        sqrt_price_x96: int,
        converter: Optional[TickConverter] = None
    ) -> float:
        """현재 sqrt 가격에서 포지션 유동성의 USD 가치 (수수료 제외)"""
        amount0, amount1 = amounts_for_liquidity(
            position.liquidity, sqrt_price_x96,
            position.tick_lower, position.tick_upper,
            converter
        )
        value0 = to_decimal_amount(amount0, position.token0.decimals) * fetch_price(
            self.price_source, position.token0.address
        )
        value1 = to_decimal_amount(amount1, position.token1.decimals) * fetch_price(
            self.price_source, position.token1.address
        )
        return value0 + value1

    def uncollected_fees_from_growth(
        self,
        position: Position,
        pool_state: PoolState,
        lower: TickFeeGrowth,
        upper: TickFeeGrowth
    ) -> UncollectedFees:
        """tokensOwed + 마지막 체크포인트 이후 누적분

        범위 경계 틱의 feeGrowthOutside 체크포인트가 있을 때만 사용할 수 있습니다.

        Raises:
            InvalidArgumentError: 체크포인트 틱이 포지션 경계와 다른 경우
        """
        if lower.tick != position.tick_lower or upper.tick != position.tick_upper:
            raise InvalidArgumentError(
                f"체크포인트 틱({lower.tick}, {upper.tick})이 포지션 범위와 다릅니다"
            )

        accrued = accrued_fees_from_growth(
            position.liquidity,
            position.tick_lower,
            position.tick_upper,
            pool_state.current_tick,
            pool_state.fee_growth_global_0_x128,
            pool_state.fee_growth_global_1_x128,
            lower.fee_growth_outside_0_x128,
            lower.fee_growth_outside_1_x128,
            upper.fee_growth_outside_0_x128,
            upper.fee_growth_outside_1_x128,
            position.fee_growth_inside_0_last_x128,
            position.fee_growth_inside_1_last_x128
        )
        return self.uncollected_fees(replace(
            position,
            tokens_owed_0=position.tokens_owed_0 + accrued.amount0,
            tokens_owed_1=position.tokens_owed_1 + accrued.amount1,
        ))


def daily_fee_rate(current_fees_usd: float, hours_elapsed: float) -> float:
    """현재 수수료를 24시간으로 선형 외삽

    hours_elapsed <= 0 이면 데이터 없음으로 보고 0을 반환합니다.
    """
    if hours_elapsed <= 0:
        return 0.0
    if current_fees_usd < 0:
        raise InvalidArgumentError(f"수수료는 음수일 수 없습니다: {current_fees_usd}")
    return current_fees_usd / hours_elapsed * 24


def fee_apr(daily_fees_usd: float, position_value_usd: float) -> float:
    """수수료 APR (%) = 일간 수수료 × 365 / 포지션 가치 × 100"""
    if position_value_usd <= 0:
        return 0.0
    if daily_fees_usd < 0:
        raise InvalidArgumentError(f"일간 수수료는 음수일 수 없습니다: {daily_fees_usd}")
    return daily_fees_usd * 365 / position_value_usd * 100


def rebalance_threshold(
    gas_cost_usd: float,
    daily_fees_usd: float,
    multiplier: float = 3.0
) -> RebalanceThreshold:
    """가스비 손익분기 기준 리밸런싱 수익성

    days_to_breakeven = gas / daily_fees (수수료 0이면 무한대)
    should_rebalance = days_to_breakeven <= multiplier

    Example:
        >>> rebalance_threshold(30, 20, 3)
        RebalanceThreshold(should_rebalance=True, days_to_breakeven=1.5)
    """
    if gas_cost_usd < 0 or daily_fees_usd < 0 or multiplier <= 0:
        raise InvalidArgumentError(
            f"잘못된 입력: gas={gas_cost_usd}, daily_fees={daily_fees_usd}, multiplier={multiplier}"
        )

    if daily_fees_usd == 0:
        return RebalanceThreshold(should_rebalance=False, days_to_breakeven=math.inf)

    days_to_breakeven = gas_cost_usd / daily_fees_usd
    return RebalanceThreshold(
        should_rebalance=days_to_breakeven <= multiplier,
        days_to_breakeven=days_to_breakeven,
    )


def expected_fees(fee_rate: float, volume: float, liquidity_share: float) -> float:
    """기간 거래량 기준 예상 수수료 = volume × fee_rate × share"""
    if fee_rate < 0 or fee_rate > 1:
        raise InvalidArgumentError(f"수수료율은 0~1 사이여야 합니다: {fee_rate}")
    if liquidity_share < 0 or liquidity_share > 1:
        raise InvalidArgumentError(f"유동성 비중은 0~1 사이여야 합니다: {liquidity_share}")
    if volume < 0:
        raise InvalidArgumentError(f"거래량은 음수일 수 없습니다: {volume}")
    return volume * fee_rate * liquidity_share


def fee_tier_to_decimal(fee_tier: int) -> float:
    """수수료 티어(백만분율)를 소수로 변환 (3000 -> 0.003)"""
    return fee_tier / 1_000_000


def net_apr(fee_apr_percent: float, il_percent: float, horizon_days: float = 365) -> float:
    """IL을 연율화해 차감한 순 APR (%)

    il_percent는 손실을 양수 크기로 전달합니다.
    """
    if horizon_days <= 0:
        raise InvalidArgumentError(f"기간은 양수여야 합니다: {horizon_days}")
    annualized_il = il_percent / horizon_days * 365
    return fee_apr_percent - annualized_il


def estimate_gas_cost_usd(gas_units: int, gas_price_gwei: float, eth_price_usd: float) -> float:
    """가스비 (USD) = gas units × gwei × 1e-9 × ETH 가격"""
    if gas_units < 0 or gas_price_gwei < 0 or eth_price_usd < 0:
        raise InvalidArgumentError("가스 파라미터는 음수일 수 없습니다")
    return gas_units * gas_price_gwei * 1e-9 * eth_price_usd


def uncollected_fees(position: Position, price_source: PriceSource) -> UncollectedFees:
    """FeeAccountant(price_source).uncollected_fees(position) 단축 함수"""
    return FeeAccountant(price_source).uncollected_fees(position)
