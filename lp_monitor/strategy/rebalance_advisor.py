"""
Rebalance Advisor - 리밸런싱 결정

범위 이탈, 마지막 리밸런싱 이후 경과 시간, 미수령 수수료/가스비 비율을
설정 임계값과 비교해 하나의 RebalanceDecision을 만듭니다.

**결정 로직**:
1. is_out_of_range: 현재 틱이 [tick_lower, tick_upper) 밖
2. hours_since_last_rebalance: 이전 결정 이후 시간 (없으면 무한대)
3. time_cap_exceeded: 경과 시간 > time_cap_hours
4. profit_multiple = 미수령 수수료(USD) / 예상 가스비(USD)
5. economic_trigger: profit_multiple >= fee_gas_multiple
6. 하나라도 참이면 리밸런싱, 현재 틱 중심으로 새 범위 제안

**사유 우선순위** (동시에 여러 조건이 참일 때):
    OUT_OF_RANGE > TIME_CAP_EXCEEDED > ECONOMIC_TRIGGER > NONE

**긴급도**:
    HIGH (범위 이탈) > MEDIUM (경과 시간 > medium_urgency_hours) > LOW

평가는 입력에 대한 순수 함수입니다. 이전 결정 외의 상태를 갖지 않으며
(TickConverter 캐시 제외), 하위 구성요소의 예외는 그대로 전파됩니다.
"""

import logging
import math
import time
from typing import Optional

from ..config import AdvisorConfig
from ..data.price_source import PriceSource
from ..data.types import (
    Band,
    DecisionMetrics,
    PoolState,
    Position,
    RebalanceDecision,
    RebalanceReason,
    Urgency,
)
from ..math.tick_math import TickConverter
from .fee_accountant import FeeAccountant
from .impermanent_loss import concentrated_impermanent_loss
from .range_calculator import (
    calculate_band,
    fee_tier_to_tick_spacing,
    is_in_range,
    out_of_range_distance,
    range_position,
)

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


def hours_since(previous_decision: Optional[RebalanceDecision], now: float) -> float:
    """이전 결정 이후 경과 시간 (이전 결정이 없으면 무한대)"""
    if previous_decision is None:
        return math.inf
    return (now - previous_decision.timestamp) / SECONDS_PER_HOUR


def select_reason(
    is_out_of_range: bool,
    time_cap_exceeded: bool,
    economic_trigger: bool
) -> RebalanceReason:
    if is_out_of_range:
        return RebalanceReason.OUT_OF_RANGE
    if time_cap_exceeded:
        return RebalanceReason.TIME_CAP_EXCEEDED
    if economic_trigger:
        return RebalanceReason.ECONOMIC_TRIGGER
    return RebalanceReason.NONE


def select_urgency(
    is_out_of_range: bool,
    hours_since_last_rebalance: float,
    medium_urgency_hours: float
) -> Urgency:
    if is_out_of_range:
        return Urgency.HIGH
    if hours_since_last_rebalance > medium_urgency_hours:
        return Urgency.MEDIUM
    return Urgency.LOW


class RebalanceAdvisor:
    """단일 포지션 리밸런싱 어드바이저

    사용법:
        advisor = RebalanceAdvisor(price_source, AdvisorConfig())
        decision = advisor.evaluate(pool_state, position, previous_decision)

    동시에 여러 평가를 실행하는 경우 인스턴스를 따로 만들어야 합니다
    (TickConverter 캐시는 스레드 안전하지 않음).
    """

    def __init__(
        self,
        price_source: PriceSource,
        config: Optional[AdvisorConfig] = None,
        converter: Optional[TickConverter] = None
    ):
        self.config = config or AdvisorConfig()
        self.converter = converter or TickConverter()
        self.fee_accountant = FeeAccountant(price_source)

    def evaluate(
        self,
        pool_state: PoolState,
        position: Position,
        previous_decision: Optional[RebalanceDecision] = None,
        now: Optional[float] = None
    ) -> RebalanceDecision:
        """현재 스냅샷에 대한 리밸런싱 결정

        Args:
            pool_state: 풀 상태 스냅샷
            position: 포지션 스냅샷
            previous_decision: 마지막으로 리밸런싱을 권고한 결정 (없으면 None)
            now: 평가 시각 (unix seconds, 기본값: 현재 시각)

        Returns:
            RebalanceDecision

        Raises:
            UnknownValueError: 포지션 수수료 티어를 알 수 없는 경우
            InvalidArgumentError: 토큰 소수점 자릿수가 잘못된 경우
            OutOfBoundsError: 틱이 유효 범위를 벗어난 경우
            PriceUnavailableError: 가격 조회 실패
        """
        config = self.config
        now = time.time() if now is None else now
        current_tick = pool_state.current_tick
        tick_spacing = fee_tier_to_tick_spacing(position.fee_tier)

        is_out_of_range = not is_in_range(current_tick, position.tick_lower, position.tick_upper)

        hours_since_last_rebalance = hours_since(previous_decision, now)
        time_cap_exceeded = hours_since_last_rebalance > config.time_cap_hours

        fees = self.fee_accountant.uncollected_fees(position)
        profit_multiple = fees.total_usd / config.estimated_gas_cost_usd
        economic_trigger = profit_multiple >= config.fee_gas_multiple

        should_rebalance = is_out_of_range or time_cap_exceeded or economic_trigger

        new_range: Optional[Band] = None
        if should_rebalance:
            new_range = calculate_band(current_tick, config.band_basis_points, tick_spacing)

        il_percent = None
        if position.entry_sqrt_price_x96 is not None:
            il_percent = concentrated_impermanent_loss(
                position, position.entry_sqrt_price_x96, pool_state.sqrt_price_x96, self.converter
            ).il_percent

        reason = select_reason(is_out_of_range, time_cap_exceeded, economic_trigger)
        urgency = select_urgency(
            is_out_of_range, hours_since_last_rebalance, config.medium_urgency_hours
        )

        metrics = DecisionMetrics(
            is_out_of_range=is_out_of_range,
            out_of_range_distance=out_of_range_distance(
                current_tick, position.tick_lower, position.tick_upper
            ),
            range_position=range_position(current_tick, position.tick_lower, position.tick_upper),
            hours_since_last_rebalance=hours_since_last_rebalance,
            time_cap_exceeded=time_cap_exceeded,
            uncollected_fees_usd=fees.total_usd,
            estimated_gas_cost_usd=config.estimated_gas_cost_usd,
            profit_multiple=profit_multiple,
            economic_trigger=economic_trigger,
            impermanent_loss_percent=il_percent,
        )

        if should_rebalance:
            logger.info(
                "리밸런싱 권고: reason=%s urgency=%s tick=%d range=[%d, %d) -> [%d, %d)",
                reason.value, urgency.value, current_tick,
                position.tick_lower, position.tick_upper,
                new_range.tick_lower, new_range.tick_upper,
            )
        else:
            logger.debug(
                "리밸런싱 불필요: tick=%d range=[%d, %d) fees=$%.2f multiple=%.2f",
                current_tick, position.tick_lower, position.tick_upper,
                fees.total_usd, profit_multiple,
            )

        return RebalanceDecision(
            should_rebalance=should_rebalance,
            reason=reason,
            urgency=urgency,
            current_range=position.band,
            new_range=new_range,
            metrics=metrics,
            timestamp=now,
            position=position,
            pool_state=pool_state,
        )
