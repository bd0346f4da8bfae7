"""
lp_monitor 데이터 타입 정의

컨트랙트 리더가 제공하는 스냅샷과 어드바이저 출력값을 dataclass로 정의.
모든 온체인 숫자 필드는 정밀도를 위해 int 타입 사용.
스냅샷과 결정 객체는 frozen: 코어는 입력을 절대 변경하지 않습니다.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from ..constants import MIN_TICK, MAX_TICK
from ..exceptions import InvalidArgumentError, OutOfBoundsError


def _finite_or_none(value: Optional[float]) -> Optional[float]:
    if value is None or math.isinf(value) or math.isnan(value):
        return None
    return value


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


@dataclass(frozen=True)
class Token:
    """ERC20 토큰 정보"""
    address: str
    symbol: str = ""
    decimals: int = 18

    @classmethod
    def from_dict(cls, data: dict) -> "Token":
        return cls(
            address=data.get("address") or data["id"],
            symbol=data.get("symbol", ""),
            decimals=int(data.get("decimals", 18)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address, "symbol": self.symbol, "decimals": self.decimals}


@dataclass(frozen=True)
class Band:
    """포지션 틱 범위 [tick_lower, tick_upper)"""
    tick_lower: int
    tick_upper: int

    @property
    def width(self) -> int:
        return self.tick_upper - self.tick_lower

    @classmethod
    def from_dict(cls, data: dict) -> "Band":
        return cls(tick_lower=int(data["tickLower"]), tick_upper=int(data["tickUpper"]))

    def to_dict(self) -> Dict[str, int]:
        return {"tickLower": self.tick_lower, "tickUpper": self.tick_upper}


@dataclass(frozen=True)
class TickFeeGrowth:
    """틱별 fee growth outside 체크포인트 (f_o,0(i), f_o,1(i))"""
    tick: int
    fee_growth_outside_0_x128: int
    fee_growth_outside_1_x128: int

    @classmethod
    def from_dict(cls, data: dict) -> "TickFeeGrowth":
        return cls(
            tick=int(data["tick"]),
            fee_growth_outside_0_x128=int(data.get("feeGrowthOutside0X128", 0)),
            fee_growth_outside_1_x128=int(data.get("feeGrowthOutside1X128", 0)),
        )


@dataclass(frozen=True)
class PoolState:
    """풀 상태 스냅샷 (모니터링 주기마다 새로 읽음)

    - current_tick: 현재 틱 인덱스 (i_c)
    - sqrt_price_x96: 현재 √가격 (Q96 인코딩)
    - liquidity: 현재 가격에서 활성화된 총 유동성
    - fee_growth_global_0_x128: token0 단위유동성당 누적수수료 (f_g,0)
    - fee_growth_global_1_x128: token1 단위유동성당 누적수수료 (f_g,1)
    """
    current_tick: int
    sqrt_price_x96: int
    liquidity: int = 0
    fee_growth_global_0_x128: int = 0
    fee_growth_global_1_x128: int = 0
    address: str = ""
    fee_tier: Optional[int] = None

    def __post_init__(self):
        if self.sqrt_price_x96 <= 0:
            raise InvalidArgumentError(f"sqrtPriceX96은 양수여야 합니다: {self.sqrt_price_x96}")
        if self.current_tick < MIN_TICK or self.current_tick > MAX_TICK:
            raise OutOfBoundsError(f"현재 틱이 유효 범위를 벗어났습니다: {self.current_tick}")

    @classmethod
    def from_dict(cls, data: dict) -> "PoolState":
        return cls(
            current_tick=int(data["currentTick"]),
            sqrt_price_x96=int(data["sqrtPriceX96"]),
            liquidity=int(data.get("liquidity", 0)),
            fee_growth_global_0_x128=int(data.get("feeGrowthGlobal0X128", 0)),
            fee_growth_global_1_x128=int(data.get("feeGrowthGlobal1X128", 0)),
            address=data.get("address", ""),
            fee_tier=_optional_int(data.get("feeTier")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentTick": self.current_tick,
            "sqrtPriceX96": str(self.sqrt_price_x96),
            "liquidity": str(self.liquidity),
            "feeGrowthGlobal0X128": str(self.fee_growth_global_0_x128),
            "feeGrowthGlobal1X128": str(self.fee_growth_global_1_x128),
            "address": self.address,
            "feeTier": self.fee_tier,
        }


@dataclass(frozen=True)
class Position:
    """모니터링 대상 포지션 (읽기 전용)

    - tick_lower / tick_upper: 범위 (i_l < i_u)
    - liquidity: 포지션 유동성 (l)
    - tokens_owed_0 / tokens_owed_1: 마지막 온체인 업데이트 시점까지 쌓인 미수령 수수료
    - fee_growth_inside_*_last_x128: 마지막 업데이트 시점의 범위 내 fee growth (f_r(t_0))
    - entry_sqrt_price_x96: 민트 시점 sqrtPriceX96 (IL 계산용, 모르면 None)
    """
    token0: Token
    token1: Token
    fee_tier: int
    tick_lower: int
    tick_upper: int
    liquidity: int
    tokens_owed_0: int = 0
    tokens_owed_1: int = 0
    token_id: Optional[int] = None
    fee_growth_inside_0_last_x128: int = 0
    fee_growth_inside_1_last_x128: int = 0
    entry_sqrt_price_x96: Optional[int] = None

    def __post_init__(self):
        for tick in (self.tick_lower, self.tick_upper):
            if tick < MIN_TICK or tick > MAX_TICK:
                raise OutOfBoundsError(f"포지션 틱이 유효 범위를 벗어났습니다: {tick}")
        if self.tick_lower >= self.tick_upper:
            raise InvalidArgumentError(
                f"tick_lower는 tick_upper보다 작아야 합니다: {self.tick_lower} >= {self.tick_upper}"
            )
        if self.liquidity < 0:
            raise InvalidArgumentError(f"유동성은 음수일 수 없습니다: {self.liquidity}")

    @property
    def band(self) -> Band:
        return Band(self.tick_lower, self.tick_upper)

    @classmethod
    def from_dict(cls, data: dict) -> "Position":
        return cls(
            token0=Token.from_dict(data["token0"]),
            token1=Token.from_dict(data["token1"]),
            fee_tier=int(data["feeTier"]),
            tick_lower=int(data["tickLower"]),
            tick_upper=int(data["tickUpper"]),
            liquidity=int(data["liquidity"]),
            tokens_owed_0=int(data.get("tokensOwed0", 0)),
            tokens_owed_1=int(data.get("tokensOwed1", 0)),
            token_id=_optional_int(data.get("tokenId")),
            fee_growth_inside_0_last_x128=int(data.get("feeGrowthInside0LastX128", 0)),
            fee_growth_inside_1_last_x128=int(data.get("feeGrowthInside1LastX128", 0)),
            entry_sqrt_price_x96=_optional_int(data.get("entrySqrtPriceX96")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token0": self.token0.to_dict(),
            "token1": self.token1.to_dict(),
            "feeTier": self.fee_tier,
            "tickLower": self.tick_lower,
            "tickUpper": self.tick_upper,
            "liquidity": str(self.liquidity),
            "tokensOwed0": str(self.tokens_owed_0),
            "tokensOwed1": str(self.tokens_owed_1),
            "tokenId": self.token_id,
            "feeGrowthInside0LastX128": str(self.fee_growth_inside_0_last_x128),
            "feeGrowthInside1LastX128": str(self.fee_growth_inside_1_last_x128),
            "entrySqrtPriceX96": (
                None if self.entry_sqrt_price_x96 is None else str(self.entry_sqrt_price_x96)
            ),
        }


class RebalanceReason(str, Enum):
    """리밸런싱 사유 (여러 조건이 동시에 참이면 위에서부터 우선)"""
    OUT_OF_RANGE = "OUT_OF_RANGE"
    TIME_CAP_EXCEEDED = "TIME_CAP_EXCEEDED"
    ECONOMIC_TRIGGER = "ECONOMIC_TRIGGER"
    NONE = "NONE"


class Urgency(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class DecisionMetrics:
    """결정 시점의 지표"""
    is_out_of_range: bool
    out_of_range_distance: int
    range_position: Optional[float]
    hours_since_last_rebalance: float
    time_cap_exceeded: bool
    uncollected_fees_usd: float
    estimated_gas_cost_usd: float
    profit_multiple: float
    economic_trigger: bool
    impermanent_loss_percent: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> "DecisionMetrics":
        hours = data.get("hoursSinceLastRebalance")
        return cls(
            is_out_of_range=bool(data["isOutOfRange"]),
            out_of_range_distance=int(data["outOfRangeDistance"]),
            range_position=data.get("rangePosition"),
            hours_since_last_rebalance=math.inf if hours is None else float(hours),
            time_cap_exceeded=bool(data["timeCapExceeded"]),
            uncollected_fees_usd=float(data["uncollectedFeesUsd"]),
            estimated_gas_cost_usd=float(data["estimatedGasCostUsd"]),
            profit_multiple=float(data["profitMultiple"]),
            economic_trigger=bool(data["economicTrigger"]),
            impermanent_loss_percent=data.get("impermanentLossPercent"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isOutOfRange": self.is_out_of_range,
            "outOfRangeDistance": self.out_of_range_distance,
            "rangePosition": self.range_position,
            "hoursSinceLastRebalance": _finite_or_none(self.hours_since_last_rebalance),
            "timeCapExceeded": self.time_cap_exceeded,
            "uncollectedFeesUsd": self.uncollected_fees_usd,
            "estimatedGasCostUsd": self.estimated_gas_cost_usd,
            "profitMultiple": self.profit_multiple,
            "economicTrigger": self.economic_trigger,
            "impermanentLossPercent": self.impermanent_loss_percent,
        }


@dataclass(frozen=True)
class RebalanceDecision:
    """한 번의 모니터링 주기 결과 (append-only 기록용)

    입력 스냅샷(position, pool_state)을 값으로 포함하므로
    저장된 결정만으로 재계산이 가능합니다.
    """
    should_rebalance: bool
    reason: RebalanceReason
    urgency: Urgency
    current_range: Band
    new_range: Optional[Band]
    metrics: DecisionMetrics
    timestamp: float
    position: Optional[Position] = field(default=None, compare=False)
    pool_state: Optional[PoolState] = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, data: dict) -> "RebalanceDecision":
        new_range = data.get("newRange")
        position = data.get("position")
        pool_state = data.get("poolState")
        return cls(
            should_rebalance=bool(data["shouldRebalance"]),
            reason=RebalanceReason(data["reason"]),
            urgency=Urgency(data["urgency"]),
            current_range=Band.from_dict(data["currentRange"]),
            new_range=Band.from_dict(new_range) if new_range else None,
            metrics=DecisionMetrics.from_dict(data["metrics"]),
            timestamp=float(data["timestamp"]),
            position=Position.from_dict(position) if position else None,
            pool_state=PoolState.from_dict(pool_state) if pool_state else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shouldRebalance": self.should_rebalance,
            "reason": self.reason.value,
            "urgency": self.urgency.value,
            "currentRange": self.current_range.to_dict(),
            "newRange": self.new_range.to_dict() if self.new_range else None,
            "metrics": self.metrics.to_dict(),
            "timestamp": self.timestamp,
            "position": self.position.to_dict() if self.position else None,
            "poolState": self.pool_state.to_dict() if self.pool_state else None,
        }
