"""
Fee Accountant 테스트

미수령 수수료 USD 환산과 수익성 지표를 테스트합니다.
"""

import math

import pytest

from ..constants import Q96, Q128
from ..data.price_source import StaticPriceSource
from ..data.types import PoolState, Position, TickFeeGrowth, Token
from ..exceptions import InvalidArgumentError, PriceUnavailableError
from ..strategy.fee_accountant import (
    FeeAccountant,
    RebalanceThreshold,
    daily_fee_rate,
    estimate_gas_cost_usd,
    expected_fees,
    fee_apr,
    fee_tier_to_decimal,
    net_apr,
    rebalance_threshold,
    to_decimal_amount,
    uncollected_fees,
)


USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
USDT = "0xdAC17F958D2ee523a2206206994597C13D831ec7"


def make_position(owed0=1_000_000, owed1=2_000_000, decimals0=6, decimals1=6, **kwargs) -> Position:
    params = dict(
        token0=Token(USDC, "USDC", decimals0),
        token1=Token(USDT, "USDT", decimals1),
        fee_tier=100,
        tick_lower=-100,
        tick_upper=100,
        liquidity=10 ** 12,
        tokens_owed_0=owed0,
        tokens_owed_1=owed1,
    )
    params.update(kwargs)
    return Position(**params)


class FailingPriceSource:
    """항상 실패하는 가격 소스"""

    def get_price(self, token_address: str) -> float:
        raise ConnectionError("RPC timeout")


class TestUncollectedFees:
    """FeeAccountant.uncollected_fees 테스트"""

    def test_stablecoin_fees(self):
        """1_000_000 / 2_000_000 (6 decimals, $1) -> 1 + 2 = 3 USD"""
        accountant = FeeAccountant(StaticPriceSource({USDC: 1.0, USDT: 1.0}))
        fees = accountant.uncollected_fees(make_position())

        assert fees.token0 == 1.0
        assert fees.token1 == 2.0
        assert fees.usd_token0 == 1.0
        assert fees.usd_token1 == 2.0
        assert fees.total_usd == 3.0

    def test_price_weighting(self):
        accountant = FeeAccountant(StaticPriceSource({USDC: 2.0, USDT: 0.5}))
        fees = accountant.uncollected_fees(make_position())
        assert fees.total_usd == pytest.approx(2.0 + 1.0)

    def test_no_fees(self):
        accountant = FeeAccountant(StaticPriceSource({USDC: 1.0, USDT: 1.0}))
        fees = accountant.uncollected_fees(make_position(owed0=0, owed1=0))
        assert fees.total_usd == 0.0

    def test_invalid_decimals(self):
        accountant = FeeAccountant(StaticPriceSource({USDC: 1.0, USDT: 1.0}))
        with pytest.raises(InvalidArgumentError):
            accountant.uncollected_fees(make_position(decimals0=19))

    def test_missing_price(self):
        accountant = FeeAccountant(StaticPriceSource({USDC: 1.0}))
        with pytest.raises(PriceUnavailableError):
            accountant.uncollected_fees(make_position())

    def test_price_source_failure_is_typed(self):
        """하위 소스의 임의 예외는 PriceUnavailableError로 전파"""
        accountant = FeeAccountant(FailingPriceSource())
        with pytest.raises(PriceUnavailableError) as exc_info:
            accountant.uncollected_fees(make_position())
        assert exc_info.value.token_address == USDC

    def test_shortcut_function(self):
        fees = uncollected_fees(make_position(), StaticPriceSource({USDC: 1.0, USDT: 1.0}))
        assert fees.total_usd == 3.0


class TestUncollectedFeesFromGrowth:
    """feeGrowthOutside 체크포인트 기반 정밀 계산"""

    def test_adds_accrued_to_owed(self):
        accountant = FeeAccountant(StaticPriceSource({USDC: 1.0, USDT: 1.0}))
        position = make_position(
            liquidity=10 ** 6,
            fee_growth_inside_0_last_x128=2 * Q128,
            fee_growth_inside_1_last_x128=2 * Q128,
        )
        pool_state = PoolState(
            current_tick=0,
            sqrt_price_x96=Q96,
            fee_growth_global_0_x128=5 * Q128,
            fee_growth_global_1_x128=6 * Q128,
        )
        lower = TickFeeGrowth(-100, Q128 // 2, Q128 // 2)
        upper = TickFeeGrowth(100, Q128 // 2, Q128 // 2)

        fees = accountant.uncollected_fees_from_growth(position, pool_state, lower, upper)

        # inside0 = 5 - 0.5 - 0.5 = 4 -> +2 × 10^6, inside1 = 5 -> +3 × 10^6
        assert fees.token0 == pytest.approx(1.0 + 2.0)
        assert fees.token1 == pytest.approx(2.0 + 3.0)
        assert fees.total_usd == pytest.approx(8.0)

    def test_mismatched_checkpoint(self):
        accountant = FeeAccountant(StaticPriceSource({USDC: 1.0, USDT: 1.0}))
        pool_state = PoolState(current_tick=0, sqrt_price_x96=Q96)
        with pytest.raises(InvalidArgumentError):
            accountant.uncollected_fees_from_growth(
                make_position(), pool_state,
                TickFeeGrowth(-200, 0, 0), TickFeeGrowth(100, 0, 0)
            )


class TestPositionValue:

    def test_stable_pair_at_par(self):
        """틱 0, 대칭 범위: 두 토큰 가치 합"""
        accountant = FeeAccountant(StaticPriceSource({USDC: 1.0, USDT: 1.0}))
        value = accountant.position_value_usd(make_position(liquidity=10 ** 12), Q96)
        assert value > 0
        # 범위 내 각 토큰 약 L × (1 - 1.0001^-50) / 10^6
        expected_each = 10 ** 12 * (1 - 1.0001 ** -50) / 10 ** 6
        assert value == pytest.approx(2 * expected_each, rel=1e-3)


class TestDailyFeeRate:

    def test_linear_extrapolation(self):
        assert daily_fee_rate(10.0, 12) == pytest.approx(20.0)

    def test_no_elapsed_time(self):
        assert daily_fee_rate(10.0, 0) == 0.0
        assert daily_fee_rate(10.0, -5) == 0.0

    def test_negative_fees(self):
        with pytest.raises(InvalidArgumentError):
            daily_fee_rate(-1.0, 12)


class TestFeeApr:

    def test_basic(self):
        """10/day on 3650 -> 100%"""
        assert fee_apr(10.0, 3650.0) == pytest.approx(100.0)

    def test_zero_value(self):
        assert fee_apr(10.0, 0.0) == 0.0


class TestRebalanceThreshold:
    """가스비 손익분기 판단"""

    def test_profitable(self):
        """gas 30, daily 20, multiplier 3 -> 1.5일, True"""
        result = rebalance_threshold(30, 20, 3)
        assert result == RebalanceThreshold(should_rebalance=True, days_to_breakeven=1.5)

    def test_unprofitable(self):
        result = rebalance_threshold(100, 10, 3)
        assert result.should_rebalance is False
        assert result.days_to_breakeven == 10.0

    def test_boundary_inclusive(self):
        assert rebalance_threshold(30, 10, 3).should_rebalance is True

    def test_zero_daily_fees(self):
        result = rebalance_threshold(30, 0, 3)
        assert result.should_rebalance is False
        assert math.isinf(result.days_to_breakeven)

    def test_invalid_inputs(self):
        with pytest.raises(InvalidArgumentError):
            rebalance_threshold(-1, 10)
        with pytest.raises(InvalidArgumentError):
            rebalance_threshold(10, 10, 0)


class TestFeeHelpers:

    def test_expected_fees(self):
        assert expected_fees(0.003, 1_000_000, 0.01) == pytest.approx(30.0)

    def test_expected_fees_invalid(self):
        with pytest.raises(InvalidArgumentError):
            expected_fees(1.5, 1000, 0.1)

    def test_fee_tier_to_decimal(self):
        assert fee_tier_to_decimal(3000) == 0.003
        assert fee_tier_to_decimal(500) == 0.0005

    def test_net_apr(self):
        """30일 IL 1% -> 연 12.17%"""
        assert net_apr(20.0, 1.0, 30) == pytest.approx(20.0 - 365 / 30)

    def test_estimate_gas_cost(self):
        """200k gas × 10 gwei × $3000 = $6"""
        assert estimate_gas_cost_usd(200_000, 10, 3000) == pytest.approx(6.0)

    def test_to_decimal_amount(self):
        assert to_decimal_amount(1_500_000, 6) == 1.5
        with pytest.raises(InvalidArgumentError):
            to_decimal_amount(1, -1)
