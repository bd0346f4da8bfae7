"""
Impermanent Loss 테스트

집중화된 유동성 IL 모델의 부호, 0점, 범위 폭에 대한 단조성을 검증합니다.
"""

import pytest

from ..data.types import Position, Token
from ..math.tick_math import TickConverter, get_sqrt_ratio_at_tick
from ..strategy.impermanent_loss import (
    concentrated_impermanent_loss,
    full_range_impermanent_loss,
)


def make_position(tick_lower: int, tick_upper: int, liquidity: int = 10 ** 18) -> Position:
    return Position(
        token0=Token("0x0000000000000000000000000000000000000001", "TKA", 18),
        token1=Token("0x0000000000000000000000000000000000000002", "TKB", 18),
        fee_tier=3000,
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        liquidity=liquidity,
    )


class TestConcentratedImpermanentLoss:
    """concentrated_impermanent_loss 테스트"""

    def test_zero_when_price_unchanged(self):
        for lower, upper in ((-60, 60), (-6000, 6000), (1200, 4800)):
            sqrt_price = get_sqrt_ratio_at_tick(300)
            result = concentrated_impermanent_loss(make_position(lower, upper), sqrt_price, sqrt_price)
            assert result.il_percent == 0.0

    def test_negative_when_price_moves_in_range(self):
        position = make_position(-1000, 1000)
        for tick in (-500, -50, 50, 500):
            result = concentrated_impermanent_loss(
                position, get_sqrt_ratio_at_tick(0), get_sqrt_ratio_at_tick(tick)
            )
            assert result.il_percent < 0

    def test_narrow_range_loses_more(self):
        """같은 가격 변화에서 좁은 범위의 IL 크기가 더 큼"""
        initial = get_sqrt_ratio_at_tick(0)
        current = get_sqrt_ratio_at_tick(80)

        narrow = concentrated_impermanent_loss(make_position(-100, 100), initial, current)
        wide = concentrated_impermanent_loss(make_position(-1000, 1000), initial, current)

        assert abs(narrow.il_percent) > abs(wide.il_percent)

    def test_out_of_range_above_all_token1(self):
        """상한 위로 이탈하면 전부 token1"""
        result = concentrated_impermanent_loss(
            make_position(-1000, 1000), get_sqrt_ratio_at_tick(0), get_sqrt_ratio_at_tick(2000)
        )
        assert result.token0_amount == 0
        assert result.token1_amount > 0
        assert result.il_percent < 0

    def test_out_of_range_below_all_token0(self):
        result = concentrated_impermanent_loss(
            make_position(-1000, 1000), get_sqrt_ratio_at_tick(0), get_sqrt_ratio_at_tick(-2000)
        )
        assert result.token0_amount > 0
        assert result.token1_amount == 0
        assert result.il_percent < 0

    def test_values_in_token1_units(self):
        """가격 불변이면 초기/현재/보유 가치가 모두 같음"""
        sqrt_price = get_sqrt_ratio_at_tick(0)
        result = concentrated_impermanent_loss(make_position(-1000, 1000), sqrt_price, sqrt_price)
        assert result.initial_value == pytest.approx(result.hold_value)
        assert result.current_value == pytest.approx(result.hold_value)

    def test_independent_of_liquidity(self):
        initial = get_sqrt_ratio_at_tick(0)
        current = get_sqrt_ratio_at_tick(400)
        small = concentrated_impermanent_loss(make_position(-1000, 1000, 10 ** 15), initial, current)
        large = concentrated_impermanent_loss(make_position(-1000, 1000, 10 ** 21), initial, current)
        assert small.il_percent == pytest.approx(large.il_percent, rel=1e-6)

    def test_shared_converter(self):
        converter = TickConverter()
        concentrated_impermanent_loss(
            make_position(-1000, 1000), get_sqrt_ratio_at_tick(0), get_sqrt_ratio_at_tick(10), converter
        )
        assert converter.cache_size == 2


class TestFullRangeImpermanentLoss:
    """V2 스타일 비교용 공식"""

    def test_no_change(self):
        assert full_range_impermanent_loss(1.0) == 0.0

    def test_price_4x(self):
        """가격 4배 -> -20%"""
        assert full_range_impermanent_loss(4.0) == pytest.approx(-20.0)

    def test_concentrated_exceeds_full_range(self):
        """같은 가격 변화에서 집중화된 포지션의 IL이 더 큼"""
        initial = get_sqrt_ratio_at_tick(0)
        current = get_sqrt_ratio_at_tick(500)
        concentrated = concentrated_impermanent_loss(make_position(-1000, 1000), initial, current)
        assert concentrated.il_percent < full_range_impermanent_loss(1.0001 ** 500)

    def test_invalid_ratio(self):
        assert full_range_impermanent_loss(0.0) == 0.0
