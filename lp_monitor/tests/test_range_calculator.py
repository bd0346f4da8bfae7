"""
Range Calculator 테스트

범위 계산, 틱 간격 정렬, 범위 포함 규칙을 테스트합니다.
"""

import pytest

from ..constants import MAX_TICK, MIN_TICK
from ..data.types import Band
from ..exceptions import InvalidArgumentError, OutOfBoundsError, UnknownValueError
from ..strategy.range_calculator import (
    BandWidthCoefficients,
    align_to_spacing,
    calculate_band,
    calculate_optimal_band_width,
    estimate_volatility,
    fee_tier_to_tick_spacing,
    is_aligned_to_spacing,
    is_in_range,
    out_of_range_distance,
    range_position,
    recommend_position_width,
    tick_spacing_to_fee_tier,
)


class TestAlignToSpacing:

    def test_floor(self):
        assert align_to_spacing(-45, 10) == -50
        assert align_to_spacing(55, 10) == 50

    def test_ceil(self):
        assert align_to_spacing(55, 10, round_up=True) == 60
        assert align_to_spacing(-45, 10, round_up=True) == -40

    def test_already_aligned(self):
        assert align_to_spacing(60, 60) == 60
        assert align_to_spacing(60, 60, round_up=True) == 60

    def test_invalid_spacing(self):
        with pytest.raises(InvalidArgumentError):
            align_to_spacing(10, 0)


class TestCalculateBand:
    """calculate_band 테스트"""

    def test_centered_at_zero(self):
        """calculate_band(0, 100, 1) == (-50, 50)"""
        assert calculate_band(0, 100, 1) == Band(tick_lower=-50, tick_upper=50)

    def test_aligned_to_spacing(self):
        """calculate_band(5, 100, 10) == (-50, 60)"""
        assert calculate_band(5, 100, 10) == Band(tick_lower=-50, tick_upper=60)

    def test_default_spacing(self):
        assert calculate_band(1000, 200) == Band(tick_lower=900, tick_upper=1100)

    def test_odd_basis_points(self):
        """half = floor(101 / 2) = 50"""
        assert calculate_band(0, 101, 1) == Band(tick_lower=-50, tick_upper=50)

    def test_always_aligned(self):
        for spacing in (1, 10, 60, 200):
            for tick in (-887, -61, -1, 0, 7, 59, 12345):
                band = calculate_band(tick, 100, spacing)
                assert is_aligned_to_spacing(band.tick_lower, spacing)
                assert is_aligned_to_spacing(band.tick_upper, spacing)
                assert band.tick_lower < band.tick_upper

    def test_contains_current_tick(self):
        for tick in (-887, -61, 0, 7, 12345):
            band = calculate_band(tick, 100, 60)
            assert is_in_range(tick, band.tick_lower, band.tick_upper)

    def test_narrow_band_widened_by_spacing(self):
        """폭이 간격보다 좁아도 정렬 후 최소 한 간격"""
        band = calculate_band(30, 2, 200)
        assert band == Band(tick_lower=0, tick_upper=200)

    def test_one_basis_point_on_spacing_1(self):
        """half = 0이면 하한 == 상한 -> 빈 범위"""
        with pytest.raises(InvalidArgumentError):
            calculate_band(0, 1, 1)

    def test_upper_beyond_max_tick(self):
        """MAX_TICK 근처에서 올림 정렬된 상한이 MAX_TICK을 넘으면 거부"""
        with pytest.raises(OutOfBoundsError):
            calculate_band(MAX_TICK - 10, 100, 60)

    def test_lower_beyond_min_tick(self):
        with pytest.raises(OutOfBoundsError):
            calculate_band(MIN_TICK + 10, 100, 60)

    def test_within_bounds_near_edge(self):
        band = calculate_band(MAX_TICK - 200, 100, 1)
        assert band == Band(tick_lower=MAX_TICK - 250, tick_upper=MAX_TICK - 150)

    def test_invalid_basis_points(self):
        with pytest.raises(InvalidArgumentError):
            calculate_band(0, 0, 1)
        with pytest.raises(InvalidArgumentError):
            calculate_band(0, -100, 1)

    def test_invalid_tick_spacing(self):
        with pytest.raises(InvalidArgumentError):
            calculate_band(0, 100, 7)


class TestIsInRange:
    """하한 포함, 상한 미포함"""

    def test_lower_inclusive(self):
        assert is_in_range(-100, -100, 100) is True

    def test_upper_exclusive(self):
        assert is_in_range(100, -100, 100) is False

    def test_inside(self):
        assert is_in_range(0, -100, 100) is True

    def test_below(self):
        assert is_in_range(-101, -100, 100) is False


class TestRangeMetrics:

    def test_out_of_range_distance(self):
        assert out_of_range_distance(0, -100, 100) == 0
        assert out_of_range_distance(-150, -100, 100) == 50
        assert out_of_range_distance(100, -100, 100) == 1
        assert out_of_range_distance(150, -100, 100) == 51

    def test_range_position(self):
        assert range_position(-100, -100, 100) == 0.0
        assert range_position(0, -100, 100) == 50.0
        assert range_position(100, -100, 100) is None


class TestFeeTierMapping:

    def test_roundtrip(self):
        for fee_tier, spacing in ((100, 1), (500, 10), (3000, 60), (10000, 200)):
            assert fee_tier_to_tick_spacing(fee_tier) == spacing
            assert tick_spacing_to_fee_tier(spacing) == fee_tier

    def test_unknown_fee_tier(self):
        with pytest.raises(UnknownValueError):
            fee_tier_to_tick_spacing(2500)

    def test_unknown_tick_spacing(self):
        with pytest.raises(UnknownValueError):
            tick_spacing_to_fee_tier(50)


class TestOptimalBandWidth:
    """calculate_optimal_band_width 휴리스틱"""

    def test_reference_values(self):
        """변동성 0, 기준 티어 -> base_width"""
        assert calculate_optimal_band_width(0.0, 3000) == 200

    def test_volatility_widens(self):
        assert calculate_optimal_band_width(0.05, 3000) == 300
        assert calculate_optimal_band_width(0.10, 3000) > calculate_optimal_band_width(0.02, 3000)

    def test_higher_fee_tier_narrows(self):
        assert calculate_optimal_band_width(0.02, 10000) < calculate_optimal_band_width(0.02, 500)

    def test_custom_coefficients(self):
        coefficients = BandWidthCoefficients(base_width=100, volatility_scale=0, reference_fee_tier=500)
        assert calculate_optimal_band_width(0.5, 500, coefficients=coefficients) == 100

    def test_invalid(self):
        with pytest.raises(InvalidArgumentError):
            calculate_optimal_band_width(-0.1, 3000)
        with pytest.raises(InvalidArgumentError):
            calculate_optimal_band_width(0.02, 0)


class TestRecommendPositionWidth:

    def test_risk_tolerance_ordering(self):
        low = recommend_position_width(0.02, 0.003, 0.5, "low")
        high = recommend_position_width(0.02, 0.003, 0.5, "high")
        assert low.recommended_basis_points > high.recommended_basis_points

    def test_unknown_risk(self):
        with pytest.raises(UnknownValueError):
            recommend_position_width(0.02, 0.003, 0.5, "extreme")

    def test_invalid_inputs(self):
        with pytest.raises(InvalidArgumentError):
            recommend_position_width(0, 0.003, 0.5)


class TestEstimateVolatility:

    def test_constant_prices(self):
        assert estimate_volatility([100.0, 100.0, 100.0]) == 0.0

    def test_too_short(self):
        assert estimate_volatility([100.0]) == 0.0

    def test_alternating(self):
        """로그 수익률 ±ln(1.1) -> 표준편차 ln(1.1)"""
        prices = [100.0, 110.0, 100.0, 110.0, 100.0]
        assert estimate_volatility(prices) == pytest.approx(0.0953101798, rel=1e-6)

    def test_invalid_price(self):
        with pytest.raises(InvalidArgumentError):
            estimate_volatility([100.0, 0.0])
