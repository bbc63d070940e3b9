"""
Tests for the Forecasting Engine
Forecast methods, safety stock and replenishment sizing
"""

import math

import pytest

from pharmaflow.forecaster import ForecastingEngine
from pharmaflow.models import (
    Computed,
    ForecastMethod,
    ForecastParameters,
    ForecastResult,
    InsufficientData,
)


@pytest.fixture
def engine(config):
    return ForecastingEngine(config=config)


class TestMovingAverage:

    def test_flat_mean_of_trailing_window(self, engine):
        forecast = engine.moving_average_forecast([10, 20, 30, 40], window=3, horizon=5)

        assert forecast == [30.0] * 5

    @pytest.mark.parametrize("horizon", [1, 4, 12])
    def test_output_length_matches_horizon(self, engine, horizon):
        forecast = engine.moving_average_forecast([5, 7, 9, 11, 13], window=2, horizon=horizon)

        assert len(forecast) == horizon
        assert len(set(forecast)) == 1

    def test_short_history_gives_zeros(self, engine):
        assert engine.moving_average_forecast([10, 20], window=3, horizon=4) == [0.0] * 4

    def test_negative_values_are_filtered(self, engine):
        forecast = engine.moving_average_forecast([-5, 10, 20, -1, 30], window=3, horizon=2)

        assert forecast == [20.0, 20.0]

    def test_window_counts_points_before_filtering(self, engine):
        forecast = engine.moving_average_forecast([-1, -1, 10], window=3, horizon=3)

        assert forecast == [10.0] * 3


class TestExponentialSmoothing:

    def test_seeded_at_first_observation(self, engine):
        forecast = engine.exponential_smoothing_forecast([100, 110, 95], alpha=0.3, horizon=3)

        assert forecast == pytest.approx([100.6] * 3)

    def test_empty_history_gives_zeros(self, engine):
        assert engine.exponential_smoothing_forecast([], horizon=2) == [0.0, 0.0]

    def test_alpha_one_tracks_last_value(self, engine):
        forecast = engine.exponential_smoothing_forecast([10, 50, 70], alpha=1.0, horizon=1)

        assert forecast == [70.0]


class TestHoltWinters:

    def test_short_history_falls_back_to_exponential_smoothing(self, engine):
        data = [80, 95, 110, 90, 100, 120, 85, 105, 99, 101]

        holt_winters = engine.holt_winters_forecast(data, 0.3, 0.1, 0.1, season_length=12, horizon=6)
        smoothing = engine.exponential_smoothing_forecast(data, alpha=0.3, horizon=6)

        assert holt_winters == pytest.approx(smoothing)

    def test_alternating_series_keeps_seasonal_shape(self, engine):
        data = [50, 150] * 12

        forecast = engine.holt_winters_forecast(data, 0.3, 0.1, 0.1, season_length=12, horizon=12)

        assert len(forecast) == 12
        assert forecast[0::2] == pytest.approx([50.0] * 6)
        assert forecast[1::2] == pytest.approx([150.0] * 6)

    def test_seasonal_index_starts_at_cycle_position_zero(self, engine):
        data = [50, 150] * 12 + [50, 150, 50]

        forecast = engine.holt_winters_forecast(data, 0.3, 0.1, 0.1, season_length=12, horizon=4)

        assert forecast[0] < 80 < 120 < forecast[1]
        assert forecast[2] < 80 < 120 < forecast[3]

    def test_forecasts_are_floored_at_zero(self, engine):
        data = [240 - 10 * i for i in range(24)]

        forecast = engine.holt_winters_forecast(data, 0.9, 0.9, 0.1, season_length=12, horizon=36)

        assert min(forecast) >= 0.0


class TestSafetyStock:

    def test_safety_stock_formula(self, engine):
        data = [100, 110, 95]

        safety = engine.calculate_safety_stock(data, lead_time_days=30, service_level=0.95)

        assert safety == pytest.approx(1.645 * math.sqrt(350 / 6))

    def test_lead_time_scales_with_square_root(self, engine):
        data = [100, 110, 95]

        month = engine.calculate_safety_stock(data, lead_time_days=30)
        two_months = engine.calculate_safety_stock(data, lead_time_days=60)

        assert two_months == pytest.approx(month * math.sqrt(2))

    def test_monotonic_in_service_level(self, engine):
        data = [40, 65, 52, 71, 48]

        levels = [0.5, 0.9, 0.95, 0.97, 0.99, 0.999]
        values = [engine.calculate_safety_stock(data, 30, level) for level in levels]

        assert values == sorted(values)

    def test_z_score_tiers(self, engine):
        assert engine.z_score(0.99) == 2.326
        assert engine.z_score(0.95) == 1.645
        assert engine.z_score(0.9) == 1.282

    def test_single_observation_is_insufficient(self, engine):
        assessment = engine.assess_safety_stock([120])

        assert isinstance(assessment, InsufficientData)
        assert assessment.points == 1
        assert engine.calculate_safety_stock([120]) == 0.0

    def test_constant_history_needs_no_buffer(self, engine):
        assert engine.assess_safety_stock([50, 50, 50]) == Computed(0.0)


class TestGenerateForecast:

    def test_replenishment_sizing(self, engine, stable_product):
        result = engine.generate_forecast(stable_product)

        safety = 1.645 * math.sqrt(350 / 6)
        assert result.parameters.method == ForecastMethod.EXPONENTIAL_SMOOTHING
        assert len(result.predicted_consumption) == 12
        assert result.safety_stock == pytest.approx(safety)
        assert result.reorder_point == pytest.approx(100.6 + safety)
        assert result.max_stock == pytest.approx(100.6 + safety + 2 * 100.6)
        assert result.confidence == 0.8

    def test_confidence_without_adjusted_history(self, engine, make_product):
        product = make_product([60, 70, 80], stock_out_days=[3, 2, 1])

        result = engine.generate_forecast(product)

        assert result.confidence == 0.3

    def test_overrides_select_method(self, engine, stable_product):
        result = engine.generate_forecast(stable_product, method='moving_average', window=3, horizon=4)

        assert result.parameters.method == ForecastMethod.MOVING_AVERAGE
        assert result.predicted_consumption == pytest.approx([101.6667] * 4, rel=1e-4)

    def test_explicit_parameters(self, engine, stable_product):
        params = ForecastParameters(method=ForecastMethod.HOLT_WINTERS, horizon=3)

        result = engine.generate_forecast(stable_product, params)

        assert result.parameters is params
        assert result.predicted_consumption == pytest.approx([100.6] * 3)

    def test_empty_product_degrades_to_zero(self, engine, make_product):
        result = engine.generate_forecast(make_product([], current_stock=0))

        assert result.predicted_consumption == [0.0] * 12
        assert result.safety_stock == 0.0
        assert result.reorder_point == 0.0
        assert result.forecast_accuracy == 0.0

    def test_accuracy_within_unit_interval(self, engine, make_product):
        result = engine.generate_forecast(make_product([10, 400, 5, 380, 0, 0]))

        assert 0.0 <= result.forecast_accuracy <= 1.0

    def test_forecast_portfolio(self, engine, make_product):
        products = [make_product([10, 20, 30], product_id=f"P{i}") for i in range(3)]

        results = engine.forecast_portfolio(products)

        assert [r.product_id for r in results] == ["P0", "P1", "P2"]


class TestForecastParameters:

    @pytest.mark.parametrize("field_name,value", [
        ("alpha", 1.5),
        ("beta", -0.1),
        ("window", 0),
        ("horizon", 0),
        ("service_level", 1.0),
        ("lead_time_days", -1),
    ])
    def test_rejects_invalid_values(self, field_name, value):
        with pytest.raises(ValueError, match=field_name):
            ForecastParameters(**{field_name: value})

    def test_method_accepts_string(self):
        assert ForecastParameters(method='holt_winters').method == ForecastMethod.HOLT_WINTERS

    def test_unknown_method_rejected(self):
        with pytest.raises(ValueError):
            ForecastParameters(method='arima')


class TestForecastResultSerialization:

    def test_json_round_trip_preserves_numbers(self, engine, stable_product):
        result = engine.generate_forecast(stable_product, method='holt_winters', alpha=0.25)

        restored = ForecastResult.from_json(result.to_json())

        assert restored == result
        assert restored.safety_stock == result.safety_stock
        assert restored.predicted_consumption == result.predicted_consumption
        assert restored.parameters.alpha == 0.25
