"""
Tests for BMI Calculation Service

BMI calculation, rounding, WHO categories, healthy weight range and trend.
"""
import pytest
from services.bmi_calculator import (
    calculate_bmi,
    calculate_bmi_trend,
    get_bmi_category,
    get_healthy_weight_range,
)
from schemas import BMICategory


class TestBMICalculation:
    """Test BMI calculation from weight and height"""

    def test_standard_bmi_calculation(self):
        """Standard BMI calculation - 70kg, 175cm"""
        # 70 / (1.75)² = 22.857... rounded to 22.9
        assert calculate_bmi(70, 175) == 22.9

    def test_bmi_rounding(self):
        """Verify BMI is rounded to 1 decimal place"""
        # 75 / (1.80)² = 23.148...
        assert calculate_bmi(75, 180) == 23.1

    def test_same_inputs_same_result(self):
        assert calculate_bmi(82.5, 181) == calculate_bmi(82.5, 181)

    def test_different_heights(self):
        """Taller person, same weight: lower BMI"""
        assert calculate_bmi(70, 190) < calculate_bmi(70, 160)

    def test_different_weights(self):
        """Heavier person, same height: higher BMI"""
        assert calculate_bmi(60, 175) < calculate_bmi(90, 175)

    def test_zero_height_raises(self):
        with pytest.raises(ValueError):
            calculate_bmi(70, 0)

    def test_negative_weight_raises(self):
        with pytest.raises(ValueError):
            calculate_bmi(-70, 175)

    def test_missing_value_raises(self):
        with pytest.raises(ValueError):
            calculate_bmi(None, 175)


class TestBMICategory:
    """WHO cut-offs: 18.5, 25, 30"""

    @pytest.mark.parametrize("bmi,expected", [
        (16.0, BMICategory.UNDERWEIGHT),
        (18.4, BMICategory.UNDERWEIGHT),
        (18.5, BMICategory.NORMAL),
        (24.9, BMICategory.NORMAL),
        (25.0, BMICategory.OVERWEIGHT),
        (29.9, BMICategory.OVERWEIGHT),
        (30.0, BMICategory.OBESE),
        (42.0, BMICategory.OBESE),
    ])
    def test_category_boundaries(self, bmi, expected):
        assert get_bmi_category(bmi) == expected


class TestHealthyWeightRange:

    def test_range_for_175cm(self):
        """18.5 * 1.75² = 56.65625, 24.9 * 1.75² = 76.25625"""
        healthy = get_healthy_weight_range(175)
        assert healthy == {"min": 56.7, "max": 76.3}

    def test_range_bounds_are_normal_bmi(self):
        healthy = get_healthy_weight_range(180)
        assert get_bmi_category(calculate_bmi(healthy["min"], 180)) == BMICategory.NORMAL
        assert get_bmi_category(calculate_bmi(healthy["max"], 180)) == BMICategory.NORMAL

    def test_invalid_height_raises(self):
        with pytest.raises(ValueError):
            get_healthy_weight_range(0)


class TestBMITrend:

    def test_decrease_is_negative(self):
        assert calculate_bmi_trend(24.0, 25.0) == pytest.approx(-4.0)

    def test_increase_is_positive(self):
        assert calculate_bmi_trend(22.0, 20.0) == pytest.approx(10.0)

    def test_no_baseline(self):
        """Previous BMI of 0 means no trend"""
        assert calculate_bmi_trend(22.0, 0) == 0
