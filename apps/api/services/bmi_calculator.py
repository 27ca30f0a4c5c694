"""
BMI Calculation Service

BMI = weight_kg / (height_m)²

Used by the fitness-level policy, the profile responses and the progress
endpoints. Categories follow the WHO adult cut-offs.
"""
from typing import Dict

from schemas import BMICategory

HEALTHY_BMI_MIN = 18.5
HEALTHY_BMI_MAX = 24.9


def calculate_bmi(weight_kg: float, height_cm: float) -> float:
    """
    Calculate BMI from weight (kg) and height (cm).

    Formula: BMI = weight_kg / (height_m)²
    where height_m = height_cm / 100

    Args:
        weight_kg: Weight in kilograms
        height_cm: Height in centimeters

    Returns:
        BMI value rounded to 1 decimal place

    Raises:
        ValueError: if either input is missing or not positive

    Examples:
        >>> calculate_bmi(70, 175)
        22.9
    """
    if weight_kg is None or height_cm is None:
        raise ValueError("Weight and height are required to calculate BMI")
    if weight_kg <= 0 or height_cm <= 0:
        raise ValueError("Weight and height must be positive")

    height_m = float(height_cm) / 100.0
    bmi = float(weight_kg) / (height_m ** 2)

    return round(bmi, 1)


def get_bmi_category(bmi: float) -> BMICategory:
    """<18.5 underweight, <25 normal, <30 overweight, otherwise obese."""
    if bmi < 18.5:
        return BMICategory.UNDERWEIGHT
    if bmi < 25:
        return BMICategory.NORMAL
    if bmi < 30:
        return BMICategory.OVERWEIGHT
    return BMICategory.OBESE


def get_healthy_weight_range(height_cm: float) -> Dict[str, float]:
    """Weights (kg) at BMI 18.5 and 24.9 for the given height."""
    if height_cm is None or height_cm <= 0:
        raise ValueError("Height must be positive")
    height_m = float(height_cm) / 100.0
    return {
        "min": round(HEALTHY_BMI_MIN * height_m ** 2, 1),
        "max": round(HEALTHY_BMI_MAX * height_m ** 2, 1),
    }


def calculate_bmi_trend(current_bmi: float, previous_bmi: float) -> float:
    """Percentage change from previous to current. 0 when there is no baseline."""
    if not previous_bmi:
        return 0.0
    return (current_bmi - previous_bmi) / previous_bmi * 100
