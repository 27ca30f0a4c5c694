"""
Public Tools API Endpoints

No authentication required: a BMI calculator and the exercise catalogue,
used on the landing pages before sign-up.
"""
from fastapi import APIRouter, Query
from pydantic import BaseModel
from typing import Optional

from schemas import AgeGroup, BMICategory, Difficulty, ExerciseType, HealthCondition
from services.bmi_calculator import calculate_bmi, get_bmi_category, get_healthy_weight_range
from services.workout_templates import (
    EXERCISE_DATABASE,
    filter_by_age_group,
    filter_by_conditions,
    filter_by_difficulty,
    filter_by_type,
)

router = APIRouter(prefix="/v1/public", tags=["Public Tools"])


class BMIResult(BaseModel):
    bmi: float
    category: BMICategory
    healthy_weight_min: float
    healthy_weight_max: float


@router.get("/bmi", response_model=BMIResult)
def calculate_bmi_public(
    weight_kg: float = Query(gt=0, le=500),
    height_cm: float = Query(gt=0, le=300),
):
    bmi = calculate_bmi(weight_kg, height_cm)
    healthy = get_healthy_weight_range(height_cm)
    return BMIResult(
        bmi=bmi,
        category=get_bmi_category(bmi),
        healthy_weight_min=healthy["min"],
        healthy_weight_max=healthy["max"],
    )


@router.get("/exercises")
def list_exercises(
    exercise_type: Optional[ExerciseType] = Query(default=None, alias="type"),
    max_difficulty: Optional[Difficulty] = None,
    age_group: Optional[AgeGroup] = None,
    condition: Optional[list[HealthCondition]] = Query(default=None),
):
    """
    Exercise catalogue with optional filters.

    `condition` may repeat; exercises contraindicated for any of them are left out.
    """
    exercises = list(EXERCISE_DATABASE)
    if exercise_type:
        exercises = filter_by_type(exercises, exercise_type)
    if max_difficulty:
        exercises = filter_by_difficulty(exercises, max_difficulty)
    if age_group:
        exercises = filter_by_age_group(exercises, age_group)
    if condition:
        exercises = filter_by_conditions(exercises, condition)

    return {
        "count": len(exercises),
        "exercises": [e.to_dict() for e in exercises],
    }
