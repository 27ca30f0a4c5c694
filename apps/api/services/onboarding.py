"""
Onboarding Service

Turns the three onboarding steps into a profile and decides whether a
stored profile carries enough data to generate a workout plan.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from schemas import (
    FitnessGoalsStep,
    HealthInfoStep,
    PersonalInfoStep,
    ProfileCreate,
)

# Ordered steps shown by clients; "summary" is a review screen with no fields
ONBOARDING_STEPS: List[Dict[str, Any]] = [
    {"key": "personal", "label": "Personal Info", "fields": ["age", "height_cm", "weight_kg"]},
    {"key": "health", "label": "Health Data", "fields": ["health_conditions", "dietary_preference"]},
    {"key": "goals", "label": "Fitness Goals", "fields": ["fitness_goal", "target_weight_kg"]},
    {"key": "summary", "label": "Summary", "fields": []},
]

REQUIRED_WORKOUT_FIELDS = ("age", "height_cm", "weight_kg", "fitness_goal", "health_conditions")

FIELD_LABELS = {
    "age": "Age",
    "height_cm": "Height",
    "weight_kg": "Weight",
    "fitness_goal": "Fitness goal",
    "health_conditions": "Health conditions",
}

# Inclusive bounds, same as the profile schema
FIELD_BOUNDS = {
    "age": (13, 120),
    "height_cm": (50, 300),
    "weight_kg": (20, 500),
}


@dataclass
class ProfileValidation:
    is_valid: bool
    missing_fields: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def merge_onboarding_steps(
    personal: PersonalInfoStep,
    health: HealthInfoStep,
    goals: FitnessGoalsStep,
) -> ProfileCreate:
    """
    Combine the three steps into a complete profile.

    Each step is already validated on its own, so the merge cannot fail.
    """
    return ProfileCreate(
        age=personal.age,
        height_cm=personal.height_cm,
        weight_kg=personal.weight_kg,
        health_conditions=health.health_conditions,
        dietary_preference=health.dietary_preference,
        fitness_goal=goals.fitness_goal,
        target_weight_kg=goals.target_weight_kg,
    )


def validate_profile_for_workout(profile: Any) -> ProfileValidation:
    """
    Check that a profile (ORM row, pydantic model or dict) can drive plan generation.

    Returns every missing field and out-of-range value, not just the first.
    """
    if profile is None:
        return ProfileValidation(
            is_valid=False,
            missing_fields=["profile"],
            errors=["Profile not found. Please complete your onboarding."],
        )

    def _value(name: str):
        if isinstance(profile, dict):
            return profile.get(name)
        return getattr(profile, name, None)

    missing: List[str] = []
    errors: List[str] = []

    for name in REQUIRED_WORKOUT_FIELDS:
        if _value(name) is None:
            missing.append(name)
            errors.append(f"{FIELD_LABELS[name]} is required")

    for name, (low, high) in FIELD_BOUNDS.items():
        value = _value(name)
        if value is not None and not (low <= value <= high):
            errors.append(f"{FIELD_LABELS[name]} must be between {low} and {high}")

    return ProfileValidation(is_valid=not errors, missing_fields=missing, errors=errors)
