"""
Tests for onboarding step merge and profile readiness checks
"""
import pytest
from pydantic import ValidationError

from schemas import (
    FitnessGoalsStep,
    HealthCondition,
    HealthInfoStep,
    PersonalInfoStep,
    ProfileCreate,
    normalize_health_conditions,
)
from services.onboarding import (
    ONBOARDING_STEPS,
    merge_onboarding_steps,
    validate_profile_for_workout,
)


class TestConditionNormalization:

    def test_empty_becomes_none(self):
        assert normalize_health_conditions([]) == [HealthCondition.NONE]

    def test_none_dropped_next_to_real_condition(self):
        assert normalize_health_conditions(["none", "asthma"]) == [HealthCondition.ASTHMA]

    def test_duplicates_removed_in_order(self):
        result = normalize_health_conditions(["back_pain", "asthma", "back_pain"])
        assert result == [HealthCondition.BACK_PAIN, HealthCondition.ASTHMA]

    def test_unknown_condition_rejected(self):
        with pytest.raises(ValidationError):
            HealthInfoStep(health_conditions=["broken_leg"], dietary_preference="vegan")


class TestMergeSteps:

    def test_merge_produces_complete_profile(self):
        profile = merge_onboarding_steps(
            PersonalInfoStep(age=28, height_cm=165, weight_kg=60),
            HealthInfoStep(health_conditions=[], dietary_preference="vegetarian"),
            FitnessGoalsStep(fitness_goal="flexibility"),
        )
        assert isinstance(profile, ProfileCreate)
        assert profile.age == 28
        assert profile.health_conditions == [HealthCondition.NONE]
        assert profile.dietary_preference.value == "vegetarian"
        assert profile.target_weight_kg is None

    def test_step_bounds_enforced(self):
        with pytest.raises(ValidationError):
            PersonalInfoStep(age=10, height_cm=165, weight_kg=60)

    def test_steps_are_ordered(self):
        assert [s["key"] for s in ONBOARDING_STEPS] == ["personal", "health", "goals", "summary"]


class TestProfileReadiness:

    def test_complete_profile(self):
        result = validate_profile_for_workout({
            "age": 30,
            "height_cm": 175,
            "weight_kg": 70,
            "fitness_goal": "weight_loss",
            "health_conditions": ["none"],
        })
        assert result.is_valid
        assert result.missing_fields == []

    def test_no_profile(self):
        result = validate_profile_for_workout(None)
        assert not result.is_valid
        assert result.missing_fields == ["profile"]
        assert result.errors == ["Profile not found. Please complete your onboarding."]

    def test_missing_fields_all_reported(self):
        result = validate_profile_for_workout({"age": 30, "health_conditions": ["none"]})
        assert result.missing_fields == ["height_cm", "weight_kg", "fitness_goal"]
        assert "Height is required" in result.errors
        assert "Fitness goal is required" in result.errors

    def test_out_of_range_values(self):
        result = validate_profile_for_workout({
            "age": 10,
            "height_cm": 175,
            "weight_kg": 700,
            "fitness_goal": "weight_loss",
            "health_conditions": [],
        })
        assert not result.is_valid
        assert result.missing_fields == []
        assert result.errors == ["Age must be between 13 and 120", "Weight must be between 20 and 500"]
