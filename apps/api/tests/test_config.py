"""
Tests for settings validation
"""
import pytest
from pydantic import ValidationError

from core.config import Settings

SECRET = "test-secret-key-that-is-at-least-32-characters-long"


class TestPlanWorkoutDays:

    def test_normalized(self):
        settings = Settings(SECRET_KEY=SECRET, PLAN_WORKOUT_DAYS=" Tuesday, THURSDAY ,")
        assert settings.PLAN_WORKOUT_DAYS == "tuesday,thursday"
        assert settings.plan_workout_days == ["tuesday", "thursday"]

    @pytest.mark.parametrize("value", ["", " , ", "mon,wednesday"])
    def test_bad_value_fails_at_startup(self, value):
        with pytest.raises(ValidationError):
            Settings(SECRET_KEY=SECRET, PLAN_WORKOUT_DAYS=value)
