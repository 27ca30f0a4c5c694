"""
Tests for the rule-based workout plan generator

Covers the fitness-level policy, contraindication safety (including the
small-pool fallback), plan structure, determinism and goal differentiation.
"""
import pytest
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from schemas import (
    AgeGroup,
    DayOfWeek,
    Difficulty,
    ExerciseType,
    FitnessGoal,
    HealthCondition,
    PlanStatus,
)
from services.workout_generator import (
    GOAL_EXERCISE_MIX,
    InsufficientExercisesError,
    PlanPolicy,
    ProfileIncompleteError,
    apportion_exercise_mix,
    build_exercise_pool,
    determine_fitness_level,
    generate_workout_plan,
    regenerate_workout_plan,
)
from services.workout_templates import EXERCISE_DATABASE, get_exercise_by_id
from services.workout_utils import validate_workout_plan

NOW = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)


def make_profile(**overrides):
    profile = {
        "user_id": uuid4(),
        "age": 30,
        "height_cm": 175,
        "weight_kg": 70,
        "health_conditions": ["none"],
        "dietary_preference": "omnivore",
        "fitness_goal": "weight_loss",
    }
    profile.update(overrides)
    return profile


def exercise_ids(plan):
    return [s.exercise_id for day in plan.daily_workouts for s in day.exercises]


def table(*ids):
    return tuple(get_exercise_by_id(i) for i in ids)


class TestFitnessLevelPolicy:

    def test_seniors_start_as_beginners(self):
        assert determine_fitness_level(make_profile(age=70, fitness_goal="muscle_gain")) == Difficulty.BEGINNER

    def test_multiple_conditions_beginner(self):
        profile = make_profile(health_conditions=["knee_issues", "asthma"])
        assert determine_fitness_level(profile) == Difficulty.BEGINNER

    def test_single_condition_beginner(self):
        assert determine_fitness_level(make_profile(health_conditions=["asthma"])) == Difficulty.BEGINNER

    def test_bmi_outside_normal_beginner(self):
        """100kg at 170cm is BMI 34.6 (obese)"""
        assert determine_fitness_level(make_profile(weight_kg=100, height_cm=170)) == Difficulty.BEGINNER

    def test_youth_never_advanced(self):
        profile = make_profile(age=16, fitness_goal="muscle_gain")
        assert determine_fitness_level(profile) == Difficulty.INTERMEDIATE

    def test_young_adult_strength_goal_advanced(self):
        assert determine_fitness_level(make_profile(fitness_goal="muscle_gain")) == Difficulty.ADVANCED
        assert determine_fitness_level(make_profile(fitness_goal="endurance")) == Difficulty.ADVANCED

    def test_older_adult_intermediate(self):
        assert determine_fitness_level(make_profile(age=45, fitness_goal="muscle_gain")) == Difficulty.INTERMEDIATE

    def test_other_goals_intermediate(self):
        assert determine_fitness_level(make_profile()) == Difficulty.INTERMEDIATE

    def test_none_only_is_not_a_condition(self):
        assert determine_fitness_level(make_profile(health_conditions=[])) == Difficulty.INTERMEDIATE


class TestApportionment:

    def test_counts_sum_to_total(self):
        for goal, mix in GOAL_EXERCISE_MIX.items():
            for total in range(4, 9):
                assert sum(apportion_exercise_mix(total, mix).values()) == total

    def test_largest_remainder_with_rotating_tie_break(self):
        """6 picks at 60/30/10: 3.6, 1.8, 0.6. Strength takes the first spare slot."""
        mix = GOAL_EXERCISE_MIX[FitnessGoal.WEIGHT_LOSS]
        assert apportion_exercise_mix(6, mix, rotation=0) == {
            ExerciseType.CARDIO: 4, ExerciseType.STRENGTH: 2, ExerciseType.FLEXIBILITY: 0,
        }
        assert apportion_exercise_mix(6, mix, rotation=1) == {
            ExerciseType.CARDIO: 3, ExerciseType.STRENGTH: 2, ExerciseType.FLEXIBILITY: 1,
        }


class TestExercisePool:

    def test_relaxes_difficulty_only(self):
        exercises = table("walking", "squats", "pushups", "tricep_dips", "planks", "jogging")
        pool, cap = build_exercise_pool(
            exercises, AgeGroup.ADULT, [HealthCondition.KNEE_ISSUES], Difficulty.BEGINNER, min_size=4,
        )
        assert cap == Difficulty.INTERMEDIATE
        assert {e.id for e in pool} == {"walking", "pushups", "tricep_dips", "planks"}

    def test_stops_at_top_tier(self):
        pool, cap = build_exercise_pool(
            table("walking", "marching"), AgeGroup.ADULT, [], Difficulty.BEGINNER, min_size=4,
        )
        assert cap == Difficulty.ADVANCED
        assert len(pool) == 2


class TestPlanStructure:

    @pytest.fixture
    def plan(self):
        return generate_workout_plan(make_profile(), seed="structure", now=NOW)

    def test_default_schedule(self, plan):
        """4 weeks x monday/wednesday/friday"""
        assert len(plan.daily_workouts) == 12
        assert [d.day_number for d in plan.daily_workouts] == list(range(1, 13))
        assert [d.day_of_week for d in plan.daily_workouts[:3]] == [
            DayOfWeek.MONDAY, DayOfWeek.WEDNESDAY, DayOfWeek.FRIDAY,
        ]

    def test_dates_and_status(self, plan):
        assert plan.start_date == NOW
        assert plan.end_date == NOW + timedelta(days=28)
        assert plan.end_date > plan.start_date
        assert plan.status == PlanStatus.ACTIVE
        assert plan.total_weeks == 4

    def test_every_day_in_bounds(self, plan):
        for day in plan.daily_workouts:
            assert 4 <= len(day.exercises) <= 8
            ids = [s.exercise_id for s in day.exercises]
            assert len(ids) == len(set(ids))

    def test_intermediate_prescription(self, plan):
        assert plan.fitness_level == Difficulty.INTERMEDIATE
        for day in plan.daily_workouts:
            assert len(day.exercises) == 6
            assert day.estimated_duration_minutes == 35
            assert day.target_calories > 0

    def test_name_and_notes(self, plan):
        assert plan.name == "Intermediate Weight Loss Plan"
        assert plan.notes == "Personalized intermediate level workout plan for weight loss goal"
        assert plan.is_custom is False

    def test_passes_plan_validation(self, plan):
        assert validate_workout_plan(plan).valid

    def test_custom_policy(self):
        policy = PlanPolicy(total_weeks=2, workout_days=(DayOfWeek.TUESDAY, DayOfWeek.SATURDAY))
        plan = generate_workout_plan(make_profile(), policy=policy, now=NOW)
        assert len(plan.daily_workouts) == 4
        assert plan.end_date == NOW + timedelta(days=14)
        assert {d.day_of_week for d in plan.daily_workouts} == {DayOfWeek.TUESDAY, DayOfWeek.SATURDAY}

    def test_level_policy_is_swappable(self):
        plan = generate_workout_plan(make_profile(), level_policy=lambda p: Difficulty.ADVANCED, now=NOW)
        assert plan.fitness_level == Difficulty.ADVANCED
        assert all(len(d.exercises) == 7 for d in plan.daily_workouts)
        strength = [s for d in plan.daily_workouts for s in d.exercises if s.reps]
        assert all(s.sets == 4 for s in strength)


class TestDeterminism:

    def test_same_seed_same_plan(self):
        profile = make_profile()
        a = generate_workout_plan(profile, seed="abc", now=NOW)
        b = generate_workout_plan(profile, seed="abc", now=NOW)
        assert a.model_dump() == b.model_dump()

    def test_seed_defaults_to_user_id(self):
        profile = make_profile()
        a = generate_workout_plan(profile, now=NOW)
        b = generate_workout_plan(profile, seed=str(profile["user_id"]), now=NOW)
        assert exercise_ids(a) == exercise_ids(b)

    def test_different_seed_different_selection(self):
        profile = make_profile()
        a = generate_workout_plan(profile, seed="one", now=NOW)
        b = generate_workout_plan(profile, seed="two", now=NOW)
        assert exercise_ids(a) != exercise_ids(b)

    def test_regenerate_uses_attempt_seed(self):
        profile = make_profile()
        regenerated = regenerate_workout_plan(profile, 2, now=NOW)
        expected = generate_workout_plan(profile, seed=f"{profile['user_id']}:2", now=NOW)
        assert exercise_ids(regenerated) == exercise_ids(expected)


class TestHealthConditionSafety:

    def test_no_contraindicated_exercises(self):
        profile = make_profile(health_conditions=["knee_issues", "back_pain"])
        for seed in range(5):
            plan = generate_workout_plan(profile, seed=seed, now=NOW)
            for exercise_id in exercise_ids(plan):
                contraindications = get_exercise_by_id(exercise_id).contraindications
                assert HealthCondition.KNEE_ISSUES not in contraindications
                assert HealthCondition.BACK_PAIN not in contraindications

    def test_description_mentions_conditions(self):
        plan = generate_workout_plan(make_profile(health_conditions=["knee_issues", "back_pain"]), now=NOW)
        assert "knee" in plan.description
        assert "back" in plan.description
        assert plan.name.startswith("Beginner")

    def test_fallback_never_relaxes_conditions(self):
        """Raising the difficulty cap still keeps knee-unsafe exercises out"""
        exercises = table("walking", "squats", "step_ups", "pushups", "tricep_dips", "planks", "jogging", "lunges")
        plan = generate_workout_plan(
            make_profile(health_conditions=["knee_issues"]), exercises=exercises, now=NOW,
        )
        used = set(exercise_ids(plan))
        assert used <= {"walking", "pushups", "tricep_dips", "planks"}
        assert "intermediate" in plan.notes

    def test_small_pool_uses_every_eligible_exercise(self):
        exercises = table("walking", "marching", "jogging", "squats")
        plan = generate_workout_plan(
            make_profile(health_conditions=["knee_issues"]), exercises=exercises, now=NOW,
        )
        for day in plan.daily_workouts:
            assert {s.exercise_id for s in day.exercises} == {"walking", "marching"}
        assert "limited" in plan.notes

    def test_no_safe_exercise_raises(self):
        with pytest.raises(InsufficientExercisesError):
            generate_workout_plan(
                make_profile(health_conditions=["knee_issues"]),
                exercises=table("squats", "lunges", "jogging"),
                now=NOW,
            )


class TestGoalDifferentiation:

    def _cardio_fraction(self, plan):
        sets = [s for d in plan.daily_workouts for s in d.exercises]
        cardio = [s for s in sets if get_exercise_by_id(s.exercise_id).type == ExerciseType.CARDIO]
        return len(cardio) / len(sets)

    def test_names_differ_by_goal(self):
        intermediate = lambda p: Difficulty.INTERMEDIATE
        weight_loss = generate_workout_plan(make_profile(fitness_goal="weight_loss"), level_policy=intermediate, now=NOW)
        muscle_gain = generate_workout_plan(make_profile(fitness_goal="muscle_gain"), level_policy=intermediate, now=NOW)
        assert weight_loss.name == "Intermediate Weight Loss Plan"
        assert muscle_gain.name == "Intermediate Muscle Gain Plan"

    def test_weight_loss_is_more_cardio_heavy(self):
        intermediate = lambda p: Difficulty.INTERMEDIATE
        weight_loss = generate_workout_plan(make_profile(fitness_goal="weight_loss"), level_policy=intermediate, now=NOW)
        muscle_gain = generate_workout_plan(make_profile(fitness_goal="muscle_gain"), level_policy=intermediate, now=NOW)
        assert self._cardio_fraction(weight_loss) > self._cardio_fraction(muscle_gain)

    def test_strength_reps_follow_goal(self):
        intermediate = lambda p: Difficulty.INTERMEDIATE
        endurance = generate_workout_plan(make_profile(fitness_goal="endurance"), level_policy=intermediate, now=NOW)
        muscle_gain = generate_workout_plan(make_profile(fitness_goal="muscle_gain"), level_policy=intermediate, now=NOW)
        assert {s.reps for d in endurance.daily_workouts for s in d.exercises if s.reps} == {17}
        assert {s.reps for d in muscle_gain.daily_workouts for s in d.exercises if s.reps} == {10}


class TestSeniorPlans:

    @pytest.fixture
    def plan(self):
        return generate_workout_plan(make_profile(age=70, fitness_goal="general_health"), now=NOW)

    def test_every_day_has_balance_work(self, plan):
        for day in plan.daily_workouts:
            types = {get_exercise_by_id(s.exercise_id).type for s in day.exercises}
            assert ExerciseType.BALANCE in types

    def test_short_gentle_sessions(self, plan):
        assert all(d.estimated_duration_minutes == 20 for d in plan.daily_workouts)
        assert "gentle, low-impact" in plan.description

    def test_only_senior_exercises(self, plan):
        for exercise_id in exercise_ids(plan):
            assert AgeGroup.SENIOR in get_exercise_by_id(exercise_id).age_groups

    def test_senior_modifications_in_notes(self, plan):
        for day in plan.daily_workouts:
            for s in day.exercises:
                modification = get_exercise_by_id(s.exercise_id).modifications.senior
                if modification:
                    assert s.notes == modification


class TestProfilePreconditions:

    def test_missing_field_raises(self):
        profile = make_profile()
        del profile["age"]
        with pytest.raises(ProfileIncompleteError) as exc_info:
            generate_workout_plan(profile, now=NOW)
        assert exc_info.value.missing_fields == ["age"]

    def test_missing_profile_raises(self):
        with pytest.raises(ProfileIncompleteError) as exc_info:
            generate_workout_plan(None, now=NOW)
        assert exc_info.value.missing_fields == ["profile"]

    def test_range_checks_left_to_caller(self):
        plan = generate_workout_plan(make_profile(weight_kg=600), now=NOW)
        assert plan.fitness_level == Difficulty.BEGINNER
        assert validate_workout_plan(plan).valid

    def test_accepts_full_table_by_default(self):
        plan = generate_workout_plan(make_profile(), exercises=EXERCISE_DATABASE, now=NOW)
        assert plan.daily_workouts


class TestPlanPolicy:

    @pytest.mark.parametrize("kwargs", [
        {"total_weeks": 0},
        {"workout_days": ()},
        {"min_exercises_per_day": 6, "max_exercises_per_day": 5},
    ])
    def test_rejects_unusable_schedule(self, kwargs):
        with pytest.raises(ValueError):
            PlanPolicy(**kwargs)

    def test_single_day_single_week(self):
        policy = PlanPolicy(total_weeks=1, workout_days=(DayOfWeek.SUNDAY,))
        plan = generate_workout_plan(make_profile(), policy=policy, now=NOW)
        assert len(plan.daily_workouts) == 1
        assert plan.end_date > plan.start_date
