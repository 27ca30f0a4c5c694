"""
Workout Plan Generator

Rule-based assembly of a multi-week plan from the exercise template table.

Pipeline:
1. Age group + fitness level from the profile
2. Eligible pool = age group ∩ not contraindicated ∩ difficulty cap
3. Per scheduled day: pick exercises by the goal's type mix
4. Wrap picks as WorkoutSets with level-based sets/reps/rest

Health-condition exclusions are never relaxed. When the pool is too small,
only the difficulty cap is raised, one tier at a time.

Selection is driven by a seeded random.Random, so the same profile and seed
always produce the same plan.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from uuid import UUID
import logging
import random

from schemas import (
    AgeGroup,
    BMICategory,
    DailyWorkout,
    DayOfWeek,
    Difficulty,
    ExerciseType,
    FitnessGoal,
    HealthCondition,
    PlanStatus,
    WorkoutPlanDraft,
    WorkoutSet,
    normalize_health_conditions,
)
from services.bmi_calculator import calculate_bmi, get_bmi_category
from services.onboarding import validate_profile_for_workout
from services.workout_templates import (
    DIFFICULTY_RANK,
    EXERCISE_DATABASE,
    ExerciseTemplate,
    filter_by_age_group,
    filter_by_conditions,
    filter_by_difficulty,
    filter_by_type,
    get_age_group,
)

logger = logging.getLogger(__name__)


class WorkoutGenerationError(Exception):
    """Base class for plan generation failures."""
    pass


class ProfileIncompleteError(WorkoutGenerationError):
    def __init__(self, missing_fields: List[str], errors: Optional[List[str]] = None):
        self.missing_fields = missing_fields
        self.errors = errors or []
        super().__init__(f"Profile is incomplete: {', '.join(missing_fields) or '; '.join(self.errors)}")


class InsufficientExercisesError(WorkoutGenerationError):
    """No exercise at all is safe for this profile."""
    pass


@dataclass(frozen=True)
class PlanPolicy:
    total_weeks: int = 4
    workout_days: Tuple[DayOfWeek, ...] = (DayOfWeek.MONDAY, DayOfWeek.WEDNESDAY, DayOfWeek.FRIDAY)
    min_exercises_per_day: int = 4
    max_exercises_per_day: int = 8

    def __post_init__(self):
        if self.total_weeks < 1:
            raise ValueError("total_weeks must be at least 1")
        if not self.workout_days:
            raise ValueError("workout_days must name at least one day")
        if self.min_exercises_per_day > self.max_exercises_per_day:
            raise ValueError("min_exercises_per_day cannot exceed max_exercises_per_day")


# Percent of typed picks per day: (cardio, strength, flexibility)
GOAL_EXERCISE_MIX: Dict[FitnessGoal, Dict[ExerciseType, int]] = {
    FitnessGoal.WEIGHT_LOSS: {ExerciseType.CARDIO: 60, ExerciseType.STRENGTH: 30, ExerciseType.FLEXIBILITY: 10},
    FitnessGoal.MUSCLE_GAIN: {ExerciseType.CARDIO: 20, ExerciseType.STRENGTH: 70, ExerciseType.FLEXIBILITY: 10},
    FitnessGoal.ENDURANCE: {ExerciseType.CARDIO: 70, ExerciseType.STRENGTH: 20, ExerciseType.FLEXIBILITY: 10},
    FitnessGoal.FLEXIBILITY: {ExerciseType.CARDIO: 30, ExerciseType.STRENGTH: 20, ExerciseType.FLEXIBILITY: 50},
    FitnessGoal.GENERAL_HEALTH: {ExerciseType.CARDIO: 40, ExerciseType.STRENGTH: 40, ExerciseType.FLEXIBILITY: 20},
    FitnessGoal.MAINTENANCE: {ExerciseType.CARDIO: 40, ExerciseType.STRENGTH: 40, ExerciseType.FLEXIBILITY: 20},
}

EXERCISES_PER_LEVEL = {Difficulty.BEGINNER: 5, Difficulty.INTERMEDIATE: 6, Difficulty.ADVANCED: 7}
SETS_PER_LEVEL = {Difficulty.BEGINNER: 2, Difficulty.INTERMEDIATE: 3, Difficulty.ADVANCED: 4}
REPS_PER_LEVEL = {Difficulty.BEGINNER: 10, Difficulty.INTERMEDIATE: 12, Difficulty.ADVANCED: 15}
REST_SECONDS_PER_LEVEL = {Difficulty.BEGINNER: 90, Difficulty.INTERMEDIATE: 60, Difficulty.ADVANCED: 60}
SESSION_MINUTES_PER_LEVEL = {Difficulty.BEGINNER: 25, Difficulty.INTERMEDIATE: 35, Difficulty.ADVANCED: 45}
SENIOR_SESSION_MINUTES = 20

# Strength reps shift with the goal: higher for endurance work, lower for hypertrophy
GOAL_REP_ADJUSTMENT = {FitnessGoal.ENDURANCE: 5, FitnessGoal.WEIGHT_LOSS: 3, FitnessGoal.MUSCLE_GAIN: -2}

# Minutes per set for timed exercise types
TYPE_DURATION_MINUTES = {ExerciseType.CARDIO: 5, ExerciseType.FLEXIBILITY: 3, ExerciseType.BALANCE: 2}
GOAL_CARDIO_BONUS_MINUTES = {FitnessGoal.ENDURANCE: 3, FitnessGoal.WEIGHT_LOSS: 2}

ADVANCED_GOALS = (FitnessGoal.MUSCLE_GAIN, FitnessGoal.ENDURANCE)

# Order exercises appear within a day
DAY_TYPE_ORDER = (ExerciseType.CARDIO, ExerciseType.STRENGTH, ExerciseType.BALANCE, ExerciseType.FLEXIBILITY)

GOAL_LABELS = {
    FitnessGoal.WEIGHT_LOSS: "Weight Loss",
    FitnessGoal.MUSCLE_GAIN: "Muscle Gain",
    FitnessGoal.MAINTENANCE: "Maintenance",
    FitnessGoal.ENDURANCE: "Endurance",
    FitnessGoal.FLEXIBILITY: "Flexibility",
    FitnessGoal.GENERAL_HEALTH: "General Health",
}

GOAL_FOCUS = {
    FitnessGoal.WEIGHT_LOSS: "cardio-heavy fat-burning",
    FitnessGoal.MUSCLE_GAIN: "strength-focused muscle-building",
    FitnessGoal.MAINTENANCE: "balanced maintenance",
    FitnessGoal.ENDURANCE: "stamina-building endurance",
    FitnessGoal.FLEXIBILITY: "mobility and stretching",
    FitnessGoal.GENERAL_HEALTH: "balanced whole-body",
}

CONDITION_LABELS = {
    HealthCondition.DIABETES: "diabetes",
    HealthCondition.HYPERTENSION: "high blood pressure",
    HealthCondition.HEART_DISEASE: "heart condition",
    HealthCondition.ASTHMA: "asthma",
    HealthCondition.ARTHRITIS: "arthritis",
    HealthCondition.BACK_PAIN: "back",
    HealthCondition.KNEE_ISSUES: "knee",
    HealthCondition.SHOULDER_ISSUES: "shoulder",
    HealthCondition.HIP_ISSUES: "hip",
    HealthCondition.WRIST_PAIN: "wrist",
    HealthCondition.BALANCE_ISSUES: "balance",
    HealthCondition.OTHER: "other health",
}


def _field(profile: Any, name: str):
    if isinstance(profile, dict):
        return profile.get(name)
    return getattr(profile, name, None)


def _real_conditions(profile: Any) -> List[HealthCondition]:
    conditions = normalize_health_conditions(_field(profile, "health_conditions") or [])
    return [c for c in conditions if c != HealthCondition.NONE]


def determine_fitness_level(profile: Any) -> Difficulty:
    """
    Starting fitness level from age, BMI, conditions and goal.

    Conservative: anything that raises injury risk lands on beginner.
    """
    age = _field(profile, "age")
    conditions = _real_conditions(profile)
    goal = FitnessGoal(_field(profile, "fitness_goal"))
    bmi_category = get_bmi_category(calculate_bmi(_field(profile, "weight_kg"), _field(profile, "height_cm")))

    if age >= 65 or len(conditions) > 1:
        return Difficulty.BEGINNER

    if conditions or bmi_category != BMICategory.NORMAL:
        return Difficulty.BEGINNER

    if age < 18:
        return Difficulty.INTERMEDIATE

    if age < 40 and goal in ADVANCED_GOALS:
        return Difficulty.ADVANCED

    return Difficulty.INTERMEDIATE


def _next_difficulty(level: Difficulty) -> Optional[Difficulty]:
    rank = DIFFICULTY_RANK[level]
    for candidate, candidate_rank in DIFFICULTY_RANK.items():
        if candidate_rank == rank + 1:
            return candidate
    return None


def build_exercise_pool(
    exercises: Sequence[ExerciseTemplate],
    age_group: AgeGroup,
    conditions: Sequence[HealthCondition],
    level: Difficulty,
    min_size: int,
) -> Tuple[List[ExerciseTemplate], Difficulty]:
    """
    Eligible exercises for the user, and the difficulty cap actually used.

    The cap starts at the user's level and is raised while the pool is
    smaller than min_size. Condition filtering is applied first and always.
    """
    safe = filter_by_conditions(filter_by_age_group(exercises, age_group), conditions)
    cap = level
    pool = filter_by_difficulty(safe, cap)
    while len(pool) < min_size:
        relaxed = _next_difficulty(cap)
        if relaxed is None:
            break
        logger.info(
            "Relaxing difficulty cap",
            extra={"extra_fields": {"from": cap.value, "to": relaxed.value, "pool_size": len(pool)}},
        )
        cap = relaxed
        pool = filter_by_difficulty(safe, cap)
    return pool, cap


def apportion_exercise_mix(total: int, mix: Dict[ExerciseType, int], rotation: int = 0) -> Dict[ExerciseType, int]:
    """
    Split total picks across types by percentage (largest remainder).

    Ties on the remainder go to the type that comes first after rotating the
    type order by `rotation`, so successive days share leftover slots.
    """
    types = list(mix)
    counts = {t: (total * mix[t]) // 100 for t in types}
    remainders = {t: (total * mix[t]) % 100 for t in types}
    leftover = total - sum(counts.values())
    ranked = sorted(
        range(len(types)),
        key=lambda i: (-remainders[types[i]], (i - rotation) % len(types)),
    )
    for i in ranked[:leftover]:
        counts[types[i]] += 1
    return counts


def _select_day_exercises(
    pool: List[ExerciseTemplate],
    type_counts: Dict[ExerciseType, int],
    target: int,
    rng: random.Random,
) -> List[ExerciseTemplate]:
    selected: List[ExerciseTemplate] = []
    for exercise_type, wanted in type_counts.items():
        candidates = filter_by_type(pool, exercise_type)
        selected.extend(rng.sample(candidates, min(wanted, len(candidates))))

    # Refill any type shortfall from whatever else is eligible
    shortfall = target - len(selected)
    if shortfall > 0:
        leftovers = [e for e in pool if e not in selected]
        selected.extend(rng.sample(leftovers, min(shortfall, len(leftovers))))

    return sorted(selected, key=lambda e: DAY_TYPE_ORDER.index(e.type))


def _workout_set(
    exercise: ExerciseTemplate,
    level: Difficulty,
    goal: FitnessGoal,
    age_group: AgeGroup,
) -> WorkoutSet:
    is_flexibility = exercise.type == ExerciseType.FLEXIBILITY
    sets = 1 if is_flexibility else SETS_PER_LEVEL[level]

    reps = None
    duration = None
    if exercise.type == ExerciseType.STRENGTH:
        reps = max(1, REPS_PER_LEVEL[level] + GOAL_REP_ADJUSTMENT.get(goal, 0))
    else:
        duration = TYPE_DURATION_MINUTES[exercise.type]
        if exercise.type == ExerciseType.CARDIO:
            duration += GOAL_CARDIO_BONUS_MINUTES.get(goal, 0)

    notes = exercise.description
    if age_group == AgeGroup.SENIOR and exercise.modifications.senior:
        notes = exercise.modifications.senior
    elif level == Difficulty.BEGINNER and exercise.modifications.beginner:
        notes = exercise.modifications.beginner

    return WorkoutSet(
        exercise_id=exercise.id,
        exercise_name=exercise.name,
        sets=sets,
        reps=reps,
        duration_minutes=duration,
        rest_seconds=0 if is_flexibility else REST_SECONDS_PER_LEVEL[level],
        notes=notes,
    )


def _estimate_calories(exercises: List[ExerciseTemplate], sets: List[WorkoutSet]) -> int:
    total = 0.0
    for exercise, workout_set in zip(exercises, sets):
        if workout_set.duration_minutes:
            minutes = workout_set.duration_minutes
        else:
            minutes = (workout_set.reps or 10) * workout_set.sets / 10
        total += exercise.calories_per_minute * minutes
    return round(total)


def _day_title(exercises: List[ExerciseTemplate]) -> Tuple[str, str]:
    counts: Dict[ExerciseType, int] = {}
    for exercise in exercises:
        counts[exercise.type] = counts.get(exercise.type, 0) + 1
    ranked = sorted(counts, key=lambda t: (-counts[t], DAY_TYPE_ORDER.index(t)))
    primary = ranked[0]
    secondary = ranked[1] if len(ranked) > 1 else None
    if secondary:
        title = f"{primary.value.title()} & {secondary.value.title()} Day"
        description = f"Focus on {primary.value} with {secondary.value} exercises"
    else:
        title = f"{primary.value.title()} Day"
        description = f"Focus on {primary.value} with recovery exercises"
    return title, description


def _session_minutes(level: Difficulty, age_group: AgeGroup) -> int:
    if age_group == AgeGroup.SENIOR:
        return SENIOR_SESSION_MINUTES
    return SESSION_MINUTES_PER_LEVEL[level]


def _plan_description(
    goal: FitnessGoal,
    policy: PlanPolicy,
    conditions: List[HealthCondition],
    age_group: AgeGroup,
) -> str:
    parts = [
        f"A {policy.total_weeks}-week {GOAL_FOCUS[goal]} program with "
        f"{len(policy.workout_days)} workouts per week."
    ]
    if conditions:
        labels = [CONDITION_LABELS[c] for c in conditions]
        joined = labels[0] if len(labels) == 1 else f"{', '.join(labels[:-1])} and {labels[-1]}"
        parts.append(f"Exercises are selected to accommodate your {joined} concerns.")
    if age_group == AgeGroup.SENIOR:
        parts.append("Sessions are gentle, low-impact and include balance work.")
    return " ".join(parts)


def generate_workout_plan(
    profile: Any,
    *,
    policy: PlanPolicy = PlanPolicy(),
    exercises: Sequence[ExerciseTemplate] = EXERCISE_DATABASE,
    level_policy: Callable[[Any], Difficulty] = determine_fitness_level,
    user_id: Optional[UUID] = None,
    seed: Any = None,
    now: Optional[datetime] = None,
) -> WorkoutPlanDraft:
    """
    Build an unsaved workout plan for a profile.

    Args:
        profile: Profile row, ProfileCreate or dict with the intake fields
        policy: Schedule shape (weeks, days, per-day bounds)
        exercises: Template table to draw from
        level_policy: Maps the profile to a starting fitness level
        user_id: Owner; defaults to profile.user_id
        seed: Random seed; defaults to the user id
        now: Plan start; defaults to the current UTC time

    Raises:
        ProfileIncompleteError: required profile fields are missing
        InsufficientExercisesError: no exercise survives the safety filters
    """
    # Range checks belong to the caller; only absent fields stop generation
    validation = validate_profile_for_workout(profile)
    if validation.missing_fields:
        raise ProfileIncompleteError(validation.missing_fields, validation.errors)

    if user_id is None:
        user_id = _field(profile, "user_id")
    rng = random.Random(str(seed if seed is not None else user_id))
    now = now or datetime.now(timezone.utc)

    age = _field(profile, "age")
    goal = FitnessGoal(_field(profile, "fitness_goal"))
    conditions = _real_conditions(profile)
    age_group = get_age_group(age)
    level = level_policy(profile)

    pool, cap = build_exercise_pool(exercises, age_group, conditions, level, policy.min_exercises_per_day)
    if not pool:
        logger.error(
            "No eligible exercises for profile",
            extra={"extra_fields": {"user_id": str(user_id), "conditions": [c.value for c in conditions]}},
        )
        raise InsufficientExercisesError("No exercises are safe for the given health conditions")

    target = EXERCISES_PER_LEVEL[level]
    if age_group == AgeGroup.SENIOR:
        target += 1
    target = max(policy.min_exercises_per_day, min(policy.max_exercises_per_day, target))

    limited = len(pool) < target
    if limited:
        logger.warning(
            "Exercise pool smaller than daily target",
            extra={"extra_fields": {"user_id": str(user_id), "pool_size": len(pool), "target": target}},
        )

    balance_slots = 1 if age_group == AgeGroup.SENIOR else 0
    mix = GOAL_EXERCISE_MIX[goal]

    daily_workouts: List[DailyWorkout] = []
    for week in range(policy.total_weeks):
        for index, day_of_week in enumerate(policy.workout_days):
            day_number = week * len(policy.workout_days) + index + 1
            type_counts = apportion_exercise_mix(target - balance_slots, mix, rotation=day_number - 1)
            if balance_slots:
                type_counts[ExerciseType.BALANCE] = balance_slots

            picks = _select_day_exercises(pool, type_counts, target, rng)
            sets = [_workout_set(e, level, goal, age_group) for e in picks]
            title, description = _day_title(picks)

            daily_workouts.append(DailyWorkout(
                day_number=day_number,
                day_of_week=day_of_week,
                title=title,
                description=description,
                exercises=sets,
                estimated_duration_minutes=_session_minutes(level, age_group),
                target_calories=_estimate_calories(picks, sets),
            ))

    notes = f"Personalized {level.value} level workout plan for {goal.value.replace('_', ' ')} goal"
    if limited:
        notes += ". Exercise variety is limited by your health conditions, so every eligible exercise is used each day"
    if cap != level:
        notes += f". Includes some {cap.value} exercises to keep sessions varied"

    plan = WorkoutPlanDraft(
        user_id=user_id,
        name=f"{level.value.title()} {GOAL_LABELS[goal]} Plan",
        description=_plan_description(goal, policy, conditions, age_group),
        start_date=now,
        end_date=now + timedelta(days=policy.total_weeks * 7),
        status=PlanStatus.ACTIVE,
        daily_workouts=daily_workouts,
        total_weeks=policy.total_weeks,
        generated_at=now,
        notes=notes,
        is_custom=False,
        fitness_level=level,
    )

    logger.info(
        "Generated workout plan",
        extra={"extra_fields": {
            "user_id": str(user_id),
            "fitness_level": level.value,
            "goal": goal.value,
            "days": len(daily_workouts),
            "pool_size": len(pool),
        }},
    )
    return plan


def regenerate_workout_plan(profile: Any, attempt: int, **kwargs) -> WorkoutPlanDraft:
    """Same rules as generate_workout_plan with a different seed per attempt."""
    user_id = kwargs.get("user_id") or _field(profile, "user_id")
    kwargs["seed"] = f"{user_id}:{attempt}"
    return generate_workout_plan(profile, **kwargs)
