"""
Exercise Template Table

Static reference data the plan generator draws from, plus the pure filters
used to narrow it for a given user. Filters never mutate the table and
return new lists, so they can be applied in any order.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from schemas import AgeGroup, Difficulty, ExerciseType, HealthCondition

ALL_AGES = (AgeGroup.YOUTH, AgeGroup.ADULT, AgeGroup.SENIOR)
NOT_SENIOR = (AgeGroup.YOUTH, AgeGroup.ADULT)

DIFFICULTY_RANK: Dict[Difficulty, int] = {
    Difficulty.BEGINNER: 1,
    Difficulty.INTERMEDIATE: 2,
    Difficulty.ADVANCED: 3,
}


@dataclass(frozen=True)
class ExerciseModifications:
    beginner: Optional[str] = None
    senior: Optional[str] = None


@dataclass(frozen=True)
class ExerciseTemplate:
    id: str
    name: str
    description: str
    target_muscles: Tuple[str, ...]
    difficulty: Difficulty
    contraindications: Tuple[HealthCondition, ...]
    equipment_needed: Tuple[str, ...]
    calories_per_minute: float
    type: ExerciseType
    age_groups: Tuple[AgeGroup, ...]
    modifications: ExerciseModifications = ExerciseModifications()

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "target_muscles": list(self.target_muscles),
            "difficulty": self.difficulty.value,
            "contraindications": [c.value for c in self.contraindications],
            "equipment_needed": list(self.equipment_needed),
            "calories_per_minute": self.calories_per_minute,
            "type": self.type.value,
            "age_groups": [g.value for g in self.age_groups],
            "modifications": {
                "beginner": self.modifications.beginner,
                "senior": self.modifications.senior,
            },
        }


def _exercise(id, name, description, target_muscles, difficulty, contraindications,
              calories_per_minute, type, age_groups, equipment_needed=(), beginner=None, senior=None):
    return ExerciseTemplate(
        id=id,
        name=name,
        description=description,
        target_muscles=tuple(target_muscles),
        difficulty=difficulty,
        contraindications=tuple(contraindications),
        equipment_needed=tuple(equipment_needed),
        calories_per_minute=calories_per_minute,
        type=type,
        age_groups=tuple(age_groups),
        modifications=ExerciseModifications(beginner=beginner, senior=senior),
    )


B, I, A = Difficulty.BEGINNER, Difficulty.INTERMEDIATE, Difficulty.ADVANCED
HC = HealthCondition

EXERCISE_DATABASE: Tuple[ExerciseTemplate, ...] = (
    # Cardio
    _exercise("walking", "Brisk Walking", "Walk at a brisk pace, maintaining good posture",
              ["legs", "cardiovascular"], B, [], 4, ExerciseType.CARDIO, ALL_AGES,
              senior="Walk at a comfortable pace, use walking poles if needed"),
    _exercise("jogging", "Light Jogging", "Jog at a comfortable pace",
              ["legs", "cardiovascular"], I, [HC.KNEE_ISSUES, HC.ARTHRITIS, HC.HEART_DISEASE],
              7, ExerciseType.CARDIO, NOT_SENIOR),
    _exercise("jumping_jacks", "Jumping Jacks", "Full body cardio with coordinated arm and leg movements",
              ["full_body", "cardiovascular"], B, [HC.KNEE_ISSUES, HC.BACK_PAIN, HC.HEART_DISEASE],
              8, ExerciseType.CARDIO, NOT_SENIOR),
    _exercise("high_knees", "High Knees", "Run in place bringing knees up to waist level",
              ["legs", "core", "cardiovascular"], I, [HC.KNEE_ISSUES, HC.HIP_ISSUES, HC.HEART_DISEASE],
              9, ExerciseType.CARDIO, NOT_SENIOR),
    _exercise("marching", "Marching in Place", "March in place with controlled movements",
              ["legs", "cardiovascular"], B, [], 3, ExerciseType.CARDIO, ALL_AGES),
    _exercise("step_ups", "Step-Ups", "Step up and down on a stable platform",
              ["legs", "glutes"], B, [HC.KNEE_ISSUES, HC.BALANCE_ISSUES], 6, ExerciseType.CARDIO, ALL_AGES,
              equipment_needed=["step_platform"], senior="Use a lower step and handrail for support"),
    _exercise("burpees", "Burpees", "Full body exercise combining squat, plank, and jump",
              ["full_body"], A, [HC.KNEE_ISSUES, HC.BACK_PAIN, HC.HEART_DISEASE, HC.HYPERTENSION],
              10, ExerciseType.CARDIO, NOT_SENIOR),

    # Strength: upper body
    _exercise("pushups", "Push-Ups", "Classic upper body strength exercise",
              ["chest", "shoulders", "triceps", "core"], I, [HC.SHOULDER_ISSUES, HC.WRIST_PAIN],
              7, ExerciseType.STRENGTH, NOT_SENIOR,
              beginner="Perform on knees or against a wall", senior="Wall push-ups or counter push-ups"),
    _exercise("wall_pushups", "Wall Push-Ups", "Standing push-ups against a wall",
              ["chest", "shoulders", "arms"], B, [], 3, ExerciseType.STRENGTH, ALL_AGES),
    _exercise("arm_circles", "Arm Circles", "Circular arm movements for shoulder mobility",
              ["shoulders"], B, [], 2, ExerciseType.FLEXIBILITY, ALL_AGES),
    _exercise("bicep_curls", "Bicep Curls", "Arm curls with light weights or resistance",
              ["biceps"], B, [], 4, ExerciseType.STRENGTH, ALL_AGES,
              equipment_needed=["dumbbells"], beginner="Use water bottles or light weights"),
    _exercise("tricep_dips", "Tricep Dips", "Dips using a chair or bench",
              ["triceps", "shoulders"], I, [HC.SHOULDER_ISSUES, HC.WRIST_PAIN], 5, ExerciseType.STRENGTH,
              NOT_SENIOR, equipment_needed=["chair"]),

    # Strength: lower body
    _exercise("squats", "Squats", "Lower body strength exercise targeting legs and glutes",
              ["quads", "glutes", "hamstrings"], B, [HC.KNEE_ISSUES, HC.BACK_PAIN], 5, ExerciseType.STRENGTH,
              ALL_AGES, beginner="Use a chair for support or partial squats", senior="Chair-assisted squats"),
    _exercise("lunges", "Lunges", "Alternating forward lunges",
              ["quads", "glutes", "hamstrings"], I, [HC.KNEE_ISSUES, HC.BALANCE_ISSUES], 6,
              ExerciseType.STRENGTH, NOT_SENIOR),
    _exercise("calf_raises", "Calf Raises", "Rise up on toes to strengthen calves",
              ["calves"], B, [], 3, ExerciseType.STRENGTH, ALL_AGES),
    _exercise("leg_raises", "Leg Raises", "Lying or standing leg raises",
              ["hip_flexors", "core"], B, [HC.BACK_PAIN], 4, ExerciseType.STRENGTH, ALL_AGES),
    _exercise("glute_bridges", "Glute Bridges", "Lying hip raises to strengthen glutes",
              ["glutes", "hamstrings", "lower_back"], B, [], 4, ExerciseType.STRENGTH, ALL_AGES),

    # Core
    _exercise("planks", "Plank Hold", "Hold plank position engaging core muscles",
              ["core", "shoulders"], I, [HC.BACK_PAIN, HC.SHOULDER_ISSUES], 5, ExerciseType.STRENGTH,
              NOT_SENIOR, beginner="Plank on knees or against elevated surface"),
    _exercise("bird_dog", "Bird Dog", "Opposite arm and leg extensions from hands and knees",
              ["core", "back", "balance"], B, [], 3, ExerciseType.STRENGTH, ALL_AGES),
    _exercise("dead_bug", "Dead Bug", "Lying core exercise with opposite arm and leg movements",
              ["core"], B, [], 3, ExerciseType.STRENGTH, ALL_AGES),
    _exercise("seated_twists", "Seated Torso Twists", "Seated rotation for core and obliques",
              ["obliques", "core"], B, [], 2, ExerciseType.FLEXIBILITY, ALL_AGES),

    # Flexibility
    _exercise("hamstring_stretch", "Hamstring Stretch", "Seated or standing hamstring stretch",
              ["hamstrings"], B, [], 2, ExerciseType.FLEXIBILITY, ALL_AGES),
    _exercise("quad_stretch", "Quadriceps Stretch", "Standing quad stretch",
              ["quads"], B, [HC.BALANCE_ISSUES], 2, ExerciseType.FLEXIBILITY, ALL_AGES,
              senior="Use wall for balance support"),
    _exercise("shoulder_stretch", "Shoulder Stretch", "Cross-body shoulder stretch",
              ["shoulders"], B, [], 2, ExerciseType.FLEXIBILITY, ALL_AGES),
    _exercise("neck_rolls", "Gentle Neck Rolls", "Slow, controlled neck rotations",
              ["neck"], B, [], 1, ExerciseType.FLEXIBILITY, ALL_AGES),
    _exercise("cat_cow", "Cat-Cow Stretch", "Spinal mobility exercise on hands and knees",
              ["spine", "core"], B, [], 2, ExerciseType.FLEXIBILITY, ALL_AGES),
    _exercise("child_pose", "Child's Pose", "Restorative yoga pose for back and shoulders",
              ["back", "shoulders"], B, [HC.KNEE_ISSUES], 1, ExerciseType.FLEXIBILITY, ALL_AGES),

    # Balance (mostly for seniors)
    _exercise("single_leg_stand", "Single Leg Stand", "Stand on one leg for balance",
              ["legs", "core"], B, [HC.BALANCE_ISSUES], 2, ExerciseType.BALANCE, ALL_AGES,
              senior="Hold onto chair or wall for support"),
    _exercise("heel_to_toe_walk", "Heel-to-Toe Walk", "Walk in a straight line placing heel directly in front of toe",
              ["legs", "core"], B, [HC.BALANCE_ISSUES], 2, ExerciseType.BALANCE, ALL_AGES,
              senior="Walk near a wall for support"),
)

_BY_ID: Dict[str, ExerciseTemplate] = {e.id: e for e in EXERCISE_DATABASE}


def get_age_group(age: int) -> AgeGroup:
    """<18 youth, 18-64 adult, 65+ senior."""
    if age < 18:
        return AgeGroup.YOUTH
    if age < 65:
        return AgeGroup.ADULT
    return AgeGroup.SENIOR


def filter_by_age_group(exercises: Iterable[ExerciseTemplate], age_group: AgeGroup) -> List[ExerciseTemplate]:
    return [e for e in exercises if age_group in e.age_groups]


def filter_by_conditions(exercises: Iterable[ExerciseTemplate], conditions: Iterable) -> List[ExerciseTemplate]:
    """
    Drop exercises contraindicated for any of the given conditions.

    An empty list, or one holding only "none", keeps everything.
    """
    real = {HealthCondition(c) for c in conditions} - {HealthCondition.NONE}
    if not real:
        return list(exercises)
    return [e for e in exercises if not real.intersection(e.contraindications)]


def filter_by_difficulty(exercises: Iterable[ExerciseTemplate], max_difficulty: Difficulty) -> List[ExerciseTemplate]:
    max_rank = DIFFICULTY_RANK[Difficulty(max_difficulty)]
    return [e for e in exercises if DIFFICULTY_RANK[e.difficulty] <= max_rank]


def filter_by_type(exercises: Iterable[ExerciseTemplate], exercise_type: ExerciseType) -> List[ExerciseTemplate]:
    exercise_type = ExerciseType(exercise_type)
    return [e for e in exercises if e.type == exercise_type]


def get_exercise_by_id(exercise_id: str) -> Optional[ExerciseTemplate]:
    return _BY_ID.get(exercise_id)


def get_equipment_needed(exercise_ids: Iterable[str]) -> List[str]:
    """Sorted, de-duplicated equipment list for the given exercise ids. Unknown ids are ignored."""
    equipment = set()
    for exercise_id in exercise_ids:
        template = _BY_ID.get(exercise_id)
        if template:
            equipment.update(template.equipment_needed)
    return sorted(equipment)
