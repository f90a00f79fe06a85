"""Domain and action models for the Workout Coach core."""

from .actions import (
    ACTION_ALIASES,
    ActionKind,
    BaseAction,
    CheckIn,
    CheckInAction,
    CreateRoutineAction,
    DeleteRoutineAction,
    DeleteSetAction,
    DeleteWorkoutAction,
    ExerciseRecommendation,
    FitnessQuestionAction,
    LogWorkoutAction,
    ParsedAction,
    RecommendationAction,
    UnrecognizedAction,
    WorkoutRecommendation,
    WorkoutSetInput,
    canonical_kind,
    is_log_workout_action,
    parse_action,
)
from .entities import FITNESS_GOALS, NamedEntity, Routine, SetRecord, UserProfile, Workout

__all__ = [
    "ACTION_ALIASES",
    "ActionKind",
    "BaseAction",
    "CheckIn",
    "CheckInAction",
    "CreateRoutineAction",
    "DeleteRoutineAction",
    "DeleteSetAction",
    "DeleteWorkoutAction",
    "ExerciseRecommendation",
    "FitnessQuestionAction",
    "LogWorkoutAction",
    "ParsedAction",
    "RecommendationAction",
    "UnrecognizedAction",
    "WorkoutRecommendation",
    "WorkoutSetInput",
    "canonical_kind",
    "is_log_workout_action",
    "parse_action",
    "FITNESS_GOALS",
    "NamedEntity",
    "Routine",
    "SetRecord",
    "UserProfile",
    "Workout",
]
