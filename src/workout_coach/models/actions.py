"""
Structured actions produced by the coach model.

The model answers every utterance with one JSON object whose ``action`` field
names what the user wants. Many surface forms exist for the same intent
("log_workouts", "record_workout", ...), so every action string is first
mapped to a canonical ActionKind and then validated against the variant model
for that kind.
"""

import json
import re
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidatorFunctionWrapHandler, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ActionParseError


class ActionKind(str, Enum):
    """Canonical action kinds understood by the dispatcher."""

    LOG_WORKOUT = "log_workout"
    CREATE_ROUTINE = "create_routine"
    DELETE_ROUTINE = "delete_routine"
    DELETE_WORKOUT = "delete_workout"
    DELETE_SET = "delete_set"
    CHECK_IN = "check_in"
    GET_RECOMMENDATION = "get_recommendation"
    FITNESS_QUESTION = "fitness_question"
    UNRECOGNIZED = "unrecognized"


def _plural_forms(*names: str) -> List[str]:
    forms = []
    for name in names:
        forms.extend([name, f"{name}s"])
    return forms


ACTION_ALIASES: Dict[str, ActionKind] = {
    **{
        alias: ActionKind.LOG_WORKOUT
        for alias in _plural_forms(
            "log_workout", "record_workout", "save_workout", "add_workout"
        ) + ["add_multiple_workouts"]
    },
    **{
        alias: ActionKind.CREATE_ROUTINE
        for alias in _plural_forms("create_routine", "add_routine", "new_routine")
    },
    **{
        alias: ActionKind.DELETE_ROUTINE
        for alias in _plural_forms("delete_routine", "remove_routine", "erase_routine")
    },
    **{
        alias: ActionKind.DELETE_WORKOUT
        for alias in _plural_forms("delete_workout", "remove_workout", "erase_workout")
    },
    **{
        alias: ActionKind.DELETE_SET
        for alias in _plural_forms("delete_set", "remove_set", "erase_set")
    },
    "check_in": ActionKind.CHECK_IN,
    "get_recommendation": ActionKind.GET_RECOMMENDATION,
    "fitness_question": ActionKind.FITNESS_QUESTION,
    "fitness_response": ActionKind.FITNESS_QUESTION,
}


def canonical_kind(action: Optional[str]) -> ActionKind:
    """Map a raw action string to its canonical kind."""
    if not action:
        return ActionKind.UNRECOGNIZED
    return ACTION_ALIASES.get(action.strip().lower(), ActionKind.UNRECOGNIZED)


_LEADING_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


def _coerce_number(value: Any) -> Any:
    """Pull the leading number out of strings like '135 lbs'."""
    if isinstance(value, str):
        match = _LEADING_NUMBER.search(value)
        if match is None:
            return value
        return float(match.group())
    return value


# ============================================================================
# Payload models
# ============================================================================

class _WireModel(BaseModel):
    """Accepts camelCase keys from the model and snake_case from Python."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class WorkoutSetInput(_WireModel):
    """A single set as described by the model."""

    reps: int = Field(..., ge=0)
    weight: float = 0.0
    calories: Optional[float] = None

    @field_validator("reps", mode="before")
    @classmethod
    def _parse_reps(cls, value: Any) -> Any:
        value = _coerce_number(value)
        if isinstance(value, float):
            return int(round(value))
        return value

    @field_validator("weight", mode="before")
    @classmethod
    def _parse_weight(cls, value: Any) -> Any:
        # Bodyweight sets often come back with no weight at all
        if value is None or value == "":
            return 0.0
        return _coerce_number(value)

    @field_validator("calories", mode="before")
    @classmethod
    def _parse_calories(cls, value: Any) -> Any:
        if value == "":
            return None
        return _coerce_number(value)


class CheckIn(_WireModel):
    """Subjective pre-workout self report."""

    energy_level: int = Field(..., alias="energyLevel")
    sleep_quality: int = Field(..., alias="sleepQuality")
    soreness_level: int = Field(..., alias="sorenessLevel")
    time_available: Optional[int] = Field(None, alias="timeAvailable")
    notes: Optional[str] = None

    @field_validator("energy_level", "sleep_quality", "soreness_level", mode="before")
    @classmethod
    def _clamp_scale(cls, value: Any) -> Any:
        value = _coerce_number(value)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return min(5, max(1, int(round(value))))
        return value


class ExerciseRecommendation(_WireModel):
    name: str
    target_weight: float = Field(0.0, alias="targetWeight")
    target_reps: int = Field(0, alias="targetReps")
    sets: int = 0
    video_url: Optional[str] = Field(None, alias="videoUrl")
    notes: Optional[str] = None


class WorkoutRecommendation(_WireModel):
    intensity_adjustment: float = Field(1.0, alias="intensityAdjustment")
    exercises: List[ExerciseRecommendation] = Field(default_factory=list)
    ai_message: Optional[str] = Field(None, alias="aiMessage")


# ============================================================================
# Action variants
# ============================================================================

class BaseAction(_WireModel):
    """Fields shared by every action."""

    kind: ClassVar[ActionKind] = ActionKind.UNRECOGNIZED

    action: str
    date: Optional[str] = None
    message: Optional[str] = None
    response: Optional[str] = None

    def reply_text(self) -> Optional[str]:
        """The user-facing text carried by the action, if any."""
        return self.message or self.response or None

    def to_wire(self) -> Dict[str, Any]:
        """Serialize back to the camelCase shape the model produces."""
        return self.model_dump(by_alias=True, exclude_none=True)


class _WorkoutTargetAction(BaseAction):
    """Actions that point at a workout inside a routine."""

    workout_name: List[str] = Field(default_factory=list, alias="workoutName")
    routine_name: Optional[str] = Field(None, alias="routineName")

    @field_validator("workout_name", mode="before")
    @classmethod
    def _as_name_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value.strip() else []
        return value

    def first_workout_name(self) -> Optional[str]:
        for name in self.workout_name:
            if name and name.strip():
                return name.strip()
        return None


class LogWorkoutAction(_WorkoutTargetAction):
    kind: ClassVar[ActionKind] = ActionKind.LOG_WORKOUT

    sets: List[WorkoutSetInput] = Field(default_factory=list)
    total_calories: Optional[float] = Field(None, alias="totalCalories")
    notes: Optional[str] = None

    @field_validator("sets", mode="before")
    @classmethod
    def _none_sets(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("total_calories", mode="before")
    @classmethod
    def _parse_calories(cls, value: Any) -> Any:
        if value == "":
            return None
        return _coerce_number(value)


class CreateRoutineAction(BaseAction):
    kind: ClassVar[ActionKind] = ActionKind.CREATE_ROUTINE

    routine_name: Optional[str] = Field(None, alias="routineName")


class DeleteRoutineAction(BaseAction):
    kind: ClassVar[ActionKind] = ActionKind.DELETE_ROUTINE

    routine_name: Optional[str] = Field(None, alias="routineName")


class DeleteWorkoutAction(_WorkoutTargetAction):
    kind: ClassVar[ActionKind] = ActionKind.DELETE_WORKOUT


class DeleteSetAction(_WorkoutTargetAction):
    kind: ClassVar[ActionKind] = ActionKind.DELETE_SET


class CheckInAction(BaseAction):
    kind: ClassVar[ActionKind] = ActionKind.CHECK_IN

    check_in: Optional[CheckIn] = Field(None, alias="checkIn")

    @field_validator("check_in", mode="wrap")
    @classmethod
    def _drop_incomplete_check_in(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        # Partial self reports count as no check-in
        try:
            return handler(value)
        except PydanticValidationError:
            return None


class RecommendationAction(BaseAction):
    kind: ClassVar[ActionKind] = ActionKind.GET_RECOMMENDATION

    recommendation: Optional[WorkoutRecommendation] = None


class FitnessQuestionAction(BaseAction):
    kind: ClassVar[ActionKind] = ActionKind.FITNESS_QUESTION


class UnrecognizedAction(BaseAction):
    """A well-formed object whose action string is outside the taxonomy."""

    kind: ClassVar[ActionKind] = ActionKind.UNRECOGNIZED


ParsedAction = Union[
    LogWorkoutAction,
    CreateRoutineAction,
    DeleteRoutineAction,
    DeleteWorkoutAction,
    DeleteSetAction,
    CheckInAction,
    RecommendationAction,
    FitnessQuestionAction,
    UnrecognizedAction,
]

ACTION_MODELS: Dict[ActionKind, Type[BaseAction]] = {
    ActionKind.LOG_WORKOUT: LogWorkoutAction,
    ActionKind.CREATE_ROUTINE: CreateRoutineAction,
    ActionKind.DELETE_ROUTINE: DeleteRoutineAction,
    ActionKind.DELETE_WORKOUT: DeleteWorkoutAction,
    ActionKind.DELETE_SET: DeleteSetAction,
    ActionKind.CHECK_IN: CheckInAction,
    ActionKind.GET_RECOMMENDATION: RecommendationAction,
    ActionKind.FITNESS_QUESTION: FitnessQuestionAction,
    ActionKind.UNRECOGNIZED: UnrecognizedAction,
}


def is_log_workout_action(action: BaseAction) -> bool:
    """Check if action is any of the workout logging aliases."""
    return canonical_kind(action.action) is ActionKind.LOG_WORKOUT


_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    match = _CODE_FENCE.match(text)
    return match.group(1) if match else text


def parse_action(raw: Union[str, Dict[str, Any]]) -> ParsedAction:
    """
    Parse model output into a typed action.

    Args:
        raw: The raw model text, or an already-decoded JSON object

    Returns:
        The action variant for the canonical kind of ``raw["action"]``

    Raises:
        ActionParseError: If the output is not a JSON object, has no action
            string, or its fields do not fit the variant for that action
    """
    if isinstance(raw, str):
        try:
            data = json.loads(_strip_code_fence(raw))
        except json.JSONDecodeError as e:
            raise ActionParseError(
                message=f"Model output is not valid JSON: {e}",
                raw_output=raw,
            ) from e
    else:
        data = raw

    if not isinstance(data, dict):
        raise ActionParseError(
            message="Model output is not a JSON object",
            raw_output=str(raw),
        )

    action = data.get("action")
    if not isinstance(action, str) or not action.strip():
        raise ActionParseError(
            message="Model output has no action field",
            raw_output=str(raw),
        )

    model = ACTION_MODELS[canonical_kind(action)]
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ActionParseError(
            message=f"Model output does not match the {model.kind.value} shape",
            raw_output=str(raw),
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e
