"""Tests for action parsing and alias normalization."""

import pytest

from workout_coach.exceptions import ActionParseError, ErrorCode
from workout_coach.models.actions import (
    ACTION_ALIASES,
    ActionKind,
    CheckInAction,
    CreateRoutineAction,
    DeleteSetAction,
    DeleteWorkoutAction,
    FitnessQuestionAction,
    LogWorkoutAction,
    RecommendationAction,
    UnrecognizedAction,
    canonical_kind,
    is_log_workout_action,
    parse_action,
)


# ============================================================================
# Alias table
# ============================================================================

LOG_WORKOUT_FORMS = [
    "log_workout", "log_workouts",
    "record_workout", "record_workouts",
    "save_workout", "save_workouts",
    "add_workout", "add_workouts",
    "add_multiple_workouts",
]


class TestCanonicalKind:
    """Every surface form maps to exactly one canonical kind."""

    @pytest.mark.parametrize("alias", LOG_WORKOUT_FORMS)
    def test_log_workout_forms(self, alias):
        assert canonical_kind(alias) is ActionKind.LOG_WORKOUT

    @pytest.mark.parametrize("alias,kind", [
        ("create_routine", ActionKind.CREATE_ROUTINE),
        ("create_routines", ActionKind.CREATE_ROUTINE),
        ("add_routine", ActionKind.CREATE_ROUTINE),
        ("new_routine", ActionKind.CREATE_ROUTINE),
        ("delete_routine", ActionKind.DELETE_ROUTINE),
        ("remove_routines", ActionKind.DELETE_ROUTINE),
        ("erase_routine", ActionKind.DELETE_ROUTINE),
        ("delete_workout", ActionKind.DELETE_WORKOUT),
        ("remove_workout", ActionKind.DELETE_WORKOUT),
        ("erase_workouts", ActionKind.DELETE_WORKOUT),
        ("delete_set", ActionKind.DELETE_SET),
        ("delete_sets", ActionKind.DELETE_SET),
        ("remove_set", ActionKind.DELETE_SET),
        ("check_in", ActionKind.CHECK_IN),
        ("get_recommendation", ActionKind.GET_RECOMMENDATION),
        ("fitness_question", ActionKind.FITNESS_QUESTION),
        ("fitness_response", ActionKind.FITNESS_QUESTION),
    ])
    def test_other_forms(self, alias, kind):
        assert canonical_kind(alias) is kind

    def test_every_alias_is_covered(self):
        """The table holds the log forms plus three-verb singular/plural pairs."""
        log_aliases = [a for a, k in ACTION_ALIASES.items() if k is ActionKind.LOG_WORKOUT]
        assert sorted(log_aliases) == sorted(LOG_WORKOUT_FORMS)
        for kind in (ActionKind.CREATE_ROUTINE, ActionKind.DELETE_ROUTINE,
                     ActionKind.DELETE_WORKOUT, ActionKind.DELETE_SET):
            assert sum(1 for k in ACTION_ALIASES.values() if k is kind) == 6

    def test_case_and_whitespace_insensitive(self):
        assert canonical_kind("  Log_Workouts ") is ActionKind.LOG_WORKOUT

    @pytest.mark.parametrize("value", [None, "", "dance", "log_workoutz"])
    def test_unknown_is_unrecognized(self, value):
        assert canonical_kind(value) is ActionKind.UNRECOGNIZED


# ============================================================================
# Parsing
# ============================================================================

class TestParseLogWorkout:
    """Tests for log-workout payloads."""

    def test_plural_alias_parses_as_log_workout(self):
        action = parse_action(
            '{"action": "log_workouts", "workoutName": ["Bench Press"],'
            ' "sets": [{"reps": 10, "weight": 135}, {"reps": 8, "weight": 145}]}'
        )
        assert isinstance(action, LogWorkoutAction)
        assert is_log_workout_action(action)
        assert action.first_workout_name() == "Bench Press"
        assert [(s.reps, s.weight) for s in action.sets] == [(10, 135.0), (8, 145.0)]

    def test_workout_name_as_string(self):
        action = parse_action({"action": "log_workout", "workoutName": "Squat"})
        assert action.workout_name == ["Squat"]

    def test_missing_sets_and_names(self):
        action = parse_action({"action": "record_workout", "sets": None})
        assert action.sets == []
        assert action.first_workout_name() is None

    def test_numbers_with_units(self):
        action = parse_action({
            "action": "log_workout",
            "sets": [{"reps": "10", "weight": "135 lbs", "calories": ""}],
            "totalCalories": "250 kcal",
        })
        assert action.sets[0].reps == 10
        assert action.sets[0].weight == 135.0
        assert action.sets[0].calories is None
        assert action.total_calories == 250.0

    def test_empty_total_calories(self):
        action = parse_action({"action": "log_workout", "totalCalories": "", "sets": [{"reps": 5}]})
        assert action.total_calories is None
        assert len(action.sets) == 1

    def test_notes(self):
        action = parse_action({"action": "log_workout", "notes": "Felt strong"})
        assert action.notes == "Felt strong"

    def test_bodyweight_set_without_weight(self):
        action = parse_action({"action": "log_workout", "sets": [{"reps": 20}]})
        assert action.sets[0].weight == 0.0

    def test_negative_reps_rejected(self):
        with pytest.raises(ActionParseError):
            parse_action({"action": "log_workout", "sets": [{"reps": -1}]})

    def test_round_trips_to_camel_case(self):
        action = parse_action({"action": "log_workout", "routineName": "Push Day"})
        assert action.to_wire()["routineName"] == "Push Day"


class TestParseOtherKinds:
    """Tests for non-logging variants."""

    def test_check_in_clamps_scales(self):
        action = parse_action({
            "action": "check_in",
            "checkIn": {"energyLevel": 7, "sleepQuality": 0, "sorenessLevel": "3"},
            "response": "Thanks!",
        })
        assert isinstance(action, CheckInAction)
        assert action.check_in.energy_level == 5
        assert action.check_in.sleep_quality == 1
        assert action.check_in.soreness_level == 3

    def test_check_in_without_payload(self):
        action = parse_action({"action": "check_in", "response": "How do you feel?"})
        assert action.check_in is None

    @pytest.mark.parametrize("check_in", [
        {"energyLevel": 4, "sleepQuality": 3},
        {"energyLevel": "tired", "sleepQuality": 3, "sorenessLevel": 2},
        "tired",
    ])
    def test_incomplete_check_in_keeps_response(self, check_in):
        action = parse_action({"action": "check_in", "checkIn": check_in, "response": "Noted!"})

        assert isinstance(action, CheckInAction)
        assert action.check_in is None
        assert action.response == "Noted!"

    def test_recommendation(self):
        action = parse_action({
            "action": "get_recommendation",
            "recommendation": {
                "intensityAdjustment": 0.9,
                "exercises": [{"name": "Incline Press", "targetWeight": 40, "targetReps": 10, "sets": 3}],
                "aiMessage": "Lighter day today.",
            },
        })
        assert isinstance(action, RecommendationAction)
        assert action.recommendation.exercises[0].target_weight == 40.0
        assert action.recommendation.ai_message == "Lighter day today."

    def test_create_routine(self):
        action = parse_action({"action": "new_routine", "routineName": "Pull Day"})
        assert isinstance(action, CreateRoutineAction)
        assert action.routine_name == "Pull Day"

    def test_delete_variants(self):
        assert isinstance(parse_action({"action": "remove_workout"}), DeleteWorkoutAction)
        assert isinstance(parse_action({"action": "erase_sets"}), DeleteSetAction)

    def test_fitness_response_alias(self):
        action = parse_action({"action": "fitness_response", "response": "Drink water."})
        assert isinstance(action, FitnessQuestionAction)
        assert action.reply_text() == "Drink water."

    def test_unknown_action_is_unrecognized(self):
        action = parse_action({"action": "dance", "message": "Let's dance"})
        assert isinstance(action, UnrecognizedAction)
        assert action.reply_text() == "Let's dance"

    def test_message_preferred_over_response(self):
        action = parse_action({"action": "fitness_question", "message": "a", "response": "b"})
        assert action.reply_text() == "a"

    def test_extra_fields_ignored(self):
        action = parse_action({"action": "fitness_question", "confidence": 0.9})
        assert isinstance(action, FitnessQuestionAction)


class TestParseFailures:
    """Malformed model output raises ActionParseError."""

    def test_invalid_json(self):
        with pytest.raises(ActionParseError) as exc_info:
            parse_action("Sure! Here's your workout")
        assert exc_info.value.code == ErrorCode.ACTION_PARSE_ERROR
        assert exc_info.value.raw_output == "Sure! Here's your workout"

    def test_json_array(self):
        with pytest.raises(ActionParseError):
            parse_action('[{"action": "log_workout"}]')

    @pytest.mark.parametrize("payload", ['{"response": "hi"}', '{"action": ""}', '{"action": 3}'])
    def test_missing_action(self, payload):
        with pytest.raises(ActionParseError):
            parse_action(payload)

    def test_wrong_field_type(self):
        with pytest.raises(ActionParseError) as exc_info:
            parse_action({"action": "log_workout", "sets": [{"reps": "lots"}]})
        assert "errors" in exc_info.value.details

    def test_code_fence_is_stripped(self):
        action = parse_action('```json\n{"action": "fitness_question", "response": "ok"}\n```')
        assert isinstance(action, FitnessQuestionAction)
