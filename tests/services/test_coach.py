"""End-to-end tests for CoachService: utterance in, rows and reply out."""

import json
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from workout_coach.exceptions import DatabaseError, ValidationError
from workout_coach.llm.prompts import PROVIDER_ERROR_REPLY
from workout_coach.services.action_dispatcher import ActionDispatcher
from workout_coach.services.action_interpreter import ActionInterpreter
from workout_coach.services.coach import CoachService, build_coach_service
from workout_coach.services.entity_resolver import DEFAULT_ROUTINE_NAME


USER = "user-1"
TODAY = date(2024, 3, 15)


@pytest.fixture
def coach(resolver, history_repo, profile_repo, mock_llm):
    interpreter = ActionInterpreter(
        history_store=history_repo,
        profile_store=profile_repo,
        llm_client=mock_llm,
        today=lambda: TODAY,
    )
    return CoachService(interpreter, ActionDispatcher(resolver, today=lambda: TODAY))


class TestBenchPressScenario:
    """A first-time user logs bench press in plain language."""

    @pytest.mark.asyncio
    async def test_logs_default_routine_workout_and_set(self, coach, mock_llm, fitness_repo):
        mock_llm.completion.return_value = json.dumps({
            "action": "log_workout",
            "workoutName": ["Bench Press"],
            "sets": [{"reps": 10, "weight": 135}],
            "response": "Logged 3 sets of bench press at 135 lbs.",
        })

        reply = await coach.handle_message(
            "I did 3 sets of bench press at 135 lbs for 10 reps", USER
        )

        assert reply.response == "Logged 3 sets of bench press at 135 lbs."
        assert reply.action_kind == "log_workout"
        assert reply.action["date"] == "2024-03-15"

        routines = await fitness_repo.list_routines(USER)
        assert [r.name for r in routines] == [DEFAULT_ROUTINE_NAME]
        workouts = await fitness_repo.list_workouts(routines[0].id)
        assert [w.name for w in workouts] == ["Bench Press"]
        sets = await fitness_repo.list_sets(workouts[0].id)
        assert [(s.reps, s.weight, s.date) for s in sets] == [(10, 135.0, TODAY)]

    @pytest.mark.asyncio
    async def test_follow_up_reuses_workout(self, coach, mock_llm, fitness_repo):
        first = {"action": "log_workout", "workoutName": ["Bench Press"], "sets": [{"reps": 10, "weight": 135}]}
        second = {"action": "log_workouts", "workoutName": ["bench press"], "sets": [{"reps": 8, "weight": 145}]}

        mock_llm.completion.return_value = json.dumps(first)
        await coach.handle_message("bench 135x10", USER)
        mock_llm.completion.return_value = json.dumps(second)
        await coach.handle_message("then 145x8", USER)

        routines = await fitness_repo.list_routines(USER)
        workouts = await fitness_repo.list_workouts(routines[0].id)
        assert len(routines) == 1
        assert len(workouts) == 1
        assert len(await fitness_repo.list_sets(workouts[0].id)) == 2


class TestCoachReplies:
    """Failure paths through the facade."""

    @pytest.mark.asyncio
    async def test_provider_failure_gives_apology(self, coach, mock_llm, fitness_repo):
        mock_llm.completion.side_effect = RuntimeError("provider down")

        reply = await coach.handle_message("hello", USER)

        assert reply.response == PROVIDER_ERROR_REPLY
        assert reply.action_kind == "fitness_question"
        assert await fitness_repo.list_routines(USER) == []

    @pytest.mark.asyncio
    async def test_check_in_reply_carries_intensity(self, coach, mock_llm):
        mock_llm.completion.return_value = json.dumps({
            "action": "check_in",
            "checkIn": {"energyLevel": 1, "sleepQuality": 1, "sorenessLevel": 5},
            "response": "Rough night.",
        })

        reply = await coach.handle_message("slept badly and very sore", USER)

        assert reply.response == "Rough night. I'll dial back today's weights to 70% intensity."

    @pytest.mark.asyncio
    async def test_dispatch_errors_propagate(self, resolver, history_repo, mock_llm):
        mock_llm.completion.return_value = '{"action": "log_workout", "sets": [{"reps": 5}]}'
        resolver.store.create_set = AsyncMock(side_effect=DatabaseError("locked"))
        coach = CoachService(
            ActionInterpreter(history_store=history_repo, llm_client=mock_llm),
            ActionDispatcher(resolver),
        )

        with pytest.raises(DatabaseError):
            await coach.handle_message("5 push ups", USER)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("utterance,user_id", [("   ", USER), ("hi", "")])
    async def test_rejects_empty_input(self, coach, mock_llm, utterance, user_id):
        with pytest.raises(ValidationError):
            await coach.handle_message(utterance, user_id)
        mock_llm.completion.assert_not_called()


class TestBuildCoachService:
    """Tests for the default wiring."""

    @pytest.mark.asyncio
    async def test_builds_against_database_file(self, temp_db_path):
        llm = MagicMock()
        llm.completion = AsyncMock(return_value='{"action": "create_routine", "routineName": "Leg Day"}')

        coach = build_coach_service(db_path=temp_db_path, llm_client=llm)
        reply = await coach.handle_message("make me a leg day routine", USER)

        assert reply.response == "Routine Leg Day has been successfully created."
        routines = await coach.resolver.store.list_routines(USER)
        assert [r.name for r in routines] == ["Leg Day"]
