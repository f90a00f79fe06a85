"""Tests for the workout-coach command line."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from workout_coach import cli
from workout_coach.db.repositories import (
    ConversationHistoryRepository,
    FitnessRepository,
    UserProfileRepository,
)
from workout_coach.services.coach import build_coach_service


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch.object(cli, "configure_logging"):
        yield


class TestProfileCommand:
    """Tests for `workout-coach profile`."""

    def test_complete_profile_saved(self, temp_db_path):
        code = cli.main([
            "--db", temp_db_path, "--user", "u1", "profile",
            "--weight", "82", "--height", "180", "--goal-weight", "78", "--goal", "lose_weight",
        ])

        assert code == 0
        profile = asyncio.run(UserProfileRepository(db_path=temp_db_path).get_profile("u1"))
        assert profile.current_weight == 82
        assert profile.fitness_goal == "lose_weight"
        assert profile.profile_complete is True

    def test_partial_profile_incomplete(self, temp_db_path, capsys):
        cli.main(["--db", temp_db_path, "--user", "u1", "profile", "--weight", "82"])

        profile = asyncio.run(UserProfileRepository(db_path=temp_db_path).get_profile("u1"))
        assert profile.profile_complete is False
        assert "Fill in every field" in capsys.readouterr().out

    def test_rejects_unknown_goal(self, temp_db_path):
        with pytest.raises(SystemExit):
            cli.main(["--db", temp_db_path, "profile", "--goal", "get_huge"])


class TestRoutinesCommand:
    """Tests for `workout-coach routines`."""

    def test_empty(self, temp_db_path, capsys):
        assert cli.main(["--db", temp_db_path, "routines"]) == 0
        assert "No routines yet" in capsys.readouterr().out

    def test_lists_logged_sets(self, temp_db_path, capsys):
        repo = FitnessRepository(db_path=temp_db_path)

        async def seed():
            routine = await repo.create_routine("local", "Push Day")
            workout = await repo.create_workout(routine.id, "Bench Press")
            await repo.create_set(workout.id, reps=10, weight=135)

        asyncio.run(seed())

        cli.main(["--db", temp_db_path, "routines"])

        out = capsys.readouterr().out
        assert "Push Day" in out
        assert "Bench Press" in out
        assert "10x135" in out


class TestChatCommand:
    """Tests for `workout-coach chat -m`."""

    def test_single_message(self, temp_db_path, capsys):
        llm = MagicMock()
        llm.completion = AsyncMock(return_value=json.dumps({
            "action": "fitness_question",
            "response": "Rest 2-3 minutes between heavy sets.",
        }))

        with patch.object(
            cli, "build_coach_service",
            side_effect=lambda db_path: build_coach_service(db_path=db_path, llm_client=llm),
        ):
            code = cli.main(["--db", temp_db_path, "chat", "-m", "How long should I rest?"])

        assert code == 0
        assert "Rest 2-3 minutes" in capsys.readouterr().out
        history = asyncio.run(ConversationHistoryRepository(db_path=temp_db_path).get("local"))
        assert history == ["How long should I rest?"]


class TestHistoryCommand:
    """Tests for `workout-coach history`."""

    def test_show_and_clear(self, temp_db_path, capsys):
        repo = ConversationHistoryRepository(db_path=temp_db_path)
        asyncio.run(repo.put("local", ["hi there"]))

        cli.main(["--db", temp_db_path, "history"])
        assert "hi there" in capsys.readouterr().out

        cli.main(["--db", temp_db_path, "history", "--clear"])
        assert asyncio.run(repo.get("local")) == []


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 1
