"""Shared fixtures for the workout coach tests."""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

import pytest

from workout_coach.db.repositories import (
    ConversationHistoryRepository,
    FitnessRepository,
    UserProfileRepository,
)
from workout_coach.services.cache import TTLCache
from workout_coach.services.entity_resolver import EntityResolver


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    yield db_path
    try:
        os.unlink(db_path)
    except OSError:
        pass


@pytest.fixture
def fitness_repo(temp_db_path):
    """FitnessRepository backed by a temporary database."""
    return FitnessRepository(db_path=temp_db_path)


@pytest.fixture
def history_repo(temp_db_path):
    """ConversationHistoryRepository backed by a temporary database."""
    return ConversationHistoryRepository(db_path=temp_db_path)


@pytest.fixture
def profile_repo(temp_db_path):
    """UserProfileRepository backed by a temporary database."""
    return UserProfileRepository(db_path=temp_db_path)


@pytest.fixture
def resolver(fitness_repo):
    """EntityResolver with a fresh cache."""
    return EntityResolver(fitness_repo, cache=TTLCache(30), threshold=0.3, cache_ttl_seconds=30)


@pytest.fixture
def mock_llm():
    """LLM client whose completion result is set per test."""
    client = MagicMock()
    client.completion = AsyncMock(return_value='{"action": "fitness_question", "response": "ok"}')
    return client
