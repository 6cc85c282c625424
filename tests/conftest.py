from datetime import datetime, timezone

import pytest

from config import Settings
from database import ConversationStore, UserDirectory
from search import SearchEngine
from seed import create_session_store, load_mock_data

FIXED_NOW = datetime(2025, 4, 20, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def test_settings():
    return Settings(_env_file=None)


@pytest.fixture
def directory():
    return UserDirectory()


@pytest.fixture
def conversations(directory):
    return ConversationStore(directory)


@pytest.fixture
def seeded(directory, conversations):
    suggested = load_mock_data(directory, conversations, now=FIXED_NOW)
    return directory, conversations, suggested


@pytest.fixture
def engine(seeded):
    directory, _, suggested = seeded
    return SearchEngine(directory, history_limit=5, suggested_user_ids=suggested)


@pytest.fixture
def store(test_settings):
    return create_session_store(test_settings)
