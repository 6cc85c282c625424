"""Sample data and construction of a ready-to-use session store."""

from datetime import datetime, timedelta
from typing import List, Optional

from config import Settings, settings as default_settings
from database import ConversationStore, UserDirectory
from logging_manager import get_logger
from schemas import Conversation, Message, User, Video, utcnow
from search import SearchEngine
from session import SessionStore

logger = get_logger(prefix="[Seed]")


def load_mock_data(
    directory: UserDirectory,
    conversations: ConversationStore,
    now: Optional[datetime] = None,
) -> List[str]:
    """Populate both stores and return the ids of the suggested users."""
    now = now or utcnow()

    athlete = User(
        id="1",
        name="John Smith",
        email="john@example.com",
        background_info="High school quarterback with strong passing skills. Looking to play college football.",
        teams=["High School Football Team"],
        videos=[Video(id="1", title="Football Highlights", upload_date=now)],
    )
    coach = User(
        id="2",
        name="Coach Johnson",
        email="coach@example.com",
        background_info="College football coach with 15 years of experience. Looking for talented quarterbacks.",
        teams=["University Football Team"],
    )
    directory.insert(athlete)
    directory.insert(coach)

    conversations.add(Conversation(
        id="1",
        participant_ids=[athlete.id, coach.id],
        messages=[
            Message(
                id="1",
                sender_id=athlete.id,
                content="Hello Coach, I'm interested in your program",
                timestamp=now - timedelta(hours=24),
            ),
            Message(
                id="2",
                sender_id=coach.id,
                content="Hi John, thanks for reaching out. I'd love to see your highlights.",
                timestamp=now - timedelta(hours=12),
            ),
        ],
    ))

    logger.info(f"Loaded {len(directory)} users and {len(conversations)} conversations")
    return [coach.id]


def create_session_store(settings: Optional[Settings] = None) -> SessionStore:
    settings = settings or default_settings
    directory = UserDirectory()
    conversations = ConversationStore(directory)
    search_engine = SearchEngine(directory, history_limit=settings.SEARCH_HISTORY_LIMIT)

    if settings.SEED_MOCK_DATA:
        search_engine.set_suggested_user_ids(load_mock_data(directory, conversations))

    return SessionStore(
        directory,
        conversations,
        search_engine,
        auto_register_on_login=settings.AUTO_REGISTER_ON_LOGIN,
        placeholder_name=settings.PLACEHOLDER_USER_NAME,
        min_password_length=settings.MIN_PASSWORD_LENGTH,
    )
