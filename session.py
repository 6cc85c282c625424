"""
Session store: authentication state and the single entry point for mutations.

Callers hold a ``SessionStore`` and either poll its properties or register an
observer with ``subscribe``. Observers are called synchronously after each
successful mutation with the event and its payload.
"""

from enum import Enum
from typing import Callable, List, Literal, Optional

from pydantic import BaseModel

from database import ConversationStore, UserDirectory, new_object_id
from errors import Conflict, NotFound, Unauthenticated, ValidationFailed
from logging_manager import get_logger
from schemas import Conversation, Message, User, Video, utcnow
from search import SearchEngine

logger = get_logger(prefix="[SessionStore]")


class SessionState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class SessionEvent(str, Enum):
    LOGGED_IN = "logged_in"
    LOGGED_OUT = "logged_out"
    REGISTERED = "registered"
    PROFILE_UPDATED = "profile_updated"
    MESSAGE_SENT = "message_sent"
    CONVERSATION_STARTED = "conversation_started"
    SEARCHED = "searched"
    HISTORY_CLEARED = "history_cleared"


Observer = Callable[[SessionEvent, object], None]


class RegisterResult(BaseModel):
    success: bool
    reason: Optional[str] = None
    error: Optional[Literal["validation", "conflict"]] = None
    user: Optional[User] = None


class SessionStore:
    def __init__(
        self,
        directory: UserDirectory,
        conversations: ConversationStore,
        search_engine: SearchEngine,
        auto_register_on_login: bool = True,
        placeholder_name: str = "New User",
        min_password_length: int = 6,
    ):
        self.directory = directory
        self.conversations = conversations
        self.search_engine = search_engine
        self.auto_register_on_login = auto_register_on_login
        self.placeholder_name = placeholder_name
        self.min_password_length = min_password_length

        self._current_user: Optional[User] = None
        self._observers: List[Observer] = []

    # ------------ State ------------

    @property
    def state(self) -> SessionState:
        return SessionState.AUTHENTICATED if self._current_user else SessionState.ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return self._current_user is not None

    @property
    def current_user(self) -> Optional[User]:
        return self._current_user

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe():
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self, event: SessionEvent, payload=None):
        for observer in list(self._observers):
            observer(event, payload)

    def _require_user(self) -> User:
        if self._current_user is None:
            raise Unauthenticated()
        return self._current_user

    # ------------ Auth ------------

    def login(self, email: str, password: str) -> User:
        # Credentials are not verified; the password is accepted as given.
        user = self.directory.find_by_email(email)
        if user is None:
            if not self.auto_register_on_login:
                logger.warning(f"Login rejected for unknown email {email}")
                raise NotFound("Incorrect email or password")
            user = User(
                id=self.directory.new_id(),
                name=self.placeholder_name,
                email=email,
            )
            self.directory.insert(user)
            logger.info(f"Auto-registered {email} as user {user.id}")

        self._current_user = user
        logger.info(f"User {user.id} logged in")
        self._notify(SessionEvent.LOGGED_IN, user)
        return user

    def logout(self):
        if self._current_user is None:
            return
        user_id = self._current_user.id
        self._current_user = None
        logger.info(f"User {user_id} logged out")
        self._notify(SessionEvent.LOGGED_OUT, user_id)

    def register(self, name: str, email: str, password: str, confirm_password: str) -> RegisterResult:
        """
        Create an account without logging in. Failures are reported in the
        result's ``reason`` instead of being raised.
        """
        try:
            self._validate_registration(name, email, password, confirm_password)
            user = User(id=self.directory.new_id(), name=name.strip(), email=email)
            self.directory.insert(user)
        except (ValidationFailed, Conflict) as e:
            logger.warning(f"Registration rejected for {email}: {e.message}")
            error = "conflict" if isinstance(e, Conflict) else "validation"
            return RegisterResult(success=False, reason=e.message, error=error)

        logger.info(f"Registered user {user.id}")
        self._notify(SessionEvent.REGISTERED, user)
        return RegisterResult(success=True, user=user)

    def _validate_registration(self, name, email, password, confirm_password):
        if not name or not name.strip():
            raise ValidationFailed("Name is required")
        if not email or "@" not in email:
            raise ValidationFailed("Please enter a valid email address")
        if len(password or "") < self.min_password_length:
            raise ValidationFailed(
                f"Password must be at least {self.min_password_length} characters"
            )
        if password != confirm_password:
            raise ValidationFailed("Passwords do not match")

    # ------------ Profile ------------

    def get_user(self, user_id: str) -> User:
        user = self.directory.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def update_profile(self, updated_user: User) -> User:
        """Replace the stored user wholesale. Fields are not merged."""
        self.directory.replace(updated_user)
        if self._current_user is not None and self._current_user.id == updated_user.id:
            self._current_user = updated_user
        self._notify(SessionEvent.PROFILE_UPDATED, updated_user)
        return updated_user

    def _update_current(self, **changes) -> User:
        user = self._require_user()
        return self.update_profile(user.model_copy(update=changes, deep=True))

    def update_background_info(self, text: str) -> User:
        return self._update_current(background_info=text)

    def set_profile_image(self, data: Optional[bytes]) -> User:
        return self._update_current(profile_image=data)

    def set_background_image(self, data: Optional[bytes]) -> User:
        return self._update_current(background_image=data)

    def set_teams(self, teams: List[str]) -> User:
        return self._update_current(teams=list(teams))

    def add_team(self, team: str) -> User:
        user = self._require_user()
        team = team.strip()
        if not team or team in user.teams:
            return user
        return self._update_current(teams=user.teams + [team])

    def remove_team(self, team: str) -> User:
        user = self._require_user()
        if team not in user.teams:
            raise NotFound(f"Team {team!r} is not on your profile")
        teams = list(user.teams)
        teams.remove(team)
        return self._update_current(teams=teams)

    def change_email(self, new_email: str, password: str) -> User:
        user = self._require_user()
        if not new_email or "@" not in new_email:
            raise ValidationFailed("Please enter a valid email address")
        if new_email == user.email:
            raise ValidationFailed("New email must be different from the current one")
        if len(password or "") < self.min_password_length:
            raise ValidationFailed("Incorrect password. Please try again.")
        return self._update_current(email=new_email)

    def upload_video(self, title: str, url: Optional[str], thumbnail_image: Optional[bytes] = None) -> Video:
        user = self._require_user()
        if not title or not url:
            raise ValidationFailed("Please provide a title and a video")
        video = Video(
            id=new_object_id(),
            title=title,
            url=url,
            thumbnail_image=thumbnail_image,
            upload_date=utcnow(),
        )
        self._update_current(videos=user.videos + [video])
        logger.info(f"User {user.id} uploaded video {video.id}")
        return video

    # ------------ Search ------------

    def search(self, query: str) -> List[User]:
        results = self.search_engine.search(query)
        if query:
            self._notify(SessionEvent.SEARCHED, results)
        return results

    @property
    def recent_searches(self) -> List[str]:
        return self.search_engine.recent_searches

    def clear_search_history(self):
        self.search_engine.clear_history()
        self._notify(SessionEvent.HISTORY_CLEARED)

    def suggested_users(self) -> List[User]:
        return self.search_engine.suggested_users()

    # ------------ Conversations ------------

    def list_conversations(self, filter_query: Optional[str] = None) -> List[Conversation]:
        current_id = self._current_user.id if self._current_user else None
        return self.conversations.list_conversations(filter_query, current_user_id=current_id)

    def get_conversation(self, conversation_id: str) -> Conversation:
        return self.conversations.get(conversation_id)

    def conversation_participants(self, conversation: Conversation) -> List[User]:
        return self.conversations.participants(conversation)

    def other_participants(self, conversation: Conversation) -> List[User]:
        current_id = self._current_user.id if self._current_user else None
        return [u for u in self.conversation_participants(conversation) if u.id != current_id]

    def start_conversation(self, other_user_id: str) -> Conversation:
        user = self._require_user()
        if other_user_id == user.id:
            raise ValidationFailed("You cannot start a conversation with yourself")
        self.get_user(other_user_id)

        existing = self.conversations.find_between(user.id, other_user_id)
        if existing:
            return existing

        conversation = Conversation(
            id=self.conversations.new_id(),
            participant_ids=[user.id, other_user_id],
        )
        self.conversations.add(conversation)
        self._notify(SessionEvent.CONVERSATION_STARTED, conversation)
        return conversation

    def send_message(self, conversation_id: str, content: str) -> Message:
        user = self._require_user()
        if not content or not content.strip():
            raise ValidationFailed("Message cannot be empty")

        message = Message(
            id=new_object_id(),
            sender_id=user.id,
            content=content,
            timestamp=utcnow(),
        )
        self.conversations.append_message(conversation_id, message)
        self._notify(SessionEvent.MESSAGE_SENT, message)
        return message
