"""
In-memory collections backing the Scout core.

``UserDirectory`` is the master list of users and ``ConversationStore`` owns
conversations and their messages. Each store guards its own collection with
a lock; no operation needs both.
"""

import threading
from typing import Callable, Iterable, List, Optional

from bson import ObjectId

from errors import Conflict, NotFound
from logging_manager import get_logger
from schemas import Conversation, Message, User

logger = get_logger(prefix="[Database]")


def new_object_id() -> str:
    return str(ObjectId())


class UserDirectory:
    def __init__(self, id_factory: Callable[[], str] = new_object_id):
        self._users: List[User] = []
        self._lock = threading.RLock()
        self._id_factory = id_factory

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def new_id(self) -> str:
        with self._lock:
            while True:
                candidate = self._id_factory()
                if self._index_of(candidate) is None:
                    return candidate

    def all(self) -> List[User]:
        with self._lock:
            return list(self._users)

    def insert(self, user: User) -> User:
        with self._lock:
            if self._index_of(user.id) is not None:
                raise Conflict(f"User id {user.id} already exists")
            if self._email_owner(user.email) is not None:
                raise Conflict("Email already registered")
            self._users.append(user)
        logger.info(f"Inserted user {user.id}")
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            return next((u for u in self._users if u.email == email), None)

    def find_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            idx = self._index_of(user_id)
            return self._users[idx] if idx is not None else None

    def replace(self, user: User) -> User:
        """Overwrite the stored record with the same id. Never inserts."""
        with self._lock:
            idx = self._index_of(user.id)
            if idx is None:
                raise NotFound(f"User {user.id} not found")
            owner = self._email_owner(user.email)
            if owner is not None and owner.id != user.id:
                raise Conflict("Email already registered")
            self._users[idx] = user
        logger.info(f"Replaced user {user.id}")
        return user

    def resolve(self, user_ids: Iterable[str]) -> List[User]:
        """Map ids to current records, skipping ids that are unknown."""
        with self._lock:
            found = (self.find_by_id(uid) for uid in user_ids)
            return [u for u in found if u is not None]

    def _index_of(self, user_id: str) -> Optional[int]:
        for i, u in enumerate(self._users):
            if u.id == user_id:
                return i
        return None

    def _email_owner(self, email: str) -> Optional[User]:
        return next((u for u in self._users if u.email == email), None)


class ConversationStore:
    def __init__(self, directory: UserDirectory, id_factory: Callable[[], str] = new_object_id):
        self._directory = directory
        self._conversations: List[Conversation] = []
        self._lock = threading.RLock()
        self._id_factory = id_factory

    def __len__(self) -> int:
        with self._lock:
            return len(self._conversations)

    def new_id(self) -> str:
        with self._lock:
            while True:
                candidate = self._id_factory()
                if self._find(candidate) is None:
                    return candidate

    def add(self, conversation: Conversation) -> Conversation:
        with self._lock:
            if self._find(conversation.id) is not None:
                raise Conflict(f"Conversation {conversation.id} already exists")
            self._conversations.append(conversation)
            added = self._snapshot(conversation)
        logger.info(f"Added conversation {conversation.id}")
        return added

    def get(self, conversation_id: str) -> Conversation:
        with self._lock:
            conversation = self._find(conversation_id)
            if conversation is None:
                raise NotFound("Conversation not found")
            return self._snapshot(conversation)

    def find_between(self, user_id: str, other_user_id: str) -> Optional[Conversation]:
        with self._lock:
            for c in self._conversations:
                if user_id in c.participant_ids and other_user_id in c.participant_ids:
                    return self._snapshot(c)
        return None

    def append_message(self, conversation_id: str, message: Message) -> Message:
        with self._lock:
            conversation = self._find(conversation_id)
            if conversation is None:
                raise NotFound("Conversation not found")
            conversation.messages.append(message)
        logger.info(f"Appended message {message.id} to conversation {conversation_id}")
        return message

    def participants(self, conversation: Conversation) -> List[User]:
        return self._directory.resolve(conversation.participant_ids)

    def list_conversations(
        self, filter_query: Optional[str] = None, current_user_id: Optional[str] = None
    ) -> List[Conversation]:
        with self._lock:
            conversations = [self._snapshot(c) for c in self._conversations]

        if filter_query:
            needle = filter_query.lower()

            def matches(c: Conversation) -> bool:
                return any(
                    needle in u.name.lower()
                    for u in self.participants(c)
                    if u.id != current_user_id
                )

            conversations = [c for c in conversations if matches(c)]

        return sorted(conversations, key=lambda c: c.last_activity_timestamp, reverse=True)

    def _snapshot(self, conversation: Conversation) -> Conversation:
        # Copies share message records but not the live message list
        return conversation.model_copy(update={"messages": list(conversation.messages)})

    def _find(self, conversation_id: str) -> Optional[Conversation]:
        return next((c for c in self._conversations if c.id == conversation_id), None)
