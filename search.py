from typing import Callable, List, Optional

from database import UserDirectory
from logging_manager import get_logger
from schemas import User

logger = get_logger(prefix="[Search]")

SuggestionProvider = Callable[[UserDirectory], List[User]]


class SearchEngine:
    """
    Substring search over the user directory plus a short history of the
    distinct queries that were run, most recent first.
    """

    def __init__(
        self,
        directory: UserDirectory,
        history_limit: int = 5,
        suggested_user_ids: Optional[List[str]] = None,
        suggestion_provider: Optional[SuggestionProvider] = None,
    ):
        self._directory = directory
        self._history_limit = history_limit
        self._history: List[str] = []
        self._suggested_ids: List[str] = list(suggested_user_ids or [])
        self._suggestion_provider = suggestion_provider

    @property
    def recent_searches(self) -> List[str]:
        return list(self._history)

    def search(self, query: str) -> List[User]:
        if not query:
            return []

        needle = query.lower()
        results = [
            u for u in self._directory.all()
            if needle in u.name.lower() or needle in u.email.lower()
        ]
        self._record(query)
        logger.debug(f"Query {query!r} matched {len(results)} users")
        return results

    def clear_history(self):
        self._history.clear()

    def set_suggested_user_ids(self, user_ids: List[str]):
        self._suggested_ids = list(user_ids)

    def suggested_users(self) -> List[User]:
        if self._suggestion_provider is not None:
            return self._suggestion_provider(self._directory)
        return self._directory.resolve(self._suggested_ids)

    def _record(self, query: str):
        # Exact repeats keep their original position
        if query in self._history:
            return
        self._history.insert(0, query)
        del self._history[self._history_limit:]
