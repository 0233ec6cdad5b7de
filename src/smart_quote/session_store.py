from __future__ import annotations

import threading
import uuid
from collections import deque
from datetime import datetime
from typing import Deque, Dict

from pydantic import BaseModel

from .dictionaries import FIRST_QUOTE_NUMBER, RECENT_ITEMS_LIMIT
from .models.quote import QuoteConfig, QuoteItem
from .models.session import QuoteSession


class QuoteSessionStore:
    def __init__(self, *, first_number: int = FIRST_QUOTE_NUMBER) -> None:
        self._sessions: Dict[str, QuoteSession] = {}
        self._next_number = first_number
        self._lock = threading.Lock()

    def create_session(self) -> QuoteSession:
        with self._lock:
            session_id = self._generate_id()
            session = QuoteSession(id=session_id, config=QuoteConfig(number=self._next_number))
            self._next_number += 1
            self._sessions[session_id] = session
            return session

    def get_session(self, session_id: str) -> QuoteSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def _generate_id(self) -> str:
        ts = datetime.utcnow().strftime("%Y%m%d%H%M%S")
        suffix = uuid.uuid4().hex[:6]
        return f"quote_{ts}_{suffix}"


class RecentItem(BaseModel):
    name: str
    ncm: str
    packaging: str


class RecentItemCache:
    """Most-recent-first suggestions from item edits, kept for the process lifetime only."""

    def __init__(self, *, limit: int = RECENT_ITEMS_LIMIT) -> None:
        self._items: Deque[RecentItem] = deque(maxlen=limit)
        self._lock = threading.Lock()

    def remember(self, item: QuoteItem) -> None:
        if not item.name and not item.packaging:
            return
        entry = RecentItem(name=item.name, ncm=item.ncm, packaging=item.packaging)
        with self._lock:
            # One entry per name; a re-edited item moves to the front.
            for existing in list(self._items):
                if existing.name == entry.name:
                    self._items.remove(existing)
            self._items.appendleft(entry)

    def recent(self) -> list[RecentItem]:
        with self._lock:
            return list(self._items)


__all__ = ["QuoteSessionStore", "RecentItem", "RecentItemCache"]
