from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Callable

from gradtrack.config import Settings
from gradtrack.types import ChatTurn


class ChatSessionStore:
    """Conversation context per chat session, bounded by count, age and length.

    Least recently used sessions are evicted once ``max_sessions`` is reached;
    sessions idle for longer than ``ttl_sec`` are dropped on access. Each
    session keeps at most ``max_messages`` turns, oldest first out.
    """

    def __init__(
        self,
        *,
        max_sessions: int = 256,
        ttl_sec: float = 12 * 60 * 60,
        max_messages: int = 40,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_sessions = max_sessions
        self.ttl_sec = ttl_sec
        self.max_messages = max_messages
        self._clock = clock
        self._sessions: OrderedDict[str, tuple[float, list[ChatTurn]]] = OrderedDict()
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> ChatSessionStore:
        return cls(
            max_sessions=settings.chat_session_max,
            ttl_sec=settings.chat_session_ttl_min * 60,
            max_messages=settings.chat_history_max_messages,
        )

    def get(self, session_id: str) -> list[ChatTurn]:
        now = self._clock()
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return []
            touched, history = entry
            if now - touched > self.ttl_sec:
                del self._sessions[session_id]
                return []
            self._sessions[session_id] = (now, history)
            self._sessions.move_to_end(session_id)
            return list(history)

    def set(self, session_id: str, history: list[ChatTurn]) -> None:
        now = self._clock()
        trimmed = list(history)[-self.max_messages :] if self.max_messages > 0 else []
        with self._lock:
            self._sessions[session_id] = (now, trimmed)
            self._sessions.move_to_end(session_id)
            self._evict(now)

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def _evict(self, now: float) -> None:
        expired = [key for key, (touched, _) in self._sessions.items() if now - touched > self.ttl_sec]
        for key in expired:
            del self._sessions[key]
        while len(self._sessions) > self.max_sessions:
            self._sessions.popitem(last=False)
