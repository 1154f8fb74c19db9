from __future__ import annotations

import threading
import uuid
from typing import Dict, Optional

from ...engine.game import Game


class SessionLimitError(RuntimeError):
    """Raised when the store already holds ``max_sessions`` games."""


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s, up to `max_sessions`
    - Retrieve existing sessions by `game_id`
    - Replace a session's game (new position)
    - Delete sessions
    """

    def __init__(self, max_sessions: int = 1024) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be >= 1")
        self.max_sessions = max_sessions
        self._lock = threading.RLock()
        self._games: Dict[str, Game] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)

    def create(self, game: Game) -> str:
        """Store `game` under a fresh id and return the id.

        Raises:
            SessionLimitError: If the store is full.
        """
        gid = str(uuid.uuid4())
        with self._lock:
            if len(self._games) >= self.max_sessions:
                raise SessionLimitError(f"session limit reached ({self.max_sessions})")
            self._games[gid] = game
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            return self._games.get(game_id)

    def set(self, game_id: str, game: Game) -> None:
        with self._lock:
            if game_id not in self._games:
                raise KeyError(game_id)
            self._games[game_id] = game

    def delete(self, game_id: str) -> bool:
        """Drop a session; returns whether it existed."""
        with self._lock:
            return self._games.pop(game_id, None) is not None
