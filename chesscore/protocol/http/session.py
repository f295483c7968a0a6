from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from typing import Optional

from ...engine.game import Game


logger = logging.getLogger(__name__)

DEFAULT_MAX_GAMES = 1024


class InMemorySessionStore:
    """Thread-safe, bounded in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Retrieve existing sessions by `game_id` (a hit marks it recently used)
    - Replace session state
    - Evict the least recently used session once `max_games` is exceeded
    """

    def __init__(self, max_games: int = DEFAULT_MAX_GAMES) -> None:
        if max_games < 1:
            raise ValueError("max_games must be >= 1")
        self._lock = threading.RLock()
        self._games: "OrderedDict[str, Game]" = OrderedDict()
        self.max_games = max_games

    def create(self, game: Optional[Game] = None) -> str:
        """Create a new game session and return its `game_id`."""
        gid = str(uuid.uuid4())
        if game is None:
            game = Game.new()
        with self._lock:
            self._games[gid] = game
            self._evict()
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            game = self._games.get(game_id)
            if game is not None:
                self._games.move_to_end(game_id)
            return game

    def set(self, game_id: str, game: Game) -> None:
        with self._lock:
            if game_id not in self._games:
                raise KeyError(game_id)
            self._games[game_id] = game
            self._games.move_to_end(game_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)

    def _evict(self) -> None:
        while len(self._games) > self.max_games:
            gid, _ = self._games.popitem(last=False)
            logger.info("evicted game session", extra={"game_id": gid})
