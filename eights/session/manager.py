"""
Session Manager - Creates and manages game sessions.

A session is one human seated against the computer opponent:
- Created when a client asks for a table
- Holds a GameLoop (which owns the game state)
- Destroyed when the client leaves or the session goes stale

Sessions are in-memory only. Nothing is persisted.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import logging
import time
import uuid

from ..bots import BotPolicy
from ..config import EngineConfig
from ..engine_core.state import GameStatus
from .game_loop import GameLoop
from .scheduler import Scheduler, ManualScheduler

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Seated, game may be in any status
    GAME_OVER = "game_over"  # Last game finished, restart still allowed
    ENDED = "ended"  # Removed by the client
    ABANDONED = "abandoned"  # Removed as stale


@dataclass
class Session:
    """
    An ephemeral game session.

    Contains:
    - The game loop (engine + opponent + scheduler)
    - Timestamps for staleness checks
    - Session metadata
    """
    session_id: str
    game_loop: GameLoop
    created_at: float
    last_activity: float = 0.0
    ended_state: SessionState | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def state(self) -> SessionState:
        if self.ended_state is not None:
            return self.ended_state
        if self.game_loop.status == GameStatus.FINISHED:
            return SessionState.GAME_OVER
        return SessionState.ACTIVE

    def is_active(self) -> bool:
        """Check if session is still seated."""
        return self.ended_state is None

    def touch(self) -> None:
        self.last_activity = time.time()


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions with their own scheduler and opponent
    - Track active sessions
    - Clean up ended or stale sessions
    """

    def __init__(
        self,
        scheduler_factory: Callable[[], Scheduler] = ManualScheduler,
        config: EngineConfig | None = None,
    ):
        self._sessions: dict[str, Session] = {}
        self.scheduler_factory = scheduler_factory
        self.config = config or EngineConfig()

    def create_session(
        self,
        policy: BotPolicy | None = None,
        config: EngineConfig | None = None,
        start: bool = True,
    ) -> Session:
        """
        Create a new game session.

        Args:
            policy: Opponent policy (greedy by default)
            config: Per-session override of the manager's config
            start: Start dealing right away

        Returns:
            New Session
        """
        session_id = str(uuid.uuid4())
        loop = GameLoop(
            scheduler=self.scheduler_factory(),
            policy=policy,
            config=config or self.config,
        )
        now = time.time()
        session = Session(
            session_id=session_id,
            game_loop=loop,
            created_at=now,
            last_activity=now,
        )
        self._sessions[session_id] = session
        logger.info("Created session %s", session_id)

        if start:
            loop.start_game()
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "ended") -> bool:
        """
        End a session and clean up.

        Pending deal or opponent moves are cancelled so nothing fires
        against a dropped game. Returns False for an unknown session.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        session.game_loop.close()
        session.ended_state = SessionState.ENDED if reason == "ended" else SessionState.ABANDONED
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_idle_seconds: int = 3600) -> list[str]:
        """
        Remove sessions idle for longer than `max_idle_seconds`.

        Returns the removed session IDs.
        """
        current_time = time.time()
        stale = [
            session_id
            for session_id, session in self._sessions.items()
            if current_time - session.last_activity > max_idle_seconds
        ]
        for session_id in stale:
            self.end_session(session_id, reason="stale")
        return stale
