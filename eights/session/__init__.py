"""
Session Module - Manages ephemeral game sessions.

A session represents one human seated against the computer:
- Created when a client asks for a table
- Holds the game loop, which owns the current game state
- Schedules the dealing delay and the opponent's moves
- Destroyed when the client leaves

Sessions are EPHEMERAL: no persistence of any kind.
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import GameLoop, GameView
from .scheduler import Scheduler, ScheduledTask, ManualScheduler, AsyncioScheduler

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameLoop",
    "GameView",
    "Scheduler",
    "ScheduledTask",
    "ManualScheduler",
    "AsyncioScheduler",
]
