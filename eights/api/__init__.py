"""
API Module - Client interface.

Exposes the engine via REST API and WebSocket. A client:
1. Creates a session (the deal starts immediately)
2. Reads the game state
3. Plays, draws, or calls a suit
4. Watches the opponent's replies via polling or WebSocket

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    PlayCardRequest,
    ChooseSuitRequest,
    # Responses
    GameStateResponse,
    SessionResponse,
    CommandResponse,
    ErrorResponse,
    # Shared
    CardInfo,
    EffectInfo,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "PlayCardRequest",
    "ChooseSuitRequest",
    # Responses
    "GameStateResponse",
    "SessionResponse",
    "CommandResponse",
    "ErrorResponse",
    # Shared
    "CardInfo",
    "EffectInfo",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
