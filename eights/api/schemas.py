"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between a client (the view layer)
and the engine. The engine never sends display text: `message` and effect
`code` values are message codes for the client to localize.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- INVALID_CARD: card_id is not a card of the standard deck
- INVALID_SUIT: suit is not one of hearts/diamonds/clubs/spades
- VALIDATION_ERROR: Request body is malformed
- INTERNAL_ERROR: Engine invariant broken

Rejected moves (wrong turn, illegal card, ...) are not errors: they come
back as CommandResponse with success=false.
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_CARD = "INVALID_CARD"
    INVALID_SUIT = "INVALID_SUIT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Card information for display."""
    card_id: str = Field(description="rank-suit, e.g. '8-spades'")
    suit: str
    rank: str
    is_wild: bool = False


class EffectInfo(BaseModel):
    """Something that happened during the last command."""
    code: str = Field(description="Message code, e.g. 'deck_empty'")
    party: Optional[str] = None
    card: Optional[CardInfo] = None
    suit: Optional[str] = None


# =============================================================================
# Request Models
# =============================================================================

class PlayCardRequest(BaseModel):
    """Play a card from the human's hand."""
    card_id: str = Field(description="rank-suit, e.g. '10-hearts'")


class ChooseSuitRequest(BaseModel):
    """Call a suit after playing an 8."""
    suit: str = Field(description="hearts, diamonds, clubs or spades")


# =============================================================================
# Response Models
# =============================================================================

class GameStateResponse(BaseModel):
    """Complete game state as the human may see it."""
    session_id: str
    status: str = Field(description="not_started, dealing, in_progress, awaiting_suit_choice, finished")
    turn: str = Field(description="player or opponent")
    winner: Optional[str] = None
    player_hand: list[CardInfo] = Field(default_factory=list)
    opponent_hand_size: int = 0
    deck_size: int = 0
    top_card: Optional[CardInfo] = None
    active_suit: Optional[str] = None
    legal_moves: list[CardInfo] = Field(default_factory=list)
    message: str = Field(description="Message code for the status line")
    effects: list[EffectInfo] = Field(default_factory=list)
    turn_number: int = 0


class SessionResponse(BaseModel):
    """Session status."""
    session_id: str
    status: str = Field(description="active, game_over")
    created_at: float
    game_state: GameStateResponse


class CommandResponse(BaseModel):
    """Result of a human command."""
    session_id: str
    success: bool
    error: Optional[str] = None
    error_code: Optional[str] = Field(
        None,
        description="WRONG_STATUS, NOT_YOUR_TURN, CARD_NOT_IN_HAND, ILLEGAL_MOVE, GAME_OVER",
    )
    game_state: GameStateResponse


class ErrorResponse(BaseModel):
    """Standardized error response."""
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None


class SessionListResponse(BaseModel):
    """List of active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response for ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    service: str = "eights-engine"
    version: str = "0.1.0"
