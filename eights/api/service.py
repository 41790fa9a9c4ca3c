"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to game loop commands
2. Manages sessions
3. Formats engine views for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field

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
    # Enums
    ErrorCode,
)
from ..config import EngineConfig
from ..engine_core.action import ActionResult
from ..engine_core.cards import Card, Suit
from ..session import SessionManager, Session, GameView, AsyncioScheduler


def _default_manager() -> SessionManager:
    return SessionManager(scheduler_factory=AsyncioScheduler, config=EngineConfig.from_env())


def card_info(card: Card) -> CardInfo:
    return CardInfo(
        card_id=card.card_id,
        suit=card.suit.value,
        rank=card.rank.value,
        is_wild=card.is_wild,
    )


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        session = service.create_session()
        response = service.play_card(session.session_id, PlayCardRequest(card_id="7-hearts"))
        if not response.success:
            ...  # response.error_code, e.g. ILLEGAL_MOVE
    """
    session_manager: SessionManager = field(default_factory=_default_manager)

    def create_session(self) -> SessionResponse:
        """Create a session and start dealing."""
        session = self.session_manager.create_session()
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str) -> bool:
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def get_game_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        # Polling counts as activity for stale-session cleanup
        session.touch()
        return self.view_to_response(session_id, session.game_loop.view())

    # =========================================================================
    # Commands
    # =========================================================================

    def start_game(self, session_id: str) -> CommandResponse | ErrorResponse:
        """Restart the game in an existing session."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        session.touch()
        return self._command_response(session, session.game_loop.start_game())

    def play_card(self, session_id: str, request: PlayCardRequest) -> CommandResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        try:
            card = Card.from_id(request.card_id)
        except ValueError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.INVALID_CARD)
        session.touch()
        return self._command_response(session, session.game_loop.play_card(card))

    def draw_card(self, session_id: str) -> CommandResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        session.touch()
        return self._command_response(session, session.game_loop.draw_card())

    def choose_suit(self, session_id: str, request: ChooseSuitRequest) -> CommandResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        try:
            suit = Suit(request.suit.lower())
        except ValueError:
            return ErrorResponse(
                error=f"Unknown suit: {request.suit!r}",
                error_code=ErrorCode.INVALID_SUIT,
                details={"valid_suits": [s.value for s in Suit]},
            )
        session.touch()
        return self._command_response(session, session.game_loop.choose_suit(suit))

    # =========================================================================
    # Formatting
    # =========================================================================

    def view_to_response(self, session_id: str, view: GameView) -> GameStateResponse:
        """Convert a GameView to its API model."""
        return GameStateResponse(
            session_id=session_id,
            status=view.status.value,
            turn=view.turn.value,
            winner=view.winner.value if view.winner else None,
            player_hand=[card_info(c) for c in view.player_hand],
            opponent_hand_size=view.opponent_hand_size,
            deck_size=view.deck_size,
            top_card=card_info(view.top_card) if view.top_card else None,
            active_suit=view.active_suit.value if view.active_suit else None,
            legal_moves=[card_info(c) for c in view.legal_moves],
            message=view.message.value,
            effects=[
                EffectInfo(
                    code=e.code.value,
                    party=e.party.value if e.party else None,
                    card=card_info(e.card) if e.card else None,
                    suit=e.suit.value if e.suit else None,
                )
                for e in view.effects
            ],
            turn_number=view.turn_number,
        )

    def _session_to_response(self, session: Session) -> SessionResponse:
        return SessionResponse(
            session_id=session.session_id,
            status=session.state.value,
            created_at=session.created_at,
            game_state=self.view_to_response(session.session_id, session.game_loop.view()),
        )

    def _command_response(self, session: Session, result: ActionResult) -> CommandResponse:
        return CommandResponse(
            session_id=session.session_id,
            success=result.success,
            error=result.error,
            error_code=result.error_code.value if result.error_code else None,
            game_state=self.view_to_response(session.session_id, session.game_loop.view()),
        )

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )
