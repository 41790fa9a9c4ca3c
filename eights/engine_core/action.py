"""
Action System - Actions, effects, and results.

Actions represent:
1. Commands issued by a party (play a card, draw, choose a suit)
2. System steps (start a game, complete the deal)

All state changes flow through actions. Every applied action yields
effects, which tell the presentation layer what happened without carrying
any display text.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .cards import Card, Suit
from .state import Party


class ActionType(Enum):
    """Types of actions in the system."""
    # Party actions
    PLAY_CARD = "play_card"
    DRAW_CARD = "draw_card"
    CHOOSE_SUIT = "choose_suit"

    # System actions
    START_GAME = "start_game"
    DEAL = "deal"


class MessageCode(Enum):
    """
    Status message codes.

    The engine never produces display text; the view maps these codes to
    localized strings.
    """
    WELCOME = "welcome"
    DEALING = "dealing"
    YOUR_TURN = "your_turn"
    INVALID_MOVE = "invalid_move"
    CRAZY_EIGHT = "crazy_eight"
    OPPONENT_PLAYED_EIGHT = "opponent_played_eight"
    OPPONENT_THINKING = "opponent_thinking"
    DECK_EMPTY = "deck_empty"
    PLAYER_DREW = "player_drew"
    OPPONENT_DREW = "opponent_drew"
    PLAYER_CHOSE = "player_chose"
    PLAYER_WON = "player_won"
    OPPONENT_WON = "opponent_won"


class ErrorCode(Enum):
    """Why a command was rejected."""
    WRONG_STATUS = "WRONG_STATUS"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    ILLEGAL_MOVE = "ILLEGAL_MOVE"
    GAME_OVER = "GAME_OVER"
    NO_HANDLER = "NO_HANDLER"


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields; validation happens in
    the reducer.
    """
    party: Party | None = None
    card: Card | None = None
    suit: Suit | None = None


@dataclass
class Action:
    """
    A complete action to be applied to the game state.

    Actions are:
    - Logged for replay
    - Validated before application
    - Applied atomically by the reducer
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def start_game(cls) -> Action:
        return cls(action_type=ActionType.START_GAME)

    @classmethod
    def deal(cls) -> Action:
        return cls(action_type=ActionType.DEAL)

    @classmethod
    def play(cls, party: Party, card: Card, suit: Suit | None = None) -> Action:
        """Factory for play action. `suit` is the opponent's wild choice."""
        return cls(
            action_type=ActionType.PLAY_CARD,
            payload=ActionPayload(party=party, card=card, suit=suit),
        )

    @classmethod
    def draw(cls, party: Party) -> Action:
        """Factory for draw action."""
        return cls(
            action_type=ActionType.DRAW_CARD,
            payload=ActionPayload(party=party),
        )

    @classmethod
    def choose_suit(cls, suit: Suit) -> Action:
        """Factory for the human's suit choice after an 8."""
        return cls(
            action_type=ActionType.CHOOSE_SUIT,
            payload=ActionPayload(party=Party.PLAYER, suit=suit),
        )


@dataclass(frozen=True)
class Effect:
    """Something observable that happened while applying an action."""
    code: MessageCode
    party: Party | None = None
    card: Card | None = None
    suit: Suit | None = None


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - Error (if failed)
    - Effects (for UI updates)
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: ErrorCode | None = None
    effects: list[Effect] = field(default_factory=list)

    @property
    def message(self) -> MessageCode | None:
        """The status message the last effect calls for."""
        return self.effects[-1].code if self.effects else None

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: ErrorCode | None = None,
        effects: list[Effect] | None = None,
    ) -> ActionResult:
        """Create a failure result."""
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            effects=effects or [],
        )

    @classmethod
    def invalid_move(cls, error: str, error_code: ErrorCode) -> ActionResult:
        """A rejected human command; the status line shows invalid_move."""
        return cls.failure(
            error, error_code, [Effect(MessageCode.INVALID_MOVE, party=Party.PLAYER)]
        )

    @classmethod
    def success_with_state(cls, state: Any, effects: list[Effect] | None = None) -> ActionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, effects=effects or [])
