"""
Engine Core - Deterministic game state management for Crazy Eights.

The engine is the runtime that:
1. Builds and shuffles the deck
2. Manages GameState
3. Decides move legality
4. Applies actions via the reducer
5. Detects the winner
"""

from .cards import Card, Suit, Rank, build_deck, shuffle_cards
from .state import GameState, GameStatus, Party, check_partition
from .action import Action, ActionType, ActionPayload, ActionResult, Effect, ErrorCode, MessageCode
from .reducer import Reducer, apply_action, is_legal, legal_moves, matches
from .errors import EngineError, DeckExhausted, InvariantViolation

__all__ = [
    "Card",
    "Suit",
    "Rank",
    "build_deck",
    "shuffle_cards",
    "GameState",
    "GameStatus",
    "Party",
    "check_partition",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Effect",
    "ErrorCode",
    "MessageCode",
    "Reducer",
    "apply_action",
    "is_legal",
    "legal_moves",
    "matches",
    "EngineError",
    "DeckExhausted",
    "InvariantViolation",
]
