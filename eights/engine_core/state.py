"""
Game State - The complete Crazy Eights table at a point in time.

Design principles:
- Immutable-friendly: collections are tuples, mutations return new state
- Single owner: only the reducer produces new states
- Checkable: the card partition can be verified at any time
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from copy import deepcopy

from .cards import Card, Suit, FULL_DECK
from .errors import InvariantViolation


class GameStatus(Enum):
    """High-level game status."""
    NOT_STARTED = "not_started"
    DEALING = "dealing"
    IN_PROGRESS = "in_progress"
    AWAITING_SUIT_CHOICE = "awaiting_suit_choice"
    FINISHED = "finished"


class Party(Enum):
    """The two sides at the table."""
    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> Party:
        return Party.OPPONENT if self is Party.PLAYER else Party.PLAYER


@dataclass
class GameState:
    """
    Complete game state.

    The deck's draw end is its last element. The discard pile's last
    element is the top card. Hands keep insertion order, which is the
    stable order the opponent policy iterates in.
    """
    status: GameStatus = GameStatus.NOT_STARTED
    turn: Party = Party.PLAYER
    winner: Party | None = None

    deck: tuple[Card, ...] = ()
    player_hand: tuple[Card, ...] = ()
    opponent_hand: tuple[Card, ...] = ()
    discard_pile: tuple[Card, ...] = ()
    active_suit: Suit | None = None

    turn_number: int = 0
    # Incremented on every start_game; deferred tasks compare against it
    epoch: int = 0

    # History (for replay and logging)
    action_history: list[Any] = field(default_factory=list)

    @property
    def top_card(self) -> Card | None:
        """The active card of the discard pile."""
        return self.discard_pile[-1] if self.discard_pile else None

    @property
    def deck_size(self) -> int:
        return len(self.deck)

    @property
    def is_finished(self) -> bool:
        return self.status == GameStatus.FINISHED

    def hand_of(self, party: Party) -> tuple[Card, ...]:
        """Get the hand held by a party."""
        if party is Party.PLAYER:
            return self.player_hand
        if party is Party.OPPONENT:
            return self.opponent_hand
        raise InvariantViolation(f"Unknown party: {party!r}")

    def with_hand(self, party: Party, hand: tuple[Card, ...]) -> GameState:
        """Return new state with a party's hand replaced."""
        if party is Party.PLAYER:
            return self._copy_with(player_hand=hand)
        if party is Party.OPPONENT:
            return self._copy_with(opponent_hand=hand)
        raise InvariantViolation(f"Unknown party: {party!r}")

    def all_cards(self) -> list[Card]:
        """Every card on the table, across all four collections."""
        return [
            *self.deck,
            *self.player_hand,
            *self.opponent_hand,
            *self.discard_pile,
        ]

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return GameState(
            status=kwargs.get("status", self.status),
            turn=kwargs.get("turn", self.turn),
            winner=kwargs.get("winner", self.winner),
            deck=kwargs.get("deck", self.deck),
            player_hand=kwargs.get("player_hand", self.player_hand),
            opponent_hand=kwargs.get("opponent_hand", self.opponent_hand),
            discard_pile=kwargs.get("discard_pile", self.discard_pile),
            active_suit=kwargs.get("active_suit", self.active_suit),
            turn_number=kwargs.get("turn_number", self.turn_number),
            epoch=kwargs.get("epoch", self.epoch),
            action_history=kwargs.get("action_history", list(self.action_history)),
        )

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)


def check_partition(state: GameState) -> None:
    """
    Verify deck, hands and discard pile form exactly the 52-card universe.

    Only meaningful once cards are on the table; a state with no cards
    (not started, or dealing) passes trivially.
    """
    cards = state.all_cards()
    if not cards:
        return
    if len(cards) != len(FULL_DECK):
        raise InvariantViolation(
            f"Card partition holds {len(cards)} cards, expected {len(FULL_DECK)}"
        )
    if set(cards) != FULL_DECK:
        raise InvariantViolation("Card partition has duplicates or foreign cards")
