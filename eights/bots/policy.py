"""
Bot Policy - Interface for opponent decision-making.

A BotPolicy takes a read-only view of the table and returns a decision.
Decisions are always one of:
- Play a legal card (with the suit to call when the card is an 8)
- Draw, when nothing in hand is legal

Policies never touch GameState directly; the game loop applies the
decision through the reducer.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
import random

from ..engine_core.action import Action
from ..engine_core.cards import Card, Suit
from ..engine_core.reducer import matches
from ..engine_core.state import GameState, Party


@dataclass(frozen=True)
class OpponentView:
    """
    Read-only snapshot handed to a policy.

    Holds only what the acting side may know: its own hand, the active
    suit, the top card and how many cards are left to draw.
    """
    party: Party
    hand: tuple[Card, ...]
    active_suit: Suit | None
    top_card: Card | None
    deck_size: int

    @classmethod
    def from_state(cls, state: GameState, party: Party = Party.OPPONENT) -> OpponentView:
        return cls(
            party=party,
            hand=state.hand_of(party),
            active_suit=state.active_suit,
            top_card=state.top_card,
            deck_size=state.deck_size,
        )

    def legal_cards(self) -> list[Card]:
        """Legal cards in hand order."""
        return [c for c in self.hand if matches(c, self.active_suit, self.top_card)]


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains the action to take and an explanation for logs/debugging.
    """
    action: Action
    explanation: str = ""
    evaluated_actions: int = 0


def choose_suit_for_hand(hand: tuple[Card, ...] | list[Card], rng: random.Random) -> Suit:
    """
    Pick the suit to call after playing an 8.

    The most common suit in the remaining hand wins. A tie for the top
    count, or an empty hand, falls back to a uniformly random suit.
    """
    counts = Counter(card.suit for card in hand)
    if counts:
        ranked = counts.most_common()
        best_suit, best_count = ranked[0]
        tied = len(ranked) > 1 and ranked[1][1] == best_count
        if not tied:
            return best_suit
    return rng.choice(list(Suit))


class BotPolicy(ABC):
    """
    Abstract base class for opponent policies.

    Implementations must only ever return legal plays: the reducer treats
    an illegal opponent move as an engine bug.
    """

    @abstractmethod
    def select_action(self, view: OpponentView) -> BotDecision:
        """
        Select an action for the side described by `view`.

        Args:
            view: Read-only snapshot of the acting side's knowledge

        Returns:
            BotDecision with the selected action
        """
        pass

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class GreedyPolicy(BotPolicy):
    """
    Greedy policy - plays the first legal card, saving 8s when it can.

    No lookahead: it never holds back a playable card and never considers
    future turns. Draws only when nothing is legal.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def select_action(self, view: OpponentView) -> BotDecision:
        legal = view.legal_cards()
        if not legal:
            return BotDecision(
                action=Action.draw(view.party),
                explanation="No legal card, drawing",
            )

        card = next((c for c in legal if not c.is_wild), legal[0])
        if not card.is_wild:
            return BotDecision(
                action=Action.play(view.party, card),
                explanation=f"Playing first legal card {card.card_id}",
                evaluated_actions=len(legal),
            )

        remaining = tuple(c for c in view.hand if c != card)
        suit = choose_suit_for_hand(remaining, self.rng)
        return BotDecision(
            action=Action.play(view.party, card, suit=suit),
            explanation=f"Only 8s are legal, playing {card.card_id} and calling {suit.value}",
            evaluated_actions=len(legal),
        )


class RandomPolicy(BotPolicy):
    """
    Random policy - plays a uniformly random legal card.

    Used for:
    - Simulations
    - Baseline comparison
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_action(self, view: OpponentView) -> BotDecision:
        legal = view.legal_cards()
        if not legal:
            return BotDecision(action=Action.draw(view.party), explanation="No legal card")

        card = self.rng.choice(legal)
        suit = None
        if card.is_wild:
            suit = self.rng.choice(list(Suit))
        return BotDecision(
            action=Action.play(view.party, card, suit=suit),
            explanation="Selected randomly",
            evaluated_actions=len(legal),
        )
