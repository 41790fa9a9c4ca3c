"""
Cards - Suits, ranks, and the fixed 52-card universe.

A Card is a value: two cards with the same suit and rank are the same card.
A standard deck holds exactly one of each, so `card_id` is unique and cards
only ever move between collections; they are never created mid-game.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import random


class Suit(Enum):
    """Card suits, in deck construction order."""
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"


class Rank(Enum):
    """Card ranks, in deck construction order."""
    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"


WILD_RANK = Rank.EIGHT


@dataclass(frozen=True)
class Card:
    """An immutable playing card."""
    suit: Suit
    rank: Rank

    @property
    def card_id(self) -> str:
        """Stable identity, e.g. '8-spades' or '10-hearts'."""
        return f"{self.rank.value}-{self.suit.value}"

    @property
    def is_wild(self) -> bool:
        return self.rank == WILD_RANK

    @classmethod
    def from_id(cls, card_id: str) -> Card:
        """Parse a card_id back into a Card."""
        rank_part, sep, suit_part = card_id.partition("-")
        if not sep:
            raise ValueError(f"Malformed card id: {card_id!r}")
        try:
            return cls(suit=Suit(suit_part), rank=Rank(rank_part))
        except ValueError:
            raise ValueError(f"Unknown card id: {card_id!r}") from None

    def __str__(self) -> str:
        return self.card_id


def build_deck() -> list[Card]:
    """Build the 52-card universe, suit by suit, in rank order."""
    return [Card(suit=suit, rank=rank) for suit in Suit for rank in Rank]


FULL_DECK: frozenset[Card] = frozenset(build_deck())


def shuffle_cards(cards: list[Card], rng: random.Random) -> list[Card]:
    """
    Return a shuffled copy of `cards` (Fisher-Yates).

    Every permutation is equally likely provided `rng` is uniform.
    The input list is left untouched.
    """
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled
