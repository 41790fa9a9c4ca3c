"""
Pytest fixtures for Eights tests.
"""

import random

import pytest

from ..config import EngineConfig
from ..engine_core.cards import Card, Suit, Rank, build_deck
from ..engine_core.state import GameState, GameStatus, Party
from ..session import GameLoop, ManualScheduler


def card(card_id: str) -> Card:
    """Shorthand: card('8-spades')."""
    return Card.from_id(card_id)


def make_state(
    player_hand,
    opponent_hand,
    top: str,
    active_suit: Suit | None = None,
    turn: Party = Party.PLAYER,
    status: GameStatus = GameStatus.IN_PROGRESS,
    deck=None,
) -> GameState:
    """
    Build an in-progress state with the given hands and top card.

    Every card not placed explicitly goes to the deck (in construction
    order, so the last card of build_deck() is drawn first) unless `deck`
    is given, in which case the leftovers go under the top card in the
    discard pile. Either way the 52-card partition holds.
    """
    player = tuple(card(c) for c in player_hand)
    opponent = tuple(card(c) for c in opponent_hand)
    top_card = card(top)
    placed = set(player) | set(opponent) | {top_card}

    if deck is None:
        deck_cards = tuple(c for c in build_deck() if c not in placed)
        discard = (top_card,)
    else:
        deck_cards = tuple(card(c) for c in deck)
        placed |= set(deck_cards)
        discard = tuple(c for c in build_deck() if c not in placed) + (top_card,)

    return GameState(
        status=status,
        turn=turn,
        deck=deck_cards,
        player_hand=player,
        opponent_hand=opponent,
        discard_pile=discard,
        active_suit=active_suit or top_card.suit,
        turn_number=1,
        epoch=1,
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def full_deck() -> list[Card]:
    return build_deck()


@pytest.fixture
def fresh_state() -> GameState:
    """A never-started game."""
    return GameState()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig(deal_delay=0.5, opponent_delay=1.5, seed=7)


@pytest.fixture
def game_loop(scheduler: ManualScheduler, config: EngineConfig) -> GameLoop:
    """A game loop that has not started yet."""
    return GameLoop(scheduler=scheduler, config=config)


@pytest.fixture
def dealt_loop(game_loop: GameLoop, scheduler: ManualScheduler, config: EngineConfig) -> GameLoop:
    """A game loop that has finished dealing; it is the player's turn."""
    game_loop.start_game()
    scheduler.advance(config.deal_delay)
    assert game_loop.status == GameStatus.IN_PROGRESS
    return game_loop


@pytest.fixture
def eight_of_spades() -> Card:
    return Card(suit=Suit.SPADES, rank=Rank.EIGHT)
