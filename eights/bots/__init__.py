"""
Bots module - Opponent policies.

Provides:
- BotPolicy: Interface for opponent decision-making
- GreedyPolicy: The default computer opponent
- RandomPolicy: Uniform baseline for simulations
- choose_suit_for_hand: Suit call after playing an 8
"""

from .policy import (
    BotPolicy,
    BotDecision,
    GreedyPolicy,
    RandomPolicy,
    OpponentView,
    choose_suit_for_hand,
)

__all__ = [
    "BotPolicy",
    "BotDecision",
    "GreedyPolicy",
    "RandomPolicy",
    "OpponentView",
    "choose_suit_for_hand",
]
