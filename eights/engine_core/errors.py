"""
Engine errors.

User mistakes (illegal moves, wrong turn) are NOT exceptions: they come back
as failed ActionResults. Exceptions are reserved for broken invariants,
which indicate an engine defect and must never be silently recovered.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for all engine errors."""


class DeckExhausted(EngineError):
    """No non-8 card left to start the discard pile."""


class InvariantViolation(EngineError):
    """
    An engine invariant was broken.

    Raised when the opponent policy submits an illegal move, when the card
    partition no longer covers the 52-card universe, or when an action
    names an unknown party.
    """
