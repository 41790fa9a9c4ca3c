"""
Eights - Crazy Eights Rules Engine

A deterministic, rules-driven engine for a two-player Crazy Eights game
(human vs. computer). The engine provides:
- Deck construction and unbiased shuffling
- Legal move evaluation
- Pure state transitions for every command
- A greedy opponent policy
- Cancellable scheduling for the dealing and opponent "think" delays
"""

__version__ = "0.1.0"
