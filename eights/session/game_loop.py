"""
Game Loop - Owns the live game and drives the computer opponent.

The loop:
1. Human calls a command (start_game, play_card, draw_card, choose_suit)
2. The reducer validates it and produces the next state
3. Win and partition checks run before the command returns
4. If it is now the opponent's turn, one opponent move is scheduled
5. The scheduled move asks the policy for a decision and applies it

Deferred steps (the deal and the opponent move) carry the epoch of the
game they were scheduled for. start_game bumps the epoch and cancels
anything pending, and a task that fires for an old epoch is discarded.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import logging
import random

from ..bots import BotPolicy, GreedyPolicy, OpponentView
from ..config import EngineConfig
from ..engine_core.action import Action, ActionResult, Effect, MessageCode
from ..engine_core.cards import Card, Suit
from ..engine_core.errors import EngineError
from ..engine_core.reducer import Reducer, legal_moves
from ..engine_core.state import GameState, GameStatus, Party
from .scheduler import Scheduler, ScheduledTask

logger = logging.getLogger(__name__)


@dataclass
class GameView:
    """
    Read-only projection of the game for the presentation layer.

    The opponent's hand is exposed only as a size.
    """
    status: GameStatus
    turn: Party
    winner: Party | None
    player_hand: tuple[Card, ...]
    opponent_hand_size: int
    deck_size: int
    top_card: Card | None
    active_suit: Suit | None
    legal_moves: list[Card]
    message: MessageCode
    effects: list[Effect] = field(default_factory=list)
    turn_number: int = 0
    epoch: int = 0


class GameLoop:
    """
    The game engine's controller.

    Usage:
        loop = GameLoop(scheduler=ManualScheduler())
        loop.start_game()
        scheduler.advance(loop.config.deal_delay)

        result = loop.play_card(card)
        if not result.success:
            show(result.message)  # invalid_move

        scheduler.advance(loop.config.opponent_delay)  # opponent replies
    """

    def __init__(
        self,
        scheduler: Scheduler,
        policy: BotPolicy | None = None,
        config: EngineConfig | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or EngineConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.scheduler = scheduler
        self.policy = policy or GreedyPolicy(rng=self.rng)
        self.reducer = Reducer(rng=self.rng, hand_size=self.config.hand_size)

        self.state = GameState()
        self.message = MessageCode.WELCOME
        self.last_effects: list[Effect] = []

        self._deal_task: ScheduledTask | None = None
        self._opponent_task: ScheduledTask | None = None
        self._listeners: list[Callable[[GameView], None]] = []

    # =========================================================================
    # Views
    # =========================================================================

    @property
    def status(self) -> GameStatus:
        return self.state.status

    @property
    def turn(self) -> Party:
        return self.state.turn

    @property
    def winner(self) -> Party | None:
        return self.state.winner

    @property
    def top_card(self) -> Card | None:
        return self.state.top_card

    @property
    def opponent_pending(self) -> bool:
        """Whether an opponent move is scheduled and not yet run."""
        return self._opponent_task is not None and self._opponent_task.pending

    def legal_moves(self) -> list[Card]:
        """Cards the human may play right now (empty when it is not their move)."""
        if self.state.status != GameStatus.IN_PROGRESS or self.state.turn != Party.PLAYER:
            return []
        return legal_moves(self.state, Party.PLAYER)

    def view(self) -> GameView:
        state = self.state
        return GameView(
            status=state.status,
            turn=state.turn,
            winner=state.winner,
            player_hand=state.player_hand,
            opponent_hand_size=len(state.opponent_hand),
            deck_size=state.deck_size,
            top_card=state.top_card,
            active_suit=state.active_suit,
            legal_moves=self.legal_moves(),
            message=self.message,
            effects=list(self.last_effects),
            turn_number=state.turn_number,
            epoch=state.epoch,
        )

    def subscribe(self, listener: Callable[[GameView], None]) -> Callable[[], None]:
        """Call `listener` with a fresh view after every change. Returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # =========================================================================
    # Commands (human side)
    # =========================================================================

    def start_game(self) -> ActionResult:
        """Start or restart. Any pending deal or opponent move is dropped."""
        self._cancel_pending()
        result = self._apply(Action.start_game())
        self._deal_task = self.scheduler.schedule(
            self.config.deal_delay,
            self._run_deal,
            name="deal",
            epoch=self.state.epoch,
        )
        logger.info("Game %d started, dealing", self.state.epoch)
        return result

    def play_card(self, card: Card) -> ActionResult:
        return self._apply(Action.play(Party.PLAYER, card))

    def draw_card(self) -> ActionResult:
        return self._apply(Action.draw(Party.PLAYER))

    def choose_suit(self, suit: Suit) -> ActionResult:
        return self._apply(Action.choose_suit(suit))

    def close(self) -> None:
        """Drop pending work; used when a session ends."""
        self._cancel_pending()
        self._listeners.clear()

    # =========================================================================
    # Internals
    # =========================================================================

    def _apply(self, action: Action) -> ActionResult:
        logger.debug("Applying %s (epoch %d)", action.action_type.value, self.state.epoch)
        try:
            result = self.reducer.apply(self.state, action)
        except EngineError:
            logger.exception("Engine invariant broken by %s", action.action_type.value)
            raise

        self.last_effects = result.effects
        if result.message is not None:
            self.message = result.message

        if not result.success:
            logger.info("Rejected %s: %s", action.action_type.value, result.error)
            self._notify()
            return result

        self.state = result.new_state
        self._after_change()
        return result

    def _after_change(self) -> None:
        """Keep the opponent task in step with the state, then notify."""
        state = self.state
        if state.status == GameStatus.FINISHED:
            self.scheduler.cancel(self._opponent_task)
            self._opponent_task = None
            logger.info("Game %d finished, winner %s", state.epoch, state.winner.value)
        elif (
            state.status == GameStatus.IN_PROGRESS
            and state.turn == Party.OPPONENT
            and not self.opponent_pending
        ):
            self._opponent_task = self.scheduler.schedule(
                self.config.opponent_delay,
                self._run_opponent,
                name="opponent",
                epoch=state.epoch,
            )
        self._notify()

    def _run_deal(self, task: ScheduledTask) -> None:
        if task is not self._deal_task or task.epoch != self.state.epoch:
            logger.debug("Discarding stale deal from epoch %d", task.epoch)
            return
        self._deal_task = None
        self._apply(Action.deal())

    def _run_opponent(self, task: ScheduledTask) -> None:
        if task is self._opponent_task:
            self._opponent_task = None
        state = self.state
        if (
            task.epoch != state.epoch
            or state.status != GameStatus.IN_PROGRESS
            or state.turn != Party.OPPONENT
        ):
            logger.debug("Discarding stale opponent move from epoch %d", task.epoch)
            return

        decision = self.policy.select_action(OpponentView.from_state(state, Party.OPPONENT))
        logger.debug("%s: %s", self.policy.get_name(), decision.explanation)
        self._apply(decision.action)

    def _cancel_pending(self) -> None:
        self.scheduler.cancel(self._deal_task)
        self.scheduler.cancel(self._opponent_task)
        self._deal_task = None
        self._opponent_task = None

    def _notify(self) -> None:
        if not self._listeners:
            return
        view = self.view()
        for listener in list(self._listeners):
            listener(view)
