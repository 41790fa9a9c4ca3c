"""
Tests for the game loop controller.

Tests:
- Dealing delay and restart
- Opponent scheduling and cancellation
- Stale task discarding
- Views and listeners
"""

import logging

import pytest

from ..bots import BotPolicy, BotDecision
from ..engine_core.action import Action, ActionType, ErrorCode, MessageCode
from ..engine_core.cards import Suit
from ..engine_core.errors import InvariantViolation
from ..engine_core.state import GameStatus, Party
from ..session import GameLoop, ManualScheduler
from .conftest import card, make_state


class LeakyScheduler(ManualScheduler):
    """A scheduler whose cancellations lose the race: tasks still fire."""

    def cancel(self, task):
        pass


class IllegalPolicy(BotPolicy):
    """Always plays the first card in hand, legal or not."""

    def select_action(self, view):
        return BotDecision(action=Action.play(view.party, view.hand[0]))


def seat(loop: GameLoop, state) -> GameLoop:
    loop.state = state
    return loop


class TestDealing:
    """Tests for the dealing delay."""

    def test_start_enters_dealing(self, game_loop, scheduler):
        result = game_loop.start_game()

        assert result.success
        assert game_loop.status == GameStatus.DEALING
        assert game_loop.message == MessageCode.DEALING
        assert len(scheduler.pending) == 1

    def test_deal_lands_after_delay(self, game_loop, scheduler, config):
        game_loop.start_game()
        scheduler.advance(config.deal_delay - 0.1)
        assert game_loop.status == GameStatus.DEALING

        scheduler.advance(0.2)
        assert game_loop.status == GameStatus.IN_PROGRESS
        assert game_loop.turn == Party.PLAYER
        assert len(game_loop.state.player_hand) == 8
        assert game_loop.message == MessageCode.YOUR_TURN

    def test_commands_rejected_while_dealing(self, game_loop):
        game_loop.start_game()

        assert game_loop.draw_card().error_code == ErrorCode.WRONG_STATUS
        assert game_loop.choose_suit(Suit.HEARTS).error_code == ErrorCode.WRONG_STATUS
        assert game_loop.play_card(card("3-clubs")).error_code == ErrorCode.WRONG_STATUS
        assert game_loop.status == GameStatus.DEALING

    def test_restart_supersedes_pending_deal(self, game_loop, scheduler, config):
        game_loop.start_game()
        scheduler.advance(config.deal_delay / 2)
        game_loop.start_game()

        # The first deal would have been due now
        scheduler.advance(config.deal_delay / 2)
        assert game_loop.status == GameStatus.DEALING

        scheduler.advance(config.deal_delay / 2)
        assert game_loop.status == GameStatus.IN_PROGRESS
        assert game_loop.state.epoch == 2
        assert [a.action_type for a in game_loop.state.action_history] == [
            ActionType.START_GAME, ActionType.DEAL,
        ]

    def test_stale_deal_discarded_when_cancel_loses_race(self, config):
        scheduler = LeakyScheduler()
        loop = GameLoop(scheduler=scheduler, config=config)
        loop.start_game()
        loop.start_game()

        scheduler.run_pending()

        assert loop.status == GameStatus.IN_PROGRESS
        assert loop.state.epoch == 2
        deals = [a for a in loop.state.action_history if a.action_type == ActionType.DEAL]
        assert len(deals) == 1


class TestOpponentTurn:
    """Tests for scheduling the computer's move."""

    def test_opponent_moves_after_delay(self, game_loop, scheduler, config):
        seat(game_loop, make_state(["7-hearts", "3-clubs"], ["2-spades", "9-hearts"], "5-hearts"))

        game_loop.play_card(card("7-hearts"))
        assert game_loop.turn == Party.OPPONENT
        assert game_loop.opponent_pending
        assert game_loop.message == MessageCode.OPPONENT_THINKING

        scheduler.advance(config.opponent_delay - 0.1)
        assert game_loop.turn == Party.OPPONENT

        scheduler.advance(0.2)
        assert game_loop.turn == Party.PLAYER
        assert game_loop.top_card == card("9-hearts")
        assert game_loop.message == MessageCode.YOUR_TURN
        assert not game_loop.opponent_pending

    def test_scenario_opponent_wins(self, game_loop, scheduler, config):
        """Opponent's last card is legal: it plays it and wins."""
        seat(game_loop, make_state(["7-hearts", "3-clubs"], ["2-hearts"], "5-hearts"))

        game_loop.play_card(card("7-hearts"))
        scheduler.advance(config.opponent_delay)

        assert game_loop.state.opponent_hand == ()
        assert game_loop.winner == Party.OPPONENT
        assert game_loop.status == GameStatus.FINISHED
        assert game_loop.message == MessageCode.OPPONENT_WON

    def test_opponent_draws_when_stuck(self, game_loop, scheduler, config):
        seat(game_loop, make_state(["3-clubs", "4-diamonds"], ["2-spades"], "5-hearts"))

        game_loop.draw_card()
        scheduler.advance(config.opponent_delay)

        assert len(game_loop.state.opponent_hand) == 2
        assert game_loop.turn == Party.PLAYER
        assert game_loop.message == MessageCode.OPPONENT_DREW

    def test_opponent_eight_calls_suit(self, game_loop, scheduler, config):
        seat(game_loop, make_state(["3-clubs", "4-diamonds"], ["8-spades", "2-clubs", "J-clubs"], "5-hearts"))

        game_loop.draw_card()
        scheduler.advance(config.opponent_delay)

        assert game_loop.top_card == card("8-spades")
        assert game_loop.state.active_suit == Suit.CLUBS
        assert game_loop.turn == Party.PLAYER
        assert game_loop.status == GameStatus.IN_PROGRESS

    def test_human_eight_waits_for_suit(self, game_loop, scheduler, config):
        seat(game_loop, make_state(["8-spades", "3-clubs"], ["2-spades", "9-hearts"], "5-hearts"))

        game_loop.play_card(card("8-spades"))
        assert game_loop.status == GameStatus.AWAITING_SUIT_CHOICE
        assert not game_loop.opponent_pending

        scheduler.advance(config.opponent_delay * 3)
        assert game_loop.status == GameStatus.AWAITING_SUIT_CHOICE

        game_loop.choose_suit(Suit.SPADES)
        assert game_loop.opponent_pending
        scheduler.advance(config.opponent_delay)
        assert game_loop.top_card == card("2-spades")

    def test_only_one_opponent_task(self, game_loop, scheduler):
        seat(game_loop, make_state(["3-clubs", "4-diamonds"], ["2-spades"], "5-hearts"))

        game_loop.draw_card()
        rejected = game_loop.draw_card()

        assert rejected.error_code == ErrorCode.NOT_YOUR_TURN
        assert len([t for t in scheduler.pending if t.name == "opponent"]) == 1

    def test_restart_cancels_opponent(self, game_loop, scheduler, config):
        seat(game_loop, make_state(["7-hearts", "3-clubs"], ["2-spades", "9-hearts"], "5-hearts"))
        game_loop.play_card(card("7-hearts"))

        game_loop.start_game()
        scheduler.advance(config.opponent_delay * 2)

        types = [a.action_type for a in game_loop.state.action_history]
        assert types == [ActionType.START_GAME, ActionType.DEAL]
        assert game_loop.turn == Party.PLAYER

    def test_stale_opponent_move_discarded(self, config):
        scheduler = LeakyScheduler()
        loop = seat(
            GameLoop(scheduler=scheduler, config=config),
            make_state(["7-hearts", "3-clubs"], ["2-spades", "9-hearts"], "5-hearts"),
        )
        loop.play_card(card("7-hearts"))
        loop.start_game()

        scheduler.run_pending()

        types = [a.action_type for a in loop.state.action_history]
        assert types == [ActionType.START_GAME, ActionType.DEAL]

    def test_illegal_opponent_move_fails_loudly(self, config, caplog):
        scheduler = ManualScheduler()
        loop = seat(
            GameLoop(scheduler=scheduler, config=config, policy=IllegalPolicy()),
            make_state(["7-hearts", "3-clubs"], ["2-spades", "9-hearts"], "5-hearts"),
        )
        loop.play_card(card("7-hearts"))

        with caplog.at_level(logging.ERROR):
            with pytest.raises(InvariantViolation):
                scheduler.advance(config.opponent_delay)
        assert any(r.levelno == logging.ERROR for r in caplog.records)


class TestViews:
    """Tests for read-only projections."""

    def test_view_hides_opponent_hand(self, dealt_loop):
        view = dealt_loop.view()

        assert view.opponent_hand_size == 8
        assert not hasattr(view, "opponent_hand")
        assert len(view.player_hand) == 8
        assert view.deck_size == 35

    def test_legal_moves_only_on_players_turn(self, game_loop):
        seat(game_loop, make_state(["7-hearts", "3-clubs"], ["2-spades"], "5-hearts"))
        assert game_loop.legal_moves() == [card("7-hearts")]

        game_loop.play_card(card("7-hearts"))
        assert game_loop.legal_moves() == []

    def test_rejected_move_sets_invalid_message(self, game_loop):
        seat(game_loop, make_state(["3-clubs", "4-clubs"], ["2-spades"], "K-diamonds"))
        before = game_loop.state

        result = game_loop.play_card(card("3-clubs"))

        assert not result.success
        assert game_loop.message == MessageCode.INVALID_MOVE
        assert game_loop.state is before

    def test_listeners_see_every_change(self, game_loop, scheduler, config):
        views = []
        unsubscribe = game_loop.subscribe(views.append)

        game_loop.start_game()
        scheduler.advance(config.deal_delay)
        assert [v.status for v in views] == [GameStatus.DEALING, GameStatus.IN_PROGRESS]

        unsubscribe()
        game_loop.draw_card()
        assert len(views) == 2

    def test_close_cancels_pending(self, game_loop, scheduler, config):
        game_loop.start_game()
        game_loop.close()
        scheduler.advance(config.deal_delay)

        assert game_loop.status == GameStatus.DEALING
