"""
Integration tests - End-to-end workflow tests.

Tests the complete flow:
1. Create session
2. Deal
3. Alternate human and computer turns until someone goes out
4. Tear the session down
"""

import random

import pytest

from ..bots import GreedyPolicy, OpponentView
from ..config import EngineConfig
from ..engine_core.action import ActionType, ErrorCode
from ..engine_core.cards import Suit
from ..engine_core.state import GameStatus, Party, check_partition
from ..session import GameLoop, ManualScheduler, SessionManager
from ..session.manager import SessionState

MAX_TURNS = 500


def play_out(seed: int):
    """
    Drive one seeded game with a greedy stand-in for the human.

    Yields the loop after every human command and after every opponent reply.
    """
    scheduler = ManualScheduler()
    config = EngineConfig(deal_delay=0.5, opponent_delay=1.5, seed=seed)
    loop = GameLoop(scheduler=scheduler, config=config)
    stand_in = GreedyPolicy(rng=random.Random(seed))

    loop.start_game()
    scheduler.advance(config.deal_delay)
    yield loop

    while loop.status != GameStatus.FINISHED and loop.state.turn_number < MAX_TURNS:
        action = stand_in.select_action(OpponentView.from_state(loop.state, Party.PLAYER)).action
        if action.action_type == ActionType.DRAW_CARD:
            result = loop.draw_card()
        else:
            result = loop.play_card(action.payload.card)
            assert result.success
            if loop.status == GameStatus.AWAITING_SUIT_CHOICE:
                yield loop
                result = loop.choose_suit(action.payload.suit)
        assert result.success
        yield loop

        scheduler.advance(config.opponent_delay)
        yield loop


class TestFullGameFlow:
    """Tests for complete seeded games."""

    @pytest.mark.parametrize("seed", range(25))
    def test_partition_holds_throughout(self, seed):
        for loop in play_out(seed):
            check_partition(loop.state)
            assert len(loop.state.all_cards()) == 52

    @pytest.mark.parametrize("seed", range(25))
    def test_turns_alternate(self, seed):
        previous_turn_number = 0
        for loop in play_out(seed):
            state = loop.state
            assert state.turn_number >= previous_turn_number
            previous_turn_number = state.turn_number
            if state.status == GameStatus.IN_PROGRESS:
                # The opponent never holds the turn once its reply has run
                assert state.turn == Party.PLAYER or loop.opponent_pending
            if state.status == GameStatus.AWAITING_SUIT_CHOICE:
                assert state.turn == Party.PLAYER
                assert state.top_card.is_wild

    @pytest.mark.parametrize("seed", range(25))
    def test_winner_has_empty_hand(self, seed):
        loop = None
        for loop in play_out(seed):
            pass
        if loop.status == GameStatus.FINISHED:
            assert loop.state.hand_of(loop.winner) == ()
            assert loop.state.hand_of(loop.winner.other) != ()
            assert not loop.opponent_pending

    def test_finished_game_is_terminal(self):
        finished = None
        for seed in range(50):
            for loop in play_out(seed):
                pass
            if loop.status == GameStatus.FINISHED:
                finished = loop
                break
        assert finished is not None

        before = finished.state
        for result in (
            finished.draw_card(),
            finished.play_card(before.discard_pile[0]),
            finished.choose_suit(Suit.HEARTS),
        ):
            assert not result.success
            assert result.error_code == ErrorCode.GAME_OVER
        assert finished.state is before

        finished.start_game()
        assert finished.status == GameStatus.DEALING

    def test_same_seed_same_deal(self):
        first = next(play_out(99)).state
        second = next(play_out(99)).state

        assert first.player_hand == second.player_hand
        assert first.opponent_hand == second.opponent_hand
        assert first.top_card == second.top_card


class TestSessionLifecycle:
    """Tests for the session manager."""

    @pytest.fixture
    def manager(self, config):
        return SessionManager(scheduler_factory=ManualScheduler, config=config)

    def test_session_lifecycle(self, manager):
        session = manager.create_session()
        session_id = session.session_id

        assert session_id in manager.list_active_sessions()
        assert session.state == SessionState.ACTIVE
        assert session.game_loop.status == GameStatus.DEALING

        assert manager.end_session(session_id)
        assert session_id not in manager.list_active_sessions()
        assert session.state == SessionState.ENDED
        assert manager.get_session(session_id) is None

    def test_ending_cancels_pending_deal(self, manager, config):
        session = manager.create_session()
        scheduler = session.game_loop.scheduler

        manager.end_session(session.session_id)
        scheduler.advance(config.deal_delay)

        assert session.game_loop.status == GameStatus.DEALING

    def test_unstarted_session(self, manager):
        session = manager.create_session(start=False)
        assert session.game_loop.status == GameStatus.NOT_STARTED

    def test_cleanup_stale_sessions(self, manager):
        idle = manager.create_session()
        fresh = manager.create_session()
        idle.last_activity -= 7200

        removed = manager.cleanup_stale_sessions(max_idle_seconds=3600)

        assert removed == [idle.session_id]
        assert idle.state == SessionState.ABANDONED
        assert manager.list_active_sessions() == [fresh.session_id]


class TestEngineConfig:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        for name in ("EIGHTS_DEAL_DELAY", "EIGHTS_OPPONENT_DELAY", "EIGHTS_SEED"):
            monkeypatch.delenv(name, raising=False)

        config = EngineConfig.from_env()

        assert config.deal_delay == 0.5
        assert config.opponent_delay == 1.5
        assert config.hand_size == 8
        assert config.seed is None

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("EIGHTS_DEAL_DELAY", "0.25")
        monkeypatch.setenv("EIGHTS_OPPONENT_DELAY", "2")
        monkeypatch.setenv("EIGHTS_SEED", "42")

        config = EngineConfig.from_env()

        assert config.deal_delay == 0.25
        assert config.opponent_delay == 2.0
        assert config.seed == 42

    @pytest.mark.parametrize("name,value", [
        ("EIGHTS_DEAL_DELAY", "soon"),
        ("EIGHTS_OPPONENT_DELAY", "-1"),
        ("EIGHTS_SEED", "1.5"),
    ])
    def test_bad_values_name_the_variable(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ValueError, match=name):
            EngineConfig.from_env()

    def test_instant(self):
        config = EngineConfig.instant(seed=3)

        assert config.deal_delay == 0
        assert config.opponent_delay == 0
        assert config.seed == 3
