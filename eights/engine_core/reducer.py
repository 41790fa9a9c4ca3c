"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Pure functions: (state, input) -> ActionResult(new_state, effects)
- Validates before applying
- Human mistakes come back as failed results; opponent mistakes raise
- Derived checks (win, card partition) run at the end of every command
"""

from __future__ import annotations
from dataclasses import dataclass, field
import random

from .cards import Card, Suit, build_deck, shuffle_cards
from .state import GameState, GameStatus, Party, check_partition
from .action import Action, ActionType, ActionResult, Effect, ErrorCode, MessageCode
from .errors import DeckExhausted, InvariantViolation

HAND_SIZE = 8


# =============================================================================
# Legality
# =============================================================================

def matches(card: Card, active_suit: Suit | None, top_card: Card | None) -> bool:
    """
    Whether `card` may be played given the active suit and top card.

    An 8 is always legal. Otherwise the card must match the active suit or
    the rank of the top card.
    """
    if card.is_wild:
        return True
    if card.suit == active_suit:
        return True
    return top_card is not None and card.rank == top_card.rank


def is_legal(state: GameState, card: Card) -> bool:
    """Whether `card` may be played on the current discard pile."""
    return matches(card, state.active_suit, state.top_card)


def legal_moves(state: GameState, party: Party) -> list[Card]:
    """Legal cards in a party's hand, in hand order."""
    return [card for card in state.hand_of(party) if is_legal(state, card)]


# =============================================================================
# Commands
# =============================================================================

def start_game(state: GameState) -> ActionResult:
    """
    Begin a new game from any state.

    The returned state is in DEALING with empty collections and a fresh
    epoch; deal() completes it.
    """
    new_state = GameState(status=GameStatus.DEALING, epoch=state.epoch + 1)
    return ActionResult.success_with_state(new_state, [Effect(MessageCode.DEALING)])


def deal(state: GameState, rng: random.Random, hand_size: int = HAND_SIZE) -> ActionResult:
    """
    Shuffle, deal both hands and turn up the starting card.

    Player hand first, then opponent hand, both from the head of the
    shuffled deck. The starting card is the first non-8 in what remains;
    any 8s skipped over stay where they were.
    """
    if state.status != GameStatus.DEALING:
        return ActionResult.failure(
            f"Cannot deal while {state.status.value}", ErrorCode.WRONG_STATUS
        )

    cards = shuffle_cards(build_deck(), rng)
    player_hand = tuple(cards[:hand_size])
    opponent_hand = tuple(cards[hand_size:2 * hand_size])
    remainder = cards[2 * hand_size:]

    start_index = next(
        (i for i, card in enumerate(remainder) if not card.is_wild), None
    )
    if start_index is None:
        raise DeckExhausted("No non-8 card left to start the discard pile")
    starter = remainder.pop(start_index)

    new_state = state._copy_with(
        status=GameStatus.IN_PROGRESS,
        turn=Party.PLAYER,
        winner=None,
        deck=tuple(remainder),
        player_hand=player_hand,
        opponent_hand=opponent_hand,
        discard_pile=(starter,),
        active_suit=starter.suit,
        turn_number=1,
    )
    return ActionResult.success_with_state(
        new_state, [Effect(MessageCode.YOUR_TURN, party=Party.PLAYER, card=starter)]
    )


def _command_error(state: GameState, party: Party) -> tuple[str, ErrorCode] | None:
    """Shared precondition for play and draw: in progress and party's turn."""
    if state.status == GameStatus.FINISHED:
        return "Game is over", ErrorCode.GAME_OVER
    if state.status != GameStatus.IN_PROGRESS:
        return f"Cannot act while {state.status.value}", ErrorCode.WRONG_STATUS
    if state.turn != party:
        return f"Not {party.value}'s turn", ErrorCode.NOT_YOUR_TURN
    return None


def _reject(party: Party, error: tuple[str, ErrorCode]) -> ActionResult:
    """Reject a human command; an opponent command here is an engine bug."""
    message, code = error
    if party is Party.OPPONENT:
        raise InvariantViolation(f"Opponent submitted an invalid command: {message}")
    return ActionResult.invalid_move(message, code)


def _pass_turn(state: GameState, **changes) -> GameState:
    return state._copy_with(
        turn=state.turn.other,
        turn_number=state.turn_number + 1,
        **changes,
    )


def _check_winner(state: GameState) -> tuple[GameState, list[Effect]]:
    """Finish the game if either hand is empty; player is checked first."""
    if not state.player_hand:
        winner, code = Party.PLAYER, MessageCode.PLAYER_WON
    elif not state.opponent_hand:
        winner, code = Party.OPPONENT, MessageCode.OPPONENT_WON
    else:
        return state, []
    finished = state._copy_with(status=GameStatus.FINISHED, winner=winner)
    return finished, [Effect(code, party=winner)]


def play_card(
    state: GameState,
    card: Card,
    party: Party,
    suit: Suit | None = None,
) -> ActionResult:
    """
    Play `card` from `party`'s hand onto the discard pile.

    `suit` is the opponent's wild choice and is required when the opponent
    plays an 8; the human picks a suit afterwards via choose_suit().
    """
    error = _command_error(state, party)
    if error is None:
        if card not in state.hand_of(party):
            error = f"Card {card.card_id} not in hand", ErrorCode.CARD_NOT_IN_HAND
        elif not is_legal(state, card):
            error = f"Card {card.card_id} does not match", ErrorCode.ILLEGAL_MOVE
    if error is not None:
        return _reject(party, error)

    hand = tuple(c for c in state.hand_of(party) if c != card)
    new_state = state.with_hand(party, hand)._copy_with(
        discard_pile=state.discard_pile + (card,),
    )

    if not card.is_wild:
        new_state = _pass_turn(new_state, active_suit=card.suit)
        code = MessageCode.OPPONENT_THINKING if party is Party.PLAYER else MessageCode.YOUR_TURN
        effects = [Effect(code, party=party, card=card)]
    elif party is Party.PLAYER:
        new_state = new_state._copy_with(status=GameStatus.AWAITING_SUIT_CHOICE)
        effects = [Effect(MessageCode.CRAZY_EIGHT, party=party, card=card)]
    else:
        if suit is None:
            raise InvariantViolation("Opponent played an 8 without choosing a suit")
        new_state = _pass_turn(new_state, active_suit=suit)
        effects = [Effect(MessageCode.OPPONENT_PLAYED_EIGHT, party=party, card=card, suit=suit)]

    new_state, win_effects = _check_winner(new_state)
    return ActionResult.success_with_state(new_state, effects + win_effects)


def draw_card(state: GameState, party: Party) -> ActionResult:
    """
    Draw one card and pass the turn.

    The turn passes even when the drawn card would be playable. With an
    empty deck nothing is drawn and the turn is forfeited.
    """
    error = _command_error(state, party)
    if error is not None:
        return _reject(party, error)

    if not state.deck:
        new_state = _pass_turn(state)
        return ActionResult.success_with_state(
            new_state, [Effect(MessageCode.DECK_EMPTY, party=party)]
        )

    drawn = state.deck[-1]
    new_state = state.with_hand(party, state.hand_of(party) + (drawn,))
    new_state = _pass_turn(new_state, deck=state.deck[:-1])

    if party is Party.PLAYER:
        effect = Effect(MessageCode.PLAYER_DREW, party=party, card=drawn)
    else:
        # The opponent's card stays hidden
        effect = Effect(MessageCode.OPPONENT_DREW, party=party)
    return ActionResult.success_with_state(new_state, [effect])


def choose_suit(state: GameState, suit: Suit) -> ActionResult:
    """Set the active suit after the human played an 8."""
    if state.status == GameStatus.FINISHED:
        return ActionResult.invalid_move("Game is over", ErrorCode.GAME_OVER)
    if state.status != GameStatus.AWAITING_SUIT_CHOICE:
        return ActionResult.invalid_move(
            f"No suit choice pending while {state.status.value}", ErrorCode.WRONG_STATUS
        )

    new_state = _pass_turn(state, active_suit=suit, status=GameStatus.IN_PROGRESS)
    return ActionResult.success_with_state(
        new_state, [Effect(MessageCode.PLAYER_CHOSE, party=Party.PLAYER, suit=suit)]
    )


# =============================================================================
# Dispatch
# =============================================================================

@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless apart from the random source used for dealing; all game
    state lives in GameState.
    """
    rng: random.Random = field(default_factory=random.Random)
    hand_size: int = HAND_SIZE

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or error. Invariant violations
        propagate as exceptions.
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code=ErrorCode.NO_HANDLER,
            )

        result = handler(state, action)
        if result.success and result.new_state:
            check_partition(result.new_state)
            result.new_state.action_history.append(action)
        return result

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.START_GAME: self._handle_start_game,
            ActionType.DEAL: self._handle_deal,
            ActionType.PLAY_CARD: self._handle_play,
            ActionType.DRAW_CARD: self._handle_draw,
            ActionType.CHOOSE_SUIT: self._handle_choose_suit,
        }
        return handlers.get(action_type)

    def _handle_start_game(self, state: GameState, action: Action) -> ActionResult:
        return start_game(state)

    def _handle_deal(self, state: GameState, action: Action) -> ActionResult:
        return deal(state, self.rng, self.hand_size)

    def _handle_play(self, state: GameState, action: Action) -> ActionResult:
        payload = action.payload
        if payload.party is None or payload.card is None:
            raise InvariantViolation("Play action needs a party and a card")
        return play_card(state, payload.card, payload.party, payload.suit)

    def _handle_draw(self, state: GameState, action: Action) -> ActionResult:
        if action.payload.party is None:
            raise InvariantViolation("Draw action needs a party")
        return draw_card(state, action.payload.party)

    def _handle_choose_suit(self, state: GameState, action: Action) -> ActionResult:
        if action.payload.suit is None:
            raise InvariantViolation("Suit choice needs a suit")
        return choose_suit(state, action.payload.suit)


def apply_action(
    state: GameState,
    action: Action,
    rng: random.Random | None = None,
) -> ActionResult:
    """Convenience function to apply an action with a one-off reducer."""
    reducer = Reducer(rng=rng or random.Random())
    return reducer.apply(state, action)
