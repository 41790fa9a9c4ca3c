"""
Eights CLI - Command-line interface for the engine.

Usage:
    eights play [--seed N]                  Play against the computer
    eights simulate [--games N] [--seed N]  Computer vs. computer games
    eights serve [--host H] [--port P]      Run the HTTP API
"""

import argparse
import random
import sys

from .logging_utils import setup_logging


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Eights - Crazy Eights Engine",
        prog="eights",
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play against the computer")
    play_parser.add_argument("--seed", type=int, default=None, help="Seed for the shuffle")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Run computer vs. computer games")
    simulate_parser.add_argument("--games", type=int, default=100, help="Number of games")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Seed for the shuffle")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args()

    if args.log_level:
        setup_logging(args.log_level)
    else:
        setup_logging("WARNING" if args.command == "play" else "INFO")

    if args.command == "play":
        cmd_play(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _describe(view) -> str:
    top = view.top_card.card_id if view.top_card else "-"
    suit = view.active_suit.value if view.active_suit else "-"
    return (
        f"Top: {top}  Active suit: {suit}  Deck: {view.deck_size}  "
        f"Opponent holds {view.opponent_hand_size}"
    )


def _effect_lines(effects) -> list[str]:
    lines = []
    for effect in effects:
        parts = [effect.code.value.replace("_", " ")]
        if effect.card:
            parts.append(effect.card.card_id)
        if effect.suit:
            parts.append(f"({effect.suit.value})")
        lines.append("  * " + " ".join(parts))
    return lines


def cmd_play(args):
    """Interactive game in the terminal."""
    from .config import EngineConfig
    from .engine_core.cards import Card, Suit
    from .engine_core.state import GameStatus
    from .session import GameLoop, ManualScheduler

    scheduler = ManualScheduler()
    loop = GameLoop(scheduler=scheduler, config=EngineConfig.instant(seed=args.seed))
    loop.subscribe(lambda view: print("\n".join(_effect_lines(view.effects))))

    loop.start_game()
    scheduler.run_pending()

    print("Commands: <card id> (e.g. 7-hearts), draw, new, quit")
    while True:
        view = loop.view()
        if view.status == GameStatus.FINISHED:
            print(f"\nGame over - {view.winner.value} wins.")
            answer = input("Play again? [y/N] ").strip().lower()
            if answer != "y":
                return
            loop.start_game()
            scheduler.run_pending()
            continue

        print()
        print(_describe(view))
        print("Your hand: " + " ".join(c.card_id for c in view.player_hand))

        if view.status == GameStatus.AWAITING_SUIT_CHOICE:
            raw = input("Call a suit (hearts/diamonds/clubs/spades): ").strip().lower()
            try:
                loop.choose_suit(Suit(raw))
            except ValueError:
                print("Unknown suit.")
                continue
        else:
            print("Playable: " + (" ".join(c.card_id for c in view.legal_moves) or "none, draw"))
            raw = input("> ").strip()
            if raw in ("quit", "q"):
                return
            if raw == "new":
                loop.start_game()
            elif raw == "draw":
                loop.draw_card()
            else:
                try:
                    card = Card.from_id(raw)
                except ValueError as e:
                    print(e)
                    continue
                loop.play_card(card)

        # Opponent replies without a think delay in the terminal
        scheduler.run_pending()


def cmd_simulate(args):
    """Play greedy vs. greedy games and check the card partition after every move."""
    from .bots import GreedyPolicy, OpponentView
    from .config import EngineConfig
    from .engine_core.action import ActionType
    from .engine_core.state import GameStatus, Party, check_partition
    from .session import GameLoop, ManualScheduler

    rng = random.Random(args.seed)
    wins = {Party.PLAYER: 0, Party.OPPONENT: 0}
    stalled = 0
    max_turns = 500

    for _ in range(args.games):
        scheduler = ManualScheduler()
        loop = GameLoop(scheduler=scheduler, config=EngineConfig.instant(), rng=rng)
        stand_in = GreedyPolicy(rng=rng)
        loop.start_game()
        scheduler.run_pending()

        while loop.status != GameStatus.FINISHED and loop.state.turn_number < max_turns:
            decision = stand_in.select_action(OpponentView.from_state(loop.state, Party.PLAYER))
            action = decision.action
            if action.action_type == ActionType.DRAW_CARD:
                loop.draw_card()
            else:
                loop.play_card(action.payload.card)
                if loop.status == GameStatus.AWAITING_SUIT_CHOICE:
                    loop.choose_suit(action.payload.suit)
            scheduler.run_pending()
            check_partition(loop.state)

        if loop.winner is None:
            stalled += 1
        else:
            wins[loop.winner] += 1

    print(f"Games: {args.games}")
    print(f"First player wins: {wins[Party.PLAYER]}")
    print(f"Second player wins: {wins[Party.OPPONENT]}")
    if stalled:
        print(f"Stopped after {max_turns} turns: {stalled}")


def cmd_serve(args):
    """Run the API under uvicorn."""
    import uvicorn

    from .api.app import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
