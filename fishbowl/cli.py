"""
Fishbowl CLI - Command-line interface for the engine.

Usage:
    fishbowl status      Show the saved game, if any
    fishbowl results     Show scores of the saved game
    fishbowl clear       Delete the saved game
    fishbowl serve       Run the local HTTP API
"""

import argparse
import logging
import os
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Fishbowl - Single-device party game engine",
        prog="fishbowl",
    )
    parser.add_argument(
        "--data-dir",
        default=os.getenv("FISHBOWL_DATA_DIR"),
        help="Directory holding the saved game (default: ~/.fishbowl)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("status", help="Show the saved game")
    subparsers.add_parser("results", help="Show scores of the saved game")
    subparsers.add_parser("clear", help="Delete the saved game")

    serve_parser = subparsers.add_parser("serve", help="Run the local HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "status":
        cmd_status(args)
    elif args.command == "results":
        cmd_results(args)
    elif args.command == "clear":
        cmd_clear(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _load_saved(args):
    from .storage import FileGameStore

    store = FileGameStore(data_dir=args.data_dir)
    return store, store.load()


def cmd_status(args):
    """Show the saved game."""
    from .engine_core.state import TeamId, round_name

    _, saved = _load_saved(args)
    if saved is None:
        print("No saved game.")
        return

    state = saved.state
    print(f"Screen: {state.screen.value}")
    print(f"Teams: {state.team_name(TeamId.A)} vs {state.team_name(TeamId.B)}")
    print(f"Players entered: {len(state.players)}/{state.player_count}")
    print(f"Items: {len(state.items)}")
    if state.current_round is not None:
        print(f"Round: {state.current_round} ({round_name(state.current_round)})")
        print(f"Turn: {state.team_name(state.current_team_turn)}")
        if state.pools is not None:
            print(f"Items left this round: {state.pools.remaining_count}")


def cmd_results(args):
    """Show scores of the saved game."""
    from .engine_core.state import ROUNDS, TeamId
    from .engine_core.scoring import final_results

    _, saved = _load_saved(args)
    if saved is None:
        print("No saved game.")
        return

    state = saved.state
    results = final_results(state)
    name_a, name_b = state.team_name(TeamId.A), state.team_name(TeamId.B)
    print(f"{'Round':<8}{name_a:>10}{name_b:>10}")
    for r in ROUNDS:
        scores = results.by_round[r]
        print(f"{r:<8}{scores[TeamId.A]:>10}{scores[TeamId.B]:>10}")
    print(f"{'Total':<8}{results.totals[TeamId.A]:>10}{results.totals[TeamId.B]:>10}")

    if results.is_tie:
        print("\nIt's a tie!")
    else:
        print(f"\nLeader: {state.team_name(results.winner)}")


def cmd_clear(args):
    """Delete the saved game."""
    store, saved = _load_saved(args)
    store.clear()
    print("Saved game deleted." if saved else "No saved game.")


def cmd_serve(args):
    """Run the local HTTP API."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    from .api.app import create_app
    from .api.service import FishbowlService
    from .session import GameSession
    from .storage import FileGameStore

    session = GameSession(store=FileGameStore(data_dir=args.data_dir))
    app = create_app(service=FishbowlService(session=session))
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
