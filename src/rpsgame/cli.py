from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from .config import Settings, configure_logging
from .engine_play import run_play

_COMMANDS = ("play", "tui", "serve")


def _add_common_args(p: argparse.ArgumentParser, settings: Settings) -> None:
    p.add_argument(
        "--delay",
        type=float,
        default=None,
        metavar="SECONDS",
        help=f"Pause before revealing the computer's pick (default {settings.reveal_delay})",
    )
    p.add_argument("--store", type=Path, default=None, metavar="PATH", help="JSON file used to persist stats")
    p.add_argument("--no-store", action="store_true", help="Do not load or save stats")
    p.add_argument("--log-level", default=None, help=f"Logging level (default {settings.log_level})")


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rps", description="Rock Paper Scissors against the computer")
    sub = parser.add_subparsers(dest="command")

    play = sub.add_parser("play", help="Play in the terminal (default)")
    _add_common_args(play, settings)
    play.add_argument("--rounds", type=int, default=None, help="Stop after this many rounds")
    # If omitted, runs with a random seed. Pass an int to reproduce the computer's picks.
    play.add_argument("--seed", type=int, default=None, help="RNG seed (random if omitted)")
    play.add_argument("--no-color", action="store_true", help="Disable colored output (default is colored)")

    tui = sub.add_parser("tui", help="Play in a full-screen terminal UI")
    _add_common_args(tui, settings)
    tui.add_argument("--seed", type=int, default=None, help="RNG seed (random if omitted)")

    serve = sub.add_parser("serve", help="Serve the browser UI")
    _add_common_args(serve, settings)
    serve.add_argument("--host", default=None, help=f"Bind address (default {settings.host})")
    serve.add_argument("--port", type=int, default=None, help=f"Port (default {settings.port})")
    return parser


def resolve_settings(args: argparse.Namespace, settings: Settings) -> Settings:
    """Apply command-line overrides on top of environment settings."""

    updates: dict[str, object] = {}
    if args.delay is not None:
        updates["reveal_delay"] = max(0.0, args.delay)
    if args.no_store:
        updates["store_path"] = None
    elif args.store is not None:
        updates["store_path"] = args.store.expanduser()
    if args.log_level:
        updates["log_level"] = args.log_level.upper()
    if getattr(args, "host", None):
        updates["host"] = args.host
    if getattr(args, "port", None) is not None:
        updates["port"] = args.port
    return replace(settings, **updates)


def main(argv: list[str] | None = None) -> None:
    """Run the requested front end; ``play`` is the default when no subcommand is given."""

    argv = list(sys.argv[1:] if argv is None else argv)
    first_non_flag = next((t for t in argv if not t.startswith("-")), None)
    if first_non_flag not in _COMMANDS and not {"-h", "--help"} & set(argv):
        argv = ["play", *argv]

    env_settings = Settings.from_env()
    parser = build_parser(env_settings)
    args = parser.parse_args(argv)
    settings = resolve_settings(args, env_settings)
    configure_logging(settings.log_level)

    if args.command == "serve":
        from .web.app import main as serve_main

        serve_main(settings)
        return

    if args.command == "tui":
        import random

        from .engine_play import open_store
        from .ui.textual_app import RpsApp

        rng = random.Random(args.seed) if args.seed is not None else None
        RpsApp(store=open_store(settings.store_path), reveal_delay=settings.reveal_delay, rng=rng).run()
        return

    try:
        run_play(
            seed=args.seed,
            rounds=args.rounds,
            reveal_delay=settings.reveal_delay,
            store_path=settings.store_path,
            no_color=args.no_color,
        )
    except KeyboardInterrupt:
        raise SystemExit(130) from None


if __name__ == "__main__":
    main()
