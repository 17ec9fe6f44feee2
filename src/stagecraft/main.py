"""Subcommand dispatcher for stagecraft.

Usage:
    stagecraft evaluate --manifest ... --time 0.5
    stagecraft gesture  --manifest ... --clip ID --script drag.yaml
"""

import argparse
import sys


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="stagecraft",
        description="Scene transform and timeline animation engine.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Register subcommands. Each delegates to its own module's main().
    subparsers.add_parser("evaluate", help="Compose clip styles at a playhead time")
    subparsers.add_parser("gesture", help="Replay a gesture script against a clip")

    # Parse only the subcommand name, pass the rest to the subcommand's parser.
    parsed, remaining = parser.parse_known_args(args)

    if parsed.command is None:
        parser.print_help()
        sys.exit(1)

    if parsed.command == "evaluate":
        from .cli import main as evaluate_main
        evaluate_main(remaining)
    elif parsed.command == "gesture":
        from .gesture_cli import main as gesture_main
        gesture_main(remaining)


if __name__ == "__main__":
    main()
