"""Command line entry point for the book page fetcher."""

import argparse
import sys

from .commands.download import setup_download_commands


def build_parser() -> argparse.ArgumentParser:
    """Create the top-level parser with every subcommand registered."""
    parser = argparse.ArgumentParser(
        prog="bookfetch",
        description="Download the pages of a hosted book and merge them into one PDF",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    setup_download_commands(subparsers)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        return 1
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
