"""Run ``caller-pop`` as ``python -m caller_pop``; with no arguments, print the lookup and batch usage."""
from __future__ import annotations

import sys

from . import cli


def main(argv: list[str] | None = None) -> int:
    """Dispatch to :func:`caller_pop.cli.main`, or show help and exit 2 on an empty command line."""

    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        parser = cli.build_parser(prog="python -m caller_pop")
        parser.print_help()
        return 2

    return cli.main(argv)


if __name__ == "__main__":  # pragma: no cover - module entry point
    sys.exit(main())
