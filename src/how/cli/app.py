"""Top-level CLI router."""

import sys

from . import history as history_cmd
from . import install as install_cmd
from . import providers as providers_cmd
from . import query as query_cmd
from . import setup as setup_cmd

SUBCOMMANDS = {
    "setup": setup_cmd.run,
    "history": history_cmd.run,
    "providers": providers_cmd.run,
    "install": install_cmd.run,
}


def main(argv: list[str] | None = None) -> int:
    """Route to a subcommand, or treat the arguments as a prompt."""
    args = list(sys.argv[1:] if argv is None else argv)
    if args and args[0] in SUBCOMMANDS:
        return SUBCOMMANDS[args[0]](args[1:])
    return query_cmd.run(args)


def entrypoint() -> None:
    """Console script entrypoint."""
    raise SystemExit(main())
