import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console

# Ensure the src directory is on sys.path when running as a script
_SRC_DIR = Path(__file__).resolve().parents[1]
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from heromarket.bootstrap import create_market_gateway
from heromarket.domain.errors import StorageError
from heromarket.presentation.cli import parse_args, run_command, run_migrate, run_shell


def _print_help_surface(console: Console) -> None:
    console.print("\nHelp:")
    console.print("- Run `heromarket --help` to see the available commands.")
    console.print("- Without HEROMARKET_DATABASE_URL the store is in-memory and lasts for one process; use `shell`.")
    console.print("- Storage issues: verify HEROMARKET_DATABASE_URL and run `heromarket migrate`.")


def _configure_logging() -> None:
    level_name = os.getenv("HEROMARKET_LOG_LEVEL", "WARNING").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv=None, console: Console | None = None) -> int:
    load_dotenv()
    _configure_logging()
    console = console or Console()
    args = parse_args(argv)

    try:
        if args.command == "migrate":
            return run_migrate(args.database_url, console)
        gateway = create_market_gateway()
        if args.command == "shell":
            return run_shell(gateway, console, principal=args.principal)
        return run_command(gateway, args, console)
    except KeyboardInterrupt:
        console.print("\nSession ended.")
        return 130
    except StorageError as exc:
        console.print("The market store rejected the operation; nothing was saved.")
        console.print(f"Reason: {exc}")
        _print_help_surface(console)
        return 1
    except Exception as exc:
        logging.getLogger(__name__).debug("Unhandled failure", exc_info=True)
        console.print("An unexpected error occurred. The market closed safely.")
        console.print(f"Reason: {exc}")
        _print_help_surface(console)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
