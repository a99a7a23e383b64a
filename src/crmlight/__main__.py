"""CLI entry point for crmlight."""

import argparse
from pathlib import Path

from . import __version__
from .config import Settings
from .logging import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="crmlight",
        description="Terminal CRM for accounts, contacts, opportunities and activities",
    )
    parser.add_argument(
        "--seed-file",
        type=Path,
        default=None,
        help="YAML file with the initial data (default: packaged demo data)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v for INFO, -vv for DEBUG)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Path to write logs to file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--dashboard",
        metavar="EMAIL",
        default=None,
        help="Print the dashboard metrics of the user with this email and exit",
    )
    parser.add_argument(
        "--export-seed",
        type=Path,
        metavar="PATH",
        default=None,
        help="Write the packaged seed data to PATH and exit",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    # CLI flags override environment values
    settings_kwargs: dict = {}
    if args.seed_file:
        settings_kwargs["seed_file"] = args.seed_file
    if args.verbose:
        settings_kwargs["verbose"] = args.verbose
    if args.log_file:
        settings_kwargs["log_file"] = args.log_file

    settings = Settings(**settings_kwargs)

    setup_logging(settings.verbose, settings.log_file)

    if args.export_seed is not None:
        from .cli.export import run_export_seed

        raise SystemExit(run_export_seed(args.export_seed))

    from .api import DataAPI
    from .cli.output import error
    from .repositories import SeedError

    try:
        api = DataAPI.from_settings(settings)
    except SeedError as e:
        error(str(e))
        raise SystemExit(1) from e

    if args.dashboard is not None:
        from .cli.dashboard import run_dashboard

        try:
            exit_code = run_dashboard(api, args.dashboard)
        finally:
            api.close()
        raise SystemExit(exit_code)

    # Import here to keep the non-interactive commands free of textual
    from .app import run

    run(api, settings)


if __name__ == "__main__":
    main()
