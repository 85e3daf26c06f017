"""
Entry point for the menopause age estimator.

Usage:
    python main.py          # launches the web app at localhost:5000
    python main.py --cli    # runs the terminal interface
"""

import argparse

import config as cfg
from log_setup import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Menopause age estimator (AMH / FSH / risk factors)",
    )
    parser.add_argument(
        "--cli",
        action="store_true",
        help="Run in terminal mode instead of launching the web app",
    )
    parser.add_argument(
        "--log-level",
        default=cfg.LOG_LEVEL,
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Do not open a browser tab when the web app starts",
    )
    args = parser.parse_args()

    setup_logging(args.log_level)

    if args.cli:
        from cli import run_cli
        run_cli()
    else:
        from app import run_web
        run_web(open_browser=not args.no_browser)


if __name__ == "__main__":
    main()
