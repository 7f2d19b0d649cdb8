"""Desktop weather viewer entry point."""
import argparse
import logging
import os
import sys
from typing import Optional

from config import DEFAULT_ENV_FILE, AppConfig, ConfigError, load_config
from history_manager import HistoryManager
from http_fetcher import DEFAULT_TIMEOUT, HttpFetcher
from search_runner import DEFAULT_WORKERS, SearchRunner
from weather_client import SUPPORTED_UNITS, WeatherClient

DEFAULT_LOG_FILE = "weatherdesk.log"


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Desktop weather viewer")
    parser.add_argument("--env-file", default=DEFAULT_ENV_FILE)
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE)
    parser.add_argument("--units", choices=list(SUPPORTED_UNITS), default=None,
                        help="Initial unit system (overrides WEATHER_UNITS)")
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT, help="HTTP timeout in seconds")
    parser.add_argument("--workers", type=int, default=DEFAULT_WORKERS, help="Concurrent searches")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: str, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(threadName)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )
    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_client(config: AppConfig, args: argparse.Namespace) -> WeatherClient:
    client = WeatherClient(api_key=config.api_key, fetcher=HttpFetcher(timeout=args.timeout))
    logging.info(f"Weather client ready (timeout={args.timeout}s)")
    return client


def show_fatal(title: str, message: str) -> None:
    """Report a startup failure in a dialog when a display is available."""
    try:
        import tkinter as tk
        from tkinter import messagebox

        root = tk.Tk()
        root.withdraw()
        messagebox.showerror(title, message)
        root.destroy()
    except Exception as exc:  # no display, fall back to the console
        logging.debug(f"Could not open error dialog: {exc}")


def main(argv: Optional[list] = None) -> None:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    try:
        config = load_config(args.env_file)
    except ConfigError as err:
        logging.error(f"Configuration error: {err}")
        show_fatal("Missing API key", str(err))
        raise SystemExit(str(err)) from err

    client = build_client(config, args)
    history = HistoryManager(os.path.abspath(config.history_file))

    from app import WeatherApp

    app = WeatherApp(
        runner_factory=lambda dispatch: SearchRunner(
            client, history=history, max_workers=args.workers, dispatch=dispatch
        ),
        history=history,
        units=args.units or config.units,
    )
    try:
        app.mainloop()
    except KeyboardInterrupt:
        logging.info("Stopping")


if __name__ == "__main__":
    main()
