"""Application entry point for the evalshade editor."""

from __future__ import annotations

import argparse
import logging
import os
from dataclasses import replace
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

from art import tprint

import settings
from core.config import Settings, merge_modes, settings_to_dict

NAME = "EVALSHADE"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _configure_logging(config: Optional[dict] = None) -> None:
    config = settings.load_logging_config() if config is None else config
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    # The editor owns the terminal, so console logging is opt-in.
    if config.get("console", False):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if not isinstance(file_cfg, dict):
        file_cfg = {}
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path")
        if not isinstance(path, str) or not path:
            path = "logs/evalshade.log"
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = _as_int(file_cfg.get("max_bytes"), 1024 * 1024)
        backup_count = _as_int(file_cfg.get("backup_count"), 3)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _effective_settings(args: argparse.Namespace) -> Settings:
    loaded = settings.load_settings(args.config)
    loaded = merge_modes(loaded, args.mode or [])
    if args.dirty_color and settings.is_valid_color(args.dirty_color):
        loaded = replace(loaded, dirty_color=args.dirty_color)
    return loaded


def _edit(args: argparse.Namespace) -> None:
    _configure_logging(settings.load_logging_config(args.config))
    logger = logging.getLogger(__name__)
    logger.info("Starting editor with %s file(s)", len(args.files))

    from frontend.app import EditorApp

    EditorApp(paths=args.files, settings_loader=lambda: _effective_settings(args)).run()


def _show_settings(args: argparse.Namespace) -> None:
    _print_banner()
    for key, value in settings_to_dict(_effective_settings(args)).items():
        if isinstance(value, list):
            value = ", ".join(value)
        print(f"{key}: {value if value is not None else '(theme default)'}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="evalshade")
    parser.add_argument("--config", help="Path to config.json (defaults to EVALSHADE_CONFIG)")
    parser.add_argument(
        "--mode",
        action="append",
        help="Extra mode to shade automatically (repeatable)",
    )
    parser.add_argument("--dirty-color", help="Override the dirty background color")
    subparsers = parser.add_subparsers(dest="command")

    edit_parser = subparsers.add_parser("edit", help="Open files in the editor")
    edit_parser.add_argument("files", nargs="*")
    subparsers.add_parser("settings", help="Print the effective settings")

    args = parser.parse_args(argv)
    if args.command == "settings":
        _show_settings(args)
        return
    if args.command is None:
        args.files = []
    _edit(args)


if __name__ == "__main__":
    main()
