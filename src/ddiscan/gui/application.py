"""Qt application entry point for the DDiScan desktop GUI.

This module wires up argument parsing and logging, builds the
:class:`~ddiscan.gui.main_window.MainWindow`, and starts the Qt event loop.
``--headless`` skips Qt entirely and logs batches instead. All launches,
whether through ``python main.py``, the ``ddiscan`` script or
``python -m ddiscan.gui.application``, flow through ``main()`` here.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Tuple

from ..config import ScanConfig, load_config
from ..logging_setup import configure_logging

logger = logging.getLogger(__name__)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DDiScan ultrasonic A-scan viewer")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML configuration file (default: $DDISCAN_CONFIG)",
    )
    parser.add_argument(
        "--port",
        type=str,
        default=None,
        help="Serial port or pyserial URL to use instead of the first USB port",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without a window and log each batch",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop a headless capture after this many seconds",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (default: from config, INFO)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write log output to this file",
    )
    return parser


def _parse_cli_args(
    argv: list[str],
) -> tuple[argparse.Namespace, list[str]]:
    parser = _build_arg_parser()
    args, qt_args = parser.parse_known_args(argv[1:])
    qt_argv = [argv[0], *qt_args]
    return args, qt_argv


def _resolve_config(args: argparse.Namespace) -> ScanConfig:
    cfg = load_config(args.config)
    if args.port:
        cfg.port = args.port
    if args.log_level:
        cfg.log_level = args.log_level
    return cfg.sanitized()


def create_app(argv: list[str] | None = None, *, config: ScanConfig | None = None) -> Tuple[object, object]:
    """
    Create the QApplication and main DDiScan window.

    Returns
    -------
    app:
        The QApplication instance (owned by caller).
    window:
        The main window, not yet shown.
    """
    from PySide6.QtWidgets import QApplication

    from .main_window import MainWindow

    qt_args = argv if argv is not None else sys.argv
    app = QApplication.instance() or QApplication(qt_args)
    window = MainWindow(config=config)
    return app, window


def main(argv: list[str] | None = None) -> None:
    raw_argv = argv if argv is not None else sys.argv
    args, qt_argv = _parse_cli_args(raw_argv)
    cfg = _resolve_config(args)
    configure_logging(cfg.log_level, args.log_file)

    if args.headless:
        from ..headless import run_headless

        raise SystemExit(run_headless(cfg, duration_s=args.duration))

    app, win = create_app(qt_argv, config=cfg)
    win.show()
    raise SystemExit(app.exec())


if __name__ == "__main__":
    main()
