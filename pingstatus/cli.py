# Copyright 2025 icecake0141
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review for correctness and security.

"""
Command-line interface for PingStatus.

This module contains the main entry point and command-line argument handling.
"""

import argparse
import contextlib
import logging
import math
import os
import sys
import threading
from typing import Any, Dict, List, Optional, Sequence

from pingstatus.config import load_config
from pingstatus.history import HistoryRing
from pingstatus.input_keys import read_key, terminal_cbreak_mode
from pingstatus.outcome import ProbeConfig, ProbeOutcome, ScheduleConfig
from pingstatus.ping_wrapper import PingProber
from pingstatus.scheduler import Scheduler
from pingstatus.ui_render import (
    build_status_line,
    format_outcome,
    format_timestamp,
    prepare_terminal_for_exit,
    render_status,
)

logger = logging.getLogger(__name__)

INTERVAL_PRESETS: List[float] = [0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0]
HOST_PRESETS: List[str] = ["1.1.1.1", "1.0.0.1", "8.8.8.8", "8.8.4.4", "9.9.9.9"]
KEY_POLL_SECONDS = 0.1


def _configure_logging(log_level: str, log_file: Optional[str]) -> None:
    """Configure logging handlers for CLI execution. stdout is reserved for the status line."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.insert(0, logging.FileHandler(os.path.expanduser(log_file), encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


# Hardcoded defaults for config-overridable fields.
# Applied after config merging for any field still set to None.
_HARDCODED_DEFAULTS: Dict[str, Any] = {
    "host": HOST_PRESETS[0],
    "interval": 10.0,
    "timeout": 2.0,
    "ping_path": "ping",
    "unreachable_exit_code": 2,
    "color": False,
    "log_level": "INFO",
}


def _apply_config_to_args(args: argparse.Namespace, config: Dict[str, Any]) -> None:
    """
    Overlay config file values onto a parsed argument namespace.

    Only fields that are still ``None`` (i.e. not explicitly set on the CLI)
    are updated.

    Args:
        args: Namespace returned by ``argparse.ArgumentParser.parse_args()``.
        config: Dictionary of values loaded from the config file.
    """
    for key, value in config.items():
        if hasattr(args, key) and getattr(args, key) is None:
            setattr(args, key, value)


def handle_options(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse and validate command-line arguments."""
    parser = argparse.ArgumentParser(
        description="PingStatus - Periodically ping one host and show latency in a status line",
        epilog="Keys: r = refresh now, i = next interval preset, s = next host preset, q = quit",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=float,
        default=None,
        help="Interval in seconds between pings (default: 10.0)",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for each reply (default: 2.0)",
    )
    parser.add_argument(
        "-c",
        "--count",
        type=int,
        default=0,
        help="Stop after this many results (default: 0 for infinite)",
    )
    parser.add_argument(
        "-C",
        "--color",
        action="store_true",
        default=None,
        help="Enable colored output (yellow=slow, red=bad or failed)",
    )
    parser.add_argument(
        "-p",
        "--ping-path",
        type=str,
        default=None,
        help="Path to the ping binary (default: ping)",
    )
    parser.add_argument(
        "--unreachable-exit-code",
        type=int,
        default=None,
        help="Exit status the ping tool uses for an unreachable host (default: 2)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional log file path for persistent logging",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Config file to load instead of ~/.pingstatus.conf",
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        default=False,
        help="Skip loading the config file",
    )
    parser.add_argument("host", nargs="?", default=None, help="Host to ping (IP address or hostname)")

    args = parser.parse_args(argv)

    if not args.no_config:
        try:
            config = load_config(args.config)
            _apply_config_to_args(args, config)
        except ValueError as exc:
            parser.error(str(exc))

    for field, default in _HARDCODED_DEFAULTS.items():
        if getattr(args, field, None) is None:
            setattr(args, field, default)

    if not args.host.strip():
        parser.error("host must be a non-empty hostname or address.")
    args.host = args.host.strip()
    if not math.isfinite(args.interval) or args.interval <= 0:
        parser.error("--interval must be a finite positive number of seconds.")
    if not math.isfinite(args.timeout) or args.timeout <= 0:
        parser.error("--timeout must be a finite positive number of seconds.")
    if args.count < 0:
        parser.error("--count must be a non-negative number (0 for infinite).")
    return args


def next_preset(presets: Sequence[Any], current: Any) -> Any:
    """Return the preset after ``current``, wrapping around; the first preset if ``current`` is not one."""
    if current in presets:
        return presets[(list(presets).index(current) + 1) % len(presets)]
    return presets[0]


def _build_state(args: argparse.Namespace, scheduler: Scheduler) -> Dict[str, Any]:
    return {
        "scheduler": scheduler,
        "history": HistoryRing(),
        "lock": threading.Lock(),
        "updated": True,
        "delivered": 0,
        "count": args.count,
        "done": threading.Event(),
        "use_color": bool(args.color) and sys.stdout.isatty(),
        "interactive": sys.stdin.isatty() and sys.stdout.isatty(),
    }


def _make_outcome_handler(state: Dict[str, Any]):
    """Build the scheduler callback that records outcomes for display."""

    def on_outcome(outcome: ProbeOutcome) -> None:
        with state["lock"]:
            if state["done"].is_set():
                return
            state["history"].record(outcome)
            state["delivered"] += 1
            state["updated"] = True
            if state["count"] and state["delivered"] >= state["count"]:
                state["done"].set()

    return on_outcome


def _handle_user_input(key: str, state: Dict[str, Any]) -> None:
    """Process one keyboard command."""
    scheduler: Scheduler = state["scheduler"]
    if key == "q":
        state["done"].set()
    elif key == "r":
        if not scheduler.refresh():
            logger.info("Probe already in flight; refresh skipped")
    elif key == "i":
        interval = next_preset(INTERVAL_PRESETS, scheduler.schedule_config.interval)
        logger.info("Interval changed to %.1fs", interval)
        scheduler.reconfigure(ScheduleConfig(interval))
    elif key == "s":
        current = scheduler.probe_config
        host = next_preset(HOST_PRESETS, current.target)
        logger.info("Target changed to %s", host)
        scheduler.reconfigure(ProbeConfig(host, current.timeout))


def _render_frame(state: Dict[str, Any]) -> None:
    with state["lock"]:
        if not state["updated"]:
            return
        state["updated"] = False
        entries = state["history"].entries()
    line = build_status_line(state["scheduler"].probe_config.target, entries, state["use_color"])
    render_status(line, state["interactive"])


def _print_summary(state: Dict[str, Any]) -> None:
    entries = state["history"].entries()
    online = sum(1 for entry in entries if entry.outcome.is_online)
    print("=" * 40)
    print(f"SUMMARY: {state['delivered']} result(s), {online}/{len(entries)} recent online")
    print("=" * 40)
    for entry in entries:
        print(f"{format_timestamp(entry.timestamp)}  {format_outcome(entry.outcome)}")


def run(args: argparse.Namespace) -> None:
    """Run the PingStatus monitor with parsed arguments."""
    _configure_logging(getattr(args, "log_level", "INFO"), getattr(args, "log_file", None))

    prober = PingProber(ping_path=os.path.expanduser(args.ping_path), unreachable_exit_code=args.unreachable_exit_code)
    scheduler = Scheduler(prober, ProbeConfig(args.host, args.timeout), ScheduleConfig(args.interval))
    state = _build_state(args, scheduler)
    scheduler.set_handler(_make_outcome_handler(state))

    mode = terminal_cbreak_mode() if state["interactive"] else contextlib.nullcontext()
    with mode:
        scheduler.start()
        try:
            while not state["done"].is_set():
                if state["interactive"]:
                    key = read_key(KEY_POLL_SECONDS)
                    if key:
                        _handle_user_input(key, state)
                else:
                    state["done"].wait(KEY_POLL_SECONDS)
                _render_frame(state)
        except KeyboardInterrupt:
            state["done"].set()
        finally:
            scheduler.stop()
            # Let an in-flight probe reap its ping process before exiting
            scheduler.wait_idle(timeout=scheduler.probe_config.timeout + 2.0)
            _render_frame(state)

    prepare_terminal_for_exit(state["interactive"])
    _print_summary(state)


def main() -> None:
    """Main entrypoint for the CLI - parses arguments and runs the application."""
    args = handle_options()
    run(args)
