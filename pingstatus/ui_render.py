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
UI rendering for PingStatus.

Formats probe outcomes into a compact, optionally colored, status line:
latest result, recent history and the time of the last check.
"""

import re
import sys
from datetime import datetime, tzinfo
from typing import Optional, Sequence

from pingstatus.history import HistoryEntry
from pingstatus.outcome import Failed, ProbeOutcome, Success, Timeout, Unreachable

ANSI_RESET = "\x1b[0m"
ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")
STATUS_COLORS = {
    "slow": "\x1b[33m",  # Yellow
    "fail": "\x1b[31m",  # Red
}
# Latency bands in milliseconds: below SLOW is normal, below BAD is slow
SLOW_LATENCY_MS = 100.0
BAD_LATENCY_MS = 200.0
HISTORY_SEPARATOR = " · "


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    return ANSI_ESCAPE_RE.sub("", text)


def outcome_status(outcome: ProbeOutcome) -> str:
    """
    Classify an outcome into a display status.

    Returns:
        "success" for latency under 100 ms, "slow" under 200 ms,
        and "fail" for high latency or any non-success outcome
    """
    if isinstance(outcome, Success):
        if outcome.latency_ms < SLOW_LATENCY_MS:
            return "success"
        if outcome.latency_ms < BAD_LATENCY_MS:
            return "slow"
    return "fail"


def format_outcome(outcome: ProbeOutcome) -> str:
    """Short label for an outcome, e.g. '12 ms', '0.4 ms' or 'Timeout'."""
    if isinstance(outcome, Success):
        # Sub-millisecond replies keep one decimal
        if outcome.latency_ms < 1:
            return f"{outcome.latency_ms:.1f} ms"
        return f"{outcome.latency_ms:.0f} ms"
    if isinstance(outcome, Timeout):
        return "Timeout"
    if isinstance(outcome, Unreachable):
        return "Unreachable"
    return "Failed"


def colorize_text(text: str, status: Optional[str], use_color: bool) -> str:
    """Apply color to text based on status."""
    if not use_color or not status:
        return text
    color = STATUS_COLORS.get(status)
    if not color:
        return text
    return f"{color}{text}{ANSI_RESET}"


def build_history_line(entries: Sequence[HistoryEntry], use_color: bool) -> str:
    """Join recent outcomes, oldest first."""
    return HISTORY_SEPARATOR.join(
        colorize_text(format_outcome(entry.outcome), outcome_status(entry.outcome), use_color) for entry in entries
    )


def format_timestamp(when: datetime, display_tz: Optional[tzinfo] = None) -> str:
    """Format a check time as local wall-clock time."""
    return when.astimezone(display_tz).strftime("%H:%M:%S")


def build_status_line(
    target: str,
    entries: Sequence[HistoryEntry],
    use_color: bool = False,
    display_tz: Optional[tzinfo] = None,
) -> str:
    """
    Build the single status line shown for the latest outcome.

    Args:
        target: Host being probed
        entries: History entries, oldest first; the last one is current
        use_color: Whether to emit ANSI colors
        display_tz: Timezone for the last-checked time (local time if None)

    Returns:
        The rendered line, without a trailing newline
    """
    if not entries:
        return f"{target}: Starting..."
    latest = entries[-1]
    current = colorize_text(format_outcome(latest.outcome), outcome_status(latest.outcome), use_color)
    if isinstance(latest.outcome, Failed):
        current = f"{current} ({latest.outcome.reason})"
    parts = [
        f"{target}: {current}",
        f"Recent: {build_history_line(entries, use_color)}",
        f"Last checked: {format_timestamp(latest.timestamp, display_tz)}",
    ]
    return " | ".join(parts)


def render_status(line: str, interactive: bool) -> None:
    """Write the status line, redrawing it in place on a terminal."""
    if interactive:
        sys.stdout.write(f"\r\x1b[2K{line}")
    else:
        sys.stdout.write(f"{line}\n")
    sys.stdout.flush()


def prepare_terminal_for_exit(interactive: bool) -> None:
    """Move past the in-place status line before printing anything else."""
    if interactive:
        sys.stdout.write("\n")
        sys.stdout.flush()
