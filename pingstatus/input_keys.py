#!/usr/bin/env python3
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
# Review required for correctness, security, and licensing.

"""
Keyboard input handling for PingStatus using the readchar library.

Keys are polled without blocking so the main loop can keep redrawing the
status line between key presses.
"""

import contextlib
import select
import sys
import termios
import tty
from typing import Generator, Optional

import readchar
import readchar.key

# Keys that request shutdown regardless of case
QUIT_KEYS = frozenset(("q", "Q", readchar.key.CTRL_C, readchar.key.ESC))


@contextlib.contextmanager
def terminal_cbreak_mode(fd: Optional[int] = None) -> Generator[None, None, None]:
    """Context manager that puts a terminal in cbreak mode and restores it on exit.

    This ensures terminal state is properly restored even when a signal (e.g. SIGINT)
    interrupts the caller, preventing the shell from being left in an unusable state.

    Args:
        fd: Terminal file descriptor to configure.  Defaults to ``sys.stdin.fileno()``.
    """
    if fd is None:
        fd = sys.stdin.fileno()
    try:
        old_settings = termios.tcgetattr(fd)
    except termios.error:
        # Not a real terminal (e.g. a pipe or test mock) – skip mode setup.
        yield
        return
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


def normalize_key(key_value: Optional[str]) -> Optional[str]:
    """Map readchar key values onto the single-character commands the CLI handles."""
    if not key_value:
        return None
    if key_value in QUIT_KEYS:
        return "q"
    if len(key_value) == 1:
        return key_value.lower()
    return None


def read_key(timeout: float = 0.0) -> Optional[str]:
    """
    Read one key from stdin if available within ``timeout`` seconds.

    Returns:
        A lower-case command character ("q" for quit keys), or None if no
        input is available, stdin is not a TTY, or the key is not a command
    """
    if not sys.stdin.isatty():
        return None

    ready, _, _ = select.select([sys.stdin], [], [], timeout)
    if not ready:
        return None

    return normalize_key(readchar.readkey())
