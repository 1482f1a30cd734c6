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
History management for PingStatus.

This module keeps the most recent probe outcomes, with their capture time, in
a bounded FIFO ring for display.
"""

from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, List, Optional

from pingstatus.outcome import ProbeOutcome

# Number of recent outcomes kept for display
HISTORY_CAPACITY = 5


@dataclass(frozen=True)
class HistoryEntry:
    """A delivered outcome and the time it was recorded."""

    outcome: ProbeOutcome
    timestamp: datetime


class HistoryRing:
    """
    Fixed-capacity ring of recent outcomes, oldest first.

    Once full, each new record evicts the oldest entry.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity!r}")
        self.capacity = capacity
        self._entries: "deque[HistoryEntry]" = deque(maxlen=capacity)

    def record(self, outcome: ProbeOutcome, timestamp: Optional[datetime] = None) -> HistoryEntry:
        """
        Append an outcome, evicting the oldest entry when at capacity.

        Args:
            outcome: The delivered probe outcome
            timestamp: Capture time (uses the current UTC time if not provided)

        Returns:
            The recorded entry
        """
        if timestamp is None:
            timestamp = datetime.now(timezone.utc)
        entry = HistoryEntry(outcome, timestamp)
        self._entries.append(entry)
        return entry

    def entries(self) -> List[HistoryEntry]:
        """Return recorded entries in insertion order, oldest first."""
        return list(self._entries)

    def latest(self) -> Optional[HistoryEntry]:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(list(self._entries))
