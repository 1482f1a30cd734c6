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
Unit tests for pingstatus.history ring buffer.
"""

import os
import sys
import unittest
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from pingstatus.history import HISTORY_CAPACITY, HistoryEntry, HistoryRing  # noqa: E402
from pingstatus.outcome import Failed, Success, Timeout, Unreachable  # noqa: E402

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestHistoryRing(unittest.TestCase):
    """Test cases for HistoryRing"""

    def test_starts_empty(self):
        ring = HistoryRing()
        self.assertEqual(len(ring), 0)
        self.assertEqual(ring.entries(), [])
        self.assertIsNone(ring.latest())
        self.assertEqual(ring.capacity, HISTORY_CAPACITY)

    def test_keeps_last_five_of_six_in_order(self):
        ring = HistoryRing()
        outcomes = [Success(float(i)) for i in range(6)]
        for offset, outcome in enumerate(outcomes):
            ring.record(outcome, BASE_TIME + timedelta(seconds=offset))

        entries = ring.entries()
        self.assertEqual(len(entries), 5)
        self.assertEqual([entry.outcome for entry in entries], outcomes[1:])
        self.assertEqual(entries[0].timestamp, BASE_TIME + timedelta(seconds=1))
        self.assertEqual(ring.latest().outcome, outcomes[-1])

    def test_mixed_outcomes_preserve_insertion_order(self):
        ring = HistoryRing()
        outcomes = [Timeout(), Success(12.0), Unreachable(), Failed("exit code 1")]
        for outcome in outcomes:
            ring.record(outcome, BASE_TIME)
        self.assertEqual([entry.outcome for entry in ring], outcomes)

    def test_record_returns_entry_with_default_utc_timestamp(self):
        ring = HistoryRing()
        before = datetime.now(timezone.utc)
        entry = ring.record(Timeout())
        self.assertIsInstance(entry, HistoryEntry)
        self.assertEqual(entry.timestamp.tzinfo, timezone.utc)
        self.assertGreaterEqual(entry.timestamp, before)

    def test_entries_returns_a_copy(self):
        ring = HistoryRing()
        ring.record(Timeout(), BASE_TIME)
        entries = ring.entries()
        entries.clear()
        self.assertEqual(len(ring), 1)

    def test_custom_capacity(self):
        ring = HistoryRing(capacity=2)
        for i in range(4):
            ring.record(Success(float(i)), BASE_TIME)
        self.assertEqual([entry.outcome.latency_ms for entry in ring.entries()], [2.0, 3.0])

    def test_rejects_zero_capacity(self):
        with self.assertRaises(ValueError):
            HistoryRing(capacity=0)


if __name__ == "__main__":
    unittest.main()
