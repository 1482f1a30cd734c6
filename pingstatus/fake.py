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
Scripted prober for tests and demos.

FakeProber returns outcomes from a script instead of running ping, optionally
sleeping for a fixed delay per call to stand in for probe duration. When the
script is exhausted every further call returns Timeout.
"""

import threading
import time
from collections import deque
from typing import Iterable, List, Optional

from pingstatus.outcome import ProbeConfig, ProbeOutcome, Timeout
from pingstatus.ping_wrapper import Prober


class FakeProber(Prober):
    """
    Prober that replays scripted outcomes.

    Args:
        outcomes: Outcomes returned in order, one per probe call
        delay: Seconds each probe call blocks before returning
    """

    def __init__(self, outcomes: Optional[Iterable[ProbeOutcome]] = None, delay: float = 0.0) -> None:
        self.delay = delay
        self._lock = threading.Lock()
        self._script = deque(outcomes or [])
        self.configs: List[ProbeConfig] = []
        self.call_times: List[float] = []
        self.active = 0
        self.max_active = 0

    @property
    def call_count(self) -> int:
        with self._lock:
            return len(self.configs)

    def probe(self, config: ProbeConfig) -> ProbeOutcome:
        with self._lock:
            self.configs.append(config)
            self.call_times.append(time.monotonic())
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            outcome = self._script.popleft() if self._script else Timeout()
        try:
            if self.delay > 0:
                time.sleep(self.delay)
            return outcome
        finally:
            with self._lock:
                self.active -= 1
