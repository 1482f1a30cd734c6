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
Probe outcome and configuration value types for PingStatus.

A probe produces exactly one of four outcomes:

  - ``Success(latency_ms)``: the target replied; latency is finite and >= 0
  - ``Timeout``: no reply within the probe's timeout
  - ``Unreachable``: the ping tool reported that the host cannot be routed to
  - ``Failed(reason)``: the tool could not be launched, failed for an unknown
    reason, or its output could not be parsed

``ProbeConfig`` and ``ScheduleConfig`` are immutable snapshots handed to the
prober and scheduler; reconfiguration replaces a snapshot, never mutates one.
"""

import math
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Success:
    """The target answered the echo request."""

    latency_ms: float

    def __post_init__(self) -> None:
        latency = float(self.latency_ms)
        if not math.isfinite(latency) or latency < 0:
            raise ValueError(f"latency_ms must be finite and non-negative, got {self.latency_ms!r}")
        object.__setattr__(self, "latency_ms", latency)

    @property
    def is_online(self) -> bool:
        return True


@dataclass(frozen=True)
class Timeout:
    """No reply arrived before the probe deadline."""

    @property
    def is_online(self) -> bool:
        return False


@dataclass(frozen=True)
class Unreachable:
    """The ping tool reported no route to the host."""

    @property
    def is_online(self) -> bool:
        return False


@dataclass(frozen=True)
class Failed:
    """The probe could not produce a measurement."""

    reason: str

    def __post_init__(self) -> None:
        if not isinstance(self.reason, str) or not self.reason.strip():
            raise ValueError("Failed outcome requires a non-empty reason.")

    @property
    def is_online(self) -> bool:
        return False


ProbeOutcome = Union[Success, Timeout, Unreachable, Failed]


def is_online(outcome: ProbeOutcome) -> bool:
    """Return True only for a successful probe."""
    return isinstance(outcome, Success)


def _require_positive_seconds(name: str, value: float) -> None:
    # NaN compares false against everything, so check finiteness explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
        raise ValueError(f"{name} must be a finite positive number of seconds, got {value!r}")


@dataclass(frozen=True)
class ProbeConfig:
    """
    Parameters for a single probe invocation.

    Args:
        target: Hostname or literal address; passed to the ping tool as-is
        timeout: Seconds the ping tool may wait for a reply
    """

    target: str
    timeout: float = 2.0

    def __post_init__(self) -> None:
        if not isinstance(self.target, str) or not self.target.strip():
            raise ValueError("target must be a non-empty host string.")
        _require_positive_seconds("timeout", self.timeout)


@dataclass(frozen=True)
class ScheduleConfig:
    """Tick period of the scheduler, in seconds."""

    interval: float = 10.0

    def __post_init__(self) -> None:
        _require_positive_seconds("interval", self.interval)
