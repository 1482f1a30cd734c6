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
Python wrapper for the system ping tool.

This module runs one ``ping`` invocation per probe and classifies the result
into a ProbeOutcome. The tool is asked to wait for ``timeout`` itself, but a
supervisory deadline of ``timeout + 1s`` is always enforced on top of that so a
tool that ignores its own wait flag can never stall a probe.

The ping CLI contract relied upon:
  - Usage: ping -c 1 -W <wait> <host>
  - Success (exit 0): a reply line containing "time=<value> ms"
  - Unreachable (exit 2 by default): no route to host
  - Other non-zero exits: error message on stderr
"""

import json
import logging
import math
import re
import subprocess
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pingstatus.outcome import Failed, ProbeConfig, ProbeOutcome, Success, Timeout, Unreachable

logger = logging.getLogger(__name__)

DEFAULT_PING_PATH = "ping"
UNREACHABLE_EXIT_CODE = 2
# Extra time granted beyond the tool's own wait bound before the child is killed
SUPERVISORY_GRACE_SECONDS = 1.0
PARSE_FAILURE_REASON = "could not parse latency from ping output"

LATENCY_RE = re.compile(r"time=(\d+(?:\.\d+)?)\s*ms")


class Prober(ABC):
    """A capability that performs exactly one probe against a target."""

    @abstractmethod
    def probe(self, config: ProbeConfig) -> ProbeOutcome:
        """Run one probe using ``config`` and return its classified outcome. Never raises."""
        raise NotImplementedError


def parse_latency(output: str) -> ProbeOutcome:
    """
    Parse the round-trip latency from ping output.

    Only the first ``time=<number> ms`` token is authoritative; later matches
    (e.g. from statistics summaries) are ignored.

    Args:
        output: Captured standard output of the ping tool

    Returns:
        Success with the latency in milliseconds, or Failed on a parse failure
    """
    match = LATENCY_RE.search(output or "")
    if match is None:
        return Failed(PARSE_FAILURE_REASON)
    try:
        latency_ms = float(match.group(1))
    except ValueError:
        return Failed(f"{PARSE_FAILURE_REASON}: invalid latency value {match.group(1)!r}")
    if not math.isfinite(latency_ms):
        return Failed(f"{PARSE_FAILURE_REASON}: invalid latency value {match.group(1)!r}")
    return Success(latency_ms)


def wait_argument(timeout: float, platform: Optional[str] = None) -> str:
    """
    Format the ping ``-W`` wait bound for the running platform.

    macOS and the BSDs take milliseconds; Linux iputils takes whole seconds.
    """
    if platform is None:
        platform = sys.platform
    if platform.startswith("linux"):
        return str(max(1, math.ceil(timeout)))
    return str(max(1, int(round(timeout * 1000))))


def build_ping_command(
    config: ProbeConfig,
    ping_path: str = DEFAULT_PING_PATH,
    platform: Optional[str] = None,
) -> List[str]:
    """Build the argument vector for a single-echo ping with the target last."""
    return [ping_path, "-c", "1", "-W", wait_argument(config.timeout, platform), config.target]


class PingProber(Prober):
    """
    Prober backed by the system ping binary.

    Args:
        ping_path: Executable name or path of the ping tool (default: "ping")
        unreachable_exit_code: Exit status the tool uses for "no route to host"
        grace: Seconds added to the probe timeout for the supervisory deadline
        platform: Platform name used to format the wait flag (default: sys.platform)
    """

    def __init__(
        self,
        ping_path: str = DEFAULT_PING_PATH,
        unreachable_exit_code: int = UNREACHABLE_EXIT_CODE,
        grace: float = SUPERVISORY_GRACE_SECONDS,
        platform: Optional[str] = None,
    ) -> None:
        self.ping_path = ping_path
        self.unreachable_exit_code = unreachable_exit_code
        self.grace = grace
        self.platform = platform

    def build_command(self, config: ProbeConfig) -> List[str]:
        return build_ping_command(config, self.ping_path, self.platform)

    def probe(self, config: ProbeConfig) -> ProbeOutcome:
        cmd_args = self.build_command(config)
        deadline = config.timeout + self.grace

        try:
            process = subprocess.Popen(  # pylint: disable=consider-using-with
                cmd_args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except (OSError, ValueError) as e:
            logger.warning("Could not launch %s for %s: %s", self.ping_path, config.target, e)
            return Failed(str(e) or f"could not launch {self.ping_path}")

        try:
            stdout, stderr = process.communicate(timeout=deadline)
        except subprocess.TimeoutExpired:
            logger.warning("ping to %s exceeded %.1fs; terminating pid %d", config.target, deadline, process.pid)
            process.kill()
            # Reap the child so it is never left running or as a zombie
            process.communicate()
            return Timeout()

        outcome = self.classify(process.returncode, stdout, stderr)
        logger.debug("Probe %s -> %s", config.target, outcome)
        return outcome

    def classify(self, returncode: int, stdout: Optional[str], stderr: Optional[str]) -> ProbeOutcome:
        """Map a finished ping invocation onto a ProbeOutcome."""
        if returncode == 0:
            return parse_latency(stdout or "")
        if returncode == self.unreachable_exit_code:
            return Unreachable()
        details = stderr.strip() if stderr else ""
        return Failed(details or f"exit code {returncode}")


def outcome_to_dict(host: str, outcome: ProbeOutcome) -> Dict[str, Any]:
    """Serialize an outcome into a JSON-friendly dict."""
    result: Dict[str, Any] = {
        "host": host,
        "status": type(outcome).__name__.lower(),
        "latency_ms": None,
        "online": outcome.is_online,
    }
    if isinstance(outcome, Success):
        result["latency_ms"] = outcome.latency_ms
    elif isinstance(outcome, Failed):
        result["error"] = outcome.reason
    return result


def main():
    """
    Command-line interface for a single probe.

    Usage:
        python3 -m pingstatus.ping_wrapper <host> [timeout_seconds]

    Outputs JSON with the result:
        {"host": "1.1.1.1", "status": "success", "latency_ms": 12.345, "online": true}
        {"host": "192.0.2.1", "status": "timeout", "latency_ms": null, "online": false}
    """
    if len(sys.argv) < 2:
        print("Usage: python3 -m pingstatus.ping_wrapper <host> [timeout_seconds]", file=sys.stderr)
        sys.exit(1)

    host = sys.argv[1]
    timeout = 2.0
    if len(sys.argv) >= 3:
        try:
            timeout = float(sys.argv[2])
        except ValueError:
            print("Error: timeout_seconds must be a number", file=sys.stderr)
            sys.exit(1)
        if not math.isfinite(timeout) or timeout <= 0:
            print("Error: timeout_seconds must be a finite positive number", file=sys.stderr)
            sys.exit(1)

    try:
        config = ProbeConfig(host, timeout)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    outcome = PingProber().probe(config)
    print(json.dumps(outcome_to_dict(host, outcome)))
    sys.exit(0 if outcome.is_online else 1)


if __name__ == "__main__":
    main()
