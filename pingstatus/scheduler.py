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
Scheduler module for PingStatus.

This module provides a Scheduler class that probes a single target on a fixed
period. Ticks are anchored to a monotonic start time so slow probes never shift
later ticks. Each probe runs on its own worker thread so the prober's
supervisory wait never blocks the timer, and at most one probe is in flight:
a tick that finds the previous probe still running is skipped, not queued.

Every start() and stop() bumps a generation counter. A probe remembers the
generation it was launched under and its outcome is only delivered while that
generation is still current, so stop() suppresses in-flight results and a
restart never receives a stale outcome from before the restart.
"""

import logging
import math
import threading
import time
from typing import Callable, Optional, Union

from pingstatus.outcome import Failed, ProbeConfig, ProbeOutcome, ScheduleConfig
from pingstatus.ping_wrapper import Prober

logger = logging.getLogger(__name__)

OutcomeHandler = Callable[[ProbeOutcome], None]

STATE_IDLE = "idle"
STATE_RUNNING = "running"


class Scheduler:
    """
    Periodic prober for one target.

    The Scheduler owns the timer and the current probe/schedule configuration.
    Outcomes are passed to ``on_outcome`` by value, once per executed tick, in
    tick order.
    """

    def __init__(
        self,
        prober: Prober,
        probe_config: ProbeConfig,
        schedule_config: Optional[ScheduleConfig] = None,
        on_outcome: Optional[OutcomeHandler] = None,
    ) -> None:
        """
        Initialize the Scheduler in the idle state.

        Args:
            prober: Capability used to run each probe
            probe_config: Target and timeout used by the next tick
            schedule_config: Tick period (default: ScheduleConfig())
            on_outcome: Callback receiving each delivered outcome
        """
        self.prober = prober
        self._probe_config = probe_config
        self._schedule_config = schedule_config if schedule_config is not None else ScheduleConfig()
        self._on_outcome = on_outcome
        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)
        self._generation = 0
        self._running = False
        self._stop_event: Optional[threading.Event] = None
        self._in_flight = False
        self.tick_count = 0
        self.skipped_ticks = 0
        self.discarded_outcomes = 0

    @property
    def probe_config(self) -> ProbeConfig:
        return self._probe_config

    @property
    def schedule_config(self) -> ScheduleConfig:
        return self._schedule_config

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> str:
        return STATE_RUNNING if self._running else STATE_IDLE

    def is_running(self) -> bool:
        return self._running

    def in_flight(self) -> bool:
        """Return True while a probe is executing."""
        return self._in_flight

    def set_handler(self, on_outcome: Optional[OutcomeHandler]) -> None:
        """Register the callback that receives outcomes."""
        with self._lock:
            self._on_outcome = on_outcome

    def start(self) -> None:
        """
        Start probing.

        The first probe is launched immediately; later ticks follow every
        ``interval`` seconds measured from this call. No-op when already running.
        """
        with self._lock:
            if self._running:
                return
            self._generation += 1
            generation = self._generation
            self._running = True
            stop_event = threading.Event()
            self._stop_event = stop_event
            interval = self._schedule_config.interval
            anchor = time.monotonic()

            logger.info(
                "Probing %s every %.1fs (timeout %.1fs)",
                self._probe_config.target,
                interval,
                self._probe_config.timeout,
            )
            self._tick(generation)

            timer = threading.Thread(
                target=self._run_timer,
                args=(generation, stop_event, anchor, interval),
                name=f"pingstatus-timer-{generation}",
                daemon=True,
            )
            timer.start()

    def stop(self) -> None:
        """
        Stop probing. Safe from any state and from within the outcome handler.

        A probe still in flight is allowed to finish, but its outcome is discarded.
        """
        with self._lock:
            self._generation += 1
            was_running = self._running
            self._running = False
            if self._stop_event is not None:
                self._stop_event.set()
                self._stop_event = None
        if was_running:
            logger.info("Stopped probing %s", self._probe_config.target)

    def reconfigure(self, new_config: Union[ProbeConfig, ScheduleConfig]) -> None:
        """
        Swap the probe or schedule configuration.

        A running scheduler is restarted with the new snapshot, so the change
        takes effect on the next tick. An in-flight probe keeps the config it
        was launched with, and its outcome is discarded.

        Raises:
            TypeError: If new_config is neither a ProbeConfig nor a ScheduleConfig
        """
        if not isinstance(new_config, (ProbeConfig, ScheduleConfig)):
            raise TypeError(f"Expected ProbeConfig or ScheduleConfig, got {type(new_config).__name__}")

        with self._lock:
            was_running = self._running
            if was_running:
                self.stop()
            if isinstance(new_config, ProbeConfig):
                self._probe_config = new_config
            else:
                self._schedule_config = new_config
            logger.debug("Reconfigured scheduler with %s", new_config)
            if was_running:
                self.start()

    def refresh(self) -> bool:
        """
        Launch one extra probe now without disturbing the tick schedule.

        Returns:
            True if a probe was launched; False when idle or a probe is in flight
        """
        with self._lock:
            if not self._running:
                return False
            return self._tick(self._generation)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no probe is in flight.

        Returns:
            True if idle, False if the timeout elapsed first
        """
        with self._idle:
            return self._idle.wait_for(lambda: not self._in_flight, timeout)

    def _run_timer(self, generation: int, stop_event: threading.Event, anchor: float, interval: float) -> None:
        next_tick = anchor + interval
        while True:
            remaining = next_tick - time.monotonic()
            if remaining > 0 and stop_event.wait(remaining):
                break
            if stop_event.is_set():
                break
            self._tick(generation)
            next_tick += interval
            now = time.monotonic()
            if next_tick <= now:
                # Boundaries already passed are dropped, never fired in a burst
                missed = math.floor((now - next_tick) / interval) + 1
                with self._lock:
                    self.skipped_ticks += missed
                logger.debug("Timer fell behind; skipping %d tick(s)", missed)
                next_tick += missed * interval

    def _tick(self, generation: int) -> bool:
        with self._lock:
            if generation != self._generation or not self._running:
                return False
            if self._in_flight:
                self.skipped_ticks += 1
                logger.debug("Previous probe still in flight; skipping tick")
                return False
            self._in_flight = True
            self.tick_count += 1
            config = self._probe_config

        worker = threading.Thread(
            target=self._execute,
            args=(generation, config),
            name=f"pingstatus-probe-{generation}",
            daemon=True,
        )
        worker.start()
        return True

    def _execute(self, generation: int, config: ProbeConfig) -> None:
        try:
            outcome = self.prober.probe(config)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.exception("Prober raised while probing %s", config.target)
            outcome = Failed(f"probe error: {e}" if str(e) else f"probe error: {type(e).__name__}")

        with self._idle:
            self._in_flight = False
            self._idle.notify_all()
            if generation != self._generation:
                self.discarded_outcomes += 1
                logger.debug("Discarding outcome from stale generation %d: %s", generation, outcome)
                return
            handler = self._on_outcome
            if handler is None:
                return
            try:
                handler(outcome)
            except Exception:  # pylint: disable=broad-exception-caught
                logger.exception("Outcome handler raised")
