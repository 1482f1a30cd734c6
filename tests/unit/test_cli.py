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
# Review for correctness and security.

"""
Unit tests for pingstatus.cli: option handling, config merging, key commands
and a full non-interactive run against a scripted prober.
"""

import io
import os
import sys
import threading
import unittest
from argparse import Namespace
from unittest.mock import MagicMock, patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from pingstatus.cli import (  # noqa: E402  # pylint: disable=wrong-import-position
    HOST_PRESETS,
    INTERVAL_PRESETS,
    _apply_config_to_args,
    _handle_user_input,
    _make_outcome_handler,
    handle_options,
    next_preset,
    run,
)
from pingstatus.fake import FakeProber  # noqa: E402
from pingstatus.history import HistoryRing  # noqa: E402
from pingstatus.outcome import ProbeConfig, ScheduleConfig, Success, Timeout  # noqa: E402


class TestCLIArgumentParsing(unittest.TestCase):
    """Test command-line argument parsing in pingstatus.cli"""

    def test_default_values(self):
        args = handle_options(["--no-config"])
        self.assertEqual(args.host, "1.1.1.1")
        self.assertEqual(args.interval, 10.0)
        self.assertEqual(args.timeout, 2.0)
        self.assertEqual(args.count, 0)
        self.assertFalse(args.color)
        self.assertEqual(args.ping_path, "ping")
        self.assertEqual(args.unreachable_exit_code, 2)
        self.assertEqual(args.log_level, "INFO")

    def test_custom_values(self):
        args = handle_options(
            ["--no-config", "-i", "0.5", "-t", "1", "-c", "3", "-C", "--log-level", "debug", "example.com"]
        )
        self.assertEqual(args.host, "example.com")
        self.assertEqual(args.interval, 0.5)
        self.assertEqual(args.timeout, 1.0)
        self.assertEqual(args.count, 3)
        self.assertTrue(args.color)
        self.assertEqual(args.log_level, "DEBUG")

    def test_reads_sys_argv_by_default(self):
        with patch("sys.argv", ["pingstatus", "--no-config", "8.8.8.8"]):
            args = handle_options()
        self.assertEqual(args.host, "8.8.8.8")

    def test_invalid_values_exit(self):
        for argv in (["--no-config", "-i", "0"], ["--no-config", "-t", "-1"], ["--no-config", "-c", "-2"], ["--no-config", " "]):
            with patch("sys.stderr", io.StringIO()):
                with self.assertRaises(SystemExit, msg=str(argv)):
                    handle_options(argv)

    def test_non_finite_durations_exit(self):
        for option in ("--interval", "--timeout"):
            for value in ("nan", "inf", "-inf"):
                with patch("sys.stderr", io.StringIO()) as stderr:
                    with self.assertRaises(SystemExit, msg=f"{option} {value}"):
                        handle_options(["--no-config", f"{option}={value}", "1.1.1.1"])
                self.assertIn("finite positive", stderr.getvalue())

    @patch("pingstatus.cli.load_config", return_value={"interval": float("nan")})
    def test_non_finite_config_interval_exits(self, _mock_load):
        with patch("sys.stderr", io.StringIO()):
            with self.assertRaises(SystemExit):
                handle_options(["1.1.1.1"])

    @patch("pingstatus.cli.load_config")
    def test_config_values_fill_unset_options(self, mock_load):
        mock_load.return_value = {"host": "9.9.9.9", "interval": 30.0, "timeout": 4.0}
        args = handle_options(["-i", "1"])
        self.assertEqual(args.host, "9.9.9.9")
        self.assertEqual(args.interval, 1.0)
        self.assertEqual(args.timeout, 4.0)
        mock_load.assert_called_once_with(None)

    @patch("pingstatus.cli.load_config", return_value={})
    def test_config_path_option(self, mock_load):
        handle_options(["--config", "/tmp/custom.conf"])
        mock_load.assert_called_once_with("/tmp/custom.conf")

    @patch("pingstatus.cli.load_config", side_effect=ValueError("bad config"))
    def test_config_error_exits(self, _mock_load):
        with patch("sys.stderr", io.StringIO()) as stderr:
            with self.assertRaises(SystemExit):
                handle_options([])
        self.assertIn("bad config", stderr.getvalue())

    @patch("pingstatus.cli.load_config")
    def test_no_config_skips_loading(self, mock_load):
        handle_options(["--no-config"])
        mock_load.assert_not_called()

    def test_apply_config_only_fills_none(self):
        args = Namespace(host=None, interval=2.0)
        _apply_config_to_args(args, {"host": "1.0.0.1", "interval": 60.0, "unknown": 1})
        self.assertEqual(args.host, "1.0.0.1")
        self.assertEqual(args.interval, 2.0)
        self.assertFalse(hasattr(args, "unknown"))


class TestPresets(unittest.TestCase):
    """Tests for preset cycling"""

    def test_next_preset_advances_and_wraps(self):
        self.assertEqual(next_preset(INTERVAL_PRESETS, 10.0), 30.0)
        self.assertEqual(next_preset(INTERVAL_PRESETS, 60.0), 0.5)
        self.assertEqual(next_preset(HOST_PRESETS, "9.9.9.9"), "1.1.1.1")

    def test_unknown_value_starts_at_first_preset(self):
        self.assertEqual(next_preset(INTERVAL_PRESETS, 3.0), 0.5)
        self.assertEqual(next_preset(HOST_PRESETS, "example.com"), "1.1.1.1")


class TestUserInput(unittest.TestCase):
    """Tests for keyboard command handling"""

    def setUp(self):
        self.scheduler = MagicMock()
        self.scheduler.schedule_config = ScheduleConfig(10.0)
        self.scheduler.probe_config = ProbeConfig("1.1.1.1", 2.0)
        self.state = {"scheduler": self.scheduler, "done": MagicMock()}

    def test_refresh(self):
        _handle_user_input("r", self.state)
        self.scheduler.refresh.assert_called_once()

    def test_interval_cycle(self):
        _handle_user_input("i", self.state)
        self.scheduler.reconfigure.assert_called_once_with(ScheduleConfig(30.0))

    def test_host_cycle_keeps_timeout(self):
        _handle_user_input("s", self.state)
        self.scheduler.reconfigure.assert_called_once_with(ProbeConfig("1.0.0.1", 2.0))

    def test_quit(self):
        _handle_user_input("q", self.state)
        self.state["done"].set.assert_called_once()

    def test_unknown_key_is_ignored(self):
        _handle_user_input("x", self.state)
        self.scheduler.reconfigure.assert_not_called()
        self.scheduler.refresh.assert_not_called()


class TestOutcomeHandler(unittest.TestCase):
    """Tests for the scheduler callback used by the CLI"""

    def test_records_until_count_reached(self):
        state = {
            "history": HistoryRing(),
            "lock": threading.Lock(),
            "updated": False,
            "delivered": 0,
            "count": 2,
            "done": threading.Event(),
        }
        handler = _make_outcome_handler(state)
        handler(Success(1.0))
        self.assertFalse(state["done"].is_set())
        self.assertTrue(state["updated"])
        handler(Timeout())
        self.assertTrue(state["done"].is_set())
        handler(Success(3.0))
        self.assertEqual(state["delivered"], 2)
        self.assertEqual([entry.outcome for entry in state["history"].entries()], [Success(1.0), Timeout()])


class TestRun(unittest.TestCase):
    """End-to-end run with the prober replaced by a script"""

    @patch("pingstatus.cli._configure_logging")
    @patch("pingstatus.cli.PingProber")
    def test_run_stops_after_count_and_prints_summary(self, mock_prober_cls, _mock_logging):
        mock_prober_cls.return_value = FakeProber([Success(12.0), Timeout()])
        args = handle_options(["--no-config", "-c", "2", "-i", "0.05", "example.com"])

        stdout = io.StringIO()
        with patch("sys.stdout", stdout), patch("sys.stdin", io.StringIO()):
            run(args)

        output = stdout.getvalue()
        self.assertIn("example.com: ", output)
        self.assertIn("12 ms", output)
        self.assertIn("Timeout", output)
        self.assertIn("SUMMARY: 2 result(s), 1/2 recent online", output)
        self.assertNotIn("\x1b[", output)
        mock_prober_cls.assert_called_once_with(ping_path="ping", unreachable_exit_code=2)


if __name__ == "__main__":
    unittest.main()
