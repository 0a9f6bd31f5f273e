#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Unit tests for bounded readiness polling and the readiness probes."""

import os
import sys
import unittest
from unittest.mock import patch

# Add the project root directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "..", "..")))

from libstack.installer.core import readiness
from libstack.installer.core.readiness import await_ready
from libstack.installer.utils.exceptions import ProbeUnavailableError
from libstack.installer.tests.mock.test_framework import BaseInstallerTest


class _Counter:
    def __init__(self, ready_after: int):
        self.ready_after = ready_after
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.calls > self.ready_after


class TestAwaitReady(unittest.TestCase):
    def setUp(self):
        self.sleeps = []

    def _sleep(self, seconds):
        self.sleeps.append(seconds)

    def test_ready_first_time_does_not_sleep(self):
        result = await_ready(lambda: True, 5, 2, sleep=self._sleep)
        self.assertTrue(result.ready)
        self.assertEqual(result.attempts, 1)
        self.assertEqual(self.sleeps, [])

    def test_ready_after_four_failures(self):
        check = _Counter(4)
        result = await_ready(check, 10, 2, sleep=self._sleep)
        self.assertTrue(result)
        self.assertEqual(check.calls, 5)
        self.assertEqual(result.attempts, 5)
        self.assertEqual(self.sleeps, [2, 2, 2, 2])

    def test_never_exceeds_max_attempts(self):
        check = _Counter(100)
        result = await_ready(check, 4, 1, sleep=self._sleep)
        self.assertFalse(result.ready)
        self.assertTrue(result.timed_out)
        self.assertEqual(check.calls, 4)
        # no sleep after the final evaluation
        self.assertEqual(len(self.sleeps), 3)

    def test_detail_and_diagnostics_on_timeout(self):
        result = await_ready(
            lambda: (False, "connection refused"),
            2,
            0,
            sleep=self._sleep,
            diagnostics=lambda: ["line 1", "line 2"],
        )
        self.assertEqual(result.detail, "connection refused")
        self.assertEqual(result.diagnostics, ["line 1", "line 2"])

    def test_diagnostics_not_collected_when_ready(self):
        collected = []
        await_ready(lambda: True, 2, 0, sleep=self._sleep, diagnostics=lambda: collected.append(1) or [])
        self.assertEqual(collected, [])

    def test_probe_unavailable_propagates_immediately(self):
        calls = []

        def _check():
            calls.append(1)
            raise ProbeUnavailableError("pg_isready is not available")

        with self.assertRaises(ProbeUnavailableError):
            await_ready(_check, 10, 1, sleep=self._sleep)
        self.assertEqual(len(calls), 1)
        self.assertEqual(self.sleeps, [])

    def test_invalid_attempt_budget(self):
        with self.assertRaises(ValueError):
            await_ready(lambda: True, 0, 1, sleep=self._sleep)


class TestReadinessProbes(BaseInstallerTest):
    def test_http_ready_below_ceiling(self):
        ctx = self.create_test_context()
        with patch.object(readiness, "test_http_connection", return_value=(302, "Found")):
            ready, detail = readiness.http_ready("http://localhost:8080/server")(ctx)
        self.assertTrue(ready)
        self.assertIn("302", detail)

    def test_http_ready_server_error(self):
        ctx = self.create_test_context()
        with patch.object(readiness, "test_http_connection", return_value=(503, "Service Unavailable")):
            ready, _ = readiness.http_ready("http://localhost:8983/solr/")(ctx)
        self.assertFalse(ready)

    def test_http_ready_no_response(self):
        ctx = self.create_test_context()
        with patch.object(readiness, "test_http_connection", return_value=(0, "Connection refused")):
            ready, detail = readiness.http_ready("http://localhost:4000")(ctx)
        self.assertFalse(ready)
        self.assertIn("no response", detail)

    def test_pg_isready(self):
        ctx = self.create_test_context()
        self.mock_platform.set_command_result("pg_isready", 2, ["/var/run/postgresql:5432 - no response"])
        ready, detail = readiness.pg_isready(self.mock_platform)(ctx)
        self.assertFalse(ready)
        self.assertIn("no response", detail)

    def test_pg_isready_missing_tool(self):
        ctx = self.create_test_context()
        self.mock_platform.set_command_result("pg_isready", 127, ["not found"])
        with self.assertRaises(ProbeUnavailableError):
            readiness.pg_isready(self.mock_platform)(ctx)

    def test_compose_pg_isready_waits_for_container(self):
        ctx = self.create_test_context()
        self.mock_platform.set_command_result("docker ps --format {{.Names}}", 0, ["dspacesolr"])
        check = readiness.compose_pg_isready(self.mock_platform, ["docker", "compose"], "dspacedb", "dspace")
        ready, detail = check(ctx)
        self.assertFalse(ready)
        self.assertEqual(detail, "Database container not running yet")
        self.assertCommandNotExecuted("pg_isready")

    def test_compose_pg_isready_runs_in_container(self):
        ctx = self.create_test_context()
        self.mock_platform.set_command_result("docker ps --format {{.Names}}", 0, ["dspacedb"])
        check = readiness.compose_pg_isready(self.mock_platform, ["docker", "compose"], "dspacedb", "dspace")
        ready, _ = check(ctx)
        self.assertTrue(ready)
        self.assertCommandExecuted("docker compose exec -T dspacedb pg_isready -U dspace")

    def test_docker_daemon_not_answering(self):
        ctx = self.create_test_context()
        self.mock_platform.set_command_result("docker info", 1, ["Cannot connect to the Docker daemon"])
        ready, detail = readiness.docker_daemon_ready(self.mock_platform)(ctx)
        self.assertFalse(ready)
        self.assertEqual(detail, "Cannot connect to the Docker daemon")

    def test_command_output_tail(self):
        ctx = self.create_test_context()
        self.mock_platform.set_command_result("journalctl -u tomcat10", 0, ["a", "b", "c"])
        self.assertEqual(readiness.command_output(self.mock_platform, ["journalctl", "-u", "tomcat10"], 2)(ctx), ["b", "c"])


if __name__ == "__main__":
    unittest.main()
