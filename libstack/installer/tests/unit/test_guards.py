#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Unit tests for idempotency guards and the run-once ledger."""

import json
import os
import sys
import unittest

# Add the project root directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "..", "..")))

from libstack.installer.core import guards
from libstack.installer.core.guards import RunOnceLedger
from libstack.installer.core.plan import PlanBuilder
from libstack.installer.utils.exceptions import ProbeUnavailableError
from libstack.installer.tests.mock.test_framework import BaseInstallerTest


class TestFileGuards(BaseInstallerTest):
    def setUp(self):
        super().setUp()
        self.ctx = self.create_test_context()
        self.path = os.path.join(self.temp_dir, "ports.conf")
        with open(self.path, "w") as f:
            f.write("Listen 80\nListen 8080\n")

    def test_path_and_dir_exists(self):
        self.assertTrue(guards.path_exists(self.path)(self.ctx))
        self.assertFalse(guards.path_exists(self.path + ".bak")(self.ctx))
        self.assertTrue(guards.dir_exists(self.temp_dir)(self.ctx))
        self.assertFalse(guards.dir_exists(self.path)(self.ctx))

    def test_git_checkout_exists(self):
        self.assertFalse(guards.git_checkout_exists(self.temp_dir)(self.ctx))
        os.makedirs(os.path.join(self.temp_dir, ".git"))
        self.assertTrue(guards.git_checkout_exists(self.temp_dir)(self.ctx))

    def test_file_contains(self):
        self.assertTrue(guards.file_contains(self.path, "8080")(self.ctx))
        self.assertFalse(guards.file_contains(self.path, "8081")(self.ctx))
        self.assertFalse(guards.file_contains(os.path.join(self.temp_dir, "missing"), "80")(self.ctx))

    def test_file_has_line_is_whole_line(self):
        self.assertTrue(guards.file_has_line(self.path, "Listen 80")(self.ctx))
        self.assertFalse(guards.file_has_line(self.path, "Listen 808")(self.ctx))

    def test_file_matches_rendered_content(self):
        self.assertTrue(guards.file_matches(self.path, lambda c: "Listen 80\nListen 8080\n")(self.ctx))
        self.assertFalse(guards.file_matches(self.path, lambda c: "Listen 80\n")(self.ctx))

    def test_combinators(self):
        yes = lambda c: True  # noqa: E731
        no = lambda c: False  # noqa: E731
        self.assertTrue(guards.any_of(no, yes)(self.ctx))
        self.assertFalse(guards.all_of(yes, no)(self.ctx))
        self.assertTrue(guards.all_of(yes, yes)(self.ctx))

    def test_exists_without_check(self):
        plan = PlanBuilder("test").step("always", ()).step("never", (), unless=lambda c: True).build()
        self.assertFalse(guards.exists(plan.steps[0], self.ctx))
        self.assertTrue(guards.exists(plan.steps[1], self.ctx))


class TestCommandGuards(BaseInstallerTest):
    def setUp(self):
        super().setUp()
        self.ctx = self.create_test_context()

    def test_missing_tool_raises_probe_unavailable(self):
        self.mock_platform.set_command_result("id -u dspace", 127, ["id: not found"])
        with self.assertRaises(ProbeUnavailableError) as raised:
            guards.user_exists(self.mock_platform, "dspace")(self.ctx)
        self.assertEqual(raised.exception.command, "id -u dspace")

    def test_user_exists(self):
        self.mock_platform.set_command_result("id -u dspace", 1, ["id: 'dspace': no such user"])
        self.assertFalse(guards.user_exists(self.mock_platform, "dspace")(self.ctx))
        self.mock_platform.set_command_result("id -u dspace", 0, ["1001"])
        self.assertTrue(guards.user_exists(self.mock_platform, "dspace")(self.ctx))

    def test_user_in_group(self):
        self.mock_platform.set_command_result("id -nG alice", 0, ["alice sudo docker"])
        self.assertTrue(guards.user_in_group(self.mock_platform, "alice", "docker")(self.ctx))
        self.assertFalse(guards.user_in_group(self.mock_platform, "alice", "tomcat")(self.ctx))

    def test_packages_installed_requires_every_package(self):
        self.mock_platform.set_command_result("dpkg-query -W -f=${Status} git", 0, ["install ok installed"])
        self.mock_platform.set_command_result("dpkg-query -W -f=${Status} maven", 1, ["no packages found"])
        self.assertTrue(guards.packages_installed(self.mock_platform, ["git"])(self.ctx))
        self.assertFalse(guards.packages_installed(self.mock_platform, ["git", "maven"])(self.ctx))

    def test_removed_package_is_not_installed(self):
        self.mock_platform.set_command_result("dpkg-query -W -f=${Status} git", 0, ["deinstall ok config-files"])
        self.assertFalse(guards.packages_installed(self.mock_platform, ["git"])(self.ctx))

    def test_crontab_without_table(self):
        self.mock_platform.set_command_result("crontab -l", 1, ["no crontab for root"])
        self.assertFalse(guards.crontab_has_line(self.mock_platform, "@reboot pm2 resurrect")(self.ctx))

    def test_crontab_has_line(self):
        self.mock_platform.set_command_result("crontab -l -u dspace", 0, ["@reboot pm2 resurrect"])
        self.assertTrue(guards.crontab_has_line(self.mock_platform, "@reboot pm2 resurrect", user="dspace")(self.ctx))

    def test_pg_role_exists(self):
        self.mock_platform.set_prefix_result("sudo -u postgres psql -tAc SELECT 1 FROM pg_roles", 0, ["1"])
        self.assertTrue(guards.pg_role_exists(self.mock_platform, "dspace")(self.ctx))

    def test_pg_database_missing(self):
        self.mock_platform.set_prefix_result("sudo -u postgres psql -tAc SELECT 1 FROM pg_database", 0, [""])
        self.assertFalse(guards.pg_database_exists(self.mock_platform, "dspace")(self.ctx))

    def test_postgres_not_answering_is_unavailable(self):
        self.mock_platform.set_prefix_result("sudo -u postgres psql", 2, ["could not connect to server"])
        with self.assertRaises(ProbeUnavailableError):
            guards.pg_extension_exists(self.mock_platform, "dspace", "pgcrypto")(self.ctx)

    def test_pg_extension_queries_database(self):
        self.mock_platform.set_prefix_result("sudo -u postgres psql", 0, ["1"])
        guards.pg_extension_exists(self.mock_platform, "dspace", "pgcrypto")(self.ctx)
        self.assertTrue(self.mock_platform.commands()[-1].endswith(" dspace"))

    def test_containers(self):
        self.mock_platform.set_command_result("docker ps --format {{.Names}}", 0, ["dspacedb", "dspace", ""])
        self.assertTrue(guards.container_running(self.mock_platform, "dspace")(self.ctx))
        self.assertFalse(
            guards.all_containers_running(self.mock_platform, ["dspace", "dspacesolr"])(self.ctx)
        )

    def test_docker_daemon_down_is_unavailable(self):
        self.mock_platform.set_command_result("docker ps --format {{.Names}}", 1, ["Cannot connect"])
        with self.assertRaises(ProbeUnavailableError):
            guards.container_running(self.mock_platform, "dspace")(self.ctx)

    def test_koha_instance_exists(self):
        self.mock_platform.set_command_result("koha-list", 0, ["library", "other"])
        self.assertTrue(guards.koha_instance_exists(self.mock_platform, "library")(self.ctx))
        self.assertFalse(guards.koha_instance_exists(self.mock_platform, "lib")(self.ctx))

    def test_apache_module_enabled(self):
        self.mock_platform.set_command_result("a2query -q -m rewrite", 0, [])
        self.mock_platform.set_command_result("a2query -q -m cgi", 1, [])
        self.assertTrue(guards.apache_module_enabled(self.mock_platform, "rewrite")(self.ctx))
        self.assertFalse(guards.apache_module_enabled(self.mock_platform, "cgi")(self.ctx))

    def test_pm2_app_online(self):
        apps = [
            {"name": "dspace-ui", "pm2_env": {"status": "online"}},
            {"name": "pm2-logrotate", "pm2_env": {"status": "stopped"}},
        ]
        self.mock_platform.set_command_result("pm2 jlist", 0, ["[PM2] Spawning PM2 daemon", json.dumps(apps)])
        self.assertTrue(guards.pm2_app_online(self.mock_platform, "dspace-ui")(self.ctx))
        self.assertFalse(guards.pm2_app_online(self.mock_platform, "pm2-logrotate")(self.ctx))
        self.assertFalse(guards.pm2_app_online(self.mock_platform, "missing")(self.ctx))

    def test_pm2_unparseable_output(self):
        self.mock_platform.set_command_result("pm2 jlist", 0, ["[not json"])
        self.assertFalse(guards.pm2_app_online(self.mock_platform, "dspace-ui")(self.ctx))


class TestRunOnceLedger(BaseInstallerTest):
    def setUp(self):
        super().setUp()
        self.ctx = self.create_test_context()
        self.ledger = RunOnceLedger(os.path.join(self.temp_dir, "state", "completed"))

    def test_empty_ledger(self):
        self.assertFalse(self.ledger.has("dspace-docker:admin"))
        self.assertFalse(self.ledger.guard("dspace-docker:admin")(self.ctx))

    def test_record_creates_file_once(self):
        self.ledger.record("dspace-docker:admin")
        self.ledger.record("dspace-docker:admin")
        with open(self.ledger.path) as f:
            self.assertEqual(f.read(), "dspace-docker:admin\n")
        self.assertTrue(self.ledger.guard("dspace-docker:admin")(self.ctx))

    def test_mark_action(self):
        action = self.ledger.mark("dspace-native:migrated")
        self.assertIsNone(action.func(self.ctx, self.mock_platform))
        self.assertTrue(self.ledger.has("dspace-native:migrated"))

    def test_forget(self):
        self.ledger.record("a")
        self.ledger.record("b")
        self.ledger.forget("a")
        self.assertFalse(self.ledger.has("a"))
        self.assertTrue(self.ledger.has("b"))

    def test_forget_without_file(self):
        self.ledger.forget("a")
        self.assertFalse(os.path.exists(self.ledger.path))


if __name__ == "__main__":
    unittest.main()
