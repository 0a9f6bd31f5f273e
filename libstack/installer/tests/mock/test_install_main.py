#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""End-to-end tests of the libstack-install entry point against a mock host."""

import json
import os
import sys
import unittest
from unittest.mock import patch

# Add the project root directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "..", "..")))

from libstack import install
from libstack.installer.utils.exceptions import PreconditionError
from libstack.installer.tests.mock.test_framework import BaseInstallerTest

KOHA = ["--deployment", "koha-native", "--non-interactive", "--quiet"]


class TestInstallMain(BaseInstallerTest):
    def setUp(self):
        super().setUp()
        self.mock_platform.check_preconditions = lambda ctx: None
        for patcher in (
            patch.object(install, "get_platform_installer", return_value=self.mock_platform),
            patch.dict(os.environ, {k: v for k, v in os.environ.items() if not k.startswith("LIBSTACK_")}, clear=True),
        ):
            patcher.start()
            self.addCleanup(patcher.stop)

    def _main(self, *args) -> int:
        with self.assertRaises(SystemExit) as raised:
            install.main(list(args))
        return raised.exception.code

    def test_config_only_runs_nothing(self):
        self.assertEqual(self._main(*KOHA, "-c"), install.EXIT_SUCCESS)
        self.assertEqual(self.mock_platform.commands(), [])

    def test_export_settings_file(self):
        path = os.path.join(self.temp_dir, "settings.json")
        self.assertEqual(self._main(*KOHA, "-c", "--koha-staff-port", "9000", "--export-config", path), 0)

        with open(path) as f:
            configuration = json.load(f)["configuration"]
        self.assertEqual(configuration["deployment"], "koha-native")
        self.assertEqual(configuration["kohaStaffPort"], 9000)
        self.assertNotIn("adminPassword", configuration)

    def test_export_env_file_then_import(self):
        path = os.path.join(self.temp_dir, "libstack.env")
        self.assertEqual(self._main(*KOHA, "-c", "--koha-instance", "library", "--export-config", path), 0)

        with open(path) as f:
            lines = f.read().splitlines()
        self.assertIn("LIBSTACK_KOHA_INSTANCE=library", lines)
        self.assertFalse([line for line in lines if "PASSWORD" in line])

        exported = os.path.join(self.temp_dir, "again.json")
        self.assertEqual(
            self._main("--non-interactive", "--quiet", "-c", "--env-file", path, "--export-config", exported), 0
        )
        with open(exported) as f:
            self.assertEqual(json.load(f)["configuration"]["kohaInstance"], "library")

    def test_dry_run_runs_nothing(self):
        self.assertEqual(self._main(*KOHA, "--dry-run"), install.EXIT_SUCCESS)
        self.assertEqual(self.mock_platform.commands(), [])

    def test_invalid_value_is_config_error(self):
        code = self._main("--deployment", "dspace-docker", "--non-interactive", "--quiet", "--admin-email", "nope")
        self.assertEqual(code, install.EXIT_CONFIG_ERROR)
        self.assertEqual(self.mock_platform.commands(), [])

    def test_missing_settings_file_is_config_error(self):
        code = self._main(*KOHA, "--import-config", os.path.join(self.temp_dir, "absent.json"))
        self.assertEqual(code, install.EXIT_CONFIG_ERROR)

    def test_precondition_failure(self):
        def _fail(ctx):
            raise PreconditionError("koha-native must run as root", "re-run with sudo")

        self.mock_platform.check_preconditions = _fail
        self.assertEqual(self._main(*KOHA), install.EXIT_PRECONDITION_FAILURE)
        self.assertEqual(self.mock_platform.commands(), [])

    def test_step_failure(self):
        self.mock_platform.set_command_result("apt-get update -qq", 100, ["E: Could not get lock"])
        self.assertEqual(self._main(*KOHA), install.EXIT_STEP_FAILURE)
        self.assertEqual(self.mock_platform.commands(), ["apt-get update -qq"])


if __name__ == "__main__":
    unittest.main()
