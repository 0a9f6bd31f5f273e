#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Unit tests for settings files, .env files and configuration summaries."""

import json
import os
import sys
import unittest

# Add the project root directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "..", "..")))

from libstack.installer.configs.configuration_items import ALL_CONFIG_ITEMS_DICT
from libstack.installer.configs.constants.enums import Deployment, TestDataChoice
from libstack.installer.utils.env_file_utils import env_var_name, load_env_overrides, write_env_file
from libstack.installer.utils.exceptions import FileOperationError
from libstack.installer.utils.settings_file_handler import SettingsFileHandler
from libstack.installer.utils.summary_utils import build_configuration_summary_items, format_summary_lines
from libstack.installer.tests.mock.test_framework import BaseInstallerTest

VALUES = {
    "deployment": Deployment.DSPACE_DOCKER,
    "testData": TestDataChoice.AIP,
    "rebuildUi": True,
    "adminEmail": "admin@example.org",
    "adminPassword": "Corr3ct-Horse",
}


class TestSettingsFileHandler(BaseInstallerTest):
    def setUp(self):
        super().setUp()
        self.handler = SettingsFileHandler(ALL_CONFIG_ITEMS_DICT)

    def test_json_export_omits_passwords(self):
        path = os.path.join(self.temp_dir, "settings.json")
        self.handler.save_to_file(path, VALUES)
        with open(path) as f:
            data = json.load(f)

        self.assertEqual(data["configuration"]["testData"], "aip")
        self.assertEqual(data["configuration"]["deployment"], "dspace-docker")
        self.assertNotIn("adminPassword", data["configuration"])
        self.assertIn("version", data["metadata"])

    def test_yaml_round_trip(self):
        path = os.path.join(self.temp_dir, "nested", "settings.yaml")
        self.handler.save_to_file(path, VALUES)
        loaded = self.handler.load_from_file(path)

        self.assertEqual(
            loaded,
            {"deployment": "dspace-docker", "testData": "aip", "rebuildUi": True, "adminEmail": "admin@example.org"},
        )

    def test_dry_run_writes_nothing(self):
        path = os.path.join(self.temp_dir, "settings.json")
        self.handler.save_to_file(path, VALUES, dry_run=True)
        self.assertFalse(os.path.exists(path))

    def test_flat_file_and_unknown_keys(self):
        path = os.path.join(self.temp_dir, "flat.json")
        with open(path, "w") as f:
            json.dump({"kohaInstance": "library", "colour": "blue", "kohaOpacPort": None}, f)
        self.assertEqual(self.handler.load_from_file(path), {"kohaInstance": "library"})

    def test_missing_file(self):
        with self.assertRaises(FileOperationError):
            self.handler.load_from_file(os.path.join(self.temp_dir, "absent.json"))

    def test_non_mapping_root(self):
        path = os.path.join(self.temp_dir, "list.json")
        with open(path, "w") as f:
            json.dump(["deployment"], f)
        with self.assertRaises(FileOperationError):
            self.handler.load_from_file(path)


class TestEnvFileUtils(BaseInstallerTest):
    def test_env_var_name(self):
        self.assertEqual(env_var_name("adminEmail"), "LIBSTACK_ADMIN_EMAIL")
        self.assertEqual(env_var_name("installDockerIfMissing"), "LIBSTACK_INSTALL_DOCKER_IF_MISSING")
        self.assertEqual(env_var_name("deployment"), "LIBSTACK_DEPLOYMENT")

    def test_environment_overrides_file(self):
        path = os.path.join(self.temp_dir, "libstack.env")
        with open(path, "w") as f:
            f.write("LIBSTACK_ADMIN_EMAIL=file@example.org\nLIBSTACK_SITE_NAME='My Library'\nOTHER=1\n")

        values = load_env_overrides(
            ["adminEmail", "siteName", "uiUrl"], path, {"LIBSTACK_ADMIN_EMAIL": "env@example.org"}
        )
        self.assertEqual(values, {"adminEmail": "env@example.org", "siteName": "My Library"})

    def test_missing_env_file(self):
        with self.assertRaises(FileOperationError):
            load_env_overrides(["adminEmail"], os.path.join(self.temp_dir, "absent.env"), {})

    def test_write_env_file(self):
        path = os.path.join(self.temp_dir, "export.env")
        write_env_file(path, {"testData": TestDataChoice.ENTITIES, "rebuildUi": False, "kohaStaffPort": 8000})

        with open(path) as f:
            lines = f.read().splitlines()
        self.assertEqual(
            lines,
            ["LIBSTACK_KOHA_STAFF_PORT=8000", "LIBSTACK_REBUILD_UI=false", "LIBSTACK_TEST_DATA=entities"],
        )
        self.assertEqual(load_env_overrides(["rebuildUi"], path, {}), {"rebuildUi": "false"})


class TestSummaryUtils(unittest.TestCase):
    def test_summary_masks_secrets(self):
        items = build_configuration_summary_items(ALL_CONFIG_ITEMS_DICT, VALUES)
        as_dict = dict(items)

        self.assertEqual(as_dict["Deployment"], "dspace-docker")
        self.assertEqual(as_dict["Rebuild Angular UI"], "Yes")
        self.assertEqual(as_dict["Administrator Password"], "********")

    def test_format_lines(self):
        lines = format_summary_lines([("Site Name", "DSpace"), ("Port", "Not set")], title="Summary")
        self.assertEqual(lines, ["Summary", "=======", "Site Name : DSpace", "Port      : Not set"])


if __name__ == "__main__":
    unittest.main()
