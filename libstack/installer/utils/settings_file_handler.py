#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Read and write installer settings (JSON/YAML) files."""

import datetime
import json
from pathlib import Path
from typing import Any, Dict, Mapping

from ruamel.yaml import YAML

from libstack.libstack_common import LoadYamlOrJson
from libstack.libstack_constants import LIBSTACK_VERSION, SettingsFileFormat
from libstack.installer.utils.exceptions import FileOperationError
from libstack.installer.utils.logger_utils import InstallerLogger


class SettingsFileHandler:
    """Handler for loading and saving libstack installer settings files.

    A settings file holds a "configuration" mapping of configuration item keys
    to values, plus an informational "metadata" block. Values for password
    items are never written out.
    """

    def __init__(self, config_items: Mapping[str, Any]):
        """Initialize the settings file handler.

        Args:
            config_items: ConfigItem objects keyed by configuration key
        """
        self.config_items = config_items

    def load_from_file(self, settings_file_path: str) -> Dict[str, Any]:
        """Parse a settings file and return its configuration section.

        Unknown keys are reported and dropped.

        Raises:
            FileOperationError: If the file is missing or cannot be parsed
        """
        settings_path = Path(settings_file_path)
        if not settings_path.is_file():
            raise FileOperationError(f"Settings file not found: {settings_file_path}")

        try:
            settings_data, fmt = LoadYamlOrJson(str(settings_path))
        except Exception as e:
            raise FileOperationError(f"Failed to parse settings file {settings_file_path}: {e}")

        if not isinstance(settings_data, dict):
            raise FileOperationError("Settings file must contain a dictionary/object at root level")
        InstallerLogger.debug(f"Loaded {fmt.value} settings from {settings_file_path}")

        # a flat mapping of keys is accepted as well as the exported layout
        configuration_section = settings_data.get("configuration", settings_data)
        if not isinstance(configuration_section, dict):
            raise FileOperationError("The 'configuration' section must be a dictionary/object")

        result = {}
        for key, value in configuration_section.items():
            if key == "metadata":
                continue
            if key not in self.config_items:
                InstallerLogger.warning(f"Ignoring unknown setting '{key}' in {settings_file_path}")
                continue
            if value is None:
                continue
            result[key] = value
        return result

    def build_settings_data(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        configuration = {}
        for key, item in self.config_items.items():
            if item.is_password or key not in values:
                continue
            value = values[key]
            configuration[key] = getattr(value, "value", value)
        return {
            "metadata": {
                "description": "libstack installer configuration file",
                "version": LIBSTACK_VERSION,
                "generated": datetime.datetime.now().isoformat(timespec="seconds"),
                "usage": "libstack-install --import-config <path_to_this_file>",
            },
            "configuration": configuration,
        }

    def save_to_file(
        self,
        settings_file_path: str,
        values: Mapping[str, Any],
        file_format: str = "auto",
        dry_run: bool = False,
    ) -> None:
        """Save resolved configuration values to a JSON/YAML settings file.

        Args:
            settings_file_path: Path where to save the settings file
            values: Resolved values keyed by configuration key
            file_format: Format to use ('json', 'yaml', or 'auto' to detect from extension)
            dry_run: Only report what would be written

        Raises:
            FileOperationError: If file cannot be written
        """
        settings_path = Path(settings_file_path)

        if file_format == "auto":
            if settings_path.suffix.lower() in [".yml", ".yaml"]:
                file_format = SettingsFileFormat.YAML.value
            else:
                file_format = SettingsFileFormat.JSON.value

        settings_data = self.build_settings_data(values)

        if dry_run:
            InstallerLogger.info(f"Dry run: would save settings to {settings_file_path} as {file_format}")
            return

        try:
            settings_path.parent.mkdir(parents=True, exist_ok=True)

            if file_format == SettingsFileFormat.YAML.value:
                yaml = YAML()
                yaml.default_flow_style = False
                yaml.width = 4096  # prevent line wrapping
                with open(settings_path, "w") as f:
                    yaml.dump(settings_data, f)
            else:
                with open(settings_path, "w") as f:
                    json.dump(settings_data, f, indent=2, sort_keys=True)

            InstallerLogger.info(f"Settings saved to {settings_file_path}")
        except OSError as e:
            raise FileOperationError(f"Failed to write settings file {settings_file_path}: {e}")
