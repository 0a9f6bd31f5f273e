#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Resolve operator options from every source into a frozen RunContext.

Sources are layered, each overriding the one before it:

    item defaults < settings file < .env file / LIBSTACK_* environment
                  < command line < interactive prompts

Interactive prompts are only shown for visible items that were not given on
the command line; the value resolved from the lower layers is offered as the
prompt's default. A value that fails validation is re-asked interactively and
is fatal otherwise.
"""

import copy
from collections import OrderedDict
from typing import Any, Dict, Mapping, Optional

from libstack.installer.configs.configuration_items import ALL_CONFIG_ITEMS_DICT
from libstack.installer.configs.constants.configuration_item_keys import KEY_CONFIG_ITEM_DEPLOYMENT
from libstack.installer.configs.constants.enums import ControlFlow
from libstack.installer.core.config_item import BooleanConfigItem, ConfigItem, EnumConfigItem
from libstack.installer.core.run_context import RunContext
from libstack.installer.core.validation import password_weakness, validate_run_values
from libstack.installer.ui.shared.installer_ui import InstallerUI
from libstack.installer.utils.env_file_utils import load_env_overrides
from libstack.installer.utils.exceptions import ConfigItemNotFoundError, ConfigValueValidationError
from libstack.installer.utils.logger_utils import InstallerLogger
from libstack.installer.utils.settings_file_handler import SettingsFileHandler

SOURCE_DEFAULT = "default"
SOURCE_SETTINGS_FILE = "settings file"
SOURCE_ENVIRONMENT = "environment"
SOURCE_COMMAND_LINE = "command line"
SOURCE_PROMPT = "prompt"


class OptionResolver:
    """Collects option values from each source and produces the run's RunContext."""

    def __init__(
        self,
        ui: Optional[InstallerUI] = None,
        strict_passwords: bool = False,
        control_flow: ControlFlow = ControlFlow.INSTALL,
    ):
        """
        Args:
            ui: Prompting interface, or None for a non-interactive run
            strict_passwords: Treat weak or placeholder secrets as errors
            control_flow: Recorded on the resulting RunContext
        """
        self.items: Dict[str, ConfigItem] = copy.deepcopy(ALL_CONFIG_ITEMS_DICT)
        self.ui = ui
        self.strict_passwords = strict_passwords
        self.control_flow = control_flow
        self._sources: Dict[str, str] = {}
        self._rejected: Dict[str, tuple] = {}

    @property
    def interactive(self) -> bool:
        return self.ui is not None

    def source_of(self, key: str) -> str:
        return self._sources.get(key, SOURCE_DEFAULT)

    def apply_values(self, values: Mapping[str, Any], source: str) -> None:
        """Apply one layer of values; invalid ones are held until resolve()."""
        for key, value in values.items():
            if (item := self.items.get(key)) is None:
                raise ConfigItemNotFoundError(key)
            if value is None:
                continue
            ok, error = item.set_value(value)
            if ok:
                self._sources[key] = source
                self._rejected.pop(key, None)
            else:
                InstallerLogger.debug(f"Rejected {item.label} from {source}: {error}")
                self._rejected[key] = (value, error, source)

    def apply_settings_file(self, settings_file_path: str) -> None:
        self.apply_values(SettingsFileHandler(self.items).load_from_file(settings_file_path), SOURCE_SETTINGS_FILE)

    def apply_environment(self, env_file: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> None:
        self.apply_values(load_env_overrides(self.items.keys(), env_file, environ), SOURCE_ENVIRONMENT)

    def apply_command_line(self, values: Mapping[str, Any]) -> None:
        self.apply_values({k: v for k, v in values.items() if v is not None}, SOURCE_COMMAND_LINE)

    def _should_prompt(self, item: ConfigItem, values: Mapping[str, Any]) -> bool:
        if not (self.interactive and item.is_visible(values)):
            return False
        return (item.key in self._rejected) or (self.source_of(item.key) != SOURCE_COMMAND_LINE)

    def _ask(self, item: ConfigItem) -> Any:
        current = item.get_value()
        question = item.question or item.label
        if isinstance(item, EnumConfigItem):
            descriptions = item.metadata.get("descriptions", {})
            return self.ui.ask_choice(
                question,
                [(choice, descriptions.get(choice, "")) for choice in item.choices],
                default=getattr(current, "value", current),
            )
        if isinstance(item, BooleanConfigItem):
            return self.ui.ask_yes_no(question, default=bool(current))
        if item.is_password:
            return self.ui.ask_password(question, default=current)
        return self.ui.ask_string(question, default="" if current is None else str(current))

    def _prompt(self, item: ConfigItem) -> None:
        if item.key in self._rejected:
            _, error, source = self._rejected[item.key]
            self.ui.display_error(f"Invalid {item.label} from {source}: {error}")
        while True:
            ok, error = item.set_value(self._ask(item))
            if ok and self.strict_passwords and item.is_password:
                if weakness := password_weakness(item.get_value()):
                    ok, error = False, f"{item.label} is {weakness}"
            if ok:
                self._sources[item.key] = SOURCE_PROMPT
                self._rejected.pop(item.key, None)
                return
            self.ui.display_error(f"{item.label}: {error}. Please try again.")

    def resolve(self) -> RunContext:
        """Prompt where needed, validate, and return the frozen context.

        Raises:
            ConfigValueValidationError: A value is invalid and cannot be re-asked
        """
        values = OrderedDict()
        for key, item in self.items.items():
            # the deployment item comes first, so later items see the final choice
            if not item.applies_to(self.items[KEY_CONFIG_ITEM_DEPLOYMENT].get_value()):
                continue
            if self._should_prompt(item, values):
                self._prompt(item)
            elif key in self._rejected:
                value, error, source = self._rejected[key]
                raise ConfigValueValidationError(
                    key, "********" if item.is_password else value, f"{error} (from {source})"
                )
            values[key] = item.get_value()

        errors, warnings = validate_run_values(self.items, values, self.strict_passwords)
        for issue in warnings:
            InstallerLogger.warning(f"{issue.message}; consider a stronger value")
        if errors:
            first = errors[0]
            for issue in errors[1:]:
                InstallerLogger.error(issue.message)
            raise ConfigValueValidationError(
                first.key,
                "********" if self.items[first.key].is_password else values.get(first.key),
                first.message,
            )

        secret_keys = [key for key in values if self.items[key].is_password]
        return RunContext(values, control_flow=self.control_flow, secret_keys=secret_keys).freeze()
