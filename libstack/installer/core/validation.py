#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
Validation helpers for resolved libstack options.

Single-field format checks live on each ConfigItem's validator. The rules here
look across fields once every option has been resolved:

- Weak or placeholder secrets (warnings, or errors in strict mode)
- Conflicting ports and URLs
"""

from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

from libstack.installer.configs.constants.constants import MIN_PASSWORD_LENGTH, PLACEHOLDER_PASSWORDS
from libstack.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_ADMIN_PASSWORD,
    KEY_CONFIG_ITEM_CREATE_ADMIN,
    KEY_CONFIG_ITEM_DEPLOYMENT,
    KEY_CONFIG_ITEM_KOHA_OPAC_PORT,
    KEY_CONFIG_ITEM_KOHA_STAFF_PORT,
    KEY_CONFIG_ITEM_SERVER_URL,
    KEY_CONFIG_ITEM_TEST_DATA,
    KEY_CONFIG_ITEM_UI_URL,
)
from libstack.installer.configs.constants.enums import Deployment, TestDataChoice


@dataclass
class ValidationIssue:
    key: str
    label: str
    message: str


def password_weakness(value) -> Optional[str]:
    """Describe why a secret is weak, or None if it is acceptable."""
    if not isinstance(value, str) or len(value) < MIN_PASSWORD_LENGTH:
        return f"shorter than {MIN_PASSWORD_LENGTH} characters"
    if value.lower() in PLACEHOLDER_PASSWORDS:
        return "a well-known placeholder value"
    return None


def _secret_in_use(key: str, values: Mapping) -> bool:
    if key != KEY_CONFIG_ITEM_ADMIN_PASSWORD:
        return True
    if values.get(KEY_CONFIG_ITEM_DEPLOYMENT) != Deployment.DSPACE_DOCKER:
        return True
    return bool(values.get(KEY_CONFIG_ITEM_CREATE_ADMIN)) or (
        values.get(KEY_CONFIG_ITEM_TEST_DATA) == TestDataChoice.AIP
    )


def validate_run_values(
    config_items: Mapping, values: Mapping, strict_passwords: bool = False
) -> Tuple[List[ValidationIssue], List[ValidationIssue]]:
    """Check resolved values as a whole.

    Args:
        config_items: ConfigItem objects keyed by configuration key (for labels)
        values: Resolved values for the items that apply to the chosen deployment
        strict_passwords: Report weak secrets as errors rather than warnings

    Returns:
        (errors, warnings)
    """
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []

    def _label(key):
        item = config_items.get(key)
        return item.label if item else key

    for key, value in values.items():
        item = config_items.get(key)
        if not (item and item.is_password and _secret_in_use(key, values)):
            continue
        if weakness := password_weakness(value):
            issue = ValidationIssue(key, item.label, f"{item.label} is {weakness}")
            (errors if strict_passwords else warnings).append(issue)

    staff_port = values.get(KEY_CONFIG_ITEM_KOHA_STAFF_PORT)
    opac_port = values.get(KEY_CONFIG_ITEM_KOHA_OPAC_PORT)
    if (staff_port is not None) and (staff_port == opac_port):
        errors.append(
            ValidationIssue(
                KEY_CONFIG_ITEM_KOHA_OPAC_PORT,
                _label(KEY_CONFIG_ITEM_KOHA_OPAC_PORT),
                f"OPAC and staff interfaces cannot share port {opac_port}",
            )
        )

    server_url = values.get(KEY_CONFIG_ITEM_SERVER_URL)
    ui_url = values.get(KEY_CONFIG_ITEM_UI_URL)
    if server_url and ui_url and (server_url.rstrip("/") == ui_url.rstrip("/")):
        errors.append(
            ValidationIssue(
                KEY_CONFIG_ITEM_UI_URL,
                _label(KEY_CONFIG_ITEM_UI_URL),
                "Frontend and server URLs must differ",
            )
        )

    return errors, warnings
