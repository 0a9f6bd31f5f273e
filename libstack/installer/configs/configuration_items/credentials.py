#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.


"""
DSpace administrator account configuration items.

With the Docker deployment the AIP sample data creates the administrator
itself, so these items are only asked about when another test data option was
chosen and the operator wants an account created.
"""

from libstack.installer.core.config_item import BooleanConfigItem, ConfigItem
from libstack.installer.configs.constants.constants import (
    DEFAULT_ADMIN_EMAIL,
    DEFAULT_ADMIN_FIRST_NAME,
    DEFAULT_ADMIN_LAST_NAME,
    DEFAULT_ADMIN_PASSWORD,
)
from libstack.installer.configs.constants.enums import Deployment, TestDataChoice
from libstack.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_ADMIN_EMAIL,
    KEY_CONFIG_ITEM_ADMIN_FIRST_NAME,
    KEY_CONFIG_ITEM_ADMIN_LAST_NAME,
    KEY_CONFIG_ITEM_ADMIN_PASSWORD,
    KEY_CONFIG_ITEM_CREATE_ADMIN,
    KEY_CONFIG_ITEM_DEPLOYMENT,
    KEY_CONFIG_ITEM_TEST_DATA,
)
from libstack.installer.configs.configuration_items.validators import validate_email, validate_secret

_DSPACE = (Deployment.DSPACE_DOCKER, Deployment.DSPACE_NATIVE)


def _admin_created_by_test_data(values) -> bool:
    return (values.get(KEY_CONFIG_ITEM_DEPLOYMENT) == Deployment.DSPACE_DOCKER) and (
        values.get(KEY_CONFIG_ITEM_TEST_DATA) == TestDataChoice.AIP
    )


def _admin_requested(values) -> bool:
    if values.get(KEY_CONFIG_ITEM_DEPLOYMENT) == Deployment.DSPACE_NATIVE:
        return True
    return (not _admin_created_by_test_data(values)) and bool(values.get(KEY_CONFIG_ITEM_CREATE_ADMIN))


CONFIG_ITEM_CREATE_ADMIN = BooleanConfigItem(
    key=KEY_CONFIG_ITEM_CREATE_ADMIN,
    label="Create Administrator",
    default_value=True,
    validator=lambda x: isinstance(x, bool),
    question="Create administrator account?",
    deployments=(Deployment.DSPACE_DOCKER,),
    visible_when=lambda values: not _admin_created_by_test_data(values),
)

CONFIG_ITEM_ADMIN_EMAIL = ConfigItem(
    key=KEY_CONFIG_ITEM_ADMIN_EMAIL,
    label="Administrator Email",
    default_value=DEFAULT_ADMIN_EMAIL,
    validator=validate_email,
    question=f"Enter admin email (default: {DEFAULT_ADMIN_EMAIL})",
    deployments=_DSPACE,
    visible_when=_admin_requested,
)

CONFIG_ITEM_ADMIN_FIRST_NAME = ConfigItem(
    key=KEY_CONFIG_ITEM_ADMIN_FIRST_NAME,
    label="Administrator First Name",
    default_value=DEFAULT_ADMIN_FIRST_NAME,
    validator=lambda x: isinstance(x, str),
    question="Enter admin first name",
    deployments=_DSPACE,
    visible_when=lambda values: values.get(KEY_CONFIG_ITEM_DEPLOYMENT) == Deployment.DSPACE_NATIVE,
)

CONFIG_ITEM_ADMIN_LAST_NAME = ConfigItem(
    key=KEY_CONFIG_ITEM_ADMIN_LAST_NAME,
    label="Administrator Last Name",
    default_value=DEFAULT_ADMIN_LAST_NAME,
    validator=lambda x: isinstance(x, str),
    question="Enter admin last name",
    deployments=_DSPACE,
    visible_when=lambda values: values.get(KEY_CONFIG_ITEM_DEPLOYMENT) == Deployment.DSPACE_NATIVE,
)

CONFIG_ITEM_ADMIN_PASSWORD = ConfigItem(
    key=KEY_CONFIG_ITEM_ADMIN_PASSWORD,
    label="Administrator Password",
    default_value=DEFAULT_ADMIN_PASSWORD,
    validator=validate_secret,
    is_password=True,
    question=f"Enter admin password (default: {DEFAULT_ADMIN_PASSWORD})",
    deployments=_DSPACE,
    visible_when=_admin_requested,
)


def get_credentials_config_item_dict():
    """Get all ConfigItem objects from this module.

    Returns:
        Dict mapping configuration key strings to their ConfigItem objects
    """
    config_items = {}
    for key_name, key_value in globals().items():
        if isinstance(key_value, ConfigItem):
            config_items[key_value.key] = key_value
    return config_items


# A dictionary mapping configuration keys to their ConfigItem objects, created once at module load.
ALL_CREDENTIALS_CONFIG_ITEMS_DICT = get_credentials_config_item_dict()
