#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.


"""
DSpace configuration items for the libstack installer.

Docker Compose items control the dspace-angular checkout, image rebuilds and
which sample content is loaded after startup. Native items carry the service
account and database secrets and the public URLs written into local.cfg and
the frontend's config.prod.yml.
"""

import os

from libstack.installer.core.config_item import BooleanConfigItem, ConfigItem, EnumConfigItem
from libstack.installer.configs.constants.constants import (
    ANGULAR_REPO_URL,
    DEFAULT_SERVER_URL,
    DEFAULT_SITE_NAME,
    DEFAULT_UI_URL,
)
from libstack.installer.configs.constants.enums import Deployment, TestDataChoice
from libstack.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_ANGULAR_REPO_URL,
    KEY_CONFIG_ITEM_DB_PASSWORD,
    KEY_CONFIG_ITEM_DSPACE_USER_PASSWORD,
    KEY_CONFIG_ITEM_FOLLOW_LOGS,
    KEY_CONFIG_ITEM_INSTALL_DOCKER_IF_MISSING,
    KEY_CONFIG_ITEM_INSTALL_GIT_IF_MISSING,
    KEY_CONFIG_ITEM_POSTGRES_PASSWORD,
    KEY_CONFIG_ITEM_REBUILD_UI,
    KEY_CONFIG_ITEM_SERVER_URL,
    KEY_CONFIG_ITEM_SITE_NAME,
    KEY_CONFIG_ITEM_TEST_DATA,
    KEY_CONFIG_ITEM_UI_URL,
    KEY_CONFIG_ITEM_WORK_DIR,
)
from libstack.installer.configs.configuration_items.validators import validate_secret, validate_url

_DOCKER = (Deployment.DSPACE_DOCKER,)
_NATIVE = (Deployment.DSPACE_NATIVE,)

CONFIG_ITEM_INSTALL_DOCKER_IF_MISSING = BooleanConfigItem(
    key=KEY_CONFIG_ITEM_INSTALL_DOCKER_IF_MISSING,
    label="Install Docker If Missing",
    default_value=True,
    validator=lambda x: isinstance(x, bool),
    question="Install Docker automatically if it is not already installed?",
    deployments=_DOCKER,
)

CONFIG_ITEM_INSTALL_GIT_IF_MISSING = BooleanConfigItem(
    key=KEY_CONFIG_ITEM_INSTALL_GIT_IF_MISSING,
    label="Install Git If Missing",
    default_value=True,
    validator=lambda x: isinstance(x, bool),
    question="Install Git automatically if it is not already installed?",
    deployments=_DOCKER,
)

CONFIG_ITEM_WORK_DIR = ConfigItem(
    key=KEY_CONFIG_ITEM_WORK_DIR,
    label="Working Directory",
    default_value=os.getcwd(),
    validator=lambda x: isinstance(x, str) and os.path.isabs(x),
    question="Directory in which dspace-angular is cloned",
    deployments=_DOCKER,
    prompt=False,
)

CONFIG_ITEM_ANGULAR_REPO_URL = ConfigItem(
    key=KEY_CONFIG_ITEM_ANGULAR_REPO_URL,
    label="dspace-angular Repository",
    default_value=ANGULAR_REPO_URL,
    validator=lambda x: isinstance(x, str) and len(x.strip()) > 0,
    question="Git URL of the dspace-angular repository",
    deployments=_DOCKER,
    prompt=False,
)

CONFIG_ITEM_REBUILD_UI = BooleanConfigItem(
    key=KEY_CONFIG_ITEM_REBUILD_UI,
    label="Rebuild Angular UI",
    default_value=False,
    validator=lambda x: isinstance(x, bool),
    question="Rebuild the Angular UI image locally?",
    deployments=_DOCKER,
)

CONFIG_ITEM_TEST_DATA = EnumConfigItem(
    key=KEY_CONFIG_ITEM_TEST_DATA,
    label="Test Data",
    default_value=TestDataChoice.NONE,
    enum_class=TestDataChoice,
    question="Choose test data option",
    deployments=_DOCKER,
    metadata={
        "descriptions": {
            TestDataChoice.AIP.value: "Import AIP test data (recommended for quick setup)",
            TestDataChoice.ENTITIES.value: "Import Configurable Entities test data",
            TestDataChoice.NONE.value: "Skip test data import",
        }
    },
)

CONFIG_ITEM_FOLLOW_LOGS = BooleanConfigItem(
    key=KEY_CONFIG_ITEM_FOLLOW_LOGS,
    label="Follow Logs",
    default_value=False,
    validator=lambda x: isinstance(x, bool),
    question="Would you like to view the logs now?",
    deployments=_DOCKER,
    prompt=False,
)

CONFIG_ITEM_DSPACE_USER_PASSWORD = ConfigItem(
    key=KEY_CONFIG_ITEM_DSPACE_USER_PASSWORD,
    label="DSpace User Password",
    default_value="dspace",
    validator=validate_secret,
    is_password=True,
    question="Enter DSpace user password",
    deployments=_NATIVE,
)

CONFIG_ITEM_POSTGRES_PASSWORD = ConfigItem(
    key=KEY_CONFIG_ITEM_POSTGRES_PASSWORD,
    label="PostgreSQL Password",
    default_value="postgres",
    validator=validate_secret,
    is_password=True,
    question="Enter PostgreSQL postgres user password",
    deployments=_NATIVE,
)

CONFIG_ITEM_DB_PASSWORD = ConfigItem(
    key=KEY_CONFIG_ITEM_DB_PASSWORD,
    label="DSpace Database Password",
    default_value="dspace",
    validator=validate_secret,
    is_password=True,
    question="Enter DSpace database password",
    deployments=_NATIVE,
)

CONFIG_ITEM_SERVER_URL = ConfigItem(
    key=KEY_CONFIG_ITEM_SERVER_URL,
    label="DSpace Server URL",
    default_value=DEFAULT_SERVER_URL,
    validator=validate_url,
    question="Enter DSpace server URL (e.g., http://localhost:8080/server)",
    deployments=_NATIVE,
)

CONFIG_ITEM_UI_URL = ConfigItem(
    key=KEY_CONFIG_ITEM_UI_URL,
    label="DSpace Frontend URL",
    default_value=DEFAULT_UI_URL,
    validator=validate_url,
    question="Enter DSpace frontend URL (e.g., http://localhost:4000)",
    deployments=_NATIVE,
)

CONFIG_ITEM_SITE_NAME = ConfigItem(
    key=KEY_CONFIG_ITEM_SITE_NAME,
    label="Site Name",
    default_value=DEFAULT_SITE_NAME,
    validator=lambda x: isinstance(x, str) and len(x.strip()) > 0,
    question="Enter site name (e.g., DSpace at My University)",
    deployments=_NATIVE,
)


def get_dspace_config_item_dict():
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
ALL_DSPACE_CONFIG_ITEMS_DICT = get_dspace_config_item_dict()
