#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.


"""
Koha configuration items for the libstack installer.
"""

from libstack.installer.core.config_item import ConfigItem, IntegerConfigItem
from libstack.installer.configs.constants.constants import (
    KOHA_INSTANCE,
    KOHA_OPAC_PORT,
    KOHA_STAFF_PORT,
)
from libstack.installer.configs.constants.enums import Deployment
from libstack.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_KOHA_INSTANCE,
    KEY_CONFIG_ITEM_KOHA_OPAC_PORT,
    KEY_CONFIG_ITEM_KOHA_STAFF_PORT,
)
from libstack.installer.configs.configuration_items.validators import validate_instance_name, validate_port

_KOHA = (Deployment.KOHA_NATIVE,)

CONFIG_ITEM_KOHA_INSTANCE = ConfigItem(
    key=KEY_CONFIG_ITEM_KOHA_INSTANCE,
    label="Koha Instance",
    default_value=KOHA_INSTANCE,
    validator=validate_instance_name,
    question="Name of the Koha instance to create",
    deployments=_KOHA,
)

CONFIG_ITEM_KOHA_STAFF_PORT = IntegerConfigItem(
    key=KEY_CONFIG_ITEM_KOHA_STAFF_PORT,
    label="Staff Interface Port",
    default_value=KOHA_STAFF_PORT,
    validator=validate_port,
    question="TCP port for the Koha staff interface",
    deployments=_KOHA,
)

CONFIG_ITEM_KOHA_OPAC_PORT = IntegerConfigItem(
    key=KEY_CONFIG_ITEM_KOHA_OPAC_PORT,
    label="OPAC Port",
    default_value=KOHA_OPAC_PORT,
    validator=validate_port,
    question="TCP port for the Koha public catalog (OPAC)",
    deployments=_KOHA,
)


def get_koha_config_item_dict():
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
ALL_KOHA_CONFIG_ITEMS_DICT = get_koha_config_item_dict()
