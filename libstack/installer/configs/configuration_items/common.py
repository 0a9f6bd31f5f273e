#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.


"""
Deployment selection configuration item.
"""

from libstack.installer.core.config_item import ConfigItem, EnumConfigItem
from libstack.installer.configs.constants.enums import Deployment
from libstack.installer.configs.constants.configuration_item_keys import KEY_CONFIG_ITEM_DEPLOYMENT

CONFIG_ITEM_DEPLOYMENT = EnumConfigItem(
    key=KEY_CONFIG_ITEM_DEPLOYMENT,
    label="Deployment",
    default_value=Deployment.DSPACE_DOCKER,
    enum_class=Deployment,
    question="Select what to install on this host",
    metadata={
        "descriptions": {
            Deployment.DSPACE_DOCKER.value: "DSpace (database, REST API and Angular UI) with Docker Compose",
            Deployment.DSPACE_NATIVE.value: "DSpace 8 built and installed natively (PostgreSQL, Solr, Tomcat, PM2)",
            Deployment.KOHA_NATIVE.value: "Koha library system from the Koha community apt repository",
        }
    },
)


def get_common_config_item_dict():
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
ALL_COMMON_CONFIG_ITEMS_DICT = get_common_config_item_dict()
