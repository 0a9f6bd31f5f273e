#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
Configuration Items for the libstack installer
===============================================

This package contains all of the definitions for individual configuration items (ConfigItem).

The definitions here are templates: the option resolver deep-copies them for
each run so that one resolution never leaks values into another.
"""

from .common import ALL_COMMON_CONFIG_ITEMS_DICT
from .credentials import ALL_CREDENTIALS_CONFIG_ITEMS_DICT
from .dspace import ALL_DSPACE_CONFIG_ITEMS_DICT
from .koha import ALL_KOHA_CONFIG_ITEMS_DICT

# Combine all config item dictionaries into a single dictionary; order here is prompt order
ALL_CONFIG_ITEMS_DICT = {
    **ALL_COMMON_CONFIG_ITEMS_DICT,
    **ALL_DSPACE_CONFIG_ITEMS_DICT,
    **ALL_CREDENTIALS_CONFIG_ITEMS_DICT,
    **ALL_KOHA_CONFIG_ITEMS_DICT,
}

__all__ = ["ALL_CONFIG_ITEMS_DICT"]
