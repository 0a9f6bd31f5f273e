#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

from enum import Enum, auto


###################################################################################################
LIBSTACK_VERSION = "1.0.0"

###################################################################################################
PLATFORM_LINUX = "Linux"
PLATFORM_LINUX_DEBIAN = "debian"
PLATFORM_LINUX_ELEMENTARY = "elementary"
PLATFORM_LINUX_MINT = "linuxmint"
PLATFORM_LINUX_POP = "pop"
PLATFORM_LINUX_UBUNTU = "ubuntu"
PLATFORM_LINUX_ZORIN = "zorin"

# distributions the apt-based plans know how to drive
PLATFORM_LINUX_APT_FAMILY = (
    PLATFORM_LINUX_DEBIAN,
    PLATFORM_LINUX_ELEMENTARY,
    PLATFORM_LINUX_MINT,
    PLATFORM_LINUX_POP,
    PLATFORM_LINUX_UBUNTU,
    PLATFORM_LINUX_ZORIN,
)

###################################################################################################
# Constants for run modes
class PresentationMode(Enum):
    MODE_TUI = auto()  # plain terminal prompts
    MODE_DUI = auto()  # python-dialog widgets
    MODE_SILENT = auto()  # non-interactive, defaults only


###################################################################################################
class SettingsFileFormat(Enum):
    JSON = "json"
    YAML = "yaml"
    UNKNOWN = "unknown"
