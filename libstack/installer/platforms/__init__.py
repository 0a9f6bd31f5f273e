#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Platform-specific implementations for the libstack installer."""

from libstack.libstack_common import get_platform_name
from libstack.installer.utils.exceptions import PreconditionError

from .base import BasePlatform
from .linux import LinuxPlatform


def get_platform_installer(debug: bool = False, control_flow=None) -> BasePlatform:
    """Determine the current host platform and return the matching implementation."""

    platform_name = get_platform_name()

    if platform_name == "linux":
        return LinuxPlatform(debug, control_flow=control_flow)
    raise PreconditionError(
        f"Platform '{platform_name}' is not supported",
        "run the installer on an Ubuntu or Debian host",
    )


__all__ = [
    "BasePlatform",
    "LinuxPlatform",
    "get_platform_installer",
]
