#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
Utility helpers: logging, exceptions, settings and env files, summaries.
"""

from .logger_utils import InstallerLogger

from .exceptions import (
    ConfigItemNotFoundError,
    ConfigValueValidationError,
    PreconditionError,
    ProvisioningError,
)

__all__ = [
    "InstallerLogger",
    "ConfigItemNotFoundError",
    "ConfigValueValidationError",
    "PreconditionError",
    "ProvisioningError",
]
