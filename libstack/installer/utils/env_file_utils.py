#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Map LIBSTACK_* environment variables (and .env files) onto configuration items."""

import os
import re
from typing import Dict, Iterable, Mapping, Optional

import dotenv

from libstack.installer.configs.constants.constants import ENV_VAR_PREFIX
from libstack.installer.utils.exceptions import FileOperationError
from libstack.installer.utils.logger_utils import InstallerLogger

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def env_var_name(key: str) -> str:
    """adminEmail -> LIBSTACK_ADMIN_EMAIL"""
    return ENV_VAR_PREFIX + _CAMEL_BOUNDARY.sub("_", key).upper()


def _collect(source: Mapping[str, Optional[str]], keys: Iterable[str]) -> Dict[str, str]:
    result = {}
    for key in keys:
        value = source.get(env_var_name(key))
        if value is not None:
            result[key] = value
    return result


def load_env_overrides(
    keys: Iterable[str],
    env_file: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Return configuration values found in env_file and the process environment.

    Process environment variables take precedence over the file.
    """
    keys = list(keys)
    result = {}
    if env_file:
        if not os.path.isfile(env_file):
            raise FileOperationError(f"Environment file not found: {env_file}")
        result.update(_collect(dotenv.dotenv_values(env_file), keys))
        InstallerLogger.debug(f"Read {len(result)} setting(s) from {env_file}")
    result.update(_collect(os.environ if environ is None else environ, keys))
    return result


def write_env_file(file_path: str, values: Mapping[str, object]) -> None:
    """Write values to file_path as LIBSTACK_* variables, creating the file if needed."""
    try:
        if not os.path.isfile(file_path):
            open(file_path, "a").close()
        for key, value in sorted(values.items()):
            if value is None:
                continue
            value = getattr(value, "value", value)
            if isinstance(value, bool):
                value = str(value).lower()
            dotenv.set_key(file_path, env_var_name(key), str(value), quote_mode="never")
    except OSError as e:
        raise FileOperationError(f"Failed updating env file {file_path}: {e}")
