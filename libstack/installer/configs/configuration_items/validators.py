#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Format checks shared by configuration item definitions."""

import re
from urllib.parse import urlparse

from libstack.installer.configs.constants.constants import EMAIL_REGEX

_EMAIL_PATTERN = re.compile(EMAIL_REGEX)
_INSTANCE_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$")


def validate_email(value):
    if isinstance(value, str) and _EMAIL_PATTERN.fullmatch(value):
        return True, ""
    return False, "Invalid email format"


def validate_url(value):
    parsed = urlparse(value) if isinstance(value, str) else None
    if parsed and parsed.scheme in ("http", "https") and parsed.hostname:
        return True, ""
    return False, "Expected an http:// or https:// URL with a host name"


def validate_port(value):
    if isinstance(value, int) and 0 < value < 65536:
        return True, ""
    return False, "Expected a TCP port number between 1 and 65535"


def validate_instance_name(value):
    if isinstance(value, str) and _INSTANCE_PATTERN.fullmatch(value):
        return True, ""
    return False, "Instance names use lowercase letters, digits and hyphens"


def validate_secret(value):
    # weak secrets are reported by the resolver, only the type is enforced here
    return isinstance(value, str), "Expected a string"
