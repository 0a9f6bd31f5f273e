#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

import contextlib
import getpass
import os
import re

from collections.abc import Iterable
from tempfile import NamedTemporaryFile


###################################################################################################
# flatten a collection, but don't split strings
def flatten(coll):
    for i in coll:
        if isinstance(i, Iterable) and not isinstance(i, str):
            for subc in flatten(i):
                yield subc
        else:
            yield i


###################################################################################################
# if the object is an iterable, return it, otherwise return a tuple with it as a single element.
# useful if you want to user either a scalar or an array in a loop, etc.
def get_iterable(x):
    if isinstance(x, Iterable) and not isinstance(x, str):
        return x
    else:
        return (x,)


###################################################################################################
# convenient boolean argument parsing
def str2bool(v):
    if isinstance(v, bool):
        return v
    elif isinstance(v, str):
        if v.lower() in ("yes", "true", "t", "y", "1"):
            return True
        elif v.lower() in ("no", "false", "f", "n", "0", ""):
            return False
        else:
            raise ValueError("Boolean value expected")
    elif not v:
        return False
    else:
        raise ValueError("Boolean value expected")


###################################################################################################
# mask a secret for display, keeping its length obvious only when short
def mask_secret(value):
    if not value:
        return "Not set"
    return "*" * min(len(str(value)), 8)


###################################################################################################
# replace "password=..." style values in command lines before they are logged
SECRET_ARG_REGEX = re.compile(r"((?:PASSWORD|password)\s+'?)[^'\s;]+")


def redact_command(flat_command, secrets=None):
    result = " ".join(str(x) for x in flat_command)
    for secret in [s for s in (secrets or []) if s]:
        result = result.replace(str(secret), "********")
    return SECRET_ARG_REGEX.sub(r"\1********", result)


###################################################################################################
# a context manager returning a temporary filename which is deleted upon leaving the context
@contextlib.contextmanager
def temporary_filename(suffix=None):
    tmp_name = None
    try:
        f = NamedTemporaryFile(suffix=suffix, delete=False)
        tmp_name = f.name
        f.close()
        yield tmp_name
    finally:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)


###################################################################################################
# open a file and close it, updating its access time
def touch(filename):
    open(filename, "a").close()
    os.utime(filename, None)


###################################################################################################
# read the contents of a text file, or None if it doesn't exist
def file_contents(filename, encoding="utf-8"):
    if os.path.isfile(filename):
        with open(filename, "r", encoding=encoding) as f:
            return f.read()
    else:
        return None


###################################################################################################
# determine if a program/script exists and is executable in the system path
def which(cmd):
    return any(
        os.access(os.path.join(path, cmd), os.X_OK) for path in os.environ.get("PATH", "").split(os.pathsep)
    )


###################################################################################################
def is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


def current_username() -> str:
    # under sudo, the operator is the invoking user rather than root
    return os.environ.get("SUDO_USER") or getpass.getuser()

