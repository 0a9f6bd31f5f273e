#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

import json
import os
import platform
import sys

from pathlib import Path
from typing import Optional, Tuple

import distro
import requests
from dialog import Dialog, ExecutableNotFound
from ruamel.yaml import YAML

from libstack.libstack_constants import (
    PLATFORM_LINUX_UBUNTU,
    SettingsFileFormat,
)

MainDialog = None

# dialog widget bounds, in characters
_DIALOG_MIN_WIDTH = 50
_DIALOG_MAX_WIDTH = 140
_DIALOG_MIN_HEIGHT = 7
_DIALOG_MAX_HEIGHT = 30


def dialog_size_for(text: str) -> Tuple[int, int]:
    """(height, width) that fits text: the longest line plus padding, one row per line plus buttons."""
    lines = str(text).splitlines() or [""]
    width = max(_DIALOG_MIN_WIDTH, min(max(len(line) for line in lines) + 4, _DIALOG_MAX_WIDTH))
    height = max(_DIALOG_MIN_HEIGHT, min(_DIALOG_MIN_HEIGHT + len(lines) - 1, _DIALOG_MAX_HEIGHT))
    return height, width


def DialogInit():
    """Create the shared python-dialog instance if the dialog binary is present."""
    global MainDialog
    if not MainDialog:
        try:
            MainDialog = Dialog(dialog='dialog', autowidgetsize=True)
        except ExecutableNotFound:
            MainDialog = None
    return MainDialog


###################################################################################################
def LoadYaml(inputFileName):
    result = None
    if inputFileName and os.path.isfile(inputFileName):
        with open(inputFileName, 'r') as f:
            inYaml = YAML(typ='safe', pure=True)
            result = inYaml.load(f)
    return result


###################################################################################################
def LoadYamlOrJson(inputFileName):
    result = None
    fmt = SettingsFileFormat.UNKNOWN

    if inputFileName and os.path.isfile(inputFileName):
        extension = Path(inputFileName).suffix.lower()
        if extension in [".yml", ".yaml"]:
            if result := LoadYaml(inputFileName):
                fmt = SettingsFileFormat.YAML
        elif extension == ".json":
            with open(inputFileName, "r") as f:
                if result := json.load(f):
                    fmt = SettingsFileFormat.JSON
        else:
            # try to auto-detect by parsing content
            with open(inputFileName, "r") as f:
                content = f.read().strip()
            if content.startswith("{"):
                if result := json.loads(content):
                    fmt = SettingsFileFormat.JSON
            if not result:
                if result := LoadYaml(inputFileName):
                    fmt = SettingsFileFormat.YAML

    return result or {}, fmt


###################################################################################################
def DumpYamlToString(data) -> str:
    from io import StringIO

    outYaml = YAML(typ='rt')
    outYaml.boolean_representation = ['false', 'true']
    outYaml.default_flow_style = False
    outYaml.representer.ignore_aliases = lambda *args: True
    outYaml.width = sys.maxsize
    stream = StringIO()
    outYaml.dump(data, stream)
    return stream.getvalue()


###################################################################################################
# download to file
def DownloadToFile(url, local_filename):
    r = requests.get(url, stream=True, allow_redirects=True, timeout=60)
    r.raise_for_status()
    with open(local_filename, 'wb') as f:
        for chunk in r.iter_content(chunk_size=1024):
            if chunk:
                f.write(chunk)
    return os.path.isfile(local_filename) and (os.path.getsize(local_filename) > 0)


###################################################################################################
# test a connection to an HTTP/HTTPS server, returning (status, message); status is 0 if no
# response at all was received
def test_http_connection(
    url,
    username=None,
    password=None,
    ssl_verify=True,
    timeout=10,
    user_agent="libstack",
):
    try:
        res = requests.get(
            url,
            auth=(username, password) if (username and password) else None,
            headers={'User-agent': user_agent},
            verify=ssl_verify,
            timeout=timeout,
            allow_redirects=True,
        )
        return res.status_code, res.reason
    except requests.exceptions.RequestException as e:
        return 0, f"Error: {e}"


###################################################################################################
# Platform detection utilities


def get_platform_name() -> str:
    """Determine the current host platform name.

    Returns:
        Platform name string: 'linux', 'macos', 'windows', or 'unknown'
    """
    plat = sys.platform
    if plat.startswith("linux"):
        return "linux"
    elif plat == "darwin":
        return "macos"
    elif plat.startswith("win"):
        return "windows"
    else:
        return "unknown"


def get_distro_info() -> tuple[Optional[str], Optional[str], Optional[str], Optional[str], tuple]:
    distro_id = None
    codename = None
    ubuntu_codename = None
    release = None
    os_release_info = {}

    if get_platform_name() == "linux":
        distro_id = distro.id() or None
        codename = distro.codename() or None
        release = distro.version() or None
        os_release_info = distro.os_release_info()

        if not distro_id and os_release_info.get('name'):
            distro_id = os_release_info['name'].lower().split()[0]
        if not codename and os_release_info.get('version_codename'):
            codename = os_release_info['version_codename'].lower().split()[0]
        if os_release_info.get('ubuntu_codename'):
            ubuntu_codename = os_release_info['ubuntu_codename'].lower().split()[0]
        elif codename and (distro_id == PLATFORM_LINUX_UBUNTU):
            ubuntu_codename = codename

    # ID_LIKE (e.g. "ubuntu debian") lets derivatives pass the apt-family check
    distro_like = tuple(os_release_info.get('id_like', '').lower().split())

    return (
        (distro_id or get_platform_name()).lower(),
        codename,
        ubuntu_codename,
        release,
        distro_like,
    )


_distro_info = get_distro_info()

SYSTEM_INFO: dict[str, object] = {
    "platform": platform.system(),
    "platform_name": get_platform_name(),
    "distro": _distro_info[0],
    "codename": _distro_info[1],
    "ubuntu_codename": _distro_info[2],
    "release": _distro_info[3],
    "distro_like": _distro_info[4],
    "architecture": platform.machine(),
}
