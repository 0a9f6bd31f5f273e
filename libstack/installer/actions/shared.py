#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
Shared provisioning actions used by more than one plan.

File writes, key installs and crontab edits go through the platform's command
runner (tee, install, gpg, crontab) rather than Python file APIs, so that they
are escalated the same way as every other command and can be observed in tests.
"""

import os
from typing import Callable, List, Optional, Sequence, Union

import requests

from libstack.libstack_common import DownloadToFile
from libstack.libstack_utils import temporary_filename

from libstack.installer.core.plan import FunctionAction, StepCommand, cmd

Renderable = Union[str, Callable[[object], str]]


###################################################################################################
# apt


def apt_update() -> StepCommand:
    return cmd("apt-get", "update", "-qq", privileged=True, description="apt-get update")


def apt_upgrade() -> StepCommand:
    return cmd("apt-get", "upgrade", "-y", "-qq", privileged=True, description="apt-get upgrade")


def apt_install(packages: Sequence[str]) -> StepCommand:
    return cmd(
        "apt-get",
        "install",
        "-y",
        "-qq",
        list(packages),
        privileged=True,
        description=f"apt-get install {' '.join(packages)}",
    )


def systemctl(verb: str, *units: str) -> StepCommand:
    return cmd("systemctl", verb, list(units), privileged=True)


###################################################################################################
# files


def _render(content: Renderable, ctx) -> str:
    return content(ctx) if callable(content) else content


def write_file(
    path: str,
    content: Renderable,
    description: Optional[str] = None,
    append: bool = False,
    privileged: bool = True,
) -> FunctionAction:
    """Write (or append) rendered content to path with tee."""

    def _write(ctx, runner):
        rendered = _render(content, ctx)
        err, out = runner.run_process(
            ["tee"] + (["-a"] if append else []) + [path],
            privileged=privileged,
            stdin=rendered,
        )
        # tee echoes what it wrote, which may hold secrets
        written = set(rendered.splitlines())
        return err, [line for line in out if line not in written]

    return FunctionAction(description or f"{'append to' if append else 'write'} {path}", _write)


def ensure_directory(path: str, owner: Optional[str] = None, mode: str = "0755") -> StepCommand:
    return cmd(
        "install",
        "-d",
        "-m",
        mode,
        (["-o", owner] if owner else []),
        path,
        privileged=True,
        description=f"create {path}",
    )


def download_file(url: str, local_filename: str) -> FunctionAction:
    def _download(ctx, runner):
        try:
            if DownloadToFile(url, local_filename):
                return 0, []
            return 1, [f"Download of {url} produced an empty file"]
        except (requests.RequestException, OSError) as e:
            return 1, [f"Download of {url} failed: {e}"]

    return FunctionAction(f"download {url}", _download)


def install_signing_key(url: str, keyring: str, dearmor: bool = False) -> FunctionAction:
    """Download an apt repository signing key into keyring (dearmored with gpg if asked)."""

    def _install(ctx, runner):
        with temporary_filename(".asc") as armored:
            try:
                if not DownloadToFile(url, armored):
                    return 1, [f"Download of {url} produced an empty file"]
            except (requests.RequestException, OSError) as e:
                return 1, [f"Download of {url} failed: {e}"]
            err, out = runner.run_process(
                ["install", "-d", "-m", "0755", os.path.dirname(keyring)],
                privileged=True,
            )
            if err != 0:
                return err, out
            if dearmor:
                return runner.run_process(
                    ["gpg", "--batch", "--yes", "--dearmor", "--output", keyring, armored],
                    privileged=True,
                )
            return runner.run_process(["install", "-m", "0644", armored, keyring], privileged=True)

    return FunctionAction(f"install signing key {keyring} from {url}", _install)


###################################################################################################
# crontab


def crontab_add_line(line: str, user: Optional[str] = None) -> FunctionAction:
    """Append line to a crontab, keeping existing entries."""

    def _add(ctx, runner):
        user_args = ["-u", user] if user else []
        err, out = runner.run_process(["crontab", "-l"] + user_args, stderr=False)
        existing: List[str] = out if err == 0 else []
        if line in existing:
            return 0, []
        return runner.run_process(["crontab"] + user_args + ["-"], stdin="\n".join(existing + [line]) + "\n")

    return FunctionAction(f"add '{line}' to crontab", _add)
