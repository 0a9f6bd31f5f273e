#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
Run mode and logging arguments for libstack-install.
"""

from libstack.libstack_utils import str2bool


def add_basic_args(parser):
    """
    Add the run mode (install, configure only, dry run) and logging options

    Args:
        parser: ArgumentParser to add arguments to
    """
    runModeGroup = parser.add_argument_group(
        "Run Mode",
        "Without either option every step of the selected deployment is run.",
    )
    runMode = runModeGroup.add_mutually_exclusive_group()
    runMode.add_argument(
        "--configure",
        "-c",
        dest="configOnly",
        type=str2bool,
        metavar="true|false",
        nargs="?",
        const=True,
        default=False,
        help="Resolve and validate settings (export them with --export-config), then stop before the first step",
    )
    runMode.add_argument(
        "--dry-run",
        dest="dryRun",
        action="store_true",
        help="Print each step's commands and readiness waits; probe and change nothing on the host",
    )

    loggingGroup = parser.add_argument_group("Logging")
    loggingGroup.add_argument(
        "--debug",
        dest="debug",
        action="store_true",
        default=False,
        help="Also log full (redacted) command lines and Python tracebacks",
    )
    loggingGroup.add_argument(
        "--quiet",
        dest="quiet",
        action="store_true",
        default=False,
        help="Write nothing to the console; the exit status and any --log-to-file log still report the outcome",
    )
    loggingGroup.add_argument(
        "--log-to-file",
        dest="logToFile",
        metavar="filename",
        nargs="?",
        const="",
        default=None,
        help="Write the step log to filename instead of the console (libstack_install_<timestamp>.log when omitted)",
    )
