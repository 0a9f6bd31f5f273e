#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""How missing or invalid settings are asked for."""


def add_presentation_args(parser):
    """
    Add the prompting options: terminal questions (default), dialog widgets, or none at all

    Args:
        parser: ArgumentParser to add arguments to
    """
    promptGroup = parser.add_argument_group(
        "Prompting",
        "Settings not given on the command line or in a settings file are asked for in the terminal.",
    )
    promptMode = promptGroup.add_mutually_exclusive_group()
    promptMode.add_argument(
        "--dialog",
        dest="dialog",
        action="store_true",
        help="Ask with dialog(1) widgets; falls back to terminal questions when the dialog binary is missing",
    )
    promptMode.add_argument(
        "--non-interactive",
        dest="non_interactive",
        action="store_true",
        default=False,
        help="Never ask: use defaults for unset settings and exit with status 2 on an invalid value",
    )
