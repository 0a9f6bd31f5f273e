#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
Deployment, settings file and per-product arguments.

Options that feed configuration items use the item's key as their dest and
default to None, so that an option the operator did not give never overrides
a value from a settings or environment file.
"""

from libstack.libstack_utils import str2bool

from libstack.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_ANGULAR_REPO_URL,
    KEY_CONFIG_ITEM_DEPLOYMENT,
    KEY_CONFIG_ITEM_FOLLOW_LOGS,
    KEY_CONFIG_ITEM_INSTALL_DOCKER_IF_MISSING,
    KEY_CONFIG_ITEM_INSTALL_GIT_IF_MISSING,
    KEY_CONFIG_ITEM_KOHA_INSTANCE,
    KEY_CONFIG_ITEM_KOHA_OPAC_PORT,
    KEY_CONFIG_ITEM_KOHA_STAFF_PORT,
    KEY_CONFIG_ITEM_REBUILD_UI,
    KEY_CONFIG_ITEM_TEST_DATA,
    KEY_CONFIG_ITEM_WORK_DIR,
)
from libstack.installer.configs.constants.enums import Deployment, TestDataChoice


def _add_bool(group, *flags, dest, help):
    group.add_argument(
        *flags,
        dest=dest,
        type=str2bool,
        nargs="?",
        metavar="true|false",
        const=True,
        default=None,
        help=help,
    )


def add_product_args(parser):
    """
    Add deployment selection, settings file and product arguments to the parser

    Args:
        parser: ArgumentParser to add arguments to
    """
    productArgGroup = parser.add_argument_group("Deployment")
    productArgGroup.add_argument(
        "--deployment",
        "-d",
        dest=KEY_CONFIG_ITEM_DEPLOYMENT,
        choices=[d.value for d in Deployment],
        default=None,
        help="What to install, and how",
    )

    settingsArgGroup = parser.add_argument_group("Settings Files")
    settingsArgGroup.add_argument(
        "--import-config",
        dest="importConfigFile",
        metavar="<filename>",
        default=None,
        help="Load settings from a YAML or JSON file",
    )
    settingsArgGroup.add_argument(
        "--export-config",
        dest="exportConfigFile",
        metavar="<filename>",
        nargs="?",
        const="",
        default=None,
        help="Write the resolved settings (without passwords) to a YAML or JSON file. "
        "If no filename provided, creates a timestamped JSON file.",
    )
    settingsArgGroup.add_argument(
        "--env-file",
        dest="envFile",
        metavar="<filename>",
        default=None,
        help="Load LIBSTACK_* settings from a .env file",
    )
    settingsArgGroup.add_argument(
        "--strict-passwords",
        dest="strictPasswords",
        action="store_true",
        default=False,
        help="Treat short or placeholder passwords as errors instead of warnings",
    )

    dockerArgGroup = parser.add_argument_group("DSpace (Docker)")
    _add_bool(
        dockerArgGroup,
        "--install-docker",
        dest=KEY_CONFIG_ITEM_INSTALL_DOCKER_IF_MISSING,
        help="Install Docker from its apt repository if it is missing",
    )
    _add_bool(
        dockerArgGroup,
        "--install-git",
        dest=KEY_CONFIG_ITEM_INSTALL_GIT_IF_MISSING,
        help="Install Git if it is missing",
    )
    dockerArgGroup.add_argument(
        "--work-dir",
        dest=KEY_CONFIG_ITEM_WORK_DIR,
        metavar="<directory>",
        default=None,
        help="Directory holding the dspace-angular checkout",
    )
    dockerArgGroup.add_argument(
        "--angular-repo",
        dest=KEY_CONFIG_ITEM_ANGULAR_REPO_URL,
        metavar="<url>",
        default=None,
        help="Git URL of the dspace-angular repository",
    )
    _add_bool(
        dockerArgGroup,
        "--rebuild-ui",
        dest=KEY_CONFIG_ITEM_REBUILD_UI,
        help="Rebuild the Angular UI image instead of using the published one",
    )
    dockerArgGroup.add_argument(
        "--test-data",
        dest=KEY_CONFIG_ITEM_TEST_DATA,
        choices=[t.value for t in TestDataChoice],
        default=None,
        help="Sample content to load after startup",
    )
    _add_bool(
        dockerArgGroup,
        "--follow-logs",
        dest=KEY_CONFIG_ITEM_FOLLOW_LOGS,
        help="Follow the container logs after a successful installation",
    )

    kohaArgGroup = parser.add_argument_group("Koha")
    kohaArgGroup.add_argument(
        "--koha-instance",
        dest=KEY_CONFIG_ITEM_KOHA_INSTANCE,
        metavar="<name>",
        default=None,
        help="Name of the Koha instance to create",
    )
    kohaArgGroup.add_argument(
        "--koha-staff-port",
        dest=KEY_CONFIG_ITEM_KOHA_STAFF_PORT,
        metavar="<port>",
        type=int,
        default=None,
        help="TCP port for the staff interface",
    )
    kohaArgGroup.add_argument(
        "--koha-opac-port",
        dest=KEY_CONFIG_ITEM_KOHA_OPAC_PORT,
        metavar="<port>",
        type=int,
        default=None,
        help="TCP port for the public catalog (OPAC)",
    )
