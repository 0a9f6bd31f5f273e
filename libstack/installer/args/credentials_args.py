#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
Administrator, password and site arguments.

Passwords given here show up in the process list; prefer --env-file or the prompts.
"""

from libstack.libstack_utils import str2bool

from libstack.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_ADMIN_EMAIL,
    KEY_CONFIG_ITEM_ADMIN_FIRST_NAME,
    KEY_CONFIG_ITEM_ADMIN_LAST_NAME,
    KEY_CONFIG_ITEM_ADMIN_PASSWORD,
    KEY_CONFIG_ITEM_CREATE_ADMIN,
    KEY_CONFIG_ITEM_DB_PASSWORD,
    KEY_CONFIG_ITEM_DSPACE_USER_PASSWORD,
    KEY_CONFIG_ITEM_POSTGRES_PASSWORD,
    KEY_CONFIG_ITEM_SERVER_URL,
    KEY_CONFIG_ITEM_SITE_NAME,
    KEY_CONFIG_ITEM_UI_URL,
)


def add_credentials_args(parser):
    """
    Add administrator and credential arguments to the parser

    Args:
        parser: ArgumentParser to add arguments to
    """
    adminArgGroup = parser.add_argument_group("DSpace Administrator")
    adminArgGroup.add_argument(
        "--create-admin",
        dest=KEY_CONFIG_ITEM_CREATE_ADMIN,
        type=str2bool,
        nargs="?",
        metavar="true|false",
        const=True,
        default=None,
        help="Create a DSpace administrator account",
    )
    adminArgGroup.add_argument(
        "--admin-email",
        dest=KEY_CONFIG_ITEM_ADMIN_EMAIL,
        metavar="<email>",
        default=None,
        help="Administrator email address (login)",
    )
    adminArgGroup.add_argument(
        "--admin-first-name",
        dest=KEY_CONFIG_ITEM_ADMIN_FIRST_NAME,
        metavar="<name>",
        default=None,
        help="Administrator first name",
    )
    adminArgGroup.add_argument(
        "--admin-last-name",
        dest=KEY_CONFIG_ITEM_ADMIN_LAST_NAME,
        metavar="<name>",
        default=None,
        help="Administrator last name",
    )
    adminArgGroup.add_argument(
        "--admin-password",
        dest=KEY_CONFIG_ITEM_ADMIN_PASSWORD,
        metavar="<password>",
        default=None,
        help="Administrator password",
    )

    nativeArgGroup = parser.add_argument_group("DSpace (native)")
    nativeArgGroup.add_argument(
        "--dspace-user-password",
        dest=KEY_CONFIG_ITEM_DSPACE_USER_PASSWORD,
        metavar="<password>",
        default=None,
        help="Password for the dspace system user",
    )
    nativeArgGroup.add_argument(
        "--postgres-password",
        dest=KEY_CONFIG_ITEM_POSTGRES_PASSWORD,
        metavar="<password>",
        default=None,
        help="Password for the postgres database role",
    )
    nativeArgGroup.add_argument(
        "--db-password",
        dest=KEY_CONFIG_ITEM_DB_PASSWORD,
        metavar="<password>",
        default=None,
        help="Password for the dspace database role",
    )
    nativeArgGroup.add_argument(
        "--server-url",
        dest=KEY_CONFIG_ITEM_SERVER_URL,
        metavar="<url>",
        default=None,
        help="Public URL of the DSpace REST API (dspace.server.url)",
    )
    nativeArgGroup.add_argument(
        "--ui-url",
        dest=KEY_CONFIG_ITEM_UI_URL,
        metavar="<url>",
        default=None,
        help="Public URL of the DSpace frontend (dspace.ui.url)",
    )
    nativeArgGroup.add_argument(
        "--site-name",
        dest=KEY_CONFIG_ITEM_SITE_NAME,
        metavar="<name>",
        default=None,
        help="Repository name shown in the UI (dspace.name)",
    )
