#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
Configuration key constants for the libstack installer
"""

# What to install
KEY_CONFIG_ITEM_DEPLOYMENT = "deployment"

# DSpace administrator account
KEY_CONFIG_ITEM_CREATE_ADMIN = "createAdmin"
KEY_CONFIG_ITEM_ADMIN_EMAIL = "adminEmail"
KEY_CONFIG_ITEM_ADMIN_FIRST_NAME = "adminFirstName"
KEY_CONFIG_ITEM_ADMIN_LAST_NAME = "adminLastName"
KEY_CONFIG_ITEM_ADMIN_PASSWORD = "adminPassword"

# DSpace via Docker Compose
KEY_CONFIG_ITEM_INSTALL_DOCKER_IF_MISSING = "installDockerIfMissing"
KEY_CONFIG_ITEM_INSTALL_GIT_IF_MISSING = "installGitIfMissing"
KEY_CONFIG_ITEM_WORK_DIR = "workDir"
KEY_CONFIG_ITEM_ANGULAR_REPO_URL = "angularRepoUrl"
KEY_CONFIG_ITEM_REBUILD_UI = "rebuildUi"
KEY_CONFIG_ITEM_TEST_DATA = "testData"
KEY_CONFIG_ITEM_FOLLOW_LOGS = "followLogs"

# DSpace native
KEY_CONFIG_ITEM_DSPACE_USER_PASSWORD = "dspaceUserPassword"
KEY_CONFIG_ITEM_POSTGRES_PASSWORD = "postgresPassword"
KEY_CONFIG_ITEM_DB_PASSWORD = "dbPassword"
KEY_CONFIG_ITEM_SERVER_URL = "serverUrl"
KEY_CONFIG_ITEM_UI_URL = "uiUrl"
KEY_CONFIG_ITEM_SITE_NAME = "siteName"

# Koha native
KEY_CONFIG_ITEM_KOHA_INSTANCE = "kohaInstance"
KEY_CONFIG_ITEM_KOHA_STAFF_PORT = "kohaStaffPort"
KEY_CONFIG_ITEM_KOHA_OPAC_PORT = "kohaOpacPort"
