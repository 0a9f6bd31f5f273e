#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.


from enum import Enum, auto


# Used primarily for getting status from discrete steps during the installer and subsequently logging
class InstallerResult(Enum):
    """Return status for an installation step."""

    SUCCESS = auto()
    FAILURE = auto()
    SKIPPED = auto()


# top-level control flow for the installer
class ControlFlow(Enum):
    """High-level control over what the installer should do.

    - DRYRUN: log intended actions; make no changes (no file writes, no commands)
    - INSTALL: resolve settings and run the provisioning plan
    - CONFIG: resolve and export settings only; no provisioning steps
    """

    DRYRUN = auto()
    INSTALL = auto()
    CONFIG = auto()

    # query helpers
    def is_dry_run(self) -> bool:
        return self is ControlFlow.DRYRUN

    def is_config_only(self) -> bool:
        return self is ControlFlow.CONFIG

    def should_run_install_steps(self) -> bool:
        """returns True only when installation (system-changing) steps should run"""
        return self is ControlFlow.INSTALL

    # logging helpers
    def would(self, action: str) -> str:
        """formats an action string appropriately for the current mode"""
        return ("Dry run: would " + action) if self is ControlFlow.DRYRUN else action


# lifecycle of a single plan execution
class SequencerState(Enum):
    NOT_STARTED = auto()
    RUNNING = auto()
    SUCCEEDED = auto()
    FAILED = auto()


#####################################################
# ConfigItem Enums
#####################################################


# What gets installed, and how
class Deployment(Enum):
    DSPACE_DOCKER = "dspace-docker"
    DSPACE_NATIVE = "dspace-native"
    KOHA_NATIVE = "koha-native"


# Sample content loaded into a Docker-based DSpace after startup
class TestDataChoice(Enum):
    AIP = "aip"
    ENTITIES = "entities"
    NONE = "none"

    # keep pytest from treating this as a test class
    __test__ = False
