#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Linux (apt family) platform implementation."""

import os

from libstack.libstack_constants import (
    PLATFORM_LINUX,
    PLATFORM_LINUX_APT_FAMILY,
    PLATFORM_LINUX_DEBIAN,
    PLATFORM_LINUX_ELEMENTARY,
    PLATFORM_LINUX_MINT,
    PLATFORM_LINUX_POP,
    PLATFORM_LINUX_UBUNTU,
    PLATFORM_LINUX_ZORIN,
)
from libstack.libstack_utils import is_root, which

from libstack.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_INSTALL_DOCKER_IF_MISSING,
    KEY_CONFIG_ITEM_INSTALL_GIT_IF_MISSING,
    KEY_CONFIG_ITEM_WORK_DIR,
)
from libstack.installer.configs.constants.constants import ANGULAR_DIR_NAME
from libstack.installer.configs.constants.enums import Deployment
from libstack.installer.utils.exceptions import PreconditionError
from libstack.installer.utils.logger_utils import InstallerLogger

from .base import BasePlatform


class LinuxPlatform(BasePlatform):
    """Ubuntu/Debian host: apt packages, systemd services."""

    def __init__(self, debug: bool = False, control_flow=None):
        super().__init__(debug, control_flow)
        if which("dpkg"):
            os.environ["DEBIAN_FRONTEND"] = "noninteractive"

        if self.debug:
            InstallerLogger.debug(
                f"{PLATFORM_LINUX} platform initialized for {self.distro} {self.codename} {self.release}"
                f"{f' ({self.ubuntu_codename})' if self.ubuntu_codename else ''}"
            )

    def is_apt_family(self) -> bool:
        return (self.distro in PLATFORM_LINUX_APT_FAMILY) or any(
            like in PLATFORM_LINUX_APT_FAMILY for like in self.distro_like
        )

    def repo_distro(self) -> str:
        """Distribution name used by third-party apt repositories (ubuntu or debian)."""
        if (
            self.distro
            in (
                PLATFORM_LINUX_ELEMENTARY,
                PLATFORM_LINUX_MINT,
                PLATFORM_LINUX_POP,
                PLATFORM_LINUX_UBUNTU,
                PLATFORM_LINUX_ZORIN,
            )
            or self.distro.startswith(PLATFORM_LINUX_UBUNTU)
            or self.ubuntu_codename
        ):
            return PLATFORM_LINUX_UBUNTU
        return PLATFORM_LINUX_DEBIAN

    def repo_codename(self) -> str:
        return self.ubuntu_codename or self.codename

    def check_preconditions(self, ctx) -> None:
        deployment = ctx.deployment

        if not self.is_apt_family():
            raise PreconditionError(
                f"{deployment.value} requires an Ubuntu or Debian host (found '{self.distro or 'unknown'}')",
                "run the installer on a supported Ubuntu or Debian release",
            )

        if deployment in (Deployment.DSPACE_NATIVE, Deployment.KOHA_NATIVE):
            if self.should_run_install_steps() and not is_root():
                raise PreconditionError(
                    f"{deployment.value} must be run as root",
                    "re-run with sudo",
                )

        elif deployment == Deployment.DSPACE_DOCKER:
            if self.should_run_install_steps() and not is_root() and not which("sudo"):
                raise PreconditionError(
                    "sudo is required to install and run Docker as a non-root user",
                    "install sudo or re-run as root",
                )
            if not ctx.get_value(KEY_CONFIG_ITEM_INSTALL_DOCKER_IF_MISSING) and not which("docker"):
                raise PreconditionError(
                    "Docker is required to continue",
                    "install it manually (https://docs.docker.com/get-docker/) or allow automatic installation",
                )
            if not ctx.get_value(KEY_CONFIG_ITEM_INSTALL_GIT_IF_MISSING) and not which("git"):
                raise PreconditionError(
                    "Git is required to continue",
                    "install it manually (https://git-scm.com/downloads) or allow automatic installation",
                )
            angular_dir = os.path.join(ctx.get_value(KEY_CONFIG_ITEM_WORK_DIR), ANGULAR_DIR_NAME)
            if os.path.isdir(angular_dir) and not os.path.isdir(os.path.join(angular_dir, ".git")):
                raise PreconditionError(
                    f"{angular_dir} exists but is not a git repository",
                    "move or remove it, or choose another working directory",
                )

    def build_plan(self, ctx):
        from libstack.installer.actions import dspace_docker, dspace_native, koha

        deployment = ctx.deployment
        if deployment == Deployment.DSPACE_DOCKER:
            return dspace_docker.build_plan(ctx, self)
        elif deployment == Deployment.DSPACE_NATIVE:
            return dspace_native.build_plan(ctx, self)
        elif deployment == Deployment.KOHA_NATIVE:
            return koha.build_plan(ctx, self)
        raise ValueError(f"Unknown deployment: {deployment}")
