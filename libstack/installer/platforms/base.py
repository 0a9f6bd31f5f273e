#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Base platform class: the command runner every provisioning step goes through."""

import abc
import os
import platform
import subprocess
import time
from typing import Dict, List, Optional, Tuple

from libstack.libstack_common import SYSTEM_INFO
from libstack.libstack_utils import flatten, get_iterable, is_root

from libstack.installer.configs.constants.constants import DOCKER_GROUP
from libstack.installer.configs.constants.enums import ControlFlow
from libstack.installer.utils.logger_utils import InstallerLogger


class BasePlatform(abc.ABC):
    """Abstract base class for host platforms.

    A platform runs external commands (escalating through sudo when asked to
    and not already root), checks host preconditions and builds the
    provisioning plan for the chosen deployment.
    """

    def __init__(self, debug: bool = False, control_flow: Optional[ControlFlow] = None):
        """Initialize the base platform.

        Args:
            debug: Enable debug output
            control_flow: Install, dry-run or config-only
        """
        self.debug = debug
        self.control_flow: ControlFlow = control_flow or ControlFlow.INSTALL

        # populate system details from SYSTEM_INFO
        self.platform = SYSTEM_INFO.get("platform", platform.system())
        self.distro = SYSTEM_INFO.get("distro") or ""
        self.codename = SYSTEM_INFO.get("codename") or ""
        self.ubuntu_codename = SYSTEM_INFO.get("ubuntu_codename") or ""
        self.release = SYSTEM_INFO.get("release") or ""
        self.distro_like = tuple(SYSTEM_INFO.get("distro_like") or ())

    def is_dry_run(self) -> bool:
        return self.control_flow.is_dry_run()

    def is_config_only(self) -> bool:
        return self.control_flow.is_config_only()

    def should_run_install_steps(self) -> bool:
        return self.control_flow.should_run_install_steps()

    @abc.abstractmethod
    def check_preconditions(self, ctx) -> None:
        """Raise PreconditionError if this host cannot run the chosen deployment."""
        raise NotImplementedError

    @abc.abstractmethod
    def build_plan(self, ctx):
        """Return the ProvisioningPlan for ctx.deployment."""
        raise NotImplementedError

    def _escalate(self, command: List[str], privileged: bool, env: Optional[Dict[str, str]]) -> List[str]:
        if privileged and not is_root():
            # sudo resets the environment, so pass extra variables through env(1)
            prefix = ["sudo"]
            if env:
                prefix += ["env"] + [f"{k}={v}" for k, v in env.items()]
            return prefix + command
        return command

    @staticmethod
    def _merged_env(env: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        return {**os.environ, **env} if env else None

    def run_process(
        self,
        command: List[str],
        privileged: bool = False,
        stdin: Optional[str] = None,
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        stderr: bool = True,
        retry: int = 0,
        retry_sleep_sec: int = 5,
    ) -> Tuple[int, List[str]]:
        """Run a system process with optional privilege escalation.

        Returns:
            (exit code, output lines); 127 if the executable could not be found
        """
        flat_command = self._escalate(list(flatten(get_iterable(command))), privileged, env)

        retcode = -1
        output = []

        for i in range(retry + 1):
            try:
                process = subprocess.run(
                    flat_command,
                    input=stdin if stdin else None,
                    capture_output=True,
                    check=False,
                    text=True,
                    errors="ignore",
                    cwd=cwd,
                    env=self._merged_env(env),
                )
                retcode = process.returncode
                output = []
                if process.stdout:
                    output.extend(process.stdout.splitlines())
                if stderr and process.stderr:
                    output.extend(process.stderr.splitlines())
            except (FileNotFoundError, NotADirectoryError):
                output = [f"Command {' '.join(flat_command)} not found or unable to execute"]
                retcode = 127
                break
            except OSError as e:
                output = [f"Error executing command {' '.join(flat_command)}: {e}"]
                retcode = 1

            if retcode == 0:
                break
            if i < retry:
                InstallerLogger.warning(
                    f"Command failed (attempt {i+1}/{retry+1}). Retrying in {retry_sleep_sec} seconds..."
                )
                time.sleep(retry_sleep_sec)

        if self.debug:
            InstallerLogger.debug(f"Command {' '.join(flat_command)} returned {retcode}: {output}")

        return retcode, output

    def run_process_streaming(
        self,
        command: List[str],
        privileged: bool = False,
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> int:
        """Run a system process with its output going straight to the console."""
        flat_command = self._escalate(list(flatten(get_iterable(command))), privileged, env)

        if self.debug:
            InstallerLogger.debug(f"Running streaming command: {' '.join(flat_command)}")

        try:
            result = subprocess.run(flat_command, check=False, text=True, cwd=cwd, env=self._merged_env(env))
            return result.returncode
        except (FileNotFoundError, NotADirectoryError):
            InstallerLogger.error(f"Command not found: {' '.join(flat_command)}")
            return 127
        except OSError as e:
            InstallerLogger.error(f"Error executing command {' '.join(flat_command)}: {e}")
            return 1

    def docker_needs_sudo(self) -> bool:
        """True when docker commands must go through sudo (not root and not in the docker group)."""
        if is_root():
            return False
        err, out = self.run_process(["id", "-nG"], stderr=False)
        return not ((err == 0) and (DOCKER_GROUP in " ".join(out).split()))
