#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Custom exceptions for the libstack installer.

Configuration and precondition errors are raised before any provisioning step
runs. Provisioning errors abort a running plan; the sequencer fills in the step
name and the outcome summary before propagating them.
"""

from typing import Any, List, Optional


class InstallerConfigError(Exception):
    """Base class for configuration-related errors."""

    pass


class ConfigItemNotFoundError(InstallerConfigError):
    """Raised when a configuration item is not found."""

    def __init__(self, key: str):
        super().__init__(f"Configuration item '{key}' not found.")
        self.key = key


class ConfigValueValidationError(InstallerConfigError):
    """Raised when a configuration value fails validation."""

    def __init__(self, key: str, value: Any, message: str):
        super().__init__(f"Invalid value for '{key}': {message} (value was '{value}').")
        self.key = key
        self.value = value


class RunContextFrozenError(InstallerConfigError):
    """Raised on any write to a RunContext after it has been frozen."""

    def __init__(self, key: str):
        super().__init__(f"Run context is frozen; cannot set '{key}'.")
        self.key = key


class FileOperationError(InstallerConfigError):
    """Raised for errors during file operations (load/save)."""

    pass


class PreconditionError(Exception):
    """Raised when the host does not meet a requirement checked before provisioning."""

    def __init__(self, message: str, remediation: Optional[str] = None):
        super().__init__(message if not remediation else f"{message} ({remediation})")
        self.remediation = remediation


class ProvisioningError(Exception):
    """Base class for errors that abort a provisioning run."""

    def __init__(
        self,
        message: str,
        step_name: Optional[str] = None,
        command: Optional[str] = None,
        output: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.step_name = step_name
        self.command = command
        self.output = list(output or [])
        # filled in by the sequencer: the ordered StepOutcome entries so far
        self.summary = []

    def __str__(self):
        prefix = f"[{self.step_name}] " if self.step_name else ""
        return f"{prefix}{self.message}"


class ProbeUnavailableError(ProvisioningError):
    """Raised when a probe cannot determine state (tool missing, service unreachable)."""

    pass


class ActionFailedError(ProvisioningError):
    """Raised when a step command exits non-zero."""

    def __init__(
        self,
        message: str,
        step_name: Optional[str] = None,
        command: Optional[str] = None,
        output: Optional[List[str]] = None,
        returncode: Optional[int] = None,
    ):
        super().__init__(message, step_name=step_name, command=command, output=output)
        self.returncode = returncode


class ReadinessTimeoutError(ProvisioningError):
    """Raised when a readiness condition is not met within the attempt budget."""

    def __init__(
        self,
        message: str,
        step_name: Optional[str] = None,
        attempts: int = 0,
        detail: Optional[str] = None,
        output: Optional[List[str]] = None,
    ):
        super().__init__(message, step_name=step_name, output=output)
        self.attempts = attempts
        self.detail = detail


class OperatorInterrupt(KeyboardInterrupt):
    """Raised from the cleanup handler's signal trap when the operator interrupts a run."""

    def __init__(self, signum: int, exit_code: int):
        super().__init__(f"Interrupted by signal {signum}")
        self.signum = signum
        self.exit_code = exit_code


class PromptCancelled(KeyboardInterrupt):
    """Raised when the operator cancels a dialog prompt."""
