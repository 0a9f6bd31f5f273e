#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
Console and file logging for the installer.

Every line passes through a redaction step so that passwords registered with
register_secrets never reach the terminal or a log file, even when they turn
up in captured command output.
"""

import sys
import time
from datetime import datetime
from typing import Dict, List, Optional

from colorama import init as ColoramaInit, Fore, Style

from libstack.installer.configs.constants.enums import InstallerResult

ColoramaInit()

MASK = "********"


class SkipReasons:
    """Reasons attached to SKIP lines."""

    ALREADY_PRESENT = "Target state already present"
    DRY_RUN = "Skipped in dry-run mode"
    CONFIG_ONLY = "Skipped in configuration-only mode"


class InstallerLogger:
    """Static step logger with colour-coded console output and an optional log file."""

    _console_output_enabled = True
    _main_log_file: Optional[str] = None
    _debug_enabled = False
    _buffer_console_enabled = False
    _buffered_lines: List[str] = []
    _secrets: List[str] = []
    _started: Dict[str, float] = {}

    def __init__(self):
        raise NotImplementedError("InstallerLogger is entirely static. Use static methods directly.")

    @classmethod
    def set_console_output(cls, enabled: bool):
        cls._console_output_enabled = enabled

    @classmethod
    def set_log_file(cls, main_log_file: Optional[str]):
        """Send all subsequent lines to main_log_file instead of the console."""
        cls._main_log_file = main_log_file

    @classmethod
    def set_debug_enabled(cls, enabled: bool):
        cls._debug_enabled = enabled

    @classmethod
    def is_debug_enabled(cls) -> bool:
        return cls._debug_enabled

    @classmethod
    def register_secrets(cls, secrets):
        """Mask each of secrets wherever it appears in a logged line."""
        for secret in secrets or []:
            if secret and (str(secret) not in cls._secrets):
                cls._secrets.append(str(secret))
        # longest first, so a secret containing another is masked whole
        cls._secrets.sort(key=len, reverse=True)

    @classmethod
    def clear_secrets(cls):
        cls._secrets = []

    @classmethod
    def redact(cls, message: str) -> str:
        for secret in cls._secrets:
            message = message.replace(secret, MASK)
        return message

    @classmethod
    def set_buffered_console(cls, enabled: bool):
        """Hold console lines while dialog widgets own the screen; turning it off prints what was held."""
        if cls._buffer_console_enabled and not enabled:
            cls._buffer_console_enabled = False
            cls.flush_buffer_to_console()
        cls._buffer_console_enabled = enabled

    @classmethod
    def flush_buffer_to_console(cls):
        lines, cls._buffered_lines = cls._buffered_lines, []
        for line in lines:
            print(line, file=sys.stdout)

    @classmethod
    def generate_timestamped_filename(cls, base_name: str = "libstack_install") -> str:
        return f"{base_name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    @staticmethod
    def _timestamp() -> str:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    @classmethod
    def _log(cls, label: str, color: str, message: str, file: object = sys.stdout):
        timestamp = f"[{cls._timestamp()}]"
        message = cls.redact(str(message))

        if cls._main_log_file:
            try:
                with open(cls._main_log_file, "a", encoding="utf-8") as f:
                    f.write(f"{timestamp} ({label}) {message}\n")
                return
            except OSError as e:
                message = f"{message} [log file error: {e}]"
                file = sys.stderr

        if cls._console_output_enabled:
            line = f"{timestamp} {color}({label}){Style.RESET_ALL} {message}"
            if cls._buffer_console_enabled:
                cls._buffered_lines.append(line)
            else:
                print(line, file=file)

    @classmethod
    def start(cls, label: str):
        """Log the start of a step and remember when it began."""
        cls._started[label] = time.monotonic()
        cls._log("START", Fore.BLUE, f"[{label}]")

    @classmethod
    def end(cls, label: str, status: InstallerResult, message: Optional[str] = None):
        """Log the outcome of a step, with its duration when start was logged for it."""
        began = cls._started.pop(label, None)
        log_message = f"[{label}]"
        if message:
            log_message += f": {message}"
        if (began is not None) and (status != InstallerResult.SKIPPED):
            log_message += f" ({time.monotonic() - began:.1f}s)"

        if status == InstallerResult.SUCCESS:
            cls._log("SUCCESS", Fore.GREEN, log_message)
        elif status == InstallerResult.SKIPPED:
            cls._log("SKIP", Fore.MAGENTA, log_message)
        else:
            cls._log("FAIL", Fore.RED, log_message, file=sys.stderr)

    @classmethod
    def info(cls, message: str):
        cls._log("info", "", message)

    @classmethod
    def warning(cls, message: str):
        cls._log("WARNING", Fore.YELLOW, message, file=sys.stderr)

    @classmethod
    def error(cls, message: str):
        cls._log("ERROR", Fore.RED, message, file=sys.stderr)

    @classmethod
    def debug(cls, message: str):
        """Only logged with --debug."""
        if cls._debug_enabled:
            cls._log("DEBUG", Fore.CYAN, message)
