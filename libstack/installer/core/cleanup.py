#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Best-effort teardown of partially provisioned resources.

The handler owns a single teardown action. It only fires once armed (the
sequencer arms it after the first mutating step succeeds), at most once per
run, and never on a successful run because the sequencer disarms it first.
Used as a context manager it also traps SIGINT/SIGTERM for the duration of
the run so that an operator interrupt tears down what was started.
"""

import signal
import threading
from typing import Any, Callable, Dict, Optional

from libstack.installer.utils.exceptions import OperatorInterrupt
from libstack.installer.utils.logger_utils import InstallerLogger

TRAPPED_SIGNALS = ("SIGINT", "SIGTERM")


class CleanupHandler:
    def __init__(self, action: Optional[Callable[[], Any]] = None, description: str = "cleanup"):
        self._action = None
        self.description = description
        self._armed = False
        self._fired = False
        self._tearing_down = False
        self.invocations = 0
        self._original_signal_handlers: Dict[int, Any] = {}
        if action is not None:
            self.register(action, description)

    @property
    def armed(self) -> bool:
        return self._armed

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def registered(self) -> bool:
        return self._action is not None

    def register(self, action: Callable[[], Any], description: Optional[str] = None):
        if self._action is not None:
            raise RuntimeError("A cleanup action is already registered for this run")
        self._action = action
        if description:
            self.description = description

    def arm(self):
        if (self._action is not None) and not self._armed:
            InstallerLogger.debug(f"Cleanup armed: {self.description}")
        self._armed = True

    def disarm(self):
        if self._armed:
            InstallerLogger.debug(f"Cleanup disarmed: {self.description}")
        self._armed = False

    def fire(self, reason: str = "") -> bool:
        """Run the teardown if armed and not yet run. Returns True if it ran."""
        if (self._action is None) or (not self._armed) or self._fired:
            return False
        self._fired = True
        self._tearing_down = True
        self.invocations += 1
        InstallerLogger.warning(f"Cleaning up due to failure{f' ({reason})' if reason else ''}...")
        try:
            self._action()
        except Exception as e:
            # teardown is best effort; the triggering error is what the operator needs to see
            InstallerLogger.error(f"Cleanup ({self.description}) did not complete: {e}")
        finally:
            self._tearing_down = False
        return True

    # ------------------------------------------------------------------ context manager
    def __enter__(self) -> "CleanupHandler":
        self._install_signal_handlers()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc_type is not None:
                self.fire(reason=exc_type.__name__)
        finally:
            self._restore_signal_handlers()
        return False

    # ------------------------------------------------------------------ signal management
    def _install_signal_handlers(self):
        # signal handlers may only be set from the main thread
        if threading.current_thread() is not threading.main_thread():
            return
        for sig in (getattr(signal, name, None) for name in TRAPPED_SIGNALS):
            if sig is None:
                continue
            try:
                self._original_signal_handlers[sig] = signal.getsignal(sig)
                signal.signal(sig, self._handle_signal)
            except (ValueError, OSError, RuntimeError):
                continue

    def _restore_signal_handlers(self):
        for sig, handler in self._original_signal_handlers.items():
            try:
                signal.signal(sig, handler)
            except (ValueError, OSError, RuntimeError):
                continue
        self._original_signal_handlers.clear()

    def _handle_signal(self, signum: int, frame: Any):
        if self._tearing_down:
            return
        try:
            sig_name = signal.Signals(signum).name
        except ValueError:
            sig_name = str(signum)
        InstallerLogger.warning(f"Received {sig_name}")
        self.fire(reason=sig_name)
        raise OperatorInterrupt(signum, 130 if signum == signal.SIGINT else 143)
