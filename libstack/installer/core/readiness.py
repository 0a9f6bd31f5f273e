#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Bounded readiness polling and the readiness probes used by the plans."""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple, Union

from libstack.libstack_common import test_http_connection
from libstack.installer.configs.constants.constants import HTTP_READY_STATUS_CEILING
from libstack.installer.core import guards
from libstack.installer.utils.exceptions import ProbeUnavailableError
from libstack.installer.utils.logger_utils import InstallerLogger

CheckResult = Union[bool, Tuple[bool, Optional[str]]]


@dataclass
class ReadinessResult:
    ready: bool
    attempts: int
    detail: Optional[str] = None
    diagnostics: List[str] = field(default_factory=list)

    @property
    def timed_out(self) -> bool:
        return not self.ready

    def __bool__(self) -> bool:
        return self.ready


def _evaluate(check: Callable[[], CheckResult]) -> Tuple[bool, Optional[str]]:
    result = check()
    if isinstance(result, tuple):
        ready, detail = result
        return bool(ready), detail
    return bool(result), None


def await_ready(
    check: Callable[[], CheckResult],
    max_attempts: int,
    interval: float,
    label: str = "",
    sleep: Callable[[float], Any] = time.sleep,
    diagnostics: Optional[Callable[[], List[str]]] = None,
) -> ReadinessResult:
    """Evaluate check() until it reports ready or max_attempts evaluations have been made.

    Sleeps interval seconds between evaluations but never after the last one.
    A check raising ProbeUnavailableError ends polling immediately by
    propagating the error. On timeout the result carries the last failure
    detail and, if a diagnostics callable is given, its output.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    detail = None
    for attempt in range(1, max_attempts + 1):
        ready, detail = _evaluate(check)
        if ready:
            if attempt > 1:
                InstallerLogger.debug(f"{label or 'Condition'} ready after {attempt} attempts")
            return ReadinessResult(ready=True, attempts=attempt, detail=detail)
        if attempt < max_attempts:
            InstallerLogger.info(
                f"Waiting for {label or 'condition'}... (attempt {attempt}/{max_attempts})"
                + (f": {detail}" if detail else "")
            )
            sleep(interval)

    diag = []
    if diagnostics is not None:
        try:
            diag = list(diagnostics() or [])
        except ProbeUnavailableError as e:
            diag = [f"Diagnostics unavailable: {e}"]
    return ReadinessResult(ready=False, attempts=max_attempts, detail=detail, diagnostics=diag)


###################################################################################################
# readiness probes; each returns a check taking the RunContext


def http_ready(url: str, ceiling: int = HTTP_READY_STATUS_CEILING, ssl_verify: bool = True):
    """Ready on any HTTP response with a status below ceiling."""

    def _check(ctx):
        status, message = test_http_connection(url, ssl_verify=ssl_verify, timeout=5)
        return (0 < status < ceiling), f"{url} returned {status or 'no response'} {message}".strip()

    return _check


def docker_daemon_ready(runner, privileged: bool = False):
    def _check(ctx):
        err, out = guards.run_probe(runner, ["docker", "info"], "Docker daemon", privileged=privileged)
        return (err == 0), (None if err == 0 else (out[-1] if out else f"docker info returned {err}"))

    return _check


def pg_isready(runner, host: Optional[str] = None):
    def _check(ctx):
        command = ["pg_isready"] + (["-h", host] if host else [])
        err, out = guards.run_probe(runner, command, "PostgreSQL")
        return (err == 0), (out[-1] if out else None)

    return _check


def compose_pg_isready(runner, compose_base: List[str], service: str, db_user: str, privileged: bool = False):
    """pg_isready inside a compose service; the container not running yet is a normal "not ready"."""

    def _check(ctx):
        if service not in guards.running_containers(runner, privileged=privileged):
            return False, "Database container not running yet"
        err, out = guards.run_probe(
            runner,
            compose_base + ["exec", "-T", service, "pg_isready", "-U", db_user],
            f"database in {service}",
            privileged=privileged,
        )
        return (err == 0), (out[-1] if out else None)

    return _check


def container_started(runner, name: str, privileged: bool = False):
    def _check(ctx):
        return guards.container_running(runner, name, privileged=privileged)(ctx), f"{name} not running"

    return _check


def service_active(runner, unit: str):
    def _check(ctx):
        return guards.systemd_active(runner, unit)(ctx), f"{unit} not active"

    return _check


###################################################################################################
# diagnostics attached to readiness timeouts


def command_output(runner, command: List[str], tail: int, privileged: bool = False):
    def _diagnostics(ctx):
        err, out = runner.run_process(command, privileged=privileged, stderr=True)
        return out[-tail:] if tail else out

    return _diagnostics
