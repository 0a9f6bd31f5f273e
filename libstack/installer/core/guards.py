#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Idempotency guards: read-only probes deciding whether a step's goal state already holds.

Each factory returns a check taking the RunContext and returning a bool. A
probe that cannot run at all (its tool is missing, or the service it asks is
unreachable) raises ProbeUnavailableError instead of answering False, so that
"could not tell" is never mistaken for "not there yet".
"""

import json
import os
from typing import Any, Callable, List, Optional

from libstack.libstack_utils import file_contents, touch, which
from libstack.installer.core.plan import FunctionAction
from libstack.installer.utils.exceptions import ProbeUnavailableError
from libstack.installer.utils.logger_utils import InstallerLogger

# exit status used by the command runner when the executable is missing
RC_NOT_FOUND = 127

Check = Callable[[Any], bool]


def exists(step, ctx) -> bool:
    """True if the step's goal state already holds; a step with no check always runs."""
    if step.idempotency_check is None:
        return False
    return bool(step.idempotency_check(ctx))


def run_probe(runner, command: List[str], what: str, privileged: bool = False):
    err, out = runner.run_process(command, privileged=privileged, stderr=True)
    if err == RC_NOT_FOUND:
        raise ProbeUnavailableError(
            f"Cannot check {what}: {command[0]} is not available",
            command=" ".join(command),
            output=out,
        )
    return err, out


###################################################################################################
# filesystem


def path_exists(path: str) -> Check:
    return lambda ctx: os.path.exists(path)


def dir_exists(path: str) -> Check:
    return lambda ctx: os.path.isdir(path)


def git_checkout_exists(path: str) -> Check:
    return lambda ctx: os.path.isdir(os.path.join(path, ".git"))


def file_contains(path: str, text: str) -> Check:
    def _check(ctx):
        contents = file_contents(path)
        return (contents is not None) and (text in contents)

    return _check


def file_has_line(path: str, line: str) -> Check:
    def _check(ctx):
        contents = file_contents(path)
        return (contents is not None) and (line in contents.splitlines())

    return _check


def file_matches(path: str, render: Callable[[Any], str]) -> Check:
    """True when the file's content equals what render(ctx) would write."""

    def _check(ctx):
        return file_contents(path) == render(ctx)

    return _check


###################################################################################################
# host


def command_available(name: str) -> Check:
    return lambda ctx: which(name)


def user_exists(runner, username: str) -> Check:
    def _check(ctx):
        err, _ = run_probe(runner, ["id", "-u", username], f"user {username}")
        return err == 0

    return _check


def user_in_group(runner, username: str, group: str) -> Check:
    def _check(ctx):
        err, out = run_probe(runner, ["id", "-nG", username], f"groups of {username}")
        return (err == 0) and any(group in line.split() for line in out)

    return _check


def packages_installed(runner, packages: List[str]) -> Check:
    """True only if every package is installed according to dpkg."""

    def _check(ctx):
        for package in packages:
            err, out = run_probe(
                runner,
                ["dpkg-query", "-W", "-f=${Status}", package],
                f"package {package}",
            )
            if (err != 0) or not any("install ok installed" in line for line in out):
                return False
        return True

    return _check


def systemd_active(runner, unit: str) -> Check:
    def _check(ctx):
        err, _ = run_probe(runner, ["systemctl", "is-active", "--quiet", unit], f"service {unit}")
        return err == 0

    return _check


def crontab_has_line(runner, line: str, user: Optional[str] = None) -> Check:
    def _check(ctx):
        command = ["crontab", "-l"] + (["-u", user] if user else [])
        err, out = run_probe(runner, command, "crontab")
        # "no crontab for user" exits non-zero; that simply means the line is absent
        return (err == 0) and (line in out)

    return _check


###################################################################################################
# services


def _psql_scalar(runner, sql: str, what: str, database: Optional[str] = None) -> bool:
    command = ["sudo", "-u", "postgres", "psql", "-tAc", sql] + ([database] if database else [])
    err, out = run_probe(runner, command, what)
    if err != 0:
        raise ProbeUnavailableError(
            f"Cannot check {what}: PostgreSQL did not answer",
            command=" ".join(command),
            output=out,
        )
    return any(line.strip() == "1" for line in out)


def pg_role_exists(runner, role: str) -> Check:
    return lambda ctx: _psql_scalar(
        runner, f"SELECT 1 FROM pg_roles WHERE rolname='{role}'", f"database role {role}"
    )


def pg_database_exists(runner, database: str) -> Check:
    return lambda ctx: _psql_scalar(
        runner, f"SELECT 1 FROM pg_database WHERE datname='{database}'", f"database {database}"
    )


def pg_extension_exists(runner, database: str, extension: str) -> Check:
    return lambda ctx: _psql_scalar(
        runner,
        f"SELECT 1 FROM pg_extension WHERE extname='{extension}'",
        f"extension {extension} in {database}",
        database=database,
    )


def running_containers(runner, privileged: bool = False) -> List[str]:
    command = ["docker", "ps", "--format", "{{.Names}}"]
    err, out = run_probe(runner, command, "running containers", privileged=privileged)
    if err != 0:
        raise ProbeUnavailableError(
            "Cannot list containers: the Docker daemon did not answer",
            command=" ".join(command),
            output=out,
        )
    return [line.strip() for line in out if line.strip()]


def container_running(runner, name: str, privileged: bool = False) -> Check:
    return lambda ctx: name in running_containers(runner, privileged=privileged)


def all_containers_running(runner, names: List[str], privileged: bool = False) -> Check:
    def _check(ctx):
        running = running_containers(runner, privileged=privileged)
        return all(name in running for name in names)

    return _check


def koha_instance_exists(runner, instance: str) -> Check:
    def _check(ctx):
        err, out = run_probe(runner, ["koha-list"], f"Koha instance {instance}")
        return (err == 0) and (instance in [line.strip() for line in out])

    return _check


def apache_module_enabled(runner, module: str) -> Check:
    def _check(ctx):
        err, _ = run_probe(runner, ["a2query", "-q", "-m", module], f"Apache module {module}")
        return err == 0

    return _check


def pm2_app_online(runner, app: str) -> Check:
    def _check(ctx):
        err, out = run_probe(runner, ["pm2", "jlist"], f"PM2 app {app}")
        if err != 0:
            return False
        try:
            # pm2 may print banner lines ahead of the JSON document
            apps = json.loads(next((line for line in reversed(out) if line.lstrip().startswith("[")), "[]"))
        except ValueError:
            return False
        return any(
            (a.get("name") == app) and (a.get("pm2_env", {}).get("status") == "online")
            for a in apps
            if isinstance(a, dict)
        )

    return _check


###################################################################################################
# combinators


def any_of(*checks: Check) -> Check:
    return lambda ctx: any(check(ctx) for check in checks)


def all_of(*checks: Check) -> Check:
    return lambda ctx: all(check(ctx) for check in checks)


###################################################################################################
class RunOnceLedger:
    """Marker file recording one-shot actions that leave no state a probe could inspect.

    Creating an administrator, importing sample data or migrating a database
    has no cheap read-only test, so a step guarded by the ledger is skipped once
    its name has been recorded. The record is written by a final action on the
    step itself, so a step that fails part way is retried on the next run.
    """

    def __init__(self, path: str):
        self.path = path

    def _entries(self) -> List[str]:
        contents = file_contents(self.path)
        return [] if contents is None else [line.strip() for line in contents.splitlines() if line.strip()]

    def has(self, name: str) -> bool:
        return name in self._entries()

    def guard(self, name: str) -> Check:
        return lambda ctx: self.has(name)

    def record(self, name: str):
        if self.has(name):
            return
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        touch(self.path)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(f"{name}\n")
        InstallerLogger.debug(f"Recorded '{name}' in {self.path}")

    def mark(self, name: str) -> FunctionAction:
        """An action appending name to the ledger."""

        def _mark(ctx, runner):
            self.record(name)

        return FunctionAction(f"record '{name}' as completed", _mark)

    def forget(self, *names: str):
        remaining = [e for e in self._entries() if e not in names]
        if os.path.isfile(self.path):
            with open(self.path, "w", encoding="utf-8") as f:
                f.writelines(f"{e}\n" for e in remaining)
