#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
DSpace via Docker Compose.

Installs Docker and Git when missing, checks out dspace-angular, starts the
database, REST API, Solr and Angular UI containers under compose project "d9",
and loads the chosen sample content.
"""

import os
from typing import List

from libstack.libstack_utils import current_username

from libstack.installer.actions.shared import (
    apt_install,
    apt_update,
    install_signing_key,
    systemctl,
    write_file,
)
from libstack.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_ADMIN_EMAIL,
    KEY_CONFIG_ITEM_ADMIN_PASSWORD,
    KEY_CONFIG_ITEM_ANGULAR_REPO_URL,
    KEY_CONFIG_ITEM_CREATE_ADMIN,
    KEY_CONFIG_ITEM_FOLLOW_LOGS,
    KEY_CONFIG_ITEM_INSTALL_DOCKER_IF_MISSING,
    KEY_CONFIG_ITEM_INSTALL_GIT_IF_MISSING,
    KEY_CONFIG_ITEM_REBUILD_UI,
    KEY_CONFIG_ITEM_TEST_DATA,
    KEY_CONFIG_ITEM_WORK_DIR,
)
from libstack.installer.configs.constants.constants import (
    ANGULAR_BRANCH,
    ANGULAR_DIR_NAME,
    CLI_SERVICE,
    COMPOSE_CLI_ASSETSTORE_FILE,
    COMPOSE_CLI_FILE,
    COMPOSE_CLI_INGEST_FILE,
    COMPOSE_ENTITIES_FILE,
    COMPOSE_FILE,
    COMPOSE_PROJECT,
    COMPOSE_REST_FILE,
    CONTAINER_DB,
    DEFAULT_ADMIN_FIRST_NAME,
    DEFAULT_ADMIN_LAST_NAME,
    DIAGNOSTIC_LOG_LINES,
    DOCKER_APT_PREREQS,
    DOCKER_GROUP,
    DOCKER_KEYRING,
    DOCKER_PACKAGES,
    DOCKER_REPO_URL,
    DOCKER_REST_URL,
    DOCKER_SOURCES_LIST,
    DOCKER_UI_URL,
    LEDGER_FILENAME,
    POLL_CONTAINER_START,
    POLL_DATABASE,
    POLL_DOCKER_DAEMON,
    REQUIRED_CONTAINERS,
)
from libstack.installer.configs.constants.enums import TestDataChoice
from libstack.installer.core import guards, readiness
from libstack.installer.core.plan import FunctionAction, PlanBuilder, ProvisioningPlan, cmd
from libstack.installer.utils.logger_utils import InstallerLogger

PLAN_NAME = "dspace_docker"

# run-once ledger entries
LEDGER_AIP_ADMIN = "dspace-docker:aip-administrator"
LEDGER_AIP_INGEST = "dspace-docker:aip-ingest"
LEDGER_ENTITIES = "dspace-docker:entities-data"
LEDGER_ADMIN = "dspace-docker:administrator"


def compose_command(*files: str) -> List[str]:
    """docker compose -p d9 -f <file> ... for the given compose files."""
    command = ["docker", "compose", "-p", COMPOSE_PROJECT]
    for compose_file in files:
        command += ["-f", compose_file]
    return command


SERVICES_COMPOSE = compose_command(COMPOSE_FILE, COMPOSE_REST_FILE)
ENTITIES_COMPOSE = compose_command(COMPOSE_FILE, COMPOSE_REST_FILE, COMPOSE_ENTITIES_FILE)
CLI_COMPOSE = compose_command(COMPOSE_CLI_FILE)


def ledger_path(work_dir: str) -> str:
    # kept beside the checkout so a non-root operator can write it
    return os.path.join(work_dir, ".libstack", LEDGER_FILENAME)


def _create_administrator(email: str, password: str, angular_dir: str, privileged: bool):
    return cmd(
        CLI_COMPOSE,
        "run",
        "--rm",
        CLI_SERVICE,
        "create-administrator",
        "-e",
        email,
        "-f",
        DEFAULT_ADMIN_FIRST_NAME,
        "-l",
        DEFAULT_ADMIN_LAST_NAME,
        "-p",
        password,
        "-c",
        "en",
        cwd=angular_dir,
        privileged=privileged,
        description=f"create DSpace administrator {email}",
    )


def _update_checkout(angular_dir: str) -> FunctionAction:
    """fetch, stash local changes if any, check out and pull the main branch"""

    def _update(ctx, runner):
        err, out = runner.run_process(["git", "fetch", "origin"], cwd=angular_dir)
        if err != 0:
            return err, out
        dirty, _ = runner.run_process(["git", "diff-index", "--quiet", "HEAD", "--"], cwd=angular_dir)
        if dirty != 0:
            InstallerLogger.warning("Local changes detected in dspace-angular; stashing them")
            err, out = runner.run_process(["git", "stash"], cwd=angular_dir)
            if err != 0:
                return err, out
        err, out = runner.run_process(["git", "checkout", ANGULAR_BRANCH], cwd=angular_dir)
        if err != 0:
            return err, out
        return runner.run_process(["git", "pull", "origin", ANGULAR_BRANCH], cwd=angular_dir)

    return FunctionAction(f"update {angular_dir} to the latest {ANGULAR_BRANCH}", _update)


def _remove_project_volumes(ledger: guards.RunOnceLedger, privileged: bool) -> FunctionAction:
    def _remove(ctx, runner):
        err, out = runner.run_process(
            ["docker", "volume", "ls", "-q", "--filter", f"name={COMPOSE_PROJECT}"],
            privileged=privileged,
            stderr=False,
        )
        if err != 0:
            return err, out
        volumes = [line.strip() for line in out if line.strip()]
        if volumes:
            InstallerLogger.warning(f"Removing existing volumes: {', '.join(volumes)}")
            err, out = runner.run_process(["docker", "volume", "rm"] + volumes, privileged=privileged)
            if err != 0:
                return err, out
        # accounts and content loaded into the removed volumes are gone
        ledger.forget(LEDGER_AIP_ADMIN, LEDGER_AIP_INGEST, LEDGER_ADMIN)
        return 0, []

    return FunctionAction(f"remove volumes of compose project {COMPOSE_PROJECT}", _remove)


def _containers_verified(runner, privileged: bool):
    def _check(ctx):
        running = guards.running_containers(runner, privileged=privileged)
        missing = [name for name in REQUIRED_CONTAINERS if name not in running]
        if missing:
            return False, f"not running: {', '.join(missing)}"
        return True, None

    return _check


def _teardown(runner, angular_dir: str, privileged: bool):
    def _down():
        if not os.path.isdir(angular_dir):
            return
        err, out = runner.run_process(SERVICES_COMPOSE + ["down"], cwd=angular_dir, privileged=privileged)
        if err != 0:
            InstallerLogger.warning(f"docker compose down returned {err}: {' '.join(out[-3:])}")

    return _down


def build_plan(ctx, platform) -> ProvisioningPlan:
    """Build the Docker Compose plan for ctx."""
    work_dir = ctx.get_value(KEY_CONFIG_ITEM_WORK_DIR)
    angular_dir = os.path.join(work_dir, ANGULAR_DIR_NAME)
    test_data = ctx.get_value(KEY_CONFIG_ITEM_TEST_DATA)
    admin_email = ctx.get_value(KEY_CONFIG_ITEM_ADMIN_EMAIL)
    admin_password = ctx.get_value(KEY_CONFIG_ITEM_ADMIN_PASSWORD)
    ledger = guards.RunOnceLedger(ledger_path(work_dir))
    sudo = platform.docker_needs_sudo()
    operator = current_username()

    plan = PlanBuilder(PLAN_NAME)

    if ctx.get_value(KEY_CONFIG_ITEM_INSTALL_DOCKER_IF_MISSING):
        repo = f"{DOCKER_REPO_URL}/{platform.repo_distro()}"
        plan.step(
            "install-docker",
            [
                apt_update(),
                apt_install(DOCKER_APT_PREREQS),
                install_signing_key(f"{repo}/gpg", DOCKER_KEYRING, dearmor=True),
                write_file(
                    DOCKER_SOURCES_LIST,
                    f"deb [signed-by={DOCKER_KEYRING}] {repo} {platform.repo_codename()} stable\n",
                ),
                apt_update(),
                apt_install(DOCKER_PACKAGES),
                systemctl("start", "docker"),
                systemctl("enable", "docker"),
            ],
            unless=guards.command_available("docker"),
            ready=readiness.docker_daemon_ready(platform, privileged=True),
            poll=POLL_DOCKER_DAEMON,
        )

    if operator != "root":
        # membership takes effect at the operator's next login; this run keeps using sudo
        plan.step(
            "add-operator-to-docker-group",
            cmd("usermod", "-aG", DOCKER_GROUP, operator, privileged=True),
            unless=guards.user_in_group(platform, operator, DOCKER_GROUP),
        )

    plan.step(
        "start-docker-daemon",
        systemctl("start", "docker"),
        unless=lambda c: readiness.docker_daemon_ready(platform, privileged=sudo)(c)[0],
        ready=readiness.docker_daemon_ready(platform, privileged=sudo),
        poll=POLL_DOCKER_DAEMON,
    )

    if ctx.get_value(KEY_CONFIG_ITEM_INSTALL_GIT_IF_MISSING):
        plan.step(
            "install-git",
            [apt_update(), apt_install(["git"])],
            unless=guards.command_available("git"),
        )

    plan.step(
        "clone-dspace-angular",
        cmd(
            "git",
            "clone",
            "--branch",
            ANGULAR_BRANCH,
            ctx.get_value(KEY_CONFIG_ITEM_ANGULAR_REPO_URL),
            angular_dir,
            cwd=work_dir,
        ),
        unless=guards.git_checkout_exists(angular_dir),
    )
    plan.step("update-dspace-angular", _update_checkout(angular_dir))

    plan.step(
        "pull-images",
        cmd(SERVICES_COMPOSE, "pull", cwd=angular_dir, privileged=sudo, stream=True),
    )

    if ctx.get_value(KEY_CONFIG_ITEM_REBUILD_UI):
        plan.step(
            "build-angular-image",
            cmd(compose_command(COMPOSE_FILE), "build", cwd=angular_dir, privileged=sudo, stream=True),
        )

    db_logs = readiness.command_output(
        platform, SERVICES_COMPOSE + ["logs", "--tail", str(DIAGNOSTIC_LOG_LINES), CONTAINER_DB], 0, privileged=sudo
    )
    plan.step(
        "start-services",
        cmd(SERVICES_COMPOSE, "up", "-d", cwd=angular_dir, privileged=sudo),
        unless=guards.all_containers_running(platform, REQUIRED_CONTAINERS, privileged=sudo),
        ready=readiness.container_started(platform, CONTAINER_DB, privileged=sudo),
        poll=POLL_CONTAINER_START,
    )
    plan.wait(
        "wait-for-database",
        readiness.compose_pg_isready(platform, SERVICES_COMPOSE, CONTAINER_DB, "dspace", privileged=sudo),
        poll=POLL_DATABASE,
        diagnostics=db_logs,
    )
    plan.wait(
        "verify-containers",
        _containers_verified(platform, sudo),
        poll=(1, 0),
        diagnostics=readiness.command_output(platform, ["docker", "ps", "-a"], 0, privileged=sudo),
    )

    if test_data == TestDataChoice.AIP:
        plan.step(
            "create-aip-administrator",
            [_create_administrator(admin_email, admin_password, angular_dir, sudo), ledger.mark(LEDGER_AIP_ADMIN)],
            unless=ledger.guard(LEDGER_AIP_ADMIN),
        )
        plan.step(
            "ingest-aip-data",
            [
                cmd(
                    compose_command(COMPOSE_CLI_FILE, COMPOSE_CLI_INGEST_FILE),
                    "run",
                    "--rm",
                    CLI_SERVICE,
                    cwd=angular_dir,
                    privileged=sudo,
                    stream=True,
                ),
                ledger.mark(LEDGER_AIP_INGEST),
            ],
            unless=ledger.guard(LEDGER_AIP_INGEST),
        )

    elif test_data == TestDataChoice.ENTITIES:
        plan.step(
            "restart-with-entities-data",
            [
                cmd(SERVICES_COMPOSE, "down", cwd=angular_dir, privileged=sudo),
                _remove_project_volumes(ledger, sudo),
                cmd(ENTITIES_COMPOSE, "up", "-d", cwd=angular_dir, privileged=sudo),
            ],
            unless=ledger.guard(LEDGER_ENTITIES),
            ready=readiness.container_started(platform, CONTAINER_DB, privileged=sudo),
            poll=POLL_CONTAINER_START,
        )
        plan.wait(
            "wait-for-entities-database",
            readiness.compose_pg_isready(platform, SERVICES_COMPOSE, CONTAINER_DB, "dspace", privileged=sudo),
            poll=POLL_DATABASE,
            diagnostics=db_logs,
        )
        plan.step(
            "load-entities-assetstore",
            [
                cmd(
                    compose_command(COMPOSE_CLI_FILE, COMPOSE_CLI_ASSETSTORE_FILE),
                    "run",
                    "--rm",
                    CLI_SERVICE,
                    cwd=angular_dir,
                    privileged=sudo,
                    stream=True,
                ),
                ledger.mark(LEDGER_ENTITIES),
            ],
            unless=ledger.guard(LEDGER_ENTITIES),
        )

    admin_created = (test_data == TestDataChoice.AIP) or ctx.get_value(KEY_CONFIG_ITEM_CREATE_ADMIN)
    if (test_data != TestDataChoice.AIP) and ctx.get_value(KEY_CONFIG_ITEM_CREATE_ADMIN):
        plan.step(
            "create-administrator",
            [_create_administrator(admin_email, admin_password, angular_dir, sudo), ledger.mark(LEDGER_ADMIN)],
            unless=ledger.guard(LEDGER_ADMIN),
        )

    plan.teardown(_teardown(platform, angular_dir, sudo))

    compose_hint = " ".join(SERVICES_COMPOSE)
    plan.epilogue(
        "DSpace installation complete!",
        "",
        "Access your DSpace instance at:",
        f"  User Interface: {DOCKER_UI_URL}",
        f"  REST API: {DOCKER_REST_URL}",
    )
    if admin_created:
        plan.epilogue("", "Admin Login:", f"  Email: {admin_email}", "  Password: (as configured)")
    plan.epilogue(
        "",
        f"Useful commands (run in {angular_dir}):",
        f"  View logs: {compose_hint} logs -f",
        f"  Stop services: {compose_hint} down",
        f"  Restart services: {compose_hint} restart",
        f"  Clean up everything: {compose_hint} down && docker system prune --volumes",
    )

    if ctx.get_value(KEY_CONFIG_ITEM_FOLLOW_LOGS):
        plan.follow_up(cmd(SERVICES_COMPOSE, "logs", "-f", cwd=angular_dir, privileged=sudo, stream=True))

    return plan.build()
