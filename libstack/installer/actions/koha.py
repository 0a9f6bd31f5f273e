#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Koha from the koha-community apt repository, with MariaDB and Apache on the same host."""

from libstack.installer.actions.shared import (
    apt_install,
    apt_update,
    apt_upgrade,
    install_signing_key,
    systemctl,
    write_file,
)
from libstack.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_KOHA_INSTANCE,
    KEY_CONFIG_ITEM_KOHA_OPAC_PORT,
    KEY_CONFIG_ITEM_KOHA_STAFF_PORT,
)
from libstack.installer.configs.constants.constants import (
    APACHE_PORTS_CONF,
    DIAGNOSTIC_LOG_LINES,
    KOHA_APACHE_MODULES,
    KOHA_KEY_URL,
    KOHA_KEYRING,
    KOHA_PACKAGES,
    KOHA_SITES_CONF,
    KOHA_SOURCE_LINE,
    KOHA_SOURCES_LIST,
    KOHA_TRANSPORT_PACKAGES,
    POLL_APACHE,
    POLL_MARIADB,
)
from libstack.installer.core import guards, readiness
from libstack.installer.core.plan import FunctionAction, PlanBuilder, ProvisioningPlan, cmd
from libstack.installer.utils.logger_utils import InstallerLogger

PLAN_NAME = "koha_native"


def koha_admin_username(instance: str) -> str:
    return f"koha_{instance}"


def _show_credentials(instance: str) -> FunctionAction:
    def _show(ctx, runner):
        err, out = runner.run_process(["koha-passwd", instance], privileged=True, stderr=False)
        if err != 0:
            return err, out
        InstallerLogger.info("Your Koha admin credentials:")
        InstallerLogger.info(f"Username: {koha_admin_username(instance)}")
        InstallerLogger.info(f"Password: {out[-1].strip() if out else ''}")
        return 0, []

    return FunctionAction(f"show the database credentials of {instance}", _show)


def build_plan(ctx, platform) -> ProvisioningPlan:
    """Build the Koha plan for ctx."""
    instance = ctx.get_value(KEY_CONFIG_ITEM_KOHA_INSTANCE)
    staff_port = ctx.get_value(KEY_CONFIG_ITEM_KOHA_STAFF_PORT)
    opac_port = ctx.get_value(KEY_CONFIG_ITEM_KOHA_OPAC_PORT)
    staff_url = f"http://localhost:{staff_port}"
    opac_url = f"http://localhost:{opac_port}"

    plan = PlanBuilder(PLAN_NAME)

    plan.step("update-packages", [apt_update(), apt_upgrade()])
    plan.step(
        "install-transport-packages",
        apt_install(KOHA_TRANSPORT_PACKAGES),
        unless=guards.packages_installed(platform, KOHA_TRANSPORT_PACKAGES),
    )

    plan.step(
        "install-koha-signing-key",
        install_signing_key(KOHA_KEY_URL, KOHA_KEYRING),
        unless=guards.path_exists(KOHA_KEYRING),
    )
    plan.step(
        "add-koha-repository",
        [write_file(KOHA_SOURCES_LIST, f"{KOHA_SOURCE_LINE}\n"), apt_update()],
        unless=guards.file_matches(KOHA_SOURCES_LIST, lambda c: f"{KOHA_SOURCE_LINE}\n"),
    )
    plan.step(
        "install-koha-and-mariadb",
        apt_install(KOHA_PACKAGES),
        unless=guards.packages_installed(platform, KOHA_PACKAGES),
        ready=readiness.service_active(platform, "mariadb"),
        poll=POLL_MARIADB,
    )

    for module in KOHA_APACHE_MODULES:
        plan.step(
            f"enable-apache-{module.replace('_', '-')}",
            cmd("a2enmod", "-q", module, privileged=True),
            unless=guards.apache_module_enabled(platform, module),
        )

    plan.step(
        "set-koha-ports",
        [
            cmd("sed", "-i", f's|INTRAPORT=".*"|INTRAPORT="{staff_port}"|', KOHA_SITES_CONF, privileged=True),
            cmd("sed", "-i", f's|OPACPORT=".*"|OPACPORT="{opac_port}"|', KOHA_SITES_CONF, privileged=True),
        ],
        unless=guards.all_of(
            guards.file_contains(KOHA_SITES_CONF, f'INTRAPORT="{staff_port}"'),
            guards.file_contains(KOHA_SITES_CONF, f'OPACPORT="{opac_port}"'),
        ),
    )
    plan.step(
        "create-koha-instance",
        cmd("koha-create", "--create-db", instance, privileged=True),
        unless=guards.koha_instance_exists(platform, instance),
    )
    plan.step(
        "start-plack",
        [
            cmd("koha-plack", "--enable", instance, privileged=True),
            cmd("koha-plack", "--start", instance, privileged=True, ignore_errors=True),
        ],
    )

    plan.step(
        "backup-apache-ports",
        cmd("cp", APACHE_PORTS_CONF, f"{APACHE_PORTS_CONF}.bak", privileged=True),
        unless=guards.path_exists(f"{APACHE_PORTS_CONF}.bak"),
    )
    for port in (staff_port, opac_port):
        plan.step(
            f"listen-on-{port}",
            write_file(APACHE_PORTS_CONF, f"Listen {port}\n", append=True),
            unless=guards.file_has_line(APACHE_PORTS_CONF, f"Listen {port}"),
        )
    plan.step(
        "restart-apache",
        systemctl("restart", "apache2"),
        ready=readiness.http_ready(staff_url),
        poll=POLL_APACHE,
        diagnostics=readiness.command_output(
            platform, ["journalctl", "-u", "apache2", "-n", str(DIAGNOSTIC_LOG_LINES), "--no-pager"], 0
        ),
    )
    plan.step("show-credentials", _show_credentials(instance), mutating=False)

    plan.epilogue(
        "Koha installation complete!",
        f"Staff interface: {staff_url}",
        f"OPAC interface: {opac_url}",
        "",
        "Next steps:",
        f"1. Complete the web installer at {staff_url}",
        f"2. Log in as {koha_admin_username(instance)} with the password shown above",
    )

    return plan.build()
