#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
DSpace 8 installed natively.

PostgreSQL, Solr and Tomcat 10 come from apt (Solr from its release archive),
the backend is built with Maven and installed with Ant, and the Angular
frontend is built with Yarn and kept running by PM2.
"""

import json
import os
import re
from urllib.parse import urlparse

from libstack.libstack_common import DumpYamlToString
from libstack.libstack_utils import file_contents

from libstack.installer.actions.shared import (
    apt_install,
    apt_update,
    apt_upgrade,
    crontab_add_line,
    download_file,
    ensure_directory,
    systemctl,
    write_file,
)
from libstack.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_ADMIN_EMAIL,
    KEY_CONFIG_ITEM_ADMIN_FIRST_NAME,
    KEY_CONFIG_ITEM_ADMIN_LAST_NAME,
    KEY_CONFIG_ITEM_ADMIN_PASSWORD,
    KEY_CONFIG_ITEM_DB_PASSWORD,
    KEY_CONFIG_ITEM_DSPACE_USER_PASSWORD,
    KEY_CONFIG_ITEM_POSTGRES_PASSWORD,
    KEY_CONFIG_ITEM_SERVER_URL,
    KEY_CONFIG_ITEM_SITE_NAME,
    KEY_CONFIG_ITEM_UI_URL,
)
from libstack.installer.configs.constants.constants import (
    ANGULAR_SOURCE_DIR_NAME,
    ANGULAR_SOURCE_URL,
    BUILD_DIR,
    BUILD_TOOL_PACKAGES,
    DIAGNOSTIC_LOG_LINES,
    DSPACE_BASE_PACKAGES,
    DSPACE_DB_NAME,
    DSPACE_DB_USER,
    DSPACE_DIR,
    DSPACE_SOURCE_DIR,
    DSPACE_SOURCE_URL,
    DSPACE_USER,
    DSPACE_VERSION,
    ETC_ENVIRONMENT,
    JAVA_HOME,
    JAVA_OPTS,
    JDK_PACKAGE,
    LEDGER_FILENAME,
    NODE_PACKAGES,
    PG_HBA_ANCHOR,
    PG_HBA_MARKER,
    PM2_APP_NAME,
    PM2_LOGROTATE_SETTINGS,
    POLL_PM2,
    POLL_POSTGRES_NATIVE,
    POLL_SOLR,
    POLL_TOMCAT,
    POSTGRES_CONF_DIR,
    POSTGRES_PACKAGES,
    SOLR_ARCHIVE_URL,
    SOLR_DATA_DIR,
    SOLR_URL,
    SOLR_VERSION,
    STATE_DIR,
    TOMCAT_CONNECTOR,
    TOMCAT_CONNECTOR_MARKER,
    TOMCAT_PACKAGE,
    TOMCAT_SERVER_XML,
    TOMCAT_SERVICE,
    TOMCAT_UNIT_FILE,
    TOMCAT_WEBAPPS_DIR,
)
from libstack.installer.core import guards, readiness
from libstack.installer.core.plan import FunctionAction, PlanBuilder, ProvisioningPlan, cmd

PLAN_NAME = "dspace_native"

LEDGER_MIGRATED = "dspace-native:database-migrated"
LEDGER_ADMIN = "dspace-native:administrator"

SOLR_ARCHIVE = os.path.join(BUILD_DIR, f"solr-{SOLR_VERSION}.zip")
DSPACE_ARCHIVE = os.path.join(BUILD_DIR, f"dspace-{DSPACE_VERSION}.zip")
DSPACE_INSTALLER_DIR = os.path.join(DSPACE_SOURCE_DIR, "dspace", "target", "dspace-installer")
LOCAL_CFG = os.path.join(DSPACE_SOURCE_DIR, "dspace", "config", "local.cfg")
DSPACE_CLI = os.path.join(DSPACE_DIR, "bin", "dspace")

DSPACE_HOME = f"/home/{DSPACE_USER}"
FRONTEND_DIR = os.path.join(DSPACE_HOME, ANGULAR_SOURCE_DIR_NAME)
FRONTEND_ARCHIVE = os.path.join(DSPACE_HOME, f"dspace-angular-{DSPACE_VERSION}.zip")
FRONTEND_CONFIG = os.path.join(FRONTEND_DIR, "config", "config.prod.yml")
PM2_CONFIG = os.path.join(FRONTEND_DIR, f"{PM2_APP_NAME}.json")
PM2_AUTOSTART_LINE = f"@reboot bash -ci 'pm2 start {PM2_CONFIG}'"

PG_HBA_CONF = os.path.join(POSTGRES_CONF_DIR, "pg_hba.conf")
POSTGRESQL_CONF = os.path.join(POSTGRES_CONF_DIR, "postgresql.conf")
PG_HBA_ENTRY = f"host {DSPACE_DB_NAME} {DSPACE_DB_USER} 127.0.0.1 255.255.255.255 md5"

_CONNECTOR_8080_REGEX = re.compile(r'<Connector\s+port="8080"\s+protocol="HTTP/1\.1".*?/>', re.DOTALL)


###################################################################################################
# rendered files


def sql_literal(value: str) -> str:
    return "'" + str(value).replace("'", "''") + "'"


def render_local_cfg(ctx) -> str:
    return "\n".join(
        [
            f"dspace.server.url = {ctx.get_value(KEY_CONFIG_ITEM_SERVER_URL)}",
            f"dspace.ui.url = {ctx.get_value(KEY_CONFIG_ITEM_UI_URL)}",
            f"dspace.name = {ctx.get_value(KEY_CONFIG_ITEM_SITE_NAME)}",
            f"db.username = {DSPACE_DB_USER}",
            f"db.password = {ctx.get_value(KEY_CONFIG_ITEM_DB_PASSWORD)}",
            f"solr.server = {SOLR_URL.rstrip('/')}",
        ]
    ) + "\n"


def render_frontend_config(ctx) -> str:
    """config.prod.yml pointing the frontend at the REST API in dspace.server.url"""
    server = urlparse(ctx.get_value(KEY_CONFIG_ITEM_SERVER_URL))
    ssl = server.scheme == "https"
    return DumpYamlToString(
        {
            "rest": {
                "ssl": ssl,
                "host": server.hostname,
                "port": server.port or (443 if ssl else 80),
                "nameSpace": server.path.rstrip("/") or "/",
            }
        }
    )


def render_pm2_config(ctx) -> str:
    return json.dumps(
        {
            "apps": [
                {
                    "name": PM2_APP_NAME,
                    "cwd": f"{FRONTEND_DIR}/",
                    "script": "dist/server/main.js",
                    "instances": "max",
                    "exec_mode": "cluster",
                    "env": {"NODE_ENV": "production"},
                }
            ]
        },
        indent=4,
    ) + "\n"


def tomcat_server_xml(xml: str) -> str:
    """Comment out the stock port 8080 connector and add DSpace's in the same Service."""
    if TOMCAT_CONNECTOR_MARKER in xml:
        return xml
    xml = _CONNECTOR_8080_REGEX.sub(lambda m: f"<!-- {m.group(0)} -->", xml, count=1)
    return xml.replace("</Service>", f"{TOMCAT_CONNECTOR}  </Service>", 1)


def pg_hba_conf(conf: str) -> str:
    """Add the dspace md5 entry after the administrative login comment."""
    if PG_HBA_MARKER in conf:
        return conf
    lines = conf.splitlines()
    insert_at = next((i + 1 for i, line in enumerate(lines) if line.strip() == PG_HBA_ANCHOR), len(lines))
    lines[insert_at:insert_at] = [PG_HBA_MARKER, PG_HBA_ENTRY]
    return "\n".join(lines) + "\n"


def _rewrite_file(path: str, transform, description: str) -> FunctionAction:
    def _rewrite(ctx, runner):
        current = file_contents(path)
        if current is None:
            return 1, [f"{path} not found"]
        return write_file(path, transform(current)).func(ctx, runner)

    return FunctionAction(description, _rewrite)


def _as_postgres(*argv, **kwargs):
    return cmd("sudo", "-u", "postgres", list(argv), **kwargs)


def _psql(sql: str, description: str, database: str = None):
    # statements go through stdin so passwords never appear in the process list
    return _as_postgres(
        "psql", "-v", "ON_ERROR_STOP=1", ([database] if database else []), stdin=sql, description=description
    )


###################################################################################################
def build_plan(ctx, platform) -> ProvisioningPlan:
    """Build the native DSpace plan for ctx."""
    ledger = guards.RunOnceLedger(os.path.join(STATE_DIR, LEDGER_FILENAME))
    server_url = ctx.get_value(KEY_CONFIG_ITEM_SERVER_URL)
    ui_url = ctx.get_value(KEY_CONFIG_ITEM_UI_URL)
    admin_email = ctx.get_value(KEY_CONFIG_ITEM_ADMIN_EMAIL)

    plan = PlanBuilder(PLAN_NAME)

    plan.step("update-packages", [apt_update(), apt_upgrade()])

    plan.step(
        "create-dspace-user",
        [
            cmd("useradd", "-m", DSPACE_USER),
            cmd(
                "chpasswd",
                stdin=f"{DSPACE_USER}:{ctx.get_value(KEY_CONFIG_ITEM_DSPACE_USER_PASSWORD)}\n",
                description=f"set password for {DSPACE_USER}",
            ),
            cmd("usermod", "-aG", "sudo", DSPACE_USER),
        ],
        unless=guards.user_exists(platform, DSPACE_USER),
    )
    plan.step(
        "create-dspace-directory",
        ensure_directory(DSPACE_DIR, owner=DSPACE_USER),
        unless=guards.dir_exists(DSPACE_DIR),
    )

    plan.step(
        "install-base-packages",
        apt_install(DSPACE_BASE_PACKAGES),
        unless=guards.packages_installed(platform, DSPACE_BASE_PACKAGES),
    )
    plan.step(
        "install-java",
        apt_install([JDK_PACKAGE]),
        unless=guards.packages_installed(platform, [JDK_PACKAGE]),
    )
    plan.step(
        "set-java-home",
        write_file(
            ETC_ENVIRONMENT,
            f'JAVA_HOME="{JAVA_HOME}"\nJAVA_OPTS="{JAVA_OPTS}"\n',
            append=True,
        ),
        unless=guards.file_contains(ETC_ENVIRONMENT, "JAVA_HOME="),
    )
    plan.step(
        "install-build-tools",
        apt_install(BUILD_TOOL_PACKAGES),
        unless=guards.packages_installed(platform, BUILD_TOOL_PACKAGES),
    )

    plan.step(
        "install-postgresql",
        apt_install(POSTGRES_PACKAGES),
        unless=guards.packages_installed(platform, POSTGRES_PACKAGES),
    )
    plan.step(
        "start-postgresql",
        [systemctl("start", "postgresql"), systemctl("enable", "postgresql")],
        unless=guards.systemd_active(platform, "postgresql"),
        ready=readiness.pg_isready(platform),
        poll=POLL_POSTGRES_NATIVE,
    )
    plan.step(
        "set-postgres-password",
        _psql(
            f"ALTER USER postgres PASSWORD {sql_literal(ctx.get_value(KEY_CONFIG_ITEM_POSTGRES_PASSWORD))};",
            "set password for the postgres role",
        ),
    )
    plan.step(
        "configure-postgresql",
        [
            cmd("sed", "-i", "s/#listen_addresses = 'localhost'/listen_addresses = 'localhost'/", POSTGRESQL_CONF),
            _rewrite_file(PG_HBA_CONF, pg_hba_conf, f"allow {DSPACE_DB_USER} md5 logins in {PG_HBA_CONF}"),
            systemctl("restart", "postgresql"),
        ],
        unless=guards.file_contains(PG_HBA_CONF, PG_HBA_MARKER),
        ready=readiness.pg_isready(platform),
        poll=POLL_POSTGRES_NATIVE,
    )

    plan.step(
        "install-solr",
        [
            ensure_directory(BUILD_DIR),
            download_file(SOLR_ARCHIVE_URL, SOLR_ARCHIVE),
            cmd("unzip", "-q", "-o", SOLR_ARCHIVE, "-d", BUILD_DIR),
            cmd("bash", os.path.join(BUILD_DIR, f"solr-{SOLR_VERSION}", "bin", "install_solr_service.sh"), SOLR_ARCHIVE),
            systemctl("enable", "solr"),
            systemctl("start", "solr"),
        ],
        unless=guards.path_exists("/etc/init.d/solr"),
        ready=readiness.http_ready(SOLR_URL),
        poll=POLL_SOLR,
    )

    plan.step(
        "download-dspace-source",
        [
            ensure_directory(BUILD_DIR),
            download_file(DSPACE_SOURCE_URL, DSPACE_ARCHIVE),
            cmd("unzip", "-q", "-o", DSPACE_ARCHIVE, "-d", BUILD_DIR),
        ],
        unless=guards.any_of(guards.dir_exists(DSPACE_SOURCE_DIR), guards.path_exists(DSPACE_CLI)),
    )

    plan.step(
        "install-tomcat",
        apt_install([TOMCAT_PACKAGE]),
        unless=guards.packages_installed(platform, [TOMCAT_PACKAGE]),
    )
    plan.step(
        "allow-tomcat-dspace-writes",
        [
            cmd("sed", "-i", f"/\\[Service\\]/a ReadWritePaths={DSPACE_DIR}", TOMCAT_UNIT_FILE),
            systemctl("daemon-reload"),
        ],
        unless=guards.file_contains(TOMCAT_UNIT_FILE, f"ReadWritePaths={DSPACE_DIR}"),
    )
    plan.step(
        "configure-tomcat-connector",
        [
            _rewrite_file(TOMCAT_SERVER_XML, tomcat_server_xml, f"replace the port 8080 connector in {TOMCAT_SERVER_XML}"),
            systemctl("restart", TOMCAT_SERVICE),
        ],
        unless=guards.file_contains(TOMCAT_SERVER_XML, TOMCAT_CONNECTOR_MARKER),
    )

    plan.step(
        "create-database-role",
        _psql(
            f"CREATE USER {DSPACE_DB_USER} WITH NOSUPERUSER PASSWORD {sql_literal(ctx.get_value(KEY_CONFIG_ITEM_DB_PASSWORD))};",
            f"create database role {DSPACE_DB_USER}",
        ),
        unless=guards.pg_role_exists(platform, DSPACE_DB_USER),
    )
    plan.step(
        "create-database",
        _as_postgres("createdb", f"--owner={DSPACE_DB_USER}", "--encoding=UNICODE", DSPACE_DB_NAME),
        unless=guards.pg_database_exists(platform, DSPACE_DB_NAME),
    )
    plan.step(
        "enable-pgcrypto",
        _psql("CREATE EXTENSION pgcrypto;", f"create extension pgcrypto in {DSPACE_DB_NAME}", database=DSPACE_DB_NAME),
        unless=guards.pg_extension_exists(platform, DSPACE_DB_NAME, "pgcrypto"),
    )

    plan.step(
        "write-local-cfg",
        write_file(LOCAL_CFG, render_local_cfg),
        unless=guards.any_of(guards.path_exists(DSPACE_CLI), guards.file_matches(LOCAL_CFG, render_local_cfg)),
    )
    plan.step(
        "build-dspace",
        cmd("mvn", "package", "-q", cwd=DSPACE_SOURCE_DIR, stream=True, description="mvn package (10-20 minutes)"),
        unless=guards.any_of(guards.path_exists(DSPACE_CLI), guards.dir_exists(DSPACE_INSTALLER_DIR)),
    )
    plan.step(
        "install-backend",
        cmd("ant", "fresh_install", cwd=DSPACE_INSTALLER_DIR, stream=True),
        unless=guards.path_exists(DSPACE_CLI),
    )
    plan.step(
        "deploy-webapps",
        [
            cmd("cp", "-R", os.path.join(DSPACE_DIR, "webapps", "."), TOMCAT_WEBAPPS_DIR),
            cmd("cp", "-R", os.path.join(DSPACE_DIR, "solr", "."), SOLR_DATA_DIR),
            cmd("chown", "-R", "solr:solr", SOLR_DATA_DIR),
            systemctl("restart", "solr"),
        ],
        unless=guards.dir_exists(os.path.join(TOMCAT_WEBAPPS_DIR, "server")),
        ready=readiness.http_ready(SOLR_URL),
        poll=POLL_SOLR,
    )
    plan.step(
        "migrate-database",
        [cmd(DSPACE_CLI, "database", "migrate", cwd=os.path.join(DSPACE_DIR, "bin")), ledger.mark(LEDGER_MIGRATED)],
        unless=ledger.guard(LEDGER_MIGRATED),
    )
    plan.step(
        "create-administrator",
        [
            cmd(
                DSPACE_CLI,
                "create-administrator",
                "-e",
                admin_email,
                "-f",
                ctx.get_value(KEY_CONFIG_ITEM_ADMIN_FIRST_NAME),
                "-l",
                ctx.get_value(KEY_CONFIG_ITEM_ADMIN_LAST_NAME),
                "-p",
                ctx.get_value(KEY_CONFIG_ITEM_ADMIN_PASSWORD),
                "-c",
                "en",
                description=f"create DSpace administrator {admin_email}",
            ),
            ledger.mark(LEDGER_ADMIN),
        ],
        unless=ledger.guard(LEDGER_ADMIN),
    )
    plan.step(
        "start-backend",
        [cmd("chown", "-R", "tomcat:tomcat", DSPACE_DIR), systemctl("restart", TOMCAT_SERVICE)],
        ready=readiness.http_ready(server_url),
        poll=POLL_TOMCAT,
        diagnostics=readiness.command_output(
            platform, ["journalctl", "-u", TOMCAT_SERVICE, "-n", str(DIAGNOSTIC_LOG_LINES), "--no-pager"], 0
        ),
    )

    plan.step(
        "install-nodejs",
        apt_install(NODE_PACKAGES),
        unless=guards.packages_installed(platform, NODE_PACKAGES),
    )
    plan.step(
        "install-yarn-and-pm2",
        cmd("npm", "install", "--global", "yarn", "pm2"),
        unless=guards.all_of(guards.command_available("yarn"), guards.command_available("pm2")),
    )
    plan.step(
        "download-frontend",
        [
            download_file(ANGULAR_SOURCE_URL, FRONTEND_ARCHIVE),
            cmd("unzip", "-q", "-o", FRONTEND_ARCHIVE, "-d", DSPACE_HOME),
            cmd("rm", "-f", FRONTEND_ARCHIVE),
        ],
        unless=guards.dir_exists(FRONTEND_DIR),
    )
    plan.step(
        "install-frontend-dependencies",
        cmd("yarn", "install", cwd=FRONTEND_DIR, stream=True),
        unless=guards.dir_exists(os.path.join(FRONTEND_DIR, "node_modules")),
    )
    plan.step(
        "write-frontend-config",
        write_file(FRONTEND_CONFIG, render_frontend_config),
        unless=guards.file_matches(FRONTEND_CONFIG, render_frontend_config),
    )
    plan.step(
        "build-frontend",
        cmd("yarn", "run", "build:prod", cwd=FRONTEND_DIR, stream=True, description="yarn run build:prod (needs 5-6GB RAM)"),
        unless=guards.path_exists(os.path.join(FRONTEND_DIR, "dist", "server", "main.js")),
    )
    plan.step(
        "write-pm2-config",
        write_file(PM2_CONFIG, render_pm2_config),
        unless=guards.file_matches(PM2_CONFIG, render_pm2_config),
    )
    plan.step(
        "start-frontend",
        cmd("pm2", "start", PM2_CONFIG),
        unless=guards.pm2_app_online(platform, PM2_APP_NAME),
        ready=readiness.http_ready(ui_url),
        poll=POLL_PM2,
        diagnostics=readiness.command_output(
            platform, ["pm2", "logs", PM2_APP_NAME, "--nostream", "--lines", str(DIAGNOSTIC_LOG_LINES)], 0
        ),
    )
    plan.step(
        "register-pm2-autostart",
        crontab_add_line(PM2_AUTOSTART_LINE),
        unless=guards.crontab_has_line(platform, PM2_AUTOSTART_LINE),
    )
    plan.step(
        "configure-pm2-logrotate",
        [cmd("pm2", "install", "pm2-logrotate")]
        + [cmd("pm2", "set", key, value) for key, value in PM2_LOGROTATE_SETTINGS.items()],
        unless=guards.pm2_app_online(platform, "pm2-logrotate"),
    )
    plan.step(
        "remove-build-artifacts",
        cmd("rm", "-rf", BUILD_DIR),
        unless=lambda c: not os.path.isdir(BUILD_DIR),
    )

    plan.epilogue(
        "DSpace 8 installation complete!",
        "",
        f"Backend REST API: {server_url}",
        f"Frontend UI: {ui_url}",
        f"Admin Email: {admin_email}",
        "",
        "Please reboot your system to ensure all services start correctly.",
        "After reboot, check services status:",
        "  sudo systemctl status postgresql",
        "  sudo systemctl status solr",
        f"  sudo systemctl status {TOMCAT_SERVICE}",
        "  sudo pm2 status",
    )

    return plan.build()
