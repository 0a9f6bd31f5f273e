#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Tests for the native DSpace plan and the configuration files it renders."""

import json
import os
import sys
import unittest
from unittest.mock import patch

# Add the project root directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "..", "..")))

from ruamel.yaml import YAML

from libstack.installer.actions import dspace_native
from libstack.installer.configs.constants.constants import PG_HBA_ANCHOR, PG_HBA_MARKER, TOMCAT_CONNECTOR_MARKER
from libstack.installer.configs.constants.enums import ControlFlow, Deployment, InstallerResult
from libstack.installer.core.plan import ProvisioningPlan
from libstack.installer.core.sequencer import Sequencer
from libstack.installer.utils.exceptions import ReadinessTimeoutError
from libstack.installer.tests.mock.test_framework import BaseInstallerTest

SERVER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Server port="8005" shutdown="SHUTDOWN">
  <Service name="Catalina">
    <Connector port="8080" protocol="HTTP/1.1"
               connectionTimeout="20000"
               redirectPort="8443" />
    <Engine name="Catalina" defaultHost="localhost">
    </Engine>
  </Service>
</Server>
"""

PG_HBA = f"""# PostgreSQL Client Authentication Configuration File
{PG_HBA_ANCHOR}
local   all             postgres                                peer
local   all             all                                     peer
"""


def _no_sleep(seconds):
    pass


class TestRenderedFiles(BaseInstallerTest):
    def setUp(self):
        super().setUp()
        self.ctx = self.create_test_context(
            {
                "deployment": Deployment.DSPACE_NATIVE,
                "serverUrl": "https://repo.example.org/server",
                "uiUrl": "https://repo.example.org",
                "siteName": "Example Repository",
                "dbPassword": "Db-Secret9",
            }
        )

    def test_tomcat_connector_replaced_inside_service(self):
        result = dspace_native.tomcat_server_xml(SERVER_XML)

        self.assertIn('<!-- <Connector port="8080" protocol="HTTP/1.1"', result)
        self.assertEqual(result.count(TOMCAT_CONNECTOR_MARKER), 1)
        self.assertLess(result.index(TOMCAT_CONNECTOR_MARKER), result.index("</Service>"))
        self.assertTrue(result.rstrip().endswith("</Server>"))
        self.assertEqual(dspace_native.tomcat_server_xml(result), result)

    def test_pg_hba_entry_after_anchor(self):
        lines = dspace_native.pg_hba_conf(PG_HBA).splitlines()
        anchor = lines.index(PG_HBA_ANCHOR)

        self.assertEqual(lines[anchor + 1], PG_HBA_MARKER)
        self.assertEqual(lines[anchor + 2], dspace_native.PG_HBA_ENTRY)
        self.assertEqual(dspace_native.pg_hba_conf("\n".join(lines)), "\n".join(lines))

    def test_pg_hba_without_anchor_appends(self):
        result = dspace_native.pg_hba_conf("local all all peer\n")
        self.assertEqual(result.splitlines()[-1], dspace_native.PG_HBA_ENTRY)

    def test_local_cfg(self):
        cfg = dspace_native.render_local_cfg(self.ctx)
        self.assertIn("dspace.server.url = https://repo.example.org/server\n", cfg)
        self.assertIn("dspace.name = Example Repository\n", cfg)
        self.assertIn("db.password = Db-Secret9\n", cfg)
        self.assertIn("solr.server = http://localhost:8983/solr\n", cfg)

    def test_frontend_config(self):
        rendered = YAML(typ="safe", pure=True).load(dspace_native.render_frontend_config(self.ctx))
        self.assertEqual(
            rendered, {"rest": {"ssl": True, "host": "repo.example.org", "port": 443, "nameSpace": "/server"}}
        )

    def test_pm2_config(self):
        apps = json.loads(dspace_native.render_pm2_config(self.ctx))["apps"]
        self.assertEqual(apps[0]["name"], "dspace-ui")
        self.assertEqual(apps[0]["script"], "dist/server/main.js")

    def test_sql_literal_escapes_quotes(self):
        self.assertEqual(dspace_native.sql_literal("it's"), "'it''s'")


class TestNativePlan(BaseInstallerTest):
    def setUp(self):
        super().setUp()
        self.ctx = self.create_test_context(
            {"deployment": Deployment.DSPACE_NATIVE, "postgresPassword": "Pg-Secret9", "dbPassword": "Db'Secret9"}
        )
        self.plan = dspace_native.build_plan(self.ctx, self.mock_platform)

    def _only(self, *names) -> ProvisioningPlan:
        return ProvisioningPlan("subset", steps=[s for s in self.plan.steps if s.name in names])

    def _run(self, plan):
        return Sequencer(self.mock_platform, None, ControlFlow.INSTALL, sleep=_no_sleep).run(plan, self.ctx)

    def test_dependency_order(self):
        names = self.plan.step_names()
        for before, after in [
            ("install-postgresql", "create-database-role"),
            ("create-database-role", "create-database"),
            ("create-database", "enable-pgcrypto"),
            ("write-local-cfg", "build-dspace"),
            ("build-dspace", "install-backend"),
            ("install-backend", "migrate-database"),
            ("migrate-database", "create-administrator"),
            ("start-backend", "install-nodejs"),
            ("build-frontend", "start-frontend"),
        ]:
            self.assertLess(names.index(before), names.index(after), f"{before} must precede {after}")
        self.assertEqual(names[-1], "remove-build-artifacts")
        self.assertIsNone(self.plan.teardown)

    def test_database_passwords_sent_on_stdin(self):
        self.mock_platform.set_prefix_result("sudo -u postgres psql -tAc", 0, [""])
        self._run(self._only("set-postgres-password", "create-database-role", "create-database", "enable-pgcrypto"))

        psql = self.mock_platform.commands_matching("psql -v ON_ERROR_STOP=1")
        self.assertEqual(psql[0]["stdin"], "ALTER USER postgres PASSWORD 'Pg-Secret9';")
        self.assertIn("PASSWORD 'Db''Secret9'", psql[1]["stdin"])
        self.assertTrue(psql[2]["command"].endswith("ON_ERROR_STOP=1 dspace"))
        self.assertNotIn("Secret9", " ".join(self.mock_platform.commands()))
        self.assertCommandExecuted("sudo -u postgres createdb --owner=dspace --encoding=UNICODE dspace")

    def test_existing_database_objects_skipped(self):
        self.mock_platform.set_prefix_result("sudo -u postgres psql -tAc", 0, ["1"])
        summary = self._run(self._only("create-database-role", "create-database", "enable-pgcrypto"))
        self.assertEqual(summary.count(InstallerResult.SKIPPED), 3)
        self.assertCommandNotExecuted("createdb")

    def test_user_password_on_stdin(self):
        self.mock_platform.set_command_result("id -u dspace", 1, [])
        self._run(self._only("create-dspace-user"))

        chpasswd = self.mock_platform.commands_matching("chpasswd")[0]
        self.assertEqual(chpasswd["stdin"], "dspace:dspace\n")
        self.assertCommandExecuted("usermod -aG sudo dspace")

    def test_pg_hba_rewritten_through_tee(self):
        pg_hba = os.path.join(self.temp_dir, "pg_hba.conf")
        with open(pg_hba, "w") as f:
            f.write(PG_HBA)

        action = dspace_native._rewrite_file(pg_hba, dspace_native.pg_hba_conf, "rewrite")
        err, _ = action.func(self.ctx, self.mock_platform)

        self.assertEqual(err, 0)
        tee = self.mock_platform.commands_matching("tee")[0]
        self.assertEqual(tee["command"], f"tee {pg_hba}")
        self.assertIn(dspace_native.PG_HBA_ENTRY, tee["stdin"])

    def test_rewrite_missing_file_fails(self):
        action = dspace_native._rewrite_file(os.path.join(self.temp_dir, "absent"), str.upper, "rewrite")
        err, out = action.func(self.ctx, self.mock_platform)
        self.assertEqual(err, 1)
        self.assertIn("not found", out[0])

    def test_backend_readiness_timeout_collects_journal(self):
        self.mock_platform.set_prefix_result("journalctl -u tomcat10", 0, ["SEVERE: context failed to start"])
        with patch("libstack.installer.core.readiness.test_http_connection", return_value=(0, "refused")):
            with self.assertRaises(ReadinessTimeoutError) as raised:
                self._run(self._only("start-backend"))

        self.assertEqual(raised.exception.step_name, "start-backend")
        self.assertEqual(raised.exception.attempts, 60)
        self.assertEqual(raised.exception.output, ["SEVERE: context failed to start"])

    def test_pm2_autostart_registered_once(self):
        self.mock_platform.set_command_result("crontab -l", 0, ["0 1 * * * backup"])
        self._run(self._only("register-pm2-autostart"))

        install = self.mock_platform.commands_matching("crontab -")[-1]
        self.assertEqual(install["stdin"], f"0 1 * * * backup\n{dspace_native.PM2_AUTOSTART_LINE}\n")

    def test_dry_run_touches_nothing(self):
        ctx = self.create_test_context({"deployment": Deployment.DSPACE_NATIVE}, ControlFlow.DRYRUN)
        summary = Sequencer(self.mock_platform, None, ControlFlow.DRYRUN).run(
            dspace_native.build_plan(ctx, self.mock_platform), ctx
        )
        self.assertEqual(summary.count(InstallerResult.SKIPPED), len(self.plan))
        self.assertEqual(self.mock_platform.commands(), [])


if __name__ == "__main__":
    unittest.main()
