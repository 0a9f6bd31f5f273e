#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Tests for the Docker Compose DSpace plan, run against a mock Ubuntu host."""

import os
import sys
import unittest
from unittest.mock import patch

# Add the project root directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "..", "..")))

from libstack.installer.actions import dspace_docker
from libstack.installer.configs.constants.constants import REQUIRED_CONTAINERS
from libstack.installer.configs.constants.enums import ControlFlow, InstallerResult, TestDataChoice
from libstack.installer.core.cleanup import CleanupHandler
from libstack.installer.core.guards import RunOnceLedger
from libstack.installer.core.sequencer import Sequencer
from libstack.installer.utils.exceptions import ActionFailedError
from libstack.installer.tests.mock.test_framework import BaseInstallerTest

SERVICES = "docker compose -p d9 -f docker/docker-compose.yml -f docker/docker-compose-rest.yml"
DOCKER_PS = "docker ps --format {{.Names}}"


def _no_sleep(seconds):
    pass


class DockerPlanTestCase(BaseInstallerTest):
    def setUp(self):
        super().setUp()
        patcher = patch.object(dspace_docker, "current_username", return_value="alice")
        patcher.start()
        self.addCleanup(patcher.stop)
        self.angular_dir = os.path.join(self.temp_dir, "dspace-angular")

    def _ctx(self, **values):
        merged = {"workDir": self.temp_dir}
        merged.update(values)
        return self.create_test_context(merged)

    def _plan(self, **values):
        return dspace_docker.build_plan(self._ctx(**values), self.mock_platform)


class TestDockerPlanShape(DockerPlanTestCase):
    def test_default_steps(self):
        self.assertEqual(
            self._plan().step_names(),
            [
                "install-docker",
                "add-operator-to-docker-group",
                "start-docker-daemon",
                "install-git",
                "clone-dspace-angular",
                "update-dspace-angular",
                "pull-images",
                "start-services",
                "wait-for-database",
                "verify-containers",
                "create-administrator",
            ],
        )

    def test_aip_creates_its_own_administrator(self):
        names = self._plan(testData=TestDataChoice.AIP).step_names()
        self.assertEqual(names[-2:], ["create-aip-administrator", "ingest-aip-data"])
        self.assertNotIn("create-administrator", names)

    def test_entities_data(self):
        names = self._plan(testData=TestDataChoice.ENTITIES, createAdmin=False).step_names()
        self.assertEqual(
            names[-3:], ["restart-with-entities-data", "wait-for-entities-database", "load-entities-assetstore"]
        )
        self.assertNotIn("create-administrator", names)

    def test_optional_steps(self):
        names = self._plan(installDockerIfMissing=False, installGitIfMissing=False, rebuildUi=True).step_names()
        self.assertNotIn("install-docker", names)
        self.assertNotIn("install-git", names)
        self.assertEqual(names[names.index("pull-images") + 1], "build-angular-image")

    def test_root_operator_not_added_to_group(self):
        with patch.object(dspace_docker, "current_username", return_value="root"):
            self.assertNotIn("add-operator-to-docker-group", self._plan().step_names())

    def test_docker_repository_follows_distribution(self):
        plan = self._plan()
        install = plan.steps[0]
        descriptions = [a.describe() for a in install.actions]
        self.assertIn("install signing key /etc/apt/keyrings/docker.gpg from https://download.docker.com/linux/ubuntu/gpg", descriptions)

    def test_compose_commands_use_sudo_when_needed(self):
        self.mock_platform.needs_sudo = True
        plan = self._plan()
        pull = next(s for s in plan.steps if s.name == "pull-images").actions[0]
        self.assertTrue(pull.privileged)
        self.assertEqual(pull.cwd, self.angular_dir)

    def test_follow_logs(self):
        self.assertIsNone(self._plan().follow_up)
        follow_up = self._plan(followLogs=True).follow_up
        self.assertEqual(" ".join(follow_up.argv), f"{SERVICES} logs -f")

    def test_epilogue_mentions_admin_only_when_created(self):
        self.assertIn("  Email: test@test.edu", self._plan().epilogue)
        self.assertNotIn("Admin Login:", self._plan(createAdmin=False).epilogue)


class TestDockerPlanRun(DockerPlanTestCase):
    def setUp(self):
        super().setUp()
        # the service guard sees nothing running; every later listing sees all four containers
        self.mock_platform.set_command_results(DOCKER_PS, [(0, []), (0, list(REQUIRED_CONTAINERS))])

    def _run(self, plan, ctx, cleanup=None):
        return Sequencer(self.mock_platform, cleanup, ControlFlow.INSTALL, sleep=_no_sleep).run(plan, ctx)

    def test_fresh_install(self):
        ctx = self._ctx(installDockerIfMissing=False, installGitIfMissing=False)
        summary = self._run(dspace_docker.build_plan(ctx, self.mock_platform), ctx)

        results = summary.as_dict()
        self.assertEqual(results["start-docker-daemon"], InstallerResult.SKIPPED)
        self.assertEqual(results["create-administrator"], InstallerResult.SUCCESS)

        commands = self.mock_platform.commands()
        ordered = [
            "usermod -aG docker alice",
            f"git clone --branch main https://github.com/DSpace/dspace-angular.git {self.angular_dir}",
            "git pull origin main",
            f"{SERVICES} pull",
            f"{SERVICES} up -d",
            f"{SERVICES} exec -T dspacedb pg_isready -U dspace",
        ]
        self.assertEqual([commands.index(c) for c in ordered], sorted(commands.index(c) for c in ordered))
        self.assertCommandExecuted("docker compose -p d9 -f docker/cli.yml run --rm dspace-cli create-administrator")

        ledger = RunOnceLedger(dspace_docker.ledger_path(self.temp_dir))
        self.assertTrue(ledger.has(dspace_docker.LEDGER_ADMIN))

    def test_rerun_skips_completed_work(self):
        ctx = self._ctx(installDockerIfMissing=False, installGitIfMissing=False)
        RunOnceLedger(dspace_docker.ledger_path(self.temp_dir)).record(dspace_docker.LEDGER_ADMIN)
        os.makedirs(os.path.join(self.angular_dir, ".git"))
        self.mock_platform.set_command_result(DOCKER_PS, 0, list(REQUIRED_CONTAINERS))
        self.mock_platform.set_command_result("id -nG alice", 0, ["alice docker"])

        summary = self._run(dspace_docker.build_plan(ctx, self.mock_platform), ctx)

        self.assertEqual(summary.as_dict()["create-administrator"], InstallerResult.SKIPPED)
        self.assertCommandNotExecuted("git clone")
        self.assertCommandNotExecuted("up -d")
        self.assertCommandNotExecuted("usermod")
        self.assertCommandNotExecuted("create-administrator")
        # the checkout refresh and image pull are not guarded
        self.assertCommandExecuted("git fetch origin")
        self.assertEqual(summary.as_dict()["pull-images"], InstallerResult.SUCCESS)

    def test_local_changes_are_stashed(self):
        ctx = self._ctx(installDockerIfMissing=False, installGitIfMissing=False, createAdmin=False)
        self.mock_platform.set_command_result("git diff-index --quiet HEAD --", 1, [])
        self._run(dspace_docker.build_plan(ctx, self.mock_platform), ctx)
        self.assertCommandExecuted("git stash")

    def test_entities_replace_volumes(self):
        ctx = self._ctx(
            installDockerIfMissing=False,
            installGitIfMissing=False,
            createAdmin=False,
            testData=TestDataChoice.ENTITIES,
        )
        ledger = RunOnceLedger(dspace_docker.ledger_path(self.temp_dir))
        ledger.record(dspace_docker.LEDGER_AIP_INGEST)
        self.mock_platform.set_command_result("docker volume ls -q --filter name=d9", 0, ["d9_pgdata", "d9_solr_data"])

        self._run(dspace_docker.build_plan(ctx, self.mock_platform), ctx)

        self.assertCommandExecuted("docker volume rm d9_pgdata d9_solr_data")
        self.assertCommandExecuted("-f docker/db.entities.yml up -d")
        self.assertCommandExecuted("docker compose -p d9 -f docker/cli.yml -f docker/cli.assetstore.yml run --rm dspace-cli")
        self.assertFalse(ledger.has(dspace_docker.LEDGER_AIP_INGEST))
        self.assertTrue(ledger.has(dspace_docker.LEDGER_ENTITIES))

    def test_failure_tears_down_compose_project(self):
        ctx = self._ctx(installDockerIfMissing=False, installGitIfMissing=False)
        os.makedirs(self.angular_dir)
        self.mock_platform.set_command_result(f"{SERVICES} up -d", 1, ["port is already allocated"])
        plan = dspace_docker.build_plan(ctx, self.mock_platform)

        with CleanupHandler(plan.teardown) as cleanup:
            with self.assertRaises(ActionFailedError) as raised:
                self._run(plan, ctx, cleanup)

        self.assertEqual(raised.exception.step_name, "start-services")
        self.assertEqual(raised.exception.output, ["port is already allocated"])
        self.assertEqual(cleanup.invocations, 1)
        self.assertEqual(self.mock_platform.commands().count(f"{SERVICES} down"), 1)
        self.assertCommandNotExecuted("create-administrator")

    def test_administrator_password_masked_on_failure(self):
        ctx = self._ctx(installDockerIfMissing=False, installGitIfMissing=False, adminPassword="Cat-Tree-91")
        self.mock_platform.set_prefix_result(
            "docker compose -p d9 -f docker/cli.yml run --rm dspace-cli create-administrator", 1, []
        )

        with self.assertRaises(ActionFailedError) as raised:
            self._run(dspace_docker.build_plan(ctx, self.mock_platform), ctx)

        self.assertEqual(raised.exception.step_name, "create-administrator")
        self.assertNotIn("Cat-Tree-91", raised.exception.command)
        self.assertIn("-p ********", raised.exception.command)


if __name__ == "__main__":
    unittest.main()
