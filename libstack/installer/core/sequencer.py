#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Provisioning sequencer: runs a plan's steps strictly in order.

For every step the sequencer asks the idempotency guard whether the goal state
already holds, runs the step's actions if it does not, and then polls the
step's readiness check. The first error (probe unavailable, non-zero exit,
readiness timeout, interrupt) moves the run to FAILED, fires the cleanup
handler if it is armed and propagates. Nothing after the failing step is
attempted and completed steps are never rolled back.
"""

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, List, Optional

from libstack.libstack_utils import redact_command
from libstack.installer.configs.constants.enums import ControlFlow, InstallerResult, SequencerState
from libstack.installer.core import guards
from libstack.installer.core.cleanup import CleanupHandler
from libstack.installer.core.plan import FunctionAction, ProvisioningPlan, ProvisioningStep, StepAction
from libstack.installer.core.readiness import await_ready
from libstack.installer.core.run_context import RunContext
from libstack.installer.utils.exceptions import (
    ActionFailedError,
    ProvisioningError,
    ReadinessTimeoutError,
)
from libstack.installer.utils.logger_utils import InstallerLogger, SkipReasons


@dataclass
class StepOutcome:
    name: str
    result: InstallerResult
    detail: str = ""


class RunSummary:
    """Ordered step name -> outcome for one run."""

    def __init__(self, plan_name: str):
        self.plan_name = plan_name
        self.outcomes: List[StepOutcome] = []

    def add(self, name: str, result: InstallerResult, detail: str = ""):
        self.outcomes.append(StepOutcome(name, result, detail))

    def as_dict(self) -> "OrderedDict[str, InstallerResult]":
        return OrderedDict((o.name, o.result) for o in self.outcomes)

    def count(self, result: InstallerResult) -> int:
        return sum(1 for o in self.outcomes if o.result == result)

    def lines(self) -> List[str]:
        return [f"{o.result.name:<8} {o.name}{f' ({o.detail})' if o.detail else ''}" for o in self.outcomes]

    def __iter__(self):
        return iter(self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)


class Sequencer:
    def __init__(
        self,
        runner,
        cleanup: Optional[CleanupHandler] = None,
        control_flow: ControlFlow = ControlFlow.INSTALL,
        sleep: Callable[[float], object] = time.sleep,
    ):
        self.runner = runner
        self.cleanup = cleanup
        self.control_flow = control_flow
        self._sleep = sleep
        self.state = SequencerState.NOT_STARTED

    def run(self, plan: ProvisioningPlan, ctx: RunContext) -> RunSummary:
        """Execute plan against ctx, returning the summary on success and raising on failure."""
        if self.state is not SequencerState.NOT_STARTED:
            raise RuntimeError(f"Sequencer already used (state {self.state.name})")
        ctx.freeze()
        self.state = SequencerState.RUNNING
        summary = RunSummary(plan.name)

        if not self.control_flow.should_run_install_steps():
            for step in plan:
                self._describe(step, ctx)
                summary.add(
                    step.name,
                    InstallerResult.SKIPPED,
                    SkipReasons.DRY_RUN if self.control_flow.is_dry_run() else SkipReasons.CONFIG_ONLY,
                )
            self.state = SequencerState.SUCCEEDED
            return summary

        for step in plan:
            InstallerLogger.start(step.name)
            try:
                result = self._run_step(step, ctx)
            except ProvisioningError as e:
                if e.step_name is None:
                    e.step_name = step.name
                summary.add(step.name, InstallerResult.FAILURE, e.message)
                e.summary = list(summary)
                InstallerLogger.end(step.name, InstallerResult.FAILURE, e.message)
                if e.command:
                    InstallerLogger.error(f"Command: {e.command}")
                for line in e.output:
                    InstallerLogger.error(f"  {line}")
                self._fail(step.name)
                raise
            except BaseException as e:
                # interrupts and unexpected errors abort the run the same way
                summary.add(step.name, InstallerResult.FAILURE, type(e).__name__)
                InstallerLogger.end(step.name, InstallerResult.FAILURE, str(e) or type(e).__name__)
                self._fail(step.name)
                raise

            summary.add(
                step.name,
                result,
                SkipReasons.ALREADY_PRESENT if result == InstallerResult.SKIPPED else "",
            )
            InstallerLogger.end(
                step.name,
                result,
                SkipReasons.ALREADY_PRESENT if result == InstallerResult.SKIPPED else None,
            )

        self.state = SequencerState.SUCCEEDED
        if self.cleanup is not None:
            self.cleanup.disarm()
        return summary

    def _fail(self, step_name: str):
        self.state = SequencerState.FAILED
        if self.cleanup is not None:
            self.cleanup.fire(reason=f"step '{step_name}' failed")

    def _run_step(self, step: ProvisioningStep, ctx: RunContext) -> InstallerResult:
        if guards.exists(step, ctx):
            result = InstallerResult.SKIPPED
        else:
            for action in step.actions:
                self._execute(step, action, ctx)
            if step.mutating and step.actions and (self.cleanup is not None):
                self.cleanup.arm()
            result = InstallerResult.SUCCESS

        # a skipped step still has to be ready before later steps rely on it
        if step.readiness_check is not None:
            readiness = await_ready(
                lambda: step.readiness_check(ctx),
                step.max_attempts,
                step.interval_seconds,
                label=step.name,
                sleep=self._sleep,
                diagnostics=(lambda: step.diagnostics(ctx)) if step.diagnostics else None,
            )
            if not readiness.ready:
                raise ReadinessTimeoutError(
                    f"Not ready after {readiness.attempts} attempts"
                    + (f": {readiness.detail}" if readiness.detail else ""),
                    step_name=step.name,
                    attempts=readiness.attempts,
                    detail=readiness.detail,
                    output=readiness.diagnostics,
                )
        return result

    def _execute(self, step: ProvisioningStep, action: StepAction, ctx: RunContext):
        if isinstance(action, FunctionAction):
            InstallerLogger.info(f"{step.name}: {action.describe()}")
            display = action.describe()
            try:
                result = action.func(ctx, self.runner)
            except ProvisioningError:
                raise
            except Exception as e:
                raise ActionFailedError(
                    f"{action.describe()} failed: {e}", step_name=step.name, command=display
                ) from e
            if result is None:
                return
            err, out = result
        else:
            display = action.description or redact_command(action.argv, ctx.secrets())
            InstallerLogger.info(f"{step.name}: {display}")
            InstallerLogger.debug(redact_command(action.argv, ctx.secrets()))
            if action.stream:
                err, out = (
                    self.runner.run_process_streaming(
                        list(action.argv),
                        privileged=action.privileged,
                        cwd=action.cwd,
                        env=action.env,
                    ),
                    [],
                )
            else:
                err, out = self.runner.run_process(
                    list(action.argv),
                    privileged=action.privileged,
                    stdin=action.stdin,
                    cwd=action.cwd,
                    env=action.env,
                )

        if err != 0:
            if getattr(action, "ignore_errors", False):
                InstallerLogger.warning(f"{display} returned {err}; continuing")
                return
            raise ActionFailedError(
                f"Command exited with status {err}",
                step_name=step.name,
                command=display if isinstance(action, FunctionAction) else redact_command(action.argv, ctx.secrets()),
                output=out,
                returncode=err,
            )

    def _describe(self, step: ProvisioningStep, ctx: RunContext):
        """Log what a step would do without probing or running anything."""
        InstallerLogger.info(self.control_flow.would(f"run step '{step.name}'"))
        if step.idempotency_check is not None:
            InstallerLogger.info("  (skipped at install time if its target state is already present)")
        for action in step.actions:
            if isinstance(action, FunctionAction):
                InstallerLogger.info(f"  {action.describe()}")
            else:
                InstallerLogger.info(f"  {redact_command(action.argv, ctx.secrets())}")
        if step.readiness_check is not None:
            InstallerLogger.info(
                f"  then wait for readiness (up to {step.max_attempts} checks, {step.interval_seconds}s apart)"
            )
