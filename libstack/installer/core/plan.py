#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Provisioning steps and plans.

A plan is an ordered, immutable tuple of steps. Each step optionally names an
idempotency check (skip the actions when it returns True), the actions
themselves, and a readiness check polled after the actions (or after the skip).
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from libstack.libstack_utils import flatten, get_iterable


@dataclass(frozen=True)
class StepCommand:
    """An external command run through the platform's command runner."""

    argv: Tuple[str, ...]
    description: str = ""
    cwd: Optional[str] = None
    env: Optional[Dict[str, str]] = None
    stdin: Optional[str] = None
    privileged: bool = False
    # stream output to the console instead of capturing it (long builds)
    stream: bool = False
    # a non-zero exit is logged but does not fail the step
    ignore_errors: bool = False

    def __post_init__(self):
        object.__setattr__(self, "argv", tuple(str(x) for x in flatten(get_iterable(self.argv))))

    def describe(self) -> str:
        return self.description or " ".join(self.argv)


@dataclass(frozen=True)
class FunctionAction:
    """An in-process action: func(ctx, runner) returning (returncode, output lines) or None."""

    description: str
    func: Callable[[Any, Any], Optional[Tuple[int, List[str]]]]

    def describe(self) -> str:
        return self.description


StepAction = Union[StepCommand, FunctionAction]


def cmd(*argv, **kwargs) -> StepCommand:
    """Shorthand for StepCommand(argv, ...)."""
    return StepCommand(argv=argv, **kwargs)


@dataclass(frozen=True)
class ProvisioningStep:
    name: str
    actions: Tuple[StepAction, ...] = ()
    idempotency_check: Optional[Callable[[Any], bool]] = None
    readiness_check: Optional[Callable[[Any], Union[bool, Tuple[bool, str]]]] = None
    max_attempts: int = 1
    interval_seconds: float = 0
    # readiness-only and read-only steps do not arm cleanup
    mutating: bool = True
    diagnostics: Optional[Callable[[Any], List[str]]] = None

    def __post_init__(self):
        object.__setattr__(self, "actions", tuple(get_iterable(self.actions)))
        if self.max_attempts < 1:
            raise ValueError(f"Step '{self.name}': max_attempts must be at least 1")
        if self.interval_seconds < 0:
            raise ValueError(f"Step '{self.name}': interval_seconds cannot be negative")


@dataclass(frozen=True)
class ProvisioningPlan:
    name: str
    steps: Tuple[ProvisioningStep, ...] = ()
    # best-effort teardown, registered with the cleanup handler for the run
    teardown: Optional[Callable[[], None]] = None
    # lines shown to the operator after a successful run
    epilogue: Tuple[str, ...] = field(default=())
    # optional foreground command run after success, outside the cleanup scope (e.g. following logs)
    follow_up: Optional[StepCommand] = None

    def __post_init__(self):
        object.__setattr__(self, "steps", tuple(self.steps))
        object.__setattr__(self, "epilogue", tuple(self.epilogue))
        seen = set()
        for step in self.steps:
            if step.name in seen:
                raise ValueError(f"Plan '{self.name}' has more than one step named '{step.name}'")
            seen.add(step.name)

    def __iter__(self):
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def step_names(self) -> List[str]:
        return [s.name for s in self.steps]


class PlanBuilder:
    """Accumulates steps in execution order and produces an immutable ProvisioningPlan."""

    def __init__(self, name: str):
        self.name = name
        self._steps: List[ProvisioningStep] = []
        self._teardown = None
        self._epilogue: List[str] = []
        self._follow_up = None

    def step(
        self,
        name: str,
        actions: Union[StepAction, Sequence[StepAction]] = (),
        unless: Optional[Callable[[Any], bool]] = None,
        ready: Optional[Callable[[Any], Union[bool, Tuple[bool, str]]]] = None,
        poll: Tuple[int, float] = (1, 0),
        mutating: bool = True,
        diagnostics: Optional[Callable[[Any], List[str]]] = None,
    ) -> "PlanBuilder":
        max_attempts, interval = poll
        self._steps.append(
            ProvisioningStep(
                name=name,
                actions=actions,
                idempotency_check=unless,
                readiness_check=ready,
                max_attempts=max_attempts,
                interval_seconds=interval,
                mutating=mutating,
                diagnostics=diagnostics,
            )
        )
        return self

    def wait(self, name: str, ready, poll: Tuple[int, float], diagnostics=None) -> "PlanBuilder":
        """A readiness-only step."""
        return self.step(name, ready=ready, poll=poll, mutating=False, diagnostics=diagnostics)

    def teardown(self, action: Callable[[], None]) -> "PlanBuilder":
        self._teardown = action
        return self

    def epilogue(self, *lines: str) -> "PlanBuilder":
        self._epilogue.extend(lines)
        return self

    def follow_up(self, command: StepCommand) -> "PlanBuilder":
        self._follow_up = command
        return self

    def build(self) -> ProvisioningPlan:
        return ProvisioningPlan(
            name=self.name,
            steps=tuple(self._steps),
            teardown=self._teardown,
            epilogue=tuple(self._epilogue),
            follow_up=self._follow_up,
        )
