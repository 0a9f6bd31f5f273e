#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Resolved, then frozen, configuration for a single provisioning run."""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Dict, Iterable, Optional

from libstack.installer.configs.constants.configuration_item_keys import KEY_CONFIG_ITEM_DEPLOYMENT
from libstack.installer.configs.constants.enums import ControlFlow
from libstack.installer.utils.exceptions import ConfigItemNotFoundError, RunContextFrozenError


class RunContext(Mapping):
    """Operator decisions for one run, keyed by KEY_CONFIG_ITEM_* constants.

    The option resolver populates a context with set_value() and then calls
    freeze(); every provisioning step reads it and nothing may write to it
    afterwards.
    """

    def __init__(
        self,
        values: Optional[Dict[str, Any]] = None,
        control_flow: ControlFlow = ControlFlow.INSTALL,
        secret_keys: Iterable[str] = (),
    ):
        self._frozen = False
        self._values = dict(values or {})
        self.control_flow = control_flow
        self.secret_keys = frozenset(secret_keys)

    def __setattr__(self, name, value):
        if getattr(self, "_frozen", False):
            raise RunContextFrozenError(name)
        super().__setattr__(name, value)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        shown = {k: ("********" if k in self.secret_keys else v) for k, v in self._values.items()}
        return f"RunContext({shown!r}, frozen={self._frozen})"

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def deployment(self):
        return self._values.get(KEY_CONFIG_ITEM_DEPLOYMENT)

    def get_value(self, key: str) -> Any:
        """Return the value for key, raising ConfigItemNotFoundError if it was never resolved."""
        if key not in self._values:
            raise ConfigItemNotFoundError(key)
        return self._values[key]

    def set_value(self, key: str, value: Any) -> None:
        if self._frozen:
            raise RunContextFrozenError(key)
        self._values[key] = value

    def freeze(self) -> "RunContext":
        if not self._frozen:
            self._values = MappingProxyType(dict(self._values))
            self._frozen = True
        return self

    def secrets(self) -> list:
        """Secret values, for masking in logged command lines."""
        return [str(self._values[k]) for k in self.secret_keys if self._values.get(k)]
