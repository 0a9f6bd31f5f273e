#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.


"""Base configuration item class for the libstack installer.

This module provides the ConfigItem class that serves as the foundation
for every operator-facing option, plus small subclasses that coerce
string input (from settings files, .env files and the command line)
into the item's native type before validation.
"""

from dataclasses import dataclass, field, InitVar
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Tuple, Union

from libstack.libstack_utils import str2bool


@dataclass
class ConfigItem:
    """
    Base class for all configuration items.

    This class represents a single configurable value with all its associated data/metadata.

    Attributes:
        key: Unique conceptual identifier for the config item (should always be a KEY_CONFIG_ITEM_... constant)
        label: Human-readable display name for the item
        default_value: Initial/fallback value for the item
        value: Current configuration value
        is_modified: Whether the item has been modified via set_value
        validator: Callback to check if incoming value is valid
        choices: List of choices for the item (used for prompts)
        is_password: Whether the field should be displayed as sensitive
        accept_blank: Whether the field should accept a blank/empty value
        deployments: Deployments this item applies to (empty means all of them)
        prompt: Whether the item is asked about interactively
        visible_when: Predicate over the values resolved so far deciding whether the item is asked about
        _question: Question attached to this ConfigItem to present to the user (either a str or "Callable")
        metadata: dict = Contains information to perform inspection on
    """

    key: str
    label: str
    default_value: Any = None
    value: Any = field(init=False)
    validator: Optional[Callable[[Any], Union[bool, Tuple[bool, str]]]] = None
    choices: list = field(default_factory=list)
    is_modified: bool = False
    is_password: bool = False
    accept_blank: bool = False
    deployments: tuple = ()
    prompt: bool = True
    visible_when: Optional[Callable[[Mapping[str, Any]], bool]] = None
    metadata: dict = field(default_factory=dict)

    # Use InitVar to accept `question` in __init__ but store internally as _question
    question: InitVar[Union[str, Callable[[], Any]]] = ""
    _question: Union[str, Callable[[], Any]] = field(init=False)

    def __post_init__(self, question):
        self.value = self.default_value
        self.is_modified = False
        self._question = question

    def applies_to(self, deployment) -> bool:
        return (not self.deployments) or (deployment in self.deployments)

    def is_visible(self, values: Mapping[str, Any]) -> bool:
        return self.prompt and ((self.visible_when is None) or bool(self.visible_when(values)))

    def convert(self, value: Any) -> Any:
        """Coerce an incoming value to this item's type; raise ValueError if impossible."""
        return value

    def set_value(self, value: Any) -> Tuple[bool, str]:
        """Set and validate a new value.

        Args:
            value: The new value to set

        Returns:
            Tuple of (success, error_message)
        """
        try:
            value = self.convert(value)
        except (TypeError, ValueError) as e:
            return False, str(e) or "Invalid value"

        if (value is None or value == "") and not self.accept_blank:
            return False, "A value is required"

        if self.validator:
            result = self.validator(value)
            # Handle different validator return types
            if isinstance(result, tuple):
                valid, error = result
            else:
                # Validator returned just a boolean
                valid = result
                error = "Invalid value" if not valid else ""

            if not valid:
                return False, error

        # This is intentionally set to true even if the value is the same as the default value
        # Presumably if the user has explicitly set the value, they want to keep it so don't clobber it
        self.is_modified = True
        self.value = value
        return True, ""

    def get_value(self) -> Any:
        """Get the current value. Default is returned if value is None."""
        if self.value is None:
            return self.default_value
        return self.value

    def serialize(self) -> Any:
        """Value as written to settings files."""
        value = self.get_value()
        return value.value if isinstance(value, Enum) else value

    def reset(self):
        """Reset value to default."""
        self.value = self.default_value
        self.is_modified = False

    @property
    def question(self) -> str:  # noqa: F811
        result = self._question() if callable(self._question) else self._question
        return "" if result is None else str(result)

    @question.setter
    def question(self, value: Union[str, Callable[[], Any]]):
        self._question = value


class BooleanConfigItem(ConfigItem):
    """ConfigItem that accepts yes/no style strings as booleans"""

    def convert(self, value: Any) -> Any:
        return str2bool(value)


class IntegerConfigItem(ConfigItem):
    """ConfigItem that converts numeric strings to integers"""

    def convert(self, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("Integer value expected")
        return int(str(value).strip()) if isinstance(value, str) else int(value)


@dataclass
class EnumConfigItem(ConfigItem):
    """ConfigItem whose value is a member of enum_class, accepting the member's string value"""

    enum_class: type = None

    def __post_init__(self, question):
        super().__post_init__(question)
        if not self.choices and self.enum_class:
            self.choices = [x.value for x in self.enum_class]

    def convert(self, value: Any) -> Any:
        if isinstance(value, self.enum_class):
            return value
        try:
            return self.enum_class(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Expected one of: {', '.join(x.value for x in self.enum_class)}")
