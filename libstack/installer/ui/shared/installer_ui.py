#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Abstract base class for installer UI implementations."""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple


class InstallerUI(ABC):
    """Abstract base class for installer UI implementations.

    This interface decouples option resolution from the presentation layer,
    allowing the same resolver to work with terminal prompts, dialog widgets,
    or a scripted UI in tests.
    """

    def __init__(self, use_dialog: bool = False):
        self.use_dialog = use_dialog

    @abstractmethod
    def ask_yes_no(self, message: str, default: bool = True) -> bool:
        """Ask the user a yes/no question.

        Args:
            message: The question to ask the user
            default: Default answer if user just presses enter

        Returns:
            True for yes, False for no
        """
        pass

    @abstractmethod
    def ask_string(self, prompt: str, default: str = "") -> Optional[str]:
        """Ask the user for a string input.

        Args:
            prompt: The prompt to show the user
            default: Default value if user just presses enter

        Returns:
            The user's input string, or None if cancelled
        """
        pass

    @abstractmethod
    def ask_password(self, prompt: str, default: str = "") -> Optional[str]:
        """Ask the user for a password (hidden input).

        Args:
            prompt: The prompt to show the user
            default: Default value if user just presses enter

        Returns:
            The user's password input, or None if cancelled
        """
        pass

    @abstractmethod
    def ask_choice(self, prompt: str, choices: List[Tuple[str, str]], default: Optional[str] = None) -> str:
        """Ask the user to pick one of several options.

        Args:
            prompt: The prompt to show the user
            choices: (tag, description) pairs
            default: Tag selected if the user just presses enter

        Returns:
            The selected tag
        """
        pass

    @abstractmethod
    def display_message(self, message: str) -> None:
        pass

    @abstractmethod
    def display_error(self, message: str) -> None:
        pass

    def confirm_summary(self, lines: List[str], is_dry_run: bool = False) -> bool:
        """Show the resolved settings and ask whether to proceed."""
        self.display_message("\n".join(lines))
        return self.ask_yes_no(
            "Show the planned steps without making changes?" if is_dry_run else "Proceed with installation?",
            default=True,
        )
