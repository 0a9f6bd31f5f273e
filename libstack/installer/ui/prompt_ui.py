#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Operator prompts drawn with python-dialog widgets, or plain terminal input when dialog is off."""

import getpass
from typing import List, Optional, Tuple

from dialog import Dialog

from libstack.libstack_common import DialogInit, dialog_size_for
from libstack.libstack_utils import str2bool
from libstack.installer.ui.shared.installer_ui import InstallerUI
from libstack.installer.utils.exceptions import PromptCancelled
from libstack.installer.utils.logger_utils import InstallerLogger


class PromptInstallerUI(InstallerUI):
    def __init__(self, use_dialog: bool = False):
        super().__init__(use_dialog)
        self.dialog = DialogInit() if use_dialog else None

    @staticmethod
    def _raise_if_cancelled(code, prompt: str):
        if code in (Dialog.CANCEL, Dialog.ESC):
            raise PromptCancelled(prompt)

    def ask_yes_no(self, message: str, default: bool = True) -> bool:
        if self.dialog:
            height, width = dialog_size_for(message)
            code = self.dialog.yesno(message, height=height, width=width, defaultno=not default)
            # "No" comes back as CANCEL, so only escape aborts
            if code == Dialog.ESC:
                raise PromptCancelled(message)
            return code == Dialog.OK

        hint = "Y / n" if default else "y / N"
        while True:
            reply = input(f"\n{message} ({hint}): ").strip()
            if not reply:
                return default
            try:
                return str2bool(reply)
            except ValueError:
                print("Please answer yes or no")

    def ask_string(self, prompt: str, default: str = "") -> Optional[str]:
        if self.dialog:
            height, width = dialog_size_for(prompt)
            code, reply = self.dialog.inputbox(prompt, init=default or "", height=height, width=width)
            self._raise_if_cancelled(code, prompt)
        else:
            reply = input(f"\n{prompt}{f' ({default})' if default else ''}: ")
        return reply.strip() or default

    def ask_password(self, prompt: str, default: str = "") -> Optional[str]:
        if self.dialog:
            height, width = dialog_size_for(prompt)
            code, reply = self.dialog.passwordbox(prompt, insecure=True, height=height, width=width)
            self._raise_if_cancelled(code, prompt)
        else:
            reply = getpass.getpass(prompt=f"{prompt}: ")
        return reply or default

    def ask_choice(self, prompt: str, choices: List[Tuple[str, str]], default: Optional[str] = None) -> str:
        tags = [tag for tag, _ in choices]

        if self.dialog:
            height, width = dialog_size_for(prompt)
            code, reply = self.dialog.radiolist(
                prompt,
                choices=[(tag, description, tag == default) for tag, description in choices],
                height=max(height, 12),
                width=width,
            )
            self._raise_if_cancelled(code, prompt)
            return reply or default

        for index, (tag, description) in enumerate(choices, start=1):
            print(f"{index}: {tag}{f' - {description}' if description else ''}")
        while True:
            reply = input(f"{prompt}{f' ({default})' if default else ''}: ").strip()
            if not reply and default:
                return default
            if reply.isdigit() and (0 < int(reply) <= len(tags)):
                return tags[int(reply) - 1]
            if reply in tags:
                return reply

    def display_message(self, message: str) -> None:
        if self.dialog:
            height, width = dialog_size_for(message)
            self.dialog.msgbox(message, height=height, width=width, no_collapse=True)
        else:
            print(message)

    def display_error(self, message: str) -> None:
        InstallerLogger.error(message)


def get_installer_ui(use_dialog: bool) -> PromptInstallerUI:
    return PromptInstallerUI(use_dialog=use_dialog)
