#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.


"""Build and format configuration summaries for UI display."""

from enum import Enum
from typing import List, Mapping, Tuple

from libstack.libstack_utils import mask_secret


def _display_value(value) -> str:
    if value is None:
        return "Not set"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def build_configuration_summary_items(config_items: Mapping, values: Mapping) -> List[Tuple[str, str]]:
    """Build a list of configuration summary items for display.

    Args:
        config_items: ConfigItem objects keyed by configuration key (for labels and secrecy)
        values: Resolved values keyed by configuration key

    Returns:
        List of (label, value) tuples, secrets masked
    """
    summary_items = []
    for key, value in values.items():
        item = config_items.get(key)
        label = item.label if item else key
        if item and item.is_password:
            summary_items.append((label, mask_secret(value)))
        else:
            summary_items.append((label, _display_value(value)))
    return summary_items


def format_summary_lines(summary_items: List[Tuple[str, str]], title: str = "Configuration Summary") -> List[str]:
    width = max([len(label) for label, _ in summary_items] + [0])
    lines = [title, "=" * len(title)]
    lines.extend(f"{label:<{width}} : {value}" for label, value in summary_items)
    return lines
