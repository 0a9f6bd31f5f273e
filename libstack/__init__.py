#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Unattended installer for DSpace and Koha hosts."""

from libstack.libstack_constants import LIBSTACK_VERSION

__version__ = LIBSTACK_VERSION
