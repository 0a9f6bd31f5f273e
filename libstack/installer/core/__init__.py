#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Core components: option resolution, plans, guards, readiness polling, cleanup and sequencing."""
