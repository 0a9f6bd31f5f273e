#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
libstack Installer Test Runner

Runs all tests (unit and mock) or specific test types.

Usage:
    python run_tests.py           # Run all tests
    python run_tests.py --unit    # Run unit tests only
    python run_tests.py --mock    # Run mock plan and entry point tests only
"""
import argparse
import os
import sys
import unittest

# Add the project root to Python path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


def run_test_dir(subdir: str, title: str) -> unittest.TestResult:
    print(f"Running {title}...")
    print("-" * 30)

    loader = unittest.TestLoader()
    suite = loader.discover(
        start_dir=os.path.join(os.path.dirname(__file__), subdir),
        pattern="test_*.py",
        top_level_dir=PROJECT_ROOT,
    )
    return unittest.TextTestRunner(verbosity=2).run(suite)


def main() -> bool:
    parser = argparse.ArgumentParser(description="Run libstack installer tests")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--unit", action="store_true", help="Run unit tests only")
    group.add_argument("--mock", action="store_true", help="Run mock plan and entry point tests only")
    args = parser.parse_args()

    from libstack.installer.utils.logger_utils import InstallerLogger

    InstallerLogger.set_console_output(False)

    print("libstack Installer Test Suite")
    print("=" * 50)

    results = []
    if not args.mock:
        results.append(run_test_dir("unit", "Unit Tests"))
    if not args.unit:
        if results:
            print("\n" + "=" * 50 + "\n")
        results.append(run_test_dir("mock", "Mock Tests"))

    total_tests = sum(r.testsRun for r in results)
    total_failures = sum(len(r.failures) for r in results)
    total_errors = sum(len(r.errors) for r in results)

    print("\n" + "=" * 50)
    print("OVERALL SUMMARY")
    print("=" * 50)
    print(f"Total tests run: {total_tests}")
    print(f"Total failures: {total_failures}")
    print(f"Total errors: {total_errors}")

    all_successful = all(r.wasSuccessful() for r in results)
    print("\nAll tests passed!" if all_successful else "\nSome tests failed")
    return all_successful


if __name__ == "__main__":
    sys.exit(0 if main() else 1)
