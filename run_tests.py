#!/usr/bin/env python3
"""Test runner with different test suites."""
import sys
import subprocess


def run_tests(test_type="all"):
    """Run tests based on type."""
    commands = {
        "unit": "pytest -m 'not integration' -v",
        "integration": "pytest -m integration -v",
        "all": "pytest -v",
        "coverage": "pytest --cov=privlog --cov-report=html",
    }

    cmd = commands.get(test_type, commands["all"])
    return subprocess.call(cmd, shell=True)


if __name__ == "__main__":
    test_type = sys.argv[1] if len(sys.argv) > 1 else "all"
    sys.exit(run_tests(test_type))
