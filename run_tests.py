#!/usr/bin/env python3
"""Test runner for the NewsGate project."""

import sys
import subprocess
import argparse
import time


def run_command(cmd, description):
    """Run a command and report results."""
    print(f"\n{'='*60}")
    print(f"Running: {description}")
    print(f"Command: {' '.join(cmd)}")
    print('='*60)

    start_time = time.time()
    result = subprocess.run(cmd, capture_output=True, text=True)
    duration = time.time() - start_time

    if result.returncode == 0:
        print(f"✅ {description} passed in {duration:.2f}s")
    else:
        print(f"❌ {description} failed")
        print("STDOUT:", result.stdout)
        print("STDERR:", result.stderr)

    return result.returncode == 0


def main():
    parser = argparse.ArgumentParser(description="Run NewsGate test suite")
    parser.add_argument("--unit", action="store_true", help="Run unit tests only")
    parser.add_argument("--integration", action="store_true", help="Run integration tests only")
    parser.add_argument("--all", action="store_true", help="Run all tests (default)")
    parser.add_argument("--coverage", action="store_true", help="Generate coverage report")

    args = parser.parse_args()

    # If no specific test type selected, run all
    if not any([args.unit, args.integration]):
        args.all = True

    success = True

    # Unit tests
    if args.unit or args.all:
        cmd = ["pytest", "tests/unit/", "-v"]
        if args.coverage:
            cmd.extend(["--cov=newsgate", "--cov-report=term-missing"])
        success &= run_command(cmd, "Unit tests")

    # Integration tests
    if args.integration or args.all:
        cmd = ["pytest", "tests/integration/", "-v"]
        if args.coverage:
            cmd.extend(["--cov=newsgate", "--cov-append"])
        success &= run_command(cmd, "Integration tests")

    # Generate final coverage report
    if args.coverage:
        run_command(
            ["coverage", "report"],
            "Coverage summary"
        )

    # Summary
    print("\n" + "="*60)
    if success:
        print("✅ All tests passed!")
    else:
        print("❌ Some tests failed. Please check the output above.")
        sys.exit(1)


if __name__ == "__main__":
    main()
