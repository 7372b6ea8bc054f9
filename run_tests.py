#!/usr/bin/env python3
"""Test runner for Folio with coverage reporting."""

import sys
import subprocess
import os
from pathlib import Path


def run_tests():
    """Run all tests with coverage reporting."""

    os.chdir(Path(__file__).parent)

    print("🧪 Running Folio Test Suite")
    print("=" * 50)

    print("📦 Installing Folio with test extras...")
    try:
        subprocess.run([
            sys.executable, "-m", "pip", "install", "-e", ".[test]"
        ], check=True, capture_output=True)
        print("✅ Test requirements installed successfully")
    except subprocess.CalledProcessError as e:
        print(f"❌ Failed to install test requirements: {e}")
        return False

    print("\n🔍 Running tests with coverage...")
    result = subprocess.run([
        sys.executable, "-m", "pytest",
        "tests/",
        "-v",
        "--cov=folio_pkg",
        "--cov-report=html",
        "--cov-report=term-missing",
        "--cov-fail-under=80"
    ], check=False)

    if result.returncode == 0:
        print("\n✅ All tests passed!")
        print("📊 Coverage report generated in htmlcov/")
        return True
    print(f"\n❌ Tests failed with return code {result.returncode}")
    return False


def run_image_tests():
    """Run the OG image tests with timings."""
    print("\n🖼️  Running OG image tests...")
    result = subprocess.run([
        sys.executable, "-m", "pytest",
        "tests/test_og_image.py",
        "tests/test_folio.py",
        "-v",
        "--durations=10"
    ], check=False)

    if result.returncode == 0:
        print("✅ OG image tests passed!")
        return True
    print("❌ OG image tests failed!")
    return False


def main():
    """Main test runner."""
    success = run_tests()

    if not run_image_tests():
        success = False

    print("\n" + "=" * 50)
    if success:
        print("🎉 All test suites completed successfully!")
        print("📈 Check htmlcov/index.html for detailed coverage report")
    else:
        print("💥 Some tests failed. Please review the output above.")

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
