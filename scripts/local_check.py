# scripts/local_check.py
"""
Pre-commit style local check: formatting, lint, types and the test suite.

Usage: python scripts/local_check.py [--no-fix]
"""

import subprocess
import sys
import tomllib

STEPS = [
    ("toml-sort pyproject.toml --in-place --all", "Sorting TOML", True),
    ("python -m black src scripts tests", "Black formatting", True),
    ("ruff check src scripts tests", "Ruff lint", False),
    ("mypy src/rotaplan", "Mypy type check", False),
    ("python -m pytest -q", "Test suite", False),
]


def run(cmd: str, desc: str, fix: bool = False) -> bool:
    print(f"\n{'🔧' if fix else '🧪'} {desc} ...")
    try:
        subprocess.run(cmd, check=True, shell=True)
    except subprocess.CalledProcessError as e:
        print(f"⚠️  {desc} failed ({e.returncode})")
        return False
    return True


def check_toml() -> None:
    try:
        with open("pyproject.toml", "rb") as f:
            tomllib.load(f)
        print("✅ TOML syntax OK")
    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"❌ TOML error: {e}")
        sys.exit(1)


def main(argv: list[str]) -> int:
    allow_fix = "--no-fix" not in argv
    check_toml()

    failed = [
        desc for cmd, desc, fix in STEPS if (allow_fix or not fix) and not run(cmd, desc, fix)
    ]
    if failed:
        print(f"\n🏁 Local check finished with failures: {', '.join(failed)}")
        return 1
    print("\n🏁 Local check completed.")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
