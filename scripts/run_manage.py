#!/usr/bin/env python
"""
Helper script to run Django management commands for trendscan.

Values in the project's .env take precedence over the shell for
DATABASE_URL, so a stale export cannot point a scan at the wrong database.

Usage:
    python scripts/run_manage.py <command> [args...]

Examples:
    python scripts/run_manage.py migrate
    python scripts/run_manage.py scan_trends --dry-run
    python scripts/run_manage.py scan_trends --topic agents --style linkedin
"""

import os
import sys
from pathlib import Path

from dotenv import dotenv_values

# Ensure we're in the project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent
os.chdir(PROJECT_ROOT)
sys.path.insert(0, str(PROJECT_ROOT))


def load_env_with_override():
    """Force DATABASE_URL from .env over any shell export."""
    env_path = PROJECT_ROOT / ".env"
    if not env_path.exists():
        return

    env_value = dotenv_values(env_path).get("DATABASE_URL")
    if not env_value:
        return

    current = os.environ.get("DATABASE_URL", "")
    if current and current != env_value:
        print("Overriding shell DATABASE_URL with the value from .env", file=sys.stderr)
    os.environ["DATABASE_URL"] = env_value


def main():
    load_env_with_override()

    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "trendscan.settings")

    from django.core.management import execute_from_command_line

    # Build argv: ['manage.py', <command>, <args>...]
    argv = ["manage.py"] + sys.argv[1:]
    execute_from_command_line(argv)


if __name__ == "__main__":
    main()
