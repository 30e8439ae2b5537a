#!/usr/bin/env python3
"""
Check local ``package-lock.json`` files against the compromised-package list.

Usage::

    python scripts/check_lockfile.py path/to/package-lock.json [...]

Uses the same list as the org scan (``BAD_PACKAGES_FILE`` / ``BAD_FEED_URLS``
from the environment or ``.env``). Exit status is 1 when any file contains a
compromised version, 2 when a file cannot be read or parsed.
"""
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from dotenv import find_dotenv, load_dotenv

# Make action_audit importable when script is executed from root dir
ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT_DIR))

from action_audit.analyzer import find_infected  # noqa: E402  pylint: disable=wrong-import-position
from action_audit.errors import ConfigError, LockfileFormatError  # noqa: E402
from action_audit.models import Lockfile  # noqa: E402
from action_audit.registry import InfectedPackageRegistry, load_registry  # noqa: E402


def check_file(path: str, registry: InfectedPackageRegistry) -> List[str]:
    """Return the compromised ``name@version`` entries locked in *path*."""
    with open(path, "r", encoding="utf-8") as fp:
        lockfile = Lockfile.from_json(fp.read())
    return find_infected(lockfile.locked_packages(), registry)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry-point for CLI execution."""
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        print(__doc__.strip(), file=sys.stderr)
        return 2

    load_dotenv(find_dotenv())
    feeds = [x.strip() for x in os.getenv("BAD_FEED_URLS", "").split(",") if x.strip()]
    try:
        registry = load_registry(os.getenv("BAD_PACKAGES_FILE") or None, feeds)
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    status = 0
    for path in argv:
        try:
            found = check_file(path, registry)
        except (OSError, LockfileFormatError) as exc:
            print(f"ERROR: {path}: {exc}", file=sys.stderr)
            status = 2
            continue
        if found:
            print(f"{path}: INFECTED with {len(found)} packages: {found}")
            status = max(status, 1)
        else:
            print(f"{path}: clean")
    return status


if __name__ == "__main__":
    sys.exit(main())
