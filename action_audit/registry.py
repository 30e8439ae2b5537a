"""Known-compromised ``name@version`` pairs.

Lists use the feed schema ``[{"name": "...", "versions": ["1.2.3", ...]}, ...]``.
The built-in list ships in ``data/bad_packages.json``; operators may point
``BAD_PACKAGES_FILE`` at their own copy and merge extra feeds (local paths or
http(s) URLs) on top of it.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Set, Union

import requests

from .errors import ConfigError
from .models import InfectedPackageEntry

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

BUILTIN_PACKAGES_FILE = Path(__file__).resolve().parent / "data" / "bad_packages.json"
FEED_TIMEOUT = 20


class InfectedPackageRegistry:
    """Immutable set of compromised package versions."""

    def __init__(self, entries: Iterable[InfectedPackageEntry]) -> None:
        self._entries = frozenset(entries)
        self._keys = frozenset(str(e) for e in self._entries)

    def __contains__(self, full_pkg: object) -> bool:
        return full_pkg in self._keys

    def __len__(self) -> int:
        return len(self._entries)

    def contains(self, name: str, version: str) -> bool:
        # exact match on the joined string, no semver ranges
        return f"{name}@{version}" in self._keys

    @property
    def package_names(self) -> Set[str]:
        return {e.name for e in self._entries}


def entries_from_feed(items: Any, *, strict: bool = True) -> List[InfectedPackageEntry]:
    """Turn a decoded feed into entries.

    With ``strict`` a malformed item raises :class:`ValueError`; otherwise it
    is skipped.
    """
    if not isinstance(items, list):
        raise ValueError("feed must be a JSON list")
    entries: List[InfectedPackageEntry] = []
    for item in items:
        try:
            name = item["name"]
            versions = item.get("versions", [])
            if not isinstance(name, str) or not isinstance(versions, list):
                raise TypeError("name must be a string and versions a list")
            entries.extend(InfectedPackageEntry(name, str(v)) for v in versions)
        except (KeyError, TypeError, AttributeError) as exc:
            if strict:
                raise ValueError(f"malformed feed item {item!r}: {exc}") from exc
            logger.debug("Skipping malformed feed item %r", item)
    return entries


def _read_feed(source: str, verify: Union[bool, str]) -> Any:
    if re.match(r"^https?://", source, re.IGNORECASE):
        r = requests.get(source, timeout=FEED_TIMEOUT, verify=verify)
        r.raise_for_status()
        return r.json()
    with open(source, "r", encoding="utf-8") as f:
        return json.load(f)


def load_registry(
    path: Optional[Union[str, Path]] = None,
    feeds: Sequence[str] = (),
    *,
    verify: Union[bool, str] = True,
) -> InfectedPackageRegistry:
    """Load the primary list plus optional feeds.

    The primary list must load; a feed that fails is logged and ignored.
    """
    primary = Path(path) if path else BUILTIN_PACKAGES_FILE
    try:
        with open(primary, "r", encoding="utf-8") as f:
            entries = entries_from_feed(json.load(f))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Cannot load bad packages list {primary}: {exc}") from exc

    for feed in feeds:
        try:
            extra = entries_from_feed(_read_feed(feed, verify), strict=False)
        except (OSError, ValueError, requests.RequestException) as exc:
            logger.warning("Failed loading optional feed %s: %s", feed, exc)
            continue
        entries.extend(extra)
        logger.info("Loaded optional feed: %s (items=%s)", feed, len(extra))

    registry = InfectedPackageRegistry(entries)
    logger.info("Loaded %s compromised package versions (%s packages) from %s",
                len(registry), len(registry.package_names), primary)
    return registry
