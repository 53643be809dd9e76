"""Preferred-version ranges read from repository archives."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from constants import Constants
from versioning.models import Dependency, VersionRange
from versioning.parser import parse_preferred_versions

from .builder import split_entry_path
from .tarball import EntryKind, TarEntry

logger = logging.getLogger(__name__)


def extract_preferences(entry: TarEntry, enabled: Optional[bool] = None) -> Optional[List[Dependency]]:
    """Return the ranges listed in a top-level ``preferred-versions`` entry.

    Returns None for any other entry, and for every entry when preferences
    are disabled (the default, see ``Constants.PREFERRED_VERSIONS_ENABLED``).
    """
    if enabled is None:
        enabled = Constants.PREFERRED_VERSIONS_ENABLED
    if not enabled or entry.kind is not EntryKind.NORMAL_FILE:
        return None
    if split_entry_path(entry.path) != [Constants.PREFERRED_VERSIONS_FILE]:
        return None
    text = (entry.content or b"").decode("utf-8", errors="replace")
    return parse_preferred_versions(text)


def merge_preferences(preference_lists: Iterable[Iterable[Dependency]]) -> Dict[str, VersionRange]:
    """Merge per-repository preferences by intersecting ranges per package name.

    Names that never appear get no entry, i.e. they stay unconstrained.
    """
    merged: Dict[str, VersionRange] = {}
    for prefs in preference_lists:
        for dep in prefs:
            if dep.name in merged:
                merged[dep.name] = merged[dep.name].intersect(dep.version_range)
            else:
                merged[dep.name] = dep.version_range
    logger.debug("Merged preferences for %d packages", len(merged))
    return merged
