"""Warn when a repository's local index has not been refreshed recently."""

from __future__ import annotations

import logging
import os
import time
from typing import Optional

from constants import Constants

from .models import Repository

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def index_age_days(index_file: str, now: Optional[float] = None) -> int:
    """Whole days elapsed since ``index_file`` was last modified."""
    current = time.time() if now is None else now
    return int((current - os.path.getmtime(index_file)) // SECONDS_PER_DAY)


def check_index_age(
    index_file: str,
    repo: Repository,
    threshold_days: Optional[int] = None,
    now: Optional[float] = None,
) -> Optional[int]:
    """Warn if a remote repository's index is ``threshold_days`` old or more.

    Local repositories cannot be refreshed, so they never warn. Advisory
    only: returns the age in days, or None when the file cannot be stat'ed.
    """
    if threshold_days is None:
        threshold_days = Constants.INDEX_STALE_THRESHOLD_DAYS
    try:
        age = index_age_days(index_file, now)
    except OSError as exc:
        logger.debug("Could not stat %s: %s", index_file, exc)
        return None

    if age >= threshold_days and repo.is_remote:
        logger.warning(
            "The package list for '%s' is %d days old.\nRun '%s' to get the latest "
            "list of available packages.",
            repo.display_name,
            age,
            Constants.UPDATE_COMMAND,
        )
    return age
