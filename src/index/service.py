"""Load the source package database from a list of repositories."""

from __future__ import annotations

import concurrent.futures
import logging
from typing import List, Optional, Sequence, Tuple

from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants
from versioning.models import Dependency

from .builder import ExtractedPackage, extract_package, to_source_packages
from .errors import PackageIndexError, RepositoryIndexError
from .models import Repository, SourcePackage, SourcePackageDb
from .package_index import PackageIndex
from .preferences import extract_preferences, merge_preferences
from .staleness import check_index_age
from .tarball import TarEntry, fold_tarball, maybe_decompress

logger = logging.getLogger(__name__)

RepoContents = Tuple[PackageIndex[SourcePackage], List[Dependency]]


def _warn_missing_index(repo: Repository) -> None:
    if repo.is_remote:
        logger.warning(
            "The package list for '%s' does not exist. Run '%s' to download it.",
            repo.display_name,
            Constants.UPDATE_COMMAND,
        )
    else:
        logger.warning(
            "The package list for the local repo '%s' is missing. The repo is invalid.",
            repo.local_dir,
        )


def read_repo_index(
    repo: Repository,
    stale_threshold_days: Optional[int] = None,
    preferences_enabled: Optional[bool] = None,
) -> RepoContents:
    """Read one repository's ``00-index.tar`` into an index plus its preferences.

    A missing index file is not fatal: it is reported as a warning and the
    repository contributes nothing. Other I/O errors propagate.

    Raises:
        RepositoryIndexError: the archive or one of its descriptions is corrupt.
    """
    index_file = repo.index_file
    try:
        with open(index_file, "rb") as fh:
            data = fh.read()
    except FileNotFoundError:
        _warn_missing_index(repo)
        return PackageIndex(), []

    def extract(acc: Tuple[List[ExtractedPackage], List[Dependency]], entry: TarEntry):
        pkgs, prefs = acc
        pkg = extract_package(entry)
        if pkg is not None:
            pkgs.append(pkg)
            return acc
        found = extract_preferences(entry, preferences_enabled)
        if found:
            prefs.extend(found)
        return acc

    with Timer() as t:
        try:
            pkgs, prefs = fold_tarball(extract, ([], []), maybe_decompress(data))
        except PackageIndexError as exc:
            raise RepositoryIndexError(repo, str(exc)) from exc
        pkg_index = PackageIndex.from_list(to_source_packages(pkgs, repo))

    if is_debug_enabled(logger):
        logger.debug(
            "Repository index read",
            extra=extra_context(
                event="repo_index_read",
                component="repository_index_service",
                repo=repo.display_name,
                packages=len(pkg_index),
                preferences=len(prefs),
                duration_ms=t.duration_ms(),
            ),
        )
    check_index_age(index_file, repo, stale_threshold_days)
    return pkg_index, prefs


def get_source_packages(
    repos: Sequence[Repository],
    stale_threshold_days: Optional[int] = None,
    preferences_enabled: Optional[bool] = None,
    max_workers: int = 1,
) -> SourcePackageDb:
    """Read every repository's index into one ``SourcePackageDb``.

    Packages are concatenated in repository order; when two repositories
    carry the same (name, version), the later repository wins. Preferred
    version ranges for the same package are intersected.
    """
    if not repos:
        logger.warning(
            "No remote package servers have been specified. Usually "
            "you would have one specified in the config file."
        )
        return SourcePackageDb(PackageIndex(), {})

    logger.info("Reading available packages...")

    def load(repo: Repository) -> RepoContents:
        return read_repo_index(repo, stale_threshold_days, preferences_enabled)

    if max_workers > 1 and len(repos) > 1:
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            # map() yields results in input order
            results = list(executor.map(load, repos))
    else:
        results = [load(repo) for repo in repos]

    # from_list keeps the first occurrence, so walk repositories last to first
    packages = [pkg for pkg_index, _ in reversed(results) for pkg in pkg_index.all_packages()]
    preferences = merge_preferences(prefs for _, prefs in results)
    return SourcePackageDb(PackageIndex.from_list(packages), preferences)
