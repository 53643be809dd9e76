"""hackindex: read package repository indexes and check installed packages.

Loads the source package database from the configured repositories (or a
single index file), prints what it finds, and optionally resolves
``ghc-pkg dump`` output against it, reporting broken dependencies.
"""

import json
import logging
import sys
from typing import Any, Dict, List, Tuple

from args import parse_args
from cli_config import ConfigError, apply_cli_overrides, load_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes
from index.builder import read_package_index_file
from index.errors import PackageIndexError
from index.installed import parse_installed_dump, resolve_installed
from index.models import PackageSource, SourcePackage
from index.service import get_source_packages

logger = logging.getLogger(__name__)


def _split_installed_spec(spec: str) -> Tuple[str, str]:
    """Split ``PATH[:SCOPE]``; a scope never contains a path separator."""
    path, sep, scope = spec.rpartition(":")
    if sep and path and scope and "/" not in scope and "\\" not in scope:
        return path, scope
    return spec, ""


def _load_index(args, cfg):
    if args.INDEX_FILE:
        def make_package(pkgid, descr):
            return SourcePackage(pkgid, descr, PackageSource(None, args.INDEX_FILE))
        return read_package_index_file(make_package, args.INDEX_FILE), {}
    db = get_source_packages(
        cfg.repositories,
        stale_threshold_days=cfg.stale_threshold_days,
        preferences_enabled=cfg.preferred_versions,
        max_workers=cfg.max_workers,
    )
    return db.package_index, db.package_preferences


def _package_report(index, names: List[str], preferences) -> List[Dict[str, Any]]:
    names = names or index.package_names()
    report = []
    for name in names:
        entry: Dict[str, Any] = {
            "name": name,
            "versions": [str(pkg.package_id.version) for pkg in index.lookup_name(name)],
        }
        if name in preferences:
            entry["preferred"] = str(preferences[name])
        report.append(entry)
    return report


def _installed_report(args, cfg) -> List[Dict[str, Any]]:
    records = []
    for spec in args.INSTALLED:
        path, scope = _split_installed_spec(spec)
        with open(path, "rb") as fh:
            records.extend(parse_installed_dump(fh.read(), scope))
    installed = resolve_installed(records, cfg.scope_preference)
    report = []
    for pkg in installed.all_packages():
        report.append({
            "id": pkg.info.installed_id,
            "package": str(pkg.package_id),
            "scope": pkg.info.scope,
            "depends": [str(dep) for dep in pkg.source_dependencies],
            "broken": [dep.installed_id for dep in pkg.broken_dependencies],
        })
    return report


def _print_text(packages, installed, show_versions: bool) -> None:
    if show_versions:
        for entry in packages:
            versions = ", ".join(entry["versions"]) or "(not available)"
            line = f"{entry['name']}: {versions}"
            if "preferred" in entry:
                line += f" [preferred: {entry['preferred']}]"
            print(line)
    else:
        total = sum(len(entry["versions"]) for entry in packages)
        print(f"{len(packages)} packages, {total} versions")
    for entry in installed:
        for dep_id in entry["broken"]:
            print(f"{entry['package']} ({entry['id']}) depends on missing package {dep_id}")


def run(argv=None) -> int:
    """Run the CLI and return an exit code."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="run"),
        )

    try:
        cfg = apply_cli_overrides(load_config(args.CONFIG), args)
    except ConfigError as exc:
        logger.error("%s", exc)
        return ExitCodes.CONFIG_ERROR.value

    try:
        index, preferences = _load_index(args, cfg)
        installed = _installed_report(args, cfg) if args.INSTALLED else []
    except PackageIndexError as exc:
        logger.error("Failed to read package index: %s", exc)
        return ExitCodes.INDEX_ERROR.value
    except OSError as exc:
        logger.error("File error: %s", exc)
        return ExitCodes.FILE_ERROR.value

    packages = _package_report(index, args.PACKAGES, preferences)
    if args.JSON:
        print(json.dumps({"packages": packages, "installed": installed}, indent=2))
    else:
        _print_text(packages, installed, bool(args.PACKAGES))

    if any(entry["broken"] for entry in installed):
        return ExitCodes.BROKEN_INSTALLED.value
    return ExitCodes.SUCCESS.value


def main():
    """Main function of the program."""
    sys.exit(run())


if __name__ == "__main__":
    main()
