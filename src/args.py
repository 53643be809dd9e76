"""Argument parsing functionality for hackindex."""

import argparse


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="hackindex",
        description=(
            "hackindex - Package repository index reader and installed package checker"
        ),
        add_help=True,
    )

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("-r", "--repo",
                        dest="REPO_DIRS",
                        help="Add a local repository directory holding 00-index.tar",
                        action="append", type=str,
                        default=[])
    parser.add_argument("--remote",
                        dest="REMOTE_REPOS",
                        help="Add a remote repository mirror as NAME=DIR",
                        action="append", type=str,
                        default=[])
    parser.add_argument("-f", "--index-file",
                        dest="INDEX_FILE",
                        help="Read a single 00-index.tar(.gz) directly, ignoring configured repositories",
                        action="store",
                        type=str)
    parser.add_argument("-p", "--package",
                        dest="PACKAGES",
                        help="Show the available versions of a package.",
                        action="append", type=str,
                        default=[])
    parser.add_argument("--installed",
                        dest="INSTALLED",
                        help="ghc-pkg dump output to check, as PATH or PATH:SCOPE",
                        action="append", type=str,
                        default=[])
    parser.add_argument("--scope-preference",
                        dest="SCOPE_PREFERENCE",
                        help="Comma separated installed package scopes, most preferred first",
                        action="store",
                        type=str)
    parser.add_argument("--stale-days",
                        dest="STALE_DAYS",
                        help="Warn when a remote index is at least this many days old",
                        action="store",
                        type=int)
    parser.add_argument("--json",
                        dest="JSON",
                        help="Print results as JSON.",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
