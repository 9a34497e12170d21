"""Argument parsing functionality for pacgraph."""

import argparse

from pacgraph.constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="pacgraph",
        description="Resolve the dependency graph and build order of AUR packages",
        add_help=True,
    )

    parser.add_argument("packages",
                        metavar="PACKAGE",
                        help="AUR package to resolve",
                        nargs="+")

    parser.add_argument("-i", "--ignore-repo",
                        dest="IGNORE_REPOS",
                        help="Treat packages of this repository as AUR packages (repeatable)",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--skip-installed",
                        dest="SKIP_INSTALLED",
                        help="Leave installed packages out of the graph",
                        action="store_true")
    parser.add_argument("--truncate",
                        dest="TRUNCATE",
                        help="Do not resolve dependencies of repository packages",
                        action="store_true")
    parser.add_argument("--no-unknown",
                        dest="NO_UNKNOWN",
                        help="Fail when a dependency cannot be found anywhere",
                        action="store_true")
    parser.add_argument("--deps",
                        dest="DEPS",
                        help="Dependency kinds to follow (default: all)",
                        action="store",
                        type=str,
                        choices=Constants.DEPENDENCY_KINDS)
    parser.add_argument("--aur-only",
                        dest="AUR_ONLY",
                        help="Only list packages that have to be built from the AUR",
                        action="store_true")

    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (default: text)",
                        action="store",
                        type=str.lower,
                        default="text",
                        choices=Constants.OUTPUT_FORMATS)
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file (default: stdout)",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to YAML config file",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])

    return parser.parse_args(argv)
