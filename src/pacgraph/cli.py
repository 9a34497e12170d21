"""pacgraph command line entry point.

Looks the requested packages up on the AUR, resolves their dependency graph
against the local pacman databases and prints the order in which they have
to be built.
"""
import json
import logging
import sys

from pacgraph.args import parse_args
from pacgraph.config import apply_config, load_config, resolve_policy
from pacgraph.constants import ExitCodes
from pacgraph.errors import (
    CycleError,
    DatabaseError,
    NotFoundError,
    TransportError,
    UnknownDependencyError,
)
from pacgraph.graph import Factory, aur_build_order, build_order
from pacgraph.models import DEPENDENCY_FUNCS
from pacgraph.sources import AurClient, PacmanDatabase
from pacgraph.common.logging_utils import configure_logging, extra_context, is_debug_enabled

logger = logging.getLogger(__name__)


def render_text(order):
    return "".join("%s\n" % node.name for node in order)


def render_json(graph, order, remote_calls):
    data = {
        "order": [node.name for node in order],
        "packages": [
            {
                "name": node.name,
                "origin": node.package.origin.value,
                "version": node.package.version,
                "depends": [dep.name for dep in graph.successors(node)],
            }
            for node in graph.nodes()
        ],
        "aur_requests": remote_calls,
    }
    return json.dumps(data, indent=2) + "\n"


def render_dot(graph, order):
    lines = ["digraph dependencies {"]
    shown = set()
    for node in order:
        shown.add(node.id)
        style = "" if node.is_from_aur else " [style=dashed]"
        lines.append('    "%s"%s;' % (node.name, style))
    for edge in graph.edges():
        if edge.from_node.id in shown and edge.to_node.id in shown:
            lines.append('    "%s" -> "%s";' % (edge.from_node.name, edge.to_node.name))
    lines.append("}")
    return "\n".join(lines) + "\n"


def write_output(text, path):
    """Write the rendered result to ``path``, or stdout when path is None.

    Returns the exit code.
    """
    if not path:
        sys.stdout.write(text)
        return ExitCodes.SUCCESS.value
    try:
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(text)
    except OSError as e:
        logging.error("Output file couldn't be written to disk: %s", e)
        return ExitCodes.FILE_ERROR.value
    logging.info("Build order written to %s", path)
    return ExitCodes.SUCCESS.value


def run(args):
    """Resolve and render; returns the exit code."""
    try:
        cfg = load_config(args.CONFIG)
        apply_config(cfg)
        policy = resolve_policy(cfg, args)
    except DatabaseError as e:
        logging.error("%s", e)
        return ExitCodes.FILE_ERROR.value

    if is_debug_enabled(logger):
        logger.debug(
            "Resolution policy",
            extra=extra_context(
                event="policy",
                component="cli",
                skip_installed=policy.skip_installed,
                truncate=policy.truncate,
                no_unknown=policy.no_unknown,
                ignore_repos=policy.ignore_repos or None,
                deps=policy.deps
            )
        )

    remote = AurClient()
    try:
        seeds = remote.read_all(args.packages)
        factory = Factory(
            PacmanDatabase(),
            remote,
            policy.ignore_repos,
            skip_installed=policy.skip_installed,
            truncate=policy.truncate,
            no_unknown=policy.no_unknown,
            dependency_func=DEPENDENCY_FUNCS[policy.deps],
        )
        resolution = factory.resolve(seeds)
        graph = resolution.graph
        order = aur_build_order(graph) if args.AUR_ONLY else build_order(graph)
    except NotFoundError as e:
        logging.error("Not found on the AUR: %s", ", ".join(e.names))
        return ExitCodes.NOT_FOUND.value
    except TransportError as e:
        logging.error("AUR request failed: %s", e)
        return ExitCodes.CONNECTION_ERROR.value
    except DatabaseError as e:
        logging.error("%s", e)
        return ExitCodes.FILE_ERROR.value
    except UnknownDependencyError as e:
        for name in e.names:
            logging.error("%s not found (required by %s)", name, ", ".join(e.required_by[name]))
        return ExitCodes.UNKNOWN_DEPENDENCY.value
    except CycleError as e:
        logging.error("Cannot order packages: %s", e)
        return ExitCodes.DEPENDENCY_CYCLE.value

    if args.OUTPUT_FORMAT == "json":
        text = render_json(graph, order, resolution.remote_calls)
    elif args.OUTPUT_FORMAT == "dot":
        text = render_dot(graph, order)
    else:
        text = render_text(order)
    return write_output(text, args.OUTPUT)


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)
    logging.debug("Arguments parsed.")
    sys.exit(run(args))


if __name__ == "__main__":
    main()
