"""logmerge: merge log files into one stream ordered by timestamp."""

import logging
import sys
from argparse import ArgumentParser

from logmerge.config import load_config, load_yaml_config
from logmerge.formatter import format_instant, make_sink
from logmerge.merge import MergeScheduler, run_merge
from logmerge.reader import expand_paths, open_sources
from logmerge.stats import MergeStats, format_stats_text

logger = logging.getLogger("logmerge")


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="logmerge",
        description="Merge log files into a single stream ordered by timestamp.",
    )
    parser.add_argument(
        "files",
        nargs="*",
        help="Log file path(s) or glob pattern(s)",
    )
    parser.add_argument(
        "--start",
        help="Start time (format: 2006-01-02T15:04:05)",
    )
    parser.add_argument(
        "--end",
        help="End time, inclusive (format: 2006-01-02T15:04:05)",
    )
    parser.add_argument(
        "--sep",
        default=None,
        help="Field separator (default: a single space)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=None,
        help="Report warnings, file list and line/cache-hit counts on stderr",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML file with default settings",
    )
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.ERROR,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stderr,
    )


def run(args) -> None:
    """Resolve configuration and sources, then stream the merge to stdout."""
    configure_logging(bool(args.verbose))
    try:
        yaml_data = load_yaml_config(args.config)
        config = load_config(args, yaml_data)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    if config.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        paths = expand_paths(list(config.files))
    except FileNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if config.verbose:
        start = format_instant(config.start) if config.start else "-"
        end = format_instant(config.end) if config.end else "-"
        print(f"Start time: {start}", file=sys.stderr)
        print(f"End time: {end}", file=sys.stderr)
        print("Files: " + "\n   ".join(paths), file=sys.stderr)

    stats = MergeStats()
    cursors = open_sources(paths, config.label_width, stats)
    scheduler = MergeScheduler(cursors, start=config.start, end=config.end)
    written = run_merge(scheduler, make_sink(sys.stdout, config.separator))
    sys.stdout.flush()
    logger.info("Wrote %d lines from %d source(s)", written, len(cursors))

    if config.verbose:
        print(format_stats_text(stats), file=sys.stderr)


def main(argv=None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.files:
        print("No files specified", file=sys.stderr)
        parser.print_usage(sys.stderr)
        sys.exit(1)
    try:
        run(args)
    except KeyboardInterrupt:
        sys.exit(0)
    except BrokenPipeError:
        sys.exit(0)


if __name__ == "__main__":
    main()
