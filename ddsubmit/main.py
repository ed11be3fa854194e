"""Command-line entry point for submitting a single metric to Datadog."""
import argparse
import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from ddsubmit.config import load_settings, resolve
from ddsubmit.errors import DDSubmitError
from ddsubmit.parser import parse
from ddsubmit.submitter import Submitter


def log_level_value(log_level: str) -> int:
    """Resolve a level name, never above ERROR so fatal errors stay visible."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    return min(level, logging.ERROR)


def setup_logging(log_level: str):
    """Setup logging configuration on stderr."""
    level = log_level_value(log_level)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr
    )

    # Reduce noise from some libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("datadog_api_client").setLevel(logging.WARNING)


def build_parser(default_conf: str, default_log_level: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ddsubmit",
        description="Send a counter or gauge metric to Datadog.",
        epilog=(
            "Metric types: increment, incr, i, counter, c, gauge, g. "
            "Use -- before values such as -1e5 that look like options."
        )
    )
    parser.add_argument(
        "-dry-run",
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Don't send data to datadog."
    )
    parser.add_argument(
        "-tags",
        "--tags",
        default="",
        help="Tags to add to this metric, e.g. 'key:value,key2:value2'."
    )
    parser.add_argument(
        "-conf",
        "--conf",
        default=default_conf,
        help="Datadog app and api keys (default: %(default)s)"
    )
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        help="Logging level (default: %(default)s)"
    )
    parser.add_argument(
        "args",
        nargs="*",
        metavar="TYPE METRIC VALUE",
        help="Metric type, metric name and one or more values"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    settings = load_settings(os.environ)
    parser = build_parser(settings.config_path, settings.log_level)
    args = parser.parse_intermixed_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    submitter = Submitter(logger=logging.getLogger("ddsubmit.submitter"))

    # Credentials are only needed at submission time
    with ThreadPoolExecutor(max_workers=1) as executor:
        credentials_future = executor.submit(resolve, args.conf, os.environ)

        try:
            metric = parse(args.args, args.tags)
            logger.debug(f"Parsed {metric.type.value} '{metric.name}' with {len(metric.points)} points")
            submitter.submit(metric, credentials_future.result(), dry_run=args.dry_run)
        except DDSubmitError as e:
            logger.error(f"error: {e}")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
