"""log-delivery-validator — check how many load-test log records reached their destination."""

import logging
import sys
from argparse import ArgumentParser, ArgumentTypeError

from src.config import load_config, load_yaml_config
from src.errors import ValidationFailure
from src.readers import build_reader, default_client_factory
from src.reporter import compute_report, format_report_text
from src.universe import build_universe
from src.validator import run_validation

FAILURE_MARKER = "[TEST FAILURE]"

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise ArgumentTypeError(f"total input record number must be an integer, got {value!r}") from None
    if number < 1:
        raise ArgumentTypeError(f"total input record number must be positive, got {number}")
    return number


def _non_empty(value: str) -> str:
    if not value:
        raise ArgumentTypeError("log delay must not be empty")
    return value


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="log-delivery-validator",
        description="Count delivered, duplicated and lost load-test log records at S3 or CloudWatch.",
    )
    parser.add_argument(
        "total_records",
        type=_positive_int,
        help="Total number of records the load generator produced",
    )
    parser.add_argument(
        "log_delay",
        type=_non_empty,
        help="Log delay descriptor, echoed unchanged in the report",
    )
    parser.add_argument(
        "--config",
        help="Optional YAML file with retry and record id settings",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr",
    )
    return parser


def run(args, environ=None, client_factory=default_client_factory) -> str:
    """Configure, read, reconcile and return the rendered report."""
    config = load_config(environ, load_yaml_config(args.config))
    logger.info(
        "Validating %d records at destination=%s region=%s",
        args.total_records, config.destination, config.region,
    )

    universe = build_universe(args.total_records, config.record_id_base)
    reader = build_reader(config, client_factory)
    state = run_validation(reader, universe)

    report = compute_report(
        total_input=args.total_records,
        total_found=state.total_lines_seen,
        universe=state.universe,
        log_delay=args.log_delay,
        summary=reader.summary_lines(),
    )
    return format_report_text(report)


def main(argv=None, environ=None, client_factory=default_client_factory) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        stream=sys.stderr,
    )

    try:
        output = run(args, environ, client_factory)
    except ValidationFailure as e:
        print(f"{FAILURE_MARKER} {e}", file=sys.stderr)
        return 1

    print(output)
    return 0


def entry_point():
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    entry_point()
