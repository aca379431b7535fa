"""Main entry point for the label/value fixture generator."""
import argparse
import logging
import os
import sys
import time
from typing import Optional

from labelgen.aggregate import dump_report
from labelgen.config import load_config
from labelgen.engine import GeneratorEngine
from labelgen.errors import LabelgenError
from labelgen.metrics import SelfMetrics


def setup_logging(log_level: str):
    """Setup logging configuration."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def aggregate_format(path: str, requested: Optional[str] = None) -> str:
    """Pick the aggregate serialization from the flag or file extension."""
    if requested:
        return requested
    if path.lower().endswith((".yaml", ".yml")):
        return "yaml"
    return "json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Label/value fixture generator - write randomized entries and their aggregate"
    )
    parser.add_argument(
        "--config",
        "-c",
        default="./generate-conf.yaml",
        help="Path to generator configuration YAML file"
    )
    parser.add_argument(
        "--output",
        "-o",
        default="./out.txt",
        help="Output file path"
    )
    parser.add_argument(
        "--aggregate",
        "-a",
        default="./aggregate.json",
        help="Aggregate output file path"
    )
    parser.add_argument(
        "--aggregate-format",
        choices=["json", "yaml"],
        default=None,
        help="Aggregate file format (default: from file extension)"
    )
    parser.add_argument(
        "--metrics-file",
        default=None,
        help="Write run self-metrics to this Prometheus textfile"
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: $LOG_LEVEL or INFO)"
    )
    return parser


def main(argv=None):
    """Main function."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    # Load configuration
    try:
        config = load_config(args.config)
    except (OSError, LabelgenError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info(f"Configuration loaded from: {args.config}")

    self_metrics = SelfMetrics() if args.metrics_file else None
    engine = GeneratorEngine(config, self_metrics=self_metrics)

    # Generate
    start = time.time()
    try:
        with open(args.output, "wb") as out:
            result = engine.run(out)
            out.flush()
            os.fsync(out.fileno())
    except (OSError, LabelgenError) as e:
        logger.error(f"Generating {args.output} failed: {e}")
        _write_metrics(self_metrics, args.metrics_file, logger)
        sys.exit(1)

    logger.info(
        f"{result.bytes_written} bytes written to {args.output} "
        f"({time.time() - start:.3f}s)"
    )

    # Write aggregate file
    fmt = aggregate_format(args.aggregate, args.aggregate_format)
    try:
        with open(args.aggregate, "w") as f:
            dump_report(result.report, f, fmt)
            f.flush()
            os.fsync(f.fileno())
    except OSError as e:
        logger.error(f"Writing aggregate file {args.aggregate} failed: {e}")
        sys.exit(1)

    logger.info(f"Aggregate file written to {args.aggregate}")

    _write_metrics(self_metrics, args.metrics_file, logger)


def _write_metrics(self_metrics, path, logger):
    if not self_metrics:
        return
    try:
        self_metrics.write_textfile(path)
    except OSError as e:
        logger.error(f"Writing metrics file {path} failed: {e}")


if __name__ == "__main__":
    main()
