"""
OrderStar - Delivery Order Star-Schema Analysis

CLI entry point for running the batch pipeline.
"""

import argparse
import logging
import sys

from src.orchestrator import PipelineOrchestrator
from src.utils.storage import StorageManager
import config.settings as settings


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="OrderStar - normalize delivery orders into a star schema and report on them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run over the default dataset and export tables to ./output
  python main.py

  # Run over a specific file
  python main.py --source data/swiggy_data.csv --output-dir /tmp/orderstar

  # Print reports only, no files written
  python main.py --source data/swiggy_data.csv --no-export
        """
    )

    parser.add_argument(
        "--source",
        default=str(settings.DEFAULT_SOURCE_FILE),
        help=f"Order dataset CSV (default: {settings.DEFAULT_SOURCE_FILE})"
    )

    parser.add_argument(
        "--output-dir",
        default=str(settings.OUTPUT_ROOT),
        help=f"Export directory (default: {settings.OUTPUT_ROOT})"
    )

    parser.add_argument(
        "--no-export",
        action="store_true",
        default=not settings.EXPORT_TABLES,
        help="Skip writing tables, reports and validation summary"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    print("=" * 60)
    print("OrderStar - Delivery Order Analysis")
    print("=" * 60)
    print(f"Source: {args.source}")
    print(f"Export: {'off' if args.no_export else args.output_dir}")
    print("=" * 60)
    print()

    try:
        storage = None if args.no_export else StorageManager(args.output_dir)
        orchestrator = PipelineOrchestrator(storage=storage)
        result = orchestrator.run(args.source)

    except KeyboardInterrupt:
        logger.warning("Pipeline interrupted by user")
        print("\nPipeline interrupted")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Pipeline failed: {e}", exc_info=True)
        print(f"\nPipeline failed: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        sys.exit(1)

    print("Validation summary")
    print("-" * 60)
    for key, value in result.validation.to_dict().items():
        print(f"{key}: {value}")

    for name, report in result.reports.items():
        print()
        print(name)
        print("-" * 60)
        print(report.to_string(index=False))

    if result.output_dir:
        print()
        print(f"Tables and reports written to {result.output_dir}")

    logger.info("OrderStar completed successfully")
    sys.exit(0)


if __name__ == "__main__":
    main()
