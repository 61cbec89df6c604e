#!/usr/bin/env python3
"""
Shipping SLA v1 - Main Entry Point

Evaluate order confirm deadlines against the platform/carrier matrix and
write reports.

Usage:
    python scripts/run.py [--input ORDERS_FILE | --demo] [--matrix MATRIX_FILE]
                          [--output OUTPUT_FILE] [--export-csv CSV_FILE]
                          [--now ISO_TIME] [--watch [--interval SECONDS] [--ticks N]]

Output naming:
    - If --output is specified, uses that path
    - Otherwise, derives name from the input file and evaluation date
      e.g., "data/shopee_orders.csv" at 2025-06-15 -> "outputs/shopee_orders_sla_2025-06-15.xlsx"
"""
import argparse
import logging
import sys
import time
from pathlib import Path
from zoneinfo import ZoneInfo

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shipping_sla.config import DEFAULT_INPUT_FILE, MonitorSettings, DataQuality
from shipping_sla.io_loader import InputLoader, load_matrix
from shipping_sla.matrix import CarrierDeadlineMatrix
from shipping_sla.order_builder import build_orders, demo_orders
from shipping_sla.validators import validate_inputs, ValidationError
from shipping_sla.evaluator import evaluate_orders
from shipping_sla.monitor import SLAMonitor, make_clock
from shipping_sla.reporting import build_all_reports, ReportBuilder
from shipping_sla.formatting import format_compact_duration
from shipping_sla.write_outputs import write_outputs, write_csv_export
from shipping_sla.time_utils import parse_now
from shipping_sla.utils import setup_logging


def derive_output_filename(input_path, now, output_dir: str = "outputs") -> str:
    """
    Derive output filename from the input file name and evaluation date.

    Args:
        input_path: Orders file path, or None for demo data
        now: Evaluation time
        output_dir: Directory for output files

    Returns:
        Output file path like "outputs/shopee_orders_sla_2025-06-15.xlsx"
    """
    stem = Path(input_path).stem if input_path else "demo_orders"
    filename = f"{stem}_sla_{now:%Y-%m-%d}.xlsx"

    # Clean up filename (remove invalid characters)
    invalid_chars = '<>:"/\\|?*'
    for char in invalid_chars:
        filename = filename.replace(char, '_')

    return str(Path(output_dir) / filename)


def main():
    parser = argparse.ArgumentParser(
        description="Shipping SLA v1 - Order confirm deadline evaluation"
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--input", "-i",
        default=None,
        help=f"Orders file: CSV, JSON or Excel (default: {DEFAULT_INPUT_FILE})"
    )
    source.add_argument(
        "--demo",
        action="store_true",
        help="Evaluate the built-in demo orders instead of a file"
    )
    parser.add_argument(
        "--matrix", "-m",
        default=None,
        help="Carrier deadline matrix file (default: built-in matrix, "
             "or the carrier_matrix sheet of an Excel input)"
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output Excel file (default: derived from input name and date)"
    )
    parser.add_argument(
        "--output-dir",
        default="outputs",
        help="Output directory when deriving filename (default: outputs)"
    )
    parser.add_argument(
        "--export-csv",
        default=None,
        help="Also write the order export CSV to this path"
    )
    parser.add_argument(
        "--now",
        default=None,
        help="Evaluation time, ISO 8601 in UTC (default: current time)"
    )
    parser.add_argument(
        "--timezone", "--tz",
        default=None,
        help="Timezone for order timestamps without an offset and for report times, "
             "e.g. Asia/Ho_Chi_Minh (default: UTC)"
    )
    parser.add_argument(
        "--locale",
        choices=["vi", "en"],
        default="vi",
        help="Language for time-remaining text (default: vi)"
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep re-evaluating on a fixed interval and log alerts"
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=MonitorSettings.interval_seconds,
        help=f"Seconds between refreshes with --watch (default: {MonitorSettings.interval_seconds:.0f})"
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=None,
        help="Stop --watch after this many refreshes (default: run until interrupted)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    # Setup logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logger = setup_logging(log_level)

    start_time = time.time()
    logger.info("=" * 60)
    logger.info("Shipping SLA v1 - Starting")
    logger.info("=" * 60)

    try:
        now = parse_now(args.now)
        tz = ZoneInfo(args.timezone) if args.timezone else None

        # Step 1: Load inputs
        logger.info("Step 1: Loading inputs...")
        matrix = CarrierDeadlineMatrix.default()
        input_path = None

        if args.demo:
            orders = demo_orders(now)
            quality = DataQuality(total=len(orders), clean=len(orders))
        else:
            input_path = args.input or DEFAULT_INPUT_FILE
            loader = InputLoader(input_path)
            orders, quality = build_orders(loader.load_order_records(), now, tz)
            if args.matrix is None and loader.suffix in (".xlsx", ".xls"):
                matrix = loader.load_matrix() or matrix

        if args.matrix:
            matrix = load_matrix(args.matrix)

        # Determine output filename
        if args.output:
            output_path = args.output
        else:
            output_path = derive_output_filename(input_path, now, args.output_dir)

        logger.info(f"Output will be written to: {output_path}")

        # Step 2: Validate inputs
        logger.info("Step 2: Validating inputs...")
        validate_inputs(orders, matrix, now)

        # Step 3: Evaluate orders
        logger.info("Step 3: Evaluating SLA deadlines...")
        if args.watch:
            settings = MonitorSettings(interval_seconds=args.interval)
            monitor = SLAMonitor(orders, matrix, settings)

            def log_alerts(evaluated, alerts):
                for alert in alerts:
                    if not alert.acknowledged:
                        logger.warning(f"  [{alert.alert_type.value}] {alert.message}")

            monitor.run(max_ticks=args.ticks, clock=make_clock(now if args.now else None), on_tick=log_alerts)
            evaluated = monitor.evaluated
        else:
            evaluated = evaluate_orders(orders, matrix, now)

        # Step 4: Build reports
        logger.info("Step 4: Building reports...")
        reports = build_all_reports(evaluated, matrix, quality=quality, tz=tz, locale=args.locale)

        # Step 5: Write outputs
        logger.info("Step 5: Writing outputs...")
        write_outputs(reports, output_path)
        if args.export_csv:
            export_df = ReportBuilder(evaluated, matrix, tz=tz, locale=args.locale).build_export_df()
            write_csv_export(export_df, args.export_csv)

        elapsed = time.time() - start_time
        logger.info("=" * 60)
        logger.info(f"Shipping SLA v1 - Complete ({elapsed:.1f}s)")
        logger.info(f"Output written to: {output_path}")
        logger.info("=" * 60)

        # Print summary
        summary = reports["summary"].iloc[0]
        logger.info(f"  Orders: {summary['total_orders']:,}")
        logger.info(f"    Total value: {summary['total_value']:,.0f} VND")
        logger.info(f"    Expired: {summary['expired_orders']}  Warning: {summary['warning_orders']}  "
                    f"Safe: {summary['safe_orders']}  Unknown: {summary['unknown_orders']}")
        logger.info(f"    Avg time remaining: {format_compact_duration(summary['avg_time_remaining_hours'])}")

        return 0

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except ValidationError as e:
        logger.error(str(e))
        return 1
    except ValueError as e:
        logger.error(f"Validation error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
