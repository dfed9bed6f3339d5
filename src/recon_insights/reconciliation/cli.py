#!/usr/bin/env python3
"""Command-line interface for reconciliation dashboard views.

This CLI computes dashboard views from raw JSON payloads saved from the
reconciliation API, exports them as CSV and merges snapshots.

Usage:
    python -m recon_insights.reconciliation.cli views --summary summary.json --format text
    python -m recon_insights.reconciliation.cli export --summary summary.json --start 2025-01-01 --end 2025-01-31
    python -m recon_insights.reconciliation.cli merge jan.json feb.json --output merged.json
"""

import argparse
import json
import logging
import os
import sys
from datetime import date, datetime
from typing import Any, Optional

from ..config import get_settings
from .models import DateField, Platform, ReportContext
from .report import ExportError, ReportGenerator
from .service import DashboardService

logger = logging.getLogger(__name__)


def parse_date(date_string: str) -> date:
    """Parse a date string in various formats.

    Args:
        date_string: Date in YYYY-MM-DD, YYYY/MM/DD or DD-MM-YYYY format.

    Returns:
        Parsed date object.

    Raises:
        ValueError: If the string cannot be parsed.
    """
    formats = [
        "%Y-%m-%d",
        "%Y/%m/%d",
        "%d-%m-%Y",
    ]

    for fmt in formats:
        try:
            return datetime.strptime(date_string, fmt).date()
        except ValueError:
            continue

    raise ValueError(
        f"Unable to parse date: {date_string}. "
        f"Expected formats: YYYY-MM-DD, YYYY/MM/DD or DD-MM-YYYY"
    )


def load_json(path: Optional[str]) -> Any:
    """Load a JSON payload from a file, or return None when no path is given.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON.
    """
    if not path:
        return None
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _emit(output: str, output_file: Optional[str]) -> None:
    if output_file and output_file != "-":
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(output)
        logger.info(f"Output written to {output_file}")
    else:
        sys.stdout.write(output)
        if not output.endswith("\n"):
            sys.stdout.write("\n")


def run_views(args: argparse.Namespace, service: DashboardService) -> int:
    views = service.build_views(
        load_json(args.summary),
        ageing=load_json(args.ageing),
        growth=load_json(args.growth),
    )
    context = ReportContext(
        start_date=parse_date(args.start) if args.start else date.today(),
        end_date=parse_date(args.end) if args.end else date.today(),
        platform=Platform(args.platform),
        date_field=DateField(args.date_field),
    )
    _emit(service.render_views(views, context, format=args.format), args.output)
    return 0


def run_export(args: argparse.Namespace, service: DashboardService, export_dir: str) -> int:
    start = parse_date(args.start)
    end = parse_date(args.end)
    if start > end:
        raise ValueError("--start must not be after --end")

    context = ReportContext(
        start_date=start,
        end_date=end,
        date_field=DateField(args.date_field),
        platform=Platform(args.platform),
        active_tab=args.tab,
    )
    views = service.build_views(
        load_json(args.summary),
        ageing=load_json(args.ageing),
        growth=load_json(args.growth),
    )
    generator = ReportGenerator(views, context)

    if args.output == "-":
        generator.write_csv(sys.stdout)
        return 0

    target = args.output or export_dir
    path = generator.write_csv(target)
    logger.info(f"Exported {len(generator.build_rows())} rows to {path}")
    return 0


def run_merge(args: argparse.Namespace, service: DashboardService) -> int:
    merged = service.merge(load_json(args.primary), load_json(args.secondary))
    _emit(json.dumps(merged, indent=2, ensure_ascii=False), args.output)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="recon-insights",
        description="Reconciliation dashboard views, exports and snapshot merging.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_payload_args(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--summary", required=True, help="Main-summary JSON file")
        sub.add_argument("--ageing", help="Ageing analysis JSON file")
        sub.add_argument("--growth", help="Monthly growth JSON file")
        sub.add_argument(
            "--platform", "-p",
            choices=[p.value for p in Platform],
            default=Platform.FLIPKART.value,
            help="Platform the payloads were fetched for (default: flipkart)",
        )
        sub.add_argument(
            "--date-field",
            choices=[d.value for d in DateField],
            default=DateField.SETTLEMENT.value,
            help="Date field used to select orders (default: settlement)",
        )

    # Views command
    views_parser = subparsers.add_parser("views", help="Compute dashboard views")
    add_payload_args(views_parser)
    views_parser.add_argument("--start", "-s", help="Start date (YYYY-MM-DD)")
    views_parser.add_argument("--end", "-e", help="End date (YYYY-MM-DD)")
    views_parser.add_argument(
        "--format", "-f",
        choices=["json", "csv", "text"],
        default="json",
        help="Output format (default: json)",
    )
    views_parser.add_argument("--output", "-o", help="Output file path (default: stdout)")

    # Export command
    export_parser = subparsers.add_parser("export", help="Export dashboard views as CSV")
    add_payload_args(export_parser)
    export_parser.add_argument("--start", "-s", required=True, help="Start date (YYYY-MM-DD)")
    export_parser.add_argument("--end", "-e", required=True, help="End date (YYYY-MM-DD)")
    export_parser.add_argument("--tab", default="summary", help="Active dashboard tab (default: summary)")
    export_parser.add_argument(
        "--output", "-o",
        help="Output file or directory, '-' for stdout (default: RECON_EXPORT_DIR)",
    )

    # Merge command
    merge_parser = subparsers.add_parser("merge", help="Merge two raw snapshots")
    merge_parser.add_argument("primary", help="Primary snapshot JSON file (rates are taken from it)")
    merge_parser.add_argument("secondary", help="Secondary snapshot JSON file")
    merge_parser.add_argument("--output", "-o", help="Output file path (default: stdout)")

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Optional list of command-line arguments (for testing).

    Returns:
        Exit code: 0 on success, 1 for usage errors, 2 for I/O failures.
    """
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    service = DashboardService(locale=settings.locale)

    try:
        if parsed_args.command == "views":
            return run_views(parsed_args, service)
        if parsed_args.command == "export":
            return run_export(parsed_args, service, os.path.expanduser(settings.export_dir))
        if parsed_args.command == "merge":
            return run_merge(parsed_args, service)
    except ExportError as e:
        logger.error(f"Export failed: {e}")
        return 2
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON input: {e}")
        return 2
    except OSError as e:
        logger.error(f"Unable to read or write file: {e}")
        return 2
    except ValueError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
