#!/usr/bin/env python3
"""
CLI entry point for manual temp PDF cleanup.

Usage:
    python -m scripts.cleanup                    # run cleanup
    python -m scripts.cleanup --dry-run          # preview what would be cleaned
    python -m scripts.cleanup --max-age-hours 0  # remove every temp PDF
"""

import argparse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Invoice PDF Service - Temp PDF Cleanup")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview what would be cleaned without deleting",
    )
    parser.add_argument(
        "--max-age-hours",
        type=float,
        default=None,
        help="Delete PDFs not accessed for this many hours (default: from settings)",
    )
    parser.add_argument(
        "--temp-dir",
        default=None,
        help="Directory to sweep (default: from settings)",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    from config.logging_config import setup_logging
    from config.settings import settings
    from core.services.file_cleanup import PdfCleanupService

    setup_logging(settings.log_level)

    svc = PdfCleanupService(temp_dir=args.temp_dir, max_age_hours=args.max_age_hours)
    result = svc.run_cleanup(dry_run=args.dry_run)

    print(result)

    if result.errors:
        print(f"\nWarnings ({len(result.errors)}):")
        for err in result.errors:
            print(f"  - {err}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
