#!/usr/bin/env python3
"""
Restaurant Seeding CLI

Pre-populate the restaurants table from a CSV or JSON file, so local
searches can hit the cache before any provider has been called.

Usage:
    # From JSON file
    python scripts/seed_restaurants.py --input restaurants.json

    # From CSV file, preview only
    python scripts/seed_restaurants.py --input restaurants.csv --dry-run
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.config.settings import get_settings
from app.services.database_service import RestaurantStore, DatabaseServiceError, UpsertReport
from app.services.seed_service import parse_input, seed_restaurants


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Seed the restaurants table from a CSV or JSON file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/seed_restaurants.py --input restaurants.json
  python scripts/seed_restaurants.py --input restaurants.csv --dry-run
  python scripts/seed_restaurants.py --input restaurants.csv --database-url sqlite:///local.db
        """
    )
    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Path to CSV or JSON file with restaurant data"
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Override DATABASE_URL"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview what would be seeded without making changes"
    )
    parser.add_argument(
        "--output-failures",
        type=str,
        help="Output JSON file for ids that failed to save"
    )
    return parser.parse_args(argv)


def print_summary(report: UpsertReport, dry_run: bool):
    """Print a summary of the seeding results."""
    print("\n" + "=" * 60)
    print("SEEDING COMPLETE")
    print("=" * 60)

    print(f"\nTotal restaurants: {report.total}")
    print(f"  Saved:  {report.saved}")
    print(f"  Failed: {report.failed}")

    if report.failed_ids:
        print(f"\nFailed restaurants ({len(report.failed_ids)}):")
        for restaurant_id in report.failed_ids[:10]:  # Show first 10
            print(f"  - {restaurant_id}")
        if len(report.failed_ids) > 10:
            print(f"  ... and {len(report.failed_ids) - 10} more")

    if dry_run:
        print("\nDRY RUN - No changes were made")


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    print("Loading restaurants...")
    try:
        records = parse_input(args.input)
    except (OSError, ValueError) as e:
        print(f"Error loading restaurants: {e}")
        return 1

    if not records:
        print("No restaurants to seed.")
        return 0

    print(f"Found {len(records)} restaurants to seed")

    database_url = args.database_url or get_settings().require_database_url()
    store = RestaurantStore.from_url(database_url)
    try:
        if not args.dry_run:
            store.create_schema()
        report = seed_restaurants(store, records, dry_run=args.dry_run)
    except DatabaseServiceError as e:
        print(f"\nDatabase error: {e}")
        return 1
    finally:
        store.close()

    print_summary(report, args.dry_run)

    if args.output_failures and report.failed_ids:
        with open(args.output_failures, "w", encoding="utf-8") as f:
            json.dump(report.failed_ids, f, indent=2)
        print(f"Failures saved to: {args.output_failures}")

    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
