#!/usr/bin/env python3
"""
Migrate jobs from a JSON-file store to the SQLite store.

Usage:
    python scripts/migrate_json_to_db.py --json data/jobs.json --db data/jobs.db
"""

import argparse
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from portability.codec import from_job_data
from portability.database import SqlKeyValueStore
from portability.errors import InvalidArgument
from portability.schema import validate_job_data
from portability.storage import JsonFileKeyValueStore


def migrate(json_path: Path, db_path: Path, dry_run: bool = False) -> dict:
    """
    Copy every decodable job from the JSON store into the database.

    Args:
        json_path: Path to JSON store file
        db_path: Path to SQLite database file
        dry_run: If True, don't write to database

    Returns:
        Counts of migrated, skipped and already present jobs
    """
    print(f"Loading jobs from {json_path}...")
    source = JsonFileKeyValueStore(json_path)
    tokens = source.keys()
    print(f"Found {len(tokens)} jobs in JSON store")

    if dry_run:
        print("\n[DRY RUN] Would migrate the following jobs:")
        for i, token in enumerate(tokens[:5], 1):
            print(f"  {i}. {token}")
        if len(tokens) > 5:
            print(f"  ... and {len(tokens) - 5} more")
        return {"migrated": 0, "skipped": 0, "existing": 0}

    print(f"\nInitializing database at {db_path}...")
    target = SqlKeyValueStore(db_path)

    migrated = 0
    skipped = 0
    existing = 0
    try:
        for token in tokens:
            data = source.get(token)
            try:
                from_job_data(data)
            except InvalidArgument as e:
                print(f"Skipping {token}: {e}")
                skipped += 1
                continue
            # Copied unchanged; these only affect how the job reads back
            for warning in validate_job_data(data):
                print(f"Warning for {token}: {warning}")
            if target.get(token) is not None:
                existing += 1
                continue
            target.put(token, data)
            migrated += 1
    finally:
        target.close()

    print(f"\nMigrated: {migrated}, skipped: {skipped}, already present: {existing}")
    return {"migrated": migrated, "skipped": skipped, "existing": existing}


def main():
    parser = argparse.ArgumentParser(description="Migrate jobs from JSON store to SQLite")
    parser.add_argument("--json", default="data/jobs.json", help="Path to JSON store")
    parser.add_argument("--db", default="data/jobs.db", help="Path to SQLite database")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be migrated")
    args = parser.parse_args()

    json_path = Path(args.json)
    if not json_path.exists():
        print(f"JSON store not found: {json_path}")
        sys.exit(1)

    migrate(json_path, Path(args.db), dry_run=args.dry_run)


if __name__ == "__main__":
    main()
