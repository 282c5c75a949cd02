#!/usr/bin/env python3
"""
Migrate user documents from a JSON export into the SQLite document store.

The export is an object keyed by user id: {"users": {"<uid>": {...}}}.
Documents go through the persistence guard, so a document with an empty
categories list is refused rather than imported.

Usage:
    python scripts/migrate_json_to_db.py --json data/users_export.json --db data/collegematrix.db
"""

import argparse
import json
from pathlib import Path
import sys

from collegematrix.app import partial_from_document
from collegematrix.errors import CollegeMatrixError
from collegematrix.guard import PersistenceGuard
from collegematrix.logger import get_logger
from collegematrix.schema import validate_user_document
from collegematrix.storage import DocumentStore


def migrate(json_path: Path, db_path: Path, dry_run: bool = False, overwrite: bool = False):
    """
    Migrate user documents from JSON to the database.

    Args:
        json_path: Path to JSON export file
        db_path: Path to SQLite database file
        dry_run: If True, don't write to database
        overwrite: Merge into documents that already exist instead of skipping them

    Returns:
        Dict of counts: migrated, skipped, refused, errors
    """
    print(f"Loading users from {json_path}...")
    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)

    users = data.get("users", {})
    print(f"Found {len(users)} users in export")

    if dry_run:
        print("\n[DRY RUN] Would migrate the following users:")
        for i, (user_id, doc) in enumerate(list(users.items())[:5], 1):
            print(f"  {i}. {user_id}: {len(doc.get('categories') or [])} categories, "
                  f"{len(doc.get('schools') or [])} schools")
        if len(users) > 5:
            print(f"  ... and {len(users) - 5} more")
        return {"migrated": 0, "skipped": 0, "refused": 0, "errors": 0}

    print(f"\nOpening database at {db_path}...")
    store = DocumentStore(db_path)
    guard = PersistenceGuard(store, logger=get_logger())

    counts = {"migrated": 0, "skipped": 0, "refused": 0, "errors": 0}

    for user_id, doc in users.items():
        errors = validate_user_document(doc)
        if errors:
            print(f"⚠️  Skipping {user_id}: {errors[0]}")
            counts["skipped"] += 1
            continue

        try:
            if not overwrite and store.exists(user_id):
                print(f"⚠️  User {user_id} already exists, skipping")
                counts["skipped"] += 1
                continue

            if guard.save(user_id, partial_from_document(doc)):
                counts["migrated"] += 1
            else:
                print(f"🛑 Refused {user_id}: empty categories")
                counts["refused"] += 1

            if counts["migrated"] and counts["migrated"] % 20 == 0:
                print(f"  Migrated {counts['migrated']} users...")

        except CollegeMatrixError as e:
            print(f"❌ Error migrating {user_id}: {e}")
            counts["errors"] += 1

    print("\n✅ Migration complete!")
    print(f"   Migrated: {counts['migrated']}")
    print(f"   Skipped:  {counts['skipped']}")
    print(f"   Refused:  {counts['refused']}")
    print(f"   Errors:   {counts['errors']}")
    return counts


def main():
    parser = argparse.ArgumentParser(description="Migrate user documents from JSON to database")
    parser.add_argument("--json", type=Path, default=Path("data/users_export.json"),
                        help="Path to JSON export file")
    parser.add_argument("--db", type=Path, default=Path("data/collegematrix.db"),
                        help="Path to SQLite database file")
    parser.add_argument("--dry-run", action="store_true",
                        help="Show what would be migrated without writing")
    parser.add_argument("--overwrite", action="store_true",
                        help="Merge into users that already exist")

    args = parser.parse_args()

    if not args.json.exists():
        print(f"❌ JSON file not found: {args.json}")
        sys.exit(1)

    counts = migrate(args.json, args.db, dry_run=args.dry_run, overwrite=args.overwrite)
    if counts["errors"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
