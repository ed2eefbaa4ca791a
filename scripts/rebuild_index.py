#!/usr/bin/env python3
"""
Index Rebuild Utility

Reconciles the full-text index of every format with its searchable fields,
the same way the server does at startup. With --force every index is dropped
and rebuilt from the stored records.
"""

import argparse
import sqlite3
import sys
from pathlib import Path

# Add the repository root to sys.path to import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from boocat.core.catalog import build_registry
from boocat.core.config import DB_PATH
from boocat.core.errors import InternalError
from boocat.core.store import SQLiteRecordStore


def main(argv=None):
    """Reconcile or rebuild the text indexes of a database."""
    parser = argparse.ArgumentParser(description="Rebuild boocat full-text indexes")
    parser.add_argument("--dbds", "-dbds", default=DB_PATH, help="SQLite database file")
    parser.add_argument("--force", action="store_true", help="Drop and rebuild every index")
    args = parser.parse_args(argv)

    print(f"Starting text index {'rebuild' if args.force else 'reconciliation'} for {args.dbds}...")

    try:
        store = SQLiteRecordStore.open(args.dbds)
        registry = build_registry(store)
        outcomes = store.initialize_indexes(registry, force=args.force)
    except (sqlite3.Error, OSError, InternalError) as e:
        print(f"ERROR: Failed to open database {args.dbds}: {e}")
        sys.exit(1)

    for format_name, outcome in outcomes.items():
        fields = ", ".join(sorted(registry.get(format_name).searchable)) or "-"
        print(f"  {format_name}: {outcome} ({fields})")

    store.close()
    print(f"✓ Processed {len(outcomes)} text indexes")


if __name__ == "__main__":
    main()
