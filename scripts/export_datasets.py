#!/usr/bin/env python3
"""
Bundled Dataset Exporter for tabload

This script writes every bundled dataset into the data directory as a CSV
file, then saves them all together in one workspace snapshot, and reads
both back to check they round-trip.

Usage:
    python scripts/export_datasets.py [SNAPSHOT_NAME]

Environment:
    DATA_DIR controls where files are written (default: ./data)
    SNAPSHOT_COMPRESSION picks gzip, bzip2, xz or none
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from tabload.core.config import settings
from tabload.datasets import data, list_datasets, load_dataset
from tabload.domain.workspace import Workspace
from tabload.infrastructure.delimited import read_csv, write_csv
from tabload.infrastructure.snapshots import load, save_image


DEFAULT_SNAPSHOT = "datasets.RData"


def export_csv(data_dir: Path) -> int:
    """Write each bundled dataset to ``<data_dir>/<name>.csv``."""
    written = 0
    for info in list_datasets():
        df = load_dataset(info.name)
        path = write_csv(df, data_dir / f"{info.name}.csv", row_names=info.has_row_names)
        print(f"[OK] {info.name}: {df.shape[0]} rows x {df.shape[1]} columns -> {path.name}")
        written += 1
    return written


def export_snapshot(path: Path) -> list:
    """Save all bundled datasets in one workspace snapshot."""
    ws = Workspace()
    data(*[info.name for info in list_datasets()], workspace=ws)
    names = save_image(path, workspace=ws)
    print(f"[OK] Snapshot {path.name}: {', '.join(names)}")
    return names


def verify(data_dir: Path, snapshot: Path) -> bool:
    """Read every export back and compare shapes."""
    print("\n[VERIFY] Reading exports back...")
    ok = True

    restored = Workspace()
    load(snapshot, workspace=restored)

    for info in list_datasets():
        expected = (info.rows, info.columns)
        from_csv = read_csv(data_dir / f"{info.name}.csv", row_names=1 if info.has_row_names else None)
        from_snapshot = restored[info.name]
        mismatched = [
            (label, df.shape)
            for label, df in (("csv", from_csv), ("snapshot", from_snapshot))
            if df.shape != expected
        ]
        for label, shape in mismatched:
            print(f"   [FAIL] {info.name} ({label}): {shape} != {expected}")
        if mismatched:
            ok = False
        else:
            print(f"   - {info.name}: {expected[0]} x {expected[1]}")
    return ok


def main():
    """Main entry point."""
    snapshot_name = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_SNAPSHOT

    print("=" * 60)
    print("tabload - Bundled Dataset Exporter")
    print("=" * 60)
    print(f"\nData directory: {settings.data_dir}")
    print(f"Compression: {settings.snapshot_compression}")
    print()

    data_dir = settings.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)
    snapshot = settings.resolve_data_path(snapshot_name)

    # Step 1: CSV files
    count = export_csv(data_dir)

    # Step 2: Workspace snapshot
    export_snapshot(snapshot)

    # Step 3: Read back
    if not verify(data_dir, snapshot):
        print("\n[ERROR] Exports did not round-trip")
        return 1

    print("\n" + "=" * 60)
    print(f"[SUCCESS] Exported {count} datasets")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
