#!/usr/bin/env python3
"""
Simple demo of the recentlog entry cache.

This records a handful of directory visits, lists the most recent distinct
ones and shows compaction shrinking the file.
"""

import tempfile
from pathlib import Path

from recentlog.core.log import Log


def main():
    print("=" * 60)
    print("recentlog - Simple Append/Recent Demo")
    print("=" * 60)

    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "history"

        print("\n[1] Opening log...")
        log = Log(path, compaction_threshold_bytes=64)
        print(f"  Opened {path}")

        print("\n[2] Recording visits...")
        visits = ["/srv", "/home/demo", "/srv", "/etc", "/home/demo", "/var/log"] * 5
        for visit in visits:
            log.append(visit.encode())
        log.sync()
        print(f"  Recorded {len(visits)} visits, log is {log.size()} bytes")

        print("\n[3] Three most recent distinct entries:")
        for entry in log.recent(3):
            print(f"  {entry}")

        print(f"\n[4] Log after threshold compaction: {log.size()} bytes")
        print(f"  Records on disk: {log.verify()}")

        print("\n[5] Deleting log...")
        log.delete()
        print(f"  Exists: {path.exists()}")


if __name__ == "__main__":
    main()
