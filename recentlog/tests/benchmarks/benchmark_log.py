"""
Performance benchmarks for entry log operations.

Run with: python -m recentlog.tests.benchmarks.benchmark_log
"""

import tempfile
import time
from pathlib import Path

from recentlog.core.log.log import Log


def benchmark_appends(num_entries: int = 10000) -> dict:
    """
    Benchmark append performance.

    Args:
        num_entries: Number of entries to write

    Returns:
        Performance metrics
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        log = Log(Path(tmpdir) / "history")

        entries = [f"/home/user/projects/repo-{i % 500}".encode() for i in range(num_entries)]

        start_time = time.time()

        for entry in entries:
            log.append(entry)

        log.sync()

        duration = time.time() - start_time
        size = log.size()

        log.close()

        return {
            "test": "appends",
            "entries": num_entries,
            "duration_sec": duration,
            "throughput_entries_sec": num_entries / duration,
            "log_size_kb": size / 1024,
        }


def benchmark_recent(num_entries: int = 100000, count: int = 50) -> dict:
    """
    Benchmark a bounded reverse walk over a large log.

    Args:
        num_entries: Number of entries in the log
        count: Distinct entries to collect

    Returns:
        Performance metrics
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        log = Log(Path(tmpdir) / "history", compaction_threshold_bytes=1 << 40)

        for i in range(num_entries):
            log.append(f"/srv/data/{i % 1000}".encode())

        log.sync()

        start_time = time.time()

        window = log.compactor.collect(log, count)

        duration = time.time() - start_time

        log.close()

        return {
            "test": "recent",
            "entries": num_entries,
            "collected": len(window),
            "records_read": window.records_read,
            "duration_sec": duration,
            "stale_kb": window.stale_bytes / 1024,
        }


def benchmark_compaction(num_entries: int = 100000, count: int = 100) -> dict:
    """
    Benchmark rewriting a log full of duplicates.

    Args:
        num_entries: Number of entries before compaction
        count: Distinct entries to keep

    Returns:
        Performance metrics
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        log = Log(Path(tmpdir) / "history")

        for i in range(num_entries):
            log.append(f"/var/tmp/{i % 200}".encode())

        log.sync()

        original_size = log.size()

        start_time = time.time()

        kept = log.compact(count)

        duration = time.time() - start_time
        compacted_size = log.size()

        log.close()

        return {
            "test": "compaction",
            "entries": num_entries,
            "kept": kept,
            "duration_sec": duration,
            "original_size_kb": original_size / 1024,
            "compacted_size_kb": compacted_size / 1024,
            "space_saved_percent": (original_size - compacted_size) / original_size * 100,
        }


def run_all_benchmarks():
    """Run all benchmarks and print results."""
    print("=== recentlog Performance Benchmarks ===\n")

    benchmarks = [
        benchmark_appends,
        benchmark_recent,
        benchmark_compaction,
    ]

    results = []

    for benchmark_func in benchmarks:
        print(f"Running {benchmark_func.__name__}...")
        result = benchmark_func()
        results.append(result)

        print(f"  Test: {result['test']}")
        for key, value in result.items():
            if key != 'test':
                if isinstance(value, float):
                    print(f"    {key}: {value:.2f}")
                else:
                    print(f"    {key}: {value}")
        print()

    return results


if __name__ == "__main__":
    run_all_benchmarks()
