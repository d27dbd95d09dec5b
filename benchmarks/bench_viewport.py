"""Repeatable benchmark for per-frame projection cost across dataset sizes.

Builds datasets of increasing size and measures build_projection() with the
cursor parked at the middle, plus the interner footprint of each store. Frame
cost should stay flat as the row count grows.

Usage:
    uv run python benchmarks/bench_viewport.py                 # 10k, 100k, 1M rows
    uv run python benchmarks/bench_viewport.py --sizes 5000 50000
    uv run python benchmarks/bench_viewport.py --json          # machine-readable output
"""

import argparse
import json
import sys
import time
import tracemalloc

from table_explorer.app.workspace import Tab
from table_explorer.core.projection import build_projection
from table_explorer.core.table_store import TabularStore

HEADERS = ["id", "status", "region", "owner", "note"]
STATUSES = ["active", "pending", "closed"]
REGIONS = ["eu-west", "us-east", "ap-south", "sa-east"]


def generate_rows(n: int) -> list[list[str]]:
    """Rows with mostly repeated values, like typical query output."""
    return [
        [str(i), STATUSES[i % 3], REGIONS[i % 4], f"team{i % 50}", "ok" if i % 7 else "needs review"]
        for i in range(n)
    ]


def _percentile(samples: list[float], pct: float) -> float:
    ordered = sorted(samples)
    return ordered[min(len(ordered) - 1, int(len(ordered) * pct))]


def bench_size(n_rows: int, frames: int, viewport_height: int, width: int) -> dict:
    rows = generate_rows(n_rows)

    tracemalloc.start()
    t0 = time.perf_counter()
    store = TabularStore(HEADERS, rows)
    load_ms = (time.perf_counter() - t0) * 1000
    _, mem_peak = tracemalloc.get_traced_memory()
    tracemalloc.stop()

    tab = Tab("bench", store)
    tab.selected_row = n_rows // 2
    samples: list[float] = []
    for frame in range(frames):
        # Alternate by one row so every frame does real scroll work.
        tab.move_row(1 if frame % 2 == 0 else -1)
        t = time.perf_counter()
        build_projection(tab, viewport_height, width)
        samples.append((time.perf_counter() - t) * 1e6)

    return {
        "rows": n_rows,
        "load_ms": load_ms,
        "mem_peak_kb": mem_peak / 1024,
        "interned": store.interned_count,
        "frame_min_us": min(samples),
        "frame_p50_us": _percentile(samples, 0.5),
        "frame_p99_us": _percentile(samples, 0.99),
    }


def print_report(results: list[dict], frames: int) -> None:
    print(f"\n{'='*72}")
    print(f"  Viewport Projection Benchmark ({frames} frames per size)")
    print(f"{'='*72}")
    print(f"  {'rows':>9}  {'load ms':>9}  {'peak KB':>10}  {'interned':>8}  "
          f"{'p50 us':>8}  {'p99 us':>8}")
    for r in results:
        print(f"  {r['rows']:>9}  {r['load_ms']:>9.1f}  {r['mem_peak_kb']:>10.0f}  {r['interned']:>8}  "
              f"{r['frame_p50_us']:>8.1f}  {r['frame_p99_us']:>8.1f}")
    print(f"{'='*72}\n")


def main() -> None:
    parser = argparse.ArgumentParser(description="Viewport projection benchmark")
    parser.add_argument("--sizes", type=int, nargs="+", default=[10_000, 100_000, 1_000_000],
                        help="Dataset sizes in rows")
    parser.add_argument("--frames", type=int, default=500, help="Projections per size")
    parser.add_argument("--height", type=int, default=40, help="Viewport height in rows")
    parser.add_argument("--width", type=int, default=160, help="Available width in cells")
    parser.add_argument("--json", action="store_true", help="Output JSON instead of a table")
    args = parser.parse_args()

    results = [bench_size(n, args.frames, args.height, args.width) for n in args.sizes]
    if args.json:
        json.dump(results, sys.stdout, indent=2)
        print()
    else:
        print_report(results, args.frames)


if __name__ == "__main__":
    main()
