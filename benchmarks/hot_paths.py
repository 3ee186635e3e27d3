#!/usr/bin/env python3
"""Performance benchmark for the request compiler and response normalizer."""

from __future__ import annotations

import argparse
import json
import time

from fub_bridge.catalog import get_catalog
from fub_bridge.compiler import RequestCompiler, path_placeholders
from fub_bridge.config import BridgeSettings
from fub_bridge.normalization import normalize_body


def make_params(path: str, i: int) -> dict:
    params: dict = {key: i for key in path_placeholders(path)}
    params["page"] = i % 7
    params["limit"] = 25
    params["data"] = {"firstName": f"Lead {i}", "tags": ["bench", "ünicode"]}
    return params


# ── Benchmarks ────────────────────────────────────────────────────────


def bench_compile(repeats: int) -> tuple[float, int]:
    compiler = RequestCompiler(
        BridgeSettings(api_key="bench-key", system_name="bench", system_key="bench-secret")
    )
    tools = list(get_catalog())
    start = time.perf_counter()
    count = 0
    for i in range(repeats):
        for descriptor in tools:
            compiler.compile(descriptor, make_params(descriptor.path, i))
            count += 1
    return time.perf_counter() - start, count


def bench_normalize(repeats: int, records: int) -> tuple[float, float]:
    body = json.dumps({"people": [{"id": i, "name": f"Lead {i}"} for i in range(records)]})
    start = time.perf_counter()
    for _ in range(repeats):
        normalize_body(body, 200, "OK")
        normalize_body("<html>Service Unavailable</html>", 503, "Service Unavailable")
    elapsed = time.perf_counter() - start
    return elapsed, elapsed / repeats * 1000


# ── Main ──────────────────────────────────────────────────────────────


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark bridge hot paths.")
    parser.add_argument("--repeats", type=int, default=200)
    parser.add_argument("--records", type=int, default=500)
    args = parser.parse_args()

    print("fub_bridge_hot_path_benchmark")
    print(f"repeats={args.repeats}")
    print(f"records={args.records}")
    print()

    # 1. Compile every catalog tool
    compile_elapsed, compiled = bench_compile(args.repeats)
    print(f"compile_total_seconds={compile_elapsed:.6f}")
    print(f"compile_requests_per_sec={compiled / compile_elapsed:.0f}")
    print()

    # 2. Normalize JSON and non-JSON bodies
    norm_elapsed, norm_avg_ms = bench_normalize(args.repeats, args.records)
    print(f"normalize_total_seconds={norm_elapsed:.6f}")
    print(f"normalize_avg_ms={norm_avg_ms:.4f}")


if __name__ == "__main__":
    main()
