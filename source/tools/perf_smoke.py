import argparse
import gc
import json
import time
import tracemalloc
from pathlib import Path

from jsonlens.core import constants as app_constants
from jsonlens.core.json_metrics_core import compute_metrics, utf8_size


def _build_synthetic_payload(records: int) -> str:
    # Deterministic synthetic payload for repeatable local/CI perf checks.
    records = max(20, int(records))
    users = []
    for idx in range(records):
        users.append(
            {
                "id": f"user-{idx}",
                "name": f"User {idx}",
                "email": f"user{idx}@example.com",
                "stats": {"level": idx % 60, "xp": idx * 17},
                "flags": [idx % 2 == 0, idx % 3 == 0, idx % 5 == 0],
                "history": [{"at": idx + n, "tags": ["a", "b"]} for n in range(3)],
            }
        )
    payload = {"users": users, "meta": {"count": records, "nested": {"deep": [[[1]]]}}}
    return json.dumps(payload, indent=2)


def _build_oversized_payload(min_bytes: int) -> str:
    # Valid JSON just past the structure threshold; metrics must skip the walk.
    chunk = '{"k":"' + "x" * 1000 + '"},'
    repeat = (int(min_bytes) // len(chunk)) + 2
    return "[" + chunk * repeat + '{"k":"end"}]'


def _time_metrics(payload_text: str) -> tuple[float, object]:
    started = time.perf_counter()
    metrics = compute_metrics(payload_text)
    return (time.perf_counter() - started) * 1000.0, metrics


def _fmt_bytes(num_bytes: int) -> str:
    mib = float(num_bytes) / (1024.0 * 1024.0)
    return f"{mib:.2f} MiB"


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Quick performance/memory smoke check for the metrics engine."
    )
    parser.add_argument(
        "--input",
        type=Path,
        help="Path to a JSON file. If omitted, synthetic payload is used.",
    )
    parser.add_argument("--synthetic-records", type=int, default=1200)
    parser.add_argument("--warmup", type=int, default=1)
    parser.add_argument("--iterations", type=int, default=5)
    # Strict gate exits non-zero when perf/memory thresholds regress.
    parser.add_argument("--strict", action="store_true")
    parser.add_argument("--max-metrics-ms", type=float, default=250.0)
    parser.add_argument("--max-guard-ms", type=float, default=50.0)
    parser.add_argument("--max-peak-mib", type=float, default=256.0)
    args = parser.parse_args()

    if args.input:
        if not args.input.exists():
            print(f"ERROR: input not found: {args.input}")
            return 2
        source = str(args.input)
        try:
            payload_text = args.input.read_text(encoding="utf-8")
        except (OSError, ValueError) as exc:
            print(f"ERROR: failed to load input payload: {exc}")
            return 2
    else:
        source = f"synthetic:{max(20, int(args.synthetic_records))}"
        payload_text = _build_synthetic_payload(args.synthetic_records)

    oversized_text = _build_oversized_payload(app_constants.METRICS_STRUCTURE_MAX_BYTES)
    iterations = max(1, int(args.iterations))
    warmup = max(0, int(args.warmup))

    metric_samples = []
    guard_samples = []
    peak_samples = []
    last_metrics = None
    guard_metrics = None

    tracemalloc.start()
    try:
        for idx in range(warmup + iterations):
            gc.collect()
            elapsed, last_metrics = _time_metrics(payload_text)
            guard_elapsed, guard_metrics = _time_metrics(oversized_text)
            _current, peak_bytes = tracemalloc.get_traced_memory()
            if idx < warmup:
                continue
            metric_samples.append(elapsed)
            guard_samples.append(guard_elapsed)
            peak_samples.append(peak_bytes)
    finally:
        tracemalloc.stop()

    avg_metrics = sum(metric_samples) / len(metric_samples)
    max_guard = max(guard_samples)
    peak_bytes = max(peak_samples)

    print("perf_smoke summary")
    print(f"- source: {source}")
    print(f"- iterations: {iterations} (warmup={warmup})")
    print(f"- payload size: {utf8_size(payload_text):,} bytes")
    print(f"- avg metrics: {avg_metrics:.2f} ms")
    print(f"- depth/objects/arrays/keys: {last_metrics.depth}/{last_metrics.objects}/{last_metrics.arrays}/{last_metrics.keys}")
    print(f"- oversized payload: {utf8_size(oversized_text):,} bytes, max {max_guard:.2f} ms")
    print(f"- peak traced memory: {_fmt_bytes(peak_bytes)}")

    failures = []
    if guard_metrics.depth or guard_metrics.objects or guard_metrics.arrays or guard_metrics.keys:
        failures.append("size guard did not skip structural traversal")
    if args.strict:
        if avg_metrics > float(args.max_metrics_ms):
            failures.append(f"avg metrics {avg_metrics:.2f} ms > {args.max_metrics_ms:.2f} ms")
        if max_guard > float(args.max_guard_ms):
            failures.append(f"max guard {max_guard:.2f} ms > {args.max_guard_ms:.2f} ms")
        if peak_bytes > int(float(args.max_peak_mib) * 1024 * 1024):
            failures.append(f"peak memory {_fmt_bytes(peak_bytes)} > {args.max_peak_mib:.2f} MiB")
    if failures:
        print("perf_smoke FAILED")
        for failure in failures:
            print(f"- {failure}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
