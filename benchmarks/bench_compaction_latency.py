"""Benchmark: Compaction latency — score + assemble p50/p99.

Measures end-to-end compaction time as the conversation grows.  The
reference scan compares every entry against all later entries, so this is
the number to watch when changing ``ReferenceIndex``.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hippocampus.config.settings import HippocampusConfig
from hippocampus.digest.assembler import TierAssembler
from hippocampus.messages.content import coerce_messages
from hippocampus.scoring.entry import MessageScorer

_SIZES: tuple[int, ...] = (50, 200, 800)
_ITERATIONS: int = 20


def _conversation(size: int) -> list[dict[str, object]]:
    messages: list[dict[str, object]] = []
    for i in range(size):
        if i % 3 == 0:
            messages.append({"role": "user", "content": f"Request {i}: update module_{i}.py"})
        elif i % 3 == 1:
            messages.append(
                {"role": "tool", "toolName": "read_file", "content": f"def handler_{i}():\n" * 40}
            )
        else:
            messages.append(
                {"role": "assistant", "content": f"I decided to refactor module_{i}.py into smaller parts."}
            )
    return messages


def bench_compaction_latency() -> dict[str, object]:
    """Benchmark MessageScorer + TierAssembler per-call latency.

    Returns
    -------
    dict with keys: operation, iterations, and one p50/p99 pair per
    conversation size.
    """
    config = HippocampusConfig()
    scorer = MessageScorer(config=config)
    assembler = TierAssembler(config=config)
    result: dict[str, object] = {"operation": "compaction_latency", "iterations": _ITERATIONS}

    for size in _SIZES:
        messages = coerce_messages(_conversation(size))
        latencies_ms: list[float] = []
        for _ in range(_ITERATIONS):
            t0 = time.perf_counter()
            assembler.assemble(scorer.score_messages(messages), messages)
            latencies_ms.append((time.perf_counter() - t0) * 1000)

        sorted_lats = sorted(latencies_ms)
        n = len(sorted_lats)
        result[f"p50_ms_{size}"] = round(sorted_lats[n // 2], 4)
        result[f"p99_ms_{size}"] = round(sorted_lats[min(int(n * 0.99), n - 1)], 4)
        print(
            f"[bench_compaction_latency] {size} messages: "
            f"p50={result[f'p50_ms_{size}']:.4f}ms  p99={result[f'p99_ms_{size}']:.4f}ms"
        )

    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_compaction_latency()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "compaction_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
