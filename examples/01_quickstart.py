#!/usr/bin/env python3
"""Example: Quickstart — hippocampus

Minimal working example: score a short agent conversation, look at the
per-message retention, and render the compaction digest.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install hippocampus-md
"""
from __future__ import annotations

import hippocampus
from hippocampus import Hippocampus, HippocampusConfig


def main() -> None:
    print(f"hippocampus version: {hippocampus.__version__}")

    messages = [
        {"role": "user", "content": "Find out why the nightly export job is slow"},
        {"role": "tool", "toolName": "read_log", "content": "export took 2h14m\n" * 200},
        {
            "role": "assistant",
            "content": "The decision: batch the writes and add an index on exported_at.",
        },
        {"role": "user", "content": "heartbeat"},
        {"role": "assistant", "content": "ok"},
    ]

    # Step 1: Score each message
    memory = Hippocampus(HippocampusConfig(max_sparse_index_tokens=500))
    for entry in memory.score(messages):
        print(
            f"  #{entry.index} {entry.entry_type.value:<12} "
            f"importance={entry.importance:.2f} retention={entry.retention:.2f} "
            f"tier={entry.tier(memory.config).value}"
        )

    # Step 2: Render the digest
    digest = memory.compact(messages)
    print("\n" + digest.text)
    print(f"\nCompression: {digest.stats.ratio_label}x")


if __name__ == "__main__":
    main()
