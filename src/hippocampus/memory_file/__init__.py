"""Markdown memory-file scoring."""
from __future__ import annotations

from hippocampus.memory_file.scorer import (
    MemoryEntry,
    MemoryFileReport,
    MemoryFileScorer,
    ReportStats,
    ScoredItem,
    content_hash,
    parse_entries,
    report_path,
    write_report,
)

__all__ = [
    "MemoryEntry",
    "MemoryFileReport",
    "MemoryFileScorer",
    "ReportStats",
    "ScoredItem",
    "content_hash",
    "parse_entries",
    "report_path",
    "write_report",
]
