"""Memory-file scoring.

Scores a Markdown memory file (an agent's running notes) with the same decay
law used for conversations.  The file is split into entries on blank lines
and before ``#``/``##`` headings; each entry is classified from its text
alone, since memory files carry no roles.

Entries may pin their type or score with an HTML comment tag::

    <!-- hippocampus: type=decision -->
    <!-- hippocampus: score=0.9 -->

Classes
-------
- ScoredItem         — one scored entry of the file
- ReportStats        — tier counts and token total
- MemoryFileReport   — the full report, serialised as ``<name>.scores.json``
- MemoryFileScorer   — parses, classifies and scores memory files
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from hippocampus.classify.classifier import (
    ClassificationRule,
    ClassifierConfig,
    EntryClassifier,
    EntryType,
)
from hippocampus.config.settings import HippocampusConfig
from hippocampus.messages.content import Message
from hippocampus.scoring.decay import RetentionTier, calculate_retention, retention_tier
from hippocampus.scoring.importance import age_of, base_importance
from hippocampus.scoring.tokens import estimate_tokens

logger = logging.getLogger(__name__)

_ENTRY_SPLIT = re.compile(r"\n(?=##?\s)|(?:\n\n)+")
_TYPE_TAG = re.compile(r"<!--\s*hippocampus:\s*type=(\w+)")
_SCORE_TAG = re.compile(r"<!--\s*hippocampus:.*?score=([\d.]+)")

SIZE_PENALTY_TOKENS = 1000
SIZE_PENALTY = 0.15
PENALTY_FLOOR = 0.1
SUMMARY_CHARS = 200
HASH_CHARS = 500

MEMORY_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        target_type=EntryType.DECISION,
        content_pattern=r"decided|decision|will do|plan:|approach:|решил|решение|план:|✅|→",
        priority=10,
    ),
    ClassificationRule(
        target_type=EntryType.USER_INTENT,
        content_pattern=r"user wants|requested",
        priority=20,
    ),
    ClassificationRule(
        target_type=EntryType.TOOL_RESULT,
        content_pattern=r"```|output:|error:",
        priority=30,
    ),
    ClassificationRule(
        target_type=EntryType.EPHEMERAL,
        content_pattern=r"heartbeat|no changes",
        priority=40,
    ),
    ClassificationRule(
        target_type=EntryType.EPHEMERAL,
        max_length=50,
        priority=41,
    ),
)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MemoryEntry:
    """One raw entry of a memory file."""

    text: str
    explicit_score: float | None
    tokens: int


def parse_entries(content: str) -> list[MemoryEntry]:
    """Split a memory file into entries.

    Blank chunks and chunks consisting solely of an HTML comment are skipped.
    """
    entries: list[MemoryEntry] = []
    for section in _ENTRY_SPLIT.split(content):
        text = section.strip()
        if not text or (text.startswith("<!--") and text.endswith("-->")):
            continue
        entries.append(
            MemoryEntry(
                text=text,
                explicit_score=_explicit_score(text),
                tokens=estimate_tokens(text),
            )
        )
    return entries


def _explicit_score(text: str) -> float | None:
    match = _SCORE_TAG.search(text)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def content_hash(text: str) -> str:
    """Eight-hex-digit DJB2-xor hash of the first 500 UTF-16 code units.

    Uses signed 32-bit wraparound at every step, then prints the unsigned
    value.
    """
    raw = text.encode("utf-16-le")
    units = [
        int.from_bytes(raw[i : i + 2], "little")
        for i in range(0, min(len(raw), HASH_CHARS * 2), 2)
    ]
    value = 5381
    for unit in units:
        value = _to_int32(_to_int32(_to_int32(value << 5) + value) ^ unit)
    return f"{value & 0xFFFFFFFF:08x}"


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


# ---------------------------------------------------------------------------
# Report models
# ---------------------------------------------------------------------------


class ScoredItem(BaseModel):
    """A scored memory-file entry."""

    model_config = ConfigDict(populate_by_name=True)

    t: int
    type: EntryType
    score: float
    hash: str
    summary: str
    tokens: int


class ReportThresholds(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sparse_threshold: float = Field(alias="sparseThreshold")
    compress_threshold: float = Field(alias="compressThreshold")


class ReportStats(BaseModel):
    """Tier counts for a memory file."""

    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    sparse: int = 0
    compressed: int = 0
    kept: int = 0
    total_tokens: int = Field(default=0, alias="totalTokens")


class MemoryFileReport(BaseModel):
    """Scores for every entry of one memory file."""

    model_config = ConfigDict(populate_by_name=True)

    generated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source: str
    agent: str = "unknown"
    config: ReportThresholds
    stats: ReportStats
    items: list[ScoredItem] = Field(default_factory=list)

    def to_json(self, *, indent: int = 2) -> str:
        """Serialise with the camelCase keys used on disk."""
        return self.model_dump_json(indent=indent, by_alias=True)


# ---------------------------------------------------------------------------
# MemoryFileScorer
# ---------------------------------------------------------------------------


class MemoryFileScorer:
    """Score the entries of a Markdown memory file.

    Parameters
    ----------
    config:
        Decay configuration.  Defaults to ``HippocampusConfig()``.
    """

    def __init__(self, config: HippocampusConfig | None = None) -> None:
        self.config = config if config is not None else HippocampusConfig()
        self._classifier = EntryClassifier(
            ClassifierConfig(rules=MEMORY_RULES, fallback_type=EntryType.CONTEXT)
        )

    def classify_text(self, text: str) -> EntryType:
        """Classify one memory entry from its text.

        An explicit ``type=`` tag naming a known entry type wins over the
        keyword rules.
        """
        tag = _TYPE_TAG.search(text)
        if tag:
            try:
                return EntryType(tag.group(1))
            except ValueError:
                logger.debug("Ignoring unknown type tag %r", tag.group(1))
        return self._classifier.classify(Message(content=text))

    def score_text(self, content: str, source: str = "") -> MemoryFileReport:
        """Score the memory file contents ``content``."""
        entries = parse_entries(content)
        total = len(entries)
        now_ms = int(datetime.now(timezone.utc).timestamp() * 1000)
        items: list[ScoredItem] = []

        for index, entry in enumerate(entries):
            entry_type = self.classify_text(entry.text)
            importance = base_importance(entry_type)
            if entry.tokens > SIZE_PENALTY_TOKENS:
                importance = max(PENALTY_FLOOR, importance - SIZE_PENALTY)

            if entry.explicit_score is not None:
                retention = entry.explicit_score
            else:
                retention = calculate_retention(
                    importance, age_of(index, total), entry_type, self.config
                )

            items.append(
                ScoredItem(
                    t=now_ms,
                    type=entry_type,
                    score=round(retention, 2),
                    hash=content_hash(entry.text),
                    summary=entry.text[:SUMMARY_CHARS].replace("\n", " "),
                    tokens=entry.tokens,
                )
            )

        return MemoryFileReport(
            source=source,
            agent=os.environ.get("AGENT_ID", "unknown"),
            config=ReportThresholds(
                sparse_threshold=self.config.sparse_threshold,
                compress_threshold=self.config.compress_threshold,
            ),
            stats=self._stats(items),
            items=items,
        )

    def score_file(self, path: str | Path) -> MemoryFileReport:
        """Read and score the memory file at ``path``."""
        path = Path(path)
        report = self.score_text(path.read_text(encoding="utf-8"), source=str(path))
        logger.debug("Scored %d entries from %s", report.stats.total, path)
        return report

    def _stats(self, items: list[ScoredItem]) -> ReportStats:
        counts = {tier: 0 for tier in RetentionTier}
        for item in items:
            counts[retention_tier(item.score, self.config)] += 1
        return ReportStats(
            total=len(items),
            sparse=counts[RetentionTier.SPARSE],
            compressed=counts[RetentionTier.COMPRESS],
            kept=counts[RetentionTier.KEEP],
            total_tokens=sum(item.tokens for item in items),
        )


def report_path(source: str | Path) -> Path:
    """``notes.md`` → ``notes.scores.json`` beside the source."""
    source = Path(source)
    if source.suffix == ".md":
        return source.with_suffix(".scores.json")
    return source.with_name(source.name + ".scores.json")


def write_report(report: MemoryFileReport, source: str | Path) -> Path:
    """Write ``report`` next to ``source`` and return the output path."""
    output = report_path(source)
    output.write_text(report.to_json(), encoding="utf-8")
    logger.debug("Wrote memory scores to %s", output)
    return output
