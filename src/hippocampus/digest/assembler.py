"""Tier assembly and digest rendering.

Scored entries are partitioned by retention into three tiers:

- ``retention >= compress_threshold``  → active context (content kept)
- ``sparse_threshold <= retention``    → compressed (one annotated line)
- ``retention < sparse_threshold``     → sparse index (pointer line only)

The sparse tier is budgeted: pointer lines are admitted in sequence order
while their running token total stays within ``max_sparse_index_tokens``;
the rest are counted as dropped and reported in the output.

The rendered digest is Markdown with HTML-comment metadata::

    # hippocampus.md Compaction
    <!-- decay_λ={...} sparse_threshold=0.25 compress_threshold=0.65 -->
    <!-- entries: N | sparse: S | compressed: C | kept: K | dropped: D -->

    ## Goal
    ## Prior Context
    ## Active Context (high retention)
    ## Compressed (mid retention — re-fetch if needed)
    ## Sparse Index (decayed — pointers only)
    <!-- hippocampus stats: Btok → Atok (R× compression) -->

Sections with no entries are omitted.

Classes
-------
- DigestStats    — counters and token totals for one digest
- Digest         — rendered text plus stats
- TierAssembler  — builds a Digest from scored entries
"""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from hippocampus.classify.classifier import EntryType
from hippocampus.config.settings import HippocampusConfig
from hippocampus.digest.pointers import build_pointer_line
from hippocampus.messages.content import Message, coerce_messages, extract_preview
from hippocampus.scoring.decay import RetentionTier
from hippocampus.scoring.entry import ScoredEntry
from hippocampus.scoring.tokens import estimate_tokens

logger = logging.getLogger(__name__)

TITLE = "# hippocampus.md Compaction"
GOAL_HEADER = "## Goal"
PRIOR_CONTEXT_HEADER = "## Prior Context"
ACTIVE_HEADER = "## Active Context (high retention)"
COMPRESSED_HEADER = "## Compressed (mid retention — re-fetch if needed)"
SPARSE_HEADER = "## Sparse Index (decayed — pointers only)"

FULL_CONTENT_CHARS = 500
GOAL_CHARS = 150
MIN_GOAL_CHARS = 10


def _format_number(value: float) -> str:
    """Render a float without a trailing ``.0``."""
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DigestStats:
    """Counters for one assembled digest.

    Attributes
    ----------
    total:
        Number of scored entries.
    sparse:
        Pointer lines rendered in the sparse index.
    compressed:
        Entries rendered as compressed lines.
    kept:
        Entries rendered in full.
    dropped:
        Sparse-tier entries left out because the sparse budget was full.
    tokens_before:
        Sum of the entries' token estimates.
    tokens_after:
        Tokens attributed to the three rendered tiers.
    sparse_tokens:
        Tokens used by the rendered sparse index.
    """

    total: int = 0
    sparse: int = 0
    compressed: int = 0
    kept: int = 0
    dropped: int = 0
    tokens_before: int = 0
    tokens_after: int = 0
    sparse_tokens: int = 0

    @property
    def compression_ratio(self) -> float | None:
        """``tokens_before / tokens_after``; ``None`` when nothing was rendered."""
        if self.tokens_after == 0:
            return None
        return self.tokens_before / self.tokens_after

    @property
    def ratio_label(self) -> str:
        """The ratio to one decimal place, or ``∞``."""
        ratio = self.compression_ratio
        return "∞" if ratio is None else f"{ratio:.1f}"

    def to_dict(self) -> dict[str, object]:
        """Serialise to a plain dict."""
        return {
            "total": self.total,
            "sparse": self.sparse,
            "compressed": self.compressed,
            "kept": self.kept,
            "dropped": self.dropped,
            "tokens_before": self.tokens_before,
            "tokens_after": self.tokens_after,
            "sparse_tokens": self.sparse_tokens,
            "compression_ratio": self.compression_ratio,
        }


@dataclass(frozen=True)
class Digest:
    """A rendered digest and its counters."""

    text: str
    stats: DigestStats


@dataclass
class _Tiers:
    kept: list[str] = field(default_factory=list)
    compressed: list[str] = field(default_factory=list)
    sparse: list[str] = field(default_factory=list)
    kept_tokens: int = 0
    compressed_tokens: int = 0
    sparse_tokens: int = 0
    dropped: int = 0


# ---------------------------------------------------------------------------
# TierAssembler
# ---------------------------------------------------------------------------


class TierAssembler:
    """Partition scored entries into tiers and render the digest.

    Parameters
    ----------
    config:
        Thresholds, decay table and sparse budget.  Defaults to
        ``HippocampusConfig()``.
    """

    def __init__(self, config: HippocampusConfig | None = None) -> None:
        self.config = config if config is not None else HippocampusConfig()

    def tier_of(self, entry: ScoredEntry) -> RetentionTier:
        """Tier ``entry`` belongs to under this assembler's thresholds."""
        return entry.tier(self.config)

    def assemble(
        self,
        scored: Sequence[ScoredEntry],
        messages: Sequence[Message | Mapping[str, object]],
        previous_summary: str | None = None,
    ) -> Digest:
        """Build the digest for ``scored``.

        Parameters
        ----------
        scored:
            Scored entries in sequence order.
        messages:
            The original messages; ``scored[i].index`` indexes into this list.
        previous_summary:
            A previously rendered summary to splice in verbatim.

        Returns
        -------
        Digest
            Rendered text and counters.
        """
        normalized = coerce_messages(messages)
        tiers = self._partition(scored, normalized)
        goals = self._extract_goals(scored)

        tokens_before = sum(entry.token_estimate for entry in scored)
        stats = DigestStats(
            total=len(scored),
            sparse=len(tiers.sparse),
            compressed=len(tiers.compressed),
            kept=len(tiers.kept),
            dropped=tiers.dropped,
            tokens_before=tokens_before,
            tokens_after=tiers.sparse_tokens + tiers.compressed_tokens + tiers.kept_tokens,
            sparse_tokens=tiers.sparse_tokens,
        )
        text = self._render(tiers, goals, stats, previous_summary)

        logger.debug(
            "Assembled digest: %d entries -> %d kept, %d compressed, %d sparse, %d dropped",
            stats.total,
            stats.kept,
            stats.compressed,
            stats.sparse,
            stats.dropped,
        )
        return Digest(text=text, stats=stats)

    # ------------------------------------------------------------------
    # Partitioning
    # ------------------------------------------------------------------

    def _partition(
        self,
        scored: Sequence[ScoredEntry],
        messages: list[Message],
    ) -> _Tiers:
        tiers = _Tiers()
        budget = self.config.max_sparse_index_tokens

        for entry in scored:
            message = messages[entry.index]
            line = build_pointer_line(entry, message)
            tier = self.tier_of(entry)

            if tier is RetentionTier.SPARSE:
                line_tokens = estimate_tokens(line)
                if tiers.sparse_tokens + line_tokens <= budget:
                    tiers.sparse.append(line)
                    tiers.sparse_tokens += line_tokens
                else:
                    tiers.dropped += 1
            elif tier is RetentionTier.COMPRESS:
                tiers.compressed.append(f"• (r={entry.retention:.2f}) {line}")
                tiers.compressed_tokens += estimate_tokens(line)
            else:
                content = extract_preview(message, FULL_CONTENT_CHARS)
                tiers.kept.append(
                    f"### [{entry.entry_type.value}] (r={entry.retention:.2f})\n{content}"
                )
                tiers.kept_tokens += entry.token_estimate

        return tiers

    def _extract_goals(self, scored: Sequence[ScoredEntry]) -> list[str]:
        goals: list[str] = []
        for entry in scored:
            if entry.entry_type is not EntryType.USER_INTENT:
                continue
            if entry.retention < self.config.sparse_threshold:
                continue
            goal = entry.content_preview[:GOAL_CHARS].replace("\n", " ")
            if len(goal) > MIN_GOAL_CHARS:
                goals.append(f"- {goal}")
        return goals

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(
        self,
        tiers: _Tiers,
        goals: list[str],
        stats: DigestStats,
        previous_summary: str | None,
    ) -> str:
        cfg = self.config
        decay_table = json.dumps(dict(cfg.decay_rates), separators=(",", ":"), ensure_ascii=False)

        parts: list[str] = [
            TITLE,
            f"<!-- decay_λ={decay_table} "
            f"sparse_threshold={_format_number(cfg.sparse_threshold)} "
            f"compress_threshold={_format_number(cfg.compress_threshold)} -->",
            f"<!-- entries: {stats.total} | sparse: {stats.sparse} | "
            f"compressed: {stats.compressed} | kept: {stats.kept} | "
            f"dropped: {stats.dropped} -->",
            "",
        ]

        if goals:
            parts.extend([GOAL_HEADER, "\n".join(goals), ""])

        if previous_summary:
            parts.extend([PRIOR_CONTEXT_HEADER, previous_summary, ""])

        if tiers.kept:
            parts.extend([ACTIVE_HEADER, "\n\n".join(tiers.kept), ""])

        if tiers.compressed:
            parts.extend([COMPRESSED_HEADER, "\n".join(tiers.compressed), ""])

        dropped_note = (
            f"<!-- {stats.dropped} additional entries dropped (sparse index full) -->"
        )
        if tiers.sparse:
            parts.extend([SPARSE_HEADER, "\n".join(tiers.sparse)])
            if stats.dropped:
                parts.append(f"\n{dropped_note}")
            parts.append("")
        elif stats.dropped:
            parts.extend([dropped_note, ""])

        parts.append(
            f"<!-- hippocampus stats: {stats.tokens_before}tok → "
            f"{stats.tokens_after}tok ({stats.ratio_label}× compression) -->"
        )
        return "\n".join(parts)


def assemble_digest(
    scored: Sequence[ScoredEntry],
    messages: Sequence[Message | Mapping[str, object]],
    config: HippocampusConfig | None = None,
    previous_summary: str | None = None,
) -> Digest:
    """Assemble a digest with a one-off ``TierAssembler``."""
    return TierAssembler(config).assemble(scored, messages, previous_summary)
