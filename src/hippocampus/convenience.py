"""Convenience API for hippocampus — 3-line quickstart.

Example
-------
::

    from hippocampus import compact
    digest = compact(messages)
    print(digest.text)

"""
from __future__ import annotations

from collections.abc import Mapping, Sequence

from hippocampus.config.settings import HippocampusConfig
from hippocampus.digest.assembler import Digest, TierAssembler
from hippocampus.messages.content import Message, coerce_messages
from hippocampus.scoring.decay import RetentionTier
from hippocampus.scoring.entry import MessageScorer, ScoredEntry


def compact(
    messages: Sequence[Message | Mapping[str, object]],
    config: HippocampusConfig | None = None,
    previous_summary: str | None = None,
) -> Digest:
    """Score ``messages`` and render their digest in one call.

    Parameters
    ----------
    messages:
        Conversation messages, oldest first.  Raw mappings are accepted.
    config:
        Decay configuration.  Defaults to ``HippocampusConfig()``.
    previous_summary:
        An earlier digest to splice in as prior context.

    Returns
    -------
    Digest
        The rendered digest and its counters.
    """
    return Hippocampus(config).compact(messages, previous_summary)


class Hippocampus:
    """Zero-config compactor for the 80% use case.

    Holds one immutable configuration and reuses it for every call.

    Parameters
    ----------
    config:
        Decay configuration.  Defaults to ``HippocampusConfig()``.

    Example
    -------
    ::

        from hippocampus import Hippocampus
        memory = Hippocampus()
        digest = memory.compact(messages)
        print(memory.tier_counts(messages))
    """

    def __init__(self, config: HippocampusConfig | None = None) -> None:
        self.config = config if config is not None else HippocampusConfig()
        self._scorer = MessageScorer(config=self.config)
        self._assembler = TierAssembler(config=self.config)

    def score(
        self,
        messages: Sequence[Message | Mapping[str, object]],
    ) -> list[ScoredEntry]:
        """Return the scored entries for ``messages``."""
        return self._scorer.score_messages(messages)

    def compact(
        self,
        messages: Sequence[Message | Mapping[str, object]],
        previous_summary: str | None = None,
    ) -> Digest:
        """Score ``messages`` and assemble their digest."""
        normalized = coerce_messages(messages)
        scored = self._scorer.score_messages(normalized)
        return self._assembler.assemble(scored, normalized, previous_summary)

    def tier_counts(
        self,
        messages: Sequence[Message | Mapping[str, object]],
    ) -> dict[RetentionTier, int]:
        """Count how many messages fall into each tier, before budgeting."""
        counts = {tier: 0 for tier in RetentionTier}
        for entry in self.score(messages):
            counts[entry.tier(self.config)] += 1
        return counts

    def __repr__(self) -> str:
        return (
            f"Hippocampus(sparse_threshold={self.config.sparse_threshold}, "
            f"compress_threshold={self.config.compress_threshold})"
        )
