"""Compaction hook for agent runtimes.

Adapts the scoring pipeline to a host's "before compact" event.  The host
passes a preparation mapping describing the messages about to be
summarised; the hook returns a ``CompactionResult`` to replace the host's
default compaction, or ``None`` to let the host fall back to it.

The hook falls back when there is nothing to compact, when the digest comes
out blank, or when the pipeline raises.  Failures are logged and not
propagated.

Classes
-------
- CompactionResult  — the digest handed back to the host
- CompactionHook    — the event handler
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from hippocampus.config.settings import HippocampusConfig
from hippocampus.digest.assembler import DigestStats, TierAssembler
from hippocampus.messages.content import coerce_messages
from hippocampus.scoring.entry import MessageScorer

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


def _field(preparation: Mapping[str, object], camel: str, snake: str) -> object:
    value = preparation.get(camel)
    return value if value is not None else preparation.get(snake)


@dataclass(frozen=True)
class CompactionResult:
    """The compaction handed back to the host.

    Attributes
    ----------
    summary:
        The rendered digest.
    first_kept_entry_id:
        Passed through from the preparation unchanged.
    tokens_before:
        Passed through from the preparation unchanged.
    stats:
        Counters of the digest.
    """

    summary: str
    first_kept_entry_id: str | None
    tokens_before: int
    stats: DigestStats

    def to_host_payload(self) -> dict[str, object]:
        """The camelCase payload shape hosts expect."""
        return {
            "compaction": {
                "summary": self.summary,
                "firstKeptEntryId": self.first_kept_entry_id,
                "tokensBefore": self.tokens_before,
            }
        }


class CompactionHook:
    """Replace a host's default compaction with a retention digest.

    Parameters
    ----------
    config:
        Decay configuration.  Defaults to ``HippocampusConfig()``.
    notify:
        Optional ``notify(message, level)`` callable used to surface a
        one-line report to the user.  ``level`` is ``"info"`` or
        ``"warning"``.
    """

    def __init__(
        self,
        config: HippocampusConfig | None = None,
        notify: Notifier | None = None,
    ) -> None:
        self.config = config if config is not None else HippocampusConfig()
        self._notify = notify
        self._scorer = MessageScorer(config=self.config)
        self._assembler = TierAssembler(config=self.config)

    def handle(self, preparation: Mapping[str, object]) -> CompactionResult | None:
        """Compact the messages described by ``preparation``.

        Parameters
        ----------
        preparation:
            Mapping with ``messagesToSummarize``, ``turnPrefixMessages``,
            ``tokensBefore``, ``firstKeptEntryId`` and ``previousSummary``
            (snake_case spellings are accepted too).

        Returns
        -------
        CompactionResult | None
            The digest, or ``None`` when the host should fall back.
        """
        to_summarize = _field(preparation, "messagesToSummarize", "messages_to_summarize")
        turn_prefix = _field(preparation, "turnPrefixMessages", "turn_prefix_messages")
        first_kept = _field(preparation, "firstKeptEntryId", "first_kept_entry_id")
        previous = _field(preparation, "previousSummary", "previous_summary")

        try:
            raw_messages = [*(to_summarize or []), *(turn_prefix or [])]
            tokens_before = int(_field(preparation, "tokensBefore", "tokens_before") or 0)
            logger.info(
                "Compaction triggered: %d messages, %d tokens",
                len(raw_messages),
                tokens_before,
            )
            if not raw_messages:
                logger.warning("No messages to compact, falling back to default compaction")
                return None

            messages = coerce_messages(raw_messages)
            scored = self._scorer.score_messages(messages)
            digest = self._assembler.assemble(
                scored,
                messages,
                previous if isinstance(previous, str) else None,
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("Compaction failed, falling back to default compaction")
            self._send(f"hippocampus error: {exc}, falling back to default", "warning")
            return None

        if not digest.text.strip():
            logger.warning("Empty digest, falling back to default compaction")
            return None

        stats = digest.stats
        self._send(
            f"hippocampus compaction: {stats.total} entries → {stats.sparse} sparse + "
            f"{stats.compressed} compressed + {stats.kept} kept "
            f"({stats.ratio_label}× compression)",
            "info",
        )
        return CompactionResult(
            summary=digest.text,
            first_kept_entry_id=str(first_kept) if first_kept is not None else None,
            tokens_before=tokens_before,
            stats=stats,
        )

    def _send(self, message: str, level: str) -> None:
        if self._notify is not None:
            self._notify(message, level)
