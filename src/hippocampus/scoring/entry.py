"""Scoring pipeline — classify, score and decay every message in a sequence.

Classes
-------
- ScoredEntry     — one message's derived scores
- MessageScorer   — runs the pipeline over a message list
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from hippocampus.classify.classifier import EntryClassifier, EntryType
from hippocampus.config.settings import HippocampusConfig
from hippocampus.messages.content import Message, coerce_messages, extract_preview
from hippocampus.scoring.decay import RetentionTier, calculate_retention, retention_tier
from hippocampus.scoring.importance import ImportanceScorer, ReferenceIndex, age_of
from hippocampus.scoring.tokens import estimate_message_tokens

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 120


@dataclass(frozen=True)
class ScoredEntry:
    """A message paired with its importance and retention.

    Attributes
    ----------
    index:
        Position of the message in the original sequence.
    entry_type:
        Classified type.
    importance:
        Pre-decay importance in [0.0, 1.0].
    retention:
        Post-decay retention in [0.0, 1.0].
    token_estimate:
        Estimated token count of the message.
    content_preview:
        First 120 characters of the message text.
    role:
        The message role (``"unknown"`` when the message had none).
    age:
        Distance from the newest message.
    """

    index: int
    entry_type: EntryType
    importance: float
    retention: float
    token_estimate: int
    content_preview: str
    role: str
    age: int = 0

    def tier(self, config: HippocampusConfig) -> RetentionTier:
        """Tier this entry falls into under ``config``."""
        return retention_tier(self.retention, config)

    def to_dict(self) -> dict[str, object]:
        """Serialise to a plain dict."""
        return {
            "index": self.index,
            "entry_type": self.entry_type.value,
            "importance": self.importance,
            "retention": self.retention,
            "token_estimate": self.token_estimate,
            "content_preview": self.content_preview,
            "role": self.role,
            "age": self.age,
        }


class MessageScorer:
    """Score every message in a sequence.

    Parameters
    ----------
    config:
        Decay configuration.  Defaults to ``HippocampusConfig()``.
    classifier:
        Entry classifier.  Defaults to the built-in rule set.
    importance_scorer:
        Importance scorer.  Defaults to the standard modifiers.
    """

    def __init__(
        self,
        config: HippocampusConfig | None = None,
        classifier: EntryClassifier | None = None,
        importance_scorer: ImportanceScorer | None = None,
    ) -> None:
        self.config = config if config is not None else HippocampusConfig()
        self.classifier = classifier if classifier is not None else EntryClassifier()
        self.importance_scorer = (
            importance_scorer
            if importance_scorer is not None
            else ImportanceScorer(classifier=self.classifier)
        )

    def score_messages(
        self,
        messages: Sequence[Message | Mapping[str, object]],
    ) -> list[ScoredEntry]:
        """Return one ``ScoredEntry`` per message, in input order."""
        normalized = coerce_messages(messages)
        total = len(normalized)
        references = ReferenceIndex(normalized)
        scored: list[ScoredEntry] = []

        for index, message in enumerate(normalized):
            entry_type = self.classifier.classify(message)
            age = age_of(index, total)
            token_estimate = estimate_message_tokens(message)
            importance = self.importance_scorer.score_entry(
                message,
                index=index,
                entry_type=entry_type,
                age=age,
                token_estimate=token_estimate,
                references=references,
            )
            scored.append(
                ScoredEntry(
                    index=index,
                    entry_type=entry_type,
                    importance=importance,
                    retention=calculate_retention(importance, age, entry_type, self.config),
                    token_estimate=token_estimate,
                    content_preview=extract_preview(message, PREVIEW_CHARS),
                    role=message.role or "unknown",
                    age=age,
                )
            )

        logger.debug("Scored %d messages", total)
        return scored


def score_messages(
    messages: Sequence[Message | Mapping[str, object]],
    config: HippocampusConfig | None = None,
) -> list[ScoredEntry]:
    """Score ``messages`` with the default classifier and modifiers."""
    return MessageScorer(config=config).score_messages(messages)
