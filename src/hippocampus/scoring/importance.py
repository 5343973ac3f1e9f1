"""Importance scorer — assigns pre-decay importance to conversation entries.

Each entry starts from a prior keyed by its type:

    decision    : 0.90  (choices and plans the agent committed to)
    user_intent : 0.80  (what the user asked for)
    context     : 0.50  (general assistant narration)
    unknown     : 0.40
    tool_result : 0.30  (raw tool output, usually re-fetchable)
    ephemeral   : 0.10  (heartbeats, acknowledgments)

Three modifiers are then applied in order:

1. Recency bonus — entries younger than five turns gain +0.15.
2. Size penalty — entries above 10k estimated tokens lose 0.15, and a
   further 0.10 above 30k, never dropping below 0.1.
3. Reference bonus — when the opening of an entry reappears verbatim in any
   later entry, it gains +0.20.

Importance is clamped to [0.0, 1.0] after every step.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from hippocampus.classify.classifier import EntryClassifier, EntryType
from hippocampus.messages.content import Message, extract_preview, extract_text
from hippocampus.scoring.tokens import estimate_message_tokens

BASE_IMPORTANCE: dict[EntryType, float] = {
    EntryType.DECISION: 0.90,
    EntryType.USER_INTENT: 0.80,
    EntryType.CONTEXT: 0.50,
    EntryType.TOOL_RESULT: 0.30,
    EntryType.EPHEMERAL: 0.10,
    EntryType.UNKNOWN: 0.40,
}


def _clamp(value: float, low: float = 0.0) -> float:
    return max(low, min(1.0, value))


def base_importance(entry_type: EntryType) -> float:
    """Return the prior importance for ``entry_type``."""
    return BASE_IMPORTANCE.get(entry_type, BASE_IMPORTANCE[EntryType.UNKNOWN])


def age_of(index: int, total: int) -> int:
    """Distance from the newest entry: 0 for the last, ``total - 1`` for the first."""
    return total - 1 - index


# ---------------------------------------------------------------------------
# Reference index
# ---------------------------------------------------------------------------


class ReferenceIndex:
    """Answers "does this text reappear in a later message?".

    The text of every message is extracted once when the index is built, so
    a full scoring pass extracts each message a single time.  Lookups are a
    linear scan over the later texts, which keeps the whole pass quadratic
    in the number of messages.
    """

    def __init__(self, messages: Sequence[Message]) -> None:
        self._texts: list[str] = [extract_text(message) for message in messages]

    def __len__(self) -> int:
        return len(self._texts)

    def referenced_after(self, index: int, fragment: str) -> bool:
        """Return True if ``fragment`` occurs in any message after ``index``."""
        if not fragment:
            return False
        return any(fragment in text for text in self._texts[index + 1 :])


# ---------------------------------------------------------------------------
# ImportanceScorer
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImportanceScorerConfig:
    """Modifier settings for ImportanceScorer.

    Attributes
    ----------
    recency_window:
        Entries with ``age`` below this receive the recency bonus.
    recency_bonus:
        Additive bonus for recent entries.
    size_penalty_tokens, size_penalty:
        First size threshold and the amount subtracted above it.
    large_penalty_tokens, large_penalty:
        Second size threshold and the further amount subtracted above it.
    penalty_floor:
        Size penalties never push importance below this value.
    reference_bonus:
        Additive bonus when the entry is quoted later in the conversation.
    reference_preview_chars, reference_prefix_chars:
        The reference probe is the first ``reference_prefix_chars`` of a
        ``reference_preview_chars`` preview.
    """

    recency_window: int = 5
    recency_bonus: float = 0.15
    size_penalty_tokens: int = 10_000
    size_penalty: float = 0.15
    large_penalty_tokens: int = 30_000
    large_penalty: float = 0.10
    penalty_floor: float = 0.1
    reference_bonus: float = 0.20
    reference_preview_chars: int = 50
    reference_prefix_chars: int = 30


class ImportanceScorer:
    """Compute pre-decay importance for conversation entries.

    Parameters
    ----------
    config:
        Modifier settings.  Defaults to the standard values.
    classifier:
        Classifier used by ``score`` when the type is not supplied.
    """

    def __init__(
        self,
        config: ImportanceScorerConfig | None = None,
        classifier: EntryClassifier | None = None,
    ) -> None:
        self._config = config if config is not None else ImportanceScorerConfig()
        self._classifier = classifier if classifier is not None else EntryClassifier()

    @property
    def config(self) -> ImportanceScorerConfig:
        return self._config

    def score(
        self,
        message: Message,
        index: int,
        messages: Sequence[Message],
    ) -> float:
        """Return the importance of ``messages[index]``.

        Convenience entry point for scoring a single message; it builds a
        fresh ``ReferenceIndex``.  Use ``score_entry`` with a shared index
        when scoring a whole sequence.
        """
        return self.score_entry(
            message,
            index=index,
            entry_type=self._classifier.classify(message),
            age=age_of(index, len(messages)),
            token_estimate=estimate_message_tokens(message),
            references=ReferenceIndex(messages),
        )

    def score_entry(
        self,
        message: Message,
        *,
        index: int,
        entry_type: EntryType,
        age: int,
        token_estimate: int,
        references: ReferenceIndex,
    ) -> float:
        """Apply the prior and all modifiers for one entry.

        Parameters
        ----------
        message:
            The message being scored.
        index:
            Its position in the sequence.
        entry_type:
            Its classified type.
        age:
            Distance from the newest entry.
        token_estimate:
            Its estimated token count.
        references:
            Reference index built over the whole sequence.

        Returns
        -------
        float
            Importance in [0.0, 1.0].
        """
        cfg = self._config
        importance = base_importance(entry_type)

        if age < cfg.recency_window:
            importance = _clamp(importance + cfg.recency_bonus)

        if token_estimate > cfg.size_penalty_tokens:
            importance = _clamp(importance - cfg.size_penalty, cfg.penalty_floor)
        if token_estimate > cfg.large_penalty_tokens:
            importance = _clamp(importance - cfg.large_penalty, cfg.penalty_floor)

        probe = extract_preview(message, cfg.reference_preview_chars)
        probe = probe[: cfg.reference_prefix_chars]
        if references.referenced_after(index, probe):
            importance = _clamp(importance + cfg.reference_bonus)

        return importance
