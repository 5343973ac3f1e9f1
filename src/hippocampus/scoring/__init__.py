"""Importance scoring, retention decay and the scoring pipeline."""
from __future__ import annotations

from hippocampus.scoring.decay import (
    RetentionTier,
    calculate_retention,
    decay_factor,
    half_life,
    retention_tier,
)
from hippocampus.scoring.entry import MessageScorer, ScoredEntry, score_messages
from hippocampus.scoring.importance import (
    BASE_IMPORTANCE,
    ImportanceScorer,
    ImportanceScorerConfig,
    ReferenceIndex,
    age_of,
    base_importance,
)
from hippocampus.scoring.tokens import estimate_message_tokens, estimate_tokens

__all__ = [
    "BASE_IMPORTANCE",
    "ImportanceScorer",
    "ImportanceScorerConfig",
    "MessageScorer",
    "ReferenceIndex",
    "RetentionTier",
    "ScoredEntry",
    "age_of",
    "base_importance",
    "calculate_retention",
    "decay_factor",
    "estimate_message_tokens",
    "estimate_tokens",
    "half_life",
    "retention_tier",
    "score_messages",
]
