"""Rule-based message classification."""
from __future__ import annotations

from hippocampus.classify.classifier import (
    DEFAULT_RULES,
    ClassificationRule,
    ClassifierConfig,
    EntryClassifier,
    EntryType,
    classify,
)

__all__ = [
    "DEFAULT_RULES",
    "ClassificationRule",
    "ClassifierConfig",
    "EntryClassifier",
    "EntryType",
    "classify",
]
