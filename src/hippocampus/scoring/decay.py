"""Retention decay.

Converts an entry's importance into a retention score that falls off
exponentially with age::

    retention = max(floor(type), importance * exp(-λ(type) * age))

``age`` counts entries from the end of the sequence (0 = newest).  λ and
the floor are looked up per entry type in the configuration.  A floor acts
as an anchor: an entry of a floored type never drops below it, even when
its importance is zero.

Classes
-------
- RetentionTier — the three retention tiers
"""
from __future__ import annotations

import math
from enum import Enum

from hippocampus.classify.classifier import EntryType
from hippocampus.config.settings import HippocampusConfig


class RetentionTier(str, Enum):
    """What happens to an entry given its retention score."""

    KEEP = "keep"
    COMPRESS = "compress"
    SPARSE = "sparse"


def decay_factor(rate: float, age: float) -> float:
    """``exp(-rate * age)`` with negative ages treated as 0."""
    return math.exp(-rate * max(0.0, age))


def calculate_retention(
    importance: float,
    age: float,
    entry_type: EntryType | str,
    config: HippocampusConfig,
) -> float:
    """Return the retention score of an entry.

    Parameters
    ----------
    importance:
        Pre-decay importance in [0.0, 1.0].
    age:
        Distance from the newest entry (0 = newest).
    entry_type:
        Entry type used to look up λ and the floor.
    config:
        Active configuration.

    Returns
    -------
    float
        Retention in [0.0, 1.0].
    """
    raw = importance * decay_factor(config.decay_rate(entry_type), age)
    return max(config.floor(entry_type), raw)


def retention_tier(retention: float, config: HippocampusConfig) -> RetentionTier:
    """Map a retention score to its tier using the two thresholds."""
    if retention < config.sparse_threshold:
        return RetentionTier.SPARSE
    if retention < config.compress_threshold:
        return RetentionTier.COMPRESS
    return RetentionTier.KEEP


def half_life(rate: float) -> float:
    """Age at which an unfloored entry retains half its importance."""
    return math.log(2) / rate
