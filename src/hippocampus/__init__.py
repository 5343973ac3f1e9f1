"""hippocampus — Retention-based context compaction for agent conversations.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import hippocampus
>>> hippocampus.__version__
'0.1.0'
"""
from __future__ import annotations

# Message model
from hippocampus.messages.content import (
    Message,
    OpaqueBlock,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    extract_text,
)

# Classification
from hippocampus.classify.classifier import EntryClassifier, EntryType, classify

# Configuration
from hippocampus.config.settings import ConfigError, HippocampusConfig
from hippocampus.config.loader import load_config, load_config_file

# Scoring
from hippocampus.scoring.decay import RetentionTier, calculate_retention, retention_tier
from hippocampus.scoring.importance import ImportanceScorer
from hippocampus.scoring.entry import MessageScorer, ScoredEntry, score_messages

# Digest
from hippocampus.digest.assembler import Digest, DigestStats, TierAssembler

# Host integration
from hippocampus.middleware.compaction import CompactionHook, CompactionResult

# Memory files
from hippocampus.memory_file.scorer import MemoryFileReport, MemoryFileScorer

# Convenience
from hippocampus.convenience import Hippocampus, compact

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Messages
    "Message",
    "OpaqueBlock",
    "TextBlock",
    "ToolResultBlock",
    "ToolUseBlock",
    "extract_text",
    # Classification
    "EntryClassifier",
    "EntryType",
    "classify",
    # Configuration
    "ConfigError",
    "HippocampusConfig",
    "load_config",
    "load_config_file",
    # Scoring
    "ImportanceScorer",
    "MessageScorer",
    "RetentionTier",
    "ScoredEntry",
    "calculate_retention",
    "retention_tier",
    "score_messages",
    # Digest
    "Digest",
    "DigestStats",
    "TierAssembler",
    # Host integration
    "CompactionHook",
    "CompactionResult",
    # Memory files
    "MemoryFileReport",
    "MemoryFileScorer",
    # Convenience
    "Hippocampus",
    "compact",
]
