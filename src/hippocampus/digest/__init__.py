"""Tier assembly and digest rendering."""
from __future__ import annotations

from hippocampus.digest.assembler import (
    ACTIVE_HEADER,
    COMPRESSED_HEADER,
    GOAL_HEADER,
    PRIOR_CONTEXT_HEADER,
    SPARSE_HEADER,
    TITLE,
    Digest,
    DigestStats,
    TierAssembler,
    assemble_digest,
)
from hippocampus.digest.pointers import build_pointer_line

__all__ = [
    "ACTIVE_HEADER",
    "COMPRESSED_HEADER",
    "GOAL_HEADER",
    "PRIOR_CONTEXT_HEADER",
    "SPARSE_HEADER",
    "TITLE",
    "Digest",
    "DigestStats",
    "TierAssembler",
    "assemble_digest",
    "build_pointer_line",
]
