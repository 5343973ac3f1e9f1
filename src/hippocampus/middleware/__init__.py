"""Host runtime integration."""
from __future__ import annotations

from hippocampus.middleware.compaction import CompactionHook, CompactionResult

__all__ = ["CompactionHook", "CompactionResult"]
