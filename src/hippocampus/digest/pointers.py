"""Pointer lines for the sparse index.

A pointer line is a one-line, type-specific stand-in for an entry whose
content is not kept::

    [TOOL:read_file] 1500tok → "first 80 chars of output"
    [USER] "first 100 chars of the request"
    [DECISION] "first 100 chars of the decision"
    [EPHEMERAL] first 40 chars
    [ASSISTANT] first 80 chars
"""
from __future__ import annotations

from hippocampus.classify.classifier import EntryType
from hippocampus.messages.content import Message, extract_tool_name
from hippocampus.scoring.entry import ScoredEntry

TOOL_PREVIEW_CHARS = 80
QUOTED_PREVIEW_CHARS = 100
EPHEMERAL_PREVIEW_CHARS = 40
DEFAULT_PREVIEW_CHARS = 80


def build_pointer_line(entry: ScoredEntry, message: Message) -> str:
    """Render the pointer line for ``entry``.

    ``message`` is the original message, consulted for the tool name.
    """
    preview = entry.content_preview
    entry_type = entry.entry_type

    if entry_type is EntryType.TOOL_RESULT:
        tool_name = extract_tool_name(message)
        return (
            f"[TOOL:{tool_name}] {entry.token_estimate}tok → "
            f'"{preview[:TOOL_PREVIEW_CHARS]}"'
        )
    if entry_type is EntryType.USER_INTENT:
        return f'[USER] "{preview[:QUOTED_PREVIEW_CHARS]}"'
    if entry_type is EntryType.DECISION:
        return f'[DECISION] "{preview[:QUOTED_PREVIEW_CHARS]}"'
    if entry_type is EntryType.EPHEMERAL:
        return f"[EPHEMERAL] {preview[:EPHEMERAL_PREVIEW_CHARS]}"
    return f"[{entry.role.upper()}] {preview[:DEFAULT_PREVIEW_CHARS]}"
