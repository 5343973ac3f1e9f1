"""Conversation message model and text extraction."""
from __future__ import annotations

from hippocampus.messages.content import (
    TOOL_ROLES,
    UNKNOWN_TOOL,
    ContentBlock,
    Message,
    OpaqueBlock,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    coerce_messages,
    extract_preview,
    extract_text,
    extract_tool_name,
    parse_block,
    serialize_content,
)

__all__ = [
    "TOOL_ROLES",
    "UNKNOWN_TOOL",
    "ContentBlock",
    "Message",
    "OpaqueBlock",
    "TextBlock",
    "ToolResultBlock",
    "ToolUseBlock",
    "coerce_messages",
    "extract_preview",
    "extract_text",
    "extract_tool_name",
    "parse_block",
    "serialize_content",
]
