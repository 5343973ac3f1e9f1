"""Conversation message model.

Host runtimes hand over messages as loosely shaped mappings: ``content`` is
either plain text or a list of typed blocks, and tool identity may live on
the message itself or inside a block.  This module normalises that shape
into frozen value objects with an explicit tagged union for content blocks,
and provides the one total text-extraction function every other component
relies on.

Classes
-------
- TextBlock        — a text-bearing content block
- ToolUseBlock     — a tool invocation block (carries the tool name)
- ToolResultBlock  — a tool result block (carries the invocation id)
- OpaqueBlock      — any block shape not recognised above
- Message          — one conversational entry
"""
from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Union

UNKNOWN_TOOL = "unknown_tool"

# Roles the host uses for tool output messages.
TOOL_ROLES: frozenset[str] = frozenset({"tool", "toolResult", "tool_result"})


# ---------------------------------------------------------------------------
# Content blocks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextBlock:
    """A plain text block."""

    text: str
    type: str = field(default="text", init=False)


@dataclass(frozen=True)
class ToolUseBlock:
    """An assistant request to invoke a tool.

    Parameters
    ----------
    name:
        Name of the invoked tool.  Empty when the host omitted it.
    id:
        Invocation identifier, if any.
    """

    name: str = ""
    id: str = ""
    type: str = field(default="tool_use", init=False)


@dataclass(frozen=True)
class ToolResultBlock:
    """The result of a tool invocation, keyed by the invocation id."""

    tool_use_id: str = ""
    type: str = field(default="tool_result", init=False)


@dataclass(frozen=True)
class OpaqueBlock:
    """A block whose shape is not recognised.

    ``text`` is populated only when the raw block carried a string ``text``
    key; everything else is kept verbatim in ``data``.
    """

    data: object = None
    text: str = ""
    type: str = field(default="opaque", init=False)


ContentBlock = Union[TextBlock, ToolUseBlock, ToolResultBlock, OpaqueBlock]


def _as_str(value: object) -> str:
    return value if isinstance(value, str) else ""


def parse_block(raw: object) -> ContentBlock:
    """Convert one raw content block into its tagged variant.

    Never raises: strings become ``TextBlock`` and anything unrecognised
    becomes ``OpaqueBlock``.
    """
    if isinstance(raw, (TextBlock, ToolUseBlock, ToolResultBlock, OpaqueBlock)):
        return raw
    if isinstance(raw, str):
        return TextBlock(text=raw)
    if not isinstance(raw, Mapping):
        return OpaqueBlock(data=raw)

    block_type = raw.get("type")
    if block_type == "text" and isinstance(raw.get("text"), str):
        return TextBlock(text=raw["text"])
    if block_type in ("tool_use", "toolCall", "tool_call"):
        return ToolUseBlock(
            name=_as_str(raw.get("name")),
            id=_as_str(raw.get("id") or raw.get("tool_use_id")),
        )
    if block_type == "tool_result":
        return ToolResultBlock(tool_use_id=_as_str(raw.get("tool_use_id")))
    return OpaqueBlock(data=dict(raw), text=_as_str(raw.get("text")))


# ---------------------------------------------------------------------------
# Message
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Message:
    """One entry in the conversation being compacted.

    Parameters
    ----------
    role:
        Free-form role string, e.g. ``"user"``, ``"assistant"``, ``"tool"``.
    content:
        Plain text, a tuple of content blocks, or ``None`` when absent or
        malformed.
    tool_name, name, tool_call_id:
        Direct tool identity fields, consulted before content blocks.
    raw_content:
        The content value exactly as supplied.  Used only for the serialised
        token-estimate fallback.
    """

    role: str = ""
    content: str | tuple[ContentBlock, ...] | None = None
    tool_name: str | None = None
    name: str | None = None
    tool_call_id: str | None = None
    raw_content: object = field(default=None, compare=False, repr=False)

    @classmethod
    def from_raw(cls, raw: Message | Mapping[str, object]) -> Message:
        """Build a ``Message`` from a host-supplied mapping.

        Accepts camelCase (``toolName``, ``toolCallId``) and snake_case
        field names.  Unexpected content shapes degrade to ``None`` content
        rather than raising.
        """
        if isinstance(raw, Message):
            return raw
        if not isinstance(raw, Mapping):
            return cls(raw_content=raw)

        raw_content = raw.get("content")
        content: str | tuple[ContentBlock, ...] | None
        if isinstance(raw_content, str):
            content = raw_content
        elif isinstance(raw_content, Sequence) and not isinstance(
            raw_content, (bytes, bytearray)
        ):
            content = tuple(parse_block(block) for block in raw_content)
        else:
            content = None

        return cls(
            role=_as_str(raw.get("role")),
            content=content,
            tool_name=_as_str(raw.get("toolName") or raw.get("tool_name")) or None,
            name=_as_str(raw.get("name")) or None,
            tool_call_id=_as_str(raw.get("tool_call_id") or raw.get("toolCallId"))
            or None,
            raw_content=raw_content,
        )

    @property
    def blocks(self) -> tuple[ContentBlock, ...]:
        """Content blocks, or an empty tuple for plain-text content."""
        return self.content if isinstance(self.content, tuple) else ()

    def has_tool_use(self) -> bool:
        """Return True when any content block is a tool invocation."""
        return any(isinstance(block, ToolUseBlock) for block in self.blocks)


def coerce_messages(
    messages: Sequence[Message | Mapping[str, object]],
) -> list[Message]:
    """Normalise a mixed list of mappings and ``Message`` objects."""
    return [Message.from_raw(msg) for msg in messages]


# ---------------------------------------------------------------------------
# Extraction helpers
# ---------------------------------------------------------------------------


def extract_text(message: Message) -> str:
    """Return the text of ``message``.

    Plain-text content is returned as-is.  Block content is the space-joined
    text of every block carrying non-empty text; tool blocks and text-less
    blocks contribute nothing.
    """
    content = message.content
    if isinstance(content, str):
        return content
    if not content:
        return ""
    parts: list[str] = []
    for block in content:
        if isinstance(block, (TextBlock, OpaqueBlock)) and block.text:
            parts.append(block.text)
    return " ".join(parts)


def serialize_content(message: Message) -> str:
    """JSON rendering of the raw content, used when no text can be extracted."""
    raw = message.raw_content if message.raw_content is not None else ""
    try:
        return json.dumps(raw, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(raw)


def extract_preview(message: Message, max_len: int = 120) -> str:
    """Return the first ``max_len`` characters of the text, with ``…`` if cut."""
    text = extract_text(message)
    if len(text) <= max_len:
        return text
    return text[:max_len] + "…"


def extract_tool_name(message: Message) -> str:
    """Resolve the tool identity of ``message``.

    Lookup order: ``tool_name``, ``name``, ``tool_call_id``, then the first
    tool-use block name or tool-result block id.  Falls back to
    ``"unknown_tool"``.
    """
    for candidate in (message.tool_name, message.name, message.tool_call_id):
        if candidate:
            return candidate
    for block in message.blocks:
        if isinstance(block, ToolUseBlock) and block.name:
            return block.name
        if isinstance(block, ToolResultBlock) and block.tool_use_id:
            return block.tool_use_id
    return UNKNOWN_TOOL
