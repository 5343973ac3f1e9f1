"""Tests for hippocampus.messages.content."""
from __future__ import annotations

import pytest

from hippocampus.messages.content import (
    UNKNOWN_TOOL,
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


# ---------------------------------------------------------------------------
# parse_block
# ---------------------------------------------------------------------------


class TestParseBlock:
    def test_text_block(self) -> None:
        block = parse_block({"type": "text", "text": "hello"})
        assert block == TextBlock(text="hello")
        assert block.type == "text"

    def test_bare_string_becomes_text_block(self) -> None:
        assert parse_block("hi") == TextBlock(text="hi")

    def test_tool_use_block(self) -> None:
        block = parse_block({"type": "tool_use", "name": "read_file", "id": "t1"})
        assert isinstance(block, ToolUseBlock)
        assert block.name == "read_file"
        assert block.id == "t1"

    def test_tool_call_alias(self) -> None:
        block = parse_block({"type": "toolCall", "name": "exec"})
        assert isinstance(block, ToolUseBlock)
        assert block.name == "exec"

    def test_tool_result_block(self) -> None:
        block = parse_block({"type": "tool_result", "tool_use_id": "t1"})
        assert block == ToolResultBlock(tool_use_id="t1")

    def test_unknown_shape_is_opaque(self) -> None:
        block = parse_block({"type": "image", "source": "x"})
        assert isinstance(block, OpaqueBlock)
        assert block.text == ""

    def test_opaque_keeps_string_text(self) -> None:
        block = parse_block({"type": "thinking", "text": "pondering"})
        assert isinstance(block, OpaqueBlock)
        assert block.text == "pondering"

    def test_non_mapping_is_opaque(self) -> None:
        block = parse_block(42)
        assert isinstance(block, OpaqueBlock)
        assert block.data == 42

    def test_text_block_with_non_string_text_is_opaque(self) -> None:
        assert isinstance(parse_block({"type": "text", "text": 5}), OpaqueBlock)


# ---------------------------------------------------------------------------
# Message.from_raw
# ---------------------------------------------------------------------------


class TestMessageFromRaw:
    def test_plain_text(self) -> None:
        msg = Message.from_raw({"role": "user", "content": "hello"})
        assert msg.role == "user"
        assert msg.content == "hello"

    def test_block_list_becomes_tuple(self) -> None:
        msg = Message.from_raw(
            {"role": "assistant", "content": [{"type": "text", "text": "a"}]}
        )
        assert msg.content == (TextBlock(text="a"),)
        assert msg.blocks == (TextBlock(text="a"),)

    def test_missing_role_defaults_to_empty(self) -> None:
        assert Message.from_raw({"content": "x"}).role == ""

    def test_malformed_content_becomes_none(self) -> None:
        msg = Message.from_raw({"role": "user", "content": {"odd": True}})
        assert msg.content is None
        assert msg.raw_content == {"odd": True}

    def test_camel_case_tool_fields(self) -> None:
        msg = Message.from_raw({"role": "tool", "toolName": "grep", "toolCallId": "c9"})
        assert msg.tool_name == "grep"
        assert msg.tool_call_id == "c9"

    def test_snake_case_tool_fields(self) -> None:
        msg = Message.from_raw({"role": "tool", "tool_name": "grep", "tool_call_id": "c9"})
        assert msg.tool_name == "grep"
        assert msg.tool_call_id == "c9"

    def test_message_passes_through(self) -> None:
        msg = Message(role="user", content="x")
        assert Message.from_raw(msg) is msg

    def test_frozen(self) -> None:
        msg = Message(role="user", content="x")
        with pytest.raises((TypeError, AttributeError)):
            msg.role = "assistant"  # type: ignore[misc]

    def test_has_tool_use(self) -> None:
        msg = Message(role="assistant", content=(ToolUseBlock(name="ls"),))
        assert msg.has_tool_use() is True
        assert Message(role="assistant", content="text").has_tool_use() is False

    def test_coerce_messages_mixed(self) -> None:
        result = coerce_messages([{"role": "user", "content": "a"}, Message(role="assistant")])
        assert [m.role for m in result] == ["user", "assistant"]


# ---------------------------------------------------------------------------
# Extraction helpers
# ---------------------------------------------------------------------------


class TestExtractText:
    def test_plain_text(self) -> None:
        assert extract_text(Message(content="hello")) == "hello"

    def test_blocks_joined_with_space(self) -> None:
        msg = Message(content=(TextBlock(text="a"), TextBlock(text="b")))
        assert extract_text(msg) == "a b"

    def test_tool_blocks_contribute_nothing(self) -> None:
        msg = Message(content=(ToolUseBlock(name="ls"), TextBlock(text="done")))
        assert extract_text(msg) == "done"

    def test_absent_content(self) -> None:
        assert extract_text(Message(role="user")) == ""

    def test_empty_block_list(self) -> None:
        assert extract_text(Message(content=())) == ""

    def test_text_less_blocks_ignored(self) -> None:
        msg = Message.from_raw(
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "First part"},
                    {"type": "text", "text": "Second part"},
                    {"type": "other"},
                ],
            }
        )
        assert extract_text(msg) == "First part Second part"

    def test_only_non_text_blocks(self) -> None:
        msg = Message.from_raw({"role": "user", "content": [{"type": "image"}, {"type": "image"}]})
        assert extract_text(msg) == ""

    def test_opaque_block_text_kept(self) -> None:
        msg = Message(content=(OpaqueBlock(data={}, text="caption"), TextBlock(text="body")))
        assert extract_text(msg) == "caption body"


class TestSerializeContent:
    def test_absent_content_serialises_empty_string(self) -> None:
        assert serialize_content(Message()) == '""'

    def test_raw_mapping(self) -> None:
        msg = Message.from_raw({"role": "user", "content": {"k": 1}})
        assert serialize_content(msg) == '{"k": 1}'


class TestExtractPreview:
    def test_short_text_unchanged(self) -> None:
        assert extract_preview(Message(content="short"), 120) == "short"

    def test_long_text_truncated_with_ellipsis(self) -> None:
        preview = extract_preview(Message(content="x" * 200), 120)
        assert preview == "x" * 120 + "…"

    def test_exact_length_not_truncated(self) -> None:
        assert extract_preview(Message(content="y" * 50), 50) == "y" * 50


class TestExtractToolName:
    def test_tool_name_first(self) -> None:
        msg = Message(role="tool", tool_name="a", name="b", tool_call_id="c")
        assert extract_tool_name(msg) == "a"

    def test_name_before_call_id(self) -> None:
        assert extract_tool_name(Message(role="tool", name="b", tool_call_id="c")) == "b"

    def test_call_id(self) -> None:
        assert extract_tool_name(Message(role="tool", tool_call_id="c")) == "c"

    def test_tool_use_block_name(self) -> None:
        msg = Message(role="tool", content=(ToolUseBlock(name="web_fetch"),))
        assert extract_tool_name(msg) == "web_fetch"

    def test_tool_result_block_id(self) -> None:
        msg = Message(role="tool", content=(ToolResultBlock(tool_use_id="tu_1"),))
        assert extract_tool_name(msg) == "tu_1"

    def test_fallback(self) -> None:
        assert extract_tool_name(Message(role="tool", content="output")) == UNKNOWN_TOOL
