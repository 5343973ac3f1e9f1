"""Tests for hippocampus.classify.classifier."""
from __future__ import annotations

import pytest

from hippocampus.classify.classifier import (
    DEFAULT_RULES,
    ClassificationRule,
    ClassifierConfig,
    EntryClassifier,
    EntryType,
    classify,
)
from hippocampus.messages.content import Message, TextBlock, ToolUseBlock


def _msg(role: str, content: object = "") -> Message:
    return Message.from_raw({"role": role, "content": content})


# ---------------------------------------------------------------------------
# Rule and config objects
# ---------------------------------------------------------------------------


class TestClassificationRule:
    def test_defaults(self) -> None:
        rule = ClassificationRule(target_type=EntryType.CONTEXT)
        assert rule.roles == frozenset()
        assert rule.content_pattern == ""
        assert rule.max_length is None
        assert rule.priority == 50

    def test_frozen(self) -> None:
        rule = ClassificationRule(target_type=EntryType.CONTEXT)
        with pytest.raises((TypeError, AttributeError)):
            rule.priority = 10  # type: ignore[misc]


class TestClassifierConfig:
    def test_defaults(self) -> None:
        config = ClassifierConfig()
        assert config.rules == ()
        assert config.fallback_type == EntryType.UNKNOWN

    def test_default_rules_sorted_by_priority(self) -> None:
        priorities = [rule.priority for rule in EntryClassifier().rules]
        assert priorities == sorted(priorities)
        assert len(priorities) == len(DEFAULT_RULES)


# ---------------------------------------------------------------------------
# Default rules
# ---------------------------------------------------------------------------


class TestToolRoles:
    @pytest.mark.parametrize("role", ["tool", "toolResult", "tool_result"])
    def test_tool_roles(self, role: str) -> None:
        assert classify(_msg(role, "file contents")) == EntryType.TOOL_RESULT

    def test_tool_role_wins_over_decision_markers(self) -> None:
        assert classify(_msg("tool", "decided plan strategy")) == EntryType.TOOL_RESULT


class TestUserMessages:
    def test_plain_request(self) -> None:
        assert classify(_msg("user", "Build me a parser")) == EntryType.USER_INTENT

    @pytest.mark.parametrize(
        "text", ["heartbeat", "/status check", "HEARTBEAT_OK", "no_reply"]
    )
    def test_ephemeral_markers(self, text: str) -> None:
        assert classify(_msg("user", text)) == EntryType.EPHEMERAL

    def test_empty_user_message(self) -> None:
        assert classify(_msg("user", "")) == EntryType.USER_INTENT


class TestAssistantMessages:
    @pytest.mark.parametrize("text", ["ok", "Okay!", "Got it.", "NO_REPLY", "done"])
    def test_short_acknowledgments(self, text: str) -> None:
        assert classify(_msg("assistant", text)) == EntryType.EPHEMERAL

    def test_short_message_with_decision_marker_is_ephemeral(self) -> None:
        assert classify(_msg("assistant", "Plan noted")) == EntryType.EPHEMERAL

    def test_long_decision(self) -> None:
        text = "I decided to use PostgreSQL for the storage layer because of JSONB."
        assert classify(_msg("assistant", text)) == EntryType.DECISION

    def test_russian_decision(self) -> None:
        text = "Я решил использовать PostgreSQL для хранения всех данных проекта."
        assert classify(_msg("assistant", text)) == EntryType.DECISION

    def test_marker_inside_word_is_not_a_decision(self) -> None:
        text = "Here is an explanation of the module layout in more detail for you."
        assert classify(_msg("assistant", text)) == EntryType.CONTEXT

    def test_long_neutral_text_is_context(self) -> None:
        text = "The function reads the file, parses every line and returns a list."
        assert classify(_msg("assistant", text)) == EntryType.CONTEXT

    def test_tool_use_without_text_is_context(self) -> None:
        msg = Message(role="assistant", content=(ToolUseBlock(name="read_file"),))
        assert classify(msg) == EntryType.CONTEXT

    def test_text_blocks_are_joined_before_matching(self) -> None:
        msg = Message(
            role="assistant",
            content=(
                TextBlock(text="After reviewing the options for the storage layer,"),
                TextBlock(text="my decision is PostgreSQL."),
            ),
        )
        assert classify(msg) == EntryType.DECISION


class TestOtherRoles:
    def test_system_role(self) -> None:
        assert classify(_msg("system", "You are helpful.")) == EntryType.UNKNOWN

    def test_missing_role(self) -> None:
        assert classify(Message.from_raw({"content": "hello"})) == EntryType.UNKNOWN

    def test_missing_everything(self) -> None:
        assert classify(Message()) == EntryType.UNKNOWN


# ---------------------------------------------------------------------------
# Totality and determinism
# ---------------------------------------------------------------------------


class TestClassifierProperties:
    @pytest.mark.parametrize(
        "raw",
        [
            {},
            {"role": "user", "content": None},
            {"role": "assistant", "content": [{"type": "image"}]},
            {"role": "tool", "content": 12},
            {"role": "weird", "content": [1, 2, 3]},
        ],
    )
    def test_total_on_malformed_input(self, raw: dict[str, object]) -> None:
        assert isinstance(classify(Message.from_raw(raw)), EntryType)

    def test_deterministic(self) -> None:
        msg = _msg("assistant", "We will do the migration tomorrow night after the nightly backup.")
        assert {classify(msg) for _ in range(5)} == {EntryType.DECISION}

    def test_classify_many_preserves_order(self) -> None:
        classifier = EntryClassifier()
        result = classifier.classify_many([_msg("user", "hi there"), _msg("tool", "x")])
        assert result == [EntryType.USER_INTENT, EntryType.TOOL_RESULT]


# ---------------------------------------------------------------------------
# Custom rule sets
# ---------------------------------------------------------------------------


class TestCustomRules:
    def test_custom_rule_and_fallback(self) -> None:
        config = ClassifierConfig(
            rules=(
                ClassificationRule(
                    target_type=EntryType.DECISION,
                    content_pattern=r"ship it",
                    priority=1,
                ),
            ),
            fallback_type=EntryType.CONTEXT,
        )
        classifier = EntryClassifier(config)
        assert classifier.classify(_msg("anyone", "Ship it now")) == EntryType.DECISION
        assert classifier.classify(_msg("user", "something else")) == EntryType.CONTEXT

    def test_max_length_only_rule(self) -> None:
        config = ClassifierConfig(
            rules=(ClassificationRule(target_type=EntryType.EPHEMERAL, max_length=5),),
        )
        classifier = EntryClassifier(config)
        assert classifier.classify(_msg("", "tiny")) == EntryType.EPHEMERAL
        assert classifier.classify(_msg("", "not tiny")) == EntryType.UNKNOWN
