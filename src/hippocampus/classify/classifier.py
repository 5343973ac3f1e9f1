"""Entry classifier — map a conversation message to an EntryType.

Classification is rule-based.  Each rule names the roles it applies to and,
optionally, a content pattern and a maximum text length.  Rules are
evaluated in priority order and the first matching rule wins; messages that
match no rule fall back to ``EntryType.UNKNOWN``.

The default rule set:

1. Tool roles (``tool``, ``toolResult``)            → tool_result
2. User heartbeat / status / no-reply markers       → ephemeral
3. Any other user message                           → user_intent
4. Short assistant acknowledgments (< 50 chars)     → ephemeral
5. Assistant decision / plan markers                → decision
6. Any other assistant message                      → context

Decision markers include non-English equivalents so classification does not
depend on the conversation language.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from hippocampus.messages.content import TOOL_ROLES, Message, extract_text


class EntryType(str, Enum):
    """Semantic category of a conversation entry."""

    TOOL_RESULT = "tool_result"
    DECISION = "decision"
    USER_INTENT = "user_intent"
    EPHEMERAL = "ephemeral"
    CONTEXT = "context"
    UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# Classification rule
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClassificationRule:
    """A single classification rule.

    All defined conditions must hold for the rule to match.

    Attributes
    ----------
    target_type:
        The EntryType to assign when this rule matches.
    roles:
        Message roles this rule applies to.  Empty means any role.
    content_pattern:
        When set, the extracted text must match this regex
        (case-insensitive search).
    max_length:
        When set, the extracted text must be shorter than this many
        characters.
    priority:
        Lower values are evaluated first.
    """

    target_type: EntryType
    roles: frozenset[str] = frozenset()
    content_pattern: str = ""
    max_length: int | None = None
    priority: int = 50


@dataclass(frozen=True)
class ClassifierConfig:
    """Configuration for EntryClassifier.

    Attributes
    ----------
    rules:
        Classification rules.  When empty, the built-in rule set is used.
    fallback_type:
        Type assigned when no rule matches.
    """

    rules: tuple[ClassificationRule, ...] = field(default_factory=tuple)
    fallback_type: EntryType = EntryType.UNKNOWN


# ---------------------------------------------------------------------------
# Default built-in rules
# ---------------------------------------------------------------------------

SHORT_MESSAGE_CHARS = 50

DECISION_PATTERN = (
    r"\b(decision|decided|plan|will do|approach|strategy|"
    r"решил|решение|план)"
)

USER_EPHEMERAL_PATTERN = r"(heartbeat|/status|no_reply)"

ACKNOWLEDGMENT_PATTERN = (
    r"\b(ok|okay|got it|noted|done|sure|ack|no_reply|heartbeat_ok)\b|"
    + DECISION_PATTERN
)

_USER = frozenset({"user"})
_ASSISTANT = frozenset({"assistant"})

DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        target_type=EntryType.TOOL_RESULT,
        roles=TOOL_ROLES,
        priority=10,
    ),
    ClassificationRule(
        target_type=EntryType.EPHEMERAL,
        roles=_USER,
        content_pattern=USER_EPHEMERAL_PATTERN,
        priority=20,
    ),
    ClassificationRule(
        target_type=EntryType.USER_INTENT,
        roles=_USER,
        priority=25,
    ),
    ClassificationRule(
        target_type=EntryType.EPHEMERAL,
        roles=_ASSISTANT,
        content_pattern=ACKNOWLEDGMENT_PATTERN,
        max_length=SHORT_MESSAGE_CHARS,
        priority=30,
    ),
    ClassificationRule(
        target_type=EntryType.DECISION,
        roles=_ASSISTANT,
        content_pattern=DECISION_PATTERN,
        priority=35,
    ),
    ClassificationRule(
        target_type=EntryType.CONTEXT,
        roles=_ASSISTANT,
        priority=40,
    ),
)


# ---------------------------------------------------------------------------
# EntryClassifier
# ---------------------------------------------------------------------------


class EntryClassifier:
    """Classify conversation messages into EntryType categories.

    Parameters
    ----------
    config:
        Classifier configuration.  Uses the built-in rules when not provided.

    Example
    -------
    >>> classifier = EntryClassifier()
    >>> classifier.classify(Message(role="user", content="Build me a parser"))
    <EntryType.USER_INTENT: 'user_intent'>
    """

    def __init__(self, config: ClassifierConfig | None = None) -> None:
        self._config = config if config is not None else ClassifierConfig()
        rules = self._config.rules if self._config.rules else DEFAULT_RULES
        self._rules: list[ClassificationRule] = sorted(rules, key=lambda r: r.priority)
        self._compiled: dict[str, re.Pattern[str]] = {}
        for rule in self._rules:
            if rule.content_pattern and rule.content_pattern not in self._compiled:
                self._compiled[rule.content_pattern] = re.compile(
                    rule.content_pattern, re.IGNORECASE
                )

    @property
    def rules(self) -> list[ClassificationRule]:
        """The active rules in evaluation order."""
        return list(self._rules)

    def classify(self, message: Message) -> EntryType:
        """Return the EntryType for ``message``.

        Total and deterministic: every message maps to exactly one type.
        """
        text = extract_text(message)
        for rule in self._rules:
            if self._matches_rule(rule, message.role, text):
                return rule.target_type
        return self._config.fallback_type

    def classify_many(self, messages: list[Message]) -> list[EntryType]:
        """Classify each message in order."""
        return [self.classify(message) for message in messages]

    def _matches_rule(self, rule: ClassificationRule, role: str, text: str) -> bool:
        if rule.roles and role not in rule.roles:
            return False
        if rule.max_length is not None and len(text) >= rule.max_length:
            return False
        if rule.content_pattern:
            pattern = self._compiled[rule.content_pattern]
            if not pattern.search(text):
                return False
        return True


_DEFAULT_CLASSIFIER = EntryClassifier()


def classify(message: Message) -> EntryType:
    """Classify ``message`` with the built-in rule set."""
    return _DEFAULT_CLASSIFIER.classify(message)
