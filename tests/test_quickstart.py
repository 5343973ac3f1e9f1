"""Test that the 3-line quickstart API works for hippocampus."""
from __future__ import annotations

MESSAGES = [
    {"role": "user", "content": "Summarise the failing tests in the auth module"},
    {"role": "tool", "toolName": "pytest", "content": "3 failed, 41 passed"},
    {"role": "assistant", "content": "I decided to fix the token refresh test first, then the login test."},
]


def test_quickstart_import() -> None:
    from hippocampus import compact

    digest = compact(MESSAGES)
    assert digest is not None


def test_quickstart_text() -> None:
    from hippocampus import compact

    digest = compact(MESSAGES)
    assert digest.text.startswith("# hippocampus.md Compaction")
    assert digest.stats.total == 3


def test_quickstart_previous_summary() -> None:
    from hippocampus import compact

    digest = compact(MESSAGES, previous_summary="Earlier: auth module refactor")
    assert "Earlier: auth module refactor" in digest.text


def test_quickstart_class() -> None:
    from hippocampus import Hippocampus, RetentionTier

    memory = Hippocampus()
    counts = memory.tier_counts(MESSAGES)
    assert sum(counts.values()) == 3
    assert set(counts) == set(RetentionTier)


def test_quickstart_score() -> None:
    from hippocampus import EntryType, Hippocampus

    entries = Hippocampus().score(MESSAGES)
    assert [e.entry_type for e in entries] == [
        EntryType.USER_INTENT,
        EntryType.TOOL_RESULT,
        EntryType.DECISION,
    ]


def test_quickstart_repr() -> None:
    from hippocampus import Hippocampus, HippocampusConfig

    memory = Hippocampus(HippocampusConfig(sparse_threshold=0.2))
    assert "sparse_threshold=0.2" in repr(memory)


def test_version() -> None:
    import hippocampus

    assert hippocampus.__version__ == "0.1.0"
