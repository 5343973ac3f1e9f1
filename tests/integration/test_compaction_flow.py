"""End-to-end compaction over a realistic agent session."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from hippocampus import (
    CompactionHook,
    EntryType,
    Hippocampus,
    HippocampusConfig,
    RetentionTier,
    load_config,
)
from hippocampus.digest.assembler import (
    ACTIVE_HEADER,
    COMPRESSED_HEADER,
    GOAL_HEADER,
    SPARSE_HEADER,
)


def _session() -> list[dict[str, object]]:
    messages: list[dict[str, object]] = [
        {"role": "system", "content": "You are a coding agent working in a Python repository."},
        {"role": "user", "content": "Migrate the session store from SQLite to PostgreSQL"},
        {
            "role": "assistant",
            "content": "The approach: introduce a repository interface, then swap the backend behind it.",
        },
    ]
    for i in range(12):
        messages.append(
            {
                "role": "assistant",
                "content": [
                    {"type": "text", "text": f"Reading module {i:02d}"},
                    {"type": "tool_use", "name": "read_file", "id": f"call-{i:02d}"},
                ],
            }
        )
        messages.append(
            {
                "role": "tool",
                "content": [{"type": "tool_result", "tool_use_id": f"call-{i:02d}"}, {"type": "text", "text": "x" * 2000}],
            }
        )
    messages += [
        {"role": "user", "content": "heartbeat"},
        {"role": "assistant", "content": "ok"},
        {"role": "user", "content": "Also keep the SQLite backend for local development"},
    ]
    return messages


class TestCompactionFlow:
    def setup_method(self) -> None:
        self.messages = _session()
        self.memory = Hippocampus()
        self.digest = self.memory.compact(self.messages)

    def test_every_entry_accounted_for(self) -> None:
        stats = self.digest.stats
        assert stats.total == len(self.messages)
        assert stats.sparse + stats.compressed + stats.kept + stats.dropped == stats.total

    def test_digest_smaller_than_input(self) -> None:
        stats = self.digest.stats
        assert stats.tokens_after < stats.tokens_before
        assert stats.compression_ratio is not None and stats.compression_ratio > 1.0

    def test_sections_present(self) -> None:
        for header in (GOAL_HEADER, ACTIVE_HEADER, COMPRESSED_HEADER, SPARSE_HEADER):
            assert header in self.digest.text

    def test_both_goals_listed(self) -> None:
        assert "- Migrate the session store from SQLite to PostgreSQL" in self.digest.text
        assert "- Also keep the SQLite backend for local development" in self.digest.text

    def test_old_tool_output_reduced_to_pointers(self) -> None:
        assert '[TOOL:call-00] 500tok → "' in self.digest.text
        assert "x" * 500 not in self.digest.text

    def test_plan_survives(self) -> None:
        scored = self.memory.score(self.messages)
        plan = scored[2]
        assert plan.entry_type is EntryType.DECISION
        assert plan.tier(self.memory.config) is not RetentionTier.SPARSE

    def test_digest_can_be_carried_forward(self) -> None:
        follow_up = [{"role": "user", "content": "Now write the migration script"}]
        second = self.memory.compact(follow_up, previous_summary=self.digest.text)
        assert "## Prior Context" in second.text
        assert "Migrate the session store" in second.text


class TestHookWithWorkspaceConfig:
    def test_workspace_config_drives_hook(self, tmp_path: Path) -> None:
        (tmp_path / "hippocampus.config.json").write_text(
            json.dumps({"maxSparseIndexTokens": 20, "decayRates": {"tool_result": 0.5}}),
            encoding="utf-8",
        )
        config = load_config(tmp_path)
        assert config.decay_rate(EntryType.TOOL_RESULT) == pytest.approx(0.5)
        assert config.decay_rate(EntryType.DECISION) == pytest.approx(0.03)

        notes: list[tuple[str, str]] = []
        hook = CompactionHook(config=config, notify=lambda msg, level: notes.append((msg, level)))
        result = hook.handle({"messagesToSummarize": _session(), "tokensBefore": 99_000})

        assert result is not None
        assert result.stats.dropped > 0
        assert "additional entries dropped (sparse index full)" in result.summary
        assert notes and notes[0][1] == "info"

    def test_default_config_when_workspace_empty(self, tmp_path: Path) -> None:
        assert load_config(tmp_path) == HippocampusConfig()
