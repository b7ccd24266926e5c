"""Tests for the JSONL event log."""

from __future__ import annotations

import json
from pathlib import Path

from madcoord.events import EventLog


class TestEventLog:
    def test_appends_json_lines(self, tmp_path: Path) -> None:
        log = EventLog(tmp_path / "events.jsonl")
        assert log.info("Worktree created", branch="feat/x")
        assert log.warn("Careful")
        lines = (tmp_path / "events.jsonl").read_text().splitlines()
        assert len(lines) == 2

        first = json.loads(lines[0])
        assert set(first) == {"timestamp", "level", "message", "context"}
        assert first["level"] == "info"
        assert first["context"] == {"branch": "feat/x"}
        assert json.loads(lines[1])["context"] is None

    def test_non_json_context_is_stringified(self, tmp_path: Path) -> None:
        log = EventLog(tmp_path / "events.jsonl")
        assert log.error("Failed", path=tmp_path)
        assert log.read()[0]["context"]["path"] == str(tmp_path)

    def test_disabled(self, tmp_path: Path) -> None:
        log = EventLog(tmp_path / "events.jsonl", enabled=False)
        assert not log.info("ignored")
        assert not (tmp_path / "events.jsonl").exists()

    def test_write_failure_is_swallowed(self, tmp_path: Path) -> None:
        path = tmp_path / "events.jsonl"
        path.mkdir()
        assert EventLog(path).info("lost") is False

    def test_read_skips_malformed_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "events.jsonl"
        path.write_text('{"level": "info", "message": "ok"}\nnot json\n\n')
        assert EventLog(path).read() == [{"level": "info", "message": "ok"}]

    def test_read_missing_file(self, tmp_path: Path) -> None:
        assert EventLog(tmp_path / "none.jsonl").read() == []
