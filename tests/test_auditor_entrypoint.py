"""Tests for the round audit entrypoint."""

import json
import sys

import pytest

from nodewatch.entrypoints import auditor as entrypoint

ROUND_TIME = 10_000


def _write_submission(root, round_, submitter, height):
    round_dir = root / "namespace" / "submissions" / f"round_{round_}"
    round_dir.mkdir(parents=True, exist_ok=True)
    payload = {
        "submitter": submitter,
        "round": round_,
        "timestamp": round_ * ROUND_TIME + 10,
        "networkScore": 90.0,
        "nodes": [{
            "endpoint": "https://rpc.pulsechain.com", "blockHeight": height, "tps": 3.0,
            "health": "healthy", "responseTime": 200,
        }],
    }
    (round_dir / f"{submitter}.json").write_text(json.dumps(payload))


@pytest.fixture
def cli_env(monkeypatch):
    monkeypatch.setenv("NODEWATCH_TEST_MODE", "true")
    monkeypatch.delenv("NODEWATCH__DATA_DIR", raising=False)
    monkeypatch.delenv("NODEWATCH__ROUND_TIME_MS", raising=False)


class TestAuditorEntrypoint:

    def test_writes_results(self, tmp_path, monkeypatch, cli_env):
        for name, height in (("a", 100), ("b", 101), ("c", 102)):
            _write_submission(tmp_path, 3, name, height)
        monkeypatch.setattr(sys, "argv", [
            "nodewatch-audit", "--round", "3",
            "--data_dir", str(tmp_path), "--round_time_ms", str(ROUND_TIME),
        ])
        entrypoint.main()

        out = json.loads((tmp_path / "audit" / "round_3.json").read_text())
        assert out["round"] == 3
        assert {r["submitter"]: r["score"] for r in out["results"]} == {
            "a": 100.0, "b": 100.0, "c": 100.0,
        }

    def test_exits_when_round_unauditable(self, tmp_path, monkeypatch, cli_env):
        monkeypatch.setattr(sys, "argv", [
            "nodewatch-audit", "--round", "8",
            "--data_dir", str(tmp_path), "--round_time_ms", str(ROUND_TIME),
        ])
        with pytest.raises(SystemExit) as exc_info:
            entrypoint.main()
        assert exc_info.value.code == 1

    def test_env_data_dir_wins_over_cli(self, tmp_path, monkeypatch, cli_env):
        for name, height in (("a", 100), ("b", 100)):
            _write_submission(tmp_path, 3, name, height)
        monkeypatch.setenv("NODEWATCH__DATA_DIR", str(tmp_path))
        monkeypatch.setenv("NODEWATCH__ROUND_TIME_MS", str(ROUND_TIME))
        monkeypatch.setattr(sys, "argv", [
            "nodewatch-audit", "--round", "3",
            "--data_dir", str(tmp_path / "elsewhere"), "--round_time_ms", "1",
        ])
        entrypoint.main()

        audit_dir = tmp_path / "audit"
        assert [p.name for p in audit_dir.iterdir()] == ["round_3.json"]
        assert not (tmp_path / "elsewhere").exists()
