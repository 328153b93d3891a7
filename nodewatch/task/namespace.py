"""Host namespace interface and a filesystem implementation.

The task runtime injects a namespace for key/value storage, task
submission and round timing. FilesystemNamespace stands in for the host
in local runs and tests:

  {data_dir}/namespace/store/{key}.json
  {data_dir}/namespace/submissions/round_{N}/{submitter}.json
"""

from __future__ import annotations

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Protocol, runtime_checkable


def status_key(round: int) -> str:
    """Store key for a round's collected status."""
    return f"node_status_{round}"


@runtime_checkable
class Namespace(Protocol):
    """Abstract interface to the host task runtime."""

    async def store_get(self, key: str) -> str | None:
        """Read a stored value, or None if absent."""
        ...

    async def store_set(self, key: str, value: str) -> None:
        """Write a value under ``key``."""
        ...

    async def submit_task(self, round: int, payload: dict[str, Any]) -> None:
        """Submit this node's payload for ``round``."""
        ...

    async def get_round_submissions(self, round: int) -> list[Any]:
        """Every participant's submission for ``round``."""
        ...

    def get_round_time(self) -> int:
        """Round duration in milliseconds."""
        ...


_SAFE_NAME = re.compile(r"[^A-Za-z0-9_.-]")


def _safe(name: str) -> str:
    return _SAFE_NAME.sub("_", name) or "_"


def write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON via tmp file + rename, creating parent dirs as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(tmp_fd, "w") as f:
            json.dump(data, f, default=str, sort_keys=True)
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def _read_json(path: Path) -> Any:
    with open(path) as f:
        return json.load(f)


class FilesystemNamespace:
    """Local-directory Namespace implementation."""

    def __init__(self, data_dir: str, round_time_ms: int, submitter: str = "local"):
        self.base = Path(data_dir) / "namespace"
        self.store_dir = self.base / "store"
        self.submissions_dir = self.base / "submissions"
        self.round_time_ms = round_time_ms
        self.submitter = submitter
        self.base.mkdir(parents=True, exist_ok=True)

    async def store_get(self, key: str) -> str | None:
        path = self.store_dir / f"{_safe(key)}.json"
        if not path.exists():
            return None
        return _read_json(path)["value"]

    async def store_set(self, key: str, value: str) -> None:
        write_json_atomic(self.store_dir / f"{_safe(key)}.json", {"key": key, "value": value})

    async def submit_task(self, round: int, payload: dict[str, Any]) -> None:
        submitter = payload.get("submitter") or self.submitter
        path = self.submissions_dir / f"round_{round}" / f"{_safe(submitter)}.json"
        write_json_atomic(path, payload)

    async def get_round_submissions(self, round: int) -> list[Any]:
        """Submissions for a round, ordered by file name.

        Files that are not valid JSON are returned as None so the auditor
        can classify them as malformed.
        """
        round_dir = self.submissions_dir / f"round_{round}"
        if not round_dir.exists():
            return []

        submissions: list[Any] = []
        for path in sorted(round_dir.glob("*.json")):
            try:
                submissions.append(_read_json(path))
            except (json.JSONDecodeError, UnicodeDecodeError):
                submissions.append(None)
        return submissions

    def get_round_time(self) -> int:
        return self.round_time_ms


__all__ = ["FilesystemNamespace", "Namespace", "status_key", "write_json_atomic"]
