from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolated_logs(tmp_path, monkeypatch):
    monkeypatch.setenv("WPDOCK_LOG_DIR", str(tmp_path / "log"))
    monkeypatch.setenv("WPDOCK_RID", "testrid0")


@pytest.fixture
def secret_file(tmp_path):
    def _make(name: str, content: str):
        path = tmp_path / "secrets" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _make
