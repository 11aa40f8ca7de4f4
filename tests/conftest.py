from __future__ import annotations

from pathlib import Path

import pytest

from quotesync.config import CONFIG_ENV_OVERRIDES


@pytest.fixture(autouse=True)
def _isolate_quotesync_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for env_var in CONFIG_ENV_OVERRIDES.values():
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.setenv("QUOTESYNC_CONFIG", str(tmp_path / "config" / "config.json"))
    monkeypatch.setenv("QUOTESYNC_DB", str(tmp_path / "quotes.sqlite"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
