"""Shared test fixtures."""

from __future__ import annotations

import os
import time
from pathlib import Path

import pytest


@pytest.fixture
def make_files():
    """Return a helper that writes *n* small files into a directory."""

    def _make(directory: Path, n: int, *, age_days: float = 0, content: bytes = b"test data content") -> list[Path]:
        directory.mkdir(parents=True, exist_ok=True)
        paths = []
        start = len(list(directory.iterdir()))
        for i in range(n):
            path = directory / f"testfile-{start + i}.tmp"
            path.write_bytes(content)
            if age_days:
                stamp = time.time() - age_days * 86400
                os.utime(path, (stamp, stamp))
            paths.append(path)
        return paths

    return _make


@pytest.fixture
def isolate_config(tmp_path, monkeypatch):
    """Point XDG_CONFIG_HOME at a temp directory and return the config file path."""
    config_home = tmp_path / "config"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "syscleaner" / "config.json"
