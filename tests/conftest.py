# tests/conftest.py
import os
from pathlib import Path

import pytest

from core.config import AppSettings

SAMPLES_DIR = Path(__file__).resolve().parents[1] / "samples"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep the developer's RECORDGUARD_* variables and user config out of tests."""
    for key in list(os.environ):
        if key.startswith("RECORDGUARD_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings():
    """Settings built from defaults only (no .env files)."""
    return AppSettings(_env_file=None)


@pytest.fixture
def samples_dir():
    return SAMPLES_DIR


@pytest.fixture
def bid_schema_path():
    return SAMPLES_DIR / "bid_schema.json"


@pytest.fixture
def bid_records_path():
    return SAMPLES_DIR / "bids.json"
