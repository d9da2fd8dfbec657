from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

CONVERSATIONS_PATH = FIXTURES_DIR / "conversations.json"
PROJECT_MAP_PATH = FIXTURES_DIR / "project-map.json"


@pytest.fixture()
def conversations() -> list[dict[str, Any]]:
    """Mixed flat/graph export: tags, a stub, an id-less record, system turns."""
    return json.loads(CONVERSATIONS_PATH.read_text())


@pytest.fixture()
def project_map() -> dict[str, list[str]]:
    return json.loads(PROJECT_MAP_PATH.read_text())


@pytest.fixture()
def export_dir(tmp_path: Path) -> Path:
    """A directory laid out like an unzipped export."""
    dest = tmp_path / "export"
    dest.mkdir()
    shutil.copy(CONVERSATIONS_PATH, dest / "conversations.json")
    return dest


@pytest.fixture()
def project_map_file(tmp_path: Path) -> Path:
    dest = tmp_path / "project-map.json"
    shutil.copy(PROJECT_MAP_PATH, dest)
    return dest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep tests away from the user's real config file and data directory."""
    config = tmp_path / "config" / "config.toml"
    monkeypatch.setenv("CHAT_LEDGER_CONFIG", str(config))
    monkeypatch.setenv("CHAT_LEDGER_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("CHAT_LEDGER_FORMAT", raising=False)
    monkeypatch.delenv("CHAT_LEDGER_PROJECT_MAP", raising=False)
    return config
