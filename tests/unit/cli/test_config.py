from __future__ import annotations

from pathlib import Path

import pytest

from chat_ledger.cli.config import (
    Config,
    config_exists,
    config_path_display,
    load_config,
    save_config,
)
from chat_ledger.output.serialize import OutputFormat


class TestConfig:
    def test_defaults(self, tmp_path: Path):
        cfg = load_config()
        assert cfg.data_dir == str(tmp_path / "data")
        assert cfg.format is OutputFormat.JSON
        assert cfg.indent == 2
        assert cfg.project_map == ""
        assert not config_exists()

    def test_round_trip(self, isolated_config: Path, monkeypatch):
        monkeypatch.delenv("CHAT_LEDGER_DATA_DIR")
        cfg = Config(
            data_dir="/tmp/ledger", output_format="both", indent=4, project_map="m.json"
        )
        path = save_config(cfg)
        assert path == isolated_config
        assert config_exists()
        assert config_path_display() == str(isolated_config)

        loaded = load_config()
        assert loaded.data_dir == "/tmp/ledger"
        assert loaded.format is OutputFormat.BOTH
        assert loaded.indent == 4
        assert loaded.project_map == "m.json"

    def test_env_overrides_file(self, monkeypatch):
        save_config(Config(output_format="json"))
        monkeypatch.setenv("CHAT_LEDGER_FORMAT", "jsonl")
        monkeypatch.setenv("CHAT_LEDGER_PROJECT_MAP", "/maps/p.json")
        cfg = load_config()
        assert cfg.output_format == "jsonl"
        assert cfg.project_map == "/maps/p.json"

    def test_invalid_format(self, monkeypatch):
        monkeypatch.setenv("CHAT_LEDGER_FORMAT", "xml")
        with pytest.raises(ValueError):
            load_config()

    def test_ensure_dirs(self, tmp_path: Path):
        cfg = Config(data_dir=str(tmp_path / "d"))
        cfg.ensure_dirs()
        assert (tmp_path / "d" / "output").is_dir()
