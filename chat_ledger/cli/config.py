"""Configuration management for the chat-ledger CLI.

Reads/writes a TOML config file and provides a typed Config dataclass.
Default location: ``~/.config/chat-ledger/config.toml``.
Override with the ``CHAT_LEDGER_CONFIG`` environment variable.

Data directory layout::

    data/
      output/      <- normalized documents land here
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from chat_ledger.output.serialize import OutputFormat

_DEFAULT_CONFIG_DIR = Path("~/.config/chat-ledger").expanduser()
_DEFAULT_DATA_DIR = Path("./data")


def _config_path() -> Path:
    env = os.environ.get("CHAT_LEDGER_CONFIG")
    if env:
        return Path(env).expanduser()
    return _DEFAULT_CONFIG_DIR / "config.toml"


@dataclass
class Config:
    data_dir: str = str(_DEFAULT_DATA_DIR)

    # "json", "jsonl" or "both"
    output_format: str = OutputFormat.JSON.value
    indent: int = 2

    # Default membership map applied when --project-map is not given
    project_map: str = ""

    @property
    def output_dir(self) -> Path:
        return Path(self.data_dir) / "output"

    @property
    def format(self) -> OutputFormat:
        return OutputFormat(self.output_format)

    def ensure_dirs(self) -> None:
        """Create the data directory structure if it doesn't exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)


def load_config() -> Config:
    """Load config from disk, falling back to defaults + env overrides."""
    path = _config_path()
    cfg = Config()

    if path.exists():
        with open(path, "rb") as f:
            data = tomllib.load(f)
        data_section = data.get("data", {})
        output_section = data.get("output", {})
        projects_section = data.get("projects", {})

        cfg.data_dir = data_section.get("dir", cfg.data_dir)
        cfg.output_format = output_section.get("format", cfg.output_format)
        cfg.indent = int(output_section.get("indent", cfg.indent))
        cfg.project_map = projects_section.get("map", cfg.project_map)

    # Environment variables always take precedence
    cfg.data_dir = os.environ.get("CHAT_LEDGER_DATA_DIR", cfg.data_dir)
    cfg.output_format = os.environ.get("CHAT_LEDGER_FORMAT", cfg.output_format)
    cfg.project_map = os.environ.get("CHAT_LEDGER_PROJECT_MAP", cfg.project_map)

    # Fail early on a bad format rather than after processing
    OutputFormat(cfg.output_format)
    return cfg


def save_config(cfg: Config) -> Path:
    """Write config to the TOML file. Returns the path written."""
    path = _config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    lines = [
        "[data]",
        f'dir = "{cfg.data_dir}"',
        "",
        "[output]",
        f'format = "{cfg.output_format}"',
        f"indent = {cfg.indent}",
        "",
    ]

    if cfg.project_map:
        lines.extend(
            [
                "[projects]",
                f'map = "{cfg.project_map}"',
                "",
            ]
        )

    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def config_exists() -> bool:
    return _config_path().exists()


def config_path_display() -> str:
    return str(_config_path())
