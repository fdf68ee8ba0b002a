"""JSON preferences file shared by the UI settings."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from fleet_rental.logging_config import get_logger


def load_config_data(config_path: Path) -> dict[str, Any]:
    """Read the preferences file; a missing or unreadable file means defaults."""
    if not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        get_logger("config_store").warning(
            "Ignoring unreadable preferences file %s", config_path
        )
        return {}
    return data if isinstance(data, dict) else {}


def save_config_data(config_path: Path, data: dict[str, Any]) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = config_path.with_suffix(config_path.suffix + ".tmp")
    temp_path.write_text(
        json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )
    temp_path.replace(config_path)
