from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from src.utils.errors import ModelConfigError


def load_yaml(path: str | Path) -> Dict[str, Any]:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path.resolve()}")
    with config_path.open("r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ModelConfigError(f"Config root must be a mapping: {config_path}")
    return cfg


def get(cfg: Dict[str, Any], key: str, default: Any = None) -> Any:
    """
    Dot-access helper:
      get(cfg, "model.threads", 4)
    """
    cur: Any = cfg
    for part in key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur


def set_path(cfg: Dict[str, Any], key: str, value: Any) -> None:
    """Dotted assignment used for CLI overrides; ``None`` leaves the config untouched."""
    if value is None:
        return
    cur = cfg
    parts = key.split(".")
    for part in parts[:-1]:
        nxt = cur.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            cur[part] = nxt
        cur = nxt
    cur[parts[-1]] = value
