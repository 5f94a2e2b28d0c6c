from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

_DEFAULT_PATH = Path(__file__).resolve().parents[2] / "config" / "scoring.yaml"
_REQUIRED_SECTIONS = ("weights", "education", "experience", "skills", "activities")

_cache: dict[str, Any] | None = None


def scoring_config_path() -> Path:
    override = (os.getenv("SCORING_CONFIG_PATH") or "").strip()
    return Path(override) if override else _DEFAULT_PATH


def _load(path: Path) -> dict[str, Any]:
    try:
        parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise RuntimeError(f"Scoring rules not found at '{path}'.") from exc
    except OSError as exc:
        raise RuntimeError(f"Failed to read scoring rules '{path}': {exc}") from exc
    except yaml.YAMLError as exc:
        raise RuntimeError(f"Invalid YAML in scoring rules '{path}': {exc}") from exc

    if not isinstance(parsed, dict):
        raise RuntimeError(f"Invalid scoring rules '{path}': expected a top-level mapping.")
    missing = [name for name in _REQUIRED_SECTIONS if not isinstance(parsed.get(name), dict)]
    if missing:
        raise RuntimeError(f"Invalid scoring rules '{path}': missing sections {', '.join(missing)}.")
    return parsed


def get_scoring_config() -> dict[str, Any]:
    """Scoring rules from config/scoring.yaml, parsed once per process."""
    global _cache
    if _cache is None:
        _cache = _load(scoring_config_path())
    return _cache


def reset_scoring_config() -> None:
    global _cache
    _cache = None


def get_scoring_value(path: str, default: Any = None) -> Any:
    """Dot-path lookup such as 'weights.experience'; any miss yields ``default``."""
    node: Any = get_scoring_config()
    for key in filter(None, path.split(".")):
        if not isinstance(node, dict) or key not in node:
            return default
        node = node[key]
    return default if node is get_scoring_config() else node
