"""Load engine settings, the user profile and env configuration."""
from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobmatch.log import get_logger
from jobmatch.models import UserProfile

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "matching.yaml"
PROFILE_PATH: Path = CONFIG_DIR / "profile.yaml"
REPORTS_DIR: Path = ROOT_DIR / "reports"
DATA_DIR: Path = Path(os.environ.get("JOBMATCH_DATA_DIR") or ROOT_DIR / "data")


@dataclass
class MatchSettings:
    content_weight: float = 0.6
    collaborative_weight: float = 0.4
    threshold: float = 20.0
    limit: int = 20
    max_per_source: int = 3
    neighbours: int = 5
    behavior_log_limit: int = 100
    decay_lambda: float | str | None = None
    decay_half_life_days: float | None = None
    hybrid_weights: dict[str, float] = field(default_factory=dict)
    feed_weights: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MatchSettings:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            log.warning("Ignoring unknown settings: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known})


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data or {}


def load_settings(path: Path | None = None) -> MatchSettings:
    """Engine settings from YAML; defaults when the file is absent."""
    path = path or SETTINGS_PATH
    if not path.exists():
        log.debug("No settings at %s, using defaults", path)
        return MatchSettings()
    return MatchSettings.from_dict(_read_yaml(path).get("matching") or {})


def load_profile(path: Path | None = None) -> UserProfile:
    data = _read_yaml(path or PROFILE_PATH)

    # Older profiles keep everything under a "profile" key
    if "profile" in data and "id" not in data:
        nested = data.pop("profile") or {}
        data = {**nested, **data}

    return UserProfile.from_dict(data)


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def ensure_dirs() -> None:
    for d in (REPORTS_DIR, DATA_DIR):
        d.mkdir(parents=True, exist_ok=True)
