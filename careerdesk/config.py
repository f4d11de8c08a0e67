"""Load env configuration and the editable profile file."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from careerdesk.log import get_logger

log = get_logger(__name__)

load_dotenv()

PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = PROJECT_ROOT / "config"
PROFILE_PATH: Path = CONFIG_DIR / "profile.yaml"
DATA_DIR: Path = PROJECT_ROOT / "data"

DEFAULT_DATABASE_URL = f"sqlite:///{DATA_DIR / 'careerdesk.db'}"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_GMAIL_API_BASE = "https://gmail.googleapis.com/gmail/v1"


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def database_url() -> str:
    return get_env("DATABASE_URL") or DEFAULT_DATABASE_URL


def http_timeout() -> float:
    raw = get_env("HTTP_TIMEOUT", "15")
    try:
        return float(raw)
    except ValueError:
        log.warning("Ignoring invalid HTTP_TIMEOUT=%r, using 15s", raw)
        return 15.0


def ensure_dirs() -> None:
    for d in (CONFIG_DIR, DATA_DIR):
        d.mkdir(parents=True, exist_ok=True)


def load_profile_file(path: Path | None = None) -> dict[str, Any]:
    """Read a profile YAML file (personal_details / experiences / education)."""
    path = path or PROFILE_PATH
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile file {path.name} must contain a mapping")
    # Older files kept everything flat under "profile"
    if "profile" in data and "personal_details" not in data:
        data["personal_details"] = data.pop("profile")
    data.setdefault("personal_details", None)
    data["experiences"] = list(data.get("experiences") or [])
    data["education"] = list(data.get("education") or [])
    return data
