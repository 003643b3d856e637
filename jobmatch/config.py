"""Load settings from config/settings.yaml and the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobmatch.errors import ConfigError
from jobmatch.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
DATA_DIR: Path = ROOT_DIR / "data"


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


@dataclass
class SmtpConfig:
    host: str = ""
    port: int = 587
    user: str = ""
    password: str = ""
    use_ssl: bool = False
    from_addr: str = ""
    frontend_url: str = "http://localhost:3000"

    @property
    def configured(self) -> bool:
        return bool(self.user and self.password)

    @property
    def sender(self) -> str:
        return self.from_addr or f'"JobAgency" <{self.user}>'


@dataclass
class Settings:
    store_backend: str = "memory"
    fixture_path: Path | None = None
    store_url: str = ""
    store_timeout: float = 10.0
    recommendation_limit: int = 10
    similar_limit: int = 5
    fetch_workers: int = 2
    smtp: SmtpConfig = field(default_factory=SmtpConfig)


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        log.debug("No settings file at %s, using defaults", path)
        return {}
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return data


def _as_int(value: Any, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from exc


def _as_float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be a number, got {value!r}") from exc


def load_settings(path: Path | None = None) -> Settings:
    """Settings from YAML, with JOBMATCH_* / SMTP_* environment overrides."""
    path = path or Path(get_env("JOBMATCH_SETTINGS") or SETTINGS_PATH)
    data = _read_yaml(path)
    store = data.get("store") or {}
    limits = data.get("limits") or {}
    email = data.get("email") or {}

    fixture = get_env("JOBMATCH_FIXTURE") or store.get("fixture") or ""
    fixture_path: Path | None = None
    if fixture:
        fixture_path = Path(fixture)
        if not fixture_path.is_absolute():
            fixture_path = ROOT_DIR / fixture_path

    smtp = SmtpConfig(
        host=get_env("SMTP_HOST") or str(email.get("host") or ""),
        port=_as_int(get_env("SMTP_PORT") or email.get("port") or 587, "SMTP_PORT"),
        user=get_env("SMTP_USER"),
        password=get_env("SMTP_PASSWORD") or get_env("SMTP_PASS"),
        use_ssl=(get_env("SMTP_SECURE") or str(email.get("secure", "false"))).lower()
        in ("1", "true", "yes"),
        from_addr=get_env("EMAIL_FROM") or str(email.get("from") or ""),
        frontend_url=get_env("FRONTEND_URL") or str(email.get("frontend_url") or "http://localhost:3000"),
    )

    settings = Settings(
        store_backend=(get_env("JOBMATCH_STORE") or str(store.get("backend") or "memory")).lower(),
        fixture_path=fixture_path,
        store_url=get_env("JOBMATCH_STORE_URL") or str(store.get("url") or ""),
        store_timeout=_as_float(
            get_env("JOBMATCH_STORE_TIMEOUT") or store.get("timeout") or 10.0,
            "store.timeout",
        ),
        recommendation_limit=_as_int(limits.get("recommendations", 10), "limits.recommendations"),
        similar_limit=_as_int(limits.get("similar", 5), "limits.similar"),
        fetch_workers=_as_int(limits.get("fetch_workers", 2), "limits.fetch_workers"),
        smtp=smtp,
    )
    if settings.fetch_workers < 1:
        raise ConfigError("limits.fetch_workers must be at least 1")
    return settings
