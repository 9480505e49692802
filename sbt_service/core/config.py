from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_TRUE_WORDS = ("1", "true", "yes", "on")
_FALSE_WORDS = ("0", "false", "no", "off")


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _getbool(name: str, default: bool) -> bool:
    raw = _getenv(name, "true" if default else "false").lower()
    if raw in _TRUE_WORDS:
        return True
    if raw in _FALSE_WORDS:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    sbt_name: str
    sbt_symbol: str
    sbt_base_uri: str
    sbt_issuer: str
    sbt_kyc_level: int
    sbt_max_events: int

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def _getint(name: str, default: int, *, minimum: int) -> int:
    raw = _getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum} (got {value})")
    return value


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "8000")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    sbt_name = _getenv("SBT_NAME", "SBT")
    sbt_symbol = _getenv("SBT_SYMBOL", "SBT")
    sbt_issuer = _getenv("SBT_ISSUER", "issuer")
    for name, value in (
        ("SBT_NAME", sbt_name),
        ("SBT_SYMBOL", sbt_symbol),
        ("SBT_ISSUER", sbt_issuer),
    ):
        if not value:
            raise ValueError(f"{name} must be non-empty")

    # tokenURI is base + decimal id, so the base has to end at a path boundary.
    sbt_base_uri = _getenv("SBT_BASE_URI", "http://localhost/")
    if not sbt_base_uri.endswith("/"):
        raise ValueError(f"SBT_BASE_URI must end with '/' (got {sbt_base_uri!r})")

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getbool("LOG_JSON", False),
        port=port,
        sbt_name=sbt_name,
        sbt_symbol=sbt_symbol,
        sbt_base_uri=sbt_base_uri,
        sbt_issuer=sbt_issuer,
        sbt_kyc_level=_getint("SBT_KYC_LEVEL", 1, minimum=0),
        sbt_max_events=_getint("SBT_MAX_EVENTS", 10_000, minimum=1),
    )


SETTINGS = load_settings()
