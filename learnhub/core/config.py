from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

DEFAULT_PLACEHOLDER_THUMBNAIL = (
    "https://images.pexels.com/photos/4145190/pexels-photo-4145190.jpeg"
    "?auto=compress&cs=tinysrgb&w=500&h=300&fit=crop"
)


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    redis_url: str | None
    platform_fee_rate: float = 0.4
    certificate_prefix: str = "LH"
    certificate_grade: str = "A"
    placeholder_thumbnail: str = DEFAULT_PLACEHOLDER_THUMBNAIL

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def instructor_share_rate(self) -> float:
        return 1 - self.platform_fee_rate


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    port_raw = _getenv("PORT", "8000")
    fee_raw = _getenv("PLATFORM_FEE_RATE", "0.4")

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

    try:
        platform_fee_rate = float(fee_raw)
    except ValueError:
        raise ValueError(
            f"PLATFORM_FEE_RATE must be a number (got {fee_raw!r})"
        ) from None
    if not 0 <= platform_fee_rate <= 1:
        raise ValueError(
            f"PLATFORM_FEE_RATE must be between 0 and 1 (got {platform_fee_rate!r})"
        )

    certificate_prefix = _getenv("CERTIFICATE_PREFIX", "LH").upper()
    if not certificate_prefix:
        raise ValueError("CERTIFICATE_PREFIX must be non-empty")

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json_raw in ("1", "true", "yes"),
        port=port,
        database_url=_getenv("DATABASE_URL", "") or None,
        redis_url=_getenv("REDIS_URL", "") or None,
        platform_fee_rate=platform_fee_rate,
        certificate_prefix=certificate_prefix,
        certificate_grade=_getenv("CERTIFICATE_GRADE", "A") or "A",
        placeholder_thumbnail=(
            _getenv("PLACEHOLDER_THUMBNAIL", "") or DEFAULT_PLACEHOLDER_THUMBNAIL
        ),
    )


SETTINGS = load_settings()
