import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigError

DEFAULT_API_URL = "http://localhost:4000/api"
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_API_URL
    timeout: Optional[float] = DEFAULT_TIMEOUT  # None — без таймаута
    log_level: str = "INFO"


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return DEFAULT_TIMEOUT
    raw = raw.strip()
    if raw in ("", "0", "none", "None"):
        return None
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError("SHOP_API_TIMEOUT", raw) from e
    if value < 0:
        raise ConfigError("SHOP_API_TIMEOUT", raw)
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Читает SHOP_API_URL, SHOP_API_TIMEOUT, SHOP_LOG_LEVEL из окружения"""
    env = os.environ if environ is None else environ
    return Settings(
        api_base_url=env.get("SHOP_API_URL", DEFAULT_API_URL).rstrip("/"),
        timeout=_parse_timeout(env.get("SHOP_API_TIMEOUT")),
        log_level=env.get("SHOP_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
