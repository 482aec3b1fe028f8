from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from shopdash.errors import ConfigurationError


DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class ApiConfig:
    base_url: str = DEFAULT_BASE_URL
    api_key: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers


def normalize_base_url(value: Optional[str]) -> str:
    url = (value or "").strip().rstrip("/")
    if not url:
        return DEFAULT_BASE_URL
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ConfigurationError(f"Invalid API base URL: {value!r}", details={"base_url": value})
    return url


def _as_timeout(value: Optional[str]) -> float:
    if value is None or not str(value).strip():
        return DEFAULT_TIMEOUT
    try:
        out = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid API timeout: {value!r}", details={"timeout": value})
    if out <= 0:
        raise ConfigurationError(f"API timeout must be positive, got {out}", details={"timeout": value})
    return out


def load_config(env: Optional[Mapping[str, str]] = None) -> ApiConfig:
    """Build the process-wide API configuration.

    Reads ``API_BASE_URL``, ``API_KEY`` and ``API_TIMEOUT``. When no mapping is
    given the process environment is used, after loading a ``.env`` file if
    one is present.
    """
    if env is None:
        load_dotenv()
        env = os.environ
    api_key = (env.get("API_KEY") or "").strip() or None
    return ApiConfig(
        base_url=normalize_base_url(env.get("API_BASE_URL")),
        api_key=api_key,
        timeout=_as_timeout(env.get("API_TIMEOUT")),
    )
