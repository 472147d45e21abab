"""
Process-wide settings read from the environment.
"""
from __future__ import annotations

import os
from pathlib import Path


def _parse_csv_env(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return [value.strip() for value in raw.split(",") if value.strip()]


def _parse_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


ROOT_DIR = Path(__file__).resolve().parent.parent.parent

CUSTOMER_CODE = os.getenv("CUSTOMER_CODE", "DEV")
CONFIG_DIR = Path(os.getenv("CONFIG_DIR", str(ROOT_DIR / "config")))
FONT_DIR = Path(os.getenv("FONT_DIR", str(ROOT_DIR / "fonts")))
SAMPLE_DIR = Path(os.getenv("SAMPLE_DIR", str(ROOT_DIR / "tests" / "fixtures")))
DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "Europe/London")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ALLOW_ORIGINS = _parse_csv_env("CORS_ALLOW_ORIGINS", ["*"])
MAX_REQUEST_BYTES = int(os.getenv("MAX_REQUEST_BYTES", str(50 * 1024 * 1024)))
SAMPLE_ENDPOINT_ENABLED = _parse_bool_env("SAMPLE_ENDPOINT_ENABLED", True)
PORT = int(os.getenv("PORT", "3000"))
