# backend/config.py
import os
from dataclasses import dataclass
from typing import List, Optional

import streamlit as st
from dotenv import load_dotenv

from backend.errors import ConfigurationError

# Local development convenience
load_dotenv()

SUPABASE_URL_KEY = "SUPABASE_URL"
SUPABASE_ANON_KEY_KEY = "SUPABASE_ANON_KEY"

REQUIRED_AT_BOOT = [
    SUPABASE_URL_KEY,
    SUPABASE_ANON_KEY_KEY,
]

DEFAULT_EMAIL_DOMAIN = "bashir.inc"
DEFAULT_IMAGE_BUCKET = "tussle-images"
DEFAULT_RECEIPT_BUCKET = "receipts"


def get_secret(name: str, default: Optional[str] = None) -> Optional[str]:
    """
    Safe secret fetch:
    - env var wins
    - then st.secrets if present
    - never throws if secrets.toml is missing locally
    """
    v = os.getenv(name)
    if v:
        return v
    try:
        return st.secrets.get(name, default)  # type: ignore[attr-defined]
    except Exception:
        return default


@dataclass(frozen=True)
class Settings:
    supabase_url: Optional[str]
    supabase_anon_key: Optional[str]
    email_domain: str = DEFAULT_EMAIL_DOMAIN
    image_bucket: str = DEFAULT_IMAGE_BUCKET
    receipt_bucket: str = DEFAULT_RECEIPT_BUCKET
    log_level: str = "INFO"


def load_settings() -> Settings:
    return Settings(
        supabase_url=get_secret(SUPABASE_URL_KEY),
        supabase_anon_key=get_secret(SUPABASE_ANON_KEY_KEY),
        email_domain=(get_secret("AUTH_EMAIL_DOMAIN") or DEFAULT_EMAIL_DOMAIN).lstrip("@"),
        image_bucket=get_secret("TUSSLE_IMAGE_BUCKET") or DEFAULT_IMAGE_BUCKET,
        receipt_bucket=get_secret("RECEIPT_BUCKET") or DEFAULT_RECEIPT_BUCKET,
        log_level=(get_secret("LOG_LEVEL") or "INFO").upper(),
    )


def missing_required() -> List[str]:
    return [k for k in REQUIRED_AT_BOOT if not get_secret(k)]


def require_settings() -> Settings:
    missing = missing_required()
    if missing:
        raise ConfigurationError(missing)
    return load_settings()
