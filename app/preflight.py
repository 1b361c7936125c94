# app/preflight.py
import streamlit as st
import structlog

from backend.config import REQUIRED_AT_BOOT, Settings, require_settings
from backend.errors import ConfigurationError

log = structlog.get_logger(__name__)


def run() -> Settings:
    """
    Hard stop when the data service is not configured. Nothing else renders:
    without these settings neither authentication nor any screen can work.
    """
    try:
        return require_settings()
    except ConfigurationError as e:
        log.error("configuration_missing", missing=e.missing)
        st.title("Configuration required")
        st.error(
            "Missing required secrets: " + ", ".join(e.missing) + "\n\n"
            "Add them to your environment, a local `.env` file, or "
            "Streamlit Cloud → App Settings → Secrets.\n\n"
            "Required: " + ", ".join(REQUIRED_AT_BOOT)
        )
        st.stop()
