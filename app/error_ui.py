# app/error_ui.py
# User-facing error display for Streamlit
import streamlit as st
import structlog

from backend.errors import FetchError, TussleError, ValidationError, WriteError

log = structlog.get_logger(__name__)


def show_fetch_error(e: FetchError) -> None:
    # fetch failures render the screen empty; no retry
    st.warning(f"Could not load {e.collection or 'data'}. Refresh the page to try again.")


def show_error_ui(e: Exception, context: str = "") -> None:
    """
    Blocking alert for a failed action. Validation problems are shown as-is;
    write failures keep the form editable so the user can resubmit.
    """
    if isinstance(e, ValidationError):
        st.error(e.message)
        return
    if isinstance(e, WriteError):
        log.error("write_failed", context=context, **e.to_dict())
        st.error(f"Save failed: {e.message}")
        return
    if isinstance(e, FetchError):
        log.error("fetch_failed", context=context, **e.to_dict())
        show_fetch_error(e)
        return
    if isinstance(e, TussleError):
        log.error("action_failed", context=context, **e.to_dict())
        st.error(e.message)
        return
    log.exception("unexpected_error", context=context)
    st.error(f"Oops! Something went wrong.\n\n**Error:** {type(e).__name__}: {e}")
