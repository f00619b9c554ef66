"""UI utility functions."""

import streamlit as st

_FLASH_KEY = "_flash"


def flash(kind: str, message: str) -> None:
    """Queue a transient message ("success", "error", "info") for the next render."""
    st.session_state[_FLASH_KEY] = (kind, message)


def render_flash() -> None:
    """Show and discard the queued message, if any."""
    queued = st.session_state.pop(_FLASH_KEY, None)
    if queued is None:
        return
    kind, message = queued
    getattr(st, kind, st.info)(message)
