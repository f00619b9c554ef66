"""
Case Register Streamlit UI: main entry point.

Run with: ``streamlit run src/caseregister/ui/app.py``
"""

import logging

import streamlit as st

from caseregister.core.config import get_settings
from caseregister.services.audio.capture import CaptureController, ClipSource
from caseregister.services.storage.local_storage import LocalStorage
from caseregister.services.storage.sessions import SessionStore
from caseregister.ui.api_client import get_api_client
from caseregister.ui.components.case_panel import render_case_panel
from caseregister.ui.components.recorder import render_recorder
from caseregister.ui.components.transcript_editor import render_transcript_editor
from caseregister.ui.utils import render_flash
from caseregister.ui.workflow import CaseWorkflow

settings = get_settings()
logging.basicConfig(level=settings.log_level.upper())

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Case Register",
    page_icon="\U0001f399\ufe0f",
    layout="wide",
)

# ---------------------------------------------------------------------------
# Session state defaults
# ---------------------------------------------------------------------------
if "api_base_url" not in st.session_state:
    st.session_state.api_base_url = settings.api_base_url

if "workflow" not in st.session_state:
    # st.audio_input produces WAV clips
    _source = ClipSource()
    st.session_state.clip_source = _source
    st.session_state.workflow = CaseWorkflow(
        capture=CaptureController(_source, mime_type="audio/wav", filename="recording.wav"),
        client=get_api_client(st.session_state.api_base_url),
        store=SessionStore(LocalStorage(settings.storage_path)),
        continuous=settings.continuous_mode,
    )

workflow: CaseWorkflow = st.session_state.workflow

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("\U0001f399\ufe0f Case Register")
    st.caption("Dictate, transcribe and organize by case")
    st.divider()
    st.session_state.api_base_url = st.text_input(
        "Backend API URL",
        value=st.session_state.api_base_url,
        help=f"URL of the Case Register FastAPI backend (default: {settings.api_base_url})",
    )
    workflow.client = get_api_client(st.session_state.api_base_url)

    _conn_ok, _conn_msg = workflow.client.check_connection()
    if _conn_ok:
        st.success(f"Backend: {_conn_msg}")
    else:
        st.error(f"Backend: {_conn_msg}")

    st.divider()
    render_case_panel(workflow)

# ---------------------------------------------------------------------------
# Main area
# ---------------------------------------------------------------------------
active_case = workflow.store.active_case
st.header("Case Register")
if active_case is not None:
    st.caption(f"Current Case: {active_case.title}")

render_flash()

col_controls, col_editor = st.columns([1, 2])
with col_controls:
    render_recorder(workflow, st.session_state.clip_source)
with col_editor:
    render_transcript_editor(workflow.store)
