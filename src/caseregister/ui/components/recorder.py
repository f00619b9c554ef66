"""
Recorder component: captures a clip, transcribes it, appends it to the case.

``st.audio_input()`` hands over each recording as one WAV clip; the clip
is pushed through the ``ClipSource`` so it takes the same capture path a
streaming microphone would.
"""

import logging

import streamlit as st

from caseregister.core.exceptions import CaseRegisterError
from caseregister.services.audio.capture import CaptureState, ClipSource
from caseregister.ui.api_client import APIError
from caseregister.ui.utils import flash
from caseregister.ui.workflow import CaseWorkflow

logger = logging.getLogger(__name__)


def _describe(exc: APIError) -> str:
    if exc.category == "server":
        return f"Server error: {exc.message}"
    if exc.category == "no_response":
        return exc.message
    return f"Error: {exc.message}"


def _process_clip(workflow: CaseWorkflow, source: ClipSource, audio_bytes: bytes) -> None:
    """Run one clip through capture -> transcription -> session store."""
    try:
        if workflow.capture.state == CaptureState.idle:
            workflow.start_recording()
        elif workflow.capture.state == CaptureState.paused:
            workflow.resume_recording()
        source.push(audio_bytes)
        text = workflow.stop_and_transcribe()
    except APIError as exc:
        logger.warning("Transcription error (%s): %s", exc.category, exc.message)
        flash("error", _describe(exc))
        return
    except CaseRegisterError as exc:
        flash("error", exc.detail)
        return

    if text is None:
        flash("error", "No audio recorded. Please record some audio first.")
    else:
        flash("success", "Transcription added successfully!")


def render_recorder(workflow: CaseWorkflow, source: ClipSource) -> None:
    """Render the audio input widget and the continuous-mode toggle."""
    workflow.continuous = st.toggle(
        "Continuous mode",
        value=workflow.continuous,
        help="Keep recording into the same case after each transcription.",
    )

    if workflow.store.active_case is None:
        st.info("No active case. Transcripts will only go to the editor. Create a case to keep them.")

    audio = st.audio_input("Record", disabled=workflow.is_transcribing)
    if audio is None:
        return

    # Streamlit re-runs the script on every interaction; only process new clips
    clip_id = getattr(audio, "file_id", None) or hash(audio.getvalue())
    if st.session_state.get("_last_clip_id") == clip_id:
        return
    st.session_state["_last_clip_id"] = clip_id

    with st.spinner("Processing speech..."):
        _process_clip(workflow, source, audio.getvalue())
    st.rerun()
