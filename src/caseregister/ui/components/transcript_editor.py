"""
Transcript editor and .docx export.
"""

from datetime import datetime

import streamlit as st

from caseregister.core.exceptions import ExportError
from caseregister.services.storage.export import (
    DOCX_MIME_TYPE,
    export_filename,
    export_transcript,
)
from caseregister.services.storage.sessions import SessionStore
from caseregister.ui.utils import flash


def render_transcript_editor(store: SessionStore) -> None:
    """Render the editable transcript with Clear and Export actions."""
    st.subheader("Transcript")
    edited = st.text_area(
        "Transcript",
        value=store.transcript,
        height=320,
        placeholder="Transcribed text will appear here...",
        label_visibility="collapsed",
    )
    if edited != store.transcript:
        store.set_transcript(edited)

    col_clear, col_export = st.columns(2)
    with col_clear:
        if st.button("Clear", use_container_width=True, disabled=not store.transcript):
            store.clear_transcript()
            st.rerun()

    with col_export:
        active = store.active_case
        now = datetime.now()
        try:
            data = export_transcript(
                store.transcript,
                title=active.title if active else "Transcript",
                generated_at=now,
            )
        except ExportError as exc:
            st.error(f"{exc.detail}. Please try again.")
            return
        st.download_button(
            "Export as .docx",
            data=data,
            file_name=export_filename(now),
            mime=DOCX_MIME_TYPE,
            use_container_width=True,
            disabled=not store.transcript,
            on_click=flash,
            args=("success", "Document exported successfully!"),
        )
