"""
Case management sidebar: create, rename and switch cases.
"""

import streamlit as st

from caseregister.core.exceptions import CaseNotFoundError
from caseregister.ui.utils import flash
from caseregister.ui.workflow import CaseWorkflow


def _load(workflow: CaseWorkflow, case_id: str) -> None:
    try:
        case = workflow.store.load_case(case_id)
        flash("success", f"Loaded case: {case.title}")
    except CaseNotFoundError as exc:
        flash("error", exc.detail)


def render_case_panel(workflow: CaseWorkflow) -> None:
    """Render the case list and case actions."""
    store = workflow.store
    active = store.active_case

    st.subheader("Case Management")
    if st.button("New Case", use_container_width=True, disabled=workflow.is_transcribing):
        case = store.create_case()
        flash("success", f"New case created: {case.title}")
        st.rerun()

    if active is not None:
        new_title = st.text_input("Case title", value=active.title, key=f"title_{active.id}")
        if st.button("Rename", use_container_width=True) and new_title != active.title:
            try:
                store.rename_case(active.id, new_title)
                flash("success", f"Case renamed to: {new_title.strip()}")
            except ValueError as exc:
                flash("error", str(exc))
            st.rerun()

    if not store.cases:
        st.caption("No cases yet.")
        return

    st.markdown("**Your Cases:**")
    for case in reversed(store.cases):
        label = f"{case.title} · {case.last_updated:%Y-%m-%d}"
        st.button(
            label,
            key=f"case_{case.id}",
            use_container_width=True,
            type="primary" if case.id == store.active_case_id else "secondary",
            on_click=_load,
            args=(workflow, case.id),
        )
