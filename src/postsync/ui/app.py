"""PostSync — Streamlit application entry point.

Launch with::

    streamlit run src/postsync/ui/app.py
"""

from __future__ import annotations

import streamlit as st

from postsync.config import Settings
from postsync.logging_config import setup_logging
from postsync.ui.state import get_session
from postsync.ui.widgets import (
    render_connections,
    render_copy_check,
    render_editor_canvas,
    render_editor_controls,
    render_export_bar,
    render_generation_form,
    render_platform_previews,
    render_platform_selector,
    render_scheduler,
    render_team_invite,
    render_uploader,
)

# ---------------------------------------------------------------------------
# Page configuration (must be called first)
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="PostSync",
    page_icon="📮",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_data(show_spinner=False)
def _get_settings() -> Settings:
    """Load and cache application settings."""
    return Settings()


# ---------------------------------------------------------------------------
# Main application
# ---------------------------------------------------------------------------


def main() -> None:
    """Run the PostSync Streamlit application."""
    settings = _get_settings()
    setup_logging(settings.log_level)
    session = get_session(settings)

    # ---- Header ----
    st.title("📮 PostSync")
    st.caption("Create, resize and schedule one poster for every platform.")

    # ---- Sidebar: accounts and team ----
    render_connections(settings)
    render_team_invite(settings)

    # ---- Poster ----
    st.header("1. Poster")
    render_uploader(session, settings)
    render_generation_form(session, settings)

    if session.poster is None:
        st.info("Upload or generate a poster to get started.", icon="🖼️")
    else:
        render_platform_previews(session)

        # ---- Editor ----
        st.divider()
        st.header("2. Edit & resize")
        render_editor_controls(session, settings)
        render_editor_canvas(session)

        col_targets, col_export = st.columns([1, 2])
        with col_targets:
            render_platform_selector(session)
        with col_export:
            render_export_bar(session)

    # ---- Caption ----
    st.divider()
    st.header("3. Caption")
    render_copy_check(session)

    # ---- Schedule ----
    st.divider()
    st.header("4. Schedule")
    render_scheduler(session)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
