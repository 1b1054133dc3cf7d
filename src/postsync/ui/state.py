"""Streamlit session state management.

Centralises all ``st.session_state`` keys and provides typed accessors
so that the rest of the UI layer never uses raw string keys. The only
long-lived object is the ``ComposerSession``; widgets read it and call its
methods instead of keeping their own copies of the poster or caption.
"""

from __future__ import annotations

from enum import Enum

import streamlit as st

from postsync.config import Settings
from postsync.session import ComposerSession


class StateKey(str, Enum):
    """All session state keys used by the application."""

    SESSION = "composer_session"
    UPLOAD_ID = "upload_id"
    GENERATE_PROMPT = "generate_prompt"
    GENERATE_STYLE = "generate_style"
    EXPORT_RESULTS = "export_results"
    CONNECTIONS = "oauth_connections"
    INVITE_URL = "invite_url"


def get_state(key: StateKey, default=None):
    """Retrieve a value from session state.

    Args:
        key: The state key to look up.
        default: Fallback value if the key is absent.
    """
    return st.session_state.get(key.value, default)


def set_state(key: StateKey, value) -> None:
    st.session_state[key.value] = value


def get_session(settings: Settings) -> ComposerSession:
    """Return this browser session's composer, creating it on first use."""
    session = get_state(StateKey.SESSION)
    if session is None:
        session = ComposerSession(settings)
        set_state(StateKey.SESSION, session)
    return session
