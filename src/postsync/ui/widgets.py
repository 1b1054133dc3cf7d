"""Reusable Streamlit UI components.

Each function renders a self-contained section of the interface.
Business logic is kept out: widgets read the ``ComposerSession`` and call
its methods; core modules do the work.
"""

from __future__ import annotations

import datetime
import secrets

import streamlit as st
from PIL import Image
from streamlit_image_comparison import image_comparison

from postsync.config import Settings
from postsync.core.copywriting import can_analyze, caption_stats
from postsync.core.export import package_zip
from postsync.core.generation import (
    EXAMPLE_PROMPTS,
    STYLE_PRESETS,
    append_style,
    generate_poster,
)
from postsync.core.oauth import OAUTH_PLATFORMS, ConnectionStatus, OAuthConnection
from postsync.core.scheduling import can_schedule, missing_requirements
from postsync.core.sources import load_upload
from postsync.errors import ExternalServiceError, NotReadyError, ValidationError
from postsync.functions.team_invitation import handle_invitation
from postsync.schemas import ADJUSTMENT_BOUNDS, ExportFormat, FilterPreset
from postsync.session import ComposerSession
from postsync.ui.state import StateKey, get_state, set_state

_SLIDER_KEYS = {
    "brightness": "adj_brightness",
    "contrast": "adj_contrast",
    "saturation": "adj_saturation",
}

_PRESET_LABELS = {
    FilterPreset.NONE: "None",
    FilterPreset.VIVID: "Vivid",
    FilterPreset.BW: "B&W",
    FilterPreset.VINTAGE: "Vintage",
    FilterPreset.COOL: "Cool",
}

_PREVIEW_PLATFORMS = {
    "Instagram": (1080, 1080),
    "LinkedIn": (1200, 627),
    "Twitter": (1200, 675),
    "Facebook": (1200, 630),
}


def show_validation(exc: ValidationError) -> None:
    """Inline, self-dismissing message for rejected input."""
    st.toast(str(exc), icon="⚠️")


def _on_white(image: Image.Image) -> Image.Image:
    """Flatten an RGBA image onto white for display."""
    rgba = image.convert("RGBA")
    white_bg = Image.new("RGB", rgba.size, (255, 255, 255))
    white_bg.paste(rgba, mask=rgba.getchannel("A"))
    return white_bg


# ---------------------------------------------------------------------------
# Poster sources
# ---------------------------------------------------------------------------


def render_uploader(session: ComposerSession, settings: Settings) -> None:
    """Render the poster upload widget and load new files into *session*."""
    uploaded = st.file_uploader(
        "Upload your poster",
        type=settings.supported_formats,
        help=f"Supports: JPG, PNG, WebP (Max {settings.max_upload_mb:.0f}MB)",
    )
    if uploaded is None or get_state(StateKey.UPLOAD_ID) == uploaded.file_id:
        return

    set_state(StateKey.UPLOAD_ID, uploaded.file_id)
    try:
        image = load_upload(uploaded.getvalue(), uploaded.type, settings, uploaded.name)
    except ValidationError as exc:
        show_validation(exc)
        return
    session.set_poster(image, origin="upload")
    _clear_editor_widgets(session)
    set_state(StateKey.EXPORT_RESULTS, None)


def _use_example(prompt: str) -> None:
    st.session_state[StateKey.GENERATE_PROMPT.value] = prompt


def _on_style_change(settings: Settings) -> None:
    """Add the chosen style to the prompt, once."""
    key = StateKey.GENERATE_PROMPT.value
    prompt = st.session_state.get(key, "")
    styled = append_style(prompt, st.session_state[StateKey.GENERATE_STYLE.value])
    if len(styled) <= settings.prompt_max_chars:
        st.session_state[key] = styled


def render_generation_form(session: ComposerSession, settings: Settings) -> None:
    """Render the AI poster generation form."""
    with st.expander("✨ Generate with AI"):
        cols = st.columns(len(EXAMPLE_PROMPTS))
        for i, (col, example) in enumerate(zip(cols, EXAMPLE_PROMPTS)):
            col.button(
                f"Example {i + 1}",
                help=example,
                on_click=_use_example,
                args=(example,),
                use_container_width=True,
            )

        prompt = st.text_area(
            "Describe your vision",
            key=StateKey.GENERATE_PROMPT.value,
            max_chars=settings.prompt_max_chars,
            placeholder=(
                "A vibrant sunset over mountains with an inspirational quote overlay "
                "about success. Use warm orange and purple colors."
            ),
        )
        style_name = st.selectbox(
            "Style",
            options=list(STYLE_PRESETS),
            key=StateKey.GENERATE_STYLE.value,
            on_change=_on_style_change,
            args=(settings,),
        )
        length = len(prompt.strip())
        st.caption(f"{length}/{settings.prompt_max_chars} characters "
                   f"(minimum {settings.prompt_min_chars})")

        if st.button(
            "Generate",
            type="primary",
            disabled=length < settings.prompt_min_chars,
        ):
            try:
                with st.spinner("Generating poster…"):
                    image = generate_poster(prompt, STYLE_PRESETS[style_name], settings)
            except ValidationError as exc:
                show_validation(exc)
                return
            except ExternalServiceError as exc:
                st.error(f"Failed to generate image. Please try again.\n\n{exc}")
                return
            session.set_poster(image, origin="generated")
            _clear_editor_widgets(session)
            set_state(StateKey.EXPORT_RESULTS, None)


def render_platform_previews(session: ComposerSession) -> None:
    """Show the current render stretched to common feed sizes."""
    rendered = session.engine.rendered
    if rendered is None:
        return
    preview = _on_white(rendered)
    tabs = st.tabs(list(_PREVIEW_PLATFORMS))
    for tab, (name, (width, height)) in zip(tabs, _PREVIEW_PLATFORMS.items()):
        with tab:
            st.image(
                preview.resize((width // 4, height // 4)),
                caption=f"{name} · {width}x{height}",
            )


# ---------------------------------------------------------------------------
# Editor
# ---------------------------------------------------------------------------


def _on_slider(session: ComposerSession, field: str) -> None:
    session.engine.set_adjustment(field, st.session_state[_SLIDER_KEYS[field]])


def _clear_editor_widgets(session: ComposerSession) -> None:
    """Drop editor widget values so they re-read the engine state."""
    for key in _SLIDER_KEYS.values():
        st.session_state.pop(key, None)
    st.session_state.pop(_preset_key(session), None)


def _preset_key(session: ComposerSession) -> str:
    return f"preset_{id(session.engine)}"


def _on_reset(session: ComposerSession) -> None:
    session.engine.reset()
    _clear_editor_widgets(session)


def render_editor_controls(session: ComposerSession, settings: Settings) -> None:
    """Render adjustment sliders and preset buttons in the sidebar."""
    engine = session.engine
    state = engine.state
    lo, hi = ADJUSTMENT_BOUNDS

    st.sidebar.header("Editing tools")
    for field, label in (
        ("brightness", "Brightness"),
        ("contrast", "Contrast"),
        ("saturation", "Saturation"),
    ):
        st.sidebar.slider(
            label,
            min_value=lo,
            max_value=hi,
            value=getattr(state, field),
            step=1,
            key=_SLIDER_KEYS[field],
            on_change=_on_slider,
            args=(session, field),
        )

    st.sidebar.radio(
        "Filter preset",
        options=list(FilterPreset),
        format_func=_PRESET_LABELS.get,
        index=list(FilterPreset).index(state.filter_preset),
        horizontal=True,
        key=_preset_key(session),
        on_change=lambda: engine.apply_filter_preset(
            st.session_state[_preset_key(session)]
        ),
    )

    st.sidebar.button(
        "Reset all",
        on_click=_on_reset,
        args=(session,),
        use_container_width=True,
    )


def render_editor_canvas(session: ComposerSession) -> None:
    """Render the before/after comparison and the zoom/rotate toolbar."""
    engine = session.engine
    if engine.rendered is None:
        return

    _, center, _ = st.columns([1, 3, 1])
    with center:
        image_comparison(
            img1=_on_white(engine.source),
            img2=_on_white(engine.rendered),
            label1="Original",
            label2="Edited",
            width=1024,
            starting_position=50,
            show_labels=True,
            make_responsive=True,
            in_memory=True,
        )

        zoom_out, zoom_label, zoom_in, rotate = st.columns(4)
        zoom_out.button("➖ Zoom out", on_click=engine.zoom_out, use_container_width=True)
        zoom_label.markdown(f"**{round(engine.state.zoom * 100)}%**")
        zoom_in.button("➕ Zoom in", on_click=engine.zoom_in, use_container_width=True)
        rotate.button("↻ Rotate", on_click=engine.rotate90, use_container_width=True)


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def render_platform_selector(session: ComposerSession) -> None:
    """Render platform size checkboxes and the custom size inputs."""
    st.subheader("Platform sizes")
    st.checkbox(
        "Select all",
        value=all(t.enabled for t in session.targets),
        on_change=session.toggle_all_targets,
    )
    for index, target in enumerate(session.targets):
        st.checkbox(
            f"{target.label} — {target.width}x{target.height}",
            value=target.enabled,
            key=f"target_{index}_{target.enabled}",
            on_change=session.toggle_target,
            args=(index,),
        )

    st.caption("Custom size")
    col_w, col_h = st.columns(2)
    width = col_w.text_input("Width", value=session.custom_width, placeholder="Width")
    height = col_h.text_input("Height", value=session.custom_height, placeholder="Height")
    if (width, height) != (session.custom_width, session.custom_height):
        session.set_custom_size(width, height)


def render_export_bar(session: ComposerSession) -> None:
    """Render format/quality options and the download buttons."""
    col_fmt, col_quality = st.columns(2)
    fmt = col_fmt.selectbox(
        "Format",
        options=list(ExportFormat),
        format_func=lambda f: f.value.upper(),
        index=list(ExportFormat).index(session.export_request.format),
    )
    quality = session.export_request.quality
    if fmt is ExportFormat.JPG:
        quality = col_quality.slider("Quality", 1, 100, value=quality)
    if (fmt, quality) != (session.export_request.format, session.export_request.quality):
        session.set_export_options(fmt, quality)

    if st.button("Prepare download", type="primary", use_container_width=True):
        try:
            with st.spinner("Exporting…"):
                set_state(StateKey.EXPORT_RESULTS, session.export())
        except NotReadyError:
            return
        except ValidationError as exc:
            show_validation(exc)
            return

    results = get_state(StateKey.EXPORT_RESULTS)
    if not results:
        return

    for result in results:
        st.download_button(
            label=f"⬇ {result.filename}",
            data=result.data,
            file_name=result.filename,
            mime=result.mime_type,
            use_container_width=True,
        )
    if len(results) > 1:
        st.download_button(
            label="⬇ Download all (zip)",
            data=package_zip(results),
            file_name="postsync-export.zip",
            mime="application/zip",
            use_container_width=True,
        )


# ---------------------------------------------------------------------------
# Copywriting
# ---------------------------------------------------------------------------


def render_copy_check(session: ComposerSession) -> None:
    """Render the caption editor and the heuristic copy check."""
    caption = st.text_area(
        "Your caption",
        value=session.caption,
        placeholder="Write your post caption here... Make it engaging!",
    )
    session.set_caption(caption)
    chars, words = caption_stats(caption)
    st.caption(f"{chars} characters • {words} words")

    if st.button("Check copy", disabled=not can_analyze(caption)):
        with st.spinner("Analyzing…"):
            session.analyze_caption()

    feedback = session.feedback
    if feedback is None:
        return

    col_score, col_tone, col_sentiment = st.columns(3)
    col_score.metric("Score", f"{feedback.score}/100")
    col_tone.metric("Tone", feedback.tone)
    col_sentiment.metric("Sentiment", feedback.sentiment)
    st.info(feedback.cta_suggestion)
    for suggestion in feedback.suggestions:
        st.markdown(f"- {suggestion}")


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------


def render_scheduler(session: ComposerSession) -> None:
    """Render platform, date and time pickers and the schedule button."""
    st.subheader("Schedule post")

    cols = st.columns(len(session.platforms))
    for col, platform in zip(cols, session.platforms):
        col.checkbox(
            platform.name,
            value=platform.selected,
            key=f"publish_{platform.name}_{platform.selected}",
            on_change=session.toggle_platform,
            args=(platform.name,),
        )

    today = datetime.date.today()
    col_date, col_time = st.columns(2)
    date = col_date.date_input("Date", value=session.schedule_date, min_value=today)
    time = col_time.time_input("Time", value=session.schedule_time)
    if (date, time) != (session.schedule_date, session.schedule_time):
        session.set_schedule(date, time)

    draft = session.schedule_draft()
    if st.button("Schedule post", type="primary", disabled=not can_schedule(draft)):
        try:
            post = session.schedule(today)
        except ValidationError as exc:
            show_validation(exc)
        else:
            st.toast("Post scheduled!", icon="✅")
            st.success(
                f"Scheduled for {post.scheduled_at:%a, %b %d, %Y %I:%M %p} "
                f"on {', '.join(post.platforms)}."
            )

    missing = missing_requirements(draft)
    if missing:
        st.caption(" • ".join(missing))


# ---------------------------------------------------------------------------
# Sidebar: accounts and team
# ---------------------------------------------------------------------------


def render_connections(settings: Settings) -> None:
    """Render "connect" links for each OAuth platform."""
    connections: dict[str, OAuthConnection] = get_state(StateKey.CONNECTIONS) or {}
    with st.sidebar.expander("Connected platforms"):
        for name in OAUTH_PLATFORMS:
            connection = connections.setdefault(name, OAuthConnection(name, settings))
            if connection.status is ConnectionStatus.CONNECTED:
                st.markdown(f"**{name}** — connected")
                continue
            if connection.status is ConnectionStatus.PENDING_AUTHORIZATION:
                url = connection.authorization_url
            else:
                url = connection.begin()
            st.link_button(
                f"Connect {name}",
                url,
                use_container_width=True,
            )
    set_state(StateKey.CONNECTIONS, connections)


def render_team_invite(settings: Settings) -> None:
    """Render the team invitation form in the sidebar."""
    with st.sidebar.expander("Invite teammate"):
        with st.form("invite_form", clear_on_submit=True):
            email = st.text_input("Email")
            role = st.selectbox("Role", options=["editor", "viewer", "admin"])
            submitted = st.form_submit_button("Send invitation")
        if submitted:
            payload, status = handle_invitation(
                {
                    "invitee_email": email.strip(),
                    "inviter_name": "",
                    "invite_token": secrets.token_urlsafe(24),
                    "role": role,
                },
                None,
                settings,
            )
            if status != 200:
                st.toast(payload["error"], icon="⚠️")
            else:
                set_state(StateKey.INVITE_URL, payload["invite_url"])
        invite_url = get_state(StateKey.INVITE_URL)
        if invite_url:
            st.code(invite_url, language=None)
