"""Tests for postsync.session."""

import datetime

import pytest
from PIL import Image

from postsync.config import Settings
from postsync.errors import NotReadyError, ValidationError
from postsync.schemas import ExportFormat
from postsync.session import ComposerSession


@pytest.fixture
def session(settings: Settings) -> ComposerSession:
    return ComposerSession(settings)


@pytest.fixture
def events(session: ComposerSession) -> list[str]:
    seen: list[str] = []
    session.on_change(lambda _session, event: seen.append(event))
    return seen


class TestPoster:
    """Validate poster loading and change notifications."""

    def test_starts_empty(self, session: ComposerSession) -> None:
        assert session.poster is None
        assert session.engine.is_ready() is False
        assert session.export_request.quality == 90

    def test_set_poster_renders(self, session, events, rgb_image: Image.Image) -> None:
        session.set_poster(rgb_image, origin="generated")
        assert session.poster_origin == "generated"
        assert session.engine.rendered.size == rgb_image.size
        assert events == ["render", "poster"]

    def test_new_poster_resets_adjustments(self, session, rgb_image) -> None:
        session.set_poster(rgb_image)
        session.engine.rotate90()
        session.set_poster(rgb_image)
        assert session.engine.state.is_default()

    def test_engine_renders_are_announced(self, session, events, rgb_image) -> None:
        session.set_poster(rgb_image)
        events.clear()
        session.engine.set_adjustment("brightness", 10)
        assert events == ["render"]

    def test_clear_poster(self, session, events, rgb_image) -> None:
        session.set_poster(rgb_image)
        session.clear_poster()
        assert session.poster is None
        assert events[-1] == "poster"


class TestExport:
    """Validate export through the session."""

    def test_export_without_poster(self, session: ComposerSession) -> None:
        with pytest.raises(NotReadyError):
            session.export()

    def test_native_export(self, session, rgb_image) -> None:
        session.set_poster(rgb_image)
        session.set_export_options("jpg", 70)
        results = session.export()
        assert [r.filename for r in results] == ["edited-image.jpg"]
        assert session.export_request.format is ExportFormat.JPG

    def test_selected_targets_and_custom(self, session, events, rgb_image) -> None:
        session.set_poster(rgb_image)
        session.toggle_target(0)
        session.set_custom_size("64", "32")
        results = session.export()
        assert [r.filename for r in results] == [
            "instagram-post-1080x1080.png",
            "custom-64x32.png",
        ]
        assert events.count("targets") == 2

    def test_half_filled_custom_alone_is_rejected(self, session, rgb_image) -> None:
        session.set_poster(rgb_image)
        session.set_custom_size("640", "")
        with pytest.raises(ValidationError, match="custom size"):
            session.export()

    def test_half_filled_custom_ignored_with_presets(self, session, rgb_image) -> None:
        session.set_poster(rgb_image)
        session.toggle_target(2)
        session.set_custom_size("abc", "100")
        assert [r.filename for r in session.export()] == ["facebook-1200x630.png"]

    def test_toggle_all(self, session, rgb_image) -> None:
        session.toggle_all_targets()
        assert all(t.enabled for t in session.targets)


class TestCaption:
    def test_set_caption_clears_feedback(self, session, events) -> None:
        session.set_caption("Check out our new launch!")
        feedback = session.analyze_caption()
        assert feedback.score == 75
        assert session.feedback is feedback
        session.set_caption("Something else")
        assert session.feedback is None
        assert events == ["caption", "feedback", "caption"]

    def test_unchanged_caption_is_silent(self, session, events) -> None:
        session.set_caption("same")
        session.set_caption("same")
        assert events == ["caption"]

    def test_analyze_blank(self, session) -> None:
        with pytest.raises(ValidationError):
            session.analyze_caption()


class TestSchedule:
    """Validate scheduling through the session."""

    def test_draft_reflects_session(self, session, rgb_image) -> None:
        assert session.schedule_draft().has_image is False
        session.set_poster(rgb_image)
        assert session.schedule_draft().has_image is True

    def test_schedule(self, session, events, rgb_image) -> None:
        today = datetime.date(2030, 1, 1)
        session.set_poster(rgb_image)
        session.set_caption("Launch day")
        session.set_schedule(today, datetime.time(18, 0))
        session.toggle_platform("Facebook")
        post = session.schedule(today=today)
        assert post.platforms == ["X", "LinkedIn", "Instagram"]
        assert session.scheduled_post is post
        assert events[-1] == "scheduled"

    def test_schedule_incomplete(self, session) -> None:
        with pytest.raises(ValidationError, match="Upload an image"):
            session.schedule(today=datetime.date(2030, 1, 1))
        assert session.scheduled_post is None

    def test_new_poster_clears_scheduled_post(self, session, rgb_image) -> None:
        today = datetime.date(2030, 1, 1)
        session.set_poster(rgb_image)
        session.set_caption("Launch day")
        session.set_schedule(today, datetime.time(8, 15))
        session.schedule(today=today)
        session.set_poster(rgb_image)
        assert session.scheduled_post is None
