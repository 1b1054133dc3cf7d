"""Tests for postsync.core.oauth."""

from urllib.parse import parse_qs, urlparse

import pytest

from postsync.config import Settings
from postsync.core.oauth import (
    OAUTH_PLATFORMS,
    ConnectionStatus,
    OAuthConnection,
    generate_oauth_url,
    pkce_challenge,
    redirect_uri,
)
from postsync.errors import OAuthStateError


@pytest.fixture
def oauth_settings() -> Settings:
    return Settings(
        _env_file=None,
        oauth_redirect_base="https://app.example.com/",
        oauth_client_ids={"X": "x-client", "YouTube": "yt-client"},
    )


def _query(url: str) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}


# ---------------------------------------------------------------------------
# URL building
# ---------------------------------------------------------------------------


class TestGenerateOauthUrl:
    """Validate authorization URLs per platform."""

    def test_redirect_uri(self, oauth_settings: Settings) -> None:
        assert redirect_uri("LinkedIn", oauth_settings) == (
            "https://app.example.com/oauth/callback/linkedin"
        )

    def test_common_parameters(self, oauth_settings: Settings) -> None:
        url = generate_oauth_url("Facebook", "s1", oauth_settings)
        assert url.startswith(OAUTH_PLATFORMS["Facebook"].auth_url + "?")
        params = _query(url)
        assert params["response_type"] == "code"
        assert params["state"] == "s1"
        assert params["scope"] == "public_profile email"
        assert params["redirect_uri"] == "https://app.example.com/oauth/callback/facebook"
        assert "code_challenge" not in params

    def test_x_uses_pkce(self, oauth_settings: Settings) -> None:
        params = _query(generate_oauth_url("X", "s2", oauth_settings, "verifier"))
        assert params["client_id"] == "x-client"
        assert params["code_challenge"] == pkce_challenge("verifier")
        assert params["code_challenge_method"] == "S256"

    def test_youtube_requests_offline_access(self, oauth_settings: Settings) -> None:
        params = _query(generate_oauth_url("YouTube", "s3", oauth_settings))
        assert params["access_type"] == "offline"
        assert params["prompt"] == "consent"

    def test_unknown_platform(self, oauth_settings: Settings) -> None:
        with pytest.raises(ValueError, match="Unknown platform"):
            generate_oauth_url("MySpace", "s", oauth_settings)

    def test_pkce_challenge_known_vector(self) -> None:
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert pkce_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


# ---------------------------------------------------------------------------
# Connection state machine
# ---------------------------------------------------------------------------


class TestOAuthConnection:
    """Validate connection state transitions."""

    def test_happy_path(self, oauth_settings: Settings) -> None:
        connection = OAuthConnection("X", oauth_settings)
        assert connection.status is ConnectionStatus.DISCONNECTED

        url = connection.begin()
        assert connection.status is ConnectionStatus.PENDING_AUTHORIZATION
        assert connection.authorization_url == url
        state = _query(url)["state"]
        assert _query(url)["code_challenge"] == pkce_challenge(connection.code_verifier)

        connection.receive_callback(state, "auth-code")
        assert connection.status is ConnectionStatus.EXCHANGING
        assert connection.code == "auth-code"

        connection.mark_connected()
        assert connection.status is ConnectionStatus.CONNECTED

    def test_state_mismatch_fails(self, oauth_settings: Settings) -> None:
        connection = OAuthConnection("LinkedIn", oauth_settings)
        connection.begin()
        with pytest.raises(OAuthStateError):
            connection.receive_callback("forged", "code")
        assert connection.status is ConnectionStatus.FAILED
        assert connection.error == "state mismatch"

    def test_callback_without_begin(self, oauth_settings: Settings) -> None:
        connection = OAuthConnection("Facebook", oauth_settings)
        with pytest.raises(OAuthStateError):
            connection.receive_callback("any", "code")
        assert connection.status is ConnectionStatus.DISCONNECTED

    def test_mark_connected_requires_exchange(self, oauth_settings: Settings) -> None:
        connection = OAuthConnection("Facebook", oauth_settings)
        connection.begin()
        with pytest.raises(OAuthStateError):
            connection.mark_connected()

    def test_begin_again_uses_fresh_state(self, oauth_settings: Settings) -> None:
        connection = OAuthConnection("TikTok", oauth_settings)
        first = _query(connection.begin())["state"]
        second = _query(connection.begin())["state"]
        assert first != second
        with pytest.raises(OAuthStateError):
            connection.receive_callback(first, "code")

    def test_only_x_gets_a_verifier(self, oauth_settings: Settings) -> None:
        connection = OAuthConnection("Instagram", oauth_settings)
        connection.begin()
        assert connection.code_verifier is None

    def test_disconnect(self, oauth_settings: Settings) -> None:
        connection = OAuthConnection("YouTube", oauth_settings)
        connection.begin()
        connection.mark_failed("user denied")
        connection.disconnect()
        assert connection.status is ConnectionStatus.DISCONNECTED
        assert connection.error is None

    def test_unknown_platform(self, oauth_settings: Settings) -> None:
        with pytest.raises(ValueError):
            OAuthConnection("MySpace", oauth_settings)
