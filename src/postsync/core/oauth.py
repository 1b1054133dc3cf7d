"""OAuth "connect platform" flow.

Only the outbound leg is implemented: building the authorization URL and
tracking a connection through its states. Exchanging the returned code for
a token is left to the caller through ``mark_connected``/``mark_failed``.

States::

    DISCONNECTED → PENDING_AUTHORIZATION → EXCHANGING → CONNECTED
                                                      ↘ FAILED
"""

from __future__ import annotations

import base64
import hashlib
import logging
import secrets
from enum import Enum
from urllib.parse import urlencode

from pydantic import BaseModel

from postsync.config import Settings
from postsync.errors import OAuthStateError

logger = logging.getLogger(__name__)


class OAuthPlatform(BaseModel):
    """Static OAuth endpoints and scopes of one platform."""

    model_config = {"frozen": True}

    name: str
    slug: str
    auth_url: str
    token_url: str
    scopes: tuple[str, ...]


OAUTH_PLATFORMS: dict[str, OAuthPlatform] = {
    p.name: p
    for p in (
        OAuthPlatform(
            name="X",
            slug="x",
            auth_url="https://twitter.com/i/oauth2/authorize",
            token_url="https://api.twitter.com/2/oauth2/token",
            scopes=("tweet.read", "users.read", "offline.access"),
        ),
        OAuthPlatform(
            name="LinkedIn",
            slug="linkedin",
            auth_url="https://www.linkedin.com/oauth/v2/authorization",
            token_url="https://www.linkedin.com/oauth/v2/accessToken",
            scopes=("r_liteprofile", "r_emailaddress"),
        ),
        OAuthPlatform(
            name="Facebook",
            slug="facebook",
            auth_url="https://www.facebook.com/v18.0/dialog/oauth",
            token_url="https://graph.facebook.com/v18.0/oauth/access_token",
            scopes=("public_profile", "email"),
        ),
        OAuthPlatform(
            name="Instagram",
            slug="instagram",
            auth_url="https://api.instagram.com/oauth/authorize",
            token_url="https://api.instagram.com/oauth/access_token",
            scopes=("user_profile", "user_media"),
        ),
        OAuthPlatform(
            name="YouTube",
            slug="youtube",
            auth_url="https://accounts.google.com/o/oauth2/v2/auth",
            token_url="https://oauth2.googleapis.com/token",
            scopes=(
                "https://www.googleapis.com/auth/youtube.readonly",
                "https://www.googleapis.com/auth/userinfo.profile",
            ),
        ),
        OAuthPlatform(
            name="TikTok",
            slug="tiktok",
            auth_url="https://www.tiktok.com/v2/auth/authorize",
            token_url="https://open.tiktokapis.com/v2/oauth/token",
            scopes=("user.info.basic",),
        ),
    )
}


def _platform(name: str) -> OAuthPlatform:
    try:
        return OAUTH_PLATFORMS[name]
    except KeyError:
        raise ValueError(f"Unknown platform: {name}") from None


def redirect_uri(name: str, settings: Settings) -> str:
    base = settings.oauth_redirect_base.rstrip("/")
    return f"{base}/oauth/callback/{_platform(name).slug}"


def pkce_challenge(verifier: str) -> str:
    """S256 code challenge for a PKCE code verifier."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_oauth_url(
    name: str,
    state: str,
    settings: Settings,
    code_verifier: str | None = None,
) -> str:
    """Build the authorization URL the user is sent to.

    Args:
        name: Platform name, a key of ``OAUTH_PLATFORMS``.
        state: Opaque value echoed back on the callback.
        settings: Application settings (client ids, redirect base).
        code_verifier: PKCE verifier; required by X only.

    Raises:
        ValueError: If the platform is unknown.
    """
    platform = _platform(name)
    params = {
        "client_id": settings.oauth_client_ids.get(name, ""),
        "redirect_uri": redirect_uri(name, settings),
        "response_type": "code",
        "scope": " ".join(platform.scopes),
        "state": state,
    }
    if name == "X":
        params["code_challenge"] = pkce_challenge(code_verifier or secrets.token_urlsafe(48))
        params["code_challenge_method"] = "S256"
    if name == "YouTube":
        params["access_type"] = "offline"
        params["prompt"] = "consent"
    return f"{platform.auth_url}?{urlencode(params)}"


class ConnectionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    PENDING_AUTHORIZATION = "pending_authorization"
    EXCHANGING = "exchanging"
    CONNECTED = "connected"
    FAILED = "failed"


class OAuthConnection:
    """Tracks one platform connection through the authorization flow.

    Args:
        platform: Platform name, a key of ``OAUTH_PLATFORMS``.
        settings: Application settings.
    """

    def __init__(self, platform: str, settings: Settings) -> None:
        _platform(platform)
        self.platform = platform
        self._settings = settings
        self.status = ConnectionStatus.DISCONNECTED
        self.error: str | None = None
        self.code: str | None = None
        self.authorization_url: str | None = None
        self._state: str | None = None
        self.code_verifier: str | None = None

    def begin(self) -> str:
        """Start authorization and return the URL to navigate to."""
        self._state = secrets.token_urlsafe(24)
        self.code_verifier = secrets.token_urlsafe(48) if self.platform == "X" else None
        self.status = ConnectionStatus.PENDING_AUTHORIZATION
        self.error = None
        self.code = None
        logger.info("OAuth authorization started for %s", self.platform)
        self.authorization_url = generate_oauth_url(
            self.platform, self._state, self._settings, self.code_verifier
        )
        return self.authorization_url

    def receive_callback(self, state: str, code: str) -> None:
        """Accept the redirect back from the provider.

        Raises:
            OAuthStateError: If no authorization is pending or *state* does
                not match the one sent. The connection moves to FAILED.
        """
        if self.status is not ConnectionStatus.PENDING_AUTHORIZATION:
            raise OAuthStateError(f"No authorization pending for {self.platform}.")
        if not self._state or not secrets.compare_digest(state, self._state):
            self.mark_failed("state mismatch")
            raise OAuthStateError(f"OAuth state mismatch for {self.platform}.")
        self.code = code
        self.status = ConnectionStatus.EXCHANGING

    def mark_connected(self) -> None:
        if self.status is not ConnectionStatus.EXCHANGING:
            raise OAuthStateError(f"{self.platform} is not exchanging a code.")
        self.status = ConnectionStatus.CONNECTED
        self._state = None

    def mark_failed(self, reason: str) -> None:
        logger.warning("OAuth for %s failed: %s", self.platform, reason)
        self.status = ConnectionStatus.FAILED
        self.error = reason
        self._state = None

    def disconnect(self) -> None:
        self.status = ConnectionStatus.DISCONNECTED
        self.error = None
        self.code = None
        self._state = None
