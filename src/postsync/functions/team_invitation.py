"""Team invitation function.

No email is sent: the invitation is logged and the accept link returned so
the inviter can share it.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

from pydantic import ValidationError as PydanticValidationError

from postsync.config import Settings
from postsync.schemas import InvitationRequest

logger = logging.getLogger(__name__)


def build_invite_url(origin: str, token: str) -> str:
    return f"{origin.rstrip('/')}/accept-invite?{urlencode({'token': token})}"


def handle_invitation(
    body: Any,
    origin: str | None,
    settings: Settings,
) -> tuple[dict[str, Any], int]:
    """Process one invitation request body.

    Args:
        body: Decoded JSON request body.
        origin: ``Origin`` header of the request, if any.
        settings: Application settings (fallback origin).

    Returns:
        ``(payload, status)`` ready to be serialised as JSON.
    """
    if not isinstance(body, dict):
        return {"error": "Missing required fields"}, 400
    try:
        invitation = InvitationRequest(**body)
    except PydanticValidationError:
        return {"error": "Missing required fields"}, 400

    if not invitation.invitee_email or not invitation.invite_token:
        return {"error": "Missing required fields"}, 400

    invite_url = build_invite_url(
        origin or settings.invite_default_origin, invitation.invite_token
    )
    logger.info(
        "Team invitation: to=%s from=%s role=%s url=%s",
        invitation.invitee_email,
        invitation.inviter_name,
        invitation.role,
        invite_url,
    )
    return {
        "success": True,
        "message": "Invitation sent successfully",
        "invite_url": invite_url,
    }, 200
