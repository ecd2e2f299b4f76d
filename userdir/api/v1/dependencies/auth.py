"""
Session authentication dependencies.

The session token travels in a request header (`session.header_name`).
Missing, blank, unknown and expired tokens all yield Unauthenticated.
"""

from fastapi import Depends, Request

from userdir.core.config import Settings
from userdir.core.container import (
    get_request_context_dep,
    get_session_service_dep,
    get_settings_dep,
)
from userdir.core.context import RequestContext
from userdir.core.errors import NotFoundError, UnauthenticatedError
from userdir.models.session import Session
from userdir.services.session_service import SessionService


def get_session_token(
    request: Request,
    settings: Settings = Depends(get_settings_dep),
) -> str:
    """
    Read the session token from the request headers.

    Raises:
        UnauthenticatedError: If the header is missing or blank.
    """
    token = request.headers.get(settings.session.header_name)
    if token is None:
        raise UnauthenticatedError("Missing session metadata")
    token = token.strip()
    if not token:
        raise UnauthenticatedError("Invalid session id")
    return token


async def get_current_session(
    token: str = Depends(get_session_token),
    ctx: RequestContext = Depends(get_request_context_dep),
    sessions: SessionService = Depends(get_session_service_dep),
) -> Session:
    """
    Resolve the live session for the request.

    Raises:
        UnauthenticatedError: If the session does not exist or has expired.
    """
    try:
        return await sessions.get_session(ctx, token)
    except NotFoundError as e:
        raise UnauthenticatedError("Session expired or not found") from e
