import logging
import os
from typing import Annotated

from fastapi import Header, Request

from db import SessionLocal
from errors import InternalError, UnauthorizedError
from schemas.users import UserOut
from users import find_or_create_user

logger = logging.getLogger("updrill")


def require_admin(
    x_admin_token: Annotated[str | None, Header(alias="x-admin-token")] = None,
) -> None:
    """
    Strict admin-only guard. Requires the X-Admin-Token header to match ADMIN_TOKEN.
    """
    expected = os.getenv("ADMIN_TOKEN", "")
    if not expected:
        logger.error("admin route called but ADMIN_TOKEN is not configured")
        raise InternalError()
    if x_admin_token != expected:
        raise UnauthorizedError()


def optional_user(
    request: Request,
    x_user_email: Annotated[str | None, Header(alias="x-user-email")] = None,
    x_user_name: Annotated[str | None, Header(alias="x-user-name")] = None,
    x_user_picture: Annotated[str | None, Header(alias="x-user-picture")] = None,
    x_auth_provider: Annotated[str | None, Header(alias="x-auth-provider")] = None,
    x_auth_subject: Annotated[str | None, Header(alias="x-auth-subject")] = None,
    x_api_key: Annotated[str | None, Header(alias="x-api-key")] = None,
) -> UserOut | None:
    """
    Identity forwarded by the auth gateway after the OAuth handshake.

    When GATEWAY_API_KEY is configured the identity headers are only trusted
    alongside a matching X-Api-Key; otherwise the request is anonymous.
    """
    expected_key = os.getenv("GATEWAY_API_KEY", "")
    if expected_key and x_api_key != expected_key:
        return None
    if not x_user_email or not x_user_email.strip():
        return None

    with SessionLocal() as db:
        user = find_or_create_user(
            db,
            email=x_user_email,
            name=x_user_name or x_user_email,
            picture=x_user_picture,
            provider=x_auth_provider,
            provider_id=x_auth_subject,
        )
        out = UserOut.model_validate(user)
    # picked up by the access log in main.py
    request.state.user_id = out.id
    return out


def require_user(
    request: Request,
    x_user_email: Annotated[str | None, Header(alias="x-user-email")] = None,
    x_user_name: Annotated[str | None, Header(alias="x-user-name")] = None,
    x_user_picture: Annotated[str | None, Header(alias="x-user-picture")] = None,
    x_auth_provider: Annotated[str | None, Header(alias="x-auth-provider")] = None,
    x_auth_subject: Annotated[str | None, Header(alias="x-auth-subject")] = None,
    x_api_key: Annotated[str | None, Header(alias="x-api-key")] = None,
) -> UserOut:
    user = optional_user(
        request,
        x_user_email,
        x_user_name,
        x_user_picture,
        x_auth_provider,
        x_auth_subject,
        x_api_key,
    )
    if user is None:
        raise UnauthorizedError()
    return user
