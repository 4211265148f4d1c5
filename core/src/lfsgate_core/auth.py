from __future__ import annotations

import base64
import binascii
import logging
import secrets
from collections.abc import AsyncIterator, Callable
from typing import Final

from fastapi import HTTPException, Request

from lfsgate_core.config import AdminConfig

AUTHORIZATION_HEADER: Final[str] = "Authorization"
MGMT_REALM_CHALLENGE: Final[str] = "Basic realm=mgmt"

logger = logging.getLogger(__name__)


def extract_basic_credentials(request: Request) -> tuple[str, str] | None:
    """Return (username, password) from a Basic Authorization header.

    A missing, non-Basic or undecodable header counts as no credentials.
    """

    auth = request.headers.get(AUTHORIZATION_HEADER)
    if not auth:
        return None

    scheme, _, param = auth.partition(" ")
    if scheme.lower() != "basic":
        return None

    try:
        decoded = base64.b64decode(param.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


def check_basic_auth(admin: AdminConfig, credentials: tuple[str, str] | None) -> bool:
    if credentials is None:
        return False

    user, password = credentials
    user_ok = secrets.compare_digest(user.encode("utf-8"), admin.user.encode("utf-8"))
    pass_ok = secrets.compare_digest(password.encode("utf-8"), admin.password.encode("utf-8"))
    return user_ok and pass_ok


def build_admin_gate(admin: AdminConfig) -> Callable[[Request], AsyncIterator[None]]:
    """Build the dependency guarding every /mgmt route.

    - Admin user or password unset: 404, so an unconfigured server does not
      advertise the management surface.
    - Missing/wrong Basic credentials: 401 with a ``Basic realm=mgmt`` challenge.
    - Otherwise the route runs and the access is logged afterwards.

    Every request re-authenticates; no session or token is issued.
    """

    async def require_admin(request: Request) -> AsyncIterator[None]:
        if not admin.enabled:
            raise HTTPException(status_code=404, detail="Not Found")

        credentials = extract_basic_credentials(request)
        if not check_basic_auth(admin, credentials):
            user = credentials[0] if credentials is not None else ""
            if not user.strip():
                # Browsers probe without credentials first; nothing to worry about.
                logger.debug("mgmt auth challenge: %s %s", request.method, request.url.path)
            else:
                logger.warning(
                    "mgmt auth failed for user %r: %s %s",
                    user,
                    request.method,
                    request.url.path,
                )
            raise HTTPException(
                status_code=401,
                detail="Unauthorized",
                headers={"WWW-Authenticate": MGMT_REALM_CHALLENGE},
            )

        yield

        logger.info("mgmt access: %s %s - 200", request.method, request.url.path)

    return require_admin
