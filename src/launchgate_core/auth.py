from __future__ import annotations

from typing import Final

from fastapi import HTTPException, Request, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

TOKEN_HEADER: Final[str] = "X-LaunchGate-Token"

_bearer_scheme = HTTPBearer(auto_error=False)
_token_header_scheme = APIKeyHeader(name=TOKEN_HEADER, auto_error=False)


async def require_install_token(
    request: Request,
    bearer: HTTPAuthorizationCredentials | None = Security(_bearer_scheme),  # noqa: B008
    header_token: str | None = Security(_token_header_scheme),  # noqa: B008
) -> None:
    """Require the per-install token for /v1 endpoints.

    Accepts either:
    - Authorization: Bearer <token>
    - X-LaunchGate-Token: <token>
    """

    config = getattr(request.app.state, "launchgate_config", None)
    expected_token = getattr(getattr(config, "auth", None), "install_token", None)

    # Fail closed; startup always writes a token.
    if not expected_token:
        raise HTTPException(status_code=500, detail="Server auth token not initialized")

    provided = header_token
    if not provided and bearer is not None:
        provided = bearer.credentials

    if not provided:
        raise HTTPException(status_code=401, detail="Missing token")

    if provided != expected_token:
        raise HTTPException(status_code=401, detail="Invalid token")
