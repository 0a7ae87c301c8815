"""Request dependencies: engine and credential store lookup, gate check."""

import logging

from fastapi import Header, HTTPException, Request
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from sclscore.gate import CredentialStore, GateUnavailableError
from sclscore.scoring import ScoringEngine

logger = logging.getLogger(__name__)


def get_engine(request: Request) -> ScoringEngine:
    return request.app.state.engine


def get_store(request: Request) -> CredentialStore:
    """Get the credential store, or fail if none is configured."""
    store = request.app.state.store
    if store is None:
        raise GateUnavailableError("No credential store configured")
    return store


async def require_gate_pass(
    request: Request,
    x_auth_token: str | None = Header(default=None, alias="x-auth-token"),
) -> None:
    """Admit the request only with a valid single-use bearer token.

    The token is consumed whether or not the rest of the request succeeds.
    """
    if not x_auth_token:
        raise HTTPException(HTTP_401_UNAUTHORIZED, "No authorization token provided.")
    store = get_store(request)
    if not await store.consume_token(x_auth_token):
        logger.warning("Rejected invalid or expired token", extra={"path": request.url.path})
        raise HTTPException(HTTP_403_FORBIDDEN, "Authorization token is invalid or has expired.")
