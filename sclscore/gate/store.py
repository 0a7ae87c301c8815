"""Credential store protocol for the single-use access gate.

A redemption code is exchanged exactly once for a bearer token, and a
bearer token admits exactly one scoring request. Both are consumed with an
atomic check-and-delete so concurrent requests cannot redeem the same
credential twice.
"""

import uuid
from typing import Protocol, runtime_checkable

CODE_PREFIX = "code:"
TOKEN_PREFIX = "token:"
CODE_LENGTH = 6
DEFAULT_TOKEN_TTL = 3600


class GateUnavailableError(Exception):
    """Raised when the credential store cannot be reached."""

    pass


def new_code() -> str:
    """Generate a redemption code: six uppercase hex characters."""
    return uuid.uuid4().hex[:CODE_LENGTH].upper()


def new_token() -> str:
    return str(uuid.uuid4())


@runtime_checkable
class CredentialStore(Protocol):
    """Protocol for single-use credential storage."""

    @property
    def backend(self) -> str:
        """Short name of the storage backend (e.g. "redis", "memory")."""
        ...

    async def issue(self) -> str:
        """Create and store a new redemption code. Codes do not expire."""
        ...

    async def redeem(self, code: str) -> str | None:
        """Consume a redemption code and return a new bearer token.

        Returns None if the code is unknown or was already used.
        """
        ...

    async def consume_token(self, token: str) -> bool:
        """Consume a bearer token. Returns False if unknown, used, or expired."""
        ...

    async def ping(self) -> bool:
        """Whether the backend is reachable. Never raises."""
        ...

    async def close(self) -> None:
        ...
