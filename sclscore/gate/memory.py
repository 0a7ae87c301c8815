"""In-process credential store for local development and tests."""

import time
from collections.abc import Callable

from sclscore.gate.store import DEFAULT_TOKEN_TTL, new_code, new_token


class MemoryCredentialStore:
    """Credential store held in a dict.

    Consumption is atomic within one event loop: nothing awaits between the
    lookup and the delete. Not shared across processes.
    """

    backend = "memory"

    def __init__(
        self,
        token_ttl: int = DEFAULT_TOKEN_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.token_ttl = token_ttl
        self._clock = clock
        self._codes: set[str] = set()
        self._tokens: dict[str, float] = {}  # token -> expiry

    async def issue(self) -> str:
        code = new_code()
        while code in self._codes:
            code = new_code()
        self._codes.add(code)
        return code

    async def redeem(self, code: str) -> str | None:
        if code not in self._codes:
            return None
        self._codes.discard(code)
        token = new_token()
        self._tokens[token] = self._clock() + self.token_ttl
        return token

    async def consume_token(self, token: str) -> bool:
        expires_at = self._tokens.pop(token, None)
        if expires_at is None:
            return False
        return self._clock() < expires_at

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._codes.clear()
        self._tokens.clear()
