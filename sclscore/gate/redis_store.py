"""Redis-backed credential store."""

import logging

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from sclscore.gate.store import (
    CODE_PREFIX,
    DEFAULT_TOKEN_TTL,
    TOKEN_PREFIX,
    GateUnavailableError,
    new_code,
    new_token,
)

logger = logging.getLogger(__name__)


class RedisCredentialStore:
    """Credential store using Redis GETDEL for atomic consumption.

    Redemption codes are stored without expiry; bearer tokens expire after
    `token_ttl` seconds.
    """

    backend = "redis"

    def __init__(self, client: aioredis.Redis, token_ttl: int = DEFAULT_TOKEN_TTL) -> None:
        self._redis = client
        self.token_ttl = token_ttl

    @classmethod
    def from_url(cls, url: str, token_ttl: int = DEFAULT_TOKEN_TTL) -> "RedisCredentialStore":
        client = aioredis.from_url(url, encoding="utf-8", decode_responses=True)
        return cls(client, token_ttl=token_ttl)

    async def issue(self) -> str:
        code = new_code()
        try:
            await self._redis.set(f"{CODE_PREFIX}{code}", "active")
        except RedisError as e:
            logger.error("Failed to store redemption code: %s", e)
            raise GateUnavailableError("Credential store unavailable") from e
        logger.info("Issued redemption code")
        return code

    async def redeem(self, code: str) -> str | None:
        if not code:
            return None
        try:
            if await self._redis.getdel(f"{CODE_PREFIX}{code}") is None:
                return None
            token = new_token()
            await self._redis.set(f"{TOKEN_PREFIX}{token}", "valid", ex=self.token_ttl)
        except RedisError as e:
            logger.error("Failed to redeem code: %s", e)
            raise GateUnavailableError("Credential store unavailable") from e
        return token

    async def consume_token(self, token: str) -> bool:
        if not token:
            return False
        try:
            return await self._redis.getdel(f"{TOKEN_PREFIX}{token}") is not None
        except RedisError as e:
            logger.error("Failed to verify token: %s", e)
            raise GateUnavailableError("Credential store unavailable") from e

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        await self._redis.aclose()
