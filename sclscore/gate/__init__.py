"""Single-use access gate guarding the scoring endpoint."""

from sclscore.gate.memory import MemoryCredentialStore
from sclscore.gate.redis_store import RedisCredentialStore
from sclscore.gate.store import (
    CredentialStore,
    GateUnavailableError,
    new_code,
    new_token,
)

__all__ = [
    "CredentialStore",
    "GateUnavailableError",
    "MemoryCredentialStore",
    "RedisCredentialStore",
    "new_code",
    "new_token",
]
