"""FastAPI application exposing the gate and the scoring engine."""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
from starlette.status import HTTP_404_NOT_FOUND

from sclscore import __version__
from sclscore.api.dependencies import get_engine, get_store, require_gate_pass
from sclscore.api.errors import register_exception_handlers
from sclscore.config import Settings, load_settings
from sclscore.gate import CredentialStore, RedisCredentialStore
from sclscore.registry import InventoryRegistry
from sclscore.scoring import ScoringEngine, ValidationError

logger = logging.getLogger(__name__)


class CodeRequest(BaseModel):
    code: str | None = None


class CodeResponse(BaseModel):
    success: bool
    tempToken: str


def build_engine(settings: Settings) -> ScoringEngine:
    registry = InventoryRegistry(settings.registry_path)
    return ScoringEngine.from_registry(
        registry,
        settings.inventory_id,
        settings.inventory_version,
        overall_rule=settings.overall_rule,
    )


def build_store(settings: Settings) -> CredentialStore | None:
    if not settings.redis_url:
        logger.warning("No Redis URL configured; credential endpoints will be unavailable")
        return None
    return RedisCredentialStore.from_url(settings.redis_url, token_ttl=settings.token_ttl_seconds)


def create_app(
    settings: Settings | None = None,
    store: CredentialStore | None = None,
    engine: ScoringEngine | None = None,
) -> FastAPI:
    """Create the application.

    Args:
        settings: Runtime settings. Loaded from config and environment if omitted.
        store: Credential store. Built from `settings.redis_url` if omitted.
        engine: Scoring engine. Built from the inventory registry if omitted.
    """
    settings = settings or load_settings()
    engine = engine or build_engine(settings)
    if store is None:
        store = build_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Scoring service started",
            extra={
                "inventory": f"{engine.inventory.inventory_id}@{engine.inventory.version}",
                "overall_rule": engine.overall_rule,
                "store": store.backend if store else None,
            },
        )
        yield
        if store is not None:
            await store.close()

    app = FastAPI(title="sclscore", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/health")
    async def health(request: Request) -> dict:
        current = request.app.state.store
        reachable = await current.ping() if current else False
        return {
            "status": "ok" if reachable else "degraded",
            "version": __version__,
            "store": current.backend if current else None,
            "storeReachable": reachable,
        }

    @app.post("/api/validate-code", response_model=CodeResponse)
    async def validate_code(body: CodeRequest, request: Request) -> CodeResponse:
        """Exchange a redemption code for a single-use bearer token."""
        credential_store = get_store(request)
        code = (body.code or "").strip().upper()
        token = await credential_store.redeem(code)
        if token is None:
            raise HTTPException(HTTP_404_NOT_FOUND, "Invalid or already used redemption code.")
        return CodeResponse(success=True, tempToken=token)

    @app.get("/api/generate-code", response_class=HTMLResponse)
    async def generate_code(request: Request) -> HTMLResponse:
        """Issue a new redemption code."""
        code = await get_store(request).issue()
        return HTMLResponse(f"<h1>New redemption code generated: {code}</h1>")

    @app.post("/api/submit", dependencies=[Depends(require_gate_pass)])
    async def submit(request: Request, scoring: ScoringEngine = Depends(get_engine)) -> dict:
        """Score a submission of item responses."""
        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError("The submitted data is malformed.") from e
        if not isinstance(payload, dict):
            raise ValidationError("The submitted data is malformed.")

        report = scoring.score(payload.get("answers"))
        return report.to_response()

    return app
