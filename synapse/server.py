"""
HTTP API entrypoint. Run with: python -m synapse.server
Requires JWT_SECRET in environment (e.g. from .env).
"""
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from synapse import __version__
from synapse.config import Config, load_config, setup_logging
from synapse.intent.errors import PipelineError
from synapse.intent.pipeline import IntentExtractionPipeline
from synapse.llm.base import LLMProvider
from synapse.llm.factory import build_provider
from synapse.models import Identity, UserStats
from synapse.security import BEARER, AuthGate, Unauthenticated, parse_authorization_header
from synapse.store import UserStore, create_store
from synapse.usage import UsageMeter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")


class ParseRequest(BaseModel):
    text: str | None = None
    context: dict[str, Any] | None = None


async def current_identity(request: Request) -> Identity:
    """Resolve the caller from the Authorization header."""
    gate: AuthGate = request.app.state.auth_gate
    token = parse_authorization_header(request.headers.get("Authorization"))
    return await gate.authenticate(token)


@router.post("/parse")
async def parse_text(
    body: ParseRequest,
    request: Request,
    identity: Identity = Depends(current_identity),
) -> dict[str, Any]:
    """Extract an intent from text and record one action on success."""
    pipeline: IntentExtractionPipeline = request.app.state.pipeline
    meter: UsageMeter = request.app.state.usage_meter

    intent = await pipeline.extract(body.text, body.context, identity)
    await meter.increment(identity.user_id)
    return intent.to_dict()


@router.get("/user/stats")
async def user_stats(request: Request, identity: Identity = Depends(current_identity)):
    store: UserStore = request.app.state.store
    try:
        stats = await store.get_stats(identity.user_id)
    except SQLAlchemyError:
        logger.exception("Stats lookup failed for user_id=%s", identity.user_id)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch stats"})
    if stats is None:
        stats = UserStats(daily_actions_used=0, subscription_tier=identity.subscription_tier)
    return stats.to_dict()


async def _unauthenticated_handler(request: Request, exc: Unauthenticated) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"error": exc.message},
        headers={"WWW-Authenticate": BEARER},
    )


async def _pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("Parse error: %s", exc)
    return JSONResponse(status_code=exc.http_status, content={"error": exc.public_message})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Rejected request body: %s", exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


def create_app(
    config: Config | None = None,
    store: UserStore | None = None,
    provider: LLMProvider | None = None,
) -> FastAPI:
    """
    Build the FastAPI application with its collaborators.

    Args:
        config: Loaded configuration (defaults to load_config())
        store: User store (defaults to one built from DATABASE_URL)
        provider: LLM provider (defaults to the one named by LLM_PROVIDER)

    Returns:
        Configured FastAPI app; collaborators are on app.state
    """
    config = config or load_config()
    store = store or create_store(config.database_url)
    provider = provider or build_provider(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.database_url.startswith("sqlite"):
            await store.create_schema()
        logger.info("Synapse API ready (provider=%s)", provider.name)
        yield
        await provider.close()
        await store.dispose()

    app = FastAPI(title="Synapse API", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.store = store
    app.state.provider = provider
    app.state.auth_gate = AuthGate(store, config.jwt_secret, config.jwt_algorithm)
    app.state.usage_meter = UsageMeter(store)
    app.state.pipeline = IntentExtractionPipeline(provider, timeout=config.llm_timeout)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.frontend_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Unauthenticated, _unauthenticated_handler)
    app.add_exception_handler(PipelineError, _pipeline_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(router)
    return app


def main() -> None:
    """Start the API server."""
    import uvicorn

    setup_logging()
    config = load_config()
    app = create_app(config)
    logger.info("Synapse API listening on %s:%s", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)


if __name__ == "__main__":
    main()
