import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth_routes import auth_router
from flow_routes import flow_router
from genesys_routes import genesys_router
from llm_routes import llm_router
from report_routes import report_router
from user_routes import user_router
from intent_core.batch.service import BatchTestRunner
from intent_core.config import Config
from intent_core.datastore import FileSystemService
from intent_core.exceptions import IntentGuardError
from intent_core.exporters import ResultsExporter
from intent_core.generators import GenerationConfig, GenerationService, UtteranceGenerator
from intent_core.platform import PlatformClient
from intent_core.reports import ReportService
from intent_core.sessions import (
    PassthroughTokenValidator,
    PlatformTokenValidator,
    SessionResolver,
    SessionStore,
    TokenValidator,
)
from intent_core.utils import setup_logging

API_PREFIX = "/api"

logger = logging.getLogger("intent_core.app")


async def _cleanup_expired_sessions(store: SessionStore, interval: int):
    """Background task to purge aged sessions"""
    while True:
        await asyncio.sleep(interval)
        try:
            store.purge_expired()
        except Exception as e:
            logger.error(f"[app] Session cleanup failed: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the session purge loop on startup and stop it on shutdown"""
    config: Config = app.state.config
    config.log_config(logger)
    cleanup = asyncio.create_task(
        _cleanup_expired_sessions(app.state.session_store, config.session_cleanup_interval_seconds)
    )
    logger.info("IntentGuard API started successfully")

    yield

    cleanup.cancel()
    try:
        await cleanup
    except asyncio.CancelledError:
        pass
    logger.info("IntentGuard API shutting down...")


def build_generation_service(config: Config) -> GenerationService:
    service = GenerationService(logger=logging.getLogger("intent_core.generation"))
    service.set_config(config.llm_provider, GenerationConfig(
        api_url=config.llm_api_url,
        api_key=config.llm_api_key,
        model_id=config.llm_model_id,
        llm_config=config.llm_config,
    ))
    return service


def create_app(
    config: Optional[Config] = None,
    platform_client: Optional[PlatformClient] = None,
    generation_service: Optional[GenerationService] = None,
    token_validator: Optional[TokenValidator] = None,
) -> FastAPI:
    """
    Build the FastAPI application and wire its services onto `app.state`.

    Collaborators can be injected, which tests use to fake the platform and the LLM.
    """
    config = config or Config.from_yaml(os.getenv("CONFIG_PATH", "config.yaml"))
    config.validate()
    setup_logging(config.log_level)

    platform_client = platform_client or PlatformClient(
        timeout=config.platform_timeout, logger=logging.getLogger("intent_core.platform")
    )
    if token_validator is None:
        token_validator = PlatformTokenValidator(platform_client) if config.validate_tokens else PassthroughTokenValidator()
    generation_service = generation_service or build_generation_service(config)

    session_store = SessionStore(ttl_hours=config.session_ttl_hours)
    datastore = FileSystemService(base_path=config.results_output_dir)

    app = FastAPI(
        title="IntentGuard API",
        description="NLU regression testing for contact-center bot flows",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.session_store = session_store
    app.state.session_resolver = SessionResolver(session_store, token_validator, config.default_region)
    app.state.platform_client = platform_client
    app.state.datastore = datastore
    app.state.batch_runner = BatchTestRunner(
        platform_client, datastore, max_concurrency=config.batch_max_concurrency
    )
    app.state.report_service = ReportService(datastore)
    app.state.exporter = ResultsExporter(config)
    app.state.generation_service = generation_service
    app.state.utterance_generator = UtteranceGenerator(generation_service, provider=config.llm_provider)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(IntentGuardError)
    async def intent_guard_error_handler(request: Request, exc: IntentGuardError):
        if exc.status_code >= 500:
            logger.error(f"[app] {request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_payload()))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": "Invalid request", "error": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"success": False, "message": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"[app] Unexpected error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Internal server error", "error": str(exc)},
        )

    for router in (auth_router, user_router, flow_router, genesys_router, report_router, llm_router):
        app.include_router(router, prefix=API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    # Run the server
    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "3001")),
        reload=True,
        log_level="info"
    )
