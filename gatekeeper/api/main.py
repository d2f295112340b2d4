import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gatekeeper import __version__
from gatekeeper.api.routers import goals, roles, users
from gatekeeper.api.schemas import ErrorResponse
from gatekeeper.core.audit import LoggingAuditSink, RedisAuditSink
from gatekeeper.core.config import Settings, get_settings
from gatekeeper.core.exceptions import AuthorizationDenied, MalformedRequest, NotFound, StoreFailure
from gatekeeper.core.logger import configure_from_settings
from gatekeeper.services import Gatekeeper

logger = logging.getLogger(__name__)


# Map core errors to HTTP responses
ERROR_RESPONSES = {
    AuthorizationDenied: (403, "authorization_denied"),
    NotFound: (404, "not_found"),
    MalformedRequest: (400, "malformed_request"),
    StoreFailure: (503, "store_failure"),
}


def create_app(settings: Optional[Settings] = None, gatekeeper: Optional[Gatekeeper] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Settings to use; defaults to the environment
        gatekeeper: Pre-built handlers; when omitted, SQL-backed handlers are
            created at startup from ``settings.database_url``
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_from_settings(settings)

        engine = None
        instance = gatekeeper
        if instance is None:
            from gatekeeper.db.seed import seed_default_roles, seed_default_users
            from gatekeeper.db.session import create_engine, create_session_factory, init_db

            engine = create_engine(settings.database_url)
            await init_db(engine)
            session_factory = create_session_factory(engine)
            if settings.seed_default_roles:
                await seed_default_roles(session_factory)
                await seed_default_users(session_factory)
            instance = Gatekeeper.from_sql(session_factory)

        unsubscribers = [instance.channel.subscribe(LoggingAuditSink())]
        redis_sink = None
        if settings.audit_redis_enabled:
            redis_sink = RedisAuditSink.from_url(settings.redis_url, settings.audit_redis_channel)
            unsubscribers.append(instance.channel.subscribe(redis_sink))

        app.state.gatekeeper = instance
        logger.info(f"{settings.app_name} started")
        try:
            yield
        finally:
            await instance.channel.drain()
            for unsubscribe in unsubscribers:
                unsubscribe()
            if redis_sink is not None:
                await redis_sink.close()
            if engine is not None:
                await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        description="Permission-gated access to roles, permissions and users",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    for error_class, (status_code, error) in ERROR_RESPONSES.items():
        app.add_exception_handler(error_class, _error_handler(status_code, error))

    app.include_router(roles.router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.include_router(goals.router, prefix="/api")

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": __version__}

    return app


def _error_handler(status_code: int, error: str):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(error=error, detail=str(exc)).model_dump(),
        )
    return handler
