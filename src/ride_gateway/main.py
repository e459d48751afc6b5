"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from starlette.exceptions import HTTPException

from ride_gateway.admin.router import router as admin_router
from ride_gateway.config import settings
from ride_gateway.core.clock import Clock, system_clock
from ride_gateway.database.engine import async_session_factory, init_db
from ride_gateway.otp.errors import OTPError
from ride_gateway.otp.manager import Notifier
from ride_gateway.otp.router import otp_error_handler, router as otp_router
from ride_gateway.relay.handler import router as relay_router
from ride_gateway.roles.router import router as roles_router
from ride_gateway.services.auth import TokenVerifier
from ride_gateway.services.email_service import EmailService
from ride_gateway.services.push_service import FCMPushSender, PushSender
from ride_gateway.state import build_state

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


async def http_error_handler(request, exc: HTTPException) -> JSONResponse:
    """Render HTTP errors in the same ``{success, message}`` envelope as OTP errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request, exc: RequestValidationError) -> JSONResponse:
    """Report the first invalid field instead of FastAPI's ``{detail}`` list."""
    errors = exc.errors()
    message = "Invalid request."
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {field or 'body'}: {first.get('msg', 'invalid value')}"
    logger.debug("Request validation failed on %s: %s", request.url.path, errors)
    return JSONResponse(status_code=422, content={"success": False, "message": message})


def create_app(
    *,
    notifier: Notifier | None = None,
    push_sender: PushSender | None = None,
    engine: AsyncEngine | None = None,
    token_verifier: TokenVerifier | None = None,
    clock: Clock = system_clock,
) -> FastAPI:
    """Build the application around the given (or default) collaborators."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup / shutdown lifecycle hook."""
        logger.info("Starting %s …", settings.app_name)
        await init_db(engine)
        logger.info("Database initialised")

        session_factory = (
            async_sessionmaker(engine, expire_on_commit=False)
            if engine is not None
            else async_session_factory
        )
        state = build_state(
            notifier=notifier or EmailService(),
            push_sender=push_sender or FCMPushSender(),
            session_factory=session_factory,
            token_verifier=token_verifier,
            clock=clock,
        )
        app.state.gateway = state
        state.sweeper.start()
        try:
            yield
        finally:
            logger.info("Shutting down %s …", settings.app_name)
            state.sweeper.stop()

    app = FastAPI(
        title=settings.app_name,
        description="OTP verification and real-time room relay for ride bookings",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_exception_handler(OTPError, otp_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(otp_router)
    app.include_router(roles_router)
    app.include_router(admin_router)
    app.include_router(relay_router)

    @app.get("/health")
    async def health_check():
        """Simple liveness probe."""
        return {"status": "healthy", "app": settings.app_name}

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn (the ``ride-gateway`` console script)."""
    import uvicorn

    uvicorn.run(
        "ride_gateway.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    run()
