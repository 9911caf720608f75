"""Vesting Ledger API - Main Application"""
import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vesting_ledger.config import get_settings
from vesting_ledger.api.v1.router import api_router
from vesting_ledger.errors import VestingError
from vesting_ledger.models.database import init_db, close_db, async_session_factory
from vesting_ledger.services.bootstrap import bootstrap_engine
from vesting_ledger.services.ownership import EngineNotInitialized

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Vesting Ledger API", version=settings.app_version)

    await init_db()
    logger.info("Database initialized")

    async with async_session_factory() as db:
        stats = await bootstrap_engine(db, settings)
        await db.commit()
    logger.info("Engine bootstrap completed", **stats)

    yield

    await close_db()
    logger.info("Vesting Ledger API shutdown complete")


async def vesting_error_handler(request: Request, exc: VestingError):
    """Render engine errors as typed JSON failures"""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def engine_not_initialized_handler(request: Request, exc: EngineNotInitialized):
    logger.error("Request before engine bootstrap", path=request.url.path)
    return JSONResponse(status_code=503, content={"error": "engine_not_initialized", "detail": str(exc)})


def create_app() -> FastAPI:
    """Create FastAPI application"""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="API for the equity vesting ledger",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(VestingError, vesting_error_handler)
    app.add_exception_handler(EngineNotInitialized, engine_not_initialized_handler)

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": settings.app_version,
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "vesting_ledger.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
