"""
FastAPI Main Application
Entry point with routers, middleware and error mapping
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from core.config import settings
from core.database import close_db, health_check, init_db
from core.exceptions import (
    NotAuthenticatedException,
    PersistenceException,
    RecordNotFoundException,
    ValidationException
)
from core.logging_config import logger
from presentation.api.v1.endpoints import applications_router


APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info(f"Starting {settings.APP_NAME} v{APP_VERSION} ({settings.ENVIRONMENT})")
    await init_db()
    logger.info("Database initialized")
    
    yield
    
    logger.info(f"Shutting down {settings.APP_NAME}")
    await close_db()


async def not_authenticated_handler(request: Request, exc: NotAuthenticatedException):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": str(exc)}
    )


async def validation_handler(request: Request, exc: ValidationException):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.message, "field": exc.field}
    )


async def not_found_handler(request: Request, exc: RecordNotFoundException):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)}
    )


async def persistence_handler(request: Request, exc: PersistenceException):
    logger.error(f"Persistence error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)}
    )


def create_app() -> FastAPI:
    """Build the FastAPI application"""
    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Per-wallet job application tracking with status timeline and statistics",
        version=APP_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan
    )
    
    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    # Rate limiting middleware
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
        enabled=settings.RATE_LIMIT_ENABLED
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, lambda request, exc: JSONResponse(
        status_code=429,
        content={"detail": "Rate limit exceeded. Please try again later."}
    ))
    app.add_middleware(SlowAPIMiddleware)
    
    # Domain errors
    app.add_exception_handler(NotAuthenticatedException, not_authenticated_handler)
    app.add_exception_handler(ValidationException, validation_handler)
    app.add_exception_handler(RecordNotFoundException, not_found_handler)
    app.add_exception_handler(PersistenceException, persistence_handler)
    
    # API routers
    app.include_router(applications_router, prefix="/api/v1", tags=["applications"])
    
    @app.get("/health")
    async def health():
        """Health check endpoint"""
        database_ok = await health_check()
        return {
            "status": "healthy" if database_ok else "degraded",
            "version": APP_VERSION,
            "database": "connected" if database_ok else "unavailable"
        }
    
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "presentation.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
