"""
FastAPI Main Application

Position math API for Uniswap V3 liquidity positions.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.api.schemas import ErrorResponse
from app.api.v1 import health, positions
from lp_tracker.errors import PositionMathError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Actions to perform on application startup and shutdown"""
    logger.info(f"Starting {settings.API_TITLE} v{settings.API_VERSION}")
    logger.info(
        f"Curve: {settings.CURVE_SAMPLE_COUNT} samples, {settings.CURVE_BUFFER_PERCENT}% buffer, "
        f"cache TTL {settings.CURVE_CACHE_TTL_SECONDS:.0f}s / {settings.CURVE_CACHE_MAX_ENTRIES} entries"
    )
    yield
    logger.info("Shutting down position math API")


# Create FastAPI app
app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PositionMathError)
async def position_math_error_handler(request: Request, exc: PositionMathError):
    """Invalid ticks, prices, ranges or decimals are client errors"""
    logger.info(f"{request.url.path}: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=422,
        content={"error": type(exc).__name__, "detail": str(exc)}
    )


# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(
    positions.router,
    prefix="/api/v1",
    tags=["Positions"],
    responses={422: {"model": ErrorResponse}}
)


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": settings.API_TITLE,
        "version": settings.API_VERSION,
        "description": settings.API_DESCRIPTION,
        "docs": "/docs",
        "health": "/api/v1/health",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
