"""
Dataset Analyzer - Backend API
FastAPI application entry point
"""
import sys

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from config import settings
from routers import analysis_router
from services.ethics_service import EthicalAnalysisClient
from services.session import SessionRegistry


# Configure logging
logger.remove()
logger.add(
    sys.stderr,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level="DEBUG" if settings.DEBUG else "INFO"
)
if settings.LOG_TO_FILE:
    logger.add(
        settings.LOGS_DIR / "analyzer_{time}.log",
        rotation="500 MB",
        retention="10 days",
        level="DEBUG"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown"""
    # Startup
    logger.info("🚀 Starting Dataset Analyzer Backend...")
    ethics_client = EthicalAnalysisClient()
    app.state.sessions = SessionRegistry(ethics_client=ethics_client)

    if settings.ETHICS_SERVICE_URL:
        logger.info(f"🔗 Ethical analysis service: {settings.ETHICS_SERVICE_URL}")
    else:
        logger.warning("Ethical analysis service not configured, results will be statistics-only")

    yield

    # Shutdown - drop in-flight ethical calls and close the HTTP client
    logger.info("👋 Shutting down Dataset Analyzer Backend...")
    app.state.sessions.clear()
    await ethics_client.close()
    logger.info("✅ Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Statistical analysis and risk assessment for uploaded datasets",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(analysis_router, prefix="/api")


# Health check
@app.get("/health")
async def health_check(request: Request):
    """Liveness plus whether AI ethical analysis is wired up"""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "ethics_service_configured": bool(settings.ETHICS_SERVICE_URL),
        "active_sessions": len(request.app.state.sessions),
        "max_upload_mb": settings.max_upload_mb,
    }


# Root endpoint
@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "upload": "/api/analysis/upload",
        "formats": "/api/analysis/formats",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
