from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime
import logging
from sqlalchemy import text
from spicy_confessions.config import settings
from spicy_confessions.db.session import AsyncSessionLocal, init_db, close_db
from spicy_confessions.api import confessions, likes, identity, manifest

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    # Startup
    logger.info("Starting up...")

    # Create database tables
    try:
        await init_db()
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")

    # Test database connection
    try:
        async with AsyncSessionLocal() as db:
            await db.execute(text("SELECT 1"))
            logger.info("Database connection successful")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await close_db()

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Anonymous confessions feed for a social mini-app",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(confessions.router, prefix=f"{settings.API_V1_PREFIX}/confessions", tags=["Confessions"])
app.include_router(likes.router, prefix=f"{settings.API_V1_PREFIX}/likes", tags=["Likes"])
app.include_router(identity.router, prefix=f"{settings.API_V1_PREFIX}/identity", tags=["Identity"])
app.include_router(manifest.router, prefix="/.well-known", tags=["Manifest"])

@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Welcome to Spicy Confessions API",
        "version": settings.VERSION,
        "docs": "/api/docs",
        "redoc": "/api/redoc"
    }

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat()
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "spicy_confessions.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
