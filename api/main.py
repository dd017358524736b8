"""FastAPI application entry point"""

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv

# Setup logging
from src.logging_config import setup_logging
setup_logging()

load_dotenv()

from src.config import settings

app = FastAPI(
    title="Taller JYM API",
    description="Vehicle intake and service records",
    version=settings.APP_VERSION,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Locally stored photos are served from here (see PUBLIC_MEDIA_URL)
app.mount(
    "/media",
    StaticFiles(directory=Path(settings.LOCAL_STORAGE_PATH), check_dir=False),
    name="media",
)


@app.on_event("startup")
async def _init_database() -> None:
    """Ensure database tables exist"""
    from src.models.database import init_db

    await init_db()


@app.on_event("shutdown")
async def _close_database() -> None:
    from src.models.database import close_db

    await close_db()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Taller JYM API",
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "healthy"}


# Import routes
from api.routes import records, storage
app.include_router(records.router, prefix="/api", tags=["records"])
app.include_router(storage.router, prefix="/api", tags=["storage"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
