"""Main FastAPI application module.

This module initializes the FastAPI application and registers all route handlers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import admin, auth
from config import API_HOST, API_PORT, CORS_ALLOWED_ORIGINS
from core.database import init_db, shutdown_db
from core.logging_config import setup_logging

# Setup logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup and release connections on shutdown."""
    init_db()
    yield
    shutdown_db()


# Initialize FastAPI application
app = FastAPI(
    title="Maths Revision Tool Accounts API",
    description="Login, lockout and account administration for the quiz tool.",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route handlers
app.include_router(auth.router)
app.include_router(admin.router)


@app.get("/", summary="API root", tags=["Info"])
def root() -> dict:
    """API root, returns API information and documentation links."""
    return {
        "name": "Maths Revision Tool Accounts API",
        "version": "1.0.0",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc",
        },
        "health": "/api/health",
    }


@app.get("/api/health", summary="Health check", tags=["Health"])
def health() -> dict:
    """Health check endpoint.

    Returns:
        Dictionary with status "ok".
    """
    return {"status": "ok"}


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    server_url = f"http://{API_HOST}:{API_PORT}"
    print(f"🌐 Accounts API: {server_url}")
    print(f"📚 API docs: {server_url}/docs")
    print()
    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)
