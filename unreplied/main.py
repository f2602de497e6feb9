# /unreplied/main.py
"""
Main application module for the API.
This is the entry point that initializes the FastAPI app and includes all routes.
"""
import logging
import sys
from fastapi import FastAPI
from unreplied.api.router import router
from unreplied.config import USE_MOCKS
from unreplied.db.postgres import init_postgres, check_database_connection, close_postgres_connection
from unreplied.services import init_reputation

logging.basicConfig(
    level=logging.INFO,
    stream=sys.stdout,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
    force=True  # Override any previous configuration
)

logger = logging.getLogger(__name__)

# Initialize FastAPI
app = FastAPI(
    title="Unreplied API",
    description="API for unreplied Farcaster conversations and cached reputation scores"
)


@app.on_event("startup")
async def startup_event():
    """Initialize database connection and reputation caches when app starts up"""
    print("=== API STARTING UP ===")

    # PostgreSQL (conversations degrade to empty pages without it, don't block startup)
    postgres_success = init_postgres()
    print(f"PostgreSQL: {'✓' if postgres_success else '✗'}")

    init_reputation()
    print(f"Reputation providers: {'mock' if USE_MOCKS else 'live'}")

    print("=== API READY ===")


@app.on_event("shutdown")
async def shutdown_event():
    """Close database connections when app shuts down"""
    print("=== SHUTTING DOWN API ===")
    close_postgres_connection()


# Root endpoint
@app.get("/")
async def root():
    return {"message": "Unreplied API is running"}


@app.get("/health")
async def health():
    database = check_database_connection()
    return {"status": "ok" if database else "degraded", "database": database}


# Include all routes with v1 prefix
app.include_router(router, prefix="/v1")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("unreplied.main:app", host="0.0.0.0", port=8000, reload=True)
