# backend/main.py
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from starlette.middleware.sessions import SessionMiddleware

from config import settings
from database.session import engine, init_db
from gateway.gateway_router import gateway_router
from routers.deps import respond
from schemas.common import StoreResult
from services.errors import StoreError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Storage marketplace API is starting")
    try:
        init_db(engine)
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connected")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
    yield
    engine.dispose()
    logger.info("Shutting down")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storage Space Marketplace",
        description="Users, storage listings and bookings behind one gateway",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET,
        https_only=settings.SESSION_COOKIE_SECURE,
        same_site="lax",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["POST", "PUT", "GET", "OPTIONS", "HEAD", "DELETE"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        return respond(StoreResult.fail(exc.kind, exc.message))

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error."})

    @app.get("/health")
    def health():
        status = {"status": "healthy", "service": "storage-market-api", "version": "1.0.0"}
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            status["database"] = "connected"
        except Exception as e:
            status["database"] = f"error: {e.__class__.__name__}"
            status["status"] = "degraded"
        return status

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

    app.include_router(gateway_router, prefix="/api/v1")
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "3080")),
        reload=os.getenv("DEBUG", "False").lower() == "true",
        log_level=settings.LOG_LEVEL.lower(),
    )
