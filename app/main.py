# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from app.core.config import Settings, get_settings
from app.core.errors import register_exception_handlers
from app.core.storage_utils import BlobStore
from app.database import build_engine, create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from app.models import user as _user_models  # noqa: F401
from app.models import goat as _goat_models  # noqa: F401
from app.models import image as _image_models  # noqa: F401

# Routers
from app.routers.users import router as users_router
from app.routers.goats import router as goats_router
from app.routers.marketplace import router as marketplace_router
from app.routers.uploads import router as uploads_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.
      - Make sure the upload directory exists.

    Shutdown:
      - Dispose the engine's connection pool.
    """
    logger.info("Startup: connecting to database...")
    try:
        create_db_and_tables(app.state.engine)
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    app.state.blob_store.ensure_root()
    logger.info(f"Startup: storing uploads in {app.state.blob_store.root}")
    yield
    app.state.engine.dispose()
    logger.info("Shutdown: DB connections closed.")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application around an explicitly constructed engine and
    blob store (both kept on app.state and injected into handlers).
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.blob_store = BlobStore(
        settings.UPLOAD_DIR,
        url_prefix=settings.UPLOADS_URL_PREFIX,
        max_bytes=settings.MAX_IMAGE_BYTES,
        write_workers=settings.IMAGE_WRITE_WORKERS,
    )
    # StaticFiles checks the directory when it is mounted
    app.state.blob_store.ensure_root()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(users_router)
    app.include_router(goats_router)
    app.include_router(marketplace_router)
    app.include_router(uploads_router)

    app.mount(
        "/uploads",
        StaticFiles(directory=str(app.state.blob_store.root)),
        name="uploads",
    )

    @app.get("/", response_class=PlainTextResponse)
    def root():
        """Liveness check."""
        return "Backend is successfully running!"

    return app


app = create_app()
