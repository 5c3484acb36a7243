from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Core
from core.config import Settings, settings as default_settings
from core.logging_config import logger
from core.scheduler import start_scheduler, stop_scheduler
from core.storage import ObjectStorage
from database import Database

# -------------------------------------------------
# Routers (no version prefix)
# -------------------------------------------------
from routers.auth import router as auth_router
from routers.wordpress import router as wordpress_router
from routers.products import router as products_router
from routers.orders import router as orders_router
from routers.messages import router as messages_router
from routers.notifications import router as notifications_router
from routers.inventory import router as inventory_router
from routers.users import router as users_router
from routers.staff import router as staff_router
from routers.uploads import router as uploads_router
from routers.health import router as health_router


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    storage: Optional[ObjectStorage] = None,
) -> FastAPI:
    """
    Build the app around explicit collaborators. Tests inject an
    in-memory Database and a fake storage; production builds both
    from settings.
    """
    settings = settings or default_settings

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="EasyPrint API: print orders, uploads and shop administration",
    )

    app.state.settings = settings
    app.state.db = database or Database(settings.database_url)
    app.state.storage = storage
    app.state.scheduler = None

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Lifecycle
    # -------------------------------------------------
    @app.on_event("startup")
    def on_startup():
        logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENV})")

        app.state.db.create_db_and_tables()
        app.state.db.migrate_legacy_roles()

        if app.state.storage is None:
            app.state.storage = ObjectStorage.from_settings(settings)

        if settings.ENABLE_SCHEDULER:
            app.state.scheduler = start_scheduler(app.state.db, app.state.storage)

        for route in app.routes:
            methods = ",".join(sorted(getattr(route, "methods", None) or []))
            path = getattr(route, "path", "")
            logger.debug(f"Route {methods:10s} {path}")

    @app.on_event("shutdown")
    def on_shutdown():
        stop_scheduler(app.state.scheduler)
        app.state.db.close()

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(
                f"HTTP {exc.status_code} at {request.url} - {exc.detail}"
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation(request: Request, exc: RequestValidationError):
        # Malformed input is a plain 400 here, not FastAPI's 422
        return JSONResponse(
            status_code=400,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------

    # Auth
    app.include_router(auth_router)
    app.include_router(wordpress_router)

    # Shop
    app.include_router(products_router)
    app.include_router(orders_router)
    app.include_router(messages_router)
    app.include_router(notifications_router)
    app.include_router(inventory_router)

    # Accounts
    app.include_router(users_router)
    app.include_router(staff_router)

    # Files
    app.include_router(uploads_router)

    # Health
    app.include_router(health_router)

    return app


# Create the global FastAPI instance
app = create_app()
