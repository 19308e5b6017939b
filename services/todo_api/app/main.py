# services/todo_api/app/main.py
import logging, sys
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .settings import Settings, get_settings
from .middleware import (
    OriginGuardMiddleware, PreflightCORSMiddleware, BearerTokenMiddleware,
    EmptyOptionsMiddleware, UnhandledErrorMiddleware,
)
from .routers import tasks
from .storage.mongo_store import TaskStore, connect, get_database

SERVICE_NAME = "todo-api"

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=level.upper(),
        stream=sys.stdout,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _register_error_handlers(app: FastAPI):
    @app.exception_handler(StarletteHTTPException)
    async def _http_error(_req: Request, exc: StarletteHTTPException):
        return JSONResponse({"message": exc.detail}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def _bad_body(_req: Request, exc: RequestValidationError):
        logger.info("rejected request body: %s", exc.errors())
        return JSONResponse({"message": "invalid request body"}, status_code=400)

    @app.exception_handler(PyMongoError)
    async def _store_error(req: Request, exc: PyMongoError):
        logger.exception("store error on %s %s", req.method, req.url.path)
        return JSONResponse({"message": "internal server error"}, status_code=500)


def create_app(settings: Optional[Settings] = None, store: Optional[TaskStore] = None) -> FastAPI:
    """
    Build the API. When `store` is given the app uses it as-is and never
    opens a MongoDB connection of its own.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Todo API")
    app.state.settings = settings
    app.state.store = store
    app.state.mongo_client = None

    # added innermost first: guard -> CORS -> auth -> options -> error catch -> routes
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(EmptyOptionsMiddleware)
    app.add_middleware(BearerTokenMiddleware, token=settings.API_TOKEN)
    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(OriginGuardMiddleware, allowed_origins=settings.allowed_origins_list)

    _register_error_handlers(app)

    @app.on_event("startup")
    def _startup():
        if app.state.store is None:
            client = connect(settings)
            db = get_database(client, settings)
            app.state.mongo_client = client
            app.state.store = TaskStore(db[settings.MONGO_COLLECTION])
        app.state.store.ensure_indexes()
        logger.info(
            "%s ready (auth %s, %d allowed origins)",
            SERVICE_NAME,
            "on" if settings.auth_enabled else "off",
            len(settings.allowed_origins_list),
        )

    @app.on_event("shutdown")
    def _shutdown():
        if app.state.mongo_client is not None:
            app.state.mongo_client.close()

    # register routes
    app.include_router(tasks.router)

    @app.get("/")
    def root():
        return {"ok": True, "service": SERVICE_NAME}

    @app.get("/health")
    def health():
        return {"ok": True}

    return app
