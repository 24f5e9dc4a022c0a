import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import Settings, load_settings
from core.errors import AppError
from db.database import Base, make_engine, make_session_factory

# models を import しておく（create_all がテーブルを認識するため）
from models.user import User  # noqa: F401
from models.plant import Plant  # noqa: F401

from routers import auth, catalog, plants, reminders
from services.catalog_service import PlantCatalog, build_catalog, close_catalog

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """全てのエラーを {"message": ...} の形で返す"""

    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"message": "Invalid request.", "errors": errors})

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        # 想定外の例外もテキストではなく JSON で返す
        logger.exception("%s %s crashed", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": AppError.public_message})


def create_app(
    settings: Optional[Settings] = None,
    plant_catalog: Optional[PlantCatalog] = None,
) -> FastAPI:
    """
    uvicorn main:create_app --factory で起動する
    """
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level)

    engine = make_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # DBテーブル作成（import時ではなく起動時に回す）
        Base.metadata.create_all(bind=engine)
        yield
        close_catalog(app.state.catalog)
        engine.dispose()

    app = FastAPI(title="Nurture API", lifespan=lifespan)

    app.state.started_at = time.time()
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.catalog = plant_catalog or build_catalog(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # --- ルーター ---
    app.include_router(auth.router)
    app.include_router(plants.router)
    app.include_router(reminders.router)
    app.include_router(catalog.router)

    # --- コールドスタート対策：超軽量エンドポイント（DB/外部APIに触らない） ---
    @app.get("/ping", include_in_schema=False)
    def ping():
        return {
            "ok": True,
            "service": "nurture-backend",
            "ts": datetime.now(timezone.utc).isoformat(),
            "uptime_sec": round(time.time() - app.state.started_at, 2),
        }

    return app
