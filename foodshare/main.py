# foodshare/main.py
import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient

from foodshare.core.config import Settings, validate_runtime_config
from foodshare.core.errors import FoodShareError
from foodshare.core.security import build_pwd_context
from foodshare.repos.base import Repository
from foodshare.repos.inmemory import InMemoryRepo
from foodshare.repos.mongo import MongoRepo
from foodshare.repos.sessions import InMemorySessionStore, MongoSessionStore
from foodshare.routers import auth, ngos, pickups, stats
from foodshare.services.auth import AuthService
from foodshare.services.mailer import Mailer, build_mailer
from foodshare.services.pickups import PickupService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    repo: Optional[Repository] = None,
    sessions=None,
    mailer: Optional[Mailer] = None,
) -> FastAPI:
    """Build the API. Anything not passed in is constructed at startup from ``settings``."""
    settings = settings or Settings()
    validate_runtime_config(settings)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = None
        store, session_store = repo, sessions
        ttl = timedelta(days=settings.session_ttl_days)

        if settings.use_mongo and (store is None or session_store is None):
            client = AsyncIOMotorClient(settings.mongo_uri, tz_aware=True)
            db = client[settings.mongo_db]
            if store is None:
                store = MongoRepo(db)
                await store.ensure_indexes()
            if session_store is None:
                session_store = MongoSessionStore(db, ttl)
                await session_store.ensure_indexes()
            logger.info("Using MongoDB store %s/%s", settings.mongo_uri, settings.mongo_db)
        if store is None:
            store = InMemoryRepo()
            logger.info("Using in-memory store")
        if session_store is None:
            session_store = InMemorySessionStore(ttl)

        outbox = mailer or build_mailer(settings)
        pwd_context = build_pwd_context(settings.bcrypt_rounds)

        app.state.settings = settings
        app.state.repo = store
        app.state.auth = AuthService(store, session_store, outbox, settings, pwd_context)
        app.state.pickups = PickupService(store, outbox, settings)

        if settings.admin_email and settings.admin_password:
            await app.state.auth.ensure_admin(settings.admin_email, settings.admin_password)

        logger.info("%s started (%s)", settings.app_name, settings.environment)
        yield
        if client is not None:
            client.close()
        logger.info("%s stopped", settings.app_name)

    app = FastAPI(lifespan=lifespan, title=settings.app_name)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------------- Error mapping ----------------
    @app.exception_handler(FoodShareError)
    async def _foodshare_error(request: Request, exc: FoodShareError):
        return JSONResponse({"message": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
            for e in exc.errors()
        ]
        return JSONResponse({"message": "Validation error", "errors": errors}, status_code=400)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"message": "Internal server error"}, status_code=500)

    # ---------------- Routers ----------------
    app.include_router(auth.router)
    app.include_router(pickups.router)
    app.include_router(ngos.router)
    app.include_router(stats.router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


app = create_app()
