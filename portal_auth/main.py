from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portal_auth.api.routers import auth as auth_router
from portal_auth.api.routers import sessions as sessions_router
from portal_auth.infrastructure.db.engine import get_engine
from portal_auth.infrastructure.db.models.sessions import create_session_tables
from portal_auth.shared.config import get_settings


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if settings.auto_create_schema and settings.postgres_dsn:
        create_session_tables(get_engine(settings.postgres_dsn))
        logger.info("main: customer_sessions schema ensured")
    yield


app = FastAPI(title="Portal Auth API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router)
app.include_router(sessions_router.router)


@app.get("/health")
def health():
    return {"status": "ok"}
