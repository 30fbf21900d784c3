import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orderassist.conversation.store import DatabaseSessionStore
from orderassist.core.config import CORS_ORIGINS, ENV, SESSION_STORE
from orderassist.core.database import Base, SessionLocal, engine
from orderassist.core.logging_setup import configure_logging
from orderassist.middleware.observability import ObservabilityMiddleware
import orderassist.models  # registers tables before create_all

from orderassist.routers.chat import router as chat_router
from orderassist.routers.internal_metrics import router as internal_metrics_router
from orderassist.routers.sheets import router as sheets_router
from orderassist.routers.webhook import router as webhook_router

configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


def _startup_tasks() -> None:
    logger.info("Starting order assistant env=%s session_store=%s", ENV, SESSION_STORE)
    if SESSION_STORE == "database":
        Base.metadata.create_all(bind=engine)
        removed = DatabaseSessionStore(SessionLocal).purge_expired()
        logger.info("Expired session entries removed=%s", removed)


app = FastAPI(title="Order Assistant API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(ObservabilityMiddleware)

for router in (chat_router, webhook_router, sheets_router, internal_metrics_router):
    app.include_router(router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
