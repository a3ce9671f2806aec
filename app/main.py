from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.core.config import settings
from app.core.container import build_leaderboard_service
from app.core.db import engine, get_session
from app.core.errors import IdentitySourceError
from app.core.ranking import load_ranking_config
from app.utils.exception_handlers import (
    general_exception_handler,
    http_exception_handler,
    identity_source_exception_handler,
    validation_exception_handler,
)
from app.utils.router_discovery import register_routers


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None]:
    ranking = load_ranking_config(settings.ranking_config_path)
    app.state.leaderboard = build_leaderboard_service(ranking, get_session)

    if settings.warm_pinned_on_startup:
        await app.state.leaderboard.warm_pinned(chunk_size=settings.warm_chunk_size)
    logger.info("Leaderboard service ready")

    yield

    await engine.dispose()


app = FastAPI(
    title="Player Leaderboard API",
    lifespan=app_lifespan,
    servers=[{"url": "http://localhost:8080", "description": "Local server"}],
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


register_routers(app)

app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(IdentitySourceError, identity_source_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)


@app.get("/")
async def healthz() -> str:
    return "OK"
