# vidtube/main.py
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from vidtube.config import settings
from vidtube.core.db import init_db, close_db
from vidtube.core.errors import (
    ApiError,
    api_error_handler,
    request_validation_handler,
    unhandled_error_handler,
)

from vidtube.api.v1.routers import users

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uniform error envelope for every failure path
app.add_exception_handler(ApiError, api_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_error_handler)


@app.on_event("startup")
async def on_startup():
    await init_db()
    logger.info("[startup] %s ready (env=%s)", settings.APP_NAME, settings.env)


@app.on_event("shutdown")
async def on_shutdown():
    await close_db()


# REST
app.include_router(users.router, prefix="/api/v1")

# Locally stored avatars / cover images
if settings.media_base_url.startswith("/"):
    app.mount(settings.media_base_url, StaticFiles(directory=settings.media_root, check_dir=False), name="media")


@app.get("/healthz")
def healthz():
    return {"ok": True}
