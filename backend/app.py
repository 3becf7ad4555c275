import logging
from contextlib import asynccontextmanager

import setproctitle

import settings
from brotli_asgi import BrotliMiddleware
from fastapi import FastAPI, APIRouter, Request
from fastapi.responses import JSONResponse

from models.common import init_db
from routes.blocks_route import router as blocks_router
from routes.feed_route import router as feed_router
from routes.friendship_route import router as friendship_router
from routes.notifications_route import router as notifications_router
from routes.posts_route import router as posts_router
from routes.user_route import get_version, router as user_router
from services.errors import SocialError
from starlette.middleware import Middleware
from starlette.middleware.sessions import SessionMiddleware

from utils.logs import setup_logs

logger = logging.getLogger("huddle.main")
setup_logs()
setproctitle.setproctitle("Huddle API")


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app"""
    logger.debug("Starting...")
    init_db()
    yield
    logger.debug("Closing app")


async def social_error_handler(request: Request, exc: SocialError):
    logger.info(f"{request.method} {request.url.path} refused: {exc!r}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code.value},
    )


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "code": "internal_error"},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""

    app = FastAPI(
        title="Huddle",
        description="Friends, posts and the feed between them",
        version=get_version(),
        middleware=[
            Middleware(BrotliMiddleware, minimum_size=1000),
            Middleware(SessionMiddleware, secret_key=settings.SESSION_SECRET_KEY),
        ],
        swagger_ui_parameters={
            "defaultModelsExpandDepth": 0,
        },  # collapse the swagger schema
        lifespan=app_lifespan,
        exception_handlers={
            SocialError: social_error_handler,
            Exception: unexpected_error_handler,
        },
    )

    # Mount routers
    api_router = APIRouter()
    api_router.include_router(user_router)
    api_router.include_router(friendship_router, tags=["friendship"])
    api_router.include_router(blocks_router, tags=["blocks"])
    api_router.include_router(feed_router, tags=["feed"])
    api_router.include_router(posts_router, tags=["posts"])
    api_router.include_router(notifications_router, tags=["notifications"])
    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app
