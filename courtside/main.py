import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from courtside.api.v1.api import api_router
from courtside.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Web and Expo dev servers
DEV_ORIGINS = [
    "http://127.0.0.1:3000", "http://localhost:3000",
    "http://127.0.0.1:8081", "http://localhost:8081",
]


def cors_origins() -> list[str]:
    configured = [o.strip() for o in (settings.CORS_ORIGINS or "").split(",") if o.strip()]
    return configured or DEV_ORIGINS


def create_app() -> FastAPI:
    application = FastAPI(title=settings.APP_NAME)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.include_router(api_router)

    @application.get("/health")
    def health():
        return {"status": "ok"}

    logger.info("%s ready (env=%s)", settings.APP_NAME, settings.ENV)
    return application


app = create_app()
