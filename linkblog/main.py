import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse

from linkblog.api import api_router
from linkblog.config import Settings, get_settings
from linkblog.database import create_engine, create_session_factory, init_db
from linkblog.errors import LinkAPIError
from linkblog.services.metadata import MetadataService
from linkblog.services.renderer import LinkRenderer

logger = logging.getLogger("linkblog")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the store, metadata service and templates once per process."""
        engine = create_engine(settings)
        await init_db(engine)
        app.state.session_factory = create_session_factory(engine)
        app.state.metadata_service = MetadataService(timeout=settings.metadata_timeout)
        app.state.renderer = LinkRenderer()
        logger.info("%s started", settings.app_name)
        yield
        await engine.dispose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.include_router(api_router)

    @app.exception_handler(LinkAPIError)
    async def link_error_handler(request: Request, exc: LinkAPIError) -> PlainTextResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return PlainTextResponse(exc.detail, status_code=exc.status_code)

    @app.get("/health", tags=["system"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok", "app": settings.app_name}

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    uvicorn.run(
        "linkblog.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
