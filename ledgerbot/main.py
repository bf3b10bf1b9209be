import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ledgerbot import __version__
from ledgerbot.core.config import Settings, get_settings
from ledgerbot.core.container import ApplicationContainer, build_container
from ledgerbot.infrastructure.database import init_db
from ledgerbot.interfaces.http import create_api_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, container: Optional[ApplicationContainer] = None) -> FastAPI:
    settings = settings or get_settings()
    container = container or build_container(settings)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db(container.engine)
        logger.info("Ledger ready (%s, database %s)", settings.environment, container.engine.url.render_as_string())
        yield
        await container.dispose()

    app = FastAPI(
        title=settings.project_name,
        description="Shared multi-account ledger with conversational entry flows",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/health", summary="Liveness probe")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
