from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI

from app.cfg import router as cfg_router
from app.logging_setup import configure_logging, logging_middleware
from app.options import apply_store_options
from app.settings_store import build_store_from_env
from app.sheet import router as sheet_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="sheet-backend")
    app.middleware("http")(logging_middleware)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(sheet_router)
    app.include_router(cfg_router)

    # Initialize settings synchronously so the engine options are set before the first cell
    try:
        loop = asyncio.get_event_loop()
    except RuntimeError:  # pragma: no cover
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
    store = loop.run_until_complete(build_store_from_env())
    app.state.settings = store
    opts = loop.run_until_complete(apply_store_options(store))
    logger.info("engine options log_level=%d allow_network=%s", opts.log_level, opts.allow_network)
    return app


app = create_app()
