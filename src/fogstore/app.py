"""Fogstore — FastAPI gateway application.

The standardized API in front of the fog record store. Game clients
store, list, reveal and disclose positions only through these
endpoints.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from fogstore import __version__
from fogstore.auth import make_api_key_checker
from fogstore.backends import BlobStorage, open_storage
from fogstore.codec import PositionCodec
from fogstore.config import FogConfig, load_config
from fogstore.disclosure import DisclosureProtocol, DisclosureSession
from fogstore.errors import (
    FogError,
    NotFoundError,
    SignatureRefusedError,
    StorageUnavailableError,
    UnauthorizedError,
)
from fogstore.lifecycle import RecordLifecycle
from fogstore.records import FogRecordStore
from fogstore.routes import disclosure, meta, records

logger = logging.getLogger("fogstore")
audit_logger = logging.getLogger("fogstore.audit")


def install_services(app: FastAPI, storage: BlobStorage, config: FogConfig) -> None:
    """Wire store, lifecycle and disclosure session onto app state."""
    store = FogRecordStore(storage)
    codec = PositionCodec()
    session = DisclosureSession.start(
        contract_address=config.contract_address,
        chain_id=config.chain_id,
        duration_days=config.duration_days,
    )
    app.state.storage = storage
    app.state.store = store
    app.state.codec = codec
    app.state.lifecycle = RecordLifecycle(store)
    app.state.disclosure = DisclosureProtocol(session, codec, sign_timeout=config.sign_timeout)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(request: Request, exc: UnauthorizedError):
        return JSONResponse(status_code=403, content={"detail": str(exc)})

    @app.exception_handler(SignatureRefusedError)
    async def refused_handler(request: Request, exc: SignatureRefusedError):
        return JSONResponse(status_code=403, content={"detail": str(exc)})

    @app.exception_handler(StorageUnavailableError)
    async def unavailable_handler(request: Request, exc: StorageUnavailableError):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(FogError)
    async def fog_handler(request: Request, exc: FogError):
        return JSONResponse(status_code=500, content={"detail": str(exc)})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: open blob storage. Shutdown: close it."""
    config: FogConfig = app.state.config
    logger.info("Opening blob storage at %s", config.db_path or "<memory>")
    storage = open_storage(config.db_path)
    install_services(app, storage, config)
    logger.info(
        "Fogstore gateway ready (contract %s, chain %d)",
        config.contract_address or "<unset>",
        config.chain_id,
    )
    yield
    storage.close()
    logger.info("Fogstore gateway shut down")


def create_app(config: FogConfig | None = None) -> FastAPI:
    """Application factory."""
    if config is None:
        config = load_config()

    app = FastAPI(
        title="Fogstore",
        description="Fog of war store — fogged positions with signature-gated disclosure",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    check_key = make_api_key_checker(config.api_key)

    # ── Exception handlers ────────────────────────────────────

    register_exception_handlers(app)

    # ── Audit middleware ──────────────────────────────────────

    @app.middleware("http")
    async def audit_log(request: Request, call_next):
        start = time.monotonic()
        response = await call_next(request)
        elapsed = time.monotonic() - start
        audit_logger.info(
            "%s %s %d %.3fs",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
        )
        return response

    # ── Routers ───────────────────────────────────────────────

    app.include_router(meta.router, dependencies=[Depends(check_key)])
    app.include_router(records.router, dependencies=[Depends(check_key)])
    app.include_router(disclosure.router, dependencies=[Depends(check_key)])

    return app
