"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring: logging, the process-wide
notifier (email transport), the optional Redis revocation store and the
SQL engine. No business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from libris.core.config import get_settings
from libris.infrastructure.external.email import (
    BestEffortNotifier,
    EmailTemplateRenderer,
    build_dispatcher,
)
from libris.infrastructure.persistence.database import dispose_engine
from libris.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, notifier connect, revocation store (if enabled).
    Shutdown order: drain pending emails and close the transport, revocation
    store disconnect, SQL engine dispose.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    notifier = BestEffortNotifier(
        build_dispatcher(settings),
        EmailTemplateRenderer(app_name=settings.app_name),
    )
    await notifier.connect()
    app.state.notifier = notifier

    if settings.session_revocation_enabled:
        from libris.infrastructure.cache.revocation import RedisRevocationStore

        revocation_store = RedisRevocationStore(settings=settings)
        await revocation_store.connect()
        app.state.revocation_store = revocation_store
    else:
        app.state.revocation_store = None

    logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    # ---- Shutdown ----
    await notifier.close()
    logger.info("Notifier closed")

    if app.state.revocation_store is not None:
        await app.state.revocation_store.disconnect()
        app.state.revocation_store = None

    await dispose_engine()
