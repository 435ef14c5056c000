import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.orm import Session
from sqlalchemy.orm import sessionmaker

from seqhub.api.routes.sequence import router
from seqhub.core.observability import configure_logging
from seqhub.core.observability import init_sentry
from seqhub.db import Base
from seqhub.db import create_session_factory
from seqhub.services.state_store import load_state
from seqhub.services.state_store import save_state
from seqhub.settings import Settings
from seqhub.worker import FetchWorker


logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    session_factory: sessionmaker[Session] | None = None,
    worker: FetchWorker | None = None,
) -> FastAPI:
    """Build the API app with its fetch worker and state persistence."""

    app_settings = settings or Settings()
    configure_logging(app_settings)
    init_sentry(app_settings)

    sessions = session_factory or create_session_factory(app_settings.database_url)
    fetch_worker = worker or FetchWorker(settings=app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        Base.metadata.create_all(bind=sessions.kw["bind"])
        with sessions() as db:
            fetch_worker.load_state(load_state(db, app_settings.state_key))
        fetch_worker.start()
        logger.info("Fetch worker started")
        try:
            yield
        finally:
            # The worker must be gone before its state is saved.
            fetch_worker.stop()
            logger.info("Fetch worker stopped")
            with sessions() as db:
                save_state(db, app_settings.state_key, fetch_worker.current_state())

    app = FastAPI(lifespan=lifespan)
    app.state.settings = app_settings
    app.state.session_factory = sessions
    app.state.worker = fetch_worker
    app.include_router(router)
    return app
