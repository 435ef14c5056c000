import logging
import threading
from collections.abc import Callable
from types import TracebackType

import sentry_sdk

from seqhub.core.security import Credential
from seqhub.core.security import parse_credential
from seqhub.services.sequence_service import FetchError
from seqhub.services.sequence_service import fetch_module_state
from seqhub.settings import Settings
from seqhub.state import FetchStatus
from seqhub.state import ModuleState


logger = logging.getLogger(__name__)

Fetcher = Callable[[Credential, Settings], ModuleState]

STATUS_LIGHTS: dict[FetchStatus, tuple[float, float]] = {
    FetchStatus.IDLE: (0.0, 0.0),
    FetchStatus.IN_PROGRESS: (0.5, 1.0),
    FetchStatus.ERROR: (0.0, 1.0),
    FetchStatus.SUCCESS: (1.0, 0.0),
}


def status_light(status: FetchStatus) -> tuple[float, float]:
    """Map a fetch status to (green, red) indicator brightness."""

    return STATUS_LIGHTS[status]


class FetchWorker:
    """Background thread that runs at most one contribution fetch at a time.

    Callers submit credential text and read status and state at any time.
    Status, state and the last error are only changed under one lock, so a
    reader never sees a success status next to the previous fetch's data.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        fetcher: Fetcher = fetch_module_state,
        initial_state: ModuleState | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._fetcher = fetcher
        self._lock = threading.Lock()
        self._requested = threading.Event()
        self._stopping = threading.Event()
        self._thread: threading.Thread | None = None

        self._status = FetchStatus.IDLE
        self._state = initial_state or ModuleState()
        self._last_error: FetchError | None = None
        self._pending: str | None = None

    def __enter__(self) -> "FetchWorker":
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stopping.clear()
        self._thread = threading.Thread(
            target=self._run, name="seqhub-fetch-worker", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> bool:
        """Signal the worker to stop and wait for it to exit.

        Returns False if the thread is still alive after `timeout`, e.g. while
        a fetch is blocked on the network. The worker then stays registered
        as running and `stop()` must be called again.
        """

        self._stopping.set()
        self._requested.set()
        if self._thread is None:
            return True

        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Fetch worker did not exit within %s seconds", timeout)
            return False

        self._thread = None
        with self._lock:
            if self._pending is not None:
                # Accepted but never served.
                self._pending = None
                self._status = FetchStatus.IDLE
        return True

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def submit_credential(self, text: str) -> bool:
        """Request a fetch with `text`.

        Ignored while a fetch is in progress or while the worker is not running.
        """

        if not self.is_running or self._stopping.is_set():
            logger.debug("Fetch worker is not running, request ignored")
            return False

        with self._lock:
            if self._status is FetchStatus.IN_PROGRESS:
                logger.debug("Fetch already in progress, request ignored")
                return False
            self._status = FetchStatus.IN_PROGRESS
            self._pending = text
        self._requested.set()
        return True

    def current_status(self) -> FetchStatus:
        with self._lock:
            return self._status

    def current_state(self) -> ModuleState:
        with self._lock:
            return self._state

    def last_error(self) -> FetchError | None:
        with self._lock:
            return self._last_error

    def snapshot(self) -> tuple[FetchStatus, ModuleState]:
        """Return status and state as observed together."""

        with self._lock:
            return self._status, self._state

    def load_state(self, state: ModuleState) -> None:
        """Replace the current state, e.g. with one restored from storage."""

        with self._lock:
            self._state = state

    def _run(self) -> None:
        while not self._stopping.is_set():
            if not self._requested.wait(self.settings.poll_interval_seconds):
                continue
            self._requested.clear()
            if self._stopping.is_set():
                break
            self._process_pending()

    def _process_pending(self) -> None:
        with self._lock:
            text, self._pending = self._pending, None
        if text is None:
            return

        credential = parse_credential(text)
        if not credential.token:
            logger.info("No GitHub token provided, skipping fetch")
            self._finish(FetchStatus.IDLE)
            return

        try:
            state = self._fetcher(credential, self.settings)
        except FetchError as exc:
            logger.warning("Contribution fetch failed (%s): %s", exc.kind, exc)
            sentry_sdk.capture_exception(exc)
            self._finish(FetchStatus.ERROR, error=exc)
            return
        except Exception as exc:
            logger.exception("Unexpected error during contribution fetch")
            sentry_sdk.capture_exception(exc)
            error = FetchError(str(exc) or type(exc).__name__)
            error.__cause__ = exc
            self._finish(FetchStatus.ERROR, error=error)
            return

        logger.info(
            "Fetched contributions starting %s (%d days)",
            state.start_date,
            len(state.contributions),
        )
        self._finish(FetchStatus.SUCCESS, state=state)

    def _finish(
        self,
        status: FetchStatus,
        state: ModuleState | None = None,
        error: FetchError | None = None,
    ) -> None:
        with self._lock:
            if state is not None:
                self._state = state
            self._last_error = error
            self._status = status
        logger.debug("Fetch status is now %s", status.value)
