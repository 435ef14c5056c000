from typing import Any

from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends
from fastapi import Request
from sqlalchemy.orm import Session

from seqhub.api.schemas.sequence import CredentialSubmission
from seqhub.api.schemas.sequence import FetchAccepted
from seqhub.api.schemas.sequence import FetchErrorDetail
from seqhub.api.schemas.sequence import StateDocument
from seqhub.api.schemas.sequence import StatusLight
from seqhub.api.schemas.sequence import StatusResponse
from seqhub.db import get_db
from seqhub.services.state_store import deserialize_state
from seqhub.services.state_store import save_state
from seqhub.services.state_store import serialize_state
from seqhub.state import FetchStatus
from seqhub.worker import FetchWorker
from seqhub.worker import status_light


router = APIRouter()


def get_worker(request: Request) -> FetchWorker:
    return request.app.state.worker


@router.get("/health/live")
def health_live() -> dict[str, str]:
    """Return liveness probe response for health checks."""

    return {"status": "ok"}


@router.post("/fetch", status_code=202)
def request_fetch(
    payload: CredentialSubmission, worker: FetchWorker = Depends(get_worker)
) -> FetchAccepted:
    """Queue a contribution fetch unless one is already running."""

    accepted = worker.submit_credential(payload.credential)
    status = FetchStatus.IN_PROGRESS if accepted else worker.current_status()
    return FetchAccepted(accepted=accepted, status=status)


@router.get("/status")
def get_status(worker: FetchWorker = Depends(get_worker)) -> StatusResponse:
    """Return the fetch status, its indicator light and the last failure."""

    status = worker.current_status()
    green, red = status_light(status)
    error = worker.last_error()
    return StatusResponse(
        status=status,
        light=StatusLight(green=green, red=red),
        error=(
            FetchErrorDetail(kind=error.kind, message=str(error))
            if error is not None
            else None
        ),
    )


@router.get("/state")
def get_state(worker: FetchWorker = Depends(get_worker)) -> StateDocument:
    """Return the current module state as its persisted document."""

    return StateDocument(**serialize_state(worker.current_state()))


@router.put("/state")
def put_state(
    request: Request,
    document: Any = Body(...),
    worker: FetchWorker = Depends(get_worker),
    db: Session = Depends(get_db),
) -> StateDocument:
    """Replace the module state from a document and persist it."""

    state = deserialize_state(document)
    worker.load_state(state)
    save_state(db, request.app.state.settings.state_key, state)
    return StateDocument(**serialize_state(state))
