from pydantic import BaseModel

from seqhub.state import FetchStatus


class CredentialSubmission(BaseModel):
    """Credential text in `username@token` or bare `token` form."""

    credential: str


class FetchAccepted(BaseModel):
    """Result of a fetch request."""

    accepted: bool
    status: FetchStatus


class StatusLight(BaseModel):
    green: float
    red: float


class FetchErrorDetail(BaseModel):
    kind: str
    message: str


class StatusResponse(BaseModel):
    """Current fetch status with its indicator colors and last failure."""

    status: FetchStatus
    light: StatusLight
    error: FetchErrorDetail | None = None


class StateDocument(BaseModel):
    """Persisted module state document."""

    startDate: str
    contributionsPerDay: list[float]
