from enum import Enum

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class FetchStatus(str, Enum):
    """Status of the background fetch, owned by the fetch worker."""

    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    ERROR = "error"
    SUCCESS = "success"


class ModuleState(BaseModel):
    """Start date and normalized per-day intensities published by a fetch."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    start_date: str = Field(default="", alias="startDate")
    contributions: tuple[float, ...] = Field(
        default=(), alias="contributionsPerDay"
    )
