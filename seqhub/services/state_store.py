import math
from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from seqhub.models import ModuleDocument
from seqhub.state import ModuleState


def serialize_state(state: ModuleState) -> dict[str, Any]:
    """Build the persisted document for `state`. Credentials are never included."""

    return {
        "startDate": state.start_date,
        "contributionsPerDay": list(state.contributions),
    }


def deserialize_state(document: Any) -> ModuleState:
    """Rebuild module state from a persisted document, tolerating bad fields.

    A missing or non-string start date becomes empty, a missing or non-array
    contributions field becomes an empty sequence, and array items that are
    not numbers are skipped.
    """

    if not isinstance(document, Mapping):
        return ModuleState()

    raw_start_date = document.get("startDate")
    start_date = raw_start_date if isinstance(raw_start_date, str) else ""

    raw_contributions = document.get("contributionsPerDay")
    contributions: list[float] = []
    if isinstance(raw_contributions, list):
        for item in raw_contributions:
            if isinstance(item, bool) or not isinstance(item, (int, float)):
                continue
            if not math.isfinite(item):
                continue
            contributions.append(float(item))

    return ModuleState(start_date=start_date, contributions=tuple(contributions))


def save_state(db: Session, key: str, state: ModuleState) -> None:
    """Persist `state` under `key`, replacing any previous document."""

    document = serialize_state(state)
    row = db.get(ModuleDocument, key)
    if row is None:
        db.add(ModuleDocument(key=key, document=document))
    else:
        row.document = document
    db.commit()


def load_state(db: Session, key: str) -> ModuleState:
    """Load the state saved under `key`, or an empty state if there is none."""

    row = db.get(ModuleDocument, key)
    if row is None:
        return ModuleState()
    return deserialize_state(row.document)
