from datetime import datetime
from typing import Any

from sqlalchemy import DateTime
from sqlalchemy import JSON
from sqlalchemy import String
from sqlalchemy import func
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column

from seqhub.db import Base


class ModuleDocument(Base):
    """Persisted module state document, one row per module instance key.

    Only the serialized `ModuleState` is stored here. Credentials never are.
    """

    __tablename__ = "module_documents"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    document: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
