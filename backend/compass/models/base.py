"""Shared base for read-only journal snapshots."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict

from compass.services.clock import ensure_aware


# Naive timestamps from the store are UTC
AwareDatetime = Annotated[datetime, AfterValidator(ensure_aware)]


class Snapshot(BaseModel):
    """Immutable view of a stored record handed to the engine."""

    model_config = ConfigDict(frozen=True, from_attributes=True)
