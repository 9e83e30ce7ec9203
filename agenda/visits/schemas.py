from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agenda.visits.models import VisitStatus


def as_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize to UTC; naive instants (``datetime-local`` form values) are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class VisitBase(BaseModel):
    client_id: int
    date: datetime
    subject: str
    status: VisitStatus

    @field_validator("date")
    @classmethod
    def date_is_aware(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_aware(value)


class VisitCreate(VisitBase):
    pass


class VisitUpdate(VisitBase):
    client_id: Optional[int] = None
    date: Optional[datetime] = None
    subject: Optional[str] = None
    status: Optional[VisitStatus] = None

    @field_validator("client_id", "date", "status", mode="before")
    @classmethod
    def not_null(cls, value: Any) -> Any:
        # Omit a field to leave it unchanged; null would clear a required column
        if value is None:
            raise ValueError("must not be null")
        return value


class VisitResponse(BaseModel):
    id: int
    client_id: int
    date: datetime
    subject: Optional[str] = None
    status: Optional[VisitStatus] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VisitListItem(VisitResponse):
    """Visit with the owning client's current name, resolved at read time."""
    client_name: str = Field(serialization_alias="clientName")
