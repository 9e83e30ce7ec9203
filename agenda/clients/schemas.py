from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator, model_validator

from agenda.clients.sanitization import sanitize_client_payload


class Address(BaseModel):
    street: str = ""
    number: str = ""
    complement: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""


class ClientBase(BaseModel):
    name: str
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    cpf: Optional[str] = None
    address: Optional[Address] = None


class ClientPayload(ClientBase):
    """Incoming client body; blanks are normalized before any field is validated."""

    @model_validator(mode="before")
    @classmethod
    def sanitize(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return sanitize_client_payload(data)
        return data

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("name must not be empty")
        return value


class ClientCreate(ClientPayload):
    pass


class ClientUpdate(ClientPayload):
    name: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def name_not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("name must not be null")
        return value


class ClientResponse(ClientBase):
    id: int
    # Stored values are returned as-is, even ones written before validation existed
    email: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
