from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class VisitStatus(str, Enum):
    SCHEDULED = "Agendada"
    COMPLETED = "Concluída"
    CANCELLED = "Cancelada"


class Address(BaseModel):
    street: str = ""
    number: str = ""
    complement: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""


class ClientRecord(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    cpf: Optional[str] = None
    address: Optional[Address] = None


class VisitRecord(BaseModel):
    id: int
    client_id: int
    client_name: str = Field(alias="clientName")
    date: datetime
    subject: Optional[str] = None
    status: VisitStatus = VisitStatus.SCHEDULED

    model_config = ConfigDict(populate_by_name=True)
