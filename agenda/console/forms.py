import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from agenda.console.models import Address, ClientRecord, VisitRecord, VisitStatus

NON_DIGITS = re.compile(r"\D")
PHONE_PARTS = re.compile(r"^(\d{0,2})(\d{0,5})(\d{0,4})$")
FORM_DATE_FORMAT = "%Y-%m-%dT%H:%M"


def digits_only(value: str) -> str:
    return NON_DIGITS.sub("", value)


def format_phone(value: str) -> str:
    """Progressively format typed digits as ``(DD) DDDDD-DDDD``."""
    if not value:
        return ""
    digits = digits_only(value)[:11]
    area, first, second = PHONE_PARTS.match(digits).groups()
    formatted = ""
    if area:
        formatted = f"({area}"
    if first:
        formatted += f") {first}"
    if second:
        formatted += f"-{second}"
    return formatted


def to_form_date(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(FORM_DATE_FORMAT)


class ClientFormData(BaseModel):
    """Client form inputs; absent values are shown as empty strings."""
    name: str = ""
    phone: str = ""
    email: str = ""
    cpf: str = ""
    address: Address = Field(default_factory=Address)

    @classmethod
    def from_client(cls, client: Optional[ClientRecord]) -> "ClientFormData":
        if client is None:
            return cls()
        return cls(
            name=client.name,
            phone=client.phone or "",
            email=client.email or "",
            cpf=client.cpf or "",
            address=client.address or Address(),
        )

    def set_phone(self, value: str) -> None:
        self.phone = format_phone(value)

    def payload(self) -> Dict[str, Any]:
        return self.model_dump()


class VisitFormData(BaseModel):
    client_id: int = 0
    date: str = ""
    subject: str = ""
    status: VisitStatus = VisitStatus.SCHEDULED

    @classmethod
    def for_visit(
        cls,
        visit: Optional[VisitRecord],
        clients: List[ClientRecord],
        preselected_client_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> "VisitFormData":
        if visit is not None:
            client_id = visit.client_id
        elif preselected_client_id:
            client_id = preselected_client_id
        elif clients:
            client_id = clients[0].id
        else:
            client_id = 0

        if visit is not None:
            date = to_form_date(visit.date)
        else:
            date = to_form_date(now or datetime.now(timezone.utc))

        return cls(
            client_id=client_id,
            date=date,
            subject=(visit.subject or "") if visit else "",
            status=visit.status if visit else VisitStatus.SCHEDULED,
        )

    def payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
