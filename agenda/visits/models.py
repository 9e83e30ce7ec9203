from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship

from agenda.database import Base
from agenda.shared.models import IdentityKey, RecordMixin


class VisitStatus(str, Enum):
    SCHEDULED = "Agendada"
    COMPLETED = "Concluída"
    CANCELLED = "Cancelada"


class Visit(Base, RecordMixin):
    __tablename__ = "visits"

    client_id = Column(
        IdentityKey,
        ForeignKey("clients.id", name="visits_client_id_fkey", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(DateTime(timezone=True), nullable=False)
    subject = Column(String, nullable=True)
    # Stored as plain text so existing rows keep their values
    status = Column(
        SAEnum(
            VisitStatus,
            native_enum=False,
            create_constraint=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=True,
    )

    client = relationship("agenda.clients.models.Client", back_populates="visits")
