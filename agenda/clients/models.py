from sqlalchemy import JSON, Column, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from agenda.database import Base
from agenda.shared.models import RecordMixin


class Client(Base, RecordMixin):
    """Contact record; visits are removed by the store when the client is deleted."""
    __tablename__ = "clients"

    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    cpf = Column(String, nullable=True)
    address = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)

    visits = relationship("agenda.visits.models.Visit", back_populates="client", passive_deletes=True)
