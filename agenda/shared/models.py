from sqlalchemy import BigInteger, Column, DateTime, Identity, Integer, func

# SQLite only autoincrements an INTEGER PRIMARY KEY
IdentityKey = BigInteger().with_variant(Integer(), "sqlite")


class IdentityMixin:
    id = Column(IdentityKey, Identity(always=False), primary_key=True)


class CreatedAtMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class RecordMixin(IdentityMixin, CreatedAtMixin):
    """Store-assigned identity and creation timestamp for standard entities."""
    pass
