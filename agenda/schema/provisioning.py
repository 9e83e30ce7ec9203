import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from agenda.database import Base
from agenda.clients.models import Client
from agenda.visits.models import Visit
from agenda.schema.migrations import apply_migration, pending_migrations

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_ROLE = "service_role"
POLICY_NAME = "Enable all access for service role"


class SchemaState(str, Enum):
    UNCHECKED = "unchecked"
    SCHEMA_ABSENT = "schema-absent"
    CREATED = "created"
    SCHEMA_PRESENT = "schema-present"
    MIGRATION_CHECKED = "migration-checked"
    MIGRATION_APPLIED = "migration-applied"
    NO_OP = "no-op"


class ProvisioningError(Exception):
    """The schema could not be checked, created or migrated."""


@dataclass
class ProvisioningResult:
    state: SchemaState = SchemaState.UNCHECKED
    history: List[SchemaState] = field(default_factory=lambda: [SchemaState.UNCHECKED])
    applied: List[str] = field(default_factory=list)

    def advance(self, state: SchemaState) -> None:
        self.state = state
        self.history.append(state)


def _enable_row_level_security(conn: Connection, role: str) -> None:
    preparer = conn.dialect.identifier_preparer
    for table in (Client.__tablename__, Visit.__tablename__):
        quoted_table = preparer.quote(table)
        conn.execute(text(f"ALTER TABLE {quoted_table} ENABLE ROW LEVEL SECURITY"))
        conn.execute(text(
            f"CREATE POLICY {preparer.quote(POLICY_NAME)} ON {quoted_table} "
            f"FOR ALL TO {preparer.quote(role)} USING (true) WITH CHECK (true)"
        ))


def _provision(conn: Connection, service_role: str) -> ProvisioningResult:
    result = ProvisioningResult()
    logger.info("Checking database schema...")

    if not inspect(conn).has_table(Client.__tablename__):
        result.advance(SchemaState.SCHEMA_ABSENT)
        logger.info("Tables not found. Creating schema...")
        Base.metadata.create_all(conn, tables=[Client.__table__, Visit.__table__])
        if conn.dialect.name == "postgresql":
            _enable_row_level_security(conn, service_role)
        result.advance(SchemaState.CREATED)
        logger.info("Database schema created.")
        return result

    result.advance(SchemaState.SCHEMA_PRESENT)
    logger.info("Database schema already exists. Checking for pending migrations...")
    pending = pending_migrations(conn)
    result.advance(SchemaState.MIGRATION_CHECKED)

    if not pending:
        result.advance(SchemaState.NO_OP)
        logger.info("No pending schema migrations.")
        return result

    for migration in pending:
        logger.info("Applying migration %04d %s", migration.version, migration.name)
        apply_migration(conn, migration)
        result.applied.append(migration.name)
    result.advance(SchemaState.MIGRATION_APPLIED)
    logger.info("Applied %d schema migration(s).", len(result.applied))
    return result


async def provision_schema(engine: AsyncEngine, service_role: str = DEFAULT_SERVICE_ROLE) -> ProvisioningResult:
    """Create or migrate the schema in a single transaction.

    Safe to call on every startup: an up-to-date schema ends in ``NO_OP``.
    Raises ``ProvisioningError`` when the store is unreachable or refuses a
    statement; nothing is committed in that case.
    """
    try:
        async with engine.begin() as conn:
            return await conn.run_sync(_provision, service_role)
    except (SQLAlchemyError, OSError) as e:
        raise ProvisioningError(f"Schema provisioning failed: {e}") from e
