"""
Forward-only schema migrations run on every startup.

Each migration is keyed by a predicate that inspects the live schema, so a
migration that already ran simply reports nothing to do.
"""
from dataclasses import dataclass
from typing import Callable, List

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import inspect
from sqlalchemy.engine import Connection


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    is_pending: Callable[[Connection], bool]
    apply: Callable[[Operations], None]


def has_column(conn: Connection, table: str, column: str) -> bool:
    inspector = inspect(conn)
    if not inspector.has_table(table):
        return False
    return any(col["name"] == column for col in inspector.get_columns(table))


def _drop_visit_client_name(op: Operations) -> None:
    op.drop_column("visits", "client_name")


MIGRATIONS: List[Migration] = [
    # Visits used to carry a copy of the client's name; it is now joined in on read
    Migration(
        version=1,
        name="drop_visits_client_name",
        is_pending=lambda conn: has_column(conn, "visits", "client_name"),
        apply=_drop_visit_client_name,
    ),
]


def pending_migrations(conn: Connection, migrations: List[Migration] = MIGRATIONS) -> List[Migration]:
    return [m for m in sorted(migrations, key=lambda m: m.version) if m.is_pending(conn)]


def apply_migration(conn: Connection, migration: Migration) -> None:
    op = Operations(MigrationContext.configure(conn))
    migration.apply(op)
