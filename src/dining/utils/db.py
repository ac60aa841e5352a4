import sqlite3
from contextlib import contextmanager

from protean.domain import Domain
from protean.utils.globals import current_uow
from sqlalchemy import Index, create_engine, event
from sqlalchemy.engine import Engine

# One review per author per establishment, enforced by the database as well
UNIQUE_REVIEW_INDEX = "uq_review_author_establishment"


def setup_db(domain: Domain):
    """Setup database schema"""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in ("sqlite", "postgresql"):
                engine = create_engine(provider.conn_info["database_uri"])

                # Accessing _dao registers each element's model with SQLAlchemy
                for _, aggregate_record in domain.registry.aggregates.items():
                    if aggregate_record.cls.meta_.provider == provider.name:
                        domain.repository_for(aggregate_record.cls)._dao  # noqa: B018

                for _, entity_record in domain.registry.entities.items():
                    if entity_record.cls.meta_.provider == provider.name:
                        domain.repository_for(entity_record.cls)._dao  # noqa: B018

                # Outbox tables are registered internally by protean
                if hasattr(domain, "_outbox_repos") and provider.name in domain._outbox_repos:
                    domain._outbox_repos[provider.name]._dao  # noqa: B018

                provider._metadata.create_all(engine)

                index = _unique_review_index(provider._metadata)
                if index is not None:
                    index.create(engine, checkfirst=True)

                engine.dispose()


def drop_db(domain: Domain):
    """Drop database schema"""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in ("sqlite", "postgresql"):
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.drop_all(engine)
                engine.dispose()


def _unique_review_index(metadata) -> Index | None:
    table = _find_table(metadata, "review")
    if table is None:
        return None

    for index in table.indexes:
        if index.name == UNIQUE_REVIEW_INDEX:
            return index
    return Index(UNIQUE_REVIEW_INDEX, table.c.author_id, table.c.establishment_id, unique=True)


def _find_table(metadata, name):
    for table in metadata.tables.values():
        if table.name == name:
            return table
    return None


def table_for(dao):
    """The SQLAlchemy table backing a repository's element."""
    name = dao.entity_cls.meta_.schema_name
    table = _find_table(dao.provider._metadata, name)
    if table is None:
        raise LookupError(f"No table registered for {dao.entity_cls.__name__}")
    return table


@contextmanager
def session_for(dao):
    """The active unit of work's session, or a short-lived one outside of it."""
    session = dao._get_session()
    if current_uow:
        yield session
        return

    try:
        yield session
        session.commit()
    finally:
        session.close()


def _on_connect(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        # Hand transaction control to the "begin" hook below
        dbapi_connection.isolation_level = None


def _on_begin(conn):
    if conn.dialect.name == "sqlite":
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def install_transaction_hooks():
    """Open every SQLite transaction with ``BEGIN IMMEDIATE``.

    SQLite ignores ``SELECT ... FOR UPDATE``, so writers serialize on the
    database lock instead of the establishment row lock PostgreSQL takes.
    """
    if not event.contains(Engine, "connect", _on_connect):
        event.listen(Engine, "connect", _on_connect)
    if not event.contains(Engine, "begin", _on_begin):
        event.listen(Engine, "begin", _on_begin)
