"""
Module: payroll_services.database
Responsibility: SQLAlchemy engine and session factory ownership, and the
    transactional scope every unit of work runs in.
Architecture position: Services.  Imports payroll_kernel models to create
    tables; the kernel never imports this module.

Invariants enforced:
    - No module-level engine.  Each ``Database`` handle owns its engine and
      session factory and is passed explicitly to whoever needs a session.
    - ``session_scope()`` commits on normal exit and rolls back on any
      exception, which is then re-raised unchanged.
    - Server databases run READ COMMITTED on a pre-pinged QueuePool; row
      locks (FOR UPDATE) are taken where stronger isolation is needed.
    - ``snapshot_scope()`` pins REPEATABLE READ on server databases so that
      multi-statement reads see one snapshot.  SQLite transactions already
      read from a single snapshot.
    - SQLite connections enforce foreign keys and issue their own BEGIN so
      that SAVEPOINTs behave as on a server database.

Failure modes:
    - ``sqlalchemy.exc.OperationalError`` on unreachable databases.
    - Pool exhaustion if pool_size + max_overflow is exceeded.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool

from payroll_config.schema import DatabaseSettings
from payroll_kernel.logging_config import get_logger

logger = get_logger("db.engine")

SNAPSHOT_ISOLATION_LEVEL = "REPEATABLE READ"


def _install_sqlite_listeners(engine: Engine) -> None:
    """Foreign keys on, and transaction control taken back from pysqlite."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Stop pysqlite from emitting BEGIN itself; see the "begin" hook.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


class Database:
    """
    Engine + session factory for one database.

    Usage::

        db = Database("postgresql://payroll:pw@localhost/payroll")
        with db.session_scope() as session:
            PayrollPortal(session).orders.submit(user_id, "2024-02-10", 12)
    """

    def __init__(
        self,
        url: str,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 5,
        pool_timeout: int = 30,
        pool_recycle: int = 1800,
    ):
        self.url = url
        self.dialect = make_url(url).get_backend_name()

        if self.dialect == "sqlite":
            self.engine = create_engine(url, echo=echo)
            _install_sqlite_listeners(self.engine)
        else:
            self.engine = create_engine(
                url,
                echo=echo,
                poolclass=QueuePool,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
                isolation_level="READ COMMITTED",
            )

        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

        logger.info(
            "engine_initialized",
            extra={
                "dialect": self.dialect,
                "pool_size": pool_size if self.dialect != "sqlite" else None,
                "echo": echo,
            },
        )

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> Database:
        return cls(
            settings.url,
            echo=settings.echo,
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_timeout=settings.pool_timeout,
            pool_recycle=settings.pool_recycle,
        )

    def session(self) -> Session:
        """A new, unscoped session.  The caller owns commit/rollback/close."""
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations.

        Postconditions: On normal exit, session is committed and closed.
            On exception, session is rolled back and closed.  The exception
            is re-raised to the caller.
        """
        session = self.session()
        logger.debug("transaction_started")
        try:
            yield session
            session.commit()
            logger.debug("transaction_committed")
        except Exception:
            session.rollback()
            logger.warning("transaction_rolled_back", exc_info=True)
            raise
        finally:
            session.close()

    @contextmanager
    def snapshot_scope(self) -> Generator[Session, None, None]:
        """
        ``session_scope()`` whose statements all read the same snapshot.

        Must be entered before the session touches the database: the
        isolation level is fixed when the transaction begins.
        """
        with self.session_scope() as session:
            if self.dialect != "sqlite":
                session.connection(
                    execution_options={"isolation_level": SNAPSHOT_ISOLATION_LEVEL},
                )
            yield session

    def create_tables(self) -> None:
        """Create every payroll table that does not exist yet."""
        # Importing the models package registers every table on Base.metadata.
        import payroll_kernel.models  # noqa: F401
        from payroll_kernel.db.base import Base

        Base.metadata.create_all(self.engine)
        logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})

    def drop_tables(self) -> None:
        """Drop all tables. Use with caution - primarily for testing."""
        import payroll_kernel.models  # noqa: F401
        from payroll_kernel.db.base import Base

        Base.metadata.drop_all(self.engine)

    def dispose(self) -> None:
        """Release every pooled connection."""
        self.engine.dispose()
