"""
Single-row storage for the file blob: a SQLAlchemy implementation and an
in-memory test implementation.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Protocol

from sqlalchemy import CheckConstraint, Column, Integer, Text, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

RECORD_ID = 1


class FileStoreError(Exception):
    """Storage backend failure (I/O, corruption, schema, timeout)."""


class FileStoreTimeout(FileStoreError):
    """A storage operation could not start within the configured timeout."""


class FileStore(Protocol):
    """Interface for access to the single file record."""

    def ensure_initialized(self) -> None:
        ...

    def get(self) -> Optional["FileRecord"]:
        ...

    def replace(self, content: str) -> None:
        ...

    def clear(self) -> None:
        ...

    def close(self) -> None:
        ...


@dataclass
class FileRecord:
    id: int
    content: str

    def as_dict(self) -> dict:
        return {"id": self.id, "content": self.content}


def _short_message(exc: SQLAlchemyError) -> str:
    # DBAPI errors wrap the driver exception, e.g. "database is locked".
    orig = getattr(exc, "orig", None)
    if orig is not None and str(orig):
        return str(orig)
    text = str(exc).strip()
    return text.splitlines()[0] if text else type(exc).__name__


class InMemoryFileStore:
    """Simple in-memory store for development and tests."""

    def __init__(self, timeout_seconds: float = 5.0):
        self.timeout_seconds = timeout_seconds
        self.record: Optional[FileRecord] = None
        self._lock = threading.Lock()

    @contextmanager
    def _locked(self, operation: str) -> Iterator[None]:
        if not self._lock.acquire(timeout=self.timeout_seconds):
            raise FileStoreTimeout(
                f"{operation} timed out after {self.timeout_seconds:g}s"
            )
        try:
            yield
        finally:
            self._lock.release()

    def ensure_initialized(self) -> None:
        with self._locked("initialize"):
            if self.record is None:
                self.record = FileRecord(id=RECORD_ID, content="")
                logger.info("Inserted default row")

    def get(self) -> Optional[FileRecord]:
        with self._locked("get"):
            if self.record is None:
                return None
            return FileRecord(id=self.record.id, content=self.record.content)

    def replace(self, content: str) -> None:
        with self._locked("replace"):
            self.record = FileRecord(id=RECORD_ID, content=content)

    def clear(self) -> None:
        self.replace("")

    def reset(self) -> None:
        """Drop the record entirely (useful in tests)."""
        with self._locked("reset"):
            self.record = None

    def close(self) -> None:
        return None


class SqlFileStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL; SQLite URLs
    share a single connection for the life of the process.
    """

    def __init__(self, database_url: str, timeout_seconds: float = 5.0):
        if not database_url:
            raise ValueError("A database URL is required for SqlFileStore")
        self.timeout_seconds = timeout_seconds
        self._lock = threading.Lock()
        try:
            url = make_url(database_url)
            if url.get_backend_name() == "sqlite":
                self.engine = create_engine(
                    url,
                    future=True,
                    poolclass=StaticPool,
                    connect_args={
                        "check_same_thread": False,
                        "timeout": timeout_seconds,
                    },
                )
            else:
                self.engine = create_engine(
                    url,
                    future=True,
                    pool_pre_ping=True,
                    pool_recycle=1800,
                    pool_timeout=timeout_seconds,
                )
        except SQLAlchemyError as exc:
            raise FileStoreError(_short_message(exc)) from exc
        except ImportError as exc:
            # DBAPI driver for the URL is not installed
            raise FileStoreError(str(exc)) from exc
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )

    @contextmanager
    def _locked(self, operation: str) -> Iterator[None]:
        if not self._lock.acquire(timeout=self.timeout_seconds):
            raise FileStoreTimeout(
                f"{operation} timed out after {self.timeout_seconds:g}s"
            )
        try:
            yield
        except SQLAlchemyError as exc:
            raise FileStoreError(_short_message(exc)) from exc
        finally:
            self._lock.release()

    def ensure_initialized(self) -> None:
        with self._locked("initialize"):
            Base.metadata.create_all(self.engine)
            logger.info(
                "Connected to database %s",
                self.engine.url.render_as_string(hide_password=True),
            )
            with self.Session() as session:
                if session.get(FileRow, RECORD_ID) is None:
                    session.add(FileRow(id=RECORD_ID, content=""))
                    session.commit()
                    logger.info("Inserted default row")

    def get(self) -> Optional[FileRecord]:
        with self._locked("get"):
            with self.Session() as session:
                row = session.get(FileRow, RECORD_ID)
                if not row:
                    return None
                return FileRecord(id=row.id, content=row.content)

    def replace(self, content: str) -> None:
        with self._locked("replace"):
            self._write(content)

    def clear(self) -> None:
        with self._locked("clear"):
            self._write("")

    def _write(self, content: str) -> None:
        with self.Session() as session:
            row = session.get(FileRow, RECORD_ID)
            if row:
                row.content = content
            else:
                session.add(FileRow(id=RECORD_ID, content=content))
            session.commit()

    def close(self) -> None:
        self.engine.dispose()


Base = declarative_base()


class FileRow(Base):
    __tablename__ = "file"
    __table_args__ = (CheckConstraint("id = 1", name="single_row"),)

    id = Column(Integer, primary_key=True, autoincrement=False)
    content = Column(Text, nullable=False)
