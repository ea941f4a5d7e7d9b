from __future__ import annotations

import datetime as dt
from typing import Any, Iterator, Optional

from bson import ObjectId
from sqlalchemy import DateTime, Engine, String, Text, create_engine, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column
from sqlalchemy.pool import StaticPool

from ..exceptions import BlobNotFoundError, StorageError
from ..ids import BlobId
from ..models import BlobRecord, as_utc
from .settings import StoreSettings


class Base(DeclarativeBase):
    pass


class BlobRow(Base):
    __tablename__ = "json_blobs"

    id: Mapped[str] = mapped_column(String(24), primary_key=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    accessed: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    def to_record(self) -> BlobRecord:
        return BlobRecord(
            id=ObjectId(self.id),
            body=self.body,
            created=as_utc(self.created),
            updated=as_utc(self.updated),
            accessed=as_utc(self.accessed),
        )


def make_engine(url: str, *, echo: bool = False) -> Engine:
    engine_kwargs: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    if url.startswith("sqlite") and (":memory:" in url or url.rstrip("/") == "sqlite:"):
        engine_kwargs["poolclass"] = StaticPool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    return create_engine(url, **engine_kwargs)


class SqlBlobStore:
    """Blob store over one SQL table (``json_blobs``) through SQLAlchemy."""

    def __init__(self, engine: Engine, *, create_tables: bool = True, scan_batch_size: int = 500):
        self._engine = engine
        self._scan_batch_size = scan_batch_size
        if create_tables:
            try:
                Base.metadata.create_all(engine)
            except SQLAlchemyError as exc:
                raise StorageError("failed to create json_blobs table") from exc

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> "SqlBlobStore":
        return cls(make_engine(settings.resolved_sql_url, echo=settings.echo))

    @property
    def engine(self) -> Engine:
        return self._engine

    def insert(self, record: BlobRecord) -> None:
        row = BlobRow(
            id=str(record.id),
            body=record.body,
            created=record.created,
            updated=record.updated,
            accessed=record.accessed,
        )
        try:
            with Session(self._engine) as session, session.begin():
                session.add(row)
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to insert blob {record.id}") from exc

    def find_by_id(self, blob_id: BlobId) -> Optional[BlobRecord]:
        try:
            with Session(self._engine) as session:
                row = session.get(BlobRow, str(blob_id))
                return row.to_record() if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to find blob {blob_id}") from exc

    def replace(self, old: BlobRecord, new: BlobRecord) -> None:
        stmt = (
            update(BlobRow)
            .where(BlobRow.id == str(old.id), BlobRow.updated == old.updated)
            .values(
                body=new.body,
                created=new.created,
                updated=new.updated,
                accessed=new.accessed,
            )
        )
        try:
            with Session(self._engine) as session, session.begin():
                matched = session.execute(stmt).rowcount
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to replace blob {old.id}") from exc
        if not matched:
            raise BlobNotFoundError(old.id)

    def remove(self, record: BlobRecord) -> int:
        return self._delete(record, BlobRow.id == str(record.id), BlobRow.updated == record.updated)

    def remove_expired(self, record: BlobRecord, cutoff: dt.datetime) -> int:
        return self._delete(
            record,
            BlobRow.id == str(record.id),
            BlobRow.updated == record.updated,
            BlobRow.accessed < cutoff,
        )

    def _delete(self, record: BlobRecord, *criteria: Any) -> int:
        try:
            with Session(self._engine) as session, session.begin():
                res = session.execute(delete(BlobRow).where(*criteria))
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to remove blob {record.id}") from exc
        return int(res.rowcount or 0)

    def scan_accessed_before(self, cutoff: dt.datetime) -> Iterator[BlobRecord]:
        return self._scan(cutoff)

    def _scan(self, cutoff: dt.datetime) -> Iterator[BlobRecord]:
        # Keyset pages, each read in its own short session, so callers can
        # delete rows between pages.
        last_id = ""
        while True:
            stmt = (
                select(BlobRow)
                .where(BlobRow.accessed < cutoff, BlobRow.id > last_id)
                .order_by(BlobRow.id)
                .limit(self._scan_batch_size)
            )
            try:
                with Session(self._engine) as session:
                    page = [row.to_record() for row in session.scalars(stmt)]
            except SQLAlchemyError as exc:
                raise StorageError("failed to scan for expired blobs") from exc
            if not page:
                return
            yield from page
            last_id = str(page[-1].id)

    def set_accessed(self, blob_id: BlobId, accessed: dt.datetime) -> None:
        stmt = update(BlobRow).where(BlobRow.id == str(blob_id)).values(accessed=accessed)
        try:
            with Session(self._engine) as session, session.begin():
                session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to set accessed time for blob {blob_id}") from exc

    def count(self) -> int:
        try:
            with Session(self._engine) as session:
                return int(session.scalar(select(func.count()).select_from(BlobRow)) or 0)
        except SQLAlchemyError as exc:
            raise StorageError("failed to count blobs") from exc

    def close(self) -> None:
        self._engine.dispose()
