"""
Record store with upsert-merge semantics.

upsert_merge(collection, id, fields) sets the provided fields and leaves every
absent column untouched. On first write absent columns take their defaults
(done=False, created_at=now); on conflict only the provided fields and
updated_at change. Repeated or concurrent writes of the same record converge.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sowcal.core.config import settings
from sowcal.core.errors import StoreError
from sowcal.db.session import AsyncSessionLocal
from sowcal.models.task import Task

logger = logging.getLogger(__name__)

_MERGEABLE_FIELDS = frozenset({"owner_id", "plant_slug", "type", "due_date", "notes"})

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class RecordStore(Protocol):
    async def upsert_merge(self, collection: str, id: str, fields: dict) -> None:
        ...


def _task_to_dict(task: Task) -> dict:
    return {
        "id": task.id,
        "owner_id": task.owner_id,
        "plant_slug": task.plant_slug,
        "type": task.type,
        "due_date": task.due_date,
        "notes": task.notes,
        "done": task.done,
        "done_at": task.done_at,
        "created_at": task.created_at,
        "updated_at": task.updated_at,
    }


class SqlRecordStore:
    """RecordStore over the `tasks` table (PostgreSQL or SQLite)."""

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None) -> None:
        self._session_factory = session_factory or AsyncSessionLocal

    def _check(self, collection: str, fields: dict) -> None:
        if collection != settings.TASKS_COLLECTION:
            raise StoreError(f"unknown collection {collection!r}")
        unknown = set(fields) - _MERGEABLE_FIELDS
        if unknown:
            raise StoreError(f"fields not writable by merge: {sorted(unknown)}")

    async def upsert_merge(self, collection: str, id: str, fields: dict) -> None:
        self._check(collection, fields)
        values: dict[str, Any] = {**fields, "id": id, "updated_at": datetime.now(timezone.utc)}

        try:
            async with self._session_factory() as db:
                dialect = db.bind.dialect.name
                insert = _INSERTS.get(dialect)
                if insert is None:
                    raise StoreError(f"upsert not supported for dialect {dialect!r}")

                stmt = insert(Task).values(**values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[Task.id],
                    set_={key: stmt.excluded[key] for key in values if key != "id"},
                )
                await db.execute(stmt)
                await db.commit()
        except SQLAlchemyError as exc:
            logger.error("upsert_merge: %s/%s failed: %s", collection, id, exc)
            raise StoreError(f"upsert of {collection}/{id} failed: {exc}") from exc

    async def get(self, collection: str, id: str) -> Optional[dict]:
        self._check(collection, {})
        async with self._session_factory() as db:
            task = await db.scalar(select(Task).where(Task.id == id))
            return _task_to_dict(task) if task is not None else None

    async def list_for_owner(self, owner_id: str) -> list[dict]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(Task).where(Task.owner_id == owner_id).order_by(Task.due_date, Task.id)
            )
            return [_task_to_dict(t) for t in result.scalars().all()]


async def mark_done(db: AsyncSession, task_id: str, when: Optional[datetime] = None) -> bool:
    """Completion write as issued by the task list. Returns False if the task does not exist."""
    result = await db.execute(
        update(Task)
        .where(Task.id == task_id)
        .values(done=True, done_at=when or datetime.now(timezone.utc))
    )
    await db.commit()
    return result.rowcount > 0
