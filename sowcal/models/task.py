from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Enum, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from sowcal.db.base import Base


class Task(Base):
    __tablename__ = "tasks"

    # idempotency key: "{plant_slug}-{type}-{YYYY-MM-DD}"
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(128), index=True)
    plant_slug: Mapped[Optional[str]] = mapped_column(String(200), index=True)

    type: Mapped[str] = mapped_column(
        Enum(
            "seed_indoors", "direct_sow", "transplant", "harvest", "water",
            name="task_type_enum",
        )
    )
    due_date: Mapped[date] = mapped_column(Date, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    # Owned by the task list; never written by schedule generation
    done: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    done_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
