import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from scorehub.db.base import Base
from scorehub.utils.timefmt import utcnow


class Activity(Base):
    __tablename__ = "activities"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Unique across all activities, hidden ones included, so a hidden activity stays reclaimable.
    pin: Mapped[str] = mapped_column(String(6), nullable=False, unique=True, index=True)
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


# (owner, name, description-or-empty) is unique among visible activities only.
Index(
    "uq_activities_owner_name_description_visible",
    Activity.owner_id,
    Activity.name,
    func.coalesce(Activity.description, ""),
    unique=True,
    sqlite_where=Activity.deleted.is_(False),
    postgresql_where=Activity.deleted.is_(False),
)
