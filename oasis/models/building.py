# oasis/models/building.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from oasis.database import Base
from oasis.game.clock import utcnow


class Building(Base):
    __tablename__ = "buildings"
    __table_args__ = (
        UniqueConstraint("profile_id", "slot_index", name="uq_buildings_profile_slot"),
        # One builder per profile: at most one row may be upgrading
        Index(
            "uq_buildings_one_upgrading",
            "profile_id",
            unique=True,
            sqlite_where=text("is_upgrading = 1"),
            postgresql_where=text("is_upgrading"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    profile_id: Mapped[str] = mapped_column(ForeignKey("profiles.id"), index=True, nullable=False)
    profile: Mapped["Profile"] = relationship()

    # One of the catalog keys: "well", "date_farm", "gold_mine", "quarry", ...
    building_type: Mapped[str] = mapped_column(String(32), nullable=False)

    # 0 = under initial construction, not producing yet
    level: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    slot_index: Mapped[int] = mapped_column(Integer, nullable=False)

    is_upgrading: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    upgrade_start_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    upgrade_end_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
