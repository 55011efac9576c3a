# oasis/models/world_map_cell.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from oasis.database import Base


class WorldMapCell(Base):
    __tablename__ = "world_map_cells"
    __table_args__ = (
        UniqueConstraint("x", "y", name="uq_world_map_cells_xy"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    x: Mapped[int] = mapped_column(Integer, nullable=False)
    y: Mapped[int] = mapped_column(Integer, nullable=False)

    profile_id: Mapped[Optional[str]] = mapped_column(ForeignKey("profiles.id"), index=True, nullable=True)

    terrain_type: Mapped[str] = mapped_column(String(24), default="desert", nullable=False)
    is_occupied: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
