# oasis/models/profile.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Integer, Float, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from oasis.database import Base
from oasis.game.clock import utcnow


class Profile(Base):
    __tablename__ = "profiles"

    # Subject id issued by the identity provider
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    username: Mapped[str] = mapped_column(String(64), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)

    # Stocks are fractional: accrual runs on elapsed seconds, not whole ticks
    water: Mapped[float] = mapped_column(Float, default=500.0, nullable=False)
    dates: Mapped[float] = mapped_column(Float, default=500.0, nullable=False)
    gold: Mapped[float] = mapped_column(Float, default=500.0, nullable=False)
    stone: Mapped[float] = mapped_column(Float, default=500.0, nullable=False)

    # Production rates (per hour)
    water_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    dates_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    gold_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    stone_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    # One cap shared by all four resources
    storage_capacity: Mapped[int] = mapped_column(Integer, default=2000, nullable=False)

    # Map position (only used by the world map)
    map_x: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    map_y: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

    # Naive UTC
    last_resource_update: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
