# oasis/routes/world.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from oasis.database import get_db
from oasis.repository import SqlAlchemyRepository

router = APIRouter(prefix="/api", tags=["world"])

# Largest window a single request may ask for (cells per side)
MAX_WINDOW = 50


@router.get("/world-map")
def world_map(
    min_x: int = Query(0, ge=0),
    max_x: int = Query(19, ge=0),
    min_y: int = Query(0, ge=0),
    max_y: int = Query(19, ge=0),
    db: Session = Depends(get_db),
) -> list[dict]:
    # Clamp to a bounded window instead of rejecting odd requests
    max_x = min(max(max_x, min_x), min_x + MAX_WINDOW - 1)
    max_y = min(max(max_y, min_y), min_y + MAX_WINDOW - 1)

    cells = SqlAlchemyRepository(db).get_world_map_cells(min_x, max_x, min_y, max_y)
    return [
        {
            "id": c.id,
            "x": c.x,
            "y": c.y,
            "profile_id": c.profile_id,
            "terrain_type": c.terrain_type,
            "is_occupied": c.is_occupied,
        }
        for c in cells
    ]
