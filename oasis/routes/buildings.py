# oasis/routes/buildings.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from oasis.database import get_db
from oasis.game import actions, catalog
from oasis.game.clock import utcnow
from oasis.repository import SqlAlchemyRepository
from oasis.routes.payloads import building_payload

router = APIRouter(prefix="/api", tags=["buildings"])


@router.post("/buildings/{building_id}/upgrade")
def start_upgrade(building_id: int, db: Session = Depends(get_db)) -> dict:
    now = utcnow()
    building = actions.start_upgrade(SqlAlchemyRepository(db), building_id, now=now)

    # Echo what was paid so the client can reconcile its display immediately
    paid_from = building.level
    return {
        **building_payload(building, now),
        "cost": catalog.building_cost(building.building_type, paid_from),
        "duration_seconds": catalog.build_time_seconds(building.building_type, paid_from),
    }


@router.get("/building-config")
def building_config() -> dict:
    return actions.fetch_catalog()
