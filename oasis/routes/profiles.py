# oasis/routes/profiles.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.orm import Session

from oasis.database import get_db
from oasis.game import actions
from oasis.game.clock import utcnow
from oasis.game.resources import resources_payload
from oasis.repository import SqlAlchemyRepository
from oasis.routes.payloads import building_payload, profile_payload

router = APIRouter(prefix="/api/profile", tags=["profiles"])


class ProfileRequest(BaseModel):
    # Fields are optional here so a missing one is reported as the game's
    # validation_error rather than a framework 422
    id: Optional[str] = Field(default=None, max_length=64)
    username: Optional[str] = Field(default=None, max_length=64)
    email: Optional[str] = Field(default=None, max_length=255)


class BuildRequest(BaseModel):
    building_type: Optional[str] = Field(
        default=None,
        max_length=32,
        validation_alias=AliasChoices("building_type", "buildingType"),
    )
    slot_index: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("slot_index", "slotIndex"),
    )


@router.post("")
def create_or_fetch_profile(payload: ProfileRequest, db: Session = Depends(get_db)) -> dict:
    profile = actions.create_or_fetch_profile(
        SqlAlchemyRepository(db),
        profile_id=payload.id,
        username=payload.username,
        email=payload.email,
    )
    return profile_payload(profile)


@router.get("/{profile_id}")
def get_profile(profile_id: str, db: Session = Depends(get_db)) -> dict:
    profile = actions.fetch_profile(SqlAlchemyRepository(db), profile_id)
    return profile_payload(profile)


@router.get("/{profile_id}/resources")
def get_resources(profile_id: str, db: Session = Depends(get_db)) -> dict:
    snap = actions.fetch_resources(SqlAlchemyRepository(db), profile_id)
    return resources_payload(snap)


@router.get("/{profile_id}/buildings")
def list_buildings(profile_id: str, db: Session = Depends(get_db)) -> list[dict]:
    now = utcnow()
    buildings = actions.fetch_buildings(SqlAlchemyRepository(db), profile_id, now=now)
    return [building_payload(b, now) for b in buildings]


@router.post("/{profile_id}/buildings")
def start_build(profile_id: str, payload: BuildRequest, db: Session = Depends(get_db)) -> dict:
    now = utcnow()
    building = actions.start_build(
        SqlAlchemyRepository(db),
        profile_id,
        building_type=payload.building_type,
        slot_index=payload.slot_index,
        now=now,
    )
    return building_payload(building, now)
