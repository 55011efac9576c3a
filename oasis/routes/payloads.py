# oasis/routes/payloads.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from oasis.game import catalog
from oasis.game.construction import building_state
from oasis.game.resources import resources_payload, snapshot_of
from oasis.models.building import Building
from oasis.models.profile import Profile


def _iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts else None


def profile_payload(profile: Profile) -> dict:
    return {
        "id": profile.id,
        "username": profile.username,
        "email": profile.email,
        **resources_payload(snapshot_of(profile)),
        "map_x": profile.map_x,
        "map_y": profile.map_y,
        "created_at": _iso(profile.created_at),
    }


def building_payload(b: Building, now: datetime) -> dict:
    entry = catalog.get_entry(b.building_type)

    remaining = None
    if b.is_upgrading and b.upgrade_end_time:
        remaining = max(0, int((b.upgrade_end_time - now).total_seconds()))

    return {
        "id": b.id,
        "profile_id": b.profile_id,
        "building_type": b.building_type,
        "name": entry.name if entry else b.building_type,
        "level": b.level,
        "max_level": entry.max_level if entry else None,
        "slot_index": b.slot_index,
        "state": building_state(b).value,
        "is_upgrading": b.is_upgrading,
        "upgrade_start_time": _iso(b.upgrade_start_time),
        "upgrade_end_time": _iso(b.upgrade_end_time),
        "time_remaining_seconds": remaining,
        "production": catalog.building_production(b.building_type, b.level),
        "created_at": _iso(b.created_at),
    }
