# oasis/config.py
from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DATA_DIR = PROJECT_ROOT / "data"
DATA_DIR.mkdir(parents=True, exist_ok=True)

DB_PATH = DATA_DIR / "oasis.db"
DATABASE_URL: str = os.getenv("OASIS_DATABASE_URL", f"sqlite:///{DB_PATH.as_posix()}")

LOG_LEVEL: str = os.getenv("OASIS_LOG_LEVEL", "INFO").upper()

# New profile seed values
STARTING_STOCK: float = float(os.getenv("OASIS_STARTING_STOCK", "500"))
STORAGE_CAPACITY: int = int(os.getenv("OASIS_STORAGE_CAPACITY", "2000"))

# City layout: slots are numbered 0..CITY_SLOT_COUNT-1
CITY_SLOT_COUNT: int = int(os.getenv("OASIS_CITY_SLOTS", "12"))

# World map is MAP_SIZE x MAP_SIZE; new profiles land on a random cell
MAP_SIZE: int = int(os.getenv("OASIS_MAP_SIZE", "100"))

# Client side
API_URL: str = os.getenv("OASIS_API_URL", "http://localhost:8000")
CLIENT_REFRESH_SECONDS: float = float(os.getenv("OASIS_CLIENT_REFRESH_SECONDS", "30"))
