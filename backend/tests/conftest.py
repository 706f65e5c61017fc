import json
import sys
from pathlib import Path

import pytest


# Ensure `backend/` is on sys.path so tests can import local modules
# like `geo.*`, `engine.*`, `cli` and `main`.
BACKEND_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_ROOT))

GEOJSON_DIR = Path(__file__).resolve().parent / "geojson"


@pytest.fixture
def geojson_dir() -> Path:
    return GEOJSON_DIR


@pytest.fixture
def load_geojson():
    def _load(name: str):
        return json.loads((GEOJSON_DIR / name).read_text(encoding="utf-8"))

    return _load
