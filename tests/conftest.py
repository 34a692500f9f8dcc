import sys
import warnings
from pathlib import Path

import pandas as pd
import pytest

# ensure project root is on sys.path so `countrygen` is importable when running pytest
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# Suppress noisy pydantic / typing deprecation warnings during tests
warnings.filterwarnings("ignore", category=DeprecationWarning, module="pydantic.*")
warnings.filterwarnings("ignore", category=FutureWarning, module="pydantic.*")

from countrygen.providers.base import AbstractProvider, records_frame  # noqa: E402


class StaticProvider(AbstractProvider):
    """In-memory provider returning a fixed list of records."""

    source = "static"

    def __init__(self, rows):
        self.rows = rows
        self.calls = 0

    def fetch(self) -> pd.DataFrame:
        self.calls += 1
        return records_frame(self.rows)


SAMPLE_ROWS = [
    {"code": "FR", "name": "France", "latitude": 46.0, "longitude": 2.0},
    {"code": "PF", "name": "French Polynesia", "latitude": -15.0, "longitude": -140.0},
    {"code": "US", "name": "United States", "latitude": 38.0, "longitude": -97.0},
]


@pytest.fixture
def sample_rows():
    return [dict(r) for r in SAMPLE_ROWS]


@pytest.fixture
def static_provider(sample_rows):
    return StaticProvider(sample_rows)


@pytest.fixture
def make_provider():
    return StaticProvider
