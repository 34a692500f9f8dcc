from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable
import pandas as pd

RECORD_COLUMNS = ["code", "name", "latitude", "longitude"]


def empty_records() -> pd.DataFrame:
    return pd.DataFrame(columns=RECORD_COLUMNS)


def records_frame(rows: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    """Build a canonical record frame, keeping only the canonical columns.

    Missing columns are added as nulls so downstream stages can report the
    offending record instead of failing on a KeyError.
    """
    df = pd.DataFrame(list(rows))
    if df.empty:
        return empty_records()
    for col in RECORD_COLUMNS:
        if col not in df.columns:
            df[col] = None
    return df[RECORD_COLUMNS].reset_index(drop=True)


class AbstractProvider(ABC):
    """Abstract reference provider. Implementations must return a DataFrame with columns
    [code, name, latitude, longitude], one row per country.
    """

    source: str

    @abstractmethod
    def fetch(self) -> pd.DataFrame:
        """Fetch every known country record.

        Raises ProviderUnavailableError when the catalog cannot be obtained.
        """
        pass
