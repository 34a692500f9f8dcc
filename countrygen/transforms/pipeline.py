import math
from typing import Any, Dict, Iterable, List, Optional, Tuple
import numpy as np
import pandas as pd

from countrygen.config import BOOLEAN_CODE_HINT, is_country_code
from countrygen.errors import MalformedRecordError
from countrygen.providers.base import RECORD_COLUMNS

CountryMapping = Dict[str, Dict[str, Any]]


def filter_records(records: pd.DataFrame, excluded: Iterable[str]) -> pd.DataFrame:
    """Drop records whose code is in ``excluded``.

    Relative input order is preserved. Excluded codes that never occur in the
    input are ignored.
    """
    excluded = set(excluded or ())
    # frames without a code column are rejected by build_outputs
    if records.empty or not excluded or "code" not in records.columns:
        return records.copy()
    keep = ~records["code"].isin(excluded)
    return records[keep].reset_index(drop=True)


def _coordinate(value: Any, field: str, idx: int, code: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
        raise MalformedRecordError(f"record {idx} ({code}) has no usable {field}", index=idx)
    value = float(value)
    if not math.isfinite(value):
        raise MalformedRecordError(f"record {idx} ({code}) has no usable {field}", index=idx)
    return value


def build_outputs(records: pd.DataFrame) -> Tuple[CountryMapping, List[str]]:
    """Project records into the output mapping and the code list.

    Expects df with columns: ['code', 'name', 'latitude', 'longitude']
    Returns (mapping, codes): mapping is code -> {"Name", "Latitude", "Longitude"},
    codes follows input order. Any record without a usable code, name or
    coordinates aborts with MalformedRecordError; nothing is skipped.
    """
    missing_cols = [c for c in RECORD_COLUMNS if c not in records.columns]
    if missing_cols:
        raise MalformedRecordError(f"records are missing columns: {missing_cols}")

    mapping: CountryMapping = {}
    codes: List[str] = []
    for idx, rec in enumerate(records[RECORD_COLUMNS].to_dict(orient="records")):
        code = rec.get("code")
        if isinstance(code, bool):
            raise MalformedRecordError(
                f"record {idx} has no usable code: {code!r} ({BOOLEAN_CODE_HINT})", index=idx
            )
        if not is_country_code(code):
            raise MalformedRecordError(f"record {idx} has no usable code: {code!r}", index=idx)
        if code in mapping:
            raise MalformedRecordError(f"duplicate country code {code} at record {idx}", index=idx)
        name = rec.get("name")
        if not isinstance(name, str) or not name.strip():
            raise MalformedRecordError(f"record {idx} ({code}) has no usable name", index=idx)
        mapping[code] = {
            "Name": name,
            "Latitude": _coordinate(rec.get("latitude"), "latitude", idx, code),
            "Longitude": _coordinate(rec.get("longitude"), "longitude", idx, code),
        }
        codes.append(code)
    return mapping, codes


def shuffle_codes(
    codes: Iterable[str],
    seed: Optional[int] = None,
    rng: Optional[np.random.RandomState] = None,
) -> List[str]:
    """Return a uniformly random permutation of ``codes`` (Fisher-Yates).

    The input is not modified. Pass ``rng`` to share a random source, or
    ``seed`` for a reproducible order.
    """
    if rng is None:
        rng = np.random.RandomState(seed)
    out = list(codes)
    for i in range(len(out) - 1, 0, -1):
        j = int(rng.randint(0, i + 1))
        out[i], out[j] = out[j], out[i]
    return out
