"""File-backed provider: loads country records from a JSON or YAML document.

Accepted shapes are a list of records or ``{"countries": [...]}``. A record
carries ``code`` and ``name`` plus either flat ``latitude``/``longitude`` keys
or a nested ``coordinates`` mapping. In YAML, quote codes that read as
booleans (``code: "NO"`` for Norway); unquoted ``NO`` loads as ``False`` and
the record is rejected as malformed.
"""
import json
import logging
import os
from typing import Any, Dict, List

import pandas as pd
import yaml  # type: ignore[import]

from countrygen.errors import ProviderUnavailableError
from .base import AbstractProvider, records_frame

logger = logging.getLogger(__name__)


def _flatten(rec: Dict[str, Any]) -> Dict[str, Any]:
    coords = rec.get("coordinates")
    if not isinstance(coords, dict):
        # anything but a mapping leaves the coordinates unset for transform to reject
        coords = {}
    code = rec.get("code")
    return {
        "code": code.strip().upper() if isinstance(code, str) else code,
        "name": rec.get("name"),
        "latitude": rec.get("latitude", coords.get("latitude")),
        "longitude": rec.get("longitude", coords.get("longitude")),
    }


class FileProvider(AbstractProvider):
    source = "file"

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> Any:
        with open(self.path, "r", encoding="utf-8") as fh:
            if os.path.splitext(self.path)[1].lower() in (".yaml", ".yml"):
                return yaml.safe_load(fh)
            return json.load(fh)

    def fetch(self) -> pd.DataFrame:
        try:
            raw = self._read()
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ProviderUnavailableError(f"cannot read {self.path}: {e}") from e

        if isinstance(raw, dict):
            raw = raw.get("countries")
        if raw is None:
            raw = []
        if not isinstance(raw, list):
            raise ProviderUnavailableError(
                f"expected a list of country records in {self.path}"
            )

        rows: List[Dict[str, Any]] = []
        for rec in raw:
            # non-mapping entries become code-less rows and fail in transform
            rows.append(_flatten(rec) if isinstance(rec, dict) else {"code": None})
        logger.debug(f"Loaded {len(rows)} records from {self.path}")
        return records_frame(rows)
