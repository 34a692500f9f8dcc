"""Reference provider backed by the pycountry ISO 3166-1 catalog.

Codes and display names come from pycountry; pycountry has no geography, so
the representative coordinates are joined in from countryinfo by alpha-2 code.
"""
import logging
from typing import Dict, List, Optional, Tuple
import pandas as pd

from countrygen.errors import ProviderUnavailableError
from .base import AbstractProvider, records_frame

logger = logging.getLogger(__name__)


class ReferenceProvider(AbstractProvider):
    source = "reference"

    def _load_countries(self) -> List[Tuple[Optional[str], Optional[str]]]:
        import pycountry

        out = []
        for c in pycountry.countries:
            code = getattr(c, "alpha_2", None)
            # prefer the short common name ("Bolivia") over the official one
            name = getattr(c, "common_name", None) or getattr(c, "name", None)
            out.append((code, name))
        return out

    def _load_coordinates(self) -> Dict[str, Tuple[float, float]]:
        from countryinfo import CountryInfo  # type: ignore[import]

        coords: Dict[str, Tuple[float, float]] = {}
        for info in CountryInfo().all().values():
            iso = info.get("ISO") or {}
            code = iso.get("alpha2")
            latlng = info.get("latlng")
            if not code or not latlng or len(latlng) < 2:
                continue
            coords[code.upper()] = (float(latlng[0]), float(latlng[1]))
        return coords

    def fetch(self) -> pd.DataFrame:
        try:
            countries = self._load_countries()
            coords = self._load_coordinates()
        except Exception as e:
            raise ProviderUnavailableError(
                f"reference catalog could not be loaded: {e}"
            ) from e
        if not coords:
            raise ProviderUnavailableError("reference catalog has no coordinates")

        rows = []
        missing = []
        for code, name in countries:
            if not isinstance(code, str):
                # left in place so the transform stage rejects it
                rows.append({"code": code, "name": name})
                continue
            latlng = coords.get(code.upper())
            if latlng is None:
                missing.append(code)
                continue
            rows.append(
                {
                    "code": code.upper(),
                    "name": name,
                    "latitude": latlng[0],
                    "longitude": latlng[1],
                }
            )
        if missing:
            logger.warning(
                f"No coordinates for {len(missing)} countries, dropping: {', '.join(sorted(missing))}"
            )
        logger.debug(f"Reference catalog returned {len(rows)} countries")
        return records_frame(rows)
