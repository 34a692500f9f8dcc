"""JSON writers for the two generated artifacts.

Both payloads are serialized before either file is opened, and the mapping is
written before the list; if the first write fails the second is never started.
"""
import json
import logging
import os
from typing import Any, Dict, List

from countrygen.config import OutputConfig
from countrygen.errors import OutputCreateError, OutputWriteError

COUNTRIES_ARTIFACT = "countries"
COUNTRY_LIST_ARTIFACT = "countryList"

logger = logging.getLogger(__name__)


def serialize(artifact: str, path: str, payload: Any, indent: int = 2) -> bytes:
    # sorted keys keep the mapping file byte-stable between runs
    try:
        text = json.dumps(
            payload, indent=indent, sort_keys=True, ensure_ascii=False, allow_nan=False
        )
        # encode here so unencodable text never reaches an opened file
        return (text + "\n").encode("utf-8")
    except (TypeError, ValueError) as e:
        raise OutputWriteError(artifact, path, f"cannot serialize: {e}") from e


def write_artifact(artifact: str, path: str, data: bytes) -> None:
    """Create/truncate ``path`` and write ``data``. The handle is always closed."""
    try:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        fh = open(path, "wb")
    except OSError as e:
        raise OutputCreateError(artifact, path, str(e)) from e
    with fh:
        try:
            fh.write(data)
            fh.flush()
        except OSError as e:
            raise OutputWriteError(artifact, path, str(e)) from e
    logger.debug(f"Wrote {artifact} to {path}")


def write_outputs(
    mapping: Dict[str, Dict[str, Any]], codes: List[str], output: OutputConfig
) -> Dict[str, str]:
    """Write the country mapping and the shuffled code list.

    Returns a mapping of artifact name -> path for the files written.
    """
    countries_data = serialize(
        COUNTRIES_ARTIFACT, output.countries_path, mapping, output.indent
    )
    list_data = serialize(
        COUNTRY_LIST_ARTIFACT, output.country_list_path, codes, output.indent
    )
    write_artifact(COUNTRIES_ARTIFACT, output.countries_path, countries_data)
    write_artifact(COUNTRY_LIST_ARTIFACT, output.country_list_path, list_data)
    return {
        COUNTRIES_ARTIFACT: output.countries_path,
        COUNTRY_LIST_ARTIFACT: output.country_list_path,
    }
