import yaml  # type: ignore[import]
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ValidationError, validator, root_validator


# Compatibility helper: safely convert Pydantic models to plain dicts.
# Only runs model_dump()/dict() when the object is a BaseModel instance;
# otherwise returns the object unchanged.
def model_as_dict(obj):
    if isinstance(obj, BaseModel):
        # pydantic v2
        if hasattr(obj, "model_dump") and callable(getattr(obj, "model_dump")):
            return obj.model_dump()
        # pydantic v1
        if hasattr(obj, "dict") and callable(getattr(obj, "dict")):
            return obj.dict()
    return obj


# Uninhabited territories with no meaningful name/position to present
DEFAULT_EXCLUDED_CODES = ["AQ", "BV", "HM", "UM"]

PROVIDER_KINDS = ("reference", "file")


BOOLEAN_CODE_HINT = "quote codes in YAML, unquoted NO loads as a boolean"


def is_country_code(value: Any) -> bool:
    """True for a two-letter ASCII string."""
    return (
        isinstance(value, str)
        and len(value) == 2
        and value.isascii()
        and value.isalpha()
    )


def normalize_code(value: Any) -> str:
    if isinstance(value, bool):
        raise ValueError(f"country code must be a string, got {value!r} ({BOOLEAN_CODE_HINT})")
    if not isinstance(value, str):
        raise ValueError(f"country code must be a string, got {value!r}")
    code = value.strip().upper()
    if not is_country_code(code):
        raise ValueError(f"country code must be two letters, got {value!r}")
    return code


class ProviderConfig(BaseModel):
    kind: str = "reference"
    path: Optional[str] = None

    @validator("kind")
    def check_kind(cls, v):
        if v not in PROVIDER_KINDS:
            raise ValueError(f"provider kind must be one of {PROVIDER_KINDS}")
        return v

    @root_validator(skip_on_failure=True)
    def check_path_for_file(cls, values):
        if values.get("kind") == "file" and not values.get("path"):
            raise ValueError("file provider requires a path")
        return values


class OutputConfig(BaseModel):
    countries_path: str = "./data/countries.json"
    country_list_path: str = "./data/countryList.json"
    indent: int = Field(2, ge=0)


class ManifestConfig(BaseModel):
    enabled: bool = False
    artifact_dir: str = "data/_artifacts"


class ConfigModel(BaseModel):
    exclude: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDED_CODES))
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    manifest: ManifestConfig = Field(default_factory=ManifestConfig)
    # numpy RandomState accepts 32-bit unsigned seeds
    seed: Optional[int] = Field(None, ge=0, le=2**32 - 1)

    @validator("exclude", pre=True)
    def validate_exclude(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = [c for c in v.split(",") if c.strip()]
        # keep first occurrence order for readable config snapshots
        out: List[str] = []
        for c in v:
            code = normalize_code(c)
            if code not in out:
                out.append(code)
        return out

    @property
    def excluded_codes(self) -> frozenset:
        return frozenset(self.exclude)


DEFAULT_CONFIG: Dict[str, Any] = {
    "exclude": list(DEFAULT_EXCLUDED_CODES),
    "provider": {"kind": "reference", "path": None},
    "output": {
        "countries_path": "./data/countries.json",
        "country_list_path": "./data/countryList.json",
        "indent": 2,
    },
    "manifest": {"enabled": False, "artifact_dir": "data/_artifacts"},
    "seed": None,
}


def load_config(path: Optional[str] = None) -> ConfigModel:
    """Load and validate a YAML config, or the defaults when ``path`` is None.

    Quote country codes in YAML: an unquoted ``NO`` (Norway) loads as a
    boolean and is rejected.
    """
    if path:
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    else:
        cfg = DEFAULT_CONFIG
    try:
        model = ConfigModel(**cfg)
    except ValidationError as e:
        print("Config validation error:")
        print(e.json())
        raise
    return model
