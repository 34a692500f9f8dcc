"""Fatal error taxonomy for a generator run.

Every error carries the ``stage`` it was raised from so the entry point can
report which part of the run failed. None of these are retried.
"""
from typing import Optional


class CountryDataError(Exception):
    stage = "run"


class ProviderUnavailableError(CountryDataError):
    stage = "fetch"


class MalformedRecordError(CountryDataError):
    stage = "transform"

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


class OutputError(CountryDataError):
    def __init__(self, artifact: str, path: str, message: str):
        super().__init__(f"{artifact} ({path}): {message}")
        self.artifact = artifact
        self.path = path

    @property
    def stage(self) -> str:  # type: ignore[override]
        return f"write {self.artifact}"


class OutputCreateError(OutputError):
    pass


class OutputWriteError(OutputError):
    pass
