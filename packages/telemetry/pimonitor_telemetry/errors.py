"""Error taxonomy shared by the sampler and the log store."""

from __future__ import annotations


class PiMonitorError(Exception):
    pass


class SourceUnavailable(PiMonitorError):
    """A kernel telemetry source could not be opened or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class SamplerStartupError(SourceUnavailable):
    """The first CPU snapshot failed, so there is no baseline to diff against."""


class WriteFailure(PiMonitorError):
    """Appending a record to the log failed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
