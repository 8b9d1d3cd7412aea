"""
Error kinds surfaced by the scheduling engine.

Every failure reaches the caller either as one of these exceptions (whole-run
problems: frost resolution, preferences, weather transport) or as a
PlantFailure entry on ScheduleResult (single-plant problems). None of them is
meant to terminate the process.
"""


class ScheduleError(Exception):
    kind = "schedule_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.kind)
        self.message = message or self.kind


class FrostNotFound(ScheduleError):
    """No reading at or below freezing in the target year or the years tried before it."""

    kind = "frost_not_found"


class InvalidPreference(ScheduleError, ValueError):
    kind = "invalid_preference"


class UpstreamTimeout(ScheduleError):
    kind = "upstream_timeout"


class UpstreamUnavailable(ScheduleError):
    kind = "upstream_unavailable"


class StoreError(ScheduleError):
    kind = "store_error"
