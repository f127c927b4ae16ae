# fleetscore/errors.py


class FleetScoreError(Exception):
    """Base class for all FleetScore errors."""


class ConfigurationError(FleetScoreError):
    """A mandatory setting is missing or the backend is not usable. Fatal."""


class CatalogError(ConfigurationError):
    """The signal definitions cannot produce a well-defined score."""


class ConfigurationLockedError(FleetScoreError):
    """A protected configuration resource was written while a run holds the lock."""

    def __init__(self, resource: str):
        super().__init__(
            f"'{resource}' is locked: a report is currently being executed, "
            "it can not be edited until it is finished."
        )
        self.resource = resource


class ScoringError(FleetScoreError):
    """One account's raw signals could not be scored."""


class SignalSourceError(FleetScoreError):
    """Raw signals for an account could not be fetched."""


class RunStateError(FleetScoreError):
    """The run history does not allow the requested transition."""
