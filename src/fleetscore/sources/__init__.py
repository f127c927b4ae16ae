from fleetscore.sources.fleet import CsvFleetEnumerator, FleetEnumerator
from fleetscore.sources.signals import CsvSignalSource, RawSignalSource

__all__ = [
    "CsvFleetEnumerator",
    "CsvSignalSource",
    "FleetEnumerator",
    "RawSignalSource",
]
