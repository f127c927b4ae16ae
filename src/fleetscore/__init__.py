"""FleetScore: resumable, batched health scoring for a fleet of managed accounts."""

__version__ = "0.1.0"
