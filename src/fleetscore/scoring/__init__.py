from fleetscore.scoring.catalog import SignalCatalog
from fleetscore.scoring.engine import ScoringEngine, normalize
from fleetscore.scoring.result import ScoreResult, SignalScore
from fleetscore.scoring.values import RawValue, ValueKind, parse_raw_value

__all__ = [
    "RawValue",
    "ScoreResult",
    "ScoringEngine",
    "SignalCatalog",
    "SignalScore",
    "ValueKind",
    "normalize",
    "parse_raw_value",
]
