# fleetscore/scoring/result.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from fleetscore.data.schemas.signal_definition import SignalDefinitionDTO


@dataclass(frozen=True)
class SignalScore:
    definition: SignalDefinitionDTO
    value: Union[float, str]
    normalized: Optional[float] = None
    contribution: float = 0.0

    @property
    def display_value(self) -> Union[float, str]:
        return self.value


@dataclass
class ScoreResult:
    customer_id: str
    signals: Dict[str, SignalScore] = field(default_factory=dict)
    score_sum: float = 0.0
    score_weights: float = 0.0

    @property
    def score(self) -> float:
        return self.score_sum / self.score_weights

    def to_dict(self) -> Dict[str, Any]:
        return {
            "customer_id": self.customer_id,
            "signals": {
                name: {
                    "value": s.value,
                    "normalized": s.normalized,
                    "contribution": s.contribution,
                }
                for name, s in self.signals.items()
            },
            "score_sum": self.score_sum,
            "score_weights": self.score_weights,
            "score": self.score,
        }
