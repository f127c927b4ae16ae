# fleetscore/scoring/engine.py
"""
Turns one account's raw signals into a ScoreResult.

Per included signal:
- String: passed through for display, no contribution.
- Number, direction None: normalized value is the raw value, no contribution.
- Number, direction High/Low: mapped into [0, 1] against [min, max] and
  weighted; the account score is the weighted mean over these signals.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import numpy as np

from fleetscore.data.schemas.signal_definition import (
    Direction,
    SignalDefinitionDTO,
    SignalType,
)
from fleetscore.errors import ScoringError
from fleetscore.scoring.catalog import SignalCatalog
from fleetscore.scoring.result import ScoreResult, SignalScore
from fleetscore.scoring.values import parse_raw_value

logger = logging.getLogger(__name__)


def normalize(definition: SignalDefinitionDTO, value: float) -> float:
    if definition.direction == Direction.NONE:
        return value

    lo, hi = definition.min_value, definition.max_value
    ratio = (value - lo) / (hi - lo)

    if definition.direction == Direction.HIGH:
        return float(np.clip(ratio, 0.0, 1.0))
    return float(np.clip(1.0 - ratio, 0.0, 1.0))


class ScoringEngine:

    def __init__(self, catalog: SignalCatalog):
        if catalog.sum_weights <= 0:
            raise ScoringError("Cannot score with a zero sum of weights")
        self.catalog = catalog

    def score(self, customer_id: str, raw_signals: Mapping[str, Any]) -> ScoreResult:
        result = ScoreResult(customer_id=str(customer_id), score_weights=self.catalog.sum_weights)
        score_sum = 0.0

        for definition in self.catalog.included:
            if definition.name not in raw_signals:
                raise ScoringError(f"Account {customer_id}: no value for signal '{definition.name}'")
            raw = parse_raw_value(raw_signals[definition.name])

            if definition.signal_type == SignalType.STRING:
                result.signals[definition.name] = SignalScore(definition=definition, value=raw.text)
                continue

            try:
                value = raw.as_number()
            except ScoringError as e:
                raise ScoringError(f"Account {customer_id}, signal '{definition.name}': {e}") from e

            normalized = normalize(definition, value)
            contribution = normalized * definition.weight if definition.is_scored else 0.0
            score_sum += contribution

            result.signals[definition.name] = SignalScore(
                definition=definition,
                value=value,
                normalized=normalized,
                contribution=contribution,
            )

        result.score_sum = score_sum
        logger.debug("Account %s scored %.4f", customer_id, result.score)
        return result
