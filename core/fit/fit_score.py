#!/usr/bin/env python3
"""
Fit Score v1

score = 100 * sum(w_i * f_i) / sum(w_i), rounded to 2 places.

Weights come from FitConfig.weights and are normalised by their sum, so
they need not add up to 1. Negative weights are treated as 0.
"""

import logging
from typing import Any, Dict, List, Mapping, Tuple

from core.config_loader import FitWeights
from core.fit.models import FitReason

logger = logging.getLogger(__name__)

FACTOR_NAMES = ("skill_overlap", "availability", "level_match", "workload")


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def calculate_fit_score(
    factors: Mapping[str, float],
    weights: FitWeights,
) -> Tuple[float, Dict[str, Any]]:
    """
    Returns:
        (score, components) where components holds, per factor, the value,
        weight and the points it contributed to the score.
    """
    raw_weights = {name: max(0.0, float(getattr(weights, name))) for name in FACTOR_NAMES}
    weight_sum = sum(raw_weights.values())
    if weight_sum <= 0.0:
        logger.warning("All fit weights are zero; every candidate scores 0")
        return 0.0, {name: {"value": _clamp01(factors.get(name, 0.0)), "weight": 0.0, "points": 0.0} for name in FACTOR_NAMES}

    components: Dict[str, Any] = {}
    total = 0.0
    for name in FACTOR_NAMES:
        value = _clamp01(float(factors.get(name, 0.0)))
        points = 100.0 * raw_weights[name] * value / weight_sum
        total += points
        components[name] = {
            "value": round(value, 4),
            "weight": raw_weights[name],
            "points": round(points, 2),
        }

    score = round(total, 2)
    return score, components


def factor_reasons(components: Mapping[str, Any]) -> List[FitReason]:
    """One reason per factor, carrying the points it contributed."""
    return [
        FitReason(
            code=name,
            detail=f"{name.replace('_', ' ')} {components[name]['value']:.2f}",
            contribution=components[name]["points"],
        )
        for name in FACTOR_NAMES
    ]
