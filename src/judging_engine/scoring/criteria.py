"""Weighted criteria scoring for criteria-based events."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from judging_engine.core.errors import NoCriteriaDefinedError, ValidationError

if TYPE_CHECKING:
    from judging_engine.models import Criterion


def validate_criterion_definition(
    name: str, weight: float, min_score: float, max_score: float
) -> None:
    """Reject criteria that cannot produce a meaningful weighted score.

    Raises:
        ValidationError: If the weight is not positive or the bounds are inverted.
    """
    if not name or not name.strip():
        raise ValidationError("Criterion name cannot be empty")
    if not math.isfinite(weight) or weight <= 0:
        raise ValidationError(
            f"Criterion '{name}' has weight {weight}",
            "Use a positive weight.",
        )
    if not (math.isfinite(min_score) and math.isfinite(max_score)) or min_score >= max_score:
        raise ValidationError(
            f"Criterion '{name}' has bounds [{min_score}, {max_score}]",
            "min_score must be strictly below max_score.",
        )


def validate_scores(criteria: Sequence[Criterion], raw: Mapping[str, float]) -> None:
    """Check every raw score against the event's criteria.

    Out-of-range values are rejected rather than clamped.

    Raises:
        NoCriteriaDefinedError: If the event has no criteria.
        ValidationError: If a score references an unknown criterion, is not a
            finite number, or lies outside its criterion's bounds.
    """
    if not criteria:
        raise NoCriteriaDefinedError()

    by_id = {c.id: c for c in criteria}
    if not raw:
        raise ValidationError(
            "No scores provided",
            f"Score at least one of: {', '.join(c.name for c in criteria)}.",
        )

    for criterion_id, value in raw.items():
        criterion = by_id.get(criterion_id)
        if criterion is None:
            raise ValidationError(f"Unknown criterion '{criterion_id}' for this event")
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise ValidationError(f"Score for '{criterion.name}' must be a number, got {value!r}")
        if not math.isfinite(value):
            raise ValidationError(f"Score for '{criterion.name}' must be finite, got {value!r}")
        if not criterion.min_score <= value <= criterion.max_score:
            raise ValidationError(
                f"Score {value} for '{criterion.name}' is outside "
                f"[{criterion.min_score}, {criterion.max_score}]",
            )


def score(criteria: Sequence[Criterion], raw: Mapping[str, float]) -> float:
    """Compute the weighted overall score of one submission.

    overall = sum(raw[c] * weight[c]) / sum(weight[c]) over scored criteria.

    Args:
        criteria: All criteria configured on the event.
        raw: Criterion id to raw score.

    Returns:
        Weighted mean of the provided scores.
    """
    validate_scores(criteria, raw)

    weighted_total = 0.0
    weight_total = 0.0
    for criterion in criteria:
        if criterion.id not in raw:
            continue
        weighted_total += raw[criterion.id] * criterion.weight
        weight_total += criterion.weight

    return weighted_total / weight_total
