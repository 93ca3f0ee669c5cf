"""Weighted aggregation of per-criterion scores.

One aggregation routine serves both recurring evaluations (weights as
fractions) and selection events (weights as percentage points).
"""

from collections.abc import Iterable, Mapping

from supplier_eval.consts import PERCENT_FACTOR, SCORE_DECIMALS
from supplier_eval.models.model_criteria import WeightedCriterion
from supplier_eval.models.model_selection import Competitor, SelectionCriterion


def compute_total_score(scores: Mapping[str, float], weights: Mapping[str, float]) -> float:
    """Calculate the weighted total of criterion scores.

    Every criterion in ``weights`` contributes. A criterion without a score
    counts as 0, so incomplete evaluations are penalised rather than
    excluded.

    Args:
        scores: Criterion ID -> score on the 1-5 scale
        weights: Criterion ID -> weight as a fraction (active set sums to 1.0)

    Returns:
        Weighted total between 0.0 and 5.0
    """
    return sum(scores.get(criterion_id, 0) * weight for criterion_id, weight in weights.items())


def weights_from_criteria(criteria: Iterable[WeightedCriterion]) -> dict[str, float]:
    """Map resolved catalog criteria to a criterion ID -> fraction dict."""
    return {criterion.id: criterion.default_weight for criterion in criteria}


def percent_weights_to_fractions(criteria: Iterable[SelectionCriterion]) -> dict[str, float]:
    """Convert selection criteria weights from percentage points to fractions."""
    return {criterion.id: criterion.weight / 100.0 for criterion in criteria}


def compute_competitor_score(competitor: Competitor, criteria: list[SelectionCriterion]) -> float:
    """Calculate a competitor total from selection criteria weights."""
    return compute_total_score(competitor.scores, percent_weights_to_fractions(criteria))


def round_score(total: float) -> float:
    """Round a total score to its stored precision (2 decimals)."""
    return round(total, SCORE_DECIMALS)


def to_percentage(total: float) -> int:
    """Express a 0-5 total on the 0-100 scale."""
    return round(total * PERCENT_FACTOR)


def score_contributions(
    scores: Mapping[str, float], weights: Mapping[str, float]
) -> dict[str, float]:
    """Break a total down into each criterion's weighted contribution.

    Sorted from the largest to the smallest contribution.
    """
    contributions = {
        criterion_id: scores.get(criterion_id, 0) * weight
        for criterion_id, weight in weights.items()
    }
    return dict(sorted(contributions.items(), key=lambda item: item[1], reverse=True))


def missing_scores(scores: Mapping[str, float], weights: Mapping[str, float]) -> list[str]:
    """List weighted criteria (weight > 0) that have no score yet."""
    return [
        criterion_id
        for criterion_id, weight in weights.items()
        if weight > 0 and criterion_id not in scores
    ]
