"""Scoring and decision policies.

All functions here are pure: scores and weights in, numbers or labels out.
Nothing in this package touches storage or notifications.
"""

from supplier_eval.evaluators.composite import (
    compute_competitor_score,
    compute_total_score,
    missing_scores,
    percent_weights_to_fractions,
    round_score,
    score_contributions,
    to_percentage,
    weights_from_criteria,
)
from supplier_eval.evaluators.policy import (
    criteria_requiring_commitment,
    criterion_requires_commitment,
    get_decision_status,
    get_performance_status,
    requires_action_plan,
)

__all__ = [
    # Aggregation
    "compute_competitor_score",
    "compute_total_score",
    "missing_scores",
    "percent_weights_to_fractions",
    "round_score",
    "score_contributions",
    "to_percentage",
    "weights_from_criteria",
    # Policies
    "criteria_requiring_commitment",
    "criterion_requires_commitment",
    "get_decision_status",
    "get_performance_status",
    "requires_action_plan",
]
