"""Stateful services over the storage layer.

- WeightConfiguration: per-category weight overrides
- EvaluationService: evaluations and improvement commitments
- SelectionService: competitive selection events
- ComparisonAggregator: latest evaluation per provider and type
"""

from supplier_eval.workflow.comparison import ComparisonAggregator, latest_evaluations, summarize
from supplier_eval.workflow.evaluations import (
    EvaluationService,
    validate_commitments,
    validate_scores,
)
from supplier_eval.workflow.selection import (
    CompetitorRanking,
    SelectionService,
    rank_competitors,
    validate_criteria_weights,
)
from supplier_eval.workflow.weights import WeightConfiguration, validate_weight_configuration

__all__ = [
    "ComparisonAggregator",
    "CompetitorRanking",
    "EvaluationService",
    "SelectionService",
    "WeightConfiguration",
    "latest_evaluations",
    "rank_competitors",
    "summarize",
    "validate_commitments",
    "validate_criteria_weights",
    "validate_scores",
    "validate_weight_configuration",
]
