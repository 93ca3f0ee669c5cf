"""Pydantic models for the supplier evaluation engine."""

from supplier_eval.models.model_actor import Actor, UserRole
from supplier_eval.models.model_comparison import LatestEvaluationSummary, ProviderComparison
from supplier_eval.models.model_criteria import (
    Category,
    CategoryType,
    CategoryWeightOverride,
    CriterionDefinition,
    Provider,
    ProviderCriticality,
    WeightedCriterion,
)
from supplier_eval.models.model_evaluation import (
    CommitmentState,
    CriterionScore,
    EvaluationRecord,
    PerformanceLevel,
    PerformanceStatus,
)
from supplier_eval.models.model_selection import (
    Competitor,
    CriterionGroup,
    DecisionLevel,
    DecisionStatus,
    EventStatus,
    SelectionCriterion,
    SelectionEvent,
)

__all__ = [
    # Identity
    "Actor",
    "UserRole",
    # Criteria models
    "Category",
    "CategoryType",
    "CategoryWeightOverride",
    "CriterionDefinition",
    "Provider",
    "ProviderCriticality",
    "WeightedCriterion",
    # Evaluation models
    "CommitmentState",
    "CriterionScore",
    "EvaluationRecord",
    "PerformanceLevel",
    "PerformanceStatus",
    # Selection models
    "Competitor",
    "CriterionGroup",
    "DecisionLevel",
    "DecisionStatus",
    "EventStatus",
    "SelectionCriterion",
    "SelectionEvent",
    # Comparison models
    "LatestEvaluationSummary",
    "ProviderComparison",
]
