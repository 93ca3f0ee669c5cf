"""Evaluation record and performance classification models."""

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field, computed_field

from supplier_eval.consts import MAX_CRITERION_SCORE, MIN_CRITERION_SCORE, PERCENT_FACTOR
from supplier_eval.models.common import _new_id, _utc_now
from supplier_eval.models.model_criteria import CategoryType

CriterionScore = Annotated[int, Field(ge=MIN_CRITERION_SCORE, le=MAX_CRITERION_SCORE)]


class PerformanceLevel(str, Enum):
    """Four-tier performance bands for recurring evaluations."""

    SOBRESALIENTE = "Sobresaliente"
    SATISFACTORIO = "Satisfactorio"
    EN_OBSERVACION = "En Observación"
    CRITICO = "Crítico"


class PerformanceStatus(BaseModel):
    """Result of classifying a total score on the four-tier scale."""

    level: PerformanceLevel
    label: str
    percentage: int = Field(ge=0, le=100)
    requires_remediation: bool
    is_success: bool = Field(description="Top tier, triggers the congratulation notice")


class CommitmentState(str, Enum):
    """Lifecycle of the improvement commitment attached to an evaluation."""

    NO_REMEDIATION_NEEDED = "no_remediation_needed"
    PENDING_COMMITMENT = "pending_commitment"
    COMMITMENT_SUBMITTED = "commitment_submitted"


class EvaluationRecord(BaseModel):
    """Stored outcome of one performance evaluation.

    ``scores``, ``weights_used`` and ``total_score`` are fixed at creation.
    The commitment fields are written once, by the commitment submission.
    """

    id: str = Field(default_factory=_new_id)
    provider_id: str
    category_id: str
    evaluation_type: CategoryType
    evaluator_id: str | None = None
    scores: dict[str, CriterionScore] = Field(default_factory=dict)
    score_justifications: dict[str, str] = Field(default_factory=dict)
    weights_used: dict[str, float] = Field(
        default_factory=dict, description="Weight snapshot (fractions) the total was computed with"
    )
    total_score: float = Field(ge=0.0, le=float(MAX_CRITERION_SCORE))
    is_action_plan_required: bool
    comments: str = ""
    improvement_commitments: dict[str, str] | None = None
    improvement_commitment: str | None = Field(
        default=None, description="Commitments joined for flat listings"
    )
    commitment_submitted_at: datetime | None = None
    created_at: datetime = Field(default_factory=_utc_now)

    @computed_field
    @property
    def percentage(self) -> int:
        """Total score on the 0-100 scale."""
        return round(self.total_score * PERCENT_FACTOR)

    @property
    def commitment_state(self) -> CommitmentState:
        """Current commitment state, derived from stored fields only."""
        if self.commitment_submitted_at is not None:
            return CommitmentState.COMMITMENT_SUBMITTED
        if not self.is_action_plan_required:
            return CommitmentState.NO_REMEDIATION_NEEDED
        return CommitmentState.PENDING_COMMITMENT
