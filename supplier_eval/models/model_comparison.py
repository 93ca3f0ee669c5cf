"""Read-only cross-provider comparison models."""

from datetime import datetime

from pydantic import BaseModel, Field

from supplier_eval.models.model_criteria import CategoryType


class LatestEvaluationSummary(BaseModel):
    """Risk view over the latest evaluation of one type for one provider."""

    provider_id: str
    evaluation_type: CategoryType
    evaluation_id: str
    total_score: float
    percentage: int
    created_at: datetime
    scores: dict[str, int] = Field(default_factory=dict)
    is_at_risk: bool = Field(description="Latest total is below the action-plan threshold")
    has_commitment: bool = Field(description="An improvement commitment was submitted")

    @property
    def needs_failure_notice(self) -> bool:
        """At risk and the provider has not answered with a commitment yet."""
        return self.is_at_risk and not self.has_commitment

    @property
    def suggest_substitution(self) -> bool:
        """Offer opening a corrective selection event for this provider."""
        return self.is_at_risk


class ProviderComparison(BaseModel):
    """Latest evaluation per type for one provider in a category."""

    provider_id: str
    business_name: str
    latest: dict[CategoryType, LatestEvaluationSummary] = Field(default_factory=dict)

    @property
    def is_at_risk(self) -> bool:
        return any(summary.is_at_risk for summary in self.latest.values())
