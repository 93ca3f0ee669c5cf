"""Competitive selection event models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, computed_field

from supplier_eval.consts import PERCENT_FACTOR
from supplier_eval.models.common import _new_id, _utc_now
from supplier_eval.models.model_criteria import CategoryType, ProviderCriticality
from supplier_eval.models.model_evaluation import CriterionScore


class EventStatus(str, Enum):
    """Selection event lifecycle. ``Cerrado`` is terminal."""

    ABIERTO = "Abierto"
    CERRADO = "Cerrado"


class CriterionGroup(str, Enum):
    """Conventional grouping of selection criteria, derived from the id prefix."""

    LEGAL = "legal"
    TECHNICAL = "technical"
    OPERATIONAL = "operational"
    FINANCIAL = "financial"
    RISK = "risk"
    UNCLASSIFIED = "unclassified"


_GROUP_PREFIXES: dict[str, CriterionGroup] = {
    "legal_": CriterionGroup.LEGAL,
    "tech_": CriterionGroup.TECHNICAL,
    "operative_": CriterionGroup.OPERATIONAL,
    "financial_": CriterionGroup.FINANCIAL,
    "risk_": CriterionGroup.RISK,
}


class DecisionLevel(str, Enum):
    """Recommendation tiers used when comparing competitors."""

    APROBADO = "Aprobado"
    APROBADO_CONDICIONADO = "Aprobado Condicionado"
    REQUIERE_ANALISIS = "Requiere análisis gerencial"
    NO_APROBADO = "No Aprobado"


class DecisionStatus(BaseModel):
    """Recommendation for a competitor total score."""

    level: DecisionLevel
    percentage: int = Field(ge=0, le=100)

    @property
    def label(self) -> str:
        return self.level.value


class SelectionCriterion(BaseModel):
    """Criterion scoped to one selection event. Weight in percentage points."""

    id: str
    label: str
    weight: float = Field(default=0.0, ge=0.0, le=100.0)

    @property
    def group(self) -> CriterionGroup:
        for prefix, group in _GROUP_PREFIXES.items():
            if self.id.startswith(prefix):
                return group
        return CriterionGroup.UNCLASSIFIED


class Competitor(BaseModel):
    """A bidder in a selection event."""

    id: str = Field(default_factory=_new_id)
    name: str
    nit: str = Field(default="", description="Tax identification number")
    email: str = ""
    quote_url: str | None = Field(default=None, description="Link to the uploaded quote")
    scores: dict[str, CriterionScore] = Field(default_factory=dict)
    total_score: float = Field(default=0.0, ge=0.0)
    audit_notes: str = ""

    @computed_field
    @property
    def percentage(self) -> int:
        """Total score on the 0-100 scale."""
        return round(self.total_score * PERCENT_FACTOR)


class SelectionEvent(BaseModel):
    """Competitive selection process for onboarding or replacing a supplier."""

    id: str = Field(default_factory=_new_id)
    name: str
    type: CategoryType
    criticality: ProviderCriticality = ProviderCriticality.UNASSIGNED
    status: EventStatus = EventStatus.ABIERTO
    criteria: list[SelectionCriterion] = Field(default_factory=list)
    competitors: list[Competitor] = Field(default_factory=list)
    winner_id: str | None = None
    winner_justification: str | None = None
    created_at: datetime = Field(default_factory=_utc_now)
    closed_at: datetime | None = None

    @property
    def is_locked(self) -> bool:
        return self.status == EventStatus.CERRADO

    @property
    def total_weight(self) -> float:
        return sum(c.weight for c in self.criteria)

    def get_competitor(self, competitor_id: str) -> Competitor | None:
        """Return competitor by ID, or None if absent."""
        for competitor in self.competitors:
            if competitor.id == competitor_id:
                return competitor
        return None
