"""Criteria catalog, category and provider models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from supplier_eval.consts import PERCENT_WEIGHT_TOLERANCE
from supplier_eval.models.common import _utc_now


class CategoryType(str, Enum):
    """Supported category types, each with its own criteria catalog."""

    BIENES = "Bienes"
    SERVICIOS = "Servicios (Contratista)"


class ProviderCriticality(str, Enum):
    """Provider-level impact classification selecting the weight set."""

    CRITICO = "Crítico"
    NO_CRITICO = "No Crítico"
    UNASSIGNED = "Sin asignar"


class CriterionDefinition(BaseModel):
    """Reference definition of a single evaluation criterion.

    Weights are fractions. Within a category type each weight column sums
    to 1.0.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable criterion key")
    label: str = Field(description="Display label")
    weight_normal: float = Field(ge=0.0, le=1.0, description="Weight for non-critical providers")
    weight_critical: float = Field(
        ge=0.0, le=1.0, description="Reinforced weight for critical providers"
    )


class WeightedCriterion(BaseModel):
    """A criterion resolved against the weight set that applies to a provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    default_weight: float = Field(ge=0.0, le=1.0, description="Active weight as a fraction")


class CategoryWeightOverride(BaseModel):
    """Administrator override of the normal weights for one category.

    Weights are percentage points and must sum to 100.
    """

    weights: dict[str, float] = Field(description="Key: criterion ID, value: percent 0-100")
    updated_at: datetime = Field(default_factory=_utc_now)
    updated_by: str | None = Field(default=None, description="User who saved the override")

    @computed_field
    @property
    def total(self) -> float:
        """Sum of all weights in percentage points."""
        return sum(self.weights.values())

    @model_validator(mode="after")
    def weights_sum_to_hundred(self) -> "CategoryWeightOverride":
        """Validate that weights are within range and sum to 100."""
        for criterion_id, weight in self.weights.items():
            if weight < 0 or weight > 100:
                msg = f"Weight for '{criterion_id}' must be between 0 and 100, got {weight}"
                raise ValueError(msg)
        if abs(self.total - 100.0) > PERCENT_WEIGHT_TOLERANCE:
            msg = f"Weights must sum to 100, got {self.total}"
            raise ValueError(msg)
        return self

    def as_fractions(self) -> dict[str, float]:
        """Return the weights as fractions of 1."""
        return {criterion_id: weight / 100.0 for criterion_id, weight in self.weights.items()}


class Category(BaseModel):
    """A purchasing category providers are assigned to."""

    id: str
    name: str
    category_type: CategoryType
    weight_override: CategoryWeightOverride | None = Field(
        default=None, description="Normal-weight override, never used for critical providers"
    )


class Provider(BaseModel):
    """Supplier record as seen by the evaluation engine."""

    id: str
    business_name: str
    email: str = ""
    category_ids: list[str] = Field(default_factory=list)
    criticality: ProviderCriticality = ProviderCriticality.UNASSIGNED

    @property
    def is_critical(self) -> bool:
        """Whether the reinforced (critical) weight set applies."""
        return self.criticality == ProviderCriticality.CRITICO
