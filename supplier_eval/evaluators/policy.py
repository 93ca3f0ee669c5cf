"""Decision policies applied to total and per-criterion scores.

Two distinct policies with different consumers:

- ``requires_action_plan``: flat 70% gate for recurring evaluations. It
  decides whether the provider must submit an improvement commitment.
- ``get_performance_status`` / ``get_decision_status``: four-tier scales
  (85/70/60) used for dashboards and for selection recommendations.

A third, per-criterion bar (85%) decides which criteria need a written
commitment once the gate has fired.
"""

from collections.abc import Iterable, Mapping

from supplier_eval.consts import (
    ACTION_PLAN_THRESHOLD,
    CRITERION_COMMITMENT_THRESHOLD,
    PERCENT_FACTOR,
    TIER_LOW_PERCENT,
    TIER_MIDDLE_PERCENT,
    TIER_TOP_PERCENT,
)
from supplier_eval.models.model_evaluation import PerformanceLevel, PerformanceStatus
from supplier_eval.models.model_selection import DecisionLevel, DecisionStatus

PERFORMANCE_LABELS: dict[PerformanceLevel, str] = {
    PerformanceLevel.SOBRESALIENTE: "Sobresaliente / Conforme",
    PerformanceLevel.SATISFACTORIO: "Satisfactorio",
    PerformanceLevel.EN_OBSERVACION: "En Observación",
    PerformanceLevel.CRITICO: "Crítico / No Conforme",
}


def requires_action_plan(score: float) -> bool:
    """Whether a recurring evaluation total requires an improvement plan.

    Args:
        score: Total score on the 0-5 scale

    Returns:
        True below 3.5 (70%)
    """
    return score < ACTION_PLAN_THRESHOLD


def criterion_requires_commitment(score: float) -> bool:
    """Whether a single criterion score is below the 85% bar (4.25)."""
    return score < CRITERION_COMMITMENT_THRESHOLD


def criteria_requiring_commitment(
    scores: Mapping[str, float], criterion_ids: Iterable[str]
) -> list[str]:
    """List criteria that need a written commitment.

    A criterion without a score counts as 0 and therefore qualifies.
    """
    return [cid for cid in criterion_ids if criterion_requires_commitment(scores.get(cid, 0))]


def _tier(score: float) -> int:
    """Return 0..3 for top, middle, low and failing bands."""
    percentage = score * PERCENT_FACTOR
    if percentage >= TIER_TOP_PERCENT:
        return 0
    if percentage >= TIER_MIDDLE_PERCENT:
        return 1
    if percentage >= TIER_LOW_PERCENT:
        return 2
    return 3


def get_performance_status(score: float) -> PerformanceStatus:
    """Classify a recurring evaluation total on the four-tier scale."""
    level = [
        PerformanceLevel.SOBRESALIENTE,
        PerformanceLevel.SATISFACTORIO,
        PerformanceLevel.EN_OBSERVACION,
        PerformanceLevel.CRITICO,
    ][_tier(score)]
    return PerformanceStatus(
        level=level,
        label=PERFORMANCE_LABELS[level],
        percentage=round(score * PERCENT_FACTOR),
        requires_remediation=level in (PerformanceLevel.EN_OBSERVACION, PerformanceLevel.CRITICO),
        is_success=level == PerformanceLevel.SOBRESALIENTE,
    )


def get_decision_status(score: float = 0.0) -> DecisionStatus:
    """Map a competitor total to the selection recommendation tiers."""
    level = [
        DecisionLevel.APROBADO,
        DecisionLevel.APROBADO_CONDICIONADO,
        DecisionLevel.REQUIERE_ANALISIS,
        DecisionLevel.NO_APROBADO,
    ][_tier(score)]
    return DecisionStatus(level=level, percentage=round(score * PERCENT_FACTOR))
