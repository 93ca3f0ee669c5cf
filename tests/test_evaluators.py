"""Tests for weighted aggregation and decision policies."""

import pytest

from supplier_eval.evaluators.composite import (
    compute_competitor_score,
    compute_total_score,
    missing_scores,
    round_score,
    score_contributions,
    to_percentage,
)
from supplier_eval.evaluators.policy import (
    criteria_requiring_commitment,
    criterion_requires_commitment,
    get_decision_status,
    get_performance_status,
    requires_action_plan,
)
from supplier_eval.models.model_evaluation import PerformanceLevel
from supplier_eval.models.model_selection import Competitor, DecisionLevel, SelectionCriterion


# Aggregation Tests
def test_weighted_total() -> None:
    """5 * 0.6 + 3 * 0.4 == 4.2"""
    total = compute_total_score({"a": 5, "b": 3}, {"a": 0.6, "b": 0.4})
    assert total == pytest.approx(4.2)
    assert to_percentage(total) == 84


def test_missing_score_counts_as_zero() -> None:
    total = compute_total_score({"a": 5}, {"a": 0.5, "b": 0.5})
    assert total == pytest.approx(2.5)


def test_extra_scores_are_ignored() -> None:
    total = compute_total_score({"a": 4, "zzz": 5}, {"a": 1.0})
    assert total == pytest.approx(4.0)


def test_uniform_scores_give_that_score() -> None:
    weights = {"a": 0.1, "b": 0.2, "c": 0.3, "d": 0.4}
    for value in range(1, 6):
        scores = dict.fromkeys(weights, value)
        assert compute_total_score(scores, weights) == pytest.approx(value)


def test_total_is_monotonic() -> None:
    weights = {"a": 0.25, "b": 0.75}
    base = compute_total_score({"a": 3, "b": 3}, weights)
    assert compute_total_score({"a": 4, "b": 3}, weights) > base
    assert compute_total_score({"a": 3, "b": 4}, weights) > base


def test_round_score() -> None:
    assert round_score(3.14159) == 3.14
    assert round_score(4.999999) == 5.0


def test_score_contributions_sorted() -> None:
    contributions = score_contributions({"a": 5, "b": 5}, {"a": 0.2, "b": 0.8})
    assert list(contributions) == ["b", "a"]
    assert contributions["b"] == pytest.approx(4.0)


def test_missing_scores_only_weighted() -> None:
    weights = {"a": 0.5, "b": 0.5, "c": 0.0}
    assert missing_scores({"a": 4}, weights) == ["b"]


def test_competitor_score_uses_percent_weights() -> None:
    criteria = [
        SelectionCriterion(id="legal_rut", label="RUT", weight=60),
        SelectionCriterion(id="tech_exp", label="Experiencia", weight=40),
    ]
    competitor = Competitor(name="ACME", scores={"legal_rut": 5, "tech_exp": 3})
    assert compute_competitor_score(competitor, criteria) == pytest.approx(4.2)


# Policy Tests
def test_action_plan_boundary() -> None:
    assert requires_action_plan(3.49)
    assert not requires_action_plan(3.5)
    assert not requires_action_plan(5.0)
    assert requires_action_plan(0.0)


def test_criterion_commitment_boundary() -> None:
    assert not criterion_requires_commitment(4.25)
    assert criterion_requires_commitment(4.24999)
    assert criterion_requires_commitment(0)


def test_criteria_requiring_commitment_includes_missing() -> None:
    result = criteria_requiring_commitment({"a": 3.0, "b": 4.5}, ["a", "b", "c"])
    assert result == ["a", "c"]


@pytest.mark.parametrize(
    ("score", "level"),
    [
        (5.0, PerformanceLevel.SOBRESALIENTE),
        (4.25, PerformanceLevel.SOBRESALIENTE),
        (4.24999, PerformanceLevel.SATISFACTORIO),
        (4.24, PerformanceLevel.SATISFACTORIO),
        (3.5, PerformanceLevel.SATISFACTORIO),
        (3.49, PerformanceLevel.EN_OBSERVACION),
        (3.0, PerformanceLevel.EN_OBSERVACION),
        (2.99, PerformanceLevel.CRITICO),
        (0.0, PerformanceLevel.CRITICO),
    ],
)
def test_performance_tiers(score: float, level: PerformanceLevel) -> None:
    assert get_performance_status(score).level == level


def test_performance_status_flags() -> None:
    top = get_performance_status(4.5)
    assert top.is_success
    assert not top.requires_remediation
    assert top.percentage == 90

    watched = get_performance_status(3.2)
    assert not watched.is_success
    assert watched.requires_remediation


def test_gate_and_tiers_are_separate() -> None:
    """A 3.5 total passes the gate but is not a top-tier success."""
    assert not requires_action_plan(3.5)
    assert not get_performance_status(3.5).is_success


@pytest.mark.parametrize(
    ("score", "level"),
    [
        (4.25, DecisionLevel.APROBADO),
        (4.24999, DecisionLevel.APROBADO_CONDICIONADO),
        (4.24, DecisionLevel.APROBADO_CONDICIONADO),
        (3.5, DecisionLevel.APROBADO_CONDICIONADO),
        (3.0, DecisionLevel.REQUIERE_ANALISIS),
        (2.9, DecisionLevel.NO_APROBADO),
    ],
)
def test_decision_tiers(score: float, level: DecisionLevel) -> None:
    assert get_decision_status(score).level == level


def test_decision_status_default() -> None:
    status = get_decision_status()
    assert status.level == DecisionLevel.NO_APROBADO
    assert status.percentage == 0
    assert status.label == "No Aprobado"
