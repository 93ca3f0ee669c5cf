"""Tests for the criteria catalog and the selection template."""

import pytest

from supplier_eval.catalog.criteria_catalog import (
    catalog_weight_totals,
    get_criteria_for_type,
    get_criterion_definitions,
    get_evaluation_title,
    is_catalog_consistent,
)
from supplier_eval.catalog.selection_template import default_selection_criteria, weights_by_group
from supplier_eval.exceptions import ConfigurationError, UnknownCategoryTypeError
from supplier_eval.models.model_criteria import CategoryType, CategoryWeightOverride
from supplier_eval.models.model_selection import CriterionGroup


class TestCriteriaCatalog:
    def test_catalog_is_consistent(self) -> None:
        assert is_catalog_consistent()
        for normal, critical in catalog_weight_totals().values():
            assert normal == pytest.approx(1.0)
            assert critical == pytest.approx(1.0)

    def test_goods_criteria_ids(self) -> None:
        ids = [d.id for d in get_criterion_definitions(CategoryType.BIENES)]
        assert ids == [
            "price",
            "creditPolicies",
            "deliveryTime",
            "warrantyPolicies",
            "customerService",
            "responsiveness",
            "availability",
        ]

    def test_services_accepts_raw_value(self) -> None:
        ids = [d.id for d in get_criterion_definitions("Servicios (Contratista)")]
        assert "experience" in ids
        assert "paymentPolicies" in ids

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(UnknownCategoryTypeError):
            get_criteria_for_type("Obras")

    def test_unknown_type_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            get_evaluation_title("Obras")

    def test_normal_weights(self) -> None:
        criteria = {c.id: c.default_weight for c in get_criteria_for_type(CategoryType.BIENES)}
        assert criteria["deliveryTime"] == pytest.approx(0.20)
        assert sum(criteria.values()) == pytest.approx(1.0)

    def test_critical_weights_differ(self) -> None:
        normal = {c.id: c.default_weight for c in get_criteria_for_type(CategoryType.BIENES)}
        critical = {
            c.id: c.default_weight
            for c in get_criteria_for_type(CategoryType.BIENES, is_critical=True)
        }
        assert critical["deliveryTime"] > normal["deliveryTime"]
        assert sum(critical.values()) == pytest.approx(1.0)

    def test_override_applies_to_normal_weights(self) -> None:
        override = CategoryWeightOverride(
            weights={
                "price": 40,
                "creditPolicies": 10,
                "deliveryTime": 10,
                "warrantyPolicies": 10,
                "customerService": 10,
                "responsiveness": 10,
                "availability": 10,
            }
        )
        criteria = {
            c.id: c.default_weight
            for c in get_criteria_for_type(CategoryType.BIENES, override=override)
        }
        assert criteria["price"] == pytest.approx(0.40)

    def test_override_never_applies_to_critical(self) -> None:
        override = CategoryWeightOverride(
            weights={
                "price": 40,
                "creditPolicies": 10,
                "deliveryTime": 10,
                "warrantyPolicies": 10,
                "customerService": 10,
                "responsiveness": 10,
                "availability": 10,
            }
        )
        critical = {
            c.id: c.default_weight
            for c in get_criteria_for_type(CategoryType.BIENES, is_critical=True, override=override)
        }
        catalog = {d.id: d.weight_critical for d in get_criterion_definitions(CategoryType.BIENES)}
        assert critical == catalog

    def test_evaluation_titles(self) -> None:
        assert get_evaluation_title(CategoryType.BIENES).endswith("Bienes")
        assert "Contratista" in get_evaluation_title(CategoryType.SERVICIOS)


class TestSelectionTemplate:
    @pytest.mark.parametrize("is_critical", [False, True])
    def test_template_sums_to_hundred(self, is_critical: bool) -> None:
        criteria = default_selection_criteria(is_critical)
        assert sum(c.weight for c in criteria) == pytest.approx(100.0)

    def test_normal_group_breakdown(self) -> None:
        groups = weights_by_group(default_selection_criteria())
        assert groups[CriterionGroup.LEGAL] == 20
        assert groups[CriterionGroup.TECHNICAL] == 35
        assert groups[CriterionGroup.OPERATIONAL] == 20
        assert groups[CriterionGroup.FINANCIAL] == 15
        assert groups[CriterionGroup.RISK] == 10
        assert groups[CriterionGroup.UNCLASSIFIED] == 0

    def test_critical_template_shifts_weight(self) -> None:
        groups = weights_by_group(default_selection_criteria(is_critical=True))
        assert groups[CriterionGroup.TECHNICAL] == 40
        assert groups[CriterionGroup.RISK] == 15

    def test_template_returns_fresh_instances(self) -> None:
        first = default_selection_criteria()
        first[0].weight = 99
        assert default_selection_criteria()[0].weight != 99
