"""Tests for the cross-provider comparison view."""

import random
from datetime import UTC, datetime

import pytest

from supplier_eval.exceptions import NotFoundError
from supplier_eval.models.model_criteria import CategoryType
from supplier_eval.models.model_evaluation import EvaluationRecord
from supplier_eval.storage.permanent_storage.file_manager import FileManager
from supplier_eval.workflow.comparison import ComparisonAggregator, latest_evaluations, summarize
from supplier_eval.workflow.evaluations import EvaluationService


def _record(record_id: str, day: int, total: float, kind=CategoryType.BIENES) -> EvaluationRecord:
    return EvaluationRecord(
        id=record_id,
        provider_id="prov-1",
        category_id="cat-goods",
        evaluation_type=kind,
        total_score=total,
        is_action_plan_required=total < 3.5,
        created_at=datetime(2024, 1, day, tzinfo=UTC),
    )


class TestLatestEvaluations:
    def test_independent_of_input_order(self) -> None:
        records = [
            _record("e1", 1, 4.0),
            _record("e2", 5, 3.0),
            _record("e3", 3, 4.5),
            _record("s1", 2, 4.8, CategoryType.SERVICIOS),
        ]
        expected = {CategoryType.BIENES: "e2", CategoryType.SERVICIOS: "s1"}

        for seed in range(5):
            shuffled = records[:]
            random.Random(seed).shuffle(shuffled)
            latest = latest_evaluations(shuffled)
            assert {t: r.id for t, r in latest.items()} == expected

    def test_same_timestamp_breaks_on_id(self) -> None:
        records = [_record("b", 2, 4.0), _record("a", 2, 2.0), _record("c", 2, 3.0)]
        assert latest_evaluations(records)[CategoryType.BIENES].id == "c"
        assert latest_evaluations(reversed(records))[CategoryType.BIENES].id == "c"

    def test_empty(self) -> None:
        assert latest_evaluations([]) == {}

    def test_summary_flags(self) -> None:
        at_risk = summarize(_record("e1", 1, 3.0))
        assert at_risk.is_at_risk
        assert at_risk.needs_failure_notice
        assert at_risk.suggest_substitution
        assert at_risk.percentage == 60

        answered = summarize(
            _record("e2", 1, 3.0).model_copy(
                update={"commitment_submitted_at": datetime(2024, 1, 2, tzinfo=UTC)}
            )
        )
        assert answered.has_commitment
        assert not answered.needs_failure_notice
        assert answered.suggest_substitution

        fine = summarize(_record("e3", 1, 4.0))
        assert not fine.is_at_risk
        assert not fine.suggest_substitution


class TestComparisonAggregator:
    def test_compare_category(
        self, seeded_storage: FileManager, clock, all_fives_goods: dict, all_threes_goods: dict
    ) -> None:
        service = EvaluationService(seeded_storage, clock=clock)
        service.create_evaluation("prov-1", "cat-goods", all_threes_goods)
        latest_goods = service.create_evaluation("prov-1", "cat-goods", all_fives_goods)
        service.create_evaluation("prov-2", "cat-goods", all_threes_goods)

        comparisons = ComparisonAggregator(seeded_storage).compare_category("cat-goods")

        assert [c.provider_id for c in comparisons] == ["prov-2", "prov-1"]
        by_id = {c.provider_id: c for c in comparisons}
        assert by_id["prov-1"].latest[CategoryType.BIENES].evaluation_id == latest_goods.id
        assert not by_id["prov-1"].is_at_risk
        assert by_id["prov-2"].is_at_risk

    def test_provider_without_evaluations(self, seeded_storage: FileManager) -> None:
        comparisons = ComparisonAggregator(seeded_storage).compare_category("cat-services")
        assert len(comparisons) == 1
        assert comparisons[0].latest == {}
        assert not comparisons[0].is_at_risk

    def test_unknown_category(self, seeded_storage: FileManager) -> None:
        with pytest.raises(NotFoundError):
            ComparisonAggregator(seeded_storage).compare_category("missing")

    def test_read_only(
        self, seeded_storage: FileManager, all_threes_goods: dict
    ) -> None:
        EvaluationService(seeded_storage).create_evaluation("prov-1", "cat-goods", all_threes_goods)
        before = seeded_storage.get_data_summary()
        ComparisonAggregator(seeded_storage).compare_category("cat-goods")
        assert seeded_storage.get_data_summary() == before
