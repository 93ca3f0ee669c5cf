"""Side-by-side view of the latest evaluation of each provider in a category."""

import logging
from collections.abc import Iterable

from supplier_eval.evaluators.policy import requires_action_plan
from supplier_eval.exceptions import NotFoundError
from supplier_eval.models.model_comparison import LatestEvaluationSummary, ProviderComparison
from supplier_eval.models.model_criteria import CategoryType
from supplier_eval.models.model_evaluation import EvaluationRecord
from supplier_eval.storage.permanent_storage.file_manager import FileManager

logger = logging.getLogger(__name__)


def latest_evaluations(records: Iterable[EvaluationRecord]) -> dict[CategoryType, EvaluationRecord]:
    """Pick the latest record per evaluation type.

    Latest means the largest ``(created_at, id)`` pair, so the result does
    not depend on the order records arrive in.
    """
    latest: dict[CategoryType, EvaluationRecord] = {}
    for record in records:
        current = latest.get(record.evaluation_type)
        if current is None or (record.created_at, record.id) > (current.created_at, current.id):
            latest[record.evaluation_type] = record
    return latest


def summarize(record: EvaluationRecord) -> LatestEvaluationSummary:
    return LatestEvaluationSummary(
        provider_id=record.provider_id,
        evaluation_type=record.evaluation_type,
        evaluation_id=record.id,
        total_score=record.total_score,
        percentage=record.percentage,
        created_at=record.created_at,
        scores=dict(record.scores),
        is_at_risk=requires_action_plan(record.total_score),
        has_commitment=record.commitment_submitted_at is not None,
    )


class ComparisonAggregator:
    """Read-only comparison of providers assigned to a category."""

    def __init__(self, storage: FileManager) -> None:
        self.storage = storage

    def compare_provider(self, provider_id: str) -> ProviderComparison:
        provider = self.storage.load_provider(provider_id)
        if provider is None:
            raise NotFoundError(
                f"Provider '{provider_id}' not found", context={"provider_id": provider_id}
            )
        records = self.storage.list_evaluations(provider_id=provider_id)
        return ProviderComparison(
            provider_id=provider.id,
            business_name=provider.business_name,
            latest={t: summarize(r) for t, r in latest_evaluations(records).items()},
        )

    def compare_category(self, category_id: str) -> list[ProviderComparison]:
        """Latest evaluation per type for every provider in the category.

        Returns:
            Comparisons sorted by business name.
        """
        if self.storage.load_category(category_id) is None:
            raise NotFoundError(
                f"Category '{category_id}' not found", context={"category_id": category_id}
            )

        comparisons = [
            self.compare_provider(provider.id)
            for provider in self.storage.list_providers_in_category(category_id)
        ]
        comparisons.sort(key=lambda c: (c.business_name.lower(), c.provider_id))
        at_risk = sum(1 for c in comparisons if c.is_at_risk)
        logger.debug(
            f"Compared {len(comparisons)} providers in {category_id} ({at_risk} at risk)"
        )
        return comparisons
