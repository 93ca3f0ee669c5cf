"""Per-category weight configuration (parametrization).

Administrators may replace the normal weights of a category. The
criticality-reinforced weights always come from the catalog and have no
override.
"""

import logging
from collections.abc import Mapping

from supplier_eval.authorization import Action, Authorizer, RoleAuthorizer, ensure_allowed
from supplier_eval.catalog.criteria_catalog import get_criteria_for_type, get_criterion_definitions
from supplier_eval.consts import PERCENT_WEIGHT_TOLERANCE
from supplier_eval.exceptions import ConfigurationError, NotFoundError
from supplier_eval.models.model_actor import Actor
from supplier_eval.models.model_criteria import (
    Category,
    CategoryType,
    CategoryWeightOverride,
    WeightedCriterion,
)
from supplier_eval.storage.permanent_storage.file_manager import FileManager

logger = logging.getLogger(__name__)


def validate_weight_configuration(
    category_type: CategoryType | str, criterion_weights: Mapping[str, float]
) -> None:
    """Check a weight override before it is stored or used.

    Args:
        category_type: Category type whose catalog the override applies to.
        criterion_weights: Criterion ID -> weight in percentage points.

    Raises:
        ConfigurationError: If criteria do not match the catalog, a weight is
            outside 0-100, or the weights do not sum to 100.
    """
    expected = {d.id for d in get_criterion_definitions(category_type)}
    given = set(criterion_weights)

    unknown = sorted(given - expected)
    missing = sorted(expected - given)
    if unknown or missing:
        raise ConfigurationError(
            "Weight configuration must cover exactly the catalog criteria",
            context={"unknown": unknown, "missing": missing},
        )

    out_of_range = sorted(cid for cid, w in criterion_weights.items() if w < 0 or w > 100)
    if out_of_range:
        raise ConfigurationError(
            f"Weights must be between 0 and 100: {', '.join(out_of_range)}",
            context={"out_of_range": out_of_range},
        )

    total = sum(criterion_weights.values())
    if abs(total - 100.0) > PERCENT_WEIGHT_TOLERANCE:
        raise ConfigurationError(
            f"Weights must sum to 100, got {total:g}",
            context={"total": total},
        )


class WeightConfiguration:
    """Reads and writes per-category weight overrides.

    Args:
        storage: Store holding categories.
        authorizer: Authorization collaborator (role table by default).
    """

    def __init__(self, storage: FileManager, authorizer: Authorizer | None = None) -> None:
        self.storage = storage
        self.authorizer = authorizer or RoleAuthorizer()

    def _get_category(self, category_id: str) -> Category:
        category = self.storage.load_category(category_id)
        if category is None:
            raise NotFoundError(
                f"Category '{category_id}' not found", context={"category_id": category_id}
            )
        return category

    def set_weights(
        self,
        category_id: str,
        criterion_weights: Mapping[str, float],
        actor: Actor | None = None,
    ) -> Category:
        """Validate and store a normal-weight override for a category.

        Invalid configurations are rejected before anything is written.
        Stored evaluations keep their own totals and are never touched.

        Args:
            category_id: Category to configure.
            criterion_weights: Criterion ID -> weight in percentage points.
            actor: Acting user, None for trusted internal calls.

        Returns:
            The updated category.
        """
        ensure_allowed(self.authorizer, actor, Action.CONFIGURE_WEIGHTS)
        category = self._get_category(category_id)
        validate_weight_configuration(category.category_type, criterion_weights)

        override = CategoryWeightOverride(
            weights={cid: float(w) for cid, w in criterion_weights.items()},
            updated_by=actor.user_id if actor else None,
        )
        updated = category.model_copy(update={"weight_override": override})
        self.storage.save_category(updated)
        logger.info(f"Updated weights for category {category_id}: {override.weights}")
        return updated

    def reset_weights(self, category_id: str, actor: Actor | None = None) -> Category:
        """Drop a category override so the catalog's normal weights apply again."""
        ensure_allowed(self.authorizer, actor, Action.CONFIGURE_WEIGHTS)
        category = self._get_category(category_id)
        updated = category.model_copy(update={"weight_override": None})
        self.storage.save_category(updated)
        logger.info(f"Reset weights for category {category_id} to catalog defaults")
        return updated

    def get_active_criteria(self, category_id: str, is_critical: bool) -> list[WeightedCriterion]:
        """Resolve the criteria and weights an evaluation in this category would use."""
        category = self._get_category(category_id)
        return get_criteria_for_type(
            category.category_type, is_critical=is_critical, override=category.weight_override
        )
