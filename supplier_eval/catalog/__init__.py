"""Reference criteria: the recurring-evaluation catalog and the selection template."""

from supplier_eval.catalog.criteria_catalog import (
    CRITERIA_BY_TYPE,
    EVALUATION_TYPES,
    get_criteria_for_type,
    get_criterion_definitions,
    get_evaluation_title,
    is_catalog_consistent,
)
from supplier_eval.catalog.selection_template import (
    CONVENTIONAL_GROUP_WEIGHTS,
    PREDEFINED_SELECTION_CRITERIA,
    default_selection_criteria,
    weights_by_group,
)

__all__ = [
    "CONVENTIONAL_GROUP_WEIGHTS",
    "CRITERIA_BY_TYPE",
    "EVALUATION_TYPES",
    "PREDEFINED_SELECTION_CRITERIA",
    "default_selection_criteria",
    "get_criteria_for_type",
    "get_criterion_definitions",
    "get_evaluation_title",
    "is_catalog_consistent",
    "weights_by_group",
]
