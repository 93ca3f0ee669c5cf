"""Static criteria catalog per category type.

Each category type has its own list of criteria with two weight columns:
the normal weights (overridable per category by an administrator) and the
criticality-reinforced weights (fixed, applied to critical providers).
"""

from supplier_eval.consts import CATALOG_WEIGHT_TOLERANCE
from supplier_eval.exceptions import UnknownCategoryTypeError
from supplier_eval.models.model_criteria import (
    CategoryType,
    CategoryWeightOverride,
    CriterionDefinition,
    WeightedCriterion,
)

BIENES_CRITERIA: list[CriterionDefinition] = [
    CriterionDefinition(id="price", label="Precio", weight_normal=0.10, weight_critical=0.05),
    CriterionDefinition(
        id="creditPolicies",
        label="Políticas de crédito y descuento",
        weight_normal=0.10,
        weight_critical=0.05,
    ),
    CriterionDefinition(
        id="deliveryTime",
        label="Tiempo de entrega del producto",
        weight_normal=0.20,
        weight_critical=0.25,
    ),
    CriterionDefinition(
        id="warrantyPolicies",
        label="Políticas de garantía",
        weight_normal=0.10,
        weight_critical=0.15,
    ),
    CriterionDefinition(
        id="customerService", label="Atención al cliente", weight_normal=0.10, weight_critical=0.05
    ),
    CriterionDefinition(
        id="responsiveness",
        label="Capacidad de respuesta a los requerimientos",
        weight_normal=0.20,
        weight_critical=0.20,
    ),
    CriterionDefinition(
        id="availability",
        label="Disponibilidad de los productos o servicios",
        weight_normal=0.20,
        weight_critical=0.25,
    ),
]

SERVICIOS_CRITERIA: list[CriterionDefinition] = [
    CriterionDefinition(
        id="experience",
        label="Experiencia en la prestación del servicio",
        weight_normal=0.20,
        weight_critical=0.25,
    ),
    CriterionDefinition(id="price", label="Precio", weight_normal=0.15, weight_critical=0.10),
    CriterionDefinition(
        id="paymentPolicies", label="Políticas de pago", weight_normal=0.15, weight_critical=0.05
    ),
    CriterionDefinition(
        id="responsiveness",
        label="Capacidad para atender los requerimientos",
        weight_normal=0.20,
        weight_critical=0.25,
    ),
    CriterionDefinition(
        id="availability",
        label="Disponibilidad de los servicios que presta",
        weight_normal=0.20,
        weight_critical=0.25,
    ),
    CriterionDefinition(
        id="customerService", label="Atención al cliente", weight_normal=0.10, weight_critical=0.10
    ),
]

CRITERIA_BY_TYPE: dict[CategoryType, list[CriterionDefinition]] = {
    CategoryType.BIENES: BIENES_CRITERIA,
    CategoryType.SERVICIOS: SERVICIOS_CRITERIA,
}

EVALUATION_TYPES: dict[CategoryType, str] = {
    CategoryType.BIENES: "Evaluación de Desempeño de Proveedor de Bienes",
    CategoryType.SERVICIOS: "Evaluación de Desempeño de Contratista",
}


def _resolve_type(category_type: CategoryType | str) -> CategoryType:
    if isinstance(category_type, CategoryType):
        return category_type
    try:
        return CategoryType(category_type)
    except ValueError as e:
        raise UnknownCategoryTypeError(
            f"No criteria catalog for category type '{category_type}'",
            context={"category_type": category_type},
        ) from e


def get_criterion_definitions(category_type: CategoryType | str) -> list[CriterionDefinition]:
    """Return the raw catalog rows for a category type.

    Raises:
        UnknownCategoryTypeError: If the type has no catalog.
    """
    resolved = _resolve_type(category_type)
    if resolved not in CRITERIA_BY_TYPE:
        raise UnknownCategoryTypeError(
            f"No criteria catalog for category type '{resolved.value}'",
            context={"category_type": resolved.value},
        )
    return list(CRITERIA_BY_TYPE[resolved])


def get_criteria_for_type(
    category_type: CategoryType | str,
    is_critical: bool = False,
    override: CategoryWeightOverride | None = None,
) -> list[WeightedCriterion]:
    """Resolve the active criteria and weights for an evaluation.

    Critical providers always get the catalog's reinforced weights. For
    everyone else a category override, when present, replaces the normal
    weights.

    Args:
        category_type: Category type whose catalog to use.
        is_critical: Whether the evaluated provider is flagged critical.
        override: Optional per-category override of the normal weights.

    Returns:
        Criteria with their active weight as a fraction.
    """
    definitions = get_criterion_definitions(category_type)

    if is_critical:
        return [
            WeightedCriterion(id=d.id, label=d.label, default_weight=d.weight_critical)
            for d in definitions
        ]

    fractions = override.as_fractions() if override is not None else {}
    return [
        WeightedCriterion(
            id=d.id,
            label=d.label,
            default_weight=fractions.get(d.id, d.weight_normal),
        )
        for d in definitions
    ]


def get_evaluation_title(category_type: CategoryType | str) -> str:
    """Return the display title of the evaluation for a category type."""
    return EVALUATION_TYPES[_resolve_type(category_type)]


def catalog_weight_totals() -> dict[CategoryType, tuple[float, float]]:
    """Sum both weight columns per category type.

    Returns:
        Mapping of category type to (normal total, critical total).
    """
    return {
        category_type: (
            sum(d.weight_normal for d in definitions),
            sum(d.weight_critical for d in definitions),
        )
        for category_type, definitions in CRITERIA_BY_TYPE.items()
    }


def is_catalog_consistent() -> bool:
    """Check that every weight column of every catalog sums to 1.0."""
    return all(
        abs(normal - 1.0) <= CATALOG_WEIGHT_TOLERANCE
        and abs(critical - 1.0) <= CATALOG_WEIGHT_TOLERANCE
        for normal, critical in catalog_weight_totals().values()
    )
