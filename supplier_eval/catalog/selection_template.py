"""Predefined criteria for competitive selection events.

The template covers legal, technical, operational, financial and risk
capacity. Critical purchases shift weight towards technical capacity and
risk management. Both variants sum to 100.
"""

from supplier_eval.models.model_selection import CriterionGroup, SelectionCriterion

# (id, label, normal weight, critical weight), weights in percentage points
PREDEFINED_SELECTION_CRITERIA: list[tuple[str, str, float, float]] = [
    # Legal capacity (20%)
    ("legal_camara", "Cámara de Comercio vigente (Verificación: Documento actualizado)", 5, 5),
    ("legal_rut", "RUT actualizado (Verificación: Documento)", 3, 3),
    (
        "legal_seguridad_social",
        "Pago seguridad social (si aplica) (Verificación: Planilla PILA)",
        5,
        5,
    ),
    ("legal_sgsst", "Certificación SG-SST (Verificación: Soporte vigente)", 7, 7),
    # Technical capacity (35% / 40%)
    ("tech_exp", "Experiencia mínima comprobada (2-5 años)", 10, 10),
    ("tech_staff", "Personal calificado / certificado", 10, 10),
    ("tech_specs", "Fichas técnicas / especificaciones", 5, 5),
    ("tech_certs", "Certificaciones técnicas (RETIE, ONAC, INVIMA, etc.)", 10, 10),
    ("tech_visit", "Visita técnica previa (Solo Críticos)", 0, 5),
    # Operational capacity (20% / 15%)
    ("operative_infra", "Infraestructura y recursos disponibles", 10, 5),
    ("operative_resp", "Capacidad de respuesta", 5, 5),
    ("operative_delivery", "Disponibilidad para entregas", 5, 5),
    # Financial and commercial capacity (15% / 10%)
    ("financial_stability", "Estabilidad financiera", 5, 4),
    ("financial_conditions", "Condiciones comerciales", 5, 3),
    ("financial_price", "Competitividad del precio", 5, 3),
    # Risk management and continuity (10% / 15%)
    ("risk_plan", "Plan de contingencia", 5, 10),
    ("risk_policy", "Póliza de responsabilidad civil", 5, 5),
]

CONVENTIONAL_GROUP_WEIGHTS: dict[CriterionGroup, float] = {
    CriterionGroup.LEGAL: 20,
    CriterionGroup.TECHNICAL: 35,
    CriterionGroup.OPERATIONAL: 20,
    CriterionGroup.FINANCIAL: 15,
}


def default_selection_criteria(is_critical: bool = False) -> list[SelectionCriterion]:
    """Build the predefined criteria list for a new selection event.

    Args:
        is_critical: Use the reinforced weights for critical purchases.

    Returns:
        Fresh SelectionCriterion instances whose weights sum to 100.
    """
    return [
        SelectionCriterion(id=cid, label=label, weight=critical if is_critical else normal)
        for cid, label, normal, critical in PREDEFINED_SELECTION_CRITERIA
    ]


def weights_by_group(criteria: list[SelectionCriterion]) -> dict[CriterionGroup, float]:
    """Sum criterion weights per conventional group.

    Groups are informative only, the enforced rule is the flat sum.
    """
    totals: dict[CriterionGroup, float] = {group: 0.0 for group in CriterionGroup}
    for criterion in criteria:
        totals[criterion.group] += criterion.weight
    return totals
