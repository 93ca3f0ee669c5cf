"""Authorization collaborator: decides whether an actor may run an operation."""

import logging
from enum import Enum
from typing import Protocol

from supplier_eval.exceptions import PermissionDeniedError
from supplier_eval.models.model_actor import Actor, UserRole

logger = logging.getLogger(__name__)


class Action(str, Enum):
    """Guarded operations."""

    CONFIGURE_WEIGHTS = "configure_weights"
    SET_CRITICALITY = "set_criticality"
    CREATE_EVALUATION = "create_evaluation"
    SUBMIT_COMMITMENT = "submit_commitment"
    DELETE_EVALUATION = "delete_evaluation"
    MANAGE_SELECTION = "manage_selection"
    CONFIRM_WINNER = "confirm_winner"


class Authorizer(Protocol):
    """Protocol for authorization decisions."""

    def can(self, actor: Actor, action: Action, owner_id: str | None = None) -> bool:
        """Return True if ``actor`` may perform ``action``.

        Args:
            actor: The acting user
            action: Operation being attempted
            owner_id: Provider owning the target record, when relevant
        """
        ...


_EVALUATOR_ACTIONS = {Action.CREATE_EVALUATION, Action.MANAGE_SELECTION}


class RoleAuthorizer:
    """Role table used when no external authorization service is wired in.

    Admins may do everything. Evaluators create evaluations and manage
    selection events. Providers may only submit commitments on their own
    evaluations.
    """

    def can(self, actor: Actor, action: Action, owner_id: str | None = None) -> bool:
        if actor.role == UserRole.ADMIN:
            return True
        if actor.role == UserRole.EVALUATOR:
            return action in _EVALUATOR_ACTIONS
        if actor.role == UserRole.PROVIDER:
            return (
                action == Action.SUBMIT_COMMITMENT
                and owner_id is not None
                and actor.provider_id == owner_id
            )
        return False


def ensure_allowed(
    authorizer: Authorizer,
    actor: Actor | None,
    action: Action,
    owner_id: str | None = None,
) -> None:
    """Raise if the actor may not perform the action.

    ``actor=None`` marks a trusted internal call and is always allowed.

    Raises:
        PermissionDeniedError: If the authorizer refuses.
    """
    if actor is None:
        return
    if not authorizer.can(actor, action, owner_id):
        logger.warning(f"Denied {action.value} for {actor.user_id} ({actor.role.value})")
        raise PermissionDeniedError(
            f"User '{actor.user_id}' may not {action.value.replace('_', ' ')}",
            context={"user_id": actor.user_id, "action": action.value, "owner_id": owner_id},
        )
