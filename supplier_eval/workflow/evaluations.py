"""Provider evaluations and the improvement-commitment workflow.

An evaluation stores its scores, the weights it was computed with and the
resulting total. The total decides, once, whether the provider owes an
improvement commitment:

    NO_REMEDIATION_NEEDED   total >= 3.5, terminal
    PENDING_COMMITMENT      total < 3.5, commitment not yet submitted
    COMMITMENT_SUBMITTED    commitment stored, terminal

The move to COMMITMENT_SUBMITTED is a conditional write on "no commitment
stored yet", so two concurrent submissions cannot both succeed.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime

from supplier_eval.authorization import Action, Authorizer, RoleAuthorizer, ensure_allowed
from supplier_eval.catalog.criteria_catalog import get_criteria_for_type, get_evaluation_title
from supplier_eval.consts import COMMITMENT_SEPARATOR, MAX_CRITERION_SCORE, MIN_CRITERION_SCORE
from supplier_eval.evaluators.composite import (
    compute_total_score,
    round_score,
    weights_from_criteria,
)
from supplier_eval.evaluators.policy import (
    criteria_requiring_commitment,
    get_performance_status,
    requires_action_plan,
)
from supplier_eval.exceptions import NotFoundError, StaleStateError, ValidationError
from supplier_eval.models.common import _utc_now
from supplier_eval.models.model_actor import Actor
from supplier_eval.models.model_criteria import Category, Provider, ProviderCriticality
from supplier_eval.models.model_evaluation import CommitmentState, EvaluationRecord
from supplier_eval.notifications.base import NotificationKind, Notifier, dispatch_notification
from supplier_eval.notifications.log_notifier import LoggingNotifier
from supplier_eval.storage.permanent_storage.file_manager import FileManager

logger = logging.getLogger(__name__)


def validate_scores(scores: Mapping[str, int], criterion_ids: Iterable[str]) -> None:
    """Reject scores for unknown criteria or outside the 1-5 scale.

    Missing scores are allowed, they count as 0 in the total.

    Raises:
        ValidationError: On unknown criteria or out-of-range values.
    """
    known = set(criterion_ids)
    unknown = sorted(cid for cid in scores if cid not in known)
    if unknown:
        raise ValidationError(
            f"Unknown criteria: {', '.join(unknown)}", context={"unknown": unknown}
        )
    out_of_range = sorted(
        cid
        for cid, value in scores.items()
        if isinstance(value, bool)
        or not isinstance(value, int)
        or not MIN_CRITERION_SCORE <= value <= MAX_CRITERION_SCORE
    )
    if out_of_range:
        raise ValidationError(
            f"Scores must be integers between {MIN_CRITERION_SCORE} and "
            f"{MAX_CRITERION_SCORE}: {', '.join(out_of_range)}",
            context={"out_of_range": out_of_range},
        )


def validate_commitments(
    scores: Mapping[str, float],
    commitments: Mapping[str, str],
    criterion_ids: Iterable[str] | None = None,
) -> dict[str, str]:
    """Check that every criterion below the 85% bar has a commitment.

    Args:
        scores: Criterion ID -> score.
        commitments: Criterion ID -> commitment text as submitted.
        criterion_ids: Criteria of the evaluation, in display order.
            Defaults to the keys of ``scores``.

    Returns:
        Non-empty, stripped commitments for the evaluation's criteria.

    Raises:
        ValidationError: Listing every qualifying criterion without text.
    """
    ids = list(criterion_ids) if criterion_ids is not None else list(scores)
    required = criteria_requiring_commitment(scores, ids)

    cleaned = {
        cid: commitments[cid].strip()
        for cid in ids
        if cid in commitments and commitments[cid] and commitments[cid].strip()
    }
    missing = [cid for cid in required if cid not in cleaned]
    if missing:
        raise ValidationError(
            f"Missing improvement commitment for: {', '.join(missing)}",
            missing=missing,
        )
    return cleaned


class EvaluationService:
    """Creates evaluations and drives the commitment workflow.

    Args:
        storage: Store for providers, categories and evaluations.
        notifier: Notification collaborator (logs by default).
        authorizer: Authorization collaborator (role table by default).
        clock: Source of the current UTC time.
    """

    def __init__(
        self,
        storage: FileManager,
        notifier: Notifier | None = None,
        authorizer: Authorizer | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.storage = storage
        self.notifier = notifier or LoggingNotifier()
        self.authorizer = authorizer or RoleAuthorizer()
        self.clock = clock

    # === LOOKUPS ===

    def get_provider(self, provider_id: str) -> Provider:
        provider = self.storage.load_provider(provider_id)
        if provider is None:
            raise NotFoundError(
                f"Provider '{provider_id}' not found", context={"provider_id": provider_id}
            )
        return provider

    def get_category(self, category_id: str) -> Category:
        category = self.storage.load_category(category_id)
        if category is None:
            raise NotFoundError(
                f"Category '{category_id}' not found", context={"category_id": category_id}
            )
        return category

    def get_evaluation(self, evaluation_id: str) -> EvaluationRecord:
        record = self.storage.load_evaluation(evaluation_id)
        if record is None:
            raise NotFoundError(
                f"Evaluation '{evaluation_id}' not found",
                context={"evaluation_id": evaluation_id},
            )
        return record

    def list_provider_evaluations(self, provider_id: str) -> list[EvaluationRecord]:
        """Return a provider's evaluations, newest first."""
        self.get_provider(provider_id)
        records = self.storage.list_evaluations(provider_id=provider_id)
        return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)

    # === PROVIDER CRITICALITY ===

    def set_provider_criticality(
        self,
        provider_id: str,
        criticality: ProviderCriticality,
        actor: Actor | None = None,
    ) -> Provider:
        """Change which weight set future evaluations of a provider use.

        Existing evaluations keep the totals they were stored with.
        """
        ensure_allowed(self.authorizer, actor, Action.SET_CRITICALITY)
        provider = self.get_provider(provider_id)
        updated = provider.model_copy(update={"criticality": criticality})
        self.storage.save_provider(updated)
        logger.info(
            f"Provider {provider_id} criticality: "
            f"{provider.criticality.value} -> {criticality.value}"
        )
        return updated

    # === EVALUATION CREATION ===

    def create_evaluation(
        self,
        provider_id: str,
        category_id: str,
        scores: Mapping[str, int],
        score_justifications: Mapping[str, str] | None = None,
        comments: str = "",
        actor: Actor | None = None,
    ) -> EvaluationRecord:
        """Score a provider in one of its categories and store the result.

        The weight set follows the provider's current criticality: critical
        providers use the catalog's reinforced weights, others the category
        override or the catalog's normal weights. The total is computed here,
        once, and stored with the weights used.

        Args:
            provider_id: Provider being evaluated.
            category_id: Category the evaluation is made for.
            scores: Criterion ID -> score 1-5. Missing criteria count as 0.
            score_justifications: Optional criterion ID -> justification.
            comments: Free-text comments.
            actor: Acting user, None for trusted internal calls.

        Returns:
            The stored evaluation record.
        """
        ensure_allowed(self.authorizer, actor, Action.CREATE_EVALUATION)
        provider = self.get_provider(provider_id)
        category = self.get_category(category_id)

        if category.id not in provider.category_ids:
            raise ValidationError(
                f"Provider '{provider_id}' is not assigned to category '{category_id}'",
                context={"provider_id": provider_id, "category_id": category_id},
            )

        criteria = get_criteria_for_type(
            category.category_type,
            is_critical=provider.is_critical,
            override=category.weight_override,
        )
        weights = weights_from_criteria(criteria)
        validate_scores(scores, weights)

        justifications = {
            cid: text.strip()
            for cid, text in (score_justifications or {}).items()
            if cid in weights and text and text.strip()
        }

        total = round_score(compute_total_score(scores, weights))
        needs_action = requires_action_plan(total)

        record = EvaluationRecord(
            provider_id=provider.id,
            category_id=category.id,
            evaluation_type=category.category_type,
            evaluator_id=actor.user_id if actor else None,
            scores=dict(scores),
            score_justifications=justifications,
            weights_used=weights,
            total_score=total,
            is_action_plan_required=needs_action,
            comments=comments,
            created_at=self.clock(),
        )
        self.storage.save_evaluation(record)
        logger.info(
            f"Evaluated {provider.id} in {category.id}: total={total:.2f} "
            f"(critical={provider.is_critical}, action_plan={needs_action})"
        )

        self._notify_provider_result(provider, record)
        return record

    def _notify_provider_result(self, provider: Provider, record: EvaluationRecord) -> None:
        if not provider.email:
            return
        payload = {
            "provider_email": provider.email,
            "provider_name": provider.business_name,
            "score": record.total_score,
            "evaluation_type": get_evaluation_title(record.evaluation_type),
            "evaluation_id": record.id,
        }
        if record.is_action_plan_required:
            dispatch_notification(self.notifier, NotificationKind.EVALUATION_FAILED, payload)
        elif get_performance_status(record.total_score).is_success:
            dispatch_notification(self.notifier, NotificationKind.EVALUATION_SUCCESS, payload)

    # === COMMITMENT WORKFLOW ===

    def commitment_state(self, evaluation_id: str) -> CommitmentState:
        """Return the current commitment state of an evaluation."""
        return self.get_evaluation(evaluation_id).commitment_state

    def submit_commitment(
        self,
        evaluation_id: str,
        commitments: Mapping[str, str],
        actor: Actor | None = None,
    ) -> EvaluationRecord:
        """Store the provider's improvement commitments for an evaluation.

        All-or-nothing: if any criterion below the 85% bar lacks a
        commitment, nothing is written.

        Args:
            evaluation_id: Evaluation awaiting a commitment.
            commitments: Criterion ID -> commitment text.
            actor: Acting user, None for trusted internal calls.

        Returns:
            The updated evaluation record.

        Raises:
            NotFoundError: If the evaluation does not exist.
            StaleStateError: If the evaluation is not pending a commitment,
                including when another submission won the race.
            ValidationError: If required commitments are missing.
        """
        record = self.get_evaluation(evaluation_id)
        ensure_allowed(self.authorizer, actor, Action.SUBMIT_COMMITMENT, owner_id=record.provider_id)

        state = record.commitment_state
        if state != CommitmentState.PENDING_COMMITMENT:
            raise StaleStateError(
                f"Evaluation '{evaluation_id}' does not accept a commitment ({state.value})",
                state=state.value,
                context={"evaluation_id": evaluation_id},
            )

        # Zero-weight criteria cannot move the total, so they never need a plan
        criterion_ids = [cid for cid, weight in record.weights_used.items() if weight > 0]
        if not criterion_ids:
            criterion_ids = list(record.scores)
        cleaned = validate_commitments(record.scores, commitments, criterion_ids)

        updated = record.model_copy(
            update={
                "improvement_commitments": cleaned,
                "improvement_commitment": COMMITMENT_SEPARATOR.join(cleaned.values()),
                "commitment_submitted_at": self.clock(),
            }
        )
        written = self.storage.save_evaluation_if(
            updated,
            lambda current: current is not None and current.commitment_submitted_at is None,
        )
        if not written:
            raise StaleStateError(
                f"Commitment for evaluation '{evaluation_id}' was already submitted",
                state=CommitmentState.COMMITMENT_SUBMITTED.value,
                context={"evaluation_id": evaluation_id},
            )
        logger.info(
            f"Commitment submitted for evaluation {evaluation_id} ({len(cleaned)} criteria)"
        )

        dispatch_notification(
            self.notifier,
            NotificationKind.COMMITMENT_SUBMITTED,
            {
                "evaluation_id": updated.id,
                "provider_id": updated.provider_id,
                "evaluation_type": get_evaluation_title(updated.evaluation_type),
                "score": updated.total_score,
                "commitment": updated.improvement_commitment,
            },
        )
        return updated

    # === ADMINISTRATION ===

    def delete_evaluation(self, evaluation_id: str, actor: Actor | None = None) -> None:
        """Hard-delete an evaluation (administrative action)."""
        ensure_allowed(self.authorizer, actor, Action.DELETE_EVALUATION)
        if not self.storage.delete_evaluation(evaluation_id):
            raise NotFoundError(
                f"Evaluation '{evaluation_id}' not found",
                context={"evaluation_id": evaluation_id},
            )
