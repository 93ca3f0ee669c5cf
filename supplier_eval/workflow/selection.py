"""Competitive selection events.

An event collects competitors, scores them 1-5 against its own criteria
(weights in percentage points) and is closed by confirming a winner. Once
``Cerrado`` the event is frozen: every further write raises StaleStateError.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime

from pydantic import BaseModel, Field

from supplier_eval.authorization import Action, Authorizer, RoleAuthorizer, ensure_allowed
from supplier_eval.catalog.selection_template import default_selection_criteria
from supplier_eval.consts import (
    MAX_CRITERION_SCORE,
    MIN_CRITERION_SCORE,
    PERCENT_WEIGHT_TOLERANCE,
    REGISTRATION_URL,
)
from supplier_eval.evaluators.composite import (
    compute_competitor_score,
    missing_scores,
    percent_weights_to_fractions,
    round_score,
)
from supplier_eval.evaluators.policy import get_decision_status
from supplier_eval.exceptions import (
    ConfigurationError,
    NotFoundError,
    StaleStateError,
    ValidationError,
)
from supplier_eval.models.common import _utc_now
from supplier_eval.models.model_actor import Actor
from supplier_eval.models.model_criteria import CategoryType, ProviderCriticality
from supplier_eval.models.model_selection import (
    Competitor,
    DecisionStatus,
    EventStatus,
    SelectionCriterion,
    SelectionEvent,
)
from supplier_eval.notifications.base import NotificationKind, Notifier, dispatch_notification
from supplier_eval.notifications.log_notifier import LoggingNotifier
from supplier_eval.storage.permanent_storage.file_manager import FileManager

logger = logging.getLogger(__name__)


class CompetitorRanking(BaseModel):
    """One row of the results table."""

    rank: int = Field(ge=1)
    competitor: Competitor
    decision: DecisionStatus
    missing_criteria: list[str] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.missing_criteria


def validate_criteria_weights(criteria: list[SelectionCriterion]) -> None:
    """Check that selection criteria weights sum to 100.

    Raises:
        ConfigurationError: On duplicate ids or a sum other than 100.
    """
    ids = [c.id for c in criteria]
    duplicates = sorted({cid for cid in ids if ids.count(cid) > 1})
    if duplicates:
        raise ConfigurationError(
            f"Duplicate criteria: {', '.join(duplicates)}", context={"duplicates": duplicates}
        )
    total = sum(c.weight for c in criteria)
    if abs(total - 100.0) > PERCENT_WEIGHT_TOLERANCE:
        raise ConfigurationError(
            f"Criteria weights must sum to 100, got {total:g}", context={"total": total}
        )


def rank_competitors(event: SelectionEvent) -> list[CompetitorRanking]:
    """Order competitors by total score, highest first.

    Ties are broken by competitor name so the table is stable.
    """
    weights = percent_weights_to_fractions(event.criteria)
    ordered = sorted(event.competitors, key=lambda c: (-c.total_score, c.name.lower(), c.id))
    return [
        CompetitorRanking(
            rank=position,
            competitor=competitor,
            decision=get_decision_status(competitor.total_score),
            missing_criteria=missing_scores(competitor.scores, weights),
        )
        for position, competitor in enumerate(ordered, start=1)
    ]


class SelectionService:
    """Manages selection events from creation to winner confirmation.

    Args:
        storage: Store for selection events.
        notifier: Notification collaborator (logs by default).
        authorizer: Authorization collaborator (role table by default).
        registration_url: Base URL of the supplier registration page sent
            to winners.
        clock: Source of the current UTC time.
    """

    def __init__(
        self,
        storage: FileManager,
        notifier: Notifier | None = None,
        authorizer: Authorizer | None = None,
        registration_url: str = REGISTRATION_URL,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.storage = storage
        self.notifier = notifier or LoggingNotifier()
        self.authorizer = authorizer or RoleAuthorizer()
        self.registration_url = registration_url
        self.clock = clock

    # === EVENTS ===

    def create_event(
        self,
        name: str,
        event_type: CategoryType,
        criticality: ProviderCriticality = ProviderCriticality.UNASSIGNED,
        use_template: bool = False,
        actor: Actor | None = None,
    ) -> SelectionEvent:
        """Open a new selection event.

        Args:
            name: Event name.
            event_type: Kind of purchase (goods or services).
            criticality: Criticality of the purchase.
            use_template: Start from the predefined criteria, using the
                critical variant when ``criticality`` is critical.
            actor: Acting user, None for trusted internal calls.
        """
        ensure_allowed(self.authorizer, actor, Action.MANAGE_SELECTION)
        if not name or not name.strip():
            raise ValidationError("Event name is required", missing=["name"])

        criteria = []
        if use_template:
            criteria = default_selection_criteria(criticality == ProviderCriticality.CRITICO)

        event = SelectionEvent(
            name=name.strip(),
            type=event_type,
            criticality=criticality,
            criteria=criteria,
            created_at=self.clock(),
        )
        self.storage.save_event(event)
        logger.info(f"Opened selection event {event.id}: {event.name}")
        return event

    def get_event(self, event_id: str) -> SelectionEvent:
        event = self.storage.load_event(event_id)
        if event is None:
            raise NotFoundError(
                f"Selection event '{event_id}' not found", context={"event_id": event_id}
            )
        return event

    def list_events(self) -> list[SelectionEvent]:
        """Return all events, newest first."""
        return sorted(self.storage.list_events(), key=lambda e: (e.created_at, e.id), reverse=True)

    def _mutate_open_event(
        self, event_id: str, mutate: Callable[[SelectionEvent], None]
    ) -> SelectionEvent:
        """Apply ``mutate`` to a copy of an open event and store it.

        The write is conditional on the stored event still being open.
        """
        event = self.get_event(event_id)
        if event.is_locked:
            raise StaleStateError(
                f"Selection event '{event_id}' is closed",
                state=event.status.value,
                context={"event_id": event_id},
            )

        updated = event.model_copy(deep=True)
        mutate(updated)

        written = self.storage.save_event_if(
            updated, lambda current: current is not None and not current.is_locked
        )
        if not written:
            raise StaleStateError(
                f"Selection event '{event_id}' was closed concurrently",
                state=EventStatus.CERRADO.value,
                context={"event_id": event_id},
            )
        return updated

    # === CRITERIA ===

    def save_criteria(
        self,
        event_id: str,
        criteria: list[SelectionCriterion],
        actor: Actor | None = None,
    ) -> SelectionEvent:
        """Replace the criteria of an open event.

        Scores for removed criteria are dropped and every competitor total is
        recomputed against the new weights.
        """
        ensure_allowed(self.authorizer, actor, Action.MANAGE_SELECTION)
        criterion_ids = {c.id for c in criteria}

        def _apply(event: SelectionEvent) -> None:
            validate_criteria_weights(criteria)
            event.criteria = [c.model_copy() for c in criteria]
            for competitor in event.competitors:
                competitor.scores = {
                    cid: score for cid, score in competitor.scores.items() if cid in criterion_ids
                }
                competitor.total_score = round_score(
                    compute_competitor_score(competitor, event.criteria)
                )

        updated = self._mutate_open_event(event_id, _apply)
        logger.info(f"Saved {len(criteria)} criteria for selection event {event_id}")
        return updated

    # === COMPETITORS ===

    def add_competitor(
        self,
        event_id: str,
        name: str,
        nit: str = "",
        email: str = "",
        quote_url: str | None = None,
        actor: Actor | None = None,
    ) -> Competitor:
        """Register a competitor in an open event.

        Criteria must be configured first so that scores have something to
        be weighted against.
        """
        ensure_allowed(self.authorizer, actor, Action.MANAGE_SELECTION)
        result: dict[str, Competitor] = {}

        def _apply(event: SelectionEvent) -> None:
            if not name or not name.strip():
                raise ValidationError("Competitor name is required", missing=["name"])
            if not event.criteria:
                raise ValidationError(
                    "Configure the event criteria before adding competitors",
                    missing=["criteria"],
                    context={"event_id": event.id},
                )
            competitor = Competitor(
                name=name.strip(), nit=nit.strip(), email=email.strip(), quote_url=quote_url
            )
            event.competitors.append(competitor)
            result["competitor"] = competitor

        self._mutate_open_event(event_id, _apply)
        competitor = result["competitor"]
        logger.info(f"Added competitor {competitor.id} ({competitor.name}) to event {event_id}")
        return competitor

    def _competitor_or_raise(self, event: SelectionEvent, competitor_id: str) -> Competitor:
        competitor = event.get_competitor(competitor_id)
        if competitor is None:
            raise NotFoundError(
                f"Competitor '{competitor_id}' not found in event '{event.id}'",
                context={"event_id": event.id, "competitor_id": competitor_id},
            )
        return competitor

    def update_competitor_scores(
        self,
        event_id: str,
        competitor_id: str,
        scores: Mapping[str, int | None],
        actor: Actor | None = None,
    ) -> Competitor:
        """Merge scores into a competitor and recompute its total.

        A value of None removes that criterion's score.
        """
        ensure_allowed(self.authorizer, actor, Action.MANAGE_SELECTION)
        result: dict[str, Competitor] = {}

        def _apply(event: SelectionEvent) -> None:
            competitor = self._competitor_or_raise(event, competitor_id)
            known = {c.id for c in event.criteria}

            unknown = sorted(cid for cid in scores if cid not in known)
            if unknown:
                raise ValidationError(
                    f"Unknown criteria: {', '.join(unknown)}", context={"unknown": unknown}
                )
            out_of_range = sorted(
                cid
                for cid, value in scores.items()
                if value is not None
                and (
                    isinstance(value, bool)
                    or not isinstance(value, int)
                    or not MIN_CRITERION_SCORE <= value <= MAX_CRITERION_SCORE
                )
            )
            if out_of_range:
                raise ValidationError(
                    f"Scores must be integers between {MIN_CRITERION_SCORE} and "
                    f"{MAX_CRITERION_SCORE}: {', '.join(out_of_range)}",
                    context={"out_of_range": out_of_range},
                )

            merged = dict(competitor.scores)
            for cid, value in scores.items():
                if value is None:
                    merged.pop(cid, None)
                else:
                    merged[cid] = value
            competitor.scores = merged
            competitor.total_score = round_score(
                compute_competitor_score(competitor, event.criteria)
            )
            result["competitor"] = competitor

        self._mutate_open_event(event_id, _apply)
        competitor = result["competitor"]
        logger.info(
            f"Scored competitor {competitor_id} in event {event_id}: "
            f"total={competitor.total_score:.2f}"
        )
        return competitor

    def update_audit_notes(
        self, event_id: str, competitor_id: str, notes: str, actor: Actor | None = None
    ) -> Competitor:
        """Replace the audit notes of a competitor."""
        ensure_allowed(self.authorizer, actor, Action.MANAGE_SELECTION)
        result: dict[str, Competitor] = {}

        def _apply(event: SelectionEvent) -> None:
            competitor = self._competitor_or_raise(event, competitor_id)
            competitor.audit_notes = notes
            result["competitor"] = competitor

        self._mutate_open_event(event_id, _apply)
        return result["competitor"]

    def remove_competitor(
        self, event_id: str, competitor_id: str, actor: Actor | None = None
    ) -> None:
        ensure_allowed(self.authorizer, actor, Action.MANAGE_SELECTION)

        def _apply(event: SelectionEvent) -> None:
            self._competitor_or_raise(event, competitor_id)
            event.competitors = [c for c in event.competitors if c.id != competitor_id]

        self._mutate_open_event(event_id, _apply)
        logger.info(f"Removed competitor {competitor_id} from event {event_id}")

    # === RESULTS ===

    def results(self, event_id: str) -> list[CompetitorRanking]:
        """Ranked competitors of an event, open or closed."""
        return rank_competitors(self.get_event(event_id))

    def registration_link(self, event_id: str) -> str:
        return f"{self.registration_url}?eventId={event_id}"

    def confirm_winner(
        self,
        event_id: str,
        competitor_id: str,
        justification: str,
        actor: Actor | None = None,
    ) -> SelectionEvent:
        """Close an event with a winner.

        Args:
            event_id: Open selection event.
            competitor_id: Winning competitor.
            justification: Reason for the choice, required.
            actor: Acting user, None for trusted internal calls.

        Returns:
            The closed event.

        Raises:
            StaleStateError: If the event is already closed, or was closed
                while this call was running.
            ValidationError: If the justification is empty.
            ConfigurationError: If the criteria weights do not sum to 100.
            NotFoundError: If the event or the competitor does not exist.
        """
        ensure_allowed(self.authorizer, actor, Action.CONFIRM_WINNER)
        event = self.get_event(event_id)
        if event.is_locked:
            raise StaleStateError(
                f"Selection event '{event_id}' is already closed",
                state=event.status.value,
                context={"event_id": event_id, "winner_id": event.winner_id},
            )
        if not justification or not justification.strip():
            raise ValidationError("A justification is required", missing=["justification"])
        validate_criteria_weights(event.criteria)
        winner = self._competitor_or_raise(event, competitor_id)

        closed = event.model_copy(
            update={
                "status": EventStatus.CERRADO,
                "winner_id": winner.id,
                "winner_justification": justification.strip(),
                "closed_at": self.clock(),
            }
        )
        written = self.storage.save_event_if(
            closed,
            lambda current: current is not None and current.status == EventStatus.ABIERTO,
        )
        if not written:
            raise StaleStateError(
                f"Selection event '{event_id}' was closed concurrently",
                state=EventStatus.CERRADO.value,
                context={"event_id": event_id},
            )
        logger.info(f"Closed selection event {event_id} with winner {winner.id} ({winner.name})")

        self._notify_winner(closed, winner)
        return closed

    def resend_winner_notification(self, event_id: str, actor: Actor | None = None) -> bool:
        """Send the winner message again without touching the event.

        Returns:
            True if the notifier accepted the message.
        """
        ensure_allowed(self.authorizer, actor, Action.CONFIRM_WINNER)
        event = self.get_event(event_id)
        if not event.is_locked or event.winner_id is None:
            raise StaleStateError(
                f"Selection event '{event_id}' has no confirmed winner",
                state=event.status.value,
                context={"event_id": event_id},
            )
        winner = self._competitor_or_raise(event, event.winner_id)
        return self._notify_winner(event, winner)

    def _notify_winner(self, event: SelectionEvent, winner: Competitor) -> bool:
        if not winner.email:
            logger.warning(f"Winner {winner.id} of event {event.id} has no email, not notified")
            return False
        return dispatch_notification(
            self.notifier,
            NotificationKind.WINNER_SELECTED,
            {
                "competitor_email": winner.email,
                "competitor_name": winner.name,
                "event_id": event.id,
                "event_name": event.name,
                "registration_link": self.registration_link(event.id),
            },
        )
