import logging
from typing import Any, List, Set

from .config import MAX_NAME_LENGTH
from .errors import EventNotFoundError, ValidationError
from .models import Event, OptionTally, Results, Vote, utc_now
from .store import EventStore

logger = logging.getLogger(__name__)


def _clean_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Please enter your name.")
    cleaned = name.strip()
    if len(cleaned) > MAX_NAME_LENGTH:
        raise ValidationError(f"Name must be {MAX_NAME_LENGTH} characters or fewer.")
    return cleaned


def _check_selections(selections: Any, valid_ids: Set[str]) -> List[str]:
    if not isinstance(selections, list) or not selections:
        raise ValidationError("Please select at least one time option.")
    for sel in selections:
        if not isinstance(sel, str) or sel not in valid_ids:
            raise ValidationError("Invalid option selected.")
    return selections


def tally(event: Event) -> Results:
    """
    Count, for every option, the votes that selected it.
    A vote listing the same option twice still counts once.
    """
    rows: List[OptionTally] = []
    for opt in event.options:
        names = [v.name for v in event.votes if opt.id in v.selections]
        rows.append(OptionTally(id=opt.id, label=opt.label, count=len(names), names=names))

    top = max((r.count for r in rows), default=0)
    best = [r.id for r in rows if top > 0 and r.count == top]

    return Results(
        id=event.id,
        title=event.title,
        total_votes=len(event.votes),
        options=rows,
        best_option_ids=best,
    )


class VoteService:
    """Applies named votes to events and reports results."""

    def __init__(self, store: EventStore) -> None:
        self._store = store

    def submit_vote(self, event_id: str, name: Any, selections: Any) -> Vote:
        """Insert a vote, or replace the one already cast under the same name.

        Names match case-insensitively; a replaced vote keeps its position.

        Raises:
            EventNotFoundError: If the event does not exist.
            ValidationError: If the name or the selections are unusable.
        """
        with self._store.lock:
            events = self._store.load()
            event = events.get(event_id)
            if event is None:
                raise EventNotFoundError(event_id)

            clean_name = _clean_name(name)
            valid_ids = {opt.id for opt in event.options}
            chosen = _check_selections(selections, valid_ids)

            vote = Vote(name=clean_name, voted_at=utc_now(), selections=list(chosen))

            key = clean_name.lower()
            idx = next((i for i, v in enumerate(event.votes) if v.name.lower() == key), None)
            if idx is None:
                event.votes.append(vote)
            else:
                event.votes[idx] = vote

            self._store.save(events)

        logger.info(
            "%s vote from '%s' on event %s",
            "Added" if idx is None else "Replaced", clean_name, event_id,
        )
        return vote

    def get_results(self, event_id: str) -> Results:
        event = self._store.load().get(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return tally(event)
