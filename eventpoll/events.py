import logging
import secrets
from typing import Any, Dict, List

from .config import EVENT_ID_BYTES, MAX_ID_ATTEMPTS, MAX_OPTIONS, MIN_OPTIONS
from .errors import EventNotFoundError, IdGenerationError, ValidationError
from .models import Event, Option, utc_now
from .store import EventStore

logger = logging.getLogger(__name__)


def new_event_id(existing: Dict[str, Event], nbytes: int = EVENT_ID_BYTES,
                 max_attempts: int = MAX_ID_ATTEMPTS) -> str:
    """
    Draw random hex tokens until one is not already a key of ``existing``.
    """
    for _ in range(max_attempts):
        candidate = secrets.token_hex(nbytes)
        if candidate not in existing:
            return candidate
    raise IdGenerationError(max_attempts)


def _clean_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Event title is required.")
    return title.strip()


def _clean_options(options: Any) -> List[str]:
    if not isinstance(options, list) or len(options) < MIN_OPTIONS:
        raise ValidationError(f"Please provide at least {MIN_OPTIONS} time options.")
    if len(options) > MAX_OPTIONS:
        raise ValidationError(f"You can have at most {MAX_OPTIONS} time options.")
    cleaned = [o.strip() if isinstance(o, str) else "" for o in options]
    if any(o == "" for o in cleaned):
        raise ValidationError("All time options must have a value.")
    return cleaned


class EventService:
    """Creates and looks up scheduling events."""

    def __init__(self, store: EventStore) -> None:
        self._store = store

    def create_event(self, title: Any, options: Any) -> Event:
        """Validate input, store a new event with no votes and return it.

        Raises:
            ValidationError: If the title or the options are unusable.
            IdGenerationError: If no free id was found.
        """
        clean_title = _clean_title(title)
        labels = _clean_options(options)

        with self._store.lock:
            events = self._store.load()
            event = Event(
                id=new_event_id(events),
                title=clean_title,
                created_at=utc_now(),
                options=[Option(id=f"opt_{i}", label=label) for i, label in enumerate(labels)],
                votes=[],
            )
            events[event.id] = event
            self._store.save(events)

        logger.info("Created event %s '%s' with %d options", event.id, event.title, len(event.options))
        return event

    def get_event(self, event_id: str) -> Event:
        """Return an event by id.

        Raises:
            EventNotFoundError: If the event does not exist.
        """
        event = self._store.load().get(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event
