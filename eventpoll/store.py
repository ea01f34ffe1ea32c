"""Event persistence.

Every store holds the whole ``event id -> Event`` mapping: ``load`` returns
all of it and ``save`` replaces all of it.  Services take ``store.lock``
around each load/mutate/save cycle.
"""

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from pydantic import ValidationError as SchemaError

from .models import Event

logger = logging.getLogger(__name__)


class EventStore(ABC):
    """Interface for event persistence operations."""

    def __init__(self) -> None:
        self.lock = threading.Lock()

    @abstractmethod
    def load(self) -> Dict[str, Event]:
        """Return every stored event keyed by id; never raises on read errors."""
        ...

    @abstractmethod
    def save(self, events: Dict[str, Event]) -> None:
        """Replace the stored mapping with ``events``."""
        ...


class JsonFileEventStore(EventStore):
    """Single JSON document on disk, replaced as a whole on every save."""

    def __init__(self, path: str) -> None:
        super().__init__()
        self.path = os.path.abspath(path)

    def load(self) -> Dict[str, Event]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            logger.debug("No data file at %s yet, starting empty", self.path)
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s, treating as empty: %s", self.path, e)
            return {}

        if not isinstance(raw, dict):
            logger.warning("Data file %s does not hold an object, treating as empty", self.path)
            return {}

        events: Dict[str, Event] = {}
        for event_id, data in raw.items():
            try:
                events[event_id] = Event.model_validate(data)
            except SchemaError as e:
                logger.warning("Skipping malformed event %s in %s: %s", event_id, self.path, e)
        return events

    def save(self, events: Dict[str, Event]) -> None:
        payload = {
            event_id: event.model_dump(mode="json", by_alias=True)
            for event_id, event in events.items()
        }
        directory = os.path.dirname(self.path)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".events-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.chmod(tmp_path, self._file_mode())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _file_mode(self) -> int:
        # mkstemp creates 0600; keep the current mode, else what open() would give
        try:
            return os.stat(self.path).st_mode & 0o777
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask


class InMemoryEventStore(EventStore):
    """Dict-backed store; copies on the way in and out so callers never alias it."""

    def __init__(self, events: Optional[Dict[str, Event]] = None) -> None:
        super().__init__()
        self._events: Dict[str, Event] = {}
        if events:
            self.save(events)

    def load(self) -> Dict[str, Event]:
        return {event_id: event.model_copy(deep=True) for event_id, event in self._events.items()}

    def save(self, events: Dict[str, Event]) -> None:
        self._events = {event_id: event.model_copy(deep=True) for event_id, event in events.items()}


def build_store(data_file: str) -> EventStore:
    if data_file == ":memory:":
        return InMemoryEventStore()
    return JsonFileEventStore(data_file)
