from datetime import datetime, timezone
from typing import Annotated, Any, List

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel


def _iso_millis(dt: datetime) -> str:
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


# written like JavaScript's toISOString(): UTC, millisecond precision
Timestamp = Annotated[datetime, PlainSerializer(_iso_millis, return_type=str, when_used="json")]


def utc_now() -> datetime:
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class CamelModel(BaseModel):
    """
    Python side uses snake_case, JSON side (file + wire) uses camelCase.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Option(CamelModel):
    id: str = Field(..., examples=["opt_0"])
    label: str = Field(..., examples=["2026-01-01T10:00"])


class Vote(CamelModel):
    name: str = Field(..., examples=["Alice"])
    voted_at: Timestamp
    # stored exactly as submitted, duplicates included
    selections: List[str]


class Event(CamelModel):
    id: str
    title: str
    created_at: Timestamp
    options: List[Option]
    votes: List[Vote] = Field(default_factory=list)


class EventIn(BaseModel):
    """
    Fields are left untyped so the services can reject bad input
    with their own messages instead of pydantic's.
    """
    title: Any = Field(None, examples=["Team sync"])
    options: Any = Field(None, examples=[["2026-01-01T10:00", "2026-01-01T14:00"]])


class VoteIn(BaseModel):
    name: Any = Field(None, examples=["Alice"])
    selections: Any = Field(None, examples=[["opt_0"]])


class EventCreated(CamelModel):
    id: str
    vote_url: str
    results_url: str


class VoteAck(BaseModel):
    ok: bool = True


class OptionTally(CamelModel):
    id: str
    label: str
    count: int
    names: List[str]


class Results(CamelModel):
    """
    Per-option vote counts for one event, options in creation order.
    """
    id: str
    title: str
    total_votes: int
    options: List[OptionTally]
    best_option_ids: List[str]


class ErrorOut(BaseModel):
    error: str
