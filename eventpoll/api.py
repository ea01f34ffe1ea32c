# public JSON endpoints
from typing import Optional

from fastapi import APIRouter, Depends, Request, status

from .config import RESULTS_URL_TEMPLATE, VOTE_URL_TEMPLATE
from .events import EventService
from .models import ErrorOut, Event, EventCreated, EventIn, Results, VoteAck, VoteIn
from .votes import VoteService

router = APIRouter(prefix="/api/events", tags=["events"])

NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorOut}}
BAD_REQUEST = {status.HTTP_400_BAD_REQUEST: {"model": ErrorOut}}


def get_event_service(request: Request) -> EventService:
    return EventService(request.app.state.store)


def get_vote_service(request: Request) -> VoteService:
    return VoteService(request.app.state.store)


@router.post(
    "",
    response_model=EventCreated,
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST,
)
def create_event(body: Optional[EventIn] = None, events: EventService = Depends(get_event_service)):
    body = body or EventIn()
    event = events.create_event(body.title, body.options)
    return EventCreated(
        id=event.id,
        vote_url=VOTE_URL_TEMPLATE.format(id=event.id),
        results_url=RESULTS_URL_TEMPLATE.format(id=event.id),
    )


@router.get("/{event_id}", response_model=Event, responses=NOT_FOUND)
def get_event(event_id: str, events: EventService = Depends(get_event_service)):
    return events.get_event(event_id)


@router.post(
    "/{event_id}/votes",
    response_model=VoteAck,
    responses={**BAD_REQUEST, **NOT_FOUND},
)
def submit_vote(event_id: str, body: Optional[VoteIn] = None, votes: VoteService = Depends(get_vote_service)):
    body = body or VoteIn()
    votes.submit_vote(event_id, body.name, body.selections)
    return VoteAck()


@router.get("/{event_id}/results", response_model=Results, responses=NOT_FOUND)
def get_results(event_id: str, votes: VoteService = Depends(get_vote_service)):
    return votes.get_results(event_id)
