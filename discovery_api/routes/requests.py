"""Discovery request endpoints: create, browse, respond, close, award."""

from typing import List, Optional

from fastapi import APIRouter, Query

from ..models import AwardBountyRequest, CloseDiscoveryRequest, CreateDiscoveryRequest, RespondRequest
from ..state import get_state

router = APIRouter()


@router.post("", status_code=201)
def create_request(request: CreateDiscoveryRequest):
    return get_state().service.create_request(
        request.creator_id,
        request.title,
        description=request.description,
        tags=request.tags,
        bounty_amount=request.bounty_amount,
        expires_at=request.expires_at,
        deadline_hours=request.deadline_hours,
    )


@router.get("")
def list_requests(
    status: str = Query("open", description="open | answered | closed | all"),
    text: Optional[str] = None,
    tags: List[str] = Query([]),
    offset: int = 0,
    limit: Optional[int] = None,
):
    return get_state().service.list_requests(
        status=status, text=text, tags=tags, offset=offset, limit=limit
    )


@router.post("/expire")
def expire_overdue():
    """Sweep overdue requests (closes them; pending bounties expire)."""
    expired = get_state().service.expire_overdue()
    return {"expired": [r.id for r in expired], "count": len(expired)}


@router.get("/{request_id}")
def get_request(request_id: str):
    return get_state().service.get_request(request_id)


@router.post("/{request_id}/responses", status_code=201)
def respond(request_id: str, request: RespondRequest):
    return get_state().service.respond(
        request_id, request.responder_id, request.text, item_id=request.item_id
    )


@router.post("/{request_id}/close")
def close_request(request_id: str, request: CloseDiscoveryRequest):
    return get_state().service.close_request(request_id, request.viewer_id)


@router.post("/{request_id}/award")
def award_bounty(request_id: str, request: AwardBountyRequest):
    return get_state().service.award_bounty(request_id, request.viewer_id, request.response_id)
