"""
Discovery request lifecycle: status and bounty state machines.

Status:  open -> answered (first qualifying response)
         open | answered -> closed (manual close or expiry)
Bounty (only when bounty_amount > 0):
         pending -> awarded   (winner selected; requires status != open)
         pending -> refunded  (creator closes without a winner)
         pending -> expired   (now > expires_at, no winner)
awarded / refunded / expired are terminal; any further bounty transition is a
ConflictError. Transitions return new DiscoveryRequest objects and never mutate
their input, so a store can compare-and-swap the result.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from .errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from .models.config import DEFAULT_CONFIG, RankingConfig
from .models.content import as_utc
from .models.request import (
    TERMINAL_BOUNTY_STATES,
    AwardResult,
    BountyStatus,
    DiscoveryRequest,
    RequestResponse,
    RequestStatus,
)

logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 5
TITLE_MAX_LENGTH = 200
RESPONSE_MIN_LENGTH = 20
RESPONSE_MAX_LENGTH = 2000


def _new_id() -> str:
    return str(uuid.uuid4())


def _resolve_expiry(
    now: datetime,
    expires_at: Optional[datetime],
    deadline_hours: Optional[int],
    config: RankingConfig,
) -> Optional[datetime]:
    if expires_at is not None and deadline_hours is not None:
        raise ValidationError("give either expires_at or deadline_hours, not both")
    if deadline_hours is not None:
        if not config.min_deadline_hours <= deadline_hours <= config.max_deadline_hours:
            raise ValidationError(
                f"deadline_hours must be within [{config.min_deadline_hours}, "
                f"{config.max_deadline_hours}], got {deadline_hours}"
            )
        return now + timedelta(hours=deadline_hours)
    if expires_at is not None:
        expires_at = as_utc(expires_at)
        if expires_at <= now:
            raise ValidationError("expires_at must be in the future")
    return expires_at


def create_request(
    creator_id: str,
    title: str,
    now: datetime,
    description: str = "",
    tags: Iterable[str] = (),
    bounty_amount: float = 0.0,
    expires_at: Optional[datetime] = None,
    deadline_hours: Optional[int] = None,
    config: RankingConfig = DEFAULT_CONFIG,
    request_id: Optional[str] = None,
) -> DiscoveryRequest:
    """New open request; the bounty starts pending when one is staked."""
    now = as_utc(now)
    title = (title or "").strip()
    if not TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
        raise ValidationError(
            f"title must be {TITLE_MIN_LENGTH}-{TITLE_MAX_LENGTH} characters, got {len(title)}"
        )
    if bounty_amount < 0:
        raise ValidationError(f"bounty_amount must be >= 0, got {bounty_amount}")
    return DiscoveryRequest(
        id=request_id or _new_id(),
        creator_id=creator_id,
        title=title,
        description=description or "",
        tags={t.strip().lower() for t in tags if t and t.strip()},
        bounty_amount=bounty_amount,
        bounty_status=BountyStatus.PENDING if bounty_amount > 0 else BountyStatus.NONE,
        created_at=now,
        expires_at=_resolve_expiry(now, expires_at, deadline_hours, config),
    )


def is_overdue(request: DiscoveryRequest, now: datetime) -> bool:
    return request.expires_at is not None and as_utc(now) > request.expires_at


def expire(request: DiscoveryRequest, now: datetime) -> DiscoveryRequest:
    """
    Apply time-based expiry if due; otherwise return the request unchanged.

    A closed request or a settled bounty is left alone.
    """
    if not is_overdue(request, now) or request.status is RequestStatus.CLOSED:
        return request
    update = {"status": RequestStatus.CLOSED, "closed_at": as_utc(now)}
    if request.bounty_status is BountyStatus.PENDING:
        update["bounty_status"] = BountyStatus.EXPIRED
    logger.info("request %s expired at %s", request.id, request.expires_at)
    return request.model_copy(update=update)


def respond(
    request: DiscoveryRequest,
    responder_id: str,
    text: str,
    now: datetime,
    item_id: Optional[str] = None,
    response_id: Optional[str] = None,
) -> Tuple[DiscoveryRequest, RequestResponse]:
    """
    Add a response. The first qualifying response moves open -> answered.

    Responses keep arriving while the request is answered so the creator can
    pick a winner among several.
    """
    now = as_utc(now)
    request = expire(request, now)
    if request.status is RequestStatus.CLOSED:
        raise ConflictError(f"request {request.id} is closed")
    if responder_id == request.creator_id:
        raise ValidationError("cannot respond to your own request")
    text = (text or "").strip()
    if not RESPONSE_MIN_LENGTH <= len(text) <= RESPONSE_MAX_LENGTH:
        raise ValidationError(
            f"response text must be {RESPONSE_MIN_LENGTH}-{RESPONSE_MAX_LENGTH} characters, got {len(text)}"
        )
    if any(r.responder_id == responder_id for r in request.responses):
        raise ConflictError(f"{responder_id} already responded to request {request.id}")

    response = RequestResponse(
        id=response_id or _new_id(),
        responder_id=responder_id,
        text=text,
        item_id=item_id,
        created_at=now,
    )
    update = {
        "responses": [*request.responses, response],
        "response_count": request.response_count + 1,
    }
    if request.status is RequestStatus.OPEN:
        update["status"] = RequestStatus.ANSWERED
    return request.model_copy(update=update), response


def _require_creator(request: DiscoveryRequest, actor_id: str, action: str) -> None:
    if actor_id != request.creator_id:
        raise PermissionDeniedError(f"only the request creator can {action}")


def close(request: DiscoveryRequest, actor_id: str, now: datetime) -> DiscoveryRequest:
    """Close manually. A still-pending bounty is refunded."""
    now = as_utc(now)
    _require_creator(request, actor_id, "close it")
    request = expire(request, now)
    if request.status is RequestStatus.CLOSED:
        raise ConflictError(f"request {request.id} is already closed")
    update = {"status": RequestStatus.CLOSED, "closed_at": now}
    if request.bounty_status is BountyStatus.PENDING:
        update["bounty_status"] = BountyStatus.REFUNDED
    return request.model_copy(update=update)


def award_bounty(
    request: DiscoveryRequest,
    actor_id: str,
    response_id: str,
    now: datetime,
    config: RankingConfig = DEFAULT_CONFIG,
) -> AwardResult:
    """
    Select a winning response: pending -> awarded.

    Illegal while the request is still open (no response yet), without a bounty,
    or once the bounty is settled.
    """
    now = as_utc(now)
    _require_creator(request, actor_id, "award the bounty")
    request = expire(request, now)
    if request.bounty_status is BountyStatus.NONE:
        raise ConflictError(f"request {request.id} has no bounty")
    if request.bounty_status in TERMINAL_BOUNTY_STATES:
        raise ConflictError(
            f"bounty on request {request.id} is already {request.bounty_status.value}"
        )
    if request.status is RequestStatus.OPEN:
        raise ConflictError(f"request {request.id} has no responses to award")
    winner = request.get_response(response_id)
    if winner is None:
        raise NotFoundError(f"response {response_id} not found on request {request.id}")

    fee = round(request.bounty_amount * config.platform_fee_percent / 100.0, 6)
    awarded = request.model_copy(
        update={"bounty_status": BountyStatus.AWARDED, "winner_response_id": winner.id}
    )
    return AwardResult(
        request=awarded,
        winner_response_id=winner.id,
        winner_id=winner.responder_id,
        bounty_amount=request.bounty_amount,
        platform_fee=fee,
        payout_amount=round(request.bounty_amount - fee, 6),
    )



def select_requests(
    requests: Iterable[DiscoveryRequest],
    status: Optional[str] = RequestStatus.OPEN.value,
    text: Optional[str] = None,
    tags: Iterable[str] = (),
) -> List[DiscoveryRequest]:
    """
    Request browser filter, newest first.

    status is one of open / answered / closed, or "all" (or None) for every request.
    text matches title or description case-insensitively; tags require containment.
    """
    if status not in (None, "all") and status not in {s.value for s in RequestStatus}:
        raise ValidationError(f"unknown request status {status!r}")
    needle = (text or "").strip().casefold()
    wanted = {t.strip().lower() for t in tags if t and t.strip()}
    selected = []
    for request in requests:
        if status not in (None, "all") and request.status.value != status:
            continue
        if needle and needle not in request.title.casefold() and needle not in request.description.casefold():
            continue
        if wanted and not wanted.issubset(request.tags):
            continue
        selected.append(request)
    selected.sort(key=lambda r: (r.created_at, r.id), reverse=True)
    return selected
