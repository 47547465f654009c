"""
Discovery Request Lifecycle Tests

Tests the status and bounty state machines of "help me find X" requests.

State machines:
---------------
- Status: open -> answered (first response) -> closed (manual or expiry)
- Bounty: pending -> awarded | refunded | expired (all terminal)

Scenarios:
----------
- Request with bounty 10: respond, award -> awarded (fee 1.0, payout 9.0)
- Same request closed before award -> refunded; award afterwards -> ConflictError
- Expiry closes the request and expires a pending bounty
- Only the creator may close or award

Run:
----
    pytest tests/test_request_lifecycle.py -v
"""

from datetime import timedelta

import pytest

from discovery import lifecycle
from discovery.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from discovery.models.config import RankingConfig
from discovery.models.request import BountyStatus, RequestStatus

ANSWER = "Try Cafe Grumpy on Bedford Ave"


@pytest.fixture
def bounty_request(now):
    return lifecycle.create_request(
        "creator", "Find me a quiet cafe", now, tags=["Coffee"], bounty_amount=10.0, deadline_hours=48
    )


class TestCreate:
    def test_open_with_pending_bounty(self, bounty_request, now):
        assert bounty_request.status is RequestStatus.OPEN
        assert bounty_request.bounty_status is BountyStatus.PENDING
        assert bounty_request.response_count == 0
        assert bounty_request.tags == {"coffee"}
        assert bounty_request.expires_at == now + timedelta(hours=48)

    def test_no_bounty(self, now):
        request = lifecycle.create_request("creator", "Best ramen nearby", now)
        assert request.bounty_status is BountyStatus.NONE
        assert request.expires_at is None

    @pytest.mark.parametrize("title", ["", "abcd", "x" * 201])
    def test_title_length(self, now, title):
        with pytest.raises(ValidationError):
            lifecycle.create_request("creator", title, now)

    @pytest.mark.parametrize("hours", [0, 2017])
    def test_deadline_bounds(self, now, hours):
        with pytest.raises(ValidationError):
            lifecycle.create_request("creator", "Valid title", now, deadline_hours=hours)

    def test_expiry_must_be_in_future(self, now):
        with pytest.raises(ValidationError):
            lifecycle.create_request("creator", "Valid title", now, expires_at=now - timedelta(minutes=1))

    def test_negative_bounty_rejected(self, now):
        with pytest.raises(ValidationError):
            lifecycle.create_request("creator", "Valid title", now, bounty_amount=-1)


class TestRespond:
    def test_first_response_moves_to_answered(self, bounty_request, now):
        updated, response = lifecycle.respond(bounty_request, "helper", "Try Cafe Grumpy on Bedford Ave", now)
        assert updated.status is RequestStatus.ANSWERED
        assert updated.response_count == 1
        assert updated.responses == [response]
        # input is not mutated
        assert bounty_request.status is RequestStatus.OPEN

    def test_more_responses_keep_answered(self, bounty_request, now):
        updated, _ = lifecycle.respond(bounty_request, "helper", ANSWER, now)
        updated, _ = lifecycle.respond(updated, "other", "Also good: Sey Coffee in Bushwick", now)
        assert updated.status is RequestStatus.ANSWERED
        assert updated.response_count == 2

    def test_creator_cannot_respond(self, bounty_request, now):
        with pytest.raises(ValidationError):
            lifecycle.respond(bounty_request, "creator", "Answering my own request here", now)

    def test_one_response_per_responder(self, bounty_request, now):
        updated, _ = lifecycle.respond(bounty_request, "helper", ANSWER, now)
        with pytest.raises(ConflictError):
            lifecycle.respond(updated, "helper", "Changed my mind, try Devocion", now)

    @pytest.mark.parametrize("text", ["", "   ", "x" * 19, "x" * 2001])
    def test_text_length(self, bounty_request, now, text):
        with pytest.raises(ValidationError):
            lifecycle.respond(bounty_request, "helper", text, now)

    def test_minimum_length_is_inclusive(self, bounty_request, now):
        updated, response = lifecycle.respond(bounty_request, "helper", "  " + "x" * 20 + "  ", now)
        assert response.text == "x" * 20

    def test_closed_request_rejects_responses(self, bounty_request, now):
        closed = lifecycle.close(bounty_request, "creator", now)
        with pytest.raises(ConflictError):
            lifecycle.respond(closed, "helper", "Too late but try Devocion anyway", now)


class TestAward:
    def test_award_after_response(self, bounty_request, now):
        answered, response = lifecycle.respond(bounty_request, "helper", "Try Cafe Grumpy on Bedford Ave", now)
        result = lifecycle.award_bounty(answered, "creator", response.id, now)
        assert result.request.bounty_status is BountyStatus.AWARDED
        assert result.request.status is RequestStatus.ANSWERED
        assert result.request.winner_response_id == response.id
        assert result.winner_id == "helper"
        assert result.platform_fee == pytest.approx(1.0)
        assert result.payout_amount == pytest.approx(9.0)

    def test_custom_fee(self, bounty_request, now):
        answered, response = lifecycle.respond(bounty_request, "helper", ANSWER, now)
        config = RankingConfig(platform_fee_percent=25)
        result = lifecycle.award_bounty(answered, "creator", response.id, now, config)
        assert result.payout_amount == pytest.approx(7.5)

    def test_award_while_open_is_conflict(self, bounty_request, now):
        with pytest.raises(ConflictError):
            lifecycle.award_bounty(bounty_request, "creator", "missing", now)

    def test_award_twice_is_conflict(self, bounty_request, now):
        answered, response = lifecycle.respond(bounty_request, "helper", ANSWER, now)
        awarded = lifecycle.award_bounty(answered, "creator", response.id, now).request
        with pytest.raises(ConflictError):
            lifecycle.award_bounty(awarded, "creator", response.id, now)

    def test_award_after_refund_is_conflict(self, bounty_request, now):
        answered, response = lifecycle.respond(bounty_request, "helper", ANSWER, now)
        closed = lifecycle.close(answered, "creator", now)
        assert closed.status is RequestStatus.CLOSED
        assert closed.bounty_status is BountyStatus.REFUNDED
        with pytest.raises(ConflictError):
            lifecycle.award_bounty(closed, "creator", response.id, now)

    def test_unknown_response_is_not_found(self, bounty_request, now):
        answered, _ = lifecycle.respond(bounty_request, "helper", ANSWER, now)
        with pytest.raises(NotFoundError):
            lifecycle.award_bounty(answered, "creator", "no-such-response", now)

    def test_no_bounty_cannot_be_awarded(self, now):
        request = lifecycle.create_request("creator", "Free help wanted", now)
        answered, response = lifecycle.respond(request, "helper", ANSWER, now)
        with pytest.raises(ConflictError):
            lifecycle.award_bounty(answered, "creator", response.id, now)

    def test_only_creator_awards(self, bounty_request, now):
        answered, response = lifecycle.respond(bounty_request, "helper", ANSWER, now)
        with pytest.raises(PermissionDeniedError):
            lifecycle.award_bounty(answered, "helper", response.id, now)


class TestCloseAndExpire:
    def test_close_twice_is_conflict(self, bounty_request, now):
        closed = lifecycle.close(bounty_request, "creator", now)
        with pytest.raises(ConflictError):
            lifecycle.close(closed, "creator", now)

    def test_only_creator_closes(self, bounty_request, now):
        with pytest.raises(PermissionDeniedError):
            lifecycle.close(bounty_request, "someone", now)

    def test_close_after_award_keeps_awarded(self, bounty_request, now):
        answered, response = lifecycle.respond(bounty_request, "helper", ANSWER, now)
        awarded = lifecycle.award_bounty(answered, "creator", response.id, now).request
        closed = lifecycle.close(awarded, "creator", now)
        assert closed.status is RequestStatus.CLOSED
        assert closed.bounty_status is BountyStatus.AWARDED

    def test_expire_closes_and_expires_bounty(self, bounty_request, now):
        later = now + timedelta(hours=49)
        expired = lifecycle.expire(bounty_request, later)
        assert expired.status is RequestStatus.CLOSED
        assert expired.bounty_status is BountyStatus.EXPIRED
        assert expired.closed_at == later

    def test_not_yet_due_is_unchanged(self, bounty_request, now):
        assert lifecycle.expire(bounty_request, now + timedelta(hours=47)) is bounty_request

    def test_expired_request_rejects_responses_and_awards(self, bounty_request, now):
        answered, response = lifecycle.respond(bounty_request, "helper", ANSWER, now)
        later = now + timedelta(hours=49)
        with pytest.raises(ConflictError):
            lifecycle.respond(answered, "other", "Late answer: try the Devocion bar", later)
        with pytest.raises(ConflictError):
            lifecycle.award_bounty(answered, "creator", response.id, later)

    def test_expiry_leaves_awarded_bounty(self, bounty_request, now):
        answered, response = lifecycle.respond(bounty_request, "helper", ANSWER, now)
        awarded = lifecycle.award_bounty(answered, "creator", response.id, now).request
        expired = lifecycle.expire(awarded, now + timedelta(hours=49))
        assert expired.status is RequestStatus.CLOSED
        assert expired.bounty_status is BountyStatus.AWARDED


class TestSelectRequests:
    def test_defaults_to_open_newest_first(self, now):
        first = lifecycle.create_request("a", "First request", now - timedelta(hours=2))
        second = lifecycle.create_request("b", "Second request", now - timedelta(hours=1), tags=["books"])
        answered, _ = lifecycle.respond(
            lifecycle.create_request("c", "Third request", now), "helper", ANSWER, now
        )
        selected = lifecycle.select_requests([first, second, answered])
        assert [r.id for r in selected] == [second.id, first.id]
        assert len(lifecycle.select_requests([first, second, answered], status="all")) == 3
        assert lifecycle.select_requests([first, second, answered], status="answered") == [answered]
        assert lifecycle.select_requests([first, second], tags=["BOOKS"]) == [second]
        assert lifecycle.select_requests([first, second], text="FIRST") == [first]

    def test_unknown_status_rejected(self, now):
        with pytest.raises(ValidationError):
            lifecycle.select_requests([], status="pending")
