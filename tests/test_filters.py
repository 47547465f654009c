"""
Discovery Filter Tests

Tests search predicates, ordering, and pagination.

Rules:
------
- All supplied filters are ANDed
- text: case-insensitive substring over title OR body
- tags: item tags must contain every requested tag
- min_trust_score: inclusive, evaluated for the requesting viewer
- Default order: most recent first
- has_more = total_count > offset + limit

Run:
----
    pytest tests/test_filters.py -v
"""

import pytest

from discovery.errors import ValidationError
from discovery.models.search import SearchFilters, SortOrder
from discovery.models.trust import TrustBreakdown
from discovery.stages.filters import query
from discovery.stages.trust import compute_trust


def _fixed_trust(scores):
    """Trust lookup returning direct-endorsement counts from a dict (4 direct -> 6.0)."""

    def lookup(item):
        direct = scores.get(item.id, 0)
        return compute_trust(TrustBreakdown(direct_friends_count=direct, friends_of_friends_count=0))

    return lookup


def _ids(page):
    return [s.item.id for s in page.items]


class TestPredicates:
    def test_no_filters_returns_everything_newest_first(self, corpus, now):
        page = query(corpus, SearchFilters(), now)
        assert _ids(page) == ["fresh-hit", "quiet", "old-hit", "stale"]
        assert page.total_count == 4
        assert page.has_more is False

    def test_text_matches_title_or_body_case_insensitively(self, corpus, now):
        page = query(corpus, SearchFilters(text="coffee"), now)
        # "Best Coffee in NYC" (title) and "A calm COFFEE spot" (body)
        assert _ids(page) == ["fresh-hit", "quiet"]

    def test_blank_text_is_ignored(self, corpus, now):
        assert query(corpus, SearchFilters(text="   "), now).total_count == 4

    def test_tags_require_containment(self, corpus, now):
        page = query(corpus, SearchFilters(tags=["coffee", "nyc"]), now)
        assert _ids(page) == ["fresh-hit"]
        for s in query(corpus, SearchFilters(tags=["coffee"]), now).items:
            assert {"coffee"} <= s.item.tags

    def test_tags_are_normalized(self, corpus, now):
        assert _ids(query(corpus, SearchFilters(tags=[" NYC "]), now)) == ["fresh-hit"]

    def test_filters_are_anded(self, corpus, now):
        page = query(corpus, SearchFilters(text="coffee", author_id="viewer"), now)
        assert _ids(page) == ["quiet"]
        page = query(corpus, SearchFilters(tags=["books"], author_id="viewer"), now)
        assert page.items == []
        assert page.total_count == 0

    def test_min_trust_is_inclusive(self, corpus, now):
        lookup = _fixed_trust({"fresh-hit": 4, "old-hit": 3, "quiet": 5})
        # 4 direct -> 6.0, 3 direct -> 4.5, 5 direct -> 7.5
        page = query(corpus, SearchFilters(min_trust_score=6.0), now, lookup)
        assert _ids(page) == ["fresh-hit", "quiet"]
        assert all(s.trust.score >= 6.0 for s in page.items)
        assert all(s.item.trust_score == s.trust.score for s in page.items)


class TestOrdering:
    def test_trust_order(self, corpus, now):
        lookup = _fixed_trust({"fresh-hit": 1, "old-hit": 6, "quiet": 3})
        page = query(corpus, SearchFilters(sort=SortOrder.TRUST), now, lookup)
        # stale has no endorsements (0.0) and ties nothing
        assert _ids(page) == ["old-hit", "quiet", "fresh-hit", "stale"]

    def test_trending_order_scores_out_of_window_as_zero(self, corpus, now):
        page = query(corpus, SearchFilters(sort=SortOrder.TRENDING), now)
        # stale has the most raw engagement but is 40 days old
        assert _ids(page) == ["fresh-hit", "old-hit", "quiet", "stale"]


class TestPagination:
    def test_has_more_rule(self, make_item, now):
        corpus = [make_item(f"i{n}", hours_ago=n + 1) for n in range(5)]
        first = query(corpus, SearchFilters(offset=0, limit=2), now)
        assert _ids(first) == ["i0", "i1"]
        assert first.has_more is True
        middle = query(corpus, SearchFilters(offset=2, limit=2), now)
        assert _ids(middle) == ["i2", "i3"]
        assert middle.has_more is True
        last = query(corpus, SearchFilters(offset=4, limit=2), now)
        assert _ids(last) == ["i4"]
        assert last.has_more is False
        assert last.total_count == 5

    def test_exact_fit_has_no_more(self, make_item, now):
        corpus = [make_item(f"i{n}") for n in range(4)]
        page = query(corpus, SearchFilters(offset=2, limit=2), now)
        assert page.has_more is False

    def test_offset_past_end_is_empty(self, corpus, now):
        page = query(corpus, SearchFilters(offset=50, limit=10), now)
        assert page.items == []
        assert page.has_more is False
        assert page.total_count == 4


class TestValidation:
    @pytest.mark.parametrize(
        "filters",
        [
            SearchFilters(limit=0),
            SearchFilters(limit=-5),
            SearchFilters(offset=-1),
            SearchFilters(limit=101),
            SearchFilters(min_trust_score=10.5),
            SearchFilters(min_trust_score=-0.1),
        ],
    )
    def test_rejected(self, corpus, now, filters):
        with pytest.raises(ValidationError):
            query(corpus, filters, now, _fixed_trust({}))

    def test_trust_filter_requires_viewer(self, corpus, now):
        with pytest.raises(ValidationError):
            query(corpus, SearchFilters(min_trust_score=2.0), now)
        with pytest.raises(ValidationError):
            query(corpus, SearchFilters(sort=SortOrder.TRUST), now)
