#!/usr/bin/env python3
"""
Tests for the sequential traversal of question pages.
"""

import pytest
import requests

from cbt_scraper.core.errors import PageFetchError
from cbt_scraper.core.page_walker import PageWalker
from cbt_scraper.core.question_extractor import QuestionExtractor
from fakes import SITE, FakeResponse, FakeSession, question_page


def _url(n):
    return f"{SITE}/users/cbt/practice_questions/{n}"


def _chain(count, last_has_next=False):
    routes = {}
    for n in range(1, count + 1):
        has_next = n < count or last_has_next
        routes[_url(n)] = FakeResponse(200, question_page(
            str(n), f"問題{n}", next_href=f"/users/cbt/practice_questions/{n + 1}" if has_next else None,
        ))
    return routes


def _walker(routes):
    session = FakeSession(routes)
    return session, PageWalker(session, QuestionExtractor(site_origin=SITE), timeout=5)


def test_walk_follows_next_links_until_last():
    session, walker = _walker(_chain(3))
    records = list(walker.walk(_url(1), 10))
    assert [r.problem_number for r in records] == ["1", "2", "3"]
    assert session.urls() == [_url(1), _url(2), _url(3)]
    assert records[-1].is_last


def test_walk_stops_at_page_limit():
    session, walker = _walker(_chain(5, last_has_next=True))
    records = list(walker.walk(_url(1), 2))
    assert [r.question_text for r in records] == ["問題1", "問題2"]
    assert session.urls() == [_url(1), _url(2)]


def test_fetch_failure_ends_walk_after_earlier_records():
    routes = _chain(3)
    routes[_url(2)] = FakeResponse(500, "error")
    _, walker = _walker(routes)

    seen = []
    with pytest.raises(PageFetchError) as excinfo:
        for record in walker.walk(_url(1), 10):
            seen.append(record)
    assert [r.problem_number for r in seen] == ["1"]
    assert excinfo.value.url == _url(2)
    assert excinfo.value.status_code == 500


def test_network_error_becomes_fetch_error():
    _, walker = _walker({_url(1): requests.exceptions.Timeout("slow")})
    with pytest.raises(PageFetchError):
        walker.fetch_record(_url(1))


def test_request_uses_timeout():
    session, walker = _walker(_chain(1))
    walker.fetch_record(_url(1))
    assert session.requests[0][2]['timeout'] == 5


if __name__ == "__main__":
    test_walk_follows_next_links_until_last()
    test_walk_stops_at_page_limit()
    test_fetch_failure_ends_walk_after_earlier_records()
    test_network_error_becomes_fetch_error()
    test_request_uses_timeout()
    print("✓ page walker tests passed")
