"""Unit tests — GitHubService (zero I/O, session fully mocked)."""

import json
import time
from unittest.mock import Mock, call

import pytest
import requests

from pr_review.github_service import GitHubService, RateLimitExceeded
from pr_review.models import ChangedFile

API = "https://api.github.com"


# ── Helpers ──


def _response(payload=None, status=200, headers=None, url=API):
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(payload if payload is not None else {}).encode("utf-8")
    resp.headers.update(headers or {})
    resp.url = url
    return resp


def _next_link(url):
    return {"Link": f'<{url}>; rel="next", <{url}>; rel="last"'}


def _service(*responses, max_retries=3):
    session = Mock()
    session.headers = {}
    session.request.side_effect = list(responses)
    sleep = Mock()
    service = GitHubService("ghp_test", max_retries=max_retries, session=session, sleep=sleep)
    return service, session, sleep


def _requested(session):
    """(method, url) of every request made, in order."""
    return [(c.args[0], c.args[1]) for c in session.request.call_args_list]


# ── Construction ──


def test_session_headers():
    _, session, _ = _service()
    assert session.headers["Authorization"] == "Bearer ghp_test"
    assert session.headers["Accept"] == "application/vnd.github+json"
    assert session.headers["X-GitHub-Api-Version"] == "2022-11-28"


# ── Reads ──


def test_get_pr_files_follows_pagination():
    page2 = f"{API}/repositories/1/pulls/7/files?per_page=100&page=2"
    service, session, _ = _service(
        _response(
            [{"filename": "a.py", "status": "modified", "additions": 2, "deletions": 1,
              "patch": "@@ -1 +1,2 @@\n+x"}],
            headers=_next_link(page2),
        ),
        _response([{"filename": "logo.png", "status": "added", "additions": 0, "deletions": 0}]),
    )

    files = service.get_pr_files("octo", "demo", 7)

    assert files == [
        ChangedFile("a.py", "modified", 2, 1, "@@ -1 +1,2 @@\n+x"),
        ChangedFile("logo.png", "added", 0, 0, None),
    ]
    assert _requested(session) == [
        ("GET", f"{API}/repos/octo/demo/pulls/7/files"),
        ("GET", page2),
    ]
    first, second = session.request.call_args_list
    assert first.kwargs["params"] == {"per_page": 100}
    assert second.kwargs["params"] is None
    assert first.kwargs["timeout"] == 30


def test_get_pr_reviews_includes_review_comments():
    service, session, _ = _service(
        _response([
            {"id": 11, "state": "APPROVED", "body": "LGTM", "user": {"login": "alice"},
             "submitted_at": "2024-01-01T00:00:00Z"},
            {"id": 12, "state": "COMMENTED", "body": None, "user": None},
        ]),
        _response([
            {"id": 101, "body": "nit", "path": "a.py", "line": 4,
             "user": {"login": "alice"}, "created_at": "2024-01-01T00:00:00Z"},
        ]),
        _response([
            {"id": 102, "body": "outdated", "path": "b.py", "line": None,
             "user": None, "created_at": "2024-01-02T00:00:00Z"},
        ]),
    )

    reviews = service.get_pr_reviews("octo", "demo", 7)

    assert reviews == [
        {
            "id": 11, "state": "APPROVED", "body": "LGTM", "author": "alice",
            "submittedAt": "2024-01-01T00:00:00Z",
            "comments": [{
                "id": 101, "body": "nit", "path": "a.py", "line": 4,
                "author": "alice", "createdAt": "2024-01-01T00:00:00Z",
            }],
        },
        {
            "id": 12, "state": "COMMENTED", "body": "", "author": "unknown",
            "submittedAt": "",
            "comments": [{
                "id": 102, "body": "outdated", "path": "b.py", "line": None,
                "author": "unknown", "createdAt": "2024-01-02T00:00:00Z",
            }],
        },
    ]
    assert _requested(session) == [
        ("GET", f"{API}/repos/octo/demo/pulls/7/reviews"),
        ("GET", f"{API}/repos/octo/demo/pulls/7/reviews/11/comments"),
        ("GET", f"{API}/repos/octo/demo/pulls/7/reviews/12/comments"),
    ]


def test_get_pr_comments():
    service, session, _ = _service(_response([
        {"id": 1, "body": "ping", "user": {"login": "bob"}, "created_at": "t1"},
        {"id": 2, "body": None, "user": None, "created_at": "t2"},
    ]))

    assert service.get_pr_comments("octo", "demo", 3) == [
        {"id": 1, "body": "ping", "author": "bob", "createdAt": "t1"},
        {"id": 2, "body": "", "author": "unknown", "createdAt": "t2"},
    ]
    assert _requested(session) == [("GET", f"{API}/repos/octo/demo/issues/3/comments")]


def test_get_pr_details():
    service, _, _ = _service(_response({
        "title": "Add feature", "body": "desc", "state": "open",
        "user": {"login": "carol"}, "created_at": "c", "updated_at": "u",
        "mergeable": True, "merged": False, "additions": 10, "deletions": 2,
        "changed_files": 3, "head": {"sha": "abc"},
    }))

    assert service.get_pr_details("octo", "demo", 5) == {
        "title": "Add feature", "body": "desc", "state": "open", "author": "carol",
        "created_at": "c", "updated_at": "u", "mergeable": True, "merged": False,
        "additions": 10, "deletions": 2, "changed_files": 3,
    }


# ── Writes ──


def test_submit_review_with_inline_comments():
    service, session, _ = _service(_response({"id": 9}))
    comments = [{"path": "a.py", "line": 3, "body": "fix"}]

    service.submit_review("octo", "demo", 5, "Needs work", "REQUEST_CHANGES", comments)

    session.request.assert_called_once_with(
        "POST", f"{API}/repos/octo/demo/pulls/5/reviews", timeout=30,
        json={"body": "Needs work", "event": "REQUEST_CHANGES", "comments": comments},
    )


def test_submit_review_without_comments_omits_key():
    service, session, _ = _service(_response({"id": 9}))
    service.submit_review("octo", "demo", 5, "ok", "APPROVE")
    assert session.request.call_args.kwargs["json"] == {"body": "ok", "event": "APPROVE"}


def test_add_general_comment():
    service, session, _ = _service(_response({"id": 1}))
    service.add_comment("octo", "demo", 5, "hello")
    session.request.assert_called_once_with(
        "POST", f"{API}/repos/octo/demo/issues/5/comments", timeout=30, json={"body": "hello"},
    )


def test_add_line_comment_looks_up_head_sha():
    service, session, _ = _service(
        _response({"head": {"sha": "deadbeef"}}),
        _response({"id": 2}),
    )

    service.add_comment("octo", "demo", 5, "here", path="a.py", line=12)

    assert session.request.call_args_list == [
        call("GET", f"{API}/repos/octo/demo/pulls/5", timeout=30),
        call("POST", f"{API}/repos/octo/demo/pulls/5/comments", timeout=30, json={
            "body": "here", "commit_id": "deadbeef", "path": "a.py", "line": 12,
        }),
    ]


def test_add_line_comment_with_commit_and_reply():
    service, session, _ = _service(_response({"id": 3}))

    service.add_comment("octo", "demo", 5, "agreed", path="a.py", line=2,
                        commit_id="cafe", in_reply_to=77)

    assert session.request.call_args.kwargs["json"] == {
        "body": "agreed", "commit_id": "cafe", "path": "a.py", "line": 2, "in_reply_to": 77,
    }


def test_path_without_line_is_a_general_comment():
    service, session, _ = _service(_response({"id": 4}))
    service.add_comment("octo", "demo", 5, "hi", path="a.py")
    assert _requested(session) == [("POST", f"{API}/repos/octo/demo/issues/5/comments")]


def test_update_pr_sends_only_given_fields():
    service, session, _ = _service(_response({}))
    service.update_pr("octo", "demo", 5, title="New title", state="closed")
    session.request.assert_called_once_with(
        "PATCH", f"{API}/repos/octo/demo/pulls/5", timeout=30,
        json={"title": "New title", "state": "closed"},
    )


# ── Errors and rate limits ──


def test_http_error_propagates():
    service, _, _ = _service(_response({"message": "Not Found"}, status=404))
    with pytest.raises(requests.HTTPError):
        service.get_pr_details("octo", "demo", 404)


def test_forbidden_without_rate_limit_headers_is_not_retried():
    service, session, sleep = _service(_response({"message": "nope"}, status=403))
    with pytest.raises(requests.HTTPError):
        service.get_pr_details("octo", "demo", 1)
    assert session.request.call_count == 1
    sleep.assert_not_called()


def test_secondary_rate_limit_is_retried_after_delay():
    service, session, sleep = _service(
        _response({"message": "slow down"}, status=403, headers={"Retry-After": "7"}),
        _response([]),
    )

    assert service.get_pr_comments("octo", "demo", 1) == []
    sleep.assert_called_once_with(7)
    assert session.request.call_count == 2


def test_secondary_rate_limit_without_retry_after_uses_default_wait():
    service, session, sleep = _service(
        _response({"message": "You have exceeded a secondary rate limit."}, status=403),
        _response([]),
    )

    assert service.get_pr_comments("octo", "demo", 1) == []
    sleep.assert_called_once_with(60)
    assert session.request.call_count == 2


def test_unparseable_retry_after_falls_back_to_primary_limit():
    reset = str(int(time.time()) + 30)
    service, _, sleep = _service(
        _response({}, status=403, headers={
            "Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT",
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": reset,
        }),
        _response([]),
    )

    service.get_pr_comments("octo", "demo", 1)

    (delay,), _ = sleep.call_args
    assert 1 <= delay <= 30


def test_primary_rate_limit_waits_until_reset():
    reset = str(int(time.time()) + 60)
    service, _, sleep = _service(
        _response({}, status=429, headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": reset}),
        _response([]),
    )

    service.get_pr_comments("octo", "demo", 1)

    (delay,), _ = sleep.call_args
    assert 1 <= delay <= 60


def test_rate_limit_gives_up_after_max_retries():
    limited = [_response({}, status=429, headers={"Retry-After": "1"}) for _ in range(3)]
    service, session, sleep = _service(*limited, max_retries=2)

    with pytest.raises(RateLimitExceeded):
        service.get_pr_files("octo", "demo", 1)
    assert session.request.call_count == 3
    assert sleep.call_count == 2
