"""
GitHub Service — GitHub PR Review

PURPOSE:
    Thin wrapper around the GitHub REST API for the pull-request operations
    the MCP server exposes:

    READ:
      1. get_pr_reviews  — reviews, each with its inline comments
      2. get_pr_comments — conversation (issue) comments
      3. get_pr_files    — changed files with their patches
      4. get_pr_details  — title, state, author, merge status, stats

    WRITE:
      5. submit_review   — APPROVE / REQUEST_CHANGES / COMMENT, optional inline comments
      6. add_comment     — general comment, or line comment when path + line are given
      7. update_pr       — title, body, open/closed state

CALLED BY:
    mcp_server.py — one GitHubService per server process.

DEPENDS ON:
    - requests (one Session per service, so connections are reused)
    - A GitHub token with pull_requests:write and issues:write for the WRITE calls

PAGINATION:
    List endpoints are fetched with per_page=100 and the "next" URL from the
    Link header is followed until there is none.

RATE LIMITS:
    A 403/429 with Retry-After (secondary limit) or with
    X-RateLimit-Remaining: 0 (primary limit) is retried after the delay
    GitHub asks for, up to max_retries times. A 403/429 whose message says
    "secondary rate limit" but carries no usable header waits 60 seconds.
    Any other error status raises requests.HTTPError.
"""

import time
from typing import Callable, Optional

import requests

from pr_review.config import DEFAULT_API_URL, DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT, Settings
from pr_review.logging_config import get_logger
from pr_review.models import ChangedFile

logger = get_logger(__name__)


PER_PAGE = 100
RATE_LIMIT_STATUSES = (403, 429)
SECONDARY_RATE_LIMIT_DEFAULT_WAIT = 60


class GitHubServiceError(Exception):
    """Base class for errors raised by GitHubService itself."""


class RateLimitExceeded(GitHubServiceError):
    """Raised when a request is still rate limited after every retry."""


class GitHubService:
    """
    GitHub REST client for one token.

    Methods take (owner, repo, pr_number) the way the MCP tools receive them
    and return plain dicts / ChangedFile objects ready to be serialized.
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_url = api_url.rstrip("/")
        self.max_retries = max_retries
        self.timeout = timeout
        self._sleep = sleep
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubService":
        return cls(
            token=settings.github_token,
            api_url=settings.api_url,
            max_retries=settings.max_retries,
            timeout=settings.timeout,
        )

    # -----------------------------------------------------------------------
    # READ OPERATIONS
    # -----------------------------------------------------------------------

    def get_pr_reviews(self, owner: str, repo: str, pr_number: int) -> list:
        """
        List every review on the PR together with that review's inline comments.

        Returns:
            list of dicts with keys id, state, body, author, submittedAt and
            comments (each with id, body, path, line, author, createdAt).
        """
        base = f"/repos/{owner}/{repo}/pulls/{pr_number}/reviews"
        reviews = self._paginate(base)

        result = []
        for review in reviews:
            comments = self._paginate(f"{base}/{review['id']}/comments")
            result.append({
                "id": review["id"],
                "state": review.get("state"),
                "body": review.get("body") or "",
                "author": _login(review),
                "submittedAt": review.get("submitted_at") or "",
                "comments": [_review_comment(c) for c in comments],
            })
        return result

    def get_pr_comments(self, owner: str, repo: str, pr_number: int) -> list:
        """List the PR's conversation comments (the issue comments, not inline ones)."""
        comments = self._paginate(f"/repos/{owner}/{repo}/issues/{pr_number}/comments")
        return [
            {
                "id": comment["id"],
                "body": comment.get("body") or "",
                "author": _login(comment),
                "createdAt": comment.get("created_at"),
            }
            for comment in comments
        ]

    def get_pr_files(self, owner: str, repo: str, pr_number: int) -> list[ChangedFile]:
        files = self._paginate(f"/repos/{owner}/{repo}/pulls/{pr_number}/files")
        return [ChangedFile.from_dict(f) for f in files]

    def get_pr_details(self, owner: str, repo: str, pr_number: int) -> dict:
        pr = self._get_pull(owner, repo, pr_number)
        return {
            "title": pr.get("title"),
            "body": pr.get("body"),
            "state": pr.get("state"),
            "author": (pr.get("user") or {}).get("login"),
            "created_at": pr.get("created_at"),
            "updated_at": pr.get("updated_at"),
            "mergeable": pr.get("mergeable"),
            "merged": pr.get("merged"),
            "additions": pr.get("additions"),
            "deletions": pr.get("deletions"),
            "changed_files": pr.get("changed_files"),
        }

    # -----------------------------------------------------------------------
    # WRITE OPERATIONS
    # -----------------------------------------------------------------------

    def submit_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        body: str,
        event: str,
        comments: Optional[list] = None,
    ) -> dict:
        """
        Submit a review.

        Args:
            event: "APPROVE", "REQUEST_CHANGES" or "COMMENT"
            comments: Optional inline comments, each {"path", "line", "body"}
        """
        data = {"body": body, "event": event}
        if comments:
            data["comments"] = comments
        url = self._url(f"/repos/{owner}/{repo}/pulls/{pr_number}/reviews")
        return self._request("POST", url, json=data).json()

    def add_comment(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        body: str,
        path: Optional[str] = None,
        line: Optional[int] = None,
        commit_id: Optional[str] = None,
        in_reply_to: Optional[int] = None,
    ) -> dict:
        """
        Add a comment to the PR.

        With both path and line this is an inline review comment. GitHub
        needs the commit it applies to, so the PR head SHA is looked up when
        commit_id isn't given. Without them it is a plain conversation comment.
        """
        if path and line:
            if not commit_id:
                commit_id = self._get_pull(owner, repo, pr_number)["head"]["sha"]

            data = {
                "body": body,
                "commit_id": commit_id,
                "path": path,
                "line": line,
            }
            if in_reply_to:
                data["in_reply_to"] = in_reply_to

            url = self._url(f"/repos/{owner}/{repo}/pulls/{pr_number}/comments")
            return self._request("POST", url, json=data).json()

        url = self._url(f"/repos/{owner}/{repo}/issues/{pr_number}/comments")
        return self._request("POST", url, json={"body": body}).json()

    def update_pr(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        title: Optional[str] = None,
        body: Optional[str] = None,
        state: Optional[str] = None,
    ) -> dict:
        """Update the PR. Only the fields that are given (and non-empty) are sent."""
        data = {}
        if title:
            data["title"] = title
        if body:
            data["body"] = body
        if state:
            data["state"] = state

        url = self._url(f"/repos/{owner}/{repo}/pulls/{pr_number}")
        return self._request("PATCH", url, json=data).json()

    # -----------------------------------------------------------------------
    # HTTP PLUMBING
    # -----------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.api_url}{path}"

    def _get_pull(self, owner: str, repo: str, pr_number: int) -> dict:
        url = self._url(f"/repos/{owner}/{repo}/pulls/{pr_number}")
        return self._request("GET", url).json()

    def _paginate(self, path: str) -> list:
        """GET every page of a list endpoint and return the concatenated items."""
        url = self._url(path)
        params = {"per_page": PER_PAGE}
        items = []

        while url:
            resp = self._request("GET", url, params=params)
            items.extend(resp.json())
            url = resp.links.get("next", {}).get("url")
            # The next link already carries per_page and page in its query string
            params = None

        return items

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        """
        Send one request, sleeping and retrying while GitHub reports a rate limit.

        Raises:
            RateLimitExceeded: still limited after max_retries retries
            requests.HTTPError: any other 4xx/5xx response
        """
        retries = 0
        while True:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)

            limit = _rate_limit_delay(resp)
            if limit is None:
                resp.raise_for_status()
                return resp

            delay, kind = limit
            if retries >= self.max_retries:
                raise RateLimitExceeded(
                    f"{kind} rate limit still hit after {retries} retries: {method} {url}"
                )

            retries += 1
            logger.warning(
                "%s rate limit hit, retrying after %ss (attempt %d/%d)",
                kind, delay, retries, self.max_retries,
            )
            self._sleep(delay)


# ---------------------------------------------------------------------------
# PRIVATE HELPER FUNCTIONS
# ---------------------------------------------------------------------------


def _rate_limit_delay(resp: requests.Response) -> Optional[tuple]:
    """
    Return (seconds_to_wait, "Primary" | "Secondary") when resp is a rate-limit
    response, None otherwise.
    """
    if resp.status_code not in RATE_LIMIT_STATUSES:
        return None

    retry_after = resp.headers.get("Retry-After")
    if retry_after is not None:
        try:
            return max(int(retry_after), 0), "Secondary"
        except ValueError:
            pass

    if resp.headers.get("X-RateLimit-Remaining") == "0":
        try:
            reset_at = int(resp.headers.get("X-RateLimit-Reset", "0"))
        except ValueError:
            reset_at = 0
        return max(int(reset_at - time.time()), 1), "Primary"

    # Secondary limits are sometimes sent without Retry-After; only the
    # message identifies them.
    if "secondary rate limit" in _error_message(resp).lower():
        return SECONDARY_RATE_LIMIT_DEFAULT_WAIT, "Secondary"

    return None


def _error_message(resp: requests.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        return ""
    if isinstance(payload, dict):
        return str(payload.get("message") or "")
    return ""


def _login(item: dict) -> str:
    return (item.get("user") or {}).get("login") or "unknown"


def _review_comment(comment: dict) -> dict:
    return {
        "id": comment["id"],
        "body": comment.get("body") or "",
        "path": comment.get("path"),
        "line": comment.get("line") or None,
        "author": _login(comment),
        "createdAt": comment.get("created_at"),
    }
