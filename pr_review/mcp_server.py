"""
MCP Server — GitHub PR Review

PURPOSE:
    The interface AI agents use to review GitHub pull requests. Agents connect
    via MCP (Model Context Protocol) and get these tools:

    1. get_pr_reviews   — All reviews on a PR, with their inline comments
    2. get_pr_comments  — Conversation comments on a PR
    3. analyze_pr_code  — Scan the PR's added lines for security issues and code smells
    4. get_pr_files     — Files changed in a PR, with patches
    5. submit_pr_review — Approve, request changes, or comment
    6. add_pr_comment   — General comment, or a comment on a specific line
    7. update_pr        — Change title, description, or open/closed state
    8. get_pr_details   — Title, author, merge status and change stats

ARCHITECTURE:
    Uses the official MCP Python SDK (mcp package) with stdio transport.
    Tools are registered with the @mcp.tool() decorator and delegate to
    GitHubService (HTTP) and code_analyzer.analyze_files() (pure analysis).
    The GitHubService is created on the first tool call, from environment
    configuration (see config.py).

INSTALLATION:
    pip install -e .

    Then add to your MCP config (e.g., Claude Desktop mcp.json):
    {
      "mcpServers": {
        "github-pr-review": {
          "command": "github-pr-review-mcp",
          "env": {
            "GITHUB_TOKEN": "ghp_..."
          }
        }
      }
    }
"""

from typing import Literal, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel, Field

from pr_review.code_analyzer import analyze_files
from pr_review.config import ConfigurationError, load_settings
from pr_review.github_service import GitHubService
from pr_review.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


ReviewEvent = Literal["APPROVE", "REQUEST_CHANGES", "COMMENT"]
PRState = Literal["open", "closed"]


class InlineComment(BaseModel):
    """A review comment attached to one line of one file."""
    path: str = Field(description="File path relative to the repository root")
    line: int = Field(description="Line number in the post-change file")
    body: str = Field(description="Comment text")


# -----------------------------------------------------------------------
# SERVICE WIRING
# -----------------------------------------------------------------------
# One GitHubService per process. Tests replace it with set_service().
# -----------------------------------------------------------------------

_service: Optional[GitHubService] = None


def get_service() -> GitHubService:
    global _service
    if _service is None:
        _service = GitHubService.from_settings(load_settings())
    return _service


def set_service(service: Optional[GitHubService]) -> None:
    global _service
    _service = service


# -----------------------------------------------------------------------
# MCP SERVER DEFINITION
# -----------------------------------------------------------------------

mcp = FastMCP("GitHub PR Review")


@mcp.tool()
def get_pr_reviews(owner: str, repo: str, pr_number: int) -> dict:
    """
    Get all reviews for a GitHub pull request.

    Each review includes its state (APPROVED, CHANGES_REQUESTED, COMMENTED,
    PENDING), body, author, submission time and its inline comments.

    Args:
        owner: Repository owner/organization.
        repo: Repository name.
        pr_number: Pull request number.
    """
    reviews = get_service().get_pr_reviews(owner, repo, pr_number)
    return {"total": len(reviews), "reviews": reviews}


@mcp.tool()
def get_pr_comments(owner: str, repo: str, pr_number: int) -> dict:
    """
    Get all comments on a GitHub pull request.

    Args:
        owner: Repository owner/organization.
        repo: Repository name.
        pr_number: Pull request number.
    """
    comments = get_service().get_pr_comments(owner, repo, pr_number)
    return {"total": len(comments), "comments": comments}


@mcp.tool()
def analyze_pr_code(owner: str, repo: str, pr_number: int) -> dict:
    """
    Analyze code changes in a PR for issues and suggestions.

    Scans every added line for hardcoded credentials, eval(), innerHTML
    assignments, console/debugger statements, "any" types and TODO markers.
    Returns a summary, the issues with file and line, PR-level suggestions
    and an assessment: approved, needs-work or requires-changes.

    Args:
        owner: Repository owner/organization.
        repo: Repository name.
        pr_number: Pull request number.
    """
    files = get_service().get_pr_files(owner, repo, pr_number)
    return analyze_files(files).to_dict()


@mcp.tool()
def get_pr_files(owner: str, repo: str, pr_number: int) -> dict:
    """
    Get the list of files changed in a pull request, with their patches.

    Args:
        owner: Repository owner/organization.
        repo: Repository name.
        pr_number: Pull request number.
    """
    files = get_service().get_pr_files(owner, repo, pr_number)
    return {"total": len(files), "files": [f.to_dict() for f in files]}


@mcp.tool()
def submit_pr_review(
    owner: str,
    repo: str,
    pr_number: int,
    body: str,
    event: ReviewEvent,
    comments: Optional[list[InlineComment]] = None,
) -> str:
    """
    Submit a review to a pull request.

    Args:
        owner: Repository owner/organization.
        repo: Repository name.
        pr_number: Pull request number.
        body: Review comment body.
        event: Review action: APPROVE, REQUEST_CHANGES or COMMENT.
        comments: Optional inline comments on specific lines.
    """
    inline = [c.model_dump() for c in comments] if comments else None
    get_service().submit_review(owner, repo, pr_number, body, event, inline)
    logger.info("Submitted %s review on %s/%s#%d", event, owner, repo, pr_number)
    return "✅ Review submitted successfully"


@mcp.tool()
def add_pr_comment(
    owner: str,
    repo: str,
    pr_number: int,
    body: str,
    path: Optional[str] = None,
    line: Optional[int] = None,
    commit_id: Optional[str] = None,
    in_reply_to: Optional[int] = None,
) -> str:
    """
    Add a comment to a PR (general or line-specific).

    Give both path and line for a comment on a specific line; otherwise the
    comment goes to the PR conversation.

    Args:
        owner: Repository owner/organization.
        repo: Repository name.
        pr_number: Pull request number.
        body: Comment body.
        path: File path for a line comment.
        line: Line number for a line comment.
        commit_id: SHA of the commit to comment on. Defaults to the PR head.
        in_reply_to: ID of the review comment to reply to.
    """
    get_service().add_comment(
        owner, repo, pr_number, body,
        path=path, line=line, commit_id=commit_id, in_reply_to=in_reply_to,
    )
    comment_type = "line-specific comment" if path and line else "general comment"
    return f"✅ {comment_type} added successfully"


@mcp.tool()
def update_pr(
    owner: str,
    repo: str,
    pr_number: int,
    title: Optional[str] = None,
    body: Optional[str] = None,
    state: Optional[PRState] = None,
) -> str:
    """
    Update PR title, description, or state.

    Args:
        owner: Repository owner/organization.
        repo: Repository name.
        pr_number: Pull request number.
        title: New PR title.
        body: New PR description.
        state: "open" or "closed".
    """
    get_service().update_pr(owner, repo, pr_number, title=title, body=body, state=state)
    return "✅ PR updated successfully"


@mcp.tool()
def get_pr_details(owner: str, repo: str, pr_number: int) -> dict:
    """
    Get detailed information about a pull request.

    Args:
        owner: Repository owner/organization.
        repo: Repository name.
        pr_number: Pull request number.
    """
    return get_service().get_pr_details(owner, repo, pr_number)


# -----------------------------------------------------------------------
# ENTRY POINT
# -----------------------------------------------------------------------
# Run the server via stdio transport. Agents connect by launching
# `github-pr-review-mcp` as a subprocess.
# -----------------------------------------------------------------------


def main() -> int:
    try:
        settings = load_settings()
    except ConfigurationError as e:
        setup_logging()
        logger.error("%s", e)
        return 1

    setup_logging(settings.log_level)
    set_service(GitHubService.from_settings(settings))

    logger.info("GitHub PR Review MCP server starting (stdio)")
    mcp.run(transport="stdio")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
