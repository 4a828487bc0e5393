"""
Data Models — GitHub PR Review

Dataclasses shared by the analyzer, the report aggregator and the GitHub
service. Each model has a to_dict() that produces the JSON shape the MCP
tools return. Optional fields that are unset are left out of the dict, so
a file without a patch or an issue without a line number serializes the
same way the GitHub API would show it.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional


# Allowed values, kept as plain tuples so the MCP layer and tests can share them
ISSUE_TYPES = ("error", "warning", "suggestion", "security")
SEVERITIES = ("high", "medium", "low")
ASSESSMENTS = ("approved", "needs-work", "requires-changes")


@dataclass(frozen=True)
class ChangedFile:
    """One file touched by a pull request."""
    filename: str
    status: str  # "added", "modified", "deleted" (GitHub may also send "renamed")
    additions: int = 0
    deletions: int = 0
    patch: Optional[str] = None  # None for binary or too-large diffs

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChangedFile":
        """Build a ChangedFile from a GitHub /pulls/{n}/files entry (or similar mapping)."""
        return cls(
            filename=data.get("filename", ""),
            status=data.get("status", "modified"),
            additions=int(data.get("additions") or 0),
            deletions=int(data.get("deletions") or 0),
            patch=data.get("patch"),
        )

    def to_dict(self) -> dict:
        result = {
            "filename": self.filename,
            "status": self.status,
            "additions": self.additions,
            "deletions": self.deletions,
        }
        if self.patch is not None:
            result["patch"] = self.patch
        return result


@dataclass(frozen=True)
class Issue:
    """A single finding emitted by the analyzer."""
    type: str      # one of ISSUE_TYPES
    severity: str  # one of SEVERITIES
    file: str
    message: str
    line: Optional[int] = None  # 1-based, post-change side of the diff
    suggestion: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            "type": self.type,
            "severity": self.severity,
            "file": self.file,
        }
        if self.line is not None:
            result["line"] = self.line
        result["message"] = self.message
        if self.suggestion is not None:
            result["suggestion"] = self.suggestion
        return result


@dataclass(frozen=True)
class AnalysisSummary:
    total_files: int = 0
    total_additions: int = 0
    total_deletions: int = 0
    issues_found: int = 0
    security_issues: int = 0

    def to_dict(self) -> dict:
        return {
            "totalFiles": self.total_files,
            "totalAdditions": self.total_additions,
            "totalDeletions": self.total_deletions,
            "issuesFound": self.issues_found,
            "securityIssues": self.security_issues,
        }


@dataclass(frozen=True)
class AnalysisReport:
    """Complete result of one analysis call."""
    summary: AnalysisSummary
    issues: tuple[Issue, ...] = ()
    suggestions: tuple[str, ...] = ()
    assessment: str = "approved"  # one of ASSESSMENTS

    def to_dict(self) -> dict:
        return {
            "summary": self.summary.to_dict(),
            "issues": [issue.to_dict() for issue in self.issues],
            "suggestions": list(self.suggestions),
            "assessment": self.assessment,
        }
