# GitHub PR Review - MCP server package
#
# This package exposes GitHub pull-request operations to AI agents over MCP
# and runs a lightweight scan of the added lines in a PR's diff.
#
# Analysis flow (pure, no I/O):
#   1. Diff Line Mapper -> 2. Pattern Scanner -> 3. File-Level Checker
#   -> 4. Report Aggregator
#
# The MCP server (mcp_server.py) fetches the changed files through
# github_service.py and hands them to code_analyzer.analyze_files().

from pr_review.code_analyzer import analyze_files
from pr_review.models import AnalysisReport, AnalysisSummary, ChangedFile, Issue

__version__ = "1.0.0"

__all__ = [
    "AnalysisReport",
    "AnalysisSummary",
    "ChangedFile",
    "Issue",
    "analyze_files",
]
