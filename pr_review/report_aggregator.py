"""
Report Aggregator — GitHub PR Review

PURPOSE:
    Fold the changed files and the issues found in them into the final
    AnalysisReport: summary counters, a short list of PR-level suggestions
    and a coarse assessment.

CALLED BY:
    code_analyzer.analyze_files() — after every file has been scanned.

ASSESSMENT LADDER (first match wins):
    1. any security issue          -> "requires-changes"
    2. any high-severity issue     -> "requires-changes"
    3. more than 5 issues          -> "needs-work"
    4. otherwise                   -> "approved"

SUGGESTIONS (each checked on its own, fixed order):
    1. security issues present     -> fix before merging
    2. more than 500 changed lines -> split the PR
    3. no test files and more than 50 changed lines -> add tests
"""

from typing import Sequence

from pr_review.models import AnalysisReport, AnalysisSummary, ChangedFile, Issue


LARGE_PR_CHANGES = 500
TESTS_EXPECTED_CHANGES = 50
NEEDS_WORK_ISSUE_COUNT = 5
TEST_FILE_MARKERS = ("test", "spec")

SECURITY_SUGGESTION = "⚠️ Security issues detected - fix before merging"
LARGE_PR_SUGGESTION = "📦 Large PR - consider splitting into smaller changes"
ADD_TESTS_SUGGESTION = "🧪 Consider adding tests for these changes"


def build_report(files: Sequence[ChangedFile], issues: Sequence[Issue]) -> AnalysisReport:
    """
    Build the AnalysisReport for one analysis call.

    Args:
        files: Every changed file, including binary and patch-less ones
        issues: Issues in discovery order

    Returns:
        AnalysisReport with the issues kept in the order given.
    """
    return AnalysisReport(
        summary=summarize(files, issues),
        issues=tuple(issues),
        suggestions=tuple(generate_suggestions(files, issues)),
        assessment=determine_assessment(issues),
    )


def summarize(files: Sequence[ChangedFile], issues: Sequence[Issue]) -> AnalysisSummary:
    return AnalysisSummary(
        total_files=len(files),
        total_additions=sum(f.additions for f in files),
        total_deletions=sum(f.deletions for f in files),
        issues_found=len(issues),
        security_issues=sum(1 for i in issues if i.type == "security"),
    )


def generate_suggestions(files: Sequence[ChangedFile], issues: Sequence[Issue]) -> list[str]:
    suggestions = []

    if any(i.type == "security" for i in issues):
        suggestions.append(SECURITY_SUGGESTION)

    total_changes = sum(f.additions + f.deletions for f in files)
    if total_changes > LARGE_PR_CHANGES:
        suggestions.append(LARGE_PR_SUGGESTION)

    has_tests = any(
        marker in f.filename for f in files for marker in TEST_FILE_MARKERS
    )
    if not has_tests and total_changes > TESTS_EXPECTED_CHANGES:
        suggestions.append(ADD_TESTS_SUGGESTION)

    # Deduplicated, first occurrence keeps its place
    return list(dict.fromkeys(suggestions))


def determine_assessment(issues: Sequence[Issue]) -> str:
    if any(i.type == "security" for i in issues):
        return "requires-changes"
    if any(i.severity == "high" for i in issues):
        return "requires-changes"
    if len(issues) > NEEDS_WORK_ISSUE_COUNT:
        return "needs-work"
    return "approved"
