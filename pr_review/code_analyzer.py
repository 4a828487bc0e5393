"""
Code Analyzer — GitHub PR Review

PURPOSE:
    The single entry point for analyzing a pull request's changed files.
    It wires the pure analysis stages together:

      1. diff_line_mapper.iter_added_lines() -> (content, file, line) per added line
      2. pattern_scanner.scan_line()         -> security / code-smell issues
      3. file_checker.check_file()           -> file-level issues (size)
      4. report_aggregator.build_report()    -> summary, suggestions, assessment

CALLED BY:
    mcp_server.analyze_pr_code() — with the files fetched from GitHub.
    Anything else that can produce the same file shape (a local diff, test
    fixtures) can call it too.

DESIGN DECISIONS:
    - No I/O and no state between calls. Same files in, same report out.
    - Binary files (by extension) are counted in the summary but produce no
      issues at all, not even the file-level size check.
    - A file without a patch (binary or too large for GitHub to inline) skips
      the line scan but still gets the file-level check.
"""

from typing import Any, Iterable, Mapping, Union

from pr_review.diff_line_mapper import is_binary_file, iter_added_lines
from pr_review.file_checker import check_file
from pr_review.logging_config import get_logger
from pr_review.models import AnalysisReport, ChangedFile
from pr_review.pattern_scanner import scan_line
from pr_review.report_aggregator import build_report

logger = get_logger(__name__)


FileInput = Union[ChangedFile, Mapping[str, Any]]


def analyze_files(files: Iterable[FileInput]) -> AnalysisReport:
    """
    Analyze a PR's changed files and build the report.

    Args:
        files: ChangedFile instances, or mappings with the same keys as the
               GitHub files endpoint (filename, status, additions, deletions,
               patch). Order is preserved in the issue list.

    Returns:
        AnalysisReport. An empty file list gives an all-zero summary and an
        "approved" assessment.
    """
    changed_files = [
        f if isinstance(f, ChangedFile) else ChangedFile.from_dict(f)
        for f in files
    ]

    issues = []
    for changed_file in changed_files:
        if is_binary_file(changed_file.filename):
            logger.debug("Skipping binary file %s", changed_file.filename)
            continue

        file_issue_count = len(issues)
        for added in iter_added_lines(changed_file.patch, changed_file.filename):
            issues.extend(scan_line(added.content, added.filename, added.line))
        issues.extend(check_file(changed_file))

        logger.debug(
            "Analyzed %s: %d issue(s)",
            changed_file.filename, len(issues) - file_issue_count,
        )

    report = build_report(changed_files, issues)
    logger.info(
        "Analyzed %d file(s): %d issue(s), assessment=%s",
        report.summary.total_files, report.summary.issues_found, report.assessment,
    )
    return report
