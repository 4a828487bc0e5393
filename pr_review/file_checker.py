"""File-level checks that look at a file's change stats instead of its lines."""

from pr_review.models import ChangedFile, Issue


LARGE_FILE_ADDITIONS = 300


def check_file(changed_file: ChangedFile) -> list[Issue]:
    """Return the file-level issues for one changed file (currently only the size check)."""
    issues = []

    if changed_file.additions > LARGE_FILE_ADDITIONS:
        issues.append(Issue(
            type="suggestion",
            severity="medium",
            file=changed_file.filename,
            message=f"Large file change (>{LARGE_FILE_ADDITIONS} lines)",
            suggestion="Consider breaking into smaller commits",
        ))

    return issues
