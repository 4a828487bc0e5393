"""
Pattern Scanner — GitHub PR Review

PURPOSE:
    Classify a single added line against two rule tables and return one
    Issue per matching rule:

    1. SECURITY_RULES   -> type "security", severity "high"
    2. CODE_SMELL_RULES -> type "warning",  severity "medium"

    Every rule is tested on its own. A line that holds both a hardcoded
    token and a console.log produces two issues, security first.

DESIGN DECISIONS:
    - The rules are data (compiled regex + message), not code. Adding a rule
      means adding a row.
    - Only re.search() is used, so a rule never carries state from one line
      to the next.
    - This is text matching on diff lines, not parsing. A pattern inside a
      string literal or comment still matches.
"""

import re
from typing import NamedTuple

from pr_review.models import Issue


class Rule(NamedTuple):
    pattern: re.Pattern
    message: str


class RuleSet(NamedTuple):
    type: str
    severity: str
    rules: tuple


SECURITY_RULES = RuleSet(
    type="security",
    severity="high",
    rules=(
        Rule(re.compile(r"""api[_-]?key\s*[:=]\s*["'][^"']+["']""", re.IGNORECASE),
             "Potential API key exposure"),
        Rule(re.compile(r"""password\s*[:=]\s*["'][^"']+["']""", re.IGNORECASE),
             "Hardcoded password detected"),
        Rule(re.compile(r"""(secret|token)\s*[:=]\s*["'][^"']+["']""", re.IGNORECASE),
             "Potential secret exposure"),
        Rule(re.compile(r"eval\s*\("), "Dangerous eval() usage"),
        Rule(re.compile(r"innerHTML\s*="), "Potential XSS vulnerability"),
    ),
)

CODE_SMELL_RULES = RuleSet(
    type="warning",
    severity="medium",
    rules=(
        Rule(re.compile(r"console\.(log|error|warn|debug)"),
             "Console statement left in code"),
        Rule(re.compile(r"debugger"), "Debugger statement found"),
        Rule(re.compile(r":\s*any\s*[,;)]"), 'TypeScript "any" type used'),
        Rule(re.compile(r"TODO|FIXME|HACK", re.IGNORECASE),
             "TODO/FIXME comment found"),
    ),
)

RULE_SETS = (SECURITY_RULES, CODE_SMELL_RULES)


def scan_line(content: str, filename: str, line: int) -> list[Issue]:
    """
    Run every rule of every rule set against one added line.

    Args:
        content: The line text with the leading "+" already stripped
        filename: File the line belongs to
        line: 1-based line number on the post-change side

    Returns:
        Issues in rule-table order (security rules, then code smells).
        Empty list when nothing matches.
    """
    issues = []
    for rule_set in RULE_SETS:
        for rule in rule_set.rules:
            if rule.pattern.search(content):
                issues.append(Issue(
                    type=rule_set.type,
                    severity=rule_set.severity,
                    file=filename,
                    line=line,
                    message=rule.message,
                ))
    return issues
