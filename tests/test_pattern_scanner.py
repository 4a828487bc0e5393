import pytest

from pr_review.pattern_scanner import CODE_SMELL_RULES, SECURITY_RULES, scan_line


def _messages(issues):
    return [i.message for i in issues]


class TestSecurityRules:
    """Each security rule produces a high-severity security issue."""

    @pytest.mark.parametrize(
        "content, message",
        [
            ('const apiKey = "abc123";', "Potential API key exposure"),
            ("API_KEY: 'sk-live'", "Potential API key exposure"),
            ('PASSWORD = "hunter2"', "Hardcoded password detected"),
            ('auth_token = "xyz"', "Potential secret exposure"),
            ("client_secret: 'shh'", "Potential secret exposure"),
            ("result = eval (userInput)", "Dangerous eval() usage"),
            ("el.innerHTML = html;", "Potential XSS vulnerability"),
        ],
    )
    def test_rule_matches(self, content, message):
        issues = scan_line(content, "app.js", 4)
        assert message in _messages(issues)
        issue = next(i for i in issues if i.message == message)
        assert issue.type == "security"
        assert issue.severity == "high"
        assert issue.file == "app.js"
        assert issue.line == 4

    def test_assignment_from_variable_is_not_flagged(self):
        assert scan_line("const apiKey = process.env.API_KEY;", "a.js", 1) == []

    def test_eval_and_inner_html_are_case_sensitive(self):
        assert scan_line("EVAL(x); el.INNERHTML = y;", "a.js", 1) == []


class TestCodeSmellRules:

    @pytest.mark.parametrize(
        "content, message",
        [
            ("console.log('x');", "Console statement left in code"),
            ("console.warn(err)", "Console statement left in code"),
            ("debugger;", "Debugger statement found"),
            ("function f(x: any) {", 'TypeScript "any" type used'),
            ("let y: any;", 'TypeScript "any" type used'),
            ("// todo: clean up", "TODO/FIXME comment found"),
            ("# HACK around upstream bug", "TODO/FIXME comment found"),
        ],
    )
    def test_rule_matches(self, content, message):
        issues = scan_line(content, "app.ts", 9)
        assert _messages(issues) == [message]
        assert issues[0].type == "warning"
        assert issues[0].severity == "medium"

    def test_console_info_is_not_flagged(self):
        assert scan_line("console.info('hi')", "a.js", 1) == []

    def test_any_inside_word_is_not_flagged(self):
        assert scan_line("const company = anything;", "a.ts", 1) == []


def test_line_matching_security_and_smell_yields_both_in_order():
    issues = scan_line('console.log(eval("1+1"))', "a.js", 3)
    assert _messages(issues) == ["Dangerous eval() usage", "Console statement left in code"]
    assert [i.type for i in issues] == ["security", "warning"]


def test_all_matching_rules_fire():
    issues = scan_line('token = "t"; password = "p"  // TODO', "a.py", 1)
    assert _messages(issues) == [
        "Hardcoded password detected",
        "Potential secret exposure",
        "TODO/FIXME comment found",
    ]


def test_scanning_is_repeatable():
    # Same line twice must give the same result (no stateful regex cursor)
    first = scan_line('apiKey = "a"', "a.js", 1)
    second = scan_line('apiKey = "a"', "a.js", 1)
    assert first == second
    assert len(first) == 1


def test_clean_line():
    assert scan_line("return a + b;", "a.js", 1) == []


def test_rule_tables():
    assert (SECURITY_RULES.type, SECURITY_RULES.severity) == ("security", "high")
    assert (CODE_SMELL_RULES.type, CODE_SMELL_RULES.severity) == ("warning", "medium")
    assert len(SECURITY_RULES.rules) == 5
    assert len(CODE_SMELL_RULES.rules) == 4
