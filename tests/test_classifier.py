import pytest

from clipvault.models import ContentType
from clipvault.utils import classify


@pytest.mark.parametrize(
    "content, expected",
    [
        ('  {"k":1}', ContentType.JSON),
        ("[1, 2, 3]", ContentType.JSON),
        ("\n\t[", ContentType.JSON),
        ("https://x.test", ContentType.URL),
        ("http://example.com/path?q=1", ContentType.URL),
        ("line1\nline2", ContentType.MULTILINE),
        ("line1\r\nline2", ContentType.MULTILINE),
        ("hello", ContentType.TEXT),
        ("", ContentType.TEXT),
        ("trailing newline\n", ContentType.TEXT),
    ],
)
def test_classify_examples(content, expected):
    assert classify(content) is expected


def test_json_rule_wins_over_multiline():
    assert classify('{\n  "a": 1\n}') is ContentType.JSON


def test_url_rule_wins_over_multiline():
    assert classify("https://x.test\nsecond line") is ContentType.URL


def test_url_prefix_is_not_trimmed():
    # only the json rule ignores leading whitespace
    assert classify("  https://x.test") is ContentType.TEXT


def test_url_scheme_must_be_exact():
    assert classify("ftp://x.test") is ContentType.TEXT
    assert classify("HTTPS://x.test") is ContentType.TEXT


def test_classify_is_deterministic():
    samples = ["a", "a\nb", "{", "https://a"]
    assert [classify(s) for s in samples] == [classify(s) for s in samples]


@pytest.mark.parametrize(
    "content",
    ["a\rb", "a\x0cb", "a\x0bb", "a\u2028b", "a\x1cb", "a\x85b"],
)
def test_only_newline_separates_lines(content):
    assert classify(content) is ContentType.TEXT


def test_blank_lines_count_as_lines():
    assert classify("\n\n") is ContentType.MULTILINE
    assert classify("a\n\n") is ContentType.MULTILINE
