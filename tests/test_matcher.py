import re

import pytest

from streamfetch.registry.inputs import Input, Source, Url
from streamfetch.registry.matcher import (
    Matcher,
    PrefixMatcher,
    Rule,
    StringMatcher,
    UrlMatcher,
    http_regex,
)


def test_string_matcher_equality():
    assert Matcher("test").is_match("test")
    assert not Matcher("test").is_match("test2")


def test_regex_matcher_searches():
    assert Matcher(re.compile("test")).is_match("test2")
    assert not Matcher(re.compile("^test$")).is_match("test2")


def test_http_regex():
    pattern = http_regex()
    assert pattern.search("http")
    assert pattern.search("https")
    assert pattern.search("ftp") is None


def test_prefix_strips_only_leading_prefix():
    matcher = Rule.prefix("custom://").matcher
    assert isinstance(matcher, PrefixMatcher)
    assert matcher.match_input("custom://http://test") == "http://test"
    assert matcher.match_input("http://custom://test") is None


def test_prefix_matches_parsed():
    matcher = PrefixMatcher("custom://")
    assert matcher.matches_parsed(Input(prefix="custom://", source=Source("test")))
    assert not matcher.matches_parsed(Input(prefix=None, source=Source("test")))


def test_any_string():
    matcher = Rule.any_string().matcher
    assert isinstance(matcher, StringMatcher)
    assert matcher.matches_input("")
    assert matcher.matches_input("anything")


def test_specific_string():
    matcher = Rule.string("test").matcher
    assert matcher.matches_input("test")
    assert not matcher.matches_input("test2")


def test_any_url():
    matcher = Rule.any_url().matcher
    assert isinstance(matcher, UrlMatcher)
    assert matcher.matches_input(Url.parse("custom://test"))


def test_url_scheme_and_domain():
    matcher = Rule.url("http", "test").matcher
    assert matcher.matches_input(Url.parse("http://test"))
    assert not matcher.matches_input(Url.parse("https://test"))


def test_domain_rule_needs_domain():
    matcher = Rule.url_domain("127.0.0.1").matcher
    assert not matcher.matches_input(Url.parse("http://127.0.0.1/"))


def test_http_domain():
    matcher = Rule.http_domain(re.compile(r"^(www\.)?test\.com$")).matcher
    assert matcher.matches_input(Url.parse("https://www.test.com"))
    assert not matcher.matches_input(Url.parse("ftp://test.com"))
    assert not matcher.matches_input(Url.parse("http://www2.test.com"))


def test_any_http():
    matcher = Rule.any_http().matcher
    assert matcher.matches_input(Url.parse("http://test"))
    assert not matcher.matches_input(Url.parse("file://test"))


def test_invalid_matcher_type():
    with pytest.raises(TypeError):
        Rule.string(42)