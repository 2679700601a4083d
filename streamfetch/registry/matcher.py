"""Rules that decide whether an input matches a registry entry."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .inputs import Input, Url


@dataclass(frozen=True)
class Matcher:
    """Matches strings with a regular expression search or plain equality."""

    pattern: str | re.Pattern[str]

    def is_match(self, search: str) -> bool:
        if isinstance(self.pattern, re.Pattern):
            return self.pattern.search(search) is not None
        return self.pattern == search


def _as_matcher(value: Matcher | str | re.Pattern[str]) -> Matcher:
    if isinstance(value, Matcher):
        return value
    if isinstance(value, (str, re.Pattern)):
        return Matcher(value)
    raise TypeError(f"cannot match with {type(value).__name__}")


def _matches(matcher: Matcher | None, value: str | None) -> bool:
    if matcher is None:
        return True
    return value is not None and matcher.is_match(value)


def http_regex() -> re.Pattern[str]:
    """A regex matching the ``http`` and ``https`` URL schemes."""
    return re.compile(r"^https?$")


@dataclass(frozen=True)
class PrefixMatcher:
    """Matches inputs starting with a prefix."""

    prefix: str

    def match_input(self, input: str) -> str | None:
        """Return the input with the prefix removed, or ``None`` if it is absent."""
        if input.startswith(self.prefix):
            return input[len(self.prefix) :]
        return None

    def matches_parsed(self, input: Input) -> bool:
        return input.prefix == self.prefix


@dataclass(frozen=True)
class StringMatcher:
    """Matches plain (non-URL) strings; ``None`` matches any string."""

    match: Matcher | None = None

    def matches_input(self, input: str) -> bool:
        return _matches(self.match, input)


@dataclass(frozen=True)
class UrlMatcher:
    """Matches URLs by scheme and domain; ``None`` matches anything."""

    scheme: Matcher | None = None
    domain: Matcher | None = None

    def matches_input(self, input: Url) -> bool:
        return _matches(self.scheme, input.scheme) and _matches(self.domain, input.domain)


MatcherLike = Matcher | str | re.Pattern


@dataclass(frozen=True)
class Rule:
    """Checks whether some input matches the given criteria."""

    matcher: PrefixMatcher | StringMatcher | UrlMatcher

    @staticmethod
    def prefix(prefix: str) -> Rule:
        """Match a leading substring, such as a custom protocol."""
        return Rule(PrefixMatcher(prefix))

    @staticmethod
    def string(s: MatcherLike) -> Rule:
        """Match specific string (non-URL) inputs."""
        return Rule(StringMatcher(_as_matcher(s)))

    @staticmethod
    def any_string() -> Rule:
        """Match any string (non-URL) input."""
        return Rule(StringMatcher())

    @staticmethod
    def any_url() -> Rule:
        """Match any URL."""
        return Rule(UrlMatcher())

    @staticmethod
    def url_scheme(scheme: MatcherLike) -> Rule:
        """Match a URL scheme."""
        return Rule(UrlMatcher(scheme=_as_matcher(scheme)))

    @staticmethod
    def any_http() -> Rule:
        """Match any HTTP or HTTPS URL."""
        return Rule(UrlMatcher(scheme=Matcher(http_regex())))

    @staticmethod
    def url_domain(domain: MatcherLike) -> Rule:
        """Match a URL domain."""
        return Rule(UrlMatcher(domain=_as_matcher(domain)))

    @staticmethod
    def http_domain(domain: MatcherLike) -> Rule:
        """Match a domain of any HTTP or HTTPS URL."""
        return Rule(UrlMatcher(scheme=Matcher(http_regex()), domain=_as_matcher(domain)))

    @staticmethod
    def url(scheme: MatcherLike, domain: MatcherLike) -> Rule:
        """Match a URL scheme and domain."""
        return Rule(UrlMatcher(scheme=_as_matcher(scheme), domain=_as_matcher(domain)))