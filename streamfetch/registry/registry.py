"""A registry that routes inputs to handlers according to rules."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from .inputs import Input, Source
from .matcher import PrefixMatcher, Rule, StringMatcher, UrlMatcher


class RegistryEntry(ABC):
    """An entry a :class:`Registry` chooses when one of its rules matches."""

    @abstractmethod
    def priority(self) -> int:
        """Evaluation order relative to other entries; lower numbers come first."""

    @abstractmethod
    def rules(self) -> Sequence[Rule]:
        """The rules that cause this entry to be chosen."""

    @abstractmethod
    async def handler(self, input: Input) -> Any:
        """Run when this entry is selected."""


def _source_matches(rules: Sequence[Rule], source: Source) -> bool:
    url = source.try_into_url()
    if url is not None:
        return any(
            isinstance(rule.matcher, UrlMatcher) and rule.matcher.matches_input(url)
            for rule in rules
        )
    text = source.into_string()
    return any(
        isinstance(rule.matcher, StringMatcher) and rule.matcher.matches_input(text)
        for rule in rules
    )


class Registry:
    """A collection of registry entries, kept in priority order."""

    def __init__(self) -> None:
        self._entries: list[RegistryEntry] = []

    def entry(self, entry: RegistryEntry) -> Registry:
        """Add an entry and return the registry for chaining."""
        self._entries.append(entry)
        self._entries.sort(key=lambda item: item.priority())
        return self

    async def find_match(self, input: str | Input) -> Any:
        """Run the handler of the first matching entry and return its result.

        Returns ``None`` when no entry matches.
        """
        if isinstance(input, Input):
            raw = None
            parsed = input
        else:
            raw = str(input)
            parsed = Input(prefix=None, source=Source.from_string(raw))

        for entry in self._entries:
            rules = entry.rules()
            for rule in rules:
                matcher = rule.matcher
                if not isinstance(matcher, PrefixMatcher):
                    continue
                if raw is not None:
                    remainder = matcher.match_input(raw)
                    if remainder is not None:
                        return await entry.handler(
                            Input(prefix=matcher.prefix, source=Source.from_string(remainder))
                        )
                elif matcher.matches_parsed(parsed):
                    return await entry.handler(parsed)
            if _source_matches(rules, parsed.source):
                return await entry.handler(parsed)
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Registry(entries={len(self._entries)})"