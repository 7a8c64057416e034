"""
Matchers and the first-match-wins combinator.

A matcher is a named callable ``markup -> value | None``. Each field of the
metadata record owns a :class:`FieldChain` of matchers tried in priority
order; the first one returning something other than ``None`` wins.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, List, Optional, Pattern, Protocol, Sequence, Tuple, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Matcher(Protocol[T_co]):
    """A single pattern-based rule for one field."""

    name: str

    def __call__(self, markup: str) -> Optional[T_co]: ...


class RegexMatcher(Generic[T]):
    """
    Match ``pattern`` once and pass the captured group through ``transform``.

    The transform may reject the hit by returning ``None``; empty strings are
    treated as no match as well so a chain can fall through to the next rule.
    """

    def __init__(
        self,
        name: str,
        pattern: Union[str, Pattern[str]],
        *,
        group: int = 1,
        flags: int = 0,
        transform: Optional[Callable[[str], Optional[T]]] = None,
    ) -> None:
        self.name = name
        self.pattern = re.compile(pattern, flags) if isinstance(pattern, str) else pattern
        self.group = group
        self.transform = transform

    def __call__(self, markup: str) -> Optional[T]:
        match = self.pattern.search(markup)
        if match is None:
            return None
        raw = match.group(self.group)
        value = self.transform(raw) if self.transform else raw
        if value is None or value == "":
            return None
        return value  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"RegexMatcher({self.name!r})"


class FunctionMatcher(Generic[T]):
    """Wrap a plain function as a named matcher."""

    def __init__(self, name: str, func: Callable[[str], Optional[T]]) -> None:
        self.name = name
        self.func = func

    def __call__(self, markup: str) -> Optional[T]:
        return self.func(markup)

    def __repr__(self) -> str:
        return f"FunctionMatcher({self.name!r})"


def first_match(matchers: Iterable[Matcher[T]], markup: str) -> Tuple[Optional[T], Optional[str]]:
    """Run matchers in order and return ``(value, matcher_name)`` of the first hit."""
    for matcher in matchers:
        value = matcher(markup)
        if value is not None:
            return value, matcher.name
    return None, None


@dataclass(frozen=True)
class FieldChain(Generic[T]):
    """Prioritized matchers for one field."""

    field: str
    matchers: Tuple[Matcher[T], ...]

    @property
    def names(self) -> List[str]:
        return [m.name for m in self.matchers]

    def resolve(self, markup: str) -> Optional[T]:
        value, winner = first_match(self.matchers, markup)
        if winner is None:
            logger.debug("No matcher hit for field %s", self.field)
        else:
            logger.debug("Field %s resolved by %s", self.field, winner)
        return value

    def reordered(self, preferred: Sequence[str]) -> "FieldChain[T]":
        """
        Move the named matchers to the front, in the given order.

        Unknown names are ignored; the remaining matchers keep their order.
        """
        by_name = {m.name: m for m in self.matchers}
        head = [by_name[name] for name in dict.fromkeys(preferred) if name in by_name]
        tail = [m for m in self.matchers if m not in head]
        return FieldChain(self.field, tuple(head + tail))


def collect_all(patterns: Sequence[Pattern[str]], markup: str, *, exclude: Sequence[str] = ()) -> List[str]:
    """
    Collect group 1 of every match of every pattern, in order of appearance.

    A value is kept once (first occurrence) and skipped if it contains any of
    the ``exclude`` markers.
    """
    hits: List[Tuple[int, str]] = []
    for pattern in patterns:
        hits.extend((m.start(), m.group(1)) for m in pattern.finditer(markup))
    hits.sort(key=lambda hit: hit[0])

    collected: dict[str, None] = {}
    for _, value in hits:
        if value in collected or any(marker in value for marker in exclude):
            continue
        collected[value] = None
    return list(collected)
