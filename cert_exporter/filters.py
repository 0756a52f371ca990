"""Name and metadata filters applied to discovered resources."""

import functools
import logging
import re
from dataclasses import dataclass

logger = logging.getLogger("cert-exporter.filters")


class GlobPatternError(ValueError):
    """Raised for a pattern that cannot be evaluated."""


def _class_char(pattern, i):
    """One (possibly escaped) character of a class; '-' and ']' must be escaped."""
    if i >= len(pattern) or pattern[i] in "-]":
        raise GlobPatternError(f"bad character class in pattern '{pattern}'")
    if pattern[i] == "\\":
        i += 1
        if i >= len(pattern):
            raise GlobPatternError(f"trailing escape in pattern '{pattern}'")
    return pattern[i], i + 1


def _translate_class(pattern, i):
    """Translate the class opened just before ``i``; returns (regex, next index)."""
    negated = False
    if i < len(pattern) and pattern[i] in "^!":
        negated = True
        i += 1
    ranges = []
    count = 0
    while True:
        if i < len(pattern) and pattern[i] == "]" and count:
            i += 1
            break
        lo, i = _class_char(pattern, i)
        hi = lo
        if i < len(pattern) and pattern[i] == "-":
            hi, i = _class_char(pattern, i + 1)
        count += 1
        # an inverted range is legal but matches nothing
        if lo <= hi:
            ranges.append(re.escape(lo) if lo == hi else f"{re.escape(lo)}-{re.escape(hi)}")
    if not ranges:
        return ("." if negated else "(?!)"), i
    return f"[{'^' if negated else ''}{''.join(ranges)}]", i


@functools.lru_cache(maxsize=256)
def _compile(pattern):
    parts = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "[":
            regex, i = _translate_class(pattern, i + 1)
            parts.append(regex)
            continue
        if c == "\\":
            if i + 1 >= len(pattern):
                raise GlobPatternError(f"trailing escape in pattern '{pattern}'")
            parts.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if c == "*":
            parts.append("[^/]*")
        elif c == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(c))
        i += 1
    return re.compile("".join(parts), re.DOTALL)


def validate_pattern(pattern):
    """Reject patterns a shell matcher rejects: bad classes and trailing escapes."""
    _compile(pattern)


def glob_match(pattern, name):
    return _compile(pattern).fullmatch(name) is not None


class GlobFilter:
    """Ordered list of shell-style patterns; the first match wins."""

    def __init__(self, patterns, error_counter=None):
        self.patterns = list(patterns or [])
        self.error_counter = error_counter

    def __bool__(self):
        return bool(self.patterns)

    def matches(self, name):
        for pattern in self.patterns:
            try:
                if glob_match(pattern, name):
                    return True
            except GlobPatternError as e:
                logger.error(f"Error matching {pattern} to {name}: {e}")
                if self.error_counter is not None:
                    self.error_counter.inc()
        return False


def matches_annotations(annotations, selectors):
    """True when no selectors are given or any selector key is present."""
    if not selectors:
        return True
    annotations = annotations or {}
    return any(selector in annotations for selector in selectors)


def matches_type(resource_type, include_types):
    if not include_types:
        return True
    return resource_type in include_types


@dataclass(frozen=True)
class FilterDecision:
    included: bool
    excluded: bool

    @property
    def accepted(self):
        return self.included and not self.excluded


def decide(name, include_filter, exclude_filter):
    """Both filters are always evaluated so bad patterns are reported either way."""
    return FilterDecision(
        included=include_filter.matches(name),
        excluded=exclude_filter.matches(name),
    )
