"""Completion candidates and the values a completer returns."""

from dataclasses import dataclass, field

from lineedit.messages import Messages
from lineedit.suffix import SuffixMatcher


@dataclass
class Candidate:
    """One completion candidate."""

    value: str = ""
    display: str = ""
    description: str = ""
    style: str = ""
    tag: str = ""
    no_space: SuffixMatcher = field(default_factory=SuffixMatcher, repr=False)
    display_len: int = field(default=0, repr=False)
    desc_len: int = field(default=0, repr=False)


@dataclass
class Values:
    """Completion candidates with their messages and display settings."""

    values: list = field(default_factory=list)
    messages: Messages = field(default_factory=Messages)
    no_space: SuffixMatcher = field(default_factory=SuffixMatcher)
    usage: str = ""
    list_long: dict = field(default_factory=dict)
    no_sort: dict = field(default_factory=dict)
    list_sep: dict = field(default_factory=dict)
    pad: dict = field(default_factory=dict)
    escapes: dict = field(default_factory=dict)
    prefix: str = ""
    suffix: str = ""

    def merge(self, other):
        """Merge usage, suffixes, messages and long-list tags of other into these values."""
        if other.usage:
            self.usage = other.usage

        self.no_space.merge(other.no_space)
        self.messages.merge(other.messages)

        for tag in other.list_long:
            self.list_long.setdefault(tag, True)


def add_raw(candidates):
    """Build completion values from a list of candidates."""
    return Values(values=list(candidates))


def filter_values(candidates, *args):
    """Return the candidates whose value is none of the given ones."""
    removed = set(args)
    return [c for c in candidates if c.value not in removed]


def each_tag(candidates):
    """Yield (tag, candidates) pairs, tags in order of first appearance."""
    groups = {}
    for candidate in candidates:
        groups.setdefault(candidate.tag, []).append(candidate)
    yield from groups.items()


def filter_prefix(candidates, prefix, match_case):
    """Return the candidates whose value starts with prefix.

    When match_case is false the comparison ignores case.
    """
    if prefix == "":
        return candidates

    if not match_case:
        prefix = prefix.lower()
        return [c for c in candidates if c.value.lower().startswith(prefix)]

    return [c for c in candidates if c.value.startswith(prefix)]


def sort_candidates(candidates):
    """Return the candidates stably sorted by lower-cased value."""
    return sorted(candidates, key=lambda c: c.value.lower())