"""Suffixes automatically removed after an inserted completion."""

from dataclasses import dataclass


@dataclass
class SuffixMatcher:
    """A sorted set of suffix characters; '*' matches any suffix."""

    suffixes: str = ""
    pos: int = 0

    def add(self, *args):
        """Add suffix characters to the matcher."""
        added = "".join(args)
        if "*" in self.suffixes or "*" in added:
            self.suffixes = "*"
            return

        unique = list(self.suffixes)
        unique.extend(char for char in added if char not in self.suffixes)
        self.suffixes = "".join(sorted(unique))

    def merge(self, other):
        """Add all suffixes of another matcher to this one."""
        for char in other.suffixes:
            self.add(char)

    def matches(self, text):
        """Tell whether text ends with one of the suffixes."""
        return any(char == "*" or text.endswith(char) for char in self.suffixes)