"""Hint and usage messages shown below the input line."""

import re
from dataclasses import dataclass, field


@dataclass
class Messages:
    """An unordered set of messages, listed in sorted order."""

    messages: set = field(default_factory=set)

    def is_empty(self):
        """Tell whether there are no messages."""
        return not self.messages

    def add(self, message):
        """Add a message."""
        self.messages.add(message)

    def get(self):
        """Return the messages, sorted."""
        return sorted(self.messages)

    def suppress(self, *args):
        """Remove messages matching any of the given regular expressions.

        Raises re.error if an expression does not compile.
        """
        for expression in args:
            pattern = re.compile(expression)
            self.messages = {m for m in self.messages if not pattern.search(m)}

    def merge(self, other):
        """Add all messages of another set."""
        self.messages.update(other.messages)