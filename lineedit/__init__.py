"""Building blocks for a terminal line editor: inputrc parsing, cursor, completion values and keys."""

__version__ = "0.1.0"

__all__ = ["cursor", "inputrc", "keys", "messages", "suffix", "values"]