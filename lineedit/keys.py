"""Stack of input keys read from the terminal or fed by macros."""

import re
import threading

_CURSOR_POS = re.compile(rb"\x1b\[([0-9]+);([0-9]+)R")


def extract_cursor_pos(data):
    """Split terminal input into a cursor position report and the remaining keys.

    Returns (cursor, remain). cursor is the last report found (empty if there
    is none), and remain is data with every report removed.
    """
    data = bytes(data)
    reports = [match.group(0) for match in _CURSOR_POS.finditer(data)]
    if not reports:
        return b"", data
    return reports[-1], _CURSOR_POS.sub(b"", data)


def _to_bytes(items):
    """Join keys given as ints, bytes or strings into one bytes object."""
    out = bytearray()
    for item in items:
        if isinstance(item, int):
            out.append(item)
        elif isinstance(item, str):
            out.extend(item.encode("utf-8"))
        else:
            out.extend(item)
    return bytes(out)


def _decode(data):
    return bytes(data).decode("utf-8", errors="replace")


class Keys:
    """Keys read and waiting to be dispatched, and keys matched by a command.

    Input keys are kept as bytes; keys fed by macros are kept as characters
    and come after the input keys. Popped keys are returned as byte values,
    or None when no key is left.
    """

    def __init__(self):
        self.buf = b""
        self.matched = ""
        self.macro = ""
        self.must_wait = False
        self.cursor_reports = []
        self._lock = threading.RLock()

    def __repr__(self):
        return f"Keys(buf={self.buf!r}, macro={self.macro!r}, matched={self.matched!r})"

    def push_input(self, data):
        """Add keys read from the terminal to the stack.

        Cursor position reports are stripped from data and recorded in
        cursor_reports; the last one found is returned (empty if none).
        """
        cursor, remain = extract_cursor_pos(data)
        with self._lock:
            if cursor:
                self.cursor_reports.append(cursor)
            self.buf += remain
        return cursor

    def _take(self):
        with self._lock:
            if self.buf:
                key = self.buf[0]
                self.buf = self.buf[1:]
                return key
            if self.macro:
                key = ord(self.macro[0]) & 0xFF
                self.macro = self.macro[1:]
                return key
            return None

    def pop(self):
        """Remove the first key and record it among the matched keys."""
        key = self._take()
        if key is not None:
            self.matched += chr(key)
        return key

    def peek(self):
        """Return the first key without removing it."""
        with self._lock:
            if self.buf:
                return self.buf[0]
            if self.macro:
                return ord(self.macro[0]) & 0xFF
            return None

    def pop_force(self):
        """Remove the first key without recording it as matched."""
        key = self._take()
        if key is not None:
            self.must_wait = False
        return key

    def matched_keys(self, matched, *args):
        """Record the keys that were evaluated against commands.

        Any further keys given are put back on top of the stack.
        """
        with self._lock:
            matched = _to_bytes([matched])
            if matched:
                self.matched = _decode(matched)
            if args:
                self.buf = _to_bytes(args) + self.buf
            self.must_wait = False

    def matched_prefix(self, *args):
        """Put back keys that only matched binds by prefix.

        If the stack held no other keys, more input must be read before
        dispatching again.
        """
        prefix = _to_bytes(args)
        if not prefix:
            return
        with self._lock:
            self.must_wait = not self.buf
            self.buf = prefix + self.buf
            self.matched = _decode(prefix)

    def macro_keys(self):
        """Return the keys that fully matched a command, for macro recording."""
        if self.must_wait:
            return ""
        return self.matched

    def flush_used(self):
        """Forget the keys that matched a command."""
        with self._lock:
            self.matched = ""

    def caller(self):
        """Return the keys that matched the command being run."""
        return self.matched

    def feed(self, begin, *args):
        """Add keys to the macro stack, on top of it if begin is true."""
        keys = "".join(args)
        if not keys:
            return
        with self._lock:
            if begin:
                self.macro = keys + self.macro
            else:
                self.macro += keys