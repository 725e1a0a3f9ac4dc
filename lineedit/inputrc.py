"""Parsing of readline inputrc configuration files."""

import enum
import os
import re
from pathlib import Path

EMACS = "emacs"

# Special characters recognised in key names and escape sequences.
ALERT = "\a"
BACKSPACE = "\b"
DELETE = "\x7f"
ESC = "\x1b"
FORMFEED = "\f"
NEWLINE = "\n"
RETURN = "\r"
SPACE = " "
TAB = "\t"
VERTICAL = "\v"

CONTROL = 0x1F
META = 0x80

_NUL = "\0"
_META_SEQ_LENGTH = 6
_SET_DIRECTIVE_LEN = 4
_LATIN1_SPACES = "\t\n\v\f\r \x85\xa0"
_INTEGER = re.compile(r"[+-]?[0-9]+")

_VALID_KEYMAPS = frozenset({
    "emacs", "emacs-standard", "emacs-meta", "emacs-ctlx",
    "vi", "vi-move", "vi-command", "vi-insert",
})


class InputrcError(ValueError):
    """Base class of the errors found in inputrc statements."""


class BindMissingClosingQuoteError(InputrcError):
    def __init__(self):
        super().__init__("bind missing closing quote")


class MacroMissingClosingQuoteError(InputrcError):
    def __init__(self):
        super().__init__("macro missing closing quote")


class MissingColonError(InputrcError):
    def __init__(self):
        super().__init__("missing colon")


class InvalidKeymapError(InputrcError):
    def __init__(self):
        super().__init__("invalid keymap")


class InvalidEditingModeError(InputrcError):
    def __init__(self):
        super().__init__("invalid editing mode")


class ElseWithoutMatchingIfError(InputrcError):
    def __init__(self):
        super().__init__("$else without matching $if")


class EndifWithoutMatchingIfError(InputrcError):
    def __init__(self):
        super().__init__("$endif without matching $if")


class UnknownModifierError(InputrcError):
    def __init__(self):
        super().__init__("unknown modifier")


class Token(enum.IntEnum):
    """Kind of an inputrc statement."""

    NONE = 0
    BIND = 1
    BIND_MACRO = 2
    SET = 3
    CONSTRUCT = 4

    def __str__(self):
        return {
            Token.NONE: "none",
            Token.BIND: "bind",
            Token.BIND_MACRO: "bind-macro",
            Token.SET: "set",
            Token.CONSTRUCT: "construct",
        }[self]


class ParseError(Exception):
    """An error found on a given line of an inputrc file."""

    def __init__(self, name, line, text, err):
        super().__init__(name, line, text, err)
        self.name = name
        self.line = line
        self.text = text
        self.err = err
        self.__cause__ = err

    def __str__(self):
        where = f" {self.name}:" if self.name else ""
        return f"inputrc:{where} line {self.line}: {self.text}: {self.err}"


class Handler:
    """Receives the binds, variables and constructs found by the parser.

    This base handler keeps everything in memory; subclass it to apply
    the configuration elsewhere.
    """

    def __init__(self, variables=None):
        self.vars = dict(variables or {})
        self.binds = {}
        self.constructs = []

    def bind(self, keymap, sequence, action, macro):
        """Bind a key sequence to an action (or a macro) in a keymap."""
        self.binds.setdefault(keymap, {})[sequence] = (action, macro)

    def set(self, name, value):
        """Set a variable."""
        self.vars[name] = value

    def get(self, name):
        """Return the current value of a variable, or None if unknown."""
        return self.vars.get(name)

    def do(self, keyword, value):
        """Handle a construct the parser does not know itself."""
        self.constructs.append((keyword, value))

    def read_file(self, path):
        """Return the contents of an included file as bytes."""
        with open(path, "rb") as fh:
            return fh.read()


def _is_space(char):
    return char in _LATIN1_SPACES or (char > "\xff" and char.isspace())


def _is_control(char):
    code = ord(char)
    return code < 0x20 or 0x7F <= code <= 0x9F


def _grab(seq, i, end):
    return seq[i] if i < end else _NUL


def _atoi(text):
    if _INTEGER.fullmatch(text) is None:
        return None
    return int(text)


def _find_non_space(seq, i, end):
    while i < end and _is_space(seq[i]):
        i += 1
    return i


def _find_end(seq, i, end):
    """Find the end of the symbol at i (next '#', space or control character)."""
    char = _grab(seq, i + 1, end)
    while i < end and char != "#" and not _is_space(char) and not _is_control(char):
        char = _grab(seq, i + 1, end)
        i += 1
    return i


def _find_string_end(seq, pos, end):
    """Find the position after the closing quote of the string at pos."""
    if pos >= end:
        return pos, False
    quote = seq[pos]
    pos += 1
    while pos < end:
        char = seq[pos]
        if char == "\\":
            pos += 2
            continue
        if char == quote:
            return pos + 1, True
        pos += 1
    return pos, False


def encontrol(char):
    """Encode a Control-char key."""
    upper = char.upper()
    if len(upper) != 1:
        upper = char
    return chr(ord(upper) & CONTROL)


def enmeta(char):
    """Encode a Meta-char key."""
    return chr(ord(char) | META)


def _oct_digit(char):
    return "0" <= char <= "7"


def _hex_digit(char):
    return "0" <= char <= "9" or "A" <= char <= "F" or "a" <= char <= "f"


def _hex_val(char):
    return int(char, 16)


_SIMPLE_ESCAPES = {
    "a": ALERT, "b": BACKSPACE, "d": DELETE, "e": ESC, "f": FORMFEED,
    "n": NEWLINE, "r": RETURN, "t": TAB, "v": VERTICAL,
    "\\": "\\", '"': '"', "'": "'",
}


def _unescape_runes(seq, i, end):
    """Decode the escaped key sequence seq[i:end]."""
    if len(seq) == 1:
        return seq

    out = []
    while i < end:
        char0 = seq[i]
        if char0 != "\\":
            out.append(char0)
            i += 1
            continue

        c1, c2, c3, c4, c5 = (_grab(seq, i + k, end) for k in range(1, 6))
        if c1 in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[c1])
            step = 2
        elif c1 == "x" and _hex_digit(c2) and _hex_digit(c3):
            out.append(chr(_hex_val(c2) << 4 | _hex_val(c3)))
            step = 3
        elif c1 == "x" and _hex_digit(c2):
            out.append(chr(_hex_val(c2)))
            step = 2
        elif _oct_digit(c1) and _oct_digit(c2) and _oct_digit(c3):
            out.append(chr(int(c1 + c2 + c3, 8)))
            step = 4
        elif _oct_digit(c1) and _oct_digit(c2):
            out.append(chr(int(c1 + c2, 8)))
            step = 3
        elif _oct_digit(c1):
            out.append(chr(int(c1, 8)))
            step = 2
        elif ((c1 == "C" and c4 == "M") or (c1 == "M" and c4 == "C")) \
                and c2 == "-" and c3 == "\\" and c5 == "-":
            c6 = _grab(seq, i + _META_SEQ_LENGTH, end)
            if c6 != _NUL:
                out.append(ESC + encontrol(c6))
            step = 7
        elif c1 == "C" and c2 == "-":
            out.append(DELETE if c3 == "?" else encontrol(c3))
            step = 4
        elif c1 == "M" and c2 == "-":
            if c3 == _NUL:
                out.append(ESC)
                step = 3
            else:
                out.append(enmeta(c3))
                step = 4
        else:
            out.append(c1)
            step = 2
        i += step

    return "".join(out)


def unescape(text):
    """Decode an escaped inputrc key sequence or macro string."""
    return _unescape_runes(text, 0, len(text))


_NAMED_KEYS = {
    "delete": DELETE, "del": DELETE, "rubout": DELETE,
    "escape": ESC, "esc": ESC,
    "newline": NEWLINE, "linefeed": NEWLINE, "lfd": NEWLINE,
    "return": RETURN, "ret": RETURN,
    "tab": TAB,
    "space": SPACE, "spc": SPACE,
    "formfeed": FORMFEED, "ffd": FORMFEED,
    "vertical": VERTICAL, "vrt": VERTICAL,
}


def _decode_key(seq, pos, end):
    """Decode the named key at pos; return the key and the position after it."""
    start = pos
    char = _grab(seq, pos + 1, end)
    while pos < end and char not in (":", "#") and not _is_space(char) and not _is_control(char):
        char = _grab(seq, pos + 1, end)
        pos += 1

    val = seq[start:pos].lower()
    meta = control = False

    idx = val.find("-")
    while idx != -1:
        modifier = val[:idx]
        if modifier in ("control", "ctrl", "c"):
            control = True
        elif modifier in ("meta", "m"):
            meta = True
        else:
            raise UnknownModifierError()
        val = val[idx + 1:]
        idx = val.find("-")

    if val == "":
        return "", pos

    key = _NAMED_KEYS.get(val, val[0])

    if control and meta:
        return ESC + encontrol(key), pos
    if control:
        key = encontrol(key)
    elif meta:
        key = enmeta(key)
    return key, pos


def decode_key(text):
    """Decode a named key such as 'Control-a' or 'Meta-Rubout'.

    Raises UnknownModifierError for an unknown modifier prefix.
    """
    key, _ = _decode_key(text, 0, len(text))
    return key


def expand_include_path(path):
    """Expand a leading '~/' in an $include path to the home directory."""
    if not path.startswith("~/"):
        return path
    try:
        home = str(Path.home())
    except (RuntimeError, KeyError, OSError):
        return path
    if not home:
        return path
    return os.path.normpath(os.path.join(home, path[2:]))


def _lines(stream):
    data = stream.read() if hasattr(stream, "read") else stream
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8", errors="replace")
    lines = data.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class Parser:
    """An inputrc parser passing binds, sets and constructs to a handler."""

    def __init__(self, *, halt_on_err=False, strict=False, name="", app="", term="", mode=""):
        self.halt_on_err = halt_on_err
        self.strict = strict
        self.name = name
        self.app = app
        self.term = term
        self.mode = mode
        self.keymap = EMACS
        self.line = 1
        self._conds = [True]
        self._errs = []

    def parse(self, stream, handler):
        """Parse inputrc data (text, bytes or a readable file) into handler.

        Errors are collected; with halt_on_err the first one is raised.
        """
        self.keymap, self.line, self._conds, self._errs = EMACS, 1, [True], []

        for self.line, text in enumerate(_lines(stream), start=1):
            end = len(text)
            pos = _find_non_space(text, 0, end)
            if pos == end or text[pos] in "\0\r\n#":
                continue
            try:
                self._next(handler, text, pos, end)
            except Exception as err:
                self._errs.append(err)
                if self.halt_on_err:
                    raise

    def errors(self):
        """Return the errors encountered by the last parse."""
        return list(self._errs)

    def _error(self, text, err):
        return ParseError(self.name, self.line, text, err)

    def _next(self, handler, seq, pos, end):
        directive, value, tok = self._read_next(seq, pos, end)
        if tok in (Token.BIND, Token.BIND_MACRO):
            self._do_bind(handler, directive, value, tok == Token.BIND_MACRO)
        elif tok == Token.SET:
            self._do_set(handler, directive, value)
        elif tok == Token.CONSTRUCT:
            self._do(handler, directive, value)

    def _read_next(self, seq, pos, end):
        pos = _find_non_space(seq, pos, end)

        if seq[pos] == "s" and _grab(seq, pos + 1, end) == "e" \
                and _grab(seq, pos + 2, end) == "t" and _is_space(_grab(seq, pos + 3, end)):
            return self._read_symbols(seq, pos + _SET_DIRECTIVE_LEN, end, Token.SET, True)
        if seq[pos] == "$":
            return self._read_symbols(seq, pos, end, Token.CONSTRUCT, False)

        if seq[pos] in "\"'":
            start = pos
            pos, ok = _find_string_end(seq, pos, end)
            if not ok:
                raise self._error(seq[start:], BindMissingClosingQuoteError())
            key_seq = _unescape_runes(seq, start + 1, pos - 1)
        else:
            try:
                key_seq, pos = _decode_key(seq, pos, end)
            except UnknownModifierError as err:
                raise self._error(seq, err) from err

        while pos < end and seq[pos] != ":":
            pos += 1
        if pos >= end or seq[pos] != ":":
            raise self._error(seq, MissingColonError())

        pos = _find_non_space(seq, pos + 1, end)
        if pos == end or seq[pos] == "#":
            return key_seq, "", Token.NONE

        if seq[pos] in "\"'":
            start = pos
            pos, ok = _find_string_end(seq, pos, end)
            if not ok:
                raise self._error(seq[start:], MacroMissingClosingQuoteError())
            return key_seq, _unescape_runes(seq, start + 1, pos - 1), Token.BIND_MACRO

        return key_seq, seq[pos:_find_end(seq, pos, end)], Token.BIND

    def _read_symbols(self, seq, pos, end, tok, allow_strings):
        start = _find_non_space(seq, pos, end)
        pos = _find_end(seq, start, end)
        name = seq[start:pos]
        start = _find_non_space(seq, pos, end)

        ok = False
        if allow_strings or _grab(seq, start, end) in "\"'":
            string_end, ok = _find_string_end(seq, start, end)
            if ok:
                pos = string_end
        if not allow_strings or not ok:
            pos = _find_end(seq, start, end)

        return name, seq[start:pos], tok

    def _do_bind(self, handler, sequence, action, macro):
        if self._conds[-1]:
            handler.bind(self.keymap, sequence, action, macro)

    def _do_set(self, handler, name, value):
        if not self._conds[-1]:
            return

        if name == "keymap":
            if self.strict and value not in _VALID_KEYMAPS:
                raise self._error(value, InvalidKeymapError())
            self.keymap = value
            return

        if name == "editing-mode":
            if value not in ("emacs", "vi"):
                raise self._error(value, InvalidEditingModeError())
            handler.set(name, value)
            return

        current = handler.get(name)
        if current is not None:
            if isinstance(current, bool):
                data = value.lower() == "on" or value == "1"
            elif isinstance(current, str):
                data = value
            elif isinstance(current, int):
                data = _atoi(value)
                if data is None:
                    raise ValueError(f"invalid integer {value!r} for {name}")
            else:
                raise TypeError(f"unsupported type {type(current).__name__}")
            handler.set(name, data)
            return

        number = _atoi(value)
        if number is not None:
            handler.set(name, number)
        elif value.lower() == "off":
            handler.set(name, False)
        elif value.lower() == "on":
            handler.set(name, True)
        else:
            handler.set(name, value)

    def _do(self, handler, keyword, value):
        if keyword == "$if":
            if value.startswith("mode="):
                result = value[len("mode="):] == self.mode
            elif value.startswith("term="):
                result = value[len("term="):] == self.term
            else:
                result = value.lower() == self.app
            self._conds.append(result)
            return

        if keyword == "$else":
            if len(self._conds) == 1:
                raise self._error("$else", ElseWithoutMatchingIfError())
            self._conds[-1] = not self._conds[-1]
            return

        if keyword == "$endif":
            if len(self._conds) == 1:
                raise self._error("$endif", EndifWithoutMatchingIfError())
            self._conds.pop()
            return

        if keyword == "$include":
            if not self._conds[-1]:
                return
            try:
                data = handler.read_file(expand_include_path(value))
            except FileNotFoundError:
                return
            included = Parser(name=value, app=self.app, term=self.term, mode=self.mode)
            included.parse(data, handler)
            return

        if not self._conds[-1]:
            return
        try:
            handler.do(keyword, value)
        except Exception as err:
            raise self._error(f"{keyword} {value}", err) from err


def parse(stream, handler, **kwargs):
    """Parse inputrc data into handler and return the errors encountered.

    Keyword arguments are the options of Parser.
    """
    parser = Parser(**kwargs)
    parser.parse(stream, handler)
    return parser.errors()