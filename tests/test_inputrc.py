import io
import os

import pytest

from lineedit.inputrc import (
    DELETE,
    ESC,
    NEWLINE,
    BindMissingClosingQuoteError,
    ElseWithoutMatchingIfError,
    EndifWithoutMatchingIfError,
    Handler,
    InvalidEditingModeError,
    InvalidKeymapError,
    MacroMissingClosingQuoteError,
    MissingColonError,
    ParseError,
    Parser,
    UnknownModifierError,
    decode_key,
    encontrol,
    enmeta,
    expand_include_path,
    parse,
    unescape,
)


class _Files(Handler):
    def __init__(self, files):
        super().__init__()
        self.files = files

    def read_file(self, path):
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None


class _Refusing(Handler):
    def do(self, keyword, value):
        raise ValueError("refused")


def test_encontrol_and_enmeta():
    assert encontrol("a") == "\x01"
    assert encontrol("a") == encontrol("A")
    assert ord(enmeta("a")) == ord("a") | 0x80


@pytest.mark.parametrize("text", ["\\n", "\\e", "\\d", "\\\\", '\\"'])
def test_unescape_simple_escapes_yield_one_char(text):
    assert len(unescape(text)) == 1


def test_unescape_values():
    assert unescape("\\e") == ESC
    assert unescape("\\d") == DELETE
    assert unescape("\\n") == NEWLINE
    assert unescape("\\C-x") == encontrol("x")
    assert unescape("\\M-x") == enmeta("x")
    assert unescape("\\C-\\M-x") == ESC + encontrol("x")
    assert unescape("\\M-\\C-x") == ESC + encontrol("x")
    assert unescape("\\C-?") == DELETE
    assert unescape("\\101") == "A"
    assert unescape("plain") == "plain"


def test_decode_key():
    assert decode_key("Control-a") == encontrol("a")
    assert decode_key("C-a") == encontrol("a")
    assert decode_key("Meta-x") == enmeta("x")
    assert decode_key("Meta-Control-x") == ESC + encontrol("x")
    assert decode_key("Escape") == ESC
    assert decode_key("Rubout") == DELETE


def test_decode_key_unknown_modifier():
    with pytest.raises(UnknownModifierError):
        decode_key("Foo-x")


def test_parse_error_message():
    err = ParseError("f", 3, "x", MissingColonError())
    assert str(err) == "inputrc: f: line 3: x: missing colon"
    unnamed = ParseError("", 3, "x", MissingColonError())
    assert str(unnamed) == "inputrc: line 3: x: missing colon"


def test_bind_and_macro():
    handler = Handler()
    errors = parse('"\\C-a": beginning-of-line\n"\\C-b": "hello"\n', handler)
    assert errors == []
    binds = handler.binds["emacs"]
    assert binds[encontrol("a")] == ("beginning-of-line", False)
    assert binds[encontrol("b")] == ("hello", True)


def test_named_key_bind():
    handler = Handler()
    parse("Control-u: unix-line-discard\n", handler)
    assert handler.binds["emacs"][encontrol("u")] == ("unix-line-discard", False)


def test_comments_and_blank_lines_are_ignored():
    handler = Handler()
    errors = parse("# a comment\n\n   \n  # another\n", handler)
    assert errors == []
    assert handler.binds == {}
    assert handler.vars == {}


def test_set_converts_values():
    handler = Handler()
    parse(
        "set completion-ignore-case on\n"
        "set show-all off\n"
        "set history-size 100\n"
        "set bell-style audible\n",
        handler,
    )
    assert handler.vars["completion-ignore-case"] is True
    assert handler.vars["show-all"] is False
    assert handler.vars["history-size"] == 100
    assert handler.vars["bell-style"] == "audible"


def test_set_follows_known_variable_types():
    handler = Handler({"mark-directories": False, "history-size": 10, "bell-style": "none"})
    parse("set mark-directories On\nset history-size 250\nset bell-style 500\n", handler)
    assert handler.vars["mark-directories"] is True
    assert handler.vars["history-size"] == 250
    assert handler.vars["bell-style"] == "500"


def test_set_invalid_integer_is_recorded():
    handler = Handler({"history-size": 10})
    errors = parse("set history-size abc\n", handler)
    assert len(errors) == 1
    assert isinstance(errors[0], ValueError)
    assert handler.vars["history-size"] == 10


def test_keymap_switch():
    handler = Handler()
    parse("set keymap vi-insert\n\"\\C-a\": beginning-of-line\n", handler)
    assert "emacs" not in handler.binds
    assert handler.binds["vi-insert"][encontrol("a")] == ("beginning-of-line", False)


def test_strict_keymap_rejects_unknown():
    parser = Parser(strict=True)
    parser.parse("set keymap foo\n", Handler())
    errors = parser.errors()
    assert len(errors) == 1
    assert isinstance(errors[0].err, InvalidKeymapError)
    assert errors[0].text == "foo"


def test_invalid_editing_mode():
    handler = Handler()
    errors = parse("set editing-mode ed\n", handler)
    assert isinstance(errors[0].err, InvalidEditingModeError)
    assert "editing-mode" not in handler.vars

    parse("set editing-mode vi\n", handler)
    assert handler.vars["editing-mode"] == "vi"


def test_halt_on_error_raises():
    parser = Parser(halt_on_err=True)
    with pytest.raises(ParseError) as info:
        parser.parse("set editing-mode ed\nset a-var on\n", Handler())
    assert isinstance(info.value.err, InvalidEditingModeError)
    assert info.value.line == 1


def test_errors_carry_line_numbers():
    errors = parse("# first\n\n\"\\C-a\" beginning\n", Handler())
    assert len(errors) == 1
    assert isinstance(errors[0].err, MissingColonError)
    assert errors[0].line == 3


@pytest.mark.parametrize(
    "text, error",
    [
        ('"abc\n', BindMissingClosingQuoteError),
        ('"a": "hello\n', MacroMissingClosingQuoteError),
        ("$else\n", ElseWithoutMatchingIfError),
        ("$endif\n", EndifWithoutMatchingIfError),
        ("Foo-x: abort\n", UnknownModifierError),
    ],
)
def test_statement_errors(text, error):
    errors = parse(text, Handler())
    assert len(errors) == 1
    assert isinstance(errors[0], ParseError)
    assert isinstance(errors[0].err, error)


def test_conditional_mode():
    source = (
        "$if mode=vi\n"
        '"\\C-a": vi-action\n'
        "$else\n"
        '"\\C-a": emacs-action\n'
        "$endif\n"
    )
    vi = Handler()
    assert parse(source, vi, mode="vi") == []
    assert vi.binds["emacs"][encontrol("a")] == ("vi-action", False)

    emacs = Handler()
    parse(source, emacs, mode="emacs")
    assert emacs.binds["emacs"][encontrol("a")] == ("emacs-action", False)


def test_conditional_term_and_app():
    source = "$if term=xterm\nset in-term on\n$endif\n$if Bash\nset in-app on\n$endif\n"
    matching = Handler()
    parse(source, matching, term="xterm", app="bash")
    assert matching.vars == {"in-term": True, "in-app": True}

    other = Handler()
    parse(source, other, term="linux", app="python")
    assert other.vars == {}


def test_include_reads_file():
    handler = _Files({"/etc/extra": b'"\\C-k": kill-line\n'})
    errors = parse("$include /etc/extra\n", handler)
    assert errors == []
    assert handler.binds["emacs"][encontrol("k")] == ("kill-line", False)


def test_include_missing_file_is_ignored():
    handler = _Files({})
    assert parse("$include /does/not/exist\n", handler) == []
    assert handler.binds == {}


def test_include_from_disk(tmp_path):
    extra = tmp_path / "extra.rc"
    extra.write_text("set from-include on\n")
    handler = Handler()
    parse(f"$include {extra}\n", handler)
    assert handler.vars["from-include"] is True


def test_include_skipped_in_false_branch():
    handler = _Files({"/etc/extra": b"set included on\n"})
    parse("$if mode=vi\n$include /etc/extra\n$endif\n", handler, mode="emacs")
    assert handler.vars == {}


def test_unknown_construct_goes_to_handler():
    handler = Handler()
    parse("$custom value\n", handler)
    assert handler.constructs == [("$custom", "value")]


def test_unknown_construct_error_is_wrapped():
    errors = parse("$custom value\n", _Refusing())
    assert len(errors) == 1
    assert errors[0].text == "$custom value"
    assert str(errors[0].err) == "refused"


def test_parse_accepts_bytes_and_files():
    from_bytes = Handler()
    parse(b"set some-var on\r\n", from_bytes)
    from_file = Handler()
    parse(io.StringIO("set some-var on\n"), from_file)
    assert from_bytes.vars == from_file.vars == {"some-var": True}


def test_parser_resets_between_runs():
    parser = Parser()
    parser.parse("$else\n", Handler())
    assert len(parser.errors()) == 1
    handler = Handler()
    parser.parse("set keymap vi\n", handler)
    assert parser.errors() == []
    parser.parse('"\\C-a": abort\n', handler)
    assert handler.binds["emacs"][encontrol("a")] == ("abort", False)


def test_expand_include_path(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert expand_include_path("/etc/inputrc") == "/etc/inputrc"
    assert expand_include_path("~/foo") == os.path.join(str(tmp_path), "foo")
    assert expand_include_path("~other/foo") == "~other/foo"